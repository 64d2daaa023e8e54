"""Shape generator: shape identifier plus bounding box to a closed polygon."""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Tuple

from .types import Bounds, Polygon, Vertex

logger = logging.getLogger(__name__)

_STAR_INNER_RATIO = 0.4
_CIRCLE_POINTS = 32
_WAVE_POINTS_PER_EDGE = 13
_WAVE_PERIODS = 2
_WAVE_AMPLITUDE = 0.15

CANONICAL_VERTEX_COUNTS: Dict[str, int] = {
    "rectangle": 4,
    "parallelogram": 4,
    "trapezoid": 4,
    "triangle": 3,
    "pentagon": 5,
    "hexagon": 6,
    "octagon": 8,
    "circle": _CIRCLE_POINTS,
    "arc": 42,
    "diamond": 4,
    "l-shape": 6,
    "u-shape": 8,
    "t-shape": 8,
    "z-shape": 8,
    "cross": 12,
    "arrow": 7,
    "star": 10,
    "wave": 2 * _WAVE_POINTS_PER_EDGE,
}

SHAPE_IDS: Tuple[str, ...] = tuple(CANONICAL_VERTEX_COUNTS)


def is_known_shape(shape: object) -> bool:
    return isinstance(shape, str) and shape in CANONICAL_VERTEX_COUNTS


def canonical_vertex_count(shape: str) -> int:
    """Vertex count of a freshly generated, flat polygon for ``shape``."""

    return CANONICAL_VERTEX_COUNTS.get(shape, CANONICAL_VERTEX_COUNTS["rectangle"])


def _fractional(bounds: Bounds, fractions: List[Tuple[float, float]]) -> Polygon:
    x, y, w, h = bounds
    return [Vertex(x + fx * w, y + fy * h) for fx, fy in fractions]


def _ellipse_points(bounds: Bounds, count: int, radius_scale: float = 1.0) -> Polygon:
    cx = bounds.x + bounds.width / 2.0
    cy = bounds.y + bounds.height / 2.0
    rx = bounds.width / 2.0 * radius_scale
    ry = bounds.height / 2.0 * radius_scale
    points: Polygon = []
    for i in range(count):
        angle = i * (2.0 * math.pi / count) - math.pi / 2.0
        points.append(Vertex(cx + rx * math.cos(angle), cy + ry * math.sin(angle)))
    return points


def _rectangle(bounds: Bounds) -> Polygon:
    return _fractional(bounds, [(0, 0), (1, 0), (1, 1), (0, 1)])


def _parallelogram(bounds: Bounds) -> Polygon:
    return _fractional(bounds, [(0.2, 0), (1, 0), (0.8, 1), (0, 1)])


def _trapezoid(bounds: Bounds) -> Polygon:
    return _fractional(bounds, [(0.2, 0), (0.8, 0), (1, 1), (0, 1)])


def _triangle(bounds: Bounds) -> Polygon:
    # corner wedge: right angle bottom-left, hypotenuse through the box centre
    return _fractional(bounds, [(0, 0), (1, 1), (0, 1)])


def _diamond(bounds: Bounds) -> Polygon:
    return _fractional(bounds, [(0.5, 0), (1, 0.5), (0.5, 1), (0, 0.5)])


def _l_shape(bounds: Bounds) -> Polygon:
    return _fractional(bounds, [(0, 0), (0.4, 0), (0.4, 0.6), (1, 0.6), (1, 1), (0, 1)])


def _u_shape(bounds: Bounds) -> Polygon:
    return _fractional(
        bounds,
        [(0, 0), (0.3, 0), (0.3, 0.6), (0.7, 0.6), (0.7, 0), (1, 0), (1, 1), (0, 1)],
    )


def _t_shape(bounds: Bounds) -> Polygon:
    return _fractional(
        bounds,
        [(0, 0), (1, 0), (1, 0.35), (0.65, 0.35), (0.65, 1), (0.35, 1), (0.35, 0.35), (0, 0.35)],
    )


def _z_shape(bounds: Bounds) -> Polygon:
    return _fractional(
        bounds,
        [(0, 0), (0.7, 0), (0.7, 0.65), (1, 0.65), (1, 1), (0.3, 1), (0.3, 0.35), (0, 0.35)],
    )


def _cross(bounds: Bounds) -> Polygon:
    return _fractional(
        bounds,
        [
            (0.35, 0),
            (0.65, 0),
            (0.65, 0.35),
            (1, 0.35),
            (1, 0.65),
            (0.65, 0.65),
            (0.65, 1),
            (0.35, 1),
            (0.35, 0.65),
            (0, 0.65),
            (0, 0.35),
            (0.35, 0.35),
        ],
    )


def _arrow(bounds: Bounds) -> Polygon:
    return _fractional(
        bounds,
        [(0, 0.3), (0.6, 0.3), (0.6, 0), (1, 0.5), (0.6, 1), (0.6, 0.7), (0, 0.7)],
    )


def _star(bounds: Bounds) -> Polygon:
    outer = _ellipse_points(bounds, 10)
    inner = _ellipse_points(bounds, 10, _STAR_INNER_RATIO)
    return [outer[i] if i % 2 == 0 else inner[i] for i in range(10)]


def _wave(bounds: Bounds) -> Polygon:
    x, y, w, h = bounds
    amplitude = h * _WAVE_AMPLITUDE
    last = _WAVE_POINTS_PER_EDGE - 1
    top: Polygon = []
    bottom: Polygon = []
    for i in range(_WAVE_POINTS_PER_EDGE):
        t = i / last
        ripple = math.sin(2.0 * math.pi * _WAVE_PERIODS * t)
        top.append(Vertex(x + t * w, y + amplitude * (1.0 + ripple)))
        bottom.append(Vertex(x + t * w, y + h - amplitude * (1.0 - ripple)))
    return top + bottom[::-1]


def _arc(bounds: Bounds) -> Polygon:
    from .curvature import ArcBand, curvature_regime

    return ArcBand.from_bounds(bounds, curvature_regime("arc", 0)).vertices()


_GENERATORS: Dict[str, Callable[[Bounds], Polygon]] = {
    "rectangle": _rectangle,
    "parallelogram": _parallelogram,
    "trapezoid": _trapezoid,
    "triangle": _triangle,
    "pentagon": lambda b: _ellipse_points(b, 5),
    "hexagon": lambda b: _ellipse_points(b, 6),
    "octagon": lambda b: _ellipse_points(b, 8),
    "circle": lambda b: _ellipse_points(b, _CIRCLE_POINTS),
    "arc": _arc,
    "diamond": _diamond,
    "l-shape": _l_shape,
    "u-shape": _u_shape,
    "t-shape": _t_shape,
    "z-shape": _z_shape,
    "cross": _cross,
    "arrow": _arrow,
    "star": _star,
    "wave": _wave,
}


def shape_to_polygon(shape: str, bounds: Bounds) -> Polygon:
    """Return the closed polygon for ``shape`` inscribed in ``bounds``.

    Unknown shape identifiers fall back to a rectangle.
    """

    bounds = Bounds(*(float(v) for v in bounds))
    generator = _GENERATORS.get(shape)
    if generator is None:
        logger.debug("Unknown shape %r, falling back to rectangle", shape)
        generator = _rectangle
    return generator(bounds)


__all__ = [
    "CANONICAL_VERTEX_COUNTS",
    "SHAPE_IDS",
    "canonical_vertex_count",
    "is_known_shape",
    "shape_to_polygon",
]
