"""Curvature transformer: bend a sector polygon towards a radial arc.

The 0-100 curvature knob is dispatched into four discrete regimes rather than
one blended formula so that each regime can be generated and checked on its
own:

* ``flat`` (curvature 0): the shape generator output, unchanged.
* ``edge-bend`` (1-39): every edge is subdivided into four sub-points which
  are pushed downwards with a parabolic falloff from the vertical centre line,
  strongest along the top edge.
* ``transitional-arc`` (40-79): a band between two concentric arcs with a
  moderate angular spread and a thick band.
* ``full-arc`` (80-100, and always for the ``arc`` shape): the same band with
  a wide spread and a hollow centre.

The regime boundaries are visible steps in the generated geometry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Union

from .config import get_layout_config
from .shapes import canonical_vertex_count, shape_to_polygon
from .types import Bounds, PointLike, Polygon, Vertex

MAX_CURVATURE = 100
EDGE_BEND_LIMIT = 40
FULL_ARC_THRESHOLD = 80

EDGE_SUBDIVISIONS = 4
_EDGE_BEND_DEPTH = 0.5

FULL_ARC_INNER_RATIO = 0.35
TRANSITIONAL_INNER_RATIO = 0.55
_BASE_SPREAD = 90.0
_TRANSITIONAL_MAX_SPREAD = 170.0


def clamp_curvature(value: object) -> int:
    try:
        number = int(round(float(value)))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    return min(max(number, 0), MAX_CURVATURE)


@dataclass(frozen=True)
class FlatRegime:
    curvature: int = 0
    kind: str = "flat"


@dataclass(frozen=True)
class EdgeBendRegime:
    curvature: int
    kind: str = "edge-bend"

    @property
    def amount(self) -> float:
        return self.curvature / MAX_CURVATURE


@dataclass(frozen=True)
class TransitionalArcRegime:
    curvature: int
    spread: float
    inner_ratio: float
    kind: str = "transitional-arc"


@dataclass(frozen=True)
class FullArcRegime:
    curvature: int
    spread: float
    inner_ratio: float = FULL_ARC_INNER_RATIO
    kind: str = "full-arc"


ArcRegime = Union[TransitionalArcRegime, FullArcRegime]
CurvatureRegime = Union[FlatRegime, EdgeBendRegime, TransitionalArcRegime, FullArcRegime]


def curvature_regime(shape: str, curvature: object) -> CurvatureRegime:
    """Return the parameter set for ``shape`` at ``curvature``."""

    c = clamp_curvature(curvature)
    if shape == "arc" or c >= FULL_ARC_THRESHOLD:
        return FullArcRegime(curvature=c, spread=_BASE_SPREAD + 0.9 * c)
    if c == 0:
        return FlatRegime()
    if c >= EDGE_BEND_LIMIT:
        t = (c - EDGE_BEND_LIMIT) / (FULL_ARC_THRESHOLD - EDGE_BEND_LIMIT)
        return TransitionalArcRegime(
            curvature=c,
            spread=_BASE_SPREAD + t * (_TRANSITIONAL_MAX_SPREAD - _BASE_SPREAD),
            inner_ratio=TRANSITIONAL_INNER_RATIO - t * (TRANSITIONAL_INNER_RATIO - FULL_ARC_INNER_RATIO),
        )
    return EdgeBendRegime(curvature=c)


def is_arc_regime(regime: CurvatureRegime) -> bool:
    return isinstance(regime, (TransitionalArcRegime, FullArcRegime))


@dataclass(frozen=True)
class ArcBand:
    """Band between two concentric circular arcs centred on the vertical axis."""

    center_x: float
    center_y: float
    outer_radius: float
    inner_radius: float
    spread: float
    segments: int = 20

    @property
    def half_angle(self) -> float:
        return math.radians(self.spread) / 2.0

    @property
    def start_angle(self) -> float:
        # -pi/2 points up in screen coordinates
        return -math.pi / 2.0 - self.half_angle

    @classmethod
    def from_bounds(cls, bounds: Bounds, regime: ArcRegime, segments: int = 0) -> "ArcBand":
        """Band for a sector drawn into ``bounds``; outer arc touches the top edge."""

        segments = segments or get_layout_config().arc_segments
        outer = max(bounds.width, bounds.height) / 2.0
        return cls(
            center_x=bounds.x + bounds.width / 2.0,
            center_y=bounds.y + outer,
            outer_radius=outer,
            inner_radius=outer * regime.inner_ratio,
            spread=regime.spread,
            segments=segments,
        )

    @classmethod
    def fit_polygon_bounds(cls, bounds: Bounds, regime: ArcRegime, segments: int = 0) -> "ArcBand":
        """Recover the band whose generated polygon has ``bounds``."""

        segments = segments or get_layout_config().arc_segments
        half = math.radians(regime.spread) / 2.0
        chord = math.sin(half)
        if chord <= 1e-9 or bounds.width <= 0.0:
            return cls.from_bounds(bounds, regime, segments)
        outer = bounds.width / (2.0 * chord)
        return cls(
            center_x=bounds.x + bounds.width / 2.0,
            center_y=bounds.y + outer,
            outer_radius=outer,
            inner_radius=outer * regime.inner_ratio,
            spread=regime.spread,
            segments=segments,
        )

    def point_at(self, radius: float, angle: float) -> Vertex:
        return Vertex(self.center_x + radius * math.cos(angle), self.center_y + radius * math.sin(angle))

    def _arc(self, radius: float) -> Polygon:
        step = 2.0 * self.half_angle / self.segments
        return [self.point_at(radius, self.start_angle + i * step) for i in range(self.segments + 1)]

    def vertices(self) -> Polygon:
        return self._arc(self.outer_radius) + self._arc(self.inner_radius)[::-1]


@dataclass(frozen=True)
class EdgeBend:
    """Vertical displacement field used by the low-curvature regime."""

    center_x: float
    half_width: float
    top: float
    height: float
    amount: float

    @classmethod
    def from_bounds(cls, bounds: Bounds, curvature: int) -> "EdgeBend":
        return cls(
            center_x=bounds.x + bounds.width / 2.0,
            half_width=bounds.width / 2.0,
            top=bounds.y,
            height=bounds.height,
            amount=clamp_curvature(curvature) / MAX_CURVATURE,
        )

    def _normalized(self, x: float, y: float):
        xn = (x - self.center_x) / self.half_width
        yn = (y - self.top) / self.height
        return min(max(xn, -1.0), 1.0), min(max(yn, 0.0), 1.0)

    def _weight(self, yn: float) -> float:
        return 0.5 + 0.5 * (1.0 - yn)

    def offset_at(self, x: float, y: float) -> float:
        if self.half_width <= 0.0 or self.height <= 0.0:
            return 0.0
        xn, yn = self._normalized(x, y)
        return self.amount * _EDGE_BEND_DEPTH * self.height * (1.0 - xn * xn) * self._weight(yn)

    def slope_at(self, x: float, y: float) -> float:
        """d(offset)/dx at ``(x, y)``."""

        if self.half_width <= 0.0 or self.height <= 0.0:
            return 0.0
        xn, yn = self._normalized(x, y)
        if abs(xn) >= 1.0:
            return 0.0
        return self.amount * _EDGE_BEND_DEPTH * self.height * (-2.0 * xn / self.half_width) * self._weight(yn)

    def displace(self, point: PointLike) -> Vertex:
        return Vertex(point[0], point[1] + self.offset_at(point[0], point[1]))

    def deform(self, vertices: Sequence[PointLike]) -> Polygon:
        n = len(vertices)
        result: List[Vertex] = []
        for i in range(n):
            ax, ay = vertices[i]
            bx, by = vertices[(i + 1) % n]
            for k in range(EDGE_SUBDIVISIONS):
                t = k / EDGE_SUBDIVISIONS
                result.append(self.displace((ax + t * (bx - ax), ay + t * (by - ay))))
        return result


def apply_curvature(shape: str, bounds: Bounds, curvature: object) -> Polygon:
    """Regenerate the polygon for ``shape`` in ``bounds`` at ``curvature``."""

    bounds = Bounds(*(float(v) for v in bounds))
    regime = curvature_regime(shape, curvature)
    if isinstance(regime, FlatRegime):
        return shape_to_polygon(shape, bounds)
    if isinstance(regime, EdgeBendRegime):
        return EdgeBend.from_bounds(bounds, regime.curvature).deform(shape_to_polygon(shape, bounds))
    return ArcBand.from_bounds(bounds, regime).vertices()


def standard_vertex_count(shape: str, curvature: object) -> int:
    """Vertex count of an unedited polygon generated for ``shape`` at ``curvature``."""

    regime = curvature_regime(shape, curvature)
    if isinstance(regime, FlatRegime):
        return canonical_vertex_count(shape)
    if isinstance(regime, EdgeBendRegime):
        return canonical_vertex_count(shape) * EDGE_SUBDIVISIONS
    return 2 * (get_layout_config().arc_segments + 1)


__all__ = [
    "ArcBand",
    "ArcRegime",
    "CurvatureRegime",
    "EdgeBend",
    "EdgeBendRegime",
    "FlatRegime",
    "FullArcRegime",
    "TransitionalArcRegime",
    "apply_curvature",
    "clamp_curvature",
    "curvature_regime",
    "is_arc_regime",
    "standard_vertex_count",
    "EDGE_BEND_LIMIT",
    "EDGE_SUBDIVISIONS",
    "FULL_ARC_THRESHOLD",
    "MAX_CURVATURE",
]
