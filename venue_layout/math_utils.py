from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .types import Bounds, PointLike, Vertex

_DENOM_EPS = 1e-12


def point_in_polygon(point: PointLike, vertices: Sequence[PointLike]) -> bool:
    """Even-odd ray casting test; winding order does not matter."""

    n = len(vertices)
    if n < 3:
        return False
    px, py = float(point[0]), float(point[1])
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def points_in_polygon(points: np.ndarray, vertices: Sequence[PointLike]) -> np.ndarray:
    """Vectorised :func:`point_in_polygon` over an ``(N, 2)`` array."""

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    inside = np.zeros(len(pts), dtype=bool)
    n = len(vertices)
    if n < 3 or len(pts) == 0:
        return inside
    px = pts[:, 0]
    py = pts[:, 1]
    j = n - 1
    for i in range(n):
        xi, yi = float(vertices[i][0]), float(vertices[i][1])
        xj, yj = float(vertices[j][0]), float(vertices[j][1])
        straddles = (yi > py) != (yj > py)
        if yj != yi:
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            inside ^= straddles & (px < x_cross)
        j = i
    return inside


def bounds_from_vertices(vertices: Iterable[PointLike]) -> Bounds:
    pts = list(vertices)
    if not pts:
        return Bounds(0.0, 0.0, 0.0, 0.0)
    xs = [float(p[0]) for p in pts]
    ys = [float(p[1]) for p in pts]
    min_x, min_y = min(xs), min(ys)
    return Bounds(min_x, min_y, max(xs) - min_x, max(ys) - min_y)


def bounds_center(bounds: Bounds) -> Vertex:
    return Vertex(bounds.x + bounds.width / 2.0, bounds.y + bounds.height / 2.0)


def polygon_center(vertices: Sequence[PointLike]) -> Vertex:
    """Centre of the polygon's bounding box, the pivot used for rotation."""

    return bounds_center(bounds_from_vertices(vertices))


def rotate_point(point: PointLike, center: PointLike, degrees: float) -> Vertex:
    """Rotate ``point`` about ``center`` by ``degrees`` (screen coordinates, y down)."""

    if not degrees:
        return Vertex(float(point[0]), float(point[1]))
    rad = math.radians(degrees)
    cos_t = math.cos(rad)
    sin_t = math.sin(rad)
    dx = point[0] - center[0]
    dy = point[1] - center[1]
    return Vertex(
        center[0] + dx * cos_t - dy * sin_t,
        center[1] + dx * sin_t + dy * cos_t,
    )


def rotate_points(points: np.ndarray, center: PointLike, degrees: float) -> np.ndarray:
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if not degrees:
        return pts.copy()
    rad = math.radians(degrees)
    cos_t = math.cos(rad)
    sin_t = math.sin(rad)
    rel = pts - np.array([center[0], center[1]], dtype=float)
    matrix = np.array([[cos_t, -sin_t], [sin_t, cos_t]], dtype=float)
    return rel @ matrix.T + np.array([center[0], center[1]], dtype=float)


def project_point_to_segment(
    point: PointLike, a: PointLike, b: PointLike
) -> Tuple[Vertex, float, float]:
    """Return the closest point on segment ``a-b``, its clamped parameter and distance."""

    ax, ay = float(a[0]), float(a[1])
    dx = float(b[0]) - ax
    dy = float(b[1]) - ay
    denom = dx * dx + dy * dy
    if denom <= _DENOM_EPS:
        t = 0.0
    else:
        t = ((point[0] - ax) * dx + (point[1] - ay) * dy) / denom
        t = min(max(t, 0.0), 1.0)
    foot = Vertex(ax + t * dx, ay + t * dy)
    return foot, t, math.hypot(point[0] - foot.x, point[1] - foot.y)


def translate_vertices(vertices: Sequence[PointLike], dx: float, dy: float) -> List[Vertex]:
    return [Vertex(v[0] + dx, v[1] + dy) for v in vertices]


def scale_vertices(
    vertices: Sequence[PointLike],
    center: PointLike,
    sx: float,
    sy: float,
    new_center: PointLike,
) -> List[Vertex]:
    """Scale about ``center`` and re-anchor the result on ``new_center``."""

    if not vertices:
        return []
    pts = np.asarray(vertices, dtype=float).reshape(-1, 2)
    rel = pts - np.array([center[0], center[1]], dtype=float)
    scaled = rel * np.array([sx, sy], dtype=float) + np.array([new_center[0], new_center[1]], dtype=float)
    return [Vertex(float(x), float(y)) for x, y in scaled]


def as_vertices(points: np.ndarray) -> List[Vertex]:
    return [Vertex(float(x), float(y)) for x, y in np.asarray(points, dtype=float).reshape(-1, 2)]


__all__ = [
    "as_vertices",
    "bounds_center",
    "bounds_from_vertices",
    "point_in_polygon",
    "points_in_polygon",
    "polygon_center",
    "project_point_to_segment",
    "rotate_point",
    "rotate_points",
    "scale_vertices",
    "translate_vertices",
]
