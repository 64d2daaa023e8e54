"""Polygon reshaping and re-projection of existing seats onto a changed polygon."""

from __future__ import annotations

import copy
import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .config import get_layout_config
from .curvature import apply_curvature, standard_vertex_count
from .logging_utils import apply_debug_logging
from .math_utils import bounds_center, bounds_from_vertices, point_in_polygon, scale_vertices, translate_vertices
from .model import EditResult, Seat, Sector, generate_id
from .types import Bounds, PointLike, Vertex, as_vertex

logger = logging.getLogger(__name__)

MIN_VERTICES = 3


def seat_extent(seat: Seat, item_size: float) -> Tuple[float, float]:
    """Width and height of a seat's box; tables use their own footprint."""

    if seat.table_config is not None and seat.furniture_type in ("table", "bistro"):
        return seat.table_config.table_width, seat.table_config.table_height
    return item_size, item_size


def seat_center(seat: Seat, item_size: float) -> Vertex:
    width, height = seat_extent(seat, item_size)
    return Vertex(seat.x + width / 2.0, seat.y + height / 2.0)


def _fraction(value: float, origin: float, span: float) -> float:
    if span <= 0.0:
        return 0.5
    return (value - origin) / span


def reposition_seats(
    seats: Sequence[Seat],
    old_polygon: Sequence[PointLike],
    new_polygon: Sequence[PointLike],
    sector_id: str,
    item_size: float,
) -> List[Seat]:
    """Map ``sector_id``'s seats from the old polygon's box onto the new one.

    Seat centres keep their fractional position inside the bounding box;
    seats whose new centre falls outside ``new_polygon`` are dropped. Only
    ``x``/``y`` change on survivors. Seats of other sectors pass through.
    """

    old_bounds = bounds_from_vertices(old_polygon)
    new_bounds = bounds_from_vertices(new_polygon)
    result: List[Seat] = []
    dropped = 0
    for seat in seats:
        if seat.sector_id != sector_id:
            result.append(seat)
            continue
        width, height = seat_extent(seat, item_size)
        cx = seat.x + width / 2.0
        cy = seat.y + height / 2.0
        fx = _fraction(cx, old_bounds.x, old_bounds.width)
        fy = _fraction(cy, old_bounds.y, old_bounds.height)
        new_x = new_bounds.x + fx * new_bounds.width - width / 2.0
        new_y = new_bounds.y + fy * new_bounds.height - height / 2.0
        if not point_in_polygon((new_x + width / 2.0, new_y + height / 2.0), new_polygon):
            dropped += 1
            continue
        result.append(replace(seat, x=new_x, y=new_y))
    if dropped:
        logger.debug("reposition_seats: dropped %d seat(s) of sector %s", dropped, sector_id)
    return result


def dimension_error(bounds: Bounds) -> Optional[str]:
    config = get_layout_config()
    if bounds.width < config.min_sector_dimension or bounds.height < config.min_sector_dimension:
        return f"sector must be at least {config.min_sector_dimension:g} units wide and tall"
    if bounds.width > config.max_sector_dimension or bounds.height > config.max_sector_dimension:
        return f"sector must be at most {config.max_sector_dimension:g} units wide and tall"
    return None


def is_standard_polygon(vertices: Sequence[PointLike], shape: str, curvature: int) -> bool:
    return len(vertices) == standard_vertex_count(shape, curvature)


def resize_polygon(
    vertices: Sequence[PointLike], shape: str, curvature: int, new_bounds: Bounds
) -> EditResult:
    """Fit the polygon into ``new_bounds``.

    Unedited polygons are regenerated from the shape; customised ones (vertex
    count differs from the standard count) are scaled about the box centre.
    Seats are not touched here.
    """

    new_bounds = Bounds(*(float(v) for v in new_bounds))
    current = [as_vertex(v) for v in vertices]
    error = dimension_error(new_bounds)
    if error:
        logger.info("Resize rejected: %s", error)
        return EditResult.rejected(error, current)
    if len(current) < MIN_VERTICES or is_standard_polygon(current, shape, curvature):
        return EditResult.accepted(apply_curvature(shape, new_bounds, curvature))

    old_bounds = bounds_from_vertices(current)
    sx = new_bounds.width / old_bounds.width if old_bounds.width > 0 else 1.0
    sy = new_bounds.height / old_bounds.height if old_bounds.height > 0 else 1.0
    scaled = scale_vertices(current, bounds_center(old_bounds), sx, sy, bounds_center(new_bounds))
    return EditResult.accepted(scaled)


def insert_vertex(vertices: Sequence[PointLike], edge_index: int, point: PointLike) -> EditResult:
    """Insert ``point`` after ``edge_index`` (between vertex i and i + 1)."""

    current = [as_vertex(v) for v in vertices]
    if not 0 <= edge_index < len(current):
        return EditResult.rejected(f"edge {edge_index} does not exist", current)
    updated = current[: edge_index + 1] + [as_vertex(point)] + current[edge_index + 1 :]
    return EditResult.accepted(updated)


def remove_vertex(vertices: Sequence[PointLike], index: int) -> EditResult:
    current = [as_vertex(v) for v in vertices]
    if len(current) <= MIN_VERTICES:
        logger.info("Vertex removal rejected: polygon has %d vertices", len(current))
        return EditResult.rejected(f"a sector needs at least {MIN_VERTICES} vertices", current)
    if not 0 <= index < len(current):
        return EditResult.rejected(f"vertex {index} does not exist", current)
    return EditResult.accepted(current[:index] + current[index + 1 :])


def move_vertex(vertices: Sequence[PointLike], index: int, point: PointLike) -> EditResult:
    current = [as_vertex(v) for v in vertices]
    if not 0 <= index < len(current):
        return EditResult.rejected(f"vertex {index} does not exist", current)
    current[index] = as_vertex(point)
    return EditResult.accepted(current)


def translate_sector(sector: Sector, dx: float, dy: float) -> Sector:
    """Return a copy of ``sector`` with its polygon and seats moved by ``(dx, dy)``."""

    frame = sector.frame
    if frame is not None:
        frame = Bounds(frame.x + dx, frame.y + dy, frame.width, frame.height)
    return replace(
        sector,
        vertices=translate_vertices(sector.vertices, dx, dy),
        seats=[replace(seat, x=seat.x + dx, y=seat.y + dy) for seat in sector.seats],
        frame=frame,
    )


def duplicate_sector(sector: Sector, offset: Optional[float] = None) -> Sector:
    """Copy ``sector`` with fresh ids, shifted diagonally by ``offset``."""

    if offset is None:
        offset = get_layout_config().duplicate_offset
    new_id = generate_id()
    moved = translate_sector(sector, offset, offset)
    return replace(
        moved,
        id=new_id,
        name=f"{sector.name} (copy)",
        seats=[replace(seat, id=generate_id(), sector_id=new_id) for seat in moved.seats],
        layout_params=replace(copy.deepcopy(sector.layout_params), sector_id=new_id)
        if sector.layout_params is not None
        else None,
    )


__all__ = [
    "MIN_VERTICES",
    "dimension_error",
    "duplicate_sector",
    "insert_vertex",
    "is_standard_polygon",
    "move_vertex",
    "remove_vertex",
    "reposition_seats",
    "resize_polygon",
    "seat_center",
    "seat_extent",
    "translate_sector",
]


apply_debug_logging(globals(), logger=logger)
