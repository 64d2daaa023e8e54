"""Seat layout generator: pack labeled seats into a sector polygon."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import get_layout_config
from .curvature import ArcBand, EdgeBend, EdgeBendRegime, curvature_regime, is_arc_regime
from .labels import resolve_row_config, row_label, seat_label
from .logging_utils import apply_debug_logging
from .math_utils import bounds_center, bounds_from_vertices, points_in_polygon, rotate_points
from .model import GridGeneratorParams, Seat, TableConfig, generate_id
from .types import Bounds, PointLike, is_furniture_table

logger = logging.getLogger(__name__)

_RADIAL_MARGIN = 0.75


@dataclass(frozen=True)
class SeatCandidate:
    """A seat slot before admission; ``x``/``y`` is the top-left of its box."""

    row_index: int
    col_index: int
    row_total: int
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)


@dataclass
class LayoutPlan:
    """Candidates for one generation call.

    ``mode`` is one of ``grid``, ``curved-grid``, ``radial`` or ``scan``. Scan
    plans number rows after admission so that empty bands consume no label.
    """

    mode: str
    candidates: List[SeatCandidate] = field(default_factory=list)
    requested: int = 0


@dataclass
class LayoutReport:
    seats: List[Seat]
    requested: int
    mode: str

    @property
    def placed(self) -> int:
        return len(self.seats)

    @property
    def shortfall(self) -> int:
        return max(self.requested - self.placed, 0)


@dataclass(frozen=True)
class _Footprint:
    box_width: float
    box_height: float
    step_width: float
    step_height: float


def item_footprint(params: GridGeneratorParams) -> _Footprint:
    """Seat box and packing footprint; tables keep a clearance ring for chairs."""

    if is_furniture_table(params.furniture_type):
        table = params.table_config or TableConfig()
        clearance = get_layout_config().table_clearance
        return _Footprint(
            table.table_width,
            table.table_height,
            table.table_width + clearance,
            table.table_height + clearance,
        )
    size = float(params.seat_size)
    return _Footprint(size, size, size, size)


def _is_degenerate(polygon: Sequence[PointLike], params: GridGeneratorParams) -> bool:
    if len(polygon) < 3:
        return True
    if params.seat_size <= 0:
        return True
    if params.rows is not None and params.rows <= 0:
        return True
    if params.cols is not None and params.cols <= 0:
        return True
    return False


def _row_counts(params: GridGeneratorParams) -> List[int]:
    rows = int(params.rows or 0)
    cols = int(params.cols or 0)
    per_row = params.seats_per_row or []
    return [max(int(per_row[r]), 0) if r < len(per_row) else cols for r in range(rows)]


def _row_start(
    bounds: Bounds, count: int, widest: int, step: float, spacing: float, alignment: str
) -> float:
    row_width = count * step - spacing
    full_width = widest * step - spacing
    grid_left = bounds.x + (bounds.width - full_width) / 2.0
    if alignment == "left":
        return grid_left
    if alignment == "right":
        return grid_left + full_width - row_width
    return bounds.x + (bounds.width - row_width) / 2.0


def _grid_rows(
    bounds: Bounds, params: GridGeneratorParams, foot: _Footprint
) -> List[Tuple[int, int, float, float]]:
    """``(row_index, count, left, top)`` for an explicit rows x cols grid."""

    step_x = foot.step_width + params.col_spacing
    step_y = foot.step_height + params.row_spacing
    counts = _row_counts(params)
    widest = max(counts) if counts else 0
    grid_height = len(counts) * step_y - params.row_spacing
    top = bounds.y + (bounds.height - grid_height) / 2.0
    rows = []
    for r, count in enumerate(counts):
        if count <= 0:
            continue
        left = _row_start(bounds, count, widest, step_x, params.col_spacing, params.row_alignment)
        rows.append((r, count, left, top + r * step_y))
    return rows


def _scan_rows(
    bounds: Bounds, params: GridGeneratorParams, foot: _Footprint
) -> List[Tuple[int, int, float, float]]:
    step_x = foot.step_width + params.col_spacing
    step_y = foot.step_height + params.row_spacing
    pad_x = foot.step_width
    pad_y = foot.step_height
    usable_width = bounds.width - 2.0 * pad_x
    count = int(math.floor((usable_width + params.col_spacing) / step_x)) if usable_width > 0 else 0
    if count <= 0:
        return []
    rows = []
    band = 0
    y = bounds.y + pad_y
    while y + foot.step_height <= bounds.bottom - pad_y + 1e-9:
        rows.append((band, count, bounds.x + pad_x, y))
        band += 1
        y += step_y
    return rows


def _grid_candidates(
    polygon: Sequence[PointLike],
    params: GridGeneratorParams,
    foot: _Footprint,
    bend: Optional[EdgeBend],
    scan: bool,
) -> List[SeatCandidate]:
    bounds = bounds_from_vertices(polygon)
    rows = _scan_rows(bounds, params, foot) if scan else _grid_rows(bounds, params, foot)
    step_x = foot.step_width + params.col_spacing

    slots: List[Tuple[int, int, int]] = []
    centers: List[Tuple[float, float]] = []
    tilts: List[float] = []
    for r, count, left, top in rows:
        cy = top + foot.step_height / 2.0
        for c in range(count):
            cx = left + c * step_x + foot.step_width / 2.0
            tilt = 0.0
            y = cy
            if bend is not None:
                y = cy + bend.offset_at(cx, cy)
                tilt = math.degrees(math.atan(bend.slope_at(cx, cy)))
            slots.append((r, c, count))
            centers.append((cx, y))
            tilts.append(tilt)
    if not centers:
        return []

    rotated = rotate_points(np.asarray(centers, dtype=float), bounds_center(bounds), params.rotation)
    half_w = foot.box_width / 2.0
    half_h = foot.box_height / 2.0
    return [
        SeatCandidate(
            row_index=r,
            col_index=c,
            row_total=count,
            x=float(cx) - half_w,
            y=float(cy) - half_h,
            width=foot.box_width,
            height=foot.box_height,
            rotation=params.rotation + tilt,
        )
        for (r, c, count), (cx, cy), tilt in zip(slots, rotated, tilts)
    ]


def _radial_candidates(
    polygon: Sequence[PointLike],
    params: GridGeneratorParams,
    foot: _Footprint,
    band: ArcBand,
) -> List[SeatCandidate]:
    if params.seats_per_row:
        logger.debug("Radial packing ignores seats_per_row=%s", params.seats_per_row)

    step_x = foot.step_width + params.col_spacing
    step_y = foot.step_height + params.row_spacing
    margin = max(foot.box_width, foot.box_height) * _RADIAL_MARGIN
    r_lo = band.inner_radius + margin
    r_hi = band.outer_radius - margin
    if r_hi < r_lo:
        r_lo = r_hi = (band.inner_radius + band.outer_radius) / 2.0

    # ring radii stay at least one row step apart
    fit_rows = int(math.floor((r_hi - r_lo) / step_y)) + 1
    rows = params.rows
    if rows is None:
        rows = fit_rows
    elif rows > fit_rows:
        logger.debug("Radial band fits %d of %d requested rows", fit_rows, rows)
        rows = fit_rows
    if rows == 1:
        radii = [(r_lo + r_hi) / 2.0]
    else:
        radii = [r_lo + i * (r_hi - r_lo) / (rows - 1) for i in range(rows)]

    spread = math.radians(band.spread)
    half_w = foot.box_width / 2.0
    half_h = foot.box_height / 2.0
    candidates: List[SeatCandidate] = []
    for ring, radius in enumerate(radii):
        if radius <= 0.0:
            continue
        fit = int(math.floor(radius * spread / step_x))
        count = fit if params.cols is None else min(fit, params.cols)
        angle_step = step_x / radius
        for j in range(count):
            angle = -math.pi / 2.0 + (j - (count - 1) / 2.0) * angle_step
            cx, cy = band.point_at(radius, angle)
            candidates.append(
                SeatCandidate(
                    row_index=ring,
                    col_index=j,
                    row_total=count,
                    x=cx - half_w,
                    y=cy - half_h,
                    width=foot.box_width,
                    height=foot.box_height,
                    rotation=params.rotation + math.degrees(angle + math.pi / 2.0),
                )
            )
    return candidates


def plan_layout(
    polygon: Sequence[PointLike],
    params: GridGeneratorParams,
    *,
    shape: str = "rectangle",
    curvature: int = 0,
) -> LayoutPlan:
    """Return every candidate slot for ``params`` before polygon admission."""

    regime = curvature_regime(shape, curvature)
    if is_arc_regime(regime):
        mode = "radial"
    elif params.rows is None or params.cols is None:
        mode = "scan"
    elif isinstance(regime, EdgeBendRegime):
        mode = "curved-grid"
    else:
        mode = "grid"

    if _is_degenerate(polygon, params):
        return LayoutPlan(mode=mode)

    foot = item_footprint(params)
    if mode == "radial":
        band = ArcBand.fit_polygon_bounds(bounds_from_vertices(polygon), regime)  # type: ignore[arg-type]
        candidates = _radial_candidates(polygon, params, foot, band)
    else:
        bend = None
        if isinstance(regime, EdgeBendRegime):
            bend = EdgeBend.from_bounds(bounds_from_vertices(polygon), regime.curvature)
        candidates = _grid_candidates(polygon, params, foot, bend, scan=mode == "scan")
    return LayoutPlan(mode=mode, candidates=candidates, requested=params.requested_count)


def admit_candidates(
    candidates: Sequence[SeatCandidate], polygon: Sequence[PointLike]
) -> List[SeatCandidate]:
    """Keep candidates whose box centre lies inside ``polygon``."""

    if not candidates:
        return []
    centers = np.asarray([candidate.center for candidate in candidates], dtype=float)
    mask = points_in_polygon(centers, polygon)
    return [candidate for candidate, keep in zip(candidates, mask) if keep]


def _compact_rows(admitted: List[SeatCandidate]) -> List[SeatCandidate]:
    bands = sorted({candidate.row_index for candidate in admitted})
    renumber = {band: idx for idx, band in enumerate(bands)}
    by_row = {}
    for candidate in admitted:
        by_row.setdefault(candidate.row_index, []).append(candidate)
    compacted: List[SeatCandidate] = []
    for band in bands:
        row = sorted(by_row[band], key=lambda candidate: candidate.col_index)
        for col, candidate in enumerate(row):
            compacted.append(
                SeatCandidate(
                    row_index=renumber[band],
                    col_index=col,
                    row_total=len(row),
                    x=candidate.x,
                    y=candidate.y,
                    width=candidate.width,
                    height=candidate.height,
                    rotation=candidate.rotation,
                )
            )
    return compacted


def _row_positions(admitted: Sequence[SeatCandidate]) -> List[Tuple[int, int]]:
    """Rank of each admitted candidate within its row, left to right, and the row size."""

    by_row = {}
    for idx, candidate in enumerate(admitted):
        by_row.setdefault(candidate.row_index, []).append(idx)
    positions: List[Tuple[int, int]] = [(0, 0)] * len(admitted)
    for members in by_row.values():
        ordered = sorted(members, key=lambda idx: admitted[idx].x)
        for rank, idx in enumerate(ordered):
            positions[idx] = (rank, len(ordered))
    return positions


def _make_seat(
    candidate: SeatCandidate, params: GridGeneratorParams, position: Tuple[int, int]
) -> Seat:
    label = params.prefix + row_label(candidate.row_index, params.row_label_type, params.row_label_start)
    override = resolve_row_config(params.row_numbering, label, params.prefix)
    if override is None:
        number = seat_label(
            candidate.col_index,
            candidate.row_total,
            params.seat_label_type,
            params.seat_label_start,
            None,
            params.custom_numbers,
        )
    else:
        # overrides number the seats actually placed, by physical order
        rank, total = position
        number = seat_label(rank, total, "custom-per-row", override.start_number, None, None, override)
        label = override.rename or label
    table = None
    if is_furniture_table(params.furniture_type):
        table = params.table_config or TableConfig()
    return Seat(
        id=generate_id(),
        sector_id=params.sector_id,
        row=label,
        number=number,
        x=candidate.x,
        y=candidate.y,
        rotation=candidate.rotation,
        type=params.seat_type,
        status="blocked" if params.seat_type == "blocked" else "available",
        furniture_type=params.furniture_type,
        table_config=table,
    )


def layout_report(
    polygon: Sequence[PointLike],
    params: GridGeneratorParams,
    *,
    shape: str = "rectangle",
    curvature: int = 0,
) -> LayoutReport:
    plan = plan_layout(polygon, params, shape=shape, curvature=curvature)
    admitted = admit_candidates(plan.candidates, polygon)
    if plan.mode == "scan":
        admitted = _compact_rows(admitted)
    positions = _row_positions(admitted)
    seats = [_make_seat(candidate, params, position) for candidate, position in zip(admitted, positions)]
    logger.debug(
        "layout_report: mode=%s candidates=%d placed=%d requested=%d",
        plan.mode,
        len(plan.candidates),
        len(seats),
        plan.requested,
    )
    return LayoutReport(seats=seats, requested=plan.requested, mode=plan.mode)


def layout_seats(
    polygon: Sequence[PointLike],
    params: GridGeneratorParams,
    *,
    shape: str = "rectangle",
    curvature: int = 0,
) -> List[Seat]:
    """Generate the seats for ``params`` that fit inside ``polygon``.

    Arc shapes and curvature >= 40 use radial packing, smaller curvature a
    grid bent along with the polygon, and curvature 0 a plain grid. Polygons
    with fewer than three vertices and non-positive grid sizes give ``[]``.
    """

    return layout_report(polygon, params, shape=shape, curvature=curvature).seats


__all__ = [
    "LayoutPlan",
    "LayoutReport",
    "SeatCandidate",
    "admit_candidates",
    "item_footprint",
    "layout_report",
    "layout_seats",
    "plan_layout",
]


apply_debug_logging(globals(), logger=logger)
