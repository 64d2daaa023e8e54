"""Editor session state: sectors, selection, undo history and live interactions.

All state lives on :class:`EditorSession`; nothing here is module-global.
Interactions are synchronous. Continuous gestures (vertex/seat drags and
sector moves) follow a begin/update/end protocol that records exactly one
history entry per gesture, and slider-style parameters go through a
:class:`ParameterCoalescer` so the expensive recomputation runs once per
burst of updates.
"""

from __future__ import annotations

import copy
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Hashable, Iterable, List, Optional, Sequence, Set, Tuple

from .config import LayoutConfig, get_layout_config
from .curvature import apply_curvature, clamp_curvature
from .export import map_snapshot
from .hit_test import drag_vertex_to, insert_vertex_at, to_local, to_world, vertex_at
from .labels import seat_label
from .layout import LayoutReport, layout_report
from .model import EditResult, GridGeneratorParams, RowNumberingConfig, Sector, generate_id
from .reshape import (
    dimension_error,
    duplicate_sector,
    remove_vertex,
    reposition_seats,
    resize_polygon,
    seat_center,
    translate_sector,
)
from .shapes import is_known_shape
from .types import SECTOR_COLORS, Bounds, PointLike, ToolType, Vertex, as_vertex

logger = logging.getLogger(__name__)


class History:
    """Bounded undo/redo stack of deep-copied sector lists."""

    def __init__(self, initial: Sequence[Sector] = (), limit: Optional[int] = None) -> None:
        self.limit = limit if limit is not None else get_layout_config().history_limit
        self._past: List[List[Sector]] = []
        self._present: List[Sector] = copy.deepcopy(list(initial))
        self._future: List[List[Sector]] = []

    @property
    def present(self) -> List[Sector]:
        return copy.deepcopy(self._present)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def __len__(self) -> int:
        return len(self._past)

    def push(self, state: Sequence[Sector]) -> None:
        self._past.append(self._present)
        if self.limit > 0 and len(self._past) > self.limit:
            del self._past[: len(self._past) - self.limit]
        self._present = copy.deepcopy(list(state))
        self._future.clear()

    def undo(self) -> Optional[List[Sector]]:
        if not self._past:
            return None
        self._future.append(self._present)
        self._present = self._past.pop()
        return self.present

    def redo(self) -> Optional[List[Sector]]:
        if not self._future:
            return None
        self._past.append(self._present)
        self._present = self._future.pop()
        return self.present

    def reset(self, state: Sequence[Sector]) -> None:
        self._past.clear()
        self._future.clear()
        self._present = copy.deepcopy(list(state))


class ParameterCoalescer:
    """Collapse bursts of parameter updates into one delayed commit per key.

    ``submit`` calls ``preview`` straight away with the newest value and
    (re)starts the quiescence window for that key. ``poll`` commits every key
    whose window has elapsed; only the final value of a burst is committed.
    """

    def __init__(
        self,
        commit: Callable[[Hashable, Any], None],
        preview: Optional[Callable[[Hashable, Any], None]] = None,
        delay: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._commit = commit
        self._preview = preview
        self.delay = delay if delay is not None else get_layout_config().coalesce_delay
        self._clock = clock
        self._pending: Dict[Hashable, Tuple[Any, float]] = {}

    @property
    def pending(self) -> FrozenSet[Hashable]:
        return frozenset(self._pending)

    def submit(self, key: Hashable, value: Any, now: Optional[float] = None) -> None:
        now = self._clock() if now is None else now
        if self._preview is not None:
            self._preview(key, value)
        self._pending[key] = (value, now + self.delay)

    def poll(self, now: Optional[float] = None) -> int:
        """Commit the keys whose window has elapsed; returns how many ran."""

        now = self._clock() if now is None else now
        due = [key for key, (_, deadline) in self._pending.items() if deadline <= now]
        for key in due:
            value, _ = self._pending.pop(key)
            self._commit(key, value)
        return len(due)

    def flush(self) -> int:
        keys = list(self._pending)
        for key in keys:
            value, _ = self._pending.pop(key)
            self._commit(key, value)
        return len(keys)

    def discard(self, key: Hashable) -> None:
        self._pending.pop(key, None)


@dataclass
class _Drag:
    kind: str
    sector_id: str
    origin: Vertex
    snapshot: Sector
    vertex_index: int = -1
    seat_ids: FrozenSet[str] = frozenset()
    moved: bool = False


@dataclass
class Selection:
    sector_ids: Set[str] = field(default_factory=set)
    seat_ids: Set[str] = field(default_factory=set)

    def clear(self) -> None:
        self.sector_ids.clear()
        self.seat_ids.clear()


class EditorSession:
    """Mutable editing state for one venue map."""

    def __init__(
        self,
        sectors: Optional[Sequence[Sector]] = None,
        *,
        config: Optional[LayoutConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = copy.deepcopy(config) if config is not None else get_layout_config()
        self.sectors: List[Sector] = copy.deepcopy(list(sectors or []))
        self.selection = Selection()
        self.active_tool: ToolType = "select"
        self.zoom = 1.0
        self.history = History(self.sectors, limit=self.config.history_limit)
        self.coalescer = ParameterCoalescer(
            self._commit_parameter,
            preview=self._preview_parameter,
            delay=self.config.coalesce_delay,
            clock=clock,
        )
        self._burst_base: Dict[Hashable, Sector] = {}
        self._drag: Optional[_Drag] = None

    # ------------------------------------------------------------------
    # Lookup and bookkeeping

    def get_sector(self, sector_id: str) -> Optional[Sector]:
        for sector in self.sectors:
            if sector.id == sector_id:
                return sector
        return None

    def _editable(self, sector_id: str) -> Tuple[Optional[Sector], Optional[EditResult]]:
        sector = self.get_sector(sector_id)
        if sector is None:
            return None, self._reject(f"unknown sector {sector_id!r}")
        if sector.locked:
            return None, self._reject(f"sector {sector.name!r} is locked", sector.vertices)
        return sector, None

    def _reject(self, message: str, vertices: Sequence[Vertex] = ()) -> EditResult:
        logger.info("Edit rejected: %s", message)
        return EditResult.rejected(message, vertices)

    def _commit(self, action: str) -> None:
        self.history.push(self.sectors)
        logger.info("Committed %s (%d sector(s), history depth %d)", action, len(self.sectors), len(self.history))

    def _replace_sector(self, updated: Sector) -> None:
        self.sectors = [updated if sector.id == updated.id else sector for sector in self.sectors]

    def _prune_selection(self) -> None:
        sector_ids = {sector.id for sector in self.sectors}
        seat_ids = {seat.id for sector in self.sectors for seat in sector.seats}
        self.selection.sector_ids &= sector_ids
        self.selection.seat_ids &= seat_ids

    # ------------------------------------------------------------------
    # Sectors

    def create_sector(
        self,
        shape: str,
        bounds: Bounds,
        *,
        name: Optional[str] = None,
        curvature: int = 0,
        rotation: float = 0.0,
    ) -> EditResult:
        """Create a sector of ``shape`` filling ``bounds`` and select it."""

        bounds = Bounds(*(float(v) for v in bounds))
        if bounds.width < 0 or bounds.height < 0:
            bounds = Bounds(
                min(bounds.x, bounds.x + bounds.width),
                min(bounds.y, bounds.y + bounds.height),
                abs(bounds.width),
                abs(bounds.height),
            )
        error = dimension_error(bounds)
        if error:
            return self._reject(error)
        if not is_known_shape(shape):
            logger.debug("create_sector: unknown shape %r treated as rectangle", shape)
            shape = "rectangle"
        curvature = clamp_curvature(curvature)
        sector = Sector(
            id=generate_id(),
            name=name or f"Sector {len(self.sectors) + 1}",
            vertices=apply_curvature(shape, bounds, curvature),
            shape=shape,
            color=SECTOR_COLORS[len(self.sectors) % len(SECTOR_COLORS)],
            rotation=float(rotation),
            curvature=curvature,
            frame=bounds,
        )
        self.sectors.append(sector)
        self.selection.sector_ids = {sector.id}
        self.selection.seat_ids.clear()
        self._commit(f"create sector {sector.name!r}")
        return EditResult.accepted(sector.vertices, sector.id)

    def generate_seats(self, sector_id: str, params: GridGeneratorParams) -> Optional[LayoutReport]:
        """Replace the sector's seats with a fresh layout; ``None`` if not editable."""

        sector, _ = self._editable(sector_id)
        if sector is None:
            return None
        params = replace(copy.deepcopy(params), sector_id=sector.id)
        report = layout_report(sector.vertices, params, shape=sector.shape, curvature=sector.curvature)
        self._replace_sector(replace(sector, seats=report.seats, layout_params=params))
        self._prune_selection()
        if report.shortfall:
            logger.info(
                "Placed %d of %d requested seat(s) in %r", report.placed, report.requested, sector.name
            )
        self._commit(f"generate {report.placed} seat(s) in {sector.name!r}")
        return report

    def regenerate_seats(self, sector_id: str) -> Optional[LayoutReport]:
        sector = self.get_sector(sector_id)
        if sector is None or sector.layout_params is None:
            return None
        return self.generate_seats(sector_id, sector.layout_params)

    def _relayout(self, sector: Sector) -> Sector:
        if sector.layout_params is None:
            return sector
        report = layout_report(sector.vertices, sector.layout_params, shape=sector.shape, curvature=sector.curvature)
        return replace(sector, seats=report.seats)

    def set_shape(self, sector_id: str, shape: str) -> EditResult:
        """Regenerate the polygon as ``shape`` in the sector's frame, keeping curvature."""

        sector, rejected = self._editable(sector_id)
        if sector is None:
            return rejected  # type: ignore[return-value]
        if not is_known_shape(shape):
            return self._reject(f"unknown shape {shape!r}", sector.vertices)
        frame = sector.generation_frame
        vertices = apply_curvature(shape, frame, sector.curvature)
        seats = reposition_seats(sector.seats, sector.vertices, vertices, sector.id, sector.item_size)
        self._replace_sector(replace(sector, shape=shape, vertices=vertices, seats=seats, frame=frame))
        self._prune_selection()
        self._commit(f"shape {shape!r} for {sector.name!r}")
        return EditResult.accepted(vertices, sector.id)

    def resize_sector(self, sector_id: str, new_bounds: Bounds) -> EditResult:
        sector, rejected = self._editable(sector_id)
        if sector is None:
            return rejected  # type: ignore[return-value]
        result = resize_polygon(sector.vertices, sector.shape, sector.curvature, new_bounds)
        if not result.ok:
            return result
        frame = Bounds(*(float(v) for v in new_bounds))
        self._replace_sector(replace(sector, vertices=result.vertices, frame=frame))
        self._commit(f"resize {sector.name!r}")
        return EditResult.accepted(result.vertices, sector.id)

    def insert_vertex(self, sector_id: str, point: PointLike) -> EditResult:
        """Insert a vertex on the edge under ``point``; seats stay where they are."""

        sector, rejected = self._editable(sector_id)
        if sector is None:
            return rejected  # type: ignore[return-value]
        result = insert_vertex_at(sector, point, self.zoom)
        if not result.ok:
            return self._reject(result.message, sector.vertices)
        self._replace_sector(replace(sector, vertices=result.vertices, frame=None))
        self._commit(f"insert vertex in {sector.name!r}")
        return EditResult.accepted(result.vertices, sector.id)

    def remove_vertex(self, sector_id: str, index: int) -> EditResult:
        sector, rejected = self._editable(sector_id)
        if sector is None:
            return rejected  # type: ignore[return-value]
        result = remove_vertex(sector.vertices, index)
        if not result.ok:
            return result
        seats = reposition_seats(sector.seats, sector.vertices, result.vertices, sector.id, sector.item_size)
        self._replace_sector(replace(sector, vertices=result.vertices, seats=seats, frame=None))
        self._prune_selection()
        self._commit(f"remove vertex {index} from {sector.name!r}")
        return EditResult.accepted(result.vertices, sector.id)

    def move_sector(self, sector_id: str, dx: float, dy: float) -> EditResult:
        sector, rejected = self._editable(sector_id)
        if sector is None:
            return rejected  # type: ignore[return-value]
        moved = translate_sector(sector, dx, dy)
        self._replace_sector(moved)
        self._commit(f"move {sector.name!r}")
        return EditResult.accepted(moved.vertices, sector.id)

    def delete_sector(self, sector_id: str) -> EditResult:
        sector, rejected = self._editable(sector_id)
        if sector is None:
            return rejected  # type: ignore[return-value]
        self.sectors = [item for item in self.sectors if item.id != sector_id]
        for key in [key for key in self._burst_base if key[0] == sector_id]:
            self._burst_base.pop(key)
            self.coalescer.discard(key)
        self._prune_selection()
        self._commit(f"delete {sector.name!r}")
        return EditResult.accepted((), sector_id)

    def delete_selection(self) -> int:
        """Delete selected seats, or the selected sectors when no seat is selected."""

        if self.selection.seat_ids:
            doomed = set(self.selection.seat_ids)
            removed = 0
            updated = []
            for sector in self.sectors:
                if sector.locked:
                    updated.append(sector)
                    continue
                kept = [seat for seat in sector.seats if seat.id not in doomed]
                removed += len(sector.seats) - len(kept)
                updated.append(replace(sector, seats=kept) if len(kept) != len(sector.seats) else sector)
            self.sectors = updated
            self._prune_selection()
            if removed:
                self._commit(f"delete {removed} seat(s)")
            return removed

        removed = 0
        for sector_id in list(self.selection.sector_ids):
            sector = self.get_sector(sector_id)
            if sector is None or sector.locked:
                continue
            self.sectors = [item for item in self.sectors if item.id != sector_id]
            removed += 1
        self._prune_selection()
        if removed:
            self._commit(f"delete {removed} sector(s)")
        return removed

    def duplicate_selection(self) -> List[str]:
        """Duplicate the selected sectors; the copies become the selection."""

        created: List[str] = []
        for sector in list(self.sectors):
            if sector.id not in self.selection.sector_ids:
                continue
            clone = duplicate_sector(sector, self.config.duplicate_offset)
            self.sectors.append(clone)
            created.append(clone.id)
        if created:
            self.selection.sector_ids = set(created)
            self.selection.seat_ids.clear()
            self._commit(f"duplicate {len(created)} sector(s)")
        return created

    # ------------------------------------------------------------------
    # Seats

    def update_seats(self, seat_ids: Iterable[str], **changes: Any) -> int:
        """Set ``type``, ``status``, ``price`` or ``category_id`` on the given seats."""

        allowed = {"type", "status", "price", "category_id"}
        unknown = set(changes) - allowed
        if unknown:
            raise TypeError(f"unsupported seat field(s): {', '.join(sorted(unknown))}")
        if changes.get("type") == "blocked" and "status" not in changes:
            changes["status"] = "blocked"
        wanted = set(seat_ids)
        touched = 0
        updated = []
        for sector in self.sectors:
            if sector.locked or not any(seat.id in wanted for seat in sector.seats):
                updated.append(sector)
                continue
            seats = []
            for seat in sector.seats:
                if seat.id in wanted:
                    seat = replace(seat, **changes)
                    touched += 1
                seats.append(seat)
            updated.append(replace(sector, seats=seats))
        self.sectors = updated
        if touched:
            self._commit(f"update {touched} seat(s)")
        return touched

    def apply_row_numbering(
        self,
        sector_id: str,
        row: str,
        config: RowNumberingConfig,
        *,
        new_label: Optional[str] = None,
    ) -> EditResult:
        """Renumber one row by physical left-to-right order, optionally renaming it."""

        sector, rejected = self._editable(sector_id)
        if sector is None:
            return rejected  # type: ignore[return-value]
        row_seats = sector.seats_in_row(row)
        if not row_seats:
            return self._reject(f"row {row!r} has no seats in {sector.name!r}", sector.vertices)
        label = new_label or row
        params = sector.layout_params
        generated = row
        if params is not None:
            for key, existing in params.row_numbering.items():
                if existing.rename == row:
                    generated = key
                    break
        config = replace(config, row_label=generated, rename=label if label != generated else None)
        total = len(row_seats)
        renumbered = {}
        for idx, seat in enumerate(row_seats):
            number = seat_label(idx, total, "custom-per-row", config.start_number, None, None, config)
            renumbered[seat.id] = replace(seat, row=label, number=number)
        seats = [renumbered.get(seat.id, seat) for seat in sector.seats]
        if params is not None:
            numbering = dict(params.row_numbering)
            numbering[generated] = config
            params = replace(params, row_numbering=numbering)
        self._replace_sector(replace(sector, seats=seats, layout_params=params))
        self._commit(f"renumber row {row!r} of {sector.name!r}")
        return EditResult.accepted(sector.vertices, sector.id)

    # ------------------------------------------------------------------
    # Coalesced parameters

    def set_curvature(self, sector_id: str, value: int) -> EditResult:
        return self._submit(sector_id, "curvature", clamp_curvature(value))

    def set_rotation(self, sector_id: str, degrees: float) -> EditResult:
        return self._submit(sector_id, "rotation", float(degrees))

    def set_spacing(
        self, sector_id: str, *, row_spacing: Optional[float] = None, col_spacing: Optional[float] = None
    ) -> EditResult:
        sector = self.get_sector(sector_id)
        if sector is not None and sector.layout_params is None:
            return self._reject(f"sector {sector.name!r} has no seat layout", sector.vertices)
        return self._submit(sector_id, "spacing", (row_spacing, col_spacing))

    def _submit(self, sector_id: str, name: str, value: Any) -> EditResult:
        sector, rejected = self._editable(sector_id)
        if sector is None:
            return rejected  # type: ignore[return-value]
        self.coalescer.submit((sector_id, name), value)
        current = self.get_sector(sector_id)
        return EditResult.accepted(current.vertices if current else (), sector_id)

    def poll(self, now: Optional[float] = None) -> int:
        return self.coalescer.poll(now)

    def flush(self) -> int:
        return self.coalescer.flush()

    def _preview_parameter(self, key: Hashable, value: Any) -> None:
        sector_id, name = key  # type: ignore[misc]
        sector = self.get_sector(sector_id)
        if sector is None:
            return
        base = self._burst_base.setdefault(key, copy.deepcopy(sector))
        if name == "curvature":
            frame = base.generation_frame
            vertices = apply_curvature(base.shape, frame, value)
            seats = reposition_seats(base.seats, base.vertices, vertices, base.id, base.item_size)
            self._replace_sector(replace(sector, curvature=value, vertices=vertices, seats=seats, frame=frame))
        elif name == "rotation":
            self._replace_sector(replace(sector, rotation=value))
        elif name == "spacing" and sector.layout_params is not None:
            row_spacing, col_spacing = value
            params = sector.layout_params
            self._replace_sector(
                replace(
                    sector,
                    layout_params=replace(
                        params,
                        row_spacing=params.row_spacing if row_spacing is None else float(row_spacing),
                        col_spacing=params.col_spacing if col_spacing is None else float(col_spacing),
                    ),
                )
            )

    def _commit_parameter(self, key: Hashable, value: Any) -> None:
        sector_id, name = key  # type: ignore[misc]
        self._burst_base.pop(key, None)
        sector = self.get_sector(sector_id)
        if sector is None:
            return
        if name in ("curvature", "spacing"):
            self._replace_sector(self._relayout(sector))
            self._prune_selection()
        self._commit(f"{name} for {sector.name!r}")

    # ------------------------------------------------------------------
    # Drags

    def begin_vertex_drag(self, sector_id: str, point: PointLike) -> bool:
        """Start dragging the vertex under ``point``; ``False`` if none is hit."""

        sector, _ = self._editable(sector_id)
        if sector is None or self._drag is not None:
            return False
        hit = vertex_at(point, sector, self.zoom)
        if hit is None:
            return False
        self._drag = _Drag("vertex", sector.id, as_vertex(point), copy.deepcopy(sector), vertex_index=hit.index)
        return True

    def begin_seat_drag(self, sector_id: str, point: PointLike, seat_ids: Optional[Iterable[str]] = None) -> bool:
        sector, _ = self._editable(sector_id)
        if sector is None or self._drag is not None:
            return False
        ids = frozenset(seat_ids if seat_ids is not None else self.selection.seat_ids)
        ids = frozenset(seat.id for seat in sector.seats if seat.id in ids)
        if not ids:
            return False
        self._drag = _Drag("seat", sector.id, as_vertex(point), copy.deepcopy(sector), seat_ids=ids)
        return True

    def begin_sector_move(self, sector_id: str, point: PointLike) -> bool:
        sector, _ = self._editable(sector_id)
        if sector is None or self._drag is not None:
            return False
        self._drag = _Drag("sector", sector.id, as_vertex(point), copy.deepcopy(sector))
        return True

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def update_drag(self, point: PointLike) -> EditResult:
        """Recompute the dragged sector from its state at drag start."""

        drag = self._drag
        if drag is None:
            return EditResult.rejected("no drag in progress")
        start = drag.snapshot
        point = as_vertex(point)
        if drag.kind == "vertex":
            result = drag_vertex_to(start, drag.vertex_index, point)
            if not result.ok:
                return result
            seats = reposition_seats(start.seats, start.vertices, result.vertices, start.id, start.item_size)
            updated = replace(start, vertices=result.vertices, seats=seats, frame=None)
        elif drag.kind == "seat":
            here = to_local(point, start)
            origin = to_local(drag.origin, start)
            dx, dy = here.x - origin.x, here.y - origin.y
            updated = replace(
                start,
                seats=[
                    replace(seat, x=seat.x + dx, y=seat.y + dy) if seat.id in drag.seat_ids else seat
                    for seat in start.seats
                ],
            )
        else:
            updated = translate_sector(start, point.x - drag.origin.x, point.y - drag.origin.y)
        drag.moved = True
        self._replace_sector(updated)
        return EditResult.accepted(updated.vertices, updated.id)

    def end_drag(self) -> bool:
        """Finish the drag; commits one history entry if anything moved."""

        drag = self._drag
        self._drag = None
        if drag is None or not drag.moved:
            return False
        self._prune_selection()
        self._commit(f"{drag.kind} drag in {drag.snapshot.name!r}")
        return True

    def cancel_drag(self) -> None:
        drag = self._drag
        self._drag = None
        if drag is not None and self.get_sector(drag.sector_id) is not None:
            self._replace_sector(drag.snapshot)

    # ------------------------------------------------------------------
    # Selection, view and history

    def select_sector(self, sector_id: str, *, additive: bool = False) -> None:
        if not additive:
            self.selection.clear()
        if self.get_sector(sector_id) is not None:
            self.selection.sector_ids.add(sector_id)

    def select_seats(self, seat_ids: Iterable[str], *, additive: bool = False) -> None:
        if not additive:
            self.selection.seat_ids.clear()
        known = {seat.id for sector in self.sectors for seat in sector.seats}
        self.selection.seat_ids |= set(seat_ids) & known

    def select_seats_in_box(self, box: Bounds, *, additive: bool = False) -> int:
        """Select visible seats whose centre falls inside ``box`` (parent space)."""

        box = Bounds(*(float(v) for v in box))
        found = []
        for sector in self.sectors:
            if not sector.visible:
                continue
            for seat in sector.seats:
                cx, cy = to_world(seat_center(seat, sector.item_size), sector)
                if box.x <= cx <= box.right and box.y <= cy <= box.bottom:
                    found.append(seat.id)
        self.select_seats(found, additive=additive)
        return len(found)

    def clear_selection(self) -> None:
        self.selection.clear()

    def set_tool(self, tool: ToolType) -> None:
        self.active_tool = tool

    def set_zoom(self, zoom: float) -> None:
        if zoom <= 0:
            raise ValueError("zoom must be positive")
        self.zoom = float(zoom)

    def undo(self) -> bool:
        self.cancel_drag()
        self.flush()
        state = self.history.undo()
        if state is None:
            return False
        self.sectors = state
        self._burst_base.clear()
        self._prune_selection()
        logger.info("Undo (%d step(s) left)", len(self.history))
        return True

    def redo(self) -> bool:
        self.cancel_drag()
        self.flush()
        state = self.history.redo()
        if state is None:
            return False
        self.sectors = state
        self._burst_base.clear()
        self._prune_selection()
        logger.info("Redo")
        return True

    def snapshot(self, *, map_id: str = "map", name: str = "Venue") -> Dict[str, Any]:
        return map_snapshot(self.sectors, map_id=map_id, name=name)


__all__ = ["EditorSession", "History", "ParameterCoalescer", "Selection"]
