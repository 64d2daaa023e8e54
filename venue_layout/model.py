"""Core data structures for sectors, seats and generator parameters."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .math_utils import bounds_from_vertices
from .types import (
    Bounds,
    FurnitureType,
    RowAlignment,
    RowLabelType,
    SeatLabelType,
    SeatNumberDirection,
    SeatStatus,
    SeatType,
    TableShape,
    Vertex,
)


def generate_id() -> str:
    """Return a short random identifier for seats and sectors."""

    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class TableConfig:
    """Table footprint and chair count for ``table``/``bistro`` furniture."""

    shape: TableShape = "round"
    chair_count: int = 6
    table_width: float = 60.0
    table_height: float = 60.0


@dataclass(frozen=True)
class RowNumberingConfig:
    """Per-row override of the sector-level seat numbering scheme.

    ``row_label`` is the label the generator produces for the row; ``rename``
    replaces it on the generated seats.
    """

    row_label: str
    type: SeatLabelType = "numeric"
    start_number: int = 1
    numbers: Optional[Sequence[int]] = None
    direction: SeatNumberDirection = "ltr"
    rename: Optional[str] = None


@dataclass(frozen=True)
class Seat:
    id: str
    sector_id: str
    row: str
    number: str
    x: float
    y: float
    rotation: float = 0.0
    type: SeatType = "normal"
    status: SeatStatus = "available"
    furniture_type: Optional[FurnitureType] = None
    table_config: Optional[TableConfig] = None
    price: Optional[float] = None
    category_id: Optional[str] = None


@dataclass
class GridGeneratorParams:
    """Full parameter bag for a single seat generation call.

    ``rows``/``cols`` set to ``None`` switch the generator to a bounding-box
    scan; zero or negative values are degenerate and produce no seats.
    """

    rows: Optional[int] = 10
    cols: Optional[int] = 20
    row_spacing: float = 4.0
    col_spacing: float = 2.0
    seat_size: float = 14.0
    row_label_type: RowLabelType = "alpha"
    seat_label_type: SeatLabelType = "numeric"
    row_label_start: str = "A"
    seat_label_start: int = 1
    rotation: float = 0.0
    sector_id: str = ""
    prefix: str = ""
    furniture_type: FurnitureType = "chair"
    table_config: Optional[TableConfig] = None
    seat_type: SeatType = "normal"
    seats_per_row: Optional[List[int]] = None
    row_alignment: RowAlignment = "center"
    row_numbering: Dict[str, RowNumberingConfig] = field(default_factory=dict)
    custom_numbers: Optional[List[int]] = None

    @property
    def requested_count(self) -> int:
        """Number of seats the caller asked for (0 when scanning)."""

        if self.rows is None or self.cols is None:
            return 0
        if self.rows <= 0 or self.cols <= 0:
            return 0
        if self.seats_per_row:
            return sum(
                max(self.seats_per_row[r], 0) if r < len(self.seats_per_row) else self.cols
                for r in range(self.rows)
            )
        return self.rows * self.cols


@dataclass
class Sector:
    """A named venue area owning a polygon and its seats.

    ``rotation`` and ``curvature`` are authoring parameters; vertices are
    stored unrotated and the bounds are always derived from them.
    """

    id: str
    name: str
    vertices: List[Vertex]
    shape: str = "rectangle"
    color: str = "hsl(340, 82%, 52%)"
    rotation: float = 0.0
    curvature: int = 0
    seats: List[Seat] = field(default_factory=list)
    opacity: float = 1.0
    visible: bool = True
    locked: bool = False
    layout_params: Optional[GridGeneratorParams] = None
    category_id: Optional[str] = None
    frame: Optional[Bounds] = None

    @property
    def bounds(self) -> Bounds:
        return bounds_from_vertices(self.vertices)

    @property
    def generation_frame(self) -> Bounds:
        """Box the shape was last generated in, falling back to the live bounds."""

        return self.frame if self.frame is not None else self.bounds

    @property
    def item_size(self) -> float:
        return self.layout_params.seat_size if self.layout_params is not None else 14.0

    def seats_in_row(self, row: str) -> List[Seat]:
        return sorted((seat for seat in self.seats if seat.row == row), key=lambda seat: seat.x)


@dataclass
class EditResult:
    """Outcome of an edit operation at the user-facing constraint boundary."""

    ok: bool
    vertices: List[Vertex] = field(default_factory=list)
    message: str = ""
    sector_id: str = ""

    @classmethod
    def accepted(cls, vertices: Sequence[Vertex], sector_id: str = "") -> "EditResult":
        return cls(ok=True, vertices=list(vertices), sector_id=sector_id)

    @classmethod
    def rejected(cls, message: str, vertices: Sequence[Vertex] = ()) -> "EditResult":
        return cls(ok=False, vertices=list(vertices), message=message)


__all__ = [
    "EditResult",
    "GridGeneratorParams",
    "RowNumberingConfig",
    "Seat",
    "Sector",
    "TableConfig",
    "generate_id",
]
