from __future__ import annotations

from typing import List, NamedTuple, Tuple
from typing import Literal


class Vertex(NamedTuple):
    """Plane coordinate; carries position only."""

    x: float
    y: float


class Bounds(NamedTuple):
    """Axis-aligned box derived from a polygon."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


Polygon = List[Vertex]
PointLike = Tuple[float, float]

ShapeId = Literal[
    "rectangle",
    "parallelogram",
    "trapezoid",
    "triangle",
    "pentagon",
    "hexagon",
    "octagon",
    "circle",
    "arc",
    "diamond",
    "l-shape",
    "u-shape",
    "t-shape",
    "z-shape",
    "cross",
    "arrow",
    "star",
    "wave",
]

RowLabelType = Literal["alpha", "numeric", "roman"]

SeatLabelType = Literal[
    "numeric",
    "reverse",
    "odd-left",
    "even-left",
    "odd-only",
    "even-only",
    "custom",
    "custom-per-row",
]

SeatNumberDirection = Literal["ltr", "rtl", "center-out"]
RowAlignment = Literal["left", "center", "right"]

SeatType = Literal["normal", "pcd", "companion", "obeso", "vip", "blocked"]
SeatStatus = Literal["available", "reserved", "sold", "blocked"]

FurnitureType = Literal["chair", "table", "bistro"]
TableShape = Literal["round", "square", "rectangular"]

ToolType = Literal["select", "pan", "sector", "seat-grid", "seat-single", "element", "lasso"]

SEAT_TYPES: Tuple[str, ...] = ("normal", "pcd", "companion", "obeso", "vip", "blocked")
SEAT_STATUSES: Tuple[str, ...] = ("available", "reserved", "sold", "blocked")
ROW_LABEL_TYPES: Tuple[str, ...] = ("alpha", "numeric", "roman")
SEAT_LABEL_TYPES: Tuple[str, ...] = (
    "numeric",
    "reverse",
    "odd-left",
    "even-left",
    "odd-only",
    "even-only",
    "custom",
    "custom-per-row",
)
SEAT_NUMBER_DIRECTIONS: Tuple[str, ...] = ("ltr", "rtl", "center-out")

SECTOR_COLORS: Tuple[str, ...] = (
    "hsl(340, 82%, 52%)",
    "hsl(262, 83%, 58%)",
    "hsl(199, 89%, 48%)",
    "hsl(142, 71%, 45%)",
    "hsl(45, 93%, 47%)",
    "hsl(24, 95%, 53%)",
    "hsl(280, 68%, 60%)",
    "hsl(172, 66%, 50%)",
)


def as_vertex(value: object) -> Vertex:
    """Coerce a ``(x, y)`` pair or an ``{"x", "y"}`` mapping into a :class:`Vertex`."""

    if isinstance(value, Vertex):
        return value
    if isinstance(value, dict):
        return Vertex(float(value["x"]), float(value["y"]))
    x, y = value  # type: ignore[misc]
    return Vertex(float(x), float(y))


def is_furniture_table(furniture_type: object) -> bool:
    return furniture_type in ("table", "bistro")


__all__ = [
    "Vertex",
    "Bounds",
    "Polygon",
    "PointLike",
    "ShapeId",
    "RowLabelType",
    "SeatLabelType",
    "SeatNumberDirection",
    "RowAlignment",
    "SeatType",
    "SeatStatus",
    "FurnitureType",
    "TableShape",
    "ToolType",
    "SEAT_TYPES",
    "SEAT_STATUSES",
    "ROW_LABEL_TYPES",
    "SEAT_LABEL_TYPES",
    "SEAT_NUMBER_DIRECTIONS",
    "SECTOR_COLORS",
    "as_vertex",
    "is_furniture_table",
]
