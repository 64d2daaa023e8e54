"""Flat JSON snapshots of a venue map and loaders for JSON input."""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .curvature import apply_curvature, clamp_curvature
from .model import GridGeneratorParams, RowNumberingConfig, Seat, Sector, TableConfig, generate_id
from .shapes import is_known_shape
from .types import (
    ROW_LABEL_TYPES,
    SEAT_LABEL_TYPES,
    SEAT_NUMBER_DIRECTIONS,
    SEAT_STATUSES,
    SEAT_TYPES,
    SECTOR_COLORS,
    Bounds,
    as_vertex,
)

logger = logging.getLogger(__name__)

MAP_VERSION = 1


class LayoutInputError(ValueError):
    """Raised when JSON input cannot be turned into sectors or parameters."""


def sector_snapshot(sector: Sector) -> Dict[str, Any]:
    bounds = sector.bounds
    return {
        "id": sector.id,
        "name": sector.name,
        "color": sector.color,
        "bounds": {"x": bounds.x, "y": bounds.y, "width": bounds.width, "height": bounds.height},
        "seats": [
            {
                "id": seat.id,
                "row": seat.row,
                "number": seat.number,
                "type": seat.type,
                "status": seat.status,
                "x": seat.x,
                "y": seat.y,
            }
            for seat in sector.seats
        ],
    }


def map_snapshot(sectors: Sequence[Sector], *, map_id: str = "map", name: str = "Venue") -> Dict[str, Any]:
    return {
        "id": map_id,
        "name": name,
        "version": MAP_VERSION,
        "sectors": [sector_snapshot(sector) for sector in sectors],
    }


def export_map_json(sectors: Sequence[Sector], *, map_id: str = "map", name: str = "Venue") -> str:
    return json.dumps(map_snapshot(sectors, map_id=map_id, name=name), indent=2)


def validate_map(data: Any) -> List[str]:
    """Return the problems found in a map snapshot (empty when valid)."""

    if not isinstance(data, Mapping):
        return ["map must be an object"]
    errors = []
    if not data.get("id"):
        errors.append("map id is required")
    if not data.get("name"):
        errors.append("map name is required")
    sectors = data.get("sectors")
    if not isinstance(sectors, list):
        errors.append("sectors must be a list")
        return errors
    for idx, sector in enumerate(sectors):
        if not isinstance(sector, Mapping):
            errors.append(f"sector {idx} must be an object")
            continue
        for key in ("id", "name", "bounds"):
            if key not in sector:
                errors.append(f"sector {idx} is missing {key!r}")
        if not isinstance(sector.get("seats", []), list):
            errors.append(f"sector {idx} seats must be a list")
    return errors


# ----------------------------------------------------------------------
# Loading


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise LayoutInputError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _choice(value: Any, allowed: Sequence[str], what: str) -> str:
    if value not in allowed:
        raise LayoutInputError(f"{what} must be one of {', '.join(allowed)}; got {value!r}")
    return value


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LayoutInputError(f"{what} must be a number, got {value!r}")
    return float(value)


def _bounds_from_dict(value: Any) -> Bounds:
    data = _require_mapping(value, "bounds")
    try:
        return Bounds(*(_number(data[key], f"bounds.{key}") for key in ("x", "y", "width", "height")))
    except KeyError as exc:
        raise LayoutInputError(f"bounds is missing {exc.args[0]!r}") from exc


def _table_from_dict(value: Any) -> TableConfig:
    data = dict(_require_mapping(value, "table_config"))
    try:
        return TableConfig(**data)
    except TypeError as exc:
        raise LayoutInputError(f"invalid table_config: {exc}") from exc


def seat_from_dict(data: Any, sector_id: str) -> Seat:
    data = _require_mapping(data, "seat")
    try:
        return Seat(
            id=str(data.get("id") or generate_id()),
            sector_id=sector_id,
            row=str(data["row"]),
            number=str(data["number"]),
            x=_number(data["x"], "seat.x"),
            y=_number(data["y"], "seat.y"),
            rotation=_number(data.get("rotation", 0.0), "seat.rotation"),
            type=_choice(data.get("type", "normal"), SEAT_TYPES, "seat.type"),
            status=_choice(data.get("status", "available"), SEAT_STATUSES, "seat.status"),
            furniture_type=data.get("furniture_type"),
            table_config=_table_from_dict(data["table_config"]) if data.get("table_config") else None,
            price=data.get("price"),
            category_id=data.get("category_id"),
        )
    except KeyError as exc:
        raise LayoutInputError(f"seat is missing {exc.args[0]!r}") from exc


def sector_from_dict(data: Any) -> Sector:
    """Build a sector from ``{shape, bounds}`` or an explicit ``vertices`` list."""

    data = _require_mapping(data, "sector")
    shape = data.get("shape", "rectangle")
    if not is_known_shape(shape):
        raise LayoutInputError(f"unknown shape {shape!r}")
    curvature = clamp_curvature(data.get("curvature", 0))
    frame: Optional[Bounds] = None
    if "vertices" in data:
        try:
            vertices = [as_vertex(vertex) for vertex in data["vertices"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise LayoutInputError(f"invalid vertices: {exc}") from exc
    elif "bounds" in data:
        frame = _bounds_from_dict(data["bounds"])
        vertices = apply_curvature(shape, frame, curvature)
    else:
        raise LayoutInputError("sector needs either 'vertices' or 'bounds'")
    if len(vertices) < 3:
        raise LayoutInputError(f"sector needs at least 3 vertices, got {len(vertices)}")

    sector_id = str(data.get("id") or generate_id())
    seats = data.get("seats", [])
    if not isinstance(seats, list):
        raise LayoutInputError("seats must be a list")
    return Sector(
        id=sector_id,
        name=str(data.get("name", "Sector 1")),
        vertices=vertices,
        shape=shape,
        color=str(data.get("color", SECTOR_COLORS[0])),
        rotation=_number(data.get("rotation", 0.0), "rotation"),
        curvature=curvature,
        seats=[seat_from_dict(seat, sector_id) for seat in seats],
        frame=frame,
    )


_PARAM_FIELDS = {f.name for f in dataclasses.fields(GridGeneratorParams)}


def params_from_dict(data: Any, sector_id: str = "") -> GridGeneratorParams:
    """Build generator parameters from snake_case keys; unknown keys are an error."""

    data = dict(_require_mapping(data, "params"))
    unknown = sorted(set(data) - _PARAM_FIELDS)
    if unknown:
        raise LayoutInputError(f"unknown parameter(s): {', '.join(unknown)}")
    for key in ("rows", "cols"):
        if data.get(key) is not None and (isinstance(data[key], bool) or not isinstance(data[key], int)):
            raise LayoutInputError(f"{key} must be an integer or null, got {data[key]!r}")
    if "row_label_type" in data:
        _choice(data["row_label_type"], ROW_LABEL_TYPES, "row_label_type")
    if "seat_label_type" in data:
        _choice(data["seat_label_type"], SEAT_LABEL_TYPES, "seat_label_type")
    if "seat_type" in data:
        _choice(data["seat_type"], SEAT_TYPES, "seat_type")
    if data.get("table_config") is not None:
        data["table_config"] = _table_from_dict(data["table_config"])
    numbering = {}
    for label, raw in _require_mapping(data.get("row_numbering", {}), "row_numbering").items():
        entry = dict(_require_mapping(raw, f"row_numbering[{label!r}]"))
        entry.setdefault("row_label", label)
        if "direction" in entry:
            _choice(entry["direction"], SEAT_NUMBER_DIRECTIONS, "direction")
        try:
            numbering[label] = RowNumberingConfig(**entry)
        except TypeError as exc:
            raise LayoutInputError(f"invalid row_numbering for {label!r}: {exc}") from exc
    data["row_numbering"] = numbering
    data.setdefault("sector_id", sector_id)
    params = GridGeneratorParams(**data)
    logger.debug("params_from_dict: %s", params)
    return params


__all__ = [
    "LayoutInputError",
    "MAP_VERSION",
    "export_map_json",
    "map_snapshot",
    "params_from_dict",
    "sector_from_dict",
    "sector_snapshot",
    "seat_from_dict",
    "validate_map",
]
