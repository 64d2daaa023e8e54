"""Configuration helpers for layout and editing components."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class LayoutConfig:
    """Design constants shared by the generator, hit-testing and session."""

    table_clearance: float = 30.0
    vertex_hit_radius: float = 8.0
    edge_hit_threshold: float = 6.0
    min_sector_dimension: float = 20.0
    max_sector_dimension: float = 10000.0
    coalesce_delay: float = 0.15
    history_limit: int = 50
    duplicate_offset: float = 50.0
    arc_segments: int = 20


_LAYOUT_CONFIG = LayoutConfig()


def get_layout_config() -> LayoutConfig:
    return copy.deepcopy(_LAYOUT_CONFIG)


def set_layout_config(config: LayoutConfig) -> None:
    global _LAYOUT_CONFIG
    _LAYOUT_CONFIG = copy.deepcopy(config)


__all__ = ["LayoutConfig", "get_layout_config", "set_layout_config"]
