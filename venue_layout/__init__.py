from .types import Bounds, Vertex, SECTOR_COLORS
from .config import LayoutConfig, get_layout_config, set_layout_config
from .model import EditResult, GridGeneratorParams, RowNumberingConfig, Seat, Sector, TableConfig, generate_id
from .math_utils import bounds_from_vertices, point_in_polygon, points_in_polygon, rotate_point
from .shapes import CANONICAL_VERTEX_COUNTS, SHAPE_IDS, canonical_vertex_count, shape_to_polygon
from .curvature import (
    ArcBand,
    EdgeBend,
    apply_curvature,
    clamp_curvature,
    curvature_regime,
    standard_vertex_count,
)
from .labels import number_to_alpha, number_to_roman, row_label, seat_label
from .layout import LayoutPlan, LayoutReport, SeatCandidate, layout_report, layout_seats, plan_layout
from .reshape import (
    duplicate_sector,
    insert_vertex,
    move_vertex,
    remove_vertex,
    reposition_seats,
    resize_polygon,
    translate_sector,
)
from .hit_test import contained_in, drag_vertex_to, edge_at, insert_vertex_at, seat_at, vertex_at
from .export import (
    LayoutInputError,
    export_map_json,
    map_snapshot,
    params_from_dict,
    sector_from_dict,
    sector_snapshot,
    validate_map,
)
from .session import EditorSession, History, ParameterCoalescer

__all__ = [
    'Bounds',
    'Vertex',
    'SECTOR_COLORS',
    'LayoutConfig',
    'get_layout_config',
    'set_layout_config',
    'EditResult',
    'GridGeneratorParams',
    'RowNumberingConfig',
    'Seat',
    'Sector',
    'TableConfig',
    'generate_id',
    'bounds_from_vertices',
    'point_in_polygon',
    'points_in_polygon',
    'rotate_point',
    'CANONICAL_VERTEX_COUNTS',
    'SHAPE_IDS',
    'canonical_vertex_count',
    'shape_to_polygon',
    'ArcBand',
    'EdgeBend',
    'apply_curvature',
    'clamp_curvature',
    'curvature_regime',
    'standard_vertex_count',
    'number_to_alpha',
    'number_to_roman',
    'row_label',
    'seat_label',
    'LayoutPlan',
    'LayoutReport',
    'SeatCandidate',
    'layout_report',
    'layout_seats',
    'plan_layout',
    'duplicate_sector',
    'insert_vertex',
    'move_vertex',
    'remove_vertex',
    'reposition_seats',
    'resize_polygon',
    'translate_sector',
    'contained_in',
    'drag_vertex_to',
    'edge_at',
    'insert_vertex_at',
    'seat_at',
    'vertex_at',
    'LayoutInputError',
    'export_map_json',
    'map_snapshot',
    'params_from_dict',
    'sector_from_dict',
    'sector_snapshot',
    'validate_map',
    'EditorSession',
    'History',
    'ParameterCoalescer',
]
