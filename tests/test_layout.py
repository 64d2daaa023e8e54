import math
from collections import Counter

import pytest

from venue_layout.curvature import ArcBand, apply_curvature, curvature_regime
from venue_layout.hit_test import contained_in
from venue_layout.layout import admit_candidates, item_footprint, layout_report, layout_seats, plan_layout
from venue_layout.math_utils import bounds_from_vertices, point_in_polygon
from venue_layout.model import GridGeneratorParams, RowNumberingConfig, Sector, TableConfig
from venue_layout.shapes import SHAPE_IDS, shape_to_polygon
from venue_layout.types import Bounds

BOUNDS = Bounds(0.0, 0.0, 400.0, 300.0)


def _params(**overrides):
    base = dict(rows=4, cols=4, seat_size=14.0, row_spacing=2.0, col_spacing=2.0, sector_id="s1")
    base.update(overrides)
    return GridGeneratorParams(**base)


def _sector(shape="rectangle", curvature=0, bounds=BOUNDS):
    return Sector(id="s1", name="Test", vertices=apply_curvature(shape, bounds, curvature), shape=shape, curvature=curvature)


def _assert_all_contained(seats, sector, size=14.0):
    for seat in seats:
        center = (seat.x + size / 2.0, seat.y + size / 2.0)
        assert contained_in(center, sector), f"seat {seat.row}{seat.number} escaped"


def test_rectangle_grid_places_every_seat():
    sector = _sector()
    seats = layout_seats(sector.vertices, _params())

    assert len(seats) == 16
    rows = Counter(seat.row for seat in seats)
    assert rows == {"A": 4, "B": 4, "C": 4, "D": 4}
    for row in "ABCD":
        in_row = sorted((seat for seat in seats if seat.row == row), key=lambda seat: seat.x)
        assert [seat.number for seat in in_row] == ["1", "2", "3", "4"]
    _assert_all_contained(seats, sector)
    assert len({seat.id for seat in seats}) == 16
    assert all(seat.sector_id == "s1" for seat in seats)


def test_rectangle_grid_is_centred_in_bounds():
    seats = layout_seats(shape_to_polygon("rectangle", BOUNDS), _params())
    first = min(seats, key=lambda seat: (seat.y, seat.x))
    # 4 * (14 + 2) - 2 = 62 wide and tall
    assert math.isclose(first.x, 169.0)
    assert math.isclose(first.y, 119.0)
    assert first.row == "A" and first.number == "1"


def test_triangle_drops_candidates_outside():
    polygon = shape_to_polygon("triangle", BOUNDS)
    params = _params()
    plan = plan_layout(polygon, params, shape="triangle")
    admitted = admit_candidates(plan.candidates, polygon)
    seats = layout_seats(polygon, params, shape="triangle")

    assert len(plan.candidates) == 16
    assert 0 < len(seats) < 16
    assert len(seats) == len(admitted)
    kept = set(admitted)
    for candidate in plan.candidates:
        assert point_in_polygon(candidate.center, polygon) == (candidate in kept)


def test_partial_fit_reports_shortfall():
    polygon = shape_to_polygon("rectangle", Bounds(0, 0, 100, 100))
    report = layout_report(polygon, _params(rows=20, cols=20))
    assert report.requested == 400
    assert 0 < report.placed < 400
    assert report.shortfall == 400 - report.placed
    assert report.mode == "grid"


@pytest.mark.parametrize(
    "polygon, overrides",
    [
        ([(0, 0), (10, 0)], {}),
        (shape_to_polygon("rectangle", BOUNDS), {"rows": 0}),
        (shape_to_polygon("rectangle", BOUNDS), {"cols": -2}),
        (shape_to_polygon("rectangle", BOUNDS), {"seat_size": 0.0}),
    ],
)
def test_degenerate_input_gives_no_seats(polygon, overrides):
    assert layout_seats(polygon, _params(**overrides)) == []


def test_scan_mode_fills_bounding_box():
    polygon = shape_to_polygon("rectangle", Bounds(0, 0, 200, 100))
    report = layout_report(polygon, _params(rows=None, cols=None))
    assert report.mode == "scan"
    assert report.requested == 0
    # 10 seats per band, 4 bands between the one-seat padding
    assert report.placed == 40
    assert sorted(set(seat.row for seat in report.seats)) == ["A", "B", "C", "D"]


def test_scan_mode_compacts_labels_after_admission():
    polygon = shape_to_polygon("triangle", BOUNDS)
    seats = layout_seats(polygon, _params(rows=None, cols=None), shape="triangle")
    rows = sorted({seat.row for seat in seats}, key=lambda label: (len(label), label))
    assert rows[0] == "A"
    for row in rows:
        numbers = sorted(int(seat.number) for seat in seats if seat.row == row)
        assert numbers == list(range(1, len(numbers) + 1))


@pytest.mark.parametrize("shape", SHAPE_IDS)
def test_seats_are_contained_for_every_shape(shape):
    sector = _sector(shape)
    seats = layout_seats(sector.vertices, _params(rows=None, cols=None), shape=shape)
    _assert_all_contained(seats, sector)


def test_seats_per_row_and_alignment():
    polygon = shape_to_polygon("rectangle", BOUNDS)
    left = layout_seats(polygon, _params(rows=2, seats_per_row=[2, 4], row_alignment="left"))
    row_a = sorted(seat.x for seat in left if seat.row == "A")
    row_b = sorted(seat.x for seat in left if seat.row == "B")
    assert row_a == [169.0, 185.0]
    assert row_b[0] == 169.0 and len(row_b) == 4

    centred = layout_seats(polygon, _params(rows=2, seats_per_row=[2, 4]))
    assert sorted(seat.x for seat in centred if seat.row == "A") == [185.0, 201.0]

    right = layout_seats(polygon, _params(rows=2, seats_per_row=[2, 4], row_alignment="right"))
    assert sorted(seat.x for seat in right if seat.row == "A") == [201.0, 217.0]


def test_requested_count_uses_seats_per_row():
    assert _params(rows=3, seats_per_row=[2, 5]).requested_count == 2 + 5 + 4


def test_grid_rotation_turns_rows_about_bounds_centre():
    polygon = shape_to_polygon("rectangle", Bounds(0, 0, 400, 400))
    seats = layout_seats(polygon, _params(rows=1, cols=3, rotation=90.0))
    assert len(seats) == 3
    for seat in seats:
        assert math.isclose(seat.x + 7.0, 200.0, abs_tol=1e-9)
        assert seat.rotation == 90.0
    ys = sorted(seat.y + 7.0 for seat in seats)
    assert [round(y, 9) for y in ys] == [184.0, 200.0, 216.0]


def test_edge_bend_uses_curved_grid():
    sector = _sector("rectangle", curvature=20)
    plan = plan_layout(sector.vertices, _params(), shape="rectangle", curvature=20)
    assert plan.mode == "curved-grid"

    seats = layout_seats(sector.vertices, _params(), shape="rectangle", curvature=20)
    assert len(seats) == 16
    _assert_all_contained(seats, sector)
    row_a = sorted((seat for seat in seats if seat.row == "A"), key=lambda seat: seat.x)
    # middle of the row sags further than its ends
    assert row_a[1].y > row_a[0].y
    assert row_a[0].rotation > 0.0 > row_a[-1].rotation


@pytest.mark.parametrize("shape, curvature", [("arc", 0), ("rectangle", 50), ("rectangle", 90)])
def test_radial_layout_stays_inside_band(shape, curvature):
    sector = _sector(shape, curvature)
    params = _params(rows=3, cols=10)
    report = layout_report(sector.vertices, params, shape=shape, curvature=curvature)

    assert report.mode == "radial"
    assert report.placed > 0
    assert {seat.row for seat in report.seats} <= {"A", "B", "C"}
    _assert_all_contained(report.seats, sector)

    band = ArcBand.fit_polygon_bounds(bounds_from_vertices(sector.vertices), curvature_regime(shape, curvature))

    def _mean_radius(row):
        radii = [
            math.hypot(seat.x + 7.0 - band.center_x, seat.y + 7.0 - band.center_y)
            for seat in report.seats
            if seat.row == row
        ]
        return sum(radii) / len(radii)

    assert _mean_radius("A") < _mean_radius("C")


def test_radial_seats_face_band_centre():
    sector = _sector("arc")
    seats = layout_seats(sector.vertices, _params(rows=1, cols=5), shape="arc")
    assert len(seats) == 5
    middle = sorted(seats, key=lambda seat: seat.x)[2]
    assert math.isclose(middle.rotation, 0.0, abs_tol=1e-9)


def test_table_furniture_uses_table_footprint():
    table = TableConfig(shape="square", chair_count=4, table_width=60.0, table_height=60.0)
    params = _params(rows=2, cols=3, furniture_type="table", table_config=table)
    foot = item_footprint(params)
    assert (foot.box_width, foot.step_width) == (60.0, 90.0)

    seats = layout_seats(shape_to_polygon("rectangle", BOUNDS), params)
    assert len(seats) == 6
    assert all(seat.furniture_type == "table" and seat.table_config == table for seat in seats)
    # 3 * (90 + 2) - 2 = 274 wide, centre of first table at 63 + 45
    assert math.isclose(min(seat.x for seat in seats), 78.0)


def test_blocked_seat_type_starts_blocked():
    seats = layout_seats(shape_to_polygon("rectangle", BOUNDS), _params(seat_type="blocked"))
    assert {seat.status for seat in seats} == {"blocked"}
    seats = layout_seats(shape_to_polygon("rectangle", BOUNDS), _params(seat_type="vip"))
    assert {seat.status for seat in seats} == {"available"}


def test_row_numbering_override_and_prefix():
    params = _params(
        seat_label_type="custom-per-row",
        prefix="P-",
        row_numbering={"B": RowNumberingConfig("B", type="reverse", start_number=1)},
    )
    seats = layout_seats(shape_to_polygon("rectangle", BOUNDS), params)

    def _numbers(row):
        return [seat.number for seat in sorted((s for s in seats if s.row == row), key=lambda s: s.x)]

    assert _numbers("P-A") == ["1", "2", "3", "4"]
    assert _numbers("P-B") == ["4", "3", "2", "1"]


def test_row_numbering_override_applies_to_any_label_type():
    params = _params(row_numbering={"B": RowNumberingConfig("B", type="reverse", start_number=1, rename="BB")})
    seats = layout_seats(shape_to_polygon("rectangle", BOUNDS), params)

    rows = sorted({seat.row for seat in seats})
    assert rows == ["A", "BB", "C", "D"]
    renamed = sorted((seat for seat in seats if seat.row == "BB"), key=lambda seat: seat.x)
    assert [seat.number for seat in renamed] == ["4", "3", "2", "1"]


def test_thin_radial_band_places_one_ring():
    sector = _sector("arc", bounds=Bounds(0.0, 0.0, 60.0, 60.0))
    seats = layout_seats(sector.vertices, _params(rows=4, cols=3), shape="arc")

    positions = [(round(seat.x, 6), round(seat.y, 6)) for seat in seats]
    assert seats
    assert len(positions) == len(set(positions))
    assert {seat.row for seat in seats} == {"A"}
