import math

import pytest

from venue_layout.config import LayoutConfig
from venue_layout.curvature import apply_curvature
from venue_layout.hit_test import to_world
from venue_layout.model import GridGeneratorParams, RowNumberingConfig, Sector
from venue_layout.session import EditorSession, History, ParameterCoalescer
from venue_layout.shapes import shape_to_polygon
from venue_layout.types import SECTOR_COLORS, Bounds


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _session(**kwargs):
    clock = _Clock()
    return EditorSession(clock=clock, **kwargs), clock


def _with_seats(session, shape="rectangle", bounds=Bounds(0, 0, 400, 300), **params):
    result = session.create_sector(shape, bounds)
    assert result.ok
    options = dict(rows=4, cols=4, row_spacing=2.0, col_spacing=2.0)
    options.update(params)
    report = session.generate_seats(result.sector_id, GridGeneratorParams(**options))
    return result.sector_id, report


def test_history_push_undo_redo():
    first = [Sector(id="a", name="A", vertices=[])]
    history = History([], limit=50)
    history.push(first)
    assert history.can_undo and not history.can_redo
    first[0].name = "mutated"
    assert history.present[0].name == "A"

    assert history.undo() == []
    assert history.can_redo
    redone = history.redo()
    assert [sector.name for sector in redone] == ["A"]

    history.undo()
    history.push([])
    assert not history.can_redo


def test_history_is_bounded():
    history = History([], limit=3)
    for idx in range(5):
        history.push([Sector(id=str(idx), name=str(idx), vertices=[])])
    assert len(history) == 3
    steps = 0
    while history.undo() is not None:
        steps += 1
    assert steps == 3


def test_coalescer_commits_final_value_once():
    clock = _Clock()
    previews = []
    commits = []
    coalescer = ParameterCoalescer(
        lambda key, value: commits.append((key, value)),
        preview=lambda key, value: previews.append(value),
        delay=0.15,
        clock=clock,
    )
    for value in (10, 20, 30):
        coalescer.submit("curvature", value)
        clock.now += 0.05
    assert previews == [10, 20, 30]
    assert coalescer.poll() == 0
    assert commits == []

    clock.now += 0.2
    assert coalescer.poll() == 1
    assert commits == [("curvature", 30)]
    assert coalescer.poll() == 0


def test_coalescer_flush_forces_pending_commit():
    commits = []
    coalescer = ParameterCoalescer(lambda key, value: commits.append(value), delay=10.0, clock=_Clock())
    coalescer.submit("rotation", 45.0)
    assert coalescer.pending == {"rotation"}
    assert coalescer.flush() == 1
    assert commits == [45.0]
    assert not coalescer.pending


def test_create_sector_validates_and_cycles_colours():
    session, _ = _session()
    assert not session.create_sector("rectangle", Bounds(0, 0, 5, 100)).ok
    assert session.sectors == []

    for idx in range(len(SECTOR_COLORS) + 1):
        assert session.create_sector("hexagon", Bounds(idx * 10, 0, 100, 100)).ok
    colours = [sector.color for sector in session.sectors]
    assert colours[: len(SECTOR_COLORS)] == list(SECTOR_COLORS)
    assert colours[-1] == SECTOR_COLORS[0]
    assert session.sectors[0].name == "Sector 1"
    assert len(session.sectors[0].vertices) == 6


def test_create_sector_normalises_negative_drag():
    session, _ = _session()
    result = session.create_sector("rectangle", Bounds(100, 100, -60, -40))
    assert result.ok
    assert session.get_sector(result.sector_id).bounds == Bounds(40, 60, 60, 40)


def test_generate_seats_and_undo_redo():
    session, _ = _session()
    sector_id, report = _with_seats(session)
    assert report.placed == 16
    sector = session.get_sector(sector_id)
    assert len(sector.seats) == 16
    assert sector.layout_params.sector_id == sector_id
    assert all(seat.sector_id == sector_id for seat in sector.seats)

    assert session.undo()
    assert session.get_sector(sector_id).seats == []
    assert session.redo()
    assert len(session.get_sector(sector_id).seats) == 16
    assert session.undo() and session.undo()
    assert session.sectors == []
    assert not session.undo()


def test_vertex_drag_commits_once():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    depth = len(session.history)

    assert session.begin_vertex_drag(sector_id, (400.0, 300.0))
    for step in range(1, 4):
        result = session.update_drag((400.0 + 20 * step, 300.0 + 10 * step))
        assert result.ok
    assert len(session.history) == depth
    assert session.end_drag()
    assert len(session.history) == depth + 1

    sector = session.get_sector(sector_id)
    assert sector.vertices[2] == (460.0, 330.0)
    assert sector.frame is None
    assert len(sector.seats) == 16


def test_vertex_drag_reprojects_from_captured_state():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    original = {seat.id: (seat.x, seat.y) for seat in session.get_sector(sector_id).seats}

    session.begin_vertex_drag(sector_id, (400.0, 300.0))
    session.update_drag((600.0, 500.0))
    session.update_drag((400.0, 300.0))
    session.end_drag()

    seats = session.get_sector(sector_id).seats
    for seat in seats:
        x, y = original[seat.id]
        assert math.isclose(seat.x, x) and math.isclose(seat.y, y)


def test_cancel_drag_restores_sector():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    before = session.get_sector(sector_id).vertices
    session.begin_sector_move(sector_id, (10.0, 10.0))
    session.update_drag((60.0, 10.0))
    assert session.get_sector(sector_id).vertices[0] == (50.0, 0.0)
    session.cancel_drag()
    assert session.get_sector(sector_id).vertices == before
    assert not session.dragging


def test_sector_move_translates_seats():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    seats_before = {seat.id: seat.x for seat in session.get_sector(sector_id).seats}
    session.begin_sector_move(sector_id, (0.0, 0.0))
    session.update_drag((30.0, 0.0))
    session.end_drag()
    for seat in session.get_sector(sector_id).seats:
        assert math.isclose(seat.x, seats_before[seat.id] + 30.0)


def test_seat_drag_moves_only_selected_seats():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    seats = session.get_sector(sector_id).seats
    chosen = seats[0]
    session.select_seats([chosen.id])
    assert session.begin_seat_drag(sector_id, (0.0, 0.0))
    session.update_drag((5.0, -3.0))
    assert session.end_drag()
    after = {seat.id: seat for seat in session.get_sector(sector_id).seats}
    assert (after[chosen.id].x, after[chosen.id].y) == (chosen.x + 5.0, chosen.y - 3.0)
    assert (after[seats[1].id].x, after[seats[1].id].y) == (seats[1].x, seats[1].y)


def test_begin_drag_without_hit_returns_false():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    assert not session.begin_vertex_drag(sector_id, (200.0, 150.0))
    assert not session.begin_seat_drag(sector_id, (0.0, 0.0))
    assert not session.end_drag()
    assert not session.update_drag((1.0, 1.0)).ok


def test_curvature_slider_burst_commits_once():
    session, clock = _session()
    sector_id, _ = _with_seats(session)
    depth = len(session.history)

    for value in (10, 20, 30):
        assert session.set_curvature(sector_id, value).ok
        clock.now += 0.05
        assert session.get_sector(sector_id).curvature == value
    assert session.poll() == 0
    assert len(session.history) == depth

    clock.now += 1.0
    assert session.poll() == 1
    assert len(session.history) == depth + 1
    sector = session.get_sector(sector_id)
    assert sector.vertices == apply_curvature("rectangle", Bounds(0, 0, 400, 300), 30)
    assert len(sector.seats) == 16
    assert all(seat.rotation != 0.0 for seat in sector.seats if seat.number in ("1", "4"))


def test_curvature_preview_does_not_drift():
    session, clock = _session()
    result = session.create_sector("rectangle", Bounds(0, 0, 400, 300))
    for value in (60, 10, 60, 0):
        session.set_curvature(result.sector_id, value)
    clock.now += 1.0
    session.poll()
    assert session.get_sector(result.sector_id).vertices == shape_to_polygon("rectangle", Bounds(0, 0, 400, 300))


def test_rotation_and_spacing_sliders():
    session, clock = _session()
    sector_id, _ = _with_seats(session)
    session.set_rotation(sector_id, 15.0)
    session.set_spacing(sector_id, col_spacing=10.0)
    sector = session.get_sector(sector_id)
    assert sector.rotation == 15.0
    assert sector.layout_params.col_spacing == 10.0
    clock.now += 1.0
    assert session.poll() == 2
    xs = sorted({seat.x for seat in session.get_sector(sector_id).seats})
    assert math.isclose(xs[1] - xs[0], 24.0)


def test_spacing_needs_layout():
    session, _ = _session()
    result = session.create_sector("rectangle", Bounds(0, 0, 100, 100))
    assert not session.set_spacing(result.sector_id, row_spacing=3.0).ok


def test_undo_flushes_pending_slider():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    session.set_rotation(sector_id, 30.0)
    assert session.undo()
    assert session.get_sector(sector_id).rotation == 0.0


def test_remove_vertex_rejected_on_triangle():
    session, _ = _session()
    result = session.create_sector("triangle", Bounds(0, 0, 100, 100))
    depth = len(session.history)
    rejected = session.remove_vertex(result.sector_id, 0)
    assert not rejected.ok
    assert len(session.history) == depth
    assert len(session.get_sector(result.sector_id).vertices) == 3


def test_insert_vertex_and_resize():
    session, _ = _session()
    result = session.create_sector("rectangle", Bounds(0, 0, 100, 100))
    inserted = session.insert_vertex(result.sector_id, (50.0, 2.0))
    assert inserted.ok and len(inserted.vertices) == 5

    resized = session.resize_sector(result.sector_id, Bounds(0, 0, 200, 100))
    assert resized.ok
    sector = session.get_sector(result.sector_id)
    assert len(sector.vertices) == 5
    assert sector.bounds.width == pytest.approx(200.0)
    assert not session.resize_sector(result.sector_id, Bounds(0, 0, 1, 1)).ok


def test_set_shape_keeps_frame():
    session, _ = _session()
    result = session.create_sector("rectangle", Bounds(0, 0, 400, 300))
    assert session.set_shape(result.sector_id, "hexagon").ok
    assert session.get_sector(result.sector_id).vertices == shape_to_polygon("hexagon", Bounds(0, 0, 400, 300))
    assert not session.set_shape(result.sector_id, "blob").ok


def test_locked_sector_rejects_edits():
    session, _ = _session()
    result = session.create_sector("rectangle", Bounds(0, 0, 100, 100))
    session.get_sector(result.sector_id).locked = True
    assert not session.move_sector(result.sector_id, 10, 10).ok
    assert not session.set_curvature(result.sector_id, 50).ok
    assert not session.begin_sector_move(result.sector_id, (0.0, 0.0))
    assert session.generate_seats(result.sector_id, GridGeneratorParams()) is None


def test_update_seats_and_blocking():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    ids = [seat.id for seat in session.get_sector(sector_id).seats[:3]]
    assert session.update_seats(ids, type="blocked") == 3
    changed = [seat for seat in session.get_sector(sector_id).seats if seat.id in ids]
    assert {(seat.type, seat.status) for seat in changed} == {("blocked", "blocked")}
    assert session.update_seats(ids[:1], price=25.0, category_id="gold") == 1
    with pytest.raises(TypeError):
        session.update_seats(ids, row="Z")


def test_apply_row_numbering_relabels_by_x():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    config = RowNumberingConfig("B", type="reverse", start_number=1)
    assert session.apply_row_numbering(sector_id, "B", config, new_label="BB").ok

    sector = session.get_sector(sector_id)
    assert [seat.number for seat in sector.seats_in_row("BB")] == ["4", "3", "2", "1"]
    assert sector.seats_in_row("B") == []
    assert sector.layout_params.row_numbering["B"].rename == "BB"
    assert not session.apply_row_numbering(sector_id, "Q", config).ok


def test_row_numbering_survives_regeneration():
    session, clock = _session()
    sector_id, _ = _with_seats(session)
    session.apply_row_numbering(sector_id, "B", RowNumberingConfig("B", type="reverse", start_number=1))
    session.regenerate_seats(sector_id)
    assert [seat.number for seat in session.get_sector(sector_id).seats_in_row("B")] == ["4", "3", "2", "1"]

    session.apply_row_numbering(sector_id, "B", RowNumberingConfig("B", start_number=11), new_label="BB")
    session.regenerate_seats(sector_id)
    sector = session.get_sector(sector_id)
    assert sorted({seat.row for seat in sector.seats}) == ["A", "BB", "C", "D"]
    assert [seat.number for seat in sector.seats_in_row("BB")] == ["11", "12", "13", "14"]

    session.apply_row_numbering(sector_id, "BB", RowNumberingConfig("BB", type="reverse", start_number=1))
    assert set(session.get_sector(sector_id).layout_params.row_numbering) == {"B"}

    session.set_curvature(sector_id, 20)
    clock.now += 1.0
    assert session.poll() == 1
    sector = session.get_sector(sector_id)
    assert [seat.number for seat in sector.seats_in_row("BB")] == ["4", "3", "2", "1"]
    assert [seat.number for seat in sector.seats_in_row("A")] == ["1", "2", "3", "4"]


def test_duplicate_and_delete_selection():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    session.select_sector(sector_id)
    created = session.duplicate_selection()
    assert len(created) == 1
    assert len(session.sectors) == 2
    assert session.selection.sector_ids == set(created)
    clone = session.get_sector(created[0])
    assert clone.vertices[0] == (50.0, 50.0)

    assert session.delete_selection() == 1
    assert [sector.id for sector in session.sectors] == [sector_id]


def test_delete_selected_seats_first():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    seats = session.get_sector(sector_id).seats
    session.select_sector(sector_id)
    session.select_seats([seats[0].id, seats[1].id], additive=True)
    assert session.delete_selection() == 2
    assert len(session.get_sector(sector_id).seats) == 14
    assert session.get_sector(sector_id) is not None


def test_box_selection_uses_displayed_positions():
    session, _ = _session()
    sector_id, _ = _with_seats(session)
    sector = session.get_sector(sector_id)
    assert session.select_seats_in_box(Bounds(160, 110, 40, 40)) == 4

    session.get_sector(sector_id).rotation = 180.0
    first = min(sector.seats, key=lambda seat: (seat.y, seat.x))
    center = to_world((first.x + 7.0, first.y + 7.0), session.get_sector(sector_id))
    found = session.select_seats_in_box(Bounds(center.x - 1, center.y - 1, 2, 2))
    assert found == 1
    assert session.selection.seat_ids == {first.id}


def test_snapshot_has_flat_export_shape():
    session, _ = _session(config=LayoutConfig(history_limit=5))
    _with_seats(session)
    snapshot = session.snapshot(map_id="m1", name="Hall")
    assert snapshot["id"] == "m1"
    assert len(snapshot["sectors"][0]["seats"]) == 16
    assert session.history.limit == 5
