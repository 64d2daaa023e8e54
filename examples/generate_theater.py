"""Example pipeline: build a small theatre, bend the balcony and export the map."""

from venue_layout import EditorSession, GridGeneratorParams, RowNumberingConfig, export_map_json
from venue_layout.types import Bounds


def main() -> None:
    session = EditorSession()

    stalls = session.create_sector("trapezoid", Bounds(0, 300, 600, 300), name="Stalls")
    report = session.generate_seats(
        stalls.sector_id,
        GridGeneratorParams(rows=10, cols=24, seat_label_type="odd-left", row_alignment="center"),
    )
    print(f"Stalls: {report.placed}/{report.requested} seats ({report.mode})")

    balcony = session.create_sector("rectangle", Bounds(0, 0, 600, 220), name="Balcony", curvature=25)
    report = session.generate_seats(
        balcony.sector_id,
        GridGeneratorParams(rows=5, cols=22, row_label_start="AA", prefix="BAL-"),
    )
    print(f"Balcony: {report.placed}/{report.requested} seats ({report.mode})")

    session.apply_row_numbering(
        balcony.sector_id,
        "BAL-AA",
        RowNumberingConfig("BAL-AA", type="numeric", start_number=101, direction="rtl"),
    )

    # slider drag: three quick updates, one history entry after the window closes
    for value in (40, 60, 85):
        session.set_curvature(balcony.sector_id, value)
    session.flush()
    sector = session.get_sector(balcony.sector_id)
    print(f"Balcony after bending: {len(sector.vertices)} vertices, {len(sector.seats)} seats")

    print(export_map_json(session.sectors, map_id="example", name="Example Theatre")[:400] + "...")


if __name__ == "__main__":
    main()
