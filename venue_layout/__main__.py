import argparse
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional, Sequence

from venue_layout import (
    LayoutInputError,
    export_map_json,
    layout_report,
    params_from_dict,
    sector_from_dict,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _render_plot(sectors, path: str) -> None:
    from venue_layout.plot import render_sectors

    render_sectors(sectors, path, title=sectors[0].name if sectors else None)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lay out seats inside a venue sector")
    parser.add_argument("path", help="Path to a JSON file with 'sector' and 'params' objects")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--output",
        help="Write the flat JSON map snapshot to the given path",
    )
    parser.add_argument(
        "--plot",
        help="Write a PNG preview of the sector and its seats (needs matplotlib)",
    )
    parser.add_argument(
        "--map-name",
        default="Venue",
        help="Map name used in the JSON snapshot (default: Venue)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Loading layout request from %s", args.path)
    try:
        with open(args.path, encoding="utf-8") as fin:
            data = json.load(fin)
        if not isinstance(data, dict):
            raise LayoutInputError("input must be a JSON object")
        sector = sector_from_dict(data.get("sector", {}))
        params = params_from_dict(data.get("params", {}), sector_id=sector.id)
    except (OSError, json.JSONDecodeError, LayoutInputError) as exc:
        logger.error("Could not load %s: %s", args.path, exc)
        raise SystemExit(1)

    report = layout_report(sector.vertices, params, shape=sector.shape, curvature=sector.curvature)
    sector.seats = report.seats
    sector.layout_params = params

    if report.requested:
        logger.info("Placed %d of %d requested seat(s) (%s layout)", report.placed, report.requested, report.mode)
    else:
        logger.info("Placed %d seat(s) (%s layout)", report.placed, report.mode)
    if report.shortfall:
        logger.warning("%d seat(s) did not fit inside %r", report.shortfall, sector.name)

    per_row = Counter(seat.row for seat in report.seats)
    for row, count in per_row.items():
        print(f"{row}: {count}")
    print(f"total: {report.placed}")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(export_map_json([sector], name=args.map_name), encoding="utf-8")
        logger.info("Wrote snapshot to %s", output_path)

    if args.plot:
        _render_plot([sector], args.plot)


if __name__ == "__main__":
    main()
