"""Matplotlib previews of sectors and their seats (requires the ``plot`` extra)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from .hit_test import to_world
from .model import Sector
from .reshape import seat_center, seat_extent

logger = logging.getLogger(__name__)

_SEAT_COLORS = {
    "normal": "#1f77b4",
    "pcd": "#2ca02c",
    "companion": "#17becf",
    "obeso": "#9467bd",
    "vip": "#ff7f0e",
    "blocked": "#7f7f7f",
}


def render_sectors(
    sectors: Sequence[Sector],
    path: Union[str, Path],
    *,
    title: Optional[str] = None,
    item_size: Optional[float] = None,
    label_rows: bool = True,
) -> Path:
    """Draw the sectors (rotated as displayed) and their seats to an image file."""

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from matplotlib.patches import Polygon as PolygonPatch

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(6, 6))
    xs = []
    ys = []
    for sector in sectors:
        if not sector.visible or len(sector.vertices) < 3:
            continue
        outline = [to_world(vertex, sector) for vertex in sector.vertices]
        xs.extend(v.x for v in outline)
        ys.extend(v.y for v in outline)
        ax.add_patch(
            PolygonPatch(
                [(v.x, v.y) for v in outline],
                closed=True,
                fill=True,
                alpha=0.15 * sector.opacity,
                edgecolor="#333333",
                linewidth=1.0,
            )
        )
        size = item_size if item_size is not None else sector.item_size
        first_in_row = {}
        for seat in sector.seats:
            center = to_world(seat_center(seat, size), sector)
            width, _ = seat_extent(seat, size)
            ax.scatter(
                [center.x],
                [center.y],
                s=max(width, 4.0) * 1.5,
                c=_SEAT_COLORS.get(seat.type, "#1f77b4"),
                marker="o" if seat.furniture_type in ("table", "bistro") else "s",
            )
            if seat.row not in first_in_row or center.x < first_in_row[seat.row].x:
                first_in_row[seat.row] = center
        if label_rows:
            for row, center in first_in_row.items():
                ax.text(center.x - size, center.y, row, fontsize=6, ha="right", va="center")

    if xs and ys:
        span = max(max(xs) - min(xs), max(ys) - min(ys), 1.0)
        ax.set_xlim(min(xs) - 0.05 * span, max(xs) + 0.05 * span)
        ax.set_ylim(max(ys) + 0.05 * span, min(ys) - 0.05 * span)
    ax.set_aspect("equal", adjustable="box")
    if title:
        ax.set_title(title)
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.5)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    logger.info("Wrote preview to %s", path)
    return path


__all__ = ["render_sectors"]
