from __future__ import annotations

from pathlib import Path
from typing import Mapping

import matplotlib
matplotlib.use("Agg")  # headless-safe for servers/CI
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.patches import Rectangle  # noqa: E402

from ensemble.catalog import DEFAULT_CATALOG, FixtureSpec
from ensemble.schema import Design, Room
from ensemble.units import PIXELS_PER_FOOT


def plot_design(
    design: Design,
    room: Room,
    outpath: Path,
    catalog: Mapping[str, FixtureSpec] = DEFAULT_CATALOG,
) -> Path:
    """
    Save a plan view of the room: boundary, furniture, and fixtures colored by kind.
    Linear fixtures are drawn as a short run along the top wall from their anchor.
    """
    outpath = Path(outpath).expanduser().resolve()
    outpath.parent.mkdir(parents=True, exist_ok=True)
    x1, y1, x2, y2 = room.boundary

    fig = plt.figure(figsize=(8, 6))
    ax = fig.add_subplot(111)
    ax.add_patch(Rectangle((x1, y1), x2 - x1, y2 - y1, fill=False, edgecolor="black", linewidth=1.5))

    for obj in room.objects:
        ax.plot(obj.position[0], obj.position[1], marker="s", color="lightgrey", markersize=10)
        ax.annotate(obj.type, obj.position, fontsize=6, color="grey", ha="center", va="top")

    plotted = set()
    for fx in design.fixtures:
        spec = catalog.get(fx.kind)
        color = spec.color if spec is not None else "#888888"
        label = fx.kind if fx.kind not in plotted else None
        plotted.add(fx.kind)
        x, y = fx.position
        if spec is not None and spec.is_linear:
            run_px = min(float(fx.length or 10.0) * PIXELS_PER_FOOT, x2 - x)
            ax.plot([x, x + max(run_px, 0.0)], [y, y], color=color, linewidth=3, label=label)
        else:
            ax.plot(x, y, marker="o", color=color, markersize=8, markeredgecolor="black", linestyle="", label=label)

    ax.set_xlim(x1 - 20, x2 + 20)
    ax.set_ylim(y2 + 20, y1 - 20)  # image coordinates: y grows downward
    ax.set_aspect("equal")
    ax.set_title(f"{room.name or room.id}: {len(design.fixtures)} fixtures, ${design.total_cost}")
    if plotted:
        ax.legend(loc="best", fontsize=7)
    fig.tight_layout()
    fig.savefig(outpath, dpi=150)
    plt.close(fig)
    return outpath
