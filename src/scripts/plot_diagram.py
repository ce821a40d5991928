# src/scripts/plot_diagram.py
import argparse
import os
import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from jump_flood import utils  # type: ignore[import]


def format_title(meta):
    """
    Title string with the run's key parameters.
    """
    if not meta:
        return None
    parts = [
        f"{meta.get('width', '?')}x{meta.get('height', '?')}",
        f"N={meta.get('n_seed', '?')}",
        f"seed={meta.get('rng_seed', '?')}",
        f"backend={meta.get('backend', '?')}",
    ]
    noise = meta.get("voronoi_noise")
    if noise is not None:
        parts.append(f"noise={100.0 * noise:.2f}%")
    unassigned = meta.get("unassigned")
    if unassigned:
        parts.append(f"unassigned={unassigned}")
    return ", ".join(parts)


def render(result, title=None, output=None, show_seeds=True, dpi=200, show=False):
    """
    Draw a diagram's color map, optionally with the seed positions on top.

    Args:
        result: VoronoiResult with ``colors`` (and ``seed_positions`` for markers)
        title: Optional title string
        output: Output file path (None to skip saving)
        show_seeds: Mark every seed with a small cross
        dpi: DPI for output
        show: Open an interactive window
    """
    if result.colors is None:
        raise ValueError("Result has no color map to plot.")
    colors = np.asarray(result.colors)
    h, w = colors.shape[:2]

    fig, ax = plt.subplots(figsize=(6, 6 * h / max(w, 1)))
    # cell centers at integer coordinates, row 0 at the top
    ax.imshow(colors, interpolation="nearest", origin="upper",
              extent=(-0.5, w - 0.5, h - 0.5, -0.5))

    if show_seeds and result.seed_positions is not None:
        pos = np.asarray(result.seed_positions)
        ax.scatter(pos[:, 0], pos[:, 1], marker="x", s=30, c="white", linewidths=1.5)
        ax.scatter(pos[:, 0], pos[:, 1], marker="x", s=12, c="black", linewidths=0.8)

    ax.set_aspect("equal")
    ax.axis("off")
    if title:
        ax.set_title(title, pad=10)

    if output:
        os.makedirs(os.path.dirname(output) if os.path.dirname(output) else ".", exist_ok=True)
        plt.savefig(output, dpi=dpi, bbox_inches="tight", pad_inches=0.1)
        print(f"Saved figure to {output} ({w}x{h} cells @ {dpi} DPI)")

    if show:
        plt.show()
    plt.close(fig)


def main():
    parser = argparse.ArgumentParser(description="Plot a saved jump flood diagram .npz")
    parser.add_argument("file", help="Path to .npz result file")
    parser.add_argument("--out", default=None,
                        help="Output image path (PNG, auto-generated if not provided)")
    parser.add_argument("--no-seeds", action="store_true", help="Do not mark seed positions")
    parser.add_argument("--dpi", type=int, default=200, help="DPI for output file (default: 200)")
    parser.add_argument("--show", action="store_true", help="Show plot interactively")
    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"Error: file not found: {args.file}")
        return 1

    if args.out is None:
        input_path = Path(args.file)
        args.out = str(input_path.parent / f"{input_path.stem}_plot.png")

    result = utils.load_result(args.file)
    render(
        result,
        title=format_title(result.meta),
        output=args.out,
        show_seeds=not args.no_seeds,
        dpi=args.dpi,
        show=args.show,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
