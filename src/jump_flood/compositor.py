# src/jump_flood/compositor.py
from __future__ import annotations

from typing import Tuple

import numpy as np

from .grid import Grid, UNASSIGNED
from .seeds import SeedSet

# transparent black
BACKGROUND = np.array([0.0, 0.0, 0.0, 0.0], dtype=np.float32)
START_BACKGROUND = np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32)


def composite(owner_map: np.ndarray, seeds: SeedSet) -> Tuple[np.ndarray, int]:
    """
    Color every cell with its owner's color.

    Returns the ``(height, width, 4)`` float32 RGBA map (read-only) and the
    number of cells that had no owner. Those cells get ``BACKGROUND``; the
    count lets the caller report them instead of failing.
    """
    owner_map = np.asarray(owner_map)
    unassigned = owner_map == UNASSIGNED
    if np.any((owner_map < UNASSIGNED) | (owner_map >= len(seeds))):
        raise ValueError("Owner map references seed ids outside the seed set")

    palette = np.vstack([seeds.colors, BACKGROUND[None, :]])
    # UNASSIGNED (-1) picks the appended background row
    colors = palette[owner_map]
    colors.setflags(write=False)
    return colors, int(np.count_nonzero(unassigned))


def render_seeds(grid: Grid, seeds: SeedSet) -> np.ndarray:
    """Starting image: opaque black with each seed's pixel in its own color."""
    colors = np.empty(grid.shape + (4,), dtype=np.float32)
    colors[...] = START_BACKGROUND
    for seed in seeds:
        colors[seed.y, seed.x] = seed.color
    return colors


def to_rgba8(colors: np.ndarray) -> np.ndarray:
    """Float RGBA in [0, 1] to 8-bit channels, truncating like a C cast."""
    scaled = np.clip(np.asarray(colors, dtype=np.float32), 0.0, 1.0) * 255.0
    return scaled.astype(np.uint8)
