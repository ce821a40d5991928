from __future__ import annotations

import numpy as np

from .grid import CELL_DTYPE, Grid
from .seeds import SeedSet


def exact_owner_map(grid: Grid, seeds: SeedSet) -> np.ndarray:
    """
    Brute-force nearest seed for every cell, O(cells * seeds).

    Seeds are visited in id order and only a strictly closer seed replaces
    the current owner, so ties resolve to the lowest id exactly as in a pass.
    """
    ys, xs = np.indices(grid.shape, dtype=np.int64)
    owner = np.zeros(grid.shape, dtype=CELL_DTYPE)
    best_d = np.full(grid.shape, np.iinfo(np.int64).max, dtype=np.int64)
    for seed in seeds:
        d = (xs - seed.x) ** 2 + (ys - seed.y) ** 2
        closer = d < best_d
        owner[closer] = seed.id
        best_d[closer] = d[closer]
    return owner


def voronoi_noise(owner_map: np.ndarray, exact: np.ndarray) -> float:
    """Fraction of cells whose owner differs from the exact diagram."""
    if owner_map.shape != exact.shape:
        raise ValueError(f"Shape mismatch: {owner_map.shape} vs {exact.shape}")
    return float(np.count_nonzero(owner_map != exact)) / owner_map.size
