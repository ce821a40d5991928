# src/jump_flood/grid.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import ConfigError

UNASSIGNED: int = -1
CELL_DTYPE = np.int32


@dataclass(frozen=True)
class Grid:
    """Rectangular domain of ``width * height`` cells addressed by ``(x, y)``."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise ConfigError(
                f"Grid dimensions must be positive, got {self.width}x{self.height}"
            )

    @property
    def shape(self) -> Tuple[int, int]:
        """Buffer shape, rows first (row-major, ``[y, x]`` indexing)."""
        return (self.height, self.width)

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def empty_buffer(self) -> np.ndarray:
        return np.full(self.shape, UNASSIGNED, dtype=CELL_DTYPE)


def seed_buffer(buffer: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """
    Write the initial assignment into ``buffer``: every cell unassigned except
    the seed cells, which own themselves. Seeds are written in id order so a
    later seed sharing a position overwrites the earlier one.
    """
    buffer.fill(UNASSIGNED)
    for seed_id in range(len(xs)):
        buffer[ys[seed_id], xs[seed_id]] = seed_id
    return buffer
