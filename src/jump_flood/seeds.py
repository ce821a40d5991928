from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

import numpy as np

from .errors import ConfigError
from .grid import Grid

Color = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Seed:
    id: int
    x: int
    y: int
    color: Color = (1.0, 1.0, 1.0, 1.0)


class SeedSet:
    """
    Ordered, immutable collection of seeds.

    Seed ids are required to be ``0..n-1`` in order: the propagation kernels
    use an id directly as an index into ``xs``/``ys``/``colors``.
    """

    def __init__(self, seeds: Sequence[Seed]) -> None:
        seeds = tuple(seeds)
        if not seeds:
            raise ConfigError("A seed set needs at least one seed")
        for index, seed in enumerate(seeds):
            if seed.id != index:
                raise ConfigError(
                    f"Seed ids must be 0..{len(seeds) - 1} in ascending order, "
                    f"found id {seed.id} at position {index}"
                )
        self._seeds = seeds

        self.xs = np.array([s.x for s in seeds], dtype=np.int64)
        self.ys = np.array([s.y for s in seeds], dtype=np.int64)
        self.colors = np.array([s.color for s in seeds], dtype=np.float32)
        for arr in (self.xs, self.ys, self.colors):
            arr.setflags(write=False)

    def __len__(self) -> int:
        return len(self._seeds)

    def __iter__(self) -> Iterator[Seed]:
        return iter(self._seeds)

    def __getitem__(self, index: int) -> Seed:
        return self._seeds[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SeedSet):
            return NotImplemented
        return self._seeds == other._seeds

    def check_within(self, grid: Grid) -> None:
        """Raise ConfigError if any seed lies outside ``grid``."""
        for seed in self._seeds:
            if not grid.contains(seed.x, seed.y):
                raise ConfigError(
                    f"Seed {seed.id} at ({seed.x}, {seed.y}) lies outside the "
                    f"{grid.width}x{grid.height} grid"
                )

    def table(self) -> str:
        """Human-readable listing; colors are shown on the 0-255 scale."""
        lines = [" seed    x    y      R      G      B"]
        for seed in self._seeds:
            r, g, b, _ = seed.color
            lines.append(
                f" {seed.id:4d} {seed.x:4d} {seed.y:4d} "
                f"{r * 255.0:6.2f} {g * 255.0:6.2f} {b * 255.0:6.2f}"
            )
        return "\n".join(lines)


def generate_seeds(n: int, width: int, height: int, rng_seed: int) -> SeedSet:
    """
    Draw ``n`` seeds uniformly over a ``width x height`` grid.

    The random stream is consumed in a fixed order: all colors first (r, g, b
    per seed), then all positions (x, y per seed). Identical arguments always
    give an identical SeedSet.
    """
    if n <= 0:
        raise ConfigError(f"Seed count must be positive, got {n}")
    if rng_seed < 0:
        raise ConfigError(f"rng_seed must be non-negative, got {rng_seed}")
    grid = Grid(width, height)

    rng = np.random.default_rng(rng_seed)
    rgb = rng.random((n, 3))
    positions = rng.integers(0, [grid.width, grid.height], size=(n, 2))

    seeds = [
        Seed(
            id=i,
            x=int(positions[i, 0]),
            y=int(positions[i, 1]),
            color=(float(rgb[i, 0]), float(rgb[i, 1]), float(rgb[i, 2]), 1.0),
        )
        for i in range(n)
    ]
    return SeedSet(seeds)
