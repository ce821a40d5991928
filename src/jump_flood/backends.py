"""
Compute backends for the jump flood pass.

A backend is the only thing the simulator needs from the execution
environment:

1.  ``build()``      prepare the update logic (JIT compile for Numba).
2.  ``allocate()``   two owner buffers of ``width * height`` cells.
3.  ``run_pass()``   one full pass, src -> dst, returning only once every
                     cell of ``dst`` has been written.
4.  ``describe()``   platform / device description for the run log.

Failures at any of these steps surface as ``BackendError`` carrying the
backend's own diagnostic text. They are never retried: the same inputs would
fail the same way.
"""

from __future__ import annotations

import os
import platform
from typing import Dict, Tuple, Type

import numpy as np
import numba
from numba.core.errors import NumbaError

from .errors import BackendError, ConfigError
from .grid import CELL_DTYPE, Grid, UNASSIGNED
from .propagation import jump_flood_pass, jump_flood_pass_numpy, nearest_owner


class ComputeBackend:
    name = "base"

    def __init__(self) -> None:
        self.built = False

    def build(self) -> None:
        self.built = True

    def describe(self) -> str:
        return f"{self.name} on {platform.machine() or 'unknown'} ({os.cpu_count()} cpus)"

    def allocate(self, grid: Grid) -> Tuple[np.ndarray, np.ndarray]:
        try:
            a = grid.empty_buffer()
            b = grid.empty_buffer()
        except (MemoryError, ValueError) as exc:
            raise BackendError(
                f"Cannot allocate two {grid.width}x{grid.height} cell buffers",
                diagnostic=str(exc),
            ) from exc
        return a, b

    def run_pass(
        self,
        src: np.ndarray,
        dst: np.ndarray,
        seed_x: np.ndarray,
        seed_y: np.ndarray,
        step: int,
    ) -> None:
        if src.shape != dst.shape:
            raise ValueError(f"Buffer shapes differ: {src.shape} vs {dst.shape}")
        if np.shares_memory(src, dst):
            raise ValueError("A pass must read and write two distinct buffers")
        if step < 1:
            raise ValueError(f"Step size must be >= 1, got {step}")
        if not self.built:
            self.build()
        self._dispatch(src, dst, seed_x, seed_y, int(step))

    def _dispatch(self, src, dst, seed_x, seed_y, step) -> None:
        raise NotImplementedError


class ReferenceBackend(ComputeBackend):
    """Single-threaded executor evaluating the plain Python update rule cell by cell."""

    name = "reference"

    def _dispatch(self, src, dst, seed_x, seed_y, step) -> None:
        rule = nearest_owner.py_func
        h, w = src.shape
        for y in range(h):
            for x in range(w):
                dst[y, x] = rule(src, seed_x, seed_y, x, y, step)


class NumpyBackend(ComputeBackend):
    name = "numpy"

    def describe(self) -> str:
        return f"numpy {np.__version__} (vectorised) on {platform.machine() or 'unknown'}"

    def _dispatch(self, src, dst, seed_x, seed_y, step) -> None:
        jump_flood_pass_numpy(src, dst, seed_x, seed_y, step)


class NumbaBackend(ComputeBackend):
    """Parallel executor: one ``prange`` iteration per grid row."""

    name = "numba"

    def describe(self) -> str:
        return (
            f"numba {numba.__version__}, {numba.get_num_threads()} threads "
            f"on {platform.machine() or 'unknown'}"
        )

    def build(self) -> None:
        # Compile on a 1x1 grid with the same argument types as a real run.
        src = np.zeros((1, 1), dtype=CELL_DTYPE)
        dst = np.full((1, 1), UNASSIGNED, dtype=CELL_DTYPE)
        seed_x = np.zeros(1, dtype=np.int64)
        seed_y = np.zeros(1, dtype=np.int64)
        seed_x.setflags(write=False)
        seed_y.setflags(write=False)
        try:
            jump_flood_pass(src, dst, seed_x, seed_y, 1)
        except NumbaError as exc:
            raise BackendError("Cannot build the jump flood kernel", diagnostic=str(exc)) from exc
        self.built = True

    def _dispatch(self, src, dst, seed_x, seed_y, step) -> None:
        try:
            jump_flood_pass(src, dst, seed_x, seed_y, step)
        except NumbaError as exc:
            raise BackendError(
                f"Jump flood kernel failed at step {step}", diagnostic=str(exc)
            ) from exc


BACKENDS: Dict[str, Type[ComputeBackend]] = {
    ReferenceBackend.name: ReferenceBackend,
    NumpyBackend.name: NumpyBackend,
    NumbaBackend.name: NumbaBackend,
}


def get_backend(name: str) -> ComputeBackend:
    try:
        cls = BACKENDS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown backend '{name}', expected one of {sorted(BACKENDS)}"
        ) from None
    return cls()
