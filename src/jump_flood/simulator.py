"""
Jump flood Voronoi simulator.

Host-side orchestration of the Jump Flood Algorithm:

1.  Seeds are generated (or supplied) and written into buffer A; every other
    cell starts unassigned.
2.  For each step of the schedule (largest power of two <= max(w, h) / 2,
    halving down to 1) the backend runs one pass reading the current buffer
    and writing the other one. Only after the backend returns does the
    simulator flip its "current" flag, so every write of pass k is visible
    before pass k + 1 starts reading.
3.  The final buffer is composited into an RGBA map with the seed colors.

The two buffers belong to the simulator alone. Accessors hand out copies so
no caller holds a reference across a swap.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import time
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from . import utils
from .backends import BACKENDS, ComputeBackend, get_backend
from .compositor import composite, render_seeds
from .errors import ConfigError, RunAborted
from .grid import Grid, seed_buffer
from .schedule import StepSchedule
from .seeds import SeedSet, generate_seeds


@dataclass
class JFAConfig:
    width: int = 64
    height: int = 64
    n_seed: int = 8
    rng_seed: int = 201
    backend: str = "numba"
    verbose: bool = False

    def validate(self) -> None:
        for name in ("width", "height", "n_seed"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")
        if isinstance(self.rng_seed, bool) or not isinstance(self.rng_seed, (int, np.integer)):
            raise ConfigError(f"rng_seed must be an integer, got {self.rng_seed!r}")
        if self.rng_seed < 0:
            raise ConfigError(f"rng_seed must be non-negative, got {self.rng_seed}")
        if self.backend not in BACKENDS:
            raise ConfigError(
                f"Unknown backend '{self.backend}', expected one of {sorted(BACKENDS)}"
            )

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> "JFAConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(params) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**params)


class JumpFloodSimulator:
    """
    The Manager Class.

    Responsibilities:
    1. Validate the configuration before any pass runs.
    2. Own the ping-pong buffer pair and the "current" flag.
    3. Drive the backend through the step schedule.
    """

    def __init__(
        self,
        config: JFAConfig | None = None,
        *,
        seeds: SeedSet | None = None,
        backend: ComputeBackend | None = None,
    ) -> None:
        self.config = config or JFAConfig()
        if seeds is not None:
            self.config = replace(self.config, n_seed=len(seeds))
        self._given_seeds = seeds
        self._given_backend = backend

        self.grid: Optional[Grid] = None
        self.seeds: Optional[SeedSet] = None
        self.backend: Optional[ComputeBackend] = None
        self.schedule: Optional[StepSchedule] = None

        self._buffers: Optional[List[np.ndarray]] = None
        self._current = 0
        self.passes_run = 0
        self.pass_times_ms: List[float] = []
        self.aborted = False

    def _log(self, msg: str) -> None:
        if self.config.verbose:
            print(f"[jfa] {msg}")

    def _warn_unassigned(self, count: int) -> None:
        # printed regardless of verbose
        print(f"[jfa] WARNING: {count} cell(s) left unassigned, drawn as background")

    # ------------------------------------------------------------------ setup
    def initialize(self) -> None:
        """Validate, build seeds and backend, allocate and seed the buffers."""
        self.config.validate()
        self.grid = Grid(int(self.config.width), int(self.config.height))

        if self._given_seeds is not None:
            self._given_seeds.check_within(self.grid)
            self.seeds = self._given_seeds
        else:
            self.seeds = generate_seeds(
                self.config.n_seed, self.grid.width, self.grid.height, self.config.rng_seed
            )
        self.schedule = StepSchedule(self.grid.width, self.grid.height)

        self.backend = self._given_backend or get_backend(self.config.backend)
        self._log(f"Backend: {self.backend.describe()}")
        self.backend.build()

        a, b = self.backend.allocate(self.grid)
        seed_buffer(a, self.seeds.xs, self.seeds.ys)
        self._buffers = [a, b]
        self._current = 0
        self.passes_run = 0
        self.pass_times_ms = []
        self.aborted = False

        self._log(
            f"{len(self.seeds)} seeds on a {self.grid.width}x{self.grid.height} grid "
            f"({self.grid.cell_count} cells, {len(self.schedule)} passes)"
        )
        self._log("\n" + self.seeds.table())

    def _require_initialized(self) -> None:
        if self._buffers is None:
            raise RuntimeError("Simulator has not been initialized. Call initialize() first.")

    # ------------------------------------------------------------------ passes
    def step(self, step_size: int) -> None:
        """One pass at ``step_size``: current -> next, then swap roles."""
        self._require_initialized()
        src = self._buffers[self._current]
        dst = self._buffers[1 - self._current]
        start = time.perf_counter()
        self.backend.run_pass(src, dst, self.seeds.xs, self.seeds.ys, step_size)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        self._current = 1 - self._current
        self.passes_run += 1
        self.pass_times_ms.append(elapsed_ms)
        self._log(f"pass {self.passes_run}: step={step_size} ({elapsed_ms:.2f} ms)")

    def run(self, should_abort: Callable[[], bool] | None = None) -> utils.VoronoiResult:
        """
        Run the whole step schedule and composite the result.

        ``should_abort`` is polled between passes only; when it returns True
        the run stops with ``RunAborted`` and nothing is composited.
        """
        if self._buffers is None or self.passes_run or self.aborted:
            self.initialize()
        start = time.perf_counter()
        for step_size in self.schedule:
            if should_abort is not None and should_abort():
                self.aborted = True
                self._log(f"aborted after {self.passes_run} passes")
                raise RunAborted(self.passes_run)
            self.step(step_size)
        total_ms = (time.perf_counter() - start) * 1000.0
        self._log(f"{self.passes_run} passes in {total_ms:.2f} ms")
        return self.result()

    # ------------------------------------------------------------------ outputs
    def owner_map(self) -> np.ndarray:
        """Copy of the current buffer, owner id per cell, -1 for unassigned."""
        self._require_initialized()
        return self._buffers[self._current].copy()

    def _require_complete(self) -> None:
        if self.aborted:
            raise RuntimeError("Aborted run has no defined output; call run() again.")

    def colormap(self) -> np.ndarray:
        self._require_complete()
        colors, unassigned = composite(self.owner_map(), self.seeds)
        if unassigned:
            self._warn_unassigned(unassigned)
        return colors

    def start_image(self) -> np.ndarray:
        self._require_initialized()
        return render_seeds(self.grid, self.seeds)

    def snapshot(self) -> Dict[str, Any]:
        self._require_initialized()
        return {
            "model": "jump_flood",
            "width": self.grid.width,
            "height": self.grid.height,
            "n_seed": len(self.seeds),
            "rng_seed": int(self.config.rng_seed),
            "backend": self.backend.name,
            "device": self.backend.describe(),
            "steps": list(self.schedule),
            "passes_run": self.passes_run,
            "pass_times_ms": [float(t) for t in self.pass_times_ms],
        }

    def result(self) -> utils.VoronoiResult:
        self._require_complete()
        owner_map = self.owner_map()
        colors, unassigned = composite(owner_map, self.seeds)
        if unassigned:
            self._warn_unassigned(unassigned)
        meta = self.snapshot()
        meta["unassigned"] = unassigned
        return utils.VoronoiResult(
            owner_map=owner_map,
            colors=colors,
            seed_positions=np.column_stack((self.seeds.xs, self.seeds.ys)),
            seed_colors=np.array(self.seeds.colors),
            meta=meta,
        )


def run_model(config: JFAConfig | dict | None = None) -> utils.VoronoiResult:
    """
    Run one jump flood diagram and return a VoronoiResult.
    """
    if config is None:
        config = JFAConfig()
    elif isinstance(config, dict):
        config = JFAConfig.from_dict(config)
    return JumpFloodSimulator(config).run()


__all__ = ["JFAConfig", "JumpFloodSimulator", "run_model"]


if __name__ == "__main__":
    sim = JumpFloodSimulator(JFAConfig(verbose=True))
    res = sim.run()
    print(f"unassigned cells: {res.meta['unassigned']}")
