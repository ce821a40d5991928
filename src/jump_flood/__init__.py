"""
Jump Flood Voronoi Library

Approximate discrete Voronoi diagrams computed with the Jump Flood Algorithm:
- JumpFloodSimulator: host orchestration of the ping-pong pass schedule
- Compute backends: Numba parallel kernel, vectorised NumPy, Python reference
- Compositor: owner map to RGBA color map
"""

from .backends import BACKENDS, ComputeBackend, get_backend
from .compositor import BACKGROUND, composite, render_seeds, to_rgba8
from .errors import BackendError, ConfigError, JumpFloodError, RunAborted
from .grid import UNASSIGNED, Grid, seed_buffer
from .propagation import jump_flood_pass, jump_flood_pass_numpy, nearest_owner
from .schedule import StepSchedule, step_sizes
from .seeds import Seed, SeedSet, generate_seeds
from .simulator import JFAConfig, JumpFloodSimulator, run_model
from . import diagnostics, utils

__all__ = [
    # Simulator
    "JumpFloodSimulator",
    "JFAConfig",
    "run_model",
    # Data model
    "Grid",
    "Seed",
    "SeedSet",
    "UNASSIGNED",
    "generate_seeds",
    "seed_buffer",
    # Algorithm
    "StepSchedule",
    "step_sizes",
    "nearest_owner",
    "jump_flood_pass",
    "jump_flood_pass_numpy",
    # Backends
    "BACKENDS",
    "ComputeBackend",
    "get_backend",
    # Compositor
    "BACKGROUND",
    "composite",
    "render_seeds",
    "to_rgba8",
    # Errors
    "JumpFloodError",
    "ConfigError",
    "BackendError",
    "RunAborted",
    # Utilities
    "diagnostics",
    "utils",
]
