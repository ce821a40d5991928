# src/jump_flood/errors.py
from __future__ import annotations


class JumpFloodError(Exception):
    """Base class for every error raised by the jump flood package."""


class ConfigError(JumpFloodError, ValueError):
    """Invalid grid, seed or backend configuration; raised before any pass runs."""


class BackendError(JumpFloodError, RuntimeError):
    """
    The compute backend could not allocate, build or execute a pass.

    ``diagnostic`` holds the backend's own text (compiler output, the
    underlying exception message) so callers can surface it unchanged.
    """

    def __init__(self, message: str, diagnostic: str = "") -> None:
        super().__init__(message if not diagnostic else f"{message}\n{diagnostic}")
        self.diagnostic = diagnostic


class RunAborted(JumpFloodError):
    """A run was cancelled between two passes; its buffers must not be composited."""

    def __init__(self, completed_passes: int) -> None:
        super().__init__(f"run aborted after {completed_passes} pass(es)")
        self.completed_passes = completed_passes
