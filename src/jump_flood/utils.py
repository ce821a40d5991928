# src/jump_flood/utils.py
from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
from matplotlib import image as mpimg

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    tomllib = None  # type: ignore


@dataclass
class VoronoiResult:
    """Common container for a finished jump flood run."""

    owner_map: Optional[np.ndarray] = None
    colors: Optional[np.ndarray] = None
    seed_positions: Optional[np.ndarray] = None
    seed_colors: Optional[np.ndarray] = None
    meta: Optional[Dict[str, Any]] = None


def now_str() -> str:
    return time.strftime("%Y%m%d-%H%M%S")


def save_result(
    path: str | os.PathLike[str], result: VoronoiResult, *, overwrite: bool = True
) -> None:
    """Serialize a VoronoiResult to a compressed .npz file."""
    if not overwrite and Path(path).exists():
        raise FileExistsError(f"{path} already exists")
    Path(path).parent.mkdir(parents=True, exist_ok=True)

    out: Dict[str, Any] = {}
    if result.owner_map is not None:
        out["owner_map"] = np.asarray(result.owner_map, dtype=np.int32)
    if result.colors is not None:
        out["colors"] = np.asarray(result.colors, dtype=np.float32)
    if result.seed_positions is not None:
        out["seed_positions"] = np.asarray(result.seed_positions, dtype=np.int64)
    if result.seed_colors is not None:
        out["seed_colors"] = np.asarray(result.seed_colors, dtype=np.float32)
    out["meta"] = np.array(json.dumps(result.meta or {}))
    np.savez_compressed(path, **out)


def load_result(path: str | os.PathLike[str]) -> VoronoiResult:
    with np.load(path, allow_pickle=False) as data:
        meta = json.loads(str(data["meta"])) if "meta" in data else {}
        return VoronoiResult(
            owner_map=data["owner_map"] if "owner_map" in data else None,
            colors=data["colors"] if "colors" in data else None,
            seed_positions=data["seed_positions"] if "seed_positions" in data else None,
            seed_colors=data["seed_colors"] if "seed_colors" in data else None,
            meta=meta,
        )


def save_png(path: str | os.PathLike[str], rgba8: np.ndarray) -> None:
    """Write an 8-bit (height, width, 4) image; row 0 is the top row."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    mpimg.imsave(str(path), np.ascontiguousarray(rgba8))


def load_params(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Load run parameters from JSON or TOML.
    """
    path = str(path)
    with open(path, "rb") as fh:
        data = fh.read()
    suffix = Path(path).suffix.lower()
    if suffix in {".json", ""}:
        return json.loads(data.decode("utf-8"))
    if suffix in {".toml", ".tml"}:
        if tomllib is None:
            raise RuntimeError("tomllib is unavailable; cannot parse TOML files")
        return tomllib.loads(data.decode("utf-8"))
    raise ValueError(f"Unsupported parameter file format: {suffix}")
