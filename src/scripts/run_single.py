#!/usr/bin/env python3
"""
Single Jump Flood Runner

Computes one approximate Voronoi diagram and writes:
- <out>.npz        owner map, colors, seeds and metadata
- <out>_start.png  the seeds on a black background
- <out>.png        the final diagram
"""

import argparse
import sys
import time
from pathlib import Path

# Add src/ to path so the script runs from a checkout
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from jump_flood import (
    BACKENDS,
    BackendError,
    ConfigError,
    JFAConfig,
    JumpFloodSimulator,
    to_rgba8,
    utils,
)


def build_config(args) -> JFAConfig:
    params = utils.load_params(args.config) if args.config else {}
    for key in ("width", "height", "n_seed", "rng_seed", "backend"):
        value = getattr(args, key)
        if value is not None:
            params[key] = value
    params["verbose"] = not args.quiet
    return JFAConfig.from_dict(params)


def main():
    parser = argparse.ArgumentParser(
        description="Compute a Voronoi diagram with the Jump Flood Algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=str, default=None,
                        help="JSON or TOML parameter file (flags override it)")
    parser.add_argument("--width", type=int, default=None, help="Grid width (default: 64)")
    parser.add_argument("--height", type=int, default=None, help="Grid height (default: 64)")
    parser.add_argument("--n-seed", dest="n_seed", type=int, default=None,
                        help="Number of seeds (default: 8)")
    parser.add_argument("--rng-seed", dest="rng_seed", type=int, default=None,
                        help="Random seed for reproducibility (default: 201)")
    parser.add_argument("--backend", choices=sorted(BACKENDS), default=None,
                        help="Compute backend (default: numba)")
    parser.add_argument("--out", type=str, default=None,
                        help="Output path stem (auto-generated if not provided)")
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")

    args = parser.parse_args()

    try:
        config = build_config(args)
        sim = JumpFloodSimulator(config)
        sim.initialize()
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 2
    except BackendError as e:
        print(f"Backend error: {e}")
        return 1

    if args.out is None:
        output_dir = Path("results")
        output_dir.mkdir(exist_ok=True)
        args.out = str(
            output_dir
            / f"jfa_{config.width}x{config.height}_N{config.n_seed}_S{config.rng_seed}_{utils.now_str()}"
        )
    stem = Path(args.out).with_suffix("")

    utils.save_png(f"{stem}_start.png", to_rgba8(sim.start_image()))

    start_time = time.time()
    try:
        result = sim.run()
    except BackendError as e:
        print(f"Backend error: {e}")
        return 1
    elapsed_time = time.time() - start_time

    utils.save_result(f"{stem}.npz", result)
    utils.save_png(f"{stem}.png", to_rgba8(result.colors))

    meta = result.meta
    print("\nJump flood completed.")
    print(f"   Grid: {meta['width']}x{meta['height']}, seeds: {meta['n_seed']}")
    print(f"   Steps: {meta['steps']}")
    print(f"   Time elapsed: {elapsed_time:.3f} seconds")
    print(f"   Unassigned cells: {meta['unassigned']}")
    print(f"   Output saved to: {stem}.npz / {stem}.png")

    return 0


if __name__ == "__main__":
    sys.exit(main())
