#!/usr/bin/env python3
"""
Batch Jump Flood Runner

Computes one diagram per rng seed in parallel processes and records the
Voronoi noise of each run against the exact brute-force diagram.
"""

import argparse
import json
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Any

SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from jump_flood import BACKENDS, Grid, JFAConfig, JumpFloodSimulator, diagnostics, utils


def run_single_diagram(
    width: int, height: int, n_seed: int, rng_seed: int, backend: str, output_path: str
) -> Dict[str, Any]:
    """
    Run a single diagram and save it.

    Called in worker processes by ProcessPoolExecutor, so it must stay at
    module level for pickling.
    """
    config = JFAConfig(
        width=width, height=height, n_seed=n_seed, rng_seed=rng_seed, backend=backend
    )
    sim = JumpFloodSimulator(config)
    result = sim.run()

    exact = diagnostics.exact_owner_map(Grid(width, height), sim.seeds)
    noise = diagnostics.voronoi_noise(result.owner_map, exact)
    result.meta["voronoi_noise"] = noise

    utils.save_result(output_path, result)

    return {
        "output_path": output_path,
        "rng_seed": rng_seed,
        "unassigned": result.meta["unassigned"],
        "voronoi_noise": noise,
        "success": True,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Generate a batch of jump flood diagrams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=64, help="Grid width (default: 64)")
    parser.add_argument("--height", type=int, default=64, help="Grid height (default: 64)")
    parser.add_argument("--n-seed", dest="n_seed", type=int, default=8,
                        help="Seeds per diagram (default: 8)")
    parser.add_argument("--count", type=int, required=True, help="Number of diagrams")
    parser.add_argument("--jobs", type=int, default=1,
                        help="Number of parallel processes (default: 1)")
    parser.add_argument("--backend", choices=sorted(BACKENDS), default="numba")
    parser.add_argument(
        "--base-seed",
        type=int,
        default=201,
        help="Base rng seed (each diagram gets base_seed + index) (default: 201)",
    )

    args = parser.parse_args()

    first_seed = args.base_seed
    last_seed = args.base_seed + args.count - 1

    timestamp = utils.now_str()
    batch_dir = (
        Path("results") / "batches"
        / f"jfa_{args.width}x{args.height}_N{args.n_seed}_S{first_seed}-{last_seed}_{timestamp}"
    )
    batch_dir.mkdir(parents=True, exist_ok=True)

    manifest = {
        "width": args.width,
        "height": args.height,
        "n_seed": args.n_seed,
        "count": args.count,
        "base_seed": args.base_seed,
        "backend": args.backend,
        "jobs": args.jobs,
        "timestamp": timestamp,
    }
    manifest_path = batch_dir / "manifest.json"
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    print("Batch started:")
    print(f"  Grid: {args.width}x{args.height}, seeds per diagram: {args.n_seed}")
    print(f"  Diagrams: {args.count}, parallel jobs: {args.jobs}")
    print(f"  Output directory: {batch_dir}")
    print()

    tasks = []
    for i in range(args.count):
        rng_seed = args.base_seed + i
        output_path = str(batch_dir / f"{rng_seed}.npz")
        tasks.append((args.width, args.height, args.n_seed, rng_seed, args.backend, output_path))

    start_time = time.time()
    results = []
    failed = []

    with ProcessPoolExecutor(max_workers=args.jobs) as executor:
        future_to_task = {
            executor.submit(run_single_diagram, *task): task
            for task in tasks
        }

        completed = 0
        for future in as_completed(future_to_task):
            completed += 1
            task = future_to_task[future]
            try:
                result = future.result()
                results.append(result)
                print(
                    f"  [{completed}/{args.count}] Completed: rng_seed={result['rng_seed']}, "
                    f"noise={100.0 * result['voronoi_noise']:.3f}%"
                )
            except Exception as e:
                failed.append({"task": list(task), "error": str(e)})
                print(f"  [{completed}/{args.count}] FAILED: rng_seed={task[3]} - {e}")

    elapsed_time = time.time() - start_time

    manifest["results"] = {
        "total": args.count,
        "successful": len(results),
        "failed": len(failed),
        "elapsed_seconds": elapsed_time,
    }
    if results:
        manifest["results"]["mean_voronoi_noise"] = (
            sum(r["voronoi_noise"] for r in results) / len(results)
        )
    manifest["diagrams"] = results
    if failed:
        manifest["failures"] = failed

    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    print()
    print("=" * 60)
    print("Batch completed!")
    print(f"  Successful: {len(results)}/{args.count}")
    print(f"  Failed: {len(failed)}/{args.count}")
    print(f"  Total time: {elapsed_time:.2f} seconds")
    print(f"  Manifest: {manifest_path}")
    print("=" * 60)

    return 0 if len(failed) == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
