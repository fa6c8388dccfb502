import sys
import os
import time
import argparse

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from path_engine.io.presets import PRESETS, load_preset, expected_count
from path_engine.algo.search import HamiltonianSearch
from path_engine.algo.parallel import ParallelSearch
from path_engine.algo.pruner import always_completable

# ==========================================
# GLOBAL CONFIGURATION
# Add or remove method names here to include/exclude them from the race.
# ==========================================
ENABLED_METHODS = [
    "pruned",
    "unpruned",
    "parallel",
]

# Unpruned search on these takes far too long
UNPRUNED_SKIP = {"datacenter"}


def get_search(name, grid, workers, split_depth):
    if name == "pruned": return HamiltonianSearch(grid)
    if name == "unpruned": return HamiltonianSearch(grid, pruner=always_completable)
    if name == "parallel": return ParallelSearch(grid, processes=workers, split_depth=split_depth)
    return None


def run_benchmark():
    parser = argparse.ArgumentParser(description="Path Count Benchmark")
    parser.add_argument("--presets", nargs="+", default=["square3", "square5"],
                        choices=sorted(PRESETS), help="Built-in grids to count")
    parser.add_argument("--workers", type=int, default=os.cpu_count() or 1, help="Processes for the parallel run")
    parser.add_argument("--split-depth", type=int, default=6, help="Frontier split depth")
    args = parser.parse_args()

    print(f"=== PATH COUNT BENCHMARK ===")
    print(f"Grids: {', '.join(args.presets)} | Methods: {', '.join(ENABLED_METHODS)}")
    print("-" * 70)
    print(f"{'GRID':<12} | {'METHOD':<10} | {'TIME (s)':<10} | {'PATHS':<10} | {'NODES':<12} | OK")
    print("-" * 70)

    for preset in args.presets:
        grid = load_preset(preset)
        expected = expected_count(preset)

        for name in ENABLED_METHODS:
            if name == "unpruned" and preset in UNPRUNED_SKIP:
                continue
            search = get_search(name, grid, args.workers, args.split_depth)

            t0 = time.time()
            result = search.run()
            duration = time.time() - t0

            ok = "?" if expected is None else ("yes" if result.count == expected else "NO")
            print(f"{preset:<12} | {name:<10} | {duration:<10.4f} | {result.count:<10} | {result.nodes:<12} | {ok}")


if __name__ == "__main__":
    run_benchmark()
