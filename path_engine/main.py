import argparse
import sys
import os
import logging

# Ensure project root is in path so we can import 'path_engine' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from path_engine.core.errors import ConfigurationError
from path_engine.core.mask import MASK_BITS

logger = logging.getLogger("path_engine")


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def add_grid_args(parser):
    parser.add_argument("grid_file", nargs="?", help="Grid text file: '<width> <height>' then rows of 0-3 codes")
    parser.add_argument("--preset", type=str, default=None, help="Use a built-in grid instead of a file")
    parser.add_argument("--mask-bits", type=int, default=MASK_BITS, help="Visitation mask width (max cells)")


def load_grid(args):
    from path_engine.io.serializer import GridSerializer
    from path_engine.io.presets import load_preset

    if args.preset:
        return load_preset(args.preset, mask_bits=args.mask_bits)
    if args.grid_file:
        return GridSerializer.load(args.grid_file, mask_bits=args.mask_bits)
    return load_preset("square5", mask_bits=args.mask_bits)


def print_progress(count: int, elapsed: float):
    print(f"Paths so far: {count:,}  time so far: {elapsed:.3f}s")


def cmd_count(args):
    grid = load_grid(args)
    logger.info(f"Loaded {grid!r}")

    from path_engine.algo.pruner import always_completable, is_completable
    from path_engine.core.events import ProgressLog

    evt_log = None
    if args.record_events:
        evt_log = ProgressLog(args.record_events, grid.width, grid.height)
        logger.info(f"Recording progress events to {args.record_events}...")

    def on_progress(count, elapsed):
        print_progress(count, elapsed)
        if evt_log:
            evt_log(count, elapsed)

    result = None
    try:
        if args.workers > 1:
            if args.no_prune or args.max_nodes:
                logger.warning("--no-prune and --max-nodes are ignored with --workers")
            from path_engine.algo.parallel import ParallelSearch
            search = ParallelSearch(grid, processes=args.workers, split_depth=args.split_depth,
                                    on_progress=on_progress, progress_interval=args.progress_interval)
            logger.info(f"Counting with {args.workers} workers (split depth {args.split_depth})...")
        else:
            from path_engine.algo.search import HamiltonianSearch
            pruner = always_completable if args.no_prune else is_completable
            search = HamiltonianSearch(grid, pruner=pruner, on_progress=on_progress,
                                       progress_interval=args.progress_interval,
                                       max_nodes=args.max_nodes)
            logger.info("Counting...")

        if args.visual:
            from path_engine.viz.renderer import Renderer
            renderer = Renderer(grid, search=search)
            renderer.init_window()
            result = renderer.run_loop()
        else:
            result = search.run()
        if evt_log and result is not None:
            evt_log.log_done(result.count, result.elapsed)
    finally:
        if evt_log:
            evt_log.close()

    if result is None:
        logger.warning("Window closed before the search reported a result.")
        return 1

    if result.cancelled:
        print(f"Stopped early after {result.nodes:,} nodes. Partial count: {result.count:,}")
    else:
        print(f"Number of paths: {result.count:,}")
    print(f"Total time taken: {result.elapsed:.3f}s")
    logger.debug(f"Nodes: {result.nodes:,}  pruned: {result.pruned:,}")
    return 0


def cmd_verify(args):
    grid = load_grid(args)
    from path_engine.algo.oracle import brute_force_count
    from path_engine.algo.pruner import always_completable
    from path_engine.algo.search import HamiltonianSearch

    pruned = HamiltonianSearch(grid).run()
    unpruned = HamiltonianSearch(grid, pruner=always_completable).run()
    counts = {"pruned": pruned.count, "unpruned": unpruned.count}
    if grid.empty_count <= args.brute_force_limit:
        counts["brute_force"] = brute_force_count(grid, limit=args.brute_force_limit)
    else:
        logger.info(f"Skipping brute force: {grid.empty_count} empty cells > {args.brute_force_limit}")

    print(f"\n{'METHOD':<12} | {'COUNT':<10}")
    print("-" * 25)
    for name, value in counts.items():
        print(f"{name:<12} | {value:<10}")

    if len(set(counts.values())) != 1:
        logger.error(f"Counts disagree: {counts}")
        return 1
    print("All methods agree.")
    return 0


def cmd_replay(args):
    from path_engine.core.events import ProgressLogReader, EVT_DONE
    with ProgressLogReader(args.event_file) as reader:
        w, h = reader.read_header()
        logger.info(f"Log Header: {w}x{h}")
        for type_code, (count, elapsed) in reader.stream_events():
            if type_code == EVT_DONE:
                print(f"Done: {count:,} paths in {elapsed:.3f}s")
            else:
                print_progress(count, elapsed)
    return 0


def cmd_show(args):
    grid = load_grid(args)
    print(grid.render_text())
    print(f"Size: {grid.width}x{grid.height}  empty: {grid.empty_count}")
    print(f"Source: {grid.source}  Sink: {grid.sink}")
    print(f"Target mask: {grid.target_mask:#0{grid.width * grid.height // 4 + 3}x}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Path Engine: Hamiltonian path counter for grids")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    count_parser = subparsers.add_parser("count", help="Count source-to-sink paths covering every empty cell")
    add_grid_args(count_parser)
    count_parser.add_argument("--workers", type=int, default=1, help="Worker processes (1 = sequential)")
    count_parser.add_argument("--split-depth", type=int, default=6, help="Frontier depth split across workers")
    count_parser.add_argument("--max-nodes", type=int, default=None, help="Stop after visiting this many nodes")
    count_parser.add_argument("--progress-interval", type=int, default=10000, help="Solutions between progress lines")
    count_parser.add_argument("--no-prune", action="store_true", help="Disable connectivity pruning")
    count_parser.add_argument("--record-events", type=str, help="Save progress events to binary file")
    count_parser.add_argument("--visual", action="store_true", help="Show the grid while counting")

    verify_parser = subparsers.add_parser("verify", help="Cross-check pruned, unpruned and brute-force counts")
    add_grid_args(verify_parser)
    verify_parser.add_argument("--brute-force-limit", type=int, default=8, help="Max empty cells for brute force")

    replay_parser = subparsers.add_parser("replay", help="Print a recorded progress log")
    replay_parser.add_argument("event_file", help="Path to progress log file")

    show_parser = subparsers.add_parser("show", help="Print a grid and its masks")
    add_grid_args(show_parser)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    logger.info(f"Running command: {args.command}")

    commands = {"count": cmd_count, "verify": cmd_verify, "replay": cmd_replay, "show": cmd_show}
    try:
        return commands[args.command](args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
