import logging
import multiprocessing
import time
from typing import Callable, List, Optional, Tuple

from path_engine.algo.base import PROGRESS_INTERVAL, Search, SearchResult
from path_engine.algo.search import HamiltonianSearch, State
from path_engine.core.errors import ConfigurationError
from path_engine.core.grid import Grid

logger = logging.getLogger(__name__)

DEFAULT_SPLIT_DEPTH = 6


def _count_subtrees(payload: Tuple[Grid, List[State]]) -> Tuple[int, int, int]:
    """
    Worker entry point (module level so multiprocessing can pickle it).
    Each call builds its own search, so flood scratch state is never shared.
    Returns (count, nodes, pruned) for the chunk.
    """
    grid, states = payload
    search = HamiltonianSearch(grid)
    search.run_states(states)
    return search.count, search.nodes, search.pruned


class ParallelSearch(Search):
    """
    Splits the search frontier in the parent and counts the subtrees in a
    process pool. Workers keep local counts; the parent sums them.

    `cancel` is checked in the parent after the split and after every chunk
    result; once set, the pool is terminated and the partial sum returned.
    """
    def __init__(self, grid: Grid, processes: Optional[int] = None,
                 split_depth: int = DEFAULT_SPLIT_DEPTH, chunk_size: int = 8,
                 on_progress: Optional[Callable[[int, float], None]] = None,
                 progress_interval: int = PROGRESS_INTERVAL,
                 cancel=None,
                 clock: Callable[[], float] = time.perf_counter):
        super().__init__(grid, on_progress=on_progress,
                         progress_interval=progress_interval, clock=clock)
        if split_depth < 0:
            raise ConfigurationError(f"split_depth must be >= 0, got {split_depth}")
        self.processes = processes or multiprocessing.cpu_count()
        self.split_depth = split_depth
        self.chunk_size = max(1, chunk_size)
        self.cancel = cancel
        self.nodes = 0
        self.pruned = 0

    def is_cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

    def report(self, reported: int) -> int:
        """Notifies once per interval boundary crossed. Returns the boundaries reported so far."""
        crossed = self.count // self.progress_interval
        if crossed > reported:
            self.notify()
        return max(crossed, reported)

    def run(self) -> SearchResult:
        self.count = 0
        self.start_time = self.clock()

        splitter = HamiltonianSearch(self.grid, clock=self.clock)
        splitter.reset()
        frontier = splitter.split(self.split_depth)
        self.count = splitter.count
        self.nodes = splitter.nodes
        self.pruned = splitter.pruned

        chunks = [frontier[i:i + self.chunk_size] for i in range(0, len(frontier), self.chunk_size)]
        logger.debug(f"Split depth {self.split_depth}: {len(frontier)} states in {len(chunks)} tasks, "
                     f"{self.count} paths found while splitting")

        # Paths finished during the split count towards progress too
        reported = self.report(0)
        cancelled = self.is_cancelled()

        if chunks and not cancelled:
            with multiprocessing.Pool(processes=self.processes) as pool:
                for count, nodes, pruned in pool.imap_unordered(_count_subtrees,
                                                                [(self.grid, c) for c in chunks]):
                    self.count += count
                    self.nodes += nodes
                    self.pruned += pruned
                    reported = self.report(reported)
                    if self.is_cancelled():
                        cancelled = True
                        pool.terminate()
                        break

        if cancelled:
            logger.info(f"Parallel search cancelled after {self.nodes} nodes ({self.count} paths so far)")

        return SearchResult(self.count, self.elapsed(), self.nodes, self.pruned, cancelled)
