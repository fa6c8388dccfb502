import logging
import time
from typing import Callable, List, Optional, Tuple

from path_engine.algo.base import PROGRESS_INTERVAL, Search, SearchResult
from path_engine.algo.pruner import is_completable
from path_engine.core.errors import SearchCancelled
from path_engine.core.grid import Grid
from path_engine.core.mask import is_set, set_bit

logger = logging.getLogger(__name__)

# (path_mask, row, col): a cell about to be stepped into with the mask so far
State = Tuple[int, int, int]


class HamiltonianSearch(Search):
    """
    Counts paths from the source to the sink that visit every Empty cell once.

    Depth-first over (path_mask, row, col). The mask is an int, so every call
    gets its own copy and siblings never see each other's bits. Each step into
    an Empty cell is checked by `pruner` first and the branch is dropped when
    the remaining Empty cells are no longer connected.
    """
    def __init__(self, grid: Grid,
                 pruner: Callable[[Grid, int, int, int], bool] = is_completable,
                 on_progress: Optional[Callable[[int, float], None]] = None,
                 progress_interval: int = PROGRESS_INTERVAL,
                 cancel=None,
                 max_nodes: Optional[int] = None,
                 clock: Callable[[], float] = time.perf_counter):
        super().__init__(grid, on_progress=on_progress,
                         progress_interval=progress_interval, clock=clock)
        self.pruner = pruner
        self.cancel = cancel
        self.max_nodes = max_nodes
        self.nodes = 0
        self.pruned = 0

    def reset(self):
        self.count = 0
        self.nodes = 0
        self.pruned = 0
        self.start_time = self.clock()

    def seeds(self) -> List[State]:
        """Initial states: every neighbor of the source, with the source bit set."""
        sr, sc = self.grid.source
        return [(self.grid.source_bit, sr + dr, sc + dc) for dr, dc in Grid.MOVES]

    def run(self) -> SearchResult:
        self.reset()
        cancelled = False
        try:
            for path_mask, row, col in self.seeds():
                self.extend(path_mask, row, col)
        except SearchCancelled:
            cancelled = True
            logger.info(f"Search cancelled after {self.nodes} nodes ({self.count} paths so far)")

        return SearchResult(self.count, self.elapsed(), self.nodes, self.pruned, cancelled)

    def run_states(self, states: List[State]) -> int:
        """Counts the solutions below each of `states`. Used by worker processes."""
        self.reset()
        for path_mask, row, col in states:
            self.extend(path_mask, row, col)
        return self.count

    def extend(self, path_mask: int, row: int, col: int):
        self.check_cancelled()
        path_mask = self.step(path_mask, row, col)
        if path_mask is None:
            return

        self.extend(path_mask, row + 1, col)
        self.extend(path_mask, row - 1, col)
        self.extend(path_mask, row, col + 1)
        self.extend(path_mask, row, col - 1)

    def step(self, path_mask: int, row: int, col: int) -> Optional[int]:
        """
        Tries to move into (row, col).
        Returns the mask with the cell added when the branch continues,
        None when it ends here (dead end, prune, or sink).
        """
        self.nodes += 1
        kind = self.grid.cell_kind(row, col)

        if kind == Grid.EMPTY:
            idx = row * self.grid.width + col
            if is_set(path_mask, idx):
                return None
            hypothetical = set_bit(path_mask, idx)
            if not self.pruner(self.grid, hypothetical, row, col):
                self.pruned += 1
                return None
            return hypothetical

        if kind == Grid.SINK:
            # Sink bit is never added, so the mask is the path without the sink
            if self.grid.is_complete(path_mask):
                self.record_solution(path_mask)

        # Out of bounds, Blocked and Source cells end the branch too
        return None

    def record_solution(self, path_mask: int):
        self.count += 1
        if self.count % self.progress_interval == 0:
            self.notify()

    def check_cancelled(self):
        if self.cancel is not None and self.cancel.is_set():
            raise SearchCancelled()
        if self.max_nodes is not None and self.nodes >= self.max_nodes:
            raise SearchCancelled()

    def split(self, depth: int) -> List[State]:
        """
        Expands the frontier `depth` levels below the seeds.
        Solutions reached on the way are recorded in self.count; the returned
        states have not been stepped into yet, so their subtrees are disjoint.
        """
        frontier = self.seeds()
        for _ in range(depth):
            expanded = []
            for path_mask, row, col in frontier:
                new_mask = self.step(path_mask, row, col)
                if new_mask is None:
                    continue
                for dr, dc in Grid.MOVES:
                    expanded.append((new_mask, row + dr, col + dc))
            frontier = expanded
            if not frontier:
                break
        return frontier


def count_hamiltonian_paths(grid: Grid, **kwargs) -> Tuple[int, float]:
    """Counts every source-to-sink path covering all Empty cells. Returns (count, seconds)."""
    result = HamiltonianSearch(grid, **kwargs).run()
    return result.count, result.elapsed
