import time
from abc import ABC, abstractmethod
from typing import Callable, NamedTuple, Optional

from path_engine.core.errors import ConfigurationError
from path_engine.core.grid import Grid

# Solutions between two progress notifications
PROGRESS_INTERVAL = 10000


class SearchResult(NamedTuple):
    count: int
    elapsed: float
    nodes: int = 0
    pruned: int = 0
    cancelled: bool = False


class Search(ABC):
    def __init__(self, grid: Grid,
                 on_progress: Optional[Callable[[int, float], None]] = None,
                 progress_interval: int = PROGRESS_INTERVAL,
                 clock: Callable[[], float] = time.perf_counter):
        if progress_interval <= 0:
            raise ConfigurationError(f"progress_interval must be positive, got {progress_interval}")
        self.grid = grid
        self.on_progress = on_progress
        self.progress_interval = progress_interval
        self.clock = clock
        self.count = 0
        self.start_time = 0.0

    @abstractmethod
    def run(self) -> SearchResult:
        """Enumerates to exhaustion (or cancellation) and returns the totals."""
        pass

    def elapsed(self) -> float:
        return self.clock() - self.start_time

    def notify(self):
        if self.on_progress:
            self.on_progress(self.count, self.elapsed())
