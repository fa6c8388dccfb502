from itertools import permutations

from path_engine.core.errors import ConfigurationError
from path_engine.core.grid import Grid

# 8! = 40320 orderings; anything past this gets slow fast
BRUTE_FORCE_LIMIT = 8


def brute_force_count(grid: Grid, limit: int = BRUTE_FORCE_LIMIT) -> int:
    """
    Reference count for tiny grids: tries every ordering of the Empty cells
    and keeps those forming an orthogonal chain from source to sink.
    """
    empties = [divmod(idx, grid.width) for idx, kind in enumerate(grid.cells) if kind == Grid.EMPTY]
    if len(empties) > limit:
        raise ConfigurationError(
            f"Brute force supports at most {limit} empty cells, grid has {len(empties)}"
        )

    def adjacent(a, b):
        return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1

    count = 0
    for order in permutations(empties):
        path = (grid.source,) + order + (grid.sink,)
        if all(adjacent(path[i], path[i + 1]) for i in range(len(path) - 1)):
            count += 1
    return count
