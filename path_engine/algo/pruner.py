from path_engine.core.grid import Grid
from path_engine.core.mask import is_set, set_bit


def flood(grid: Grid, scratch: int, row: int, col: int) -> int:
    """
    Flood-fills Empty cells reachable from (row, col) that are not yet set in
    `scratch`, and returns the scratch mask with those cells added.
    Out-of-bounds and non-Empty starting cells leave the mask unchanged.
    """
    width, height, cells = grid.width, grid.height, grid.cells

    # Explicit stack of (row, col); depth is bounded by the cell count
    stack = [(row, col)]
    while stack:
        r, c = stack.pop()
        if not (0 <= r < height and 0 <= c < width):
            continue
        idx = r * width + c
        if cells[idx] != Grid.EMPTY:
            continue
        if is_set(scratch, idx):
            continue

        scratch = set_bit(scratch, idx)
        stack.append((r + 1, c))
        stack.append((r - 1, c))
        stack.append((r, c + 1))
        stack.append((r, c - 1))
    return scratch


def is_completable(grid: Grid, hypothetical_mask: int, row: int, col: int) -> bool:
    """
    Articulation check for stepping into (row, col).

    `hypothetical_mask` already includes (row, col). Returns True if a flood
    from at least one orthogonal neighbor reaches every unvisited Empty cell,
    i.e. the rest of the region is still in one piece. A necessary condition
    only: it never rejects a branch that can still finish.
    """
    for dr, dc in Grid.MOVES:
        scratch = flood(grid, hypothetical_mask, row + dr, col + dc)
        if grid.is_complete(scratch):
            return True
    return False


def always_completable(grid: Grid, hypothetical_mask: int, row: int, col: int) -> bool:
    """Null pruner. Lets every branch through."""
    return True
