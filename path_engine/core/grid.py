from typing import Iterable, Iterator, Sequence

from path_engine.core.errors import ConfigurationError
from path_engine.core.mask import MASK_BITS, bit, check_capacity, clear_bit, popcount, set_bit


class Grid:
    # Cell kinds (same codes as the grid text format)
    EMPTY   = 0
    BLOCKED = 1
    SOURCE  = 2
    SINK    = 3

    # Returned by cell_kind() instead of raising
    OUT_OF_BOUNDS = 0xFF

    KINDS = (EMPTY, BLOCKED, SOURCE, SINK)
    SYMBOLS = {EMPTY: ".", BLOCKED: "#", SOURCE: "S", SINK: "E"}

    # Orthogonal moves as (d_row, d_col): down, up, right, left
    MOVES = ((1, 0), (-1, 0), (0, 1), (0, -1))

    __slots__ = ('width', 'height', 'cells', 'mask_bits',
                 'source', 'sink', 'source_index', 'source_bit', 'target_mask', 'empty_count')

    def __init__(self, width: int, height: int, cells: Iterable[int], mask_bits: int = MASK_BITS):
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Grid dimensions must be positive, got {width}x{height}")
        check_capacity(width * height, mask_bits)

        self.width = width
        self.height = height
        self.mask_bits = mask_bits
        # bytes -> 1 byte per cell, and immutable once built
        try:
            self.cells = bytes(cells)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid cell data: {e}") from e

        if len(self.cells) != width * height:
            raise ConfigurationError(
                f"Expected {width * height} cells for a {width}x{height} grid, got {len(self.cells)}"
            )

        sources = []
        sinks = []
        for idx, kind in enumerate(self.cells):
            if kind not in self.KINDS:
                raise ConfigurationError(
                    f"Unknown cell code {kind} at ({idx // width}, {idx % width})"
                )
            if kind == self.SOURCE:
                sources.append(divmod(idx, width))
            elif kind == self.SINK:
                sinks.append(divmod(idx, width))

        if len(sources) != 1:
            raise ConfigurationError(f"Grid needs exactly one source, found {len(sources)}")
        if len(sinks) != 1:
            raise ConfigurationError(f"Grid needs exactly one sink, found {len(sinks)}")

        self.source = sources[0]
        self.sink = sinks[0]
        self.source_index = self.get_index(*self.source)
        self.source_bit = bit(self.source_index)
        self.target_mask = self.compute_target_mask()
        self.empty_count = popcount(self.target_mask)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], mask_bits: int = MASK_BITS) -> "Grid":
        rows = [list(r) for r in rows]
        if not rows:
            raise ConfigurationError("Grid has no rows")
        width = len(rows[0])
        for r, row in enumerate(rows):
            if len(row) != width:
                raise ConfigurationError(f"Row {r} has {len(row)} cells, expected {width}")
        cells = [int(v) for row in rows for v in row]
        return cls(width, len(rows), cells, mask_bits=mask_bits)

    def get_index(self, row: int, col: int) -> int:
        if 0 <= row < self.height and 0 <= col < self.width:
            return row * self.width + col
        raise IndexError(f"Cell ({row}, {col}) out of bounds")

    def cell_kind(self, row: int, col: int) -> int:
        if 0 <= row < self.height and 0 <= col < self.width:
            return self.cells[row * self.width + col]
        return self.OUT_OF_BOUNDS

    def compute_target_mask(self) -> int:
        """Bit set for every Empty cell, scanned in row-major order."""
        mask = 0
        for idx, kind in enumerate(self.cells):
            if kind == self.EMPTY:
                mask = set_bit(mask, idx)
        return mask

    def is_complete(self, mask: int) -> bool:
        """True when `mask` covers exactly the Empty cells (source bit ignored)."""
        return clear_bit(mask, self.source_index) == self.target_mask

    def rows(self) -> Iterator[bytes]:
        for r in range(self.height):
            yield self.cells[r * self.width:(r + 1) * self.width]

    def render_text(self) -> str:
        return "\n".join(
            "".join(self.SYMBOLS[kind] for kind in row) for row in self.rows()
        )

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return (self.width, self.height, self.cells) == (other.width, other.height, other.cells)

    def __hash__(self):
        return hash((self.width, self.height, self.cells))

    def __repr__(self):
        return f"Grid({self.width}x{self.height}, empty={self.empty_count}, source={self.source}, sink={self.sink})"

    # __slots__ objects pickle fine, but keep the format explicit for worker processes
    def __reduce__(self):
        return (Grid, (self.width, self.height, self.cells, self.mask_bits))
