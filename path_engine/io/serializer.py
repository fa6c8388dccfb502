import io
from typing import Optional

import numpy as np

from path_engine.core.errors import ConfigurationError
from path_engine.core.grid import Grid
from path_engine.core.mask import MASK_BITS


class GridSerializer:
    """
    Plain-text grid format:

        # comment
        <width> <height>
        <height rows of width codes: 0 empty, 1 blocked, 2 source, 3 sink>
    """
    COMMENT = "#"

    @staticmethod
    def loads(text: str, mask_bits: int = MASK_BITS) -> Grid:
        lines = [line.split(GridSerializer.COMMENT, 1)[0].strip() for line in text.splitlines()]
        lines = [line for line in lines if line]
        if not lines:
            raise ConfigurationError("Grid file is empty")

        header = lines[0].split()
        if len(header) != 2:
            raise ConfigurationError(f"Expected '<width> <height>' header, got {lines[0]!r}")
        try:
            width, height = int(header[0]), int(header[1])
        except ValueError as e:
            raise ConfigurationError(f"Invalid header {lines[0]!r}") from e

        body = lines[1:]
        if len(body) != height:
            raise ConfigurationError(f"Header says {height} rows, found {len(body)}")

        try:
            data = np.loadtxt(io.StringIO("\n".join(body)), dtype=np.int64, ndmin=2)
        except ValueError as e:
            raise ConfigurationError(f"Invalid grid rows: {e}") from e

        if data.shape != (height, width):
            raise ConfigurationError(f"Header says {width}x{height}, rows are {data.shape[1]}x{data.shape[0]}")
        if data.min() < 0 or data.max() > Grid.SINK:
            raise ConfigurationError(f"Cell codes must be in 0..{Grid.SINK}")

        return Grid(width, height, data.astype(np.uint8).ravel().tolist(), mask_bits=mask_bits)

    @staticmethod
    def load(filepath: str, mask_bits: int = MASK_BITS) -> Grid:
        with open(filepath, "r", encoding="utf-8") as f:
            return GridSerializer.loads(f.read(), mask_bits=mask_bits)

    @staticmethod
    def dumps(grid: Grid, comment: Optional[str] = None) -> str:
        buf = io.StringIO()
        if comment:
            for line in comment.splitlines():
                buf.write(f"{GridSerializer.COMMENT} {line}\n")
        buf.write(f"{grid.width} {grid.height}\n")
        data = np.frombuffer(grid.cells, dtype=np.uint8).reshape(grid.height, grid.width)
        np.savetxt(buf, data, fmt="%d", delimiter=" ")
        return buf.getvalue()

    @staticmethod
    def save(grid: Grid, filepath: str, comment: Optional[str] = None):
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(GridSerializer.dumps(grid, comment))
