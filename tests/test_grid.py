import unittest
import sys
import os
import pickle

# Add project root to path so we can import path_engine
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from path_engine.core.grid import Grid
from path_engine.core.errors import ConfigurationError
from path_engine.core import mask


class TestGrid(unittest.TestCase):
    def test_initialization(self):
        grid = Grid.from_rows([
            [2, 0, 1],
            [0, 3, 0],
        ])
        self.assertEqual(grid.width, 3)
        self.assertEqual(grid.height, 2)
        self.assertEqual(len(grid.cells), 6)
        self.assertEqual(grid.source, (0, 0))
        self.assertEqual(grid.sink, (1, 1))
        self.assertEqual(grid.source_bit, 1)
        self.assertEqual(grid.empty_count, 3)

    def test_coordinates(self):
        grid = Grid.from_rows([[2] + [0] * 4] + [[0] * 5] * 3 + [[0] * 4 + [3]])
        self.assertEqual(grid.get_index(2, 2), 12)  # 2 * 5 + 2
        self.assertEqual(grid.get_index(4, 4), 24)

        with self.assertRaises(IndexError):
            grid.get_index(-1, 0)
        with self.assertRaises(IndexError):
            grid.get_index(0, 5)

    def test_cell_kind_sentinel(self):
        grid = Grid.from_rows([[2, 1], [0, 3]])
        self.assertEqual(grid.cell_kind(0, 0), Grid.SOURCE)
        self.assertEqual(grid.cell_kind(0, 1), Grid.BLOCKED)
        self.assertEqual(grid.cell_kind(1, 0), Grid.EMPTY)
        self.assertEqual(grid.cell_kind(1, 1), Grid.SINK)
        # Out of bounds never raises
        self.assertEqual(grid.cell_kind(-1, 0), Grid.OUT_OF_BOUNDS)
        self.assertEqual(grid.cell_kind(0, 2), Grid.OUT_OF_BOUNDS)
        self.assertEqual(grid.cell_kind(2, 0), Grid.OUT_OF_BOUNDS)

    def test_target_mask(self):
        grid = Grid.from_rows([
            [2, 0, 1],
            [0, 3, 0],
        ])
        # Empty cells at indices 1, 3 and 5
        self.assertEqual(grid.target_mask, 0b101010)
        self.assertEqual(grid.compute_target_mask(), grid.target_mask)
        self.assertEqual(mask.popcount(grid.target_mask), grid.empty_count)

    def test_target_mask_excludes_non_empty(self):
        grid = Grid.from_rows([[2, 1, 0], [1, 3, 0]])
        for idx, kind in enumerate(grid.cells):
            self.assertEqual(mask.is_set(grid.target_mask, idx), kind == Grid.EMPTY)

    def test_target_mask_no_empty_cells(self):
        grid = Grid.from_rows([[2, 3], [1, 1]])
        self.assertEqual(grid.target_mask, 0)
        self.assertTrue(grid.is_complete(grid.source_bit))

    def test_is_complete_ignores_source(self):
        grid = Grid.from_rows([[2, 0], [0, 3]])
        self.assertTrue(grid.is_complete(grid.target_mask))
        self.assertTrue(grid.is_complete(grid.target_mask | grid.source_bit))
        self.assertFalse(grid.is_complete(grid.source_bit | 0b10))

    def test_immutable_cells(self):
        grid = Grid.from_rows([[2, 0], [0, 3]])
        with self.assertRaises(TypeError):
            grid.cells[1] = Grid.BLOCKED

    def test_pickle(self):
        grid = Grid.from_rows([[2, 0, 1], [0, 3, 0]])
        clone = pickle.loads(pickle.dumps(grid))
        self.assertEqual(clone, grid)
        self.assertEqual(clone.target_mask, grid.target_mask)
        self.assertEqual(clone.sink, grid.sink)

    def test_render_text(self):
        grid = Grid.from_rows([[2, 0, 1], [0, 3, 0]])
        self.assertEqual(grid.render_text(), "S.#\n.E.")


class TestGridValidation(unittest.TestCase):
    def test_mask_capacity_guard(self):
        # 13 x 5 = 65 cells, one more than a 64-bit mask
        cells = [Grid.SOURCE, Grid.SINK] + [Grid.EMPTY] * 63
        with self.assertRaises(ConfigurationError):
            Grid(13, 5, cells)

    def test_mask_capacity_at_limit(self):
        cells = [Grid.SOURCE, Grid.SINK] + [Grid.EMPTY] * 62
        grid = Grid(8, 8, cells)
        self.assertEqual(grid.empty_count, 62)

    def test_custom_mask_width(self):
        rows = [[2, 0, 0], [0, 0, 3]]
        with self.assertRaises(ConfigurationError):
            Grid.from_rows(rows, mask_bits=5)
        self.assertEqual(Grid.from_rows(rows, mask_bits=6).mask_bits, 6)

    def test_missing_source(self):
        with self.assertRaises(ConfigurationError):
            Grid.from_rows([[0, 0], [0, 3]])

    def test_duplicate_sink(self):
        with self.assertRaises(ConfigurationError):
            Grid.from_rows([[2, 3], [0, 3]])

    def test_unknown_code(self):
        with self.assertRaises(ConfigurationError):
            Grid.from_rows([[2, 7], [0, 3]])

    def test_ragged_rows(self):
        with self.assertRaises(ConfigurationError):
            Grid.from_rows([[2, 0, 0], [0, 3]])

    def test_bad_dimensions(self):
        with self.assertRaises(ConfigurationError):
            Grid(0, 3, [])
        with self.assertRaises(ConfigurationError):
            Grid(2, 2, [2, 3, 0])

    def test_configuration_error_is_value_error(self):
        self.assertTrue(issubclass(ConfigurationError, ValueError))


class TestMask(unittest.TestCase):
    def test_bit_ops(self):
        m = mask.set_bit(0, 5)
        self.assertEqual(m, mask.bit(5))
        self.assertTrue(mask.is_set(m, 5))
        self.assertFalse(mask.is_set(m, 4))
        self.assertEqual(mask.clear_bit(m, 5), 0)
        # Clearing an unset bit is a no-op
        self.assertEqual(mask.clear_bit(m, 3), m)

    def test_popcount(self):
        self.assertEqual(mask.popcount(0), 0)
        self.assertEqual(mask.popcount(0b1011), 3)
        self.assertEqual(mask.popcount((1 << 64) - 1), 64)

    def test_check_capacity(self):
        mask.check_capacity(64)
        mask.check_capacity(100, mask_bits=128)
        with self.assertRaises(ConfigurationError):
            mask.check_capacity(65)
        with self.assertRaises(ConfigurationError):
            mask.check_capacity(1, mask_bits=0)


if __name__ == '__main__':
    unittest.main()
