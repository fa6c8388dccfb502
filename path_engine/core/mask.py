from path_engine.core.errors import ConfigurationError

# Width of the visitation mask. A 64-cell grid fits in one machine word.
MASK_BITS = 64


def bit(index: int) -> int:
    return 1 << index


def is_set(mask: int, index: int) -> bool:
    return (mask >> index) & 1 == 1


def set_bit(mask: int, index: int) -> int:
    return mask | (1 << index)


def clear_bit(mask: int, index: int) -> int:
    return mask & ~(1 << index)


def popcount(mask: int) -> int:
    return bin(mask).count("1")


def check_capacity(cell_count: int, mask_bits: int = MASK_BITS):
    """
    Fails fast when a grid has more cells than the mask can index.
    Python ints are unbounded, so the limit is a configuration choice.
    """
    if mask_bits <= 0:
        raise ConfigurationError(f"Mask width must be positive, got {mask_bits}")
    if cell_count > mask_bits:
        raise ConfigurationError(
            f"Grid has {cell_count} cells but the visitation mask holds {mask_bits} bits"
        )
