from typing import Dict

from path_engine.core.errors import ConfigurationError
from path_engine.core.grid import Grid
from path_engine.core.mask import MASK_BITS
from path_engine.io.serializer import GridSerializer

# Name -> (grid text, documented count or None)
PRESETS: Dict[str, tuple] = {
    # Datacenter cooling puzzle: duct from the top-left to the bottom-left room
    "datacenter": ("""
7 8
2 0 0 0 0 0 0
0 0 0 0 0 0 0
0 0 0 0 0 0 0
0 0 0 0 0 0 0
0 0 0 0 0 0 0
0 0 0 0 0 0 0
0 0 0 0 0 0 0
3 0 0 0 0 1 1
""", 301716),
    "square5": ("""
5 5
2 0 0 0 0
0 0 0 0 0
0 0 0 0 0
0 0 0 0 0
0 0 0 0 3
""", 104),
    "square3": ("""
3 3
2 0 0
0 0 0
0 0 3
""", 2),
    # No empty cells: the only path is the direct step
    "corner2": ("""
2 2
2 3
1 1
""", 1),
}


def load_preset(name: str, mask_bits: int = MASK_BITS) -> Grid:
    if name not in PRESETS:
        raise ConfigurationError(f"Unknown preset {name!r}. Choices: {', '.join(sorted(PRESETS))}")
    return GridSerializer.loads(PRESETS[name][0], mask_bits=mask_bits)


def expected_count(name: str):
    return PRESETS[name][1]
