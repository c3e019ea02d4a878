"""Terrain types, tile states and the fixed neighbor slot order."""

from enum import IntEnum


class TileType(IntEnum):
    """Terrain type of a tile. NONE marks an off-world neighbor slot."""

    NONE = -1
    PLAINS = 0
    MOUNTAINS = 1
    SNOW = 2
    OCEAN = 3


class TileState(IntEnum):
    """Visibility state of a tile. Any state above ABSENT is finalized."""

    ABSENT = 0  # not created yet
    VISIBLE = 1
    EXPLORED = 2  # explored but currently hidden


class Neighbor(IntEnum):
    """Index of each neighbor slot; cardinals first, then diagonals."""

    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3
    TOP_LEFT = 4
    TOP_RIGHT = 5
    BOTTOM_RIGHT = 6
    BOTTOM_LEFT = 7


# (dx, dy) grid offsets in slot order; y grows downward.
NEIGHBOR_OFFSETS = (
    (0, -1),
    (1, 0),
    (0, 1),
    (-1, 0),
    (-1, -1),
    (1, -1),
    (1, 1),
    (-1, 1),
)

CARDINAL_NEIGHBORS = (Neighbor.TOP, Neighbor.RIGHT, Neighbor.BOTTOM, Neighbor.LEFT)
DIAGONAL_NEIGHBORS = (
    Neighbor.TOP_LEFT,
    Neighbor.TOP_RIGHT,
    Neighbor.BOTTOM_RIGHT,
    Neighbor.BOTTOM_LEFT,
)
