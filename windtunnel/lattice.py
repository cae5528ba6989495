"""
D2Q9 Lattice Constants and Utilities

Defines the D2Q9 lattice model used by the wind tunnel solver, plus the
flat cell indexing shared by every field.
"""
from enum import IntEnum

import numpy as np

# D2Q9 lattice velocities
#     6   2   5
#       \ | /
#     3 - 0 - 1
#       / | \
#     7   4   8


class Direction(IntEnum):
    """Lattice direction indices."""
    REST = 0
    EAST = 1
    NORTH = 2
    WEST = 3
    SOUTH = 4
    NORTH_EAST = 5
    NORTH_WEST = 6
    SOUTH_WEST = 7
    SOUTH_EAST = 8


# Lattice velocity components
EX = np.array([0, 1, 0, -1, 0, 1, -1, -1, 1], dtype=np.int32)
EY = np.array([0, 0, 1, 0, -1, 1, 1, -1, -1], dtype=np.int32)

# Lattice weights
W = np.array([4/9, 1/9, 1/9, 1/9, 1/9, 1/36, 1/36, 1/36, 1/36], dtype=np.float64)

# Opposite direction indices (for bounce-back)
OPPOSITE = np.array([0, 3, 4, 1, 2, 7, 8, 5, 6], dtype=np.int32)

for _table in (EX, EY, W, OPPOSITE):
    _table.flags.writeable = False

# Lattice sound speed
CS = 1.0 / np.sqrt(3.0)
CS2 = 1.0 / 3.0
CS4 = CS2 * CS2

# Number of lattice velocities
Q = 9


def grid_index(x, y, width):
    """
    Flat (row-major) index of cell (x, y).

    Fields are stored as (ny, nx) C-ordered arrays, so
    ``field.ravel()[grid_index(x, y, nx)] == field[y, x]``.
    """
    return y * width + x


def round_half_up(value):
    """Round to the nearest integer, halves going up (not banker's rounding)."""
    return int(np.floor(value + 0.5))
