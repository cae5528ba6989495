"""
Boundary Condition Handlers

Full-way bounce-back for the embedded obstacle, and the helpers that turn
obstacle geometry (cell offsets from a fixed origin) into a solid mask.

Bounce-back reflects every population at a solid site into the opposite
direction, which models a stationary no-slip wall:
    f_i'(x_wall) = f_{i*}(x_wall)

The sweep only covers 0 <= x < nx-2 and 0 <= y < ny-2. Solid sites in the
last two columns or rows are left untouched, so obstacles must stay clear
of that margin.
"""

import warnings

import numpy as np
from numba import njit, prange
from .lattice import Q, OPPOSITE, round_half_up

# Width of the far-edge band excluded from the bounce-back sweep
BOUNCE_BACK_MARGIN = 2


def bounce_back_region(solid_mask):
    """
    Solid sites actually reflected by the bounce-back sweep.

    Parameters
    ----------
    solid_mask : ndarray
        Boolean mask for solid nodes, shape (ny, nx)

    Returns
    -------
    active : ndarray
        Boolean mask, shape (ny, nx)
    """
    active = np.zeros_like(solid_mask, dtype=bool)
    ny, nx = solid_mask.shape
    y_stop = max(ny - BOUNCE_BACK_MARGIN, 0)
    x_stop = max(nx - BOUNCE_BACK_MARGIN, 0)
    active[:y_stop, :x_stop] = solid_mask[:y_stop, :x_stop]
    return active


def apply_bounce_back(f, solid_mask):
    """
    Apply bounce-back boundary condition for solid walls (no-slip).

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    solid_mask : ndarray
        Boolean mask for solid nodes, shape (ny, nx)

    Returns
    -------
    f : ndarray
        Distribution with bounce-back applied
    """
    active = bounce_back_region(solid_mask)
    f_new = f.copy()

    for i in range(Q):
        i_opp = OPPOSITE[i]
        # At solid nodes, swap with opposite direction
        f_new[i, active] = f[i_opp, active]

    return f_new


@njit(parallel=True, cache=True)
def apply_bounce_back_numba(f, f_out, solid_mask, opposite, margin):
    """
    Numba-accelerated bounce-back.

    Parameters
    ----------
    f : ndarray
        Input distribution, shape (Q, ny, nx)
    f_out : ndarray
        Output distribution, shape (Q, ny, nx). Must already hold a copy
        of f; only solid sites are rewritten.
    solid_mask : ndarray
        Boolean solid mask, shape (ny, nx)
    opposite : ndarray
        Opposite direction indices
    margin : int
        Far-edge columns/rows skipped by the sweep
    """
    q, ny, nx = f.shape

    for j in prange(ny - margin):
        for i in range(nx - margin):
            if solid_mask[j, i]:
                for k in range(q):
                    f_out[k, j, i] = f[opposite[k], j, i]


def apply_bounce_back_fast(f, solid_mask):
    """
    Fast bounce-back using Numba.

    Returns
    -------
    f_out : ndarray
        Distribution with bounce-back applied
    """
    f_out = f.copy()
    apply_bounce_back_numba(f, f_out, solid_mask, OPPOSITE, BOUNCE_BACK_MARGIN)
    return f_out


def round_offsets(offsets):
    """
    Round obstacle offsets to integer cell offsets.

    Parameters
    ----------
    offsets : iterable of (float, float)

    Returns
    -------
    cells : ndarray
        Integer offsets, shape (n, 2)
    """
    cells = [(round_half_up(x), round_half_up(y)) for x, y in offsets]
    return np.array(cells, dtype=np.int64).reshape(-1, 2)


def build_solid_mask(shape, origin, offsets):
    """
    Solid mask with every origin + offset cell marked.

    Parameters
    ----------
    shape : tuple of int
        Grid shape (ny, nx)
    origin : tuple of int
        Cell (x, y) the offsets are relative to
    offsets : iterable of (float, float)
        Obstacle cells relative to origin; rounded half-up

    Returns
    -------
    mask : ndarray
        Boolean mask (True for solid), shape (ny, nx)

    Raises
    ------
    ValueError
        If any cell falls outside the grid
    """
    ny, nx = shape
    mask = np.zeros((ny, nx), dtype=bool)

    cells = round_offsets(offsets)
    if len(cells) == 0:
        return mask

    xs = cells[:, 0] + origin[0]
    ys = cells[:, 1] + origin[1]

    outside = (xs < 0) | (xs >= nx) | (ys < 0) | (ys >= ny)
    if np.any(outside):
        bad = np.argmax(outside)
        raise ValueError(
            f"Obstacle cell ({xs[bad]}, {ys[bad]}) lies outside the "
            f"{nx}x{ny} grid"
        )

    mask[ys, xs] = True

    in_margin = (xs >= nx - BOUNCE_BACK_MARGIN) | (ys >= ny - BOUNCE_BACK_MARGIN)
    if np.any(in_margin):
        warnings.warn(
            f"{int(np.sum(in_margin))} obstacle cells lie in the last "
            f"{BOUNCE_BACK_MARGIN} rows/columns and will not reflect flow."
        )

    return mask


def fill_outline(outline):
    """
    Fill an outline into a solid shape, column by column.

    For every x present in the outline, all cells between the lowest and
    highest outline y of that column are included.

    Parameters
    ----------
    outline : iterable of (int, int)
        Integer outline coordinates

    Returns
    -------
    cells : ndarray
        Filled shape, shape (n, 2), sorted by x then y
    """
    points = np.asarray(list(outline), dtype=np.int64).reshape(-1, 2)
    if len(points) == 0:
        return points

    columns = []
    for x in np.unique(points[:, 0]):
        column_y = points[points[:, 0] == x, 1]
        ys = np.arange(column_y.min(), column_y.max() + 1)
        columns.append(np.column_stack([np.full(len(ys), x), ys]))

    return np.concatenate(columns)
