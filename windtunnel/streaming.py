"""
Streaming Step Implementations

Propagation of distribution functions along lattice velocities.

The streaming step moves each distribution f_i from site x to site x + e_i.
All variants here use the pull scheme on interior sites only:

    f_i(x) <- f_i(x - e_i)      for 1 <= x <= nx-2, 1 <= y <= ny-2

The outer ring of sites is never written; its populations only feed the
neighbouring interior sites.

Two buffering strategies are provided:
- Double-buffered: read from the input, write to a copy. Any sweep order
  is valid and the kernel parallelizes freely.
- In-place: a single buffer swept against each direction's velocity so
  that no value is overwritten before the neighbour that still needs it
  has read it.
"""

import numpy as np
from numba import njit, prange
from .lattice import EX, EY, Q


def stream_interior(f):
    """
    Double-buffered interior streaming using array slicing.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)

    Returns
    -------
    f_streamed : ndarray
        Post-streaming distribution
    """
    q, ny, nx = f.shape
    f_out = f.copy()

    for i in range(1, Q):
        ex, ey = EX[i], EY[i]
        f_out[i, 1:ny - 1, 1:nx - 1] = f[i, 1 - ey:ny - 1 - ey, 1 - ex:nx - 1 - ex]

    return f_out


@njit(parallel=True, cache=True)
def stream_interior_numba(f, f_out, ex, ey):
    """
    Numba-accelerated double-buffered interior streaming.

    Parameters
    ----------
    f : ndarray
        Input distribution functions, shape (Q, ny, nx)
    f_out : ndarray
        Output distribution functions, shape (Q, ny, nx). Must already hold
        a copy of f so the boundary ring is carried over.
    ex, ey : ndarray
        Lattice velocity components
    """
    q, ny, nx = f.shape

    for j in prange(1, ny - 1):
        for i in range(1, nx - 1):
            for k in range(1, q):
                f_out[k, j, i] = f[k, j - ey[k], i - ex[k]]


def stream_interior_fast(f):
    """
    Fast double-buffered streaming using Numba.

    Returns
    -------
    f_streamed : ndarray
        Post-streaming distribution
    """
    f_out = f.copy()
    stream_interior_numba(f, f_out, EX.astype(np.int64), EY.astype(np.int64))
    return f_out


@njit(cache=True)
def stream_interior_inplace_numba(f, ex, ey):
    """
    Single-buffer interior streaming.

    Each direction is swept against its own velocity: x descending when
    ex > 0 and ascending otherwise, likewise for y. A site's source
    (x - e) is then always visited after the site itself.
    """
    q, ny, nx = f.shape

    for k in range(1, q):
        if ey[k] > 0:
            j_start, j_stop, j_step = ny - 2, 0, -1
        else:
            j_start, j_stop, j_step = 1, ny - 1, 1
        if ex[k] > 0:
            i_start, i_stop, i_step = nx - 2, 0, -1
        else:
            i_start, i_stop, i_step = 1, nx - 1, 1

        for j in range(j_start, j_stop, j_step):
            for i in range(i_start, i_stop, i_step):
                f[k, j, i] = f[k, j - ey[k], i - ex[k]]


def stream_interior_inplace(f):
    """
    In-place interior streaming.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx). Modified in place.

    Returns
    -------
    f : ndarray
        The same array, streamed
    """
    stream_interior_inplace_numba(f, EX.astype(np.int64), EY.astype(np.int64))
    return f
