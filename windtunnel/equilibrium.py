"""
Equilibrium Distribution Functions

Maxwell-Boltzmann equilibrium for D2Q9 lattice.

The equilibrium distribution is derived from the Maxwell-Boltzmann distribution
truncated to second order in velocity. For the D2Q9 lattice:

    f_i^eq = w_i * rho * [1 + (e_i · u)/c_s^2 + (e_i · u)^2/(2*c_s^4) - u^2/(2*c_s^2)]

which, with c_s^2 = 1/3, is

    f_i^eq = w_i * rho * [1 + 3 (e_i · u) + 4.5 (e_i · u)^2 - 1.5 u^2]
"""

import numpy as np
from numba import njit, prange
from .lattice import EX, EY, W, CS2, CS4, Q


def equilibrium(weight, density, velocity, direction):
    """
    Equilibrium population of one direction at one site.

    Parameters
    ----------
    weight : float
        Lattice weight of the direction
    density : float
        Local density
    velocity : tuple of float
        Local velocity (ux, uy)
    direction : int
        Lattice direction index

    Returns
    -------
    f_eq : float
    """
    ux, uy = velocity
    eu = EX[direction] * ux + EY[direction] * uy
    u_sq = ux * ux + uy * uy

    return weight * density * (1.0 + 3.0 * eu + 4.5 * eu * eu - 1.5 * u_sq)


def compute_equilibrium(rho, ux, uy):
    """
    Compute equilibrium distribution for all lattice sites.

    Uses vectorized NumPy operations.

    Parameters
    ----------
    rho : ndarray
        Density field, shape (ny, nx)
    ux : ndarray
        X-velocity field, shape (ny, nx)
    uy : ndarray
        Y-velocity field, shape (ny, nx)

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q, ny, nx)
    """
    ny, nx = rho.shape
    f_eq = np.zeros((Q, ny, nx), dtype=np.float64)

    u_sq = ux * ux + uy * uy

    for i in range(Q):
        eu = EX[i] * ux + EY[i] * uy
        f_eq[i] = W[i] * rho * (
            1.0
            + eu / CS2
            + (eu * eu) / (2.0 * CS4)
            - u_sq / (2.0 * CS2)
        )

    return f_eq


@njit(parallel=True, cache=True)
def compute_equilibrium_numba(rho, ux, uy, f_eq, ex, ey, w, cs2, cs4):
    """
    Numba-accelerated equilibrium computation.

    Parameters
    ----------
    rho : ndarray
        Density field, shape (ny, nx)
    ux, uy : ndarray
        Velocity fields, shape (ny, nx)
    f_eq : ndarray
        Output equilibrium distribution, shape (Q, ny, nx)
    ex, ey : ndarray
        Lattice velocity components
    w : ndarray
        Lattice weights
    cs2, cs4 : float
        Sound speed squared and fourth power
    """
    q, ny, nx = f_eq.shape

    for j in prange(ny):
        for i in range(nx):
            rho_ij = rho[j, i]
            ux_ij = ux[j, i]
            uy_ij = uy[j, i]
            u_sq = ux_ij * ux_ij + uy_ij * uy_ij

            for k in range(q):
                eu = ex[k] * ux_ij + ey[k] * uy_ij
                f_eq[k, j, i] = w[k] * rho_ij * (
                    1.0
                    + eu / cs2
                    + (eu * eu) / (2.0 * cs4)
                    - u_sq / (2.0 * cs2)
                )


def compute_equilibrium_fast(rho, ux, uy):
    """
    Fast equilibrium computation using Numba.

    Parameters
    ----------
    rho : ndarray
        Density field, shape (ny, nx)
    ux, uy : ndarray
        Velocity fields, shape (ny, nx)

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q, ny, nx)
    """
    ny, nx = rho.shape
    f_eq = np.zeros((Q, ny, nx), dtype=np.float64)

    ex = EX.astype(np.float64)
    ey = EY.astype(np.float64)

    compute_equilibrium_numba(
        np.ascontiguousarray(rho, dtype=np.float64),
        np.ascontiguousarray(ux, dtype=np.float64),
        np.ascontiguousarray(uy, dtype=np.float64),
        f_eq, ex, ey, W, CS2, CS4
    )

    return f_eq


def equilibrium_single_site(rho, ux, uy):
    """
    Compute equilibrium distribution for a single lattice site.

    Parameters
    ----------
    rho : float
        Density at the site
    ux, uy : float
        Velocity at the site

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q,)
    """
    f_eq = np.zeros(Q, dtype=np.float64)

    for i in range(Q):
        f_eq[i] = equilibrium(W[i], rho, (ux, uy), i)

    return f_eq


def uniform_equilibrium(nx, ny, rho, ux, uy=0.0):
    """
    Distribution for a uniform flow, every site at the same equilibrium.

    Returns
    -------
    f : ndarray
        Shape (Q, ny, nx)
    """
    f_site = equilibrium_single_site(rho, ux, uy)
    return f_site[:, None, None] * np.ones((ny, nx), dtype=np.float64)
