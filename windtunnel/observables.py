"""
Macroscopic Observable Extraction

Compute density, velocity, and derived quantities from distributions.

In LBM, macroscopic quantities are moments of the distribution function:
    - Density (0th moment): rho = sum_i(f_i)
    - Momentum (1st moment): rho*u = sum_i(f_i * e_i)

Derived fields (pressure gradient, curl) use central differences on the
interior of the grid; the one-cell boundary ring is left at zero.
"""

import numpy as np
from numba import njit, prange
from .lattice import EX, EY, CS2, Q

# Densities at or below this are treated as empty when dividing momentum
RHO_EPSILON = 1e-10


def compute_density(f):
    """
    Compute density field from distribution functions.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)

    Returns
    -------
    rho : ndarray
        Density field, shape (ny, nx)
    """
    return np.sum(f, axis=0)


def compute_velocity(f, rho=None):
    """
    Compute velocity field from distribution functions.

    rho * u = sum_i(f_i * e_i)

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    rho : ndarray, optional
        Density field, shape (ny, nx). If None, computed from f.

    Returns
    -------
    ux, uy : ndarray
        Velocity fields, shape (ny, nx)
    """
    if rho is None:
        rho = compute_density(f)

    q, ny, nx = f.shape
    rho_ux = np.zeros((ny, nx), dtype=np.float64)
    rho_uy = np.zeros((ny, nx), dtype=np.float64)

    for i in range(Q):
        rho_ux += f[i] * EX[i]
        rho_uy += f[i] * EY[i]

    # Avoid division by zero
    valid = rho > RHO_EPSILON
    rho_safe = np.where(valid, rho, 1.0)

    ux = np.where(valid, rho_ux / rho_safe, 0.0)
    uy = np.where(valid, rho_uy / rho_safe, 0.0)

    return ux, uy


def compute_macroscopic(f):
    """
    Compute density and velocity from distribution functions.

    Returns
    -------
    rho, ux, uy : ndarray
        Fields of shape (ny, nx)
    """
    rho = compute_density(f)
    ux, uy = compute_velocity(f, rho)
    return rho, ux, uy


@njit(parallel=True, cache=True)
def compute_macroscopic_numba(f, rho, ux, uy, ex, ey, eps):
    """
    Numba-accelerated macroscopic quantity computation.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    rho, ux, uy : ndarray
        Output fields, shape (ny, nx)
    ex, ey : ndarray
        Lattice velocity components
    eps : float
        Density below which the velocity is set to zero
    """
    q, ny, nx = f.shape

    for j in prange(ny):
        for i in range(nx):
            rho_local = 0.0
            rho_ux = 0.0
            rho_uy = 0.0

            for k in range(q):
                f_k = f[k, j, i]
                rho_local += f_k
                rho_ux += f_k * ex[k]
                rho_uy += f_k * ey[k]

            rho[j, i] = rho_local

            if rho_local > eps:
                ux[j, i] = rho_ux / rho_local
                uy[j, i] = rho_uy / rho_local
            else:
                ux[j, i] = 0.0
                uy[j, i] = 0.0


def compute_macroscopic_fast(f):
    """
    Fast macroscopic quantity computation using Numba.

    Returns
    -------
    rho, ux, uy : ndarray
        Fields of shape (ny, nx)
    """
    q, ny, nx = f.shape
    rho = np.zeros((ny, nx), dtype=np.float64)
    ux = np.zeros((ny, nx), dtype=np.float64)
    uy = np.zeros((ny, nx), dtype=np.float64)

    ex = EX.astype(np.float64)
    ey = EY.astype(np.float64)

    compute_macroscopic_numba(f, rho, ux, uy, ex, ey, RHO_EPSILON)

    return rho, ux, uy


def compute_pressure(rho, cs2=CS2):
    """
    Compute pressure field from density.

    p = rho * c_s^2
    """
    return rho * cs2


def compute_pressure_gradient(pressure):
    """
    Pressure gradient by central differences on interior cells.

    grad_x = (p[x+1] - p[x-1]) / 2, grad_y = (p[y+1] - p[y-1]) / 2

    Parameters
    ----------
    pressure : ndarray
        Pressure field, shape (ny, nx)

    Returns
    -------
    grad_x, grad_y : ndarray
        Gradient components, shape (ny, nx), zero on the boundary ring
    """
    grad_x = np.zeros_like(pressure, dtype=np.float64)
    grad_y = np.zeros_like(pressure, dtype=np.float64)

    grad_x[1:-1, 1:-1] = (pressure[1:-1, 2:] - pressure[1:-1, :-2]) / 2.0
    grad_y[1:-1, 1:-1] = (pressure[2:, 1:-1] - pressure[:-2, 1:-1]) / 2.0

    return grad_x, grad_y


@njit(parallel=True, cache=True)
def compute_pressure_gradient_numba(pressure, grad_x, grad_y):
    """Numba-accelerated interior pressure gradient."""
    ny, nx = pressure.shape

    for j in prange(1, ny - 1):
        for i in range(1, nx - 1):
            grad_x[j, i] = (pressure[j, i + 1] - pressure[j, i - 1]) / 2.0
            grad_y[j, i] = (pressure[j + 1, i] - pressure[j - 1, i]) / 2.0


def compute_pressure_gradient_fast(pressure):
    """Fast pressure gradient using Numba."""
    grad_x = np.zeros(pressure.shape, dtype=np.float64)
    grad_y = np.zeros(pressure.shape, dtype=np.float64)
    compute_pressure_gradient_numba(
        np.ascontiguousarray(pressure, dtype=np.float64), grad_x, grad_y
    )
    return grad_x, grad_y


def compute_curl(ux, uy):
    """
    Curl of the velocity field on interior cells.

    curl = (uy[x+1] - uy[x-1]) - (ux[y+1] - ux[y-1])

    The differences are left undivided, so the result is twice the
    vorticity. Display colour scales are tuned to this convention.

    Parameters
    ----------
    ux, uy : ndarray
        Velocity fields, shape (ny, nx)

    Returns
    -------
    curl : ndarray
        Shape (ny, nx), zero on the boundary ring
    """
    curl = np.zeros_like(ux, dtype=np.float64)

    duy_dx = uy[1:-1, 2:] - uy[1:-1, :-2]
    dux_dy = ux[2:, 1:-1] - ux[:-2, 1:-1]
    curl[1:-1, 1:-1] = duy_dx - dux_dy

    return curl


def compute_velocity_magnitude(ux, uy):
    """
    Compute velocity magnitude field.

    |u| = sqrt(ux^2 + uy^2)
    """
    return np.sqrt(ux * ux + uy * uy)


def dynamic_pressure(rho, speed):
    """Dynamic pressure q = 0.5 * rho * U^2."""
    return 0.5 * rho * speed * speed
