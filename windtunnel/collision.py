"""
Collision Operators

BGK collision model for LBM.

The collision step models molecular interactions and drives the distribution
toward equilibrium. The relaxation time tau controls the viscosity:

    nu = c_s^2 * (tau - 0.5) * dt

where c_s^2 = 1/3 for D2Q9 and dt = 1 in lattice units.

Stability requires tau > 0.5 (nu > 0).
"""

import warnings

import numpy as np
from numba import njit, prange
from .lattice import CS2


def tau_from_viscosity(nu, dt=1.0, cs2=CS2):
    """
    Compute relaxation time from kinematic viscosity.

    tau = nu / (c_s^2 * dt) + 0.5

    Parameters
    ----------
    nu : float
        Kinematic viscosity
    dt : float
        Time step (default 1.0 in lattice units)
    cs2 : float
        Sound speed squared (default 1/3)

    Returns
    -------
    tau : float
        Relaxation time
    """
    return nu / (cs2 * dt) + 0.5


def viscosity_from_tau(tau, dt=1.0, cs2=CS2):
    """
    Compute kinematic viscosity from relaxation time.

    nu = c_s^2 * (tau - 0.5) * dt

    Raises
    ------
    ValueError
        If tau <= 0.5
    """
    if tau <= 0.5:
        raise ValueError(f"tau must be > 0.5 for stability, got {tau}")
    return cs2 * (tau - 0.5) * dt


def validate_tau(tau, name="tau"):
    """
    Validate that relaxation time is in stable range.

    Parameters
    ----------
    tau : float
        Relaxation time to validate
    name : str
        Name for error messages

    Raises
    ------
    ValueError
        If tau <= 0.5

    Returns
    -------
    tau : float
        Validated tau value
    """
    if tau <= 0.5:
        raise ValueError(
            f"{name} must be > 0.5 for stability (got {tau}). "
            f"This corresponds to nu > 0."
        )
    if tau > 2.0:
        warnings.warn(
            f"{name} = {tau} is large, which may cause slow convergence. "
            f"Consider tau in range (0.5, 2.0) for efficiency."
        )
    return tau


def bgk_collision(f, f_eq, tau):
    """
    BGK (Bhatnagar-Gross-Krook) collision operator.

    f_out = f - (f - f_eq) / tau

    Parameters
    ----------
    f : ndarray
        Distribution functions (Q, ny, nx)
    f_eq : ndarray
        Equilibrium distribution (Q, ny, nx)
    tau : float
        Relaxation time (tau > 0.5 for stability)

    Returns
    -------
    f_out : ndarray
        Post-collision distribution
    """
    if tau <= 0.5:
        raise ValueError(f"tau must be > 0.5 for stability, got {tau}")

    omega = 1.0 / tau  # Relaxation frequency
    return f - omega * (f - f_eq)


@njit(parallel=True, cache=True)
def bgk_collision_numba(f, f_eq, omega, f_out):
    """
    Numba-accelerated BGK collision.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q, ny, nx)
    f_eq : ndarray
        Equilibrium distribution, shape (Q, ny, nx)
    omega : float
        Relaxation frequency (1/tau)
    f_out : ndarray
        Output post-collision distribution, shape (Q, ny, nx)
    """
    q, ny, nx = f.shape

    for j in prange(ny):
        for i in range(nx):
            for k in range(q):
                f_out[k, j, i] = f[k, j, i] - omega * (f[k, j, i] - f_eq[k, j, i])


def bgk_collision_fast(f, f_eq, tau):
    """
    Numba-accelerated BGK collision.

    Returns
    -------
    f_out : ndarray
        Post-collision distribution
    """
    if tau <= 0.5:
        raise ValueError(f"tau must be > 0.5 for stability, got {tau}")

    omega = 1.0 / tau
    f_out = np.zeros_like(f)
    bgk_collision_numba(f, f_eq, omega, f_out)
    return f_out
