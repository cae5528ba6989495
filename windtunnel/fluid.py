"""
Wind Tunnel Fluid

Grid state and time stepping for flow around an embedded obstacle.

One tick (``Fluid.step``) runs, in this order:
    1. moments        rho, u, p from the distribution
    2. bounce-back    reflect populations at solid sites, zero their velocity
    3. collision      BGK relaxation toward local equilibrium
    4. streaming      double-buffered pull on interior sites
followed by the pressure gradient refresh. The curl is only recomputed by
an explicit ``update_curl`` call.

Field accessors hand out read-only views; the arrays behind them are
replaced every tick, so a view taken before a tick keeps the old values.
"""

import warnings

import numpy as np
from .lattice import CS2, grid_index, round_half_up
from .equilibrium import (
    compute_equilibrium, compute_equilibrium_fast, uniform_equilibrium
)
from .observables import (
    compute_macroscopic, compute_macroscopic_fast, compute_pressure,
    compute_pressure_gradient, compute_pressure_gradient_fast,
    compute_curl, dynamic_pressure
)
from .collision import (
    bgk_collision, bgk_collision_fast, tau_from_viscosity, validate_tau
)
from .streaming import stream_interior, stream_interior_fast
from .boundary import (
    apply_bounce_back, apply_bounce_back_fast, bounce_back_region,
    build_solid_mask
)
from .tracers import default_tracers, default_streamlines


def _read_only(array):
    view = array.view()
    view.flags.writeable = False
    return view


class Fluid:
    """
    D2Q9 BGK wind tunnel with an embedded solid obstacle.

    Parameters
    ----------
    width, height : int
        Number of lattice cells in x and y (at least 3 each)
    density : float
        Free-stream density (must be > 0)
    free_stream_velocity : float
        Free-stream x-velocity in lattice units
    viscosity : float
        Kinematic viscosity; fixes tau = nu / c_s^2 + 0.5 for the
        lifetime of the instance
    use_fast : bool
        Use Numba-accelerated kernels (default True)

    Attributes
    ----------
    running : bool
        ``advance`` only ticks while this is True
    show_tracers, show_streamlines : bool
        Visibility toggles; hidden tracers are not advanced
    step_count : int
        Ticks performed since the last (re)initialization
    """

    def __init__(self, width, height, density, free_stream_velocity,
                 viscosity, use_fast=True):
        if width < 3 or height < 3:
            raise ValueError(f"Grid must be at least 3x3, got {width}x{height}")
        if density <= 0:
            raise ValueError(f"density must be > 0, got {density}")

        self.nx = int(width)
        self.ny = int(height)
        self.num_cells = self.nx * self.ny
        self._density = float(density)
        self._free_stream_velocity = float(free_stream_velocity)
        self._viscosity = float(viscosity)
        self.tau = validate_tau(tau_from_viscosity(viscosity))
        self.use_fast = use_fast

        self._check_mach()

        self._origin = (
            round_half_up(self.nx / 3 + self.nx / 10),
            round_half_up(self.ny / 2),
        )
        self._solid = np.zeros((self.ny, self.nx), dtype=bool)
        self._bounce_back = np.zeros((self.ny, self.nx), dtype=bool)
        self._obstacle_offsets = np.zeros((0, 2), dtype=np.int64)

        self.running = True
        self.show_tracers = False
        self.show_streamlines = False
        self._reset_seeds()

        self.init_fluid()

    def index(self, x, y):
        """Flat index of cell (x, y)."""
        return grid_index(x, y, self.nx)

    def _check_mach(self):
        mach = abs(self._free_stream_velocity) / np.sqrt(CS2)
        if mach > 0.3:
            warnings.warn(
                f"Ma = {mach:.3f} > 0.3, compressibility effects and "
                f"possible instability"
            )

    def _reset_seeds(self):
        self._tracers = default_tracers(self.nx, self.ny)
        self._streamlines = default_streamlines(self.nx, self.ny)

    def init_fluid(self):
        """Reset the distribution to the uniform free-stream equilibrium."""
        u = self._free_stream_velocity
        self.f = uniform_equilibrium(self.nx, self.ny, self._density, u, 0.0)

        self.rho = np.full((self.ny, self.nx), self._density, dtype=np.float64)
        self.ux = np.full((self.ny, self.nx), u, dtype=np.float64)
        self.uy = np.zeros((self.ny, self.nx), dtype=np.float64)
        self.pressure = compute_pressure(self.rho)
        self.grad_x = np.zeros((self.ny, self.nx), dtype=np.float64)
        self.grad_y = np.zeros((self.ny, self.nx), dtype=np.float64)
        self._curl = np.zeros((self.ny, self.nx), dtype=np.float64)
        self._curl_stale = True

        self.step_count = 0

    # Step stages

    def compute_moments(self):
        """Density, velocity and pressure from the current distribution."""
        if self.use_fast:
            self.rho, self.ux, self.uy = compute_macroscopic_fast(self.f)
        else:
            self.rho, self.ux, self.uy = compute_macroscopic(self.f)
        self.pressure = compute_pressure(self.rho)

    def apply_boundary_conditions(self):
        """Bounce-back at solid sites; their velocity is forced to zero."""
        if self.use_fast:
            self.f = apply_bounce_back_fast(self.f, self._solid)
        else:
            self.f = apply_bounce_back(self.f, self._solid)
        self.ux[self._bounce_back] = 0.0
        self.uy[self._bounce_back] = 0.0

    def collide(self):
        """BGK relaxation toward the local equilibrium."""
        if self.use_fast:
            f_eq = compute_equilibrium_fast(self.rho, self.ux, self.uy)
            self.f = bgk_collision_fast(self.f, f_eq, self.tau)
        else:
            f_eq = compute_equilibrium(self.rho, self.ux, self.uy)
            self.f = bgk_collision(self.f, f_eq, self.tau)

    def stream(self):
        """Propagate populations to their downstream neighbours."""
        if self.use_fast:
            self.f = stream_interior_fast(self.f)
        else:
            self.f = stream_interior(self.f)

    def compute_pressure_gradient(self):
        if self.use_fast:
            self.grad_x, self.grad_y = compute_pressure_gradient_fast(self.pressure)
        else:
            self.grad_x, self.grad_y = compute_pressure_gradient(self.pressure)

    def step(self):
        """Perform one full tick regardless of the running flag."""
        self.compute_moments()
        self.apply_boundary_conditions()
        self.collide()
        self.stream()

        self.compute_pressure_gradient()
        self._curl_stale = True
        self.step_count += 1

    def advance(self):
        """
        Advance one frame: tick the solver and move visible tracers.

        Returns
        -------
        ticked : bool
            False if the fluid is paused
        """
        if not self.running:
            return False

        self.step()
        if self.show_tracers:
            self.move_tracers()
        return True

    def pause(self):
        self.running = False

    def resume(self):
        self.running = True

    # Derived fields

    @property
    def curl_stale(self):
        """True if a tick has happened since the curl was last computed."""
        return self._curl_stale

    def update_curl(self):
        """
        Recompute the curl if a tick has happened since the last call.

        Returns
        -------
        curl : ndarray
            Read-only view, shape (ny, nx)
        """
        if self._curl_stale:
            self._curl = compute_curl(self.ux, self.uy)
            self._curl_stale = False
        return _read_only(self._curl)

    def total_mass(self):
        """Sum of the density over every cell."""
        return float(np.sum(self.f))

    # Tracers and streamlines

    def move_tracers(self):
        for tracer in self._tracers:
            tracer.advance(self.ux, self.uy, self._solid)

    @property
    def tracers(self):
        return tuple(self._tracers)

    @property
    def tracer_positions(self):
        """Tracer positions, shape (n, 2)."""
        positions = np.array([t.position for t in self._tracers], dtype=np.float64)
        return positions.reshape(-1, 2)

    @property
    def streamline_seeds(self):
        return tuple(self._streamlines)

    def streamlines(self):
        """
        Trace every streamline through the current velocity field.

        Returns
        -------
        lines : list of ndarray
            One (n, 2) polyline per seed
        """
        return [line.trace(self.ux, self.uy) for line in self._streamlines]

    # Obstacle

    @property
    def origin(self):
        """Cell the obstacle offsets are measured from, (x, y)."""
        return self._origin

    @property
    def obstacle_offsets(self):
        return _read_only(self._obstacle_offsets)

    def update_obstacle(self, offsets):
        """
        Replace the obstacle with the given cell offsets from the origin.

        Clears the solid mask, marks origin + offset for every offset and
        resets tracers and streamline seeds to their default layout.

        Parameters
        ----------
        offsets : iterable of (float, float)
            Obstacle cells relative to ``origin``; rounded half-up

        Raises
        ------
        ValueError
            If any cell falls outside the grid
        """
        solid = build_solid_mask((self.ny, self.nx), self._origin, offsets)

        ys, xs = np.nonzero(solid)
        self._obstacle_offsets = np.column_stack(
            [xs - self._origin[0], ys - self._origin[1]]
        ).astype(np.int64)
        self._solid = solid
        self._bounce_back = bounce_back_region(solid)

        self._reset_seeds()

    # Accessors

    @property
    def dimensions(self):
        return (self.nx, self.ny)

    @property
    def density(self):
        """Free-stream density."""
        return self._density

    @property
    def viscosity(self):
        return self._viscosity

    @property
    def free_stream_velocity(self):
        return self._free_stream_velocity

    @free_stream_velocity.setter
    def free_stream_velocity(self, value):
        self._free_stream_velocity = float(value)
        self._check_mach()
        self.init_fluid()

    @property
    def dynamic_pressure(self):
        return dynamic_pressure(self._density, self._free_stream_velocity)

    @property
    def velocity_field(self):
        """(ux, uy) read-only views, shape (ny, nx) each."""
        return _read_only(self.ux), _read_only(self.uy)

    @property
    def density_field(self):
        return _read_only(self.rho)

    @property
    def pressure_field(self):
        return _read_only(self.pressure)

    @property
    def pressure_gradient(self):
        """(grad_x, grad_y) read-only views, shape (ny, nx) each."""
        return _read_only(self.grad_x), _read_only(self.grad_y)

    @property
    def curl(self):
        """Last computed curl; see ``curl_stale`` and ``update_curl``."""
        return _read_only(self._curl)

    @property
    def solid(self):
        return _read_only(self._solid)

    def get_fields(self):
        """Copies of every macroscopic field."""
        return {
            'rho': self.rho.copy(),
            'ux': self.ux.copy(),
            'uy': self.uy.copy(),
            'pressure': self.pressure.copy(),
            'grad_x': self.grad_x.copy(),
            'grad_y': self.grad_y.copy(),
            'curl': self._curl.copy(),
            'solid': self._solid.copy(),
        }
