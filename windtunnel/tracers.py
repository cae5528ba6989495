"""
Passive Tracers and Streamlines

Visualization aids driven by the simulated velocity field. Both sample the
field with bilinear interpolation:

- Tracers are massless particles moved by one Euler step per tick and
  recycled to the inlet side when they leave the domain or hit a solid.
- Streamlines are short forward-Euler polylines traced from fixed seeds,
  recomputed from scratch whenever they are requested.
"""

import numpy as np
from .lattice import round_half_up

TRACER_ROWS = 8
TRACER_COLUMNS = 8

STREAMLINE_ROWS = 10
STREAMLINE_COLUMNS = 10
STREAMLINE_STEP_SCALE = 10.0
STREAMLINE_MAX_STEPS = 10


def sample_velocity(ux, uy, x, y):
    """
    Bilinear interpolation of the velocity field at a continuous position.

    When a coordinate is an exact integer the upper sample is pushed one
    cell forward so the blend weights stay defined.

    Parameters
    ----------
    ux, uy : ndarray
        Velocity fields, shape (ny, nx)
    x, y : float
        Sample position in cell units

    Returns
    -------
    vx, vy : float
    """
    x1 = int(np.floor(x))
    x2 = int(np.ceil(x))
    y1 = int(np.floor(y))
    y2 = int(np.ceil(y))

    if x1 == x2:
        x2 += 1
    if y1 == y2:
        y2 += 1

    dx = (x - x1) / (x2 - x1)
    dy = (y - y1) / (y2 - y1)

    w11 = (1.0 - dx) * (1.0 - dy)
    w21 = dx * (1.0 - dy)
    w12 = (1.0 - dx) * dy
    w22 = dx * dy

    vx = w11 * ux[y1, x1] + w21 * ux[y1, x2] + w12 * ux[y2, x1] + w22 * ux[y2, x2]
    vy = w11 * uy[y1, x1] + w21 * uy[y1, x2] + w12 * uy[y2, x1] + w22 * uy[y2, x2]

    return float(vx), float(vy)


def can_sample(x, y, nx, ny):
    """True if (x, y) has all four bilinear neighbours inside the grid."""
    return 0.0 <= x < nx - 1 and 0.0 <= y < ny - 1


class Tracer:
    """
    Massless particle advected by the local flow.

    Parameters
    ----------
    start_position : tuple of float
        Seed position (x, y)
    x_bounds : tuple of float
        (lower, upper) x range; leaving past the upper bound sends the
        tracer back to the lower bound
    """

    def __init__(self, start_position, x_bounds):
        self.seed = np.array(start_position, dtype=np.float64)
        self.position = self.seed.copy()
        self.velocity = np.zeros(2, dtype=np.float64)
        self.x_bounds = (float(x_bounds[0]), float(x_bounds[1]))

    def reset_position(self):
        """Send the tracer back to the lower x bound, keeping its height."""
        self.position[0] = self.x_bounds[0]

    def respawn(self):
        """Return the tracer to its seed."""
        self.position[:] = self.seed

    def move(self):
        """Euler step by the current velocity sample."""
        self.position += self.velocity

        if round_half_up(self.position[0]) >= self.x_bounds[1] - 1:
            # Left the tunnel on the outlet side
            self.reset_position()

    def advance(self, ux, uy, solid):
        """
        Sample the flow at the current position and move one tick.

        Parameters
        ----------
        ux, uy : ndarray
            Velocity fields, shape (ny, nx)
        solid : ndarray
            Boolean solid mask, shape (ny, nx)
        """
        ny, nx = solid.shape
        x, y = self.position

        if not (0.0 <= y < ny - 1) or x < 0.0:
            # Drifted out through the top, bottom or inlet
            self.respawn()
        elif x >= nx - 1 or solid[round_half_up(y), round_half_up(x)]:
            self.reset_position()

        self.velocity[:] = sample_velocity(ux, uy, self.position[0], self.position[1])
        self.move()


class StreamLine:
    """
    Fixed seed for an instantaneous streamline.

    Parameters
    ----------
    start_position : tuple of float
        Seed position (x, y)
    step_scale : float
        Multiplier applied to the sampled velocity for each step
    max_steps : int
        Maximum number of integration steps
    """

    def __init__(self, start_position, step_scale=STREAMLINE_STEP_SCALE,
                 max_steps=STREAMLINE_MAX_STEPS):
        self._position = (float(start_position[0]), float(start_position[1]))
        self._step_scale = float(step_scale)
        self._max_steps = int(max_steps)

    @property
    def position(self):
        return self._position

    @property
    def step_scale(self):
        return self._step_scale

    @property
    def max_steps(self):
        return self._max_steps

    def trace(self, ux, uy):
        """Polyline from this seed through the given velocity field."""
        return trace_streamline(ux, uy, self._position, self._step_scale,
                                self._max_steps)


def trace_streamline(ux, uy, seed, step_scale=STREAMLINE_STEP_SCALE,
                     max_steps=STREAMLINE_MAX_STEPS):
    """
    Forward-Euler streamline from a seed point.

    Stops early once a point leaves the open interior
    0 < x < nx-1, 0 < y < ny-1; that point is not included.

    Parameters
    ----------
    ux, uy : ndarray
        Velocity fields, shape (ny, nx)
    seed : tuple of float
        Start position (x, y)
    step_scale : float
        Multiplier applied to the sampled velocity
    max_steps : int
        Maximum number of steps

    Returns
    -------
    points : ndarray
        Polyline, shape (n, 2), starting at the seed
    """
    ny, nx = ux.shape
    x, y = float(seed[0]), float(seed[1])
    points = [(x, y)]

    for _ in range(max_steps):
        if not can_sample(x, y, nx, ny):
            break
        vx, vy = sample_velocity(ux, uy, x, y)
        x += step_scale * vx
        y += step_scale * vy

        if not (0.0 < x < nx - 1 and 0.0 < y < ny - 1):
            break
        points.append((x, y))

    return np.array(points, dtype=np.float64)


def default_tracers(nx, ny, rows=TRACER_ROWS, columns=TRACER_COLUMNS):
    """
    Tracers seeded on a regular grid covering the whole tunnel.

    Seeds that round up past the sampling range of the grid are skipped.

    Returns
    -------
    tracers : list of Tracer
    """
    x_offset = round_half_up(nx / columns)
    y_offset = round_half_up(ny / rows)
    bounds = (1, nx)

    tracers = []
    for i in range(columns):
        for j in range(rows):
            position = (i * x_offset + x_offset / 2, j * y_offset + y_offset / 2)
            if can_sample(position[0], position[1], nx, ny):
                tracers.append(Tracer(position, bounds))
    return tracers


def default_streamlines(nx, ny, rows=STREAMLINE_ROWS, columns=STREAMLINE_COLUMNS):
    """
    Streamline seeds on a regular grid; the last column is left out so
    lines have room to develop before the outlet.

    Returns
    -------
    streamlines : list of StreamLine
    """
    x_offset = nx / columns
    y_offset = ny / rows

    streamlines = []
    for i in range(columns - 1):
        for j in range(rows):
            position = (i * x_offset + x_offset / 2, j * y_offset + y_offset / 2)
            streamlines.append(StreamLine(position))
    return streamlines
