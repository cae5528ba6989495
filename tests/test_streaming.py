"""
Tests for the streaming step.

All three variants must propagate each population one site along its
lattice velocity on interior sites and leave the boundary ring alone.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from windtunnel.lattice import EX, EY, Q, Direction
from windtunnel.equilibrium import compute_equilibrium, uniform_equilibrium
from windtunnel.streaming import (
    stream_interior, stream_interior_fast, stream_interior_inplace
)


@pytest.fixture
def random_distribution():
    rng = np.random.default_rng(3)
    nx, ny = 23, 17
    rho = 1.0 + 0.1 * rng.standard_normal((ny, nx))
    ux = 0.05 * rng.standard_normal((ny, nx))
    uy = 0.05 * rng.standard_normal((ny, nx))
    return compute_equilibrium(rho, ux, uy)


class TestStreamingVariants:
    """Double-buffered and in-place streaming agree."""

    def test_fast_equals_standard(self, random_distribution):
        f = random_distribution

        np.testing.assert_array_equal(stream_interior_fast(f), stream_interior(f))

    def test_inplace_equals_double_buffered(self, random_distribution):
        """The sweep order of the in-place variant reads every value before it is overwritten."""
        f = random_distribution
        expected = stream_interior(f)

        result = stream_interior_inplace(f.copy())

        np.testing.assert_array_equal(result, expected)

    def test_double_buffered_does_not_modify_input(self, random_distribution):
        f = random_distribution
        f_before = f.copy()

        stream_interior(f)
        stream_interior_fast(f)

        np.testing.assert_array_equal(f, f_before)


class TestStreamingPropagation:
    """Single populations move one site along their direction."""

    @pytest.mark.parametrize("direction", list(range(1, Q)))
    @pytest.mark.parametrize("stream", [stream_interior, stream_interior_fast,
                                        stream_interior_inplace])
    def test_pulse_moves_along_lattice_velocity(self, direction, stream):
        nx, ny = 9, 8
        f = np.zeros((Q, ny, nx))
        x0, y0 = 4, 3
        f[direction, y0, x0] = 1.0

        f = stream(f)

        assert f[direction, y0 + EY[direction], x0 + EX[direction]] == 1.0
        assert f[direction, y0, x0] == 0.0
        assert np.sum(f) == 1.0

    @pytest.mark.parametrize("stream", [stream_interior, stream_interior_fast,
                                        stream_interior_inplace])
    def test_rest_population_does_not_move(self, stream):
        nx, ny = 6, 6
        f = np.zeros((Q, ny, nx))
        f[Direction.REST, 2, 3] = 1.0

        f = stream(f)

        assert f[Direction.REST, 2, 3] == 1.0

    def test_boundary_ring_is_untouched(self, random_distribution):
        f = random_distribution
        out = stream_interior(f)

        np.testing.assert_array_equal(out[:, 0, :], f[:, 0, :])
        np.testing.assert_array_equal(out[:, -1, :], f[:, -1, :])
        np.testing.assert_array_equal(out[:, :, 0], f[:, :, 0])
        np.testing.assert_array_equal(out[:, :, -1], f[:, :, -1])

    def test_uniform_field_is_invariant(self):
        f = uniform_equilibrium(12, 10, 1.0, 0.1)

        np.testing.assert_array_equal(stream_interior_fast(f), f)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
