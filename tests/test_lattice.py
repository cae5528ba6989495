"""
Tests for the D2Q9 lattice definition.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from windtunnel.lattice import (
    EX, EY, W, OPPOSITE, CS, CS2, Q, Direction, grid_index, round_half_up
)


class TestLatticeConstants:
    """Check weights, velocities and the opposite table."""

    def test_weights_sum_to_one(self):
        assert np.isclose(np.sum(W), 1.0, rtol=1e-15)
        assert np.all(W >= 0)

    def test_opposite_is_involution(self):
        """opposite(opposite(d)) == d for every direction."""
        for d in range(Q):
            assert OPPOSITE[OPPOSITE[d]] == d

    def test_opposite_negates_velocity(self):
        """velocity(opposite(d)) == -velocity(d)."""
        for d in range(Q):
            assert EX[OPPOSITE[d]] == -EX[d]
            assert EY[OPPOSITE[d]] == -EY[d]

    def test_rest_direction(self):
        assert EX[Direction.REST] == 0 and EY[Direction.REST] == 0
        assert OPPOSITE[Direction.REST] == Direction.REST

    def test_direction_names_match_velocities(self):
        assert (EX[Direction.NORTH], EY[Direction.NORTH]) == (0, 1)
        assert (EX[Direction.NORTH_WEST], EY[Direction.NORTH_WEST]) == (-1, 1)
        assert (EX[Direction.SOUTH_EAST], EY[Direction.SOUTH_EAST]) == (1, -1)
        assert OPPOSITE[Direction.EAST] == Direction.WEST

    def test_sound_speed(self):
        assert np.isclose(CS * CS, CS2)
        assert np.isclose(CS2, 1.0 / 3.0)

    def test_weights_isotropic_second_moment(self):
        """sum(w e_x e_x) = c_s^2, sum(w e_x e_y) = 0."""
        assert np.isclose(np.sum(W * EX * EX), CS2)
        assert np.isclose(np.sum(W * EY * EY), CS2)
        assert np.isclose(np.sum(W * EX * EY), 0.0)

    def test_constants_are_read_only(self):
        with pytest.raises(ValueError):
            W[0] = 0.5
        with pytest.raises(ValueError):
            OPPOSITE[1] = 1


class TestIndexing:
    """Flat cell indexing."""

    def test_grid_index_matches_ravel(self):
        field = np.arange(20).reshape(4, 5)
        for y in range(4):
            for x in range(5):
                assert field.ravel()[grid_index(x, y, 5)] == field[y, x]

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(-0.5) == 0
        assert round_half_up(4.49) == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
