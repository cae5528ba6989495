"""
Tests for conservation laws.

Validates mass and momentum conservation of the collision operator and of
full solver ticks. These are fundamental requirements for any correct LBM
implementation.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from windtunnel.lattice import EX, EY, CS2
from windtunnel.equilibrium import compute_equilibrium
from windtunnel.observables import compute_macroscopic
from windtunnel.collision import (
    bgk_collision, bgk_collision_fast,
    tau_from_viscosity, viscosity_from_tau, validate_tau
)
from windtunnel.fluid import Fluid


class TestCollisionConservation:
    """BGK collision conserves mass and momentum site by site."""

    @pytest.fixture
    def perturbed_field(self):
        """Non-equilibrium distribution."""
        rng = np.random.default_rng(7)
        nx, ny = 48, 32
        rho = 1.0 + 0.1 * rng.standard_normal((ny, nx))
        ux = 0.05 * rng.standard_normal((ny, nx))
        uy = 0.05 * rng.standard_normal((ny, nx))

        f = compute_equilibrium(rho, ux, uy)
        return f + 0.001 * rng.random(f.shape)

    def test_mass_conservation_bgk_collision(self, perturbed_field):
        f = perturbed_field
        rho, ux, uy = compute_macroscopic(f)
        f_eq = compute_equilibrium(rho, ux, uy)

        f_coll = bgk_collision(f, f_eq, 0.8)

        np.testing.assert_allclose(np.sum(f_coll, axis=0), rho, rtol=1e-13)

    def test_momentum_conservation_bgk_collision(self, perturbed_field):
        f = perturbed_field
        rho, ux, uy = compute_macroscopic(f)
        f_eq = compute_equilibrium(rho, ux, uy)

        mom_x_before = np.sum(f * EX[:, None, None])
        mom_y_before = np.sum(f * EY[:, None, None])

        f_coll = bgk_collision(f, f_eq, 0.8)

        assert np.isclose(np.sum(f_coll * EX[:, None, None]), mom_x_before, rtol=1e-12)
        assert np.isclose(np.sum(f_coll * EY[:, None, None]), mom_y_before, rtol=1e-12)

    def test_bgk_fast_equals_standard(self, perturbed_field):
        f = perturbed_field
        rho, ux, uy = compute_macroscopic(f)
        f_eq = compute_equilibrium(rho, ux, uy)

        np.testing.assert_allclose(
            bgk_collision_fast(f, f_eq, 0.7), bgk_collision(f, f_eq, 0.7), rtol=1e-14
        )

    @pytest.mark.parametrize("nu", [0.005, 0.0333, 0.1, 0.4])
    def test_equilibrium_is_fixed_point(self, nu):
        """Collision leaves a uniform equilibrium unchanged for any viscosity."""
        nx, ny = 16, 12
        rho = np.ones((ny, nx))
        ux = np.full((ny, nx), 0.1)
        uy = np.full((ny, nx), -0.02)

        f_eq = compute_equilibrium(rho, ux, uy)
        rho_c, ux_c, uy_c = compute_macroscopic(f_eq)
        tau = tau_from_viscosity(nu)

        f_coll = bgk_collision(f_eq, compute_equilibrium(rho_c, ux_c, uy_c), tau)

        np.testing.assert_allclose(f_coll, f_eq, rtol=1e-13)

    def test_collision_rejects_unstable_tau(self, perturbed_field):
        with pytest.raises(ValueError):
            bgk_collision(perturbed_field, perturbed_field, 0.5)
        with pytest.raises(ValueError):
            bgk_collision_fast(perturbed_field, perturbed_field, 0.3)


class TestSolverConservation:
    """Mass conservation over full ticks."""

    @pytest.mark.parametrize("use_fast", [True, False])
    def test_free_stream_mass_conserved(self, use_fast):
        """Total density is invariant for a free stream without solids."""
        fluid = Fluid(40, 20, 1.0, 0.1, 0.05, use_fast=use_fast)
        mass_initial = fluid.total_mass()

        for _ in range(200):
            fluid.step()

        assert np.isclose(fluid.total_mass(), mass_initial, rtol=1e-12)
        assert np.isclose(mass_initial, 40 * 20 * 1.0, rtol=1e-12)

    def test_mass_bounded_with_obstacle(self):
        """With an obstacle the total mass stays close to its initial value."""
        fluid = Fluid(60, 30, 1.0, 0.05, 0.05)
        fluid.update_obstacle([(x, y) for x in range(-3, 4) for y in range(-3, 4)])
        mass_initial = fluid.total_mass()

        for _ in range(200):
            fluid.step()

        assert np.all(np.isfinite(fluid.f))
        assert np.isclose(fluid.total_mass(), mass_initial, rtol=5e-2)


class TestViscosityTauRelation:
    """Test viscosity-tau relationship."""

    def test_tau_from_viscosity(self):
        nu = 0.1
        assert np.isclose(tau_from_viscosity(nu), nu / CS2 + 0.5)

    def test_tau_for_reference_scenario(self):
        """nu = 0.1/3 gives tau = 0.6."""
        assert np.isclose(tau_from_viscosity(0.1 / 3.0), 0.6)

    def test_roundtrip(self):
        tau_original = 0.75
        assert np.isclose(tau_from_viscosity(viscosity_from_tau(tau_original)),
                          tau_original)

    def test_tau_stability_check(self):
        with pytest.raises(ValueError):
            viscosity_from_tau(0.4)
        with pytest.raises(ValueError):
            validate_tau(0.5)

    def test_large_tau_warns(self):
        with pytest.warns(UserWarning):
            assert validate_tau(2.5) == 2.5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
