"""
Tests for the SPH kernel math.

Scalar (Numba) forms are checked against hand-computed values and the
vectorized forms against the scalar ones.
"""

import math

import numpy as np
import pytest

from sphfluid.core.constants import kernel_coefficients
from sphfluid.core.kernels import (
    density_contribution,
    tait_pressure,
    grad_pressure_force,
    viscosity_force,
    density_contribution_vectorized,
    tait_pressure_vectorized,
    grad_pressure_force_vectorized,
    viscosity_force_vectorized,
)


class TestCoefficients:

    def test_unit_radius(self):
        poly6, spiky, laplacian = kernel_coefficients(1.0)
        assert poly6 == pytest.approx(315.0 / (64.0 * math.pi))
        assert spiky == pytest.approx(-45.0 / math.pi)
        assert laplacian == pytest.approx(45.0 / math.pi)

    def test_scaling_with_radius(self):
        poly6_1, spiky_1, lap_1 = kernel_coefficients(1.0)
        poly6_2, spiky_2, lap_2 = kernel_coefficients(2.0)
        assert poly6_2 == pytest.approx(poly6_1 / 2 ** 9)
        assert spiky_2 == pytest.approx(spiky_1 / 2 ** 6)
        assert lap_2 == pytest.approx(lap_1 / 2 ** 6)


class TestDensityKernel:

    def test_self_contribution(self):
        # r = 0: m * C * h^6
        assert density_contribution(0.0, 2.0, 3.0, 1.0) == pytest.approx(6.0)

    def test_inside_support(self):
        assert density_contribution(0.5, 1.0, 1.0, 1.0) == pytest.approx(0.125)

    def test_vectorized_is_zero_outside_support(self):
        r_sq = np.array([0.0, 0.5, 1.0, 4.0])
        result = density_contribution_vectorized(r_sq, 1.0, 1.0, 1.0)
        np.testing.assert_allclose(result, [1.0, 0.125, 0.0, 0.0])


class TestPressure:

    def test_zero_at_rest_density(self):
        assert tait_pressure(1000.0, 200.0, 1000.0) == 0.0

    def test_compressed(self):
        # 200 * (2^3 - 1)
        assert tait_pressure(2000.0, 200.0, 1000.0) == pytest.approx(1400.0)

    def test_tension_is_clamped(self):
        assert tait_pressure(500.0, 200.0, 1000.0) == 0.0

    def test_vectorized_matches_scalar(self):
        density = np.array([0.0, 500.0, 1000.0, 1100.0, 2000.0])
        result = tait_pressure_vectorized(density, 200.0, 1000.0)
        expected = [tait_pressure(d, 200.0, 1000.0) for d in density]
        np.testing.assert_allclose(result, expected, rtol=1e-6)


class TestForceKernels:

    def test_pressure_pushes_pair_apart(self):
        # Neighbor on +x; spiky coefficient is negative
        fx, fy = grad_pressure_force(0.5, 1.0, 1.0, 1.0, 0.5, 0.0, 1.0, -1.0, 1.0)
        # -1 * 1 / 1 * 0.25 / 0.5 * 0.5
        assert fx == pytest.approx(-0.25)
        assert fy == 0.0

    def test_pressure_uses_average(self):
        fx_a, _ = grad_pressure_force(0.5, 0.0, 2.0, 1.0, 0.5, 0.0, 1.0, -1.0, 1.0)
        fx_b, _ = grad_pressure_force(0.5, 1.0, 1.0, 1.0, 0.5, 0.0, 1.0, -1.0, 1.0)
        assert fx_a == pytest.approx(fx_b)

    def test_viscosity_drags_toward_neighbor_velocity(self):
        fx, fy = viscosity_force(0.5, 0.0, 0.0, 1.0, 0.0, 1.0, 1.0, 1.0, 1.0, 1.0)
        assert fx == pytest.approx(0.5)
        assert fy == 0.0

    def test_viscosity_zero_for_equal_velocities(self):
        fx, fy = viscosity_force(0.3, 2.0, -1.0, 2.0, -1.0, 1.0, 1.0, 1.0, 1.0, 1.0)
        assert fx == 0.0
        assert fy == 0.0

    def test_vectorized_matches_scalar(self):
        r = np.array([0.1, 0.4, 0.9])
        n_pressure = np.array([0.0, 3.0, 10.0])
        n_density = np.array([1.0, 2.0, 5.0])
        diff = np.array([[0.1, 0.0], [0.0, -0.4], [0.9 * 0.6, 0.9 * 0.8]])
        p_velocity = np.array([0.5, -0.5])
        n_velocity = np.array([[1.0, 0.0], [0.0, 1.0], [-1.0, -1.0]])
        p_pressure = 2.0

        pressure = grad_pressure_force_vectorized(r, p_pressure, n_pressure, n_density, diff,
                                                  0.5, -3.0, 1.0)
        viscous = viscosity_force_vectorized(r, p_velocity, n_velocity, n_density,
                                             0.5, 0.2, 3.0, 1.0)

        for k in range(3):
            fx, fy = grad_pressure_force(r[k], p_pressure, n_pressure[k], n_density[k],
                                         diff[k, 0], diff[k, 1], 0.5, -3.0, 1.0)
            np.testing.assert_allclose(pressure[k], [fx, fy], rtol=1e-6, atol=1e-12)

            fx, fy = viscosity_force(r[k], p_velocity[0], p_velocity[1],
                                     n_velocity[k, 0], n_velocity[k, 1], n_density[k],
                                     0.5, 0.2, 3.0, 1.0)
            np.testing.assert_allclose(viscous[k], [fx, fy], rtol=1e-6, atol=1e-12)
