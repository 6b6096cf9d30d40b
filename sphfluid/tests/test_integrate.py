"""Integrate stage tests: walls, gravity and the symplectic Euler step."""

import numpy as np
import pytest

import sphfluid
from sphfluid.core.particles import ParticleState
from sphfluid.physics.integrate_vectorized import compute_wall_acceleration_vectorized


@pytest.fixture
def box(make_constants):
    """Unit box with stiff walls and no gravity."""
    return make_constants(map_width=1.0, map_height=1.0, wall_stiffness=100.0)


def run_integrate(positions, velocities, acceleration, constants, backend):
    state = ParticleState.from_arrays(positions, velocities)
    state.acceleration[:] = acceleration
    sphfluid.integrate(state, constants, backend=backend)
    return state


class TestWalls:

    def test_on_wall_has_no_force(self, box):
        positions = np.array([[0.5, 0.0], [0.0, 0.5], [1.0, 1.0]], dtype=np.float32)
        result = compute_wall_acceleration_vectorized(positions, box.planes, box.wall_stiffness)
        np.testing.assert_allclose(result, 0.0, atol=1e-6)

    def test_penetration_is_pushed_back(self, box):
        positions = np.array([[0.5, -1.0], [1.2, 0.5], [-0.1, -0.2]], dtype=np.float32)
        result = compute_wall_acceleration_vectorized(positions, box.planes, box.wall_stiffness)
        np.testing.assert_allclose(result[0], [0.0, 100.0], rtol=1e-5)
        np.testing.assert_allclose(result[1], [-20.0, 0.0], rtol=1e-5)
        np.testing.assert_allclose(result[2], [10.0, 20.0], rtol=1e-5)


class TestIntegrate:

    def test_free_particle_drifts(self, backend, box):
        state = run_integrate([[0.5, 0.5]], [[1.0, 0.0]], [[0.0, 0.0]], box, backend)
        np.testing.assert_allclose(state.velocity_write[0], [1.0, 0.0], rtol=1e-6)
        np.testing.assert_allclose(state.position_write[0], [0.51, 0.5], rtol=1e-6)

    def test_semi_implicit_euler(self, backend, box):
        # The drift uses the already-updated velocity
        state = run_integrate([[0.5, 0.5]], [[0.0, 0.0]], [[2.0, 0.0]], box, backend)
        np.testing.assert_allclose(state.velocity_write[0], [0.02, 0.0], rtol=1e-5)
        np.testing.assert_allclose(state.position_write[0], [0.5002, 0.5], rtol=1e-5)

    def test_gravity(self, backend, box):
        constants = box.with_gravity(0.0, -10.0)
        state = run_integrate([[0.5, 0.5]], [[0.0, 0.0]], [[0.0, 0.0]], constants, backend)
        np.testing.assert_allclose(state.velocity_write[0], [0.0, -0.1], rtol=1e-5)
        np.testing.assert_allclose(state.position_write[0], [0.5, 0.499], rtol=1e-5)

    def test_wall_penalty(self, backend, box):
        state = run_integrate([[0.5, -0.1]], [[0.0, 0.0]], [[0.0, 0.0]], box, backend)
        # a = 100 * 0.1 upward
        np.testing.assert_allclose(state.velocity_write[0], [0.0, 0.1], rtol=1e-4, atol=1e-7)
        np.testing.assert_allclose(state.position_write[0], [0.5, -0.099], rtol=1e-4)

    def test_read_slot_untouched(self, backend, box):
        state = ParticleState.from_arrays([[0.5, 0.5], [0.2, 0.3]], [[1.0, 1.0], [0.0, -1.0]])
        state.acceleration[:] = [[3.0, 0.0], [0.0, 0.0]]
        position = state.position_read.copy()
        velocity = state.velocity_read.copy()

        sphfluid.integrate(state, box, backend=backend)

        np.testing.assert_array_equal(state.position_read, position)
        np.testing.assert_array_equal(state.velocity_read, velocity)
        assert state.read_slot == 0
