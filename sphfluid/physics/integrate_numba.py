"""
Numba-optimized integrate stage for SPH.
"""

import numpy as np
import numba as nb
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants


@nb.njit(parallel=True, fastmath=True, cache=True)
def integrate_numba(position_in: np.ndarray, velocity_in: np.ndarray,
                    acceleration: np.ndarray, planes: np.ndarray,
                    position_out: np.ndarray, velocity_out: np.ndarray,
                    n_active: int, wall_stiffness: float,
                    gravity_x: float, gravity_y: float, dt: float):
    """Walls + gravity + symplectic Euler, one task per particle."""
    for i in nb.prange(n_active):
        x = position_in[i, 0]
        y = position_in[i, 1]
        ax = float(acceleration[i, 0])
        ay = float(acceleration[i, 1])

        for w in range(planes.shape[0]):
            nx = planes[w, 0]
            ny = planes[w, 1]
            dist = nx * x + ny * y + planes[w, 2]
            # min(dist, 0): only penetrating particles are pushed back
            if dist < 0.0:
                ax += dist * -wall_stiffness * nx
                ay += dist * -wall_stiffness * ny

        ax += gravity_x
        ay += gravity_y

        vx = velocity_in[i, 0] + dt * ax
        vy = velocity_in[i, 1] + dt * ay
        velocity_out[i, 0] = vx
        velocity_out[i, 1] = vy
        position_out[i, 0] = x + dt * vx
        position_out[i, 1] = y + dt * vy


def integrate_numba_wrapper(state: ParticleState, constants: SimulationConstants):
    """Wrapper for Numba integration."""
    gravity = constants.gravity
    integrate_numba(
        state.position_read, state.velocity_read, state.acceleration, constants.planes,
        state.position_write, state.velocity_write,
        state.n_particles, float(constants.wall_stiffness),
        float(gravity[0]), float(gravity[1]), float(constants.time_step)
    )
