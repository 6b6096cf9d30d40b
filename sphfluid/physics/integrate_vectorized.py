"""
Vectorized integrate stage for SPH.

Adds wall penalty forces and gravity to the force-stage acceleration, then
advances with symplectic (semi-implicit) Euler:

    v(t+dt) = v(t) + a dt      (kick)
    x(t+dt) = x(t) + v(t+dt) dt  (drift)

Results land in the write slot; the read slot is never touched.
"""

import numpy as np
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants


def compute_wall_acceleration_vectorized(positions: np.ndarray, planes: np.ndarray,
                                         wall_stiffness: float) -> np.ndarray:
    """Penalty acceleration from the four walls.

    d = n·x + offset; a penetrating particle (d < 0) is pushed back along n
    with magnitude wall_stiffness * |d|.

    Args:
        positions: (N, 2) positions
        planes: (4, 3) wall planes (nx, ny, offset)
        wall_stiffness: Penalty stiffness

    Returns:
        (N, 2) acceleration
    """
    normals = planes[:, :2]
    dist = positions @ normals.T + planes[:, 2]             # (N, 4)
    penetration = np.minimum(dist, 0.0)
    return -wall_stiffness * (penetration @ normals)        # Σ_w min(d,0) n_w


def integrate_vectorized(state: ParticleState, constants: SimulationConstants):
    """Write next-tick positions and velocities into the write slot."""
    positions = state.position_read
    velocities = state.velocity_read
    dt = constants.time_step

    acceleration = state.acceleration + compute_wall_acceleration_vectorized(
        positions, constants.planes, constants.wall_stiffness
    )
    acceleration += constants.gravity_array

    new_velocity = velocities + dt * acceleration
    state.velocity_write[:] = new_velocity
    state.position_write[:] = positions + dt * new_velocity
