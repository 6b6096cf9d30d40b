"""
Vectorized force stage for SPH.

For every particle i:
- Pressure from its own density (clamped Tait EOS)
- Pressure-gradient and viscosity terms from every j ≠ i with r² < h²
- acceleration = accumulated force / ρᵢ

Gravity and wall forces are left to the integrate stage.
"""

import numpy as np
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants
from ..core.kernels import (
    tait_pressure_vectorized,
    grad_pressure_force_vectorized,
    viscosity_force_vectorized,
)
from .density_vectorized import DEFAULT_BATCH_SIZE


def compute_forces_vectorized(state: ParticleState, constants: SimulationConstants,
                              batch_size: int = DEFAULT_BATCH_SIZE):
    """Fill state.acceleration from positions, velocities and densities.

    Coincident pairs (r² == 0) are skipped along with the self pair, so the
    spiky 1/r never sees a zero.

    Args:
        state: Particle pool; only `acceleration` is written
        constants: Simulation constants
        batch_size: Rows per tile
    """
    positions = state.position_read
    velocities = state.velocity_read
    density = state.density
    n = state.n_particles
    h = constants.h
    h_sq = constants.h_sq

    # Pressure is a pure function of density, so every task sees the same values
    pressure = tait_pressure_vectorized(density, constants.pressure_coef, constants.rest_density)
    all_ids = np.arange(n)

    for start in range(0, n, batch_size):
        stop = min(start + batch_size, n)
        rows = all_ids[start:stop]

        diff = positions[np.newaxis, :, :] - positions[start:stop, np.newaxis, :]
        r_sq = np.sum(diff * diff, axis=2)

        interacting = (r_sq < h_sq) & (r_sq > 0.0) & (rows[:, np.newaxis] != all_ids[np.newaxis, :])
        r = np.sqrt(np.where(interacting, r_sq, h_sq))

        f_pressure = grad_pressure_force_vectorized(
            r, pressure[start:stop, np.newaxis], pressure[np.newaxis, :],
            density[np.newaxis, :], diff,
            constants.mass, constants.spiky_coef, h
        )
        f_viscosity = viscosity_force_vectorized(
            r, velocities[start:stop, np.newaxis, :], velocities[np.newaxis, :, :],
            density[np.newaxis, :],
            constants.mass, constants.viscosity, constants.laplacian_coef, h
        )

        pair_force = np.where(interacting[..., np.newaxis], f_pressure + f_viscosity, 0.0)
        accumulated = np.sum(pair_force, axis=1)

        state.acceleration[start:stop] = accumulated / density[start:stop, np.newaxis]
