"""
Vectorized density stage for SPH.

Direct summation over every particle in the pool (no neighbor grid):
ρᵢ = Σⱼ m W_poly6(|rᵢ - rⱼ|², h)   for |rᵢ - rⱼ|² < h², j = i included

Rows are processed in tiles of `batch_size` particles, each tile broadcast
against the whole pool. The tile size only changes memory use, never the
set of pairs that contribute.
"""

import numpy as np
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants
from ..core.kernels import density_contribution_vectorized

DEFAULT_BATCH_SIZE = 32


def compute_density_vectorized(state: ParticleState, constants: SimulationConstants,
                               batch_size: int = DEFAULT_BATCH_SIZE):
    """Fill state.density from the read-slot positions.

    Args:
        state: Particle pool; only `density` is written
        constants: Simulation constants
        batch_size: Rows per tile
    """
    positions = state.position_read
    n = state.n_particles
    h_sq = constants.h_sq

    for start in range(0, n, batch_size):
        stop = min(start + batch_size, n)

        # (B, N, 2) displacement from each tile particle to every particle
        diff = positions[np.newaxis, :, :] - positions[start:stop, np.newaxis, :]
        r_sq = np.sum(diff * diff, axis=2)

        contributions = density_contribution_vectorized(
            r_sq, constants.mass, constants.poly6_coef, h_sq
        )
        state.density[start:stop] = np.sum(contributions, axis=1)
