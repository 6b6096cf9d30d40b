"""
Numba-optimized density stage for SPH.

One prange task per particle; each task scans the whole pool and writes
only its own density slot.
"""

import numpy as np
import numba as nb
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants
from ..core.kernels import density_contribution


@nb.njit(parallel=True, fastmath=True, cache=True)
def compute_density_numba(position: np.ndarray, density: np.ndarray, n_active: int,
                          mass: float, poly6_coef: float, h_sq: float):
    """All-pairs Poly6 density, self term included."""
    for i in nb.prange(n_active):
        px = position[i, 0]
        py = position[i, 1]

        rho = 0.0
        for j in range(n_active):
            dx = position[j, 0] - px
            dy = position[j, 1] - py
            r_sq = dx * dx + dy * dy
            if r_sq < h_sq:
                rho += density_contribution(r_sq, mass, poly6_coef, h_sq)

        density[i] = rho


def compute_density_numba_wrapper(state: ParticleState, constants: SimulationConstants):
    """Wrapper for Numba density computation that matches standard interface."""
    compute_density_numba(
        state.position_read, state.density, state.n_particles,
        float(constants.mass), float(constants.poly6_coef), float(constants.h_sq)
    )
