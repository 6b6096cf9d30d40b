"""
Numba-optimized force stage for SPH.

This is the biggest cost of the tick: N² pair evaluations with a square
root each. Every prange task accumulates privately and stores once.
"""

import numpy as np
import numba as nb
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants
from ..core.kernels import tait_pressure, grad_pressure_force, viscosity_force


@nb.njit(parallel=True, fastmath=True, cache=True)
def compute_forces_numba(position: np.ndarray, velocity: np.ndarray, density: np.ndarray,
                         acceleration: np.ndarray, n_active: int,
                         mass: float, h: float, h_sq: float,
                         rest_density: float, pressure_coef: float, viscosity: float,
                         spiky_coef: float, laplacian_coef: float):
    """Pressure-gradient and viscosity acceleration for every particle."""
    for i in nb.prange(n_active):
        px = position[i, 0]
        py = position[i, 1]
        vx = velocity[i, 0]
        vy = velocity[i, 1]
        rho_i = density[i]
        pressure_i = tait_pressure(rho_i, pressure_coef, rest_density)

        ax = 0.0
        ay = 0.0
        for j in range(n_active):
            if j == i:
                continue

            dx = position[j, 0] - px
            dy = position[j, 1] - py
            r_sq = dx * dx + dy * dy

            # Coincident particles have no direction; skip them
            if r_sq >= h_sq or r_sq <= 0.0:
                continue

            rho_j = density[j]
            pressure_j = tait_pressure(rho_j, pressure_coef, rest_density)
            r = np.sqrt(r_sq)

            fx, fy = grad_pressure_force(r, pressure_i, pressure_j, rho_j,
                                         dx, dy, mass, spiky_coef, h)
            ax += fx
            ay += fy

            fx, fy = viscosity_force(r, vx, vy, velocity[j, 0], velocity[j, 1], rho_j,
                                     mass, viscosity, laplacian_coef, h)
            ax += fx
            ay += fy

        acceleration[i, 0] = ax / rho_i
        acceleration[i, 1] = ay / rho_i


def compute_forces_numba_wrapper(state: ParticleState, constants: SimulationConstants):
    """Wrapper for Numba force computation."""
    compute_forces_numba(
        state.position_read, state.velocity_read, state.density,
        state.acceleration, state.n_particles,
        float(constants.mass), float(constants.h), float(constants.h_sq),
        float(constants.rest_density), float(constants.pressure_coef), float(constants.viscosity),
        float(constants.spiky_coef), float(constants.laplacian_coef)
    )
