"""
SPH kernel math for the density, pressure and force stages.

Each quantity comes in two forms:
- a scalar `numba.njit` function, used by the Numba stages and callable
  from plain Python
- a `*_vectorized` NumPy function over arrays of pair quantities, used by
  the CPU stages

Kernels:
- Poly6 for density:        W(r) = C_poly6 (h^2 - r^2)^3
- Spiky gradient for pressure: C_spiky (h - r)^2 / r * diff
- Viscosity laplacian:      C_lap (h - r)

None of the pairwise terms guard r = 0; callers exclude self pairs and
coincident pairs before calling them.
"""

import numpy as np
import numba as nb
from typing import Tuple


@nb.njit(fastmath=True, cache=True)
def density_contribution(r_sq: float, mass: float, poly6_coef: float, h_sq: float) -> float:
    """Density added by one neighbor at squared distance r_sq < h^2."""
    x = h_sq - r_sq
    return mass * poly6_coef * x * x * x


@nb.njit(fastmath=True, cache=True)
def tait_pressure(density: float, pressure_coef: float, rest_density: float) -> float:
    """Tait equation of state with gamma = 3, clamped to forbid tension."""
    ratio = density / rest_density
    return pressure_coef * max(ratio * ratio * ratio - 1.0, 0.0)


@nb.njit(fastmath=True, cache=True)
def grad_pressure_force(r: float, p_pressure: float, n_pressure: float, n_density: float,
                        diff_x: float, diff_y: float,
                        mass: float, spiky_coef: float, h: float) -> Tuple[float, float]:
    """Symmetrized pressure-gradient term for one pair.

    diff is neighbor position minus particle position. The spiky
    coefficient is negative, so positive pressure pushes the pair apart.
    Normalized by the neighbor's density only.
    """
    avg_pressure = 0.5 * (p_pressure + n_pressure)
    hr = h - r
    scale = mass * spiky_coef * avg_pressure / n_density * hr * hr / r
    return scale * diff_x, scale * diff_y


@nb.njit(fastmath=True, cache=True)
def viscosity_force(r: float, p_vel_x: float, p_vel_y: float,
                    n_vel_x: float, n_vel_y: float, n_density: float,
                    mass: float, viscosity: float, laplacian_coef: float,
                    h: float) -> Tuple[float, float]:
    """Relative-velocity damping term for one pair."""
    scale = mass * viscosity * laplacian_coef / n_density * (h - r)
    return scale * (n_vel_x - p_vel_x), scale * (n_vel_y - p_vel_y)


def density_contribution_vectorized(r_sq: np.ndarray, mass: float, poly6_coef: float,
                                    h_sq: float) -> np.ndarray:
    """Vectorized Poly6 density; zero wherever r_sq >= h^2."""
    inside = r_sq < h_sq
    x = np.where(inside, h_sq - r_sq, 0.0)
    return mass * poly6_coef * x * x * x


def tait_pressure_vectorized(density: np.ndarray, pressure_coef: float,
                             rest_density: float) -> np.ndarray:
    """Vectorized clamped Tait pressure."""
    ratio = density / rest_density
    return pressure_coef * np.maximum(ratio ** 3 - 1.0, 0.0)


def grad_pressure_force_vectorized(r: np.ndarray, p_pressure, n_pressure: np.ndarray,
                                   n_density: np.ndarray, diff: np.ndarray,
                                   mass: float, spiky_coef: float, h: float) -> np.ndarray:
    """Vectorized pressure-gradient term.

    Args:
        r: Pair distances, shape (...,), all > 0
        p_pressure: Particle pressure, scalar or broadcastable to r
        n_pressure: Neighbor pressures, shape of r
        n_density: Neighbor densities, shape of r
        diff: Neighbor minus particle positions, shape (..., 2)

    Returns:
        Force contributions, shape (..., 2)
    """
    avg_pressure = 0.5 * (p_pressure + n_pressure)
    hr = h - r
    scale = mass * spiky_coef * avg_pressure / n_density * hr * hr / r
    return scale[..., np.newaxis] * diff


def viscosity_force_vectorized(r: np.ndarray, p_velocity: np.ndarray, n_velocity: np.ndarray,
                               n_density: np.ndarray, mass: float, viscosity: float,
                               laplacian_coef: float, h: float) -> np.ndarray:
    """Vectorized viscosity term; velocities have a trailing axis of 2."""
    scale = mass * viscosity * laplacian_coef / n_density * (h - r)
    return scale[..., np.newaxis] * (n_velocity - p_velocity)
