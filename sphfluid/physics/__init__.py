"""Physics stages for the SPH tick: density, forces and integration."""

from .density_vectorized import compute_density_vectorized
from .forces_vectorized import compute_forces_vectorized
from .integrate_vectorized import (
    integrate_vectorized,
    compute_wall_acceleration_vectorized
)
from .density_numba import compute_density_numba_wrapper
from .forces_numba import compute_forces_numba_wrapper
from .integrate_numba import integrate_numba_wrapper

__all__ = [
    # Density
    'compute_density_vectorized',
    'compute_density_numba_wrapper',
    # Forces
    'compute_forces_vectorized',
    'compute_forces_numba_wrapper',
    # Integration
    'integrate_vectorized',
    'compute_wall_acceleration_vectorized',
    'integrate_numba_wrapper'
]
