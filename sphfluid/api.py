"""
Unified API for the SPH tick with automatic backend dispatch.

This module provides a clean interface that dispatches each of the three
stages to the CPU, Numba, or GPU implementation based on the current
backend. None of the stage functions swap buffers; that is the
orchestrator's job (see `sphfluid.simulation`).
"""

import logging
from typing import Optional
from .core.backend import dispatch, set_backend, get_backend, list_backends, auto_select_backend, print_backend_info
from .core.particles import ParticleState
from .core.constants import SimulationConstants, FluidParameters

# Import and register all implementations
from .core.backend import backend_function, for_backend, Backend

# CPU implementations
from .physics.density_vectorized import compute_density_vectorized
from .physics.forces_vectorized import compute_forces_vectorized
from .physics.integrate_vectorized import integrate_vectorized

# Numba implementations
from .physics.density_numba import compute_density_numba_wrapper
from .physics.forces_numba import compute_forces_numba_wrapper
from .physics.integrate_numba import integrate_numba_wrapper

logger = logging.getLogger(__name__)


# Register CPU implementations
@backend_function("compute_density")
@for_backend(Backend.CPU)
def _compute_density_cpu(state: ParticleState, constants: SimulationConstants):
    compute_density_vectorized(state, constants)

@backend_function("compute_forces")
@for_backend(Backend.CPU)
def _compute_forces_cpu(state: ParticleState, constants: SimulationConstants):
    compute_forces_vectorized(state, constants)

@backend_function("integrate")
@for_backend(Backend.CPU)
def _integrate_cpu(state: ParticleState, constants: SimulationConstants):
    integrate_vectorized(state, constants)


# Register Numba implementations
@backend_function("compute_density")
@for_backend(Backend.NUMBA)
def _compute_density_numba(state: ParticleState, constants: SimulationConstants):
    compute_density_numba_wrapper(state, constants)

@backend_function("compute_forces")
@for_backend(Backend.NUMBA)
def _compute_forces_numba(state: ParticleState, constants: SimulationConstants):
    compute_forces_numba_wrapper(state, constants)

@backend_function("integrate")
@for_backend(Backend.NUMBA)
def _integrate_numba(state: ParticleState, constants: SimulationConstants):
    integrate_numba_wrapper(state, constants)


# PyTorch GPU implementations register themselves on import
try:
    import torch
    if torch.cuda.is_available():
        from .physics.density_torch import compute_density_torch
        from .physics.forces_torch import compute_forces_torch
        from .physics.integrate_torch import integrate_torch
        logger.info("PyTorch GPU backend available: %s", torch.cuda.get_device_name(0))
except ImportError:
    pass


# Public API functions that dispatch to appropriate backend
def compute_density(state: ParticleState, constants: SimulationConstants,
                    backend: Optional[str] = None):
    """Density stage: write state.density from the read-slot positions.

    Args:
        state: Particle pool
        constants: Simulation constants
        backend: Override backend ('cpu', 'numba', 'gpu', or None for current)
    """
    dispatch("compute_density", state, constants, backend=backend)


def compute_forces(state: ParticleState, constants: SimulationConstants,
                   backend: Optional[str] = None):
    """Force stage: write state.acceleration (pressure + viscosity only).

    Must run after compute_density for the same tick.
    """
    dispatch("compute_forces", state, constants, backend=backend)


def integrate(state: ParticleState, constants: SimulationConstants,
              backend: Optional[str] = None):
    """Integrate stage: walls, gravity and symplectic Euler into the write slot.

    Must run after compute_forces for the same tick.
    """
    dispatch("integrate", state, constants, backend=backend)


__all__ = [
    # API functions
    'compute_density',
    'compute_forces',
    'integrate',

    # Backend management
    'set_backend',
    'get_backend',
    'list_backends',
    'auto_select_backend',
    'print_backend_info',

    # Core classes
    'ParticleState',
    'SimulationConstants',
    'FluidParameters'
]
