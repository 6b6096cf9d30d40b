"""Core SPH components: backends, constants, kernel math and the particle store."""

from .particles import ParticleState
from .constants import (
    WallPlane,
    SimulationConstants,
    FluidParameters,
    kernel_coefficients,
    walls_from_boundary
)
from .kernels import (
    density_contribution,
    tait_pressure,
    grad_pressure_force,
    viscosity_force
)

__all__ = [
    'ParticleState',
    'WallPlane',
    'SimulationConstants',
    'FluidParameters',
    'kernel_coefficients',
    'walls_from_boundary',
    'density_contribution',
    'tait_pressure',
    'grad_pressure_force',
    'viscosity_force'
]
