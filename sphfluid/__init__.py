"""2D SPH fluid tick: density, pressure/viscosity forces and integration."""

from . import core
from . import physics

# Import API to trigger backend registration
from . import api

from .api import (
    # Stage functions
    compute_density,
    compute_forces,
    integrate,

    # Backend management
    set_backend,
    get_backend,
    list_backends,
    auto_select_backend,
    print_backend_info,

    # Core classes
    ParticleState,
    SimulationConstants,
    FluidParameters
)
from .simulation import FluidSimulation, TickDiagnostics

__version__ = "0.1.0"

__all__ = [
    # Modules
    'core',
    'physics',

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
    'FluidParameters',
    'FluidSimulation',
    'TickDiagnostics'
]
