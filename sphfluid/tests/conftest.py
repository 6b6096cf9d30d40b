"""Pytest configuration for sphfluid tests."""
import os

import pytest

import sphfluid
from sphfluid.core.constants import FluidParameters


def pytest_configure(config):
    """Configure pytest environment for headless runs."""
    os.environ['MPLBACKEND'] = 'Agg'


@pytest.fixture(autouse=True)
def restore_backend():
    """Put the global backend back after every test."""
    original_backend = sphfluid.get_backend()
    yield
    sphfluid.set_backend(original_backend)


@pytest.fixture(params=['cpu', 'numba', 'gpu'])
def backend(request):
    """Parametrize tests over all available backends."""
    backend_name = request.param
    if not sphfluid.list_backends()[backend_name]:
        pytest.skip(f"Backend {backend_name} not available")
    return backend_name


@pytest.fixture
def make_constants():
    """Factory for constants with unit-scale kernels.

    h = 1 and mass = 1 keep the expected values easy to write down. Any
    FluidParameters field can be overridden.
    """
    def _make(**overrides):
        params = dict(
            n_particles=2,
            smoothing_length=1.0,
            particle_mass=1.0,
            rest_density=1.0,
            pressure_stiffness=1.0,
            viscosity=1.0,
            gravity=(0.0, 0.0),
            map_width=10.0,
            map_height=10.0,
            wall_stiffness=0.0,
            max_time_step=0.01,
            initial_spacing=0.5,
        )
        params.update(overrides)
        return FluidParameters(**params).to_constants()
    return _make
