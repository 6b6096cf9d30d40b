"""
Tick orchestrator for the SPH fluid.

Runs Density -> Forces -> Integrate in order and then swaps the particle
buffers. Each dispatched stage returns only after every particle has been
processed, which is the barrier between stages.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from . import api
from .core.constants import SimulationConstants
from .core.particles import ParticleState

logger = logging.getLogger(__name__)


@dataclass
class TickDiagnostics:
    """Scalar health summary of the current read slot."""
    tick: int
    kinetic_energy: float
    max_speed: float
    min_density: float
    max_density: float
    mean_density: float
    all_finite: bool


class FluidSimulation:
    """Owns the particle pool and the constants, and advances whole ticks.

    Args:
        constants: Simulation constants
        state: Initial particle pool; a grid of constants.n_particles is
            laid out when omitted
        backend: Backend name for every stage (None for the global one)
    """

    def __init__(self, constants: SimulationConstants,
                 state: Optional[ParticleState] = None,
                 backend: Optional[str] = None):
        if state is None:
            state = ParticleState.create_grid(constants.n_particles, constants.particle_spacing,
                                              origin=constants.min_boundary)
        self.constants = constants
        self.state = state
        self.backend = backend
        self.tick_count = 0
        self._warned_non_finite = False

    def tick(self, dt: Optional[float] = None):
        """Advance one tick.

        Args:
            dt: Elapsed frame time; the step taken is min(dt, constants.time_step)
        """
        constants = self.constants
        if dt is not None:
            constants = constants.with_time_step(min(dt, constants.time_step))

        api.compute_density(self.state, constants, backend=self.backend)
        api.compute_forces(self.state, constants, backend=self.backend)
        api.integrate(self.state, constants, backend=self.backend)
        self.state.swap()

        self.tick_count += 1
        logger.debug("tick %d done (dt=%g)", self.tick_count, constants.time_step)

        if not self._warned_non_finite and not np.all(np.isfinite(self.state.position_read)):
            self._warned_non_finite = True
            logger.warning("Non-finite particle positions after tick %d", self.tick_count)

    def run(self, n_ticks: int, dt: Optional[float] = None):
        for _ in range(n_ticks):
            self.tick(dt)

    def set_gravity(self, gx: float, gy: float):
        self.constants = self.constants.with_gravity(gx, gy)

    @property
    def positions(self) -> np.ndarray:
        return self.state.position_read.copy()

    @property
    def velocities(self) -> np.ndarray:
        return self.state.velocity_read.copy()

    def diagnostics(self) -> TickDiagnostics:
        density = self.state.density
        return TickDiagnostics(
            tick=self.tick_count,
            kinetic_energy=self.state.kinetic_energy(self.constants.mass),
            max_speed=self.state.max_speed(),
            min_density=float(np.min(density)),
            max_density=float(np.max(density)),
            mean_density=float(np.mean(density)),
            all_finite=bool(np.all(np.isfinite(self.state.position_read))
                            and np.all(np.isfinite(self.state.velocity_read))),
        )
