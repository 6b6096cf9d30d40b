"""
Double-buffered particle store using the Structure-of-Arrays (SoA) pattern.

Position and velocity each own two slots. Stages read the current slot and
the integrate stage writes the other one; only the orchestrator calls
`swap()` to publish the new state. Density and acceleration are single
arrays that are wholly overwritten every tick.

All arrays are float32 for GPU compatibility.
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple


@dataclass
class ParticleState:
    """Fixed-size particle pool.

    position and velocity have shape (2, N, 2): slot, particle, component.
    """
    position: np.ndarray        # shape: (2, N, 2) float32
    velocity: np.ndarray        # shape: (2, N, 2) float32
    density: np.ndarray         # shape: (N,) float32
    acceleration: np.ndarray    # shape: (N, 2) float32
    read_slot: int = 0

    @staticmethod
    def allocate(n_particles: int) -> 'ParticleState':
        """Zeroed pool of n_particles."""
        return ParticleState(
            position=np.zeros((2, n_particles, 2), dtype=np.float32),
            velocity=np.zeros((2, n_particles, 2), dtype=np.float32),
            density=np.zeros(n_particles, dtype=np.float32),
            acceleration=np.zeros((n_particles, 2), dtype=np.float32),
        )

    @staticmethod
    def create_grid(n_particles: int, spacing: float,
                    origin: Tuple[float, float] = (0.0, 0.0)) -> 'ParticleState':
        """Lay particles out on a square-ish grid at rest.

        Row width is floor(sqrt(N)); particle i sits at
        origin + spacing * (i % width, i // width).
        """
        if n_particles <= 0:
            raise ValueError(f"n_particles must be positive, got {n_particles}")

        state = ParticleState.allocate(n_particles)
        width = int(np.sqrt(n_particles))
        idx = np.arange(n_particles)
        state.position[0, :, 0] = origin[0] + spacing * (idx % width)
        state.position[0, :, 1] = origin[1] + spacing * (idx // width)
        return state

    @staticmethod
    def from_arrays(positions: np.ndarray, velocities: np.ndarray = None) -> 'ParticleState':
        """Pool whose read slot holds the given (N, 2) positions/velocities."""
        positions = np.asarray(positions, dtype=np.float32)
        state = ParticleState.allocate(positions.shape[0])
        state.position[0] = positions
        if velocities is not None:
            state.velocity[0] = np.asarray(velocities, dtype=np.float32)
        return state

    @property
    def n_particles(self) -> int:
        return self.density.shape[0]

    @property
    def write_slot(self) -> int:
        return 1 - self.read_slot

    @property
    def position_read(self) -> np.ndarray:
        return self.position[self.read_slot]

    @property
    def velocity_read(self) -> np.ndarray:
        return self.velocity[self.read_slot]

    @property
    def position_write(self) -> np.ndarray:
        return self.position[self.write_slot]

    @property
    def velocity_write(self) -> np.ndarray:
        return self.velocity[self.write_slot]

    def swap(self):
        """Publish the write slot as the next tick's read slot."""
        self.read_slot = self.write_slot

    def kinetic_energy(self, mass: float) -> float:
        v = self.velocity_read.astype(np.float64)
        return 0.5 * mass * float(np.sum(v * v))

    def max_speed(self) -> float:
        if self.n_particles == 0:
            return 0.0
        return float(np.max(np.linalg.norm(self.velocity_read, axis=1)))
