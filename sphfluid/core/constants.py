"""
Simulation constants for the SPH tick.

`SimulationConstants` is the immutable per-tick configuration handed to
every stage. The stages treat the kernel coefficients and wall planes as
opaque inputs; `FluidParameters.to_constants()` derives them from the
user-facing parameters the way the host program does.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class WallPlane:
    """Half-plane n.p + offset >= 0 with a unit inward normal."""
    normal_x: float
    normal_y: float
    offset: float

    def signed_distance(self, x, y):
        """Signed distance of (x, y) from the wall; negative means outside."""
        return self.normal_x * x + self.normal_y * y + self.offset

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.normal_x, self.normal_y, self.offset)


def kernel_coefficients(h: float) -> Tuple[float, float, float]:
    """Normalization coefficients (poly6, spiky gradient, viscosity laplacian).

    Poly6     = 315 / (64 pi h^9)
    Spiky     = -45 / (pi h^6)
    Laplacian =  45 / (pi h^6)
    """
    poly6 = 315.0 / (64.0 * math.pi * h ** 9)
    spiky = -45.0 / (math.pi * h ** 6)
    laplacian = 45.0 / (math.pi * h ** 6)
    return poly6, spiky, laplacian


def walls_from_boundary(min_boundary: Tuple[float, float],
                        max_boundary: Tuple[float, float]) -> Tuple[WallPlane, ...]:
    """Four inward-facing walls enclosing the box [min_boundary, max_boundary].

    Order is bottom, top, left, right. The order has no effect on results.
    """
    min_x, min_y = min_boundary
    max_x, max_y = max_boundary
    return (
        WallPlane(0.0, 1.0, -min_y),
        WallPlane(0.0, -1.0, max_y),
        WallPlane(1.0, 0.0, -min_x),
        WallPlane(-1.0, 0.0, max_x),
    )


@dataclass(frozen=True)
class SimulationConstants:
    """Read-only configuration shared by every task of every stage."""
    rest_density: float
    pressure_coef: float
    mass: float
    effective_radius: float
    time_step: float
    viscosity: float
    wall_stiffness: float
    particle_spacing: float
    gravity: Tuple[float, float]
    min_boundary: Tuple[float, float]
    max_boundary: Tuple[float, float]
    n_particles: int
    poly6_coef: float
    spiky_coef: float
    laplacian_coef: float
    walls: Tuple[WallPlane, ...]

    def __post_init__(self):
        if len(self.walls) != 4:
            raise ValueError(f"Expected exactly 4 wall planes, got {len(self.walls)}")

    @property
    def h(self) -> float:
        return self.effective_radius

    @property
    def h_sq(self) -> float:
        return self.effective_radius * self.effective_radius

    @property
    def gravity_array(self) -> np.ndarray:
        return np.asarray(self.gravity, dtype=np.float32)

    @property
    def planes(self) -> np.ndarray:
        """Wall planes as a (4, 3) float32 array of (nx, ny, offset)."""
        return np.array([w.as_tuple() for w in self.walls], dtype=np.float32)

    def with_time_step(self, time_step: float) -> 'SimulationConstants':
        """Copy with a different time step."""
        return replace(self, time_step=time_step)

    def with_gravity(self, gx: float, gy: float) -> 'SimulationConstants':
        """Copy with a different gravity vector."""
        return replace(self, gravity=(gx, gy))

    def check_kernel_coefficients(self, rtol: float = 1e-5) -> bool:
        """Whether the stored coefficients match the closed forms for h."""
        expected = kernel_coefficients(self.effective_radius)
        actual = (self.poly6_coef, self.spiky_coef, self.laplacian_coef)
        return all(math.isclose(a, e, rel_tol=rtol) for a, e in zip(actual, expected))


@dataclass
class FluidParameters:
    """User-facing fluid parameters.

    Defaults reproduce the reference 2D fluid demo: a 16K particle pool in a
    1.6 x 1.2 box.
    """
    n_particles: int = 16 * 1024
    smoothing_length: float = 0.012
    pressure_stiffness: float = 200.0
    rest_density: float = 1000.0
    particle_mass: float = 0.0002
    viscosity: float = 0.1
    max_time_step: float = 0.005
    gravity: Tuple[float, float] = (0.0, -9.8)
    map_height: float = 1.2
    map_width: Optional[float] = None
    wall_stiffness: float = 3000.0
    initial_spacing: float = 0.0045

    def __post_init__(self):
        if self.map_width is None:
            self.map_width = (4.0 / 3.0) * self.map_height

    def to_constants(self) -> SimulationConstants:
        """Derive kernel coefficients and wall planes."""
        poly6, spiky, laplacian = kernel_coefficients(self.smoothing_length)
        min_boundary = (0.0, 0.0)
        max_boundary = (self.map_width, self.map_height)
        return SimulationConstants(
            rest_density=self.rest_density,
            pressure_coef=self.pressure_stiffness,
            mass=self.particle_mass,
            effective_radius=self.smoothing_length,
            time_step=self.max_time_step,
            viscosity=self.viscosity,
            wall_stiffness=self.wall_stiffness,
            particle_spacing=self.initial_spacing,
            gravity=tuple(self.gravity),
            min_boundary=min_boundary,
            max_boundary=max_boundary,
            n_particles=self.n_particles,
            poly6_coef=poly6,
            spiky_coef=spiky,
            laplacian_coef=laplacian,
            walls=walls_from_boundary(min_boundary, max_boundary),
        )
