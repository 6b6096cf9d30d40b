"""
PyTorch GPU-accelerated force stage for SPH.

Computes pressure-gradient and viscosity accelerations for row tiles
against the whole pool on the device.
"""

import torch
import numpy as np
from ..core.backend import backend_function, for_backend, Backend
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants
from .density_torch import default_device, GPU_BATCH_SIZE


def tait_pressure_torch(density: torch.Tensor, pressure_coef: float,
                        rest_density: float) -> torch.Tensor:
    ratio = density / rest_density
    return pressure_coef * torch.clamp(ratio ** 3 - 1.0, min=0.0)


@backend_function("compute_forces")
@for_backend(Backend.GPU)
def compute_forces_torch(state: ParticleState, constants: SimulationConstants,
                         device: torch.device = None, batch_size: int = GPU_BATCH_SIZE):
    """GPU force computation; writes state.acceleration."""
    if device is None:
        device = default_device()

    pos = torch.from_numpy(np.ascontiguousarray(state.position_read)).to(device)
    vel = torch.from_numpy(np.ascontiguousarray(state.velocity_read)).to(device)
    density = torch.from_numpy(np.ascontiguousarray(state.density)).to(device)
    n = state.n_particles
    h = constants.h
    h_sq = constants.h_sq

    pressure = tait_pressure_torch(density, constants.pressure_coef, constants.rest_density)
    ids = torch.arange(n, device=device)
    acceleration = torch.empty((n, 2), device=device, dtype=pos.dtype)

    for start in range(0, n, batch_size):
        stop = min(start + batch_size, n)

        diff = pos.unsqueeze(0) - pos[start:stop].unsqueeze(1)   # (B, N, 2)
        r_sq = (diff * diff).sum(dim=2)
        interacting = (r_sq < h_sq) & (r_sq > 0.0) & (ids[start:stop].unsqueeze(1) != ids.unsqueeze(0))
        r = torch.sqrt(torch.where(interacting, r_sq, torch.full_like(r_sq, h_sq)))

        hr = h - r
        avg_pressure = 0.5 * (pressure[start:stop].unsqueeze(1) + pressure.unsqueeze(0))
        pressure_scale = constants.mass * constants.spiky_coef * avg_pressure / density.unsqueeze(0) * hr * hr / r
        viscosity_scale = (constants.mass * constants.viscosity * constants.laplacian_coef
                           / density.unsqueeze(0) * hr)

        dv = vel.unsqueeze(0) - vel[start:stop].unsqueeze(1)
        pair_force = pressure_scale.unsqueeze(2) * diff + viscosity_scale.unsqueeze(2) * dv
        pair_force = torch.where(interacting.unsqueeze(2), pair_force, torch.zeros_like(pair_force))

        acceleration[start:stop] = pair_force.sum(dim=1) / density[start:stop].unsqueeze(1)

    state.acceleration[:] = acceleration.cpu().numpy()
