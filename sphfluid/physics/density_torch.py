"""
PyTorch GPU-accelerated density stage for SPH.

Broadcasts row tiles against the whole pool on the device. Falls back to
the CPU device when CUDA is absent so the same code can be exercised
anywhere.
"""

import torch
import numpy as np
from ..core.backend import backend_function, for_backend, Backend
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants

GPU_BATCH_SIZE = 1024


def default_device() -> torch.device:
    return torch.device('cuda' if torch.cuda.is_available() else 'cpu')


def poly6_density_torch(r_sq: torch.Tensor, mass: float, poly6_coef: float,
                        h_sq: float) -> torch.Tensor:
    """Poly6 contribution, zero outside the support."""
    x = torch.clamp(h_sq - r_sq, min=0.0)
    return mass * poly6_coef * x * x * x


@backend_function("compute_density")
@for_backend(Backend.GPU)
def compute_density_torch(state: ParticleState, constants: SimulationConstants,
                          device: torch.device = None, batch_size: int = GPU_BATCH_SIZE):
    """GPU density computation; writes state.density."""
    if device is None:
        device = default_device()

    pos = torch.from_numpy(np.ascontiguousarray(state.position_read)).to(device)
    n = state.n_particles
    density = torch.empty(n, device=device, dtype=pos.dtype)

    for start in range(0, n, batch_size):
        stop = min(start + batch_size, n)
        diff = pos.unsqueeze(0) - pos[start:stop].unsqueeze(1)   # (B, N, 2)
        r_sq = (diff * diff).sum(dim=2)
        density[start:stop] = poly6_density_torch(
            r_sq, constants.mass, constants.poly6_coef, constants.h_sq
        ).sum(dim=1)

    state.density[:] = density.cpu().numpy()
