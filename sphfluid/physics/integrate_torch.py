"""
PyTorch GPU-accelerated integrate stage for SPH.
"""

import torch
import numpy as np
from ..core.backend import backend_function, for_backend, Backend
from ..core.particles import ParticleState
from ..core.constants import SimulationConstants
from .density_torch import default_device


@backend_function("integrate")
@for_backend(Backend.GPU)
def integrate_torch(state: ParticleState, constants: SimulationConstants,
                    device: torch.device = None):
    """Walls, gravity and symplectic Euler into the write slot."""
    if device is None:
        device = default_device()

    pos = torch.from_numpy(np.ascontiguousarray(state.position_read)).to(device)
    vel = torch.from_numpy(np.ascontiguousarray(state.velocity_read)).to(device)
    accel = torch.from_numpy(np.ascontiguousarray(state.acceleration)).to(device)
    planes = torch.from_numpy(constants.planes).to(device)
    gravity = torch.from_numpy(constants.gravity_array).to(device)
    dt = constants.time_step

    normals = planes[:, :2]
    dist = pos @ normals.T + planes[:, 2]                     # (N, 4)
    accel = accel - constants.wall_stiffness * (torch.clamp(dist, max=0.0) @ normals)
    accel = accel + gravity

    new_vel = vel + dt * accel
    new_pos = pos + dt * new_vel

    state.velocity_write[:] = new_vel.cpu().numpy()
    state.position_write[:] = new_pos.cpu().numpy()
