#!/usr/bin/env python3
"""
Headless runner for the SPH tick.
Runs the simulation for a number of ticks without a display and reports
performance, optionally saving a snapshot of the final particle positions.
"""

import argparse
import logging
import time
import numpy as np

import sphfluid
from sphfluid.core.constants import FluidParameters
from sphfluid.simulation import FluidSimulation


def save_snapshot(sim: FluidSimulation, path: str):
    """Scatter plot of the particles coloured by density."""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    constants = sim.constants
    positions = sim.positions

    fig, ax = plt.subplots(figsize=(8, 6))
    scatter = ax.scatter(positions[:, 0], positions[:, 1], c=sim.state.density,
                         s=1, cmap='Blues_r')
    fig.colorbar(scatter, ax=ax, label='Density')
    ax.set_xlim(constants.min_boundary[0], constants.max_boundary[0])
    ax.set_ylim(constants.min_boundary[1], constants.max_boundary[1])
    ax.set_aspect('equal')
    ax.set_title(f"Tick {sim.tick_count} ({constants.n_particles} particles)")
    fig.savefig(path, dpi=120)
    plt.close(fig)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="2D SPH fluid tick (Headless)")
    parser.add_argument("--particles", type=int, default=4096)
    parser.add_argument("--backend", choices=["cpu", "numba", "gpu", "auto"], default="auto")
    parser.add_argument("--steps", type=int, default=100, help="Number of ticks to run")
    parser.add_argument("--dt", type=float, default=None,
                        help="Frame time per tick (clamped to the max time step)")
    parser.add_argument("--snapshot", default=None, help="Save a PNG of the final state")
    parser.add_argument("--verbose", action="store_true", help="Log every tick")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(message)s")

    # Set backend
    if args.backend == "auto":
        backend = sphfluid.auto_select_backend(args.particles)
        print(f"Auto-selected {backend.upper()} backend for {args.particles} particles")
    elif not sphfluid.set_backend(args.backend):
        print(f"Warning: Backend '{args.backend}' not available, using {sphfluid.get_backend()}")

    constants = FluidParameters(n_particles=args.particles).to_constants()
    sim = FluidSimulation(constants)

    # Print info
    sphfluid.print_backend_info()
    print(f"\nSimulation info:")
    print(f"  Particles: {constants.n_particles}")
    print(f"  Domain: {constants.max_boundary[0]:.2f}x{constants.max_boundary[1]:.2f} m")
    print(f"  Smoothing length: {constants.effective_radius} m")
    print(f"  Steps: {args.steps}")

    print("\nRunning simulation...")
    step_times = []

    for step in range(args.steps):
        t0 = time.perf_counter()
        sim.tick(args.dt)
        step_times.append(time.perf_counter() - t0)

        # Progress
        if (step + 1) % 20 == 0:
            avg_time = np.mean(step_times[-20:])
            diag = sim.diagnostics()
            print(f"  Step {step+1}/{args.steps}: {avg_time*1000:.1f} ms/step "
                  f"({1.0/avg_time:.1f} FPS), KE={diag.kinetic_energy:.3e}, "
                  f"rho=[{diag.min_density:.1f}, {diag.max_density:.1f}]")

    # Summary
    print("\nSimulation complete!")
    if step_times:
        avg_time = np.mean(step_times)
        print(f"Average: {avg_time*1000:.1f} ms/step ({1.0/avg_time:.1f} FPS)")
        print(f"Total time: {sum(step_times):.1f} seconds")

    diag = sim.diagnostics()
    if not diag.all_finite:
        print("Warning: simulation produced non-finite values")

    if args.snapshot:
        save_snapshot(sim, args.snapshot)
        print(f"Snapshot saved to {args.snapshot}")

    return 0 if diag.all_finite else 1


if __name__ == "__main__":
    raise SystemExit(main())
