#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Molecular Motion Canvas - Command Line Interface
================================================================================

Project:        Molecular Motion Canvas
Module:         main.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Command line interface for running and checking the kinetic gas simulation
without a browser host.
"""

import argparse
import logging
import time
from dataclasses import replace
from typing import Optional

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation

from src.simulation import MolecularMotionSimulation, SimulationConfig
from src.thermodynamics import mean_speed
from src.utils import setup_logging, load_config
from src.visualization import (
    VisualizationConfig, render_dashboard, render_particles_matplotlib
)

logger = logging.getLogger(__name__)

FRAME_DT = 1.0 / 60


def build_simulation(
    config: Optional[SimulationConfig],
    n_particles: Optional[int],
    temperature: Optional[float],
    seed: Optional[int]
) -> MolecularMotionSimulation:
    """Create an initialized simulation, command line flags overriding the config."""
    overrides = {"num_molecules": n_particles, "temperature": temperature, "seed": seed}
    config = replace(config or SimulationConfig(), **{k: v for k, v in overrides.items() if v is not None})

    sim = MolecularMotionSimulation(config)
    sim.init()
    return sim


def run_equilibration_test(sim: MolecularMotionSimulation, n_frames: int = 600):
    """
    Run the gas for n_frames at 60 fps and report its statistics.

    Args:
        sim: Initialized simulation
        n_frames: Number of frames to run
    """
    print("=" * 60)
    print("Molecular Motion Canvas - Equilibration Test")
    print("=" * 60)

    print(f"\n{len(sim.store)} molecules at T = {sim.temperature:g} K")
    print(f"Running {n_frames} frames ({n_frames * FRAME_DT:.1f} s simulated)...")

    pressures = []
    escaped_frames = 0
    t_start = time.time()

    for frame in range(n_frames):
        sim.update(FRAME_DT)
        pressures.append(sim.pressure)

        if not sim.region.contains(sim.store.positions, sim.store.radii):
            escaped_frames += 1

        if frame % 120 == 0:
            print(f"  Frame {frame:4d}: P = {sim.pressure:.3g}, collisions = {sim.last_collision_count}")

    t_end = time.time()

    print(f"\nSimulation completed in {t_end - t_start:.2f} seconds")
    print(f"Frames per second: {n_frames / (t_end - t_start):.1f}")

    observables = sim.get_observables()
    print(f"\nFinal State:")
    print(f"  Pressure:        {observables.pressure:.4g} arb.")
    print(f"  Avg KE (theory): {observables.average_kinetic_energy:.4g} J")
    for stats in observables.species:
        if stats.empirical_mean_speed is None:
            continue
        print(
            f"  {stats.name:4s} n={stats.count:3d}  "
            f"v̄ theory = {stats.theoretical_mean_speed:7.1f} m/s  "
            f"measured = {stats.empirical_mean_speed:7.1f} m/s"
        )

    if escaped_frames == 0:
        print("\n  ✓ All molecules stayed inside the container")
    else:
        print(f"\n  ⚠ Molecules outside the container on {escaped_frames} frames")

    # Plot results
    fig = render_dashboard(sim.render())
    fig.savefig('equilibration_test.png', dpi=150, facecolor=fig.get_facecolor())
    print(f"\nPlot saved to equilibration_test.png")

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(np.arange(n_frames) * FRAME_DT, pressures, 'm-')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Pressure (arb.)')
    ax.set_title('Rolling Pressure Estimate')
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.show()


def run_temperature_sweep_demo(sim: MolecularMotionSimulation, frames_per_step: int = 120):
    """
    Heat the gas step by step and show pressure following temperature.

    Args:
        sim: Initialized simulation
        frames_per_step: Frames to settle at each temperature
    """
    print("=" * 60)
    print("Molecular Motion Canvas - Temperature Sweep")
    print("=" * 60)

    temperatures = np.arange(100, 1001, 100)
    pressures = []
    n2 = sim.species[1 % len(sim.species)]

    for T in temperatures:
        sim.update(FRAME_DT, {"temperature": float(T)})
        for _ in range(frames_per_step - 1):
            sim.update(FRAME_DT)

        pressures.append(sim.pressure)
        print(
            f"  T = {T:5.0f} K  P = {sim.pressure:8.3g}  "
            f"v̄({n2.name}) = {mean_speed(n2.mass, T):6.0f} m/s"
        )

    fig, ax = plt.subplots(figsize=(7, 5))
    ax.plot(temperatures, pressures, 'o-', color='#c084fc')
    ax.set_xlabel('Temperature (K)')
    ax.set_ylabel('Pressure (arb.)')
    ax.set_title('Pressure vs Temperature')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig('temperature_sweep.png', dpi=150)
    print(f"\nPlot saved to temperature_sweep.png")
    plt.show()


def run_animation(sim: MolecularMotionSimulation, n_frames: int = 300):
    """
    Create a GIF of the gas.

    Args:
        sim: Initialized simulation
        n_frames: Number of animation frames
    """
    print("=" * 60)
    print("Molecular Motion Canvas - Animation")
    print("=" * 60)

    fig, ax = plt.subplots(figsize=(8, 6))
    vis_config = VisualizationConfig()

    def update(frame):
        sim.update(FRAME_DT)
        snapshot = sim.render()
        render_particles_matplotlib(snapshot, vis_config, ax=ax)
        ax.set_title(f'Frame {frame}, P = {snapshot.pressure:.3g}', color='white')
        return ax,

    print(f"Creating animation with {n_frames} frames...")
    ani = FuncAnimation(fig, update, frames=n_frames, interval=1000 * FRAME_DT, blit=False)

    print("Saving animation (this may take a while)...")
    ani.save('molecular_motion.gif', writer='pillow', fps=30)
    print("Animation saved to molecular_motion.gif")

    plt.show()


def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Molecular Motion Canvas - 2D Kinetic Gas Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --test              Run equilibration test
  python main.py --demo              Run temperature sweep
  python main.py --animate           Create animation
        """
    )

    parser.add_argument('--test', action='store_true',
                        help='Run equilibration test')
    parser.add_argument('--demo', action='store_true',
                        help='Run temperature sweep demonstration')
    parser.add_argument('--animate', action='store_true',
                        help='Create animation')
    parser.add_argument('--particles', '-n', type=int, default=None,
                        help='Number of molecules (default: 100)')
    parser.add_argument('--temperature', '-T', type=float, default=None,
                        help='Temperature in K (default: 300)')
    parser.add_argument('--frames', '-f', type=int, default=600,
                        help='Number of frames (default: 600)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON configuration file')
    parser.add_argument('--log-level', type=str, default='INFO',
                        help='Logging level (default: INFO)')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Optional rotating log file')

    args = parser.parse_args()
    setup_logging(args.log_level, args.log_file)

    config = load_config(args.config) if args.config else None

    if not (args.test or args.demo or args.animate):
        parser.print_help()
        print("\nNo action specified. Run with --test, --demo or --animate")
        return

    sim = build_simulation(config, args.particles, args.temperature, args.seed)
    logger.info(f"Running with seed={sim.config.seed}, substeps={sim.config.substeps}")
    try:
        if args.test:
            run_equilibration_test(sim, n_frames=args.frames)
        elif args.demo:
            run_temperature_sweep_demo(sim)
        elif args.animate:
            run_animation(sim, n_frames=args.frames)
    finally:
        sim.destroy()


if __name__ == "__main__":
    main()
