#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Frame Visualization Module
================================================================================

Project:        Molecular Motion Canvas
Module:         visualization.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

This module draws FrameSnapshot objects with Matplotlib:
- Molecules colored by speed inside the container
- Live speed histogram with the 2D Maxwell-Boltzmann curve for N₂
- A readout of temperature, kinetic energy, mean speeds and pressure
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.patches import Rectangle
from matplotlib.collections import EllipseCollection
from typing import Tuple, Optional, List
from dataclasses import dataclass
import io

from .physics import SPEED_SCALE
from .simulation import FrameSnapshot
from .thermodynamics import (
    average_kinetic_energy,
    display_speed_limit,
    maxwell_boltzmann_pdf_2d,
    mean_speed,
    speed_histogram
)


def create_speed_colormap():
    """
    Create a colormap for molecule speed.

    Blue (slow) -> Green -> Yellow -> Red (fast)
    """
    colors = [
        (0.08, 0.24, 0.71),   # Cool blue
        (0.16, 0.63, 1.0),    # Light blue
        (0.31, 1.0, 0.45),    # Green
        (1.0, 1.0, 0.0),      # Yellow
        (1.0, 0.22, 0.0),     # Hot red
    ]
    return LinearSegmentedColormap.from_list("speed", colors, N=256)


SPEED_CMAP = create_speed_colormap()


@dataclass
class VisualizationConfig:
    """Configuration for visualization."""
    background_color: str = "#0f172a"
    container_color: str = "#1e293b"
    border_color: str = "#475569"
    text_color: str = "#e2e8f0"
    n_bins: int = 20
    reference_species: int = 1  # N₂ curve on the histogram
    figsize: Tuple[int, int] = (12, 6)


def calculate_particle_colors(velocities: np.ndarray, max_speed: float) -> np.ndarray:
    """
    Map speeds (px per reference frame) to RGBA colors.

    Returns:
        Nx4 RGBA color array
    """
    speeds = np.sqrt(np.sum(velocities ** 2, axis=1))
    if max_speed <= 0:
        return SPEED_CMAP(np.zeros_like(speeds))
    return SPEED_CMAP(np.clip(speeds / max_speed, 0, 1))


def render_particles_matplotlib(
    snapshot: FrameSnapshot,
    config: Optional[VisualizationConfig] = None,
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Draw the container and its molecules.

    Canvas coordinates grow downward, so the y axis is inverted.
    """
    if config is None:
        config = VisualizationConfig()

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(8, 6))
    else:
        fig = ax.figure

    ax.clear()
    ax.set_facecolor(config.background_color)
    fig.patch.set_facecolor(config.background_color)

    region = snapshot.region
    ax.add_patch(Rectangle(
        (region.left, region.top), region.width, region.height,
        facecolor=config.container_color, edgecolor=config.border_color, linewidth=2
    ))

    max_speed = display_speed_limit(snapshot.temperature, snapshot.species)
    colors = calculate_particle_colors(snapshot.velocities, max_speed)

    if snapshot.n_particles > 0:
        # Circles sized in data units
        diameters = 2 * snapshot.radii
        molecules = EllipseCollection(
            diameters, diameters, np.zeros_like(diameters),
            units='xy', offsets=snapshot.positions, offset_transform=ax.transData,
            facecolors=colors, edgecolors=(1, 1, 1, 0.12), linewidths=0.5
        )
        ax.add_collection(molecules)

    ax.set_xlim(region.left - 5, region.right + 5)
    ax.set_ylim(region.bottom + 5, region.top - 5)
    ax.set_aspect('equal')
    ax.axis('off')

    return fig


def render_speed_histogram(
    snapshot: FrameSnapshot,
    config: Optional[VisualizationConfig] = None,
    ax: Optional[plt.Axes] = None
) -> plt.Figure:
    """
    Draw the live speed histogram with the theoretical curve overlaid.

    The curve is scaled so its peak matches the tallest bar.
    """
    if config is None:
        config = VisualizationConfig()

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(5, 4))
    else:
        fig = ax.figure

    ax.clear()
    max_speed = display_speed_limit(snapshot.temperature, snapshot.species)
    speeds = np.sqrt(np.sum(snapshot.velocities ** 2, axis=1))
    counts, edges = speed_histogram(speeds, max_speed, config.n_bins)

    centers = (edges[:-1] + edges[1:]) / 2
    ax.bar(
        centers, counts, width=edges[1] - edges[0],
        color=SPEED_CMAP(centers / max_speed if max_speed > 0 else centers), alpha=0.85
    )

    reference = snapshot.species[config.reference_species % len(snapshot.species)]
    v_px = np.linspace(0, max_speed, 101)
    curve = maxwell_boltzmann_pdf_2d(v_px / SPEED_SCALE, reference.mass, snapshot.temperature)
    if curve.max() > 0:
        curve = curve / curve.max() * max(counts.max(), 1)
        ax.plot(v_px, curve, '--', color='#f8fafc', linewidth=1.5,
                label=f'M-B theory ({reference.name})')
        ax.legend(loc='upper right', fontsize=8)

    ax.set_xlabel('Speed (px/frame)')
    ax.set_ylabel('Molecules')
    ax.set_title('Speed Distribution')

    return fig


def format_readout(snapshot: FrameSnapshot) -> List[str]:
    """Lines of the data panel."""
    lines = [
        f"T = {snapshot.temperature:g} K",
        f"Avg KE = (3/2) kT = {average_kinetic_energy(snapshot.temperature):.3g} J",
    ]
    for sp in snapshot.species:
        lines.append(f"v̄({sp.name}) = {mean_speed(sp.mass, snapshot.temperature):.0f} m/s")
    lines.append(f"P(sim) = {snapshot.pressure:.3g} arb.")
    lines.append(f"{snapshot.n_particles} molecules")
    return lines


def render_dashboard(
    snapshot: FrameSnapshot,
    config: Optional[VisualizationConfig] = None
) -> plt.Figure:
    """Container, histogram and data panel side by side."""
    if config is None:
        config = VisualizationConfig()

    fig = plt.figure(figsize=config.figsize)
    fig.patch.set_facecolor(config.background_color)

    ax_gas = fig.add_axes([0.0, 0.0, 0.66, 0.92])
    render_particles_matplotlib(snapshot, config, ax=ax_gas)

    y = snapshot.region.top + 18
    for line in format_readout(snapshot):
        ax_gas.text(snapshot.region.left + 8, y, line, color=config.text_color, fontsize=9)
        y += 17

    ax_hist = fig.add_axes([0.72, 0.15, 0.25, 0.7])
    render_speed_histogram(snapshot, config, ax=ax_hist)

    fig.suptitle('Molecular Motion - Kinetic Molecular Theory', color=config.text_color)

    return fig


def render_frame_png(
    snapshot: FrameSnapshot,
    config: Optional[VisualizationConfig] = None
) -> bytes:
    """
    Render the dashboard and return PNG bytes.
    """
    fig = render_dashboard(snapshot, config)

    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=100,
                facecolor=fig.get_facecolor(), edgecolor='none')
    plt.close(fig)
    buf.seek(0)

    return buf.getvalue()
