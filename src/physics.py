#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Kinetic Gas Physics Engine
================================================================================

Project:        Molecular Motion Canvas
Module:         physics.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

This module implements the physics of a bounded 2D gas of hard-disk
molecules: thermal velocity sampling, elastic pairwise collisions and
elastic wall reflections.

Velocities are drawn from the Maxwell-Boltzmann distribution, one Cartesian
component at a time:

    v_x, v_y ~ N(0, σ²)    with    σ = √(k_B T / m)

Collisions are resolved with a mass-weighted impulse along the collision
normal n̂:

    J = 2 (v_a - v_b)·n̂ / (m_a + m_b)
    v_a ← v_a - J m_b n̂
    v_b ← v_b + J m_a n̂

which conserves momentum and kinetic energy exactly.

Velocities are stored in screen units (pixels per reference frame), not in
m/s. SPEED_SCALE converts between the two.
"""

import logging
import numpy as np
from numba import jit
from typing import Tuple, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


# Boltzmann constant (J/K)
K_B = 1.380649e-23

# Temperatures below this are clamped before entering √(k_B T / m)
TEMPERATURE_FLOOR = 1e-6

# Screen calibration: the mean N₂ speed at 300 K (≈476 m/s) is drawn as
# 3 px per frame at 60 fps.
REFERENCE_PHYSICAL_SPEED = 476.0     # m/s
REFERENCE_PIXEL_SPEED = 3.0          # px per reference frame
REFERENCE_FRAME_INTERVAL = 1.0 / 60  # s
SPEED_SCALE = REFERENCE_PIXEL_SPEED / REFERENCE_PHYSICAL_SPEED

# Extra separation (px) pushed between two molecules after a collision
SEPARATION_EPSILON = 0.5

# Smallest positive double, substituted for u₁ = 0 in Box-Muller
_TINY = np.nextafter(0.0, 1.0)


@dataclass(frozen=True)
class Species:
    """
    A molecule type.

    Multiple particles share a species by index into a species table.
    """
    name: str
    mass: float             # kg per molecule
    radius_factor: float    # multiplied by the molecule size parameter
    color: str = "#94a3b8"  # legend tint

    def __post_init__(self):
        if self.mass <= 0:
            raise ValueError(f"Species {self.name!r} must have positive mass")
        if self.radius_factor <= 0:
            raise ValueError(f"Species {self.name!r} must have positive radius factor")

    @property
    def molar_mass(self) -> float:
        """Molar mass in g/mol."""
        return self.mass * 6.022e23 * 1000.0


MOLECULE_TYPES: Tuple[Species, ...] = (
    Species("H₂", mass=3.32e-27, radius_factor=0.7, color="#60a5fa"),   # 2 g/mol
    Species("N₂", mass=4.65e-26, radius_factor=1.0, color="#34d399"),   # 28 g/mol
    Species("CO₂", mass=7.31e-26, radius_factor=1.3, color="#fbbf24"),  # 44 g/mol
)


def species_masses(species: Sequence[Species]) -> np.ndarray:
    """Mass lookup table indexed by species index."""
    return np.array([s.mass for s in species], dtype=np.float64)


def clamp_temperature(temperature: float) -> float:
    """Clamp a temperature to the positive floor used by the sampler."""
    return max(float(temperature), TEMPERATURE_FLOOR)


def thermal_sigma(mass: float, temperature: float) -> float:
    """Standard deviation of one velocity component: σ = √(k_B T / m)."""
    return np.sqrt(K_B * clamp_temperature(temperature) / mass)


def maxwell_boltzmann_component(mass: float, temperature: float, rng) -> float:
    """
    Draw one Cartesian velocity component (m/s) with a Box-Muller transform.

        v = σ √(-2 ln u₁) cos(2π u₂)

    Args:
        mass: Molecule mass in kg
        temperature: Temperature in K (clamped to TEMPERATURE_FLOOR)
        rng: Uniform random source with a ``random()`` method

    Returns:
        Velocity component in m/s
    """
    sigma = thermal_sigma(mass, temperature)
    u1 = rng.random()
    if u1 == 0.0:
        u1 = _TINY  # log(0) is undefined
    u2 = rng.random()
    return sigma * np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


def sample_velocity(mass: float, temperature: float, rng) -> Tuple[float, float]:
    """Draw a 2D velocity (m/s) for one molecule."""
    vx = maxwell_boltzmann_component(mass, temperature, rng)
    vy = maxwell_boltzmann_component(mass, temperature, rng)
    return vx, vy


def sample_velocities(masses: np.ndarray, temperature: float, rng) -> np.ndarray:
    """
    Vectorized Box-Muller sampling for many molecules.

    Args:
        masses: Array of N molecule masses in kg
        temperature: Temperature in K
        rng: Uniform random source with a ``random(size)`` method

    Returns:
        Nx2 array of velocities in m/s
    """
    masses = np.asarray(masses, dtype=np.float64)
    n = masses.shape[0]
    sigma = np.sqrt(K_B * clamp_temperature(temperature) / masses)

    u1 = np.asarray(rng.random((n, 2)), dtype=np.float64)
    u1 = np.where(u1 == 0.0, _TINY, u1)
    u2 = np.asarray(rng.random((n, 2)), dtype=np.float64)

    z = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
    return z * sigma[:, None]


def to_screen_velocity(velocity_si):
    """Convert m/s to pixels per reference frame."""
    return velocity_si * SPEED_SCALE


def to_physical_speed(velocity_px):
    """Convert pixels per reference frame to m/s."""
    return velocity_px / SPEED_SCALE


def advance_positions(positions: np.ndarray, velocities: np.ndarray, frame_fraction: float) -> np.ndarray:
    """
    Move every molecule by ``velocity × frame_fraction`` in place.

    ``frame_fraction`` is the substep duration in units of
    REFERENCE_FRAME_INTERVAL.
    """
    positions += velocities * frame_fraction
    return positions


@jit(nopython=True, cache=True)
def resolve_pair_collision(
    positions: np.ndarray,
    velocities: np.ndarray,
    masses: np.ndarray,
    radii: np.ndarray,
    i: int,
    j: int,
    separation_epsilon: float
) -> bool:
    """
    Resolve an elastic collision between molecules i and j in place.

    Coincident centers and separating pairs are skipped.

    Returns:
        True if an impulse was applied
    """
    dx = positions[j, 0] - positions[i, 0]
    dy = positions[j, 1] - positions[i, 1]
    dist = np.sqrt(dx * dx + dy * dy)
    min_dist = radii[i] + radii[j]

    if dist >= min_dist or dist == 0.0:
        return False

    nx = dx / dist
    ny = dy / dist

    # Relative velocity along the normal
    dvn = (velocities[i, 0] - velocities[j, 0]) * nx + (velocities[i, 1] - velocities[j, 1]) * ny
    if dvn <= 0.0:
        return False  # already separating

    m_a = masses[i]
    m_b = masses[j]
    total_mass = m_a + m_b
    impulse = 2.0 * dvn / total_mass

    velocities[i, 0] -= impulse * m_b * nx
    velocities[i, 1] -= impulse * m_b * ny
    velocities[j, 0] += impulse * m_a * nx
    velocities[j, 1] += impulse * m_a * ny

    # Heavier molecule moves less
    overlap = min_dist - dist
    sep_a = overlap * (m_b / total_mass) + separation_epsilon
    sep_b = overlap * (m_a / total_mass) + separation_epsilon
    positions[i, 0] -= nx * sep_a
    positions[i, 1] -= ny * sep_a
    positions[j, 0] += nx * sep_b
    positions[j, 1] += ny * sep_b

    return True


@jit(nopython=True, cache=True)
def resolve_particle_collisions(
    positions: np.ndarray,
    velocities: np.ndarray,
    masses: np.ndarray,
    radii: np.ndarray,
    separation_epsilon: float
) -> int:
    """
    Brute-force O(N²) pass over every unordered pair.

    Fine for the populations this engine targets (a few hundred).

    Returns:
        Number of collisions resolved
    """
    n_particles = positions.shape[0]
    n_collisions = 0

    for i in range(n_particles):
        for j in range(i + 1, n_particles):
            if resolve_pair_collision(positions, velocities, masses, radii, i, j, separation_epsilon):
                n_collisions += 1

    return n_collisions


@jit(nopython=True, cache=True)
def resolve_wall_collisions(
    positions: np.ndarray,
    velocities: np.ndarray,
    radii: np.ndarray,
    left: float,
    right: float,
    top: float,
    bottom: float
) -> float:
    """
    Reflect molecules off the container walls in place.

    Each reflection clamps the molecule to the wall and points the velocity
    component back inward, adding 2|v| to the wall impulse.

    Returns:
        Total wall impulse (px per reference frame, unit mass)
    """
    impulse = 0.0

    for i in range(positions.shape[0]):
        r = radii[i]

        if positions[i, 0] - r < left:
            positions[i, 0] = left + r
            impulse += 2.0 * abs(velocities[i, 0])
            velocities[i, 0] = abs(velocities[i, 0])
        if positions[i, 0] + r > right:
            positions[i, 0] = right - r
            impulse += 2.0 * abs(velocities[i, 0])
            velocities[i, 0] = -abs(velocities[i, 0])

        if positions[i, 1] - r < top:
            positions[i, 1] = top + r
            impulse += 2.0 * abs(velocities[i, 1])
            velocities[i, 1] = abs(velocities[i, 1])
        if positions[i, 1] + r > bottom:
            positions[i, 1] = bottom - r
            impulse += 2.0 * abs(velocities[i, 1])
            velocities[i, 1] = -abs(velocities[i, 1])

    return impulse


@jit(nopython=True, cache=True)
def resolve_particle_collisions_cell_list(
    positions: np.ndarray,
    velocities: np.ndarray,
    masses: np.ndarray,
    radii: np.ndarray,
    separation_epsilon: float,
    cell_list: np.ndarray,
    cell_count: np.ndarray,
    particle_cell: np.ndarray,
    n_cells: Tuple[int, int]
) -> int:
    """
    Resolve collisions using a uniform grid broad phase.

    Each molecule is only tested against molecules in its own and the
    eight neighbouring cells. The narrow phase is resolve_pair_collision.
    """
    n_particles = positions.shape[0]
    nx, ny = n_cells
    n_collisions = 0

    for i in range(n_particles):
        ci_x = particle_cell[i, 0]
        ci_y = particle_cell[i, 1]

        for di in range(-1, 2):
            for dj in range(-1, 2):
                cj_x = ci_x + di
                cj_y = ci_y + dj
                if cj_x < 0 or cj_x >= nx or cj_y < 0 or cj_y >= ny:
                    continue

                cell_idx = cj_x * ny + cj_y
                for k in range(cell_count[cell_idx]):
                    j = cell_list[cell_idx, k]
                    if j <= i:
                        continue
                    if resolve_pair_collision(positions, velocities, masses, radii, i, j, separation_epsilon):
                        n_collisions += 1

    return n_collisions


def build_cell_list(
    positions: np.ndarray,
    bounds: Tuple[float, float, float, float],
    cell_size: float,
    max_particles_per_cell: int = 64
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, Tuple[int, int]]:
    """
    Bucket molecules into a uniform grid over the container.

    Args:
        positions: Nx2 array of positions
        bounds: (left, right, top, bottom) of the container
        cell_size: Cell edge length, at least the largest molecule diameter
        max_particles_per_cell: Bucket capacity

    Returns:
        cell_list: 2D array [n_cells, max_per_cell] of particle indices
        cell_count: 1D array [n_cells] of particle counts per cell
        particle_cell: Nx2 array of (ix, iy) cell coordinates per particle
        n_cells: (nx, ny) number of cells in each direction
    """
    left, right, top, bottom = bounds
    width = right - left
    height = bottom - top

    nx = max(1, int(width / cell_size))
    ny = max(1, int(height / cell_size))
    cx = width / nx
    cy = height / ny

    n_cells_total = nx * ny
    cell_list = np.zeros((n_cells_total, max_particles_per_cell), dtype=np.int64)
    cell_count = np.zeros(n_cells_total, dtype=np.int64)

    # Molecules may sit slightly outside the walls mid-substep
    ix = np.clip(((positions[:, 0] - left) / cx).astype(np.int64), 0, nx - 1)
    iy = np.clip(((positions[:, 1] - top) / cy).astype(np.int64), 0, ny - 1)
    particle_cell = np.stack((ix, iy), axis=1)

    dropped = 0
    for i in range(len(positions)):
        cell_idx = ix[i] * ny + iy[i]
        count = cell_count[cell_idx]
        if count < max_particles_per_cell:
            cell_list[cell_idx, count] = i
            cell_count[cell_idx] += 1
        else:
            dropped += 1

    if dropped:
        logger.warning(f"Cell list overflow: {dropped} molecules skipped by broad phase")

    return cell_list, cell_count, particle_cell, (nx, ny)


def calculate_kinetic_energy(velocities: np.ndarray, masses: np.ndarray) -> float:
    """
    Calculate total kinetic energy.

    KE = Σ (1/2) m v²

    Units follow the inputs; with screen velocities this is only meaningful
    as a relative quantity.
    """
    v_sq = np.sum(velocities ** 2, axis=1)
    return 0.5 * np.sum(masses * v_sq)


def calculate_momentum(velocities: np.ndarray, masses: np.ndarray) -> np.ndarray:
    """Total momentum vector Σ m v."""
    return np.sum(masses[:, None] * velocities, axis=0)
