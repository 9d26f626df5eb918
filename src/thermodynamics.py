#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Kinetic Theory Observables
================================================================================

Project:        Molecular Motion Canvas
Module:         thermodynamics.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

This module derives the macroscopic quantities shown next to the gas:
- Rolling-window pressure from the momentum delivered to the walls
- Theoretical Maxwell-Boltzmann speeds and equipartition energy
- Empirical speed histogram and per-species mean speeds

The theoretical values depend only on temperature and mass. For small
populations they will visibly disagree with the live histogram; that gap
is part of what the demonstration shows.
"""

import numpy as np
from typing import Optional, List, Sequence, Tuple
from dataclasses import dataclass

from .physics import (
    K_B,
    SPEED_SCALE,
    Species,
    clamp_temperature,
    to_physical_speed
)


# Frames kept in the pressure sample window
PRESSURE_WINDOW = 60

# Display scaling for the pressure readout (arbitrary units)
PRESSURE_SCALE = 1000.0


class PressureMonitor:
    """
    Rolling pressure estimate from wall impulses.

    Each frame pushes the total impulse delivered to the walls. The
    pressure is the windowed mean impulse per unit of container perimeter.
    """

    def __init__(self, window: int = PRESSURE_WINDOW, scale: float = PRESSURE_SCALE):
        if window < 1:
            raise ValueError("Pressure window must hold at least one sample")
        self.window = window
        self.scale = scale
        self.samples: List[float] = []
        self.pressure = 0.0

    def push(self, impulse: float, perimeter: float) -> float:
        """
        Record one frame's wall impulse and refresh the pressure estimate.

        Args:
            impulse: Total wall impulse accumulated over the frame
            perimeter: Container perimeter (px)

        Returns:
            Updated pressure estimate
        """
        self.samples.append(float(impulse))

        # Trim history
        if len(self.samples) > self.window:
            self.samples.pop(0)

        if perimeter > 0:
            self.pressure = float(np.mean(self.samples)) / perimeter * self.scale
        else:
            self.pressure = 0.0
        return self.pressure

    def clear(self):
        """Drop all samples."""
        self.samples = []
        self.pressure = 0.0

    def __len__(self) -> int:
        return len(self.samples)


def mean_speed(mass: float, temperature: float) -> float:
    """
    Maxwell-Boltzmann mean speed, v̄ = √(8 k_B T / (π m)), in m/s.
    """
    return np.sqrt(8.0 * K_B * clamp_temperature(temperature) / (np.pi * mass))


def most_probable_speed(mass: float, temperature: float) -> float:
    """Peak of the 2D speed distribution, √(k_B T / m)."""
    return np.sqrt(K_B * clamp_temperature(temperature) / mass)


def rms_speed(mass: float, temperature: float) -> float:
    """Root-mean-square speed in 2D, √(2 k_B T / m)."""
    return np.sqrt(2.0 * K_B * clamp_temperature(temperature) / mass)


def average_kinetic_energy(temperature: float) -> float:
    """Equipartition value reported by the display, (3/2) k_B T, in J."""
    return 1.5 * K_B * clamp_temperature(temperature)


def maxwell_boltzmann_pdf_2d(speeds: np.ndarray, mass: float, temperature: float) -> np.ndarray:
    """
    2D Maxwell-Boltzmann speed density.

        f(v) = (m / k_B T) v exp(-m v² / (2 k_B T))

    Args:
        speeds: Speeds in m/s
        mass: Molecule mass in kg
        temperature: Temperature in K

    Returns:
        Probability density (s/m)
    """
    kt = K_B * clamp_temperature(temperature)
    v = np.asarray(speeds, dtype=np.float64)
    return (mass / kt) * v * np.exp(-mass * v * v / (2.0 * kt))


def display_speed_limit(temperature: float, species: Sequence[Species]) -> float:
    """
    Upper speed (px per reference frame) used for color and histogram scales.

    Based on the lightest species, which moves fastest.
    """
    light_mass = min(s.mass for s in species)
    vp = np.sqrt(2.0 * K_B * clamp_temperature(temperature) / light_mass)
    return vp * 2.5 * SPEED_SCALE


def speed_histogram(
    speeds: np.ndarray,
    max_speed: float,
    n_bins: int = 20
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Histogram speeds into equal bins on [0, max_speed].

    Speeds beyond max_speed are counted in the last bin.

    Returns:
        counts: Integer counts per bin
        edges: Bin edges (n_bins + 1 values)
    """
    edges = np.linspace(0.0, max_speed, n_bins + 1)
    counts = np.zeros(n_bins, dtype=np.int64)
    if max_speed <= 0 or len(speeds) == 0:
        return counts, edges

    bin_width = max_speed / n_bins
    idx = np.minimum((np.asarray(speeds) / bin_width).astype(np.int64), n_bins - 1)
    np.add.at(counts, idx, 1)
    return counts, edges


@dataclass
class SpeciesStatistics:
    """Theoretical and measured speed of one molecule type."""
    name: str
    count: int
    theoretical_mean_speed: float        # m/s
    empirical_mean_speed: Optional[float]  # m/s, None when absent

    @property
    def relative_deviation(self) -> Optional[float]:
        if self.empirical_mean_speed is None:
            return None
        return (self.empirical_mean_speed - self.theoretical_mean_speed) / self.theoretical_mean_speed


def species_statistics(
    velocities: np.ndarray,
    species_index: np.ndarray,
    species: Sequence[Species],
    temperature: float
) -> List[SpeciesStatistics]:
    """
    Compare live mean speeds with the Maxwell-Boltzmann prediction.

    Args:
        velocities: Nx2 screen velocities
        species_index: Species index per molecule
        species: Species table
        temperature: Current temperature (K)

    Returns:
        One SpeciesStatistics per species
    """
    speeds = to_physical_speed(np.sqrt(np.sum(velocities ** 2, axis=1)))
    stats = []

    for idx, sp in enumerate(species):
        mask = species_index == idx
        count = int(np.count_nonzero(mask))
        empirical = float(np.mean(speeds[mask])) if count > 0 else None
        stats.append(SpeciesStatistics(
            name=sp.name,
            count=count,
            theoretical_mean_speed=float(mean_speed(sp.mass, temperature)),
            empirical_mean_speed=empirical
        ))

    return stats
