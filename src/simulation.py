#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Molecular Motion Simulation Engine
================================================================================

Project:        Molecular Motion Canvas
Module:         simulation.py

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
Last Updated:   February 9, 2026

License:        MIT License
================================================================================

Frame-driven engine for a bounded 2D gas of H₂, N₂ and CO₂ molecules.

Each call to ``update(dt, params)``:
1. Reconciles live parameter edits (temperature, molecule count, size)
   against the particle store, in place
2. Advances the gas over a fixed number of substeps, resolving pairwise
   and wall collisions after every substep
3. Pushes the frame's wall impulse into the rolling pressure window

The host drives the engine through init/update/render/reset/destroy/resize.
"""

import logging
import numpy as np
from typing import Tuple, Optional, List, Dict, Mapping, Sequence, Any
from dataclasses import dataclass, field
from enum import Enum

from .physics import (
    MOLECULE_TYPES,
    REFERENCE_FRAME_INTERVAL,
    SEPARATION_EPSILON,
    Species,
    species_masses,
    clamp_temperature,
    sample_velocities,
    to_screen_velocity,
    advance_positions,
    resolve_particle_collisions,
    resolve_particle_collisions_cell_list,
    resolve_wall_collisions,
    build_cell_list
)
from .thermodynamics import (
    PRESSURE_WINDOW,
    PRESSURE_SCALE,
    PressureMonitor,
    SpeciesStatistics,
    average_kinetic_energy,
    mean_speed,
    species_statistics
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterSpec:
    """A live-tunable knob exposed to the host UI."""
    key: str
    label: str
    min: float
    max: float
    step: float
    default: float
    unit: str = ""


PARAMETERS: Tuple[ParameterSpec, ...] = (
    ParameterSpec("temperature", "Temperature", 10, 1000, 10, 300, "K"),
    ParameterSpec("num_molecules", "Molecules", 10, 300, 10, 100),
    ParameterSpec("molecule_size", "Molecule Size", 2, 8, 0.5, 4, "px"),
)

DEFAULT_PARAMETERS: Dict[str, float] = {p.key: float(p.default) for p in PARAMETERS}


class ChangeKind(Enum):
    """Kinds of parameter diff, in the order they are applied."""
    TEMPERATURE = "temperature"
    MOLECULE_SIZE = "molecule_size"
    POPULATION = "num_molecules"


@dataclass(frozen=True)
class ParameterChange:
    """One parameter edit to reconcile before integrating a frame."""
    kind: ChangeKind
    old: float
    new: float


def diff_parameters(
    current: Mapping[str, float],
    params: Optional[Mapping[str, Any]]
) -> List[ParameterChange]:
    """
    Compute the ordered list of changes between current and requested knobs.

    Missing keys keep their current value. The molecule count is rounded to
    the nearest integer and floored at zero.

    Args:
        current: Current parameter values
        params: Requested values from the host (may be partial or None)

    Returns:
        Changes ordered temperature, molecule size, population
    """
    if not params:
        return []

    known = {kind.value for kind in ChangeKind}
    unknown = set(params) - known
    if unknown:
        logger.debug(f"Ignoring unknown parameters: {sorted(unknown)}")

    changes = []
    for kind in ChangeKind:
        key = kind.value
        if key not in params or params[key] is None:
            continue

        new = float(params[key])
        if kind is ChangeKind.POPULATION:
            new = float(max(0, int(np.floor(new + 0.5))))

        old = float(current[key])
        if new != old:
            changes.append(ParameterChange(kind, old, new))

    return changes


@dataclass
class ContainerLayout:
    """Placement of the gas container on the canvas (px)."""
    margin_top: float = 50.0
    margin_bottom: float = 20.0
    margin_left: float = 20.0
    histogram_width_fraction: float = 0.28  # canvas width reserved for the histogram
    panel_gap: float = 10.0


@dataclass
class BoundingRegion:
    """Axis-aligned container rectangle in canvas coordinates (y down)."""
    left: float
    right: float
    top: float
    bottom: float

    @classmethod
    def from_canvas(
        cls,
        width: float,
        height: float,
        layout: ContainerLayout,
        min_size: float = 0.0
    ) -> "BoundingRegion":
        """
        Place the container on a canvas.

        On canvases too small for the layout, the container keeps at least
        ``min_size`` px on each side and may extend past the canvas edge.
        """
        left = layout.margin_left
        top = layout.margin_top
        right = width - width * layout.histogram_width_fraction - layout.panel_gap
        bottom = height - layout.margin_bottom
        return cls(
            left=left,
            right=max(right, left + min_size),
            top=top,
            bottom=max(bottom, top + min_size)
        )

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def perimeter(self) -> float:
        return 2.0 * (self.width + self.height)

    def clamp(self, positions: np.ndarray, radii: np.ndarray) -> np.ndarray:
        """Pull molecule centers back inside the region, in place."""
        positions[:, 0] = np.maximum(self.left + radii, np.minimum(self.right - radii, positions[:, 0]))
        positions[:, 1] = np.maximum(self.top + radii, np.minimum(self.bottom - radii, positions[:, 1]))
        return positions

    def contains(self, positions: np.ndarray, radii: np.ndarray, tolerance: float = 0.0) -> bool:
        """Check that every molecule lies fully inside the region."""
        x = positions[:, 0]
        y = positions[:, 1]
        return bool(
            np.all(x >= self.left + radii - tolerance) and
            np.all(x <= self.right - radii + tolerance) and
            np.all(y >= self.top + radii - tolerance) and
            np.all(y <= self.bottom - radii + tolerance)
        )


@dataclass
class SimulationConfig:
    """Configuration for the gas simulation."""
    # Starting knob values for init()
    temperature: float = DEFAULT_PARAMETERS["temperature"]
    num_molecules: int = int(DEFAULT_PARAMETERS["num_molecules"])
    molecule_size: float = DEFAULT_PARAMETERS["molecule_size"]

    # Canvas
    canvas_size: Tuple[float, float] = (800.0, 600.0)
    layout: ContainerLayout = field(default_factory=ContainerLayout)

    # Time integration
    substeps: int = 3
    max_dt: float = 0.05  # s, guards against frame hitches

    # Collisions
    separation_epsilon: float = SEPARATION_EPSILON
    use_cell_list: bool = False
    cell_list_threshold: int = 150
    max_particles_per_cell: int = 64

    # Pressure
    pressure_window: int = PRESSURE_WINDOW
    pressure_scale: float = PRESSURE_SCALE

    # Random source
    seed: Optional[int] = None

    def __post_init__(self):
        if self.substeps < 1:
            raise ValueError("substeps must be at least 1")
        if self.max_dt <= 0:
            raise ValueError("max_dt must be positive")
        if self.pressure_window < 1:
            raise ValueError("pressure_window must be at least 1")
        if self.num_molecules < 0:
            raise ValueError("num_molecules must be non-negative")
        if self.molecule_size <= 0:
            raise ValueError("molecule_size must be positive")
        if self.separation_epsilon < 0:
            raise ValueError("separation_epsilon must be non-negative")
        self.canvas_size = (float(self.canvas_size[0]), float(self.canvas_size[1]))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        """
        Build a configuration from a plain mapping (e.g. parsed JSON).

        Raises:
            ValueError: If the mapping contains unknown keys
        """
        data = dict(data)
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        if isinstance(data.get("layout"), Mapping):
            data["layout"] = ContainerLayout(**data["layout"])
        if "canvas_size" in data:
            data["canvas_size"] = tuple(data["canvas_size"])
        return cls(**data)

    def initial_parameters(self) -> Dict[str, float]:
        return {
            "temperature": float(self.temperature),
            "num_molecules": float(self.num_molecules),
            "molecule_size": float(self.molecule_size),
        }


@dataclass
class ParticleStore:
    """
    Live molecules as parallel arrays.

    Velocities are in pixels per reference frame.
    """
    positions: np.ndarray      # Nx2
    velocities: np.ndarray     # Nx2
    radii: np.ndarray          # N
    species_index: np.ndarray  # N, index into the species table

    def __len__(self) -> int:
        return self.positions.shape[0]

    @property
    def n_particles(self) -> int:
        return len(self)

    def extend(self, other: "ParticleStore") -> None:
        """Append molecules; existing rows are left untouched."""
        self.positions = np.ascontiguousarray(np.concatenate((self.positions, other.positions)))
        self.velocities = np.ascontiguousarray(np.concatenate((self.velocities, other.velocities)))
        self.radii = np.concatenate((self.radii, other.radii))
        self.species_index = np.concatenate((self.species_index, other.species_index))

    def truncate(self, n: int) -> None:
        """Keep only the first n molecules."""
        self.positions = self.positions[:n].copy()
        self.velocities = self.velocities[:n].copy()
        self.radii = self.radii[:n].copy()
        self.species_index = self.species_index[:n].copy()

    def masses(self, species: Sequence[Species]) -> np.ndarray:
        return species_masses(species)[self.species_index]

    def speeds(self) -> np.ndarray:
        return np.sqrt(np.sum(self.velocities ** 2, axis=1))

    def copy(self) -> "ParticleStore":
        return ParticleStore(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            radii=self.radii.copy(),
            species_index=self.species_index.copy()
        )


@dataclass(frozen=True)
class FrameSnapshot:
    """Read-only view of one frame for rendering."""
    positions: np.ndarray
    velocities: np.ndarray
    radii: np.ndarray
    species_index: np.ndarray
    species: Tuple[Species, ...]
    region: BoundingRegion
    canvas_size: Tuple[float, float]
    temperature: float
    molecule_size: float
    pressure: float
    time: float

    @property
    def n_particles(self) -> int:
        return self.positions.shape[0]


@dataclass
class GasObservables:
    """Macroscopic readout for the current frame."""
    temperature: float
    n_molecules: int
    pressure: float
    average_kinetic_energy: float  # J
    species: List[SpeciesStatistics]


class MolecularMotionSimulation:
    """
    Bounded 2D gas of heterogeneous molecules.

    Every instance owns its particle store and pressure window, so several
    simulations can run side by side.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        species: Sequence[Species] = MOLECULE_TYPES,
        rng: Optional[Any] = None
    ):
        self.config = config or SimulationConfig()
        if len(species) == 0:
            raise ValueError("At least one species is required")

        self.species: Tuple[Species, ...] = tuple(species)
        self._masses = species_masses(self.species)
        self._radius_factors = np.array([s.radius_factor for s in self.species], dtype=np.float64)
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)

        self.parameters: Dict[str, float] = self.config.initial_parameters()

        self.width, self.height = self.config.canvas_size
        self.region = self._make_region()
        self.store: Optional[ParticleStore] = None
        self.pressure_monitor = PressureMonitor(self.config.pressure_window, self.config.pressure_scale)

        self.time = 0.0
        self.frame = 0
        self.last_wall_impulse = 0.0
        self.last_collision_count = 0

    # ── Properties ─────────────────────────────────────────────────

    @property
    def temperature(self) -> float:
        return self.parameters["temperature"]

    @property
    def num_molecules(self) -> int:
        return int(self.parameters["num_molecules"])

    @property
    def molecule_size(self) -> float:
        return self.parameters["molecule_size"]

    @property
    def pressure(self) -> float:
        return self.pressure_monitor.pressure

    @property
    def is_initialized(self) -> bool:
        return self.store is not None

    # ── Lifecycle ──────────────────────────────────────────────────

    def init(self, render_target: Optional[Any] = None) -> None:
        """
        Allocate the particle store from the current parameters.

        Args:
            render_target: Anything with ``width`` and ``height`` attributes
                (a canvas descriptor). Keeps the configured size if None.
        """
        if render_target is not None:
            self.width = float(render_target.width)
            self.height = float(render_target.height)
        self.region = self._make_region()

        self.pressure_monitor.clear()
        self.time = 0.0
        self.frame = 0
        self._spawn()

        logger.info(
            f"Gas initialized: {len(self.store)} molecules at T={self.temperature:g} K "
            f"in {self.region.width:.0f}x{self.region.height:.0f} px"
        )

    def update(self, dt: float, params: Optional[Mapping[str, Any]] = None) -> None:
        """
        Advance the gas by one frame.

        Parameter changes are all applied before any integration, so a frame
        never sees a half-applied edit.

        Args:
            dt: Frame duration in seconds (clamped to [0, max_dt])
            params: Partial mapping of knob values; absent keys are unchanged
        """
        self.apply_parameters(params)

        dt = min(max(float(dt), 0.0), self.config.max_dt)
        impulse = self._integrate(dt)

        self.last_wall_impulse = impulse
        self.pressure_monitor.push(impulse, self.region.perimeter)

        self.time += dt
        self.frame += 1

    def apply_parameters(self, params: Optional[Mapping[str, Any]]) -> List[ParameterChange]:
        """
        Reconcile the particle store with new knob values, without moving it.

        Returns:
            The changes that were applied, in order
        """
        if self.store is None:
            raise RuntimeError("Simulation not initialized")

        changes = diff_parameters(self.parameters, params)
        for change in changes:
            self._apply_change(change)
        return changes

    def render(self) -> FrameSnapshot:
        """Return a copy of the state needed to draw the current frame."""
        if self.store is None:
            raise RuntimeError("Simulation not initialized")

        return FrameSnapshot(
            positions=self.store.positions.copy(),
            velocities=self.store.velocities.copy(),
            radii=self.store.radii.copy(),
            species_index=self.store.species_index.copy(),
            species=self.species,
            region=BoundingRegion(self.region.left, self.region.right, self.region.top, self.region.bottom),
            canvas_size=(self.width, self.height),
            temperature=self.temperature,
            molecule_size=self.molecule_size,
            pressure=self.pressure,
            time=self.time
        )

    def reset(self) -> None:
        """
        Restore the default knob values from PARAMETERS and respawn the gas.

        Configured starting values only apply to ``init``.
        """
        self.parameters = dict(DEFAULT_PARAMETERS)
        self.region = self._make_region()
        self.pressure_monitor.clear()
        self.last_wall_impulse = 0.0
        self.time = 0.0
        self.frame = 0
        self._spawn()
        logger.info(f"Gas reset to {len(self.store)} molecules at T={self.temperature:g} K")

    def destroy(self) -> None:
        """Release the particle store and pressure window. Safe to repeat."""
        if self.store is not None:
            logger.info("Gas destroyed")
        self.store = None
        self.pressure_monitor.clear()

    def resize(self, width: float, height: float) -> None:
        """
        Recompute the container and pull molecules back inside it.

        The container never gets narrower or shorter than the largest
        molecule diameter, even on canvases smaller than the layout margins.
        """
        self.width = float(width)
        self.height = float(height)
        self.region = self._make_region()

        if self.store is not None:
            self.region.clamp(self.store.positions, self.store.radii)

        logger.debug(f"Resized canvas to {self.width:.0f}x{self.height:.0f}")

    def get_state_description(self) -> str:
        """Plain-text summary of the gas for screen readers and logs."""
        avg_ke = average_kinetic_energy(self.temperature)
        speeds = ", ".join(
            f"{sp.name}: {mean_speed(sp.mass, self.temperature):.0f} m/s" for sp in self.species
        )
        names = ", ".join(sp.name for sp in self.species)
        return (
            f"Molecular Motion simulation: {self.num_molecules} molecules at T={self.temperature:g} K. "
            f"Average KE = {avg_ke:.3g} J. "
            f"Average speeds: {speeds}. "
            f"Measured pressure = {self.pressure:.3g} (arb. units). "
            f"Molecule types: {names} with different masses and sizes."
        )

    def get_observables(self) -> GasObservables:
        """Theoretical and measured macroscopic quantities."""
        if self.store is None:
            raise RuntimeError("Simulation not initialized")

        return GasObservables(
            temperature=self.temperature,
            n_molecules=len(self.store),
            pressure=self.pressure,
            average_kinetic_energy=average_kinetic_energy(self.temperature),
            species=species_statistics(
                self.store.velocities, self.store.species_index, self.species, self.temperature
            )
        )

    # ── Internals ──────────────────────────────────────────────────

    def _make_region(self, molecule_size: Optional[float] = None) -> BoundingRegion:
        if molecule_size is None:
            molecule_size = self.molecule_size
        min_size = 2.0 * molecule_size * float(np.max(self._radius_factors))
        return BoundingRegion.from_canvas(self.width, self.height, self.config.layout, min_size)

    def _spawn(self) -> None:
        self.store = self._create_molecules(self.num_molecules)

    def _create_molecules(self, n: int) -> ParticleStore:
        """Sample n new molecules uniformly in the container at the current temperature."""
        n_species = len(self.species)
        idx = np.minimum((self.rng.random(n) * n_species).astype(np.int64), n_species - 1)
        radii = self.molecule_size * self._radius_factors[idx]

        r = self.region
        positions = np.empty((n, 2))
        positions[:, 0] = r.left + radii + self.rng.random(n) * (r.width - 2 * radii)
        positions[:, 1] = r.top + radii + self.rng.random(n) * (r.height - 2 * radii)

        velocities = to_screen_velocity(sample_velocities(self._masses[idx], self.temperature, self.rng))

        return ParticleStore(
            positions=np.ascontiguousarray(positions),
            velocities=np.ascontiguousarray(velocities),
            radii=radii,
            species_index=idx
        )

    def _apply_change(self, change: ParameterChange) -> None:
        store = self.store

        if change.kind is ChangeKind.TEMPERATURE:
            # Same direction, magnitude scaled by √(T_new / T_old)
            factor = np.sqrt(clamp_temperature(change.new) / clamp_temperature(change.old))
            store.velocities *= factor

        elif change.kind is ChangeKind.MOLECULE_SIZE:
            store.radii = change.new * self._radius_factors[store.species_index]
            self.region = self._make_region(change.new)
            self.region.clamp(store.positions, store.radii)

        elif change.kind is ChangeKind.POPULATION:
            # Size and temperature are already current for new molecules
            n_new = int(change.new)
            if n_new > len(store):
                store.extend(self._create_molecules(n_new - len(store)))
            else:
                store.truncate(n_new)

        self.parameters[change.kind.value] = change.new
        logger.debug(f"Applied {change.kind.value}: {change.old:g} -> {change.new:g}")

    def _integrate(self, dt: float) -> float:
        """
        Advance positions over fixed substeps.

        Fewer substeps raise the chance that fast pairs pass through each
        other between checks.

        Returns:
            Wall impulse accumulated over the frame
        """
        store = self.store
        substeps = self.config.substeps
        frame_fraction = (dt / substeps) / REFERENCE_FRAME_INTERVAL
        masses = self._masses[store.species_index]
        r = self.region

        impulse = 0.0
        collisions = 0
        for _ in range(substeps):
            advance_positions(store.positions, store.velocities, frame_fraction)
            collisions += self._resolve_particle_collisions(masses)
            impulse += resolve_wall_collisions(
                store.positions, store.velocities, store.radii,
                r.left, r.right, r.top, r.bottom
            )

        self.last_collision_count = collisions
        return impulse

    def _resolve_particle_collisions(self, masses: np.ndarray) -> int:
        """Pairwise collisions, brute force or through the cell list."""
        store = self.store
        eps = self.config.separation_epsilon

        if self.config.use_cell_list and len(store) > self.config.cell_list_threshold:
            cell_size = max(2.0 * float(np.max(store.radii)), 1.0)
            cell_list, cell_count, particle_cell, n_cells = build_cell_list(
                store.positions,
                (self.region.left, self.region.right, self.region.top, self.region.bottom),
                cell_size,
                self.config.max_particles_per_cell
            )
            return resolve_particle_collisions_cell_list(
                store.positions, store.velocities, masses, store.radii, eps,
                cell_list, cell_count, particle_cell, n_cells
            )

        return resolve_particle_collisions(store.positions, store.velocities, masses, store.radii, eps)


@dataclass
class RenderTarget:
    """Minimal canvas descriptor accepted by ``init``."""
    width: float = 800.0
    height: float = 600.0


def create_gas_simulation(
    temperature: float = 300.0,
    n_molecules: int = 100,
    molecule_size: float = 4.0,
    canvas_size: Tuple[float, float] = (800.0, 600.0),
    seed: Optional[int] = None
) -> MolecularMotionSimulation:
    """
    Create and initialize a gas simulation.

    Args:
        temperature: Initial temperature (K)
        n_molecules: Initial molecule count
        molecule_size: Base molecule radius (px)
        canvas_size: (width, height) of the canvas
        seed: Seed for the random source

    Returns:
        Initialized MolecularMotionSimulation
    """
    config = SimulationConfig(
        temperature=temperature,
        num_molecules=n_molecules,
        molecule_size=molecule_size,
        canvas_size=canvas_size,
        seed=seed
    )

    sim = MolecularMotionSimulation(config)
    sim.init()

    return sim
