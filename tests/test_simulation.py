#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
================================================================================
Simulation Module Tests
================================================================================

Author:         Ryan Kamp
Affiliation:    University of Cincinnati Department of Computer Science
Email:          kamprj@mail.uc.edu
GitHub:         https://github.com/ryanjosephkamp

Created:        February 9, 2026
License:        MIT License
================================================================================
"""

import numpy as np
import pytest
from src.physics import MOLECULE_TYPES, SPEED_SCALE, calculate_kinetic_energy
from src.thermodynamics import mean_speed
from src.simulation import (
    BoundingRegion, ChangeKind, ContainerLayout, MolecularMotionSimulation,
    ParticleStore, RenderTarget, SimulationConfig, PARAMETERS,
    create_gas_simulation, diff_parameters
)

FRAME_DT = 1.0 / 60


def total_kinetic_energy(sim):
    return calculate_kinetic_energy(sim.store.velocities, sim.store.masses(sim.species))


class TestSimulationConfig:
    """Tests for simulation configuration."""

    def test_default_config(self):
        """Defaults match the host knob defaults."""
        config = SimulationConfig()
        assert config.temperature == 300
        assert config.num_molecules == 100
        assert config.molecule_size == 4
        assert config.substeps == 3
        assert config.pressure_window == 60
        assert config.use_cell_list == False

    def test_parameter_metadata(self):
        """Knob ranges exposed to the host."""
        ranges = {p.key: (p.min, p.max, p.default) for p in PARAMETERS}
        assert ranges["temperature"] == (10, 1000, 300)
        assert ranges["num_molecules"] == (10, 300, 100)
        assert ranges["molecule_size"] == (2, 8, 4)

    @pytest.mark.parametrize("kwargs", [
        {"substeps": 0},
        {"max_dt": 0.0},
        {"pressure_window": 0},
        {"num_molecules": -1},
        {"molecule_size": 0.0},
    ])
    def test_invalid_config(self, kwargs):
        """Invalid settings are rejected on construction."""
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)

    def test_from_dict(self):
        """Plain mappings, including a nested layout, build a config."""
        config = SimulationConfig.from_dict({
            "temperature": 450,
            "canvas_size": [1000, 700],
            "layout": {"margin_top": 40},
        })
        assert config.temperature == 450
        assert config.canvas_size == (1000.0, 700.0)
        assert isinstance(config.layout, ContainerLayout)
        assert config.layout.margin_top == 40

    def test_from_dict_unknown_key(self):
        """Typos in configuration files are reported."""
        with pytest.raises(ValueError, match="tempreature"):
            SimulationConfig.from_dict({"tempreature": 300})


class TestDiffParameters:
    """Tests for the parameter diff."""

    CURRENT = {"temperature": 300.0, "num_molecules": 100.0, "molecule_size": 4.0}

    def test_empty(self):
        """No params, no changes."""
        assert diff_parameters(self.CURRENT, None) == []
        assert diff_parameters(self.CURRENT, {}) == []

    def test_unchanged_values_skipped(self):
        """Repeating the current values is a no-op."""
        assert diff_parameters(self.CURRENT, dict(self.CURRENT)) == []

    def test_application_order(self):
        """Temperature, then size, then population."""
        changes = diff_parameters(
            self.CURRENT, {"num_molecules": 50, "molecule_size": 6, "temperature": 600}
        )
        assert [c.kind for c in changes] == [
            ChangeKind.TEMPERATURE, ChangeKind.MOLECULE_SIZE, ChangeKind.POPULATION
        ]
        assert changes[0].old == 300.0
        assert changes[0].new == 600.0

    def test_population_rounding(self):
        """Molecule counts are rounded half up and floored at zero."""
        assert diff_parameters(self.CURRENT, {"num_molecules": 42.5})[0].new == 43
        assert diff_parameters(self.CURRENT, {"num_molecules": 42.4})[0].new == 42
        assert diff_parameters(self.CURRENT, {"num_molecules": -7})[0].new == 0
        assert diff_parameters(self.CURRENT, {"num_molecules": 100.3}) == []

    def test_unknown_keys_ignored(self):
        """Unrecognized keys do not produce changes."""
        assert diff_parameters(self.CURRENT, {"gravity": 9.8}) == []


class TestBoundingRegion:
    """Tests for the container rectangle."""

    def test_default_canvas(self):
        """An 800x600 canvas leaves room for the histogram on the right."""
        region = BoundingRegion.from_canvas(800, 600, ContainerLayout())
        assert region.left == 20
        assert region.right == pytest.approx(566)
        assert region.top == 50
        assert region.bottom == 580
        assert region.perimeter == pytest.approx(2152)

    def test_clamp(self):
        """Clamping pulls centers one radius inside each wall."""
        region = BoundingRegion(0, 100, 0, 100)
        positions = np.array([[-5.0, 50.0], [50.0, 120.0], [50.0, 50.0]])
        radii = np.array([2.0, 3.0, 1.0])

        region.clamp(positions, radii)

        np.testing.assert_allclose(positions, [[2, 50], [50, 97], [50, 50]])
        assert region.contains(positions, radii)

    def test_min_size(self):
        """Tiny canvases still leave room for one molecule."""
        region = BoundingRegion.from_canvas(60, 80, ContainerLayout(), min_size=10.4)
        assert region.width == pytest.approx(60 - 16.8 - 10 - 20)
        assert region.height == pytest.approx(10.4)

        region = BoundingRegion.from_canvas(10, 10, ContainerLayout())
        assert region.width == 0
        assert region.height == 0
        assert region.perimeter == 0


class TestLifecycle:
    """Tests for init/update/render/reset/destroy/resize."""

    def test_not_initialized(self):
        """Frames cannot be advanced or drawn before init."""
        sim = MolecularMotionSimulation()
        assert not sim.is_initialized
        with pytest.raises(RuntimeError):
            sim.update(FRAME_DT)
        with pytest.raises(RuntimeError):
            sim.render()

    def test_init_spawns_inside(self):
        """Every molecule starts fully inside the container."""
        sim = create_gas_simulation(n_molecules=300, seed=1)

        assert len(sim.store) == 300
        assert sim.region.contains(sim.store.positions, sim.store.radii)
        assert set(np.unique(sim.store.species_index)) == {0, 1, 2}

    def test_radii_follow_species(self):
        """Radius = molecule size × species radius factor."""
        sim = create_gas_simulation(molecule_size=5.0, seed=2)
        factors = np.array([sp.radius_factor for sp in MOLECULE_TYPES])
        np.testing.assert_allclose(sim.store.radii, 5.0 * factors[sim.store.species_index])

    def test_init_with_render_target(self):
        """The container follows the canvas descriptor."""
        sim = MolecularMotionSimulation(SimulationConfig(seed=3))
        sim.init(RenderTarget(width=1000, height=700))

        assert sim.region.right == pytest.approx(1000 - 280 - 10)
        assert sim.region.bottom == 680
        assert sim.region.contains(sim.store.positions, sim.store.radii)

    def test_molecules_stay_inside(self):
        """Containment holds after every frame."""
        sim = create_gas_simulation(temperature=1000, n_molecules=150, seed=4)
        for _ in range(120):
            sim.update(FRAME_DT)
            assert sim.region.contains(sim.store.positions, sim.store.radii, tolerance=1e-9)

    def test_update_conserves_kinetic_energy(self):
        """Elastic collisions and wall reflections keep total KE."""
        sim = create_gas_simulation(n_molecules=200, seed=5)
        ke0 = total_kinetic_energy(sim)
        for _ in range(30):
            sim.update(FRAME_DT)
        assert total_kinetic_energy(sim) == pytest.approx(ke0, rel=1e-9)

    def test_dt_clamped(self):
        """Long frame hitches and negative dt are clamped."""
        sim = create_gas_simulation(seed=6)
        sim.update(10.0)
        assert sim.time == pytest.approx(sim.config.max_dt)

        sim.update(-1.0)
        assert sim.time == pytest.approx(sim.config.max_dt)
        assert sim.frame == 2

    def test_pressure_window(self):
        """The window fills to 60 frames and stays there."""
        sim = create_gas_simulation(seed=7)
        for i in range(100):
            sim.update(FRAME_DT)
            assert len(sim.pressure_monitor) == min(i + 1, 60)
        assert sim.pressure > 0

    def test_render_returns_copies(self):
        """Mutating a snapshot leaves the simulation untouched."""
        sim = create_gas_simulation(seed=8)
        snapshot = sim.render()
        snapshot.positions[:] = 0.0
        snapshot.velocities[:] = 0.0

        assert snapshot.n_particles == 100
        assert not np.allclose(sim.store.positions, 0.0)
        assert snapshot.temperature == 300
        assert snapshot.canvas_size == (800.0, 600.0)

    def test_reset_restores_starting_parameters(self):
        """Reset undoes live edits and respawns the gas."""
        sim = create_gas_simulation(seed=9)
        sim.update(FRAME_DT, {"temperature": 800, "num_molecules": 40, "molecule_size": 7})
        sim.reset()

        assert sim.temperature == 300
        assert len(sim.store) == 100
        assert sim.molecule_size == 4
        assert len(sim.pressure_monitor) == 0
        assert sim.time == 0.0

    def test_reset_uses_parameter_defaults(self):
        """Reset goes back to the knob defaults, not the configured start."""
        sim = create_gas_simulation(temperature=500, n_molecules=30, molecule_size=6, seed=14)
        sim.reset()

        assert sim.temperature == 300
        assert len(sim.store) == 100
        assert sim.molecule_size == 4

    def test_destroy_is_idempotent(self):
        """Destroy can be repeated and init brings the gas back."""
        sim = create_gas_simulation(seed=10)
        sim.destroy()
        sim.destroy()

        assert not sim.is_initialized
        with pytest.raises(RuntimeError):
            sim.render()

        sim.init()
        assert len(sim.store) == 100

    def test_resize_clamps_molecules(self):
        """Shrinking the canvas pulls molecules into the new container."""
        sim = create_gas_simulation(seed=11)
        sim.resize(400, 300)

        assert sim.region.right == pytest.approx(400 - 112 - 10)
        assert sim.region.bottom == 280
        assert sim.region.contains(sim.store.positions, sim.store.radii)

    def test_resize_smaller_than_molecule(self):
        """A canvas below one molecule diameter keeps the gas contained."""
        sim = create_gas_simulation(n_molecules=10, seed=15)
        sim.resize(60, 80)

        assert sim.region.height >= 2 * np.max(sim.store.radii) - 1e-9
        assert sim.region.contains(sim.store.positions, sim.store.radii, tolerance=1e-9)
        for _ in range(30):
            sim.update(FRAME_DT)
            assert sim.region.contains(sim.store.positions, sim.store.radii, tolerance=1e-9)

        sim.apply_parameters({"molecule_size": 8})
        assert sim.region.contains(sim.store.positions, sim.store.radii, tolerance=1e-9)

    def test_resize_before_init(self):
        """Resizing an uninitialized simulation only moves the container."""
        sim = MolecularMotionSimulation()
        sim.resize(1000, 800)
        assert sim.region.bottom == 780

    def test_independent_instances(self):
        """Two simulations never share state."""
        a = create_gas_simulation(seed=12)
        b = create_gas_simulation(seed=12)
        np.testing.assert_array_equal(a.store.positions, b.store.positions)

        a.update(FRAME_DT, {"temperature": 900})
        assert b.temperature == 300
        assert len(b.pressure_monitor) == 0
        assert not np.allclose(a.store.positions, b.store.positions)

    def test_state_description(self):
        """The description names count, temperature and species."""
        sim = create_gas_simulation(seed=13)
        description = sim.get_state_description()

        assert "100 molecules" in description
        assert "T=300 K" in description
        assert "N₂: 476 m/s" in description
        assert "H₂" in description and "CO₂" in description


class TestLiveParameters:
    """Tests for reconciling parameter edits with the particle store."""

    def test_temperature_rescales_velocities(self):
        """Heating 300 K -> 1200 K doubles every velocity."""
        sim = create_gas_simulation(seed=20)
        before = sim.store.velocities.copy()

        changes = sim.apply_parameters({"temperature": 1200})

        assert [c.kind for c in changes] == [ChangeKind.TEMPERATURE]
        np.testing.assert_allclose(sim.store.velocities, 2 * before)

    def test_temperature_rescale_is_idempotent(self):
        """Repeating the same temperature does not rescale again."""
        sim = create_gas_simulation(seed=21)
        sim.apply_parameters({"temperature": 500})
        after_first = sim.store.velocities.copy()

        assert sim.apply_parameters({"temperature": 500}) == []
        np.testing.assert_array_equal(sim.store.velocities, after_first)

    def test_temperature_round_trip(self):
        """300 K -> 800 K -> 300 K restores every speed."""
        sim = create_gas_simulation(seed=30)
        before = sim.store.speeds()

        sim.apply_parameters({"temperature": 800})
        sim.apply_parameters({"temperature": 300})

        np.testing.assert_allclose(sim.store.speeds(), before, rtol=1e-12)

    def test_temperature_round_trip_through_floor(self):
        """Passing through 0 K is reversible thanks to the temperature floor."""
        sim = create_gas_simulation(seed=31)
        before = sim.store.speeds()

        sim.apply_parameters({"temperature": 0})
        assert np.all(np.isfinite(sim.store.velocities))
        sim.apply_parameters({"temperature": 300})

        np.testing.assert_allclose(sim.store.speeds(), before, rtol=1e-12)

    def test_temperature_change_through_update(self):
        """Total kinetic energy follows T through a full frame."""
        sim = create_gas_simulation(seed=22)
        ke0 = total_kinetic_energy(sim)

        sim.update(FRAME_DT, {"temperature": 1200})

        assert total_kinetic_energy(sim) / ke0 == pytest.approx(4.0, rel=1e-9)

    def test_population_growth_keeps_existing(self):
        """New molecules are appended; the existing ones are untouched."""
        sim = create_gas_simulation(seed=23)
        before = sim.store.copy()

        sim.apply_parameters({"num_molecules": 150})

        assert len(sim.store) == 150
        np.testing.assert_array_equal(sim.store.positions[:100], before.positions)
        np.testing.assert_array_equal(sim.store.velocities[:100], before.velocities)
        assert sim.region.contains(sim.store.positions, sim.store.radii)

    def test_population_shrink_keeps_prefix(self):
        """Removing molecules keeps the oldest ones."""
        sim = create_gas_simulation(seed=24)
        before = sim.store.copy()

        sim.apply_parameters({"num_molecules": 40})

        assert len(sim.store) == 40
        np.testing.assert_array_equal(sim.store.positions, before.positions[:40])
        np.testing.assert_array_equal(sim.store.species_index, before.species_index[:40])

    def test_population_rounded(self):
        """Fractional molecule counts from a slider are rounded."""
        sim = create_gas_simulation(seed=25)
        sim.apply_parameters({"num_molecules": 42.5})
        assert len(sim.store) == 43
        assert sim.num_molecules == 43

    def test_zero_population(self):
        """An empty gas still advances and reports zero pressure."""
        sim = create_gas_simulation(seed=26)
        sim.update(FRAME_DT, {"num_molecules": 0})

        assert len(sim.store) == 0
        assert sim.last_wall_impulse == 0.0
        assert sim.render().n_particles == 0

    def test_new_molecules_use_current_size_and_temperature(self):
        """Molecules added with other edits see the new values."""
        sim = create_gas_simulation(seed=27)
        sim.apply_parameters({"molecule_size": 6, "num_molecules": 120})

        factors = np.array([sp.radius_factor for sp in MOLECULE_TYPES])
        np.testing.assert_allclose(sim.store.radii, 6 * factors[sim.store.species_index])

    def test_molecule_size_clamps(self):
        """Growing molecules near the walls are pulled inside."""
        sim = create_gas_simulation(seed=28)
        sim.apply_parameters({"molecule_size": 8})
        assert sim.region.contains(sim.store.positions, sim.store.radii)

    def test_unknown_keys(self):
        """Unknown knobs are ignored."""
        sim = create_gas_simulation(seed=29)
        assert sim.apply_parameters({"gravity": 9.8}) == []


class TestCollisionScenarios:
    """End-to-end behavior of the gas."""

    def test_head_on_equal_masses(self):
        """Two N₂ molecules approaching head-on swap velocities."""
        config = SimulationConfig(num_molecules=2, seed=30)
        sim = MolecularMotionSimulation(config, species=(MOLECULE_TYPES[1],))
        sim.init()
        sim.store = ParticleStore(
            positions=np.array([[200.0, 300.0], [260.0, 300.0]]),
            velocities=np.array([[3.0, 0.0], [-3.0, 0.0]]),
            radii=np.array([4.0, 4.0]),
            species_index=np.array([0, 0], dtype=np.int64)
        )

        for _ in range(20):
            sim.update(FRAME_DT)

        np.testing.assert_allclose(sim.store.velocities[:, 0], [-3.0, 3.0], atol=1e-9)
        np.testing.assert_allclose(sim.store.velocities[:, 1], [0.0, 0.0], atol=1e-12)
        assert sim.store.positions[0, 0] < sim.store.positions[1, 0]

    def test_cell_list_mode(self):
        """The cell-list broad phase keeps the gas contained and energy constant."""
        config = SimulationConfig(num_molecules=250, use_cell_list=True, cell_list_threshold=10, seed=31)
        sim = MolecularMotionSimulation(config)
        sim.init()
        ke0 = total_kinetic_energy(sim)

        for _ in range(60):
            sim.update(FRAME_DT)

        assert sim.region.contains(sim.store.positions, sim.store.radii, tolerance=1e-9)
        assert total_kinetic_energy(sim) == pytest.approx(ke0, rel=1e-9)

    def test_ten_second_run(self):
        """Fifty molecules for 600 frames: contained, full pressure window, sane speeds."""
        sim = create_gas_simulation(temperature=300, n_molecules=50, seed=33)
        theory = np.array([mean_speed(sp.mass, 300.0) for sp in sim.species])

        ratios = []
        for frame in range(600):
            sim.update(1.0 / 60, {})
            assert sim.region.contains(sim.store.positions, sim.store.radii, tolerance=1e-9)
            if frame >= 300 and frame % 10 == 0:
                measured = sim.store.speeds() / SPEED_SCALE
                ratios.append(np.mean(measured / theory[sim.store.species_index]))

        assert len(sim.pressure_monitor) == sim.config.pressure_window == 60
        assert sim.pressure > 0

        # Planar speeds average pi/4 of the 3D mean speed
        assert 0.6 < np.mean(ratios) < 1.05

    def test_equilibrium_speeds(self):
        """After ten seconds the measured speeds track the theoretical means."""
        sim = create_gas_simulation(temperature=300, n_molecules=100, seed=32)
        theory = np.array([mean_speed(sp.mass, 300.0) for sp in sim.species])

        ratios = []
        for frame in range(600):
            sim.update(FRAME_DT)
            if frame >= 300 and frame % 10 == 0:
                measured = sim.store.speeds() / SPEED_SCALE
                ratios.append(np.mean(measured / theory[sim.store.species_index]))

        # Planar sampling gives π/4 of the 3D mean speed
        ratio = np.mean(ratios)
        assert 0.6 < ratio < 1.0

        observables = sim.get_observables()
        assert observables.n_molecules == 100
        assert observables.pressure > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
