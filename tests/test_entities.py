"""Test units, spawn selection and unit creation."""
import random
import pytest
from cubestack.core.config import COLORS, GROUND_LEVEL, SimulationConfig
from cubestack.core.entities import (
    Unit, UnitState, create_units, random_spawn, random_with_exclusion, to_world,
)


class TestCoordinates:
    """Tests for lattice <-> world conversion."""

    def test_to_world_uses_cell_centres(self):
        assert to_world((0, 0, 0)) == (0.5, 0.5, 0.5)
        assert to_world((-1, 2, 3)) == (-0.5, 2.5, 3.5)


class TestUnitLifecycle:
    """Tests for the one-way unit state machine."""

    def test_new_unit(self):
        unit = Unit(4, (-1, 0, 0), (0, 0, 0))
        assert unit.state is UnitState.PENDING
        assert unit.current == unit.spawn
        assert unit.pose.scale == (0.0, 0.0, 0.0)
        assert not unit.settled

    def test_visible_unit_starts_full_size(self):
        assert Unit(0, (-1, 0, 0), (0, 0, 0), visible=True).pose.scale == (1.0, 1.0, 1.0)

    def test_states_only_move_forward(self):
        unit = Unit(0, (-1, 0, 0), (0, 0, 0))
        unit.advance_to(UnitState.QUEUED)
        unit.advance_to(UnitState.SPAWNING)
        with pytest.raises(ValueError):
            unit.advance_to(UnitState.QUEUED)
        with pytest.raises(ValueError):
            unit.advance_to(UnitState.SPAWNING)

    def test_cannot_settle_away_from_destination(self):
        unit = Unit(0, (-1, 0, 0), (0, 0, 0))
        with pytest.raises(ValueError):
            unit.advance_to(UnitState.SETTLED)
        unit.current = (0, 0, 0)
        unit.advance_to(UnitState.SETTLED)
        assert unit.settled


class TestSpawn:
    """Tests for spawn cell selection."""

    def test_exclusion_band_is_never_returned(self):
        rng = random.Random(0)
        for _ in range(2000):
            value = random_with_exclusion(rng, -4, 8, -0.5, 4.5)
            assert -4 <= value < 8
            assert not (-0.5 <= value < 4.5)

    @pytest.mark.parametrize("size", [2, 3, 4, 7])
    def test_spawn_is_on_ground_outside_footprint(self, size):
        rng = random.Random(size)
        for _ in range(500):
            x, y, z = random_spawn(rng, size)
            assert y == GROUND_LEVEL
            assert not (0 <= x < size and 0 <= z < size)
            assert -size <= z <= 2 * size
            assert -size <= x < 2 * size


class TestCreateUnits:
    """Tests for create_units."""

    def test_one_unit_per_cell(self):
        cfg = SimulationConfig(size=3, seed=5)
        units = create_units(cfg)
        assert len(units) == cfg.count
        assert [u.id for u in units] == list(range(cfg.count))
        assert {u.destination for u in units} == {
            (x, y, z) for x in range(3) for y in range(3) for z in range(3)
        }

    def test_creation_order(self):
        units = create_units(SimulationConfig(size=2, seed=5))
        assert [u.destination for u in units[:4]] == [(1, 0, 0), (1, 1, 0), (0, 0, 0), (0, 1, 0)]

    def test_same_seed_same_units(self):
        cfg = SimulationConfig(size=3, seed=42)
        first = [(u.spawn, u.color) for u in create_units(cfg)]
        second = [(u.spawn, u.color) for u in create_units(cfg)]
        assert first == second

    def test_colors_and_visibility(self):
        units = create_units(SimulationConfig(size=2, seed=1, show_all=True))
        assert all(u.color in COLORS for u in units)
        assert all(u.pose.scale == (1.0, 1.0, 1.0) for u in units)
