"""Test the placement queue."""
import random
import pytest
from cubestack.core.config import SimulationConfig
from cubestack.core.entities import Unit, UnitState, create_units
from cubestack.core.queue import PlacementQueue


def drain(queue):
    units = []
    while queue:
        units.append(queue.dequeue())
    return units


class TestPlacementQueue:
    """Tests for PlacementQueue ordering."""

    def test_dequeue_empty_returns_none(self):
        assert PlacementQueue().dequeue() is None

    def test_enqueue_marks_unit_queued(self):
        unit = Unit(0, (-1, 0, 0), (0, 0, 0))
        queue = PlacementQueue()
        queue.enqueue(unit)
        assert unit.state is UnitState.QUEUED
        assert len(queue) == 1
        assert queue.peek() is unit

    def test_heights_never_decrease(self):
        cfg = SimulationConfig(size=3, seed=11)
        queue = PlacementQueue.build(create_units(cfg), random.Random(11))
        heights = [u.destination[1] for u in drain(queue)]
        assert len(heights) == 27
        assert heights == sorted(heights)

    def test_lower_layer_before_higher_regardless_of_insert_order(self):
        high = Unit(0, (-1, 0, 0), (0, 1, 0))
        low = Unit(1, (-2, 0, 0), (0, 0, 0))
        queue = PlacementQueue()
        queue.enqueue(high)
        queue.enqueue(low)
        assert queue.dequeue() is low
        assert queue.dequeue() is high

    def test_ties_keep_insertion_order_without_shuffle(self):
        cfg = SimulationConfig(size=2, seed=1)
        units = create_units(cfg)
        queue = PlacementQueue.build(units, shuffle=False)
        ground = [u.id for u in drain(queue) if u.destination[1] == 0]
        expected = [u.id for u in units if u.destination[1] == 0]
        assert ground == expected

    def test_shuffle_reorders_ties_only(self):
        cfg = SimulationConfig(size=2, seed=1)
        creation = [u.id for u in create_units(cfg) if u.destination[1] == 0]
        orders = set()
        for seed in range(10):
            units = create_units(cfg)
            order = drain(PlacementQueue.build(units, random.Random(seed)))
            ground = [u.id for u in order if u.destination[1] == 0]
            assert sorted(ground) == sorted(creation)
            assert [u.destination[1] for u in order] == [0, 0, 0, 0, 1, 1, 1, 1]
            orders.add(tuple(ground))
        assert len(orders) > 1
