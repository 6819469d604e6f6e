"""
CubeStack Entities

Units are the cubes that fill the grid. Every unit knows three cells:
where it spawned, where it must end up, and where it is right now.
Cells are integer lattice coordinates; world space puts cell centres
at n + 0.5 and is only used at the render boundary.
"""
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .config import COLORS, GROUND_LEVEL, SimulationConfig
from .tweens import Quaternion, Vec3

Cell = Tuple[int, int, int]


def to_world(cell: Cell) -> Vec3:
    """Lattice cell -> world-space centre."""
    return (cell[0] + 0.5, cell[1] + 0.5, cell[2] + 0.5)


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) + abs(a[2] - b[2])


class UnitState(Enum):
    """One-way lifecycle of a unit."""
    PENDING = "pending"
    QUEUED = "queued"
    SPAWNING = "spawning"
    ROUTING = "routing"
    SETTLED = "settled"


_STATE_ORDER = list(UnitState)


@dataclass
class Pose:
    """What the renderer needs to draw a unit."""
    position: Vec3
    orientation: Quaternion = field(default_factory=Quaternion)
    scale: Vec3 = (1.0, 1.0, 1.0)


class Unit:
    """One cube to be placed."""

    def __init__(self, unit_id: int, spawn: Cell, destination: Cell,
                 color: str = "#FFFFFF", visible: bool = False):
        self.id = unit_id
        self.spawn = spawn
        self.destination = destination
        self.current = spawn
        self.color = color
        self.state = UnitState.PENDING
        scale = (1.0, 1.0, 1.0) if visible else (0.0, 0.0, 0.0)
        self.pose = Pose(position=to_world(spawn), scale=scale)
        self.path: List[Cell] = []  # Last route found for this unit

    @property
    def settled(self) -> bool:
        return self.state is UnitState.SETTLED

    def advance_to(self, state: UnitState) -> None:
        """Move forward in the lifecycle. Going backwards is an error."""
        if _STATE_ORDER.index(state) <= _STATE_ORDER.index(self.state):
            raise ValueError(f"Unit {self.id}: cannot go from {self.state.value} to {state.value}")
        if state is UnitState.SETTLED and self.current != self.destination:
            raise ValueError(f"Unit {self.id}: cannot settle at {self.current}, destination is {self.destination}")
        self.state = state

    def __repr__(self) -> str:
        return f"Unit(id={self.id}, {self.current} -> {self.destination}, {self.state.value})"


def random_with_exclusion(rng: random.Random, low: float, high: float,
                          exclude_low: float, exclude_high: float) -> float:
    """Uniform float in [low, high) minus the band [exclude_low, exclude_high)."""
    range1 = exclude_low - low
    range2 = high - exclude_high
    value = rng.random() * (range1 + range2)
    if value < range1:
        return low + value
    return exclude_high + (value - range1)


def random_spawn(rng: random.Random, size: int) -> Cell:
    """Pick a ground cell around the grid footprint, never inside it."""
    z = rng.randint(-size, 2 * size)
    if 0 <= z < size:
        # Row crosses the footprint: stay left or right of it
        x = math.floor(random_with_exclusion(rng, -size, 2 * size, -0.5, size + 0.5))
    else:
        x = rng.randint(-(size // 2), size + size // 2)
    return (x, GROUND_LEVEL, z)


def create_units(config: SimulationConfig, rng: Optional[random.Random] = None) -> List[Unit]:
    """Create one unit per grid cell, in creation order (z, x descending, y)."""
    rng = rng or random.Random(config.seed)
    size = config.size
    units = []
    for z in range(size):
        for x in range(size - 1, -1, -1):
            for y in range(size):
                unit = Unit(
                    unit_id=len(units),
                    spawn=random_spawn(rng, size),
                    destination=(x, y, z),
                    color=rng.choice(COLORS),
                    visible=config.show_all,
                )
                units.append(unit)
    return units
