"""
CubeStack Systems

- PathFinder: uniform-cost search over the lattice with support rules
- MotionSequencer: rolls a unit along a found path, one cell at a time
"""
import asyncio
import heapq
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import GROUND_LEVEL, HORIZONTAL_COST, SEARCH_RADIUS, VERTICAL_COST
from .entities import Cell, Unit, UnitState, manhattan, to_world
from .events import EventBus, SegmentCompletedEvent, SoundCue, SoundCueEvent, UnitSettledEvent
from .grid import GridOccupancy
from .tweens import Quaternion, TweenSystem, Vec3, lerp3, power2_in_out

# A search state: where the mover is, and whether it is falling
State = Tuple[Cell, bool]


class RouteNotFound(Exception):
    """No route from start to goal exists within the search radius."""

    def __init__(self, start: Cell, goal: Cell, reason: str, expanded: int = 0):
        super().__init__(f"No route from {start} to {goal}: {reason}")
        self.start = start
        self.goal = goal
        self.reason = reason
        self.expanded = expanded


@dataclass
class Route:
    """A found path: cells to move to (start excluded, goal included)."""
    path: List[Cell] = field(default_factory=list)
    cost: int = 0
    expanded: int = 0

    def __len__(self) -> int:
        return len(self.path)


def step_cost(a: Cell, b: Cell) -> int:
    """Cost of one move between neighbouring cells."""
    return VERTICAL_COST if a[1] != b[1] else HORIZONTAL_COST


def path_cost(start: Cell, path: List[Cell]) -> int:
    """Total declared cost of walking `path` from `start`."""
    total = 0
    prev = start
    for cell in path:
        total += step_cost(prev, cell)
        prev = cell
    return total


class PathFinder:
    """Uniform-cost search with support-aware neighbours.

    Settled units are hard obstacles. A mover may roll along the ground,
    climb the face of a settled unit, roll across the tops of settled
    units, and hop one cell sideways off the top of a climb. After such a
    hop the mover is falling: it can only drop until it lands on support.
    """

    # Horizontal directions: north, east, south, west
    HORIZONTAL = [(0, 0, -1), (1, 0, 0), (0, 0, 1), (-1, 0, 0)]

    def __init__(self, grid: GridOccupancy, radius: int = SEARCH_RADIUS):
        self.grid = grid
        self.radius = radius
        # High enough to hop over a hole in the top layer, no higher
        self.ceiling = grid.size + 1

    def neighbors(self, cell: Cell, falling: bool = False) -> List[Cell]:
        """Cells a mover standing in `cell` may move to next."""
        x, y, z = cell
        sides = [(x + dx, y, z + dz) for dx, _, dz in self.HORIZONTAL]
        up = (x, y + 1, z) if y < self.ceiling else None
        candidates = []

        if y == GROUND_LEVEL:
            candidates.extend(sides)
            # Only climb when leaning against a settled unit
            if up and any(self.grid.occupied(side) for side in sides):
                candidates.append(up)
        elif falling and not self.grid.supported(cell):
            candidates.append((x, y - 1, z))
        else:
            supported = self.grid.supported(cell)
            if up:
                candidates.append(up)
            if not supported:
                candidates.append((x, y - 1, z))
            for side in sides:
                # Don't roll off a ledge into thin air
                if not supported or self.grid.supported(side):
                    candidates.append(side)

        return [c for c in candidates if not self.grid.occupied(c)]

    def falls_into(self, cell: Cell, neighbor: Cell, falling: bool = False) -> bool:
        """True if moving from `cell` to `neighbor` leaves the mover falling."""
        if self.grid.supported(neighbor):
            return False
        if neighbor[1] == cell[1]:
            return True  # Stepped sideways off a vertical chain
        return falling and neighbor[1] < cell[1]

    def find_route(self, start: Cell, goal: Cell) -> Route:
        """Find a minimum-cost route. Raises RouteNotFound."""
        if start == goal:
            return Route()

        if self.grid.occupied(goal):
            raise RouteNotFound(start, goal, "destination is occupied")
        if manhattan(start, goal) > self.radius:
            raise RouteNotFound(start, goal, f"destination beyond search radius {self.radius}")

        # Search states are (cell, falling)
        begin = (start, False)
        # Frontier entries: (cost, distance from start, insertion order, state)
        counter = 0
        frontier: List[Tuple[int, int, int, State]] = [(0, 0, counter, begin)]
        came_from: Dict[State, State] = {}
        cost: Dict[State, int] = {begin: 0}
        expanded = 0

        while frontier:
            current_cost, _, _, state = heapq.heappop(frontier)
            if current_cost > cost[state]:
                continue  # Stale entry, a cheaper one was already expanded

            current, falling = state
            expanded += 1
            if current == goal:
                return Route(self._reconstruct_path(came_from, state), current_cost, expanded)

            if manhattan(current, start) > self.radius:
                continue

            for neighbor in self.neighbors(current, falling):
                next_state = (neighbor, self.falls_into(current, neighbor, falling))
                new_cost = current_cost + step_cost(current, neighbor)
                if next_state not in cost or new_cost < cost[next_state]:
                    cost[next_state] = new_cost
                    came_from[next_state] = state
                    counter += 1
                    heapq.heappush(frontier, (new_cost, manhattan(neighbor, start), counter, next_state))

        raise RouteNotFound(start, goal, "frontier exhausted", expanded)

    def find_path(self, start: Cell, goal: Cell) -> List[Cell]:
        """Cells to move to, start excluded. Raises RouteNotFound."""
        return self.find_route(start, goal).path

    def _reconstruct_path(self, came_from: Dict[State, State], current: State) -> List[Cell]:
        """Reconstruct path from came_from dict."""
        path = [current[0]]
        while current in came_from:
            current = came_from[current]
            path.append(current[0])
        path.reverse()
        return path[1:]  # Exclude start position


def segment_axis(current: Cell, target: Cell) -> Tuple[int, int]:
    """(axis, step) of a single-cell move. Raises ValueError otherwise."""
    diffs = [t - c for c, t in zip(current, target)]
    moved = [i for i, d in enumerate(diffs) if d != 0]
    if len(moved) != 1 or abs(diffs[moved[0]]) != 1:
        raise ValueError(f"{current} -> {target} is not a single-cell axis move")
    axis = moved[0]
    return axis, diffs[axis]


def segment_rotation(axis: int, step: int) -> Tuple[Vec3, float]:
    """Rotation axis and angle that roll a cube over its edge."""
    rotation_axis = (1.0, 0.0, 0.0) if axis == 2 else (0.0, 0.0, 1.0)
    if (axis == 0 and step > 0) or (axis == 2 and step < 0):
        angle = -math.pi / 2
    else:
        angle = math.pi / 2
    return rotation_axis, angle


class MotionSequencer:
    """Rolls one unit along its path, then settles it.

    Segments run strictly one after another; within a segment the
    rotation and translation tweens run side by side.
    """

    def __init__(self, grid: GridOccupancy, tweens: TweenSystem, renderer, bus: EventBus,
                 speed: float = 0.25):
        self.grid = grid
        self.tweens = tweens
        self.renderer = renderer
        self.bus = bus
        self.speed = speed
        self.moving: Optional[Unit] = None

    async def move_along(self, unit: Unit, path: List[Cell]) -> int:
        """Execute every segment of `path` in order and settle the unit.

        Returns the number of segments executed.
        """
        if self.moving is not None:
            raise RuntimeError(f"Unit {self.moving.id} is still moving, unit {unit.id} must wait")
        end = path[-1] if path else unit.current
        if end != unit.destination:
            raise ValueError(f"Path for unit {unit.id} ends at {end}, not {unit.destination}")

        self.moving = unit
        try:
            for cell in path:
                axis, step = segment_axis(unit.current, cell)
                await self._roll(unit, axis, step, cell)
                unit.current = cell
                self.bus.publish(SoundCueEvent(SoundCue.ROLL, unit.id))
                self.bus.publish(SegmentCompletedEvent(unit.id, cell, axis, step))
        finally:
            self.moving = None

        self.settle(unit, segments=len(path))
        return len(path)

    def settle(self, unit: Unit, segments: int = 0) -> None:
        """Mark the unit settled and commit its cell to the grid."""
        self.bus.publish(SoundCueEvent(SoundCue.SQUEAK_IN, unit.id))
        unit.advance_to(UnitState.SETTLED)
        self.grid.commit(unit.current)
        self.bus.publish(SoundCueEvent(SoundCue.SQUEAK_OUT, unit.id))
        self.bus.publish(UnitSettledEvent(unit.id, unit.current, segments))

    async def _roll(self, unit: Unit, axis: int, step: int, target: Cell) -> None:
        """One segment: turn over the edge while sliding to the next cell."""
        start_pos = to_world(unit.current)
        end_pos = to_world(target)
        base = unit.pose.orientation
        rotation_axis, angle = segment_rotation(axis, step)
        pose = unit.pose
        pose.scale = (1.0, 1.0, 1.0)

        def on_rotate(t: float) -> None:
            pose.orientation = (Quaternion.from_axis_angle(rotation_axis, angle * t) * base).normalized()
            self._render(unit)

        def on_move(t: float) -> None:
            pose.position = lerp3(start_pos, end_pos, t)
            self._render(unit)

        rotation = self.tweens.tween(self.speed, on_rotate, power2_in_out)
        movement = self.tweens.tween(self.speed, on_move, power2_in_out)
        await asyncio.gather(rotation.future, movement.future)
        pose.position = end_pos

    def _render(self, unit: Unit) -> None:
        pose = unit.pose
        self.renderer.render_pose(unit.id, pose.position, pose.orientation, pose.scale)
