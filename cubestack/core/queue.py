"""
CubeStack Placement Queue

Units leave the queue lowest destination first, so every layer is
complete before the layer resting on it starts. Within one height the
order is whatever order the units were enqueued in.
"""
import heapq
import random
from typing import Iterable, List, Optional, Tuple

from .entities import Unit, UnitState


class PlacementQueue:
    """Priority queue keyed by (destination height, insertion order)."""

    def __init__(self):
        self._heap: List[Tuple[int, int, Unit]] = []
        self._counter = 0  # Tie-breaker: insertion order

    @classmethod
    def build(cls, units: Iterable[Unit], rng: Optional[random.Random] = None,
              shuffle: bool = True) -> "PlacementQueue":
        """Queue all units, shuffling them once first so equal heights come out in random order."""
        units = list(units)
        if shuffle:
            (rng or random.Random()).shuffle(units)
        queue = cls()
        for unit in units:
            queue.enqueue(unit)
        return queue

    def enqueue(self, unit: Unit) -> None:
        unit.advance_to(UnitState.QUEUED)
        heapq.heappush(self._heap, (unit.destination[1], self._counter, unit))
        self._counter += 1

    def dequeue(self) -> Optional[Unit]:
        """Pop the next unit, or None once the queue is drained."""
        if not self._heap:
            return None
        _, _, unit = heapq.heappop(self._heap)
        return unit

    def peek(self) -> Optional[Unit]:
        return self._heap[0][2] if self._heap else None

    def clear(self) -> None:
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
