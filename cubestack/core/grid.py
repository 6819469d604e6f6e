"""
CubeStack Grid - Occupancy Model

Tracks which lattice cells hold settled units. Settled units never move
again, so the occupied set only ever grows during a run.
"""
from typing import Dict, Iterator, Optional, Set

from .config import GROUND_LEVEL
from .entities import Cell, Unit


class GridOccupancy:
    """Set of settled cells plus a registry of every unit by id."""

    def __init__(self, size: int):
        self.size = size
        self.cells: Set[Cell] = set()
        self.units: Dict[int, Unit] = {}

    def register(self, unit: Unit) -> None:
        """Make a unit known to position queries (does not occupy anything)."""
        self.units[unit.id] = unit

    def occupied(self, cell: Cell) -> bool:
        """True if a settled unit holds this cell."""
        return cell in self.cells

    def supported(self, cell: Cell) -> bool:
        """True if the cell is on the ground or rests on a settled unit."""
        x, y, z = cell
        return y == GROUND_LEVEL or (x, y - 1, z) in self.cells

    def commit(self, cell: Cell) -> None:
        """Register a settled cell. Committing twice is harmless."""
        self.cells.add(cell)

    def unit_at(self, cell: Cell) -> Optional[Unit]:
        """Unit whose current position is this cell, settled or in flight."""
        for unit in self.units.values():
            if unit.current == cell:
                return unit
        return None

    @property
    def complete(self) -> bool:
        return len(self.cells) == self.size ** 3

    def clear(self) -> None:
        self.cells.clear()
        self.units.clear()

    def __contains__(self, cell: Cell) -> bool:
        return self.occupied(cell)

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)
