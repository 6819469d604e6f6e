"""
CubeStack Events

Lifecycle events published by the simulation. Sound, logging and path
markers all hang off these, so the core never talks to them directly.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class SoundCue(Enum):
    """Named sound cues the core can ask for."""
    POP = "pop"
    ROLL = "roll"
    SQUEAK_IN = "squeak_in"
    SQUEAK_OUT = "squeak_out"


# === Event Dataclasses ===

@dataclass
class UnitSpawnedEvent:
    """Fired when a unit is revealed at its spawn cell."""
    unit_id: int
    spawn: tuple
    destination: tuple


@dataclass
class RouteFoundEvent:
    """Fired when the path search reaches a unit's destination."""
    unit_id: int
    path: List[tuple]
    cost: int
    expanded: int  # Cells taken off the frontier


@dataclass
class RouteNotFoundEvent:
    """Fired when no route exists within the search radius."""
    unit_id: int
    spawn: tuple
    destination: tuple
    reason: str


@dataclass
class SegmentCompletedEvent:
    """Fired after a unit rolls one cell."""
    unit_id: int
    cell: tuple
    axis: int  # 0 = x, 1 = y, 2 = z
    step: int  # +1 or -1


@dataclass
class UnitSettledEvent:
    """Fired when a unit becomes a permanent obstacle."""
    unit_id: int
    cell: tuple
    segments: int


@dataclass
class SoundCueEvent:
    """Fire-and-forget request to play a sound."""
    cue: SoundCue
    unit_id: Optional[int] = None


@dataclass
class SimulationCompletedEvent:
    """Fired once the placement queue is drained."""
    settled: int
    failed: List[int] = field(default_factory=list)  # ids of units left unsettled


# === EventBus ===

class EventBus:
    """Dispatches events to the handlers subscribed to their type."""

    def __init__(self):
        self._subscribers: Dict[type, List[Callable]] = {}
        self._event_history: List[Any] = []  # For debugging/replay
        self._recording = False

    def subscribe(self, event_type: type, handler: Callable) -> None:
        """Register a handler for an event type."""
        self._subscribers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: type, handler: Callable) -> None:
        """Remove a handler from an event type."""
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Any) -> None:
        """Notify all handlers subscribed to this event's type."""
        if self._recording:
            self._event_history.append(event)

        for handler in list(self._subscribers.get(type(event), [])):
            handler(event)

    def clear(self) -> None:
        """Clear all subscribers."""
        self._subscribers.clear()

    def start_recording(self) -> None:
        """Start recording events for replay/debugging."""
        self._recording = True
        self._event_history.clear()

    def stop_recording(self) -> List[Any]:
        """Stop recording and return event history."""
        self._recording = False
        return self._event_history.copy()

    @property
    def history(self) -> List[Any]:
        return list(self._event_history)

    def of_type(self, event_type: type) -> List[Any]:
        """Recorded events of one type, in publish order."""
        return [e for e in self._event_history if isinstance(e, event_type)]

