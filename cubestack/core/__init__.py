"""CubeStack Core - Simulation Logic"""
from .config import SimulationConfig, InvalidConfiguration, load_config
from .entities import Unit, UnitState, Pose, create_units
from .events import (
    EventBus,
    SoundCue,
    UnitSpawnedEvent,
    RouteFoundEvent,
    RouteNotFoundEvent,
    SegmentCompletedEvent,
    UnitSettledEvent,
    SoundCueEvent,
    SimulationCompletedEvent,
)
from .grid import GridOccupancy
from .queue import PlacementQueue
from .systems import PathFinder, Route, RouteNotFound, MotionSequencer
from .tweens import TweenSystem, Tween, Quaternion
