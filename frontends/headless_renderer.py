"""
Headless Renderer
Records what would have been drawn instead of opening a window.

Same interface as PygameRenderer (duck typing):
- prepare_scene(size, units)
- render_pose(unit_id, position, orientation, scale)
- add_path_markers(points, color) / clear_path_markers()
- render_frame(units, **hud)
- handle_input() -> dict
- tick() -> dt
- reset() / cleanup()
"""
from typing import Any, Dict, List, Tuple

from cubestack.core.config import HEADLESS_DT


class NullSFXManager:
    """No-op sound manager. Remembers what it was asked to play."""

    def __init__(self):
        self.played: List[str] = []

    def play(self, name: str) -> None:
        self.played.append(name)

    def cleanup(self) -> None:
        pass


class HeadlessRenderer:
    """Renderer for tests and --headless runs."""

    def __init__(self, dt: float = HEADLESS_DT):
        self.dt = dt
        self.sfx = NullSFXManager()
        self.size = 0
        self.colors: Dict[int, str] = {}
        self.poses: Dict[int, Tuple[Any, Any, Any]] = {}
        self.pose_updates = 0
        self.path_markers: List[Tuple[List[tuple], str]] = []
        self.frames = 0

    def prepare_scene(self, size: int, units: list) -> None:
        self.size = size
        for unit in units:
            self.colors[unit.id] = unit.color
            pose = unit.pose
            self.render_pose(unit.id, pose.position, pose.orientation, pose.scale)

    def render_pose(self, unit_id: int, position, orientation, scale) -> None:
        self.poses[unit_id] = (position, orientation, scale)
        self.pose_updates += 1

    def add_path_markers(self, points: List[tuple], color: str) -> None:
        self.path_markers.append((list(points), color))

    def clear_path_markers(self) -> None:
        self.path_markers.clear()

    def render_frame(self, units: list, **hud) -> None:
        self.frames += 1

    def handle_input(self) -> Dict[str, Any]:
        return {'quit': False, 'key_r': False, 'key_p': False}

    def tick(self) -> float:
        return self.dt

    def reset(self) -> None:
        self.colors.clear()
        self.poses.clear()
        self.path_markers.clear()

    def cleanup(self) -> None:
        self.sfx.cleanup()
