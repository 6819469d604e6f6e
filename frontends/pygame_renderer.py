"""
Pygame Renderer (Isometric Version)
Draws the grid and every cube as shaded isometric polygons.

DUCK TYPING EXAMPLE:
This class has the same interface as HeadlessRenderer:
- prepare_scene(size, units)
- render_pose(unit_id, position, orientation, scale)
- render_frame(units, **hud)
- handle_input() -> dict
- tick() -> dt
- cleanup()

The simulation never checks which one it got.
"""
import math
import pygame
from pathlib import Path
from typing import Any, Dict, List, Tuple

from cubestack.core.config import FPS
from cubestack.core.tweens import Quaternion


class SFXManager:
    """Manages the simulation's sound cues."""

    ASSETS_DIR = Path(__file__).parent.parent / "assets" / "sounds"

    # Sound cue mappings
    SOUNDS = {
        'pop': 'pop.mp3',
        'roll': 'roll.mp3',
        'squeak_in': 'squeak_in.mp3',
        'squeak_out': 'squeak_out.mp3',
    }

    VOLUME = 0.25

    def __init__(self, enabled: bool = True):
        self._sounds: Dict[str, pygame.mixer.Sound] = {}
        self._mixer_initialized = False
        if not enabled:
            return
        try:
            pygame.mixer.init()
            self._mixer_initialized = True
        except pygame.error as e:
            print(f"Warning: audio disabled: {e}")
            return
        self._load_sounds()

    def _load_sounds(self) -> None:
        """Load all sound cues. Missing files are skipped."""
        for name, filename in self.SOUNDS.items():
            path = self.ASSETS_DIR / filename
            if path.exists():
                try:
                    self._sounds[name] = pygame.mixer.Sound(str(path))
                    self._sounds[name].set_volume(self.VOLUME)
                except pygame.error as e:
                    print(f"Warning: Could not load sound {filename}: {e}")

    def play(self, name: str) -> None:
        """Play a sound cue by name."""
        if name in self._sounds:
            self._sounds[name].play()

    def cleanup(self) -> None:
        if self._mixer_initialized:
            pygame.mixer.quit()
            self._mixer_initialized = False


class IsoCamera:
    """Isometric projection of world space onto the screen."""

    COS30 = math.cos(math.pi / 6)

    def __init__(self, screen_width: int, screen_height: int, tile_size: int = 48):
        self.screen_width = screen_width
        self.screen_height = screen_height
        self.tile_size = tile_size
        self.cx = 0.0  # World point shown at screen centre
        self.cy = 0.0
        self.cz = 0.0

    def center_on(self, wx: float, wy: float, wz: float) -> None:
        self.cx, self.cy, self.cz = wx, wy, wz

    def world_to_screen(self, wx: float, wy: float, wz: float) -> Tuple[int, int]:
        dx, dy, dz = wx - self.cx, wy - self.cy, wz - self.cz
        sx = (dx - dz) * self.COS30 * self.tile_size + self.screen_width // 2
        sy = ((dx + dz) * 0.5 - dy) * self.tile_size + self.screen_height // 2
        return int(sx), int(sy)

    @staticmethod
    def depth(wx: float, wy: float, wz: float) -> float:
        """Larger is closer to the viewer."""
        return wx + wy + wz


# Unit cube corners and faces (corner indices, outward normal)
CUBE_CORNERS = [
    (-0.5, -0.5, -0.5), (0.5, -0.5, -0.5), (0.5, 0.5, -0.5), (-0.5, 0.5, -0.5),
    (-0.5, -0.5, 0.5), (0.5, -0.5, 0.5), (0.5, 0.5, 0.5), (-0.5, 0.5, 0.5),
]
CUBE_FACES = [
    ((0, 1, 2, 3), (0, 0, -1)),
    ((4, 5, 6, 7), (0, 0, 1)),
    ((0, 4, 7, 3), (-1, 0, 0)),
    ((1, 5, 6, 2), (1, 0, 0)),
    ((0, 1, 5, 4), (0, -1, 0)),
    ((3, 2, 6, 7), (0, 1, 0)),
]
VIEW_DIR = (1 / math.sqrt(3),) * 3  # Towards the viewer
LIGHT_DIR = (0.3, 0.9, 0.4)


def _dot(a, b) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _shade(color: pygame.Color, factor: float) -> Tuple[int, int, int]:
    factor = max(0.0, min(1.0, factor))
    return (int(color.r * factor), int(color.g * factor), int(color.b * factor))


class PygameRenderer:
    """Pygame-based GUI renderer."""

    # Colors
    COLOR_BG = (238, 238, 238)
    COLOR_GROUND = (204, 204, 204)
    COLOR_GROUND_LINE = (180, 180, 180)
    COLOR_TEXT = (60, 70, 90)

    def __init__(self, width: int = 1024, height: int = 768, tile_size: int = 48, sound: bool = True):
        pygame.init()
        pygame.display.set_caption("CubeStack")

        self.width = width
        self.height = height
        self.tile_size = tile_size

        self.screen = pygame.display.set_mode((width, height))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.camera = IsoCamera(width, height, tile_size)

        self.sfx = SFXManager(enabled=sound)

        self.size = 0
        self._colors: Dict[int, pygame.Color] = {}
        self._poses: Dict[int, Tuple[tuple, Quaternion, tuple]] = {}
        self._path_markers: List[Tuple[List[tuple], pygame.Color]] = []

    def prepare_scene(self, size: int, units: list) -> None:
        """Register every unit and frame the grid."""
        self.size = size
        self.tile_size = max(12, min(48, int(min(self.width, self.height) / (size * 4))))
        self.camera.tile_size = self.tile_size
        self.camera.center_on(size / 2, size / 3, size / 2)
        for unit in units:
            self._colors[unit.id] = pygame.Color(unit.color)
            pose = unit.pose
            self.render_pose(unit.id, pose.position, pose.orientation, pose.scale)

    def render_pose(self, unit_id: int, position, orientation, scale) -> None:
        """Store the latest pose; drawn on the next frame."""
        self._poses[unit_id] = (position, orientation, scale)

    def add_path_markers(self, points: List[tuple], color: str) -> None:
        self._path_markers.append((list(points), pygame.Color(color)))

    def clear_path_markers(self) -> None:
        self._path_markers.clear()

    def render_frame(self, units: list, current: Any = None, placed: int = 0,
                     failed: int = 0, done: bool = False) -> None:
        """Render one frame."""
        self.screen.fill(self.COLOR_BG)
        self._draw_ground()
        self._draw_path_markers()
        self._draw_cubes()
        self._draw_ui(len(units), current, placed, failed, done)
        pygame.display.flip()

    def _draw_ground(self) -> None:
        """Ground plane under the grid footprint."""
        s = self.size
        corners = [self.camera.world_to_screen(x, 0, z) for x, z in ((0, 0), (s, 0), (s, s), (0, s))]
        pygame.draw.polygon(self.screen, self.COLOR_GROUND, corners)
        for i in range(s + 1):
            pygame.draw.line(self.screen, self.COLOR_GROUND_LINE,
                             self.camera.world_to_screen(i, 0, 0), self.camera.world_to_screen(i, 0, s))
            pygame.draw.line(self.screen, self.COLOR_GROUND_LINE,
                             self.camera.world_to_screen(0, 0, i), self.camera.world_to_screen(s, 0, i))

    def _draw_path_markers(self) -> None:
        radius = max(2, self.tile_size // 10)
        for points, color in self._path_markers:
            for x, y, z in points:
                pygame.draw.circle(self.screen, color, self.camera.world_to_screen(x, y, z), radius)

    def _draw_cubes(self) -> None:
        """Collect the visible faces of every cube and paint them back to front."""
        faces = []
        for unit_id, (position, orientation, scale) in self._poses.items():
            if scale[0] <= 0 or scale[1] <= 0 or scale[2] <= 0:
                continue
            color = self._colors.get(unit_id, pygame.Color(255, 255, 255))
            corners = []
            for cx, cy, cz in CUBE_CORNERS:
                local = (cx * scale[0], cy * scale[1], cz * scale[2])
                rx, ry, rz = orientation.rotate(local)
                corners.append((position[0] + rx, position[1] + ry, position[2] + rz))

            for indices, normal in CUBE_FACES:
                n = orientation.rotate(normal)
                if _dot(n, VIEW_DIR) <= 0:
                    continue  # Back face
                pts = [corners[i] for i in indices]
                depth = sum(IsoCamera.depth(*p) for p in pts) / 4
                light = 0.55 + 0.45 * max(0.0, _dot(n, LIGHT_DIR))
                faces.append((depth, pts, _shade(color, light)))

        faces.sort(key=lambda f: f[0])
        for _, pts, shade in faces:
            screen_pts = [self.camera.world_to_screen(*p) for p in pts]
            pygame.draw.polygon(self.screen, shade, screen_pts)
            pygame.draw.polygon(self.screen, _shade(pygame.Color(*shade), 0.8), screen_pts, 1)

    def _draw_ui(self, total: int, current: Any, placed: int, failed: int, done: bool) -> None:
        lines = [f"Placed: {placed}/{total}"]
        if failed:
            lines.append(f"No route: {failed}")
        if done:
            lines.append("Done - R to restart")
        elif current is not None:
            lines.append(f"Moving cube {current.id} -> {current.destination}")
        y = 10
        for line in lines:
            surface = self.font.render(line, True, self.COLOR_TEXT)
            self.screen.blit(surface, (10, y))
            y += 22

    def handle_input(self) -> Dict[str, Any]:
        """Process pygame events and return input state.

        Returns:
            Dict with keys: quit, key_r, key_p
        """
        result = {'quit': False, 'key_r': False, 'key_p': False}

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                result['quit'] = True
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    result['quit'] = True
                elif event.key == pygame.K_r:
                    result['key_r'] = True
                elif event.key == pygame.K_p:
                    result['key_p'] = True

        return result

    def tick(self) -> float:
        """Wait for the next frame; returns elapsed seconds."""
        return self.clock.tick(FPS) / 1000.0

    def reset(self) -> None:
        self._colors.clear()
        self._poses.clear()
        self._path_markers.clear()

    def cleanup(self) -> None:
        """Clean up pygame resources"""
        self.sfx.cleanup()
        pygame.quit()
