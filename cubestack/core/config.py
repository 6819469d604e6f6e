"""
CubeStack Configuration
Contains simulation constants, file paths, and the options record.
"""
import json
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Optional

# Paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"
ASSETS_DIR = PROJECT_ROOT / "assets"
DEFAULT_SETTINGS_FILE = DATA_DIR / "settings.json"

# Grid
GROUND_LEVEL = 0  # Lattice y index of the bottom layer (world y = 0.5)

# Path search
SEARCH_RADIUS = 40  # Manhattan distance from spawn beyond which cells are abandoned
HORIZONTAL_COST = 1
VERTICAL_COST = 2  # Climbing/dropping costs more than rolling sideways

# Display
SCREEN_WIDTH = 1024
SCREEN_HEIGHT = 768
FPS = 60
HEADLESS_DT = 1.0 / 60.0  # Fixed time step for headless runs

# Cube colours (hex strings, picked at random per unit)
COLORS = [
    "#F2B134",
    "#ED553B",
    "#20639B",
    "#3CAEA3",
    "#F6D55C",
    "#173F5F",
    "#E07A5F",
    "#81B29A",
]


class InvalidConfiguration(ValueError):
    """Raised when simulation options are malformed."""


@dataclass
class SimulationConfig:
    """Options for one simulation run."""
    size: int = 4
    speed: float = 0.25  # Seconds per motion segment
    seed: Optional[int] = None
    shuffle: bool = True
    show_path: bool = False
    show_all: bool = False
    sound: bool = True
    verbose: bool = False

    def validate(self) -> "SimulationConfig":
        """Check every field. Returns self so calls can be chained."""
        if isinstance(self.size, bool) or not isinstance(self.size, int):
            raise InvalidConfiguration(f"size must be an integer, got {self.size!r}")
        if self.size < 2:
            raise InvalidConfiguration(f"size must be at least 2, got {self.size}")

        if isinstance(self.speed, bool) or not isinstance(self.speed, (int, float)):
            raise InvalidConfiguration(f"speed must be a number, got {self.speed!r}")
        if self.speed < 0:
            raise InvalidConfiguration(f"speed must not be negative, got {self.speed}")

        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise InvalidConfiguration(f"seed must be an integer or None, got {self.seed!r}")

        for name in ("shuffle", "show_path", "show_all", "sound", "verbose"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise InvalidConfiguration(f"{name} must be a boolean, got {value!r}")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationConfig":
        """Build a validated config from a plain dict (e.g. parsed JSON)."""
        if not isinstance(data, dict):
            raise InvalidConfiguration(f"options must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfiguration(f"unknown option(s): {', '.join(sorted(unknown))}")
        return cls(**data).validate()

    def to_dict(self) -> dict:
        return asdict(self)

    @property
    def count(self) -> int:
        """Number of units needed to fill the grid."""
        return self.size ** 3


def load_config(path: Path = DEFAULT_SETTINGS_FILE) -> SimulationConfig:
    """Load simulation options from a JSON file."""
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfiguration(f"{path} is not valid JSON: {e}") from e
    return SimulationConfig.from_dict(data)
