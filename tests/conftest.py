"""Pytest fixtures for CubeStack tests."""
import asyncio
import pytest
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def data_dir():
    """Return the data directory path."""
    return PROJECT_ROOT / "data"


@pytest.fixture
def config():
    """Small, seeded, fast config."""
    from cubestack.core.config import SimulationConfig
    return SimulationConfig(size=2, speed=0.1, seed=7)


@pytest.fixture
def grid():
    """An empty 4x4x4 occupancy grid."""
    from cubestack.core.grid import GridOccupancy
    return GridOccupancy(4)


@pytest.fixture
def pathfinder(grid):
    """Create a PathFinder over the empty grid."""
    from cubestack.core.systems import PathFinder
    return PathFinder(grid)


@pytest.fixture
def renderer():
    """A headless renderer that records poses and sounds."""
    from frontends.headless_renderer import HeadlessRenderer
    return HeadlessRenderer()


@pytest.fixture
def bus():
    """An event bus that records everything published on it."""
    from cubestack.core.events import EventBus
    b = EventBus()
    b.start_recording()
    return b


@pytest.fixture
def simulation(config, renderer):
    """A Simulation (not yet started) with recording enabled."""
    from cubestack.main import Simulation
    sim = Simulation(config, renderer)
    sim.bus.start_recording()
    return sim


async def _drive(tweens, coro, dt, max_frames):
    task = asyncio.ensure_future(coro)
    frames = 0
    while not task.done():
        if frames >= max_frames:
            task.cancel()
            raise AssertionError(f"not finished after {max_frames} frames")
        tweens.update(dt)
        frames += 1
        await asyncio.sleep(0)
    return task.result()


@pytest.fixture
def drive():
    """Run a coroutine to completion while ticking a TweenSystem."""
    def run(tweens, coro, dt=0.05, max_frames=10000):
        return asyncio.run(_drive(tweens, coro, dt, max_frames))
    return run


def _route_violations(grid, start, path):
    """Airborne route cells with no vertical chain along the route to support."""
    from cubestack.core.config import GROUND_LEVEL
    cells = [start] + list(path)

    def same_column(a, b):
        return a[0] == b[0] and a[2] == b[2]

    bad = []
    for i, cell in enumerate(cells):
        if cell[1] == GROUND_LEVEL or grid.supported(cell):
            continue
        lo = hi = i
        while lo > 0 and same_column(cells[lo - 1], cells[lo]):
            lo -= 1
        while hi < len(cells) - 1 and same_column(cells[hi + 1], cells[hi]):
            hi += 1
        if not any(grid.supported(c) for c in cells[lo:hi + 1]):
            bad.append(cell)
    return bad


@pytest.fixture
def route_violations():
    """Check a route against the support rule; returns offending cells."""
    return _route_violations
