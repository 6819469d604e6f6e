#!/usr/bin/env python3
"""
CubeStack - Grid Filling Simulation
===================================

Run with: python -m cubestack.main [--size N] [--headless] [--verbose]

One cube at a time drops in next to the grid, finds a route to its slot
and rolls there. Lower layers are always finished before higher ones.

Controls (window mode): R=Reset, P=Toggle waypoints, ESC=Quit
"""
import argparse
import asyncio
import random
import sys
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cubestack.core.config import (
    DEFAULT_SETTINGS_FILE, HEADLESS_DT, SCREEN_HEIGHT, SCREEN_WIDTH,
    InvalidConfiguration, SimulationConfig, load_config,
)
from cubestack.core.entities import Unit, UnitState, create_units
from cubestack.core.events import (
    EventBus, RouteFoundEvent, RouteNotFoundEvent, SimulationCompletedEvent,
    SoundCue, SoundCueEvent, UnitSpawnedEvent,
)
from cubestack.core.effects import DropInEffect, LoggerHandler, PathMarkerHandler, SFXEventHandler
from cubestack.core.grid import GridOccupancy
from cubestack.core.queue import PlacementQueue
from cubestack.core.systems import MotionSequencer, PathFinder, RouteNotFound
from cubestack.core.tweens import TweenSystem

SpawnEffect = Callable[[Unit], Awaitable[None]]


class Simulation:
    """Drives units from the placement queue to their slots, one at a time."""

    def __init__(self, config: Optional[SimulationConfig] = None, renderer=None,
                 spawn_effect: Optional[SpawnEffect] = None):
        # Fail fast, before any unit exists
        self.config = (config or SimulationConfig()).validate()
        if renderer is None:
            from frontends.headless_renderer import HeadlessRenderer
            renderer = HeadlessRenderer()
        self.renderer = renderer
        self._custom_spawn_effect = spawn_effect
        self._task: Optional[asyncio.Task] = None
        self.setup()

    def setup(self) -> None:
        """Build all per-run state from the config."""
        config = self.config
        self.rng = random.Random(config.seed)
        self.bus = EventBus()
        self.tweens = TweenSystem()
        self.grid = GridOccupancy(config.size)

        self.units: List[Unit] = create_units(config, self.rng)
        for unit in self.units:
            self.grid.register(unit)
        self.queue = PlacementQueue.build(self.units, self.rng, shuffle=config.shuffle)

        self.pathfinder = PathFinder(self.grid)
        self.sequencer = MotionSequencer(self.grid, self.tweens, self.renderer, self.bus, config.speed)
        self.spawn_effect: SpawnEffect = (
            self._custom_spawn_effect or DropInEffect(self.tweens, self.renderer, config.speed)
        )

        # Event handlers
        self.logger = LoggerHandler(self.bus, verbose=config.verbose)
        self.markers = PathMarkerHandler(self.bus, self.renderer, enabled=config.show_path, rng=self.rng)
        self.sfx_handler = None
        if config.sound:
            self.sfx_handler = SFXEventHandler(self.bus, self.renderer.sfx)

        self.current: Optional[Unit] = None
        self.settled: List[Unit] = []
        self.failed: List[Unit] = []
        self.running = False
        self.done = False

        self.renderer.prepare_scene(config.size, self.units)

    async def run(self) -> bool:
        """Drain the placement queue. Returns True if every unit settled."""
        if self.running:
            raise RuntimeError("Simulation is already running")
        self.running = True
        try:
            while self.queue:
                await self.place(self.queue.dequeue())
            self.done = True
            self.bus.publish(SimulationCompletedEvent(
                settled=len(self.settled),
                failed=[u.id for u in self.failed],
            ))
            return not self.failed
        finally:
            self.current = None
            self.running = False
            self.tweens.clear()

    async def place(self, unit: Unit) -> bool:
        """Spawn, route and move one unit. Returns False if no route was found."""
        self.current = unit
        unit.advance_to(UnitState.SPAWNING)
        self.bus.publish(SoundCueEvent(SoundCue.POP, unit.id))
        self.bus.publish(UnitSpawnedEvent(unit.id, unit.spawn, unit.destination))
        await self.spawn_effect(unit)

        unit.advance_to(UnitState.ROUTING)
        try:
            route = self.pathfinder.find_route(unit.current, unit.destination)
        except RouteNotFound as e:
            # Left unsettled; its slot stays empty
            self.failed.append(unit)
            self.bus.publish(RouteNotFoundEvent(unit.id, unit.current, unit.destination, e.reason))
            return False

        unit.path = route.path
        self.bus.publish(RouteFoundEvent(unit.id, route.path, route.cost, route.expanded))
        await self.sequencer.move_along(unit, route.path)
        self.settled.append(unit)
        return True

    def update(self, dt: float) -> None:
        """Advance all running animations by dt seconds."""
        self.tweens.update(dt)

    def start(self) -> asyncio.Task:
        """Schedule run() on the running event loop."""
        self._task = asyncio.ensure_future(self.run())
        return self._task

    async def reset(self) -> None:
        """Abort the current run and rebuild everything from the same config."""
        show_path = self.markers.enabled
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self.tweens.clear()
        self.bus.clear()
        self.renderer.reset()
        self.setup()
        # Keep the waypoint toggle (P key) across restarts
        self.markers.enabled = show_path

    async def run_headless(self, dt: float = HEADLESS_DT, max_frames: Optional[int] = None) -> bool:
        """Run to completion without a window, at a fixed time step."""
        task = self.start()
        frames = 0
        while not task.done():
            if max_frames is not None and frames >= max_frames:
                task.cancel()
                raise RuntimeError(f"Simulation did not finish within {max_frames} frames")
            self.update(dt)
            frames += 1
            await asyncio.sleep(0)
        return task.result()

    async def run_windowed(self) -> None:
        """Frame loop for an interactive renderer. Returns when the user quits."""
        task = self.start()
        try:
            while True:
                input_state = self.renderer.handle_input()
                if input_state['quit']:
                    break
                if input_state.get('key_r'):
                    await self.reset()
                    task = self.start()
                if input_state.get('key_p'):
                    self.markers.toggle()

                self.update(self.renderer.tick())
                self.renderer.render_frame(
                    self.units,
                    current=self.current,
                    placed=len(self.settled),
                    failed=len(self.failed),
                    done=self.done,
                )
                await asyncio.sleep(0)
        finally:
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """Settings file first, then command line overrides."""
    if args.config:
        config = load_config(Path(args.config))
    elif DEFAULT_SETTINGS_FILE.exists():
        config = load_config(DEFAULT_SETTINGS_FILE)
    else:
        config = SimulationConfig()

    overrides = {
        'size': args.size,
        'speed': args.speed,
        'seed': args.seed,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
    if args.no_shuffle:
        config.shuffle = False
    if args.show_path:
        config.show_path = True
    if args.show_all:
        config.show_all = True
    if args.mute:
        config.sound = False
    if args.verbose:
        config.verbose = True
    return config.validate()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="CubeStack - fill a grid one rolling cube at a time")
    parser.add_argument('--size', type=int, help='Grid edge length (>= 2)')
    parser.add_argument('--speed', type=float, help='Seconds per rolled cell')
    parser.add_argument('--seed', type=int, help='Random seed for spawn cells and ordering')
    parser.add_argument('--no-shuffle', action='store_true',
                        help='Keep creation order within each layer')
    parser.add_argument('--show-path', action='store_true', help='Draw route waypoints')
    parser.add_argument('--show-all', action='store_true',
                        help='Show waiting cubes at their spawn cells')
    parser.add_argument('--mute', action='store_true', help='Disable sound')
    parser.add_argument('--verbose', action='store_true', help='Print event log to console')
    parser.add_argument('--headless', action='store_true',
                        help='Run without a window and print a summary')
    parser.add_argument('--config', help='JSON settings file')
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except (InvalidConfiguration, OSError) as e:
        print(f"Error: {e}")
        return 2

    if args.headless:
        from frontends.headless_renderer import HeadlessRenderer
        sim = Simulation(config, HeadlessRenderer())
        ok = asyncio.run(sim.run_headless())
        print(f"Placed {len(sim.settled)}/{config.count} cubes"
              + ("" if ok else f", {len(sim.failed)} without a route"))
        return 0 if ok else 1

    try:
        from frontends.pygame_renderer import PygameRenderer
    except ImportError as e:
        print(f"Error: pygame is required for window mode: {e}")
        print("Install with: pip install pygame (or use --headless)")
        return 1

    renderer = PygameRenderer(SCREEN_WIDTH, SCREEN_HEIGHT, sound=config.sound)
    sim = Simulation(config, renderer)

    print("CubeStack started!")
    print("Controls: R=Reset, P=Toggle waypoints, ESC=Quit")

    try:
        asyncio.run(sim.run_windowed())
    except KeyboardInterrupt:
        pass
    finally:
        renderer.cleanup()

    print(f"\nPlaced {len(sim.settled)}/{config.count} cubes.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
