"""
CubeStack Effects - Reveal Animation, Sound, Markers and Logging

Handles everything the simulation shows or plays:
- Drop-in reveal animation (default spawn effect)
- Sound cues routed to an SFX manager
- Waypoint markers for found routes
- Console event log
"""
import random
from typing import Optional

from .config import COLORS
from .entities import Unit, to_world
from .events import (
    EventBus, SoundCueEvent, UnitSpawnedEvent, RouteFoundEvent, RouteNotFoundEvent,
    SegmentCompletedEvent, UnitSettledEvent, SimulationCompletedEvent,
)
from .tweens import TweenSystem, lerp, lerp3, power2_in_out, power2_out

SQUASH_SCALE = (1.25, 0.5, 1.25)


class DropInEffect:
    """Pops a unit into view at its spawn cell, then squashes and bounces back."""

    def __init__(self, tweens: TweenSystem, renderer, speed: float = 0.25):
        self.tweens = tweens
        self.renderer = renderer
        self.speed = speed

    async def __call__(self, unit: Unit) -> None:
        pose = unit.pose
        center = to_world(unit.current)
        rest_y = center[1]
        # Squashed to half height, the centre drops so the cube stays on the floor
        squashed_y = rest_y - (1.0 - SQUASH_SCALE[1]) / 2
        pose.position = center

        def grow(t: float) -> None:
            pose.scale = (t, t, t)
            self._render(unit)

        def squash(t: float) -> None:
            pose.scale = lerp3((1.0, 1.0, 1.0), SQUASH_SCALE, t)
            pose.position = (center[0], lerp(rest_y, squashed_y, t), center[2])
            self._render(unit)

        def release(t: float) -> None:
            pose.scale = lerp3(SQUASH_SCALE, (1.0, 1.0, 1.0), t)
            pose.position = (center[0], lerp(squashed_y, rest_y, t), center[2])
            self._render(unit)

        await self.tweens.tween(self.speed * 1.5, grow, power2_out)
        await self.tweens.tween(self.speed / 2, squash, power2_in_out)
        await self.tweens.tween(self.speed / 2, release, power2_in_out)

    def _render(self, unit: Unit) -> None:
        pose = unit.pose
        self.renderer.render_pose(unit.id, pose.position, pose.orientation, pose.scale)


class SFXEventHandler:
    """Plays sound cues. Audio is best effort: failures never reach the simulation."""

    def __init__(self, bus: EventBus, sfx_manager):
        self.sfx = sfx_manager
        self.failures = 0
        bus.subscribe(SoundCueEvent, self.on_sound_cue)

    def on_sound_cue(self, event: SoundCueEvent) -> None:
        try:
            self.sfx.play(event.cue.value)
        except Exception as e:
            self.failures += 1
            print(f"Warning: could not play {event.cue.value}: {e}")


class PathMarkerHandler:
    """Shows the waypoints of every found route (purely cosmetic)."""

    def __init__(self, bus: EventBus, renderer, enabled: bool = False,
                 rng: Optional[random.Random] = None):
        self.renderer = renderer
        self.enabled = enabled
        self.rng = rng or random.Random()
        bus.subscribe(RouteFoundEvent, self.on_route_found)

    def on_route_found(self, event: RouteFoundEvent) -> None:
        if not self.enabled or not event.path:
            return
        color = self.rng.choice(COLORS)
        self.renderer.add_path_markers([to_world(cell) for cell in event.path], color)

    def toggle(self) -> None:
        self.enabled = not self.enabled
        if not self.enabled:
            self.renderer.clear_path_markers()


class LoggerHandler:
    """Simple handler that logs events to console."""

    def __init__(self, bus: EventBus, verbose: bool = False):
        self.verbose = verbose
        bus.subscribe(RouteNotFoundEvent, self.on_route_not_found)
        bus.subscribe(SimulationCompletedEvent, self.on_completed)
        if verbose:
            bus.subscribe(UnitSpawnedEvent, self.on_spawn)
            bus.subscribe(RouteFoundEvent, self.on_route)
            bus.subscribe(SegmentCompletedEvent, self.on_segment)
            bus.subscribe(UnitSettledEvent, self.on_settle)

    def on_spawn(self, event: UnitSpawnedEvent) -> None:
        print(f"[SPAWN] Unit {event.unit_id} at {event.spawn} -> {event.destination}")

    def on_route(self, event: RouteFoundEvent) -> None:
        print(f"[ROUTE] Unit {event.unit_id}: {len(event.path)} moves, cost {event.cost} "
              f"({event.expanded} cells searched)")

    def on_segment(self, event: SegmentCompletedEvent) -> None:
        print(f"[ROLL] Unit {event.unit_id} {'+' if event.step > 0 else '-'}{'xyz'[event.axis]} -> {event.cell}")

    def on_settle(self, event: UnitSettledEvent) -> None:
        print(f"[SETTLE] Unit {event.unit_id} at {event.cell}")

    def on_route_not_found(self, event: RouteNotFoundEvent) -> None:
        print(f"[NO ROUTE] Unit {event.unit_id} {event.spawn} -> {event.destination}: {event.reason}")

    def on_completed(self, event: SimulationCompletedEvent) -> None:
        if event.failed:
            print(f"[DONE] {event.settled} settled, {len(event.failed)} without a route: {event.failed}")
        elif self.verbose:
            print(f"[DONE] {event.settled} settled")
