"""
CubeStack Tweens - Timed Interpolation Driver

A tween runs for a fixed duration, feeding an eased progress value to an
update callback every frame, and resolves an awaitable handle when done.
The frame loop (pygame or headless) calls TweenSystem.update(dt); the
simulation only ever awaits the handles.
"""
import asyncio
import math
from dataclasses import dataclass
from typing import Callable, List, Tuple

Vec3 = Tuple[float, float, float]


# === Easing ===

def linear(t: float) -> float:
    return t


def power2_in(t: float) -> float:
    return t * t


def power2_out(t: float) -> float:
    return 1 - (1 - t) * (1 - t)


def power2_in_out(t: float) -> float:
    """Quadratic ease in/out (gsap's power2.inOut)."""
    if t < 0.5:
        return 2 * t * t
    return 1 - 2 * (1 - t) * (1 - t)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def lerp3(a: Vec3, b: Vec3, t: float) -> Vec3:
    return (lerp(a[0], b[0], t), lerp(a[1], b[1], t), lerp(a[2], b[2], t))


# === Orientation ===

@dataclass(frozen=True)
class Quaternion:
    """Unit quaternion (w, x, y, z) used for unit orientation."""
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_axis_angle(cls, axis: Vec3, angle: float) -> "Quaternion":
        ax, ay, az = axis
        norm = math.sqrt(ax * ax + ay * ay + az * az)
        if norm == 0:
            return cls()
        s = math.sin(angle / 2) / norm
        return cls(math.cos(angle / 2), ax * s, ay * s, az * s)

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        """Hamilton product: applying the result rotates by `other` first, then `self`."""
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )

    def normalized(self) -> "Quaternion":
        n = math.sqrt(self.w ** 2 + self.x ** 2 + self.y ** 2 + self.z ** 2)
        if n == 0:
            return Quaternion()
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def rotate(self, v: Vec3) -> Vec3:
        """Rotate a vector by this quaternion."""
        p = Quaternion(0.0, v[0], v[1], v[2])
        conj = Quaternion(self.w, -self.x, -self.y, -self.z)
        r = self * p * conj
        return (r.x, r.y, r.z)


# === Tween handles ===

class Tween:
    """Awaitable handle for one running interpolation."""

    def __init__(self, duration: float, on_update: Callable[[float], None],
                 ease: Callable[[float], float] = power2_in_out):
        self.duration = max(0.0, duration)
        self.on_update = on_update
        self.ease = ease
        self.elapsed = 0.0
        self.future: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def done(self) -> bool:
        return self.future.done()

    @property
    def progress(self) -> float:
        if self.duration == 0:
            return 1.0 if self.elapsed > 0 or self.done else 0.0
        return min(1.0, self.elapsed / self.duration)

    def advance(self, dt: float) -> None:
        """Step the tween by dt seconds, resolving it once time is up."""
        if self.done:
            return
        self.elapsed += dt
        finished = self.duration == 0 or self.elapsed >= self.duration
        t = 1.0 if finished else self.elapsed / self.duration
        self.on_update(self.ease(t))
        if finished:
            self.future.set_result(None)

    def cancel(self) -> None:
        if not self.future.done():
            self.future.cancel()

    def __await__(self):
        return self.future.__await__()


class TweenSystem:
    """Owns every live tween and advances them once per frame."""

    def __init__(self):
        self.tweens: List[Tween] = []

    def tween(self, duration: float, on_update: Callable[[float], None],
              ease: Callable[[float], float] = power2_in_out) -> Tween:
        """Start a tween. Must be called from inside the running event loop."""
        handle = Tween(duration, on_update, ease)
        self.tweens.append(handle)
        return handle

    def update(self, dt: float) -> None:
        """Advance all live tweens and drop the finished ones."""
        for handle in list(self.tweens):
            handle.advance(dt)
        self.tweens = [t for t in self.tweens if not t.done]

    @property
    def active(self) -> int:
        return len(self.tweens)

    def clear(self) -> None:
        """Cancel every live tween (used on reset)."""
        for handle in self.tweens:
            handle.cancel()
        self.tweens.clear()
