"""
Motion Module
=============
The motion engine capability, plus a small frame-stepped implementation.

The carousel only says *where* things should end up and *how long* it should
take. Interpolation belongs to the motion engine. Any object that provides
`animate_to` and `animate_from_to` can drive the menu; `TweenEngine` is the
one used by the demo scene and the tests.

Usage:
    engine = TweenEngine()
    engine.animate_to(obj, {'position': (1, 0, 0)}, 0.2, on_complete=done)

    while running:
        engine.update(delta_time)
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from .spatial import as_vector


logger = logging.getLogger(__name__)

PROPERTIES = ('position', 'scale', 'rotation', 'opacity')


class MotionEngine(Protocol):
    """Interpolates spatial node properties over time."""

    def animate_to(self, target: Any, properties: Dict[str, Any], duration: float,
                   on_complete: Optional[Callable[[], None]] = None) -> Any: ...

    def animate_from_to(self, target: Any, from_props: Dict[str, Any], to_props: Dict[str, Any],
                        duration: float, yoyo: bool = False, repeat: int = 0,
                        on_complete: Optional[Callable[[], None]] = None) -> Any: ...


def ease_out_cubic(t: float) -> float:
    """Cubic ease-out for smooth deceleration."""
    return 1 - pow(1 - t, 3)


def read_property(target: Any, name: str):
    if name not in PROPERTIES:
        raise ValueError(f"Unknown motion property '{name}'")
    value = getattr(target, f"get_{name}")()
    return float(value) if name == 'opacity' else as_vector(value)


def write_property(target: Any, name: str, value):
    if name == 'opacity':
        target.set_opacity(float(value))
    else:
        getattr(target, f"set_{name}")(value)


def _coerce(name: str, value):
    if name == 'opacity':
        return float(value)
    return as_vector(value, 1.0 if name == 'scale' else 0.0)


# =====================
# TWEEN
# =====================
@dataclass
class Tween:
    """One running interpolation of one or more properties of a target."""
    target: Any
    tracks: Dict[str, Tuple[Any, Any]]  # name -> (start, end)
    duration: float
    yoyo: bool = False
    repeat: int = 0
    easing: Callable[[float], float] = ease_out_cubic
    on_complete: Optional[Callable[[], None]] = None

    elapsed: float = 0.0
    finished: bool = False

    @property
    def total_duration(self) -> float:
        return self.duration * (self.repeat + 1)

    def _progress(self) -> float:
        """Eased progress of the current pass, 0 at start and 1 at end."""
        if self.duration <= 0:
            cycle, local = self.repeat, 1.0
        else:
            passes = min(self.elapsed / self.duration, self.repeat + 1)
            cycle = min(int(passes), self.repeat)
            local = passes - cycle
        eased = self.easing(local)
        if self.yoyo and cycle % 2 == 1:
            return 1.0 - eased
        return eased

    def apply(self):
        t = self._progress()
        for name, (start, end) in self.tracks.items():
            write_property(self.target, name, start + (end - start) * t)

    def step(self, delta_time: float) -> bool:
        """Advance the tween. Returns True when it has finished."""
        self.elapsed += delta_time
        if self.elapsed >= self.total_duration:
            self.elapsed = self.total_duration
            self.finished = True
        self.apply()
        return self.finished


# =====================
# ENGINE
# =====================
class TweenEngine:
    """
    Frame-stepped motion engine.

    Call `update(delta_time)` once per frame. Completion callbacks run inside
    `update`, after the finished tweens have been removed, so a callback may
    start new tweens. A newer tween on the same target and property takes
    that property over; a tween left with no properties completes at once.
    """

    def __init__(self, easing: Callable[[float], float] = ease_out_cubic):
        self.easing = easing
        self.tweens: List[Tween] = []

    def animate_to(self, target: Any, properties: Dict[str, Any], duration: float,
                   on_complete: Optional[Callable[[], None]] = None) -> Tween:
        tracks = {}
        for name, end in properties.items():
            tracks[name] = (read_property(target, name), _coerce(name, end))
        return self._start(Tween(target, tracks, max(0.0, float(duration)),
                                 easing=self.easing, on_complete=on_complete))

    def animate_from_to(self, target: Any, from_props: Dict[str, Any], to_props: Dict[str, Any],
                        duration: float, yoyo: bool = False, repeat: int = 0,
                        on_complete: Optional[Callable[[], None]] = None) -> Tween:
        tracks = {}
        for name, end in to_props.items():
            start = from_props[name] if name in from_props else read_property(target, name)
            tracks[name] = (_coerce(name, start), _coerce(name, end))
        tween = Tween(target, tracks, max(0.0, float(duration)), yoyo=yoyo,
                      repeat=max(0, int(repeat)), easing=self.easing, on_complete=on_complete)
        tween.apply()
        return self._start(tween)

    def _start(self, tween: Tween) -> Tween:
        orphaned = self._overwrite(tween)
        self.tweens.append(tween)
        for old in orphaned:
            self._complete(old)
        return tween

    def _overwrite(self, tween: Tween) -> List[Tween]:
        orphaned = []
        for other in self.tweens:
            if other.target is not tween.target:
                continue
            for name in tween.tracks:
                if name in other.tracks:
                    del other.tracks[name]
            if not other.tracks:
                other.finished = True
                orphaned.append(other)
        if orphaned:
            self.tweens = [t for t in self.tweens if not t.finished]
        return orphaned

    def _complete(self, tween: Tween):
        if tween.on_complete is not None:
            tween.on_complete()

    def update(self, delta_time: float) -> int:
        """Advance every tween. Returns how many finished this frame."""
        done = [tween for tween in list(self.tweens) if tween.step(delta_time)]
        if done:
            self.tweens = [t for t in self.tweens if not t.finished]
            for tween in done:
                self._complete(tween)
        return len(done)

    def is_animating(self, target: Any = None) -> bool:
        if target is None:
            return bool(self.tweens)
        return any(t.target is target for t in self.tweens)

    def finish_all(self, max_frames: int = 1000) -> int:
        """Run until idle. Handy for tests and headless use."""
        frames = 0
        while self.tweens and frames < max_frames:
            longest = max(t.total_duration - t.elapsed for t in self.tweens)
            self.update(max(longest, 0.0))
            frames += 1
        if self.tweens:
            logger.warning("TweenEngine still busy after %d frames", frames)
        return frames
