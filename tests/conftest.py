from __future__ import annotations

import pytest

from carousel import CarouselConfig, CarouselMenu, SpatialObject
from carousel.motion import write_property


class RecordingMotion:
    """Motion engine stub: jumps straight to end values and records every request."""

    def __init__(self, auto_complete: bool = True) -> None:
        self.auto_complete = auto_complete
        self.calls: list[tuple] = []
        self.pending: list = []

    def _finish(self, on_complete) -> None:
        if on_complete is None:
            return
        if self.auto_complete:
            on_complete()
        else:
            self.pending.append(on_complete)

    def animate_to(self, target, properties, duration, on_complete=None):
        self.calls.append(("to", target, dict(properties), duration))
        for name, value in properties.items():
            write_property(target, name, value)
        self._finish(on_complete)

    def animate_from_to(self, target, from_props, to_props, duration, yoyo=False, repeat=0, on_complete=None):
        self.calls.append(("from_to", target, dict(to_props), duration, yoyo, repeat))
        end = from_props if yoyo and repeat % 2 == 1 else to_props
        for name in to_props:
            write_property(target, name, end.get(name, to_props[name]))
        self._finish(on_complete)

    def complete_all(self) -> None:
        pending, self.pending = self.pending, []
        for callback in pending:
            callback()

    def position_requests(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "to" and "position" in c[2]]


def build_menu(count: int, motion=None, opened: bool = True, **config) -> tuple[CarouselMenu, list[SpatialObject]]:
    motion = motion if motion is not None else RecordingMotion()
    menu = CarouselMenu(motion, CarouselConfig(**config))
    objects = [SpatialObject(f"item{i}") for i in range(count)]
    for obj in objects:
        menu.add_item(obj)
    if opened:
        menu.open()
    return menu, objects


def slot_x(menu: CarouselMenu) -> dict[int, float]:
    return {node.id: round(float(node.slot[0]), 6) for node in menu.ring.nodes}


def selected_count(menu: CarouselMenu) -> int:
    return sum(1 for node in menu.ring.nodes if node.selected)


@pytest.fixture
def motion() -> RecordingMotion:
    return RecordingMotion()


@pytest.fixture
def five(motion):
    menu, objects = build_menu(5, motion)
    return menu, objects, motion
