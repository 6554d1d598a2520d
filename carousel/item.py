"""
Carousel Item
=============
Wraps a caller's spatial node for use in the ring.
"""

import numpy as np
from typing import Any, Callable, Optional

from .errors import InvalidItem
from .spatial import is_spatial_node


class CarouselItem:
    """
    A spatial node plus its selection callback and idle spin.

    The payload's position and scale belong to the renderer; the item only
    touches its rotation, once per frame, through `animate_default` or
    `animate_selected`.
    """

    def __init__(self, payload: Any,
                 on_select: Optional[Callable[[], None]] = None,
                 rotation_speed: float = 0.01,
                 spin_axes: tuple = (False, True, False),
                 animate_default: Optional[Callable[[float], None]] = None):
        if not is_spatial_node(payload):
            raise InvalidItem(f"{type(payload).__name__} is not a spatial node")
        if on_select is not None and not callable(on_select):
            raise InvalidItem("on_select must be callable")

        self.payload = payload
        self.on_select = on_select
        self.rotation_speed = rotation_speed
        self.spin_axes = tuple(bool(a) for a in spin_axes)
        self.sequence_default = animate_default

    def _spin(self, speed: float, elapsed_time: float):
        rotation = np.asarray(self.payload.get_rotation(), dtype=float).copy()
        for axis, enabled in enumerate(self.spin_axes):
            if enabled:
                rotation[axis] = speed * elapsed_time
        self.payload.set_rotation(rotation)

    def animate_default(self, elapsed_time: float = 0.0):
        """Slow idle spin, or the caller's own sequence if one was given."""
        if self.sequence_default is not None:
            self.sequence_default(elapsed_time)
        else:
            self._spin(self.rotation_speed, elapsed_time)

    def animate_selected(self, elapsed_time: float = 0.0):
        # Selected item turns at a quarter speed
        self._spin(self.rotation_speed * 0.25, elapsed_time)

    def fire(self):
        if self.on_select is not None:
            self.on_select()
