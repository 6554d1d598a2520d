"""
Carousel Config
===============
Menu settings, validated once at construction.

Bad values never fail construction: each field that has the wrong type or
is out of range falls back to its default and a warning is logged.
"""

import logging
import numpy as np
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional

from .spatial import as_vector


logger = logging.getLogger(__name__)


class OpenBehavior(Enum):
    """How items appear when the menu opens."""
    NONE = 0   # No transition
    GROW = 1   # Scale up from zero
    FADE = 2   # Fade opacity in

    @classmethod
    def coerce(cls, value) -> Optional['OpenBehavior']:
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


_NUMBER_FIELDS = (
    'default_speed', 'resize_scale', 'resize_speed',
    'open_time', 'close_time', 'shuffle_speed',
)


def _default_gap() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0])


def _default_offset() -> np.ndarray:
    return np.zeros(3)


@dataclass
class CarouselConfig:
    """Settings for one carousel menu."""
    # Layout
    gap: Any = field(default_factory=_default_gap)        # Spacing vector between slots
    offset: Any = field(default_factory=_default_offset)  # Added to every slot

    # Item idle spin
    default_speed: float = 0.1

    # Select pulse
    resize_scale: float = 0.5     # Scale added at the top of the pulse
    resize_speed: float = 2.0     # Pulse duration = resize_speed * 0.1

    # Open / close
    open_time: float = 0.5
    close_time: float = 0.5
    open_behavior: Any = OpenBehavior.GROW

    # Rotation
    shuffle_speed: float = 2.0    # Step duration = shuffle_speed * 0.1
    revolving: bool = True        # Wrap around past the ends

    def __post_init__(self):
        self.gap = self._vector('gap', self.gap, _default_gap())
        self.offset = self._vector('offset', self.offset, _default_offset())

        for name in _NUMBER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0 or not np.isfinite(value):
                default = type(self).__dataclass_fields__[name].default
                logger.warning("Invalid %s=%r, using default %r", name, value, default)
                value = default
            setattr(self, name, float(value))

        behavior = OpenBehavior.coerce(self.open_behavior)
        if behavior is None:
            logger.warning("Invalid open_behavior=%r, using GROW", self.open_behavior)
            behavior = OpenBehavior.GROW
        self.open_behavior = behavior

        if not isinstance(self.revolving, bool):
            logger.warning("Invalid revolving=%r, using True", self.revolving)
            self.revolving = True

    @staticmethod
    def _vector(name: str, value, default: np.ndarray) -> np.ndarray:
        try:
            vec = as_vector(value)
        except (TypeError, ValueError):
            logger.warning("Invalid %s=%r, using default %s", name, value, default.tolist())
            return default
        if not np.all(np.isfinite(vec)):
            logger.warning("Invalid %s=%r, using default %s", name, value, default.tolist())
            return default
        return vec

    @property
    def step_duration(self) -> float:
        """Duration of one single-step rotation."""
        return self.shuffle_speed * 0.10

    @property
    def pulse_duration(self) -> float:
        """Duration of one half of the select pulse."""
        return self.resize_speed * 0.10

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'CarouselConfig':
        """Build a config from a plain dict. Unknown keys are ignored."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key in known:
                kwargs[key] = value
            else:
                logger.debug("Ignoring unknown config key %r", key)
        return cls(**kwargs)
