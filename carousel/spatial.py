"""
Spatial Module
==============
The spatial node capability the carousel reads and writes.

The carousel never renders anything. Every item it manages is a "spatial
node": something with a position, a scale and a rotation (and optionally an
opacity) that a graphics layer draws. Anything providing the methods below can
be handed to the menu; `SpatialObject` is a plain numpy-backed implementation
used by the demo scene and the tests.
"""

import numpy as np
from typing import Any, List, Optional, Protocol, Sequence, Union, runtime_checkable


VectorLike = Union[np.ndarray, Sequence[float], dict]

SPATIAL_METHODS = (
    'get_position', 'set_position',
    'get_scale', 'set_scale',
    'get_rotation', 'set_rotation',
)


@runtime_checkable
class SpatialNode(Protocol):
    """Positionable, scalable, rotatable visual object."""

    def get_position(self) -> np.ndarray: ...
    def set_position(self, value: VectorLike) -> None: ...
    def get_scale(self) -> np.ndarray: ...
    def set_scale(self, value: VectorLike) -> None: ...
    def get_rotation(self) -> np.ndarray: ...
    def set_rotation(self, value: VectorLike) -> None: ...


def is_spatial_node(obj: Any) -> bool:
    """True if obj exposes every spatial node method."""
    if obj is None:
        return False
    return all(callable(getattr(obj, name, None)) for name in SPATIAL_METHODS)


def supports_opacity(obj: Any) -> bool:
    return callable(getattr(obj, 'get_opacity', None)) and callable(getattr(obj, 'set_opacity', None))


def as_vector(value: VectorLike, default: float = 0.0) -> np.ndarray:
    """
    Convert a vector-like value to a 3-component float array.

    Accepts numpy arrays, sequences of up to three numbers, scalars (applied
    to every axis) and {'x', 'y', 'z'} dicts. Missing components take
    `default`.
    """
    if isinstance(value, dict):
        return np.array([
            float(value.get('x', default)),
            float(value.get('y', default)),
            float(value.get('z', default)),
        ])
    if np.isscalar(value):
        return np.full(3, float(value))

    arr = np.asarray(value, dtype=float).ravel()
    if arr.size > 3:
        raise ValueError(f"expected at most 3 components, got {arr.size}")
    out = np.full(3, float(default))
    out[:arr.size] = arr
    return out


class SpatialObject:
    """
    Reference spatial node.

    Holds its transform as numpy vectors. Children can be attached so one
    object can act as the common parent (group) transform of the ring.
    """

    def __init__(self, name: str = "",
                 position: Optional[VectorLike] = None,
                 scale: Optional[VectorLike] = None,
                 rotation: Optional[VectorLike] = None,
                 opacity: float = 1.0,
                 color: tuple = (200, 200, 220)):
        self.name = name
        self.color = color
        self.position = as_vector(position) if position is not None else np.zeros(3)
        self.scale = as_vector(scale, 1.0) if scale is not None else np.ones(3)
        self.rotation = as_vector(rotation) if rotation is not None else np.zeros(3)
        self.opacity = float(opacity)

        self.parent: Optional['SpatialObject'] = None
        self.children: List['SpatialObject'] = []

    def __repr__(self) -> str:
        return f"SpatialObject({self.name!r}, position={self.position.tolist()})"

    # Transform access
    def get_position(self) -> np.ndarray:
        return self.position.copy()

    def set_position(self, value: VectorLike):
        self.position = as_vector(value)

    def get_scale(self) -> np.ndarray:
        return self.scale.copy()

    def set_scale(self, value: VectorLike):
        self.scale = as_vector(value, 1.0)

    def get_rotation(self) -> np.ndarray:
        return self.rotation.copy()

    def set_rotation(self, value: VectorLike):
        self.rotation = as_vector(value)

    def get_opacity(self) -> float:
        return self.opacity

    def set_opacity(self, value: float):
        self.opacity = min(1.0, max(0.0, float(value)))

    # Grouping
    def add(self, child: 'SpatialObject'):
        if child.parent is not None and child.parent is not self:
            child.parent.remove(child)
        if child not in self.children:
            self.children.append(child)
        child.parent = self

    def remove(self, child: 'SpatialObject'):
        if child in self.children:
            self.children.remove(child)
            child.parent = None

    def world_position(self) -> np.ndarray:
        """Position with every ancestor's scale and translation applied."""
        pos = self.position.copy()
        node = self.parent
        while node is not None:
            pos = pos * node.scale + node.position
            node = node.parent
        return pos

    def world_scale(self) -> np.ndarray:
        scale = self.scale.copy()
        node = self.parent
        while node is not None:
            scale = scale * node.scale
            node = node.parent
        return scale
