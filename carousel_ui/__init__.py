"""
Caller-side pieces for the carousel: input bindings and the OpenCV scene.
"""

from .carousel_scene import CarouselScene
from .input_bindings import CarouselInput, KeyBindings

__all__ = [
    'CarouselScene',
    'CarouselInput', 'KeyBindings',
]
