"""
Carousel Errors
===============
Exceptions raised by the carousel engine.

Navigation commands that cannot run (menu closed, rotation in flight,
terminal end of a non-revolving ring) are not errors. They return None.
"""


class CarouselError(Exception):
    """Base class for carousel errors."""


class InvalidItem(CarouselError, TypeError):
    """Payload does not provide the spatial node capability."""


class UnknownTarget(CarouselError, KeyError):
    """A goto request named an id that is not in the ring."""

    def __init__(self, target_id):
        super().__init__(target_id)
        self.target_id = target_id

    def __str__(self) -> str:
        return f"no ring node with id {self.target_id!r}"
