"""
Edge Tracker
============
Tracks the two ring members that sit across the visual seam.

`left` is the leftmost slot and `right` the rightmost; after any completed
rotation `right == ring.node(left).prev`. The pair is assigned by the layout
pass and moves only when a rotation wraps a node across the seam.
"""

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .ring import Ring, RingNode


logger = logging.getLogger(__name__)


class EdgeTracker:
    """Seam pair for one ring."""

    def __init__(self, ring: 'Ring'):
        self._ring = ring
        self._left: Optional[int] = None
        self._right: Optional[int] = None

    @property
    def left(self) -> Optional[int]:
        return self._left

    @property
    def right(self) -> Optional[int]:
        return self._right

    @property
    def left_node(self) -> Optional['RingNode']:
        return None if self._left is None else self._ring.node(self._left)

    @property
    def right_node(self) -> Optional['RingNode']:
        return None if self._right is None else self._ring.node(self._right)

    @property
    def is_set(self) -> bool:
        return self._left is not None and self._right is not None

    def assign(self, left: Optional[int], right: Optional[int]):
        self._left = left
        self._right = right

    def clear(self):
        self._left = self._right = None

    def is_adjacent(self) -> bool:
        """True when right sits directly before left in the cycle."""
        if not self.is_set:
            return False
        return self._ring.node(self._left).prev == self._right

    def wrap_forward(self) -> int:
        """
        The left edge crosses to the right end.

        Returns the id of the node that crossed. The old left edge becomes
        the right edge and its successor becomes the new left edge.
        """
        crossed = self._left
        self._right = crossed
        self._left = self._ring.node(crossed).next
        logger.debug("Seam forward: left=%s right=%s", self._left, self._right)
        return crossed

    def wrap_backward(self) -> int:
        """The right edge crosses to the left end. Mirror of wrap_forward."""
        crossed = self._right
        self._left = crossed
        self._right = self._ring.node(crossed).prev
        logger.debug("Seam backward: left=%s right=%s", self._left, self._right)
        return crossed
