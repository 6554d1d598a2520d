"""
Hit-Target Resolver
===================
Turns "jump to item K" into single-step rotations.

The ring never changes except through single steps, so a jump is a walk:
issue one rotation, wait for its completion future, check whether the
target is selected, issue the next one.

Direction comes from the seam pair. The forward arc runs from the selection
to the right edge through `next`; the backward arc runs from the selection to
the left edge through `prev`. Together they cover the whole ring, so any id
in the ring is reached in at most n - 1 steps.
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .errors import UnknownTarget

if TYPE_CHECKING:
    from .menu import CarouselMenu


logger = logging.getLogger(__name__)


class Direction(Enum):
    SELECT = 0
    FORWARD = 1
    BACKWARD = -1


@dataclass(frozen=True)
class NavigationPlan:
    target_id: int
    direction: Direction
    steps: int


class HitTargetResolver:
    """Plans and drives multi-step navigation for one menu."""

    def __init__(self, menu: 'CarouselMenu'):
        self.menu = menu
        self._walk_token = 0

    def _arc_steps(self, target_id: int, forward: bool) -> Optional[int]:
        """Steps to target along one arc, or None if it lies on the other."""
        ring = self.menu.ring
        stop = ring.edges.right if forward else ring.edges.left
        steps = 0
        for node in ring.walk(ring.selected_id, forward=forward):
            if node.id == target_id:
                return steps
            if node.id == stop:
                return None
            steps += 1
        return None

    def plan(self, target_id: int) -> NavigationPlan:
        """
        Work out direction and step count for `target_id`.

        Raises UnknownTarget if the id is not in the ring.
        """
        ring = self.menu.ring
        if target_id not in ring:
            raise UnknownTarget(target_id)

        selected = ring.selected_id
        if target_id == selected:
            return NavigationPlan(target_id, Direction.SELECT, 0)

        # Non-revolving rings cannot cross the ends, so ids give the way
        if not self.menu.config.revolving:
            if target_id > selected:
                return NavigationPlan(target_id, Direction.FORWARD, target_id - selected)
            return NavigationPlan(target_id, Direction.BACKWARD, selected - target_id)

        steps = self._arc_steps(target_id, forward=True)
        if steps is not None:
            return NavigationPlan(target_id, Direction.FORWARD, steps)
        steps = self._arc_steps(target_id, forward=False)
        if steps is not None:
            return NavigationPlan(target_id, Direction.BACKWARD, steps)

        # Seam not set yet (fewer than two items laid out)
        steps = (target_id - selected) % len(ring)
        return NavigationPlan(target_id, Direction.FORWARD, steps)

    def resolve_and_navigate(self, target_id: int) -> Future:
        """
        Rotate until `target_id` is selected, or select it if it already is.

        Returns a future resolving to the number of rotations issued. Raises
        UnknownTarget before anything is scheduled if the id is not in the
        ring. A newer call supersedes a walk still in progress; a rotation the
        menu refuses (closed, disabled, in flight) ends the walk early.
        """
        plan = self.plan(target_id)
        self._walk_token += 1
        token = self._walk_token

        done: Future = Future()
        if plan.direction is Direction.SELECT:
            pulse = self.menu.select()
            if pulse is None:
                done.set_result(0)
            else:
                pulse.add_done_callback(lambda f: self._finish_select(f, done))
            return done

        rotate = self.menu.rotate_next if plan.direction is Direction.FORWARD else self.menu.rotate_prev
        issued = [0]

        def walk(_=None):
            # Steps that finish synchronously are taken in this loop, not by recursion
            while True:
                if self.menu.selected_id == target_id or issued[0] >= plan.steps:
                    done.set_result(issued[0])
                    return
                if token != self._walk_token:
                    logger.debug("Walk to %d superseded after %d steps", target_id, issued[0])
                    done.set_result(issued[0])
                    return
                rotation = rotate()
                if rotation is None:
                    logger.debug("Walk to %d stopped after %d steps", target_id, issued[0])
                    done.set_result(issued[0])
                    return
                issued[0] += 1
                if not rotation.done():
                    rotation.add_done_callback(walk)
                    return

        logger.debug("Walking to %d: %s x%d", target_id, plan.direction.name, plan.steps)
        walk()
        return done

    @staticmethod
    def _finish_select(pulse: Future, done: Future):
        exc = pulse.exception()
        if exc is not None:
            done.set_exception(exc)
        else:
            done.set_result(0)
