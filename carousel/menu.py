"""
Carousel Menu
=============
Navigation controller for a ring of selectable items.

States:
    CLOSED ──open()──> OPEN_IDLE ──rotate_next()/rotate_prev()──> OPEN_ROTATING
       ^                  │  ^                                          │
       └─────close()──────┘  └────────── all motion dispatched ─────────┘

Every command runs synchronously: ids, the selection flag and the seam pair
are fully updated before the call returns. Only the visual interpolation
continues afterwards, inside the motion engine. Commands that cannot run
return None; commands that do run return a Future that resolves once their
motion has finished.

Usage:
    engine = TweenEngine()
    menu = CarouselMenu(engine, CarouselConfig(gap=(1.5, 0, 0)))
    for obj in objects:
        menu.add_item(obj, on_select=lambda o=obj: print(o.name))
    menu.open()
    menu.rotate_next()
    menu.goto(3)
"""

import logging
import numpy as np
from concurrent.futures import Future
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional, Union

from .config import CarouselConfig, OpenBehavior
from .item import CarouselItem
from .motion import MotionEngine
from .resolver import HitTargetResolver
from .ring import Ring, RingNode
from .spatial import VectorLike, as_vector, supports_opacity


logger = logging.getLogger(__name__)


class MenuState(Enum):
    CLOSED = auto()
    OPEN_IDLE = auto()
    OPEN_ROTATING = auto()


class MotionBatch:
    """
    Completion signal for a group of motion requests.

    `track()` hands out one completion callback per request. The future
    resolves only after `seal()` has been called and every tracked request
    has completed, so an engine that completes synchronously cannot resolve
    it while requests are still being dispatched.
    """

    def __init__(self, result=None):
        self.future: Future = Future()
        self.result = result
        self._outstanding = 0
        self._sealed = False

    def track(self) -> Callable[[], None]:
        self._outstanding += 1
        fired = []

        def on_complete():
            if fired:
                return
            fired.append(True)
            self._outstanding -= 1
            self._maybe_resolve()

        return on_complete

    def seal(self) -> Future:
        self._sealed = True
        self._maybe_resolve()
        return self.future

    def _maybe_resolve(self):
        if self._sealed and self._outstanding == 0 and not self.future.done():
            self.future.set_result(self.result)


class CarouselMenu:
    """
    Ring of items navigated one step at a time.

    Args:
        motion: Motion engine used for every animation
        config: CarouselConfig, a plain dict of config fields, or None
        group: Optional spatial node used as the common parent transform
    """

    def __init__(self, motion: MotionEngine,
                 config: Union[CarouselConfig, Dict[str, Any], None] = None,
                 group: Any = None):
        if not isinstance(config, CarouselConfig):
            config = CarouselConfig.from_dict(config)
        self.motion = motion
        self.config = config
        self.group = group
        self.resolver = HitTargetResolver(self)
        self.reset()

    def reset(self):
        """Drop every item and return to a closed, empty menu."""
        self.ring = Ring(self.config.gap, self.config.offset)
        self.opened = False
        self.enabled = True
        self._rotating = False
        self._pulsing = False
        logger.info("Carousel reset")

    # =====================
    # STATE
    # =====================
    @property
    def state(self) -> MenuState:
        if not self.opened:
            return MenuState.CLOSED
        if self._rotating:
            return MenuState.OPEN_ROTATING
        return MenuState.OPEN_IDLE

    @property
    def selected_id(self) -> Optional[int]:
        return self.ring.selected_id

    @property
    def selected(self) -> Optional[RingNode]:
        return self.ring.selected

    @property
    def left_edge(self) -> Optional[int]:
        return self.ring.edges.left

    @property
    def right_edge(self) -> Optional[int]:
        return self.ring.edges.right

    def __len__(self) -> int:
        return len(self.ring)

    def node(self, node_id: int) -> RingNode:
        return self.ring.node(node_id)

    def items(self):
        return [node.item for node in self.ring.nodes]

    def set_enabled(self, enabled: bool):
        self.enabled = bool(enabled)

    # =====================
    # BUILDING
    # =====================
    def add_item(self, payload: Any, on_select: Optional[Callable[[], None]] = None,
                 **item_options) -> int:
        """
        Add a spatial node to the ring. Returns the new node id.

        Raises InvalidItem (leaving the ring untouched) if payload is not a
        spatial node.
        """
        item_options.setdefault('rotation_speed', self.config.default_speed)
        item = CarouselItem(payload, on_select, **item_options)

        behavior = self.config.open_behavior
        zero_scale = behavior is OpenBehavior.GROW and not self.opened
        node = self.ring.add(item, zero_scale=zero_scale)
        if not self.opened:
            self.ring.hide_selection()

        if behavior is OpenBehavior.FADE and not self.opened and supports_opacity(payload):
            payload.set_opacity(0.0)

        add_child = getattr(self.group, 'add', None)
        if callable(add_child):
            add_child(payload)
        return node.id

    # =====================
    # OPEN / CLOSE
    # =====================
    def open(self) -> Optional[Future]:
        if self.opened:
            return None

        behavior = self.config.open_behavior
        batch = MotionBatch()
        for node in self.ring.walk():
            payload = node.payload
            if behavior is OpenBehavior.GROW:
                self.motion.animate_to(payload, {'scale': node.baseline_scale.copy()},
                                       self.config.open_time, batch.track())
            elif behavior is OpenBehavior.FADE and supports_opacity(payload):
                payload.set_scale(node.baseline_scale.copy())
                self.motion.animate_from_to(payload, {'opacity': 0.0}, {'opacity': 1.0},
                                            self.config.open_time, on_complete=batch.track())
            else:
                payload.set_scale(node.baseline_scale.copy())

        self.ring.show_selection()
        self.opened = self.enabled = True
        logger.info("Carousel opened (%d items, %s)", len(self.ring), behavior.name)
        return batch.seal()

    def close(self) -> Optional[Future]:
        if not self.opened:
            return None

        self.ring.hide_selection()
        self.opened = self.enabled = False

        behavior = self.config.open_behavior
        batch = MotionBatch()
        for node in self.ring.walk():
            payload = node.payload
            if behavior is OpenBehavior.FADE and supports_opacity(payload):
                self.motion.animate_to(payload, {'opacity': 0.0},
                                       self.config.close_time, batch.track())
            elif behavior is OpenBehavior.NONE:
                payload.set_scale(np.zeros(3))
            else:
                self.motion.animate_to(payload, {'scale': np.zeros(3)},
                                       self.config.close_time, batch.track())

        logger.info("Carousel closed")
        return batch.seal()

    # =====================
    # ROTATION
    # =====================
    def _rotation_blocker(self, forward: bool) -> Optional[str]:
        if not self.opened:
            return "menu closed"
        if not self.enabled:
            return "menu disabled"
        if len(self.ring) <= 1:
            return "fewer than two items"
        if self._rotating:
            return "rotation in flight"
        if not self.config.revolving:
            if forward and self.ring.selected_id >= len(self.ring) - 1:
                return "at last item"
            if not forward and self.ring.selected_id <= 0:
                return "at first item"
        return None

    def rotate_next(self) -> Optional[Future]:
        """Advance the selection one step. Every slot shifts by -gap."""
        return self._rotate(forward=True)

    def rotate_prev(self) -> Optional[Future]:
        """Retreat the selection one step. Every slot shifts by +gap."""
        return self._rotate(forward=False)

    def _rotate(self, forward: bool) -> Optional[Future]:
        reason = self._rotation_blocker(forward)
        if reason:
            logger.debug("Rotation %s not performed: %s", "next" if forward else "prev", reason)
            return None

        ring = self.ring
        gap = self.config.gap
        self._rotating = True
        try:
            # The node leaving one end reappears beyond its neighbour at the other
            if forward:
                crossing = ring.edges.left_node
                crossing.slot = ring.node(crossing.prev).slot + gap
                ring.edges.wrap_forward()
                shift = -gap
            else:
                crossing = ring.edges.right_node
                crossing.slot = ring.node(crossing.next).slot - gap
                ring.edges.wrap_backward()
                shift = gap
            crossing.payload.set_position(crossing.slot.copy())

            target = ring.selected.next if forward else ring.selected.prev
            batch = MotionBatch(result=target)
            for node in ring.walk():
                node.slot = node.slot + shift
                self.motion.animate_to(node.payload, {'position': node.slot.copy()},
                                       self.config.step_duration, batch.track())
            ring.select(target)
        finally:
            self._rotating = False

        logger.debug("Rotated %s: selected=%d left=%s right=%s",
                     "next" if forward else "prev", target, ring.edges.left, ring.edges.right)
        return batch.seal()

    # =====================
    # SELECT
    # =====================
    def select(self) -> Optional[Future]:
        """
        Pulse the selected item, then run its callback.

        The returned future resolves with the selected id after the callback
        has run, or with the callback's exception. While a pulse is playing
        further selects are refused. Closing the menu mid-pulse drops the
        callback and resolves the future with None.
        """
        if not self.opened or not self.enabled or self.ring.selected is None:
            logger.debug("Select not performed")
            return None
        if self._pulsing:
            logger.debug("Select not performed: pulse in flight")
            return None

        node = self.ring.selected
        future: Future = Future()
        base = node.baseline_scale.copy()

        def finish():
            self._pulsing = False
            if not self.opened:
                # Pulse cut short by close()
                logger.debug("Selection of item %d dropped, menu closed", node.id)
                future.set_result(None)
                return
            try:
                node.item.fire()
            except Exception as exc:
                logger.exception("Selection callback for item %d failed", node.id)
                future.set_exception(exc)
                return
            future.set_result(node.id)

        self._pulsing = True
        self.motion.animate_from_to(node.payload, {'scale': base},
                                    {'scale': base + self.config.resize_scale},
                                    self.config.pulse_duration, yoyo=True, repeat=1,
                                    on_complete=finish)
        return future

    def goto(self, target_id: int) -> Future:
        """Walk to `target_id` one rotation at a time. See HitTargetResolver."""
        return self.resolver.resolve_and_navigate(target_id)

    # =====================
    # GROUP TRANSFORM
    # =====================
    def move_menu(self, position: VectorLike = (0, 0, 0), rotation: VectorLike = (0, 0, 0),
                  scale: VectorLike = 1.0, duration: float = 0.5) -> Optional[Future]:
        """Animate the group transform. Only while open and grouped."""
        if not self.opened or self.group is None:
            return None
        if isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration < 0:
            duration = 0.5

        batch = MotionBatch()
        self.motion.animate_to(self.group, {
            'position': as_vector(position),
            'rotation': as_vector(rotation),
            'scale': as_vector(scale, 1.0),
        }, duration, batch.track())
        return batch.seal()

    def reset_menu(self) -> Optional[Future]:
        return self.move_menu()

    # =====================
    # PER-FRAME
    # =====================
    def animate(self, elapsed_time: float):
        """Idle spin for every item. Call once per frame."""
        if not elapsed_time:
            return
        for node in self.ring.walk():
            if node.selected:
                node.item.animate_selected(elapsed_time)
            else:
                node.item.animate_default(elapsed_time)
