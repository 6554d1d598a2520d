"""
Input Bindings
==============
Maps raw key codes and pointer clicks onto carousel commands.

Debouncing lives here, not in the engine: while the motion started by the
last command is still playing, new input is ignored. The engine itself only
refuses a second rotation while the first is being dispatched.
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from carousel import CarouselMenu, UnknownTarget


logger = logging.getLogger(__name__)


@dataclass
class KeyBindings:
    """Key codes as returned by cv2.waitKey() & 0xFF."""
    key_prev: int = ord('a')       # Default: A
    key_next: int = ord('d')       # Default: D
    key_select: int = ord(' ')     # Default: Space
    key_toggle: int = ord('o')     # Open / close
    key_quit: int = ord('q')

    def action_for(self, key: int) -> Optional[str]:
        return {
            self.key_prev: 'prev',
            self.key_next: 'next',
            self.key_select: 'select',
            self.key_toggle: 'toggle',
            self.key_quit: 'quit',
        }.get(key)


class CarouselInput:
    """
    Feeds input events to a menu, one command at a time.

    Args:
        menu: The menu to drive
        bindings: Key mapping (defaults to KeyBindings())
        debounce: Ignore input until the last command's motion finishes
    """

    def __init__(self, menu: CarouselMenu, bindings: Optional[KeyBindings] = None,
                 debounce: bool = True):
        self.menu = menu
        self.bindings = bindings or KeyBindings()
        self.debounce = debounce
        self.busy = False

        self._commands: Dict[str, Callable[[], Optional[Future]]] = {
            'prev': menu.rotate_prev,
            'next': menu.rotate_next,
            'select': menu.select,
            'toggle': self._toggle,
        }

    def _toggle(self) -> Optional[Future]:
        return self.menu.close() if self.menu.opened else self.menu.open()

    def _release(self, _future: Future):
        self.busy = False

    def _run(self, action: str, command: Callable[[], Optional[Future]]) -> bool:
        if self.debounce and self.busy:
            return False
        self.busy = True
        result = command()
        if result is None:
            self.busy = False
            return False
        if self.debounce:
            result.add_done_callback(self._release)
        else:
            self.busy = False
        return True

    def handle_key(self, key: int) -> Optional[str]:
        """
        Dispatch one key press.

        Returns the action name if a command ran, 'quit' for the quit key,
        None otherwise.
        """
        if key is None or key < 0:
            return None
        action = self.bindings.action_for(key)
        if action is None:
            return None
        if action == 'quit':
            return 'quit'
        # Closed menus only listen for the toggle key
        if action != 'toggle' and not self.menu.enabled:
            return None
        return action if self._run(action, self._commands[action]) else None

    def point_to(self, x: int, y: int, pick: Callable[[int, int], Optional[int]]) -> Optional[int]:
        """
        Resolve a pointer position to an item and walk to it.

        `pick` is the caller's hit test. Returns the target id if a walk (or
        a select, when the target is already selected) was started.
        """
        if not self.menu.enabled:
            return None
        target = pick(x, y)
        if target is None:
            return None
        try:
            started = self._run('goto', lambda: self.menu.goto(target))
        except UnknownTarget:
            # Hit test and ring disagree; drop the click
            logger.warning("Pointer hit unknown item %r", target)
            self.busy = False
            return None
        return target if started else None
