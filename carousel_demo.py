"""
Carousel Demo
=============
Keyboard and mouse driven carousel in an OpenCV window.

Controls:
- A / D: previous / next item
- Space: select (pulse + callback)
- Click an item: rotate until it is selected
- O: open / close the menu
- Q or ESC: quit
"""

import logging
import time

import cv2
import numpy as np

from carousel import CarouselConfig, CarouselMenu, OpenBehavior, SpatialObject, TweenEngine
from carousel_ui import CarouselInput, CarouselScene, KeyBindings


logger = logging.getLogger("carousel_demo")

ITEMS = [
    ("ALPHA", (90, 160, 230)),
    ("BRAVO", (110, 200, 120)),
    ("CHARLIE", (200, 140, 90)),
    ("DELTA", (180, 110, 200)),
    ("ECHO", (90, 200, 210)),
    ("FOXTROT", (210, 200, 100)),
    ("GOLF", (150, 150, 230)),
]


class CarouselDemo:
    """Window, clock and input loop around one CarouselScene."""

    def __init__(self, width: int = 1280, height: int = 720, title: str = "Carousel"):
        self.width = width
        self.height = height
        self.title = title

        self.engine = TweenEngine()
        self.group = SpatialObject("group")
        config = CarouselConfig(gap=(1.2, 0, 0), offset=(0, 0.3, 0),
                                open_behavior=OpenBehavior.GROW)
        self.menu = CarouselMenu(self.engine, config, group=self.group)

        for name, color in ITEMS:
            obj = SpatialObject(name, color=color)
            self.menu.add_item(obj, on_select=lambda n=name: logger.info("Selected %s", n))

        self.scene = CarouselScene(self.menu, self.engine, width, height)
        self.input = CarouselInput(self.menu, KeyBindings())

    def _mouse_callback(self, event, x, y, flags, param):
        if event == cv2.EVENT_MOUSEMOVE:
            self.scene.pick(x, y)
        elif event == cv2.EVENT_LBUTTONDOWN:
            target = self.input.point_to(x, y, self.scene.pick)
            if target is not None:
                logger.debug("Pointer goto %d", target)

    def run(self):
        cv2.namedWindow(self.title)
        cv2.setMouseCallback(self.title, self._mouse_callback)

        self.menu.open()
        last_time = time.time()
        try:
            while True:
                key = cv2.waitKey(1) & 0xFF
                if key == 27:  # ESC
                    break
                if key != 0xFF and self.input.handle_key(key) == 'quit':
                    break

                now = time.time()
                self.scene.update(now - last_time)
                last_time = now

                frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
                self.scene.render(frame)
                cv2.imshow(self.title, frame)

                if cv2.getWindowProperty(self.title, cv2.WND_PROP_VISIBLE) < 1:
                    break
        finally:
            cv2.destroyAllWindows()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("=" * 50)
    print("CAROUSEL")
    print("=" * 50)
    print("Controls:")
    print("  • A / D: Previous / next item")
    print("  • Space: Select")
    print("  • Click: Jump to item")
    print("  • O: Open / close")
    print("  • Q or ESC: Quit")
    print("=" * 50)

    CarouselDemo().run()
