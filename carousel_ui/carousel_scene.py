"""
Carousel Scene
==============
Draws a carousel menu into an OpenCV frame and hit-tests the pointer.

Features:
- Orthographic projection of item positions with simple depth scaling
- Selected item outlined and labelled
- Position indicator dots along the bottom edge
- pick(x, y) for pointer navigation
"""

import cv2
import numpy as np
from typing import List, Optional, Tuple

from carousel import CarouselMenu, TweenEngine
from carousel.ring import RingNode


class CarouselScene:
    """
    Frame-driven view of one menu.

    The scene owns the clock: `update()` steps the motion engine and the
    idle spin, `render()` draws the current transforms.
    """

    def __init__(self, menu: CarouselMenu, engine: TweenEngine,
                 width: int = 1280, height: int = 720,
                 pixels_per_unit: float = 180.0, item_radius: int = 50):
        self.menu = menu
        self.engine = engine
        self.width = width
        self.height = height
        self.pixels_per_unit = pixels_per_unit
        self.item_radius = item_radius
        self.camera_distance = 4.0

        self.elapsed = 0.0
        self.hover_id: Optional[int] = None

        # Visual settings
        self.background = (30, 30, 40)
        self.show_indicators = True

    # =====================
    # PROJECTION
    # =====================
    def _world(self, node: RingNode) -> Tuple[np.ndarray, np.ndarray]:
        payload = node.payload
        if hasattr(payload, 'world_position'):
            return payload.world_position(), payload.world_scale()
        return np.asarray(payload.get_position(), dtype=float), np.asarray(payload.get_scale(), dtype=float)

    def project(self, position: np.ndarray) -> Tuple[int, int, float]:
        """World position to pixel (x, y) plus a depth factor."""
        depth = self.camera_distance / max(self.camera_distance - float(position[2]), 0.1)
        px = int(self.width / 2 + position[0] * self.pixels_per_unit * depth)
        py = int(self.height / 2 - position[1] * self.pixels_per_unit * depth)
        return px, py, depth

    def _screen_items(self) -> List[Tuple[RingNode, int, int, int]]:
        """(node, x, y, radius) for every visible item, back to front."""
        items = []
        for node in self.menu.ring.walk():
            position, scale = self._world(node)
            px, py, depth = self.project(position)
            radius = int(self.item_radius * float(scale[0]) * depth)
            if radius > 0:
                items.append((float(position[2]), node.selected, node, px, py, radius))
        items.sort(key=lambda entry: (entry[0], entry[1]))
        return [(node, px, py, radius) for _, _, node, px, py, radius in items]

    # =====================
    # UPDATE / HIT TEST
    # =====================
    def update(self, delta_time: float):
        self.engine.update(delta_time)
        self.elapsed += delta_time
        self.menu.animate(self.elapsed)

    def pick(self, x: int, y: int) -> Optional[int]:
        """Id of the front-most item under pixel (x, y), or None."""
        self.hover_id = None
        for node, px, py, radius in reversed(self._screen_items()):
            if (x - px) ** 2 + (y - py) ** 2 <= radius ** 2:
                self.hover_id = node.id
                break
        return self.hover_id

    # =====================
    # RENDER
    # =====================
    def render(self, frame: np.ndarray):
        frame[:] = self.background
        font = cv2.FONT_HERSHEY_SIMPLEX

        for node, px, py, radius in self._screen_items():
            payload = node.payload
            color = getattr(payload, 'color', (200, 200, 220))
            opacity = payload.get_opacity() if hasattr(payload, 'get_opacity') else 1.0
            color = tuple(int(c * opacity) for c in color)

            cv2.circle(frame, (px, py), radius, color, -1)

            # Spin marker so the idle rotation is visible
            angle = float(payload.get_rotation()[1])
            mx = int(px + np.cos(angle) * radius * 0.7)
            my = int(py + np.sin(angle) * radius * 0.7)
            cv2.circle(frame, (mx, my), max(2, radius // 8), (40, 40, 50), -1)

            if node.selected:
                cv2.circle(frame, (px, py), radius + 4, (120, 200, 255), 2)
                label = getattr(payload, 'name', '') or f"#{node.id}"
                (tw, _), _ = cv2.getTextSize(label, font, 0.6, 2)
                cv2.putText(frame, label, (px - tw // 2, py + radius + 28),
                            font, 0.6, (220, 220, 220), 2)
            elif node.id == self.hover_id:
                cv2.circle(frame, (px, py), radius + 3, (150, 150, 160), 1)

        if self.show_indicators:
            self._render_indicators(frame)

    def _render_indicators(self, frame: np.ndarray):
        """Row of dots, filled for the selected item."""
        count = len(self.menu.ring)
        if count == 0:
            return

        y = self.height - 25
        dot_radius = 6
        dot_spacing = 30
        start_x = (self.width - (count - 1) * dot_spacing) // 2

        for i in range(count):
            x = start_x + i * dot_spacing
            if i == self.menu.selected_id:
                cv2.circle(frame, (x, y), dot_radius, (200, 200, 220), -1)
            else:
                cv2.circle(frame, (x, y), dot_radius, (80, 80, 100), 2)

        if not self.menu.opened:
            cv2.putText(frame, "CLOSED - press O", (20, 40),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (150, 150, 160), 1)
