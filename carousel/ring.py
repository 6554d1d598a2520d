"""
Ring Module
===========
The circular ordered collection of carousel items and its slot layout.

The ring is an arena: nodes live in a list and link to each other through
integer `prev`/`next` indices. A node's id is its index and is never reused,
so lookup by id is O(1).

Layout walks the cycle once from the first-inserted node. Nodes take slots
0, gap, 2*gap ... up to the median node, which becomes the right edge. The
cursor then jumps to the reflection anchor on the far side,
-(median + parity) * gap, and the remaining nodes fill in from there:

    n=4:  0, g, 2g, -g           (anchor -2g)
    n=5:  0, g, 2g, -2g, -g      (anchor -3g)

With two nodes both edges start on the second node. The pair only becomes
adjacent (right directly before left) after the first rotation.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .edges import EdgeTracker
from .item import CarouselItem
from .spatial import VectorLike, as_vector


logger = logging.getLogger(__name__)


@dataclass
class RingNode:
    """One slot in the ring."""
    id: int
    item: CarouselItem
    selected: bool = False
    prev: int = 0
    next: int = 0
    baseline_scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    slot: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def payload(self):
        return self.item.payload


@dataclass
class Layout:
    """Result of one layout pass."""
    slots: List[np.ndarray]             # Indexed by traversal order
    anchor: Optional[np.ndarray] = None  # Cursor value right after the median
    right_edge: Optional[int] = None     # Traversal indices
    left_edge: Optional[int] = None


def compute_layout(count: int, gap: VectorLike, offset: VectorLike = (0, 0, 0)) -> Layout:
    """Slot coordinates for a ring of `count` nodes, in traversal order."""
    gap = as_vector(gap)
    offset = as_vector(offset)
    if count <= 0:
        return Layout(slots=[])

    median = count // 2
    parity = count % 2
    layout = Layout(slots=[])

    cursor = np.zeros(3)
    for k in range(count):
        layout.slots.append(cursor + offset)
        if k == median:
            layout.anchor = -(cursor + gap * parity)
            cursor = layout.anchor + gap
        else:
            cursor = cursor + gap

    if count >= 2:
        layout.right_edge = median
        layout.left_edge = 1 if count == 2 else median + 1
    return layout


class Ring:
    """
    Circular doubly-linked collection of RingNodes.

    Owns its seam pair (`edges`) and the selection flag. Nothing here talks
    to the motion engine; slots are written straight to the payloads.
    """

    def __init__(self, gap: VectorLike = (1, 0, 0), offset: VectorLike = (0, 0, 0)):
        self.gap = as_vector(gap)
        self.offset = as_vector(offset)
        self.nodes: List[RingNode] = []
        self.edges = EdgeTracker(self)
        self.selected_id: Optional[int] = None

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[RingNode]:
        return self.walk()

    def __contains__(self, node_id) -> bool:
        if isinstance(node_id, bool) or not isinstance(node_id, (int, np.integer)):
            return False
        return 0 <= node_id < len(self.nodes)

    @property
    def first(self) -> Optional[RingNode]:
        return self.nodes[0] if self.nodes else None

    @property
    def last(self) -> Optional[RingNode]:
        return self.nodes[self.nodes[0].prev] if self.nodes else None

    @property
    def selected(self) -> Optional[RingNode]:
        return None if self.selected_id is None else self.nodes[self.selected_id]

    def node(self, node_id: int) -> RingNode:
        return self.nodes[node_id]

    def walk(self, start: Optional[int] = None, forward: bool = True) -> Iterator[RingNode]:
        """Visit every node once, starting at `start` (default: first)."""
        if not self.nodes:
            return
        current = 0 if start is None else start
        for _ in range(len(self.nodes)):
            node = self.nodes[current]
            yield node
            current = node.next if forward else node.prev

    def add(self, item: CarouselItem, zero_scale: bool = False) -> RingNode:
        """Append a node after the last one, closing the cycle, then lay out."""
        node_id = len(self.nodes)
        node = RingNode(id=node_id, item=item,
                        baseline_scale=as_vector(item.payload.get_scale(), 1.0))

        if not self.nodes:
            node.prev = node.next = node_id
            node.selected = True
            self.selected_id = node_id
        else:
            first = self.nodes[0]
            last = self.nodes[first.prev]
            node.prev = last.id
            node.next = first.id
            last.next = node_id
            first.prev = node_id

        self.nodes.append(node)
        logger.debug("Added ring node %d (%d total)", node_id, len(self.nodes))
        self.recompute_layout(zero_scale=zero_scale)
        return node

    def recompute_layout(self, zero_scale: bool = False) -> Layout:
        """Assign every node its slot and reset the seam pair."""
        layout = compute_layout(len(self.nodes), self.gap, self.offset)
        order = [node.id for node in self.walk()]

        for node, slot in zip(self.walk(), layout.slots):
            node.slot = slot.copy()
            node.payload.set_position(slot.copy())
            if zero_scale:
                node.payload.set_scale(np.zeros(3))

        if layout.right_edge is None:
            self.edges.clear()
        else:
            self.edges.assign(order[layout.left_edge], order[layout.right_edge])
        return layout

    def select(self, node_id: int):
        """Move the selection flag to `node_id`."""
        if self.selected_id is not None:
            self.nodes[self.selected_id].selected = False
        self.nodes[node_id].selected = True
        self.selected_id = node_id

    def hide_selection(self):
        """Drop the selected flag but remember which node holds it."""
        if self.selected_id is not None:
            self.nodes[self.selected_id].selected = False

    def show_selection(self):
        if self.selected_id is not None:
            self.nodes[self.selected_id].selected = True

    def slots(self) -> Dict[int, np.ndarray]:
        return {node.id: node.slot.copy() for node in self.nodes}

    def check_cycle(self) -> bool:
        """True if `next` and `prev` each form one cycle through every node."""
        count = len(self.nodes)
        if count == 0:
            return True
        for forward in (True, False):
            seen = set()
            current = 0
            for _ in range(count):
                if current in seen:
                    return False
                seen.add(current)
                node = self.nodes[current]
                current = node.next if forward else node.prev
            if current != 0 or len(seen) != count:
                return False
        return True
