"""
Carousel engine: ring layout, seam tracking, navigation and goto resolution.
"""

from .config import CarouselConfig, OpenBehavior
from .errors import CarouselError, InvalidItem, UnknownTarget
from .item import CarouselItem
from .menu import CarouselMenu, MenuState, MotionBatch
from .motion import MotionEngine, TweenEngine, ease_out_cubic
from .resolver import Direction, HitTargetResolver, NavigationPlan
from .ring import Layout, Ring, RingNode, compute_layout
from .spatial import SpatialNode, SpatialObject, as_vector, is_spatial_node

__all__ = [
    # Engine
    'CarouselMenu', 'MenuState', 'MotionBatch',
    'Ring', 'RingNode', 'Layout', 'compute_layout',
    'HitTargetResolver', 'NavigationPlan', 'Direction',
    # Collaborators
    'SpatialNode', 'SpatialObject', 'as_vector', 'is_spatial_node',
    'MotionEngine', 'TweenEngine', 'ease_out_cubic',
    # Config and errors
    'CarouselConfig', 'OpenBehavior', 'CarouselItem',
    'CarouselError', 'InvalidItem', 'UnknownTarget',
]
