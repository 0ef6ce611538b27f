"""
Viewport — camera transform, hit testing and pointer interaction.
"""

from .camera import Camera, CameraConfig, IDENTITY, RADIAL_CAMERA, TREE_CAMERA, Transform
from .hit_test import HIT_MODE_MARKER, HIT_MODE_WEDGE, HitTester, screen_to_world, visible_nodes
from .interaction import HoverState, PointerController, PointerOutcome

__all__ = [
    "Camera",
    "CameraConfig",
    "IDENTITY",
    "RADIAL_CAMERA",
    "TREE_CAMERA",
    "Transform",
    "HIT_MODE_MARKER",
    "HIT_MODE_WEDGE",
    "HitTester",
    "screen_to_world",
    "visible_nodes",
    "HoverState",
    "PointerController",
    "PointerOutcome",
]
