"""
Viewport — Pointer Interaction v1.0

Routes pointer events to hit testing, hover/selection state and camera
panning. Hit tests run on move and down only; a drag in progress pans
the camera and never hit-tests, rebuilds the forest or re-lays out.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .camera import Camera, Point, Transform
from .hit_test import HitTester

ACTION_NONE = "none"
ACTION_HOVER = "hover"
ACTION_SELECT = "select"
ACTION_DRAG_START = "drag_start"
ACTION_PAN = "pan"
ACTION_DRAG_END = "drag_end"
ACTION_LEAVE = "leave"


class HoverState:
    """Last hovered identifier. update() is a no-op when it has not changed."""

    def __init__(self) -> None:
        self.node_id: Optional[str] = None
        self.changes = 0

    def update(self, node_id: Optional[str]) -> bool:
        if node_id == self.node_id:
            return False
        self.node_id = node_id
        self.changes += 1
        return True


@dataclass(frozen=True)
class PointerOutcome:
    action: str
    node_id: Optional[str]
    hover_changed: bool
    transform: Transform

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "node_id": self.node_id,
            "hover_changed": self.hover_changed,
            "transform": self.transform.to_dict(),
        }


class PointerController:
    """
    One controller per view. Swap the hit tester with set_hit_tester()
    whenever the active layout changes.
    """

    def __init__(
        self,
        camera: Camera,
        hit_tester: HitTester,
        hover: HoverState | None = None,
        on_select: Callable[[str], None] | None = None,
    ) -> None:
        self.camera = camera
        self.hit_tester = hit_tester
        self.hover = hover or HoverState()
        self.on_select = on_select
        self.selected_id: Optional[str] = None
        self._drag_from: Optional[Point] = None

    @property
    def dragging(self) -> bool:
        return self._drag_from is not None

    def set_hit_tester(self, hit_tester: HitTester) -> None:
        self.hit_tester = hit_tester

    def move(self, x: float, y: float) -> PointerOutcome:
        if self._drag_from is not None:
            px, py = self._drag_from
            self._drag_from = (x, y)
            transform = self.camera.pan(x - px, y - py)
            return PointerOutcome(ACTION_PAN, self.hover.node_id, False, transform)

        hit = self.hit_tester.hit((x, y), self.camera.transform)
        changed = self.hover.update(hit)
        action = ACTION_HOVER if changed else ACTION_NONE
        return PointerOutcome(action, hit, changed, self.camera.transform)

    def down(self, x: float, y: float) -> PointerOutcome:
        hit = self.hit_tester.hit((x, y), self.camera.transform)
        if hit is None:
            self._drag_from = (x, y)
            return PointerOutcome(ACTION_DRAG_START, None, False, self.camera.transform)
        self.selected_id = hit
        if self.on_select is not None:
            self.on_select(hit)
        return PointerOutcome(ACTION_SELECT, hit, False, self.camera.transform)

    def up(self, x: float, y: float) -> PointerOutcome:
        if self._drag_from is None:
            return PointerOutcome(ACTION_NONE, self.hover.node_id, False, self.camera.transform)
        self._drag_from = None
        return PointerOutcome(ACTION_DRAG_END, self.hover.node_id, False, self.camera.transform)

    def leave(self) -> PointerOutcome:
        self._drag_from = None
        changed = self.hover.update(None)
        return PointerOutcome(ACTION_LEAVE, None, changed, self.camera.transform)
