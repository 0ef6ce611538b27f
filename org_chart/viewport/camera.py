"""
Viewport — Camera Model v1.0

A pan/zoom transform mapping layout space to screen space:

    screen = world * k + (x, y)

Every mutation (zoom, pan, reset, set, fit, viewport or content resize)
funnels through Camera._constrain, which:
  - rejects non-finite candidates (the previous transform is kept)
  - clamps the scale to [min_zoom, max_zoom]
  - clamps the translation so at least safety_margin pixels of the
    content bounds stay inside the viewport on each axis
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..constants import (
    FIT_PADDING,
    MIN_FIT_EXTENT,
    SAFETY_MARGIN,
    ZOOM_IN_FACTOR,
    ZOOM_OUT_FACTOR,
)
from ..layout.layout_types import Bounds, Rect

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class Transform:
    """Translation (x, y) in screen pixels and uniform scale k."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def apply(self, wx: float, wy: float) -> Point:
        return wx * self.k + self.x, wy * self.k + self.y

    def invert(self, sx: float, sy: float) -> Point:
        return (sx - self.x) / self.k, (sy - self.y) / self.k

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.k)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "k": self.k}


IDENTITY = Transform()


@dataclass(frozen=True)
class CameraConfig:
    """Per-view camera configuration. Injected by the caller."""

    min_zoom: float = 0.1
    max_zoom: float = 2.0
    zoom_in_factor: float = ZOOM_IN_FACTOR
    zoom_out_factor: float = ZOOM_OUT_FACTOR
    safety_margin: float = SAFETY_MARGIN
    initial: Transform = field(default_factory=Transform)

    def __post_init__(self) -> None:
        if not (0 < self.min_zoom <= self.max_zoom):
            raise ValueError(
                f"Zoom bounds must satisfy 0 < min <= max, got "
                f"min={self.min_zoom} max={self.max_zoom}"
            )
        if self.zoom_in_factor <= 0 or self.zoom_out_factor <= 0:
            raise ValueError("Zoom factors must be positive")
        if self.safety_margin < 0:
            raise ValueError("safety_margin must be non-negative")

    def clamp_zoom(self, k: float) -> float:
        return min(self.max_zoom, max(self.min_zoom, k))


TREE_CAMERA = CameraConfig(min_zoom=0.1, max_zoom=2.0)
RADIAL_CAMERA = CameraConfig(min_zoom=0.4, max_zoom=5.0)


def _clamp_axis(
    offset: float,
    lo_world: float,
    hi_world: float,
    k: float,
    extent: float,
    margin: float,
) -> float:
    """
    Content occupies [lo*k + offset, hi*k + offset] on screen; keep at
    least margin pixels of it inside [0, extent].
    """
    lowest = margin - hi_world * k
    highest = extent - margin - lo_world * k
    if lowest > highest:
        return (lowest + highest) / 2
    return min(highest, max(lowest, offset))


class Camera:
    """
    Mutable camera for one view. The transform itself is immutable;
    every operation returns the transform now in effect.
    """

    def __init__(
        self,
        config: CameraConfig | None = None,
        width: float = 800.0,
        height: float = 600.0,
        content_bounds: Bounds | None = None,
    ) -> None:
        self.config = config or TREE_CAMERA
        self._check_viewport(width, height)
        self.width = float(width)
        self.height = float(height)
        self._content: Optional[Bounds] = content_bounds
        self._transform = self._constrain(self.config.initial) or IDENTITY

    # -- State -------------------------------------------------------------

    @property
    def transform(self) -> Transform:
        return self._transform

    @property
    def content_bounds(self) -> Optional[Bounds]:
        return self._content

    @property
    def center(self) -> Point:
        return self.width / 2, self.height / 2

    def visible_world_rect(self) -> Rect:
        x0, y0 = self._transform.invert(0.0, 0.0)
        x1, y1 = self._transform.invert(self.width, self.height)
        return Rect(x0, y0, x1 - x0, y1 - y0)

    # -- Configuration -----------------------------------------------------

    def set_viewport(self, width: float, height: float) -> Transform:
        self._check_viewport(width, height)
        self.width = float(width)
        self.height = float(height)
        return self._commit(self._transform)

    def set_content_bounds(self, bounds: Bounds | None) -> Transform:
        if bounds is not None and not bounds.is_finite():
            logger.warning("Ignoring non-finite content bounds %s", bounds)
            return self._transform
        self._content = bounds
        return self._commit(self._transform)

    # -- Operations --------------------------------------------------------

    def zoom_in(self, pivot: Point | None = None) -> Transform:
        return self.zoom_by(self.config.zoom_in_factor, pivot)

    def zoom_out(self, pivot: Point | None = None) -> Transform:
        return self.zoom_by(self.config.zoom_out_factor, pivot)

    def zoom_by(self, factor: float, pivot: Point | None = None) -> Transform:
        """
        Multiply the scale by factor around pivot (screen space, default
        viewport centre). The world point under the pivot stays put
        unless the pan clamp has to move it.
        """
        t = self._transform
        if not math.isfinite(factor) or factor <= 0:
            return t
        k = self.config.clamp_zoom(t.k * factor)
        if k == t.k:
            return t
        px, py = pivot if pivot is not None else self.center
        wx, wy = t.invert(px, py)
        return self._commit(Transform(px - wx * k, py - wy * k, k))

    def pan(self, dx: float, dy: float) -> Transform:
        t = self._transform
        return self._commit(Transform(t.x + dx, t.y + dy, t.k))

    def reset(self) -> Transform:
        return self._commit(self.config.initial)

    def set_transform(self, transform: Transform) -> Transform:
        return self._commit(transform)

    def fit_to_bounds(self, rect: Rect | Bounds, padding: float = FIT_PADDING) -> Transform:
        """
        Scale so rect plus padding fits the viewport, clamped to the zoom
        range, and centre it. A zero-size rect is expanded to a minimum
        extent around its centre; a non-finite rect skips the fit.
        """
        if isinstance(rect, Bounds):
            rect = rect.to_rect()
        values = (rect.x, rect.y, rect.width, rect.height, padding)
        if not all(math.isfinite(v) for v in values):
            logger.warning("Skipping fit to non-finite rect %s", rect)
            return self._transform

        cx = rect.x + rect.width / 2
        cy = rect.y + rect.height / 2
        w = rect.width if rect.width > 0 else MIN_FIT_EXTENT
        h = rect.height if rect.height > 0 else MIN_FIT_EXTENT

        k = self.config.clamp_zoom(min(
            (self.width - 2 * padding) / w,
            (self.height - 2 * padding) / h,
        ))
        return self._commit(Transform(self.width / 2 - cx * k, self.height / 2 - cy * k, k))

    # -- Constraint (single funnel) ----------------------------------------

    def _commit(self, candidate: Transform) -> Transform:
        constrained = self._constrain(candidate)
        if constrained is None:
            logger.debug("Rejected non-finite transform %s", candidate)
            return self._transform
        self._transform = constrained
        return constrained

    def _constrain(self, candidate: Transform) -> Optional[Transform]:
        if not candidate.is_finite() or candidate.k <= 0:
            return None
        k = self.config.clamp_zoom(candidate.k)
        x, y = candidate.x, candidate.y
        content = self._content
        if content is not None:
            margin = self.config.safety_margin
            x = _clamp_axis(x, content.min_x, content.max_x, k, self.width, margin)
            y = _clamp_axis(y, content.min_y, content.max_y, k, self.height, margin)
        return Transform(x, y, k)

    @staticmethod
    def _check_viewport(width: float, height: float) -> None:
        if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
            raise ValueError(f"Viewport must be positive and finite, got {width}x{height}")
