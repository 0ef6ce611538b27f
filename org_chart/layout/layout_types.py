"""
Layout Engine — Domain Types v1.0

Positions are in layout space (pre-camera). Tree layouts are Cartesian;
radial layouts also carry the polar coordinates each position was
derived from.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..constants import (
    FOREST_GAP,
    LEVEL_GAP,
    MARKER_SPACING,
    NODE_HEIGHT,
    NODE_WIDTH,
    RING_WIDTH,
    SIBLING_MARGIN,
)
from ..domain_types import OrgNode


LAYOUT_TREE = "tree"
LAYOUT_RADIAL = "radial"
LAYOUT_KINDS = (LAYOUT_TREE, LAYOUT_RADIAL)

VARIANT_PROPORTIONAL = "proportional"
VARIANT_WEDGE = "wedge"

WEIGHT_SIZE = "size"
WEIGHT_LEAVES = "leaves"


def department_key(node: OrgNode) -> str:
    """Default sibling order: department name, lexicographic."""
    return node.department or ""


# ── Geometry ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle, origin at its top-left corner."""

    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def around(cls, x: float, y: float, half_w: float, half_h: float) -> "Bounds":
        return cls(x - half_w, y - half_h, x + half_w, y + half_h)

    @classmethod
    def union_all(cls, items: Iterable["Bounds"]) -> Optional["Bounds"]:
        result: Optional[Bounds] = None
        for b in items:
            result = b if result is None else result.union(b)
        return result

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.min_x, self.min_y, self.max_x, self.max_y))

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def expanded(self, padding: float) -> "Bounds":
        return Bounds(
            self.min_x - padding,
            self.min_y - padding,
            self.max_x + padding,
            self.max_y + padding,
        )

    def translated(self, dx: float, dy: float) -> "Bounds":
        return Bounds(self.min_x + dx, self.min_y + dy, self.max_x + dx, self.max_y + dy)

    def intersects(self, other: "Bounds") -> bool:
        return not (
            other.min_x > self.max_x
            or other.max_x < self.min_x
            or other.min_y > self.max_y
            or other.max_y < self.min_y
        )

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def to_rect(self) -> Rect:
        return Rect(self.min_x, self.min_y, self.width, self.height)

    def to_dict(self) -> dict:
        return {
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
        }


# ── Positions ─────────────────────────────────────────────────

@dataclass(frozen=True)
class NodePosition:
    """
    Position of one node in layout space.

    tree_index: 0 for the primary tree, 1.. for secondary trees.
    Polar fields (angle, radius, angle_start, angle_end, inner_radius,
    outer_radius, center_x, center_y, marker_radius) are only meaningful
    for radial layouts; angles are radians clockwise from 12 o'clock
    around the disc centre (center_x, center_y).
    """

    node_id: str
    x: float
    y: float
    depth: int
    tree_index: int = 0
    angle: float = 0.0
    radius: float = 0.0
    angle_start: float = 0.0
    angle_end: float = 0.0
    inner_radius: float = 0.0
    outer_radius: float = 0.0
    center_x: float = 0.0
    center_y: float = 0.0
    marker_radius: float = 0.0

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "x": self.x,
            "y": self.y,
            "depth": self.depth,
            "tree_index": self.tree_index,
            "angle": self.angle,
            "radius": self.radius,
            "angle_start": self.angle_start,
            "angle_end": self.angle_end,
            "inner_radius": self.inner_radius,
            "outer_radius": self.outer_radius,
            "center_x": self.center_x,
            "center_y": self.center_y,
            "marker_radius": self.marker_radius,
        }


@dataclass(frozen=True)
class DepartmentCluster:
    """Background decoration for one department of the primary tree."""

    department: str
    color: str
    node_count: int
    bounds: Bounds
    angle_start: float = 0.0
    angle_end: float = 0.0

    def to_dict(self) -> dict:
        return {
            "department": self.department,
            "color": self.color,
            "node_count": self.node_count,
            "bounds": self.bounds.to_dict(),
            "angle_start": self.angle_start,
            "angle_end": self.angle_end,
        }


# ── Options / Results ─────────────────────────────────────────

@dataclass(frozen=True)
class LayoutOptions:
    """
    Everything a layout depends on besides the forest itself.

    Frozen and hashable so it can key the layout cache. sibling_key is
    compared by identity.
    """

    root_id: Optional[str] = None
    max_depth: Optional[int] = None
    include_secondary: bool = False
    sibling_key: Optional[Callable[[OrgNode], Any]] = None

    # tree
    node_width: float = NODE_WIDTH
    node_height: float = NODE_HEIGHT
    sibling_margin: float = SIBLING_MARGIN
    level_gap: float = LEVEL_GAP

    # radial
    variant: str = VARIANT_PROPORTIONAL
    weight: str = WEIGHT_SIZE
    ring_width: float = RING_WIDTH
    marker_spacing: float = MARKER_SPACING

    forest_gap: float = FOREST_GAP

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.variant not in (VARIANT_PROPORTIONAL, VARIANT_WEDGE):
            raise ValueError(f"Unknown radial variant {self.variant!r}")
        if self.weight not in (WEIGHT_SIZE, WEIGHT_LEAVES):
            raise ValueError(f"Unknown radial weight {self.weight!r}")
        if self.node_width <= 0 or self.node_height <= 0 or self.level_gap <= 0:
            raise ValueError("Tree geometry must be positive")
        if self.ring_width <= 0:
            raise ValueError("ring_width must be positive")

    def key_fn(self) -> Callable[[OrgNode], Any]:
        return self.sibling_key or department_key


@dataclass
class TreePlacement:
    """One root laid out in its own local frame."""

    root_id: str
    positions: List[NodePosition]
    edges: List[Tuple[str, str]]
    bounds: Bounds
    depth_counts: Dict[int, int]
    ring_width: float = 0.0
    outer_radius: float = 0.0


@dataclass(frozen=True)
class LayoutResult:
    """
    Positioned node graph for one view.

    positions preserves draw order: later entries are drawn on top.
    depth_counts and clusters describe the primary tree.
    """

    kind: str
    positions: Dict[str, NodePosition]
    edges: Tuple[Tuple[str, str], ...]
    bounds: Bounds
    depth_counts: Dict[int, int]
    clusters: Tuple[DepartmentCluster, ...]
    max_depth: int
    roots: Tuple[str, ...]
    options: LayoutOptions = field(default_factory=LayoutOptions)
    ring_width: float = 0.0

    def get(self, node_id: str) -> Optional[NodePosition]:
        return self.positions.get(node_id)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "positions": [p.to_dict() for p in self.positions.values()],
            "edges": [list(e) for e in self.edges],
            "bounds": self.bounds.to_dict(),
            "depth_counts": {str(d): c for d, c in sorted(self.depth_counts.items())},
            "clusters": [c.to_dict() for c in self.clusters],
            "max_depth": self.max_depth,
            "roots": list(self.roots),
            "ring_width": self.ring_width,
            "node_width": self.options.node_width,
            "node_height": self.options.node_height,
        }
