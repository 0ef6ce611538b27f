"""
Layout Engine — Radial Layout v1.0

Maps a tree onto concentric rings. Angles are radians clockwise from
12 o'clock; the root sits at the disc centre and depth d sits on the
ring of radius d * ring_width.

Angular extent of a node is 2*pi * weight(node) / weight(root), where
weight is the laid-out subtree node count ("size") or leaf count
("leaves"). Children start at the parent's start angle and follow
sibling order. With "size", children leave a small gap inside their
parent's wedge, one share per parent.

Wedge variant: the root's direct reports are grouped by department and
each department gets an equal sector, lexicographic order. Subtrees are
proportional within their sector, so a department's range does not move
when another department grows.
"""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ..constants import (
    MARKER_ARC_FACTOR,
    MAX_MARKER_RADIUS,
    MIN_MARKER_RADIUS,
    ROOT_MARKER_RADIUS,
)
from ..domain_types import ParseResult
from .forest import collect_subtree, count_depths, layout_forest
from .layout_types import (
    Bounds,
    DepartmentCluster,
    LAYOUT_RADIAL,
    LayoutOptions,
    LayoutResult,
    NodePosition,
    TreePlacement,
    VARIANT_WEDGE,
    WEIGHT_LEAVES,
)

FULL_TURN = 2 * math.pi


def radial_layout(forest: ParseResult, options: Optional[LayoutOptions] = None) -> LayoutResult:
    """Radial layout of the forest. Pure: same inputs give identical floats."""
    return layout_forest(forest, RadialLayout(), options)


def polar_to_cartesian(angle: float, radius: float) -> Tuple[float, float]:
    """12 o'clock is angle 0, angles grow clockwise (screen y points down)."""
    return radius * math.sin(angle), -radius * math.cos(angle)


def cartesian_to_polar(x: float, y: float) -> Tuple[float, float]:
    """Inverse of polar_to_cartesian. Angle normalised to [0, 2*pi)."""
    angle = math.atan2(x, -y)
    if angle < 0:
        angle += FULL_TURN
    return angle, math.hypot(x, y)


def ring_width_for(depth_counts: Dict[int, int], options: LayoutOptions) -> float:
    """
    Smallest ring width (at least the configured base) that leaves
    marker_spacing of circumference per node on the most crowded ring.
    """
    width = options.ring_width
    for d, count in depth_counts.items():
        if d == 0:
            continue
        width = max(width, count * options.marker_spacing / (FULL_TURN * d))
    return width


def marker_radius(depth: int, extent: float, radius: float) -> float:
    if depth == 0:
        return ROOT_MARKER_RADIUS
    return min(MAX_MARKER_RADIUS, max(MIN_MARKER_RADIUS, MARKER_ARC_FACTOR * extent * radius))


# ---------------------------------------------------------------------------
# Strategy
# ---------------------------------------------------------------------------

class RadialLayout:
    kind = LAYOUT_RADIAL

    def layout_root(
        self,
        forest: ParseResult,
        root_id: str,
        options: LayoutOptions,
        tree_index: int,
    ) -> TreePlacement:
        preorder, kids, depth = collect_subtree(forest, root_id, options)
        weight = _weights(preorder, kids, options.weight)

        start: Dict[str, float] = {root_id: 0.0}
        end: Dict[str, float] = {root_id: FULL_TURN}
        edges: List[Tuple[str, str]] = []
        for nid in preorder:
            children = kids[nid]
            if not children:
                continue
            edges.extend((nid, cid) for cid in children)
            if nid == root_id and options.variant == VARIANT_WEDGE:
                _allocate_sectors(forest, children, weight, start, end)
            else:
                _allocate_proportional(children, weight[nid], weight, start[nid], end[nid], start, end)

        depth_counts = count_depths(preorder, depth)
        ring = ring_width_for(depth_counts, options)
        deepest = max(depth_counts)
        outer = (deepest + 0.5) * ring

        positions: List[NodePosition] = []
        for nid in preorder:
            d = depth[nid]
            a0, a1 = start[nid], end[nid]
            mid = (a0 + a1) / 2
            r = d * ring
            x, y = polar_to_cartesian(mid, r)
            positions.append(NodePosition(
                node_id=nid,
                x=x,
                y=y,
                depth=d,
                tree_index=tree_index,
                angle=mid,
                radius=r,
                angle_start=a0,
                angle_end=a1,
                inner_radius=max(0.0, (d - 0.5) * ring),
                outer_radius=(d + 0.5) * ring,
                marker_radius=marker_radius(d, a1 - a0, r),
            ))

        return TreePlacement(
            root_id=root_id,
            positions=positions,
            edges=edges,
            bounds=Bounds(-outer, -outer, outer, outer),
            depth_counts=depth_counts,
            ring_width=ring,
            outer_radius=outer,
        )

    def arrange(
        self,
        placements: List[TreePlacement],
        options: LayoutOptions,
    ) -> List[Tuple[float, float]]:
        """Secondary discs go in a row to the right of the primary disc."""
        offsets: List[Tuple[float, float]] = [(0.0, 0.0)]
        cursor = placements[0].outer_radius + options.forest_gap
        for placement in placements[1:]:
            center = cursor + placement.outer_radius
            offsets.append((center, 0.0))
            cursor = center + placement.outer_radius + options.forest_gap
        return offsets

    def clusters(
        self,
        forest: ParseResult,
        positions: List[NodePosition],
        options: LayoutOptions,
    ) -> Tuple[DepartmentCluster, ...]:
        """Angular range and marker bounds per department, root excluded."""
        groups: Dict[str, List[NodePosition]] = defaultdict(list)
        for pos in positions:
            if pos.depth == 0:
                continue
            groups[forest.nodes[pos.node_id].department].append(pos)

        result: List[DepartmentCluster] = []
        for dept in sorted(groups):
            members = groups[dept]
            box = Bounds.union_all(
                Bounds.around(p.x, p.y, p.marker_radius, p.marker_radius) for p in members
            )
            result.append(DepartmentCluster(
                department=dept,
                color=forest.nodes[members[0].node_id].color,
                node_count=len(members),
                bounds=box,
                angle_start=min(p.angle_start for p in members),
                angle_end=max(p.angle_end for p in members),
            ))
        return tuple(result)


# ---------------------------------------------------------------------------
# Angular allocation (private)
# ---------------------------------------------------------------------------

def _weights(preorder: List[str], kids: Dict[str, List[str]], mode: str) -> Dict[str, int]:
    weight: Dict[str, int] = {}
    for nid in reversed(preorder):
        total = sum(weight[c] for c in kids[nid])
        if mode == WEIGHT_LEAVES:
            weight[nid] = total or 1
        else:
            weight[nid] = 1 + total
    return weight


def _allocate_proportional(
    children: List[str],
    parent_weight: int,
    weight: Dict[str, int],
    a0: float,
    a1: float,
    start: Dict[str, float],
    end: Dict[str, float],
) -> None:
    extent = a1 - a0
    cursor = a0
    for cid in children:
        span = extent * weight[cid] / parent_weight
        start[cid] = cursor
        end[cid] = cursor + span
        cursor += span


def _allocate_sectors(
    forest: ParseResult,
    children: List[str],
    weight: Dict[str, int],
    start: Dict[str, float],
    end: Dict[str, float],
) -> None:
    groups: Dict[str, List[str]] = defaultdict(list)
    for cid in children:
        groups[forest.nodes[cid].department].append(cid)

    sector = FULL_TURN / len(groups)
    for index, dept in enumerate(sorted(groups)):
        members = groups[dept]
        total = sum(weight[c] for c in members)
        a0 = index * sector
        _allocate_proportional(members, total, weight, a0, a0 + sector, start, end)
