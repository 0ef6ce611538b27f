"""
Layout Engine — Forest Placement v1.0

Shared driver for both layout strategies. Each root is laid out in its
own local frame by the strategy; the primary tree stays at its origin and
secondary trees are translated into their own region by the strategy's
arrange() step, so trees never overlap.

A strategy provides:
  kind                                   "tree" | "radial"
  layout_root(forest, root_id, opts, i)  -> TreePlacement (local frame)
  arrange(placements, opts)              -> [(dx, dy)] per placement
  clusters(forest, positions, opts)      -> department decorations
"""

from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional, Protocol, Tuple

from ..domain_types import ParseResult
from .layout_types import (
    Bounds,
    DepartmentCluster,
    LayoutOptions,
    LayoutResult,
    NodePosition,
    TreePlacement,
)


class LayoutStrategy(Protocol):
    kind: str

    def layout_root(
        self, forest: ParseResult, root_id: str, options: LayoutOptions, tree_index: int,
    ) -> TreePlacement: ...

    def arrange(
        self, placements: List[TreePlacement], options: LayoutOptions,
    ) -> List[Tuple[float, float]]: ...

    def clusters(
        self, forest: ParseResult, positions: List[NodePosition], options: LayoutOptions,
    ) -> Tuple[DepartmentCluster, ...]: ...


class LayoutRootError(ValueError):
    """Raised when a layout is requested for an identifier not in the forest."""

    def __init__(self, root_id: str) -> None:
        self.root_id = root_id
        super().__init__(f"Unknown layout root {root_id!r}")


# ---------------------------------------------------------------------------
# Traversal shared by both strategies
# ---------------------------------------------------------------------------

def ordered_children(forest: ParseResult, node_id: str, options: LayoutOptions) -> List[str]:
    """Sibling order: sibling key, then descending subtree size. Stable."""
    key = options.key_fn()
    nodes = forest.nodes
    return sorted(
        forest.nodes[node_id].children,
        key=lambda cid: (key(nodes[cid]), -nodes[cid].size),
    )


def collect_subtree(
    forest: ParseResult,
    root_id: str,
    options: LayoutOptions,
) -> Tuple[List[str], Dict[str, List[str]], Dict[str, int]]:
    """
    Pre-order walk of the laid-out part of one tree.

    Returns (preorder, ordered children, depth relative to root_id).
    Nodes deeper than options.max_depth are omitted. Reversing preorder
    gives an order in which every child precedes its parent.
    """
    preorder: List[str] = []
    kids: Dict[str, List[str]] = {}
    depth: Dict[str, int] = {root_id: 0}
    limit = options.max_depth
    stack = [root_id]
    while stack:
        nid = stack.pop()
        preorder.append(nid)
        d = depth[nid]
        if limit is not None and d >= limit:
            kids[nid] = []
            continue
        children = ordered_children(forest, nid, options)
        kids[nid] = children
        for cid in children:
            depth[cid] = d + 1
        stack.extend(reversed(children))
    return preorder, kids, depth


def count_depths(preorder: List[str], depth: Dict[str, int]) -> Dict[int, int]:
    counts: Dict[int, int] = {}
    for nid in preorder:
        d = depth[nid]
        counts[d] = counts.get(d, 0) + 1
    return counts


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

def layout_roots(forest: ParseResult, options: LayoutOptions) -> List[str]:
    """
    Roots to lay out, primary first. Secondary trees are only included
    when the layout starts at the primary root.
    """
    root_id = options.root_id or forest.root
    if root_id not in forest.nodes:
        raise LayoutRootError(root_id)
    roots = [root_id]
    if options.include_secondary and root_id == forest.root:
        roots.extend(forest.secondary_roots)
    return roots


def layout_forest(
    forest: ParseResult,
    strategy: LayoutStrategy,
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Lay out every requested root with one strategy and assemble the result."""
    opts = options or LayoutOptions()
    roots = layout_roots(forest, opts)

    placements = [
        strategy.layout_root(forest, rid, opts, index)
        for index, rid in enumerate(roots)
    ]
    offsets = strategy.arrange(placements, opts)

    positions: Dict[str, NodePosition] = {}
    edges: List[Tuple[str, str]] = []
    region: List[Bounds] = []
    for placement, (dx, dy) in zip(placements, offsets):
        for pos in placement.positions:
            positions[pos.node_id] = _translate(pos, dx, dy)
        edges.extend(placement.edges)
        region.append(placement.bounds.translated(dx, dy))

    primary = placements[0]
    primary_positions = [positions[p.node_id] for p in primary.positions]

    return LayoutResult(
        kind=strategy.kind,
        positions=positions,
        edges=tuple(edges),
        bounds=Bounds.union_all(region),
        depth_counts=dict(primary.depth_counts),
        clusters=strategy.clusters(forest, primary_positions, opts),
        max_depth=max(primary.depth_counts),
        roots=tuple(roots),
        options=opts,
        ring_width=primary.ring_width,
    )


def _translate(pos: NodePosition, dx: float, dy: float) -> NodePosition:
    if dx == 0.0 and dy == 0.0:
        return pos
    return dataclasses.replace(
        pos,
        x=pos.x + dx,
        y=pos.y + dy,
        center_x=pos.center_x + dx,
        center_y=pos.center_y + dy,
    )
