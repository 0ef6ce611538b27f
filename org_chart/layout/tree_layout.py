"""
Layout Engine — Tidy Tree Layout v1.0

Top-down layered layout. Every node gets y = depth * level_gap. x comes
from a contour-based tidy-tree pass:

  1. Bottom-up (children before parents): each subtree keeps a contour,
     the leftmost and rightmost centre offset per level relative to the
     subtree root.
  2. Children are placed left to right; each is shifted right by the
     smallest amount that keeps node_width + sibling_margin between it
     and the merged contour of its left siblings on every shared level.
  3. The parent is centred over its children (mean of their x).
  4. Top-down: absolute x = parent x + relative offset.

Contours are stored deepest-level-first with a lazy shift, and the
shorter contour is always folded into the longer one, so a long chain
or a very wide fan-out stays linear. No recursion anywhere.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ..constants import SYNTHETIC_ROOT_ID
from ..domain_types import ParseResult
from .forest import collect_subtree, count_depths, layout_forest
from .layout_types import (
    Bounds,
    DepartmentCluster,
    LAYOUT_TREE,
    LayoutOptions,
    LayoutResult,
    NodePosition,
    TreePlacement,
)


def tree_layout(forest: ParseResult, options: Optional[LayoutOptions] = None) -> LayoutResult:
    """Tree layout of the forest. Pure: same inputs give identical floats."""
    return layout_forest(forest, TreeLayout(), options)


# ---------------------------------------------------------------------------
# Contours
# ---------------------------------------------------------------------------

class _Contour:
    """
    Per-level extremes of one subtree.

    left[-1 - level] + shift is the leftmost centre at that level,
    relative to the subtree root; the same for right. Level 0 is the
    subtree root itself.
    """

    __slots__ = ("left", "right", "shift")

    def __init__(self) -> None:
        self.left: List[float] = [0.0]
        self.right: List[float] = [0.0]
        self.shift = 0.0

    def height(self) -> int:
        return len(self.left)

    def left_at(self, level: int) -> float:
        return self.left[-1 - level] + self.shift

    def right_at(self, level: int) -> float:
        return self.right[-1 - level] + self.shift


def _separation(acc: _Contour, nxt: _Contour, gap: float) -> float:
    """Offset that puts nxt gap away from acc on every shared level."""
    common = min(acc.height(), nxt.height())
    return max(acc.right_at(level) - nxt.left_at(level) for level in range(common)) + gap


def _merge(acc: _Contour, nxt: _Contour) -> _Contour:
    """Fold the shorter contour into the longer. nxt lies right of acc."""
    common = min(acc.height(), nxt.height())
    if nxt.height() > acc.height():
        for level in range(common):
            nxt.left[-1 - level] = acc.left_at(level) - nxt.shift
        return nxt
    for level in range(common):
        acc.right[-1 - level] = nxt.right_at(level) - acc.shift
    return acc


def _combine(
    children: List[str],
    contours: Dict[str, _Contour],
    relative: Dict[str, float],
    gap: float,
) -> _Contour:
    """Place children side by side, centre the parent, return its contour."""
    if not children:
        return _Contour()

    acc = contours.pop(children[0])
    offsets = [0.0]
    for cid in children[1:]:
        nxt = contours.pop(cid)
        offset = _separation(acc, nxt, gap)
        nxt.shift += offset
        offsets.append(offset)
        acc = _merge(acc, nxt)

    center = sum(offsets) / len(offsets)
    for cid, offset in zip(children, offsets):
        relative[cid] = offset - center

    acc.shift -= center
    acc.left.append(-acc.shift)
    acc.right.append(-acc.shift)
    return acc


# ---------------------------------------------------------------------------
# Strategy
# ---------------------------------------------------------------------------

class TreeLayout:
    kind = LAYOUT_TREE

    def layout_root(
        self,
        forest: ParseResult,
        root_id: str,
        options: LayoutOptions,
        tree_index: int,
    ) -> TreePlacement:
        preorder, kids, depth = collect_subtree(forest, root_id, options)
        gap = options.node_width + options.sibling_margin

        contours: Dict[str, _Contour] = {}
        relative: Dict[str, float] = {}
        for nid in reversed(preorder):
            contours[nid] = _combine(kids[nid], contours, relative, gap)

        xs: Dict[str, float] = {root_id: 0.0}
        edges: List[Tuple[str, str]] = []
        for nid in preorder:
            for cid in kids[nid]:
                xs[cid] = xs[nid] + relative[cid]
                edges.append((nid, cid))

        positions = [
            NodePosition(
                node_id=nid,
                x=xs[nid],
                y=depth[nid] * options.level_gap,
                depth=depth[nid],
                tree_index=tree_index,
            )
            for nid in preorder
        ]

        half_w = options.node_width / 2
        half_h = options.node_height / 2
        min_x = min(xs.values()) - half_w
        max_x = max(xs.values()) + half_w
        deepest = max(depth[nid] for nid in preorder)
        bounds = Bounds(min_x, -half_h, max_x, deepest * options.level_gap + half_h)

        return TreePlacement(
            root_id=root_id,
            positions=positions,
            edges=edges,
            bounds=bounds,
            depth_counts=count_depths(preorder, depth),
        )

    def arrange(
        self,
        placements: List[TreePlacement],
        options: LayoutOptions,
    ) -> List[Tuple[float, float]]:
        """Secondary trees go in a band below the primary, left to right."""
        primary = placements[0].bounds
        offsets: List[Tuple[float, float]] = [(0.0, 0.0)]
        band_top = primary.max_y + options.forest_gap
        cursor = primary.min_x
        for placement in placements[1:]:
            b = placement.bounds
            dx = cursor - b.min_x
            dy = band_top - b.min_y
            offsets.append((dx, dy))
            cursor = b.max_x + dx + options.forest_gap
        return offsets

    def clusters(
        self,
        forest: ParseResult,
        positions: List[NodePosition],
        options: LayoutOptions,
    ) -> Tuple[DepartmentCluster, ...]:
        """One bounding box per department over its cards."""
        half_w = options.node_width / 2
        half_h = options.node_height / 2
        groups: Dict[str, List[NodePosition]] = defaultdict(list)
        for pos in positions:
            if pos.node_id == SYNTHETIC_ROOT_ID:
                continue
            groups[forest.nodes[pos.node_id].department].append(pos)

        result: List[DepartmentCluster] = []
        for dept in sorted(groups):
            members = groups[dept]
            box = Bounds.union_all(Bounds.around(p.x, p.y, half_w, half_h) for p in members)
            result.append(DepartmentCluster(
                department=dept,
                color=forest.nodes[members[0].node_id].color,
                node_count=len(members),
                bounds=box,
            ))
        return tuple(result)
