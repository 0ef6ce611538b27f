"""
Org Chart Core — Forest Invariant Checks v1.0

Hard-fail validation of a committed forest. Every check raises
InvariantViolationError on failure. The builder guarantees these; the
checks exist for tests, the roster generator and callers that assemble
forests by hand.
"""

from __future__ import annotations

from typing import Dict, Set

from .domain_types import ParseResult


class InvariantViolationError(Exception):
    """Raised when a forest invariant is violated."""

    def __init__(self, rule: str, detail: str) -> None:
        self.rule = rule
        self.detail = detail
        super().__init__(f"[INVARIANT:{rule}] {detail}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_forest_invariants(forest: ParseResult) -> None:
    """
    Run all forest checks. Raises InvariantViolationError on the first
    failure.
    """
    _check_roots(forest)
    _check_parent_links(forest)
    _check_reachability(forest)
    _check_descendant_counts(forest)
    _check_depths(forest)


# ---------------------------------------------------------------------------
# Individual checks (private)
# ---------------------------------------------------------------------------

def _check_roots(forest: ParseResult) -> None:
    """Every root exists, has no parent, and appears once."""
    roots = forest.all_roots
    if len(roots) != len(set(roots)):
        raise InvariantViolationError("duplicate_roots", f"Root list repeats an id: {roots}")
    for rid in roots:
        node = forest.nodes.get(rid)
        if node is None:
            raise InvariantViolationError("root_missing", f"Root {rid!r} not in lookup table")
        if node.parent_id is not None:
            raise InvariantViolationError(
                "root_has_parent",
                f"Root {rid!r} declares parent {node.parent_id!r}",
            )


def _check_parent_links(forest: ParseResult) -> None:
    """Children lists have no duplicates and agree with parent_id."""
    claimed: Dict[str, str] = {}
    for nid, node in forest.nodes.items():
        if len(node.children) != len(set(node.children)):
            raise InvariantViolationError(
                "duplicate_children", f"Node {nid!r} lists a child twice"
            )
        for cid in node.children:
            child = forest.nodes.get(cid)
            if child is None:
                raise InvariantViolationError(
                    "dangling_child", f"Node {nid!r} lists unknown child {cid!r}"
                )
            if cid in claimed:
                raise InvariantViolationError(
                    "multiple_parents",
                    f"Node {cid!r} claimed by {claimed[cid]!r} and {nid!r}",
                )
            claimed[cid] = nid
            if child.parent_id != nid:
                raise InvariantViolationError(
                    "parent_mismatch",
                    f"Node {cid!r} has parent_id {child.parent_id!r}, listed under {nid!r}",
                )


def _check_reachability(forest: ParseResult) -> None:
    """Every node is reached exactly once from exactly one root (no cycles)."""
    seen: Set[str] = set()
    for rid in forest.all_roots:
        for node in forest.iter_subtree(rid):
            if node.id in seen:
                raise InvariantViolationError(
                    "cycle", f"Node {node.id!r} reached twice"
                )
            seen.add(node.id)
    if len(seen) != len(forest.nodes):
        missing = sorted(set(forest.nodes) - seen)[:5]
        raise InvariantViolationError(
            "unreachable", f"{len(forest.nodes) - len(seen)} node(s) unreachable, e.g. {missing}"
        )


def _check_descendant_counts(forest: ParseResult) -> None:
    """total_descendants == sum(1 + child.total_descendants)."""
    for nid, node in forest.nodes.items():
        expected = sum(1 + forest.nodes[c].total_descendants for c in node.children)
        if node.total_descendants != expected:
            raise InvariantViolationError(
                "descendant_count",
                f"Node {nid!r} total_descendants={node.total_descendants}, expected {expected}",
            )
        if node.soc_headcount != len(node.children):
            raise InvariantViolationError(
                "headcount",
                f"Node {nid!r} soc_headcount={node.soc_headcount}, has {len(node.children)} children",
            )


def _check_depths(forest: ParseResult) -> None:
    """Roots at depth 0, +1 per edge."""
    for rid in forest.all_roots:
        if forest.nodes[rid].depth != 0:
            raise InvariantViolationError("root_depth", f"Root {rid!r} has non-zero depth")
    for nid, node in forest.nodes.items():
        for cid in node.children:
            if forest.nodes[cid].depth != node.depth + 1:
                raise InvariantViolationError(
                    "depth_step",
                    f"Edge {nid!r} -> {cid!r} does not step depth by one",
                )
