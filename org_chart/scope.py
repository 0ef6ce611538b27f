"""
Org Chart Core — Scoping, Filters and Search

Read-only helpers the viewer uses to pick an effective root, dim nodes,
find people and walk up the management chain. None of these mutate the
committed forest.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from .constants import SEARCH_LIMIT, SEARCH_MIN_LENGTH
from .domain_types import OrgNode, ParseResult


def _heads(
    forest: ParseResult,
    key: Callable[[OrgNode], Optional[str]],
    value: str,
) -> List[str]:
    """
    Nodes of the primary tree, breadth-first, whose key matches value
    while their manager's does not.
    """
    heads: List[str] = []
    for node in forest.iter_breadth_first(forest.root):
        if key(node) != value:
            continue
        parent = forest.nodes.get(node.parent_id) if node.parent_id else None
        if parent is None or key(parent) != value:
            heads.append(node.id)
    return heads


def department_heads(forest: ParseResult, department: str) -> List[str]:
    """Heads of a department in the primary tree, breadth-first."""
    return _heads(forest, lambda n: n.department, department)


def subsidiary_heads(forest: ParseResult, subsidiary: str) -> List[str]:
    return _heads(forest, lambda n: n.record.subsidiary_name, subsidiary)


def scoped_root(
    forest: ParseResult,
    department: Optional[str] = None,
    subsidiary: Optional[str] = None,
) -> str:
    """
    Effective layout root. Department scope wins over subsidiary scope;
    with neither (or no matching head) the whole group is shown from the
    primary root.
    """
    if department:
        heads = department_heads(forest, department)
        if heads:
            return heads[0]
    if subsidiary:
        heads = subsidiary_heads(forest, subsidiary)
        if heads:
            return heads[0]
    return forest.root


def matches_filter(
    node: OrgNode,
    location: Optional[str] = None,
    department: Optional[str] = None,
) -> bool:
    """True when the node passes every active filter (None = inactive)."""
    if location is not None and node.record.location != location:
        return False
    if department is not None and node.department != department:
        return False
    return True


def search_nodes(
    forest: ParseResult,
    query: str,
    limit: int = SEARCH_LIMIT,
    min_length: int = SEARCH_MIN_LENGTH,
) -> List[OrgNode]:
    """Case-insensitive name search in lookup order. Short queries return nothing."""
    needle = (query or "").strip().lower()
    if len(needle) < min_length:
        return []
    results: List[OrgNode] = []
    for node in forest.nodes.values():
        if needle in node.name.lower():
            results.append(node)
            if len(results) >= limit:
                break
    return results


def management_chain(forest: ParseResult, node_id: str) -> List[str]:
    """Identifiers from node_id up to its root, inclusive."""
    chain: List[str] = []
    current: Optional[str] = node_id
    while current is not None and current in forest.nodes:
        chain.append(current)
        current = forest.nodes[current].parent_id
    return chain


def departments(forest: ParseResult) -> List[str]:
    return sorted({n.department for n in forest.nodes.values() if n.department})


def locations(forest: ParseResult) -> List[str]:
    return sorted({n.record.location for n in forest.nodes.values() if n.record.location})


def subsidiaries(forest: ParseResult) -> List[str]:
    return sorted({
        n.record.subsidiary_name for n in forest.nodes.values() if n.record.subsidiary_name
    })
