"""
Org Chart Core — Hierarchy Builder v1.0

Turns validated rows into a forest of OrgNodes.

Pipeline:
  1. Deduplicate by employee_id, first occurrence wins
  2. One node per surviving row, empty children
  3. Link pass: blank manager -> root candidate,
     known manager -> appended to its children,
     unknown manager -> orphan, root candidate
  4. Iterative DFS per root candidate with an on-path set;
     edges back onto the active path are rejected, never followed.
     Nodes unreachable from any candidate sit on manager cycles: the
     earliest cycle member becomes a candidate and the same DFS rejects
     the closing edge.
  5. Candidates sorted by subtree size: largest is primary

Fatal errors never escape as exceptions: they come back as an
IngestionFailure. Cycles and orphans are warnings on the ParseResult.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Set, Tuple

from .colors import department_color
from .domain_types import (
    DatasetStats,
    IngestionFailure,
    OrgNode,
    ParseResult,
    StructuralWarning,
    WARNING_CYCLE,
    WARNING_DUPLICATE,
    WARNING_FTE,
    WARNING_ORPHAN,
)
from .metrics import accumulate_node
from .records import FatalIngestionError, iter_records, require_columns


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_forest(
    rows: Iterable[Mapping[str, Any]] | None,
) -> ParseResult | IngestionFailure:
    """
    Build a forest from raw rows.

    Returns a ParseResult, or an IngestionFailure for an empty dataset,
    missing required columns, or no usable identifiers.
    """
    row_list = list(rows or [])
    try:
        require_columns(row_list)
        return _build(row_list)
    except FatalIngestionError as exc:
        return IngestionFailure(errors=exc.errors)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def _build(rows: List[Mapping[str, Any]]) -> ParseResult:
    warnings: List[StructuralWarning] = []
    nodes = _create_nodes(rows, warnings)
    if not nodes:
        raise FatalIngestionError(["No rows with a valid employee_id"])

    candidates, orphan_ids = _link(nodes, warnings)
    walker = _TreeWalker(nodes, warnings)

    for root_id in candidates:
        walker.walk(root_id)

    # Anything still unvisited hangs off a manager-reference cycle.
    order = {nid: i for i, nid in enumerate(nodes)}
    for nid in nodes:
        if nid in walker.visited:
            continue
        entry = _cycle_entry(nid, nodes, order)
        candidates.append(entry)
        walker.walk(entry)

    candidates.sort(key=lambda rid: -nodes[rid].size)

    for node in nodes.values():
        node.children = tuple(node.children)

    secondary = tuple(candidates[1:])
    stats = DatasetStats(
        total_rows=len(rows),
        valid_rows=len(nodes),
        orphan_count=len(orphan_ids) + sum(nodes[r].size for r in secondary),
        cycle_detected=walker.cycle_count > 0,
        cycle_count=walker.cycle_count,
        roots=tuple(candidates),
    )

    return ParseResult(
        root=candidates[0],
        secondary_roots=secondary,
        nodes=nodes,
        stats=stats,
        structural_warnings=tuple(warnings),
    )


def _create_nodes(
    rows: List[Mapping[str, Any]],
    warnings: List[StructuralWarning],
) -> Dict[str, OrgNode]:
    """Steps 1-2: first-wins deduplication and node creation."""
    nodes: Dict[str, OrgNode] = {}
    for index, record, messages in iter_records(rows):
        if record is None:
            continue
        eid = record.employee_id
        if eid in nodes:
            warnings.append(StructuralWarning(
                WARNING_DUPLICATE, eid,
                f"Duplicate employee_id {eid!r} at row {index + 1} ignored; "
                f"first occurrence wins",
            ))
            continue
        for message in messages:
            warnings.append(StructuralWarning(WARNING_FTE, eid, message))
        nodes[eid] = OrgNode(
            id=eid,
            record=record,
            children=[],
            parent_id=record.reports_to_id,
            color=department_color(record.department_name),
        )
    return nodes


def _link(
    nodes: Dict[str, OrgNode],
    warnings: List[StructuralWarning],
) -> Tuple[List[str], List[str]]:
    """Step 3: attach every node to its manager. Returns (candidates, orphans)."""
    candidates: List[str] = []
    orphans: List[str] = []
    for nid, node in nodes.items():
        manager_id = node.parent_id
        if manager_id is None:
            candidates.append(nid)
            continue
        manager = nodes.get(manager_id)
        if manager is None:
            orphans.append(nid)
            warnings.append(StructuralWarning(
                WARNING_ORPHAN, nid,
                f"Employee {node.name} ({nid}) reports to unknown manager "
                f"{manager_id!r}; placed in a separate tree",
            ))
            node.parent_id = None
            candidates.append(nid)
            continue
        manager.children.append(nid)
    return candidates, orphans


def _cycle_entry(start: str, nodes: Dict[str, OrgNode], order: Dict[str, int]) -> str:
    """
    Follow manager references from an unreached node until one repeats.
    Returns the member of that cycle that came first in the input.
    """
    path: List[str] = []
    seen: Set[str] = set()
    current = start
    while current not in seen:
        seen.add(current)
        path.append(current)
        current = nodes[current].parent_id
    cycle = path[path.index(current):]
    return min(cycle, key=order.__getitem__)


class _TreeWalker:
    """
    Step 4: explicit-stack DFS computing depth and metrics in post-order.

    visited spans every walk; on_path is the active root-to-node path.
    A child that is already visited is detached from its manager; if it
    is on the active path the edge closes a cycle and is recorded.
    """

    def __init__(self, nodes: Dict[str, OrgNode], warnings: List[StructuralWarning]) -> None:
        self._nodes = nodes
        self._warnings = warnings
        self.visited: Set[str] = set()
        self.cycle_count: int = 0

    def walk(self, root_id: str) -> None:
        nodes = self._nodes
        on_path: Set[str] = {root_id}
        self.visited.add(root_id)
        nodes[root_id].depth = 0
        stack: List[Tuple[str, int]] = [(root_id, 0)]

        while stack:
            nid, idx = stack[-1]
            node = nodes[nid]
            children = node.children
            if idx < len(children):
                cid = children[idx]
                if cid in self.visited:
                    del children[idx]
                    if cid in on_path:
                        self._reject_cycle_edge(node, nodes[cid])
                    continue
                stack[-1] = (nid, idx + 1)
                child = nodes[cid]
                child.depth = node.depth + 1
                self.visited.add(cid)
                on_path.add(cid)
                stack.append((cid, 0))
            else:
                accumulate_node(node, nodes)
                on_path.discard(nid)
                stack.pop()

    def _reject_cycle_edge(self, manager: OrgNode, report: OrgNode) -> None:
        self.cycle_count += 1
        report.parent_id = None
        self._warnings.append(StructuralWarning(
            WARNING_CYCLE, report.id,
            f"Cycle detected involving employee {report.name} ({report.id}): "
            f"reporting line to {manager.name} ({manager.id}) ignored",
        ))
