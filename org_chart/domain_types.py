"""
Org Chart Core — Domain Types v1.0

Pure data. No traversal, no layout logic.

────────────────────────────────────────────────
DOMAIN GLOSSARY
────────────────────────────────────────────────

Forest:
    Every tree produced from one ingested dataset
    (one primary tree + zero or more secondary trees).

Span of Control (SoC):
    Direct-report headcount and FTE sum of a node, plus the health
    classification derived from comparing the headcount to thresholds.

Orphan:
    A record whose declared manager identifier matches no known record.

────────────────────────────────────────────────
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .constants import (
    DEFAULT_SOC_HIGH,
    DEFAULT_SOC_LOW,
    SYNTHETIC_ROOT_ID,
    SYNTHETIC_ROOT_NAME,
)


# ── Span Classification ───────────────────────────────────────

SOC_LOW = "low"
SOC_OK = "ok"
SOC_HIGH = "high"


@dataclass(frozen=True)
class SpanThresholds:
    """Low/high direct-report thresholds. Injected by the caller."""

    low: int = DEFAULT_SOC_LOW
    high: int = DEFAULT_SOC_HIGH

    def __post_init__(self) -> None:
        if self.low < 0 or self.high < 0:
            raise ValueError(
                f"Span thresholds must be non-negative, got low={self.low} high={self.high}"
            )
        if self.low > self.high:
            raise ValueError(
                f"Span threshold low={self.low} exceeds high={self.high}"
            )


# ── Records ───────────────────────────────────────────────────

@dataclass(frozen=True)
class EmployeeRecord:
    """One validated input row. Strict shape, trimmed identifiers."""

    employee_id: str
    employee_name: str
    reports_to_id: Optional[str]
    department_name: str
    job_title: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    subsidiary_name: Optional[str] = None
    fte: float = 1.0
    secondary_manager_id: Optional[str] = None  # informational only


# ── Nodes ─────────────────────────────────────────────────────

@dataclass
class OrgNode:
    """
    Arena entry for one employee.

    children holds child identifiers in encounter order. parent_id is a
    lookup key into the forest, never ownership. The builder freezes
    children into a tuple once the forest is committed.
    """

    id: str
    record: EmployeeRecord
    children: List[str] | Tuple[str, ...] = field(default_factory=list)
    parent_id: Optional[str] = None
    depth: int = 0
    total_descendants: int = 0
    soc_headcount: int = 0
    soc_fte: float = 0.0
    color: str = ""

    @property
    def name(self) -> str:
        return self.record.employee_name

    @property
    def department(self) -> str:
        return self.record.department_name

    @property
    def size(self) -> int:
        """Node count of the subtree rooted here."""
        return 1 + self.total_descendants

    def soc_status(self, thresholds: SpanThresholds | None = None) -> str:
        """Health classification, derived on read from the stored headcount."""
        from .metrics import classify_span

        t = thresholds or SpanThresholds()
        return classify_span(self.soc_headcount, t.low, t.high)

    def to_dict(self, thresholds: SpanThresholds | None = None) -> dict:
        r = self.record
        return {
            "id": self.id,
            "employee_name": r.employee_name,
            "reports_to_id": r.reports_to_id,
            "department_name": r.department_name,
            "job_title": r.job_title,
            "location": r.location,
            "employment_type": r.employment_type,
            "subsidiary_name": r.subsidiary_name,
            "fte": r.fte,
            "parent_id": self.parent_id,
            "children": list(self.children),
            "depth": self.depth,
            "total_descendants": self.total_descendants,
            "soc_headcount": self.soc_headcount,
            "soc_fte": self.soc_fte,
            "soc_status": self.soc_status(thresholds),
            "color": self.color,
        }


# ── Results ───────────────────────────────────────────────────

WARNING_CYCLE = "cycle"
WARNING_ORPHAN = "orphan"
WARNING_DUPLICATE = "duplicate"
WARNING_FTE = "fte"


@dataclass(frozen=True)
class StructuralWarning:
    """Non-fatal finding attached to a ParseResult."""

    kind: str
    employee_id: str
    message: str


@dataclass(frozen=True)
class DatasetStats:
    total_rows: int = 0
    valid_rows: int = 0
    orphan_count: int = 0
    cycle_detected: bool = False
    cycle_count: int = 0
    roots: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "valid_rows": self.valid_rows,
            "orphan_count": self.orphan_count,
            "cycle_detected": self.cycle_detected,
            "cycle_count": self.cycle_count,
            "roots": list(self.roots),
        }


@dataclass(frozen=True)
class IngestionFailure:
    """
    Typed fatal outcome of build_forest.

    Returned, never raised: the caller inspects it and blocks entry
    into the visualization.
    """

    errors: Tuple[str, ...]

    ok = False


@dataclass(frozen=True)
class ParseResult:
    """
    A committed forest.

    root: identifier of the primary (largest) tree root.
    secondary_roots: remaining roots, largest first.
    nodes: identifier -> OrgNode for every node of every tree.
    """

    root: str
    secondary_roots: Tuple[str, ...]
    nodes: Dict[str, OrgNode]
    stats: DatasetStats
    structural_warnings: Tuple[StructuralWarning, ...] = ()
    synthetic_root: bool = False

    ok = True

    # -- Access ------------------------------------------------------------

    @property
    def warnings(self) -> List[str]:
        return [w.message for w in self.structural_warnings]

    @property
    def root_node(self) -> OrgNode:
        return self.nodes[self.root]

    @property
    def all_roots(self) -> Tuple[str, ...]:
        return (self.root,) + self.secondary_roots

    def get(self, node_id: str) -> Optional[OrgNode]:
        return self.nodes.get(node_id)

    def children_of(self, node_id: str) -> List[OrgNode]:
        return [self.nodes[c] for c in self.nodes[node_id].children]

    def iter_subtree(self, node_id: str) -> Iterator[OrgNode]:
        """Pre-order walk of one subtree. Explicit stack, no recursion."""
        stack = [node_id]
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def iter_breadth_first(self, node_id: str) -> Iterator[OrgNode]:
        queue = [node_id]
        head = 0
        while head < len(queue):
            node = self.nodes[queue[head]]
            head += 1
            yield node
            queue.extend(node.children)

    # -- Single-tree view --------------------------------------------------

    def with_synthetic_root(self) -> "ParseResult":
        """
        Return a single-tree view of the forest.

        With exactly one true root this is the forest itself. Otherwise a
        new result is returned whose lookup table also contains one
        synthetic aggregate root adopting every true root (primary
        first); depths in that view are shifted by one.
        """
        if not self.secondary_roots or self.synthetic_root:
            return self

        roots = self.all_roots
        nodes: Dict[str, OrgNode] = {}
        for nid, node in self.nodes.items():
            nodes[nid] = dataclasses.replace(
                node,
                depth=node.depth + 1,
                parent_id=SYNTHETIC_ROOT_ID if nid in roots else node.parent_id,
            )

        total = sum(self.nodes[r].size for r in roots)
        fte = sum(self.nodes[r].record.fte for r in roots)
        nodes[SYNTHETIC_ROOT_ID] = OrgNode(
            id=SYNTHETIC_ROOT_ID,
            record=EmployeeRecord(
                employee_id=SYNTHETIC_ROOT_ID,
                employee_name=SYNTHETIC_ROOT_NAME,
                reports_to_id=None,
                department_name="",
                fte=0.0,
            ),
            children=tuple(roots),
            parent_id=None,
            depth=0,
            total_descendants=total,
            soc_headcount=len(roots),
            soc_fte=fte,
            color="",
        )

        return ParseResult(
            root=SYNTHETIC_ROOT_ID,
            secondary_roots=(),
            nodes=nodes,
            stats=self.stats,
            structural_warnings=self.structural_warnings,
            synthetic_root=True,
        )

    def to_dict(self, thresholds: SpanThresholds | None = None) -> dict:
        return {
            "root": self.root,
            "secondary_roots": list(self.secondary_roots),
            "stats": self.stats.to_dict(),
            "warnings": self.warnings,
            "synthetic_root": self.synthetic_root,
            "nodes": {
                nid: node.to_dict(thresholds) for nid, node in self.nodes.items()
            },
        }
