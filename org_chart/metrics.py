"""
Org Chart Core — Metrics Engine v1.0

Per-node span-of-control metrics. accumulate_node() is called by the
hierarchy builder in post-order, so metrics cost one linear pass shared
with cycle detection.

Health classification is never stored: it is re-derived from the stored
headcount whenever thresholds change.
"""

from __future__ import annotations

from typing import Dict, Mapping

from .domain_types import (
    OrgNode,
    ParseResult,
    SOC_HIGH,
    SOC_LOW,
    SOC_OK,
    SpanThresholds,
)


def classify_span(headcount: int, low: int, high: int) -> str:
    """
    Leaf nodes (headcount 0) are never flagged.
    Otherwise: below low -> low, above high -> high, else ok.
    """
    if headcount == 0:
        return SOC_OK
    if headcount < low:
        return SOC_LOW
    if headcount > high:
        return SOC_HIGH
    return SOC_OK


def accumulate_node(node: OrgNode, nodes: Mapping[str, OrgNode]) -> None:
    """
    Fill headcount, FTE and descendant count from already-final children.
    """
    descendants = 0
    fte = 0.0
    for cid in node.children:
        child = nodes[cid]
        descendants += 1 + child.total_descendants
        fte += child.record.fte
    node.total_descendants = descendants
    node.soc_headcount = len(node.children)
    node.soc_fte = fte


def span_distribution(
    forest: ParseResult,
    thresholds: SpanThresholds | None = None,
) -> Dict[str, int]:
    """Count managers (headcount > 0) per health classification."""
    t = thresholds or SpanThresholds()
    counts = {SOC_LOW: 0, SOC_OK: 0, SOC_HIGH: 0}
    for node in forest.nodes.values():
        if node.soc_headcount == 0 or (forest.synthetic_root and node.id == forest.root):
            continue
        counts[classify_span(node.soc_headcount, t.low, t.high)] += 1
    return counts


def average_span(forest: ParseResult) -> float:
    """Mean direct-report count over managers. 0.0 with no managers."""
    spans = [
        n.soc_headcount
        for n in forest.nodes.values()
        if n.soc_headcount > 0 and not (forest.synthetic_root and n.id == forest.root)
    ]
    if not spans:
        return 0.0
    return sum(spans) / len(spans)


def max_depth(forest: ParseResult) -> int:
    return max((n.depth for n in forest.nodes.values()), default=0)
