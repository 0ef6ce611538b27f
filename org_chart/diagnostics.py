"""
Org Chart Core — Diagnostics v1.0

Compute a diagnostic snapshot of a committed forest under a given set of
span thresholds.
"""

from __future__ import annotations

from .colors import department_colors
from .domain_types import ParseResult, SOC_HIGH, SOC_LOW, SpanThresholds
from .metrics import average_span, max_depth, span_distribution
from .scope import departments, locations, subsidiaries


def compute_diagnostics(
    forest: ParseResult,
    thresholds: SpanThresholds | None = None,
) -> dict:
    """
    Return a diagnostic dict summarising forest health.
    Span classification uses the thresholds passed in, not stored values.
    """
    t = thresholds or SpanThresholds()
    distribution = span_distribution(forest, t)
    depts = departments(forest)
    stats = forest.stats

    warnings: list[str] = list(forest.warnings)

    if forest.secondary_roots:
        warnings.append(
            f"{len(forest.secondary_roots)} tree(s) excluded from the primary "
            f"hierarchy ({stats.orphan_count} orphaned node(s))"
        )
    if stats.cycle_detected:
        warnings.append(
            f"{stats.cycle_count} reporting cycle(s) broken during construction"
        )
    if distribution[SOC_LOW]:
        warnings.append(
            f"{distribution[SOC_LOW]} manager(s) below span threshold {t.low}"
        )
    if distribution[SOC_HIGH]:
        warnings.append(
            f"{distribution[SOC_HIGH]} manager(s) above span threshold {t.high}"
        )

    return {
        "node_count": len(forest.nodes),
        "primary_size": forest.root_node.size,
        "secondary_tree_count": len(forest.secondary_roots),
        "max_depth": max_depth(forest),
        "manager_count": sum(distribution.values()),
        "average_span": round(average_span(forest), 2),
        "span_distribution": distribution,
        "thresholds": {"low": t.low, "high": t.high},
        "department_count": len(depts),
        "department_colors": department_colors(depts),
        "subsidiaries": subsidiaries(forest),
        "locations": locations(forest),
        "stats": stats.to_dict(),
        "warnings": warnings,
    }
