"""
Observability — In-process metrics collection.

No external dependencies. Uses compute_diagnostics + timing.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import ViewerSession


@dataclass(frozen=True)
class SessionMetrics:
    """Snapshot of observable session metrics."""

    build_latency_ms: float
    layout_latency_ms: float
    forest_version: int
    node_count: int
    laid_out_count: int
    secondary_tree_count: int
    layout_cache_entries: int
    layout_cache_hits: int
    layout_cache_misses: int
    last_forest_hash: str
    warnings: list

    def to_dict(self) -> dict:
        return asdict(self)


def collect_metrics(session: "ViewerSession") -> SessionMetrics:
    """
    Collect metrics from a live session.

    Recomputes the active layout outside the cache to measure latency
    and confirm it matches the memoised result.
    """
    from org_chart.hashing import canonical_hash, layout_hash
    from org_chart.layout import compute_layout

    forest = session.forest
    cached = session.layout()

    start = time.perf_counter()
    fresh = compute_layout(forest, session.view, session.layout_options())
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    diagnostics = session.get_diagnostics()
    warnings = list(diagnostics["warnings"])
    if layout_hash(fresh) != layout_hash(cached):
        warnings.append("Recomputed layout differs from the cached layout")

    service = session.layout_service
    return SessionMetrics(
        build_latency_ms=round(session.last_build_ms, 2),
        layout_latency_ms=round(elapsed_ms, 2),
        forest_version=session.version,
        node_count=diagnostics["node_count"],
        laid_out_count=len(fresh.positions),
        secondary_tree_count=diagnostics["secondary_tree_count"],
        layout_cache_entries=len(service),
        layout_cache_hits=service.hits,
        layout_cache_misses=service.misses,
        last_forest_hash=canonical_hash(forest),
        warnings=warnings,
    )
