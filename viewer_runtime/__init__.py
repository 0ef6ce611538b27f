"""
Viewer Runtime — session state around the org chart core.

Holds the committed forest, layout cache, cameras, selection and hover
for one open chart.
"""

from .session import NoForestError, UnknownNodeError, ViewerSession
from .observability import SessionMetrics, collect_metrics

__all__ = [
    "ViewerSession",
    "NoForestError",
    "UnknownNodeError",
    "SessionMetrics",
    "collect_metrics",
]
