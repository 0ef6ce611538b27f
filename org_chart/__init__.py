"""
Org Chart Core v1.0
Hierarchy builder, layout engine and viewport model for large org charts.
Pure, synchronous, single-threaded. Committed forests are never mutated.
"""

from .domain_types import (
    EmployeeRecord, OrgNode, ParseResult, IngestionFailure, DatasetStats,
    StructuralWarning, SpanThresholds, SOC_LOW, SOC_OK, SOC_HIGH,
)
from .builder import build_forest
from .records import FatalIngestionError, validate_columns, coerce_record
from .metrics import classify_span, span_distribution, average_span, max_depth
from .colors import department_color, department_colors
from .scope import (
    department_heads,
    subsidiary_heads,
    scoped_root,
    matches_filter,
    search_nodes,
    management_chain,
    departments,
    subsidiaries,
    locations,
)
from .invariants import InvariantViolationError, validate_forest_invariants
from .diagnostics import compute_diagnostics
from .hashing import canonical_serialize, canonical_hash, layout_hash
from .constants import (
    DEFAULT_SOC_LOW,
    DEFAULT_SOC_HIGH,
    NEUTRAL_COLOR,
    SYNTHETIC_ROOT_ID,
)

__all__ = [
    "EmployeeRecord",
    "OrgNode",
    "ParseResult",
    "IngestionFailure",
    "DatasetStats",
    "StructuralWarning",
    "SpanThresholds",
    "SOC_LOW",
    "SOC_OK",
    "SOC_HIGH",
    "build_forest",
    "FatalIngestionError",
    "validate_columns",
    "coerce_record",
    "classify_span",
    "span_distribution",
    "average_span",
    "max_depth",
    "department_color",
    "department_colors",
    "department_heads",
    "subsidiary_heads",
    "scoped_root",
    "matches_filter",
    "search_nodes",
    "management_chain",
    "departments",
    "subsidiaries",
    "locations",
    "InvariantViolationError",
    "validate_forest_invariants",
    "compute_diagnostics",
    "canonical_serialize",
    "canonical_hash",
    "layout_hash",
    "DEFAULT_SOC_LOW",
    "DEFAULT_SOC_HIGH",
    "NEUTRAL_COLOR",
    "SYNTHETIC_ROOT_ID",
]
