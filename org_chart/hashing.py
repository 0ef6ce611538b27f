"""
Org Chart Core — Canonical Hashing v1.0

Deterministic canonical serialization + SHA-256 hashing of forests and
layouts. Used to compare builds and to prove layout idempotence.

Rules:
  - Nodes sorted by id (code point order)
  - Children kept in committed order (order is meaningful)
  - Layout positions kept in draw order (z-order is meaningful)
  - Floats written with repr(), so equal floats give equal bytes
  - UTF-8 JSON, no whitespace
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict, List, TYPE_CHECKING

from .domain_types import ParseResult

if TYPE_CHECKING:
    from .layout.layout_types import LayoutResult


def canonical_serialize(forest: ParseResult) -> bytes:
    """Canonical serialization of a forest to UTF-8 JSON bytes."""
    obj = _build_forest_dict(forest)
    return json.dumps(obj, ensure_ascii=True, separators=(",", ":"), sort_keys=False).encode("utf-8")


def canonical_hash(forest: ParseResult) -> str:
    """SHA-256 of canonical serialization. Lowercase hex string."""
    return hashlib.sha256(canonical_serialize(forest)).hexdigest()


def layout_hash(layout: "LayoutResult") -> str:
    """SHA-256 over a layout's kind, draw order and exact coordinates."""
    obj = _build_layout_dict(layout)
    data = json.dumps(obj, ensure_ascii=True, separators=(",", ":"), sort_keys=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _build_forest_dict(forest: ParseResult) -> Dict[str, Any]:
    nodes_list: List[Dict[str, Any]] = []
    for nid in sorted(forest.nodes.keys()):
        n = forest.nodes[nid]
        nodes_list.append({
            "id": n.id,
            "name": n.name,
            "department": n.department,
            "parent_id": n.parent_id,
            "children": list(n.children),
            "depth": n.depth,
            "total_descendants": n.total_descendants,
            "soc_headcount": n.soc_headcount,
            "soc_fte": repr(n.soc_fte),
        })

    return {
        "format_version": 1,
        "root": forest.root,
        "secondary_roots": list(forest.secondary_roots),
        "nodes": nodes_list,
        "stats": forest.stats.to_dict(),
    }


def _build_layout_dict(layout: "LayoutResult") -> Dict[str, Any]:
    positions = [
        [
            p.node_id,
            p.tree_index,
            p.depth,
            repr(p.x),
            repr(p.y),
            repr(p.angle_start),
            repr(p.angle_end),
            repr(p.marker_radius),
        ]
        for p in layout.positions.values()
    ]
    b = layout.bounds
    return {
        "kind": layout.kind,
        "roots": list(layout.roots),
        "positions": positions,
        "bounds": [repr(b.min_x), repr(b.min_y), repr(b.max_x), repr(b.max_y)],
    }
