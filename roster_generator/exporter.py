"""
JSON Roster Exporter.

Exports generated rows + metadata to a JSON file the viewer can ingest.
Never exports a built forest.
"""

from __future__ import annotations

import json
from typing import Dict, List

from .roster_spec import RosterSpec


def export_roster(
    rows: List[Dict[str, str]],
    path: str,
    spec: RosterSpec,
    seed: int,
) -> None:
    """
    Write rows + metadata to a JSON file.

    Output format:
    {
        "metadata": {"seed": int, "spec": {...}, "row_count": int},
        "rows": [{...}, ...]
    }
    """
    doc = {
        "metadata": {
            "seed": seed,
            "spec": spec.to_dict(),
            "row_count": len(rows),
        },
        "rows": rows,
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(doc, f, ensure_ascii=True, indent=2)
