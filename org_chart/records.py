"""
Org Chart Core — Record Validator v1.0

Validates a raw row collection once, at the ingestion boundary, and
coerces every row into a strict EmployeeRecord. The rest of the core
never touches untyped rows.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .constants import DEFAULT_FTE, REQUIRED_COLUMNS
from .domain_types import EmployeeRecord


class FatalIngestionError(Exception):
    """Raised when a row collection cannot produce any tree."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        super().__init__("; ".join(self.errors))


# ---------------------------------------------------------------------------
# Column validation
# ---------------------------------------------------------------------------

def validate_columns(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    """
    Return fatal schema errors. Empty list means the rows are usable.

    A column counts as present if any row carries the key: roots may
    legitimately omit reports_to_id, but the column must exist somewhere.
    """
    if not rows:
        return ["File is empty"]

    seen: set[str] = set()
    for row in rows:
        seen.update(row.keys())

    missing = [col for col in REQUIRED_COLUMNS if col not in seen]
    if missing:
        return [f"Missing required columns: {', '.join(missing)}"]
    return []


def require_columns(rows: Sequence[Mapping[str, Any]]) -> None:
    """Hard-fail variant of validate_columns."""
    errors = validate_columns(rows)
    if errors:
        raise FatalIngestionError(errors)


# ---------------------------------------------------------------------------
# Row coercion
# ---------------------------------------------------------------------------

def clean_identifier(value: Any) -> Optional[str]:
    """Trimmed string form of an identifier, or None when blank."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        # spreadsheet readers hand back 42.0 for an id cell holding 42
        value = int(value)
    text = str(value).strip()
    return text or None


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_fte(value: Any) -> Tuple[float, bool]:
    """
    Parse an FTE cell. Returns (fte, valid).

    Blank cells default to 1.0 and count as valid; unparsable or
    non-finite values default to 1.0 and are reported invalid.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_FTE, True
    try:
        fte = float(value)
    except (TypeError, ValueError):
        return DEFAULT_FTE, False
    if not math.isfinite(fte):
        return DEFAULT_FTE, False
    return fte, True


def coerce_record(row: Mapping[str, Any]) -> Tuple[Optional[EmployeeRecord], List[str]]:
    """
    Coerce one raw row. Returns (record, messages).

    record is None when the row has no usable employee_id.
    """
    employee_id = clean_identifier(row.get("employee_id"))
    if employee_id is None:
        return None, []

    messages: List[str] = []
    fte, valid = parse_fte(row.get("fte"))
    if not valid:
        messages.append(
            f"Invalid FTE value {row.get('fte')!r} for employee {employee_id}; using {DEFAULT_FTE}"
        )

    secondary = row.get("matrix_primary_manager_id", row.get("secondary_manager_id"))

    record = EmployeeRecord(
        employee_id=employee_id,
        employee_name=_clean_text(row.get("employee_name")) or employee_id,
        reports_to_id=clean_identifier(row.get("reports_to_id")),
        department_name=_clean_text(row.get("department_name")) or "",
        job_title=_clean_text(row.get("job_title")),
        location=_clean_text(row.get("location")),
        employment_type=_clean_text(row.get("employment_type")),
        subsidiary_name=_clean_text(row.get("subsidiary_name")),
        fte=fte,
        secondary_manager_id=clean_identifier(secondary),
    )
    return record, messages


def iter_records(
    rows: Iterable[Mapping[str, Any]],
) -> Iterable[Tuple[int, Optional[EmployeeRecord], List[str]]]:
    """Yield (row_index, record, messages) for every raw row."""
    for index, row in enumerate(rows):
        record, messages = coerce_record(row)
        yield index, record, messages
