"""
Roster Compiler — Deterministic generator producing employee rows.

compile_roster(spec, seed) → List[Dict[str, str]]

Rows look like a parsed spreadsheet: string-valued, unordered, with the
structural defects the RosterSpec requests (orphans, a manager cycle,
duplicate identifiers). No global randomness.
Output is validated through build_forest before returning.
"""

from __future__ import annotations

from typing import Dict, List

from org_chart.builder import build_forest
from org_chart.invariants import InvariantViolationError, validate_forest_invariants

from .department_templates import EXECUTIVE, DepartmentTemplate, select_departments
from .roster_rng import RosterRNG, Row
from .roster_spec import RosterSpec


class GeneratorInvariantError(Exception):
    """Raised when a generated roster does not build into the expected forest."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Generated roster failed validation: {cause}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compile_roster(spec: RosterSpec, seed: int) -> List[Row]:
    """
    Compile a RosterSpec + seed into a deterministic, shuffled roster.

    Raises GeneratorInvariantError if the rows do not build into a
    forest with the expected row and root counts.
    """
    rng = RosterRNG(seed)
    departments = select_departments(spec.department_count)

    rows = _main_hierarchy(spec, rng, departments)
    main_rows = list(rows)
    rows.extend(_orphans(spec, rng, departments))
    rows.extend(_cycle(spec, rng, departments))
    for _ in range(spec.duplicate_count):
        original = rng.duplicate_source(main_rows)
        duplicate = dict(original)
        duplicate["employee_name"] = rng.person_name()
        rows.append(duplicate)

    rng.shuffle_rows(rows)
    _validate(rows, spec)
    return rows


# ---------------------------------------------------------------------------
# Row builders (private)
# ---------------------------------------------------------------------------

def _row(
    rng: RosterRNG,
    spec: RosterSpec,
    employee_id: str,
    manager_id: str,
    dept: DepartmentTemplate,
    title: str,
) -> Row:
    part_time = rng.is_part_time(spec.part_time_percent)
    return {
        "employee_id": employee_id,
        "employee_name": rng.person_name(),
        "reports_to_id": manager_id,
        "department_name": dept.name,
        "job_title": title,
        "location": rng.location(spec.location_count),
        "employment_type": "Part-time" if part_time else "Full-time",
        "fte": "0.5" if part_time else "1.0",
    }


def _main_hierarchy(
    spec: RosterSpec,
    rng: RosterRNG,
    departments: List[DepartmentTemplate],
) -> List[Row]:
    """One CEO, one head per department, everyone else under a random open manager."""
    rows: List[Row] = [_row(rng, spec, "E00001", "", EXECUTIVE, EXECUTIVE.head_title)]
    dept_of: Dict[str, DepartmentTemplate] = {"E00001": EXECUTIVE}
    headcount: Dict[str, int] = {"E00001": 0}
    open_managers: List[str] = []

    head_count = min(len(departments), spec.max_span, spec.employee_count - 1)
    for i in range(head_count):
        eid = f"E{len(rows) + 1:05d}"
        dept = departments[i]
        rows.append(_row(rng, spec, eid, "E00001", dept, dept.head_title))
        dept_of[eid] = dept
        headcount[eid] = 0
        headcount["E00001"] += 1
        open_managers.append(eid)

    while len(rows) < spec.employee_count:
        eid = f"E{len(rows) + 1:05d}"
        index = rng.manager_slot(len(open_managers))
        manager = open_managers[index]
        dept = dept_of[manager]
        rows.append(_row(rng, spec, eid, manager, dept, rng.title(dept.member_titles)))
        dept_of[eid] = dept
        headcount[eid] = 0
        headcount[manager] += 1
        if headcount[manager] >= spec.max_span:
            open_managers[index] = open_managers[-1]
            open_managers.pop()
        open_managers.append(eid)

    # Promote anyone with reports to a manager title.
    for row in rows[head_count + 1:]:
        if headcount[row["employee_id"]]:
            row["job_title"] = rng.title(dept_of[row["employee_id"]].manager_titles)
    return rows


def _orphans(
    spec: RosterSpec,
    rng: RosterRNG,
    departments: List[DepartmentTemplate],
) -> List[Row]:
    """Each orphan reports to an identifier that is not in the roster."""
    rows: List[Row] = []
    for i in range(spec.orphan_count):
        dept = rng.department(departments)
        rows.append(_row(
            rng, spec, f"O{i + 1:05d}", f"X{i + 1:05d}", dept,
            rng.title(dept.member_titles),
        ))
    return rows


def _cycle(
    spec: RosterSpec,
    rng: RosterRNG,
    departments: List[DepartmentTemplate],
) -> List[Row]:
    """C1 -> C2 -> ... -> Ck -> C1. A size of one is a self-reference."""
    rows: List[Row] = []
    k = spec.cycle_size
    for i in range(k):
        dept = rng.department(departments)
        rows.append(_row(
            rng, spec, f"C{i + 1:05d}", f"C{(i + 1) % k + 1:05d}", dept,
            rng.title(dept.manager_titles),
        ))
    return rows


def _validate(rows: List[Row], spec: RosterSpec) -> None:
    result = build_forest(rows)
    if not result.ok:
        raise GeneratorInvariantError(ValueError("; ".join(result.errors)))
    try:
        validate_forest_invariants(result)
    except InvariantViolationError as exc:
        raise GeneratorInvariantError(exc) from exc

    stats = result.stats
    if stats.valid_rows != spec.valid_row_count:
        raise GeneratorInvariantError(ValueError(
            f"expected {spec.valid_row_count} valid rows, got {stats.valid_rows}"
        ))
    if len(stats.roots) != spec.expected_root_count:
        raise GeneratorInvariantError(ValueError(
            f"expected {spec.expected_root_count} roots, got {len(stats.roots)}"
        ))
    if stats.cycle_detected != bool(spec.cycle_size):
        raise GeneratorInvariantError(ValueError(
            f"cycle_detected={stats.cycle_detected} for cycle_size={spec.cycle_size}"
        ))
