"""
Roster Specification — Frozen dataclass defining generator parameters.

The generated roster has employee_count rows in the main hierarchy plus
orphan_count + cycle_size extra employees and duplicate_count repeated
identifiers, so every structural warning path can be exercised.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RosterSpec:
    """Immutable specification for deterministic roster generation."""

    employee_count: int
    department_count: int = 4
    max_span: int = 8
    location_count: int = 3
    part_time_percent: int = 0      # 0..100
    orphan_count: int = 0
    cycle_size: int = 0             # 0 = no cycle, 1 = self-reference
    duplicate_count: int = 0

    def __post_init__(self) -> None:
        if self.employee_count < 1:
            raise ValueError("employee_count must be >= 1")
        if self.department_count < 1:
            raise ValueError("department_count must be >= 1")
        if self.max_span < 1:
            raise ValueError("max_span must be >= 1")
        if self.location_count < 1:
            raise ValueError("location_count must be >= 1")
        if not 0 <= self.part_time_percent <= 100:
            raise ValueError("part_time_percent must be within 0..100")
        if min(self.orphan_count, self.cycle_size, self.duplicate_count) < 0:
            raise ValueError("orphan_count, cycle_size and duplicate_count must be >= 0")

    @property
    def valid_row_count(self) -> int:
        """Distinct identifiers in the roster."""
        return self.employee_count + self.orphan_count + self.cycle_size

    @property
    def expected_root_count(self) -> int:
        return 1 + self.orphan_count + (1 if self.cycle_size else 0)

    def to_dict(self) -> dict:
        """Serialise to plain dict for JSON export."""
        return {
            "employee_count": self.employee_count,
            "department_count": self.department_count,
            "max_span": self.max_span,
            "location_count": self.location_count,
            "part_time_percent": self.part_time_percent,
            "orphan_count": self.orphan_count,
            "cycle_size": self.cycle_size,
            "duplicate_count": self.duplicate_count,
        }
