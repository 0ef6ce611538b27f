"""
Roster RNG — every random draw the compiler makes, named for what it picks.

One instance per compile_roster call. Identical seed → identical
sequence of draws → identical rows. No global random state is touched.
"""

from __future__ import annotations

import random
from typing import Dict, List, Sequence

from .department_templates import FIRST_NAMES, LAST_NAMES, LOCATIONS, DepartmentTemplate

Row = Dict[str, str]


class RosterRNG:
    """Seeded draws for names, places, contracts and reporting lines."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(seed)

    def person_name(self) -> str:
        return f"{self._rng.choice(FIRST_NAMES)} {self._rng.choice(LAST_NAMES)}"

    def location(self, location_count: int) -> str:
        """One of the first location_count office locations."""
        return LOCATIONS[self._rng.randint(0, location_count - 1) % len(LOCATIONS)]

    def is_part_time(self, percent: int) -> bool:
        return self._rng.randint(1, 100) <= percent

    def title(self, titles: Sequence[str]) -> str:
        return self._rng.choice(titles)

    def department(self, departments: Sequence[DepartmentTemplate]) -> DepartmentTemplate:
        return self._rng.choice(departments)

    def manager_slot(self, open_count: int) -> int:
        """Index into the list of managers that still have room for a report."""
        return self._rng.randint(0, open_count - 1)

    def duplicate_source(self, rows: Sequence[Row]) -> Row:
        return self._rng.choice(rows)

    def shuffle_rows(self, rows: List[Row]) -> None:
        """In-place, so the roster reads like an unsorted spreadsheet export."""
        self._rng.shuffle(rows)
