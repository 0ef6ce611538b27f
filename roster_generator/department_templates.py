"""
Department Templates — Realistic department, title and name blueprints.

The compiler picks departments in order and names people from the pools
below. All data here is plain Python — no external deps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class DepartmentTemplate:
    """A department with its manager and individual-contributor titles."""

    name: str
    head_title: str
    manager_titles: Tuple[str, ...]
    member_titles: Tuple[str, ...]


EXECUTIVE = DepartmentTemplate(
    name="Executive",
    head_title="Chief Executive Officer",
    manager_titles=("Chief of Staff",),
    member_titles=("Executive Assistant",),
)

DEPARTMENTS: Tuple[DepartmentTemplate, ...] = (
    DepartmentTemplate(
        name="Engineering",
        head_title="VP Engineering",
        manager_titles=("Engineering Manager", "Staff Engineer", "Tech Lead"),
        member_titles=("Software Engineer", "Senior Software Engineer", "QA Engineer", "SRE"),
    ),
    DepartmentTemplate(
        name="Sales",
        head_title="VP Sales",
        manager_titles=("Sales Director", "Regional Sales Manager"),
        member_titles=("Account Executive", "Sales Development Rep", "Solutions Consultant"),
    ),
    DepartmentTemplate(
        name="Marketing",
        head_title="VP Marketing",
        manager_titles=("Marketing Manager", "Brand Lead"),
        member_titles=("Content Strategist", "Growth Analyst", "Designer"),
    ),
    DepartmentTemplate(
        name="Finance",
        head_title="Chief Financial Officer",
        manager_titles=("Controller", "FP&A Manager"),
        member_titles=("Accountant", "Financial Analyst", "Payroll Specialist"),
    ),
    DepartmentTemplate(
        name="People",
        head_title="VP People",
        manager_titles=("HR Business Partner", "Talent Lead"),
        member_titles=("Recruiter", "People Operations Specialist"),
    ),
    DepartmentTemplate(
        name="Operations",
        head_title="VP Operations",
        manager_titles=("Operations Manager", "Program Manager"),
        member_titles=("Operations Analyst", "Procurement Specialist", "Facilities Coordinator"),
    ),
    DepartmentTemplate(
        name="Customer Success",
        head_title="VP Customer Success",
        manager_titles=("Support Manager", "Customer Success Lead"),
        member_titles=("Support Engineer", "Customer Success Manager", "Onboarding Specialist"),
    ),
    DepartmentTemplate(
        name="Product",
        head_title="VP Product",
        manager_titles=("Group Product Manager", "Design Manager"),
        member_titles=("Product Manager", "Product Designer", "UX Researcher"),
    ),
)

LOCATIONS: Tuple[str, ...] = (
    "New York",
    "London",
    "Berlin",
    "Singapore",
    "Toronto",
    "Sydney",
    "Remote",
)

FIRST_NAMES: Tuple[str, ...] = (
    "Alex", "Sam", "Jordan", "Taylor", "Morgan", "Casey", "Riley", "Jamie",
    "Avery", "Quinn", "Rowan", "Sasha", "Kai", "Noa", "Priya", "Mateo",
    "Amara", "Hiro", "Lena", "Omar", "Ines", "Tomas", "Yara", "Elif",
)

LAST_NAMES: Tuple[str, ...] = (
    "Smith", "Garcia", "Chen", "Okafor", "Novak", "Silva", "Kim", "Patel",
    "Müller", "Rossi", "Haddad", "Nguyen", "Larsen", "Costa", "Ito", "Dubois",
)


def select_departments(count: int) -> List[DepartmentTemplate]:
    """First count templates; repeats get a numeric suffix."""
    result: List[DepartmentTemplate] = []
    for i in range(count):
        base = DEPARTMENTS[i % len(DEPARTMENTS)]
        cycle = i // len(DEPARTMENTS)
        if cycle:
            base = DepartmentTemplate(
                name=f"{base.name} {cycle + 1}",
                head_title=base.head_title,
                manager_titles=base.manager_titles,
                member_titles=base.member_titles,
            )
        result.append(base)
    return result
