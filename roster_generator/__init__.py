"""
Deterministic Roster Generator.

Produces replayable employee rosters for the org chart core, including
orphans, manager cycles and duplicate identifiers on request.
"""

from .compiler import compile_roster, GeneratorInvariantError
from .roster_rng import RosterRNG
from .exporter import export_roster
from .roster_spec import RosterSpec
from .verification import verify_generated_roster

__all__ = [
    "compile_roster",
    "GeneratorInvariantError",
    "RosterRNG",
    "export_roster",
    "RosterSpec",
    "verify_generated_roster",
]
