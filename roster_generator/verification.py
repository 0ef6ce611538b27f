"""
Verification Harness — Compile, build, and verify generated rosters.

Provides both single-spec verification and a suite of smoke tests when
run as __main__.
"""

from __future__ import annotations

from org_chart.builder import build_forest
from org_chart.diagnostics import compute_diagnostics
from org_chart.hashing import canonical_hash

from .compiler import GeneratorInvariantError, compile_roster
from .roster_spec import RosterSpec


def verify_generated_roster(spec: RosterSpec, seed: int) -> dict:
    """
    Compile a roster, build it into a forest, and return diagnostics.

    Returns:
        {
            "forest_hash": str,
            "diagnostics": dict,
            "row_count": int,
            "valid_rows": int,
            "root_count": int,
        }
    """
    rows = compile_roster(spec, seed)

    forest = build_forest(rows)
    if not forest.ok:
        raise GeneratorInvariantError(ValueError("; ".join(forest.errors)))

    return {
        "forest_hash": canonical_hash(forest),
        "diagnostics": compute_diagnostics(forest),
        "row_count": len(rows),
        "valid_rows": forest.stats.valid_rows,
        "root_count": len(forest.stats.roots),
    }


# ---------------------------------------------------------------------------
# CLI smoke tests
# ---------------------------------------------------------------------------

def _run_smoke_tests() -> None:
    """Run a suite of deterministic smoke tests."""
    specs = [
        ("clean_50", RosterSpec(employee_count=50)),
        ("wide_200", RosterSpec(employee_count=200, department_count=6, max_span=20)),
        ("defects_120", RosterSpec(
            employee_count=120, orphan_count=3, cycle_size=4, duplicate_count=5,
        )),
        ("self_loop_10", RosterSpec(employee_count=10, cycle_size=1)),
    ]

    seed = 42
    all_ok = True

    for label, spec in specs:
        print(f"\n{'-'*60}")
        print(f"  {label}  (seed={seed})")
        print(f"{'-'*60}")

        try:
            result = verify_generated_roster(spec, seed)
            print(f"  rows={result['row_count']} valid={result['valid_rows']} "
                  f"roots={result['root_count']}")
            for warning in result["diagnostics"]["warnings"][:5]:
                print(f"  warning: {warning}")

            # Determinism check: same spec+seed must produce identical hash
            result2 = verify_generated_roster(spec, seed)
            if result["forest_hash"] != result2["forest_hash"]:
                print("  FAIL: DETERMINISM FAILURE")
                all_ok = False
            else:
                print("  OK: Deterministic (hash stable)")
        except GeneratorInvariantError as exc:
            print(f"  FAIL: {exc}")
            all_ok = False

    print(f"\n{'='*60}")
    if all_ok:
        print("  ALL SMOKE TESTS PASSED")
    else:
        print("  SOME TESTS FAILED")
    print(f"{'='*60}")


if __name__ == "__main__":
    _run_smoke_tests()
