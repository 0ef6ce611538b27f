"""
Layout Engine v1.0 — Test Scenarios

Covers:
  - Tree layout idempotence, separation, parent centring, depth bands
  - max_depth truncation, scoped roots, sibling ordering
  - 10,000-deep chain and 10,000-wide fan-out
  - Radial extents, ring width, marker sizes, wedge variant
  - Secondary tree placement never overlaps the primary
  - Layout service memoisation

Run:  py -3 -m org_chart.layout.test_layout
"""

from __future__ import annotations

import math
import os
import random
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from org_chart.builder import build_forest
from org_chart.hashing import layout_hash
from org_chart.layout import (
    LAYOUT_RADIAL,
    LAYOUT_TREE,
    LayoutOptions,
    LayoutRootError,
    LayoutService,
    VARIANT_WEDGE,
    WEIGHT_LEAVES,
    radial_layout,
    tree_layout,
)

EPS = 1e-6


def _row(eid, manager="", dept="Engineering"):
    return {
        "employee_id": eid,
        "employee_name": f"Person {eid}",
        "reports_to_id": manager,
        "department_name": dept,
    }


def _random_forest(n=400, seed=7):
    rng = random.Random(seed)
    depts = ["Engineering", "Sales", "Finance", "People"]
    rows = [_row("0", "", "Executive")]
    for i in range(1, n):
        rows.append(_row(str(i), str(rng.randint(max(0, i - 40), i - 1)), rng.choice(depts)))
    return build_forest(rows)


def _two_tree_forest():
    rows = [_row(str(i), str(i // 3) if i else "") for i in range(40)]
    rows += [_row("x0", "missing"), _row("x1", "x0"), _row("x2", "x0"), _row("y0", "gone")]
    return build_forest(rows)


# ---------------------------------------------------------------------------
# Tree layout
# ---------------------------------------------------------------------------

def test_tree_idempotent():
    forest = _random_forest()
    a = tree_layout(forest)
    b = tree_layout(forest)
    assert layout_hash(a) == layout_hash(b)
    assert [(p.x, p.y) for p in a.positions.values()] == [(p.x, p.y) for p in b.positions.values()]


def test_tree_covers_every_node_once():
    forest = _random_forest()
    layout = tree_layout(forest)
    assert len(layout.positions) == forest.root_node.size
    assert len(layout.edges) == forest.root_node.size - 1
    assert list(layout.positions)[0] == forest.root


def test_tree_no_overlap_per_level():
    forest = _random_forest()
    layout = tree_layout(forest)
    gap = layout.options.node_width + layout.options.sibling_margin
    levels = {}
    for p in layout.positions.values():
        levels.setdefault(p.depth, []).append(p.x)
    for xs in levels.values():
        xs.sort()
        for left, right in zip(xs, xs[1:]):
            assert right - left >= gap - EPS


def test_tree_parent_centered_over_children():
    forest = _random_forest()
    layout = tree_layout(forest)
    for nid, pos in layout.positions.items():
        children = forest.nodes[nid].children
        if not children:
            continue
        mean = sum(layout.positions[c].x for c in children) / len(children)
        assert abs(pos.x - mean) < EPS


def test_tree_depth_bands():
    forest = _random_forest()
    layout = tree_layout(forest)
    assert layout.positions[forest.root].x == 0.0
    for p in layout.positions.values():
        assert p.y == p.depth * 120.0
    assert layout.max_depth == max(p.depth for p in layout.positions.values())
    assert sum(layout.depth_counts.values()) == len(layout.positions)


def test_tree_bounds_contain_cards():
    forest = _random_forest()
    layout = tree_layout(forest)
    b = layout.bounds
    for p in layout.positions.values():
        assert b.min_x <= p.x - 90 and p.x + 90 <= b.max_x
        assert b.min_y <= p.y - 40 and p.y + 40 <= b.max_y


def test_tree_max_depth_truncates():
    forest = _random_forest()
    layout = tree_layout(forest, LayoutOptions(max_depth=1))
    assert len(layout.positions) == 1 + len(forest.root_node.children)
    assert layout.max_depth == 1
    only_root = tree_layout(forest, LayoutOptions(max_depth=0))
    assert list(only_root.positions) == [forest.root]
    assert only_root.bounds.width == 180.0


def test_tree_sibling_order_by_department():
    rows = [_row("r"), _row("s", "r", "Sales"), _row("e", "r", "Engineering")]
    forest = build_forest(rows)
    layout = tree_layout(forest)
    assert layout.positions["e"].x < layout.positions["s"].x
    reverse = LayoutOptions(sibling_key=lambda node: -ord(node.department[0]))
    flipped = tree_layout(forest, reverse)
    assert flipped.positions["s"].x < flipped.positions["e"].x


def test_tree_scoped_root():
    forest = _random_forest()
    sub = forest.root_node.children[0]
    layout = tree_layout(forest, LayoutOptions(root_id=sub))
    assert layout.roots == (sub,)
    assert len(layout.positions) == forest.nodes[sub].size
    assert layout.positions[sub].depth == 0


def test_unknown_root_rejected():
    forest = _random_forest(20)
    try:
        tree_layout(forest, LayoutOptions(root_id="nobody"))
        raise AssertionError("Expected LayoutRootError")
    except LayoutRootError as exc:
        assert exc.root_id == "nobody"


def test_tree_deep_chain():
    n = 10_000
    rows = [_row("0")] + [_row(str(i), str(i - 1)) for i in range(1, n)]
    layout = tree_layout(build_forest(rows))
    assert len(layout.positions) == n
    assert all(p.x == 0.0 for p in layout.positions.values())
    assert layout.positions[str(n - 1)].y == (n - 1) * 120.0


def test_tree_wide_fan_out():
    n = 10_000
    rows = [_row("root")] + [_row(str(i), "root") for i in range(n)]
    layout = tree_layout(build_forest(rows))
    xs = sorted(p.x for p in layout.positions.values() if p.depth == 1)
    assert abs(xs[0] + xs[-1]) < EPS
    assert abs((xs[-1] - xs[0]) - (n - 1) * 220.0) < 1e-3


# ---------------------------------------------------------------------------
# Radial layout
# ---------------------------------------------------------------------------

def test_radial_idempotent():
    forest = _random_forest()
    assert layout_hash(radial_layout(forest)) == layout_hash(radial_layout(forest))


def test_radial_extent_proportional_to_size():
    forest = _random_forest()
    layout = radial_layout(forest)
    total = forest.root_node.size
    for nid, p in layout.positions.items():
        expected = 2 * math.pi * forest.nodes[nid].size / total
        assert abs((p.angle_end - p.angle_start) - expected) < 1e-9


def test_radial_children_nested_in_parent():
    forest = _random_forest()
    layout = radial_layout(forest)
    for nid, p in layout.positions.items():
        cursor = p.angle_start
        for cid in sorted(forest.nodes[nid].children, key=lambda c: layout.positions[c].angle_start):
            child = layout.positions[cid]
            assert child.angle_start >= cursor - 1e-9
            assert child.angle_end <= p.angle_end + 1e-9
            cursor = child.angle_end


def test_radial_geometry():
    forest = _random_forest()
    layout = radial_layout(forest)
    root = layout.positions[forest.root]
    assert (root.x, root.y) == (0.0, 0.0)
    assert root.marker_radius == 8.0
    for p in layout.positions.values():
        assert abs(p.radius - p.depth * layout.ring_width) < EPS
        assert abs(math.hypot(p.x, p.y) - p.radius) < EPS
        if p.depth:
            assert 1.5 <= p.marker_radius <= 6.0


def test_radial_twelve_oclock_is_zero():
    rows = [_row("r"), _row("a", "r")]
    layout = radial_layout(build_forest(rows))
    a = layout.positions["a"]
    # single child: its wedge is half the disc starting at 12 o'clock
    assert abs(a.angle - math.pi / 2) < EPS
    assert abs(a.x - layout.ring_width) < EPS
    assert abs(a.y) < EPS


def test_radial_ring_width_grows_for_crowded_ring():
    rows = [_row("r")] + [_row(str(i), "r") for i in range(100)]
    layout = radial_layout(build_forest(rows))
    assert abs(layout.ring_width - 100 * 16.0 / (2 * math.pi)) < EPS
    sparse = radial_layout(build_forest(rows[:4]))
    assert sparse.ring_width == 80.0


def test_radial_leaf_weight():
    rows = [_row("r"), _row("a", "r"), _row("b", "r"), _row("a1", "a"), _row("a2", "a"), _row("a3", "a")]
    layout = radial_layout(build_forest(rows), LayoutOptions(weight=WEIGHT_LEAVES))
    a = layout.positions["a"]
    b = layout.positions["b"]
    assert abs((a.angle_end - a.angle_start) - 2 * math.pi * 3 / 4) < 1e-9
    assert abs((b.angle_end - b.angle_start) - 2 * math.pi / 4) < 1e-9


def test_wedge_sectors_equal_per_department():
    rows = [_row("r", "", "Executive"), _row("big", "r", "Engineering"), _row("small", "r", "Sales")]
    rows += [_row(f"e{i}", "big", "Engineering") for i in range(30)]
    options = LayoutOptions(variant=VARIANT_WEDGE)
    layout = radial_layout(build_forest(rows), options)
    big = layout.positions["big"]
    small = layout.positions["small"]
    assert abs(big.angle_start - 0.0) < EPS and abs(big.angle_end - math.pi) < EPS
    assert abs(small.angle_start - math.pi) < EPS and abs(small.angle_end - 2 * math.pi) < EPS

    # growing one department does not move the other
    rows += [_row(f"f{i}", "big", "Engineering") for i in range(50)]
    grown = radial_layout(build_forest(rows), options)
    assert grown.positions["small"].angle_start == small.angle_start
    assert grown.positions["small"].angle_end == small.angle_end


def test_radial_clusters_by_department():
    forest = _random_forest()
    layout = radial_layout(forest)
    names = [c.department for c in layout.clusters]
    assert names == sorted(names)
    assert sum(c.node_count for c in layout.clusters) == len(layout.positions) - 1
    for c in layout.clusters:
        assert 0.0 <= c.angle_start <= c.angle_end <= 2 * math.pi + 1e-9


# ---------------------------------------------------------------------------
# Forest placement
# ---------------------------------------------------------------------------

def _tree_bounds(layout, tree_index, half_w, half_h):
    xs = [p.x for p in layout.positions.values() if p.tree_index == tree_index]
    ys = [p.y for p in layout.positions.values() if p.tree_index == tree_index]
    return min(xs) - half_w, min(ys) - half_h, max(xs) + half_w, max(ys) + half_h


def test_secondary_trees_excluded_by_default():
    forest = _two_tree_forest()
    layout = tree_layout(forest)
    assert layout.roots == (forest.root,)
    assert "x0" not in layout.positions


def test_secondary_trees_placed_below_primary():
    forest = _two_tree_forest()
    layout = tree_layout(forest, LayoutOptions(include_secondary=True))
    assert layout.roots == (forest.root, "x0", "y0")
    assert len(layout.positions) == len(forest.nodes)
    primary = _tree_bounds(layout, 0, 90, 40)
    first = _tree_bounds(layout, 1, 90, 40)
    second = _tree_bounds(layout, 2, 90, 40)
    assert first[1] > primary[3]
    assert second[1] > primary[3]
    assert second[0] > first[2]


def test_secondary_discs_placed_right_of_primary():
    forest = _two_tree_forest()
    layout = radial_layout(forest, LayoutOptions(include_secondary=True))
    primary_root = layout.positions[forest.root]
    x0 = layout.positions["x0"]
    y0 = layout.positions["y0"]
    assert (primary_root.x, primary_root.y) == (0.0, 0.0)
    assert (x0.center_x, x0.center_y) == (x0.x, x0.y)
    primary_outer = (layout.max_depth + 0.5) * layout.ring_width
    assert x0.x > primary_outer + layout.options.forest_gap
    assert y0.x > x0.x
    for p in layout.positions.values():
        if p.tree_index:
            assert p.x > primary_outer


# ---------------------------------------------------------------------------
# Layout service
# ---------------------------------------------------------------------------

def test_service_memoises_per_version():
    forest = _random_forest(100)
    service = LayoutService()
    a = service.layout(forest, 1, LAYOUT_TREE)
    b = service.layout(forest, 1, LAYOUT_TREE, LayoutOptions())
    assert a is b
    assert service.hits == 1 and service.misses == 1

    service.layout(forest, 1, LAYOUT_RADIAL)
    assert len(service) == 2

    c = service.layout(forest, 2, LAYOUT_TREE)
    assert c is not a
    assert len(service) == 1
    assert layout_hash(c) == layout_hash(a)


def test_service_rejects_unknown_kind():
    service = LayoutService()
    try:
        service.layout(_random_forest(10), 1, "spiral")
        raise AssertionError("Expected ValueError")
    except ValueError:
        pass  # expected


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

_pass = 0
_fail = 0


def _test(name, fn):
    global _pass, _fail
    try:
        fn()
        print(f"  [PASS] {name}")
        _pass += 1
    except Exception as exc:
        print(f"  [FAIL] {name}: {exc}")
        _fail += 1


def main():
    tests = [
        ("Tree: idempotent", test_tree_idempotent),
        ("Tree: every node once", test_tree_covers_every_node_once),
        ("Tree: no overlap", test_tree_no_overlap_per_level),
        ("Tree: parent centred", test_tree_parent_centered_over_children),
        ("Tree: depth bands", test_tree_depth_bands),
        ("Tree: bounds", test_tree_bounds_contain_cards),
        ("Tree: max depth", test_tree_max_depth_truncates),
        ("Tree: sibling order", test_tree_sibling_order_by_department),
        ("Tree: scoped root", test_tree_scoped_root),
        ("Tree: unknown root", test_unknown_root_rejected),
        ("Tree: 10,000-deep chain", test_tree_deep_chain),
        ("Tree: 10,000-wide fan-out", test_tree_wide_fan_out),
        ("Radial: idempotent", test_radial_idempotent),
        ("Radial: proportional extents", test_radial_extent_proportional_to_size),
        ("Radial: children nested", test_radial_children_nested_in_parent),
        ("Radial: geometry", test_radial_geometry),
        ("Radial: 12 o'clock", test_radial_twelve_oclock_is_zero),
        ("Radial: ring width", test_radial_ring_width_grows_for_crowded_ring),
        ("Radial: leaf weight", test_radial_leaf_weight),
        ("Radial: wedge sectors", test_wedge_sectors_equal_per_department),
        ("Radial: clusters", test_radial_clusters_by_department),
        ("Forest: secondary excluded", test_secondary_trees_excluded_by_default),
        ("Forest: tree band", test_secondary_trees_placed_below_primary),
        ("Forest: radial row", test_secondary_discs_placed_right_of_primary),
        ("Service: memoisation", test_service_memoises_per_version),
        ("Service: unknown kind", test_service_rejects_unknown_kind),
    ]

    print(f"\nRunning {len(tests)} tests...\n")
    for name, fn in tests:
        _test(name, fn)

    print(f"\n{'='*60}")
    print(f"  {_pass} passed, {_fail} failed out of {_pass + _fail}")
    print(f"{'='*60}")

    if _fail > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
