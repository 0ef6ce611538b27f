"""
OrgChart API — endpoint tests through FastAPI's TestClient.

Covers:
  - Health, ingest success, fatal ingest (422), unknown session (404), delete
  - Session without a committed forest (409)
  - Thresholds, view (atomic on rejection), department and subsidiary
    scope, layout, camera and pointer round trips
  - Search, node details, diagnostics, metrics
  - Deterministic /generate feeding /ingest

Run:  py -3 -m pytest backend/test_api.py
"""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from backend.main import app

client = TestClient(app)


ROWS = [
    {"employee_id": "1", "employee_name": "Ada Lovelace", "reports_to_id": "", "department_name": "Executive"},
    {"employee_id": "2", "employee_name": "Grace Hopper", "reports_to_id": "1", "department_name": "Engineering"},
    {"employee_id": "3", "employee_name": "Alan Turing", "reports_to_id": "1", "department_name": "Sales",
     "location": "Berlin"},
    {"employee_id": "4", "employee_name": "Linus Torvalds", "reports_to_id": "2", "department_name": "Engineering"},
    {"employee_id": "5", "employee_name": "Ken Thompson", "reports_to_id": "2", "department_name": "Engineering"},
    {"employee_id": "6", "employee_name": "Barbara Liskov", "reports_to_id": "9", "department_name": "Sales"},
]


def _ingest(session_id, rows=None):
    return client.post(f"/sessions/{session_id}/ingest", json={"rows": rows or ROWS})


# ---------------------------------------------------------------------------
# Ingest
# ---------------------------------------------------------------------------

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_ingest_success():
    r = _ingest("ingest-ok")
    assert r.status_code == 200
    body = r.json()
    assert body["root"] == "1"
    assert body["secondary_roots"] == ["6"]
    assert body["version"] == 1
    assert body["stats"]["valid_rows"] == 6
    assert any("unknown manager" in w for w in body["warnings"])


def test_ingest_fatal_returns_422():
    r = client.post("/sessions/ingest-bad/ingest", json={"rows": []})
    assert r.status_code == 422
    assert r.json()["detail"]["errors"]

    missing = [{"employee_id": "1", "employee_name": "A"}]
    r = client.post("/sessions/ingest-bad/ingest", json={"rows": missing})
    assert r.status_code == 422
    assert any("Missing required columns" in e for e in r.json()["detail"]["errors"])

    # the session exists but has never committed a forest
    assert client.get("/sessions/ingest-bad/layout").status_code == 409


def test_failed_reingest_keeps_forest():
    _ingest("keep")
    assert client.post("/sessions/keep/ingest", json={"rows": []}).status_code == 422
    r = client.get("/sessions/keep/forest")
    assert r.status_code == 200
    assert r.json()["version"] == 1
    assert set(r.json()["nodes"]) == {"1", "2", "3", "4", "5", "6"}


def test_unknown_session_404():
    assert client.get("/sessions/nobody/forest").status_code == 404
    assert client.put("/sessions/nobody/thresholds", json={"low": 1, "high": 2}).status_code == 404


def test_ingest_bad_thresholds_creates_no_session():
    r = client.post("/sessions/bad-thresholds/ingest", json={"rows": ROWS, "low": 9, "high": 2})
    assert r.status_code == 400
    assert client.get("/sessions/bad-thresholds/forest").status_code == 404


def test_delete_session():
    _ingest("doomed")
    r = client.delete("/sessions/doomed")
    assert r.status_code == 200
    assert r.json()["deleted"] == "doomed"
    assert client.get("/sessions/doomed/forest").status_code == 404
    assert client.delete("/sessions/doomed").status_code == 404


# ---------------------------------------------------------------------------
# Thresholds and view
# ---------------------------------------------------------------------------

def test_thresholds():
    _ingest("thresholds")
    r = client.put("/sessions/thresholds/thresholds", json={"low": 1, "high": 1})
    assert r.status_code == 200
    assert r.json()["span_distribution"]["high"] == 2

    forest = client.get("/sessions/thresholds/forest").json()
    assert forest["version"] == 1
    assert forest["nodes"]["1"]["soc_status"] == "high"

    bad = client.put("/sessions/thresholds/thresholds", json={"low": 5, "high": 2})
    assert bad.status_code == 400


def test_view_and_layout():
    _ingest("view")
    r = client.get("/sessions/view/layout")
    assert r.status_code == 200
    tree = r.json()
    assert tree["kind"] == "tree"
    assert {p["node_id"] for p in tree["positions"]} == {"1", "2", "3", "4", "5"}
    assert tree["selected_id"] is None

    r = client.put("/sessions/view/view", json={
        "view": "radial", "variant": "wedge", "include_secondary": True, "location": "Berlin",
    })
    assert r.status_code == 200
    assert r.json()["variant"] == "wedge"

    radial = client.get("/sessions/view/layout").json()
    assert radial["kind"] == "radial"
    assert radial["roots"] == ["1", "6"]
    assert "3" not in radial["dimmed"]
    assert "2" in radial["dimmed"]

    assert client.put("/sessions/view/view", json={"view": "sunburst"}).status_code == 400
    assert client.put("/sessions/view/view", json={"view": "tree", "max_depth": -1}).status_code == 400


def test_department_scope():
    _ingest("scope")
    client.put("/sessions/scope/view", json={"view": "tree", "department": "Engineering"})
    layout = client.get("/sessions/scope/layout").json()
    assert layout["roots"] == ["2"]
    assert {p["node_id"] for p in layout["positions"]} == {"2", "4", "5"}


def test_rejected_view_changes_nothing():
    _ingest("view-atomic")
    r = client.put("/sessions/view-atomic/view", json={"view": "radial", "max_depth": -1})
    assert r.status_code == 400
    layout = client.get("/sessions/view-atomic/layout").json()
    assert layout["kind"] == "tree"
    assert {p["node_id"] for p in layout["positions"]} == {"1", "2", "3", "4", "5"}

    r = client.put("/sessions/view-atomic/view", json={"view": "tree", "hit_mode": "lasso",
                                                       "department": "Sales"})
    assert r.status_code == 400
    assert client.get("/sessions/view-atomic/layout").json()["roots"] == ["1"]


def test_subsidiary_scope():
    rows = [dict(row) for row in ROWS]
    for row in rows:
        row["subsidiary_name"] = "Group"
    rows[1]["subsidiary_name"] = "Hopper Labs"
    rows[3]["subsidiary_name"] = "Hopper Labs"
    _ingest("subsidiary", rows)

    diag = client.get("/sessions/subsidiary/diagnostics").json()
    assert diag["subsidiaries"] == ["Group", "Hopper Labs"]
    assert client.get("/sessions/subsidiary/nodes/2").json()["subsidiary_name"] == "Hopper Labs"

    r = client.put("/sessions/subsidiary/view", json={"view": "tree", "subsidiary": "Hopper Labs"})
    assert r.status_code == 200
    assert r.json()["subsidiary"] == "Hopper Labs"
    layout = client.get("/sessions/subsidiary/layout").json()
    assert layout["roots"] == ["2"]
    assert {p["node_id"] for p in layout["positions"]} == {"2", "4", "5"}

    client.put("/sessions/subsidiary/view", json={"view": "tree"})
    assert client.get("/sessions/subsidiary/layout").json()["roots"] == ["1"]


# ---------------------------------------------------------------------------
# Camera and pointer
# ---------------------------------------------------------------------------

def test_camera_ops():
    _ingest("camera")
    fitted = client.post("/sessions/camera/camera", json={"op": "fit"}).json()
    zoomed = client.post("/sessions/camera/camera", json={"op": "zoom_in"}).json()
    assert zoomed["k"] > fitted["k"] or zoomed["k"] == 2.0

    r = client.post("/sessions/camera/camera", json={"op": "set", "k": 50})
    assert r.json()["k"] == 2.0

    r = client.post("/sessions/camera/camera", json={"op": "viewport", "width": 1024, "height": 768})
    assert r.status_code == 200
    bad = client.post("/sessions/camera/camera", json={"op": "viewport", "width": 0, "height": 768})
    assert bad.status_code == 400

    assert client.post("/sessions/camera/camera", json={"op": "spin"}).status_code == 400


def test_pointer_selects_node():
    _ingest("pointer")
    layout = client.get("/sessions/pointer/layout").json()
    t = layout["transform"]
    pos = next(p for p in layout["positions"] if p["node_id"] == "4")
    sx = pos["x"] * t["k"] + t["x"]
    sy = pos["y"] * t["k"] + t["y"]

    r = client.post("/sessions/pointer/pointer", json={"kind": "down", "x": sx, "y": sy})
    assert r.status_code == 200
    assert r.json()["action"] == "select"
    assert r.json()["selected_id"] == "4"

    assert client.get("/sessions/pointer/layout").json()["selected_id"] == "4"
    assert client.post("/sessions/pointer/pointer", json={"kind": "tap"}).status_code == 400


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def test_search_and_details():
    _ingest("query")
    r = client.get("/sessions/query/search", params={"q": "ada"})
    assert [h["id"] for h in r.json()["results"]] == ["1"]

    node = client.get("/sessions/query/nodes/4").json()
    assert node["management_chain"] == ["4", "2", "1"]
    assert client.get("/sessions/query/nodes/nobody").status_code == 404


def test_diagnostics_and_metrics():
    _ingest("diag")
    diag = client.get("/sessions/diag/diagnostics").json()
    assert diag["node_count"] == 6
    assert diag["secondary_tree_count"] == 1

    metrics = client.get("/sessions/diag/metrics").json()
    assert metrics["forest_version"] == 1
    assert metrics["laid_out_count"] == 5
    assert len(metrics["last_forest_hash"]) == 64


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

def test_generate_then_ingest():
    req = {"employee_count": 40, "orphan_count": 2, "cycle_size": 3, "seed": 7}
    first = client.post("/generate", json=req)
    assert first.status_code == 200
    doc = first.json()
    assert doc["metadata"]["row_count"] == 45
    assert client.post("/generate", json=req).json() == doc

    r = _ingest("generated", doc["rows"])
    assert r.status_code == 200
    assert len(r.json()["secondary_roots"]) == 3


def test_generate_invalid():
    assert client.post("/generate", json={"employee_count": 0}).status_code == 400


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
        ("Health", test_health),
        ("Ingest: success", test_ingest_success),
        ("Ingest: fatal 422", test_ingest_fatal_returns_422),
        ("Ingest: failure keeps forest", test_failed_reingest_keeps_forest),
        ("Session: unknown 404", test_unknown_session_404),
        ("Ingest: bad thresholds create no session", test_ingest_bad_thresholds_creates_no_session),
        ("Session: delete", test_delete_session),
        ("Thresholds", test_thresholds),
        ("View + layout", test_view_and_layout),
        ("Department scope", test_department_scope),
        ("View: rejected update changes nothing", test_rejected_view_changes_nothing),
        ("Subsidiary scope", test_subsidiary_scope),
        ("Camera ops", test_camera_ops),
        ("Pointer select", test_pointer_selects_node),
        ("Search + details", test_search_and_details),
        ("Diagnostics + metrics", test_diagnostics_and_metrics),
        ("Generate + ingest", test_generate_then_ingest),
        ("Generate: invalid", test_generate_invalid),
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
