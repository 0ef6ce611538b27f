# file: backend/main.py
"""
FastAPI Backend — Org Chart Viewer API v1.

In-memory sessions: one ViewerSession per session id, created on first
ingest. Every layout, camera and pointer request is answered from the
session's committed forest and cached layouts.

Endpoints:
  POST /sessions/{id}/ingest        — build forest from rows (422 on fatal)
  GET  /sessions/{id}/forest        — full forest
  PUT  /sessions/{id}/thresholds    — change span thresholds (no rebuild)
  PUT  /sessions/{id}/view          — view, variant, scope and filters
  DELETE /sessions/{id}            — drop a session
  GET  /sessions/{id}/layout        — positioned layout + camera transform
  POST /sessions/{id}/camera        — zoom / pan / reset / fit / set
  POST /sessions/{id}/pointer       — move / down / up / leave
  GET  /sessions/{id}/search        — name search
  GET  /sessions/{id}/nodes/{node}  — node details
  GET  /sessions/{id}/diagnostics   — forest health
  GET  /sessions/{id}/metrics       — latency + cache metrics
  POST /generate                    — synthetic roster
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# Add project root to path for core imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from org_chart.domain_types import SpanThresholds
from org_chart.metrics import span_distribution
from org_chart.layout import LayoutRootError
from viewer_runtime import NoForestError, UnknownNodeError, ViewerSession, collect_metrics
from viewer_runtime.session import CAMERA_OPS, POINTER_KINDS

from roster_generator import GeneratorInvariantError, RosterSpec, compile_roster

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")
VIEWPORT_WIDTH = float(os.environ.get("VIEWPORT_WIDTH", "1280"))
VIEWPORT_HEIGHT = float(os.environ.get("VIEWPORT_HEIGHT", "800"))
MAX_SESSIONS = max(1, int(os.environ.get("MAX_SESSIONS", "100")))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="OrgChart API",
    version="1.0.0",
    description="Org chart hierarchy, layout and viewport API",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        FRONTEND_URL,
        "http://localhost:3000",
        "http://localhost:3001",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_SESSIONS: Dict[str, ViewerSession] = {}

# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------


class IngestRequest(BaseModel):
    rows: List[Dict[str, Any]]
    low: Optional[int] = None
    high: Optional[int] = None


class ThresholdsRequest(BaseModel):
    low: int
    high: int


class ViewRequest(BaseModel):
    view: str = "tree"
    variant: Optional[str] = None
    hit_mode: Optional[str] = None
    department: Optional[str] = None
    subsidiary: Optional[str] = None
    location: Optional[str] = None
    max_depth: Optional[int] = None
    include_secondary: bool = False


class CameraRequest(BaseModel):
    op: str
    dx: Optional[float] = None
    dy: Optional[float] = None
    factor: Optional[float] = None
    pivot_x: Optional[float] = None
    pivot_y: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None
    k: Optional[float] = None
    padding: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class PointerRequest(BaseModel):
    kind: str
    x: float = 0.0
    y: float = 0.0


class GenerateRequest(BaseModel):
    employee_count: int = 100
    department_count: int = 4
    max_span: int = 8
    location_count: int = 3
    part_time_percent: int = 0
    orphan_count: int = 0
    cycle_size: int = 0
    duplicate_count: int = 0
    seed: int = 42


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _get_session(session_id: str) -> ViewerSession:
    session = _SESSIONS.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id!r}")
    return session


def _create_session(session_id: str) -> ViewerSession:
    """Register a new session, evicting the oldest once MAX_SESSIONS is reached."""
    while len(_SESSIONS) >= MAX_SESSIONS:
        oldest = next(iter(_SESSIONS))
        del _SESSIONS[oldest]
        logger.info("Evicted session %s", oldest)
    session = ViewerSession(session_id, width=VIEWPORT_WIDTH, height=VIEWPORT_HEIGHT)
    _SESSIONS[session_id] = session
    logger.info("Created session %s", session_id)
    return session


def _require_forest(session: ViewerSession) -> None:
    if not session.has_forest:
        raise HTTPException(
            status_code=409,
            detail=str(NoForestError(session.session_id)),
        )


def _forest_summary(session: ViewerSession) -> dict:
    forest = session.forest
    return {
        "session_id": session.session_id,
        "version": session.version,
        "root": forest.root,
        "secondary_roots": list(forest.secondary_roots),
        "stats": forest.stats.to_dict(),
        "warnings": forest.warnings,
        "thresholds": {"low": session.thresholds.low, "high": session.thresholds.high},
        "transform": session.camera.transform.to_dict(),
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.post("/sessions/{session_id}/ingest")
def ingest(session_id: str, req: IngestRequest):
    """
    Build a forest from parsed rows. Fatal ingestion errors return 422
    and leave any previously committed forest in place. Invalid
    thresholds return 400 before any session is created.
    """
    session = _SESSIONS.get(session_id)

    thresholds = None
    if req.low is not None or req.high is not None:
        current = session.thresholds if session is not None else SpanThresholds()
        try:
            thresholds = SpanThresholds(
                low=req.low if req.low is not None else current.low,
                high=req.high if req.high is not None else current.high,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    if session is None:
        session = _create_session(session_id)
    if thresholds is not None:
        session.set_thresholds(thresholds.low, thresholds.high)

    result = session.ingest(req.rows)
    if not result.ok:
        raise HTTPException(status_code=422, detail={"errors": list(result.errors)})
    return _forest_summary(session)


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str):
    _get_session(session_id)
    del _SESSIONS[session_id]
    logger.info("Deleted session %s", session_id)
    return {"deleted": session_id, "sessions": len(_SESSIONS)}


@app.get("/sessions/{session_id}/forest")
def get_forest(session_id: str):
    session = _get_session(session_id)
    _require_forest(session)
    doc = session.forest.to_dict(session.thresholds)
    doc["version"] = session.version
    return doc


@app.put("/sessions/{session_id}/thresholds")
def put_thresholds(session_id: str, req: ThresholdsRequest):
    session = _get_session(session_id)
    try:
        thresholds = session.set_thresholds(req.low, req.high)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    result: Dict[str, Any] = {"low": thresholds.low, "high": thresholds.high}
    if session.has_forest:
        result["span_distribution"] = span_distribution(session.forest, thresholds)
    return result


@app.put("/sessions/{session_id}/view")
def put_view(session_id: str, req: ViewRequest):
    session = _get_session(session_id)
    try:
        session.update_view(
            req.view,
            variant=req.variant,
            hit_mode=req.hit_mode,
            department=req.department,
            location=req.location,
            max_depth=req.max_depth,
            include_secondary=req.include_secondary,
            subsidiary=req.subsidiary,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {
        "view": session.view,
        "variant": session.variant,
        "hit_mode": session.hit_mode,
        "department": session.department,
        "subsidiary": session.subsidiary,
        "location": session.location,
        "max_depth": session.max_visible_depth,
        "include_secondary": session.include_secondary,
        "transform": session.camera.transform.to_dict(),
    }


@app.get("/sessions/{session_id}/layout")
def get_layout(session_id: str, visible_only: bool = False):
    """
    Positioned layout for the active view. visible_only culls nodes
    outside the viewport (plus margin) under the current camera.
    """
    session = _get_session(session_id)
    _require_forest(session)
    try:
        layout = session.layout()
    except LayoutRootError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    doc = layout.to_dict()
    if visible_only:
        keep = set(session.visible())
        doc["positions"] = [p for p in doc["positions"] if p["node_id"] in keep]
    forest = session.forest
    doc["dimmed"] = [
        nid for nid in layout.positions if session.is_dimmed(forest.nodes[nid])
    ]
    doc["transform"] = session.camera.transform.to_dict()
    doc["selected_id"] = session.selected_id
    doc["hover_id"] = session.hover.node_id
    return doc


@app.post("/sessions/{session_id}/camera")
def post_camera(session_id: str, req: CameraRequest):
    session = _get_session(session_id)
    if req.op == "viewport":
        if req.width is None or req.height is None:
            raise HTTPException(status_code=400, detail="viewport requires width and height")
        try:
            session.set_viewport(req.width, req.height)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return session.camera.transform.to_dict()

    if req.op not in CAMERA_OPS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown camera op {req.op!r}. Valid ops: {sorted(CAMERA_OPS + ('viewport',))}",
        )
    params = {
        name: value
        for name, value in req.model_dump(exclude={"op", "width", "height"}).items()
        if value is not None
    }
    transform = session.camera_op(req.op, **params)
    return transform.to_dict()


@app.post("/sessions/{session_id}/pointer")
def post_pointer(session_id: str, req: PointerRequest):
    session = _get_session(session_id)
    _require_forest(session)
    if req.kind not in POINTER_KINDS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown pointer kind {req.kind!r}. Valid kinds: {list(POINTER_KINDS)}",
        )
    outcome = session.pointer(req.kind, req.x, req.y)
    doc = outcome.to_dict()
    doc["selected_id"] = session.selected_id
    return doc


@app.get("/sessions/{session_id}/search")
def search(session_id: str, q: str = ""):
    session = _get_session(session_id)
    _require_forest(session)
    return {"query": q, "results": session.search(q)}


@app.get("/sessions/{session_id}/nodes/{node_id}")
def get_node(session_id: str, node_id: str):
    session = _get_session(session_id)
    _require_forest(session)
    try:
        return session.node_details(node_id)
    except UnknownNodeError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown node {exc.node_id!r}")


@app.get("/sessions/{session_id}/diagnostics")
def get_diagnostics(session_id: str):
    session = _get_session(session_id)
    _require_forest(session)
    return session.get_diagnostics()


@app.get("/sessions/{session_id}/metrics")
def get_metrics(session_id: str):
    session = _get_session(session_id)
    _require_forest(session)
    return collect_metrics(session).to_dict()


@app.post("/generate")
def generate(req: GenerateRequest):
    """Deterministic synthetic roster. Same parameters + seed → same rows."""
    try:
        spec = RosterSpec(
            employee_count=req.employee_count,
            department_count=req.department_count,
            max_span=req.max_span,
            location_count=req.location_count,
            part_time_percent=req.part_time_percent,
            orphan_count=req.orphan_count,
            cycle_size=req.cycle_size,
            duplicate_count=req.duplicate_count,
        )
        rows = compile_roster(spec, req.seed)
    except (ValueError, GeneratorInvariantError) as exc:
        logger.warning("Roster generation failed for seed %d: %s", req.seed, exc)
        raise HTTPException(status_code=400, detail=f"Generation failed: {exc}")
    return {
        "metadata": {"seed": req.seed, "spec": spec.to_dict(), "row_count": len(rows)},
        "rows": rows,
    }


@app.get("/health")
def health():
    return {"status": "ok", "version": "1.0.0", "sessions": len(_SESSIONS)}
