"""
Viewer Session — orchestrates forest, layouts, cameras and pointer state.

One session per open chart. Input changes are applied in this order:
  1. ingest(rows)        — rebuild the forest wholesale, bump the version
  2. set_thresholds(...)  — swap thresholds only, never rebuild
  3. set_view / set_scope — change the layout request; layouts are
     (or update_view)       memoised by the LayoutService on
                            (forest version, request)
  4. camera / pointer     — O(1) transform updates and hit tests only

A fatal ingestion failure leaves the previously committed forest in place.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional, Set, Tuple

from org_chart.builder import build_forest
from org_chart.constants import SAFETY_MARGIN
from org_chart.diagnostics import compute_diagnostics
from org_chart.domain_types import IngestionFailure, OrgNode, ParseResult, SpanThresholds
from org_chart.layout import (
    LAYOUT_KINDS,
    LAYOUT_RADIAL,
    LAYOUT_TREE,
    LayoutOptions,
    LayoutResult,
    LayoutService,
    VARIANT_PROPORTIONAL,
    VARIANT_WEDGE,
)
from org_chart.scope import management_chain, matches_filter, scoped_root, search_nodes
from org_chart.viewport import (
    Camera,
    CameraConfig,
    HIT_MODE_MARKER,
    HIT_MODE_WEDGE,
    HitTester,
    HoverState,
    PointerController,
    PointerOutcome,
    RADIAL_CAMERA,
    TREE_CAMERA,
    Transform,
    visible_nodes,
)

logger = logging.getLogger(__name__)

CAMERA_OPS = ("zoom_in", "zoom_out", "zoom_by", "pan", "reset", "fit", "set")
POINTER_KINDS = ("move", "down", "up", "leave")


class NoForestError(Exception):
    """Raised when an operation needs a committed forest and none exists yet."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id!r} has no committed forest")


class UnknownNodeError(KeyError):
    """Raised when an identifier is not in the committed forest."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Unknown node {node_id!r}")


class ViewerSession:
    """
    Holds the last committed forest and everything the viewer layers on
    top of it: thresholds, view, scope, filters, cameras, selection and
    hover. Nothing here mutates a committed forest.
    """

    def __init__(
        self,
        session_id: str = "default",
        thresholds: SpanThresholds | None = None,
        width: float = 800.0,
        height: float = 600.0,
        tree_camera: CameraConfig = TREE_CAMERA,
        radial_camera: CameraConfig = RADIAL_CAMERA,
        layout_service: LayoutService | None = None,
    ) -> None:
        self.session_id = session_id
        self._thresholds = thresholds or SpanThresholds()
        self._service = layout_service or LayoutService()
        self._forest: Optional[ParseResult] = None
        self._version = 0
        self.last_failure: Optional[IngestionFailure] = None
        self.last_build_ms = 0.0

        self.view = LAYOUT_TREE
        self.variant = VARIANT_PROPORTIONAL
        self.hit_mode = HIT_MODE_MARKER
        self.department: Optional[str] = None
        self.subsidiary: Optional[str] = None
        self.location: Optional[str] = None
        self.max_visible_depth: Optional[int] = None
        self.include_secondary = False

        self.cameras: Dict[str, Camera] = {
            LAYOUT_TREE: Camera(tree_camera, width, height),
            LAYOUT_RADIAL: Camera(radial_camera, width, height),
        }

        self.hover = HoverState()
        self.selected_id: Optional[str] = None
        self._controllers: Dict[str, Tuple[int, PointerController]] = {}
        self._fitted: Set[str] = set()

    # ------------------------------------------------------------------
    # Forest
    # ------------------------------------------------------------------

    @property
    def has_forest(self) -> bool:
        return self._forest is not None

    @property
    def forest(self) -> ParseResult:
        if self._forest is None:
            raise NoForestError(self.session_id)
        return self._forest

    @property
    def version(self) -> int:
        return self._version

    def ingest(self, rows) -> ParseResult | IngestionFailure:
        """Rebuild the forest from rows. Returns the builder's result unchanged."""
        start = time.perf_counter()
        result = build_forest(rows)
        self.last_build_ms = (time.perf_counter() - start) * 1000.0

        if not result.ok:
            self.last_failure = result
            logger.warning(
                "Session %s: ingestion failed (%s)",
                self.session_id, "; ".join(result.errors),
            )
            return result

        self._forest = result
        self._version += 1
        self.last_failure = None
        self.department = None
        self.subsidiary = None
        self._fitted.clear()
        self.selected_id = None
        self.hover = HoverState()
        self._controllers.clear()

        stats = result.stats
        logger.info(
            "Session %s: forest v%d built in %.1f ms (%d/%d rows, %d root(s), %d warning(s))",
            self.session_id, self._version, self.last_build_ms,
            stats.valid_rows, stats.total_rows, len(stats.roots),
            len(result.structural_warnings),
        )
        for warning in result.structural_warnings:
            logger.debug("Session %s: %s", self.session_id, warning.message)

        self.fit()
        return result

    # ------------------------------------------------------------------
    # Thresholds, view and scope
    # ------------------------------------------------------------------

    @property
    def thresholds(self) -> SpanThresholds:
        return self._thresholds

    def set_thresholds(self, low: int, high: int) -> SpanThresholds:
        """Classification is re-derived on read, so nothing is rebuilt."""
        self._thresholds = SpanThresholds(low=low, high=high)
        return self._thresholds

    def set_view(
        self,
        view: str,
        variant: Optional[str] = None,
        hit_mode: Optional[str] = None,
    ) -> None:
        self._check_view(view, variant, hit_mode)
        self._apply_view(view, variant, hit_mode)
        self._sync_camera()

    def set_scope(
        self,
        department: Optional[str] = None,
        location: Optional[str] = None,
        max_depth: Optional[int] = None,
        include_secondary: bool = False,
        subsidiary: Optional[str] = None,
    ) -> None:
        """Department and subsidiary scope the layout root; location only dims nodes."""
        self._check_scope(max_depth)
        self._apply_scope(department, location, max_depth, include_secondary, subsidiary)
        self._sync_camera()

    def update_view(
        self,
        view: str,
        variant: Optional[str] = None,
        hit_mode: Optional[str] = None,
        department: Optional[str] = None,
        location: Optional[str] = None,
        max_depth: Optional[int] = None,
        include_secondary: bool = False,
        subsidiary: Optional[str] = None,
    ) -> None:
        """set_view and set_scope in one step. Nothing changes if any value is rejected."""
        self._check_view(view, variant, hit_mode)
        self._check_scope(max_depth)
        self._apply_view(view, variant, hit_mode)
        self._apply_scope(department, location, max_depth, include_secondary, subsidiary)
        self._sync_camera()

    @staticmethod
    def _check_view(view: str, variant: Optional[str], hit_mode: Optional[str]) -> None:
        if view not in LAYOUT_KINDS:
            raise ValueError(f"Unknown view {view!r}")
        if variant is not None and variant not in (VARIANT_PROPORTIONAL, VARIANT_WEDGE):
            raise ValueError(f"Unknown radial variant {variant!r}")
        if hit_mode is not None and hit_mode not in (HIT_MODE_MARKER, HIT_MODE_WEDGE):
            raise ValueError(f"Unknown hit-test mode {hit_mode!r}")

    @staticmethod
    def _check_scope(max_depth: Optional[int]) -> None:
        if max_depth is not None and max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    def _apply_view(self, view: str, variant: Optional[str], hit_mode: Optional[str]) -> None:
        self.view = view
        if variant is not None:
            self.variant = variant
        if hit_mode is not None:
            self.hit_mode = hit_mode

    def _apply_scope(
        self,
        department: Optional[str],
        location: Optional[str],
        max_depth: Optional[int],
        include_secondary: bool,
        subsidiary: Optional[str],
    ) -> None:
        self.department = department or None
        self.subsidiary = subsidiary or None
        self.location = location or None
        self.max_visible_depth = max_depth
        self.include_secondary = include_secondary

    def layout_options(self, view: Optional[str] = None) -> LayoutOptions:
        # variant only affects radial layouts; keep it out of tree cache keys
        radial = (view or self.view) == LAYOUT_RADIAL
        return LayoutOptions(
            root_id=scoped_root(self.forest, self.department, self.subsidiary),
            max_depth=self.max_visible_depth,
            include_secondary=self.include_secondary,
            variant=self.variant if radial else VARIANT_PROPORTIONAL,
        )

    def layout(self, view: Optional[str] = None) -> LayoutResult:
        kind = view or self.view
        return self._service.layout(
            self.forest, self._version, kind, self.layout_options(kind),
        )

    @property
    def layout_service(self) -> LayoutService:
        return self._service

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------

    @property
    def camera(self) -> Camera:
        return self.cameras[self.view]

    def set_viewport(self, width: float, height: float) -> None:
        for camera in self.cameras.values():
            camera.set_viewport(width, height)

    def fit(self, padding: float = SAFETY_MARGIN) -> Transform:
        """Fit the active layout's bounds. No-op before the first forest."""
        if self._forest is None:
            return self.camera.transform
        layout = self.layout()
        self._fitted.add(self.view)
        self.camera.set_content_bounds(layout.bounds)
        return self.camera.fit_to_bounds(layout.bounds, padding)

    def camera_op(self, op: str, **params: float) -> Transform:
        camera = self.camera
        pivot = None
        if "pivot_x" in params and "pivot_y" in params:
            pivot = (params["pivot_x"], params["pivot_y"])

        if op == "zoom_in":
            return camera.zoom_in(pivot)
        if op == "zoom_out":
            return camera.zoom_out(pivot)
        if op == "zoom_by":
            return camera.zoom_by(params.get("factor", 1.0), pivot)
        if op == "pan":
            return camera.pan(params.get("dx", 0.0), params.get("dy", 0.0))
        if op == "reset":
            return camera.reset()
        if op == "fit":
            return self.fit(params.get("padding", SAFETY_MARGIN))
        if op == "set":
            t = camera.transform
            return camera.set_transform(Transform(
                params.get("x", t.x), params.get("y", t.y), params.get("k", t.k),
            ))
        raise ValueError(f"Unknown camera operation {op!r}")

    def _sync_camera(self) -> None:
        """Fit a view's camera the first time it is shown after an ingest."""
        if self._forest is None:
            return
        if self.view not in self._fitted:
            self.fit()
        else:
            self.camera.set_content_bounds(self.layout().bounds)

    # ------------------------------------------------------------------
    # Pointer, selection and hover
    # ------------------------------------------------------------------

    def controller(self) -> PointerController:
        """Controller for the active view, re-pointed when the layout changes."""
        layout = self.layout()
        entry = self._controllers.get(self.view)
        if entry is None:
            ctrl = PointerController(
                self.camera, HitTester(layout, self.hit_mode), self.hover, self._on_select,
            )
            self._controllers[self.view] = (id(layout), ctrl)
            return ctrl
        layout_id, ctrl = entry
        if layout_id != id(layout) or ctrl.hit_tester.mode != self.hit_mode:
            ctrl.set_hit_tester(HitTester(layout, self.hit_mode))
            self._controllers[self.view] = (id(layout), ctrl)
        ctrl.hover = self.hover
        return ctrl

    def pointer(self, kind: str, x: float = 0.0, y: float = 0.0) -> PointerOutcome:
        ctrl = self.controller()
        if kind == "move":
            return ctrl.move(x, y)
        if kind == "down":
            return ctrl.down(x, y)
        if kind == "up":
            return ctrl.up(x, y)
        if kind == "leave":
            return ctrl.leave()
        raise ValueError(f"Unknown pointer event {kind!r}")

    def select(self, node_id: Optional[str]) -> Optional[str]:
        if node_id is not None and node_id not in self.forest.nodes:
            raise UnknownNodeError(node_id)
        self.selected_id = node_id
        return node_id

    def navigate_to_manager(self) -> Optional[str]:
        """Move the selection to the selected node's manager, if it has one."""
        if self.selected_id is None:
            return None
        parent = self.forest.nodes[self.selected_id].parent_id
        if parent is not None:
            self.selected_id = parent
        return parent

    def _on_select(self, node_id: str) -> None:
        self.selected_id = node_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_dimmed(self, node: OrgNode) -> bool:
        return not matches_filter(node, location=self.location)

    def node_details(self, node_id: str) -> dict:
        node = self.forest.get(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        details = node.to_dict(self._thresholds)
        details["management_chain"] = management_chain(self.forest, node_id)
        details["direct_reports"] = [
            {"id": c.id, "employee_name": c.name, "department_name": c.department}
            for c in self.forest.children_of(node_id)
        ]
        details["dimmed"] = self.is_dimmed(node)
        details["selected"] = node_id == self.selected_id
        return details

    def search(self, query: str) -> List[dict]:
        return [
            {
                "id": n.id,
                "employee_name": n.name,
                "department_name": n.department,
                "job_title": n.record.job_title,
            }
            for n in search_nodes(self.forest, query)
        ]

    def visible(self) -> List[str]:
        camera = self.camera
        return visible_nodes(self.layout(), camera.transform, camera.width, camera.height)

    def get_diagnostics(self) -> dict:
        return compute_diagnostics(self.forest, self._thresholds)
