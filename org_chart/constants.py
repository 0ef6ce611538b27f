"""
Org Chart Core — Constants (Default Values)

All magic numbers live here as module-level defaults.
Runtime values are injected by the caller (SpanThresholds, LayoutOptions,
CameraConfig) and these are only their defaults.
"""

# --- Ingestion ---
REQUIRED_COLUMNS = ("employee_id", "employee_name", "department_name", "reports_to_id")
DEFAULT_FTE: float = 1.0

# --- Span of Control ---
DEFAULT_SOC_LOW: int = 3
DEFAULT_SOC_HIGH: int = 8

# --- Single-tree view ---
SYNTHETIC_ROOT_ID: str = "__organization__"
SYNTHETIC_ROOT_NAME: str = "Organization"

# --- Department Colors ---
NEUTRAL_COLOR: str = "#94a3b8"
DEPARTMENT_PALETTE = (
    "#3b82f6",
    "#ef4444",
    "#10b981",
    "#f59e0b",
    "#8b5cf6",
    "#ec4899",
    "#06b6d4",
    "#f97316",
    "#84cc16",
    "#6366f1",
    "#14b8a6",
    "#d946ef",
)

# --- Tree Layout (layout-space units) ---
NODE_WIDTH: float = 180.0
NODE_HEIGHT: float = 80.0
SIBLING_MARGIN: float = 40.0
LEVEL_GAP: float = 120.0

# --- Radial Layout ---
RING_WIDTH: float = 80.0
ROOT_MARKER_RADIUS: float = 8.0
MIN_MARKER_RADIUS: float = 1.5
MAX_MARKER_RADIUS: float = 6.0
MARKER_ARC_FACTOR: float = 0.4
MARKER_SPACING: float = 2 * MAX_MARKER_RADIUS + 4.0

# --- Forest placement ---
FOREST_GAP: float = 240.0

# --- Camera ---
ZOOM_IN_FACTOR: float = 1.2
ZOOM_OUT_FACTOR: float = 0.8
SAFETY_MARGIN: float = 50.0
FIT_PADDING: float = 20.0
MIN_FIT_EXTENT: float = 1.0

# --- Hit Testing ---
HIT_TOLERANCE_PX: float = 6.0
CULL_MARGIN_PX: float = 200.0

# --- Search ---
SEARCH_LIMIT: int = 10
SEARCH_MIN_LENGTH: int = 2
