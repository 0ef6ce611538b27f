"""
Layout Engine — tree and radial strategies over a committed forest.
"""

from .forest import LayoutRootError, layout_forest
from .layout_types import (
    Bounds,
    DepartmentCluster,
    LAYOUT_KINDS,
    LAYOUT_RADIAL,
    LAYOUT_TREE,
    LayoutOptions,
    LayoutResult,
    NodePosition,
    Rect,
    VARIANT_PROPORTIONAL,
    VARIANT_WEDGE,
    WEIGHT_LEAVES,
    WEIGHT_SIZE,
    department_key,
)
from .radial_layout import RadialLayout, cartesian_to_polar, polar_to_cartesian, radial_layout
from .service import LayoutService, compute_layout
from .tree_layout import TreeLayout, tree_layout

__all__ = [
    "Bounds",
    "DepartmentCluster",
    "LAYOUT_KINDS",
    "LAYOUT_RADIAL",
    "LAYOUT_TREE",
    "LayoutOptions",
    "LayoutResult",
    "LayoutRootError",
    "LayoutService",
    "NodePosition",
    "RadialLayout",
    "Rect",
    "TreeLayout",
    "VARIANT_PROPORTIONAL",
    "VARIANT_WEDGE",
    "WEIGHT_LEAVES",
    "WEIGHT_SIZE",
    "cartesian_to_polar",
    "compute_layout",
    "department_key",
    "layout_forest",
    "polar_to_cartesian",
    "radial_layout",
    "tree_layout",
]
