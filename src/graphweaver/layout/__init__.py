"""Layout: grid sub-layout, layered delegate and the adapter between them."""

from __future__ import annotations

from graphweaver.layout.engine import (
    LayoutAlgorithm,
    build_layout_graph,
    flatten_layout,
    full_layout,
    layout_options,
    run_layout,
    static_layout,
)
from graphweaver.layout.grid import (
    GRID_PADDING,
    LABEL_BAND,
    GridChild,
    compute_subgraph_layouts,
    justify_row,
    layout_subgraph,
    pack_rows,
)
from graphweaver.layout.layered import LayeredLayout
from graphweaver.layout.types import (
    Box,
    GridPlacement,
    LayoutEdgeSpec,
    LayoutGraph,
    LayoutNode,
    LayoutResult,
    Point,
    Rect,
    SubgraphMeta,
)

__all__ = [
    "GRID_PADDING",
    "LABEL_BAND",
    "Box",
    "GridChild",
    "GridPlacement",
    "LayeredLayout",
    "LayoutAlgorithm",
    "LayoutEdgeSpec",
    "LayoutGraph",
    "LayoutNode",
    "LayoutResult",
    "Point",
    "Rect",
    "SubgraphMeta",
    "build_layout_graph",
    "compute_subgraph_layouts",
    "flatten_layout",
    "full_layout",
    "justify_row",
    "layout_options",
    "layout_subgraph",
    "pack_rows",
    "run_layout",
    "static_layout",
]
