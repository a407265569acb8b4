"""Layout delegate adapter.

Packages the graph model into the box-tree contract of a hierarchical
layered-graph-layout algorithm, awaits it, and flattens the result back
into parent-relative boxes. Grid sub-layout sizes and child placements are
authoritative over whatever the delegate returns for grouping containers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from graphweaver.config import LayoutConfig
from graphweaver.errors import LayoutComputationFailed
from graphweaver.ir.model import GraphModel
from graphweaver.layout.grid import LABEL_BAND, compute_subgraph_layouts
from graphweaver.layout.layered import LayeredLayout
from graphweaver.layout.sizing import node_size
from graphweaver.layout.types import (
    ALGORITHM_FIXED,
    ALGORITHM_LAYERED,
    OPT_ALGORITHM,
    OPT_DIRECTION,
    OPT_EDGE_ROUTING,
    OPT_HIERARCHY,
    OPT_PADDING,
    OPT_SPACING_BETWEEN_LAYERS,
    OPT_SPACING_COMPONENTS,
    OPT_SPACING_EDGE_EDGE,
    OPT_SPACING_NODE_NODE,
    Box,
    GridPlacement,
    LayoutEdgeSpec,
    LayoutGraph,
    LayoutNode,
    LayoutResult,
    SubgraphMeta,
)

logger = logging.getLogger(__name__)


class LayoutAlgorithm(Protocol):
    """Protocol that every hierarchical layout delegate must implement."""

    async def layout(self, graph: LayoutGraph) -> LayoutGraph:
        """Return an isomorphic box tree with x/y filled in (children relative to parent)."""
        ...


# ─── Input contract ──────────────────────────────────────────────────────────


def layout_options(config: LayoutConfig) -> dict[str, str]:
    spacing = config.spacing_px
    padding = config.padding
    return {
        OPT_ALGORITHM: ALGORITHM_LAYERED,
        OPT_DIRECTION: config.direction.value,
        OPT_SPACING_BETWEEN_LAYERS: f"{spacing:g}",
        OPT_SPACING_NODE_NODE: f"{max(120, spacing * 1.4):g}",
        OPT_SPACING_EDGE_EDGE: f"{max(80, spacing * 0.9):g}",
        OPT_SPACING_COMPONENTS: f"{max(120, spacing):g}",
        OPT_HIERARCHY: config.hierarchy.value,
        OPT_EDGE_ROUTING: "ORTHOGONAL",
        OPT_PADDING: f"[top={padding:g},left={padding:g},bottom={padding:g},right={padding:g}]",
    }


def build_layout_graph(
    model: GraphModel,
    config: LayoutConfig,
    subgraphs: dict[str, SubgraphMeta],
) -> LayoutGraph:
    """Build the delegate's input: a box per node nested by containment, plus edges."""
    boxes: dict[str, Box] = {}
    for node in model.nodes:
        if node.id in subgraphs:
            meta = subgraphs[node.id]
            box = Box(id=node.id, width=meta.width, height=meta.height, labels=[node.label])
            box.layout_options[OPT_ALGORITHM] = ALGORITHM_FIXED
        else:
            width, height = node_size(node, model.hint(node.id), config)
            box = Box(id=node.id, width=width, height=height, labels=[node.label])
            if node.is_grouping:
                pad = config.padding
                box.layout_options[OPT_PADDING] = (
                    f"[top={pad + LABEL_BAND:g},left={pad:g},bottom={pad:g},right={pad:g}]"
                )
        boxes[node.id] = box

    for meta in subgraphs.values():
        for placement in meta.placements:
            boxes[placement.child_id].x = placement.x
            boxes[placement.child_id].y = placement.y

    roots: list[Box] = []
    for node in model.nodes:
        parent_id = model.parent_of(node.id)
        if parent_id is None:
            roots.append(boxes[node.id])
        else:
            boxes[parent_id].children.append(boxes[node.id])

    for edge in model.dangling_edges():
        logger.debug("edge %s references a missing node; not sent to the layout delegate", edge.id)

    edges = [LayoutEdgeSpec(id=e.id, sources=[e.source], targets=[e.target]) for e in model.valid_edges()]
    return LayoutGraph(layout_options=layout_options(config), children=roots, edges=edges)


# ─── Output flattening ───────────────────────────────────────────────────────


def _placements_by_child(subgraphs: dict[str, SubgraphMeta]) -> dict[str, tuple[str, GridPlacement]]:
    result: dict[str, tuple[str, GridPlacement]] = {}
    for grouping_id, meta in subgraphs.items():
        for placement in meta.placements:
            result[placement.child_id] = (grouping_id, placement)
    return result


def flatten_layout(
    computed: LayoutGraph,
    model: GraphModel,
    subgraphs: dict[str, SubgraphMeta],
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """Flatten the delegate's nested result into parent-relative layout nodes."""
    config = config or LayoutConfig()
    placements = _placements_by_child(subgraphs)
    nodes: list[LayoutNode] = []
    seen: set[str] = set()

    def walk(box: Box, parent_id: str | None) -> None:
        node = model.node(box.id)
        if node is None:
            logger.debug("layout delegate returned unknown box %s", box.id)
            return
        parent = parent_id or model.parent_of(box.id)
        x, y = box.x or 0.0, box.y or 0.0
        width, height = box.width, box.height
        if box.id in subgraphs:
            width, height = subgraphs[box.id].width, subgraphs[box.id].height
        if box.id in placements:
            grouping_id, placement = placements[box.id]
            if grouping_id == parent:
                x, y = placement.x, placement.y
        nodes.append(
            LayoutNode(
                id=node.id,
                label=node.label,
                kind=node.kind,
                x=x,
                y=y,
                width=width,
                height=height,
                parent_id=parent,
            )
        )
        seen.add(node.id)
        for child in box.children:
            walk(child, box.id)

    for box in computed.children:
        walk(box, None)

    for node in model.nodes:
        if node.id in seen:
            continue
        logger.debug("layout delegate dropped node %s; restoring it", node.id)
        nodes.append(_static_node(model, node.id, config, subgraphs, placements))

    return LayoutResult(nodes=nodes, edges=list(model.edges), subgraphs=dict(subgraphs))


def _static_node(
    model: GraphModel,
    node_id: str,
    config: LayoutConfig,
    subgraphs: dict[str, SubgraphMeta],
    placements: dict[str, tuple[str, GridPlacement]],
) -> LayoutNode:
    node = model.node(node_id)
    assert node is not None
    if node_id in subgraphs:
        width, height = subgraphs[node_id].width, subgraphs[node_id].height
    else:
        width, height = node_size(node, model.hint(node_id), config)
    x = y = 0.0
    if node_id in placements:
        _, placement = placements[node_id]
        x, y = placement.x, placement.y
    return LayoutNode(
        id=node.id,
        label=node.label,
        kind=node.kind,
        x=x,
        y=y,
        width=width,
        height=height,
        parent_id=model.parent_of(node_id),
    )


def static_layout(model: GraphModel, config: LayoutConfig, subgraphs: dict[str, SubgraphMeta]) -> LayoutResult:
    """The "no auto-layout" path: grid placements where known, otherwise the origin."""
    placements = _placements_by_child(subgraphs)
    nodes = [_static_node(model, node.id, config, subgraphs, placements) for node in model.nodes]
    return LayoutResult(nodes=nodes, edges=list(model.edges), subgraphs=dict(subgraphs))


# ─── Entry point ─────────────────────────────────────────────────────────────


async def run_layout(
    model: GraphModel,
    config: LayoutConfig | None = None,
    algorithm: LayoutAlgorithm | None = None,
) -> LayoutResult:
    """Run one layout pass.

    Raises:
        LayoutComputationFailed: If the delegate rejects or raises. No
            partial result is returned.
    """
    config = config or LayoutConfig()
    subgraphs = compute_subgraph_layouts(model, config)
    if not config.auto_layout:
        return static_layout(model, config, subgraphs)

    graph = build_layout_graph(model, config, subgraphs)
    delegate = algorithm or LayeredLayout()
    try:
        computed = await delegate.layout(graph)
    except Exception as err:
        logger.warning("layout delegate failed: %s", err)
        raise LayoutComputationFailed(str(err) or type(err).__name__) from err
    return flatten_layout(computed, model, subgraphs, config)


def full_layout(
    model: GraphModel,
    config: LayoutConfig | None = None,
    algorithm: LayoutAlgorithm | None = None,
) -> LayoutResult:
    """Run one layout pass synchronously, for callers outside an event loop."""
    return asyncio.run(run_layout(model, config, algorithm))
