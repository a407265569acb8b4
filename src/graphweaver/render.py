"""Render model: the hand-off from layout and planning to any renderer.

Combines a ``LayoutResult`` with an ``AttachmentPlan`` into the shape a
rendering layer consumes:

  nodes: id, kind, parent-relative box, parent id, handle counts, z-order
  edges: id, endpoints, kind, attachment, display label, marker id

Edges whose endpoints are missing from the layout are omitted here; they
were already skipped by the planner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from graphweaver.ir.model import Edge
from graphweaver.layout.types import LayoutResult
from graphweaver.routing.anchors import HandleLayout
from graphweaver.routing.geometry import EdgeRef, NodeSnapshot, marker_id
from graphweaver.routing.planner import Attachment, AttachmentPlan, plan_attachments
from graphweaver.types import EdgeKind, NodeKind

logger = logging.getLogger(__name__)

GROUPING_Z: int = 0
NODE_Z: int = 100

DEFAULT_EDGE_LABELS: dict[EdgeKind, str] = {
    EdgeKind.Include: "<<include>>",
    EdgeKind.Extend: "<<extend>>",
}


def default_label(kind: EdgeKind) -> str | None:
    return DEFAULT_EDGE_LABELS.get(kind)


@dataclass
class RenderNode:
    id: str
    label: str
    kind: NodeKind
    x: float
    y: float
    width: float
    height: float
    parent_id: str | None = None
    handle_layout: HandleLayout = field(default_factory=HandleLayout)
    z_index: int = NODE_Z

    @property
    def extent(self) -> str | None:
        """Parented nodes are confined to their parent's box."""
        return "parent" if self.parent_id is not None else None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.id,
            "label": self.label,
            "kind": self.kind.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
        if self.parent_id is not None:
            data["parentId"] = self.parent_id
            data["extent"] = self.extent
        data["handleCounts"] = self.handle_layout.to_dict()
        data["zIndex"] = self.z_index
        return data


@dataclass
class RenderEdge:
    id: str
    source: str
    target: str
    kind: EdgeKind
    attachment: Attachment
    label: str | None = None
    marker_id: str = ""

    def to_ref(self) -> EdgeRef:
        return EdgeRef(id=self.id, source=self.source, target=self.target, attachment=self.attachment)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "kind": self.kind.value,
            "attachment": self.attachment.to_dict(),
            "markerId": self.marker_id,
        }
        if self.label:
            data["label"] = self.label
        return data


@dataclass
class RenderModel:
    nodes: list[RenderNode] = field(default_factory=list)
    edges: list[RenderEdge] = field(default_factory=list)

    def node_map(self) -> dict[str, RenderNode]:
        return {n.id: n for n in self.nodes}

    def snapshot(self) -> dict[str, NodeSnapshot]:
        """Current geometry as the resolver consumes it."""
        return {
            n.id: NodeSnapshot(id=n.id, x=n.x, y=n.y, width=n.width, height=n.height, parent_id=n.parent_id)
            for n in self.nodes
        }

    def edge_refs(self) -> list[EdgeRef]:
        return [e.to_ref() for e in self.edges]

    def to_dict(self) -> dict[str, object]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


def _depths(result: LayoutResult) -> dict[str, int]:
    parents = {n.id: n.parent_id for n in result.nodes}
    depths: dict[str, int] = {}
    for node_id in parents:
        depth = 0
        current = parents.get(node_id)
        seen = {node_id}
        while current is not None and current in parents and current not in seen:
            seen.add(current)
            depth += 1
            current = parents[current]
        depths[node_id] = depth
    return depths


def build_render_model(
    result: LayoutResult,
    plan: AttachmentPlan | None = None,
    canvas_id: str = "rf",
) -> RenderModel:
    """Assemble the render model; parents are listed before their children."""
    plan = plan or plan_attachments(result)
    depths = _depths(result)

    nodes: list[RenderNode] = []
    for node in sorted(result.nodes, key=lambda n: depths[n.id]):
        depth = depths[node.id]
        z_index = GROUPING_Z + depth if node.kind is NodeKind.Grouping else NODE_Z + depth
        nodes.append(
            RenderNode(
                id=node.id,
                label=node.label,
                kind=node.kind,
                x=node.x,
                y=node.y,
                width=node.width,
                height=node.height,
                parent_id=node.parent_id,
                handle_layout=plan.handle_layouts.get(node.id, HandleLayout()),
                z_index=z_index,
            )
        )

    edges: list[RenderEdge] = []
    for edge in result.edges:
        attachment = plan.attachments.get(edge.id)
        if attachment is None:
            logger.debug("edge %s has no attachment; omitted from the render model", edge.id)
            continue
        edges.append(
            RenderEdge(
                id=edge.id,
                source=edge.source,
                target=edge.target,
                kind=edge.kind,
                attachment=attachment,
                label=edge.label or default_label(edge.kind),
                marker_id=marker_id(canvas_id, edge.id, attachment.target.side),
            )
        )
    return RenderModel(nodes=nodes, edges=edges)


def edit_edge_label(edges: list[Edge], edge_id: str, text: str | None) -> list[Edge]:
    """Return a new edge list with ``edge_id``'s label replaced.

    The text is trimmed; blank text clears the label. Unknown ids leave the
    list unchanged.
    """
    value = (text or "").strip() or None
    return [replace(edge, label=value) if edge.id == edge_id else edge for edge in edges]
