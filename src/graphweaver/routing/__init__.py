"""Edge routing: attachment planning and live path geometry."""

from __future__ import annotations

from graphweaver.routing.anchors import HandleLayout, anchor_id, anchor_offsets, default_handles, spread_offsets
from graphweaver.routing.frame import Frame
from graphweaver.routing.geometry import (
    AnchorProvider,
    EdgeGeometry,
    EdgeGeometryResolver,
    EdgeRef,
    LiveAnchor,
    NodeSnapshot,
    resolve_edge_geometry,
)
from graphweaver.routing.planner import (
    Attachment,
    AttachmentPlan,
    AttachmentPlanner,
    EndpointAttachment,
    plan_attachments,
)

__all__ = [
    "AnchorProvider",
    "Attachment",
    "AttachmentPlan",
    "AttachmentPlanner",
    "EdgeGeometry",
    "EdgeGeometryResolver",
    "EdgeRef",
    "EndpointAttachment",
    "Frame",
    "HandleLayout",
    "LiveAnchor",
    "NodeSnapshot",
    "anchor_id",
    "anchor_offsets",
    "default_handles",
    "plan_attachments",
    "resolve_edge_geometry",
    "spread_offsets",
]
