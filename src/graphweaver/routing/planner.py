"""Attachment planner: decides, once per layout pass, where every edge touches its nodes.

Steps:
  1. Classification (internal when both endpoints share their nearest grouping)
  2. Side selection (grid row/column deltas, grid position, or center deltas)
  3. Bucketing per (node, side, role), sorted by edge id
  4. Slot allocation (spreading table, then even spacing)
  5. Handle counts (kind baseline merged with the plan's demand)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from graphweaver.ir.model import Edge
from graphweaver.layout.types import GridPlacement, LayoutResult, Point, SubgraphMeta
from graphweaver.routing.anchors import HandleLayout, anchor_id, anchor_offsets, default_handles
from graphweaver.routing.frame import Frame
from graphweaver.types import Classification, NodeKind, Orientation, Role, Side

logger = logging.getLogger(__name__)

# Preferred axis wins unless the other axis is more than twice as long.
AXIS_BIAS: float = 0.5


@dataclass(frozen=True)
class EndpointAttachment:
    side: Side
    handle_id: str
    offset: float

    def to_dict(self) -> dict[str, object]:
        return {"side": self.side.value, "handleId": self.handle_id, "offset": self.offset}


@dataclass(frozen=True)
class Attachment:
    classification: Classification
    source: EndpointAttachment
    target: EndpointAttachment

    def endpoint(self, role: Role) -> EndpointAttachment:
        return self.source if role is Role.Source else self.target

    def to_dict(self) -> dict[str, object]:
        return {
            "classification": self.classification.value,
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
        }


@dataclass
class AttachmentPlan:
    attachments: dict[str, Attachment] = field(default_factory=dict)
    handle_layouts: dict[str, HandleLayout] = field(default_factory=dict)


def sides_from_centers(a: Point, b: Point) -> tuple[Side, Side]:
    """Sides facing each other for centers ``a`` → ``b``; ties go horizontal, rightward, downward."""
    dx, dy = b.x - a.x, b.y - a.y
    if abs(dx) >= abs(dy):
        return (Side.Right, Side.Left) if dx >= 0 else (Side.Left, Side.Right)
    return (Side.Bottom, Side.Top) if dy >= 0 else (Side.Top, Side.Bottom)


class AttachmentPlanner:
    """Plans side, slot and offset for both endpoints of every edge in a layout result."""

    def __init__(self, result: LayoutResult) -> None:
        self.result = result
        self.nodes = result.node_map()
        self.frame = Frame(self.nodes)
        self.subgraphs: dict[str, SubgraphMeta] = result.subgraphs
        self._hosts: dict[str, str | None] = {}
        self._placements: dict[str, tuple[str, GridPlacement]] = {}
        for grouping_id, meta in self.subgraphs.items():
            for placement in meta.placements:
                self._placements[placement.child_id] = (grouping_id, placement)

    # ─── Containment queries ─────────────────────────────────────────────

    def host_grouping(self, node_id: str) -> str | None:
        """Nearest grouping-kind ancestor of ``node_id``."""
        if node_id in self._hosts:
            return self._hosts[node_id]
        host: str | None = None
        node = self.nodes.get(node_id)
        current = node.parent_id if node is not None else None
        visited: set[str] = set()
        while current is not None and current not in visited:
            visited.add(current)
            parent = self.nodes.get(current)
            if parent is None:
                break
            if parent.kind is NodeKind.Grouping:
                host = current
                break
            current = parent.parent_id
        self._hosts[node_id] = host
        return host

    def placement(self, node_id: str) -> tuple[str, GridPlacement] | None:
        return self._placements.get(node_id)

    def classify(self, edge: Edge) -> Classification:
        host_source = self.host_grouping(edge.source)
        host_target = self.host_grouping(edge.target)
        if host_source is not None and host_source == host_target:
            return Classification.Internal
        return Classification.External

    # ─── Side selection ──────────────────────────────────────────────────

    def _center_or_origin(self, node_id: str) -> Point:
        return self.frame.center(node_id) or Point(0.0, 0.0)

    def internal_sides(self, source_id: str, target_id: str) -> tuple[Side, Side]:
        source_at = self.placement(source_id)
        target_at = self.placement(target_id)
        if source_at is not None and target_at is not None and source_at[0] == target_at[0]:
            d_row = target_at[1].row - source_at[1].row
            d_col = target_at[1].column - source_at[1].column
            if d_row == 0:
                return (Side.Right, Side.Left) if d_col >= 0 else (Side.Left, Side.Right)
            return (Side.Bottom, Side.Top) if d_row >= 0 else (Side.Top, Side.Bottom)
        return sides_from_centers(self._center_or_origin(source_id), self._center_or_origin(target_id))

    def external_side(self, node_id: str, other_id: str) -> Side:
        host = self.host_grouping(node_id)
        meta = self.subgraphs.get(host) if host is not None else None
        orientation = meta.orientation if meta is not None and meta.placements else None
        located = self.placement(node_id)
        placement = located[1] if located is not None and located[0] == host else None

        if placement is not None and meta is not None:
            if orientation is Orientation.Horizontal and meta.rows > 1:
                return Side.Top if placement.row <= (meta.rows - 1) / 2 else Side.Bottom
            if orientation is Orientation.Vertical and meta.max_per_row > 1:
                return Side.Left if placement.column <= (meta.max_per_row - 1) / 2 else Side.Right

        here = self._center_or_origin(node_id)
        there = self._center_or_origin(other_id)
        dx, dy = there.x - here.x, there.y - here.y
        vertical = Side.Bottom if dy >= 0 else Side.Top
        horizontal = Side.Right if dx >= 0 else Side.Left
        if orientation is Orientation.Horizontal:
            return vertical if abs(dy) >= abs(dx) * AXIS_BIAS else horizontal
        if orientation is Orientation.Vertical:
            return horizontal if abs(dx) >= abs(dy) * AXIS_BIAS else vertical
        return horizontal if abs(dx) >= abs(dy) else vertical

    # ─── Planning ────────────────────────────────────────────────────────

    def plan(self) -> AttachmentPlan:
        sides: dict[str, tuple[Classification, Side, Side]] = {}
        buckets: dict[tuple[str, Side, Role], list[str]] = {}

        for edge in self.result.edges:
            if edge.source not in self.nodes or edge.target not in self.nodes:
                logger.debug("edge %s has a missing endpoint; no attachment planned", edge.id)
                continue
            classification = self.classify(edge)
            if classification is Classification.Internal:
                source_side, target_side = self.internal_sides(edge.source, edge.target)
            else:
                source_side = self.external_side(edge.source, edge.target)
                target_side = self.external_side(edge.target, edge.source)
            sides[edge.id] = (classification, source_side, target_side)
            buckets.setdefault((edge.source, source_side, Role.Source), []).append(edge.id)
            buckets.setdefault((edge.target, target_side, Role.Target), []).append(edge.id)

        endpoints: dict[tuple[str, Role], EndpointAttachment] = {}
        planned: dict[str, HandleLayout] = {}
        for (node_id, side, role), edge_ids in buckets.items():
            edge_ids.sort()
            count = len(edge_ids)
            offsets = anchor_offsets(count)
            planned.setdefault(node_id, HandleLayout()).side(side).set(role, count)
            for index, edge_id in enumerate(edge_ids):
                endpoints[(edge_id, role)] = EndpointAttachment(
                    side=side,
                    handle_id=anchor_id(side, role, index, count),
                    offset=offsets[index],
                )

        attachments = {
            edge_id: Attachment(
                classification=classification,
                source=endpoints[(edge_id, Role.Source)],
                target=endpoints[(edge_id, Role.Target)],
            )
            for edge_id, (classification, _s, _t) in sides.items()
        }

        handle_layouts = {
            node.id: default_handles(node.kind).merged_max(planned.get(node.id, HandleLayout()))
            for node in self.result.nodes
        }
        return AttachmentPlan(attachments=attachments, handle_layouts=handle_layouts)


def plan_attachments(result: LayoutResult) -> AttachmentPlan:
    """Plan attachments for every edge of a layout result."""
    return AttachmentPlanner(result).plan()
