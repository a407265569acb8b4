"""Live edge geometry resolver.

Turns a planned attachment plus the current node snapshot into a drawable
path, a label position and an arrowhead orientation. Everything here is a
pure function of its inputs: a fresh ``Frame`` is built per call so no
absolute position survives from one frame to the next.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

from graphweaver.layout.types import Point, Rect
from graphweaver.routing.frame import Frame
from graphweaver.routing.planner import Attachment, EndpointAttachment, sides_from_centers
from graphweaver.types import Role, Side

logger = logging.getLogger(__name__)

STEP_OFFSET: float = 20.0
CORNER_RADIUS: float = 5.0
LABEL_OFFSET: float = 20.0
LABEL_TIER_STEP: float = 12.0

# Arrowheads point into the target shape.
MARKER_ORIENTATION: dict[Side, int] = {
    Side.Top: 90,
    Side.Bottom: -90,
    Side.Left: 0,
    Side.Right: 180,
}

_OUTWARD: dict[Side, tuple[int, int]] = {
    Side.Top: (0, -1),
    Side.Right: (1, 0),
    Side.Bottom: (0, 1),
    Side.Left: (-1, 0),
}


@dataclass(frozen=True)
class NodeSnapshot:
    """Current parent-relative box of a mounted node."""

    id: str
    x: float
    y: float
    width: float
    height: float
    parent_id: str | None = None


@dataclass(frozen=True)
class LiveAnchor:
    """A connection point the rendering layer has actually materialized."""

    id: str
    side: Side
    center: Point


class AnchorProvider(Protocol):
    def get_live_anchors(self, node_id: str, role: Role) -> list[LiveAnchor]:
        ...


@dataclass(frozen=True)
class EdgeRef:
    id: str
    source: str
    target: str
    attachment: Attachment | None = None


@dataclass(frozen=True)
class EdgeGeometry:
    edge_id: str
    points: tuple[Point, ...]
    path: str
    label_position: Point
    source_side: Side
    target_side: Side
    marker_orientation: int
    marker_id: str


# ─── Endpoint resolution ─────────────────────────────────────────────────────


def analytic_point(rect: Rect, side: Side, offset: float) -> Point:
    """Point ``offset`` of the way along ``side`` of ``rect``."""
    if side is Side.Left:
        return Point(rect.x, rect.y + rect.height * offset)
    if side is Side.Right:
        return Point(rect.right(), rect.y + rect.height * offset)
    if side is Side.Top:
        return Point(rect.x + rect.width * offset, rect.y)
    return Point(rect.x + rect.width * offset, rect.bottom())


def resolve_endpoint(
    rect: Rect,
    planned: EndpointAttachment,
    live: Iterable[LiveAnchor] = (),
) -> tuple[Point, Side]:
    """Live anchor by id, then live anchor on the planned side, then the analytic point."""
    live = list(live)
    for anchor in live:
        if anchor.id == planned.handle_id:
            return anchor.center, anchor.side
    for anchor in live:
        if anchor.side is planned.side:
            return anchor.center, anchor.side
    return analytic_point(rect, planned.side, planned.offset), planned.side


# ─── Path construction ───────────────────────────────────────────────────────


def _step_out(point: Point, side: Side, distance: float) -> Point:
    dx, dy = _OUTWARD[side]
    return Point(point.x + dx * distance, point.y + dy * distance)


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def simplify_path(path: list[Point]) -> list[Point]:
    """Drop repeated points and collinear intermediate points, keeping only direction changes."""
    deduped: list[Point] = []
    for point in path:
        if not deduped or deduped[-1] != point:
            deduped.append(point)
    if len(deduped) <= 2:
        return deduped

    result = [deduped[0]]
    for i in range(1, len(deduped) - 1):
        prev, curr, nxt = result[-1], deduped[i], deduped[i + 1]
        d1 = (_sign(curr.x - prev.x), _sign(curr.y - prev.y))
        d2 = (_sign(nxt.x - curr.x), _sign(nxt.y - curr.y))
        if d1 != d2:
            result.append(curr)
    result.append(deduped[-1])
    return result


def smooth_step_points(
    source: Point,
    source_side: Side,
    target: Point,
    target_side: Side,
    offset: float = STEP_OFFSET,
) -> list[Point]:
    """Orthogonal route leaving and entering perpendicular to the given sides."""
    s_out = _step_out(source, source_side, offset)
    t_out = _step_out(target, target_side, offset)

    if source_side.is_horizontal and target_side.is_horizontal:
        mid_x = (s_out.x + t_out.x) / 2
        middle = [Point(mid_x, s_out.y), Point(mid_x, t_out.y)]
    elif not source_side.is_horizontal and not target_side.is_horizontal:
        mid_y = (s_out.y + t_out.y) / 2
        middle = [Point(s_out.x, mid_y), Point(t_out.x, mid_y)]
    elif source_side.is_horizontal:
        middle = [Point(t_out.x, s_out.y)]
    else:
        middle = [Point(s_out.x, t_out.y)]

    return simplify_path([source, s_out, *middle, t_out, target])


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def svg_path(points: list[Point], radius: float = CORNER_RADIUS) -> str:
    """SVG path data for ``points`` with each corner rounded by a quadratic curve."""
    if not points:
        return ""
    parts = [f"M{_fmt(points[0].x)} {_fmt(points[0].y)}"]
    for i in range(1, len(points) - 1):
        prev, corner, nxt = points[i - 1], points[i], points[i + 1]
        len_in = math.dist((prev.x, prev.y), (corner.x, corner.y))
        len_out = math.dist((corner.x, corner.y), (nxt.x, nxt.y))
        r = min(radius, len_in / 2, len_out / 2)
        if r <= 0:
            parts.append(f"L{_fmt(corner.x)} {_fmt(corner.y)}")
            continue
        before = Point(corner.x + (prev.x - corner.x) * r / len_in, corner.y + (prev.y - corner.y) * r / len_in)
        after = Point(corner.x + (nxt.x - corner.x) * r / len_out, corner.y + (nxt.y - corner.y) * r / len_out)
        parts.append(f"L{_fmt(before.x)} {_fmt(before.y)}")
        parts.append(f"Q{_fmt(corner.x)} {_fmt(corner.y)} {_fmt(after.x)} {_fmt(after.y)}")
    if len(points) > 1:
        parts.append(f"L{_fmt(points[-1].x)} {_fmt(points[-1].y)}")
    return " ".join(parts)


def path_midpoint(points: list[Point]) -> Point:
    """Point halfway along the polyline's length."""
    if not points:
        return Point(0.0, 0.0)
    lengths = [math.dist((a.x, a.y), (b.x, b.y)) for a, b in zip(points, points[1:])]
    remaining = sum(lengths) / 2
    for (a, b), length in zip(zip(points, points[1:]), lengths):
        if length > 0 and remaining <= length:
            t = remaining / length
            return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)
        remaining -= length
    return points[-1]


# ─── Labels and markers ──────────────────────────────────────────────────────


def label_tier(edge_id: str) -> int:
    """Deterministic tier in -2..2 derived from the edge id."""
    return sum(ord(ch) for ch in edge_id) % 5 - 2


def label_offset(edge_id: str, source: Point, target: Point) -> Point:
    """Shift perpendicular to the dominant travel axis, staggered by tier along it."""
    dx, dy = target.x - source.x, target.y - source.y
    tier = label_tier(edge_id)
    if abs(dx) >= abs(dy):
        return Point(tier * LABEL_TIER_STEP, -LABEL_OFFSET if dy >= 0 else LABEL_OFFSET)
    return Point(-LABEL_OFFSET if dx >= 0 else LABEL_OFFSET, tier * LABEL_TIER_STEP)


def marker_id(canvas_id: str, edge_id: str, side: Side) -> str:
    return f"floating-arrow-{canvas_id}-{edge_id}-{side.value}"


# ─── Resolver ────────────────────────────────────────────────────────────────


def resolve_edge_geometry(
    edge: EdgeRef,
    snapshot: Mapping[str, NodeSnapshot],
    anchors: AnchorProvider | None = None,
    canvas_id: str = "rf",
) -> EdgeGeometry | None:
    """Resolve one edge against the current snapshot.

    Returns None when either endpoint is not currently mounted; that is an
    expected transient state, not an error.
    """
    frame = Frame(snapshot)
    source_rect = frame.absolute(edge.source)
    target_rect = frame.absolute(edge.target)
    if source_rect is None or target_rect is None:
        logger.debug("edge %s has an unmounted endpoint; skipping this frame", edge.id)
        return None

    attachment = edge.attachment
    if attachment is None:
        source_side, target_side = sides_from_centers(source_rect.center, target_rect.center)
        source_plan = EndpointAttachment(side=source_side, handle_id="", offset=0.5)
        target_plan = EndpointAttachment(side=target_side, handle_id="", offset=0.5)
    else:
        source_plan, target_plan = attachment.source, attachment.target

    source_live = anchors.get_live_anchors(edge.source, Role.Source) if anchors is not None else []
    target_live = anchors.get_live_anchors(edge.target, Role.Target) if anchors is not None else []
    source_point, source_side = resolve_endpoint(source_rect, source_plan, source_live)
    target_point, target_side = resolve_endpoint(target_rect, target_plan, target_live)

    points = smooth_step_points(source_point, source_side, target_point, target_side)
    middle = path_midpoint(points)
    shift = label_offset(edge.id, source_point, target_point)
    return EdgeGeometry(
        edge_id=edge.id,
        points=tuple(points),
        path=svg_path(points),
        label_position=Point(middle.x + shift.x, middle.y + shift.y),
        source_side=source_side,
        target_side=target_side,
        marker_orientation=MARKER_ORIENTATION[target_side],
        marker_id=marker_id(canvas_id, edge.id, target_side),
    )


class EdgeGeometryResolver:
    """Resolves edges by id against whatever snapshot the caller passes per frame."""

    def __init__(
        self,
        edges: Iterable[EdgeRef],
        anchors: AnchorProvider | None = None,
        canvas_id: str = "rf",
    ) -> None:
        self.edges = {edge.id: edge for edge in edges}
        self.anchors = anchors
        self.canvas_id = canvas_id

    def resolve(self, edge_id: str, snapshot: Mapping[str, NodeSnapshot]) -> EdgeGeometry | None:
        edge = self.edges.get(edge_id)
        if edge is None:
            return None
        return resolve_edge_geometry(edge, snapshot, self.anchors, self.canvas_id)

    def resolve_all(self, snapshot: Mapping[str, NodeSnapshot]) -> dict[str, EdgeGeometry]:
        resolved: dict[str, EdgeGeometry] = {}
        for edge_id in self.edges:
            geometry = self.resolve(edge_id, snapshot)
            if geometry is not None:
                resolved[edge_id] = geometry
        return resolved
