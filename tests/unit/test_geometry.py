"""Tests for routing/geometry.py: endpoint resolution, smooth-step paths, labels and markers."""

from __future__ import annotations

from dataclasses import replace

import pytest

from graphweaver.layout.types import Point, Rect
from graphweaver.routing.geometry import (
    MARKER_ORIENTATION,
    EdgeGeometryResolver,
    EdgeRef,
    LiveAnchor,
    NodeSnapshot,
    analytic_point,
    label_offset,
    label_tier,
    path_midpoint,
    resolve_edge_geometry,
    simplify_path,
    smooth_step_points,
    svg_path,
)
from graphweaver.routing.planner import Attachment, EndpointAttachment
from graphweaver.types import Classification, Role, Side

# ─── Helpers ──────────────────────────────────────────────────────────────────


def snapshot(group_x: float = 200) -> dict[str, NodeSnapshot]:
    """Node a at the origin; node b inside grouping G, which sits at (group_x, 0)."""
    nodes = [
        NodeSnapshot("a", 0, 0, 100, 100),
        NodeSnapshot("G", group_x, 0, 400, 300),
        NodeSnapshot("b", 50, 100, 100, 100, parent_id="G"),
    ]
    return {n.id: n for n in nodes}


def right_to_left(edge_id: str = "e1") -> EdgeRef:
    attachment = Attachment(
        classification=Classification.External,
        source=EndpointAttachment(Side.Right, "right-source-1-of-1", 0.5),
        target=EndpointAttachment(Side.Left, "left-target-1-of-1", 0.5),
    )
    return EdgeRef(id=edge_id, source="a", target="b", attachment=attachment)


class StaticAnchors:
    def __init__(self, anchors: dict[tuple[str, Role], list[LiveAnchor]]) -> None:
        self.anchors = anchors

    def get_live_anchors(self, node_id: str, role: Role) -> list[LiveAnchor]:
        return self.anchors.get((node_id, role), [])


# ─── Endpoints ───────────────────────────────────────────────────────────────


class TestAnalyticPoint:
    def test_sides(self):
        """Left/right use the height fraction; top/bottom use the width fraction."""
        rect = Rect(10, 20, 100, 200)
        assert analytic_point(rect, Side.Left, 0.25) == Point(10, 70)
        assert analytic_point(rect, Side.Right, 0.5) == Point(110, 120)
        assert analytic_point(rect, Side.Top, 0.1) == Point(20, 20)
        assert analytic_point(rect, Side.Bottom, 0.9) == Point(100, 220)


class TestEndpointResolution:
    def test_analytic_fallback_uses_absolute_position(self):
        """Without live anchors the planned side/offset is applied to the absolute box."""
        geometry = resolve_edge_geometry(right_to_left(), snapshot())
        assert geometry.points[0] == Point(100, 50)
        assert geometry.points[-1] == Point(250, 150)

    def test_live_anchor_by_id_wins(self):
        """A materialized anchor with the planned id is used exactly."""
        anchors = StaticAnchors(
            {
                ("b", Role.Target): [
                    LiveAnchor("left-target-2-of-2", Side.Left, Point(250, 180)),
                    LiveAnchor("left-target-1-of-1", Side.Left, Point(250, 160)),
                ]
            }
        )
        geometry = resolve_edge_geometry(right_to_left(), snapshot(), anchors)
        assert geometry.points[-1] == Point(250, 160)

    def test_live_anchor_on_side(self):
        """Without an id match, any live anchor on the planned side is used."""
        anchors = StaticAnchors({("b", Role.Target): [LiveAnchor("other", Side.Left, Point(250, 170))]})
        geometry = resolve_edge_geometry(right_to_left(), snapshot(), anchors)
        assert geometry.points[-1] == Point(250, 170)

    def test_live_anchor_on_other_side_ignored(self):
        """Anchors on a different side fall through to the analytic point."""
        anchors = StaticAnchors({("b", Role.Target): [LiveAnchor("x", Side.Top, Point(300, 100))]})
        geometry = resolve_edge_geometry(right_to_left(), snapshot(), anchors)
        assert geometry.points[-1] == Point(250, 150)

    def test_missing_endpoint_renders_nothing(self):
        """An unmounted endpoint is a no-op for the frame."""
        nodes = snapshot()
        del nodes["b"]
        assert resolve_edge_geometry(right_to_left(), nodes) is None


# ─── Paths ───────────────────────────────────────────────────────────────────


class TestPath:
    def test_smooth_step_between_facing_sides(self):
        """Right → left leaves horizontally, turns at the midline, enters horizontally."""
        points = smooth_step_points(Point(100, 50), Side.Right, Point(250, 150), Side.Left)
        assert points == [Point(100, 50), Point(175, 50), Point(175, 150), Point(250, 150)]

    def test_smooth_step_mixed_sides(self):
        """Right → top makes a single corner."""
        points = smooth_step_points(Point(0, 0), Side.Right, Point(200, 200), Side.Top)
        assert points == [Point(0, 0), Point(200, 0), Point(200, 200)]

    def test_simplify_drops_collinear_and_repeats(self):
        """Only direction changes survive."""
        path = [Point(0, 0), Point(0, 0), Point(5, 0), Point(10, 0), Point(10, 5), Point(10, 10)]
        assert simplify_path(path) == [Point(0, 0), Point(10, 0), Point(10, 10)]

    def test_svg_path_rounds_corners(self):
        """Corners become quadratic curves of radius 5."""
        points = [Point(100, 50), Point(175, 50), Point(175, 150), Point(250, 150)]
        assert svg_path(points) == "M100 50 L170 50 Q175 50 175 55 L175 145 Q175 150 180 150 L250 150"

    def test_midpoint_by_length(self):
        """The midpoint is halfway along the polyline, not the middle vertex."""
        points = [Point(100, 50), Point(175, 50), Point(175, 150), Point(250, 150)]
        assert path_midpoint(points) == Point(175, 100)


# ─── Labels and markers ──────────────────────────────────────────────────────


class TestLabel:
    def test_tier_from_edge_id(self):
        """'e1' sums to 150 → tier -2."""
        assert label_tier("e1") == -2
        assert all(-2 <= label_tier(f"edge-{i}") <= 2 for i in range(20))

    def test_horizontal_offset(self):
        """Mostly horizontal travel downward shifts the label up by 20."""
        assert label_offset("e1", Point(0, 0), Point(100, 10)) == Point(-24, -20)

    def test_vertical_offset(self):
        """Mostly vertical travel rightward shifts the label left by 20."""
        assert label_offset("e1", Point(0, 0), Point(10, 100)) == Point(-20, -24)

    def test_label_position(self):
        """Label = path midpoint + hashed offset."""
        geometry = resolve_edge_geometry(right_to_left(), snapshot())
        assert geometry.label_position == Point(151, 80)


class TestMarker:
    def test_orientation_points_into_target(self):
        """Top 90, bottom -90, left 0, right 180."""
        assert MARKER_ORIENTATION == {Side.Top: 90, Side.Bottom: -90, Side.Left: 0, Side.Right: 180}

    def test_marker_id_per_edge_and_side(self):
        """The marker id names canvas, edge and resolved target side."""
        geometry = resolve_edge_geometry(right_to_left(), snapshot(), canvas_id="main")
        assert geometry.marker_id == "floating-arrow-main-e1-left"
        assert geometry.marker_orientation == 0


# ─── Resolver behaviour ──────────────────────────────────────────────────────


class TestResolver:
    def test_idempotent(self):
        """Same snapshot → identical geometry."""
        assert resolve_edge_geometry(right_to_left(), snapshot()) == resolve_edge_geometry(right_to_left(), snapshot())

    def test_follows_moved_ancestor(self):
        """Moving the grouping moves its child's endpoint on the next call."""
        before = resolve_edge_geometry(right_to_left(), snapshot(group_x=200))
        after = resolve_edge_geometry(right_to_left(), snapshot(group_x=260))
        assert after.points[-1].x - before.points[-1].x == pytest.approx(60)

    def test_without_attachment_uses_centers(self):
        """An unplanned edge picks facing sides from the node centers."""
        edge = replace(right_to_left(), attachment=None)
        geometry = resolve_edge_geometry(edge, snapshot())
        assert (geometry.source_side, geometry.target_side) == (Side.Right, Side.Left)

    def test_resolve_all_skips_unmounted(self):
        """Edges with a missing endpoint are left out of a batch resolve."""
        ghost = EdgeRef(id="e2", source="a", target="nowhere")
        resolver = EdgeGeometryResolver([right_to_left(), ghost])
        assert set(resolver.resolve_all(snapshot())) == {"e1"}
        assert resolver.resolve("unknown", snapshot()) is None
