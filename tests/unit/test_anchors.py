"""Tests for routing/anchors.py: slot offsets, handle ids and handle counts."""

from __future__ import annotations

import pytest

from graphweaver.routing.anchors import (
    SPREAD_TABLE,
    HandleLayout,
    SideCounts,
    anchor_id,
    anchor_offsets,
    default_handles,
    spread_offsets,
)
from graphweaver.types import NodeKind, Role, Side


class TestOffsets:
    def test_single_slot_is_center(self):
        """A bucket of one sits exactly at the side's center."""
        assert anchor_offsets(1) == [0.5]

    @pytest.mark.parametrize("count", [1, 2, 5, 11, 12, 30])
    def test_strictly_increasing_inside_unit_interval(self, count):
        """Slot offsets increase along the side and stay strictly inside (0, 1)."""
        offsets = anchor_offsets(count)
        assert len(offsets) == count
        assert all(0 < o < 1 for o in offsets)
        assert all(a < b for a, b in zip(offsets, offsets[1:]))

    def test_priority_order_follows_table(self):
        """Allocation priority is center first, then alternating outward."""
        assert spread_offsets(6) == [0.5, 0.2, 0.8, 0.1, 0.9, 0.3]
        assert spread_offsets(len(SPREAD_TABLE)) == list(SPREAD_TABLE)

    def test_even_spacing_past_table(self):
        """Past the table, slots are spread evenly across [0.05, 0.95]."""
        offsets = spread_offsets(12)
        assert offsets[0] == 0.05
        assert offsets[-1] == 0.95
        for a, b in zip(offsets, offsets[1:]):
            assert b - a == pytest.approx(0.9 / 11, abs=1e-3)

    def test_empty_bucket(self):
        """No edges → no offsets."""
        assert anchor_offsets(0) == []


class TestAnchorId:
    def test_format(self):
        """Ids encode side, role, 1-based index and bucket size."""
        assert anchor_id(Side.Right, Role.Source, 1, 3) == "right-source-2-of-3"
        assert anchor_id(Side.Top, Role.Target, 0, 1) == "top-target-1-of-1"


class TestHandleLayout:
    def test_actor_defaults(self):
        """Actors emit on the right and receive on top and bottom."""
        layout = default_handles(NodeKind.Actor)
        assert layout.right == SideCounts(source=2, target=0)
        assert layout.top == SideCounts(source=0, target=1)
        assert layout.left == SideCounts(source=1, target=0)

    def test_grouping_defaults(self):
        """Groupings have two of each on every side."""
        layout = default_handles(NodeKind.Grouping)
        assert all(layout.side(side) == SideCounts(2, 2) for side in Side)

    def test_activity_defaults(self):
        """Activities get the generic baseline."""
        layout = default_handles(NodeKind.Activity)
        assert layout.right == SideCounts(source=2, target=1)
        assert layout.bottom == SideCounts(source=1, target=1)

    def test_merged_max_never_lowers(self):
        """Merging takes the larger count per side and role."""
        planned = HandleLayout()
        planned.right.source = 6
        merged = default_handles(NodeKind.Actor).merged_max(planned)
        assert merged.right.source == 6
        assert merged.top.target == 1

    def test_to_dict(self):
        """Serialized per side, then per role."""
        data = default_handles(NodeKind.Grouping).to_dict()
        assert data["left"] == {"source": 2, "target": 2}
        assert list(data) == ["top", "right", "bottom", "left"]
