"""Handle anchors: slot offsets along a side, handle ids, per-kind handle counts."""

from __future__ import annotations

from dataclasses import dataclass, field

from graphweaver.types import SIDES, NodeKind, Role, Side

# First slot is always the side's center; later slots alternate outward.
SPREAD_TABLE: tuple[float, ...] = (0.5, 0.2, 0.8, 0.1, 0.9, 0.3, 0.7, 0.15, 0.85, 0.4, 0.6)
EVEN_MIN: float = 0.05
EVEN_MAX: float = 0.95


def spread_offsets(count: int) -> list[float]:
    """Offsets for ``count`` slots in allocation-priority order.

    Up to the size of the spreading table the table is used as-is; larger
    buckets are spaced evenly across [0.05, 0.95].
    """
    if count <= 0:
        return []
    if count <= len(SPREAD_TABLE):
        return list(SPREAD_TABLE[:count])
    step = (EVEN_MAX - EVEN_MIN) / (count - 1)
    return [round(EVEN_MIN + i * step, 4) for i in range(count)]


def anchor_offsets(count: int) -> list[float]:
    """Offsets for ``count`` slots in slot order (strictly increasing along the side)."""
    return sorted(spread_offsets(count))


def anchor_id(side: Side, role: Role, index: int, total: int) -> str:
    """Stable handle id, e.g. ``right-source-2-of-3`` (``index`` is 0-based)."""
    return f"{side.value}-{role.value}-{index + 1}-of-{total}"


# ─── Handle counts ───────────────────────────────────────────────────────────


@dataclass
class SideCounts:
    source: int = 0
    target: int = 0

    def get(self, role: Role) -> int:
        return self.source if role is Role.Source else self.target

    def set(self, role: Role, value: int) -> None:
        if role is Role.Source:
            self.source = value
        else:
            self.target = value


@dataclass
class HandleLayout:
    """Number of source/target handles a node exposes on each side."""

    top: SideCounts = field(default_factory=SideCounts)
    right: SideCounts = field(default_factory=SideCounts)
    bottom: SideCounts = field(default_factory=SideCounts)
    left: SideCounts = field(default_factory=SideCounts)

    def side(self, side: Side) -> SideCounts:
        return getattr(self, side.value)

    def merged_max(self, other: HandleLayout) -> HandleLayout:
        """Per side and role, the larger of the two counts."""
        merged = HandleLayout()
        for side in SIDES:
            mine, theirs = self.side(side), other.side(side)
            merged.side(side).source = max(mine.source, theirs.source)
            merged.side(side).target = max(mine.target, theirs.target)
        return merged

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {side.value: {"source": self.side(side).source, "target": self.side(side).target} for side in SIDES}


def _layout(top: tuple[int, int], right: tuple[int, int], bottom: tuple[int, int], left: tuple[int, int]) -> HandleLayout:
    return HandleLayout(
        top=SideCounts(*top),
        right=SideCounts(*right),
        bottom=SideCounts(*bottom),
        left=SideCounts(*left),
    )


def default_handles(kind: NodeKind) -> HandleLayout:
    """Baseline (source, target) handle counts per side for a node kind."""
    if kind is NodeKind.Actor:
        return _layout(top=(0, 1), right=(2, 0), bottom=(0, 1), left=(1, 0))
    if kind is NodeKind.Grouping:
        return _layout(top=(2, 2), right=(2, 2), bottom=(2, 2), left=(2, 2))
    return _layout(top=(1, 1), right=(2, 1), bottom=(1, 1), left=(2, 1))
