"""Shared type definitions for graphweaver.

Enums used across parsers, the graph model, layout, routing and renderers.
"""

from __future__ import annotations

from enum import Enum


class NodeKind(Enum):
    Actor = "ACTOR"
    Activity = "ACTIVITY"
    Grouping = "GROUPING"
    Media = "MEDIA"

    @classmethod
    def parse(cls, value: str) -> NodeKind:
        key = value.strip().upper()
        for kind in cls:
            if kind.value == key or kind.name.upper() == key:
                return kind
        if key in _NODE_KIND_ALIASES:
            return _NODE_KIND_ALIASES[key]
        raise ValueError(f"Unknown node kind '{value}'")


_NODE_KIND_ALIASES: dict[str, NodeKind] = {
    "USE_CASE": NodeKind.Activity,
    "USECASE": NodeKind.Activity,
    "SYSTEM_BOUNDARY": NodeKind.Grouping,
    "BOUNDARY": NodeKind.Grouping,
}


class EdgeKind(Enum):
    Association = "ASSOCIATION"
    Include = "INCLUDE"
    Extend = "EXTEND"

    @classmethod
    def parse(cls, value: str) -> EdgeKind:
        key = value.strip().upper()
        for kind in cls:
            if kind.value == key:
                return kind
        raise ValueError(f"Unknown edge kind '{value}'")


class Side(Enum):
    Top = "top"
    Right = "right"
    Bottom = "bottom"
    Left = "left"

    @property
    def is_horizontal(self) -> bool:
        """True for sides whose edges leave along the x axis (left/right)."""
        return self in (Side.Left, Side.Right)

    def opposite(self) -> Side:
        return _OPPOSITE[self]


_OPPOSITE: dict[Side, Side] = {
    Side.Top: Side.Bottom,
    Side.Bottom: Side.Top,
    Side.Left: Side.Right,
    Side.Right: Side.Left,
}

SIDES: tuple[Side, ...] = (Side.Top, Side.Right, Side.Bottom, Side.Left)


class Role(Enum):
    Source = "source"
    Target = "target"


class Classification(Enum):
    Internal = "internal"
    External = "external"


class Direction(Enum):
    RIGHT = "RIGHT"
    DOWN = "DOWN"

    @classmethod
    def default(cls) -> Direction:
        return cls.RIGHT


class HierarchyMode(Enum):
    INCLUDE_CHILDREN = "INCLUDE_CHILDREN"
    FLAT = "FLAT"


class Orientation(Enum):
    Horizontal = "horizontal"
    Vertical = "vertical"
