"""Intermediate representation: the flat graph model."""

from graphweaver.ir.model import (
    BREAKPOINTS,
    Edge,
    GraphModel,
    GroupingMeta,
    Node,
    NodeMedia,
    NodeProperty,
    SpanHint,
)

__all__ = [
    "BREAKPOINTS",
    "Edge",
    "GraphModel",
    "GroupingMeta",
    "Node",
    "NodeMedia",
    "NodeProperty",
    "SpanHint",
]
