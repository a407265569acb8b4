"""Flat-form parser.

Input shape::

    {
      "nodes": [{"id", "label", "type"|"kind", "parentId"?, "width"?, "height"?, ...}],
      "edges": [{"id", "source", "target", "type"|"kind"?, "label"?}],
      "groupings"?: {"<grouping id>": {"grid": {...} | true, "children": [...]}},
      "hints"?: {"<node id>": {"xs"?, "sm"?, "md"?, "lg"?, "xl"?}}
    }

Span hints may also sit directly on a node object.
"""

from __future__ import annotations

from typing import Any

from graphweaver.errors import GraphModelError
from graphweaver.ir.model import Edge, GraphModel, GroupingMeta, Node, SpanHint
from graphweaver.parsers.base import (
    read_edge,
    read_grid,
    read_hint,
    read_node,
    read_node_kind,
    require_list,
    require_object,
)


class FlatParser:
    def parse(self, data: Any) -> GraphModel:
        if not isinstance(data, dict):
            raise GraphModelError("flat graph must be an object with 'nodes' and 'edges'")

        nodes: list[Node] = []
        hints: dict[str, SpanHint] = {}
        for raw in require_list(data.get("nodes"), "nodes"):
            raw = require_object(raw, "node")
            node = read_node(raw, read_node_kind(raw.get("kind", raw.get("type"))))
            nodes.append(node)
            hint = read_hint(raw)
            if hint is not None:
                hints[node.id] = hint

        for node_id, raw in require_object(data.get("hints") or {}, "hints").items():
            hint = read_hint(require_object(raw, f"hints for {node_id}"))
            if hint is not None:
                hints[str(node_id)] = hint

        edges: list[Edge] = [read_edge(raw) for raw in require_list(data.get("edges"), "edges")]

        groupings: dict[str, GroupingMeta] = {}
        for grouping_id, raw in require_object(data.get("groupings") or {}, "groupings").items():
            raw = require_object(raw, f"grouping {grouping_id}")
            groupings[str(grouping_id)] = GroupingMeta(
                grid=read_grid(raw.get("grid")),
                children=[str(c) for c in require_list(raw.get("children"), f"grouping {grouping_id} children")],
            )

        return GraphModel(nodes, edges, groupings=groupings, hints=hints)


def parse_flat(data: Any) -> GraphModel:
    return FlatParser().parse(data)
