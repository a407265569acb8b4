"""Declarative tree parser.

Walks a nested document of elements and flattens it into a graph model::

    {"element": "container", "children": [
        {"element": "actor", "id": "customer", "label": "Customer"},
        {"element": "grouping", "id": "shop", "label": "Shop",
         "grid": {"columns": 2, "justify": "space-between"},
         "children": [
            {"element": "activity", "id": "browse", "label": "Browse", "md": 6},
            {"element": "activity", "id": "pay", "label": "Pay"}
         ]},
        {"element": "edge", "id": "e1", "from": "customer", "to": "browse"}
    ]}

Each element role has its own case:
  - actor / activity / media: a node, parented to the nearest enclosing grouping
  - grouping: a node that becomes the parent of everything nested under it
  - edge: a connection (``from`` / ``to``)
  - container: transparent, only its children matter
"""

from __future__ import annotations

from typing import Any

from graphweaver.errors import GraphModelError
from graphweaver.ir.model import Edge, GraphModel, GroupingMeta, Node, SpanHint
from graphweaver.parsers.base import read_edge, read_grid, read_hint, read_node, require_list
from graphweaver.types import NodeKind

ELEMENTS: frozenset[str] = frozenset({"actor", "activity", "grouping", "media", "edge", "container"})

_NODE_ELEMENTS: dict[str, NodeKind] = {
    "actor": NodeKind.Actor,
    "activity": NodeKind.Activity,
    "media": NodeKind.Media,
}


class TreeParser:
    def __init__(self) -> None:
        self.nodes: list[Node] = []
        self.edges: list[Edge] = []
        self.groupings: dict[str, GroupingMeta] = {}
        self.hints: dict[str, SpanHint] = {}

    def parse(self, data: Any) -> GraphModel:
        self.nodes, self.edges, self.groupings, self.hints = [], [], {}, {}
        for element in data if isinstance(data, list) else [data]:
            self._walk(element, None)
        return GraphModel(self.nodes, self.edges, groupings=self.groupings, hints=self.hints)

    def _walk(self, element: Any, parent_id: str | None) -> None:
        if not isinstance(element, dict):
            raise GraphModelError(f"tree element must be an object, got {element!r}")
        role = str(element.get("element", "")).lower()

        match role:
            case "actor" | "activity" | "media":
                node = self._add_node(element, _NODE_ELEMENTS[role], parent_id)
                self._walk_children(element, node.parent_id)
            case "grouping":
                node = self._add_node(element, NodeKind.Grouping, parent_id)
                self.groupings[node.id] = GroupingMeta(grid=read_grid(element.get("grid")))
                self._walk_children(element, node.id)
                # Direct children in declaration order.
                self.groupings[node.id].children = [n.id for n in self.nodes if n.parent_id == node.id]
            case "edge":
                self.edges.append(read_edge(element, source_key="from", target_key="to"))
            case "container":
                self._walk_children(element, parent_id)
            case _:
                raise GraphModelError(
                    f"unknown tree element {element.get('element')!r}; expected one of {', '.join(sorted(ELEMENTS))}"
                )

    def _walk_children(self, element: dict[str, Any], parent_id: str | None) -> None:
        for child in require_list(element.get("children"), "tree element children"):
            self._walk(child, parent_id)

    def _add_node(self, element: dict[str, Any], kind: NodeKind, parent_id: str | None) -> Node:
        node = read_node(element, kind, parent_id)
        self.nodes.append(node)
        hint = read_hint(element)
        if hint is not None:
            self.hints[node.id] = hint
        return node


def parse_tree(data: Any) -> GraphModel:
    return TreeParser().parse(data)
