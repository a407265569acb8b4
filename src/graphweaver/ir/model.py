"""Graph model: the flat node/edge/grouping representation of a diagram.

This module owns the canonical graph data structure consumed by every
downstream phase (grid sub-layout, layout delegate, attachment planning,
rendering). Containment is kept in a networkx DiGraph (parent → child) so
that ancestor walks and bottom-up traversals are cheap; connections live
in a MultiDiGraph keyed by edge id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import networkx as nx

from graphweaver.config import GridOptions
from graphweaver.errors import GraphModelError
from graphweaver.types import EdgeKind, NodeKind

logger = logging.getLogger(__name__)

BREAKPOINTS: tuple[str, ...] = ("xs", "sm", "md", "lg", "xl")


@dataclass(frozen=True)
class NodeProperty:
    key: str
    value: str


@dataclass(frozen=True)
class NodeMedia:
    src: str | None = None
    alt: str | None = None
    icon: str | None = None


@dataclass(frozen=True)
class Node:
    id: str
    label: str
    kind: NodeKind
    parent_id: str | None = None
    width: float | None = None
    height: float | None = None
    icon: str | None = None
    media: NodeMedia | None = None
    properties: tuple[NodeProperty, ...] = ()

    @property
    def is_grouping(self) -> bool:
        return self.kind is NodeKind.Grouping


@dataclass(frozen=True)
class Edge:
    id: str
    source: str
    target: str
    kind: EdgeKind = EdgeKind.Association
    label: str | None = None


@dataclass(frozen=True)
class SpanHint:
    """Responsive column-span hints, one per breakpoint."""

    xs: int | None = None
    sm: int | None = None
    md: int | None = None
    lg: int | None = None
    xl: int | None = None

    def pick(self, breakpoint: str, fallback: int | None = None) -> int | None:
        """Return the first defined span scanning from ``breakpoint`` down to ``xs``."""
        index = BREAKPOINTS.index(breakpoint) if breakpoint in BREAKPOINTS else len(BREAKPOINTS) - 1
        for key in reversed(BREAKPOINTS[: index + 1]):
            value = getattr(self, key)
            if value is not None:
                return value
        return fallback

    @property
    def span_factor(self) -> int:
        for value in (self.md, self.sm, self.xs):
            if value is not None:
                return value
        return 0


@dataclass
class GroupingMeta:
    """Grid arrangement and ordered direct children of a grouping node."""

    grid: GridOptions | None = None
    children: list[str] = field(default_factory=list)


class GraphModel:
    """The flat graph built by a parser for one render pass.

    Node and edge lists keep declaration order; every query that returns
    several ids returns them in that order so downstream phases stay
    deterministic.
    """

    def __init__(
        self,
        nodes: list[Node],
        edges: list[Edge],
        groupings: dict[str, GroupingMeta] | None = None,
        hints: dict[str, SpanHint] | None = None,
    ) -> None:
        self.nodes: list[Node] = list(nodes)
        self.edges: list[Edge] = list(edges)
        self.hints: dict[str, SpanHint] = dict(hints or {})
        self._by_id: dict[str, Node] = {}
        self._order: dict[str, int] = {}

        for index, node in enumerate(self.nodes):
            if node.id in self._by_id:
                raise GraphModelError(f"Duplicate node id '{node.id}'")
            self._by_id[node.id] = node
            self._order[node.id] = index

        edge_ids: set[str] = set()
        for edge in self.edges:
            if edge.id in edge_ids:
                raise GraphModelError(f"Duplicate edge id '{edge.id}'")
            edge_ids.add(edge.id)

        self.containment: nx.DiGraph = _build_containment(self.nodes, self._by_id)
        self.digraph: nx.MultiDiGraph = _build_connections(self.nodes, self.edges, self._by_id)
        self.groupings: dict[str, GroupingMeta] = self._normalise_groupings(groupings or {})

    # ─── Lookups ─────────────────────────────────────────────────────────

    def node(self, node_id: str) -> Node | None:
        return self._by_id.get(node_id)

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    def parent_of(self, node_id: str) -> str | None:
        if node_id not in self.containment:
            return None
        parents = list(self.containment.predecessors(node_id))
        return parents[0] if parents else None

    def children_of(self, node_id: str) -> list[str]:
        if node_id not in self.containment:
            return []
        return sorted(self.containment.successors(node_id), key=self._order.__getitem__)

    def roots(self) -> list[str]:
        return [n.id for n in self.nodes if self.containment.in_degree(n.id) == 0]

    def ancestors(self, node_id: str) -> list[str]:
        """Parent chain of ``node_id``, nearest first."""
        chain: list[str] = []
        current = self.parent_of(node_id)
        while current is not None:
            chain.append(current)
            current = self.parent_of(current)
        return chain

    def groupings_bottom_up(self) -> list[str]:
        """Grouping node ids ordered so that nested groupings come before their hosts."""
        order: list[str] = []
        for root in self.roots():
            for node_id in nx.dfs_postorder_nodes(self.containment, root):
                if self._by_id[node_id].is_grouping:
                    order.append(node_id)
        return order

    def valid_edges(self) -> list[Edge]:
        """Edges whose endpoints both exist."""
        return [e for e in self.edges if e.source in self._by_id and e.target in self._by_id]

    def dangling_edges(self) -> list[Edge]:
        return [e for e in self.edges if e.source not in self._by_id or e.target not in self._by_id]

    def hint(self, node_id: str) -> SpanHint | None:
        return self.hints.get(node_id)

    # ─── Grouping metadata ───────────────────────────────────────────────

    def _normalise_groupings(self, groupings: dict[str, GroupingMeta]) -> dict[str, GroupingMeta]:
        result: dict[str, GroupingMeta] = {}
        for node in self.nodes:
            if not node.is_grouping:
                continue
            meta = groupings.get(node.id)
            actual_children = self.children_of(node.id)
            if meta is None:
                result[node.id] = GroupingMeta(grid=None, children=actual_children)
                continue
            declared = meta.children or actual_children
            children: list[str] = []
            for child_id in declared:
                if self.parent_of(child_id) != node.id:
                    logger.debug("grouping %s: dropping child reference %s", node.id, child_id)
                    continue
                if child_id not in children:
                    children.append(child_id)
            # Children that exist but were left out of the declared list keep their node order.
            for child_id in actual_children:
                if child_id not in children:
                    children.append(child_id)
            result[node.id] = GroupingMeta(grid=meta.grid, children=children)

        for node_id in groupings:
            if node_id not in result:
                logger.debug("dropping grouping metadata for non-grouping or missing node %s", node_id)
        return result


def _build_containment(nodes: list[Node], by_id: dict[str, Node]) -> nx.DiGraph:
    tree: nx.DiGraph = nx.DiGraph()
    for node in nodes:
        tree.add_node(node.id)
    for node in nodes:
        if node.parent_id is None:
            continue
        if node.parent_id == node.id:
            raise GraphModelError(f"Node '{node.id}' cannot contain itself")
        if node.parent_id not in by_id:
            logger.debug("node %s: unknown parent %s, treating as root", node.id, node.parent_id)
            continue
        tree.add_edge(node.parent_id, node.id)
    if not nx.is_directed_acyclic_graph(tree):
        cycle = nx.find_cycle(tree)
        raise GraphModelError(f"Containment cycle: {' -> '.join(src for src, _ in cycle)}")
    return tree


def _build_connections(nodes: list[Node], edges: list[Edge], by_id: dict[str, Node]) -> nx.MultiDiGraph:
    digraph: nx.MultiDiGraph = nx.MultiDiGraph()
    for node in nodes:
        digraph.add_node(node.id, data=node)
    for edge in edges:
        if edge.source not in by_id or edge.target not in by_id:
            continue
        digraph.add_edge(edge.source, edge.target, key=edge.id, data=edge)
    return digraph
