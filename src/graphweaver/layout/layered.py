"""Layered hierarchical layout over the box-tree contract.

This is the default layout delegate. It takes the same input a
layered-graph-layout service would (a tree of sized boxes, an edge list and
a string-keyed option map) and returns an isomorphic tree with ``x``/``y``
filled in, children relative to their parent.

Phases, run once per container from the innermost outwards:
  1. Edge lifting   (project edges onto the container's direct children)
  2. Cycle removal  (greedy-FAS)
  3. Layer assignment (longest path)
  4. Dummy node insertion
  5. Crossing minimization (barycenter)
  6. Coordinate assignment (layers along the configured direction)
  7. Container sizing (content bounding box + padding)
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field

import networkx as nx

from graphweaver.layout.types import (
    OPT_DIRECTION,
    OPT_HIERARCHY,
    OPT_PADDING,
    OPT_SPACING_BETWEEN_LAYERS,
    OPT_SPACING_NODE_NODE,
    Box,
    LayoutGraph,
)
from graphweaver.types import Direction, HierarchyMode

DUMMY_PREFIX = "__dummy_"
MAX_CROSSING_PASSES = 24

_PADDING_RE = re.compile(r"(top|left|bottom|right)\s*=\s*(-?[\d.]+)")


# ─── Options ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Padding:
    top: float = 12.0
    left: float = 12.0
    bottom: float = 12.0
    right: float = 12.0

    @classmethod
    def parse(cls, value: str | None, default: Padding | None = None) -> Padding:
        """Parse ``[top=1,left=2,bottom=3,right=4]`` or ``[t,l,b,r]``."""
        fallback = default or cls()
        if not value:
            return fallback
        named = dict(_PADDING_RE.findall(value))
        if named:
            return cls(
                top=float(named.get("top", fallback.top)),
                left=float(named.get("left", fallback.left)),
                bottom=float(named.get("bottom", fallback.bottom)),
                right=float(named.get("right", fallback.right)),
            )
        parts = [p for p in value.strip("[] ").split(",") if p.strip()]
        if len(parts) == 4:
            top, left, bottom, right = (float(p) for p in parts)
            return cls(top=top, left=left, bottom=bottom, right=right)
        if len(parts) == 1:
            v = float(parts[0])
            return cls(top=v, left=v, bottom=v, right=v)
        return fallback


@dataclass(frozen=True)
class LayeredOptions:
    direction: Direction = Direction.RIGHT
    layer_spacing: float = 120.0
    node_spacing: float = 120.0
    padding: Padding = field(default_factory=Padding)
    hierarchy: HierarchyMode = HierarchyMode.INCLUDE_CHILDREN

    @classmethod
    def from_map(cls, options: dict[str, str]) -> LayeredOptions:
        direction = Direction.DOWN if options.get(OPT_DIRECTION, "RIGHT").upper() == "DOWN" else Direction.RIGHT
        hierarchy = (
            HierarchyMode.INCLUDE_CHILDREN
            if options.get(OPT_HIERARCHY, "INCLUDE_CHILDREN") == "INCLUDE_CHILDREN"
            else HierarchyMode.FLAT
        )
        return cls(
            direction=direction,
            layer_spacing=float(options.get(OPT_SPACING_BETWEEN_LAYERS, 120)),
            node_spacing=float(options.get(OPT_SPACING_NODE_NODE, 120)),
            padding=Padding.parse(options.get(OPT_PADDING)),
            hierarchy=hierarchy,
        )


# ─── Cycle Removal (Greedy-FAS) ─────────────────────────────────────────────


def greedy_fas_ordering(graph: nx.DiGraph, rank: dict[str, int]) -> list[str]:
    """Order nodes so that as few edges as possible point backwards.

    Eades–Lin–Smyth: peel sinks to the right, sources to the left, and break
    the remaining cycles at the node with the largest out/in surplus.
    ``rank`` orders ties so the result does not depend on hash order.
    """
    active: list[str] = sorted(graph.nodes, key=rank.__getitem__)
    out_deg = {n: graph.out_degree(n) for n in active}
    in_deg = {n: graph.in_degree(n) for n in active}
    left: list[str] = []
    right: list[str] = []

    def drop(node: str) -> None:
        active.remove(node)
        for succ in graph.successors(node):
            in_deg[succ] -= 1
        for pred in graph.predecessors(node):
            out_deg[pred] -= 1

    while active:
        sinks = [n for n in active if out_deg[n] == 0]
        while sinks:
            for sink in sinks:
                drop(sink)
                right.append(sink)
            sinks = [n for n in active if out_deg[n] == 0]

        sources = [n for n in active if in_deg[n] == 0]
        while sources:
            for source in sources:
                drop(source)
                left.append(source)
            sources = [n for n in active if in_deg[n] == 0]

        if active:
            best = max(active, key=lambda n: out_deg[n] - in_deg[n])
            drop(best)
            left.append(best)

    return left + right[::-1]


def remove_cycles(graph: nx.DiGraph, rank: dict[str, int]) -> tuple[nx.DiGraph, set[tuple[str, str]]]:
    """Return an acyclic copy of ``graph`` plus the set of edges that were reversed."""
    position = {node: i for i, node in enumerate(greedy_fas_ordering(graph, rank))}
    dag: nx.DiGraph = nx.DiGraph()
    dag.add_nodes_from(graph.nodes)
    reversed_edges: set[tuple[str, str]] = set()

    for src, tgt in graph.edges():
        if src == tgt:
            reversed_edges.add((src, tgt))
            continue
        if position[src] > position[tgt]:
            reversed_edges.add((src, tgt))
            dag.add_edge(tgt, src)
        else:
            dag.add_edge(src, tgt)
    return dag, reversed_edges


# ─── Layer Assignment ────────────────────────────────────────────────────────


def assign_layers(dag: nx.DiGraph) -> dict[str, int]:
    """Longest-path layering: every edge spans at least one layer."""
    layers: dict[str, int] = {}
    for node in nx.topological_sort(dag):
        preds = list(dag.predecessors(node))
        layers[node] = max((layers[p] + 1 for p in preds), default=0)
    return layers


# ─── Dummy Node Insertion ────────────────────────────────────────────────────


def insert_dummy_nodes(dag: nx.DiGraph, layers: dict[str, int]) -> tuple[nx.DiGraph, dict[str, int]]:
    """Split edges spanning several layers into chains of one-layer segments."""
    augmented: nx.DiGraph = nx.DiGraph()
    augmented.add_nodes_from(dag.nodes)
    all_layers = dict(layers)
    counter = 0

    for src, tgt in dag.edges():
        span = all_layers[tgt] - all_layers[src]
        if span <= 1:
            augmented.add_edge(src, tgt)
            continue
        prev = src
        for step in range(1, span):
            dummy = f"{DUMMY_PREFIX}{counter}_{step}"
            all_layers[dummy] = all_layers[src] + step
            augmented.add_edge(prev, dummy)
            prev = dummy
        augmented.add_edge(prev, tgt)
        counter += 1

    return augmented, all_layers


# ─── Crossing Minimization ───────────────────────────────────────────────────


def count_crossings(ordering: list[list[str]], graph: nx.DiGraph) -> int:
    total = 0
    for idx in range(len(ordering) - 1):
        next_pos = {nid: i for i, nid in enumerate(ordering[idx + 1])}
        segments: list[tuple[int, int]] = []
        for pos, node in enumerate(ordering[idx]):
            for succ in graph.successors(node):
                if succ in next_pos:
                    segments.append((pos, next_pos[succ]))
        for i, (a0, a1) in enumerate(segments):
            for b0, b1 in segments[i + 1 :]:
                if (a0 - b0) * (a1 - b1) < 0:
                    total += 1
    return total


def _barycenter(node: str, neighbours: list[str], positions: dict[str, int], current: int) -> float:
    known = [positions[n] for n in neighbours if n in positions]
    if not known:
        return float(current)
    return sum(known) / len(known)


def minimise_crossings(graph: nx.DiGraph, layers: dict[str, int], rank: dict[str, int]) -> list[list[str]]:
    """Sweep layers down and up, sorting by barycenter, until crossings stop improving."""
    layer_count = max(layers.values(), default=-1) + 1
    ordering: list[list[str]] = [[] for _ in range(layer_count)]
    for node in sorted(layers, key=lambda n: (rank.get(n, len(rank)), n)):
        ordering[layers[node]].append(node)

    best = [list(layer) for layer in ordering]
    best_count = count_crossings(best, graph)

    for _pass in range(MAX_CROSSING_PASSES):
        for idx in range(1, layer_count):
            prev = {n: i for i, n in enumerate(ordering[idx - 1])}
            current = {n: i for i, n in enumerate(ordering[idx])}
            ordering[idx].sort(key=lambda n: _barycenter(n, list(graph.predecessors(n)), prev, current[n]))
        for idx in range(layer_count - 2, -1, -1):
            nxt = {n: i for i, n in enumerate(ordering[idx + 1])}
            current = {n: i for i, n in enumerate(ordering[idx])}
            ordering[idx].sort(key=lambda n: _barycenter(n, list(graph.successors(n)), nxt, current[n]))

        crossings = count_crossings(ordering, graph)
        if crossings >= best_count:
            break
        best = [list(layer) for layer in ordering]
        best_count = crossings

    return best


# ─── Coordinate Assignment ───────────────────────────────────────────────────


def assign_coordinates(ordering: list[list[str]], boxes: dict[str, Box], opts: LayeredOptions) -> None:
    """Place boxes layer by layer; each layer is centred on the widest one."""
    horizontal = opts.direction is Direction.RIGHT

    def main(box: Box) -> float:
        return box.width if horizontal else box.height

    def cross(box: Box) -> float:
        return box.height if horizontal else box.width

    layers = [[boxes[n] for n in layer if n in boxes] for layer in ordering]
    layers = [layer for layer in layers if layer]

    extents = [sum(cross(b) for b in layer) + opts.node_spacing * (len(layer) - 1) for layer in layers]
    widest = max(extents, default=0.0)

    main_pos = 0.0
    for layer, extent in zip(layers, extents):
        thickness = max(main(b) for b in layer)
        cross_pos = (widest - extent) / 2
        for box in layer:
            along = main_pos + (thickness - main(box)) / 2
            if horizontal:
                box.x, box.y = along, cross_pos
            else:
                box.x, box.y = cross_pos, along
            cross_pos += cross(box) + opts.node_spacing
        main_pos += thickness + opts.layer_spacing


# ─── LayeredLayout Engine ────────────────────────────────────────────────────


class LayeredLayout:
    """Layered layout delegate for box trees."""

    async def layout(self, graph: LayoutGraph) -> LayoutGraph:
        return self.arrange(graph)

    def arrange(self, graph: LayoutGraph) -> LayoutGraph:
        result = copy.deepcopy(graph)
        opts = LayeredOptions.from_map(result.layout_options)

        root = Box(id=result.id, width=0.0, height=0.0, children=result.children)
        parent_of: dict[str, str] = {}
        rank: dict[str, int] = {}
        for box in root.walk():
            rank[box.id] = len(rank)
            for child in box.children:
                parent_of[child.id] = box.id

        edges: list[tuple[str, str]] = []
        for edge in result.edges:
            for src in edge.sources:
                for tgt in edge.targets:
                    if src in rank and tgt in rank:
                        edges.append((src, tgt))

        self._arrange_container(root, edges, parent_of, rank, opts)
        result.width, result.height = root.width, root.height
        return result

    def _arrange_container(
        self,
        container: Box,
        edges: list[tuple[str, str]],
        parent_of: dict[str, str],
        rank: dict[str, int],
        opts: LayeredOptions,
    ) -> None:
        for child in container.children:
            if child.children:
                self._arrange_container(child, edges, parent_of, rank, opts)

        if container.is_fixed or not container.children:
            for child in container.children:
                child.x = child.x if child.x is not None else 0.0
                child.y = child.y if child.y is not None else 0.0
            return

        level: nx.DiGraph = nx.DiGraph()
        level.add_nodes_from(child.id for child in container.children)
        for src, tgt in edges:
            a = _lift(src, container.id, parent_of, opts.hierarchy)
            b = _lift(tgt, container.id, parent_of, opts.hierarchy)
            if a is not None and b is not None and a != b:
                level.add_edge(a, b)

        dag, _reversed = remove_cycles(level, rank)
        layers = assign_layers(dag)
        augmented, all_layers = insert_dummy_nodes(dag, layers)
        ordering = minimise_crossings(augmented, all_layers, rank)
        assign_coordinates(ordering, {child.id: child for child in container.children}, opts)

        padding = Padding.parse(container.layout_options.get(OPT_PADDING), opts.padding)
        for child in container.children:
            child.x = (child.x or 0.0) + padding.left
            child.y = (child.y or 0.0) + padding.top
        content_w = max((c.x + c.width for c in container.children), default=padding.left)
        content_h = max((c.y + c.height for c in container.children), default=padding.top)
        container.width = max(container.width, content_w + padding.right)
        container.height = max(container.height, content_h + padding.bottom)


def _lift(node_id: str, container_id: str, parent_of: dict[str, str], hierarchy: HierarchyMode) -> str | None:
    """The direct child of ``container_id`` that contains ``node_id``, if any."""
    if parent_of.get(node_id) == container_id:
        return node_id
    if hierarchy is HierarchyMode.FLAT:
        return None
    current = node_id
    while current in parent_of:
        parent = parent_of[current]
        if parent == container_id:
            return current
        current = parent
    return None
