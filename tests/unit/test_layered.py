"""Tests for layout/layered.py: the default layered delegate.

Covers:
  - greedy_fas_ordering / remove_cycles
  - assign_layers / insert_dummy_nodes
  - count_crossings / minimise_crossings
  - Padding.parse
  - LayeredLayout.arrange over box trees (direction, containment, fixed boxes, hierarchy modes)
"""

from __future__ import annotations

import asyncio

import networkx as nx

from graphweaver.layout.layered import (
    DUMMY_PREFIX,
    LayeredLayout,
    Padding,
    assign_layers,
    count_crossings,
    greedy_fas_ordering,
    insert_dummy_nodes,
    minimise_crossings,
    remove_cycles,
)
from graphweaver.layout.types import (
    ALGORITHM_FIXED,
    OPT_ALGORITHM,
    OPT_DIRECTION,
    OPT_HIERARCHY,
    OPT_PADDING,
    Box,
    LayoutEdgeSpec,
    LayoutGraph,
)

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_graph(*edges: tuple[str, str]) -> nx.DiGraph:
    """Build a DiGraph from a list of (src, tgt) string pairs."""
    g: nx.DiGraph = nx.DiGraph()
    for src, tgt in edges:
        g.add_edge(src, tgt)
    return g


def rank_of(g: nx.DiGraph) -> dict[str, int]:
    return {n: i for i, n in enumerate(sorted(g.nodes))}


def edge(edge_id: str, src: str, tgt: str) -> LayoutEdgeSpec:
    return LayoutEdgeSpec(id=edge_id, sources=[src], targets=[tgt])


def graph(children: list[Box], edges: list[LayoutEdgeSpec], **options: str) -> LayoutGraph:
    layout_options = {OPT_DIRECTION: "RIGHT", OPT_PADDING: "[top=10,left=10,bottom=10,right=10]"}
    layout_options.update(options)
    return LayoutGraph(layout_options=layout_options, children=children, edges=edges)


def by_id(result: LayoutGraph) -> dict[str, Box]:
    return {box.id: box for box in result.walk()}


# ─── Cycle removal ───────────────────────────────────────────────────────────


class TestCycleRemoval:
    def test_dag_untouched(self):
        """A → B → C has nothing to reverse."""
        g = make_graph(("A", "B"), ("B", "C"))
        dag, reversed_edges = remove_cycles(g, rank_of(g))
        assert reversed_edges == set()
        assert set(dag.edges()) == {("A", "B"), ("B", "C")}

    def test_two_cycle(self):
        """A ⇄ B → exactly one edge reversed, result acyclic."""
        g = make_graph(("A", "B"), ("B", "A"))
        dag, reversed_edges = remove_cycles(g, rank_of(g))
        assert len(reversed_edges) == 1
        assert nx.is_directed_acyclic_graph(dag)

    def test_self_loop_dropped(self):
        """A self-loop is counted as reversed and removed."""
        g = make_graph(("A", "A"))
        dag, reversed_edges = remove_cycles(g, rank_of(g))
        assert reversed_edges == {("A", "A")}
        assert dag.number_of_edges() == 0

    def test_ordering_contains_every_node_once(self):
        """The FAS ordering is a permutation of the nodes."""
        g = make_graph(("A", "B"), ("B", "C"), ("C", "A"))
        ordering = greedy_fas_ordering(g, rank_of(g))
        assert sorted(ordering) == ["A", "B", "C"]

    def test_ordering_deterministic(self):
        """Same graph and rank → same ordering."""
        g = make_graph(("A", "B"), ("B", "C"), ("C", "A"), ("D", "B"))
        assert greedy_fas_ordering(g, rank_of(g)) == greedy_fas_ordering(g, rank_of(g))


# ─── Layering ────────────────────────────────────────────────────────────────


class TestLayering:
    def test_longest_path(self):
        """A → B → C plus A → C puts C on layer 2."""
        g = make_graph(("A", "B"), ("B", "C"), ("A", "C"))
        assert assign_layers(g) == {"A": 0, "B": 1, "C": 2}

    def test_dummy_chain(self):
        """An edge spanning two layers gets one dummy node."""
        g = make_graph(("A", "B"), ("B", "C"), ("A", "C"))
        augmented, layers = insert_dummy_nodes(g, assign_layers(g))
        dummies = [n for n in augmented.nodes if n.startswith(DUMMY_PREFIX)]
        assert len(dummies) == 1
        assert layers[dummies[0]] == 1
        assert not augmented.has_edge("A", "C")


class TestCrossings:
    def test_count_crossing_pair(self):
        """A→D and B→C with A above B cross once."""
        g = make_graph(("A", "D"), ("B", "C"))
        assert count_crossings([["A", "B"], ["C", "D"]], g) == 1

    def test_minimise_removes_crossing(self):
        """Barycenter sweeps untangle a single crossing."""
        g = make_graph(("A", "D"), ("B", "C"))
        layers = {"A": 0, "B": 0, "C": 1, "D": 1}
        rank = {"A": 0, "B": 1, "C": 2, "D": 3}
        ordering = minimise_crossings(g, layers, rank)
        assert count_crossings(ordering, g) == 0


# ─── Options ─────────────────────────────────────────────────────────────────


class TestPadding:
    def test_named(self):
        """The named form reads each side."""
        p = Padding.parse("[top=88,left=56,bottom=56,right=56]")
        assert (p.top, p.left, p.bottom, p.right) == (88, 56, 56, 56)

    def test_positional(self):
        """The positional form is top, left, bottom, right."""
        p = Padding.parse("[1,2,3,4]")
        assert (p.top, p.left, p.bottom, p.right) == (1, 2, 3, 4)

    def test_missing_uses_default(self):
        """No value → the supplied default."""
        default = Padding(5, 5, 5, 5)
        assert Padding.parse(None, default) is default


# ─── LayeredLayout ───────────────────────────────────────────────────────────


class TestLayeredLayout:
    def test_right_direction_orders_along_x(self):
        """A → B laid out RIGHT puts B to the right of A."""
        result = LayeredLayout().arrange(graph([Box("A", 100, 50), Box("B", 100, 50)], [edge("e", "A", "B")]))
        boxes = by_id(result)
        assert boxes["B"].x >= boxes["A"].x + boxes["A"].width

    def test_down_direction_orders_along_y(self):
        """A → B laid out DOWN puts B below A."""
        g = graph([Box("A", 100, 50), Box("B", 100, 50)], [edge("e", "A", "B")], **{OPT_DIRECTION: "DOWN"})
        boxes = by_id(LayeredLayout().arrange(g))
        assert boxes["B"].y >= boxes["A"].y + boxes["A"].height

    def test_input_not_mutated(self):
        """arrange works on a copy of the input tree."""
        g = graph([Box("A", 100, 50)], [])
        LayeredLayout().arrange(g)
        assert g.children[0].x is None

    def test_every_box_positioned(self):
        """Every box in the result has x and y."""
        inner = Box("C", 10, 10, children=[Box("c1", 60, 40), Box("c2", 60, 40)])
        result = LayeredLayout().arrange(graph([Box("A", 100, 50), inner], [edge("e", "c1", "c2")]))
        assert all(box.x is not None and box.y is not None for box in result.walk())

    def test_container_grows_around_children(self):
        """A container is at least its children's extent plus padding."""
        inner = Box("C", 10, 10, children=[Box("c1", 60, 40), Box("c2", 60, 40)])
        boxes = by_id(LayeredLayout().arrange(graph([inner], [edge("e", "c1", "c2")])))
        for child in (boxes["c1"], boxes["c2"]):
            assert child.x >= 10 and child.y >= 10
            assert boxes["C"].width >= child.x + child.width + 10
            assert boxes["C"].height >= child.y + child.height + 10

    def test_fixed_box_keeps_child_positions(self):
        """Children of a fixed-algorithm box keep their given x/y and the box its size."""
        fixed = Box(
            "G",
            300,
            200,
            children=[Box("g1", 60, 40, x=24, y=56), Box("g2", 60, 40, x=120, y=56)],
            layout_options={OPT_ALGORITHM: ALGORITHM_FIXED},
        )
        boxes = by_id(LayeredLayout().arrange(graph([fixed], [edge("e", "g1", "g2")])))
        assert (boxes["g1"].x, boxes["g1"].y) == (24, 56)
        assert (boxes["g2"].x, boxes["g2"].y) == (120, 56)
        assert (boxes["G"].width, boxes["G"].height) == (300, 200)

    def test_include_children_lifts_cross_edges(self):
        """An edge into a container's child orders the container after the source."""
        inner = Box("C", 10, 10, children=[Box("c1", 60, 40)])
        boxes = by_id(LayeredLayout().arrange(graph([Box("r", 100, 50), inner], [edge("e", "r", "c1")])))
        assert boxes["C"].x >= boxes["r"].x + boxes["r"].width

    def test_flat_ignores_cross_edges(self):
        """In FLAT mode the same edge does not separate the two into layers."""
        inner = Box("C", 10, 10, children=[Box("c1", 60, 40)])
        g = graph([Box("r", 100, 50), inner], [edge("e", "r", "c1")], **{OPT_HIERARCHY: "FLAT"})
        boxes = by_id(LayeredLayout().arrange(g))
        assert boxes["C"].x < boxes["r"].x + boxes["r"].width

    def test_async_contract(self):
        """layout() is awaitable and returns the same arrangement as arrange()."""
        g = graph([Box("A", 100, 50), Box("B", 100, 50)], [edge("e", "A", "B")])
        engine = LayeredLayout()
        result = asyncio.run(engine.layout(g))
        assert result.to_dict() == engine.arrange(g).to_dict()
