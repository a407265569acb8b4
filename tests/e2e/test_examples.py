"""Run every diagram under examples/ through the full pipeline and check the result's invariants."""

import json
from pathlib import Path

import pytest

from graphweaver import RenderConfig, layout_graph, load, render_graph
from graphweaver.routing.frame import Frame

EXAMPLES_DIR = Path(__file__).parent.parent.parent / "examples"

EXAMPLE_FILES = sorted(EXAMPLES_DIR.glob("*.json"))


@pytest.mark.parametrize("path", EXAMPLE_FILES, ids=[p.stem for p in EXAMPLE_FILES])
def test_every_node_and_edge_rendered(path: Path) -> None:
    """Each model node is laid out once and each edge gets an attachment."""
    text = path.read_text()
    model = load(text)
    render = layout_graph(text)
    assert sorted(n.id for n in render.nodes) == sorted(n.id for n in model.nodes)
    assert sorted(e.id for e in render.edges) == sorted(e.id for e in model.edges)


@pytest.mark.parametrize("path", EXAMPLE_FILES, ids=[p.stem for p in EXAMPLE_FILES])
def test_children_inside_parents(path: Path) -> None:
    """Every parented node's absolute box lies within its parent's box."""
    render = layout_graph(path.read_text())
    frame = Frame(render.snapshot())
    for node in render.nodes:
        if node.parent_id is None:
            continue
        child = frame.absolute(node.id)
        parent = frame.absolute(node.parent_id)
        assert child.x >= parent.x - 1e-6
        assert child.y >= parent.y - 1e-6
        assert child.right() <= parent.right() + 1e-6
        assert child.bottom() <= parent.bottom() + 1e-6


@pytest.mark.parametrize("path", EXAMPLE_FILES, ids=[p.stem for p in EXAMPLE_FILES])
def test_output_is_deterministic(path: Path) -> None:
    """Rendering the same file twice gives identical JSON and SVG."""
    text = path.read_text()
    assert render_graph(text) == render_graph(text)
    svg = RenderConfig(output_format="svg")
    assert render_graph(text, render=svg) == render_graph(text, render=svg)


@pytest.mark.parametrize("path", EXAMPLE_FILES, ids=[p.stem for p in EXAMPLE_FILES])
def test_handle_ids_unique_per_side(path: Path) -> None:
    """No two edges share a handle on the same node."""
    data = json.loads(render_graph(path.read_text()))
    used: set[tuple[str, str]] = set()
    for edge in data["edges"]:
        attachment = edge["attachment"]
        for node_id, role in ((edge["source"], "source"), (edge["target"], "target")):
            key = (node_id, attachment[role]["handleId"])
            assert key not in used
            used.add(key)
