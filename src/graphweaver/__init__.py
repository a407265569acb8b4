"""graphweaver: hierarchical diagram layout with grid-arranged groupings and planned edge attachments."""

from graphweaver.config import GridOptions, LayoutConfig, RenderConfig
from graphweaver.errors import GraphModelError, GraphWeaverError, LayoutComputationFailed, LayoutError
from graphweaver.ir.model import Edge, GraphModel, Node
from graphweaver.layout.engine import full_layout, run_layout
from graphweaver.parsers import load, parse
from graphweaver.render import RenderModel, build_render_model, edit_edge_label
from graphweaver.renderers import JsonRenderer, SvgRenderer, get_renderer
from graphweaver.routing.geometry import resolve_edge_geometry
from graphweaver.session import LayoutSession, LayoutState


def layout_graph(src: str | GraphModel, config: LayoutConfig | None = None, canvas_id: str = "rf") -> RenderModel:
    """Lay out a graph and plan its edge attachments.

    Args:
        src: JSON text in flat or tree form, or an already built model.
        config: Layout options; defaults to a layered RIGHT layout with grids.
        canvas_id: Namespace for generated marker ids.

    Returns:
        The render model: positioned nodes with handle counts, edges with attachments.

    Raises:
        GraphModelError: If the input cannot be parsed.
        LayoutComputationFailed: If the layout pass fails.
    """
    model = load(src) if isinstance(src, str) else src
    return build_render_model(full_layout(model, config), canvas_id=canvas_id)


def render_graph(src: str | GraphModel, config: LayoutConfig | None = None, render: RenderConfig | None = None) -> str:
    """Lay out a graph and render it as JSON or SVG.

    Raises:
        GraphModelError: If the input cannot be parsed.
        LayoutComputationFailed: If the layout pass fails.
        ValueError: If the output format is unknown.
    """
    render = render or RenderConfig()
    model = layout_graph(src, config, canvas_id=render.canvas_id)
    return get_renderer(render.output_format).render(model)


__all__ = [
    "Edge",
    "GraphModel",
    "GraphModelError",
    "GraphWeaverError",
    "GridOptions",
    "JsonRenderer",
    "LayoutComputationFailed",
    "LayoutConfig",
    "LayoutError",
    "LayoutSession",
    "LayoutState",
    "Node",
    "RenderConfig",
    "RenderModel",
    "SvgRenderer",
    "edit_edge_label",
    "get_renderer",
    "layout_graph",
    "load",
    "parse",
    "render_graph",
    "resolve_edge_geometry",
    "run_layout",
]
