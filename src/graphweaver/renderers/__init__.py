"""Renderer registry: pick an output format and render the planned model."""

from __future__ import annotations

from graphweaver.renderers.base import Renderer
from graphweaver.renderers.json import JsonRenderer
from graphweaver.renderers.svg import SvgRenderer

RENDERERS: dict[str, type[Renderer]] = {
    "json": JsonRenderer,
    "svg": SvgRenderer,
}


def get_renderer(fmt: str) -> Renderer:
    """Look up the renderer for an output format name."""
    renderer_cls = RENDERERS.get(fmt.lower())
    if renderer_cls is None:
        raise ValueError(f"Unknown output format '{fmt}'; use {' or '.join(RENDERERS)}")
    return renderer_cls()


__all__ = ["RENDERERS", "JsonRenderer", "Renderer", "SvgRenderer", "get_renderer"]
