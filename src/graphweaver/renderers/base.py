"""Base renderer protocol."""

from __future__ import annotations

from typing import Protocol

from graphweaver.render import RenderModel


class Renderer(Protocol):
    """Protocol that all renderers must implement."""

    def render(self, model: RenderModel) -> str:
        """Render a planned render model to an output string."""
        ...
