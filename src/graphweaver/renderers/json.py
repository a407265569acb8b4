"""JSON renderer: the render model as a JSON document."""

from __future__ import annotations

import json

from graphweaver.render import RenderModel


class JsonRenderer:
    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def render(self, model: RenderModel) -> str:
        return json.dumps(model.to_dict(), indent=self.indent) + "\n"
