"""Layout session: the async state around one diagram instance.

Only the most recent ``run`` is current. A run that finishes after a newer
one has started is discarded rather than merged, and a failed run leaves
an empty diagram with the error set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from graphweaver.config import LayoutConfig
from graphweaver.errors import LayoutError
from graphweaver.ir.model import GraphModel
from graphweaver.layout.engine import LayoutAlgorithm, run_layout
from graphweaver.layout.types import LayoutResult
from graphweaver.render import RenderEdge, RenderModel, RenderNode, build_render_model

logger = logging.getLogger(__name__)


@dataclass
class LayoutState:
    nodes: list[RenderNode] = field(default_factory=list)
    edges: list[RenderEdge] = field(default_factory=list)
    is_loading: bool = False
    error: str | None = None
    result: LayoutResult | None = None

    @property
    def render_model(self) -> RenderModel:
        return RenderModel(nodes=list(self.nodes), edges=list(self.edges))


class LayoutSession:
    def __init__(self, algorithm: LayoutAlgorithm | None = None, canvas_id: str = "rf") -> None:
        self.algorithm = algorithm
        self.canvas_id = canvas_id
        self.state = LayoutState()
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def is_current(self, version: int) -> bool:
        return version == self._version

    async def run(self, model: GraphModel, config: LayoutConfig | None = None) -> LayoutState:
        """Run one layout pass and publish its state if it is still the latest request."""
        self._version += 1
        version = self._version
        self.state = LayoutState(
            nodes=self.state.nodes,
            edges=self.state.edges,
            is_loading=True,
            result=self.state.result,
        )

        try:
            result = await run_layout(model, config, self.algorithm)
        except LayoutError as err:
            if not self.is_current(version):
                logger.debug("discarding failure of stale layout request %d", version)
                return self.state
            self.state = LayoutState(is_loading=False, error=str(err))
            return self.state

        if not self.is_current(version):
            logger.debug("discarding stale layout result %d (current is %d)", version, self._version)
            return self.state

        render = build_render_model(result, canvas_id=self.canvas_id)
        self.state = LayoutState(nodes=render.nodes, edges=render.edges, result=result)
        return self.state
