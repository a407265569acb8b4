"""Kind-specific node sizing."""

from __future__ import annotations

from graphweaver.config import LayoutConfig
from graphweaver.ir.model import Node, SpanHint
from graphweaver.types import NodeKind

BASE_SIZE: dict[NodeKind, tuple[float, float]] = {
    NodeKind.Actor: (140.0, 140.0),
    NodeKind.Activity: (160.0, 160.0),
    NodeKind.Grouping: (240.0, 240.0),
    NodeKind.Media: (180.0, 180.0),
}

CHAR_WIDTH: float = 8.0
LABEL_PADDING: float = 48.0
SPAN_BOOST: float = 80.0


def label_based_width(label: str, base: float) -> float:
    return max(base, len(label) * CHAR_WIDTH + LABEL_PADDING)


def width_boost(hint: SpanHint | None, config: LayoutConfig) -> float:
    """Extra width for nodes whose span hints ask for more room."""
    if not config.grid or hint is None:
        return 0.0
    factor = hint.span_factor
    return (factor / 3) * SPAN_BOOST if factor > 0 else 0.0


def node_size(node: Node, hint: SpanHint | None, config: LayoutConfig) -> tuple[float, float]:
    """Preferred (width, height): explicit overrides win, otherwise label- and kind-based."""
    base_w, base_h = BASE_SIZE[node.kind]
    width = node.width if node.width is not None else label_based_width(node.label, base_w + width_boost(hint, config))
    height = node.height if node.height is not None else base_h
    return (width, height)
