"""Absolute coordinate frame over parent-relative boxes.

A ``Frame`` is built for one pass (one planning run, one render tick) and
memoizes absolute boxes only for its own lifetime; any ancestor may move
between passes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from graphweaver.layout.types import Point, Rect


class Placed(Protocol):
    """Anything with a parent-relative box."""

    id: str
    x: float
    y: float
    width: float
    height: float
    parent_id: str | None


class Frame:
    def __init__(self, boxes: Mapping[str, Placed]) -> None:
        self.boxes = boxes
        self._absolute: dict[str, Rect] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.boxes

    def origin(self, node_id: str) -> Point | None:
        """Top-left corner in the shared frame: the node's offset plus every ancestor's."""
        box = self.boxes.get(node_id)
        if box is None:
            return None
        x, y = box.x, box.y
        parent_id = box.parent_id
        visited = {node_id}
        while parent_id is not None and parent_id not in visited:
            parent = self.boxes.get(parent_id)
            if parent is None:
                break
            visited.add(parent_id)
            x += parent.x
            y += parent.y
            parent_id = parent.parent_id
        return Point(x, y)

    def absolute(self, node_id: str) -> Rect | None:
        if node_id in self._absolute:
            return self._absolute[node_id]
        origin = self.origin(node_id)
        if origin is None:
            return None
        box = self.boxes[node_id]
        rect = Rect(origin.x, origin.y, box.width, box.height)
        self._absolute[node_id] = rect
        return rect

    def center(self, node_id: str) -> Point | None:
        rect = self.absolute(node_id)
        return rect.center if rect is not None else None
