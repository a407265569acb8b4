"""Layout types shared across the grid sub-layout, layout delegate and routing."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from graphweaver.ir.model import Edge
from graphweaver.types import NodeKind, Orientation

# Option keys of the hierarchical layout contract
OPT_ALGORITHM = "org.eclipse.elk.algorithm"
OPT_DIRECTION = "org.eclipse.elk.direction"
OPT_SPACING_BETWEEN_LAYERS = "org.eclipse.elk.layered.spacing.nodeNodeBetweenLayers"
OPT_SPACING_NODE_NODE = "org.eclipse.elk.spacing.nodeNode"
OPT_SPACING_EDGE_EDGE = "org.eclipse.elk.spacing.edgeEdge"
OPT_SPACING_COMPONENTS = "org.eclipse.elk.spacing.componentComponent"
OPT_HIERARCHY = "org.eclipse.elk.hierarchyHandling"
OPT_EDGE_ROUTING = "org.eclipse.elk.layered.edgeRouting"
OPT_PADDING = "org.eclipse.elk.padding"

ALGORITHM_LAYERED = "layered"
ALGORITHM_FIXED = "org.eclipse.elk.fixed"


# ─── Delegate contract (box tree) ────────────────────────────────────────────


@dataclass
class Box:
    """A sizeable box in the tree handed to the hierarchical layout delegate.

    ``x``/``y`` are relative to the parent box once the delegate has run.
    """

    id: str
    width: float
    height: float
    x: float | None = None
    y: float | None = None
    children: list[Box] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    layout_options: dict[str, str] = field(default_factory=dict)

    @property
    def is_fixed(self) -> bool:
        return self.layout_options.get(OPT_ALGORITHM) == ALGORITHM_FIXED

    def walk(self) -> Iterator[Box]:
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "width": self.width, "height": self.height}
        if self.x is not None:
            data["x"] = self.x
        if self.y is not None:
            data["y"] = self.y
        data["children"] = [child.to_dict() for child in self.children]
        if self.labels:
            data["labels"] = [{"text": text} for text in self.labels]
        if self.layout_options:
            data["layoutOptions"] = dict(self.layout_options)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Box:
        return cls(
            id=str(data["id"]),
            width=float(data.get("width") or 0),
            height=float(data.get("height") or 0),
            x=float(data["x"]) if data.get("x") is not None else None,
            y=float(data["y"]) if data.get("y") is not None else None,
            children=[cls.from_dict(child) for child in data.get("children") or []],
            labels=[str(label.get("text", "")) for label in data.get("labels") or []],
            layout_options=dict(data.get("layoutOptions") or {}),
        )


@dataclass
class LayoutEdgeSpec:
    id: str
    sources: list[str]
    targets: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "sources": list(self.sources), "targets": list(self.targets)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayoutEdgeSpec:
        return cls(id=str(data["id"]), sources=list(data["sources"]), targets=list(data["targets"]))


@dataclass
class LayoutGraph:
    """Root of the delegate contract: option map, top-level boxes and edges."""

    layout_options: dict[str, str]
    children: list[Box] = field(default_factory=list)
    edges: list[LayoutEdgeSpec] = field(default_factory=list)
    id: str = "graph"
    width: float | None = None
    height: float | None = None

    def walk(self) -> Iterator[Box]:
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "layoutOptions": dict(self.layout_options),
            "children": [child.to_dict() for child in self.children],
            "edges": [edge.to_dict() for edge in self.edges],
        }
        if self.width is not None:
            data["width"] = self.width
        if self.height is not None:
            data["height"] = self.height
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayoutGraph:
        return cls(
            id=str(data.get("id", "graph")),
            layout_options=dict(data.get("layoutOptions") or {}),
            children=[Box.from_dict(child) for child in data.get("children") or []],
            edges=[LayoutEdgeSpec.from_dict(edge) for edge in data.get("edges") or []],
            width=data.get("width"),
            height=data.get("height"),
        )


# ─── Geometry ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    """A 2D point in canvas pixels."""

    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def right(self) -> float:
        return self.x + self.width

    def bottom(self) -> float:
        return self.y + self.height


# ─── Grid sub-layout output ──────────────────────────────────────────────────


@dataclass(frozen=True)
class GridPlacement:
    """Where one child sits inside its grouping's grid.

    ``column`` is the child's index within its row; ``col_start`` is the
    first grid column (1-based) its span occupies.
    """

    child_id: str
    row: int
    column: int
    col_start: int
    span: int
    x: float
    y: float
    width: float
    height: float


@dataclass
class SubgraphMeta:
    """Result of arranging one grouping's direct children into a grid."""

    grouping_id: str
    columns: int
    rows: int
    max_per_row: int
    width: float
    height: float
    placements: list[GridPlacement] = field(default_factory=list)

    @property
    def orientation(self) -> Orientation:
        return Orientation.Horizontal if self.max_per_row >= self.rows else Orientation.Vertical

    def placement(self, child_id: str) -> GridPlacement | None:
        for placement in self.placements:
            if placement.child_id == child_id:
                return placement
        return None


# ─── Layout pass output ──────────────────────────────────────────────────────


@dataclass
class LayoutNode:
    """A node with geometry relative to its immediate parent."""

    id: str
    label: str
    kind: NodeKind
    x: float
    y: float
    width: float
    height: float
    parent_id: str | None = None


@dataclass
class LayoutResult:
    """Self-contained layout output: everything the planner and renderers need."""

    nodes: list[LayoutNode]
    edges: list[Edge]
    subgraphs: dict[str, SubgraphMeta] = field(default_factory=dict)

    def node_map(self) -> dict[str, LayoutNode]:
        return {n.id: n for n in self.nodes}
