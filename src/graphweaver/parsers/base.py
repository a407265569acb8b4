"""Base parser protocol and the field readers shared by every input form."""

from __future__ import annotations

from typing import Any, Protocol

from graphweaver.config import DEFAULT_JUSTIFY, GridOptions
from graphweaver.errors import GraphModelError
from graphweaver.ir.model import BREAKPOINTS, Edge, GraphModel, Node, NodeMedia, NodeProperty, SpanHint
from graphweaver.types import EdgeKind, NodeKind


class Parser(Protocol):
    """Protocol that all graph input parsers must implement."""

    def parse(self, data: Any) -> GraphModel:
        """Parse a decoded JSON document into a graph model."""
        ...


def _require(data: dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if value is None or str(value) == "":
        raise GraphModelError(f"{what} is missing '{key}': {data!r}")
    return str(value)


def _number(value: Any, what: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise GraphModelError(f"{what}: expected a number, got {value!r}") from e


def _integer(value: Any, what: str) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise GraphModelError(f"{what}: expected an integer, got {value!r}") from e


def require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise GraphModelError(f"{what} must be an object, got {data!r}")
    return data


def require_list(data: Any, what: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise GraphModelError(f"{what} must be a list, got {data!r}")
    return data


def read_node_kind(value: Any) -> NodeKind:
    try:
        return NodeKind.parse(str(value))
    except ValueError as e:
        raise GraphModelError(str(e)) from e


def read_edge_kind(value: Any) -> EdgeKind:
    if value is None:
        return EdgeKind.Association
    try:
        return EdgeKind.parse(str(value))
    except ValueError as e:
        raise GraphModelError(str(e)) from e


def _read_property(data: Any, node_id: str) -> NodeProperty:
    entry = require_object(data, f"node {node_id} property")
    return NodeProperty(key=_require(entry, "key", f"node {node_id} property"), value=str(entry.get("value", "")))


def read_node(data: Any, kind: NodeKind, parent_id: str | None = None) -> Node:
    data = require_object(data, "node")
    node_id = _require(data, "id", "node")
    media = data.get("media")
    if media:
        media = require_object(media, f"node {node_id} media")
    properties = require_list(data.get("properties"), f"node {node_id} properties")
    return Node(
        id=node_id,
        label=str(data.get("label", node_id)),
        kind=kind,
        parent_id=data.get("parentId", parent_id),
        width=_number(data.get("width"), f"node {node_id} width"),
        height=_number(data.get("height"), f"node {node_id} height"),
        icon=data.get("icon"),
        media=NodeMedia(src=media.get("src"), alt=media.get("alt"), icon=media.get("icon")) if media else None,
        properties=tuple(_read_property(p, node_id) for p in properties),
    )


def read_edge(data: Any, source_key: str = "source", target_key: str = "target") -> Edge:
    data = require_object(data, "edge")
    edge_id = _require(data, "id", "edge")
    label = data.get("label")
    return Edge(
        id=edge_id,
        source=_require(data, source_key, f"edge {edge_id}"),
        target=_require(data, target_key, f"edge {edge_id}"),
        kind=read_edge_kind(data.get("kind", data.get("type"))),
        label=str(label) if label else None,
    )


def read_grid(data: Any) -> GridOptions | None:
    """Grid options from ``true`` (all defaults) or a mapping; falsy means no grid."""
    if not data:
        return None
    if data is True:
        return GridOptions()
    if not isinstance(data, dict):
        raise GraphModelError(f"grid options must be an object or true, got {data!r}")
    columns = _integer(data.get("columns"), "grid columns")
    spacing = _number(data.get("spacing", data.get("gap")), "grid spacing")
    return GridOptions(
        columns=max(1, columns) if columns is not None else 12,
        rows=_integer(data.get("rows"), "grid rows"),
        spacing=spacing if spacing is not None else 24,
        justify=str(data.get("justify", DEFAULT_JUSTIFY)),
    )


def read_hint(data: dict[str, Any]) -> SpanHint | None:
    values = {bp: _integer(data[bp], f"span hint '{bp}'") for bp in BREAKPOINTS if data.get(bp) is not None}
    return SpanHint(**values) if values else None
