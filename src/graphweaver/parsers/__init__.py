"""Parser registry: auto-detect the input form and dispatch to the right parser."""

from __future__ import annotations

import json
from typing import Any

from graphweaver.errors import GraphModelError
from graphweaver.ir.model import GraphModel
from graphweaver.parsers.flat import FlatParser, parse_flat
from graphweaver.parsers.tree import TreeParser, parse_tree


def detect_form(data: Any) -> str:
    """Detect the input form of a decoded document. Returns 'tree' or 'flat'."""
    if isinstance(data, list):
        return "tree"
    if isinstance(data, dict):
        if "element" in data:
            return "tree"
        if "nodes" in data or "edges" in data:
            return "flat"
    raise GraphModelError("unrecognised graph document: expected a flat graph or a tree of elements")


_PARSERS = {
    "flat": FlatParser,
    "tree": TreeParser,
}


def parse(data: Any) -> GraphModel:
    """Auto-detect the input form and build the graph model."""
    form = detect_form(data)
    return _PARSERS[form]().parse(data)


def load(text: str) -> GraphModel:
    """Parse a JSON document in either form."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GraphModelError(f"invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}") from e
    return parse(data)


__all__ = ["FlatParser", "TreeParser", "detect_form", "load", "parse", "parse_flat", "parse_tree"]
