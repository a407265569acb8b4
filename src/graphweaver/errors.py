"""Exception hierarchy for graphweaver."""

from __future__ import annotations


class GraphWeaverError(Exception):
    """Base class for all graphweaver errors."""


class GraphModelError(GraphWeaverError, ValueError):
    """The input graph is structurally invalid (duplicate ids, cycles, unknown kinds)."""


class LayoutError(GraphWeaverError):
    """A layout pass could not produce a result."""


class LayoutComputationFailed(LayoutError):
    """The hierarchical layout delegate rejected or raised.

    The original exception is chained as ``__cause__``.
    """
