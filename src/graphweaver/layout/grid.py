"""Grid sub-layout for grouping containers.

The hierarchical layout delegate places siblings independently and cannot
honour an "N-column responsive grid" constraint, so the direct children of
every grouping that carries grid options are arranged here first:

  1. Row packing   (left-to-right, wrap when the running span overflows)
  2. Row fitting   (widen the grid until a requested row count is met)
  3. Justification (horizontal placement inside each row)
  4. Sizing        (container = max(base, content + padding + label band))

Groupings are processed bottom-up so nested groupings are sized before
their hosts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from graphweaver.config import GridOptions, LayoutConfig
from graphweaver.ir.model import GraphModel
from graphweaver.layout.sizing import node_size
from graphweaver.layout.types import GridPlacement, SubgraphMeta

logger = logging.getLogger(__name__)

# ─── Geometry constants ──────────────────────────────────────────────────────

GRID_PADDING: float = 24.0
LABEL_BAND: float = 32.0
MAX_FIT_ATTEMPTS: int = 24
MAX_DEFAULT_PER_ROW: int = 6


@dataclass(frozen=True)
class GridChild:
    """A child box awaiting placement; ``span`` is its explicit hint, if any."""

    id: str
    width: float
    height: float
    span: int | None = None


@dataclass(frozen=True)
class PackedItem:
    child: GridChild
    span: int
    col_start: int


# ─── Row packing ─────────────────────────────────────────────────────────────


def default_span(columns: int) -> int:
    """Span given to children without a hint: at most six children share a row."""
    per_row = min(columns, MAX_DEFAULT_PER_ROW)
    return max(1, columns // per_row)


def pack_rows(children: list[GridChild], columns: int) -> list[list[PackedItem]]:
    """Pack children left-to-right into rows of at most ``columns`` span units."""
    rows: list[list[PackedItem]] = []
    current: list[PackedItem] = []
    used = 0
    fallback = default_span(columns)

    for child in children:
        span = child.span if child.span is not None else fallback
        span = min(columns, max(1, span))
        if current and used + span > columns:
            rows.append(current)
            current = []
            used = 0
        current.append(PackedItem(child=child, span=span, col_start=used + 1))
        used += span

    if current:
        rows.append(current)
    return rows


def fit_rows(children: list[GridChild], columns: int, target_rows: int | None) -> tuple[int, list[list[PackedItem]]]:
    """Pack, widening the grid one column at a time until ``target_rows`` is met.

    Returns (columns used, rows). When the bound is exhausted the attempt
    with the fewest rows wins.
    """
    cols = max(1, columns)
    best: tuple[int, list[list[PackedItem]]] | None = None

    for _attempt in range(MAX_FIT_ATTEMPTS):
        rows = pack_rows(children, cols)
        if best is None or len(rows) < len(best[1]):
            best = (cols, rows)
        if target_rows is None or len(rows) <= target_rows:
            return cols, rows
        cols += 1

    assert best is not None
    logger.debug(
        "grid row target %s not met after %d attempts; accepting %d rows",
        target_rows,
        MAX_FIT_ATTEMPTS,
        len(best[1]),
    )
    return best


# ─── Justification ───────────────────────────────────────────────────────────


def justify_row(widths: list[float], available: float, justify: str, gap: float = 0.0) -> list[float]:
    """Horizontal offsets of a row's items within ``available`` width.

    ``gap`` separates items for the packed modes (start/center/end); the
    distributed modes derive their gaps from the free space.
    """
    count = len(widths)
    if count == 0:
        return []
    content = sum(widths)
    packed = content + gap * (count - 1)

    if justify == "start":
        lead, step = 0.0, gap
    elif justify == "end":
        lead, step = max(0.0, available - packed), gap
    elif justify == "center":
        lead, step = max(0.0, available - packed) / 2, gap
    elif justify == "space-between":
        free = max(0.0, available - content)
        lead, step = 0.0, (free / (count - 1) if count > 1 else 0.0)
    elif justify == "space-evenly":
        free = max(0.0, available - content)
        step = free / (count + 1)
        lead = step
    else:
        # stretch, space-around and anything unrecognized
        free = max(0.0, available - content)
        step = free / count
        lead = step / 2

    offsets: list[float] = []
    x = lead
    for width in widths:
        offsets.append(x)
        x += width + step
    return offsets


# ─── Sub-layout ──────────────────────────────────────────────────────────────


def layout_subgraph(
    grouping_id: str,
    children: list[GridChild],
    options: GridOptions,
    base_size: tuple[float, float],
) -> SubgraphMeta:
    """Arrange one grouping's direct children and size the grouping around them."""
    base_w, base_h = base_size
    if not children:
        return SubgraphMeta(
            grouping_id=grouping_id,
            columns=max(1, options.columns),
            rows=0,
            max_per_row=0,
            width=base_w,
            height=base_h + LABEL_BAND,
        )

    columns, rows = fit_rows(children, options.columns, options.rows)
    gap = options.spacing

    col_width = max(item.child.width / item.span for row in rows for item in row)
    available = max(sum(item.span for item in row) * col_width + gap * (len(row) - 1) for row in rows)
    available = max(available, base_w - 2 * GRID_PADDING)

    placements: list[GridPlacement] = []
    row_heights: list[float] = []
    y = GRID_PADDING + LABEL_BAND
    for row_idx, row in enumerate(rows):
        offsets = justify_row([item.child.width for item in row], available, options.justify_mode, gap)
        row_height = max(item.child.height for item in row)
        for col_idx, item in enumerate(row):
            placements.append(
                GridPlacement(
                    child_id=item.child.id,
                    row=row_idx,
                    column=col_idx,
                    col_start=item.col_start,
                    span=item.span,
                    x=GRID_PADDING + offsets[col_idx],
                    y=y,
                    width=item.child.width,
                    height=item.child.height,
                )
            )
        row_heights.append(row_height)
        y += row_height + gap

    content_h = sum(row_heights) + gap * (len(row_heights) - 1)
    return SubgraphMeta(
        grouping_id=grouping_id,
        columns=columns,
        rows=len(rows),
        max_per_row=max(len(row) for row in rows),
        width=max(base_w, available + 2 * GRID_PADDING),
        height=max(base_h, content_h + 2 * GRID_PADDING + LABEL_BAND),
        placements=placements,
    )


# ─── Driver ──────────────────────────────────────────────────────────────────


def grid_options_for(model: GraphModel, grouping_id: str) -> GridOptions | None:
    """The grid a grouping is arranged with, if any.

    A grouping without its own grid options still gets the default grid when
    an enclosing grouping is grid-arranged: the host's grid is fixed, so every
    nested box must be sized before the host places it.
    """
    meta = model.groupings.get(grouping_id)
    if meta is None:
        return None
    if meta.grid is not None:
        return meta.grid
    for ancestor in model.ancestors(grouping_id):
        host = model.groupings.get(ancestor)
        if host is not None and host.grid is not None:
            return GridOptions()
    return None


def compute_subgraph_layouts(model: GraphModel, config: LayoutConfig) -> dict[str, SubgraphMeta]:
    """Run the grid sub-layout for every grid-arranged grouping, bottom-up."""
    if not config.grid:
        return {}

    result: dict[str, SubgraphMeta] = {}
    for grouping_id in model.groupings_bottom_up():
        meta = model.groupings.get(grouping_id)
        options = grid_options_for(model, grouping_id)
        if meta is None or options is None:
            continue

        children: list[GridChild] = []
        for child_id in meta.children:
            child = model.node(child_id)
            if child is None:
                continue
            hint = model.hint(child_id)
            if child_id in result:
                width, height = result[child_id].width, result[child_id].height
            else:
                width, height = node_size(child, hint, config)
            span = hint.pick(config.breakpoint) if hint is not None else None
            children.append(GridChild(id=child_id, width=width, height=height, span=span))

        grouping = model.node(grouping_id)
        assert grouping is not None
        base = node_size(grouping, model.hint(grouping_id), config)
        result[grouping_id] = layout_subgraph(grouping_id, children, options, base)
    return result
