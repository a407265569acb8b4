"""SVG renderer: a deterministic snapshot of a render model.

Edges are drawn through the live geometry resolver with no live anchors,
so every endpoint falls back to its planned side and offset. Marker ids come
from the render model, which already carries the canvas namespace.
"""

from __future__ import annotations

from graphweaver.layout.types import Rect
from graphweaver.render import RenderEdge, RenderModel, RenderNode
from graphweaver.routing.frame import Frame
from graphweaver.routing.geometry import EdgeGeometry, resolve_edge_geometry
from graphweaver.types import EdgeKind, NodeKind

# ─── Constants ──────────────────────────────────────────────────────────────

FONT_SIZE = 14
FONT_FAMILY = "sans-serif"
PADDING = 40  # canvas padding in pixels
CHIP_HEIGHT = 22

_STROKE_STYLES: dict[EdgeKind, str] = {
    EdgeKind.Association: "",
    EdgeKind.Include: ' stroke-dasharray="6 4"',
    EdgeKind.Extend: ' stroke-dasharray="6 4"',
}

_FILL_STROKE = 'fill="white" stroke="#333" stroke-width="1.5"'
_GROUP_STROKE = 'fill="#f7f7f9" stroke="#888" stroke-width="1" stroke-dasharray="4 2"'


def _escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def _font(size: int = FONT_SIZE) -> str:
    return f'font-family="{FONT_FAMILY}" font-size="{size}"'


def _n(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


# ─── Shape Rendering ────────────────────────────────────────────────────────


def _render_node(node: RenderNode, rect: Rect) -> str:
    x, y, w, h = rect.x, rect.y, rect.width, rect.height
    cx, cy = rect.center.x, rect.center.y
    label = _escape(node.label)
    font = _font()
    fs = _FILL_STROKE

    if node.kind is NodeKind.Grouping:
        font = _font(FONT_SIZE - 2)
        chip_w = len(node.label) * 8 + 16
        return "\n".join(
            [
                f'<rect x="{_n(x)}" y="{_n(y)}" width="{_n(w)}" height="{_n(h)}" rx="8" {_GROUP_STROKE}/>',
                f'<rect x="{_n(x + 8)}" y="{_n(y + 8)}" width="{_n(chip_w)}" height="{CHIP_HEIGHT}" rx="11" fill="#e4e4ea"/>',
                f'<text x="{_n(x + 16)}" y="{_n(y + 8 + CHIP_HEIGHT / 2)}" dominant-baseline="central" {font} fill="#444">{label}</text>',
            ]
        )

    if node.kind is NodeKind.Actor:
        head_r = min(w, h) / 8
        head_cy = y + h * 0.25
        body = [
            f'<circle cx="{_n(cx)}" cy="{_n(head_cy)}" r="{_n(head_r)}" {fs}/>',
            f'<line x1="{_n(cx)}" y1="{_n(head_cy + head_r)}" x2="{_n(cx)}" y2="{_n(y + h * 0.6)}" stroke="#333" stroke-width="1.5"/>',
            f'<line x1="{_n(cx - head_r * 1.5)}" y1="{_n(y + h * 0.45)}" x2="{_n(cx + head_r * 1.5)}" y2="{_n(y + h * 0.45)}" stroke="#333" stroke-width="1.5"/>',
            f'<text x="{_n(cx)}" y="{_n(y + h * 0.8)}" dominant-baseline="central" text-anchor="middle" {font}>{label}</text>',
        ]
        return "\n".join(body)

    if node.kind is NodeKind.Activity:
        shape = f'<ellipse cx="{_n(cx)}" cy="{_n(cy)}" rx="{_n(w / 2)}" ry="{_n(h / 3)}" {fs}/>'
    else:
        shape = f'<rect x="{_n(x)}" y="{_n(y)}" width="{_n(w)}" height="{_n(h)}" rx="6" {fs}/>'
    text = f'<text x="{_n(cx)}" y="{_n(cy)}" dominant-baseline="central" text-anchor="middle" {font}>{label}</text>'
    return f"{shape}\n{text}"


# ─── Edge Rendering ─────────────────────────────────────────────────────────


def _render_marker(edge: RenderEdge, geometry: EdgeGeometry) -> str:
    return (
        f'  <marker id="{_escape(edge.marker_id)}" markerWidth="18" markerHeight="18" '
        f'orient="{geometry.marker_orientation}" markerUnits="userSpaceOnUse" refX="14" refY="9">\n'
        '    <path d="M 0 0 L 14 9 L 0 18 z" fill="#555"/>\n'
        "  </marker>"
    )


def _render_edge(edge: RenderEdge, geometry: EdgeGeometry) -> str:
    style = _STROKE_STYLES.get(edge.kind, "")
    parts = [
        f'<path id="{_escape(edge.id)}" d="{geometry.path}" fill="none" stroke="#555" stroke-width="2"{style} '
        f'marker-end="url(#{_escape(edge.marker_id)})"/>'
    ]
    if edge.label:
        lp = geometry.label_position
        font = _font(FONT_SIZE - 2)
        parts.append(
            f'<text x="{_n(lp.x)}" y="{_n(lp.y)}" dominant-baseline="central" text-anchor="middle" '
            f'{font} fill="#333">{_escape(edge.label)}</text>'
        )
    return "\n".join(parts)


# ─── Public Renderer ────────────────────────────────────────────────────────


class SvgRenderer:
    """SVG renderer: consumes a render model, produces an SVG string."""

    def render(self, model: RenderModel) -> str:
        if not model.nodes:
            return ""

        snapshot = model.snapshot()
        frame = Frame(snapshot)
        rects = {n.id: frame.absolute(n.id) for n in model.nodes}
        geometries: list[tuple[RenderEdge, EdgeGeometry]] = []
        for edge in model.edges:
            geometry = resolve_edge_geometry(edge.to_ref(), snapshot)
            if geometry is not None:
                geometries.append((edge, geometry))

        xs: list[float] = []
        ys: list[float] = []
        for rect in rects.values():
            if rect is None:
                continue
            xs += [rect.x, rect.right()]
            ys += [rect.y, rect.bottom()]
        for _, geometry in geometries:
            xs += [p.x for p in geometry.points]
            ys += [p.y for p in geometry.points]

        min_x, min_y = min(xs), min(ys)
        svg_w = max(xs) - min_x + PADDING * 2
        svg_h = max(ys) - min_y + PADDING * 2

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_n(svg_w)}" height="{_n(svg_h)}" '
            f'viewBox="0 0 {_n(svg_w)} {_n(svg_h)}">',
            "<defs>",
            *(_render_marker(edge, geometry) for edge, geometry in geometries),
            "</defs>",
            f'<rect width="{_n(svg_w)}" height="{_n(svg_h)}" fill="white"/>',
            f'<g transform="translate({_n(PADDING - min_x)},{_n(PADDING - min_y)})">',
        ]

        for node in sorted(model.nodes, key=lambda n: n.z_index):
            rect = rects[node.id]
            if rect is not None:
                parts.append(_render_node(node, rect))

        for edge, geometry in geometries:
            parts.append(_render_edge(edge, geometry))

        parts.append("</g>")
        parts.append("</svg>")
        return "\n".join(parts) + "\n"
