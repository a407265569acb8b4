"""CLI entry point for graphweaver."""

import logging
import sys

import click

from graphweaver import layout_graph
from graphweaver.config import LayoutConfig
from graphweaver.errors import GraphModelError, LayoutError
from graphweaver.parsers import load
from graphweaver.renderers import RENDERERS, get_renderer
from graphweaver.types import Direction, HierarchyMode

_DIRECTION_MAP: dict[str, Direction] = {
    "RIGHT": Direction.RIGHT,
    "LR": Direction.RIGHT,
    "DOWN": Direction.DOWN,
    "TD": Direction.DOWN,
    "TB": Direction.DOWN,
}


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--direction", "-d", "direction", type=str, default="RIGHT", help="Layout direction (RIGHT or DOWN)")
@click.option("--no-layout", "no_layout", is_flag=True, help="Skip the layered pass; use grid placements only")
@click.option("--flat", "flat", is_flag=True, help="Ignore edges that cross grouping boundaries during layering")
@click.option("--no-grid", "no_grid", is_flag=True, help="Do not arrange grouping children in grids")
@click.option("--spacing", "-s", "spacing", type=float, default=2, help="Spacing factor (pixels = factor x 60)")
@click.option("--padding", "-p", "padding", type=float, default=56, help="Container padding in pixels")
@click.option("--format", "-f", "fmt", type=click.Choice(list(RENDERERS)), default="json", help="Output format")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log layout decisions to stderr")
def main(
    input: str | None,
    direction: str,
    no_layout: bool,
    flat: bool,
    no_grid: bool,
    spacing: float,
    padding: float,
    fmt: str,
    output: str | None,
    verbose: bool,
) -> None:
    """Lay out a JSON diagram (flat or tree form) and emit JSON or SVG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    key = direction.upper()
    if key not in _DIRECTION_MAP:
        click.echo(f"error: unknown direction '{direction}'; use RIGHT or DOWN", err=True)
        sys.exit(1)

    try:
        model = load(text)
    except GraphModelError as e:
        click.echo(f"parse error:\n{e}", err=True)
        sys.exit(1)

    config = LayoutConfig(
        algorithm="none" if no_layout else "layered",
        direction=_DIRECTION_MAP[key],
        spacing=spacing,
        padding=padding,
        grid=not no_grid,
        hierarchy=HierarchyMode.FLAT if flat else HierarchyMode.INCLUDE_CHILDREN,
    )

    try:
        render_model = layout_graph(model, config)
    except LayoutError as e:
        click.echo(f"layout error:\n{e}", err=True)
        sys.exit(1)

    rendered = get_renderer(fmt).render(render_model)

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
