"""Centralized configuration for graphweaver."""

from __future__ import annotations

from dataclasses import dataclass

from graphweaver.types import Direction, HierarchyMode

JUSTIFY_MODES: frozenset[str] = frozenset(
    {"start", "center", "end", "space-between", "space-evenly", "stretch", "space-around"}
)
DEFAULT_JUSTIFY = "space-around"


@dataclass(frozen=True)
class LayoutConfig:
    """Options for one layout pass."""

    algorithm: str = "layered"  # "layered" | "none"
    direction: Direction = Direction.RIGHT
    spacing: float = 2
    padding: float = 56
    grid: bool = True
    hierarchy: HierarchyMode = HierarchyMode.INCLUDE_CHILDREN
    breakpoint: str = "md"

    @property
    def auto_layout(self) -> bool:
        return self.algorithm != "none"

    @property
    def spacing_px(self) -> float:
        return self.spacing * 60


@dataclass(frozen=True)
class GridOptions:
    """Grid arrangement options for a grouping container."""

    columns: int = 12
    rows: int | None = None
    spacing: float = 24
    justify: str = DEFAULT_JUSTIFY

    @property
    def justify_mode(self) -> str:
        """The justify token, degraded to space-around when unrecognized."""
        return self.justify if self.justify in JUSTIFY_MODES else DEFAULT_JUSTIFY


@dataclass
class RenderConfig:
    """Configuration for the rendering pipeline."""

    output_format: str = "json"
    canvas_id: str = "rf"
