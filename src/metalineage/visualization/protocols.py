"""Protocols for lineage visualization.

Defines interfaces for graph rendering and visualization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from metalineage.base import TableLineage


class RenderFormat(str, Enum):
    """Supported render formats."""

    JSON = "json"  # vis-network nodes/edges document
    HTML = "html"  # Standalone page
    MERMAID = "mermaid"  # Mermaid diagram syntax


@dataclass
class RenderConfig:
    """Configuration for graph rendering.

    Attributes:
        label_separator: Replacement for '.' in node labels
        node_group: Group tag of table nodes
        level_scale: Factor applied to node levels
        indent: JSON indentation (None for compact)
        title: Page title for HTML output
        theme: Color theme ('light' or 'dark')
        direction: Layout direction (UD, DU, LR, RL)
        highlight_nodes: Table fqdns to highlight
        height: Canvas height for HTML output
    """

    label_separator: str = "\n"
    node_group: str = "tables"
    level_scale: int = 2
    indent: int | None = None
    title: str = "Lineage"
    theme: str = "light"  # light, dark
    direction: str = "UD"
    highlight_nodes: list[str] = field(default_factory=list)
    height: int = 800

    # Light theme colors
    DEFAULT_COLORS: dict[str, str] = field(default_factory=lambda: {
        "background": "#FFFFFF",
        "node": "#2196F3",
        "highlight": "#E91E63",
        "edge": "#607D8B",
        "font": "#212121",
    })

    # Dark theme colors (brighter for dark backgrounds)
    DARK_COLORS: dict[str, str] = field(default_factory=lambda: {
        "background": "#121212",
        "node": "#42A5F5",
        "highlight": "#EC407A",
        "edge": "#90A4AE",
        "font": "#EEEEEE",
    })

    @property
    def colors(self) -> dict[str, str]:
        if self.theme == "dark":
            return self.DARK_COLORS
        return self.DEFAULT_COLORS

    @classmethod
    def from_lineage_config(cls, config, **overrides) -> "RenderConfig":
        """Derive rendering defaults from a LineageConfig."""
        values = {
            "label_separator": config.label_separator,
            "node_group": config.node_group,
            "level_scale": config.level_scale,
            "indent": config.json_indent,
        }
        values.update(overrides)
        return cls(**values)


@runtime_checkable
class IGraphRenderer(Protocol):
    """Protocol for table lineage renderers."""

    @property
    def format(self) -> RenderFormat:
        """Get renderer output format."""
        ...

    def render(self, lineage: "TableLineage") -> str:
        """Render a normalized table lineage.

        Args:
            lineage: Lineage with levels and ids assigned

        Returns:
            Rendered output
        """
        ...
