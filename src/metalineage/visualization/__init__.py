"""Lineage visualization module.

Provides graph rendering for lineage front ends:
- vis-network: nodes/edges JSON document and standalone page
- Mermaid: Markdown-friendly diagrams
- dagre-d3: field lineage page
"""

from metalineage.visualization.protocols import (
    IGraphRenderer,
    RenderFormat,
    RenderConfig,
)

from metalineage.visualization.vis_network import (
    VisNetworkRenderer,
    render,
)
from metalineage.visualization.mermaid import MermaidRenderer
from metalineage.visualization.html import render_schema_page, render_table_page

_RENDERERS = {
    "vis": VisNetworkRenderer,
    "mermaid": MermaidRenderer,
}


def get_renderer(name: str, config: RenderConfig | None = None) -> IGraphRenderer:
    """Get a renderer by name ('vis' or 'mermaid').

    Raises:
        ValueError: If the renderer name is unknown
    """
    try:
        renderer_cls = _RENDERERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown renderer '{name}'. Available: {', '.join(sorted(_RENDERERS))}"
        ) from None
    return renderer_cls(config)


__all__ = [
    # Protocols
    "IGraphRenderer",
    "RenderFormat",
    "RenderConfig",
    # Renderers
    "VisNetworkRenderer",
    "MermaidRenderer",
    "get_renderer",
    "render",
    # Pages
    "render_table_page",
    "render_schema_page",
]
