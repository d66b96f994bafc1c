"""Mermaid rendering for table lineage."""

from __future__ import annotations

from metalineage.base import LineageError, TableLineage
from metalineage.visualization.protocols import RenderConfig, RenderFormat

# vis-network direction -> Mermaid flowchart direction
_DIRECTIONS = {"UD": "TD", "DU": "BT", "LR": "LR", "RL": "RL"}


def _escape(text: str) -> str:
    return text.replace('"', "#quot;")


class MermaidRenderer:
    """Render table lineage as a Mermaid flowchart.

    Arrows point from producer to consumer. Nodes at the same level share a
    rank through the order they are declared in.
    """

    def __init__(self, config: RenderConfig | None = None):
        self._config = config or RenderConfig()

    @property
    def format(self) -> RenderFormat:
        return RenderFormat.MERMAID

    def render(self, lineage: TableLineage) -> str:
        direction = _DIRECTIONS.get(self._config.direction.upper(), "TD")
        lines = [f"flowchart {direction}"]

        for node in lineage.nodes:
            if node.id is None:
                raise LineageError(f"Node {node.fqdn} has no id; assign ids before rendering")
            label = _escape(node.fqdn).replace(".", "<br/>")
            lines.append(f'    n{node.id}["{label}"]')

        for node in lineage.nodes:
            for successor in sorted(node.next, key=lambda n: n.id):
                lines.append(f"    n{node.id} --> n{successor.id}")

        highlighted = [
            f"n{node.id}" for node in lineage.nodes
            if node.fqdn in self._config.highlight_nodes
        ]
        if highlighted:
            color = self._config.colors["highlight"]
            lines.append(f"    classDef highlight fill:{color},color:#FFFFFF")
            lines.append(f"    class {','.join(highlighted)} highlight")

        return "\n".join(lines) + "\n"

    def render_markdown(self, lineage: TableLineage) -> str:
        return f"```mermaid\n{self.render(lineage)}```\n"
