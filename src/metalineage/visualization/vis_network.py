"""vis-network document rendering for table lineage.

The document matches what the catalog's lineage page feeds into a
hierarchical vis-network layout:

    {
      "nodes": [{"id", "label", "group", "level", "fqdn"}, ...],
      "edges": [{"from", "to", "arrows"}, ...]
    }

Edges keep the page's wire convention: ``from`` is the downstream
successor, ``to`` the upstream node, and ``arrows`` is ``"from"``.
Consumers that want upstream-to-downstream pairs swap the two ids.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from metalineage.base import LineageError, TableLineage, VisitationNode
from metalineage.encoding import encode_json
from metalineage.visualization.protocols import RenderConfig, RenderFormat

NodeCollection = Union[Mapping[str, VisitationNode], Iterable[VisitationNode]]

EDGE_ARROWS = "from"


def render(
    nodes: NodeCollection,
    min_distance: int,
    max_distance: int,
    config: RenderConfig | None = None,
) -> dict[str, list[dict[str, Any]]]:
    """Render visitation nodes into a nodes/edges document.

    Levels are (re)derived from ``min_distance``. Nodes are listed by id,
    edges by upstream id then successor id.

    Raises:
        LineageError: If a node has no id or lies outside the distance range
    """
    config = config or RenderConfig()
    node_list = list(nodes.values()) if isinstance(nodes, Mapping) else list(nodes)

    for node in node_list:
        if node.id is None:
            raise LineageError(f"Node {node.fqdn} has no id; assign ids before rendering")
        if not min_distance <= node.distance <= max_distance:
            raise LineageError(
                f"Node {node.fqdn} has distance {node.distance} outside "
                f"[{min_distance}, {max_distance}]"
            )
        node.level = node.distance - min_distance

    ordered = sorted(node_list, key=lambda n: n.id)
    return {
        "nodes": [_node_entry(node, config) for node in ordered],
        "edges": [
            {"from": successor.id, "to": node.id, "arrows": EDGE_ARROWS}
            for node in ordered
            for successor in sorted(node.next, key=lambda n: n.id)
        ],
    }


def _node_entry(node: VisitationNode, config: RenderConfig) -> dict[str, Any]:
    return {
        "id": node.id,
        "label": node.fqdn.replace(".", config.label_separator),
        "group": config.node_group,
        "level": node.level * config.level_scale,
        "fqdn": node.fqdn,
    }


class VisNetworkRenderer:
    """Render table lineage for vis-network.

    Example:
        >>> renderer = VisNetworkRenderer()
        >>> payload = renderer.render(lineage)
        >>> page = renderer.render_html(lineage)
    """

    def __init__(self, config: RenderConfig | None = None):
        self._config = config or RenderConfig()

    @property
    def format(self) -> RenderFormat:
        return RenderFormat.JSON

    @property
    def config(self) -> RenderConfig:
        return self._config

    def render_document(self, lineage: TableLineage) -> dict[str, list[dict[str, Any]]]:
        return render(lineage.nodes, lineage.min_distance, lineage.max_distance, self._config)

    def render(self, lineage: TableLineage) -> str:
        """Render the document as JSON.

        Raises:
            SerializationError: If the document cannot be encoded
        """
        return encode_json(self.render_document(lineage), indent=self._config.indent)

    def render_html(self, lineage: TableLineage) -> str:
        """Render a standalone vis-network page."""
        from metalineage.visualization.html import render_table_page

        return render_table_page(lineage, self.render_document(lineage), self._config)
