"""Lineage service.

Runs the two lineage pipelines against a catalog snapshot:

    table lineage:  TableLineageBuilder -> normalize/assign_ids -> vis-network document
    field lineage:  FieldLineageBuilder -> forward/backward edge document

Every request builds its own node set, so one service may serve requests for
different tables concurrently.
"""

from __future__ import annotations

import logging
from typing import Any

from metalineage.base import LineageConfig, SchemaLineage, TableLineage
from metalineage.catalog import MetadataCatalog
from metalineage.encoding import encode_json
from metalineage.field_lineage import FieldLineageBuilder
from metalineage.layout import layout_lineage
from metalineage.table_lineage import TableLineageBuilder
from metalineage.visualization import RenderConfig, VisNetworkRenderer, render_schema_page

logger = logging.getLogger(__name__)


class LineageService:
    """Compute and render table and field lineage from a catalog.

    Example:
        >>> service = LineageService(MetadataCatalog.load("catalog.yaml"))
        >>> service.dependency_graph_json("shop.orders")
        '{"nodes": [...], "edges": [...]}'
        >>> service.schema_lineage_json("shop.orders")
        '{"forwardEdges": [...], "backwardEdges": [...]}'
    """

    def __init__(
        self,
        catalog: MetadataCatalog,
        config: LineageConfig | None = None,
        render_config: RenderConfig | None = None,
    ):
        self._catalog = catalog
        self._config = config or LineageConfig()
        self._render_config = render_config or RenderConfig.from_lineage_config(self._config)
        self._table_builder = TableLineageBuilder(self._config)
        self._field_builder = FieldLineageBuilder(self._config)

    @property
    def catalog(self) -> MetadataCatalog:
        return self._catalog

    @property
    def config(self) -> LineageConfig:
        return self._config

    @property
    def render_config(self) -> RenderConfig:
        return self._render_config

    def table_lineage(self, fqdn: str) -> TableLineage:
        """Build and lay out the table lineage of ``fqdn``.

        Raises:
            NodeNotFoundError: If the table is not in the catalog
            GraphTooDeepError: If the lineage exceeds ``max_nodes``
        """
        table = self._catalog.get_table(fqdn)
        nodes = self._table_builder.build(table)
        lineage = layout_lineage(fqdn, nodes)
        logger.info(
            "Table lineage of %s: %d tables, %d edges, depth %d",
            fqdn,
            lineage.node_count,
            lineage.edge_count,
            lineage.depth,
        )
        return lineage

    def dependency_graph(self, fqdn: str) -> dict[str, list[dict[str, Any]]]:
        """Table lineage of ``fqdn`` as a vis-network document."""
        return VisNetworkRenderer(self._render_config).render_document(self.table_lineage(fqdn))

    def dependency_graph_json(self, fqdn: str) -> str:
        """Table lineage of ``fqdn`` as vis-network JSON.

        Raises:
            SerializationError: If the document cannot be encoded
        """
        return encode_json(self.dependency_graph(fqdn), indent=self._config.json_indent)

    def dependency_graph_html(self, fqdn: str) -> str:
        return VisNetworkRenderer(self._render_config).render_html(self.table_lineage(fqdn))

    def schema_lineage(self, fqdn: str) -> SchemaLineage:
        """Build the field lineage of every field of ``fqdn``.

        Raises:
            NodeNotFoundError: If the table is not in the catalog
            GraphTooDeepError: If a walk exceeds ``max_field_depth``
        """
        table = self._catalog.get_table(fqdn)
        lineage = self._field_builder.build(table)
        logger.info(
            "Field lineage of %s: %d forward, %d backward edges",
            fqdn,
            len(lineage.forward_edges),
            len(lineage.backward_edges),
        )
        return lineage

    def schema_lineage_json(self, fqdn: str) -> str:
        """Field lineage of ``fqdn`` as JSON.

        Raises:
            SerializationError: If the document cannot be encoded
        """
        return encode_json(self.schema_lineage(fqdn).to_dict(), indent=self._config.json_indent)

    def schema_lineage_html(self, fqdn: str) -> str:
        return render_schema_page(self.schema_lineage(fqdn), self._render_config)
