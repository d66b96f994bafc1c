"""metalineage - table and field lineage graphs for warehouse metadata catalogs.

This package provides:
- An in-memory catalog of tables, fields and their dependencies
- Table level lineage with distance based layered layout
- Field level lineage with forward and backward edges
- Rendering for vis-network, Mermaid and standalone HTML pages

Example:
    >>> from metalineage import MetadataCatalog, LineageService
    >>> catalog = MetadataCatalog.load("catalog.yaml")
    >>> service = LineageService(catalog)
    >>> document = service.dependency_graph("shop.orders")
    >>> [node["fqdn"] for node in document["nodes"]]
    ['shop.raw_orders', 'shop.orders', 'shop.order_stats']
"""

from metalineage.base import (
    # Configuration
    LineageConfig,
    # Data structures
    VisitationNode,
    TableLineage,
    SchemaLineage,
    SchemaLineageEdge,
    SchemaLineageNode,
    # Exceptions
    LineageError,
    NodeNotFoundError,
    GraphTooDeepError,
    SerializationError,
    CatalogError,
)

from metalineage.catalog import (
    FieldEntity,
    MetadataCatalog,
    TableEntity,
)

from metalineage.table_lineage import TableLineageBuilder, build_lineage
from metalineage.field_lineage import FieldLineageBuilder, build_field_lineage
from metalineage.layout import assign_ids, layout_lineage, normalize
from metalineage.config import load_config
from metalineage.service import LineageService

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "LineageConfig",
    "load_config",
    # Catalog
    "MetadataCatalog",
    "TableEntity",
    "FieldEntity",
    # Data structures
    "VisitationNode",
    "TableLineage",
    "SchemaLineage",
    "SchemaLineageEdge",
    "SchemaLineageNode",
    # Builders
    "TableLineageBuilder",
    "build_lineage",
    "FieldLineageBuilder",
    "build_field_lineage",
    # Layout
    "normalize",
    "assign_ids",
    "layout_lineage",
    # Service
    "LineageService",
    # Exceptions
    "LineageError",
    "NodeNotFoundError",
    "GraphTooDeepError",
    "SerializationError",
    "CatalogError",
]
