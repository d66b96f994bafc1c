"""Base classes and data structures for lineage computation.

This module provides the core abstractions shared by the lineage builders:
- VisitationNode: Per-request wrapper around a table in a lineage graph
- TableLineage: A normalized table lineage ready for rendering
- SchemaLineageNode / SchemaLineageEdge / SchemaLineage: Field lineage
- LineageConfig: Limits and rendering defaults
- The lineage exception hierarchy
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:
    from metalineage.catalog import FieldEntity, TableEntity


# =============================================================================
# Exceptions
# =============================================================================


class LineageError(Exception):
    """Base exception for lineage-related errors."""

    pass


class NodeNotFoundError(LineageError):
    """Raised when a table or field is not present in the catalog."""

    def __init__(self, node_id: str, kind: str = "table"):
        self.node_id = node_id
        self.kind = kind
        super().__init__(f"{kind.capitalize()} not found: {node_id}")


class GraphTooDeepError(LineageError):
    """Raised when a traversal exceeds a configured safety bound."""

    def __init__(self, limit: int, what: str, path: list[str] | None = None):
        self.limit = limit
        self.what = what
        self.path = path or []
        message = f"Lineage exceeded {what} limit of {limit}"
        if self.path:
            message += f": {' -> '.join(self.path)}"
        super().__init__(message)


class SerializationError(LineageError):
    """Raised when a lineage document cannot be encoded."""

    pass


class CatalogError(LineageError):
    """Raised when a catalog snapshot is malformed."""

    pass


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class LineageConfig:
    """Configuration for lineage computation and rendering.

    Attributes:
        max_nodes: Maximum tables in one table lineage (-1 for unlimited)
        max_field_depth: Maximum hops from a root field (-1 for unlimited)
        label_separator: Replacement for '.' in rendered node labels
        node_group: Group tag attached to rendered table nodes
        level_scale: Factor applied to node levels when rendering
        json_indent: Indentation for JSON output (None for compact)
    """

    max_nodes: int = -1
    max_field_depth: int = 1000
    label_separator: str = "\n"
    node_group: str = "tables"
    level_scale: int = 2
    json_indent: int | None = None

    @classmethod
    def field_names(cls) -> list[str]:
        return list(cls.__dataclass_fields__)

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.field_names()}


# =============================================================================
# Table Lineage Structures
# =============================================================================


@dataclass(eq=False, repr=False)
class VisitationNode:
    """A table discovered during one lineage computation.

    Attributes:
        table: The wrapped table entity
        distance: Signed offset relative to the other discovered nodes
        next: Nodes reading from this one (downstream)
        previous: Nodes this one reads from (upstream)
        level: Zero-based layout level, set by normalization
        id: Dense identifier, set by identifier assignment
    """

    table: "TableEntity"
    distance: int = 0
    next: set["VisitationNode"] = field(default_factory=set)
    previous: set["VisitationNode"] = field(default_factory=set)
    level: int | None = None
    id: int | None = None

    @property
    def fqdn(self) -> str:
        return self.table.fqdn

    def link_to(self, successor: "VisitationNode") -> None:
        """Record that ``successor`` reads from this node."""
        self.next.add(successor)
        successor.previous.add(self)

    def __hash__(self) -> int:
        return hash(self.table.fqdn)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VisitationNode):
            return False
        return self.table.fqdn == other.table.fqdn

    def __repr__(self) -> str:
        return (
            f"<VisitationNode {self.fqdn} distance={self.distance} "
            f"level={self.level} id={self.id}>"
        )


@dataclass
class TableLineage:
    """A normalized table lineage.

    Nodes are ordered by identifier; ``min_distance`` and ``max_distance``
    are the extremes present in the graph.
    """

    target: str
    nodes: list[VisitationNode]
    min_distance: int
    max_distance: int

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(node.next) for node in self.nodes)

    @property
    def depth(self) -> int:
        return self.max_distance - self.min_distance

    def get(self, fqdn: str) -> VisitationNode:
        for node in self.nodes:
            if node.fqdn == fqdn:
                return node
        raise NodeNotFoundError(fqdn)

    def __iter__(self) -> Iterator[VisitationNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)


# =============================================================================
# Field Lineage Structures
# =============================================================================


@dataclass(frozen=True)
class SchemaLineageNode:
    """Denormalized field reference carried by a field lineage edge."""

    id: str
    label: str
    parent: str

    @classmethod
    def from_field(cls, entity: "FieldEntity") -> "SchemaLineageNode":
        return cls(id=entity.field_id, label=entity.name, parent=entity.table.fqdn)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "parent": self.parent}


@dataclass(frozen=True)
class SchemaLineageEdge:
    """One hop of a field lineage walk.

    Forward edges read "source feeds target"; backward edges read
    "source is fed by target".
    """

    source: SchemaLineageNode
    target: SchemaLineageNode

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.source.to_dict(), "to": self.target.to_dict()}


@dataclass
class SchemaLineage:
    """Forward and backward field lineage of a table."""

    table: str
    forward_edges: list[SchemaLineageEdge] = field(default_factory=list)
    backward_edges: list[SchemaLineageEdge] = field(default_factory=list)

    @property
    def edge_count(self) -> int:
        return len(self.forward_edges) + len(self.backward_edges)

    def to_dict(self) -> dict[str, Any]:
        return {
            "forwardEdges": [edge.to_dict() for edge in self.forward_edges],
            "backwardEdges": [edge.to_dict() for edge in self.backward_edges],
        }
