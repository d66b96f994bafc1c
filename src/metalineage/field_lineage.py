"""Field level lineage.

Walks the field-to-field edges of every field of a table, forward over
successors and backward over dependencies, emitting one edge per hop.
Paths fanning out from different root fields are not deduplicated; the
consumer draws them as separate trees.

A field already on the current walk path is not descended into again, so a
cycle F1 -> F2 -> F1 terminates after its two hops. ``max_field_depth``
bounds how far a single walk may go.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from metalineage.base import (
    GraphTooDeepError,
    LineageConfig,
    SchemaLineage,
    SchemaLineageEdge,
    SchemaLineageNode,
)
from metalineage.catalog import FieldEntity, MetadataCatalog, TableEntity

logger = logging.getLogger(__name__)

Neighbours = Callable[[FieldEntity], list[FieldEntity]]


@dataclass
class _WalkFrame:
    entity: FieldEntity
    pending: Iterator[FieldEntity]


class FieldLineageBuilder:
    """Build forward and backward field lineage for a table."""

    def __init__(self, config: LineageConfig | None = None):
        self._config = config or LineageConfig()

    @property
    def config(self) -> LineageConfig:
        return self._config

    def build(self, table: TableEntity) -> SchemaLineage:
        lineage = SchemaLineage(table=table.fqdn)

        for entity in table.fields:
            lineage.forward_edges.extend(self.walk(entity, FieldEntity.ordered_successors))
        for entity in table.fields:
            lineage.backward_edges.extend(self.walk(entity, FieldEntity.ordered_dependencies))

        logger.debug(
            "Field lineage of %s: %d forward, %d backward edge(s)",
            table.fqdn,
            len(lineage.forward_edges),
            len(lineage.backward_edges),
        )
        return lineage

    def walk(self, root: FieldEntity, neighbours: Neighbours) -> list[SchemaLineageEdge]:
        """Depth-first walk from ``root``, one edge per hop in visit order.

        Raises:
            GraphTooDeepError: If a hop lies deeper than ``max_field_depth``
        """
        limit = self._config.max_field_depth
        edges: list[SchemaLineageEdge] = []
        path = {root.field_id}
        stack = [_WalkFrame(root, iter(neighbours(root)))]

        while stack:
            frame = stack[-1]
            neighbour = next(frame.pending, None)

            if neighbour is None:
                stack.pop()
                path.discard(frame.entity.field_id)
                continue

            if neighbour.field_id == frame.entity.field_id:
                continue

            if limit != -1 and len(stack) > limit:
                raise GraphTooDeepError(
                    limit,
                    "field depth",
                    [f.entity.field_id for f in stack] + [neighbour.field_id],
                )

            edges.append(
                SchemaLineageEdge(
                    source=SchemaLineageNode.from_field(frame.entity),
                    target=SchemaLineageNode.from_field(neighbour),
                )
            )

            if neighbour.field_id in path:
                logger.debug(
                    "Field cycle at %s -> %s, not descending",
                    frame.entity.field_id,
                    neighbour.field_id,
                )
                continue

            path.add(neighbour.field_id)
            stack.append(_WalkFrame(neighbour, iter(neighbours(neighbour))))

        return edges


def build_field_lineage(
    catalog: MetadataCatalog,
    fqdn: str,
    config: LineageConfig | None = None,
) -> SchemaLineage:
    """Compute the field lineage of every field of ``fqdn``.

    Raises:
        NodeNotFoundError: If ``fqdn`` is not in the catalog
        GraphTooDeepError: If a walk exceeds ``config.max_field_depth``
    """
    table = catalog.get_table(fqdn)
    return FieldLineageBuilder(config).build(table)
