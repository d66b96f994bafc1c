"""Table level lineage.

Discovers every table related to a target table through successor and
dependency hops and annotates each with a signed distance: downstream
readers get larger distances, upstream producers smaller ones.

The walk has two phases. Top-level discovery follows successors from the
target to the terminal consumers. Full traversal then walks dependencies
depth-first from those terminals, sorted by fqdn, creating exactly one
VisitationNode per table. Both phases use explicit stacks so deeply layered
warehouses do not hit the interpreter recursion limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from metalineage.base import GraphTooDeepError, LineageConfig, VisitationNode
from metalineage.catalog import MetadataCatalog, TableEntity

logger = logging.getLogger(__name__)


@dataclass
class _DiscoveryFrame:
    table: TableEntity
    pending: Iterator[TableEntity]
    terminals: dict[str, int] = field(default_factory=dict)
    expanded: bool = False


@dataclass
class _TraversalFrame:
    node: VisitationNode
    pending: Iterator[TableEntity]


class TableLineageBuilder:
    """Build the table lineage graph around a target table.

    Example:
        >>> builder = TableLineageBuilder()
        >>> nodes = builder.build(catalog.get_table("shop.orders"))
        >>> sorted(nodes)
        ['shop.order_stats', 'shop.orders', 'shop.raw_orders']
    """

    def __init__(self, config: LineageConfig | None = None):
        self._config = config or LineageConfig()

    @property
    def config(self) -> LineageConfig:
        return self._config

    def build(self, table: TableEntity) -> dict[str, VisitationNode]:
        """Compute the lineage of ``table``.

        Returns:
            Mapping of fqdn to its visitation node
        """
        top_level = self.discover_top_level(table)
        seeds = sorted(top_level.values(), key=lambda n: n.fqdn)
        logger.debug(
            "Lineage of %s: %d top-level table(s): %s",
            table.fqdn,
            len(seeds),
            ", ".join(n.fqdn for n in seeds),
        )

        visited: dict[str, VisitationNode] = {}
        for seed in seeds:
            self._traverse(seed, visited)

        logger.debug("Lineage of %s: %d table(s) visited", table.fqdn, len(visited))
        return visited

    def discover_top_level(self, table: TableEntity) -> dict[str, VisitationNode]:
        """Follow successors from ``table`` to the terminal consumers.

        Each hop adds one to the distance. A terminal reached through several
        paths keeps the largest distance. Successors already on the current
        path, including the table itself, are skipped; a table whose
        successors are all skipped counts as terminal.

        The terminals of a finished table are kept and reused whenever the
        table is reached again, so each table is expanded once.

        Raises:
            GraphTooDeepError: If more than ``max_nodes`` tables are reached
        """
        limit = self._config.max_nodes
        tables: dict[str, TableEntity] = {table.fqdn: table}
        finished: dict[str, dict[str, int]] = {}
        path = {table.fqdn}
        stack = [_DiscoveryFrame(table, iter(table.ordered_successors()))]

        while stack:
            frame = stack[-1]
            successor = next(frame.pending, None)

            if successor is None:
                stack.pop()
                path.discard(frame.table.fqdn)
                if not frame.expanded:
                    frame.terminals[frame.table.fqdn] = 0
                finished[frame.table.fqdn] = frame.terminals
                if stack:
                    self._merge_terminals(stack[-1], frame.terminals)
                continue

            if successor.fqdn in path:
                logger.debug(
                    "Skipping successor %s of %s: already on path",
                    successor.fqdn,
                    frame.table.fqdn,
                )
                continue

            terminals = finished.get(successor.fqdn)
            if terminals is not None:
                self._merge_terminals(frame, terminals)
                continue

            if limit != -1 and len(finished) + len(stack) >= limit:
                raise GraphTooDeepError(limit, "table count")
            tables[successor.fqdn] = successor
            path.add(successor.fqdn)
            stack.append(_DiscoveryFrame(successor, iter(successor.ordered_successors())))

        return {
            fqdn: VisitationNode(table=tables[fqdn], distance=distance)
            for fqdn, distance in finished[table.fqdn].items()
        }

    @staticmethod
    def _merge_terminals(frame: _DiscoveryFrame, terminals: dict[str, int]) -> None:
        """Fold a successor's terminals into ``frame``, one hop further away."""
        frame.expanded = True
        for fqdn, distance in terminals.items():
            if frame.terminals.get(fqdn, -1) < distance + 1:
                frame.terminals[fqdn] = distance + 1

    def _traverse(self, seed: VisitationNode, visited: dict[str, VisitationNode]) -> None:
        """Walk dependencies depth-first from ``seed``.

        A table is registered in ``visited`` before its own dependencies are
        expanded, so later paths reaching it only add the cross-link.
        """
        if seed.fqdn in visited:
            return
        self._register(seed, visited)
        stack = [_TraversalFrame(seed, iter(seed.table.ordered_dependencies()))]

        while stack:
            frame = stack[-1]
            dependency = next(frame.pending, None)

            if dependency is None:
                stack.pop()
                continue

            parent = frame.node
            if dependency.fqdn == parent.fqdn:
                continue

            node = visited.get(dependency.fqdn)
            if node is not None:
                node.link_to(parent)
                continue

            node = VisitationNode(table=dependency, distance=parent.distance - 1)
            self._register(node, visited)
            node.link_to(parent)
            stack.append(_TraversalFrame(node, iter(dependency.ordered_dependencies())))

    def _register(self, node: VisitationNode, visited: dict[str, VisitationNode]) -> None:
        limit = self._config.max_nodes
        if limit != -1 and len(visited) >= limit:
            raise GraphTooDeepError(limit, "table count")
        visited[node.fqdn] = node


def build_lineage(
    catalog: MetadataCatalog,
    fqdn: str,
    config: LineageConfig | None = None,
) -> dict[str, VisitationNode]:
    """Compute the table lineage of ``fqdn``.

    Raises:
        NodeNotFoundError: If ``fqdn`` is not in the catalog
        GraphTooDeepError: If the lineage exceeds ``config.max_nodes``
    """
    table = catalog.get_table(fqdn)
    return TableLineageBuilder(config).build(table)
