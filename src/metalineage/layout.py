"""Level normalization and identifier assignment for table lineage."""

from __future__ import annotations

from typing import Iterable, Mapping, Union

from metalineage.base import LineageError, TableLineage, VisitationNode

NodeCollection = Union[Mapping[str, VisitationNode], Iterable[VisitationNode]]


def _as_list(nodes: NodeCollection) -> list[VisitationNode]:
    if isinstance(nodes, Mapping):
        return list(nodes.values())
    return list(nodes)


def normalize(nodes: NodeCollection) -> tuple[int, int]:
    """Set ``level = distance - min_distance`` on every node.

    Gaps between distances are kept as gaps between levels.

    Returns:
        ``(min_distance, max_distance)``; ``(0, 0)`` for an empty collection
    """
    node_list = _as_list(nodes)
    if not node_list:
        return 0, 0

    min_distance = min(node.distance for node in node_list)
    max_distance = max(node.distance for node in node_list)
    for node in node_list:
        node.level = node.distance - min_distance
    return min_distance, max_distance


def assign_ids(nodes: NodeCollection) -> list[VisitationNode]:
    """Assign dense ids ordered by ``(level, fqdn)``.

    Returns:
        The nodes in id order

    Raises:
        LineageError: If a node has not been normalized
    """
    node_list = _as_list(nodes)
    unleveled = [node.fqdn for node in node_list if node.level is None]
    if unleveled:
        raise LineageError(
            f"Cannot assign ids before normalization; no level on: {', '.join(sorted(unleveled))}"
        )

    ordered = sorted(node_list, key=lambda node: (node.level, node.fqdn))
    for index, node in enumerate(ordered):
        node.id = index
    return ordered


def layout_lineage(target: str, nodes: NodeCollection) -> TableLineage:
    """Normalize levels, assign ids and wrap the result."""
    node_list = _as_list(nodes)
    min_distance, max_distance = normalize(node_list)
    ordered = assign_ids(node_list)
    return TableLineage(
        target=target,
        nodes=ordered,
        min_distance=min_distance,
        max_distance=max_distance,
    )
