"""Dependency graph and correction-family partitioning.

Records are nodes of an undirected graph; an edge joins two records whose
dependency judgment is not ``NONE``. Each connected component is one
correction family.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import List, Sequence, Tuple

import networkx as nx

from .dependencies import DependencyFn, resolve_dependency
from .records import DependencyKind, TestRecord, strongest_kind

logger = logging.getLogger(__name__)


def build_dependency_graph(
    records: Sequence[TestRecord], dependencies: DependencyFn
) -> nx.Graph:
    """Build the dependency graph over ``records``.

    Nodes are positions into ``records`` (attribute ``record``); edges carry
    the judgment in attribute ``kind``. Every unordered pair is asked once.

    Raises
    ------
    UnresolvedDependency
        If the judgment for some pair cannot be obtained.
    """
    graph = nx.Graph()
    for i, record in enumerate(records):
        graph.add_node(i, record=record)

    for i, j in combinations(range(len(records)), 2):
        kind = resolve_dependency(dependencies, records[i], records[j])
        if kind.is_dependent:
            graph.add_edge(i, j, kind=kind)

    logger.debug(
        "Dependency graph: %d records, %d dependent pairs",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph


def partition_dependency_graph(
    graph: nx.Graph,
) -> List[Tuple[List[int], DependencyKind]]:
    """Split the graph into connected components.

    Returns
    -------
    List[Tuple[List[int], DependencyKind]]
        One entry per component: sorted member positions and the most general
        dependency kind among its internal edges. Components are ordered by
        their first member.
    """
    components = []
    for component in nx.connected_components(graph):
        members = sorted(component)
        kinds = (data["kind"] for _, _, data in graph.subgraph(members).edges(data=True))
        components.append((members, strongest_kind(kinds)))
    components.sort(key=lambda item: item[0][0])
    return components


__all__ = ["build_dependency_graph", "partition_dependency_graph"]
