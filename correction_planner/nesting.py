"""Nesting order over model identifiers.

A nested model family such as ``y ~ A`` followed by ``y ~ A * B`` is
described by directed edges from the earlier model to the later one. Every
model gets a stage: the length of the longest chain of earlier models
leading to it. Stages are planned one after the other.
"""

from __future__ import annotations

from collections.abc import Iterable as IterableABC
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Tuple, Union

import networkx as nx

from .errors import CyclicNesting

NestingSpec = Union[
    "NestingOrder",
    Mapping[Hashable, Iterable[Hashable]],
    Iterable[Tuple[Hashable, Hashable]],
    None,
]


class NestingOrder:
    """Validated partial order over model identifiers.

    Parameters
    ----------
    edges
        ``(earlier_model, later_model)`` pairs.

    Raises
    ------
    CyclicNesting
        If the edges contain a cycle (including a model nested in itself).

    Examples
    --------
    >>> order = NestingOrder([("y~A", "y~A*B")])
    >>> order.stage_of("y~A*B")
    1
    """

    def __init__(self, edges: Iterable[Tuple[Hashable, Hashable]] = ()):
        graph = nx.DiGraph()
        for edge in edges:
            if isinstance(edge, str) or not isinstance(edge, (tuple, list)) or len(edge) != 2:
                raise ValueError(
                    f"Nesting edges must be (earlier, later) pairs, got {edge!r}"
                )
            earlier, later = edge
            graph.add_edge(earlier, later)

        if not nx.is_directed_acyclic_graph(graph):
            cycle = nx.find_cycle(graph)
            path = " -> ".join(str(u) for u, _ in cycle) + f" -> {cycle[0][0]}"
            raise CyclicNesting(f"Nesting order contains a cycle: {path}")

        self.graph = graph
        self._stages = _compute_model_stages(graph)

    @classmethod
    def from_parents(
        cls, parents: Mapping[Hashable, Iterable[Hashable]]
    ) -> "NestingOrder":
        """Build from a mapping ``later_model -> earlier models``.

        A single earlier model may be given bare instead of in a list.
        """
        edges = []
        for later, earlier_models in parents.items():
            if isinstance(earlier_models, str) or not isinstance(earlier_models, IterableABC):
                earlier_models = [earlier_models]
            edges.extend((earlier, later) for earlier in earlier_models)
        return cls(edges)

    @classmethod
    def coerce(cls, nesting: NestingSpec) -> "NestingOrder":
        """Accept a NestingOrder, a parents mapping, an edge list, or None."""
        if nesting is None:
            return cls()
        if isinstance(nesting, NestingOrder):
            return nesting
        if isinstance(nesting, Mapping):
            return cls.from_parents(nesting)
        return cls(nesting)

    def stage_of(self, model: Hashable) -> int:
        """Stage of ``model``; models outside the order are stage 0."""
        return self._stages.get(model, 0)

    def parents(self, model: Hashable) -> List[Hashable]:
        """Models directly preceding ``model``."""
        if model not in self.graph:
            return []
        return list(self.graph.predecessors(model))

    def __contains__(self, model: Hashable) -> bool:
        return model in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()


def _compute_model_stages(graph: nx.DiGraph) -> Dict[Hashable, int]:
    """Longest-chain depth of each model (models without parents = 0).

    Parameters
    ----------
    graph
        Directed acyclic graph of nesting edges.

    Returns
    -------
    Dict[Hashable, int]
        Mapping from model id to stage.
    """
    stages: Dict[Hashable, int] = {}
    for model in nx.topological_sort(graph):
        parent_stages = [stages[p] for p in graph.predecessors(model)]
        stages[model] = max(parent_stages) + 1 if parent_stages else 0
    return stages


def group_models_by_stage(
    models: Iterable[Hashable], order: Optional[NestingOrder] = None
) -> Dict[int, List[Hashable]]:
    """Group distinct ``models`` by stage, preserving first-seen order."""
    order = order or NestingOrder()
    by_stage: Dict[int, List[Hashable]] = {}
    for model in models:
        members = by_stage.setdefault(order.stage_of(model), [])
        if model not in members:
            members.append(model)
    return dict(sorted(by_stage.items()))


__all__ = ["NestingOrder", "NestingSpec", "group_models_by_stage"]
