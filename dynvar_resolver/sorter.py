"""
Stable topological ordering of the dependency graph.

Kahn's algorithm with a deterministic selection rule: of all variables whose
dependencies are already emitted, the one declared first is emitted next.
Every edge is respected, unconstrained variables keep their declaration
order, and the result never depends on hashing or container iteration order.
"""

import heapq
import logging
from typing import List, Tuple

import rustworkx as rx

from dynvar_resolver.errors import CyclicDependencyError
from dynvar_resolver.models import DependencyGraph, OrderedResult, OrderFailure, OrderSuccess

logger = logging.getLogger(__name__)


def sort_graph(graph: DependencyGraph) -> OrderedResult:
    """
    Computes the evaluation order of `graph`.

    Returns `OrderSuccess` with a permutation of all node names, or
    `OrderFailure` whose error names every variable that could not be
    ordered once no variable was ready anymore.
    """
    digraph = graph.digraph
    in_degree = [digraph.in_degree(node) for node in range(len(graph))]
    ready: List[Tuple[int, int]] = [
        (graph.source_order[node], node)
        for node, degree in enumerate(in_degree)
        if degree == 0
    ]
    heapq.heapify(ready)

    order: List[int] = []
    while ready:
        _, node = heapq.heappop(ready)
        order.append(node)
        logger.debug("Emitting variable '%s'", graph.names[node])
        for target in graph.successors_of(node):
            in_degree[target] -= 1
            if in_degree[target] == 0:
                heapq.heappush(ready, (graph.source_order[target], target))

    if len(order) == len(graph):
        return OrderSuccess(order=tuple(graph.names[node] for node in order))

    emitted = set(order)
    remainder = [node for node in range(len(graph)) if node not in emitted]
    cycles = _find_cycles(graph, remainder)
    error = CyclicDependencyError(
        names=[graph.names[node] for node in _by_declaration(graph, remainder)],
        cycles=[[graph.names[node] for node in cycle] for cycle in cycles],
    )
    logger.debug("Ordering failed: %s", error)
    return OrderFailure(error=error)


def topological_order(graph: DependencyGraph) -> Tuple[str, ...]:
    """Like `sort_graph`, but raises `CyclicDependencyError` on failure."""
    result = sort_graph(graph)
    if isinstance(result, OrderFailure):
        raise result.error
    return result.order


def _by_declaration(graph: DependencyGraph, nodes) -> List[int]:
    return sorted(nodes, key=lambda node: (graph.source_order[node], node))


def _find_cycles(graph: DependencyGraph, remainder: List[int]) -> List[List[int]]:
    """
    Strongly connected components of the unordered remainder that really are
    cycles: more than one member, or a variable referencing itself.
    """
    subgraph = graph.digraph.subgraph(remainder)
    components: List[List[int]] = []
    for component in rx.strongly_connected_components(subgraph):
        first = component[0]
        if len(component) == 1 and not subgraph.has_edge(first, first):
            continue
        # Subgraph indices are renumbered; the payload keeps the original node.
        members = [subgraph[member].index for member in component]
        components.append(_by_declaration(graph, members))

    components.sort(key=lambda component: (graph.source_order[component[0]], component[0]))
    return components
