"""
Builds the dependency graph of a set of variable definitions.

Every variable becomes a node; for every variable name referenced by one of
its candidate values (directly or through nested provider parameters) an
edge `referenced -> dependent` is added. References to names outside the
declared set are not edges: they are remembered per node and reported as
`UnknownReferenceWarning`s, since the installer resolves them at install time.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import rustworkx as rx

from dynvar_resolver.errors import DuplicateVariableError, UnknownReferenceWarning
from dynvar_resolver.expressions import collect_references
from dynvar_resolver.helpers import BUILTIN_VARIABLES
from dynvar_resolver.models import (
    DependencyGraph,
    ReferenceSet,
    VariableDefinition,
    VariableNode,
)

logger = logging.getLogger(__name__)


class GraphBuilder:
    """
    Assembles an immutable `DependencyGraph` from variable definitions.

    A builder is single use: call `build()` once, then read `warnings`. A
    corrected build is done with a fresh builder.
    """

    def __init__(
        self,
        definitions: Sequence[VariableDefinition],
        external_names: Iterable[str] = (),
        max_workers: Optional[int] = None,
    ):
        # Stable sort: definitions sharing a source_order keep their input order.
        self.definitions: List[VariableDefinition] = sorted(
            definitions, key=lambda definition: definition.source_order
        )
        self.external_names = frozenset(external_names) | BUILTIN_VARIABLES
        self.max_workers = max_workers
        self.warnings: List[UnknownReferenceWarning] = []

    def build(self) -> DependencyGraph:
        index = self._index_nodes()
        references = self._extract_all()

        digraph = rx.PyDiGraph(multigraph=False)
        for node, definition in enumerate(self.definitions):
            digraph.add_node(VariableNode(node, definition.name, definition.source_order))

        unknown: List[ReferenceSet] = []
        for node, (definition, names) in enumerate(zip(self.definitions, references)):
            missing = set()
            for name in sorted(names):
                source = index.get(name)
                if source is None:
                    missing.add(name)
                    continue
                digraph.add_edge(source, node, None)
                logger.debug("Edge '%s' -> '%s'", name, definition.name)

            unknown.append(frozenset(missing))
            for name in sorted(missing):
                if name in self.external_names:
                    continue
                warning = UnknownReferenceWarning(definition.name, name)
                logger.warning("%s", warning)
                self.warnings.append(warning)

        graph = DependencyGraph(
            names=tuple(definition.name for definition in self.definitions),
            source_order=tuple(d.source_order for d in self.definitions),
            unknown_references=tuple(unknown),
            digraph=digraph,
            index=index,
        )
        logger.debug(
            "Built dependency graph with %d variables and %d edges",
            len(graph),
            graph.edge_count,
        )
        return graph

    def _index_nodes(self) -> Dict[str, int]:
        """Assigns node indices and rejects duplicate names."""
        index: Dict[str, int] = {}
        for node, definition in enumerate(self.definitions):
            if definition.name in index:
                first = self.definitions[index[definition.name]]
                raise DuplicateVariableError(
                    definition.name, first.source_order, definition.source_order
                )
            index[definition.name] = node
        return index

    def _extract_all(self) -> List[ReferenceSet]:
        """Extracts the references of every variable, in node order."""
        if self.max_workers and self.max_workers > 1 and len(self.definitions) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                # map() yields results in submission order.
                return list(executor.map(collect_references, self.definitions))
        return [collect_references(definition) for definition in self.definitions]


def build_graph(
    definitions: Sequence[VariableDefinition],
    external_names: Iterable[str] = (),
    max_workers: Optional[int] = None,
) -> Tuple[DependencyGraph, List[UnknownReferenceWarning]]:
    """Builds the graph and returns it together with the unknown-reference warnings."""
    builder = GraphBuilder(definitions, external_names, max_workers)
    graph = builder.build()
    return graph, builder.warnings
