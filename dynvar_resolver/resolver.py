"""
This is the main orchestrator of the variable ordering step.

It takes the loader's variable definitions, builds the dependency graph,
sorts it and emits the ordered records. Any fatal error (duplicate name,
cycle) propagates unchanged; no partial result is ever produced.
"""

import logging
from typing import Iterable, Optional, Sequence

from dynvar_resolver.config import ResolverSettings
from dynvar_resolver.emitter import emit
from dynvar_resolver.graph import GraphBuilder
from dynvar_resolver.models import DependencyGraph, OrderedVariables, VariableDefinition
from dynvar_resolver.parser import DefinitionParser
from dynvar_resolver.provider_manager import ProviderManager
from dynvar_resolver.sorter import sort_graph

logger = logging.getLogger(__name__)


class VariableOrderResolver:
    """Orchestrates one ordering run over an immutable set of definitions."""

    def __init__(
        self,
        definitions: Sequence[VariableDefinition],
        settings: Optional[ResolverSettings] = None,
    ):
        self.definitions = tuple(definitions)
        self.settings = settings or ResolverSettings()

    @classmethod
    def from_file(
        cls,
        path: str,
        provider_manager: Optional[ProviderManager] = None,
        settings: Optional[ResolverSettings] = None,
    ) -> "VariableOrderResolver":
        """
        Creates a resolver from a YAML definition file. Settings passed in
        explicitly take precedence over the file's `settings` block.

        Raises:
            DefinitionError: If the file cannot be read or is invalid.
        """
        parser = DefinitionParser.from_file(path, provider_manager=provider_manager)
        definitions = parser.parse_or_raise()
        return cls(definitions, settings or parser.settings)

    def resolve(self) -> OrderedVariables:
        """
        Runs the full pipeline.

        Raises:
            DuplicateVariableError: If two definitions share a name.
            CyclicDependencyError: If the references form a cycle.
        """
        builder = GraphBuilder(
            self.definitions,
            external_names=self.settings.external_variables,
            max_workers=self.settings.max_workers,
        )
        graph: DependencyGraph = builder.build()
        result = sort_graph(graph)
        ordered = emit(result, self.definitions, builder.warnings)

        logger.info(
            "Ordered %d variables (%d dependencies, %d unresolved references)",
            len(ordered),
            graph.edge_count,
            len(ordered.warnings),
        )
        return ordered


def resolve_order(
    definitions: Sequence[VariableDefinition],
    external_names: Iterable[str] = (),
    max_workers: Optional[int] = None,
) -> OrderedVariables:
    """Convenience wrapper: orders `definitions` in one call."""
    settings = ResolverSettings(
        external_variables=list(external_names), max_workers=max_workers
    )
    return VariableOrderResolver(definitions, settings).resolve()
