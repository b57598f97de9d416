"""
Parses and validates a YAML variable definition file and transforms it into
the structured, immutable `VariableDefinition` records of `models`.
"""

from copy import deepcopy
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from dynvar_resolver.config import (
    DefinitionFile,
    DynamicVariableEntry,
    ResolverSettings,
    StaticVariableEntry,
)
from dynvar_resolver.errors import DefinitionError
from dynvar_resolver.expressions import parse_expression
from dynvar_resolver.helpers import ValidationErrorCollector
from dynvar_resolver.models import (
    ExpressionNode,
    Literal,
    ProviderCall,
    Template,
    ValueCandidate,
    VariableDefinition,
    VariableRef,
)
from dynvar_resolver.provider_manager import ProviderManager


def format_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'entry'}: {item['msg']}"
        for item in error.errors()
    )


class DefinitionParser:
    """
    Turns the raw definition mapping into variable definitions.

    Static variables are declared first, then dynamic ones, and `source_order`
    follows that declaration order. Repeated dynamic entries with the same
    name are alternative candidates of one variable (usually guarded by
    different conditions) and are grouped into a single definition. Any other
    repeated name is passed through as is so that the graph builder reports it.
    """

    def __init__(
        self,
        raw_data: Dict[str, Any],
        provider_manager: Optional[ProviderManager] = None,
        collector: Optional[ValidationErrorCollector] = None,
    ):
        self.raw_data = raw_data or {}
        self.provider_manager = provider_manager or ProviderManager()
        self.collector = collector or ValidationErrorCollector()
        self.settings = ResolverSettings()

    @classmethod
    def from_file(cls, path: str, **kwargs) -> "DefinitionParser":
        """Creates a parser by loading the YAML definition file at `path`."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f)
        except (IOError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise DefinitionError(
                [f"Error reading or parsing definition file '{path}': {e}"]
            )
        if raw_data is not None and not isinstance(raw_data, dict):
            raise DefinitionError(
                [f"Definition file '{path}' must contain a mapping at the top level."]
            )
        return cls(raw_data, **kwargs)

    def parse(self) -> List[VariableDefinition]:
        """
        Main entry point. Returns the definitions in declaration order; errors
        are collected, check `collector.has_errors` afterwards.
        """
        # Empty YAML keys load as None.
        data = {key: value for key, value in deepcopy(self.raw_data).items() if value is not None}
        try:
            definition_file = DefinitionFile.model_validate(data)
        except ValidationError as e:
            self.collector.add_error(
                f"Invalid definition file layout: {format_validation_error(e)}"
            )
            return []

        self.settings = definition_file.settings

        definitions: List[VariableDefinition] = []
        for i, raw_entry in enumerate(definition_file.variables):
            definition = self._build_static(i, raw_entry, len(definitions))
            if definition:
                definitions.append(definition)

        dynamic: Dict[str, Tuple[int, List[ValueCandidate]]] = {}
        for i, raw_entry in enumerate(definition_file.dynamicvariables):
            parsed = self._build_dynamic(i, raw_entry)
            if parsed is None:
                continue
            name, candidate = parsed
            if name not in dynamic:
                dynamic[name] = (len(definitions) + len(dynamic), [])
            dynamic[name][1].append(candidate)

        for name, (source_order, candidates) in dynamic.items():
            definitions.append(
                VariableDefinition(
                    name=name,
                    values=tuple(candidates),
                    is_static=False,
                    source_order=source_order,
                )
            )
        return definitions

    def parse_or_raise(self) -> List[VariableDefinition]:
        """Like `parse`, but raises `DefinitionError` if anything was invalid."""
        definitions = self.parse()
        self.collector.raise_for_errors()
        return definitions

    def _build_static(
        self, position: int, raw_entry: Dict[str, Any], source_order: int
    ) -> Optional[VariableDefinition]:
        try:
            entry = StaticVariableEntry.model_validate(raw_entry)
        except ValidationError as e:
            self.collector.add_error(
                f"Static variable #{position}: {format_validation_error(e)}"
            )
            return None

        context = f"Static variable '{entry.name}'"
        try:
            value = self._build_node(entry.value, context)
        except ValueError as e:
            self.collector.add_error(str(e))
            return None

        return VariableDefinition(
            name=entry.name,
            values=(ValueCandidate(value=value, condition=entry.condition),),
            is_static=True,
            source_order=source_order,
        )

    def _build_dynamic(
        self, position: int, raw_entry: Dict[str, Any]
    ) -> Optional[Tuple[str, ValueCandidate]]:
        try:
            entry = DynamicVariableEntry.model_validate(raw_entry)
        except ValidationError as e:
            self.collector.add_error(
                f"Dynamic variable #{position}: {format_validation_error(e)}"
            )
            return None

        context = f"Dynamic variable '{entry.name}'"
        try:
            value = self._build_provider(entry.provider or "value", entry.provider_params, context)
            for raw_filter in entry.filters:
                value = self._build_filter(value, raw_filter, context)
        except ValueError as e:
            self.collector.add_error(str(e))
            return None

        candidate = ValueCandidate(
            value=value,
            condition=entry.condition,
            check_once=entry.checkonce,
            ignore_failure=entry.ignorefailure,
            auto_unset=entry.unset,
        )
        return entry.name, candidate

    def _build_provider(self, kind: str, params: Dict[str, Any], context: str) -> ProviderCall:
        provider = self.provider_manager.get_provider(kind)
        if provider is None:
            raise ValueError(
                f"{context}: Unknown provider '{kind}'. "
                f"Available providers: {', '.join(self.provider_manager.type_names)}."
            )
        return provider.build(params, self._build_node, context)

    def _build_filter(
        self, value: ExpressionNode, raw_filter: Dict[str, Dict[str, Any]], context: str
    ) -> ProviderCall:
        if len(raw_filter) != 1:
            raise ValueError(
                f"{context}: Each filter must have exactly one type key, got {sorted(raw_filter)}."
            )
        filter_type, params = next(iter(raw_filter.items()))
        params = dict(params or {})
        params["input"] = value
        return self._build_provider(f"filter.{filter_type}", params, context)

    def _build_node(self, raw_value: Any, context: str) -> ExpressionNode:
        """
        Builds an expression node from a raw parameter value. Mappings with a
        `provider` key are nested provider calls; scalars are expressions.
        """
        if isinstance(raw_value, (Literal, VariableRef, Template, ProviderCall)):
            return raw_value
        if isinstance(raw_value, dict):
            params = dict(raw_value)
            kind = params.pop("provider", None)
            if not kind:
                raise ValueError(
                    f"{context}: A nested mapping must name its 'provider'."
                )
            return self._build_provider(kind, params, context)
        if isinstance(raw_value, list):
            raise ValueError(f"{context}: A list is not allowed here.")
        if raw_value is None:
            return parse_expression("")
        if isinstance(raw_value, bool):
            return parse_expression("true" if raw_value else "false")
        return parse_expression(str(raw_value))
