from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Tuple

from dynvar_resolver.models import ExpressionNode, ProviderCall

# Builds an expression node from a raw parameter value (string or nested provider mapping).
NodeBuilder = Callable[[Any, str], ExpressionNode]


class BaseProvider(ABC):
    """
    The abstract base class that defines the contract for all value providers.

    A provider describes one way of computing a dynamic variable's value at
    install time (a plain expression, a lookup in a configuration file, the
    output of an executable, ...). At compile time only its parameters matter:
    each of them is itself an expression, or a nested provider call, and may
    reference other variables.

    Subclasses declare their parameters through class attributes; the shared
    `build` method validates a raw definition against them and produces a
    uniform `ProviderCall` node.
    """

    # Parameters that must be present.
    required_params: Tuple[str, ...] = ()

    # Parameters that may be present.
    optional_params: Tuple[str, ...] = ()

    # Parameters whose value is a list of expressions (e.g. executable arguments).
    list_params: Tuple[str, ...] = ()

    # Allowed literal values for enumerated parameters, e.g. {"type": ("ini", ...)}.
    choices: Dict[str, Tuple[str, ...]] = {}

    @abstractmethod
    def get_type_name(self) -> str:
        """
        Returns the unique string identifier for this provider.

        This name is used in the `provider` field of a dynamic variable
        definition to select the provider.
        """
        ...

    def get_aliases(self) -> Tuple[str, ...]:
        """Alternative names under which the provider is also registered."""
        return ()

    @property
    def param_names(self) -> Tuple[str, ...]:
        return self.required_params + self.optional_params + self.list_params

    def build(self, raw: Dict[str, Any], build_node: NodeBuilder, context: str) -> ProviderCall:
        """
        Builds the provider call for a raw parameter mapping.

        Args:
            raw: The provider's parameters, without the `provider` key itself.
            build_node: Callback turning one raw parameter value into a node;
                it handles nested provider mappings.
            context: Human readable location used in error messages.

        Raises:
            ValueError: If parameters are missing, unknown or malformed.
        """
        errors = self.validate(raw)
        if errors:
            raise ValueError(f"{context}: " + " ".join(errors))

        params: List[Tuple[str, Any]] = []
        for name in self.param_names:
            if name not in raw or raw[name] is None:
                continue
            value = raw[name]
            if name in self.list_params:
                items = value if isinstance(value, list) else [value]
                params.append(
                    (
                        name,
                        tuple(
                            build_node(item, f"{context}, {name}[{i}]")
                            for i, item in enumerate(items)
                        ),
                    )
                )
            else:
                params.append((name, build_node(value, f"{context}, {name}")))
        return ProviderCall(kind=self.get_type_name(), params=tuple(params))

    def validate(self, raw: Dict[str, Any]) -> List[str]:
        """Returns a list of problems with the raw parameters; empty when valid."""
        errors = []
        type_name = self.get_type_name()

        missing = [name for name in self.required_params if raw.get(name) is None]
        if missing:
            errors.append(
                f"Provider '{type_name}' requires parameter(s): {', '.join(missing)}."
            )

        unknown = sorted(set(raw) - set(self.param_names))
        if unknown:
            errors.append(
                f"Provider '{type_name}' does not accept parameter(s): {', '.join(unknown)}. "
                f"Allowed: {', '.join(self.param_names)}."
            )

        for name, allowed in self.choices.items():
            value = raw.get(name)
            if isinstance(value, str) and "$" not in value and value not in allowed:
                errors.append(
                    f"Parameter '{name}' of provider '{type_name}' must be one of "
                    f"{', '.join(allowed)}, got '{value}'."
                )

        for name in self.param_names:
            if name not in self.list_params and isinstance(raw.get(name), list):
                errors.append(
                    f"Parameter '{name}' of provider '{type_name}' must be a single value."
                )
        return errors
