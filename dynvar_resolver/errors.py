"""
Error and warning types raised while ordering installer variables.

Fatal errors derive from `ResolverError` and abort the compilation step.
`UnknownReferenceWarning` is recoverable: it is collected on the result and
logged, but never raised.
"""

from typing import Iterable, List, Sequence


class ResolverError(Exception):
    """Base class for all fatal errors of the variable ordering step."""


class DefinitionError(ResolverError):
    """Raised when the variable definitions themselves are malformed."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        lines = "\n".join(f"  {i}. {error}" for i, error in enumerate(self.errors, 1))
        super().__init__(f"Invalid variable definitions:\n{lines}")


class DuplicateVariableError(ResolverError):
    """Two definitions share the same variable name."""

    def __init__(self, name: str, first_index: int, second_index: int):
        self.name = name
        self.first_index = first_index
        self.second_index = second_index
        super().__init__(
            f"Variable '{name}' is defined more than once "
            f"(declarations #{first_index} and #{second_index})."
        )


class CyclicDependencyError(ResolverError):
    """
    The reference graph contains at least one cycle.

    `names` lists every variable that could not be ordered, in declaration
    order. `cycles` narrows that remainder down to the strongly connected
    groups that actually form loops; variables that only depend on a cycle
    appear in `names` but in none of the `cycles`.
    """

    def __init__(self, names: Sequence[str], cycles: Sequence[Sequence[str]] = ()):
        self.names = tuple(names)
        self.cycles = tuple(tuple(cycle) for cycle in cycles)

        message = (
            "A circular dependency was detected in the variable definitions; "
            f"cannot order: {', '.join(self.names)}."
        )
        if self.cycles:
            described = "; ".join(" <-> ".join(cycle) for cycle in self.cycles)
            message += f" Cycles: {described}."
        super().__init__(message)


class UnknownReferenceWarning(UserWarning):
    """An expression references a name outside the declared variable set."""

    def __init__(self, variable: str, reference: str):
        self.variable = variable
        self.reference = reference
        super().__init__(
            f"Variable '{variable}' references undefined variable '{reference}'; "
            "it is left to be resolved at install time."
        )

    def __eq__(self, other):
        if not isinstance(other, UnknownReferenceWarning):
            return NotImplemented
        return (self.variable, self.reference) == (other.variable, other.reference)

    def __hash__(self):
        return hash((self.variable, self.reference))
