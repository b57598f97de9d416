"""
This module defines the core data structures used throughout the variable
ordering pipeline. Using dataclasses provides type hinting, immutability and a
clear structure for the data passed between the loader, the reference
extractor, the graph builder, the sorter and the emitter.

Variable values are modelled as a small expression tree:

    Template      -- a parsed expression string, made of parts
      Literal     -- plain text
      VariableRef -- a `${name}` / `$name` placeholder
    ProviderCall  -- a value provider whose parameters are expressions too

so that new provider kinds never require changes to the graph or the sorter.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple, Union

import rustworkx as rx

from dynvar_resolver.errors import CyclicDependencyError, UnknownReferenceWarning

# The set of variable names mentioned by an expression, deduplicated.
ReferenceSet = FrozenSet[str]


@dataclass(frozen=True)
class Literal:
    """Plain text inside an expression."""

    text: str

    def to_resource(self) -> str:
        return self.text.replace("$", "$$")


@dataclass(frozen=True)
class VariableRef:
    """
    A reference to another variable.

    External references (environment variables, system properties) are kept
    in the tree for completeness but never turned into graph edges.
    """

    name: str
    external: bool = False
    raw: str = ""  # The placeholder as written, e.g. "${name}" or "$name"

    def to_resource(self) -> str:
        return self.raw or f"${{{self.name}}}"


@dataclass(frozen=True)
class Template:
    """A parsed expression string."""

    source: str
    parts: Tuple[Union[Literal, VariableRef], ...] = ()

    def to_resource(self) -> str:
        return self.source


@dataclass(frozen=True)
class ProviderCall:
    """
    A value provider invocation, e.g. "read `key` from `section` of the ini
    file `file`". Parameters are kept in declaration order. A parameter is
    either a single expression node or a tuple of nodes (list parameters
    such as executable arguments).
    """

    kind: str
    params: Tuple[Tuple[str, Any], ...] = ()

    def param(self, name: str, default=None):
        for key, value in self.params:
            if key == name:
                return value
        return default

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(key for key, _ in self.params)

    def to_resource(self) -> Dict[str, Any]:
        resource: Dict[str, Any] = {"provider": self.kind}
        for key, value in self.params:
            if isinstance(value, tuple):
                resource[key] = [item.to_resource() for item in value]
            else:
                resource[key] = value.to_resource()
        return resource


ExpressionNode = Union[Literal, VariableRef, Template, ProviderCall]


@dataclass(frozen=True)
class ValueCandidate:
    """
    One candidate value of a variable. Several candidates guarded by
    different conditions may exist for the same variable; the condition is
    carried through untouched, it is evaluated at install time.
    """

    value: ExpressionNode
    condition: Optional[str] = None
    check_once: bool = False
    ignore_failure: bool = True
    auto_unset: bool = True

    def to_resource(self) -> Dict[str, Any]:
        resource: Dict[str, Any] = {"value": self.value.to_resource()}
        if self.condition:
            resource["condition"] = self.condition
        resource["checkonce"] = self.check_once
        resource["ignorefailure"] = self.ignore_failure
        resource["unset"] = self.auto_unset
        return resource


@dataclass(frozen=True)
class VariableDefinition:
    """A named variable as handed over by the definition loader."""

    name: str
    values: Tuple[ValueCandidate, ...]
    is_static: bool = False
    source_order: int = 0

    def to_resource(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "static": self.is_static,
            "order": self.source_order,
            "values": [candidate.to_resource() for candidate in self.values],
        }


@dataclass(frozen=True)
class VariableNode:
    """Payload of a node in the reference graph."""

    index: int
    name: str
    source_order: int


@dataclass(frozen=True)
class DependencyGraph:
    """
    Reference graph backed by a `rustworkx.PyDiGraph`.

    Node indices are assigned in declaration order and match the positions
    in `names`, `source_order` and `unknown_references`. An edge u -> v means
    "u must be computed before v". Adjacency is always read back sorted, so
    iteration never depends on insertion or hashing order.
    """

    names: Tuple[str, ...]
    source_order: Tuple[int, ...]
    unknown_references: Tuple[ReferenceSet, ...]
    digraph: rx.PyDiGraph = field(default_factory=rx.PyDiGraph, compare=False, repr=False)
    index: Dict[str, int] = field(default_factory=dict, compare=False, repr=False)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.index

    def successors_of(self, node: int) -> Tuple[int, ...]:
        return tuple(sorted(self.digraph.successor_indices(node)))

    def predecessors_of(self, node: int) -> Tuple[int, ...]:
        return tuple(sorted(self.digraph.predecessor_indices(node)))

    @property
    def successors(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(self.successors_of(node) for node in range(len(self)))

    @property
    def predecessors(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(self.predecessors_of(node) for node in range(len(self)))

    @property
    def edge_count(self) -> int:
        return self.digraph.num_edges()

    def edges(self) -> Iterator[Tuple[str, str]]:
        """Yields (referenced, dependent) name pairs in node order."""
        for source in range(len(self)):
            for target in self.successors_of(source):
                yield self.names[source], self.names[target]

    def has_edge(self, referenced: str, dependent: str) -> bool:
        if referenced not in self.index or dependent not in self.index:
            return False
        return self.digraph.has_edge(self.index[referenced], self.index[dependent])

    def dependencies_of(self, name: str) -> List[str]:
        """Names that must be computed before `name`."""
        return [self.names[i] for i in self.predecessors_of(self.index[name])]

    def dependents_of(self, name: str) -> List[str]:
        """Names that can only be computed after `name`."""
        return [self.names[i] for i in self.successors_of(self.index[name])]


@dataclass(frozen=True)
class OrderSuccess:
    order: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class OrderFailure:
    error: CyclicDependencyError

    @property
    def ok(self) -> bool:
        return False


OrderedResult = Union[OrderSuccess, OrderFailure]


@dataclass(frozen=True)
class OrderedVariables:
    """
    The final, safe evaluation order of full variable records. The installer
    runtime evaluates these strictly top to bottom.
    """

    variables: Tuple[VariableDefinition, ...]
    warnings: Tuple[UnknownReferenceWarning, ...] = ()

    def __iter__(self) -> Iterator[VariableDefinition]:
        return iter(self.variables)

    def __len__(self) -> int:
        return len(self.variables)

    @property
    def names(self) -> List[str]:
        return [variable.name for variable in self.variables]

    def to_resource(self) -> List[Dict[str, Any]]:
        return [variable.to_resource() for variable in self.variables]
