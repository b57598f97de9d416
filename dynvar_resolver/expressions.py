"""
Reference extraction for variable expressions.

Expression strings use the placeholder syntax of the installer's variable
substitutor:

    ${name}          braced reference
    $name            bare reference (letters, digits, '_', '.', '-')
    $$               a literal '$'
    ${ENV[HOME]}     environment variable, resolved outside the installer
    ${SYSTEM[a.b]}   system property, resolved outside the installer

`parse_expression` turns a string into a `Template`; `extract_references`
walks any expression node, including every parameter of nested provider
calls, and returns the names of the variables it needs.
"""

import re
from typing import Iterable, Iterator, List, Optional, Union

from dynvar_resolver.models import (
    ExpressionNode,
    Literal,
    ProviderCall,
    ReferenceSet,
    Template,
    ValueCandidate,
    VariableDefinition,
    VariableRef,
)

_TOKEN_PATTERN = re.compile(
    r"""
      \$\$                                                  # escaped dollar
    | \$\{(?P<braced>[^{}]*)\}                              # ${name}
    | \$(?P<bare>[A-Za-z_](?:[A-Za-z0-9_.\-]*[A-Za-z0-9_])?)  # $name
    """,
    re.VERBOSE,
)

_EXTERNAL_PATTERN = re.compile(r"^(?:(?:ENV|SYSTEM)\[[^\]]*\]|(?:env|sys)\..+)$")


def is_external_name(name: str) -> bool:
    """True for environment and system property tokens."""
    return bool(_EXTERNAL_PATTERN.match(name))


def parse_expression(text: str) -> Template:
    """Splits an expression string into literal and reference parts."""
    parts: List[Union[Literal, VariableRef]] = []
    buffer: List[str] = []
    position = 0

    def flush():
        literal = "".join(buffer)
        if literal:
            parts.append(Literal(literal))
        buffer.clear()

    for match in _TOKEN_PATTERN.finditer(text):
        buffer.append(text[position : match.start()])
        position = match.end()
        token = match.group(0)

        if token == "$$":
            buffer.append("$")
            continue

        braced = match.group("braced")
        name = braced.strip() if braced is not None else match.group("bare")
        if not name:
            # `${}` or `${  }` is not a placeholder.
            buffer.append(token)
            continue

        flush()
        parts.append(VariableRef(name=name, external=is_external_name(name), raw=token))

    buffer.append(text[position:])
    flush()
    return Template(source=text, parts=tuple(parts))


def iter_references(node: ExpressionNode) -> Iterator[VariableRef]:
    """Yields every reference in `node` in textual order, descending into providers."""
    if isinstance(node, VariableRef):
        yield node
    elif isinstance(node, Template):
        for part in node.parts:
            yield from iter_references(part)
    elif isinstance(node, ProviderCall):
        for _, value in node.params:
            if isinstance(value, tuple):
                for item in value:
                    yield from iter_references(item)
            else:
                yield from iter_references(value)
    elif not isinstance(node, Literal):
        raise TypeError(f"Unsupported expression node: {node!r}")


def extract_references(
    node: ExpressionNode, include_external: bool = False
) -> ReferenceSet:
    """Returns the set of variable names referenced anywhere in `node`."""
    return frozenset(
        ref.name
        for ref in iter_references(node)
        if include_external or not ref.external
    )


def collect_references(definition: VariableDefinition) -> ReferenceSet:
    """Union of the references of all candidate values of a variable."""
    names: set = set()
    for candidate in definition.values:
        names.update(extract_references(candidate.value))
    return frozenset(names)


def as_expression(value: Union[str, ExpressionNode]) -> ExpressionNode:
    if isinstance(value, str):
        return parse_expression(value)
    return value


def define(
    name: str,
    *values: Union[str, ExpressionNode],
    source_order: int = 0,
    is_static: bool = False,
    condition: Optional[str] = None,
) -> VariableDefinition:
    """
    Shorthand for building a `VariableDefinition` from expression strings or
    ready-made nodes. Every value becomes one candidate guarded by `condition`.
    """
    if not values:
        values = ("",)
    candidates = tuple(
        ValueCandidate(value=as_expression(value), condition=condition)
        for value in values
    )
    return VariableDefinition(
        name=name, values=candidates, is_static=is_static, source_order=source_order
    )


def define_all(
    specs: Iterable[tuple], static_names: Iterable[str] = ()
) -> List[VariableDefinition]:
    """
    Builds a declaration-ordered list of definitions from (name, expression)
    pairs; `source_order` follows the iteration order.
    """
    statics = set(static_names)
    return [
        define(name, expression, source_order=i, is_static=name in statics)
        for i, (name, expression) in enumerate(specs)
    ]
