"""
Packages the sorter's result as the ordered list of full variable records
and serializes it for the installer.
"""

import os
from typing import Iterable, Optional, Sequence

import yaml
from jinja2 import Environment, FileSystemLoader

from dynvar_resolver.errors import UnknownReferenceWarning
from dynvar_resolver.helpers import RESOURCE_NAME
from dynvar_resolver.models import (
    OrderedResult,
    OrderedVariables,
    OrderFailure,
    VariableDefinition,
)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")
REPORT_TEMPLATE = "order_report.txt.j2"


def emit(
    result: OrderedResult,
    definitions: Sequence[VariableDefinition],
    warnings: Iterable[UnknownReferenceWarning] = (),
) -> OrderedVariables:
    """
    Maps the ordered names back to their full records.

    A failed result is re-raised; nothing partial is ever returned.
    """
    if isinstance(result, OrderFailure):
        raise result.error

    by_name = {definition.name: definition for definition in definitions}
    if sorted(result.order) != sorted(by_name):
        raise ValueError(
            "Ordered result is not a permutation of the variable definitions: "
            f"{', '.join(result.order)}"
        )

    return OrderedVariables(
        variables=tuple(by_name[name] for name in result.order),
        warnings=tuple(warnings),
    )


def dump_resource(ordered: OrderedVariables, stream=None) -> Optional[str]:
    """
    Serializes the ordered variables as the YAML `dynvariables` resource.
    Returns the document as a string when no stream is given.
    """
    document = {RESOURCE_NAME: ordered.to_resource()}
    return yaml.safe_dump(document, stream, sort_keys=False, default_flow_style=False)


def write_resource(ordered: OrderedVariables, path: str):
    """Writes the resource file, creating its directory if needed."""
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
    with open(path, "w", encoding="utf-8") as f:
        dump_resource(ordered, f)


def render_report(ordered: OrderedVariables, source_name: str = "<definitions>") -> str:
    """Renders a human readable summary of the computed order."""
    jinja_env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR), trim_blocks=True, lstrip_blocks=True
    )
    return jinja_env.get_template(REPORT_TEMPLATE).render(
        source_name=source_name,
        variables=ordered.variables,
        warnings=ordered.warnings,
    )
