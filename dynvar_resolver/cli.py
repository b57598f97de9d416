#!/usr/bin/env python

import os
import sys
import argparse
import logging

from pydantic import ValidationError

from .config import ResolverSettings
from .errors import DefinitionError, ResolverError
from .emitter import render_report, write_resource
from .helpers import RESOURCE_NAME
from .parser import format_validation_error
from .resolver import VariableOrderResolver

# Define default paths relative to the current file's location
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
DEFAULT_INPUT_DIR = os.path.join(PROJECT_ROOT, "inputs")
DEFAULT_OUTPUT_DIR = os.path.join(PROJECT_ROOT, "outputs")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dynvar-order",
        description="Computes the evaluation order of an installer's dynamic variables.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,  # Shows default values in help
    )
    parser.add_argument(
        "--definitions",
        default=os.path.join(DEFAULT_INPUT_DIR, "variables.yaml"),
        help="Path to the YAML variable definition file.",
    )
    parser.add_argument(
        "--output",
        default=os.path.join(DEFAULT_OUTPUT_DIR, f"{RESOURCE_NAME}.yaml"),
        help="Path of the ordered variables resource to write.",
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Print the computed ordering to stdout.",
    )
    parser.add_argument(
        "--external",
        action="append",
        default=[],
        metavar="NAME",
        help="A variable provided at install time; may be repeated.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of threads used to extract variable references.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def main(argv=None):
    """
    Main function to parse command-line arguments and run the variable ordering step.
    """
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        resolver = VariableOrderResolver.from_file(args.definitions)

        # Command line settings extend the ones from the definition file.
        update = {}
        if args.external:
            update["external_variables"] = [
                *resolver.settings.external_variables,
                *args.external,
            ]
        if args.workers is not None:
            update["max_workers"] = args.workers
        if update:
            try:
                resolver.settings = ResolverSettings.model_validate(
                    {**resolver.settings.model_dump(), **update}
                )
            except ValidationError as e:
                raise DefinitionError(
                    [f"Invalid command line settings: {format_validation_error(e)}"]
                )

        ordered = resolver.resolve()
        write_resource(ordered, args.output)
    except ResolverError as e:
        print(f"\nCompilation failed: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"\nCould not write '{args.output}': {e}", file=sys.stderr)
        sys.exit(1)

    if args.report:
        print(render_report(ordered, source_name=args.definitions))
    print(f"Successfully wrote {len(ordered)} ordered variables to: {args.output}")


if __name__ == "__main__":
    main()
