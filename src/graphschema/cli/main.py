# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the GraphSchema command-line interface."""

import argparse
import sys
from pathlib import Path

from loguru import logger

from graphschema.compiler.artifact import ARTIFACT_SUFFIX, read_artifact
from graphschema.compiler.build import CompilerError, compile_file, compile_files
from graphschema.diff.schema_diff import describe_diff, diff_schemas
from graphschema.model.entities import ParsedSchema
from graphschema.validation.checks import validate
from graphschema.validation.dependency_graph import (
    CircularDependencyError,
    build_dependency_graph,
    get_parallel_groups,
    topological_sort,
    visualize_graph,
)
from graphschema.workspace.config import (
    CONFIG_FILE_NAME,
    WorkspaceConfigError,
    load_config,
    render_default_config,
)

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the GraphSchema CLI."""
    parser = argparse.ArgumentParser(
        prog="graphschema",
        description="GraphSchema: schema DSL with relationship operators",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a new GraphSchema project",
        description="Create a project configuration and an example schema.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to initialize the project in (default: current directory)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check the schema files of a project",
        description="Parse and validate all configured schema files and write snapshots.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the GraphSchema project (default: current directory)",
    )

    # diff subcommand
    diff_parser = subparsers.add_parser(
        "diff",
        help="Show the changes between two schema versions",
        description=f"Compare two schema files or snapshots ({ARTIFACT_SUFFIX}).",
    )
    diff_parser.add_argument("old", help="Old schema file or snapshot")
    diff_parser.add_argument("new", help="New schema file or snapshot")
    diff_parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a one-line summary instead of the full report",
    )

    # graph subcommand
    graph_parser = subparsers.add_parser(
        "graph",
        help="Show the generation dependency graph of a schema",
        description="Print the dependencies between entity types of a schema file.",
    )
    graph_parser.add_argument("schema", help="Schema file")
    graph_parser.add_argument(
        "--root",
        default=None,
        help="Also print the generation order for this entity type",
    )

    args = parser.parse_args()
    _configure_logging(args.verbose)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

_EXAMPLE_SCHEMA = (
    "# Example schema\n"
    "Author:\n"
    "  name: 'string!'\n"
    "  bio: 'text?'\n"
    "Post:\n"
    "  title: string\n"
    "  author: '->Author.posts'\n"
    "  topic: 'What is this post about? ~>Topic(0.8)?'\n"
    "Topic:\n"
    "  name: 'string#'\n"
)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING", format="{level}: {message}")


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "diff":
        return _cmd_diff(args)
    if args.command == "graph":
        return _cmd_graph(args)
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    config_file = directory / CONFIG_FILE_NAME
    if config_file.exists():
        print(f"Error: project already exists at '{config_file}'.", file=sys.stderr)
        return 1

    config_file.write_text(render_default_config(), encoding="utf-8")
    schema_file = directory / "schema.yaml"
    if not schema_file.exists():
        schema_file.write_text(_EXAMPLE_SCHEMA, encoding="utf-8")
    print(f"Initialized GraphSchema project at '{config_file}'.")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    config_file = directory / CONFIG_FILE_NAME
    if not config_file.exists():
        print(
            f"Error: no GraphSchema project found at '{directory}'. Run 'graphschema init' to create one.",
            file=sys.stderr,
        )
        return 1

    try:
        config = load_config(config_file)
    except WorkspaceConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not config.schema_files:
        print("No schema files configured.")
        return 0

    files = [directory / name for name in config.schema_files]
    print(f"Checking {len(files)} schema file(s)...")
    try:
        compiled = compile_files(
            files,
            directory / config.build_directory,
            directory,
            system_entities=config.system_entities,
        )
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    has_errors = False
    for key, schema in compiled.items():
        result = validate(schema)
        for warning in result.warnings:
            print(f"Warning: {key}: {warning.message}")
        for error in result.errors:
            print(f"Error: {key}: {error.message}", file=sys.stderr)
            has_errors = True

    if has_errors:
        return 1

    print("No issues found.")
    return 0


def _cmd_diff(args: argparse.Namespace) -> int:
    """Handle the diff subcommand."""
    try:
        old = _load_schema(Path(args.old))
        new = _load_schema(Path(args.new))
    except (CompilerError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    diff = diff_schemas(old, new)
    print(diff.summary if args.summary else describe_diff(diff))
    return 0


def _cmd_graph(args: argparse.Namespace) -> int:
    """Handle the graph subcommand."""
    try:
        schema = compile_file(Path(args.schema))
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    graph = build_dependency_graph(schema)
    print(visualize_graph(graph))

    if args.root is None:
        return 0
    if args.root not in schema.entities:
        print(f"Error: entity '{args.root}' is not defined in '{args.schema}'.", file=sys.stderr)
        return 1
    try:
        order = topological_sort(graph, args.root)
    except CircularDependencyError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Generation order: {', '.join(order)}")
    for index, group in enumerate(get_parallel_groups(graph, args.root), start=1):
        print(f"  Batch {index}: {', '.join(group)}")
    return 0


def _load_schema(path: Path) -> ParsedSchema:
    """Load a snapshot or compile a schema file, depending on the file name."""
    if path.name.endswith(ARTIFACT_SUFFIX):
        try:
            return read_artifact(path)
        except OSError as exc:
            raise CompilerError(f"Cannot read snapshot '{path}': {exc}") from exc
    return compile_file(path)
