# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compilation of schema files with a snapshot cache.

Implements a CMake-style cache: a snapshot is reused when it already exists,
is strictly newer than the corresponding schema file and was built with the
same compile options. Schema files are
YAML documents (JSON is accepted as a subset of YAML).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from graphschema.compiler.artifact import ARTIFACT_SUFFIX, read_artifact_with_options, write_artifact
from graphschema.compiler.parser import SchemaValidationError, parse_schema
from graphschema.compiler.system import with_system_entities
from graphschema.model.entities import ParsedSchema

# ###############
# Public Interface
# ###############


class CompilerError(Exception):
    """Raised when a schema file cannot be read, parsed or validated."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


def load_schema_source(path: Path) -> dict[str, Any]:
    """Read a raw schema mapping from a YAML or JSON file.

    Raises:
        CompilerError: If the file cannot be read, is not valid YAML or does
            not contain a mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CompilerError(f"Cannot read schema file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CompilerError(f"Invalid YAML in '{path}': {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CompilerError(f"Schema file '{path}' must contain a mapping of entity names")
    return data


def compile_file(path: Path, *, system_entities: bool = False) -> ParsedSchema:
    """Load and parse a single schema file without touching any cache.

    Raises:
        CompilerError: On read, YAML or schema validation errors.
    """
    raw = load_schema_source(path)
    try:
        schema = parse_schema(raw)
    except SchemaValidationError as exc:
        raise CompilerError(f"{path}: {exc}") from exc
    return with_system_entities(schema) if system_entities else schema


def compile_files(
    files: list[Path],
    build_dir: Path,
    root: Path,
    *,
    system_entities: bool = False,
) -> dict[str, ParsedSchema]:
    """Compile a list of schema files, reusing up-to-date snapshots.

    For each file, the compiler:
    1. Checks whether an up-to-date snapshot built with the same options
       exists in *build_dir* (cache hit).
    2. Otherwise loads and parses the file and writes a fresh snapshot.

    Args:
        files: Paths of the schema files to compile.
        build_dir: Root directory for snapshots. Its layout mirrors the
            layout of the schema files below *root*.
        root: Project root used to compute snapshot keys.
        system_entities: Inject the ``Noun``, ``Verb`` and ``Edge`` entities
            into every compiled schema.

    Returns:
        A mapping from keys (the file path relative to *root*, without
        suffix, e.g. ``"schemas/blog"``) to the compiled schemas.

    Raises:
        CompilerError: On read, YAML or schema validation errors, or if a
            file is not located below *root*.
    """
    options = {"system_entities": system_entities}
    compiled: dict[str, ParsedSchema] = {}
    for source_file in files:
        key = _rel_key(source_file, root)
        artifact = _artifact_path(key, build_dir)
        if _is_up_to_date(source_file, artifact):
            try:
                cached, cached_options = read_artifact_with_options(artifact)
            except ValueError as exc:
                logger.warning(f"Ignoring unreadable snapshot {artifact}: {exc}")
            else:
                if cached_options == options:
                    compiled[key] = cached
                    logger.debug(f"Reusing snapshot for {key}")
                    continue
                logger.debug(f"Compile options of {key} changed, recompiling")
        schema = compile_file(source_file, system_entities=system_entities)
        write_artifact(schema, artifact, options=options)
        logger.debug(f"Compiled {key} ({len(schema.entities)} entities)")
        compiled[key] = schema
    return compiled


# ################
# Implementation
# ################


def _rel_key(source_file: Path, root: Path) -> str:
    """Return the canonical key for a schema file (relative path without extension)."""
    try:
        rel = source_file.resolve().relative_to(root.resolve())
    except ValueError:
        raise CompilerError(f"Schema file '{source_file}' is not under the project root '{root}'") from None
    return str(rel.with_suffix("")).replace("\\", "/")


def _artifact_path(key: str, build_dir: Path) -> Path:
    """Return the snapshot path for a given key (``"a/b"`` maps to ``build_dir/a/b.schema.json``)."""
    parts = key.split("/")
    artifact_dir = build_dir
    for part in parts[:-1]:
        artifact_dir = artifact_dir / part
    return artifact_dir / (parts[-1] + ARTIFACT_SUFFIX)


def _is_up_to_date(source_file: Path, artifact: Path) -> bool:
    """Return True if *artifact* exists and is strictly newer than *source_file*.

    A missing source is never up to date, so that loading it reports the error.
    """
    if not artifact.exists() or not source_file.exists():
        return False
    return artifact.stat().st_mtime > source_file.stat().st_mtime
