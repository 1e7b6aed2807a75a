# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema compiler: entity parsing, reference analysis, system entities and snapshots."""

from graphschema.compiler.artifact import (
    ARTIFACT_SUFFIX,
    deserialize,
    deserialize_with_options,
    read_artifact,
    read_artifact_with_options,
    serialize,
    write_artifact,
)
from graphschema.compiler.build import CompilerError, compile_file, compile_files, load_schema_source
from graphschema.compiler.parser import SchemaValidationError, parse_entity, parse_graph, parse_schema
from graphschema.compiler.semantic_analysis import SemanticError, analyze
from graphschema.compiler.system import (
    SYSTEM_ENTITY_DEFINITIONS,
    SYSTEM_ENTITY_NAMES,
    create_edge_records,
    is_system_entity,
    with_system_entities,
)

__all__ = [
    "parse_schema",
    "parse_graph",
    "parse_entity",
    "SchemaValidationError",
    "analyze",
    "SemanticError",
    "SYSTEM_ENTITY_DEFINITIONS",
    "SYSTEM_ENTITY_NAMES",
    "with_system_entities",
    "create_edge_records",
    "is_system_entity",
    "serialize",
    "deserialize",
    "deserialize_with_options",
    "write_artifact",
    "read_artifact",
    "read_artifact_with_options",
    "ARTIFACT_SUFFIX",
    "load_schema_source",
    "compile_file",
    "compile_files",
    "CompilerError",
]
