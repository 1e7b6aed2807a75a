# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema differ: entity and field changes between two schema versions."""

from graphschema.diff.schema_diff import (
    RENAME_CONFIDENCE_THRESHOLD,
    ChangeType,
    EntityDiff,
    FieldChange,
    PossibleRename,
    SchemaDiff,
    compare_entities,
    compare_fields,
    describe_diff,
    detect_possible_renames,
    diff_schemas,
)

__all__ = [
    "RENAME_CONFIDENCE_THRESHOLD",
    "ChangeType",
    "FieldChange",
    "PossibleRename",
    "EntityDiff",
    "SchemaDiff",
    "diff_schemas",
    "compare_entities",
    "compare_fields",
    "detect_possible_renames",
    "describe_diff",
]
