# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema model for GraphSchema (fields, entities, schemas)."""

from graphschema.model.entities import DEFAULT_FUZZY_THRESHOLD, ParsedEntity, ParsedSchema
from graphschema.model.types import (
    Direction,
    FieldShape,
    GenericShape,
    MatchMode,
    ParametricShape,
    ParsedField,
    RelationOperator,
    RelationShape,
    ScalarShape,
)

__all__ = [
    # Fields
    "Direction",
    "MatchMode",
    "RelationOperator",
    "ScalarShape",
    "ParametricShape",
    "GenericShape",
    "RelationShape",
    "FieldShape",
    "ParsedField",
    # Entities
    "DEFAULT_FUZZY_THRESHOLD",
    "ParsedEntity",
    "ParsedSchema",
]
