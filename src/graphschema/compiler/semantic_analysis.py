# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic analysis for parsed schemas.

Checks that every relationship declared with an explicit operator points at
an entity that exists. This is distinct from validation (dependency cycles,
dangling implicit relations and other warnings), which runs on a schema that
already passed this analysis.
"""

from __future__ import annotations

from dataclasses import dataclass

from graphschema.model.entities import ParsedEntity, ParsedSchema
from graphschema.model.types import ParsedField

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class SemanticError:
    """A structural error detected during semantic analysis.

    Attributes:
        message: Human-readable description of the error.
        entity: Entity declaring the offending field.
        field: Name of the offending field.
        missing_type: The referenced type that does not exist.
    """

    message: str
    entity: str = ""
    field: str = ""
    missing_type: str = ""


def analyze(schema: ParsedSchema) -> list[SemanticError]:
    """Check the explicit relationship references of *schema*.

    Rules:
    - Fields without an explicit operator are never checked, so implicit
      PascalCase relations may point anywhere.
    - A field referencing its own entity is always valid.
    - For a union target, nothing is checked when no member exists in the
      schema (the union refers to foreign types). Once at least one member
      exists, every other member must exist as well.
    - Otherwise the related type must exist.

    Args:
        schema: The schema to analyze, before backref synthesis and before
            system entities are injected.

    Returns:
        A list of :class:`SemanticError` instances in declaration order. An
        empty list means every reference resolves.
    """
    errors: list[SemanticError] = []
    for entity in schema.entities.values():
        for parsed in entity.fields.values():
            errors.extend(_check_field(schema, entity, parsed))
    return errors


# ################
# Implementation
# ################


def _missing(entity: ParsedEntity, parsed: ParsedField, type_name: str) -> SemanticError:
    return SemanticError(
        message=f"Invalid schema: {entity.name}.{parsed.name} references non-existent type '{type_name}'",
        entity=entity.name,
        field=parsed.name,
        missing_type=type_name,
    )


def _check_field(schema: ParsedSchema, entity: ParsedEntity, parsed: ParsedField) -> list[SemanticError]:
    if not parsed.is_relation or parsed.operator is None:
        return []
    if parsed.related_type == entity.name:
        return []

    union_types = parsed.union_types
    if union_types:
        if not any(t in schema.entities for t in union_types):
            return []
        return [
            _missing(entity, parsed, t) for t in union_types if t not in schema.entities and t != entity.name
        ]

    related_type = parsed.related_type or ""
    if related_type not in schema.entities:
        return [_missing(entity, parsed, related_type)]
    return []
