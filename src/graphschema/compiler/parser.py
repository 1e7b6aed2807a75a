# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema parser: turns a raw schema mapping into a :class:`ParsedSchema`.

Parsing runs in three phases:

1. Every field of every entity is parsed with the field grammar.
2. Explicit relationship references are checked by semantic analysis. The
   first error aborts the parse.
3. Backref fields are synthesized on related entities. A field the user
   declared explicitly is never overwritten.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger

from graphschema.compiler.semantic_analysis import analyze
from graphschema.model.entities import ParsedEntity, ParsedSchema
from graphschema.model.types import ParsedField, RelationShape
from graphschema.parser.grammar import parse_field

# ###############
# Public Interface
# ###############


class SchemaValidationError(ValueError):
    """Raised when a schema references an entity type it does not define.

    Attributes:
        entity: Entity declaring the offending field.
        field: Name of the offending field.
        missing_type: The referenced type that does not exist.
    """

    def __init__(self, message: str, entity: str = "", field: str = "", missing_type: str = "") -> None:
        super().__init__(message)
        self.entity = entity
        self.field = field
        self.missing_type = missing_type


def parse_schema(schema: Mapping[str, Any], *, validate: bool = True) -> ParsedSchema:
    """Parse a raw schema mapping.

    Args:
        schema: Mapping from entity name to either a type URI string or a
            mapping from field name to field definition. Keys starting with
            ``$`` are metadata and are skipped, at both the schema and the
            entity level.
        validate: Run semantic analysis (phase 2). Disable only for schemas
            that are known to reference external types.

    Returns:
        The parsed schema, backrefs included.

    Raises:
        SchemaValidationError: If an entity definition is malformed or an
            explicit relationship references a non-existent type.
    """
    parsed = ParsedSchema()
    for name, definition in schema.items():
        if name.startswith("$"):
            continue
        entity = parse_entity(name, definition)
        parsed.entities[name] = entity
        if entity.type_uri is not None:
            parsed.type_uris[name] = entity.type_uri
    logger.debug(f"Parsed {len(parsed.entities)} entities")

    if validate:
        errors = analyze(parsed)
        if errors:
            first = errors[0]
            raise SchemaValidationError(first.message, first.entity, first.field, first.missing_type)

    _synthesize_backrefs(parsed)
    return parsed


def parse_graph(schema: Mapping[str, Any]) -> ParsedSchema:
    """Parse a graph definition. Same algorithm as :func:`parse_schema`."""
    return parse_schema(schema)


def parse_entity(name: str, definition: Any) -> ParsedEntity:
    """Parse a single entity definition (phase 1 only, no reference checks).

    A string definition is taken as the entity's type URI. ``None`` is
    treated as an entity without fields. ``$type`` sets the type URI, other
    ``$`` keys become directives. Field values that are neither strings nor
    lists are ignored.

    Raises:
        SchemaValidationError: If the definition is not a mapping, or a list
            field definition does not hold exactly one string.
    """
    if isinstance(definition, str):
        return ParsedEntity(name=name, type_uri=definition)
    if definition is None:
        definition = {}
    if not isinstance(definition, Mapping):
        raise SchemaValidationError(
            f"Invalid schema: entity '{name}' must be a mapping or a type URI string", entity=name
        )

    entity = ParsedEntity(name=name, definition=dict(definition))
    for key, value in definition.items():
        if key.startswith("$"):
            if key == "$type" and isinstance(value, str):
                entity.type_uri = value
            else:
                entity.directives[key] = value
            continue
        if not isinstance(value, (str, list)):
            continue
        try:
            entity.fields[key] = parse_field(key, value)
        except TypeError as exc:
            raise SchemaValidationError(f"Invalid schema: {name}.{key}: {exc}", entity=name, field=key) from exc
    return entity


# ################
# Implementation
# ################


def _synthesize_backrefs(schema: ParsedSchema) -> None:
    """Add inverse fields for every relation that names a backref."""
    for entity_name, entity in schema.entities.items():
        for parsed in list(entity.fields.values()):
            if not parsed.related_type or not parsed.backref:
                continue
            related = schema.entities.get(parsed.related_type)
            if related is None or parsed.backref in related.fields:
                continue
            related.fields[parsed.backref] = ParsedField(
                name=parsed.backref,
                type=entity_name,
                is_array=True,
                shape=RelationShape(related_type=entity_name, backref=parsed.name),
            )
            logger.debug(f"Synthesized backref {parsed.related_type}.{parsed.backref} -> {entity_name}")
