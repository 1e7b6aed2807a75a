# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Built-in system entities and edge records.

Every schema can carry three system entities describing the schema itself:
``Noun`` (entity types), ``Verb`` (actions) and ``Edge`` (relationships).
They are injected after parsing and are not checked against user entities.
"""

from __future__ import annotations

from typing import Any

from graphschema.compiler.parser import parse_entity
from graphschema.model.entities import ParsedEntity, ParsedSchema
from graphschema.model.types import Direction

# ###############
# Public Interface
# ###############

SYSTEM_ENTITY_DEFINITIONS: dict[str, dict[str, str]] = {
    "Noun": {
        "name": "string",
        "singular": "string",
        "plural": "string",
        "slug": "string",
        "slugPlural": "string",
        "description": "string?",
        "properties": "json?",
        "relationships": "json?",
        "actions": "json?",
        "events": "json?",
        "metadata": "json?",
    },
    "Verb": {
        "action": "string",
        "actor": "string?",
        "act": "string?",
        "activity": "string?",
        "result": "string?",
        "reverse": "json?",
        "inverse": "string?",
        "description": "string?",
    },
    "Edge": {
        "from": "string",
        "name": "string",
        "to": "string",
        "backref": "string?",
        "cardinality": "string",
        "direction": "string",
        "matchMode": "string?",
        "required": "boolean?",
        "description": "string?",
    },
}

SYSTEM_ENTITY_NAMES: frozenset[str] = frozenset(SYSTEM_ENTITY_DEFINITIONS)


def with_system_entities(schema: ParsedSchema) -> ParsedSchema:
    """Return a copy of *schema* with the ``Noun``, ``Verb`` and ``Edge`` entities added.

    System entities replace user entities of the same name.
    """
    result = schema.model_copy(deep=True)
    for name, definition in SYSTEM_ENTITY_DEFINITIONS.items():
        result.entities[name] = parse_entity(name, definition)
    return result


def create_edge_records(type_name: str, entity: ParsedEntity) -> list[dict[str, Any]]:
    """Describe every relation field of *entity* as an ``Edge`` record.

    Backward relations are recorded from the related type to *type_name*.
    Cardinality is ``many-to-many`` for arrays with a backref,
    ``one-to-many`` for other arrays and ``many-to-one`` for single values.
    """
    edges: list[dict[str, Any]] = []
    for field_name, parsed in entity.fields.items():
        if not parsed.is_relation or not parsed.related_type:
            continue
        if parsed.direction is Direction.BACKWARD:
            source, target = parsed.related_type, type_name
        else:
            source, target = type_name, parsed.related_type
        if parsed.is_array:
            cardinality = "many-to-many" if parsed.backref else "one-to-many"
        else:
            cardinality = "many-to-one"
        edges.append(
            {
                "from": source,
                "name": field_name,
                "to": target,
                "backref": parsed.backref,
                "cardinality": cardinality,
                "direction": parsed.direction.value,
                "matchMode": parsed.match_mode.value,
            }
        )
    return edges


def is_system_entity(name: str) -> bool:
    return name in SYSTEM_ENTITY_NAMES

