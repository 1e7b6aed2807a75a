# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entity and schema containers for the GraphSchema model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import Field as _Field

from graphschema.model.types import ParsedField

# ###############
# Public Interface
# ###############

DEFAULT_FUZZY_THRESHOLD = 0.75


class ParsedEntity(BaseModel):
    """One entity type of a parsed schema.

    Attributes:
        name: Entity name.
        fields: Fields in declaration order, keyed by field name.
        definition: The raw entity definition, kept for metadata lookups
            such as ``$fuzzyThreshold`` or ``$instructions``.
        type_uri: External type URI from ``$type``, if any.
        directives: All other ``$``-prefixed keys of the definition.
    """

    name: str
    fields: dict[str, ParsedField] = _Field(default_factory=dict)
    definition: dict[str, Any] = _Field(default_factory=dict)
    type_uri: str | None = None
    directives: dict[str, Any] = _Field(default_factory=dict)

    @property
    def fuzzy_threshold(self) -> float:
        """Return ``$fuzzyThreshold`` when it is a number, else the default of 0.75."""
        value = self.definition.get("$fuzzyThreshold")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return DEFAULT_FUZZY_THRESHOLD


class ParsedSchema(BaseModel):
    """A fully parsed schema: entities in declaration order plus their type URIs."""

    entities: dict[str, ParsedEntity] = _Field(default_factory=dict)
    type_uris: dict[str, str] = _Field(default_factory=dict)

    def entity_names(self) -> list[str]:
        return list(self.entities)

    def get_entity(self, name: str) -> ParsedEntity | None:
        return self.entities.get(name)

    def has_entity(self, name: str) -> bool:
        return name in self.entities

    def relationship_fields(self, entity_name: str) -> list[ParsedField]:
        """Return the relation fields of *entity_name*, or an empty list if it is unknown."""
        entity = self.entities.get(entity_name)
        if entity is None:
            return []
        return [f for f in entity.fields.values() if f.is_relation]

    def referencing_entities(self, entity_name: str) -> list[str]:
        """Return the names of entities with at least one relation field targeting *entity_name*."""
        return [
            name
            for name, entity in self.entities.items()
            if any(f.related_type == entity_name for f in entity.fields.values())
        ]
