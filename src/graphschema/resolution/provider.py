# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Interfaces of the storage provider and entity generator used during resolution."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeAlias, runtime_checkable

from graphschema.model.entities import ParsedEntity, ParsedSchema

# ###############
# Public Interface
# ###############


@runtime_checkable
class SemanticSearchProvider(Protocol):
    """A provider able to find entities of a type by embedding similarity."""

    async def semantic_search(
        self,
        type_name: str,
        query: str,
        *,
        min_score: float | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return matches (dicts with at least ``$id`` and ``$score``), best first."""
        ...


class EntityProvider(Protocol):
    """A provider that persists entities. Semantic search support is optional."""

    async def create(self, type_name: str, entity_id: str | None, data: dict[str, Any]) -> dict[str, Any]:
        """Persist a new entity and return it, including its ``$id``."""
        ...

    async def update(self, type_name: str, entity_id: str, patch: dict[str, Any]) -> Any:
        """Merge *patch* into an existing entity."""
        ...


@dataclass(frozen=True)
class GenerationContext:
    """What the generator knows about the entity that needs a new related entity.

    Attributes:
        parent: Type of the entity being created.
        parent_data: The data supplied for that entity.
        parent_id: The pre-assigned ID of that entity.
    """

    parent: str
    parent_data: dict[str, Any] = field(default_factory=dict)
    parent_id: str = ""


# Produces the payload of a new entity: (type_name, hint, context, schema) -> data.
GenerateEntityFn: TypeAlias = Callable[[str, str, GenerationContext, ParsedSchema], Awaitable[dict[str, Any]]]

# Resolves pending relations of a generated payload before it is persisted.
ResolveNestedFn: TypeAlias = Callable[[dict[str, Any], ParsedEntity, ParsedSchema, EntityProvider], Awaitable[dict[str, Any]]]


def has_semantic_search(provider: object) -> bool:
    """Return True if *provider* implements ``semantic_search``."""
    return callable(getattr(provider, "semantic_search", None))
