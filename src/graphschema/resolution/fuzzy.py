# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution of fuzzy relationship fields at entity creation time.

Backward fuzzy fields (``<~``) are grounded in existing data: they are filled
from semantic search results and never cause new entities to be created.

Forward fuzzy fields (``~>``) first look for a similar existing entity and,
when none scores at or above the threshold, generate and persist a new one.

The search query for a field ``topic`` is taken from ``data["topicHint"]``,
then from the prompt text of the field definition. Forward fields fall back
to the field name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from graphschema.model.entities import ParsedEntity, ParsedSchema
from graphschema.model.types import ParsedField, RelationOperator
from graphschema.resolution.provider import (
    EntityProvider,
    GenerateEntityFn,
    GenerationContext,
    ResolveNestedFn,
    has_semantic_search,
)
from graphschema.search.union_fallback import (
    FallbackSearchOptions,
    create_provider_searcher,
    search_union_types,
)

# ###############
# Public Interface
# ###############

PENDING_PREFIX = "_pending_"


@dataclass(frozen=True)
class PendingRelation:
    """An edge to materialize once the entity being resolved is stored.

    Attributes:
        field_name: The relationship field on the entity being created.
        target_type: Type of the related entity.
        target_id: ID of the related entity.
        similarity: Match score when the target was found by search.
    """

    field_name: str
    target_type: str
    target_id: str
    similarity: float | None = None


@dataclass
class ForwardResolution:
    """Resolved data plus the edges created while resolving it."""

    data: dict[str, Any]
    pending_relations: list[PendingRelation] = field(default_factory=list)


async def resolve_backward_fuzzy(
    type_name: str,
    data: dict[str, Any],
    entity: ParsedEntity,
    schema: ParsedSchema,
    provider: EntityProvider,
) -> dict[str, Any]:
    """Fill unset ``<~`` fields of *data* from semantic search.

    Array fields receive every match at or above the entity's fuzzy
    threshold (up to 10), single fields the best match. Union targets are
    searched in declaration order and the type that matched is stored under
    ``<field>$matchedType``. Fields without a query, and fields without a
    qualifying match, stay unset.

    Args:
        type_name: Type of the entity being created.
        data: Input data, including ``<field>Hint`` values.
        entity: Parsed definition of *type_name*.
        schema: The full parsed schema.
        provider: Storage provider. Without semantic search nothing resolves.

    Returns:
        A copy of *data* with the resolved fields set.
    """
    resolved = dict(data)
    threshold = entity.fuzzy_threshold

    for name, parsed in entity.fields.items():
        if parsed.operator is not RelationOperator.BACKWARD_FUZZY:
            continue
        if resolved.get(name) is not None:
            continue
        query = _hint_text(data, name) or parsed.prompt
        if not query:
            continue
        if not has_semantic_search(provider):
            continue

        limit = 10 if parsed.is_array else 1
        if parsed.union_types:
            result = await search_union_types(
                list(parsed.union_types),
                query,
                FallbackSearchOptions(
                    searcher=create_provider_searcher(provider),
                    mode="ordered",
                    threshold=threshold,
                    limit=limit,
                ),
            )
            if not result.matches:
                logger.debug(f"No {'|'.join(parsed.union_types)} match for {type_name}.{name}")
                continue
            if parsed.is_array:
                resolved[name] = [m["$id"] for m in result.matches]
            else:
                resolved[name] = result.matches[0]["$id"]
            resolved[f"{name}$matchedType"] = result.matched_type
            logger.info(f"Resolved {type_name}.{name} to {result.matched_type} (score {result.confidence})")
            continue

        matches = await provider.semantic_search(parsed.related_type, query, min_score=threshold, limit=limit)
        if not matches:
            logger.debug(f"No {parsed.related_type} match for {type_name}.{name}")
            continue
        if parsed.is_array:
            resolved[name] = [m["$id"] for m in matches if m["$score"] >= threshold]
        else:
            resolved[name] = matches[0]["$id"]
        logger.info(f"Resolved {type_name}.{name} from {len(matches)} {parsed.related_type} match(es)")

    return resolved


async def resolve_forward_fuzzy(
    type_name: str,
    data: dict[str, Any],
    entity: ParsedEntity,
    schema: ParsedSchema,
    provider: EntityProvider,
    parent_id: str,
    *,
    generate_entity: GenerateEntityFn,
    resolve_nested: ResolveNestedFn | None = None,
) -> ForwardResolution:
    """Fill unset ``~>`` fields of *data* by reusing similar entities or generating new ones.

    The field threshold overrides the entity's fuzzy threshold. For array
    fields every hint in ``<field>Hint`` (a string or a list of strings) is
    resolved on its own, in order, and an existing entity is reused at most
    once per call. Reused entities are updated with ``$generated: False``
    and ``$similarity``; generated ones are created with ``$generated:
    True``, ``$generatedBy`` and ``$sourceField``. Values already present in
    *data* are kept; for array fields they still produce pending relations.

    Args:
        type_name: Type of the entity being created.
        data: Input data, including ``<field>Hint`` values.
        entity: Parsed definition of *type_name*.
        schema: The full parsed schema.
        provider: Storage provider.
        parent_id: Pre-assigned ID of the entity being created.
        generate_entity: Produces the payload of a new related entity.
        resolve_nested: Resolves pending relations of a generated payload.
            Defaults to :func:`resolve_nested_pending`.

    Returns:
        The resolved data and the relations to materialize.

    Raises:
        Exception: Whatever *generate_entity* raised. The failure is logged
            first.
    """
    resolve_nested = resolve_nested or resolve_nested_pending
    resolved = dict(data)
    pending: list[PendingRelation] = []
    default_threshold = entity.fuzzy_threshold
    context = GenerationContext(parent=type_name, parent_data=data, parent_id=parent_id)

    async def _generate(parsed: ParsedField, hint: str) -> str | None:
        related_type = parsed.related_type or ""
        try:
            generated = await generate_entity(related_type, hint, context, schema)
        except Exception:
            logger.exception(f"Generating {related_type} for {type_name}.{parsed.name} failed")
            raise
        related_entity = schema.entities.get(related_type)
        if related_entity is None:
            logger.warning(f"Not storing generated {related_type}: type is not part of the schema")
            return None
        payload = await resolve_nested(generated, related_entity, schema, provider)
        created = await provider.create(
            related_type,
            None,
            {**payload, "$generated": True, "$generatedBy": parent_id, "$sourceField": parsed.name},
        )
        logger.info(f"Generated {related_type} {created['$id']} for {type_name}.{parsed.name}")
        pending.append(PendingRelation(parsed.name, related_type, created["$id"]))
        return created["$id"]

    async def _reuse(parsed: ParsedField, match: dict[str, Any]) -> None:
        related_type = parsed.related_type or ""
        pending.append(PendingRelation(parsed.name, related_type, match["$id"], match["$score"]))
        await provider.update(related_type, match["$id"], {"$generated": False, "$similarity": match["$score"]})
        logger.info(f"Reusing {related_type} {match['$id']} for {type_name}.{parsed.name} (score {match['$score']})")

    for name, parsed in entity.fields.items():
        if parsed.operator is not RelationOperator.FORWARD_FUZZY:
            continue
        related_type = parsed.related_type or ""

        if resolved.get(name) is not None:
            if parsed.is_array and isinstance(resolved[name], list):
                pending.extend(PendingRelation(name, related_type, target_id) for target_id in resolved[name])
            continue

        hint_value = data.get(f"{name}Hint")
        query = _hint_text(data, name) or parsed.prompt or name
        threshold = parsed.threshold if parsed.threshold is not None else default_threshold

        if parsed.is_array:
            hints = hint_value if isinstance(hint_value, list) else [hint_value] if hint_value else []
            ids: list[str] = []
            used: set[str] = set()
            for hint in hints:
                hint_text = str(hint) if hint else name
                match = None
                if has_semantic_search(provider):
                    matches = await provider.semantic_search(related_type, hint_text, min_score=threshold, limit=10)
                    match = next((m for m in matches if m["$score"] >= threshold and m["$id"] not in used), None)
                if match is not None:
                    used.add(match["$id"])
                    ids.append(match["$id"])
                    await _reuse(parsed, match)
                    continue
                created_id = await _generate(parsed, hint_text)
                if created_id is not None:
                    ids.append(created_id)
            resolved[name] = ids
            continue

        match = None
        if has_semantic_search(provider):
            matches = await provider.semantic_search(related_type, query, min_score=threshold, limit=5)
            if matches and matches[0]["$score"] >= threshold:
                match = matches[0]
        if match is not None:
            resolved[name] = match["$id"]
            resolved[f"{name}$matched"] = True
            resolved[f"{name}$score"] = match["$score"]
            await _reuse(parsed, match)
            continue
        created_id = await _generate(parsed, query)
        if created_id is not None:
            resolved[name] = created_id

    return ForwardResolution(data=resolved, pending_relations=pending)


async def resolve_nested_pending(
    data: dict[str, Any],
    entity: ParsedEntity,
    schema: ParsedSchema,
    provider: EntityProvider,
) -> dict[str, Any]:
    """Create the related entities a generated payload carries as pending values.

    A key ``_pending_<field>`` holding ``{"type": ..., "data": ...}`` is
    replaced by ``<field>`` set to the ID of the created entity (wrapped in a
    list for array fields). Nested payloads are resolved depth first.
    """
    resolved = dict(data)
    for key in [k for k in resolved if k.startswith(PENDING_PREFIX)]:
        field_name = key[len(PENDING_PREFIX) :]
        pending_value = resolved.pop(key)
        if not isinstance(pending_value, dict):
            logger.warning(f"Ignoring malformed pending value for {entity.name}.{field_name}")
            continue
        pending_type = pending_value.get("type", "")
        related_entity = schema.entities.get(pending_type)
        if related_entity is None:
            logger.warning(f"Ignoring pending {pending_type} for {entity.name}.{field_name}: unknown type")
            continue
        nested = await resolve_nested_pending(pending_value.get("data") or {}, related_entity, schema, provider)
        created = await provider.create(pending_type, None, nested)
        parsed = entity.fields.get(field_name)
        resolved[field_name] = [created["$id"]] if parsed is not None and parsed.is_array else created["$id"]
    return resolved


# ################
# Implementation
# ################


def _hint_text(data: dict[str, Any], field_name: str) -> str | None:
    """Return ``data["<field>Hint"]`` when it is a non-empty string."""
    hint = data.get(f"{field_name}Hint")
    if isinstance(hint, str) and hint:
        return hint
    return None
