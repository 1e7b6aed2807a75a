# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural comparison of two parsed schemas.

Compares entities by name and fields by name, classifies each field change
along five axes (type, optionality, cardinality, relation status, operator)
and proposes likely field renames with a fixed-weight heuristic:

    same type             0.50
    same relation status  0.15
    same array status     0.15
    same optional status  0.10
    same operator         0.10

Pairs scoring at least 0.5 are reported. The weights are a heuristic, not a
similarity measure with any statistical grounding.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from graphschema.model.entities import ParsedEntity, ParsedSchema
from graphschema.model.types import ParsedField

# ###############
# Public Interface
# ###############

RENAME_CONFIDENCE_THRESHOLD = 0.5


class ChangeType(Enum):
    """The axis along which a field changed."""

    TYPE = "type"
    OPTIONAL = "optional"
    ARRAY = "array"
    RELATION = "relation"
    OPERATOR = "operator"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class FieldChange:
    """A change to a field present in both schema versions."""

    name: str
    change_type: ChangeType
    description: str
    old_field: ParsedField
    new_field: ParsedField


@dataclass(frozen=True)
class PossibleRename:
    """A removed/added field pair that may be the same field under a new name."""

    old_name: str
    new_name: str
    confidence: float
    reason: str


@dataclass
class EntityDiff:
    """Field-level differences of one entity present in both schema versions."""

    entity_name: str
    added_fields: list[ParsedField] = field(default_factory=list)
    removed_fields: list[ParsedField] = field(default_factory=list)
    changed_fields: list[FieldChange] = field(default_factory=list)
    possible_renames: list[PossibleRename] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added_fields or self.removed_fields or self.changed_fields)


@dataclass
class SchemaDiff:
    """All differences between two schema versions."""

    added_entities: list[str] = field(default_factory=list)
    removed_entities: list[str] = field(default_factory=list)
    modified_entities: list[EntityDiff] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added_entities or self.removed_entities or self.modified_entities)

    @property
    def summary(self) -> str:
        """One-line summary such as ``"1 added entity, 2 modified entities"``."""
        if not self.has_changes:
            return "No changes detected"
        parts = []
        for label, items in (
            ("added", self.added_entities),
            ("removed", self.removed_entities),
            ("modified", self.modified_entities),
        ):
            if items:
                parts.append(f"{len(items)} {label} entit{'y' if len(items) == 1 else 'ies'}")
        return ", ".join(parts)


def diff_schemas(old: ParsedSchema, new: ParsedSchema) -> SchemaDiff:
    """Compare two parsed schemas.

    Entities only in *new* are added, entities only in *old* are removed, and
    entities in both are compared field by field. An entity is listed as
    modified only if it gained, lost or changed at least one field.
    """
    result = SchemaDiff(
        added_entities=[name for name in new.entities if name not in old.entities],
        removed_entities=[name for name in old.entities if name not in new.entities],
    )
    for name, old_entity in old.entities.items():
        new_entity = new.entities.get(name)
        if new_entity is None:
            continue
        entity_diff = compare_entities(name, old_entity, new_entity)
        if entity_diff.has_changes:
            result.modified_entities.append(entity_diff)
    return result


def compare_entities(entity_name: str, old: ParsedEntity, new: ParsedEntity) -> EntityDiff:
    """Compare the fields of two versions of one entity.

    A field that changed along several axes is reported as a single
    :class:`FieldChange` of type ``MULTIPLE`` whose description joins the
    individual descriptions with ``"; "``.
    """
    added = [f for name, f in new.fields.items() if name not in old.fields]
    removed = [f for name, f in old.fields.items() if name not in new.fields]

    changed: list[FieldChange] = []
    for name, old_field in old.fields.items():
        new_field = new.fields.get(name)
        if new_field is None:
            continue
        changes = compare_fields(old_field, new_field)
        if len(changes) > 1:
            changed.append(
                FieldChange(
                    name=name,
                    change_type=ChangeType.MULTIPLE,
                    description="; ".join(c.description for c in changes),
                    old_field=old_field,
                    new_field=new_field,
                )
            )
        elif changes:
            changed.append(changes[0])

    return EntityDiff(
        entity_name=entity_name,
        added_fields=added,
        removed_fields=removed,
        changed_fields=changed,
        possible_renames=detect_possible_renames(removed, added),
    )


def compare_fields(old: ParsedField, new: ParsedField) -> list[FieldChange]:
    """Return one change per axis on which *old* and *new* differ, in a fixed axis order."""
    changes: list[FieldChange] = []

    def _add(change_type: ChangeType, description: str) -> None:
        changes.append(FieldChange(new.name, change_type, description, old, new))

    if old.type != new.type:
        _add(ChangeType.TYPE, f"Type changed from '{old.type}' to '{new.type}'")
    if old.is_optional != new.is_optional:
        if new.is_optional:
            _add(ChangeType.OPTIONAL, "Field changed from required to optional")
        else:
            _add(ChangeType.OPTIONAL, "Field changed from optional to required")
    if old.is_array != new.is_array:
        if new.is_array:
            _add(ChangeType.ARRAY, "Field changed from single value to array")
        else:
            _add(ChangeType.ARRAY, "Field changed from array to single value")
    if old.is_relation != new.is_relation:
        if new.is_relation:
            _add(ChangeType.RELATION, "Field changed from primitive to relation")
        else:
            _add(ChangeType.RELATION, "Field changed from relation to primitive")
    if old.operator != new.operator:
        _add(
            ChangeType.OPERATOR,
            f"Operator changed from '{_operator_label(old)}' to '{_operator_label(new)}'",
        )
    return changes


def detect_possible_renames(removed: list[ParsedField], added: list[ParsedField]) -> list[PossibleRename]:
    """Score every removed/added pair and keep those scoring at least 0.5.

    Returns:
        Renames sorted by confidence, highest first. Ties keep the order of
        *removed*, then *added*.
    """
    renames: list[PossibleRename] = []
    for old in removed:
        for new in added:
            if old.name == new.name:
                continue
            confidence = 0.0
            reasons: list[str] = []
            for matched, weight, reason in (
                (old.type == new.type, 0.5, "same type"),
                (old.is_relation == new.is_relation, 0.15, "same relation status"),
                (old.is_array == new.is_array, 0.15, "same array status"),
                (old.is_optional == new.is_optional, 0.1, "same optional status"),
                (old.operator == new.operator, 0.1, "same operator"),
            ):
                if matched:
                    confidence += weight
                    reasons.append(reason)
            if confidence >= RENAME_CONFIDENCE_THRESHOLD:
                renames.append(PossibleRename(old.name, new.name, confidence, ", ".join(reasons)))
    return sorted(renames, key=lambda r: r.confidence, reverse=True)


def describe_diff(diff: SchemaDiff) -> str:
    """Render *diff* as a human-readable report."""
    if not diff.has_changes:
        return "No schema changes detected."

    lines = ["Schema Changes:", ""]
    if diff.added_entities:
        lines.append("Added Entities:")
        lines.extend(f"  + {name}" for name in diff.added_entities)
        lines.append("")
    if diff.removed_entities:
        lines.append("Removed Entities:")
        lines.extend(f"  - {name}" for name in diff.removed_entities)
        lines.append("")

    for entity_diff in diff.modified_entities:
        lines.append(f"Modified: {entity_diff.entity_name}")
        lines.extend(f"  + {_field_label(f)}" for f in entity_diff.added_fields)
        lines.extend(f"  - {_field_label(f)}" for f in entity_diff.removed_fields)
        lines.extend(f"  ~ {c.name}: {c.description}" for c in entity_diff.changed_fields)
        if entity_diff.possible_renames:
            lines.append("  Possible renames:")
            for rename in entity_diff.possible_renames:
                percent = math.floor(rename.confidence * 100 + 0.5)
                lines.append(
                    f"    {rename.old_name} -> {rename.new_name} ({percent}% confidence: {rename.reason})"
                )
        lines.append("")

    return "\n".join(lines)


# ################
# Implementation
# ################


def _operator_label(parsed: ParsedField) -> str:
    return parsed.operator.value if parsed.operator is not None else "none"


def _field_label(parsed: ParsedField) -> str:
    return f"{parsed.name}: {parsed.type}{'?' if parsed.is_optional else ''}{'[]' if parsed.is_array else ''}"
