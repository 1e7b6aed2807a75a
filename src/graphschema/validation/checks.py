# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Validation checks for parsed schemas.

These checks operate on schemas that already passed semantic analysis and
flag design problems beyond unresolved references.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from graphschema.model.entities import ParsedSchema
from graphschema.model.types import MatchMode
from graphschema.validation.dependency_graph import build_dependency_graph, detect_cycles

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal issue: the schema works, but probably not as intended.

    Attributes:
        message: Human-readable description of the warning.
    """

    message: str


@dataclass(frozen=True)
class ValidationError:
    """A fatal issue: the schema cannot be used to create entities.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


@dataclass
class ValidationResult:
    """Result of running validation checks.

    Attributes:
        warnings: Non-fatal issues found during validation.
        errors: Fatal errors that indicate an unusable schema.
    """

    warnings: list[ValidationWarning] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal validation errors were found."""
        return len(self.errors) > 0


def validate(schema: ParsedSchema) -> ValidationResult:
    """Run all validation checks on a parsed schema.

    Checks performed:

    1. **Dependency cycles** (error): Required forward relations (``->``)
       between two or more entities must not form a cycle, since none of the
       entities on it could be created first. An entity that requires itself
       is only a warning, the chain ends as soon as an existing entity is
       linked.

    2. **Dangling implicit relations** (warning): Relations without an
       explicit operator (``Author``, ``Author.posts``) are not checked by
       semantic analysis. A target missing from the schema is reported here.

    3. **Ignored thresholds** (warning): A threshold on an exact operator
       (``->Category(0.8)``) has no effect.

    4. **Shadowed backrefs** (warning): A backref whose name is already
       declared on the related entity with a different target is not
       synthesized.

    Args:
        schema: The parsed schema to validate.

    Returns:
        A :class:`ValidationResult` containing any warnings and errors found.
    """
    warnings: list[ValidationWarning] = []
    errors: list[ValidationError] = []

    cycle_errors, self_warnings = _check_dependency_cycles(schema)
    errors.extend(cycle_errors)
    warnings.extend(self_warnings)
    warnings.extend(_check_dangling_implicit_relations(schema))
    warnings.extend(_check_ignored_thresholds(schema))
    warnings.extend(_check_shadowed_backrefs(schema))

    return ValidationResult(warnings=warnings, errors=errors)


# ################
# Implementation
# ################


def _check_dependency_cycles(schema: ParsedSchema) -> tuple[list[ValidationError], list[ValidationWarning]]:
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []
    for cycle in detect_cycles(build_dependency_graph(schema), ignore_optional=True):
        if len(cycle) == 2:
            warnings.append(ValidationWarning(message=f"Entity '{cycle[0]}' requires an entity of its own type."))
        else:
            errors.append(ValidationError(message=f"Required relation cycle detected: {' -> '.join(cycle)}."))
    return errors, warnings


def _check_dangling_implicit_relations(schema: ParsedSchema) -> list[ValidationWarning]:
    warnings: list[ValidationWarning] = []
    for entity in schema.entities.values():
        for parsed in entity.fields.values():
            if not parsed.is_relation or parsed.operator is not None:
                continue
            if parsed.related_type not in schema.entities:
                warnings.append(
                    ValidationWarning(
                        message=(
                            f"Field '{entity.name}.{parsed.name}' refers to '{parsed.related_type}', "
                            "which is not defined in the schema."
                        )
                    )
                )
    return warnings


def _check_ignored_thresholds(schema: ParsedSchema) -> list[ValidationWarning]:
    return [
        ValidationWarning(
            message=(
                f"Field '{entity.name}.{parsed.name}' sets a threshold on exact operator "
                f"'{parsed.operator.value}'; it is ignored."
            )
        )
        for entity in schema.entities.values()
        for parsed in entity.fields.values()
        if parsed.operator is not None and parsed.threshold is not None and parsed.match_mode is MatchMode.EXACT
    ]


def _check_shadowed_backrefs(schema: ParsedSchema) -> list[ValidationWarning]:
    warnings: list[ValidationWarning] = []
    for entity in schema.entities.values():
        for parsed in entity.fields.values():
            if not parsed.backref or not parsed.related_type:
                continue
            related = schema.entities.get(parsed.related_type)
            if related is None:
                continue
            existing = related.fields.get(parsed.backref)
            if existing is not None and existing.related_type != entity.name:
                warnings.append(
                    ValidationWarning(
                        message=(
                            f"Backref '{parsed.related_type}.{parsed.backref}' of '{entity.name}.{parsed.name}' "
                            "is shadowed by an explicit field."
                        )
                    )
                )
    return warnings
