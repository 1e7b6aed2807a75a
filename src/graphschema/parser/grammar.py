# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parser for the field definition grammar.

A field definition is a short string such as::

    "string"                      primitive
    "decimal(10, 2)!"             parametric primitive, required and unique
    "map<string, int>?"           optional generic type
    "Author.posts"                implicit relation with backref
    "What is the topic? ~>Topic(0.8)[]"
                                  fuzzy forward relation with prompt,
                                  threshold and array modifier
    "<~Person|Organization"       backward fuzzy relation to a union

or a one-element list wrapping such a string, which marks the field as an
array. Modifiers (``?`` optional, ``[]`` array, ``!`` required and unique,
``#`` indexed) may be combined in any order at the end of the type. They are
resolved here, in :func:`parse_field`, for operator targets and plain types
alike; :func:`parse_operator` reports the target with its modifiers intact.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

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

# ###############
# Public Interface
# ###############

PRIMITIVE_TYPES: frozenset[str] = frozenset(
    {
        "string",
        "text",
        "markdown",
        "url",
        "email",
        "number",
        "int",
        "long",
        "bigint",
        "float",
        "double",
        "decimal",
        "boolean",
        "date",
        "datetime",
        "timestamp",
        "timestamptz",
        "time",
        "uuid",
        "binary",
        "json",
        "object",
        "array",
        "varchar",
        "char",
        "fixed",
        "map",
        "struct",
        "enum",
        "ref",
        "list",
    }
)

TYPE_ALIASES: dict[str, str] = {"bool": "boolean"}


@dataclass(frozen=True)
class OperatorSemantics:
    """What a relationship operator means."""

    direction: Direction
    match_mode: MatchMode
    description: str


OPERATOR_SEMANTICS: dict[RelationOperator, OperatorSemantics] = {
    RelationOperator.FORWARD_EXACT: OperatorSemantics(
        Direction.FORWARD, MatchMode.EXACT, "Create or link the target entity"
    ),
    RelationOperator.FORWARD_FUZZY: OperatorSemantics(
        Direction.FORWARD, MatchMode.FUZZY, "Find a similar entity, generate one if none matches"
    ),
    RelationOperator.BACKWARD_EXACT: OperatorSemantics(
        Direction.BACKWARD, MatchMode.EXACT, "Link from an existing entity that points here"
    ),
    RelationOperator.BACKWARD_FUZZY: OperatorSemantics(
        Direction.BACKWARD, MatchMode.FUZZY, "Find a similar existing entity, never generate"
    ),
}


@dataclass(frozen=True)
class OperatorParseResult:
    """Result of scanning a definition for a relationship operator.

    Attributes:
        operator: The operator found.
        direction: Backward iff the operator starts with ``<``.
        match_mode: Fuzzy iff the operator contains ``~``.
        target_type: Text after the operator with any valid threshold
            removed. Modifiers and backref are still present.
        union_types: Candidate types when the target is a union of two or
            more names, else ``None``.
        threshold: Threshold in [0, 1] taken from ``Type(0.8)``.
        prompt: Trimmed text before the operator, ``None`` when empty.
    """

    operator: RelationOperator
    direction: Direction
    match_mode: MatchMode
    target_type: str
    union_types: tuple[str, ...] | None = None
    threshold: float | None = None
    prompt: str | None = None


def parse_operator(definition: str) -> OperatorParseResult | None:
    """Find a relationship operator in *definition* and split the definition around it.

    Operators are looked up in the fixed order ``~>``, ``<~``, ``->``, ``<-``;
    the first one that occurs anywhere in the text wins.

    Returns:
        The parse result, or ``None`` if the definition contains no operator.
    """
    if not definition or not definition.strip():
        return None

    for operator in _OPERATOR_PRIORITY:
        index = definition.find(operator.value)
        if index != -1:
            break
    else:
        return None

    prompt = definition[:index].strip() or None
    target = definition[index + len(operator.value) :].strip()

    threshold: float | None = None
    match = _THRESHOLD_RE.match(target)
    if match is not None:
        value = _parse_unit_float(match.group(2))
        if value is not None:
            threshold = value
            target = match.group(1).strip() + match.group(3)

    base, _ = _strip_modifiers(target)
    base, _ = _split_backref(base)
    parts = [p.strip() for p in base.split("|")]
    parts = [p for p in parts if p]
    union_types = tuple(parts) if len(parts) >= 2 else None

    return OperatorParseResult(
        operator=operator,
        direction=operator.direction,
        match_mode=operator.match_mode,
        target_type=target,
        union_types=union_types,
        threshold=threshold,
        prompt=prompt,
    )


def parse_field(name: str, definition: str | list[str]) -> ParsedField:
    """Parse one field definition into a :class:`ParsedField`.

    Args:
        name: The field name.
        definition: A definition string, or a one-element list wrapping one
            (which forces ``is_array``).

    Raises:
        TypeError: If *definition* is neither a string nor a one-element list
            of strings.
    """
    if isinstance(definition, list):
        if len(definition) != 1 or not isinstance(definition[0], str):
            raise TypeError(f"Field '{name}': array definitions must hold exactly one string")
        return parse_field(name, definition[0]).model_copy(update={"is_array": True})
    if not isinstance(definition, str):
        raise TypeError(f"Field '{name}': definition must be a string, got {type(definition).__name__}")

    operator_result = parse_operator(definition)
    if operator_result is not None:
        return _parse_relation_target(name, operator_result)
    return _parse_plain(name, definition.strip())


def parse_union_types(spec: str) -> list[str]:
    """Split a union spec like ``"A(0.8)|B|C"`` into its type names, in order."""
    types = []
    for part in spec.split("|"):
        cleaned = _TRAILING_THRESHOLD_RE.sub("", part.strip()).strip()
        if cleaned:
            types.append(cleaned)
    return types


def parse_union_thresholds(spec: str) -> dict[str, float]:
    """Return the per-type thresholds annotated in a union spec like ``"A(0.8)|B(0.6)"``."""
    thresholds: dict[str, float] = {}
    for part in spec.split("|"):
        match = _UNION_THRESHOLD_RE.match(part.strip())
        if match is None:
            continue
        value = _parse_unit_float(match.group(2))
        if value is not None:
            thresholds[match.group(1)] = value
    return thresholds


def get_operator(definition: str) -> RelationOperator | None:
    """Return the relationship operator used in *definition*, if any."""
    result = parse_operator(definition)
    return result.operator if result is not None else None


def has_operator(definition: str) -> bool:
    return get_operator(definition) is not None


def is_forward_operator(operator: RelationOperator | str) -> bool:
    return RelationOperator(operator).direction is Direction.FORWARD


def is_backward_operator(operator: RelationOperator | str) -> bool:
    return RelationOperator(operator).direction is Direction.BACKWARD


def is_fuzzy_operator(operator: RelationOperator | str) -> bool:
    return RelationOperator(operator).match_mode is MatchMode.FUZZY


def is_exact_operator(operator: RelationOperator | str) -> bool:
    return RelationOperator(operator).match_mode is MatchMode.EXACT


# ################
# Implementation
# ################

_OPERATOR_PRIORITY = (
    RelationOperator.FORWARD_FUZZY,
    RelationOperator.BACKWARD_FUZZY,
    RelationOperator.FORWARD_EXACT,
    RelationOperator.BACKWARD_EXACT,
)

_THRESHOLD_RE = re.compile(r"^([^(]+)\(([0-9.]+)\)(.*)$")
_TRAILING_THRESHOLD_RE = re.compile(r"\(\s*[0-9.]+\s*\)$")
_UNION_THRESHOLD_RE = re.compile(r"^([A-Za-z][A-Za-z0-9_]*)\s*\(([0-9.]+)\)$")
_PARAMETRIC_RE = re.compile(r"^(decimal|varchar|char|fixed)\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\)$")
_GENERIC_RE = re.compile(r"^(map|struct|enum|ref|list)<(.+)>$")
_BACKREF_RE = re.compile(r"^([^.]+)\.([A-Za-z_][A-Za-z0-9_]*)$")
_NUMBER_PREFIX_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


@dataclass
class _Modifiers:
    is_array: bool = False
    is_optional: bool = False
    is_required: bool = False
    is_unique: bool = False
    is_indexed: bool = False


def _parse_unit_float(text: str) -> float | None:
    """Parse the longest numeric prefix of *text* (``"0.9.1"`` reads as 0.9) as a float in [0, 1], or return None."""
    match = _NUMBER_PREFIX_RE.match(text)
    if match is None:
        return None
    value = float(match.group(0))
    if 0.0 <= value <= 1.0:
        return value
    return None


def _strip_modifiers(text: str) -> tuple[str, _Modifiers]:
    """Remove trailing ``?``, ``[]``, ``!`` and ``#`` modifiers in any order."""
    modifiers = _Modifiers()
    while True:
        if text.endswith("?"):
            modifiers.is_optional = True
            text = text[:-1]
        elif text.endswith("[]"):
            modifiers.is_array = True
            text = text[:-2]
        elif text.endswith("!"):
            modifiers.is_required = True
            modifiers.is_unique = True
            text = text[:-1]
        elif text.endswith("#"):
            modifiers.is_indexed = True
            text = text[:-1]
        else:
            return text.strip(), modifiers


def _split_backref(text: str) -> tuple[str, str | None]:
    """Split ``Type.backref`` into its parts. URLs never carry a backref."""
    if text.startswith("http"):
        return text, None
    match = _BACKREF_RE.match(text)
    if match is None:
        return text, None
    return match.group(1), match.group(2)


def _field(name: str, type_name: str, modifiers: _Modifiers, shape: FieldShape | None = None) -> ParsedField:
    return ParsedField(
        name=name,
        type=type_name,
        is_array=modifiers.is_array,
        is_optional=modifiers.is_optional,
        is_required=modifiers.is_required,
        is_unique=modifiers.is_unique,
        is_indexed=modifiers.is_indexed,
        shape=shape if shape is not None else ScalarShape(),
    )


def _parse_relation_target(name: str, result: OperatorParseResult) -> ParsedField:
    base, modifiers = _strip_modifiers(result.target_type)
    type_part, backref = _split_backref(base)
    related_type = result.union_types[0] if result.union_types else TYPE_ALIASES.get(type_part, type_part)
    shape = RelationShape(
        related_type=related_type,
        backref=backref,
        operator=result.operator,
        threshold=result.threshold,
        union_types=result.union_types,
        prompt=result.prompt,
    )
    return _field(name, related_type, modifiers, shape)


def _parse_plain(name: str, text: str) -> ParsedField:
    base, modifiers = _strip_modifiers(text)

    parametric = _PARAMETRIC_RE.match(base)
    if parametric is not None:
        return _field(name, parametric.group(1), modifiers, _parametric_shape(parametric))

    generic = _GENERIC_RE.match(base)
    if generic is not None:
        shape = _generic_shape(generic.group(1), generic.group(2).strip())
        if shape is not None:
            return _field(name, generic.group(1), modifiers, shape)

    # Free text (a generation prompt) keeps its punctuation.
    if " " in text:
        return _field(name, text, _Modifiers())

    base = TYPE_ALIASES.get(base, base)
    type_part, backref = _split_backref(base)
    if backref is not None:
        return _field(name, type_part, modifiers, RelationShape(related_type=type_part, backref=backref))

    if base[:1].isupper() and base not in PRIMITIVE_TYPES and not base.startswith("http"):
        return _field(name, base, modifiers, RelationShape(related_type=base))

    return _field(name, base, modifiers)


def _parametric_shape(match: re.Match[str]) -> ParametricShape:
    base, first, second = match.group(1), int(match.group(2)), match.group(3)
    if base == "decimal":
        return ParametricShape(precision=first, scale=int(second) if second is not None else None)
    return ParametricShape(length=first)


def _generic_shape(base: str, inner: str) -> GenericShape | None:
    if base == "map":
        split = _split_top_level_comma(inner)
        if split is None:
            return None
        return GenericShape(key_type=split[0], value_type=split[1])
    if base == "list":
        return GenericShape(element_type=inner)
    if base == "struct":
        return GenericShape(struct_name=inner)
    if base == "enum":
        return GenericShape(enum_name=inner)
    return GenericShape(ref_target=inner)


def _split_top_level_comma(text: str) -> tuple[str, str] | None:
    """Split ``K, V`` at the first comma not nested inside ``<>`` or ``()``."""
    depth = 0
    for index, char in enumerate(text):
        if char in "<(":
            depth += 1
        elif char in ">)":
            depth -= 1
        elif char == "," and depth == 0:
            key, value = text[:index].strip(), text[index + 1 :].strip()
            if key and value:
                return key, value
            return None
    return None
