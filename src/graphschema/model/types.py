# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Field-level representations for the GraphSchema model.

A :class:`ParsedField` keeps the attributes every field shares (name, type
and modifiers) flat, while everything that only makes sense for one kind of
field lives in a tagged ``shape``. Relationship metadata cannot be attached to
a parametric primitive and vice versa.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class Direction(Enum):
    """Direction in which a relationship is resolved."""

    FORWARD = "forward"
    BACKWARD = "backward"


class MatchMode(Enum):
    """How a relationship target is matched."""

    EXACT = "exact"
    FUZZY = "fuzzy"


class RelationOperator(Enum):
    """The four relationship operators of the field grammar."""

    FORWARD_EXACT = "->"
    FORWARD_FUZZY = "~>"
    BACKWARD_EXACT = "<-"
    BACKWARD_FUZZY = "<~"

    @property
    def direction(self) -> Direction:
        return Direction.BACKWARD if self.value.startswith("<") else Direction.FORWARD

    @property
    def match_mode(self) -> MatchMode:
        return MatchMode.FUZZY if "~" in self.value else MatchMode.EXACT


class ScalarShape(BaseModel):
    """A primitive or free-text field."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"


class ParametricShape(BaseModel):
    """A primitive with size parameters: ``decimal(p, s)``, ``varchar(n)``, ``char(n)``, ``fixed(n)``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["parametric"] = "parametric"
    precision: int | None = None
    scale: int | None = None
    length: int | None = None


class GenericShape(BaseModel):
    """A generic type: ``map<K, V>``, ``list<T>``, ``struct<N>``, ``enum<N>`` or ``ref<T>``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["generic"] = "generic"
    key_type: str | None = None
    value_type: str | None = None
    element_type: str | None = None
    struct_name: str | None = None
    enum_name: str | None = None
    ref_target: str | None = None


class RelationShape(BaseModel):
    """A relationship to another entity.

    Attributes:
        related_type: Name of the target entity. For union targets this is the
            first candidate.
        backref: Name of the inverse field on the related entity, if any.
        operator: Explicit relationship operator. ``None`` for implicit
            relations (PascalCase types or ``Type.backref`` without operator).
        threshold: Minimum similarity score for fuzzy matching.
        union_types: Ordered candidate entity names (two or more).
        prompt: Free text preceding the operator, used as a search or
            generation hint.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["relation"] = "relation"
    related_type: str
    backref: str | None = None
    operator: RelationOperator | None = None
    threshold: float | None = None
    union_types: tuple[str, ...] | None = None
    prompt: str | None = None


# The part of a field that depends on what kind of field it is.
FieldShape = Annotated[
    ScalarShape | ParametricShape | GenericShape | RelationShape,
    _Field(discriminator="kind"),
]


class ParsedField(BaseModel):
    """One field of an entity as produced by the field grammar parser."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    is_array: bool = False
    is_optional: bool = False
    is_required: bool = False
    is_unique: bool = False
    is_indexed: bool = False
    shape: FieldShape = _Field(default_factory=ScalarShape)

    @property
    def is_relation(self) -> bool:
        return isinstance(self.shape, RelationShape)

    @property
    def related_type(self) -> str | None:
        return self.shape.related_type if isinstance(self.shape, RelationShape) else None

    @property
    def backref(self) -> str | None:
        return self.shape.backref if isinstance(self.shape, RelationShape) else None

    @property
    def operator(self) -> RelationOperator | None:
        return self.shape.operator if isinstance(self.shape, RelationShape) else None

    @property
    def direction(self) -> Direction:
        operator = self.operator
        return operator.direction if operator is not None else Direction.FORWARD

    @property
    def match_mode(self) -> MatchMode:
        operator = self.operator
        return operator.match_mode if operator is not None else MatchMode.EXACT

    @property
    def threshold(self) -> float | None:
        return self.shape.threshold if isinstance(self.shape, RelationShape) else None

    @property
    def union_types(self) -> tuple[str, ...] | None:
        return self.shape.union_types if isinstance(self.shape, RelationShape) else None

    @property
    def prompt(self) -> str | None:
        return self.shape.prompt if isinstance(self.shape, RelationShape) else None

    @property
    def precision(self) -> int | None:
        return self.shape.precision if isinstance(self.shape, ParametricShape) else None

    @property
    def scale(self) -> int | None:
        return self.shape.scale if isinstance(self.shape, ParametricShape) else None

    @property
    def length(self) -> int | None:
        return self.shape.length if isinstance(self.shape, ParametricShape) else None

    @property
    def key_type(self) -> str | None:
        return self.shape.key_type if isinstance(self.shape, GenericShape) else None

    @property
    def value_type(self) -> str | None:
        return self.shape.value_type if isinstance(self.shape, GenericShape) else None

    @property
    def element_type(self) -> str | None:
        return self.shape.element_type if isinstance(self.shape, GenericShape) else None

    @property
    def struct_name(self) -> str | None:
        return self.shape.struct_name if isinstance(self.shape, GenericShape) else None

    @property
    def enum_name(self) -> str | None:
        return self.shape.enum_name if isinstance(self.shape, GenericShape) else None

    @property
    def ref_target(self) -> str | None:
        return self.shape.ref_target if isinstance(self.shape, GenericShape) else None
