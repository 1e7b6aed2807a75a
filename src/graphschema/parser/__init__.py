# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Field definition grammar: relationship operators, modifiers and type parameters."""

from graphschema.parser.grammar import (
    OPERATOR_SEMANTICS,
    PRIMITIVE_TYPES,
    TYPE_ALIASES,
    OperatorParseResult,
    OperatorSemantics,
    get_operator,
    has_operator,
    is_backward_operator,
    is_exact_operator,
    is_forward_operator,
    is_fuzzy_operator,
    parse_field,
    parse_operator,
    parse_union_thresholds,
    parse_union_types,
)

__all__ = [
    "PRIMITIVE_TYPES",
    "TYPE_ALIASES",
    "OPERATOR_SEMANTICS",
    "OperatorSemantics",
    "OperatorParseResult",
    "parse_operator",
    "parse_field",
    "parse_union_types",
    "parse_union_thresholds",
    "get_operator",
    "has_operator",
    "is_forward_operator",
    "is_backward_operator",
    "is_fuzzy_operator",
    "is_exact_operator",
]
