# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the GraphSchema semantic analysis module."""

from typing import Any

from graphschema.compiler.parser import parse_schema
from graphschema.compiler.semantic_analysis import SemanticError, analyze

# ###############
# Test Helpers
# ###############


def _analyze(raw: dict[str, Any]) -> list[SemanticError]:
    """Parse a raw schema without validation and run semantic analysis."""
    return analyze(parse_schema(raw, validate=False))


def _missing_types(errors: list[SemanticError]) -> list[str]:
    return [e.missing_type for e in errors]


def _assert_clean(raw: dict[str, Any]) -> None:
    """Assert that a schema produces no semantic errors."""
    errors = _analyze(raw)
    assert errors == [], f"Expected no errors but got: {[e.message for e in errors]}"


# ###############
# Clean Schemas
# ###############


class TestCleanSchema:
    def test_empty_schema_has_no_errors(self) -> None:
        _assert_clean({})

    def test_primitive_fields_only(self) -> None:
        _assert_clean({"Post": {"title": "string", "views": "int?"}})

    def test_all_operators_resolved(self) -> None:
        _assert_clean(
            {
                "Post": {"author": "->Author", "topic": "~>Topic", "editor": "<-Author", "tags": "<~Tag[]"},
                "Author": {"name": "string"},
                "Topic": {"name": "string"},
                "Tag": {"name": "string"},
            }
        )

    def test_implicit_relations_are_not_checked(self) -> None:
        _assert_clean({"Post": {"author": "Author", "owner": "Owner.posts"}})

    def test_self_reference(self) -> None:
        _assert_clean({"Category": {"parent": "->Category?", "children": "<-Category[]"}})

    def test_union_of_only_foreign_types(self) -> None:
        _assert_clean({"Post": {"owner": "->Person|Organization"}})

    def test_union_of_known_types(self) -> None:
        _assert_clean({"Post": {"owner": "->Person|Team"}, "Person": {}, "Team": {}})


# ###############
# Errors
# ###############


class TestMissingTypes:
    def test_missing_target(self) -> None:
        errors = _analyze({"A": {"x": "->B"}})
        assert len(errors) == 1
        assert errors[0].message == "Invalid schema: A.x references non-existent type 'B'"
        assert errors[0].entity == "A"
        assert errors[0].field == "x"
        assert errors[0].missing_type == "B"

    def test_missing_fuzzy_target(self) -> None:
        assert _missing_types(_analyze({"A": {"x": "Pick one ~>Topic(0.8)"}})) == ["Topic"]

    def test_missing_target_with_backref_and_modifiers(self) -> None:
        assert _missing_types(_analyze({"A": {"x": "->B.as[]?"}})) == ["B"]

    def test_partly_known_union_reports_each_missing_member(self) -> None:
        errors = _analyze({"A": {"x": "->Person|Team|Bot"}, "Person": {}})
        assert _missing_types(errors) == ["Team", "Bot"]

    def test_union_member_naming_own_entity_is_valid(self) -> None:
        errors = _analyze({"A": {"x": "->Person|A|Team"}, "Person": {}})
        assert _missing_types(errors) == ["Team"]

    def test_errors_in_declaration_order(self) -> None:
        errors = _analyze({"A": {"x": "->X", "y": "->Y"}, "B": {"z": "<-Z"}})
        assert [(e.entity, e.field) for e in errors] == [("A", "x"), ("A", "y"), ("B", "z")]
