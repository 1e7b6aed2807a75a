# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the GraphSchema snapshot serialization."""

import json
from pathlib import Path

import pytest

from graphschema.compiler.artifact import (
    ARTIFACT_FORMAT_VERSION,
    deserialize,
    deserialize_with_options,
    read_artifact,
    read_artifact_with_options,
    serialize,
    write_artifact,
)
from graphschema.compiler.parser import parse_schema
from graphschema.model.entities import ParsedSchema
from graphschema.model.types import GenericShape, ParametricShape, RelationOperator

# ###############
# Helpers
# ###############


def _blog() -> ParsedSchema:
    return parse_schema(
        {
            "$context": "https://schema.org",
            "Post": {
                "$type": "https://schema.org/Article",
                "$fuzzyThreshold": 0.85,
                "title": "string!",
                "price": "decimal(10, 2)?",
                "meta": "map<string, json>",
                "author": "->Author.posts",
                "topic": "What is it about? ~>Topic|Category(0.7)",
            },
            "Author": {"name": "string"},
            "Topic": {"name": "string"},
            "Category": {"name": "string"},
            "Thing": "https://schema.org/Thing",
        }
    )


# ###############
# Serialization
# ###############


class TestSerialize:
    def test_output_is_compact_json(self) -> None:
        data = serialize(ParsedSchema())
        assert " " not in data
        assert json.loads(data)["v"] == ARTIFACT_FORMAT_VERSION

    def test_empty_schema(self) -> None:
        assert deserialize(serialize(ParsedSchema())) == ParsedSchema()

    def test_full_schema_survives(self) -> None:
        schema = _blog()
        restored = deserialize(serialize(schema))
        assert restored == schema

    def test_shapes_are_restored_with_their_kind(self) -> None:
        restored = deserialize(serialize(_blog()))
        fields = restored.entities["Post"].fields
        assert isinstance(fields["price"].shape, ParametricShape)
        assert isinstance(fields["meta"].shape, GenericShape)
        assert fields["author"].operator is RelationOperator.FORWARD_EXACT
        assert fields["topic"].union_types == ("Topic", "Category")
        assert fields["topic"].threshold == 0.7

    def test_entity_metadata_is_restored(self) -> None:
        restored = deserialize(serialize(_blog()))
        assert restored.entities["Post"].fuzzy_threshold == 0.85
        assert restored.type_uris["Thing"] == "https://schema.org/Thing"


class TestOptions:
    def test_options_are_recorded(self) -> None:
        schema, options = deserialize_with_options(serialize(_blog(), options={"system_entities": True}))
        assert schema == _blog()
        assert options == {"system_entities": True}

    def test_missing_options_read_as_empty(self) -> None:
        data = json.dumps({"v": ARTIFACT_FORMAT_VERSION, "schema": {}})
        assert deserialize_with_options(data) == (ParsedSchema(), {})

    def test_non_object_options_raise(self) -> None:
        data = json.dumps({"v": ARTIFACT_FORMAT_VERSION, "options": [1], "schema": {}})
        with pytest.raises(ValueError, match="options"):
            deserialize_with_options(data)


class TestDeserializeErrors:
    def test_non_object_raises(self) -> None:
        with pytest.raises(ValueError, match="JSON object"):
            deserialize("[1, 2]")

    def test_unknown_version_raises(self) -> None:
        with pytest.raises(ValueError, match="format version"):
            deserialize(json.dumps({"v": "0", "schema": {}}))

    def test_malformed_content_raises(self) -> None:
        payload = {"v": ARTIFACT_FORMAT_VERSION, "schema": {"entities": {"A": {"fields": "nope"}}}}
        with pytest.raises(ValueError, match="Malformed"):
            deserialize(json.dumps(payload))


# ###############
# Files
# ###############


class TestArtifactFiles:
    def test_write_creates_parent_directories(self, tmp_path: Path) -> None:
        path = tmp_path / "a" / "b" / "blog.schema.json"
        write_artifact(_blog(), path)
        assert path.exists()

    def test_read_back(self, tmp_path: Path) -> None:
        path = tmp_path / "blog.schema.json"
        schema = _blog()
        write_artifact(schema, path)
        assert read_artifact(path) == schema

    def test_read_back_with_options(self, tmp_path: Path) -> None:
        path = tmp_path / "blog.schema.json"
        write_artifact(_blog(), path, options={"system_entities": False})
        assert read_artifact_with_options(path) == (_blog(), {"system_entities": False})
