# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Serialization and deserialization of parsed schema snapshots.

Snapshots are stored as compact JSON files so that a schema can be diffed
against an earlier version without re-reading its source. The format is
versioned so future model changes can be detected. Next to the schema, a
snapshot records the compile options it was built with; a snapshot written
without options reads back with an empty mapping.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from graphschema.model.entities import ParsedSchema

# ###############
# Public Interface
# ###############

ARTIFACT_FORMAT_VERSION = "1"
ARTIFACT_SUFFIX = ".schema.json"


def serialize(schema: ParsedSchema, *, options: Mapping[str, Any] | None = None) -> str:
    """Serialize a ParsedSchema, and the compile options it was built with, to a compact JSON string."""
    payload = {
        "v": ARTIFACT_FORMAT_VERSION,
        "options": dict(options or {}),
        "schema": schema.model_dump(mode="json"),
    }
    return json.dumps(payload, separators=(",", ":"))


def deserialize(data: str) -> ParsedSchema:
    """Deserialize a ParsedSchema from a JSON string.

    Args:
        data: JSON string produced by :func:`serialize`.

    Returns:
        The reconstructed :class:`ParsedSchema`.

    Raises:
        ValueError: If the data is not a snapshot, its format version is not
            recognised or its content does not describe a schema.
    """
    schema, _ = deserialize_with_options(data)
    return schema


def deserialize_with_options(data: str) -> tuple[ParsedSchema, dict[str, Any]]:
    """Like :func:`deserialize`, but also return the recorded compile options."""
    obj = json.loads(data)
    if not isinstance(obj, dict):
        raise ValueError("Snapshot must be a JSON object")
    version = obj.get("v")
    if version != ARTIFACT_FORMAT_VERSION:
        raise ValueError(f"Unsupported artifact format version: {version!r}")
    options = obj.get("options", {})
    if not isinstance(options, dict):
        raise ValueError("Malformed schema snapshot: 'options' must be an object")
    try:
        return ParsedSchema.model_validate(obj.get("schema", {})), options
    except ValidationError as exc:
        raise ValueError(f"Malformed schema snapshot: {exc}") from exc


def write_artifact(schema: ParsedSchema, path: Path, *, options: Mapping[str, Any] | None = None) -> None:
    """Write a schema snapshot to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize(schema, options=options), encoding="utf-8")


def read_artifact(path: Path) -> ParsedSchema:
    """Read and deserialize a schema snapshot from *path*."""
    return deserialize(path.read_text(encoding="utf-8"))


def read_artifact_with_options(path: Path) -> tuple[ParsedSchema, dict[str, Any]]:
    """Read a schema snapshot from *path* together with its recorded compile options."""
    return deserialize_with_options(path.read_text(encoding="utf-8"))
