# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the GraphSchema project configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".graphschema.yaml"
DEFAULT_BUILD_DIRECTORY = ".graphschema-build"


class WorkspaceConfigError(Exception):
    """Raised when a project configuration file is invalid or cannot be loaded."""


@dataclass
class ProjectConfig:
    """The parsed configuration of a GraphSchema project.

    Attributes:
        schema_files: Schema file paths, relative to the project root.
        build_directory: Relative path (from the project root) for snapshots.
        system_entities: Inject the ``Noun``, ``Verb`` and ``Edge`` entities
            into every compiled schema.
    """

    schema_files: list[str] = field(default_factory=list)
    build_directory: str = DEFAULT_BUILD_DIRECTORY
    system_entities: bool = False


def load_config(path: Path) -> ProjectConfig:
    """Load and parse a GraphSchema project configuration file.

    Args:
        path: Path to the ``.graphschema.yaml`` file.

    Returns:
        A ProjectConfig instance populated from the file.

    Raises:
        WorkspaceConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Project config file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read project config file: {exc}") from exc

    return parse_config(text, source_label=str(path))


def parse_config(text: str, source_label: str = "<string>") -> ProjectConfig:
    """Parse project config YAML text into a ProjectConfig.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        WorkspaceConfigError: If the YAML is invalid or a field has the wrong type.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{source_label}: project config must be a YAML mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise WorkspaceConfigError(f"{source_label}: unknown field(s): {', '.join(map(str, unknown))}")

    schema_files = _require_string_list(data, "schema-files", source_label)
    build_directory = _optional_string(data, "build-directory", DEFAULT_BUILD_DIRECTORY, source_label)

    system_entities = data.get("system-entities", False)
    if not isinstance(system_entities, bool):
        raise WorkspaceConfigError(f"{source_label}: 'system-entities' must be a boolean")

    return ProjectConfig(
        schema_files=schema_files,
        build_directory=build_directory,
        system_entities=system_entities,
    )


def render_default_config() -> str:
    """Return the content written by ``graphschema init``."""
    return (
        "# GraphSchema project configuration\n"
        "schema-files:\n"
        "  - schema.yaml\n"
        f"build-directory: {DEFAULT_BUILD_DIRECTORY}\n"
        "system-entities: false\n"
    )


# ################
# Implementation
# ################

_KNOWN_KEYS = {"schema-files", "build-directory", "system-entities"}


def _require_string_list(mapping: dict[str, object], key: str, source_label: str) -> list[str]:
    """Extract a required list of strings, raising WorkspaceConfigError if missing or malformed."""
    if key not in mapping:
        raise WorkspaceConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a list of strings")
    return list(value)


def _optional_string(mapping: dict[str, object], key: str, default: str, source_label: str) -> str:
    value = mapping.get(key, default)
    if not isinstance(value, str):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a string")
    return value
