# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project configuration for GraphSchema."""

from graphschema.workspace.config import (
    CONFIG_FILE_NAME,
    DEFAULT_BUILD_DIRECTORY,
    ProjectConfig,
    WorkspaceConfigError,
    load_config,
    parse_config,
    render_default_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_BUILD_DIRECTORY",
    "ProjectConfig",
    "WorkspaceConfigError",
    "load_config",
    "parse_config",
    "render_default_config",
]
