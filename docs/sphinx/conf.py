# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for GraphSchema documentation."""

project = "GraphSchema"
author = "GraphSchema Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]

html_theme = "alabaster"
