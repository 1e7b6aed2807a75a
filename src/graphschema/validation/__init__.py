# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema checks and the generation dependency graph."""

from graphschema.validation.checks import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    validate,
)
from graphschema.validation.dependency_graph import (
    CircularDependencyError,
    DependencyEdge,
    DependencyGraph,
    DependencyNode,
    build_dependency_graph,
    detect_cycles,
    get_all_dependencies,
    get_parallel_groups,
    has_cycles,
    topological_sort,
    visualize_graph,
)

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "validate",
    "CircularDependencyError",
    "DependencyEdge",
    "DependencyGraph",
    "DependencyNode",
    "build_dependency_graph",
    "detect_cycles",
    "get_all_dependencies",
    "get_parallel_groups",
    "has_cycles",
    "topological_sort",
    "visualize_graph",
]
