# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Fuzzy relationship resolution against a storage provider."""

from graphschema.resolution.fuzzy import (
    PENDING_PREFIX,
    ForwardResolution,
    PendingRelation,
    resolve_backward_fuzzy,
    resolve_forward_fuzzy,
    resolve_nested_pending,
)
from graphschema.resolution.provider import (
    EntityProvider,
    GenerateEntityFn,
    GenerationContext,
    ResolveNestedFn,
    SemanticSearchProvider,
    has_semantic_search,
)

__all__ = [
    "EntityProvider",
    "SemanticSearchProvider",
    "GenerationContext",
    "GenerateEntityFn",
    "ResolveNestedFn",
    "has_semantic_search",
    "PENDING_PREFIX",
    "PendingRelation",
    "ForwardResolution",
    "resolve_backward_fuzzy",
    "resolve_forward_fuzzy",
    "resolve_nested_pending",
]
