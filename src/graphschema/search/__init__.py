# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Union fallback search across candidate relationship types."""

from graphschema.search.union_fallback import (
    DEFAULT_PROVIDER_SEARCH_LIMIT,
    FallbackSearchOptions,
    Match,
    SearchError,
    UnionSearcher,
    UnionSearchResult,
    create_provider_searcher,
    search_ordered,
    search_parallel,
    search_union_types,
)

__all__ = [
    "DEFAULT_PROVIDER_SEARCH_LIMIT",
    "Match",
    "UnionSearcher",
    "SearchError",
    "FallbackSearchOptions",
    "UnionSearchResult",
    "search_union_types",
    "search_ordered",
    "search_parallel",
    "create_provider_searcher",
]
