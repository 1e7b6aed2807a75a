# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Fallback search across the candidate types of a union relationship.

A field such as ``"<~Person|Organization|Team"`` may match an entity of any
of its candidate types. Two strategies are supported:

* ``ordered`` searches the candidates one after another in declaration order
  and stops at the first type that returns a match at or above its
  threshold.
* ``parallel`` searches all candidates concurrently and keeps the best
  scoring match (or all matches, best first).

The search itself is injected as a *searcher*, an async callable
``searcher(type_name, query, *, threshold, limit) -> list[Match]``. A match
is a dict with at least ``$id`` and ``$score``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, TypeAlias

from loguru import logger

if TYPE_CHECKING:
    from graphschema.resolution.provider import SemanticSearchProvider

# ###############
# Public Interface
# ###############

Match: TypeAlias = dict[str, Any]
UnionSearcher: TypeAlias = Callable[..., Awaitable[list[Match]]]

DEFAULT_PROVIDER_SEARCH_LIMIT = 10


@dataclass(frozen=True)
class SearchError:
    """A searcher failure recorded instead of raised.

    Attributes:
        type: The candidate type whose search failed.
        message: The error message.
        error: The original exception.
    """

    type: str
    message: str
    error: BaseException | None = None


@dataclass
class FallbackSearchOptions:
    """Options for :func:`search_union_types`.

    Attributes:
        searcher: Async callable performing the search for one type.
        mode: ``"ordered"`` (stop at first match) or ``"parallel"`` (best of all).
        threshold: Global minimum score. Unset means every match qualifies.
        thresholds: Per-type minimum scores overriding *threshold*.
        return_all: In parallel mode, return every qualifying match instead
            of only the best one.
        include_below_threshold: Collect matches below their threshold in
            :attr:`UnionSearchResult.below_threshold_matches`.
        on_error: ``"throw"`` re-raises searcher errors, ``"continue"``
            records them. Defaults to ``"throw"`` in ordered mode and
            ``"continue"`` in parallel mode.
        limit: Maximum number of matches requested per type.
    """

    searcher: UnionSearcher
    mode: Literal["ordered", "parallel"] = "ordered"
    threshold: float | None = None
    thresholds: dict[str, float] = field(default_factory=dict)
    return_all: bool = False
    include_below_threshold: bool = False
    on_error: Literal["throw", "continue"] | None = None
    limit: int | None = None


@dataclass
class UnionSearchResult:
    """Outcome of one union search.

    Attributes:
        matches: Qualifying matches, best first in parallel mode.
        searched_types: Types that were searched.
        search_order: Order in which the types were searched.
        fallback_triggered: Whether the search went past the first candidate
            (ordered) or the best match is not of the first candidate (parallel).
        all_types_exhausted: No candidate produced a qualifying match.
        matched_type: Type of the returned match, if any.
        confidence: Score of the best returned match, if any.
        below_threshold_matches: Rejected matches when requested. Ordered
            search leaves it ``None`` otherwise, parallel search sets an empty
            list.
        errors: Searcher errors recorded in ``"continue"`` mode.
    """

    matches: list[Match] = field(default_factory=list)
    searched_types: list[str] = field(default_factory=list)
    search_order: list[str] = field(default_factory=list)
    fallback_triggered: bool = False
    all_types_exhausted: bool = False
    matched_type: str | None = None
    confidence: float | None = None
    below_threshold_matches: list[Match] | None = None
    errors: list[SearchError] = field(default_factory=list)


async def search_union_types(types: list[str], query: str, options: FallbackSearchOptions) -> UnionSearchResult:
    """Search the candidate *types* for *query* using the strategy in *options*.

    Args:
        types: Candidate types in priority order.
        query: The search text.
        options: Search strategy, searcher and thresholds.

    Returns:
        The search result. An empty *types* list yields an exhausted result.

    Raises:
        Exception: Whatever the searcher raised, when errors are not recorded.
    """
    result = UnionSearchResult()
    if options.include_below_threshold:
        result.below_threshold_matches = []

    if not types:
        result.all_types_exhausted = True
        return result

    if options.mode == "parallel":
        return await search_parallel(types, query, options, result)
    return await search_ordered(types, query, options, result)


async def search_ordered(
    types: list[str],
    query: str,
    options: FallbackSearchOptions,
    result: UnionSearchResult | None = None,
) -> UnionSearchResult:
    """Search *types* one at a time, stopping at the first with a qualifying match."""
    result = result if result is not None else UnionSearchResult()
    on_error = options.on_error or "throw"

    for index, type_name in enumerate(types):
        threshold = _threshold_for(type_name, options)
        result.searched_types.append(type_name)
        result.search_order.append(type_name)
        if index > 0:
            result.fallback_triggered = True

        logger.debug(f"Searching {type_name} for {query!r} (threshold {threshold})")
        try:
            matches = await options.searcher(type_name, query, threshold=threshold, limit=options.limit)
        except Exception as exc:
            if on_error == "throw":
                raise
            _record_error(result, type_name, exc)
            continue

        above, below = _partition(_tag(matches, type_name), threshold)
        if options.include_below_threshold and result.below_threshold_matches is not None:
            result.below_threshold_matches.extend(below)
        if above:
            result.matches = above
            result.matched_type = type_name
            result.confidence = max(m["$score"] for m in above)
            return result

    result.all_types_exhausted = True
    return result


async def search_parallel(
    types: list[str],
    query: str,
    options: FallbackSearchOptions,
    result: UnionSearchResult | None = None,
) -> UnionSearchResult:
    """Search all *types* concurrently and keep the best qualifying match(es).

    Every search is started before any is awaited. In ``"throw"`` mode the
    first failure (in candidate order) is raised once all searches finished.
    """
    result = result if result is not None else UnionSearchResult()
    on_error = options.on_error or "continue"
    result.searched_types = list(types)
    result.search_order = list(types)

    async def _search_one(type_name: str) -> tuple[str, list[Match], Exception | None]:
        threshold = _threshold_for(type_name, options)
        logger.debug(f"Searching {type_name} for {query!r} (threshold {threshold})")
        try:
            matches = await options.searcher(type_name, query, threshold=threshold, limit=options.limit)
        except Exception as exc:
            return type_name, [], exc
        return type_name, _tag(matches, type_name), None

    outcomes = await asyncio.gather(*(_search_one(t) for t in types))

    qualifying: list[Match] = []
    rejected: list[Match] = []
    for type_name, matches, error in outcomes:
        if error is not None:
            if on_error == "throw":
                raise error
            _record_error(result, type_name, error)
            continue
        above, below = _partition(matches, _threshold_for(type_name, options))
        qualifying.extend(above)
        rejected.extend(below)

    result.below_threshold_matches = rejected if options.include_below_threshold else []

    if not qualifying:
        result.all_types_exhausted = True
        return result

    qualifying.sort(key=lambda m: m["$score"], reverse=True)
    result.matches = qualifying if options.return_all else qualifying[:1]
    result.matched_type = result.matches[0]["$type"]
    result.confidence = result.matches[0]["$score"]
    result.fallback_triggered = result.matched_type != types[0]
    return result


def create_provider_searcher(provider: SemanticSearchProvider) -> UnionSearcher:
    """Adapt a semantic search provider to the searcher signature.

    The threshold becomes the provider's ``min_score``, the limit defaults to
    10 and every match is tagged with the searched type in ``$type``.
    """

    async def searcher(type_name: str, query: str, *, threshold: float | None = None, limit: int | None = None):
        matches = await provider.semantic_search(
            type_name,
            query,
            min_score=threshold,
            limit=limit if limit is not None else DEFAULT_PROVIDER_SEARCH_LIMIT,
        )
        return [{**match, "$type": type_name} for match in matches]

    return searcher


# ################
# Implementation
# ################


def _threshold_for(type_name: str, options: FallbackSearchOptions) -> float:
    """Per-type threshold, else the global threshold, else 0 (accept everything)."""
    if type_name in options.thresholds:
        return options.thresholds[type_name]
    if options.threshold is not None:
        return options.threshold
    return 0.0


def _tag(matches: list[Match], type_name: str) -> list[Match]:
    """Return *matches* with ``$type`` set where the searcher left it out."""
    return [m if "$type" in m else {**m, "$type": type_name} for m in matches]


def _partition(matches: list[Match], threshold: float) -> tuple[list[Match], list[Match]]:
    above = [m for m in matches if m.get("$score", 0) >= threshold]
    below = [m for m in matches if m.get("$score", 0) < threshold]
    return above, below


def _record_error(result: UnionSearchResult, type_name: str, error: Exception) -> None:
    logger.warning(f"Search for {type_name} failed, continuing: {error}")
    result.errors.append(SearchError(type=type_name, message=str(error), error=error))
