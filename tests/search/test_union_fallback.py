# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for ordered and parallel search across union candidate types."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest

from graphschema.search.union_fallback import (
    FallbackSearchOptions,
    create_provider_searcher,
    search_union_types,
)

# ###############
# Helpers
# ###############


def _fixed_searcher(results: dict[str, list[dict[str, Any]]], calls: list[str] | None = None):
    """Return a searcher answering from *results* and recording the searched types."""

    async def searcher(type_name: str, query: str, *, threshold: float | None = None, limit: int | None = None):
        if calls is not None:
            calls.append(type_name)
        return results.get(type_name, [])

    return searcher


def _scored(results: dict[str, float]) -> dict[str, list[dict[str, Any]]]:
    return {t: [{"$id": f"{t.lower()}-1", "$score": s}] for t, s in results.items()}


# ###############
# Ordered mode
# ###############


class TestOrdered:
    @pytest.mark.asyncio
    async def test_stops_at_first_match(self) -> None:
        calls: list[str] = []
        searcher = _fixed_searcher(_scored({"C": 0.9, "D": 0.95}), calls)
        result = await search_union_types(
            ["A", "B", "C", "D"], "acme", FallbackSearchOptions(searcher=searcher, threshold=0.5)
        )
        assert result.search_order == ["A", "B", "C"]
        assert result.searched_types == ["A", "B", "C"]
        assert calls == ["A", "B", "C"]
        assert result.fallback_triggered
        assert result.matched_type == "C"
        assert result.confidence == 0.9
        assert result.matches == [{"$id": "c-1", "$score": 0.9, "$type": "C"}]
        assert not result.all_types_exhausted

    @pytest.mark.asyncio
    async def test_first_candidate_match_is_not_a_fallback(self) -> None:
        searcher = _fixed_searcher(_scored({"A": 0.8}))
        result = await search_union_types(["A", "B"], "q", FallbackSearchOptions(searcher=searcher))
        assert not result.fallback_triggered
        assert result.matched_type == "A"

    @pytest.mark.asyncio
    async def test_per_type_threshold_overrides_global(self) -> None:
        searcher = _fixed_searcher(_scored({"A": 0.6, "B": 0.6}))
        options = FallbackSearchOptions(searcher=searcher, threshold=0.5, thresholds={"A": 0.7})
        result = await search_union_types(["A", "B"], "q", options)
        assert result.matched_type == "B"

    @pytest.mark.asyncio
    async def test_searcher_receives_threshold_and_limit(self) -> None:
        searcher = AsyncMock(return_value=[])
        options = FallbackSearchOptions(searcher=searcher, threshold=0.4, thresholds={"B": 0.9}, limit=3)
        await search_union_types(["A", "B"], "q", options)
        searcher.assert_any_await("A", "q", threshold=0.4, limit=3)
        searcher.assert_any_await("B", "q", threshold=0.9, limit=3)

    @pytest.mark.asyncio
    async def test_exhausted_when_nothing_matches(self) -> None:
        searcher = _fixed_searcher(_scored({"A": 0.2, "B": 0.3}))
        options = FallbackSearchOptions(searcher=searcher, threshold=0.5, include_below_threshold=True)
        result = await search_union_types(["A", "B"], "q", options)
        assert result.all_types_exhausted
        assert result.matched_type is None
        assert result.confidence is None
        assert result.matches == []
        assert [m["$type"] for m in result.below_threshold_matches or []] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_below_threshold_not_collected_by_default(self) -> None:
        searcher = _fixed_searcher(_scored({"A": 0.2}))
        result = await search_union_types(["A"], "q", FallbackSearchOptions(searcher=searcher, threshold=0.5))
        assert result.below_threshold_matches is None

    @pytest.mark.asyncio
    async def test_errors_raise_by_default(self) -> None:
        searcher = AsyncMock(side_effect=RuntimeError("index offline"))
        with pytest.raises(RuntimeError, match="index offline"):
            await search_union_types(["A", "B"], "q", FallbackSearchOptions(searcher=searcher))

    @pytest.mark.asyncio
    async def test_errors_recorded_in_continue_mode(self) -> None:
        async def searcher(type_name: str, query: str, **kwargs: Any) -> list[dict[str, Any]]:
            if type_name == "A":
                raise RuntimeError("index offline")
            return [{"$id": "b-1", "$score": 0.9}]

        result = await search_union_types(
            ["A", "B"], "q", FallbackSearchOptions(searcher=searcher, on_error="continue")
        )
        assert result.matched_type == "B"
        assert len(result.errors) == 1
        assert result.errors[0].type == "A"
        assert result.errors[0].message == "index offline"
        assert isinstance(result.errors[0].error, RuntimeError)

    @pytest.mark.asyncio
    async def test_existing_type_tag_is_kept(self) -> None:
        searcher = _fixed_searcher({"A": [{"$id": "x", "$score": 0.9, "$type": "Other"}]})
        result = await search_union_types(["A"], "q", FallbackSearchOptions(searcher=searcher))
        assert result.matches[0]["$type"] == "Other"


# ###############
# Parallel mode
# ###############


class TestParallel:
    @pytest.mark.asyncio
    async def test_best_match_wins(self) -> None:
        searcher = _fixed_searcher(_scored({"A": 0.6, "B": 0.9, "C": 0.3}))
        options = FallbackSearchOptions(searcher=searcher, mode="parallel", threshold=0.5)
        result = await search_union_types(["A", "B", "C"], "q", options)
        assert result.matched_type == "B"
        assert result.confidence == 0.9
        assert result.matches == [{"$id": "b-1", "$score": 0.9, "$type": "B"}]
        assert result.searched_types == ["A", "B", "C"]
        assert result.fallback_triggered

    @pytest.mark.asyncio
    async def test_return_all_sorted_by_score(self) -> None:
        searcher = _fixed_searcher(_scored({"A": 0.6, "B": 0.9, "C": 0.3}))
        options = FallbackSearchOptions(searcher=searcher, mode="parallel", threshold=0.5, return_all=True)
        result = await search_union_types(["A", "B", "C"], "q", options)
        assert [m["$type"] for m in result.matches] == ["B", "A"]

    @pytest.mark.asyncio
    async def test_searches_run_concurrently(self) -> None:
        started: list[str] = []
        release = asyncio.Event()

        async def searcher(type_name: str, query: str, **kwargs: Any) -> list[dict[str, Any]]:
            started.append(type_name)
            if len(started) == 3:
                release.set()
            await release.wait()
            return []

        options = FallbackSearchOptions(searcher=searcher, mode="parallel")
        result = await asyncio.wait_for(search_union_types(["A", "B", "C"], "q", options), timeout=1.0)
        assert sorted(started) == ["A", "B", "C"]
        assert result.all_types_exhausted

    @pytest.mark.asyncio
    async def test_errors_recorded_by_default(self) -> None:
        async def searcher(type_name: str, query: str, **kwargs: Any) -> list[dict[str, Any]]:
            if type_name == "B":
                raise ValueError("bad query")
            return [{"$id": f"{type_name}-1", "$score": 0.7}]

        result = await search_union_types(["A", "B"], "q", FallbackSearchOptions(searcher=searcher, mode="parallel"))
        assert result.matched_type == "A"
        assert not result.fallback_triggered
        assert [e.type for e in result.errors] == ["B"]

    @pytest.mark.asyncio
    async def test_errors_raise_in_throw_mode(self) -> None:
        searcher = AsyncMock(side_effect=ValueError("bad query"))
        options = FallbackSearchOptions(searcher=searcher, mode="parallel", on_error="throw")
        with pytest.raises(ValueError, match="bad query"):
            await search_union_types(["A", "B"], "q", options)
        assert searcher.await_count == 2

    @pytest.mark.asyncio
    async def test_below_threshold_matches_collected(self) -> None:
        searcher = _fixed_searcher(_scored({"A": 0.6, "B": 0.2}))
        options = FallbackSearchOptions(
            searcher=searcher, mode="parallel", threshold=0.5, include_below_threshold=True
        )
        result = await search_union_types(["A", "B"], "q", options)
        assert [m["$id"] for m in result.below_threshold_matches or []] == ["b-1"]

    @pytest.mark.asyncio
    async def test_below_threshold_matches_empty_when_not_requested(self) -> None:
        searcher = _fixed_searcher(_scored({"A": 0.6, "B": 0.2}))
        options = FallbackSearchOptions(searcher=searcher, mode="parallel", threshold=0.5)
        result = await search_union_types(["A", "B"], "q", options)
        assert result.below_threshold_matches == []


# ###############
# Edge cases and adapters
# ###############


class TestEmptyAndAdapter:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ["ordered", "parallel"])
    async def test_empty_type_list(self, mode: Any) -> None:
        searcher = AsyncMock(return_value=[])
        result = await search_union_types([], "q", FallbackSearchOptions(searcher=searcher, mode=mode))
        assert result.all_types_exhausted
        assert result.matches == []
        searcher.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provider_searcher(self) -> None:
        provider = AsyncMock()
        provider.semantic_search.return_value = [{"$id": "p-1", "$score": 0.8, "$type": "Stale"}]
        searcher = create_provider_searcher(provider)
        matches = await searcher("Person", "ada", threshold=0.6, limit=None)
        provider.semantic_search.assert_awaited_once_with("Person", "ada", min_score=0.6, limit=10)
        assert matches == [{"$id": "p-1", "$score": 0.8, "$type": "Person"}]

    @pytest.mark.asyncio
    async def test_provider_searcher_in_union_search(self) -> None:
        provider = AsyncMock()
        provider.semantic_search.side_effect = lambda type_name, query, **kwargs: (
            [{"$id": "o-1", "$score": 0.85}] if type_name == "Organization" else []
        )
        options = FallbackSearchOptions(searcher=create_provider_searcher(provider), threshold=0.75, limit=1)
        result = await search_union_types(["Person", "Organization"], "Acme Inc", options)
        assert result.matched_type == "Organization"
        assert result.matches[0]["$type"] == "Organization"
