# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the generation dependency graph."""

from __future__ import annotations

from typing import Any

import pytest

from graphschema.compiler.parser import parse_schema
from graphschema.model.types import RelationOperator
from graphschema.validation.dependency_graph import (
    CircularDependencyError,
    DependencyGraph,
    build_dependency_graph,
    detect_cycles,
    get_all_dependencies,
    get_parallel_groups,
    has_cycles,
    topological_sort,
    visualize_graph,
)

# ###############
# Test Helpers
# ###############


def _graph(raw: dict[str, Any]) -> DependencyGraph:
    """Parse a raw schema without reference checks and build its dependency graph."""
    return build_dependency_graph(parse_schema(raw, validate=False))


# ###############
# Graph Construction
# ###############


class TestBuildDependencyGraph:
    def test_forward_exact_is_hard_dependency(self) -> None:
        graph = _graph({"Post": {"author": "->Author"}, "Author": {"name": "string"}})
        assert graph.nodes["Post"].depends_on == ["Author"]
        assert graph.nodes["Author"].depended_on_by == ["Post"]
        assert graph.nodes["Post"].soft_depends_on == []

    def test_fuzzy_is_soft_dependency(self) -> None:
        graph = _graph({"Post": {"topic": "~>Topic", "tags": "<~Tag[]"}, "Topic": {}, "Tag": {}})
        assert graph.nodes["Post"].depends_on == []
        assert graph.nodes["Post"].soft_depends_on == ["Topic", "Tag"]

    def test_optional_is_soft_dependency(self) -> None:
        graph = _graph({"Post": {"author": "->Author?"}, "Author": {}})
        assert graph.nodes["Post"].depends_on == []
        assert graph.nodes["Post"].soft_depends_on == ["Author"]

    def test_backward_exact_adds_no_dependency(self) -> None:
        graph = _graph({"Post": {"comments": "<-Comment[]"}, "Comment": {}})
        assert graph.nodes["Post"].depends_on == []
        assert graph.nodes["Post"].soft_depends_on == []
        (edge,) = graph.edges
        assert edge.operator is RelationOperator.BACKWARD_EXACT

    def test_implicit_relation_is_forward_exact(self) -> None:
        graph = _graph({"Post": {"author": "Author"}, "Author": {}})
        assert graph.nodes["Post"].depends_on == ["Author"]
        assert graph.edges[0].operator is RelationOperator.FORWARD_EXACT

    def test_synthesized_backref_adds_no_dependency(self) -> None:
        graph = _graph({"Post": {"author": "->Author.posts"}, "Author": {"name": "string"}})
        assert graph.nodes["Author"].depends_on == []
        inverse = next(e for e in graph.edges if e.source == "Author")
        assert inverse.field_name == "posts"
        assert inverse.operator is RelationOperator.BACKWARD_EXACT
        assert not has_cycles(graph)

    def test_missing_target_gets_a_node(self) -> None:
        graph = _graph({"Post": {"author": "->Author"}})
        assert "Author" in graph.nodes
        assert graph.nodes["Author"].depended_on_by == ["Post"]

    def test_edges_carry_field_metadata(self) -> None:
        graph = _graph({"Post": {"author": "->Author?", "tags": "~>Tag[]"}, "Author": {}, "Tag": {}})
        author, tags = graph.edges
        assert (author.source, author.target, author.field_name) == ("Post", "Author", "author?")
        assert author.is_optional
        assert tags.is_array
        assert tags.operator is RelationOperator.FORWARD_FUZZY
        assert not tags.is_optional

    def test_primitive_fields_have_no_edges(self) -> None:
        assert _graph({"Post": {"title": "string", "meta": "map<string, int>"}}).edges == []


# ###############
# Ordering
# ###############


class TestTopologicalSort:
    def test_dependencies_come_first(self) -> None:
        graph = _graph({"Comment": {"post": "->Post"}, "Post": {"author": "->Author"}, "Author": {}})
        assert topological_sort(graph, "Comment") == ["Author", "Post", "Comment"]

    def test_only_reachable_types(self) -> None:
        graph = _graph({"Post": {"author": "->Author"}, "Author": {}, "Tag": {}})
        assert topological_sort(graph, "Post") == ["Author", "Post"]

    def test_soft_dependencies_are_ignored(self) -> None:
        graph = _graph({"Post": {"topic": "~>Topic", "author": "->Author?"}, "Topic": {}, "Author": {}})
        assert topological_sort(graph, "Post") == ["Post"]

    def test_cycle_raises(self) -> None:
        graph = _graph({"A": {"b": "->B"}, "B": {"a": "->A"}})
        with pytest.raises(CircularDependencyError) as exc_info:
            topological_sort(graph, "A")
        assert exc_info.value.cycle_path == ["A", "B", "A"]
        assert str(exc_info.value) == "Circular dependency detected: A -> B -> A"

    def test_ignore_optional_matches_default_for_soft_edges(self) -> None:
        graph = _graph({"A": {"b": "->B"}, "B": {"a": "->A?"}})
        assert topological_sort(graph, "A", ignore_optional=True) == ["B", "A"]
        assert topological_sort(graph, "A") == ["B", "A"]


class TestCycles:
    def test_no_cycles(self) -> None:
        graph = _graph({"Post": {"author": "->Author"}, "Author": {}})
        assert detect_cycles(graph) == []
        assert not has_cycles(graph)

    def test_two_type_cycle(self) -> None:
        graph = _graph({"A": {"b": "->B"}, "B": {"a": "->A"}})
        assert detect_cycles(graph) == [["A", "B", "A"]]
        assert has_cycles(graph)

    def test_three_type_cycle(self) -> None:
        graph = _graph({"A": {"b": "->B"}, "B": {"c": "->C"}, "C": {"a": "->A"}})
        assert detect_cycles(graph) == [["A", "B", "C", "A"]]

    def test_self_cycle(self) -> None:
        assert detect_cycles(_graph({"Node": {"next": "->Node"}})) == [["Node", "Node"]]

    def test_optional_self_reference_is_not_a_cycle(self) -> None:
        assert detect_cycles(_graph({"Node": {"parent": "->Node?"}})) == []


class TestParallelGroups:
    def test_batches_by_depth(self) -> None:
        graph = _graph(
            {
                "Post": {"author": "->Author", "category": "->Category"},
                "Author": {"org": "->Org"},
                "Org": {},
                "Category": {},
            }
        )
        assert get_parallel_groups(graph, "Post") == [["Org", "Category"], ["Author"], ["Post"]]

    def test_root_without_dependencies(self) -> None:
        assert get_parallel_groups(_graph({"Tag": {"name": "string"}}), "Tag") == [["Tag"]]

    def test_types_on_a_cycle_are_left_out(self) -> None:
        graph = _graph({"A": {"b": "->B"}, "B": {"a": "->A"}})
        assert get_parallel_groups(graph, "A") == []

    def test_all_dependencies_are_transitive(self) -> None:
        graph = _graph({"Post": {"author": "->Author", "category": "->Category"}, "Author": {"org": "->Org"}})
        assert get_all_dependencies(graph, "Post") == {"Author", "Category", "Org"}
        assert get_all_dependencies(graph, "Org") == set()
        assert get_all_dependencies(graph, "Unknown") == set()


# ###############
# Rendering
# ###############


class TestVisualizeGraph:
    def test_lists_every_type(self) -> None:
        text = visualize_graph(_graph({"Post": {"author": "->Author", "topic": "~>Topic"}, "Author": {}, "Topic": {}}))
        lines = text.splitlines()
        assert lines[0] == "Dependency Graph:"
        assert "Post:" in lines
        assert "  -> Author (hard deps)" in lines
        assert "  ~> Topic (soft deps)" in lines
        assert "  <- Post (depended on by)" in lines
        assert "  (no dependencies)" in lines
