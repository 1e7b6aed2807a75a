# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generation dependency graph between the entity types of a schema.

When an entity is created, the targets of its required forward exact
relations (``->``) have to exist or be generated first: these are *hard*
dependencies. Fuzzy relations and optional fields are *soft* dependencies,
they can be resolved later or left unset. Backward exact relations (``<-``)
create no dependency because the other side creates the link.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from graphschema.model.entities import ParsedSchema
from graphschema.model.types import MatchMode, ParsedField, RelationOperator
from graphschema.parser.grammar import PRIMITIVE_TYPES

# ###############
# Public Interface
# ###############


class CircularDependencyError(Exception):
    """Raised when hard dependencies form a cycle.

    Attributes:
        cycle_path: The types on the cycle, with the first type repeated at
            the end (e.g. ``["A", "B", "A"]``).
    """

    def __init__(self, cycle_path: list[str]) -> None:
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle_path)}")
        self.cycle_path = cycle_path


@dataclass
class DependencyNode:
    """One entity type and its dependencies."""

    name: str
    depends_on: list[str] = field(default_factory=list)
    depended_on_by: list[str] = field(default_factory=list)
    soft_depends_on: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DependencyEdge:
    """One relation field. Optional fields carry a ``?`` suffix in *field_name*."""

    source: str
    target: str
    is_array: bool
    operator: RelationOperator
    field_name: str

    @property
    def is_optional(self) -> bool:
        return self.field_name.endswith("?")


@dataclass
class DependencyGraph:
    """Nodes keyed by type name plus every relation edge."""

    nodes: dict[str, DependencyNode] = field(default_factory=dict)
    edges: list[DependencyEdge] = field(default_factory=list)


def build_dependency_graph(schema: ParsedSchema) -> DependencyGraph:
    """Build the dependency graph of *schema*.

    Relation targets missing from the schema get a node of their own.
    Implicit relations count as forward exact relations, except for the
    inverse side of a backref pair, which counts as backward exact: the
    entity declaring the relation creates the link.
    """
    graph = DependencyGraph(nodes={name: DependencyNode(name) for name in schema.entities})

    for type_name, entity in schema.entities.items():
        for field_name, parsed in entity.fields.items():
            target = parsed.related_type
            if not parsed.is_relation or not target or target in PRIMITIVE_TYPES:
                continue
            operator = parsed.operator
            if operator is None:
                inverse = _is_inverse_side(schema, type_name, parsed)
                operator = RelationOperator.BACKWARD_EXACT if inverse else RelationOperator.FORWARD_EXACT
            graph.edges.append(
                DependencyEdge(
                    source=type_name,
                    target=target,
                    is_array=parsed.is_array,
                    operator=operator,
                    field_name=f"{field_name}?" if parsed.is_optional else field_name,
                )
            )
            source_node = graph.nodes[type_name]
            target_node = graph.nodes.setdefault(target, DependencyNode(target))

            if operator.match_mode is MatchMode.FUZZY or parsed.is_optional:
                _append_unique(source_node.soft_depends_on, target)
            elif operator is RelationOperator.FORWARD_EXACT:
                _append_unique(source_node.depends_on, target)
                _append_unique(target_node.depended_on_by, type_name)

    return graph


def topological_sort(graph: DependencyGraph, root_type: str, ignore_optional: bool = False) -> list[str]:
    """Return the types to generate for *root_type*, dependencies first and the root last.

    Raises:
        CircularDependencyError: If the hard dependencies reachable from
            *root_type* contain a cycle.
    """
    visited: set[str] = set()
    visiting: set[str] = set()
    order: list[str] = []

    def _visit(type_name: str, path: list[str]) -> None:
        if type_name in visited:
            return
        if type_name in visiting:
            raise CircularDependencyError(path[path.index(type_name) :] + [type_name])
        visiting.add(type_name)
        for dep in _dependencies(graph, type_name, ignore_optional):
            _visit(dep, path + [type_name])
        visiting.discard(type_name)
        visited.add(type_name)
        order.append(type_name)

    _visit(root_type, [])
    return order


def detect_cycles(graph: DependencyGraph, ignore_optional: bool = False) -> list[list[str]]:
    """Return the cycles among hard dependencies, each closed by its first type."""
    cycles: list[list[str]] = []
    visited: set[str] = set()
    on_stack: set[str] = set()

    def _dfs(node: str, path: list[str]) -> None:
        if node in on_stack:
            cycles.append(path[path.index(node) :] + [node])
            return
        if node in visited:
            return
        visited.add(node)
        on_stack.add(node)
        for dep in _dependencies(graph, node, ignore_optional):
            _dfs(dep, path + [node])
        on_stack.discard(node)

    for node in list(graph.nodes):
        _dfs(node, [])
    return cycles


def has_cycles(graph: DependencyGraph) -> bool:
    return bool(detect_cycles(graph))


def get_parallel_groups(graph: DependencyGraph, root_type: str) -> list[list[str]]:
    """Group the types needed for *root_type* into batches that can be generated concurrently.

    Each batch only depends on earlier batches. Types on a cycle are left out.
    """
    relevant: list[str] = []

    def _reach(node: str) -> None:
        if node in relevant:
            return
        relevant.append(node)
        info = graph.nodes.get(node)
        if info is not None:
            for dep in info.depends_on:
                _reach(dep)

    _reach(root_type)

    in_degree = {
        node: sum(1 for dep in graph.nodes[node].depends_on if dep in relevant) if node in graph.nodes else 0
        for node in relevant
    }
    groups: list[list[str]] = []
    while in_degree:
        group = [node for node, degree in in_degree.items() if degree == 0]
        if not group:
            break
        groups.append(group)
        for node in group:
            del in_degree[node]
            info = graph.nodes.get(node)
            for dependent in info.depended_on_by if info is not None else []:
                if dependent in in_degree:
                    in_degree[dependent] -= 1
    return groups


def get_all_dependencies(graph: DependencyGraph, type_name: str) -> set[str]:
    """Return every type *type_name* depends on, directly or transitively."""
    deps: set[str] = set()
    stack = [type_name]
    while stack:
        info = graph.nodes.get(stack.pop())
        if info is None:
            continue
        for dep in info.depends_on:
            if dep not in deps:
                deps.add(dep)
                stack.append(dep)
    return deps


def visualize_graph(graph: DependencyGraph) -> str:
    """Render the graph as text, one block per type."""
    lines = ["Dependency Graph:", ""]
    for name, node in graph.nodes.items():
        lines.append(f"{name}:")
        if node.depends_on:
            lines.append(f"  -> {', '.join(node.depends_on)} (hard deps)")
        if node.soft_depends_on:
            lines.append(f"  ~> {', '.join(node.soft_depends_on)} (soft deps)")
        if node.depended_on_by:
            lines.append(f"  <- {', '.join(node.depended_on_by)} (depended on by)")
        if not (node.depends_on or node.soft_depends_on or node.depended_on_by):
            lines.append("  (no dependencies)")
        lines.append("")
    return "\n".join(lines)


# ################
# Implementation
# ################


def _append_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


def _is_inverse_side(schema: ParsedSchema, type_name: str, parsed: ParsedField) -> bool:
    """Return True if *parsed* is the array side of a backref pair declared on the related entity."""
    if not parsed.is_array or not parsed.backref or not parsed.related_type:
        return False
    related = schema.entities.get(parsed.related_type)
    partner = related.fields.get(parsed.backref) if related is not None else None
    if partner is None or partner.backref != parsed.name or partner.related_type != type_name:
        return False
    return partner.operator is not None or not partner.is_array


def _dependencies(graph: DependencyGraph, type_name: str, ignore_optional: bool) -> list[str]:
    """Hard dependencies of *type_name*, minus those reached only through optional fields."""
    info = graph.nodes.get(type_name)
    if info is None:
        return []
    if not ignore_optional:
        return list(info.depends_on)
    return [
        dep
        for dep in info.depends_on
        if not all(e.is_optional for e in graph.edges if e.source == type_name and e.target == dep)
    ]
