from __future__ import annotations

from pathlib import Path

from workspace_refs import DependencyGraph, WorkspacePackage, cycle_key, find_cycles, format_cycle


def _graph(edges: dict[str, list[str]]) -> DependencyGraph:
    return DependencyGraph(
        WorkspacePackage(
            name=name,
            path=Path("/ws/packages/d") / name,
            domain="d",
            manifest={"name": name},
            dependencies=tuple(sorted(deps)),
        )
        for name, deps in edges.items()
    )


def test_two_node_cycle_is_reported() -> None:
    cycles = find_cycles(_graph({"a": ["b"], "b": ["a"]}))
    assert len(cycles) == 1
    assert set(cycles[0]) == {"a", "b"}
    assert cycles[0] == ("a", "b", "a")


def test_three_node_cycle_is_reported_once() -> None:
    cycles = find_cycles(_graph({"a": ["b"], "b": ["c"], "c": ["a"]}))
    assert cycles == [("a", "b", "c", "a")]


def test_acyclic_graph_has_no_cycles() -> None:
    assert find_cycles(_graph({"a": ["b"], "b": ["c"], "c": []})) == []


def test_diamond_is_not_a_cycle() -> None:
    assert find_cycles(_graph({"a": ["b", "c"], "b": ["d"], "c": ["d"], "d": []})) == []


def test_self_dependency_is_a_cycle() -> None:
    assert find_cycles(_graph({"a": ["a"]})) == [("a", "a")]


def test_edges_to_unknown_packages_are_ignored() -> None:
    graph = _graph({"a": ["external", "b"], "b": []})
    assert [dep.name for dep in graph.dependencies_of("a")] == ["b"]
    assert graph.dependencies_of("external") == []
    assert find_cycles(graph) == []


def test_long_chain_does_not_hit_recursion_limit() -> None:
    names = [f"p{i:04d}" for i in range(1500)]
    edges = {name: [nxt] for name, nxt in zip(names, names[1:])}
    edges[names[-1]] = []
    assert find_cycles(_graph(edges)) == []

    edges[names[-1]] = [names[0]]
    cycles = find_cycles(_graph(edges))
    assert len(cycles) == 1
    assert cycles[0] == tuple(names) + (names[0],)


def test_complete_digraph_keeps_cycles_with_different_order() -> None:
    cycles = find_cycles(_graph({"a": ["b", "c"], "b": ["a", "c"], "c": ["a", "b"]}))
    keys = [cycle_key(c) for c in cycles]
    assert sorted(keys) == [("a", "b"), ("a", "b", "c"), ("a", "c"), ("a", "c", "b"), ("b", "c")]
    assert len(set(keys)) == len(keys)


def test_distinct_cycles_sharing_a_node_are_both_reported() -> None:
    cycles = find_cycles(_graph({"a": ["b", "c"], "b": ["a"], "c": ["a"]}))
    assert {cycle_key(c) for c in cycles} == {("a", "b"), ("a", "c")}
    assert len(cycles) == 2


def test_cycle_key_ignores_starting_node() -> None:
    assert cycle_key(("b", "c", "a", "b")) == ("a", "b", "c")
    assert cycle_key(("c", "a", "b", "c")) == ("a", "b", "c")
    assert cycle_key(("a", "c", "b", "a")) == ("a", "c", "b")


def test_format_cycle_joins_with_arrows() -> None:
    assert format_cycle(("a", "b", "a")) == "a -> b -> a"
