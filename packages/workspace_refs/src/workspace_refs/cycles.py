from __future__ import annotations

from collections.abc import Iterator

from workspace_refs.graph import DependencyGraph

Cycle = tuple[str, ...]


def cycle_key(cycle: Cycle) -> Cycle:
    """Canonical form of a closed walk.

    Drops the closing repeat and rotates so the smallest name comes first, so
    the same cycle entered from any of its nodes yields the same key.
    """

    nodes = cycle[:-1] if len(cycle) > 1 and cycle[0] == cycle[-1] else cycle
    if not nodes:
        return ()
    start = nodes.index(min(nodes))
    return nodes[start:] + nodes[:start]


def format_cycle(cycle: Cycle) -> str:
    return " -> ".join(cycle)


def _walk(graph: DependencyGraph, start: str, found: list[Cycle]) -> None:
    """Depth-first walk from ``start`` with an explicit stack.

    ``path`` and ``pending`` grow and shrink together: ``pending[i]`` holds the
    unvisited dependencies of ``path[i]``.
    """

    visited: set[str] = set()
    path: list[str] = []
    on_path: dict[str, int] = {}
    pending: list[Iterator[str]] = []

    def enter(name: str) -> None:
        first_index = on_path.get(name)
        if first_index is not None:
            found.append(tuple(path[first_index:]) + (name,))
            return
        if name in visited:
            return
        visited.add(name)
        on_path[name] = len(path)
        path.append(name)
        pending.append(iter([dep.name for dep in graph.dependencies_of(name)]))

    enter(start)
    while pending:
        dep = next(pending[-1], None)
        if dep is None:
            pending.pop()
            del on_path[path.pop()]
            continue
        enter(dep)


def find_cycles(graph: DependencyGraph) -> list[Cycle]:
    """Return every distinct cycle in ``graph``, each as a closed walk.

    Each package starts its own walk with a fresh visited set. The result keeps
    the first traversal order seen for each cycle; an empty list means the
    graph is acyclic.
    """

    found: list[Cycle] = []
    for name in graph:
        _walk(graph, name, found)

    unique: list[Cycle] = []
    seen: set[Cycle] = set()
    for cycle in found:
        key = cycle_key(cycle)
        if key in seen:
            continue
        seen.add(key)
        unique.append(cycle)
    return unique
