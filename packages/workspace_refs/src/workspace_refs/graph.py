from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from workspace_refs.discovery import WorkspacePackage


class DependencyGraph(Mapping[str, WorkspacePackage]):
    """Read-only mapping of package name to package.

    An edge A -> B means A depends on B. Edges whose target is not a key of the
    graph point outside the discovered workspace and are ignored by every
    lookup.
    """

    def __init__(self, packages: Iterable[WorkspacePackage]) -> None:
        self._packages: dict[str, WorkspacePackage] = {}
        for package in packages:
            self._packages[package.name] = package

    def __getitem__(self, name: str) -> WorkspacePackage:
        return self._packages[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._packages)

    def __len__(self) -> int:
        return len(self._packages)

    def dependencies_of(self, name: str) -> list[WorkspacePackage]:
        package = self._packages.get(name)
        if package is None:
            return []
        return [self._packages[dep] for dep in package.dependencies if dep in self._packages]
