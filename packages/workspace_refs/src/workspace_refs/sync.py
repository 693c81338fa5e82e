from __future__ import annotations

from dataclasses import dataclass

from workspace_refs.config import WorkspaceLayout
from workspace_refs.cycles import Cycle, find_cycles
from workspace_refs.discovery import WorkspacePackage, discover_packages
from workspace_refs.graph import DependencyGraph
from workspace_refs.references import SyncOutcome, sync_package_references, sync_root_references


@dataclass(frozen=True)
class SyncReport:
    packages: tuple[WorkspacePackage, ...]
    cycles: tuple[Cycle, ...]
    package_outcomes: tuple[SyncOutcome, ...]
    root_outcomes: tuple[SyncOutcome, ...]
    discovery_warnings: tuple[str, ...]
    sync_warnings: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not self.cycles

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.discovery_warnings + self.sync_warnings

    @property
    def changed(self) -> tuple[SyncOutcome, ...]:
        return tuple(o for o in self.package_outcomes + self.root_outcomes if o.changed)


def sync_workspace(layout: WorkspaceLayout, *, check: bool = False) -> SyncReport:
    """Discover packages, reject cycles, then regenerate every reference list.

    Nothing is written when the graph has a cycle, when no package was found,
    or when ``check`` is set.
    """

    discovery = discover_packages(layout)
    graph = DependencyGraph(discovery.packages)

    cycles = find_cycles(graph)
    if cycles or not graph:
        return SyncReport(
            packages=discovery.packages,
            cycles=tuple(cycles),
            package_outcomes=(),
            root_outcomes=(),
            discovery_warnings=discovery.warnings,
            sync_warnings=(),
        )

    package_outcomes, package_warnings = sync_package_references(graph, layout, check=check)
    root_outcomes, root_warnings = sync_root_references(graph, layout, check=check)
    return SyncReport(
        packages=discovery.packages,
        cycles=(),
        package_outcomes=tuple(package_outcomes),
        root_outcomes=tuple(root_outcomes),
        discovery_warnings=discovery.warnings,
        sync_warnings=tuple(package_warnings + root_warnings),
    )
