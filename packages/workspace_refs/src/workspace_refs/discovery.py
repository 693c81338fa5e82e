from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from workspace_refs.config import WorkspaceLayout
from workspace_refs.manifest import ManifestError, read_manifest


@dataclass(frozen=True)
class WorkspacePackage:
    name: str
    path: Path
    domain: str
    manifest: dict[str, Any] = field(repr=False, compare=False)
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class DiscoveryResult:
    packages: tuple[WorkspacePackage, ...]
    warnings: tuple[str, ...] = ()


def _iter_child_dirs(parent: Path, layout: WorkspaceLayout) -> list[Path]:
    return [
        child
        for child in sorted(parent.iterdir(), key=lambda p: p.name)
        if child.is_dir() and not layout.is_ignored_dir(child.name)
    ]


def iter_package_dirs(layout: WorkspaceLayout) -> list[Path]:
    """
    Return candidate package directories in sorted order.

    Expected layout:
      <packages_dir>/<domain>/<package>/<manifest_file>
    """

    if not layout.packages_dir.is_dir():
        return []

    out: list[Path] = []
    for domain_dir in _iter_child_dirs(layout.packages_dir, layout):
        for pkg_dir in _iter_child_dirs(domain_dir, layout):
            if (pkg_dir / layout.manifest_file).is_file():
                out.append(pkg_dir)
    return out


def discover_packages(layout: WorkspaceLayout) -> DiscoveryResult:
    packages: dict[str, WorkspacePackage] = {}
    warnings: list[str] = []

    for pkg_dir in iter_package_dirs(layout):
        manifest_path = pkg_dir / layout.manifest_file
        try:
            manifest = read_manifest(manifest_path, workspace_protocol=layout.workspace_protocol)
        except ManifestError as exc:
            warnings.append(str(exc))
            continue

        existing = packages.get(manifest.name)
        if existing is not None:
            warnings.append(
                f"Duplicate package name {manifest.name!r}: {manifest_path} "
                f"(keeping {existing.path / layout.manifest_file})"
            )
            continue

        packages[manifest.name] = WorkspacePackage(
            name=manifest.name,
            path=pkg_dir,
            domain=pkg_dir.parent.name,
            manifest=manifest.data,
            dependencies=manifest.internal_dependencies,
        )

    return DiscoveryResult(packages=tuple(packages.values()), warnings=tuple(warnings))
