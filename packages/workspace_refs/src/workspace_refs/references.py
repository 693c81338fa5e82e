from __future__ import annotations

import json
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from workspace_refs.config import WorkspaceLayout
from workspace_refs.discovery import WorkspacePackage
from workspace_refs.graph import DependencyGraph

REFERENCES_KEY = "references"


class ConfigFileError(ValueError):
    pass


@dataclass(frozen=True)
class SyncOutcome:
    label: str
    path: Path
    references: tuple[str, ...]
    changed: bool


def _relative_posix(target: Path, start: Path) -> str:
    return os.path.relpath(target, start).replace("\\", "/")


def sorted_reference_paths(targets: Iterable[Path], *, start: Path) -> list[str]:
    return sorted(_relative_posix(target, start) for target in targets)


def package_reference_paths(graph: DependencyGraph, package: WorkspacePackage) -> list[str]:
    return sorted_reference_paths(
        (dep.path for dep in graph.dependencies_of(package.name)), start=package.path
    )


def workspace_reference_paths(graph: DependencyGraph, *, start: Path) -> list[str]:
    return sorted_reference_paths((package.path for package in graph.values()), start=start)


def _read_config_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(f"Failed to read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigFileError(f"Failed to decode {path}: {e}") from e


def parse_config_text(text: str, *, path: Path) -> dict[str, Any]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigFileError(f"Failed to parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigFileError(f"Expected a JSON object in {path}, got {type(raw).__name__}.")
    return raw


def render_config(config: dict[str, Any]) -> str:
    return json.dumps(config, indent=2, ensure_ascii=False) + "\n"


def apply_references(config: dict[str, Any], paths: list[str]) -> dict[str, Any]:
    """Return a copy of ``config`` with its reference list replaced.

    Key order is preserved; a config without references gets the key appended.
    """

    updated = dict(config)
    updated[REFERENCES_KEY] = [{"path": path} for path in paths]
    return updated


def sync_config_file(
    path: Path, paths: list[str], *, label: str, check: bool = False
) -> SyncOutcome:
    """Read-modify-write one config file.

    Raises ``ConfigFileError`` when the file cannot be read, parsed or written.
    With ``check`` the file is never written.
    """

    before = _read_config_text(path)
    config = parse_config_text(before, path=path)
    rendered = render_config(apply_references(config, paths))
    changed = rendered != before
    if changed and not check:
        try:
            path.write_text(rendered, encoding="utf-8", newline="\n")
        except OSError as e:
            raise ConfigFileError(f"Failed to write {path}: {e}") from e
    return SyncOutcome(label=label, path=path, references=tuple(paths), changed=changed)


def sync_package_references(
    graph: DependencyGraph, layout: WorkspaceLayout, *, check: bool = False
) -> tuple[list[SyncOutcome], list[str]]:
    outcomes: list[SyncOutcome] = []
    warnings: list[str] = []
    for package in graph.values():
        config_path = package.path / layout.config_file
        if not config_path.is_file():
            warnings.append(f"No {layout.config_file} found at {config_path}")
            continue
        try:
            outcomes.append(
                sync_config_file(
                    config_path,
                    package_reference_paths(graph, package),
                    label=package.name,
                    check=check,
                )
            )
        except ConfigFileError as exc:
            warnings.append(str(exc))
    return outcomes, warnings


def sync_root_references(
    graph: DependencyGraph, layout: WorkspaceLayout, *, check: bool = False
) -> tuple[list[SyncOutcome], list[str]]:
    """Sync the workspace root config and the packages-directory bridge config.

    Either file may be absent; absent files are skipped without a warning.
    """

    outcomes: list[SyncOutcome] = []
    warnings: list[str] = []
    targets = (
        (layout.root_config, layout.root),
        (layout.bridge_config, layout.packages_dir),
    )
    for config_path, start in targets:
        if not config_path.is_file():
            continue
        label = _relative_posix(config_path, layout.root)
        try:
            outcomes.append(
                sync_config_file(
                    config_path,
                    workspace_reference_paths(graph, start=start),
                    label=label,
                    check=check,
                )
            )
        except ConfigFileError as exc:
            warnings.append(str(exc))
    return outcomes, warnings
