from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "workspace-refs.yaml"
_CONFIG_VERSION = 1

_DEFAULT_PACKAGES_DIR = "packages"
_DEFAULT_MANIFEST_FILE = "package.json"
_DEFAULT_CONFIG_FILE = "tsconfig.json"
_DEFAULT_ROOT_CONFIG = "tsconfig.json"
_DEFAULT_BRIDGE_CONFIG = "packages/tsconfig.json"
_DEFAULT_TEMPLATE_DIR = ".template"
_DEFAULT_IGNORE_DIRS: tuple[str, ...] = ("node_modules",)
_DEFAULT_WORKSPACE_PROTOCOL = "workspace:"
_DEFAULT_INSTALL_COMMAND: tuple[str, ...] = ("pnpm", "install")


class WorkspaceRefsError(RuntimeError):
    pass


class WorkspaceConfigError(WorkspaceRefsError):
    pass


@dataclass(frozen=True)
class WorkspaceLayout:
    """Where things live in a workspace. All paths are absolute."""

    root: Path
    packages_dir: Path
    manifest_file: str
    config_file: str
    root_config: Path
    bridge_config: Path
    template_dir: Path
    ignore_dirs: frozenset[str]
    workspace_protocol: str
    install_command: tuple[str, ...]

    def is_ignored_dir(self, name: str) -> bool:
        return name.startswith(".") or name in self.ignore_dirs


def default_layout(root: Path) -> WorkspaceLayout:
    root = root.resolve()
    return WorkspaceLayout(
        root=root,
        packages_dir=root / _DEFAULT_PACKAGES_DIR,
        manifest_file=_DEFAULT_MANIFEST_FILE,
        config_file=_DEFAULT_CONFIG_FILE,
        root_config=root / _DEFAULT_ROOT_CONFIG,
        bridge_config=root / _DEFAULT_BRIDGE_CONFIG,
        template_dir=root / _DEFAULT_TEMPLATE_DIR,
        ignore_dirs=frozenset(_DEFAULT_IGNORE_DIRS),
        workspace_protocol=_DEFAULT_WORKSPACE_PROTOCOL,
        install_command=_DEFAULT_INSTALL_COMMAND,
    )


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise WorkspaceConfigError(f"Failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise WorkspaceConfigError(f"Failed to parse YAML in {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise WorkspaceConfigError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}.")
    return raw


def _ensure_no_unknown_keys(*, data: dict[str, Any], allowed: set[str], path: Path) -> None:
    unknown = set(data) - allowed
    if not unknown:
        return
    unknown_list = ", ".join(sorted(str(key) for key in unknown))
    allowed_list = ", ".join(sorted(allowed))
    raise WorkspaceConfigError(f"Unknown keys in {path}: {unknown_list}. Allowed: {allowed_list}.")


def _parse_str(value: Any, *, path: Path, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise WorkspaceConfigError(f"Expected non-empty string for {field} in {path}.")
    return value.strip()


def _parse_file_name(value: Any, *, path: Path, field: str) -> str:
    name = _parse_str(value, path=path, field=field)
    if "/" in name or "\\" in name:
        raise WorkspaceConfigError(f"Expected a bare file name for {field} in {path}, got {name!r}.")
    return name


def _parse_rel_path(value: Any, *, root: Path, path: Path, field: str) -> Path:
    raw = Path(_parse_str(value, path=path, field=field))
    candidate = raw if raw.is_absolute() else (root / raw)
    try:
        return candidate.resolve(strict=False)
    except OSError:
        return candidate


def _parse_str_list(value: Any, *, path: Path, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise WorkspaceConfigError(f"Expected list for {field} in {path}.")
    out: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise WorkspaceConfigError(f"Expected non-empty string for {field}[{idx}] in {path}.")
        out.append(item.strip())
    return tuple(out)


def load_layout(root: Path, *, config_path: Path | None = None) -> WorkspaceLayout:
    """Build the layout for ``root``, applying ``workspace-refs.yaml`` when present.

    An explicit ``config_path`` must exist; the implicit one at the workspace
    root is optional.
    """

    layout = default_layout(root)
    if config_path is None:
        config_path = layout.root / CONFIG_FILENAME
        if not config_path.is_file():
            return layout
    elif not config_path.is_file():
        raise WorkspaceConfigError(f"Config file not found: {config_path}")

    data = _load_yaml_mapping(config_path)
    allowed = {
        "version",
        "packages_dir",
        "manifest_file",
        "config_file",
        "root_config",
        "bridge_config",
        "template_dir",
        "ignore_dirs",
        "workspace_protocol",
        "install_command",
    }
    _ensure_no_unknown_keys(data=data, allowed=allowed, path=config_path)

    version = data.get("version", _CONFIG_VERSION)
    if version != _CONFIG_VERSION:
        raise WorkspaceConfigError(
            f"Unsupported config version in {config_path}: {version!r} (expected {_CONFIG_VERSION})."
        )

    overrides: dict[str, Any] = {}
    base = layout.root
    for field in ("packages_dir", "root_config", "bridge_config", "template_dir"):
        if field in data:
            overrides[field] = _parse_rel_path(data[field], root=base, path=config_path, field=field)
    for field in ("manifest_file", "config_file"):
        if field in data:
            overrides[field] = _parse_file_name(data[field], path=config_path, field=field)
    if "workspace_protocol" in data:
        overrides["workspace_protocol"] = _parse_str(
            data["workspace_protocol"], path=config_path, field="workspace_protocol"
        )
    if "ignore_dirs" in data:
        overrides["ignore_dirs"] = frozenset(
            _parse_str_list(data["ignore_dirs"], path=config_path, field="ignore_dirs")
        )
    if "install_command" in data:
        install_command = _parse_str_list(
            data["install_command"], path=config_path, field="install_command"
        )
        if not install_command:
            raise WorkspaceConfigError(f"install_command must not be empty in {config_path}.")
        overrides["install_command"] = install_command

    if "bridge_config" not in overrides and ("packages_dir" in overrides or "config_file" in overrides):
        overrides["bridge_config"] = overrides.get("packages_dir", layout.packages_dir) / overrides.get(
            "config_file", layout.config_file
        )

    return replace(layout, **overrides)
