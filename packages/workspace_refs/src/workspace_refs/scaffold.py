from __future__ import annotations

import re
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from workspace_refs.config import WorkspaceLayout, WorkspaceRefsError
from workspace_refs.sync import SyncReport, sync_workspace

_VALID_NAME_RE = re.compile(r"^[a-z][a-z0-9-]*$")
_ENTRY_TEMPLATE = Path("src") / "index.ts"


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


class ScaffoldError(WorkspaceRefsError):
    pass


@dataclass(frozen=True)
class CreatedPackage:
    domain: str
    name: str
    path: Path
    sync_report: SyncReport | None
    warnings: tuple[str, ...]

    @property
    def scoped_name(self) -> str:
        return f"@{self.domain}/{self.name}"


def validate_name(value: str, *, kind: str) -> None:
    if not _VALID_NAME_RE.match(value):
        raise ScaffoldError(
            f"Invalid {kind} name {value!r}: must start with a lowercase letter and contain only "
            "lowercase letters, numbers, and hyphens."
        )


def render_template(content: str, *, domain: str, package: str) -> str:
    return content.replace("{{domain}}", domain).replace("{{package}}", package)


def template_files(layout: WorkspaceLayout) -> list[tuple[Path, Path]]:
    """(template path, destination path relative to the new package) pairs."""
    return [
        (layout.template_dir / f"{layout.manifest_file}.tmpl", Path(layout.manifest_file)),
        (layout.template_dir / f"{layout.config_file}.tmpl", Path(layout.config_file)),
        (layout.template_dir / _ENTRY_TEMPLATE, _ENTRY_TEMPLATE),
    ]


def run_install(layout: WorkspaceLayout) -> subprocess.CompletedProcess[str]:
    argv = list(layout.install_command)
    _eprint(f"+ ({layout.root}) {' '.join(argv)}")
    try:
        return subprocess.run(argv, cwd=str(layout.root), text=True, check=False)
    except FileNotFoundError as exc:
        raise ScaffoldError(f"Command not found: {argv[0]!r}.") from exc
    except OSError as exc:
        raise ScaffoldError(f"Failed to execute {argv[0]!r}: {exc}") from exc


def create_package(
    layout: WorkspaceLayout, domain: str, name: str, *, install: bool = True
) -> CreatedPackage:
    """Create ``<packages_dir>/<domain>/<name>`` from the workspace templates.

    After the files are written the references are re-synced and, unless
    ``install`` is false, the install command runs from the workspace root. A
    failed sync is only a warning; a failed install raises ``ScaffoldError``.
    """

    validate_name(domain, kind="domain")
    validate_name(name, kind="package")

    package_dir = layout.packages_dir / domain / name
    if package_dir.exists():
        raise ScaffoldError(f"Package already exists at {package_dir}")

    rendered: list[tuple[Path, str]] = []
    for template_path, dest_rel in template_files(layout):
        try:
            content = template_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ScaffoldError(f"Failed to read template {template_path}: {exc}") from exc
        rendered.append((dest_rel, render_template(content, domain=domain, package=name)))

    for dest_rel, content in rendered:
        dest = package_dir / dest_rel
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(content, encoding="utf-8", newline="\n")
        except OSError as exc:
            raise ScaffoldError(f"Failed to write {dest}: {exc}") from exc

    warnings: list[str] = []
    report: SyncReport | None = None
    try:
        report = sync_workspace(layout)
    except (OSError, WorkspaceRefsError) as exc:
        warnings.append(f"Failed to sync references ({exc}). Run 'workspace-refs sync' manually.")
    else:
        if not report.ok:
            warnings.append(
                "Failed to sync references (circular dependencies). "
                "Run 'workspace-refs sync' manually."
            )

    if install:
        cp = run_install(layout)
        if cp.returncode != 0:
            raise ScaffoldError(
                f"Install command failed ({cp.returncode}). Package was created at {package_dir}."
            )

    return CreatedPackage(
        domain=domain,
        name=name,
        path=package_dir,
        sync_report=report,
        warnings=tuple(warnings),
    )
