from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any

import pytest

from workspace_refs import ScaffoldError, create_package, default_layout
from workspace_refs import scaffold


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _write_templates(root: Path) -> None:
    _write(
        root / ".template" / "package.json.tmpl",
        '{\n  "name": "@{{domain}}/{{package}}",\n  "version": "0.0.0"\n}\n',
    )
    _write(
        root / ".template" / "tsconfig.json.tmpl",
        '{\n  "extends": "../../../tsconfig.base.json",\n  "references": []\n}\n',
    )
    _write(
        root / ".template" / "src" / "index.ts",
        'export const name = "@{{domain}}/{{package}}";\n',
    )


def _fake_run(returncode: int, calls: list[dict[str, Any]]):
    def _run(argv: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        calls.append({"argv": argv, **kwargs})
        return subprocess.CompletedProcess(argv, returncode)

    return _run


def test_create_package_renders_templates_and_syncs(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    _write_templates(root)
    _write(root / "tsconfig.json", '{\n  "files": []\n}\n')
    layout = default_layout(root)

    created = create_package(layout, "utils", "datetime", install=False)

    pkg_dir = root / "packages" / "utils" / "datetime"
    assert created.path == pkg_dir
    assert created.scoped_name == "@utils/datetime"
    assert created.warnings == ()
    assert json.loads((pkg_dir / "package.json").read_text(encoding="utf-8"))["name"] == (
        "@utils/datetime"
    )
    assert (pkg_dir / "src" / "index.ts").read_text(encoding="utf-8") == (
        'export const name = "@utils/datetime";\n'
    )
    root_config = json.loads((root / "tsconfig.json").read_text(encoding="utf-8"))
    assert root_config["references"] == [{"path": "packages/utils/datetime"}]
    assert created.sync_report is not None
    assert [p.name for p in created.sync_report.packages] == ["@utils/datetime"]


def test_create_package_runs_install_from_workspace_root(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    root = tmp_path.resolve()
    _write_templates(root)
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(scaffold.subprocess, "run", _fake_run(0, calls))

    create_package(default_layout(root), "core", "log")

    assert len(calls) == 1
    assert calls[0]["argv"] == ["pnpm", "install"]
    assert calls[0]["cwd"] == str(root)


def test_create_package_install_failure_raises(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    root = tmp_path.resolve()
    _write_templates(root)
    monkeypatch.setattr(scaffold.subprocess, "run", _fake_run(1, []))

    with pytest.raises(ScaffoldError, match="Install command failed"):
        create_package(default_layout(root), "core", "log")
    assert (root / "packages" / "core" / "log" / "package.json").exists()


def test_create_package_rejects_invalid_names(tmp_path: Path) -> None:
    layout = default_layout(tmp_path)
    with pytest.raises(ScaffoldError, match="Invalid domain name"):
        create_package(layout, "Utils", "datetime", install=False)
    with pytest.raises(ScaffoldError, match="Invalid package name"):
        create_package(layout, "utils", "1datetime", install=False)


def test_create_package_refuses_existing_directory(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    _write_templates(root)
    (root / "packages" / "utils" / "datetime").mkdir(parents=True)

    with pytest.raises(ScaffoldError, match="already exists"):
        create_package(default_layout(root), "utils", "datetime", install=False)


def test_create_package_missing_template_creates_nothing(tmp_path: Path) -> None:
    root = tmp_path.resolve()

    with pytest.raises(ScaffoldError, match="Failed to read template"):
        create_package(default_layout(root), "utils", "datetime", install=False)
    assert not (root / "packages" / "utils" / "datetime").exists()


def test_create_package_warns_when_sync_finds_cycle(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    _write_templates(root)
    for name, dep in (("a", "b"), ("b", "a")):
        _write(
            root / "packages" / "lib" / name / "package.json",
            json.dumps({"name": name, "dependencies": {dep: "workspace:*"}}),
        )

    created = create_package(default_layout(root), "utils", "datetime", install=False)

    assert len(created.warnings) == 1
    assert "circular dependencies" in created.warnings[0]


def test_create_package_write_failure_raises_scaffold_error(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    _write_templates(root)
    _write(root / "packages" / "utils", "not a directory\n")

    with pytest.raises(ScaffoldError, match="Failed to write"):
        create_package(default_layout(root), "utils", "datetime", install=False)
