from __future__ import annotations

import argparse
import sys
from pathlib import Path

from workspace_refs.config import WorkspaceLayout, WorkspaceRefsError, load_layout
from workspace_refs.cycles import format_cycle
from workspace_refs.scaffold import create_package
from workspace_refs.sync import SyncReport, sync_workspace


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def _layout_from_args(args: argparse.Namespace) -> WorkspaceLayout:
    config_path = args.config.resolve() if args.config is not None else None
    return load_layout(args.root.resolve(), config_path=config_path)


def _print_warnings(warnings: tuple[str, ...]) -> None:
    for warning in warnings:
        _eprint(f"WARNING: {warning}")


def _print_sync_report(report: SyncReport, *, check: bool) -> int:
    print(f"Found {len(report.packages)} package(s)")
    _print_warnings(report.discovery_warnings)

    if not report.packages:
        print("No packages found. Nothing to sync.")
        return 0

    if report.cycles:
        _eprint("ERROR: Circular dependencies detected!")
        for cycle in report.cycles:
            _eprint(f"  {format_cycle(cycle)}")
        return 1

    for outcome in report.package_outcomes + report.root_outcomes:
        if check:
            if outcome.changed:
                print(f"Out of date: {outcome.label} ({outcome.path})")
        else:
            print(f"Updated {outcome.label}: {len(outcome.references)} reference(s)")
    _print_warnings(report.sync_warnings)

    if check and report.changed:
        _eprint(f"{len(report.changed)} file(s) out of date. Run 'workspace-refs sync' to update.")
        return 1
    print("References are up to date." if check else "Sync complete.")
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    layout = _layout_from_args(args)
    report = sync_workspace(layout, check=bool(args.check))
    return _print_sync_report(report, check=bool(args.check))


def cmd_create(args: argparse.Namespace) -> int:
    layout = _layout_from_args(args)
    print(f"Creating package @{args.domain}/{args.package}...")
    created = create_package(layout, args.domain, args.package, install=not args.no_install)
    if created.sync_report is not None:
        print(f"Synced references for {len(created.sync_report.packages)} package(s)")
        _print_warnings(created.sync_report.warnings)
    _print_warnings(created.warnings)

    print(f"Package {created.scoped_name} created at {created.path}")
    print("You can now:")
    print(f"  1. Add code to {created.path / 'src' / 'index.ts'}")
    print(f"  2. Add internal dependencies with a '{layout.workspace_protocol}' specifier")
    print("  3. Run 'workspace-refs sync' after changing dependencies")
    return 0


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        type=Path,
        default=Path("."),
        help="Workspace root (defaults to current directory).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a workspace-refs.yaml file (defaults to <root>/workspace-refs.yaml if present).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workspace-refs",
        description="Keep build-configuration project references in sync with workspace dependencies.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_sync = sub.add_parser("sync", help="Regenerate package, root and bridge reference lists.")
    _add_common_args(p_sync)
    p_sync.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 if any reference list is out of date; do not write.",
    )
    p_sync.set_defaults(func=cmd_sync)

    p_create = sub.add_parser("create", help="Create a new package from the workspace templates.")
    p_create.add_argument("domain")
    p_create.add_argument("package")
    _add_common_args(p_create)
    p_create.add_argument("--no-install", action="store_true", help="Skip the install command.")
    p_create.set_defaults(func=cmd_create)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except WorkspaceRefsError as exc:
        _eprint(f"ERROR: {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
