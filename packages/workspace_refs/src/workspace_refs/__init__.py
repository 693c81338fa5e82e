from workspace_refs.config import (
    WorkspaceConfigError,
    WorkspaceLayout,
    WorkspaceRefsError,
    default_layout,
    load_layout,
)
from workspace_refs.cycles import cycle_key, find_cycles, format_cycle
from workspace_refs.discovery import (
    DiscoveryResult,
    WorkspacePackage,
    discover_packages,
    iter_package_dirs,
)
from workspace_refs.graph import DependencyGraph
from workspace_refs.manifest import ManifestError, read_manifest, validate_manifest
from workspace_refs.references import (
    ConfigFileError,
    SyncOutcome,
    package_reference_paths,
    sync_package_references,
    sync_root_references,
    workspace_reference_paths,
)
from workspace_refs.scaffold import CreatedPackage, ScaffoldError, create_package
from workspace_refs.sync import SyncReport, sync_workspace

__all__ = [
    "ConfigFileError",
    "CreatedPackage",
    "DependencyGraph",
    "DiscoveryResult",
    "ManifestError",
    "ScaffoldError",
    "SyncOutcome",
    "SyncReport",
    "WorkspaceConfigError",
    "WorkspaceLayout",
    "WorkspacePackage",
    "WorkspaceRefsError",
    "create_package",
    "cycle_key",
    "default_layout",
    "discover_packages",
    "find_cycles",
    "format_cycle",
    "iter_package_dirs",
    "load_layout",
    "package_reference_paths",
    "read_manifest",
    "sync_package_references",
    "sync_root_references",
    "sync_workspace",
    "validate_manifest",
    "workspace_reference_paths",
]
