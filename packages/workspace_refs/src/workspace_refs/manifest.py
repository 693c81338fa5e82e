from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

DEPENDENCY_SECTIONS: tuple[str, ...] = ("dependencies", "devDependencies", "peerDependencies")

_DEPENDENCY_MAP_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {"type": "string"},
}

MANIFEST_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1, "pattern": r"\S"},
        **{section: _DEPENDENCY_MAP_SCHEMA for section in DEPENDENCY_SECTIONS},
    },
}


class ManifestError(ValueError):
    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class Manifest:
    name: str
    data: dict[str, Any]
    internal_dependencies: tuple[str, ...]


def _describe_location(parts: list[str | int]) -> str:
    if len(parts) == 2 and parts[0] in DEPENDENCY_SECTIONS:
        return f"{parts[0]}[{parts[1]!r}]"
    path = "$"
    for part in parts:
        path += f"[{part!r}]" if isinstance(part, int) else f".{part}"
    return path


def validate_manifest(data: Any, *, source: Path | None = None) -> list[str]:
    """Return one message per schema violation, prefixed with ``source`` when given.

    Entries of a dependency section are named as ``<section>['<dependency>']``.
    """

    validator = Draft202012Validator(MANIFEST_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: str(e.path))
    prefix = f"{source}: " if source is not None else ""
    return [f"{prefix}{_describe_location(list(error.path))}: {error.message}" for error in errors]


def internal_dependency_names(data: dict[str, Any], *, workspace_protocol: str) -> tuple[str, ...]:
    """Names of dependencies declared with the workspace marker.

    The three sections are merged first, later sections winning on a repeated
    name, so a name only counts when its effective specifier is internal.
    """

    merged: dict[str, str] = {}
    for section in DEPENDENCY_SECTIONS:
        deps = data.get(section)
        if isinstance(deps, dict):
            merged.update(deps)
    return tuple(
        sorted(name for name, spec in merged.items() if spec.startswith(workspace_protocol))
    )


def read_manifest(path: Path, *, workspace_protocol: str) -> Manifest:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Failed to read {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ManifestError(f"Failed to parse {path}: {e}") from e

    errors = validate_manifest(raw, source=path)
    if errors:
        raise ManifestError(f"Invalid manifest {'; '.join(errors)}", errors=errors)

    return Manifest(
        name=raw["name"],
        data=raw,
        internal_dependencies=internal_dependency_names(raw, workspace_protocol=workspace_protocol),
    )
