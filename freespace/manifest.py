"""Module manifest (``module.toml``) parsing and validation."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from typing import Any

_ID_PATTERN = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")


class ManifestError(ValueError):
    """A module manifest is malformed or fails validation."""


@dataclass
class Target:
    """A target that a module scans.

    Each entry in ``paths`` is either a fixed path (``~`` and glob ``*``
    allowed) or ``**/dirname`` for a recursive local search.
    """

    paths: list[str]
    description: str | None = None


@dataclass
class Module:
    """A parsed and validated module manifest."""

    id: str
    name: str
    version: str
    description: str
    author: str
    platforms: list[str]
    tags: list[str] = field(default_factory=list)
    targets: list[Target] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> Module:
        """Parse a manifest from TOML text and validate it."""
        try:
            document = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ManifestError(str(exc)) from exc

        module_id = _required_str(document, "id")
        validate_id(module_id)

        raw_targets = document.get("targets")
        if raw_targets is None:
            raise ManifestError("missing field `targets`")
        if not isinstance(raw_targets, list):
            raise ManifestError("field `targets` must be an array of tables")

        return cls(
            id=module_id,
            name=_required_str(document, "name"),
            version=_required_str(document, "version"),
            description=_required_str(document, "description"),
            author=_required_str(document, "author"),
            platforms=_str_list(document, "platforms", required=True),
            tags=_str_list(document, "tags", required=False),
            targets=[_parse_target(raw) for raw in raw_targets],
        )


def validate_id(module_id: str) -> None:
    """Check that a module id is kebab-case; raise ManifestError if not."""
    if not module_id:
        raise ManifestError("module id must not be empty")
    if not _ID_PATTERN.fullmatch(module_id):
        raise ManifestError(
            f"module id '{module_id}' is invalid: must be kebab-case "
            '(e.g. "docker", "node-modules")'
        )


def _required_str(table: dict[str, Any], key: str) -> str:
    if key not in table:
        raise ManifestError(f"missing field `{key}`")
    value = table[key]
    if not isinstance(value, str):
        raise ManifestError(f"field `{key}` must be a string")
    return value


def _optional_str(table: dict[str, Any], key: str) -> str | None:
    value = table.get(key)
    if value is not None and not isinstance(value, str):
        raise ManifestError(f"field `{key}` must be a string")
    return value


def _str_list(table: dict[str, Any], key: str, *, required: bool) -> list[str]:
    if key not in table:
        if required:
            raise ManifestError(f"missing field `{key}`")
        return []
    value = table[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestError(f"field `{key}` must be an array of strings")
    return list(value)


def _parse_target(raw: Any) -> Target:
    if not isinstance(raw, dict):
        raise ManifestError("each target must be a table")

    path = _optional_str(raw, "path")
    has_paths = raw.get("paths") is not None
    paths = _str_list(raw, "paths", required=False) if has_paths else None

    if path is not None and paths is not None:
        raise ManifestError("target must specify either 'path' or 'paths', not both")
    if path is None and paths is None:
        raise ManifestError("target must specify either 'path' or 'paths'")
    if paths is None:
        paths = [path]
    elif not paths:
        raise ManifestError("target paths array must not be empty")

    for pattern in paths:
        _validate_target_pattern(pattern)

    return Target(paths=paths, description=_optional_str(raw, "description"))


def _validate_target_pattern(pattern: str) -> None:
    components = re.split(r"[\\/]", pattern)
    if ".." in components:
        raise ManifestError(
            f"target pattern '{pattern}' must not contain '..' path components"
        )