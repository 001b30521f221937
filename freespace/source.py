"""Source identifiers for module installation and installed-module provenance."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

import tomli_w

_GITHUB_PREFIX = "github:"


class SourceError(ValueError):
    """A source identifier could not be parsed."""

    def __init__(self) -> None:
        super().__init__(
            "invalid github format: expected github:owner/repo[@ref][#module]"
        )


@dataclass(frozen=True)
class GitHubSource:
    """A module source hosted in a GitHub repository."""

    owner: str
    repo: str
    git_ref: str | None = None
    module_path: str | None = None

    def clone_urls(self) -> list[str]:
        """Clone URLs in order of preference: HTTPS first, SSH as fallback."""
        return [
            f"https://github.com/{self.owner}/{self.repo}.git",
            f"[email]:{self.owner}/{self.repo}.git",
        ]

    def repository_string(self) -> str:
        """Repository string recorded for provenance."""
        return f"github:{self.owner}/{self.repo}"

    def default_dir_name(self) -> str:
        """Directory name to install into."""
        return self.repo

    def __str__(self) -> str:
        text = f"github:{self.owner}/{self.repo}"
        if self.git_ref is not None:
            text += f"@{self.git_ref}"
        if self.module_path is not None:
            text += f"#{self.module_path}"
        return text


@dataclass(frozen=True)
class LocalSource:
    """A module source on the local filesystem."""

    path: Path

    # Local sources have no git ref and carry no module filter.
    git_ref: ClassVar[None] = None
    module_path: ClassVar[None] = None

    def clone_urls(self) -> list[str]:
        """Local sources are never cloned."""
        return []

    def repository_string(self) -> str:
        """Repository string recorded for provenance."""
        return f"local:{self.path}"

    def default_dir_name(self) -> str:
        """Directory name to install into: the last path component."""
        name = self.path.name
        if not name or name == "..":
            return "unknown"
        return name

    def __str__(self) -> str:
        return str(self.path)


Source = GitHubSource | LocalSource


def parse_source(text: str) -> Source:
    """Parse a source string.

    ``github:owner/repo[@ref][#module]`` gives a GitHubSource; anything else
    is taken as a filesystem path.
    """
    if text.startswith(_GITHUB_PREFIX):
        return _parse_github(text[len(_GITHUB_PREFIX):])
    return LocalSource(Path(text))


def _parse_github(rest: str) -> GitHubSource:
    repo_part, hash_sep, module = rest.partition("#")
    if hash_sep and not module:
        raise SourceError()
    module_path = module if hash_sep else None

    owner_repo, at_sep, ref = repo_part.partition("@")
    if at_sep and not ref:
        raise SourceError()
    git_ref = ref if at_sep else None

    owner, slash, repo = owner_repo.partition("/")
    if not slash or not owner or not repo:
        raise SourceError()

    return GitHubSource(owner=owner, repo=repo, git_ref=git_ref, module_path=module_path)


@dataclass
class SourceInfo:
    """Provenance written to ``source.toml`` next to an installed module."""

    repository: str
    git_ref: str | None
    commit: str
    path: str | None
    installed_at: int

    def to_toml(self) -> str:
        """Serialise as a TOML document with a ``[source]`` table."""
        table: dict[str, object] = {"repository": self.repository}
        if self.git_ref is not None:
            table["git_ref"] = self.git_ref
        table["commit"] = self.commit
        if self.path is not None:
            table["path"] = self.path
        table["installed_at"] = self.installed_at
        return tomli_w.dumps({"source": table})

    @classmethod
    def from_toml(cls, text: str) -> SourceInfo:
        """Parse a ``source.toml`` document; raises ValueError if it is malformed."""
        document = tomllib.loads(text)
        table = document.get("source")
        if not isinstance(table, dict):
            raise ValueError("missing [source] table")

        def required_str(key: str) -> str:
            value = table.get(key)
            if not isinstance(value, str):
                raise ValueError(f"source.{key} must be a string")
            return value

        def optional_str(key: str) -> str | None:
            value = table.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"source.{key} must be a string")
            return value

        installed_at = table.get("installed_at")
        if (
            not isinstance(installed_at, int)
            or isinstance(installed_at, bool)
            or installed_at < 0
        ):
            raise ValueError("source.installed_at must be a non-negative integer")

        return cls(
            repository=required_str("repository"),
            git_ref=optional_str("git_ref"),
            commit=required_str("commit"),
            path=optional_str("path"),
            installed_at=installed_at,
        )