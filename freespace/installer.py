"""Installing module directories: layout detection, copying and provenance."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from freespace.manifest import ManifestError, Module
from freespace.source import SourceInfo

_MANIFEST = "module.toml"
_SOURCE_FILE = "source.toml"
_GIT_DIR = ".git"


class InstallError(Exception):
    """Base class for every failure while installing modules."""


class GitNotFoundError(InstallError):
    """git could not be run."""

    def __init__(self) -> None:
        super().__init__("git is not installed or not in PATH")


class CloneFailedError(InstallError):
    """A git clone did not succeed."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"git clone failed: {reason}")
        self.reason = reason


class NoModulesFoundError(InstallError):
    """The source holds no module.toml at its root or in any subdirectory."""

    def __init__(self) -> None:
        super().__init__("no modules found in source")


class ModuleNotInRepoError(InstallError):
    """The requested module is not one of the modules in the source."""

    def __init__(self, name: str, available: str) -> None:
        super().__init__(
            f"module '{name}' not found in source. Available: {available}"
        )
        self.name = name
        self.available = available


class ManifestParseError(InstallError):
    """A module.toml in the source could not be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"failed to parse module.toml in '{path}': {reason}")
        self.path = path
        self.reason = reason


class PathNotFoundError(InstallError):
    """A local source path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"local path does not exist: {path}")
        self.path = path


class InstallCancelledError(InstallError):
    """The user cancelled the installation."""

    def __init__(self) -> None:
        super().__init__("user cancelled installation")


@dataclass
class InstallResult:
    """Outcome of installing one module."""

    name: str
    version: str
    installed_to: Path
    was_upgrade: bool


@dataclass
class SingleModule:
    """Source layout with module.toml at its root."""

    module: Module


@dataclass
class MultiModule:
    """Source layout with one module per subdirectory, sorted by directory name."""

    modules: list[tuple[str, Module]]


RepoLayout = SingleModule | MultiModule


def detect_layout(source_dir: Path | str) -> RepoLayout:
    """Work out whether a directory holds a single module or several.

    Raises NoModulesFoundError if there is none, ManifestParseError if a
    manifest is invalid.
    """
    directory = Path(source_dir)
    root_manifest = directory / _MANIFEST
    if root_manifest.exists():
        return SingleModule(_parse_manifest(root_manifest))

    try:
        with os.scandir(directory) as entries:
            children = [Path(entry.path) for entry in entries]
    except OSError as exc:
        raise InstallError(f"failed to read source dir: {exc}") from exc

    modules: list[tuple[str, Module]] = []
    for child in children:
        if not child.is_dir() or child.name == _GIT_DIR:
            continue
        manifest_path = child / _MANIFEST
        if manifest_path.exists():
            modules.append((child.name, _parse_manifest(manifest_path)))

    if not modules:
        raise NoModulesFoundError()

    modules.sort(key=lambda pair: pair[0])
    return MultiModule(modules)


def _parse_manifest(path: Path) -> Module:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestParseError(str(path), str(exc)) from exc
    try:
        return Module.parse(text)
    except ManifestError as exc:
        raise ManifestParseError(str(path), str(exc)) from exc


def available_module_names(source_dir: Path | str) -> str:
    """Comma-separated names of subdirectories holding a module.toml."""
    directory = Path(source_dir)
    try:
        with os.scandir(directory) as entries:
            children = sorted(Path(entry.path) for entry in entries)
    except OSError:
        return "(unable to list)"
    return ", ".join(
        child.name
        for child in children
        if child.is_dir() and (child / _MANIFEST).exists()
    )


def install_module_dir(
    src: Path | str,
    dest: Path | str,
    source_info: SourceInfo,
    module: Module,
) -> InstallResult:
    """Copy a module directory to ``dest`` and record its provenance.

    An existing installation at ``dest`` is replaced.
    """
    src = Path(src)
    dest = Path(dest)
    was_upgrade = dest.exists()

    if was_upgrade:
        try:
            shutil.rmtree(dest)
        except OSError as exc:
            raise InstallError(
                f"failed to remove existing module at {dest}: {exc}"
            ) from exc

    try:
        copy_dir_recursive(src, dest)
    except OSError as exc:
        raise InstallError(f"failed to copy module to {dest}: {exc}") from exc

    try:
        (dest / _SOURCE_FILE).write_text(source_info.to_toml(), encoding="utf-8")
    except OSError as exc:
        raise InstallError(f"failed to write source.toml: {exc}") from exc

    return InstallResult(
        name=module.name,
        version=module.version,
        installed_to=dest,
        was_upgrade=was_upgrade,
    )


def copy_dir_recursive(src: Path | str, dst: Path | str) -> None:
    """Copy a directory tree, leaving out any ``.git`` directory."""
    src = Path(src)
    dst = Path(dst)
    dst.mkdir(parents=True, exist_ok=True)
    for child in src.iterdir():
        if child.name == _GIT_DIR:
            continue
        target = dst / child.name
        if child.is_dir():
            copy_dir_recursive(child, target)
        else:
            shutil.copy(child, target)


def read_source_info(module_dir: Path | str) -> SourceInfo | None:
    """Read source.toml from an installed module; None if absent or invalid."""
    path = Path(module_dir) / _SOURCE_FILE
    try:
        return SourceInfo.from_toml(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError):
        return None