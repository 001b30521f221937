"""Module discovery and loading from module directories."""

from __future__ import annotations

import os
import platform
from pathlib import Path

from freespace.manifest import ManifestError, Module

_PLATFORM_NAMES = {"darwin": "macos", "linux": "linux", "windows": "windows"}


def load_all_modules(
    default_dir: Path | str | None, extra_dirs: list[str]
) -> tuple[list[tuple[Module, Path]], list[str]]:
    """Load modules from the default directory and every extra directory.

    The default directory is created if it does not exist. Returns the
    loaded ``(module, manifest_path)`` pairs and any warnings.
    """
    modules: list[tuple[Module, Path]] = []
    warnings: list[str] = []

    if default_dir is not None:
        directory = Path(default_dir)
        if not directory.exists():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                warnings.append(
                    f"Could not create default modules directory {directory}: {exc}"
                )
        if directory.is_dir():
            found, found_warnings = load_builtin_modules(directory)
            modules.extend(found)
            warnings.extend(found_warnings)

    for dir_str in extra_dirs:
        directory = expand_tilde(dir_str)
        if not directory.is_dir():
            warnings.append(f"Module directory does not exist: {directory}")
            continue
        found, found_warnings = load_builtin_modules(directory)
        modules.extend(found)
        warnings.extend(found_warnings)

    return modules, warnings


def expand_tilde(path: str) -> Path:
    """Expand a leading ``~`` or ``~/`` to the user's home directory."""
    if path == "~" or path.startswith("~/"):
        try:
            home = Path.home()
        except RuntimeError:
            return Path(path)
        return home if path == "~" else home / path[2:]
    return Path(path)


def load_builtin_modules(
    modules_dir: Path | str,
) -> tuple[list[tuple[Module, Path]], list[str]]:
    """Load every module in subdirectories of ``modules_dir`` holding a module.toml.

    Modules for other platforms are skipped; unreadable or invalid
    manifests become warnings instead of failing the whole load.
    """
    directory = Path(modules_dir)
    modules: list[tuple[Module, Path]] = []
    warnings: list[str] = []

    try:
        with os.scandir(directory) as entries:
            subdirs = sorted(Path(entry.path) for entry in entries)
    except OSError as exc:
        warnings.append(f"Could not read modules directory {directory}: {exc}")
        return modules, warnings

    platform_name = current_platform()

    for subdir in subdirs:
        if not subdir.is_dir():
            continue
        manifest_path = subdir / "module.toml"
        if not manifest_path.exists():
            continue
        try:
            module = Module.parse(manifest_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ManifestError) as exc:
            warnings.append(f"Failed to load module from {manifest_path}: {exc}")
            continue
        if platform_name in module.platforms:
            modules.append((module, manifest_path))

    return modules, warnings


def current_platform() -> str:
    """Return the platform name used in module manifests ("macos", "linux", ...)."""
    system = platform.system().lower()
    return _PLATFORM_NAMES.get(system, system)