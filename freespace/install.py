"""Installing modules from GitHub repositories and local directories."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
import time
from pathlib import Path

from freespace.install_select import SelectionCancelled, run_install_select
from freespace.installer import (
    CloneFailedError,
    GitNotFoundError,
    InstallCancelledError,
    InstallError,
    InstallResult,
    ModuleNotInRepoError,
    MultiModule,
    PathNotFoundError,
    SingleModule,
    available_module_names,
    detect_layout,
    install_module_dir,
)
from freespace.manifest import Module
from freespace.source import (
    GitHubSource,
    LocalSource,
    Source,
    SourceError,
    SourceInfo,
    parse_source,
)


def install(source_str: str, modules_dir: Path | str) -> list[InstallResult]:
    """Install modules named by a source string into ``modules_dir``.

    Returns the modules that were installed; raises InstallError on failure.
    """
    try:
        source = parse_source(source_str)
    except SourceError as exc:
        raise InstallError(str(exc)) from exc

    modules_dir = Path(modules_dir)
    if isinstance(source, GitHubSource):
        return install_from_github(source, modules_dir)
    return install_from_local(source, source.path, modules_dir)


def install_from_github(
    source: GitHubSource, modules_dir: Path | str
) -> list[InstallResult]:
    """Clone a GitHub repository, install from it, then remove the clone."""
    check_git_available()
    temp_dir, commit_sha = clone_repo(source)
    try:
        return install_from_dir(source, temp_dir, commit_sha, modules_dir)
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def install_from_local(
    source: Source, path: Path | str, modules_dir: Path | str
) -> list[InstallResult]:
    """Install from a local directory by symlinking it into ``modules_dir``.

    Changes to the source directory show up at once, without reinstalling.
    """
    path = Path(path)
    modules_dir = Path(modules_dir)
    try:
        resolved = path if path.is_absolute() else Path.cwd() / path
    except OSError as exc:
        raise InstallError(f"failed to get cwd: {exc}") from exc

    if not resolved.exists():
        raise PathNotFoundError(str(resolved))

    layout = detect_layout(resolved)

    if isinstance(layout, SingleModule):
        dest = modules_dir / source.default_dir_name()
        symlink_module(resolved, dest)
        return [_linked_result(layout.module, dest)]

    chosen = _choose_modules(layout, source, resolved)
    results = []
    for dir_name, module in chosen:
        dest = modules_dir / dir_name
        symlink_module(resolved / dir_name, dest)
        results.append(_linked_result(module, dest))
    return results


def install_from_dir(
    source: Source,
    source_dir: Path | str,
    commit_sha: str | None,
    modules_dir: Path | str,
) -> list[InstallResult]:
    """Copy the module or modules found in ``source_dir`` into ``modules_dir``."""
    source_dir = Path(source_dir)
    modules_dir = Path(modules_dir)
    layout = detect_layout(source_dir)

    if isinstance(layout, SingleModule):
        info = make_source_info(source, commit_sha, None)
        dest = modules_dir / source.default_dir_name()
        return [install_module_dir(source_dir, dest, info, layout.module)]

    results = []
    for dir_name, module in _choose_modules(layout, source, source_dir):
        info = make_source_info(source, commit_sha, dir_name)
        results.append(
            install_module_dir(
                source_dir / dir_name, modules_dir / dir_name, info, module
            )
        )
    return results


def _choose_modules(
    layout: MultiModule, source: Source, source_dir: Path
) -> list[tuple[str, Module]]:
    """The requested module, or those the user picks interactively."""
    requested = source.module_path
    if requested is not None:
        for dir_name, module in layout.modules:
            if dir_name == requested:
                return [(dir_name, module)]
        raise ModuleNotInRepoError(requested, available_module_names(source_dir))

    try:
        selected = run_install_select(layout.modules)
    except SelectionCancelled as exc:
        raise InstallCancelledError() from exc
    except Exception as exc:
        raise InstallError(str(exc)) from exc
    if not selected:
        raise InstallCancelledError()
    return [layout.modules[index] for index in selected]


def _linked_result(module: Module, dest: Path) -> InstallResult:
    return InstallResult(
        name=module.name,
        version=module.version,
        installed_to=dest,
        was_upgrade=False,
    )


def symlink_module(src: Path | str, dest: Path | str) -> None:
    """Point ``dest`` at ``src`` with a symlink, replacing whatever was there."""
    src = Path(src)
    dest = Path(dest)
    if dest.exists() or dest.is_symlink():
        try:
            if dest.is_dir() and not dest.is_symlink():
                shutil.rmtree(dest)
            else:
                dest.unlink()
        except OSError as exc:
            raise InstallError(
                f"failed to remove existing module at {dest}: {exc}"
            ) from exc
    try:
        os.symlink(src, dest, target_is_directory=True)
    except OSError as exc:
        raise InstallError(f"failed to symlink {dest} -> {src}: {exc}") from exc


def check_git_available() -> None:
    """Raise GitNotFoundError unless git can be run."""
    try:
        subprocess.run(["git", "--version"], capture_output=True, check=False)
    except OSError as exc:
        raise GitNotFoundError() from exc


def clone_repo(source: Source) -> tuple[Path, str]:
    """Shallow-clone a source into a temporary directory.

    Tries each clone URL in turn (HTTPS first, SSH as fallback) and returns
    the clone's directory and its HEAD commit.
    """
    urls = source.clone_urls()
    if not urls:
        raise CloneFailedError("not a GitHub source")

    temp_dir = Path(tempfile.gettempdir()) / (
        f"freespace-install-{source.default_dir_name()}"
    )
    last_error: CloneFailedError | None = None

    for url in urls:
        if temp_dir.exists():
            shutil.rmtree(temp_dir, ignore_errors=True)

        command = ["git", "clone", "--depth", "1"]
        if source.git_ref is not None:
            command += ["--branch", source.git_ref]
        command += [url, str(temp_dir)]

        try:
            output = subprocess.run(command, capture_output=True, check=False)
        except OSError as exc:
            last_error = CloneFailedError(f"failed to run git: {exc}")
            continue

        if output.returncode != 0:
            stderr = output.stderr.decode("utf-8", errors="replace")
            last_error = CloneFailedError(stderr.strip())
            continue

        try:
            rev = subprocess.run(
                ["git", "rev-parse", "HEAD"],
                cwd=temp_dir,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise CloneFailedError(f"failed to get commit SHA: {exc}") from exc
        commit_sha = rev.stdout.decode("utf-8", errors="replace").strip()
        return temp_dir, commit_sha

    raise last_error or CloneFailedError("all clone URLs failed")


def make_source_info(
    source: Source, commit_sha: str | None, path: str | None
) -> SourceInfo:
    """Provenance for a module installed now from ``source``."""
    return SourceInfo(
        repository=source.repository_string(),
        git_ref=source.git_ref,
        commit=commit_sha or "",
        path=path,
        installed_at=int(time.time()),
    )