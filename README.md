# freespace

A library for the modules that describe disk-space consumers. Each kind of
consumer, such as a package-manager cache or a build-artifact directory, is
described by a *module*. A module is a directory that holds a `module.toml`
manifest. This package parses and validates those manifests, loads the ones
that apply to the current platform, and installs new modules from GitHub
repositories or local directories.

## Module manifests

```toml
id = "npm-cache"
name = "npm-cache"
version = "1.0.0"
description = "npm download cache"
author = "tester"
platforms = ["macos", "linux"]
tags = ["cache"]

[[targets]]
path = "~/.npm/_cacache"
description = "Cached package tarballs"

[[targets]]
paths = ["**/node_modules"]
```

`id`, `name`, `version`, `description`, `author`, `platforms` and `targets`
are required. `tags` is optional and defaults to an empty list. Each target
gives either `path` or `paths`, but not both, and a `paths` array must not be
empty. A module `id` must be kebab-case (`docker`, `node-modules`, `xcode-16`).
Target patterns with a `..` component are rejected.

```python
from pathlib import Path
from freespace.manifest import Module, ManifestError, validate_id

try:
    module = Module.parse(Path("module.toml").read_text())
except ManifestError as exc:
    print("invalid manifest:", exc)
else:
    print(module.id, [target.paths for target in module.targets])

validate_id("node-modules")   # passes
validate_id("Node Modules")   # raises ManifestError
```

## Loading modules

```python
from pathlib import Path
from freespace.manager import load_all_modules

modules, warnings = load_all_modules(
    Path.home() / ".config" / "freespace" / "modules",
    ["~/my-modules"],
)
for module, manifest_path in modules:
    print(module.name, manifest_path)
for warning in warnings:
    print("warning:", warning)
```

- The default directory is created if it is missing.
- Extra directories may start with `~`; a missing one gives a warning.
- Only subdirectories that hold a `module.toml` are looked at.
- Modules whose `platforms` list does not include `current_platform()`
  (`"macos"`, `"linux"`, `"windows"`, ...) are skipped.
- A manifest that cannot be read or parsed gives a warning and does not stop
  the load.

`load_builtin_modules(directory)` does the same for a single directory.

## Installing modules

Sources are written as `github:owner/repo[@ref][#module]` or as a local path.
`freespace.source.parse_source` turns such a string into a `GitHubSource` or a
`LocalSource`, and raises `SourceError` for a malformed `github:` string.

```python
from pathlib import Path
from freespace.install import install
from freespace.installer import InstallError

try:
    results = install("github:owner/repo@v1.0.0#docker", Path("modules"))
except InstallError as exc:
    print("install failed:", exc)
else:
    for result in results:
        action = "upgraded" if result.was_upgrade else "installed"
        print(f"{action} {result.name} {result.version} -> {result.installed_to}")
```

- A GitHub source needs `git`. The repository is shallow-cloned into a
  temporary directory, trying the HTTPS URL first and then the fallback URL.
  The module is copied into the modules directory without its `.git` folder,
  and the clone is removed afterwards. A `source.toml` file is written next to
  the module to record the repository, ref, commit, module path and install
  time. `freespace.installer.read_source_info` reads it back and returns
  `None` if it is missing or invalid.
- A local source is linked, not copied. A symlink in the modules directory
  points at the source, so edits to the source take effect at once. Anything
  already at the link's location is replaced.
- A source with `module.toml` at its root is one module, installed under the
  repository or directory name. Otherwise every subdirectory that holds a
  `module.toml` is a module, installed under its directory name.
- With several modules and no `#module` given, an interactive curses picker
  (`freespace.install_select.run_install_select`) asks which ones to install.
  All are selected at first. Use space to toggle, `a` to select all, `n` to
  select none, `j`/`k` or the arrow keys (also Ctrl+N/Ctrl+P) to move, and
  Enter to confirm. Esc, `q` or Ctrl+C cancels, as does confirming with
  nothing selected. Both raise `InstallCancelledError`.

Every failure is raised as a subclass of `InstallError`: `GitNotFoundError`,
`CloneFailedError`, `NoModulesFoundError`, `ModuleNotInRepoError`,
`ManifestParseError`, `PathNotFoundError` or `InstallCancelledError`.

## Display helpers

```python
from freespace.sizefmt import format_size, format_size_or_placeholder

format_size(847_000_000)          # "847 MB"
format_size(12_300_000_000)       # "12.3 GB"
format_size_or_placeholder(None)  # "..."
```

Sizes use decimal units. Bytes, KB and MB are whole numbers, and GB and TB
have one decimal place.

`freespace.theme.Theme` holds the 256-colour palette and gives `Style` values
for each kind of text. `freespace.widgets` provides `module_icon`,
`checkbox_str`, `keybinding_bar` and `normalize_emacs_key` for building
terminal screens.

## What this package does not do

The package works with modules, not with the disk space they describe. It does
not scan targets, measure directory sizes, or move anything to the trash or
delete it. Apart from the module picker used during installation, it has no
interactive browsing screen, and it installs no command-line program. Use it
from Python.