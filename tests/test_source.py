from pathlib import Path

import pytest

from freespace.source import (
    GitHubSource,
    LocalSource,
    SourceError,
    SourceInfo,
    parse_source,
)


# --- parse_source ---


def test_parse_github_basic():
    src = parse_source("github:user/repo")
    assert isinstance(src, GitHubSource)
    assert src.owner == "user"
    assert src.repo == "repo"
    assert src.git_ref is None
    assert src.module_path is None


def test_parse_github_with_ref():
    src = parse_source("github:user/repo@v1.0.0")
    assert isinstance(src, GitHubSource)
    assert src.git_ref == "v1.0.0"


def test_parse_github_with_module():
    src = parse_source("github:user/repo#my-module")
    assert isinstance(src, GitHubSource)
    assert src.module_path == "my-module"


def test_parse_github_with_ref_and_module():
    src = parse_source("github:user/repo@main#docker")
    assert src == GitHubSource(
        owner="user", repo="repo", git_ref="main", module_path="docker"
    )


def test_parse_local_absolute_path():
    src = parse_source("/tmp/my-module")
    assert isinstance(src, LocalSource)
    assert src.path == Path("/tmp/my-module")


def test_parse_local_relative_path():
    src = parse_source("./modules/test")
    assert isinstance(src, LocalSource)
    assert src.path == Path("./modules/test")


@pytest.mark.parametrize(
    "text",
    [
        "github:user",
        "github:/repo",
        "github:user/",
        "github:user/repo@",
        "github:user/repo#",
    ],
)
def test_parse_github_invalid(text):
    with pytest.raises(SourceError):
        parse_source(text)


def test_source_error_message():
    with pytest.raises(SourceError, match="expected github:owner/repo"):
        parse_source("github:user")


# --- clone_urls ---


def test_clone_urls_github():
    src = parse_source("github:user/repo")
    assert src.clone_urls() == [
        "https://github.com/user/repo.git",
        "[email]:user/repo.git",
    ]


def test_clone_urls_local_is_empty():
    assert parse_source("/tmp/foo").clone_urls() == []


# --- default_dir_name ---


def test_default_dir_name_github():
    assert parse_source("github:user/my-modules").default_dir_name() == "my-modules"


def test_default_dir_name_local():
    assert parse_source("/home/user/my-module").default_dir_name() == "my-module"


def test_default_dir_name_root_is_unknown():
    assert parse_source("/").default_dir_name() == "unknown"


# --- display ---


def test_display_github_full():
    assert str(parse_source("github:user/repo@v1#mod")) == "github:user/repo@v1#mod"


def test_display_local():
    assert str(parse_source("/tmp/test")) == "/tmp/test"


# --- repository_string ---


def test_repository_string_github():
    assert parse_source("github:user/repo@v1#mod").repository_string() == "github:user/repo"


def test_repository_string_local():
    assert parse_source("/tmp/test").repository_string() == "local:/tmp/test"


def test_local_source_has_no_ref_or_module():
    src = parse_source("/tmp/test")
    assert src.git_ref is None
    assert src.module_path is None


# --- SourceInfo ---


def test_source_info_round_trip_full():
    info = SourceInfo(
        repository="github:user/repo",
        git_ref="v1.0",
        commit="abc123",
        path="docker",
        installed_at=1000,
    )
    assert SourceInfo.from_toml(info.to_toml()) == info


def test_source_info_round_trip_optional_missing():
    info = SourceInfo(
        repository="github:user/repo",
        git_ref=None,
        commit="def456",
        path=None,
        installed_at=2000,
    )
    text = info.to_toml()
    assert "git_ref" not in text
    assert "path" not in text
    assert SourceInfo.from_toml(text) == info


def test_source_info_to_toml_has_source_table():
    info = SourceInfo("github:user/repo", None, "abc123", None, 1000)
    assert info.to_toml().startswith("[source]")


def test_source_info_from_toml_valid():
    text = """
[source]
repository = "github:user/repo"
commit = "abc123"
installed_at = 1000
"""
    info = SourceInfo.from_toml(text)
    assert info.repository == "github:user/repo"
    assert info.commit == "abc123"
    assert info.installed_at == 1000
    assert info.git_ref is None


def test_source_info_from_toml_missing_field():
    text = """
[source]
repository = "github:user/repo"
installed_at = 1000
"""
    with pytest.raises(ValueError):
        SourceInfo.from_toml(text)


def test_source_info_from_toml_missing_table():
    with pytest.raises(ValueError):
        SourceInfo.from_toml('repository = "github:user/repo"\n')


def test_source_info_from_toml_invalid_syntax():
    with pytest.raises(ValueError):
        SourceInfo.from_toml("[source\n")


def test_source_info_from_toml_negative_timestamp():
    text = """
[source]
repository = "github:user/repo"
commit = "abc123"
installed_at = -5
"""
    with pytest.raises(ValueError):
        SourceInfo.from_toml(text)