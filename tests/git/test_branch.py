"""Tests for git branch lookup and version labels."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from apidoc.git import GitBranchReader, find_git_root, format_version, read_head, resolve_version


def _repo(tmp_path: Path, head: str) -> Path:
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / ".git" / "HEAD").write_text(head + "\n", encoding="utf-8")
    return repo


def test_read_head_returns_branch_name(tmp_path: Path) -> None:
    repo = _repo(tmp_path, "ref: refs/heads/release/2.1")
    assert read_head(repo) == "release/2.1"


def test_read_head_returns_short_hash_when_detached(tmp_path: Path) -> None:
    repo = _repo(tmp_path, "0123456789abcdef0123456789abcdef01234567")
    assert read_head(repo) == "0123456"


def test_read_head_follows_gitdir_pointer(tmp_path: Path) -> None:
    real = tmp_path / "modules" / "child"
    real.mkdir(parents=True)
    (real / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    repo = tmp_path / "child"
    repo.mkdir()
    (repo / ".git").write_text("gitdir: ../modules/child\n", encoding="utf-8")

    assert read_head(repo) == "main"


def test_find_git_root_walks_upwards(tmp_path: Path) -> None:
    repo = _repo(tmp_path, "ref: refs/heads/main")
    nested = repo / "src" / "pkg"
    nested.mkdir(parents=True)

    assert find_git_root(nested) == repo.resolve()
    assert find_git_root(tmp_path) is None


def test_reader_falls_back_to_git_cli(tmp_path: Path) -> None:
    repo = _repo(tmp_path, "garbage")
    calls = []

    def runner(args, cwd):
        calls.append((list(args), Path(cwd)))
        return "feature/login\n"

    branch = GitBranchReader(runner=runner).current_branch(repo)

    assert branch == "feature/login"
    assert calls == [(["git", "rev-parse", "--abbrev-ref", "HEAD"], repo.resolve())]


def test_reader_returns_none_when_git_fails(tmp_path: Path) -> None:
    repo = _repo(tmp_path, "garbage")

    def runner(args, cwd):
        raise subprocess.CalledProcessError(128, list(args))

    assert GitBranchReader(runner=runner).current_branch(repo) is None


def test_reader_outside_repository(tmp_path: Path) -> None:
    def runner(args, cwd):  # pragma: no cover - must not be called
        raise AssertionError("runner should not be used")

    assert GitBranchReader(runner=runner).current_branch(tmp_path) is None


@pytest.mark.parametrize(
    ("branch", "expected"),
    [
        ("1.2.0", "V1.2.0"),
        ("v1.2.0", "V1.2.0"),
        ("V3.1", "V3.1"),
        ("release/2.0", "V2.0"),
        ("main", "main"),
        (None, "1.0.0"),
        ("", "1.0.0"),
    ],
)
def test_format_version(branch, expected) -> None:
    assert format_version(branch, "1.0.0") == expected


def test_resolve_version_uses_reader(tmp_path: Path) -> None:
    repo = _repo(tmp_path, "ref: refs/heads/v4.0.1")
    assert resolve_version(repo, "dev") == "V4.0.1"
    assert resolve_version(tmp_path / "elsewhere", "dev") == "dev"
