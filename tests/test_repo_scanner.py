"""Tests for apidoc.repo_scanner."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from apidoc.errors import AccessError
from apidoc.models import ACCESS_ERROR
from apidoc.repo_scanner import RepoScanner, build_ignore_rule, detect_language
from tests._fixtures.repo_builder import RepoBuilder


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_scan_yields_supported_sources_in_sorted_order(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/b.py": "def b():\n    pass\n",
            "src/a.py": "def a():\n    pass\n",
            "java/com/demo/User.java": "package com.demo;\nclass User {}\n",
            "README.md": "# Readme\n",
            ".venv/lib/site.py": "x = 1\n",
        }
    )

    sources = repo_builder.scan()

    assert [source.path for source in sources] == [
        "java/com/demo/User.java",
        "src/a.py",
        "src/b.py",
    ]
    assert sources[0].language == "Java"
    assert sources[1].language == "Python"
    assert sources[1].content.startswith("def a")


def test_scan_is_lazy_and_restartable(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"mod.py": "X: int = 1\n"})
    scanner = RepoScanner()

    iterator = scanner.scan(repo_builder.path())
    assert not isinstance(iterator, list)
    first = list(iterator)
    second = list(scanner.scan(repo_builder.path()))

    assert [source.path for source in first] == [source.path for source in second] == ["mod.py"]


def test_scan_rejects_missing_root(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(AccessError) as excinfo:
        RepoScanner().scan(missing)

    assert str(missing) in str(excinfo.value)
    assert excinfo.value.path == str(missing)


def test_scan_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "file.py"
    target.write_text("x = 1\n", encoding="utf-8")

    with pytest.raises(AccessError):
        RepoScanner().scan(target)


def test_scan_respects_gitignore_and_excludes(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()

    _write(repo_root / ".gitignore", "generated/\n*_pb2.py\n")
    _write(repo_root / "src" / "main.py", "def main():\n    pass\n")
    _write(repo_root / "src" / "api_pb2.py", "X = 1\n")
    _write(repo_root / "generated" / "client.py", "def c():\n    pass\n")
    _write(repo_root / "sandbox" / "scratch.py", "def s():\n    pass\n")

    scanner = RepoScanner(exclude=["sandbox/"])
    paths = [source.path for source in scanner.scan(repo_root)]

    assert paths == ["src/main.py"]


def test_scan_include_globs_match_nested_and_top_level(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "api/routes.py": "def r():\n    pass\n",
            "api/v1/users.py": "def u():\n    pass\n",
            "tools/build.py": "def b():\n    pass\n",
        }
    )

    scanner = RepoScanner(include=["api/**/*.py"])
    paths = [source.path for source in scanner.scan(repo_builder.path())]

    assert paths == ["api/routes.py", "api/v1/users.py"]


def test_scan_records_undecodable_files(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"good.py": "def ok():\n    pass\n"})
    (repo_builder.path() / "bad.py").write_bytes(b"\xff\xfe\x00broken")

    scanner = RepoScanner()
    paths = [source.path for source in scanner.scan(repo_builder.path())]

    assert paths == ["good.py"]
    assert len(scanner.skipped) == 1
    assert scanner.skipped[0].kind == ACCESS_ERROR
    assert scanner.skipped[0].path == "bad.py"


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="permissions are not enforced")
def test_scan_rejects_unreadable_root(tmp_path: Path) -> None:
    root = tmp_path / "locked"
    root.mkdir()
    root.chmod(0)
    try:
        with pytest.raises(AccessError):
            RepoScanner().scan(root)
    finally:
        root.chmod(0o755)


def test_ignore_rule_negation_and_anchoring() -> None:
    anchored = build_ignore_rule("/build")
    assert anchored is not None
    assert anchored.matches("build", True)
    assert not anchored.matches("src/build", True)

    floating = build_ignore_rule("*.gen.py")
    assert floating is not None
    assert floating.matches("pkg/models.gen.py", False)

    assert build_ignore_rule("   ") is None


def test_detect_language_by_suffix() -> None:
    assert detect_language("pkg/mod.py") == "Python"
    assert detect_language("Main.JAVA") == "Java"
    assert detect_language("notes.txt") is None
