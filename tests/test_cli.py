"""CLI parser behaviour tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from apidoc.cli import _build_parser, main


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger("apidoc")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def _tree(root: Path) -> Path:
    root.mkdir()
    (root / "calc.py").write_text("def add(a: int, b: int) -> int:\n    return a + b\n", encoding="utf-8")
    return root


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "src", "--verbose"])
    assert args.verbose is True
    assert args.path == "src"


def test_cli_collects_repeated_formats() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "-f", "markdown", "--format", "json", "-o", "out"])
    assert args.formats == ["markdown", "json"]
    assert args.output_dir == Path("out")
    assert args.include_private is None


def test_cli_rejects_unknown_format() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["generate", "-f", "pdf"])


def test_generate_prints_to_stdout(tmp_path: Path, capsys) -> None:
    root = _tree(tmp_path / "repo")

    main(["generate", str(root), "-f", "json"])

    data = json.loads(capsys.readouterr().out)
    assert data["modules"]["calc"][0]["signature"] == "add(a: int, b: int) -> int"


def test_generate_writes_output_dir(tmp_path: Path, capsys) -> None:
    root = _tree(tmp_path / "repo")
    out = tmp_path / "out"

    main(["generate", str(root), "-o", str(out), "-f", "markdown", "-f", "html"])

    assert (out / "api-docs.md").exists()
    assert (out / "api-docs.html").exists()
    assert "Documentation written to" in capsys.readouterr().out


def test_generate_uses_explicit_config(tmp_path: Path, capsys) -> None:
    root = _tree(tmp_path / "repo")
    config = tmp_path / "settings.yml"
    config.write_text("formats: [json]\ndoc:\n  title: Calculator\n", encoding="utf-8")

    main(["generate", str(root), "--config", str(config)])

    assert json.loads(capsys.readouterr().out)["info"]["title"] == "Calculator"


def test_generate_missing_path_exits_with_error(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "apidoc generate failed" in capsys.readouterr().err


def test_generate_missing_config_exits_with_error(tmp_path: Path) -> None:
    root = _tree(tmp_path / "repo")

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(root), "--config", str(tmp_path / "absent.yml")])

    assert excinfo.value.code == 1
