"""Tests for apidoc.orchestrator."""

from __future__ import annotations

import json
import threading
import time
from datetime import UTC, datetime
from pathlib import Path

import pytest

from apidoc.config import ApiDocConfig, DocSettings
from apidoc.errors import AccessError, ConfigError, GenerationCancelled
from apidoc.models import DUPLICATE_SYMBOL, PARSE_DIAGNOSTIC, ParseResult, SourceFile
from apidoc.orchestrator import Orchestrator, PipelineState, generate
from apidoc.parsers.base import DeclarationParser
from apidoc.parsers.python import PythonParser


def FIXED_CLOCK() -> datetime:
    return datetime(2024, 5, 6, 12, 0, tzinfo=UTC)


class StubBranchReader:
    """Returns a fixed branch instead of reading git."""

    def __init__(self, branch: str | None) -> None:
        self.branch = branch
        self.calls: list[Path] = []

    def current_branch(self, path):
        self.calls.append(Path(path))
        return self.branch


class SlowFirstParser(DeclarationParser):
    """Python parser whose earliest paths finish last."""

    language = "Python"

    def __init__(self) -> None:
        self.inner = PythonParser()

    def parse(self, source: SourceFile) -> ParseResult:
        index = int(source.path.split("_")[1].split(".")[0])
        time.sleep(0.01 * (5 - index))
        return self.inner.parse(source)


class ExplodingParser(DeclarationParser):
    language = "Python"

    def parse(self, source: SourceFile) -> ParseResult:
        raise ValueError("boom")


def _config(root: Path, **kwargs) -> ApiDocConfig:
    return ApiDocConfig(root=root, **kwargs)


def test_generate_walks_all_states(repo_builder) -> None:
    repo_builder.write({"shop/api.py": "def ping() -> str:\n    return 'pong'\n"})
    orchestrator = Orchestrator(clock=FIXED_CLOCK)

    outputs, diagnostics = orchestrator.generate(repo_builder.path())

    assert orchestrator.state is PipelineState.DONE
    assert orchestrator.history == [
        PipelineState.IDLE,
        PipelineState.SCANNING,
        PipelineState.PARSING,
        PipelineState.BUILDING,
        PipelineState.RENDERING,
        PipelineState.DONE,
    ]
    assert [output.format for output in outputs] == ["markdown"]
    assert "#### `ping() -> str`" in outputs[0].content
    assert "| V1.0.0 |  | 2024-05-06 |" in outputs[0].content
    assert diagnostics == []


def test_duplicate_symbol_across_files_keeps_last(repo_builder) -> None:
    repo_builder.write(
        {
            "a/Foo.java": "package demo;\n\n/** First. */\npublic class Foo {\n    private String stale;\n}\n",
            "b/Foo.java": "package demo;\n\n/** Second. */\npublic class Foo {\n    private String fresh;\n}\n",
        }
    )

    result = Orchestrator(clock=FIXED_CLOCK).generate(repo_builder.path(), _config(repo_builder.path()))

    foo, field = result.model.declarations("demo")
    assert field.qualified_name == "Foo.fresh"
    assert foo.path == "b/Foo.java"
    assert foo.summary == "Second."
    assert [diag.kind for diag in result.diagnostics] == [DUPLICATE_SYMBOL]
    assert result.diagnostics[0].path == "b/Foo.java"


def test_broken_declaration_is_reported_and_valid_one_kept(repo_builder) -> None:
    repo_builder.write(
        {
            "tools.py": """
                def broken(:
                    pass


                def ok():
                    return 1
                """
        }
    )

    result = Orchestrator(clock=FIXED_CLOCK).generate(repo_builder.path(), _config(repo_builder.path()))

    assert [decl.name for decl in result.model.declarations("tools")] == ["ok"]
    assert [diag.kind for diag in result.diagnostics] == [PARSE_DIAGNOSTIC]
    assert result.diagnostics[0].path == "tools.py"


def test_output_order_ignores_parser_completion_order(repo_builder) -> None:
    repo_builder.write({f"pkg/mod_{index}.py": f"def f{index}():\n    pass\n" for index in range(5)})
    config = _config(repo_builder.path(), max_workers=5)

    parallel = Orchestrator(parsers=[SlowFirstParser()], clock=FIXED_CLOCK).generate(repo_builder.path(), config)
    serial = Orchestrator(clock=FIXED_CLOCK).generate(
        repo_builder.path(), _config(repo_builder.path(), max_workers=1)
    )

    assert parallel.model.modules() == [f"pkg.mod_{index}" for index in range(5)]
    assert parallel.outputs == serial.outputs


def test_parser_failure_becomes_diagnostic(repo_builder) -> None:
    repo_builder.write({"svc.py": "def run():\n    pass\n"})

    result = Orchestrator(parsers=[ExplodingParser()], clock=FIXED_CLOCK).generate(
        repo_builder.path(), _config(repo_builder.path())
    )

    assert len(result.outputs) == 1
    assert result.diagnostics[0].kind == PARSE_DIAGNOSTIC
    assert "boom" in result.diagnostics[0].message


def test_missing_root_raises_access_error(tmp_path: Path) -> None:
    orchestrator = Orchestrator()
    missing = tmp_path / "missing"

    with pytest.raises(AccessError):
        orchestrator.generate(missing, _config(missing, output_dir=tmp_path / "out"))

    assert orchestrator.state is PipelineState.ERROR
    assert orchestrator.history[-2:] == [PipelineState.SCANNING, PipelineState.ERROR]
    assert not (tmp_path / "out").exists()


def test_invalid_config_fails_before_scanning(tmp_path: Path) -> None:
    blocker = tmp_path / "file.txt"
    blocker.write_text("x", encoding="utf-8")
    orchestrator = Orchestrator()

    with pytest.raises(ConfigError):
        orchestrator.generate(tmp_path, _config(tmp_path, formats=["pdf"]))
    assert orchestrator.history == [PipelineState.IDLE, PipelineState.ERROR]

    with pytest.raises(ConfigError):
        orchestrator.generate(tmp_path, _config(tmp_path, output_dir=blocker))
    assert orchestrator.history == [PipelineState.IDLE, PipelineState.ERROR]


def test_cancellation_stops_the_run(repo_builder) -> None:
    repo_builder.write({"svc.py": "def run():\n    pass\n"})
    cancel = threading.Event()
    cancel.set()
    orchestrator = Orchestrator()

    with pytest.raises(GenerationCancelled):
        orchestrator.generate(repo_builder.path(), _config(repo_builder.path()), cancel_event=cancel)

    assert orchestrator.state is PipelineState.ERROR


def test_outputs_written_once_per_format(repo_builder, tmp_path: Path) -> None:
    repo_builder.write({"svc.py": "def run():\n    pass\n"})
    out = tmp_path / "docs"
    config = _config(repo_builder.path(), formats=["md", "json", "markdown"], output_dir=out)

    result = Orchestrator(clock=FIXED_CLOCK).generate(repo_builder.path(), config)

    assert [output.format for output in result.outputs] == ["markdown", "json"]
    assert result.written == [out / "api-docs.md", out / "api-docs.json"]
    assert json.loads((out / "api-docs.json").read_text(encoding="utf-8"))["modules"]["svc"][0]["name"] == "run"


def test_config_file_is_loaded_from_root(repo_builder) -> None:
    repo_builder.write(
        {
            ".apidoc.yml": """
                formats: [json]
                doc:
                  title: Billing
                """,
            "billing.py": "def charge():\n    pass\n",
        }
    )

    outputs, _ = generate(repo_builder.path())

    assert [output.format for output in outputs] == ["json"]
    assert json.loads(outputs[0].content)["info"]["title"] == "Billing"


def test_git_branch_used_as_version(repo_builder) -> None:
    repo_builder.write({"svc.py": "def run():\n    pass\n"})
    reader = StubBranchReader("release/3.2")
    settings = DocSettings(use_git_branch_as_version=True)
    orchestrator = Orchestrator(branch_reader=reader, clock=FIXED_CLOCK)

    result = orchestrator.generate(repo_builder.path(), _config(repo_builder.path(), doc=settings))

    assert result.model.info.version == "V3.2"
    assert result.model.info.date == "2024-05-06"
    assert reader.calls == [repo_builder.path()]

    reader.branch = None
    result = orchestrator.generate(repo_builder.path(), _config(repo_builder.path(), doc=settings))
    assert result.model.info.version == "V1.0.0"
