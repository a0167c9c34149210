"""Pipeline driver: scan, parse, build and render API documentation."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from .builder import DocModelBuilder
from .config import ApiDocConfig, load_config
from .errors import AccessError, ConfigError, GenerationCancelled
from .git import GitBranchReader, resolve_version
from .logging import get_logger
from .models import (
    PARSE_DIAGNOSTIC,
    ApiModel,
    Diagnostic,
    DocInfo,
    ParseResult,
    RenderOutput,
    SourceFile,
)
from .parsers import DeclarationParser, discover_parsers, parsers_by_language
from .renderers import get_renderer, normalize_format
from .repo_scanner import RepoScanner


class PipelineState(str, Enum):
    IDLE = "Idle"
    SCANNING = "Scanning"
    PARSING = "Parsing"
    BUILDING = "Building"
    RENDERING = "Rendering"
    DONE = "Done"
    ERROR = "Error"


_TRANSITIONS: Dict[PipelineState, Sequence[PipelineState]] = {
    PipelineState.IDLE: (PipelineState.SCANNING,),
    PipelineState.SCANNING: (PipelineState.PARSING,),
    PipelineState.PARSING: (PipelineState.BUILDING,),
    PipelineState.BUILDING: (PipelineState.RENDERING,),
    PipelineState.RENDERING: (PipelineState.DONE,),
    PipelineState.DONE: (),
    PipelineState.ERROR: (),
}


@dataclass
class GenerationResult:
    """Outputs and diagnostics of one run; unpacks as ``outputs, diagnostics``."""

    outputs: List[RenderOutput]
    diagnostics: List[Diagnostic]
    model: Optional[ApiModel] = None
    written: List[Path] = field(default_factory=list)

    def __iter__(self) -> Iterator[object]:
        yield self.outputs
        yield self.diagnostics


class Orchestrator:
    """Runs the generation pipeline and tracks its state."""

    def __init__(
        self,
        scanner: RepoScanner | None = None,
        parsers: Optional[Iterable[DeclarationParser]] = None,
        builder: DocModelBuilder | None = None,
        branch_reader: GitBranchReader | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._scanner_override = scanner
        self._parser_overrides = list(parsers) if parsers is not None else None
        self.builder = builder or DocModelBuilder()
        self.branch_reader = branch_reader or GitBranchReader()
        self.clock = clock or (lambda: datetime.now(UTC))
        self.logger = get_logger("orchestrator")
        self._state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]

    @property
    def state(self) -> PipelineState:
        return self._state

    def generate(
        self,
        root: str | Path,
        config: ApiDocConfig | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> GenerationResult:
        """Generate documentation for ``root``.

        Raises ``ConfigError`` before scanning when the configuration is
        unusable and ``AccessError`` when the root cannot be read; per-file
        problems are returned as diagnostics instead.
        """
        self._state = PipelineState.IDLE
        self.history = [PipelineState.IDLE]
        root_path = Path(root).expanduser()
        try:
            if config is None:
                config = self._load_config(root_path)
            formats = self._validate(config)

            self._transition(PipelineState.SCANNING)
            self.logger.info("Scanning %s", root_path)
            scanner = self._scanner_for(config)
            sources = scanner.scan(root_path)

            self._transition(PipelineState.PARSING)
            results = self._parse_all(sources, config, cancel_event)
            diagnostics: List[Diagnostic] = list(scanner.skipped)
            for result in results:
                diagnostics.extend(result.diagnostics)
            self.logger.debug("Parsed %d files", len(results))

            self._check_cancelled(cancel_event)
            self._transition(PipelineState.BUILDING)
            info = self._doc_info(root_path, config)
            model, merge_diagnostics = self.builder.build(results, info, include_private=config.include_private)
            diagnostics.extend(merge_diagnostics)

            self._check_cancelled(cancel_event)
            self._transition(PipelineState.RENDERING)
            outputs = self._render_all(model, formats, config)
            written = self._write_outputs(outputs, config.output_dir)

            self._transition(PipelineState.DONE)
        except Exception:
            self._transition(PipelineState.ERROR)
            raise

        diagnostics.sort(key=Diagnostic.sort_key)
        for diagnostic in diagnostics:
            self.logger.debug("%s", diagnostic)
        self.logger.info(
            "Generated %d output(s) with %d diagnostic(s)",
            len(outputs),
            len(diagnostics),
        )
        return GenerationResult(outputs=outputs, diagnostics=diagnostics, model=model, written=written)

    # ------------------------------------------------------------------
    # Stages

    def _parse_all(
        self,
        sources: Iterable[SourceFile],
        config: ApiDocConfig,
        cancel_event: threading.Event | None,
    ) -> List[ParseResult]:
        index = parsers_by_language(self._select_parsers())
        results: List[ParseResult] = []
        futures: List[Future[ParseResult]] = []
        with ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="apidoc-parse") as pool:
            try:
                for source in sources:
                    self._check_cancelled(cancel_event)
                    parser = index.get(source.language)
                    if parser is None or not parser.supports(source):
                        continue
                    futures.append(pool.submit(self._parse_one, parser, source))
                # Completion order is irrelevant; the builder sorts by path.
                for future in as_completed(futures):
                    self._check_cancelled(cancel_event)
                    results.append(future.result())
            except GenerationCancelled:
                for future in futures:
                    future.cancel()
                raise
        return results

    def _parse_one(self, parser: DeclarationParser, source: SourceFile) -> ParseResult:
        try:
            return parser.parse(source)
        except Exception as exc:  # parser bugs stay per-file
            self.logger.warning("Parser %s failed on %s: %s", parser.__class__.__name__, source.path, exc)
            return ParseResult(
                path=source.path,
                module="",
                language=source.language,
                diagnostics=[
                    Diagnostic(kind=PARSE_DIAGNOSTIC, message=f"Parser failed: {exc}", path=source.path)
                ],
            )

    def _render_all(self, model: ApiModel, formats: Sequence[str], config: ApiDocConfig) -> List[RenderOutput]:
        outputs = []
        for name in formats:
            renderer = get_renderer(name, settings=config.doc, templates_dir=config.templates_dir)
            self.logger.debug("Rendering %s", name)
            outputs.append(renderer.render(model))
        return outputs

    def _write_outputs(self, outputs: Sequence[RenderOutput], output_dir: Path | None) -> List[Path]:
        if output_dir is None:
            return []
        written = []
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            for output in outputs:
                target = output_dir / output.filename
                target.write_text(output.content, encoding="utf-8")
                written.append(target)
        except OSError as exc:
            raise AccessError(f"Cannot write output to {output_dir}: {exc}", path=str(output_dir)) from exc
        for path in written:
            self.logger.info("Wrote %s", path)
        return written

    # ------------------------------------------------------------------
    # Helpers

    def _transition(self, state: PipelineState) -> None:
        if state != PipelineState.ERROR and state not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid pipeline transition {self._state.value} -> {state.value}")
        self._state = state
        self.history.append(state)

    @staticmethod
    def _check_cancelled(cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled("Generation cancelled")

    @staticmethod
    def _load_config(root: Path) -> ApiDocConfig:
        if root.is_dir():
            return load_config(root)
        return ApiDocConfig(root=root)

    @staticmethod
    def _validate(config: ApiDocConfig) -> List[str]:
        formats: List[str] = []
        for name in config.formats or ["markdown"]:
            key = normalize_format(name)
            get_renderer(key, settings=config.doc)
            if key not in formats:
                formats.append(key)
        if config.output_dir is not None and config.output_dir.exists() and not config.output_dir.is_dir():
            raise ConfigError(f"Output path is not a directory: {config.output_dir}")
        if config.templates_dir is not None and not config.templates_dir.is_dir():
            raise ConfigError(f"Templates directory not found: {config.templates_dir}")
        if config.max_workers < 1:
            raise ConfigError("max_workers must be a positive integer")
        return formats

    def _scanner_for(self, config: ApiDocConfig) -> RepoScanner:
        if self._scanner_override is not None:
            return self._scanner_override
        return RepoScanner(include=config.include, exclude=config.exclude_paths)

    def _select_parsers(self) -> List[DeclarationParser]:
        if self._parser_overrides is not None:
            return list(self._parser_overrides)
        return discover_parsers()

    def _doc_info(self, root: Path, config: ApiDocConfig) -> DocInfo:
        settings = config.doc
        version = settings.version
        if settings.use_git_branch_as_version:
            version = resolve_version(root, settings.version, self.branch_reader)
        return DocInfo(
            title=settings.title,
            version=version,
            author=settings.author,
            date=self.clock().date().isoformat(),
            application_name=settings.application_name,
        )


def generate(
    root_path: str | Path,
    config: ApiDocConfig | None = None,
    *,
    cancel_event: threading.Event | None = None,
) -> GenerationResult:
    """Run the full pipeline once with default components."""
    return Orchestrator().generate(root_path, config, cancel_event=cancel_event)


__all__ = ["GenerationResult", "Orchestrator", "PipelineState", "generate"]
