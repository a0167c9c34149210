"""Source tree scanning utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .errors import AccessError
from .logging import get_logger
from .models import ACCESS_ERROR, Diagnostic, SourceFile

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    ".gradle",
    "build",
    "target",
}

LANGUAGE_BY_SUFFIX = {
    ".py": "Python",
    ".java": "Java",
}


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .apidoc.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []

    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _matches_include(rel_path: str, patterns: Sequence[str]) -> bool:
    if not patterns:
        return True
    name = rel_path.rsplit("/", 1)[-1]
    for pattern in patterns:
        if "/" not in pattern:
            if fnmatchcase(name, pattern):
                return True
            continue
        if fnmatchcase(rel_path, pattern):
            return True
        # "**/" may also match zero directories.
        if "**/" in pattern and fnmatchcase(rel_path, pattern.replace("**/", "")):
            return True
    return False


def detect_language(path: str) -> str | None:
    suffix = os.path.splitext(path)[1].lower()
    return LANGUAGE_BY_SUFFIX.get(suffix)


class RepoScanner:
    """Walks a source root and yields the files parsers can handle."""

    def __init__(
        self,
        include: Sequence[str] | None = None,
        exclude: Sequence[str] | None = None,
    ) -> None:
        self.include = list(include or [])
        self.exclude = list(exclude or [])
        self.skipped: List[Diagnostic] = []
        self.logger = get_logger("scanner")

    def scan(self, root: str | Path) -> Iterator[SourceFile]:
        """Return a lazy iterator of source files below ``root``.

        The root is validated eagerly so an unreadable root fails before any
        file is produced. Files that cannot be read are skipped and recorded
        on ``self.skipped``.
        """
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise AccessError(f"Source root not found: {root}", path=str(root))
        if not root_path.is_dir():
            raise AccessError(f"Source root is not a directory: {root}", path=str(root))
        if not os.access(root_path, os.R_OK | os.X_OK):
            raise AccessError(f"Source root is not readable: {root}", path=str(root))

        rules = _parse_gitignore(root_path / ".gitignore")
        for pattern in self.exclude:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                rules.append(rule)

        self.skipped = []
        return self._iter_sources(root_path, rules)

    def _iter_sources(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[SourceFile]:
        for path in self._iter_files(root, rules):
            rel_path = path.relative_to(root).as_posix()
            language = detect_language(rel_path)
            if language is None or not _matches_include(rel_path, self.include):
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.warning("Skipping unreadable file %s: %s", rel_path, exc)
                self.skipped.append(
                    Diagnostic(kind=ACCESS_ERROR, message=f"Cannot read file: {exc}", path=rel_path)
                )
                continue
            yield SourceFile(path=rel_path, content=content, language=language)

    def _iter_files(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
        def _on_error(exc: OSError) -> None:
            rel = Path(exc.filename).relative_to(root).as_posix() if exc.filename else ""
            self.logger.warning("Skipping unreadable directory %s: %s", rel, exc)
            self.skipped.append(
                Diagnostic(kind=ACCESS_ERROR, message=f"Cannot read directory: {exc.strerror}", path=rel)
            )

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, rules):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, rules):
                    continue
                yield current_dir / filename


__all__ = ["IgnoreRule", "LANGUAGE_BY_SUFFIX", "RepoScanner", "build_ignore_rule", "detect_language"]
