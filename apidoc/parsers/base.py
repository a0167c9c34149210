"""Base classes for declaration parser plugins."""

from abc import ABC, abstractmethod

from ..models import PARSE_DIAGNOSTIC, Diagnostic, ParseResult, SourceFile


class DeclarationParser(ABC):
    """Contract for parsers that turn one source file into declarations."""

    language: str = ""

    def supports(self, source: SourceFile) -> bool:
        """Return True when this parser handles the file's language."""
        return source.language == self.language

    @abstractmethod
    def parse(self, source: SourceFile) -> ParseResult:
        """Extract declarations, recording malformed constructs as diagnostics."""

    @staticmethod
    def diagnostic(source: SourceFile, message: str, line: int | None = None) -> Diagnostic:
        return Diagnostic(kind=PARSE_DIAGNOSTIC, message=message, path=source.path, line=line)
