"""Aggregation of per-file parse results into a frozen ApiModel."""

from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from .logging import get_logger
from .models import (
    DUPLICATE_SYMBOL,
    KIND_FIELD,
    KIND_TYPE,
    ApiModel,
    Declaration,
    Diagnostic,
    DocInfo,
    ParseResult,
)


class DocModelBuilder:
    """Merges parse results in source order and resolves duplicate symbols."""

    def __init__(self, include_private: bool = False) -> None:
        self.include_private = include_private
        self.logger = get_logger("builder")

    def build(
        self,
        results: Iterable[ParseResult],
        info: DocInfo | None = None,
        include_private: bool | None = None,
    ) -> Tuple[ApiModel, List[Diagnostic]]:
        """Return the frozen model and the DuplicateSymbol diagnostics raised while merging.

        Results may arrive in any order; they are applied sorted by source path
        and then by declaration line, so the model never depends on parser
        completion order.
        """
        keep_private = self.include_private if include_private is None else include_private
        model = ApiModel(info)
        diagnostics: List[Diagnostic] = []

        for result in sorted(results, key=lambda item: item.path):
            hidden: Set[str] = set()
            for declaration in sorted(result.declarations, key=lambda item: item.line):
                if declaration.owner in hidden or (not keep_private and self._is_hidden(declaration)):
                    hidden.add(declaration.qualified_name)
                    continue
                previous = model.put(result.module, declaration)
                if previous is not None:
                    if previous.kind == KIND_TYPE and previous.path != declaration.path:
                        # The replacing type brings its own members.
                        model.discard_members(result.module, previous.qualified_name, previous.path)
                    diagnostics.append(
                        Diagnostic(
                            kind=DUPLICATE_SYMBOL,
                            message=(
                                f"{declaration.qualified_name} in module {result.module} redeclared; "
                                f"{previous.path}:{previous.line} replaced by {declaration.path}:{declaration.line}"
                            ),
                            path=declaration.path,
                            line=declaration.line,
                        )
                    )

        self._index_types(model)
        model.freeze()
        self.logger.debug(
            "Built model with %d declarations across %d modules (%d duplicates)",
            len(model),
            len(model.modules()),
            len(diagnostics),
        )
        return model, diagnostics

    @staticmethod
    def _is_hidden(declaration: Declaration) -> bool:
        # Java bean fields are private by convention and still document the payload.
        if declaration.kind == KIND_FIELD:
            return declaration.name.startswith("_")
        return declaration.is_private

    @staticmethod
    def _index_types(model: ApiModel) -> None:
        for module, declarations in model.items():
            for declaration in declarations:
                if declaration.kind != KIND_TYPE:
                    continue
                target = f"{module}#{declaration.qualified_name}"
                model.add_reference(declaration.name, target)
                model.add_reference(declaration.qualified_name, target)
                model.add_reference(f"{module}.{declaration.qualified_name}", target)


__all__ = ["DocModelBuilder"]
