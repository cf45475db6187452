# scriptcost/errors.py
"""
Error types for the scriptcost analysis pipeline.

Error Hierarchy:
────────────────
  ScriptCostError (base)
  ├── ScriptParseError        - source text rejected by the grammar
  ├── ImportResolutionError   - an imported sibling script is missing
  └── CatalogError            - catalog file unreadable or mis-shaped

Unknown capability names and malformed cost values are deliberately
*not* errors: the aggregator prices them at zero.  An unsafe loop is a
result value, not an exception.

Example Usage:
──────────────
    from scriptcost.errors import ScriptParseError

    try:
        program = parse(source, filename="hack.js")
    except ScriptParseError as exc:
        print(exc.to_gcc_format())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE LOCATION TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """
    A span of script source with start and end positions.

    Lines and columns are 1-based; ``0`` means "unknown".
    """

    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __post_init__(self) -> None:
        # Normalize: if end not specified, use start
        if self.end_line == 0:
            object.__setattr__(self, "end_line", self.line)
        if self.end_column == 0:
            object.__setattr__(self, "end_column", self.column)

    @classmethod
    def from_offset(cls, text: str, offset: int, file: str = "") -> "SourceSpan":
        """Build a span from a character offset into *text*."""
        offset = max(0, min(offset, len(text)))
        line = text.count("\n", 0, offset) + 1
        column = offset - (text.rfind("\n", 0, offset) + 1) + 1
        return cls(file=file, line=line, column=column)

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"

        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))

        return ":".join(parts)


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class ScriptCostError(Exception):
    """
    Base exception for all scriptcost errors.

    Carries a ``SourceSpan`` and an optional hint so the CLI can print
    compiler-style messages.
    """

    error_id: str = "scriptCostError"

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        cause: Optional[BaseException] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.span = span or SourceSpan()
        self.cause = cause
        self.hint = hint

    def to_gcc_format(self) -> str:
        """Format as a GCC-style error message."""
        text = f"{self.span}: error: {self.message} [{self.error_id}]"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "errorId": self.error_id,
            "message": self.message,
            "file": self.span.file,
            "line": self.span.line,
            "column": self.span.column,
        }

    def __str__(self) -> str:
        return self.to_gcc_format()


class ScriptParseError(ScriptCostError):
    """Source text could not be parsed into an AST."""

    error_id = "syntaxError"

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        expected: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, span=span, **kwargs)
        self.expected = expected
        if expected and not self.hint:
            self.hint = f"Expected {expected}"


class ImportResolutionError(ScriptCostError):
    """An ``import`` names a sibling script that does not exist."""

    error_id = "importError"

    def __init__(
        self,
        module: str,
        importer: str = "",
        span: Optional[SourceSpan] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Cannot resolve import {module!r}"
            + (f" from {importer}" if importer else ""),
            span=span,
            **kwargs,
        )
        self.module = module
        self.importer = importer


class CatalogError(ScriptCostError):
    """Cost catalog file is unreadable or structurally invalid."""

    error_id = "catalogError"
