"""
scriptcost/diagnostics.py
=========================

Report records for the command-line front-end.

A :class:`Diagnostic` is one finding about one script: an unsafe loop,
a parse failure, a missing import.  It serializes to a flat JSON
object or to a GCC-style line.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from scriptcost.errors import ScriptCostError
from scriptcost.loops import LoopFinding


class DiagnosticSeverity(Enum):
    """Severity levels."""
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in script source."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single finding.

    Attributes
    ----------
    error_id  : Unique identifier (e.g., "infiniteLoop")
    message   : Human-readable description
    severity  : DiagnosticSeverity
    location  : Primary source location
    extra     : Additional context string
    evidence  : Machine-readable details for downstream tooling
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    extra: str = ""
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file": self.location.file,
            "linenr": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "errorId": self.error_id,
        }
        if self.extra:
            result["extra"] = self.extra
        if self.evidence:
            result["evidence"] = self.evidence
        return result

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_dict())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        sev = self.severity.value
        text = f"{self.location}: {sev}: {self.message} [{self.error_id}]"
        if self.extra:
            text += f"\n  hint: {self.extra}"
        return text


def loop_diagnostic(finding: LoopFinding) -> Diagnostic:
    return Diagnostic(
        error_id="infiniteLoop",
        message="while(true) loop never awaits and will freeze the game",
        severity=DiagnosticSeverity.ERROR,
        location=SourceLocation(finding.filename, finding.line, finding.column),
        extra="add an await (e.g. await ns.sleep(...)) inside the loop",
    )


def error_diagnostic(error: ScriptCostError) -> Diagnostic:
    span = error.span
    return Diagnostic(
        error_id=error.error_id,
        message=error.message,
        severity=DiagnosticSeverity.ERROR,
        location=SourceLocation(span.file, span.line, span.column),
        extra=error.hint,
    )
