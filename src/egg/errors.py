"""Diagnostics, Rust-style rendering, and the compiler's exception types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from egg.source import Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str


@dataclass
class Diagnostic:
    """A single diagnostic message anchored at one or more source locations."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)

    @property
    def line(self) -> int:
        return self.labels[0].span.start_line if self.labels else 0

    @property
    def col(self) -> int:
        return self.labels[0].span.start_col if self.labels else 0

    def __str__(self) -> str:
        return f"{self.severity.value} at line {self.line}, col {self.col}: {self.message}"


def make_diagnostic(severity: Severity, code: str, message: str, span: Span) -> Diagnostic:
    """Build a diagnostic with a single unlabeled primary span."""
    return Diagnostic(
        severity=severity,
        code=code,
        message=message,
        labels=[DiagnosticLabel(span=span, message="")],
    )


class DiagnosticRenderer:
    """Renders diagnostics as a header, a location arrow and an underlined excerpt.

    Source text handed over with :meth:`add_source` is used for excerpts;
    other files are read from disk on first use.
    """

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, list[str]] = {}

    def add_source(self, filename: str, text: str) -> None:
        self._sources[filename] = text.splitlines()

    def _paint(self, text: str, code: str) -> str:
        return f"{code}{text}{_RESET}" if self.color else text

    def _source_line(self, filename: str, number: int) -> str | None:
        if filename not in self._sources:
            path = Path(filename)
            try:
                self._sources[filename] = path.read_text().splitlines() if path.is_file() else []
            except OSError:
                self._sources[filename] = []
        lines = self._sources[filename]
        return lines[number - 1] if 1 <= number <= len(lines) else None

    def _excerpt(self, label: DiagnosticLabel, color: str) -> list[str]:
        span = label.span
        gutter = self._paint("    |", _BLUE)
        rows = [f"  {self._paint('-->', _BLUE)} {span}", f"  {gutter}"]

        text = self._source_line(span.file, span.start_line)
        if text is not None:
            rows.append(f"  {self._paint(f'{span.start_line:>4} |', _BLUE)} {text}")
            if span.start_line == span.end_line:
                # Tokens reported at end of input sit past the last character.
                width = max(1, min(span.end_col, len(text)) - span.start_col + 1)
                underline = " " * (span.start_col - 1) + self._paint("^" * width, color)
                rows.append(f"  {gutter} {underline}")

        if label.message:
            rows.append(f"  {gutter}   {self._paint(label.message, color)}")
        return rows

    def render(self, diag: Diagnostic) -> str:
        color = _COLORS[diag.severity]
        rows = [
            self._paint(f"{diag.severity.value}[{diag.code}]", color)
            + self._paint(f": {diag.message}", _BOLD)
        ]
        for label in diag.labels:
            rows.extend(self._excerpt(label, color))
        return "\n".join(rows)


class CompileError(Exception):
    """Batch error from the lexer or parser carrying every diagnostic collected."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")


class InternalError(Exception):
    """An invariant of the compiler itself was violated.

    Never raised for properties of the input program; seeing one means a
    bug in the front end.
    """
