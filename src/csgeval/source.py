"""
Source positions attached to program nodes by the parser.

The evaluator never reads source text itself; spans only travel through so
that diagnostics can point back at the offending call site.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int = 0     # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


def span_at(line: int, column: int, length: int = 1, filename: str = None) -> SourceSpan:
    """Build a single-line span, mostly useful for hand-built trees and tests."""
    start = SourceLocation(line, column, filename=filename)
    end = SourceLocation(line, column + max(1, length), filename=filename)
    return SourceSpan(start, end)
