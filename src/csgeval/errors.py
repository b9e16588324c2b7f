"""
Evaluator exceptions and diagnostics.

Error code ranges:
- E4xx: Evaluation errors (abort the current evaluation pass)
- W4xx: Evaluation warnings (evaluation continues with a fallback)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List

from .source import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"


@dataclass
class Diagnostic:
    """A single diagnostic message (error, warning, etc.)."""
    code: str                       # E401, W401, etc.
    message: str                    # Human-readable message
    severity: ErrorSeverity
    span: Optional[SourceSpan] = None   # Call site, when the parser supplied one
    hints: List[str] = field(default_factory=list)

    def format(self) -> str:
        """Format the diagnostic for display."""
        header = f"{self.severity.value}[{self.code}]: {self.message}"
        if self.span is not None:
            header = f"{self.span.start}: {header}"
        parts = [header]
        for hint in self.hints:
            parts.append(f"    = hint: {hint}")
        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        data = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "hints": list(self.hints),
        }
        if self.span is not None:
            data["range"] = {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            }
        return data


class EvaluationError(Exception):
    """Base exception for fatal evaluation errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class RecursionLimitExceeded(EvaluationError):
    """Instantiation nesting went past the configured ceiling (E401)."""

    def __init__(self, diagnostic: Diagnostic, depth: int):
        self.depth = depth
        super().__init__(diagnostic)


# --- Error codes ---

def error_recursion_limit(name: str, limit: int, span: SourceSpan = None) -> RecursionLimitExceeded:
    """E401: Recursion limit exceeded."""
    diag = Diagnostic(
        code="E401",
        message=f"recursion limit of {limit} exceeded while instantiating '{name}'",
        severity=ErrorSeverity.ERROR,
        span=span,
        hints=["a construct probably instantiates itself without a terminating condition",
               "raise max_recursion_depth if the nesting is intentional"],
    )
    return RecursionLimitExceeded(diag, limit)


def error_stack_exhausted(name: str, depth: int, limit: int) -> RecursionLimitExceeded:
    """E401: The Python stack ran out before the configured ceiling."""
    diag = Diagnostic(
        code="E401",
        message=(f"interpreter stack exhausted at depth {depth} while evaluating '{name}' "
                 f"(max_recursion_depth is {limit})"),
        severity=ErrorSeverity.ERROR,
        hints=["lower max_recursion_depth so runaway recursion is reported earlier"],
    )
    return RecursionLimitExceeded(diag, depth)


def error_invalid_expression(detail: str, span: SourceSpan = None) -> EvaluationError:
    """E402: Malformed expression tree."""
    diag = Diagnostic(
        code="E402",
        message=f"invalid expression: {detail}",
        severity=ErrorSeverity.ERROR,
        span=span,
    )
    return EvaluationError(diag)


# --- Warnings ---

def warning_unresolved_construct(name: str, span: SourceSpan = None) -> Diagnostic:
    """W401: Unknown construct, evaluated as a plain group."""
    return Diagnostic(
        code="W401",
        message=f"unknown construct '{name}', treating it as group()",
        severity=ErrorSeverity.WARNING,
        span=span,
        hints=["children of the call are kept; its arguments are ignored"],
    )


def warning_undefined_variable(name: str) -> Diagnostic:
    """W402: Reference to an unbound variable."""
    return Diagnostic(
        code="W402",
        message=f"undefined variable '{name}', using undef",
        severity=ErrorSeverity.WARNING,
    )


def warning_undefined_function(name: str) -> Diagnostic:
    """W403: Call of an unknown function."""
    return Diagnostic(
        code="W403",
        message=f"undefined function '{name}', using undef",
        severity=ErrorSeverity.WARNING,
    )


def warning_bad_argument(construct: str, param: str, found: str, span: SourceSpan = None) -> Diagnostic:
    """W404: Builtin argument of the wrong kind, default used instead."""
    return Diagnostic(
        code="W404",
        message=f"{construct}(): unusable value {found} for parameter '{param}', using default",
        severity=ErrorSeverity.WARNING,
        span=span,
    )


def warning_children_ignored(construct: str, count: int, span: SourceSpan = None) -> Diagnostic:
    """W405: Child nodes passed to a construct that takes none."""
    return Diagnostic(
        code="W405",
        message=f"{construct}() does not take children; {count} ignored",
        severity=ErrorSeverity.WARNING,
        span=span,
    )


class DiagnosticCollector:
    """
    Collects diagnostics during evaluation.

    Warnings accumulate for the whole pass; the first error ends the pass,
    so at most one error is ever recorded.
    """

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    def add_error(self, error: EvaluationError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    def with_code(self, code: str) -> List[Diagnostic]:
        """All collected diagnostics carrying the given code."""
        return [d for d in self.diagnostics if d.code == code]

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self._error_count,
            "warning_count": self.warning_count,
        }
