"""
Evaluation context for the construct interpreter.

Manages lexical scopes, the recursion counter of an evaluation pass, and
collects warnings/errors.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, TYPE_CHECKING
from contextlib import contextmanager

from .values import Value
from .config import EvaluatorConfig
from .builtins import BuiltinRegistry, get_builtin_registry
from .errors import Diagnostic, DiagnosticCollector, error_recursion_limit
from .source import SourceSpan

if TYPE_CHECKING:
    from .constructs import UserConstruct, UserFunction

logger = logging.getLogger(__name__)


@dataclass
class EvaluationContext:
    """
    State shared by every scope of one evaluation pass.

    Tracks:
    - Configuration
    - The builtin registry used for name resolution
    - Current and deepest instantiation depth
    - Diagnostics (errors/warnings)
    """
    config: EvaluatorConfig = field(default_factory=EvaluatorConfig)
    registry: Optional[BuiltinRegistry] = None
    diagnostics: Optional[DiagnosticCollector] = None

    depth: int = 0
    max_depth_reached: int = 0

    def __post_init__(self) -> None:
        if self.registry is None:
            self.registry = get_builtin_registry()
        if self.diagnostics is None:
            self.diagnostics = DiagnosticCollector()

    @contextmanager
    def enter(self, name: str, span: SourceSpan = None):
        """
        Count one level of nesting for the duration of the block.

        Raises RecursionLimitExceeded when the configured ceiling would be
        passed.
        """
        limit = self.config.max_recursion_depth
        if self.depth >= limit:
            raise error_recursion_limit(name, limit, span)
        self.depth += 1
        self.max_depth_reached = max(self.max_depth_reached, self.depth)
        try:
            yield self.depth
        finally:
            self.depth -= 1

    def warn(self, diagnostic: Diagnostic) -> None:
        """Record a non-fatal diagnostic."""
        self.diagnostics.add(diagnostic)
        logger.warning("%s", diagnostic.format())


@dataclass(eq=False)
class Scope:
    """
    A lexical environment: variables, user functions and user constructs.

    Scopes form a chain via the `parent` field. Lookups fall back to the
    parent, so a local binding shadows an outer one of the same name.
    """
    variables: Dict[str, Value] = field(default_factory=dict)
    functions: Dict[str, "UserFunction"] = field(default_factory=dict)
    constructs: Dict[str, "UserConstruct"] = field(default_factory=dict)
    parent: Optional["Scope"] = None
    name: str = "anonymous"  # For debugging
    context: Optional[EvaluationContext] = None

    def __post_init__(self) -> None:
        if self.context is None:
            self.context = self.parent.context if self.parent is not None else EvaluationContext()

    def __repr__(self) -> str:
        return f"Scope({self.name!r}, variables={sorted(self.variables)})"

    def child(self, name: str = "block") -> "Scope":
        """Create a nested scope sharing this scope's evaluation context."""
        logger.debug("new scope %s (parent %s)", name, self.name)
        return Scope(parent=self, name=name, context=self.context)

    def get(self, name: str) -> Optional[Value]:
        """Look up a variable in this scope or parent scopes."""
        scope = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        return None

    def set(self, name: str, value: Value) -> None:
        """Set a variable in this scope (shadowing parent if exists)."""
        self.variables[name] = value

    def contains(self, name: str) -> bool:
        """Check if a variable exists in this scope or parents."""
        return self.get(name) is not None

    def define_function(self, function: "UserFunction") -> None:
        self.functions[function.name] = function

    def define_construct(self, construct: "UserConstruct") -> None:
        self.constructs[construct.name] = construct

    def install(self, functions: Dict[str, "UserFunction"], constructs: Dict[str, "UserConstruct"]) -> None:
        """Make nested definitions visible from this scope."""
        self.functions.update(functions)
        self.constructs.update(constructs)

    def lookup_function(self, name: str) -> Optional[Tuple["UserFunction", "Scope"]]:
        """Find a user function and the scope that defines it."""
        scope = self
        while scope is not None:
            if name in scope.functions:
                return scope.functions[name], scope
            scope = scope.parent
        return None

    def lookup_construct(self, name: str) -> Optional[Tuple["UserConstruct", "Scope"]]:
        """
        Find a user construct and the scope that defines it.

        The defining scope becomes the parent of the construct's call scope,
        which is what makes free names resolve lexically.
        """
        scope = self
        while scope is not None:
            if name in scope.constructs:
                return scope.constructs[name], scope
            scope = scope.parent
        return None


def create_scope(
    variables: Dict[str, Value] = None,
    config: EvaluatorConfig = None,
    registry: BuiltinRegistry = None,
    name: str = "global",
) -> Scope:
    """
    Create a fresh top-level scope with its own evaluation context.

    Args:
        variables: Values pre-bound in the global scope
        config: Evaluator configuration (defaults when omitted)
        registry: Builtin registry (the process-wide one when omitted)
        name: Scope name for debugging

    Returns:
        A root Scope
    """
    ctx = EvaluationContext(config=config or EvaluatorConfig(), registry=registry)
    scope = Scope(name=name, context=ctx)
    for var_name, value in (variables or {}).items():
        scope.set(var_name, value)
    return scope
