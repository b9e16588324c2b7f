"""
Tree-walking evaluator for construct instantiations.

Turns a program (a UserConstruct whose body holds the top-level calls) into
a geometry node tree by resolving each call to a user or builtin construct
and descending recursively.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .values import Value, wrap_value
from .nodes import GeometryNode
from .config import EvaluatorConfig
from .context import EvaluationContext, Scope
from .builtins import BuiltinRegistry
from .constructs import BuiltinConstruct, UserConstruct
from .instantiation import Instantiation
from .errors import (
    DiagnosticCollector, ErrorSeverity, EvaluationError, RecursionLimitExceeded,
    error_stack_exhausted, warning_unresolved_construct,
)

logger = logging.getLogger(__name__)

Construct = Union[BuiltinConstruct, UserConstruct]

PROGRAM_NAME = "<program>"


def resolve_construct(name: str, scope: Scope) -> Tuple[Construct, Scope, bool]:
    """
    Resolve a construct name as seen from `scope`.

    User constructs visible through the scope chain win over builtins; a
    name found nowhere resolves to the default group construct.

    Returns:
        (construct, scope to evaluate it against, whether the name resolved)
    """
    found = scope.lookup_construct(name)
    if found is not None:
        construct, definition_scope = found
        return construct, definition_scope, True
    registry = scope.context.registry
    builtin = registry.lookup(name)
    if builtin is not None:
        return builtin, scope, True
    return registry.default, scope, False


def call_construct(
    construct: Construct,
    scope: Scope,
    arg_names: Sequence[Optional[str]],
    arg_values: Sequence[Value],
    supplied_children: List[GeometryNode],
) -> GeometryNode:
    """Dispatch a call to a builtin or user construct."""
    if isinstance(construct, UserConstruct):
        return construct.evaluate(scope, arg_names, arg_values, supplied_children)
    elif isinstance(construct, BuiltinConstruct):
        logger.debug("builtin %s: %d argument(s)", construct.name, len(arg_values))
        return construct.implementation(scope, arg_names, arg_values, supplied_children)
    else:
        raise TypeError(f"not a construct: {type(construct).__name__}")


def instantiate(inst: Instantiation, scope: Scope) -> GeometryNode:
    """
    Evaluate one instantiation against the caller's scope.

    Arguments and the child block are evaluated in the caller's scope, in
    source order, before the construct is resolved and invoked.
    """
    ctx = scope.context
    with ctx.enter(inst.construct_name, inst.span) as depth:
        logger.debug("instantiate %s at depth %d", inst.construct_name, depth)
        arg_values = [expr.evaluate(scope) for expr in inst.arg_exprs]
        supplied_children = [child.evaluate(scope) for child in inst.children]

        construct, call_scope, resolved = resolve_construct(inst.construct_name, scope)
        if not resolved and ctx.config.warn_unresolved_constructs:
            ctx.warn(warning_unresolved_construct(inst.construct_name, inst.span))
        return call_construct(construct, call_scope, inst.arg_names, arg_values, supplied_children)


@dataclass
class EvaluationResult:
    """Result of evaluating a program."""
    success: bool
    root: Optional[GeometryNode] = None
    diagnostics: DiagnosticCollector = field(default_factory=DiagnosticCollector)
    error_message: Optional[str] = None
    max_depth: int = 0

    @property
    def warnings(self) -> List[str]:
        """Formatted warning diagnostics."""
        return [d.format() for d in self.diagnostics.diagnostics
                if d.severity == ErrorSeverity.WARNING]

    def dump(self) -> str:
        """Dump of the produced tree, empty on failure."""
        if self.root is None:
            return ""
        return self.root.dump()


class Interpreter:
    """
    Evaluates programs into geometry node trees.

    Each call to `evaluate` runs in its own EvaluationContext, so one
    interpreter can be reused for independent programs.
    """

    def __init__(self, config: EvaluatorConfig = None, registry: BuiltinRegistry = None):
        """
        Initialize the interpreter.

        Args:
            config: Evaluator configuration (defaults when omitted)
            registry: Builtin registry (the process-wide one when omitted)
        """
        self.config = config or EvaluatorConfig()
        self.registry = registry

    def evaluate(
        self,
        program: UserConstruct,
        variables: Dict[str, Any] = None,
    ) -> EvaluationResult:
        """
        Evaluate a program.

        Args:
            program: The top-level construct with the program's definitions
            variables: Global variables (raw Python values or Values)

        Returns:
            EvaluationResult holding the root node, or the failure
        """
        ctx = EvaluationContext(config=self.config, registry=self.registry)
        top = Scope(name="global", context=ctx)
        for name, raw in (variables or {}).items():
            top.set(name, wrap_value(raw))
        top.constructs[PROGRAM_NAME] = program

        try:
            root = Instantiation(PROGRAM_NAME).evaluate(top)
        except RecursionLimitExceeded as e:
            return self._failure(ctx, e)
        except RecursionError:
            return self._failure(ctx, error_stack_exhausted(
                program.name, ctx.max_depth_reached, ctx.config.max_recursion_depth))
        except EvaluationError as e:
            return self._failure(ctx, e)

        return EvaluationResult(
            success=True,
            root=root,
            diagnostics=ctx.diagnostics,
            max_depth=ctx.max_depth_reached,
        )

    def _failure(self, ctx: EvaluationContext, error: EvaluationError) -> EvaluationResult:
        ctx.diagnostics.add_error(error)
        logger.error("%s", error.diagnostic.format())
        return EvaluationResult(
            success=False,
            diagnostics=ctx.diagnostics,
            error_message=error.diagnostic.message,
            max_depth=ctx.max_depth_reached,
        )


# Convenience function for simple evaluation
def evaluate_program(
    program: UserConstruct,
    variables: Dict[str, Any] = None,
    config: EvaluatorConfig = None,
) -> EvaluationResult:
    """
    Evaluate a program into a geometry node tree.

    This is a convenience wrapper around Interpreter.evaluate():

        program = UserConstruct("main", body=[
            Instantiation.build("cube", [("size", Literal(10))]),
        ])
        result = evaluate_program(program)
        if result.success:
            print(result.root.dump())
    """
    return Interpreter(config).evaluate(program, variables)
