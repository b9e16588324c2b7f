"""
csgeval: construct evaluator for declarative solid modeling.

This package provides:
- Values: the runtime value union produced by expressions
- Expressions: literals, variables, operators and function calls
- Scope / EvaluationContext: lexical environments and per-pass state
- Constructs: builtin generators and user-defined modules/functions
- Instantiation: call sites of the program tree
- Interpreter: evaluates a program into a geometry node tree
- Nodes: the CSG description tree consumed by a geometry kernel

Usage:
    from csgeval import (
        UserConstruct, Instantiation, Literal, Identifier, evaluate_program,
    )

    box = UserConstruct(
        "box", formal_names=["w"],
        body=[Instantiation.build("cube", [("size", Identifier("w"))])],
    )
    program = UserConstruct(
        "main",
        nested_constructs={"box": box},
        body=[Instantiation.build("box", [(None, Literal(10))])],
    )
    result = evaluate_program(program)
    if result.success:
        print(result.root.dump())
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("csgeval")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from .values import (
    Value,
    ValueKind,
    UNDEF,
    undef,
    number_val,
    bool_val,
    string_val,
    vector_val,
    wrap_value,
)

from .expressions import (
    Expression,
    Literal,
    Identifier,
    VectorExpr,
    BinaryOp,
    UnaryOp,
    TernaryOp,
    IndexAccess,
    FunctionCall,
    call,
)

from .errors import (
    ErrorSeverity,
    Diagnostic,
    DiagnosticCollector,
    EvaluationError,
    RecursionLimitExceeded,
)

from .config import (
    EvaluatorConfig,
    load_config,
    config_from_env,
)

from .context import (
    Scope,
    EvaluationContext,
    create_scope,
)

from .nodes import (
    GeometryNode,
    CsgNode,
    TransformNode,
    PrimitiveNode,
)

from .constructs import (
    BuiltinConstruct,
    UserConstruct,
    UserFunction,
    match_arguments,
)

from .instantiation import Instantiation

from .builtins import (
    BuiltinFunction,
    BuiltinRegistry,
    get_builtin_registry,
    initialize_builtins,
    shutdown_builtins,
)

from .interpreter import (
    Interpreter,
    EvaluationResult,
    evaluate_program,
    instantiate,
    resolve_construct,
)

__all__ = [
    '__version__',

    # Values
    'Value',
    'ValueKind',
    'UNDEF',
    'undef',
    'number_val',
    'bool_val',
    'string_val',
    'vector_val',
    'wrap_value',

    # Expressions
    'Expression',
    'Literal',
    'Identifier',
    'VectorExpr',
    'BinaryOp',
    'UnaryOp',
    'TernaryOp',
    'IndexAccess',
    'FunctionCall',
    'call',

    # Errors
    'ErrorSeverity',
    'Diagnostic',
    'DiagnosticCollector',
    'EvaluationError',
    'RecursionLimitExceeded',

    # Configuration
    'EvaluatorConfig',
    'load_config',
    'config_from_env',

    # Scopes
    'Scope',
    'EvaluationContext',
    'create_scope',

    # Nodes
    'GeometryNode',
    'CsgNode',
    'TransformNode',
    'PrimitiveNode',

    # Constructs
    'BuiltinConstruct',
    'UserConstruct',
    'UserFunction',
    'match_arguments',
    'Instantiation',

    # Builtins
    'BuiltinFunction',
    'BuiltinRegistry',
    'get_builtin_registry',
    'initialize_builtins',
    'shutdown_builtins',

    # Interpreter
    'Interpreter',
    'EvaluationResult',
    'evaluate_program',
    'instantiate',
    'resolve_construct',
]
