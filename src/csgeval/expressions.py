"""
Expression nodes consumed by the construct evaluator.

Every expression supports `evaluate(scope) -> Value` and `dump() -> str`.
Problems with operand kinds are not fatal: the result is undef, as in the
modeling language. Only a malformed tree (an unknown operator) raises.
"""

import math
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from .values import (
    Value, ValueKind, UNDEF,
    number_val, bool_val, string_val, vector_val, wrap_value,
)
from .errors import error_invalid_expression, warning_undefined_variable, warning_undefined_function

if TYPE_CHECKING:
    from .context import Scope


class Expression(ABC):
    """Base class for all expressions."""

    @abstractmethod
    def evaluate(self, scope: "Scope") -> Value:
        ...

    @abstractmethod
    def dump(self) -> str:
        ...

    def __str__(self) -> str:
        return self.dump()


@dataclass
class Literal(Expression):
    """A constant; raw Python data is wrapped on construction."""
    value: Any

    def __post_init__(self) -> None:
        self.value = wrap_value(self.value)

    def evaluate(self, scope: "Scope") -> Value:
        return self.value

    def dump(self) -> str:
        return self.value.dump()


@dataclass
class Identifier(Expression):
    """A variable reference."""
    name: str

    def evaluate(self, scope: "Scope") -> Value:
        value = scope.get(self.name)
        if value is None:
            if scope.context.config.warn_undefined_variables:
                scope.context.warn(warning_undefined_variable(self.name))
            return UNDEF
        return value

    def dump(self) -> str:
        return self.name


@dataclass
class VectorExpr(Expression):
    """A vector literal (e.g., [x, 2, 3])."""
    elements: List[Expression] = field(default_factory=list)

    def evaluate(self, scope: "Scope") -> Value:
        return vector_val([elem.evaluate(scope) for elem in self.elements])

    def dump(self) -> str:
        return "[" + ", ".join(elem.dump() for elem in self.elements) + "]"


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _modulo(a: float, b: float) -> float:
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


_NUMERIC_OPS: Dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
    "%": _modulo,
}

_COMPARISONS: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}


def _arithmetic(op: str, left: Value, right: Value) -> Value:
    """Apply an arithmetic operator, element-wise where vectors are involved."""
    if left.is_number and right.is_number:
        return number_val(_NUMERIC_OPS[op](left.data, right.data))
    if left.is_vector and right.is_vector:
        if len(left.data) != len(right.data):
            return UNDEF
        if op in ("+", "-"):
            return vector_val([_arithmetic(op, a, b) for a, b in zip(left.data, right.data)])
        if op == "*":
            # Dot product
            if not all(a.is_number and b.is_number for a, b in zip(left.data, right.data)):
                return UNDEF
            return number_val(sum(a.data * b.data for a, b in zip(left.data, right.data)))
        return UNDEF
    if left.is_vector and right.is_number and op in ("*", "/"):
        return vector_val([_arithmetic(op, a, right) for a in left.data])
    if left.is_number and right.is_vector and op == "*":
        return vector_val([_arithmetic(op, left, b) for b in right.data])
    return UNDEF


@dataclass
class BinaryOp(Expression):
    """A binary operation (e.g., a + b, x && y)."""
    left: Expression
    operator: str
    right: Expression

    def evaluate(self, scope: "Scope") -> Value:
        op = self.operator
        # Short-circuit for logical operators
        if op == "&&":
            left = self.left.evaluate(scope)
            if not left.is_truthy():
                return bool_val(False)
            return bool_val(self.right.evaluate(scope).is_truthy())
        if op == "||":
            left = self.left.evaluate(scope)
            if left.is_truthy():
                return bool_val(True)
            return bool_val(self.right.evaluate(scope).is_truthy())

        left = self.left.evaluate(scope)
        right = self.right.evaluate(scope)
        if op in _NUMERIC_OPS:
            return _arithmetic(op, left, right)
        if op == "==":
            return bool_val(left == right)
        if op == "!=":
            return bool_val(left != right)
        if op in _COMPARISONS:
            if left.kind == right.kind and left.kind in (ValueKind.NUMBER, ValueKind.STRING):
                return bool_val(_COMPARISONS[op](left.data, right.data))
            return UNDEF
        raise error_invalid_expression(f"unknown binary operator '{op}'")

    def dump(self) -> str:
        return f"({self.left.dump()} {self.operator} {self.right.dump()})"


@dataclass
class UnaryOp(Expression):
    """A unary operation (e.g., -n, !flag)."""
    operator: str
    operand: Expression

    def evaluate(self, scope: "Scope") -> Value:
        value = self.operand.evaluate(scope)
        if self.operator == "!":
            return bool_val(not value.is_truthy())
        if self.operator == "-":
            return _negate(value)
        if self.operator == "+":
            return value if value.is_number or value.is_vector else UNDEF
        raise error_invalid_expression(f"unknown unary operator '{self.operator}'")

    def dump(self) -> str:
        return f"{self.operator}{self.operand.dump()}"


def _negate(value: Value) -> Value:
    if value.is_number:
        return number_val(-value.data)
    if value.is_vector:
        return vector_val([_negate(v) for v in value.data])
    return UNDEF


@dataclass
class TernaryOp(Expression):
    """A conditional expression (cond ? a : b)."""
    condition: Expression
    then_expr: Expression
    else_expr: Expression

    def evaluate(self, scope: "Scope") -> Value:
        if self.condition.evaluate(scope).is_truthy():
            return self.then_expr.evaluate(scope)
        return self.else_expr.evaluate(scope)

    def dump(self) -> str:
        return f"({self.condition.dump()} ? {self.then_expr.dump()} : {self.else_expr.dump()})"


@dataclass
class IndexAccess(Expression):
    """Index access (e.g., v[0], s[2])."""
    object: Expression
    index: Expression

    def evaluate(self, scope: "Scope") -> Value:
        obj = self.object.evaluate(scope)
        index = self.index.evaluate(scope)
        if not index.is_number or obj.kind not in (ValueKind.VECTOR, ValueKind.STRING):
            return UNDEF
        if not math.isfinite(index.data):
            return UNDEF
        i = int(index.data)
        if i < 0 or i >= len(obj.data):
            return UNDEF
        if obj.kind == ValueKind.STRING:
            return string_val(obj.data[i])
        return obj.data[i]

    def dump(self) -> str:
        return f"{self.object.dump()}[{self.index.dump()}]"


@dataclass
class FunctionCall(Expression):
    """
    A function call (e.g., f(1, b = 2)).

    User functions visible from the scope win over builtin functions.
    """
    name: str
    arg_names: List[Optional[str]] = field(default_factory=list)
    arg_exprs: List[Expression] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.arg_names) != len(self.arg_exprs):
            raise ValueError(
                f"{self.name}(): {len(self.arg_names)} argument names "
                f"but {len(self.arg_exprs)} argument expressions"
            )

    def evaluate(self, scope: "Scope") -> Value:
        args = [arg.evaluate(scope) for arg in self.arg_exprs]
        ctx = scope.context

        found = scope.lookup_function(self.name)
        if found is not None:
            function, definition_scope = found
            with ctx.enter(self.name):
                return function.call(definition_scope, self.arg_names, args)

        builtin = ctx.registry.get_function(self.name)
        if builtin is not None:
            return builtin.implementation(*args)

        ctx.warn(warning_undefined_function(self.name))
        return UNDEF

    def dump(self) -> str:
        args = []
        for name, expr in zip(self.arg_names, self.arg_exprs):
            if name:
                args.append(f"{name} = {expr.dump()}")
            else:
                args.append(expr.dump())
        return f"{self.name}({', '.join(args)})"


def call(name: str, *args: Expression, **kwargs: Expression) -> FunctionCall:
    """Build a function call: positional arguments first, then named ones."""
    names = [None] * len(args) + list(kwargs)
    exprs = list(args) + list(kwargs.values())
    return FunctionCall(name, names, exprs)
