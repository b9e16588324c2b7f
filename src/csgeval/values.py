"""
Runtime values produced by expression evaluation.

A Value is a small tagged union: undef, number, boolean, string or a vector
of further Values. Values are immutable; operations always build new ones.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence


class ValueKind(Enum):
    """Tags of the value union."""
    UNDEFINED = "undef"
    NUMBER = "number"
    BOOL = "bool"
    STRING = "string"
    VECTOR = "vector"


@dataclass(frozen=True)
class Value:
    """
    A runtime value.

    The `data` field holds a float for numbers, a bool, a str, a tuple of
    Values for vectors, and None for undef.
    """
    kind: ValueKind
    data: Any = None

    def __repr__(self) -> str:
        return f"Value({self.kind.value}, {self.dump()})"

    @property
    def is_undefined(self) -> bool:
        return self.kind == ValueKind.UNDEFINED

    @property
    def is_number(self) -> bool:
        return self.kind == ValueKind.NUMBER

    @property
    def is_vector(self) -> bool:
        return self.kind == ValueKind.VECTOR

    def is_truthy(self) -> bool:
        """Check if this value is truthy in boolean context."""
        if self.kind == ValueKind.BOOL:
            return bool(self.data)
        if self.kind == ValueKind.NUMBER:
            return self.data != 0
        if self.kind in (ValueKind.STRING, ValueKind.VECTOR):
            return len(self.data) > 0
        return False

    def dump(self) -> str:
        """Render the value the way it would be written in source."""
        if self.kind == ValueKind.NUMBER:
            return _format_number(self.data)
        if self.kind == ValueKind.BOOL:
            return "true" if self.data else "false"
        if self.kind == ValueKind.STRING:
            escaped = self.data.replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        if self.kind == ValueKind.VECTOR:
            return "[" + ", ".join(v.dump() for v in self.data) + "]"
        return "undef"

    def to_python(self) -> Any:
        """Convert to plain Python data (vectors become lists)."""
        if self.kind == ValueKind.VECTOR:
            return [v.to_python() for v in self.data]
        return self.data


def _format_number(x: float) -> str:
    if math.isnan(x):
        return "nan"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    if x == int(x) and abs(x) < 1e15:
        return str(int(x))
    return repr(x)


UNDEF = Value(ValueKind.UNDEFINED)


# Convenience constructors

def undef() -> Value:
    """The undefined value."""
    return UNDEF


def number_val(x: float) -> Value:
    """Create a number value."""
    return Value(ValueKind.NUMBER, float(x))


def bool_val(b: bool) -> Value:
    """Create a boolean value."""
    return Value(ValueKind.BOOL, bool(b))


def string_val(s: str) -> Value:
    """Create a string value."""
    return Value(ValueKind.STRING, str(s))


def vector_val(items: Sequence[Value]) -> Value:
    """Create a vector value from a sequence of Values."""
    return Value(ValueKind.VECTOR, tuple(items))


def wrap_value(data: Any) -> Value:
    """Wrap raw Python data (None, bool, int, float, str, list/tuple) as a Value."""
    if isinstance(data, Value):
        return data
    if data is None:
        return UNDEF
    if isinstance(data, bool):
        return bool_val(data)
    if isinstance(data, (int, float)):
        return number_val(data)
    if isinstance(data, str):
        return string_val(data)
    if isinstance(data, (list, tuple)):
        return vector_val([wrap_value(item) for item in data])
    raise TypeError(f"cannot convert {type(data).__name__} to a value")


# Accessors used by builtins

def as_number(v: Value) -> Optional[float]:
    """The number held by `v`, or None if it is not a number."""
    if v.kind == ValueKind.NUMBER:
        return v.data
    return None


def as_numbers(v: Value, length: int = None) -> Optional[List[float]]:
    """
    The numbers of a vector value, or None if `v` is not a vector of numbers.

    When `length` is given the vector must have exactly that many entries.
    """
    if v.kind != ValueKind.VECTOR:
        return None
    if length is not None and len(v.data) != length:
        return None
    numbers = []
    for item in v.data:
        if item.kind != ValueKind.NUMBER:
            return None
        numbers.append(item.data)
    return numbers
