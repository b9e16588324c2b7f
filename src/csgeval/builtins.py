"""
Builtin construct registry.

Maps construct names to native node generators (boolean combinators, affine
transforms, primitive solids) and function names to native expression
functions. The process-wide registry is created on first use and is
read-only after that; `shutdown_builtins()` drops it again.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .values import (
    Value, ValueKind, UNDEF,
    number_val, string_val, as_number, as_numbers,
)
from .nodes import GeometryNode, CsgNode, TransformNode, PrimitiveNode
from .constructs import BuiltinConstruct, match_arguments
from .errors import warning_bad_argument, warning_children_ignored
from .xform import Matrix, Rotation, EulerRotation, Translation, Scale

logger = logging.getLogger(__name__)


@dataclass
class BuiltinFunction:
    """
    A built-in expression function.

    The implementation receives positional Values and returns a Value;
    arguments of the wrong kind yield undef.
    """
    name: str
    implementation: Callable[..., Value]
    doc: str = ""


def _group(scope, arg_names, arg_values, children: List[GeometryNode]) -> GeometryNode:
    return GeometryNode(children=list(children))


GROUP = BuiltinConstruct("group", _group, "Group the child nodes; arguments are ignored.")


class _BuiltinArgs:
    """Call-site arguments matched against a builtin's parameter list."""

    def __init__(self, construct: str, params: Sequence[str], scope,
                 arg_names: Sequence[Optional[str]], arg_values: Sequence[Value]):
        self.construct = construct
        self.scope = scope
        matched = match_arguments(params, arg_names, arg_values)
        self.values: Dict[str, Value] = {
            name: (value if value is not None else UNDEF)
            for name, value in zip(params, matched)
        }

    def given(self, name: str) -> bool:
        return not self.values[name].is_undefined

    def bad(self, name: str) -> None:
        self.scope.context.warn(
            warning_bad_argument(self.construct, name, self.values[name].dump())
        )

    def number(self, name: str, default: float) -> float:
        value = self.values[name]
        if value.is_undefined:
            return default
        n = as_number(value)
        if n is None:
            self.bad(name)
            return default
        return n

    def flag(self, name: str, default: bool) -> bool:
        value = self.values[name]
        if value.is_undefined:
            return default
        if value.kind != ValueKind.BOOL:
            self.bad(name)
            return default
        return value.data

    def vec3(self, name: str, default: List[float], pad: float = 0.0) -> List[float]:
        """A 2- or 3-vector of numbers, padded to three components."""
        value = self.values[name]
        if value.is_undefined:
            return list(default)
        nums = as_numbers(value)
        if nums is None or not 2 <= len(nums) <= 3:
            self.bad(name)
            return list(default)
        return nums + [pad] * (3 - len(nums))


def _warn_children_ignored(scope, construct: str, children: List[GeometryNode]) -> None:
    if children:
        scope.context.warn(warning_children_ignored(construct, len(children)))


class BuiltinRegistry:
    """
    Registry of all builtin constructs and functions.

    Constructs and functions are registered by name and looked up during
    name resolution.
    """

    def __init__(self, populate: bool = True):
        self._constructs: Dict[str, BuiltinConstruct] = {}
        self._functions: Dict[str, BuiltinFunction] = {}
        if populate:
            self._register_all()

    def register(self, name: str, construct: BuiltinConstruct) -> None:
        """Register a construct, replacing any previous one of that name."""
        self._constructs[name] = construct

    def lookup(self, name: str) -> Optional[BuiltinConstruct]:
        """Look up a construct by name."""
        return self._constructs.get(name)

    def register_function(self, func: BuiltinFunction) -> None:
        """Register a function."""
        self._functions[func.name] = func

    def get_function(self, name: str) -> Optional[BuiltinFunction]:
        """Look up a function by name."""
        return self._functions.get(name)

    def clear(self) -> None:
        """Remove every construct and function."""
        self._constructs.clear()
        self._functions.clear()

    @property
    def default(self) -> BuiltinConstruct:
        """The construct used for names that resolve to nothing."""
        return self._constructs.get("group", GROUP)

    def construct_names(self) -> List[str]:
        return sorted(self._constructs)

    def function_names(self) -> List[str]:
        return sorted(self._functions)

    def __contains__(self, name: str) -> bool:
        return name in self._constructs

    def _register_all(self) -> None:
        """Register all builtin families."""
        self.register("group", GROUP)
        self._register_boolean_constructs()
        self._register_transform_constructs()
        self._register_primitive_constructs()
        self._register_math_functions()
        self._register_utility_functions()

    # --- Boolean combinators ---

    def _register_boolean_constructs(self) -> None:
        """Register union, difference and intersection."""

        def _csg(operation: str):
            def impl(scope, arg_names, arg_values, children):
                return CsgNode(children=list(children), operation=operation)
            return impl

        for operation, doc in [
            ("union", "Union of all children."),
            ("difference", "First child minus all following children."),
            ("intersection", "Intersection of all children."),
        ]:
            self.register(operation, BuiltinConstruct(operation, _csg(operation), doc))

    # --- Affine transforms ---

    def _register_transform_constructs(self) -> None:
        """Register translate, rotate, scale and multmatrix."""

        def _translate(scope, arg_names, arg_values, children):
            args = _BuiltinArgs("translate", ["v"], scope, arg_names, arg_values)
            v = args.vec3("v", [0.0, 0.0, 0.0])
            return TransformNode(children=list(children), matrix=Translation(v))

        def _rotate(scope, arg_names, arg_values, children):
            args = _BuiltinArgs("rotate", ["a", "v"], scope, arg_names, arg_values)
            a = args.values["a"]
            matrix = Matrix()
            if a.is_vector:
                angles = args.vec3("a", [0.0, 0.0, 0.0])
                matrix = EulerRotation(*angles)
            elif a.is_number:
                axis = args.vec3("v", [0.0, 0.0, 1.0])
                try:
                    matrix = Rotation(axis, a.data)
                except ValueError:
                    args.bad("v")
                    matrix = Rotation([0.0, 0.0, 1.0], a.data)
            elif not a.is_undefined:
                args.bad("a")
            return TransformNode(children=list(children), matrix=matrix)

        def _scale(scope, arg_names, arg_values, children):
            args = _BuiltinArgs("scale", ["v"], scope, arg_names, arg_values)
            v = args.values["v"]
            if v.is_number:
                matrix = Scale(v.data)
            else:
                matrix = Scale(args.vec3("v", [1.0, 1.0, 1.0], pad=1.0))
            return TransformNode(children=list(children), matrix=matrix)

        def _multmatrix(scope, arg_names, arg_values, children):
            args = _BuiltinArgs("multmatrix", ["m"], scope, arg_names, arg_values)
            m = args.values["m"]
            matrix = Matrix()
            if m.is_vector:
                rows = [as_numbers(row, 4) for row in m.data]
                if len(rows) == 3:
                    rows.append([0.0, 0.0, 0.0, 1.0])
                if len(rows) == 4 and all(row is not None for row in rows):
                    matrix = Matrix(rows)
                else:
                    args.bad("m")
            elif not m.is_undefined:
                args.bad("m")
            return TransformNode(children=list(children), matrix=matrix)

        self.register("translate", BuiltinConstruct("translate", _translate, "translate(v)"))
        self.register("rotate", BuiltinConstruct("rotate", _rotate, "rotate(a, v)"))
        self.register("scale", BuiltinConstruct("scale", _scale, "scale(v)"))
        self.register("multmatrix", BuiltinConstruct("multmatrix", _multmatrix, "multmatrix(m)"))

    # --- Primitive solids ---

    def _register_primitive_constructs(self) -> None:
        """Register cube, sphere and cylinder."""

        def _cube(scope, arg_names, arg_values, children):
            args = _BuiltinArgs("cube", ["size", "center"], scope, arg_names, arg_values)
            size_val = args.values["size"]
            size = [1.0, 1.0, 1.0]
            if size_val.is_number:
                size = [size_val.data] * 3
            elif not size_val.is_undefined:
                nums = as_numbers(size_val, 3)
                if nums is None:
                    args.bad("size")
                else:
                    size = nums
            center = args.flag("center", False)
            _warn_children_ignored(scope, "cube", children)
            return PrimitiveNode(name="cube", values={"size": size, "center": center})

        def _sphere(scope, arg_names, arg_values, children):
            args = _BuiltinArgs("sphere", ["r", "d"], scope, arg_names, arg_values)
            r = args.number("r", 1.0)
            if args.given("d"):
                r = args.number("d", 2.0 * r) / 2.0
            _warn_children_ignored(scope, "sphere", children)
            return PrimitiveNode(name="sphere", values={"r": r})

        def _cylinder(scope, arg_names, arg_values, children):
            args = _BuiltinArgs("cylinder", ["h", "r1", "r2", "center", "r", "d"],
                                scope, arg_names, arg_values)
            h = args.number("h", 1.0)
            r1 = args.number("r1", 1.0)
            r2 = args.number("r2", 1.0)
            if args.given("r"):
                r1 = r2 = args.number("r", 1.0)
            if args.given("d"):
                r1 = r2 = args.number("d", 2.0) / 2.0
            center = args.flag("center", False)
            _warn_children_ignored(scope, "cylinder", children)
            return PrimitiveNode(name="cylinder",
                                 values={"h": h, "r1": r1, "r2": r2, "center": center})

        self.register("cube", BuiltinConstruct("cube", _cube, "cube(size, center)"))
        self.register("sphere", BuiltinConstruct("sphere", _sphere, "sphere(r, d)"))
        self.register("cylinder", BuiltinConstruct("cylinder", _cylinder,
                                                   "cylinder(h, r1, r2, center, r, d)"))

    # --- Math Functions ---

    def _register_math_functions(self) -> None:
        """Register mathematical functions (angles in degrees)."""

        def _unary(fn: Callable[[float], float]) -> Callable[..., Value]:
            def impl(*args: Value) -> Value:
                if len(args) != 1 or not args[0].is_number:
                    return UNDEF
                try:
                    return number_val(fn(args[0].data))
                except (ValueError, OverflowError):
                    return UNDEF
            return impl

        def _round(x: float) -> float:
            # Halves round away from zero
            return math.copysign(math.floor(abs(x) + 0.5), x)

        def _sign(x: float) -> float:
            if x > 0:
                return 1.0
            if x < 0:
                return -1.0
            return 0.0

        def _atan2(*args: Value) -> Value:
            if len(args) != 2 or not (args[0].is_number and args[1].is_number):
                return UNDEF
            return number_val(math.degrees(math.atan2(args[0].data, args[1].data)))

        def _pow(*args: Value) -> Value:
            if len(args) != 2 or not (args[0].is_number and args[1].is_number):
                return UNDEF
            try:
                return number_val(math.pow(args[0].data, args[1].data))
            except (ValueError, OverflowError):
                return UNDEF

        def _extremum(pick: Callable) -> Callable[..., Value]:
            def impl(*args: Value) -> Value:
                if len(args) == 1 and args[0].is_vector:
                    args = args[0].data
                if not args or not all(a.is_number for a in args):
                    return UNDEF
                return number_val(pick(a.data for a in args))
            return impl

        unary_funcs = [
            ("abs", abs),
            ("sign", _sign),
            ("sin", lambda x: math.sin(math.radians(x))),
            ("cos", lambda x: math.cos(math.radians(x))),
            ("tan", lambda x: math.tan(math.radians(x))),
            ("asin", lambda x: math.degrees(math.asin(x))),
            ("acos", lambda x: math.degrees(math.acos(x))),
            ("atan", lambda x: math.degrees(math.atan(x))),
            ("sqrt", math.sqrt),
            ("exp", math.exp),
            ("ln", math.log),
            ("log", math.log10),
            ("floor", math.floor),
            ("ceil", math.ceil),
            ("round", _round),
        ]

        for name, fn in unary_funcs:
            self.register_function(BuiltinFunction(name, _unary(fn)))

        self.register_function(BuiltinFunction("atan2", _atan2))
        self.register_function(BuiltinFunction("pow", _pow))
        # Variadic min/max, or a single vector argument
        self.register_function(BuiltinFunction("min", _extremum(min)))
        self.register_function(BuiltinFunction("max", _extremum(max)))

    # --- Utility Functions ---

    def _register_utility_functions(self) -> None:
        """Register len and str."""

        def _len(*args: Value) -> Value:
            if len(args) != 1 or args[0].kind not in (ValueKind.VECTOR, ValueKind.STRING):
                return UNDEF
            return number_val(len(args[0].data))

        def _str(*args: Value) -> Value:
            parts = [a.data if a.kind == ValueKind.STRING else a.dump() for a in args]
            return string_val("".join(parts))

        self.register_function(BuiltinFunction("len", _len))
        self.register_function(BuiltinFunction("str", _str))


# Global registry instance
_registry: Optional[BuiltinRegistry] = None


def get_builtin_registry() -> BuiltinRegistry:
    """Get the global builtin registry (creating it on first use)."""
    global _registry
    if _registry is None:
        logger.debug("initializing builtin registry")
        _registry = BuiltinRegistry()
    return _registry


def initialize_builtins() -> BuiltinRegistry:
    """Populate the global registry; calling it again is a no-op."""
    return get_builtin_registry()


def shutdown_builtins() -> None:
    """Clear and drop the global registry."""
    global _registry
    if _registry is not None:
        _registry.clear()
        _registry = None
