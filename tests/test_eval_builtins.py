"""
Tests for the builtin registry, constructs and functions.
"""

import math

import pytest

import csgeval.builtins as builtins_module
from csgeval import (
    BuiltinConstruct, BuiltinFunction, BuiltinRegistry,
    GeometryNode, CsgNode, TransformNode, PrimitiveNode,
    create_scope, get_builtin_registry, initialize_builtins, shutdown_builtins,
    number_val, bool_val, string_val, wrap_value, UNDEF,
)


@pytest.fixture
def scope():
    return create_scope(registry=BuiltinRegistry())


def run(scope, name, args=(), children=()):
    """Call a builtin construct with (name, raw value) argument pairs."""
    construct = scope.context.registry.lookup(name)
    arg_names = [n for n, _ in args]
    arg_values = [wrap_value(v) for _, v in args]
    return construct.evaluate(scope, arg_names, arg_values, list(children))


def fn(scope, name, *args):
    function = scope.context.registry.get_function(name)
    return function.implementation(*[wrap_value(a) for a in args])


def close(a, b):
    return all(abs(x - y) < 1e-9 for x, y in zip(a, b))


class TestRegistry:
    """Test registration and lookup."""

    def test_families_registered(self):
        """Every builtin construct family is present."""
        registry = BuiltinRegistry()
        for name in ["group", "union", "difference", "intersection",
                     "translate", "rotate", "scale", "multmatrix",
                     "cube", "sphere", "cylinder"]:
            assert name in registry
        assert "sqrt" in registry.function_names()

    def test_register_replaces(self):
        """Registering a name again replaces the previous construct."""
        registry = BuiltinRegistry()
        replacement = BuiltinConstruct("cube", lambda s, n, v, c: GeometryNode())
        registry.register("cube", replacement)
        assert registry.lookup("cube") is replacement

    def test_lookup_missing(self):
        """Unknown names are absent, not errors."""
        registry = BuiltinRegistry()
        assert registry.lookup("nope") is None
        assert registry.get_function("nope") is None

    def test_empty_registry_default(self):
        """An empty registry still falls back to a group construct."""
        registry = BuiltinRegistry(populate=False)
        assert registry.construct_names() == []
        assert registry.default.name == "group"

    def test_clear(self):
        """clear() drops constructs and functions."""
        registry = BuiltinRegistry()
        registry.clear()
        assert registry.construct_names() == []
        assert registry.function_names() == []

    def test_custom_function(self):
        """Functions can be registered by embedders."""
        registry = BuiltinRegistry()
        registry.register_function(BuiltinFunction("twice", lambda v: number_val(v.data * 2)))
        assert registry.get_function("twice").implementation(number_val(3)) == number_val(6)


class TestGlobalRegistry:
    """Test process-wide registry lifecycle."""

    @pytest.fixture(autouse=True)
    def restore(self):
        yield
        shutdown_builtins()
        initialize_builtins()

    def test_initialize_is_idempotent(self):
        """Repeated initialization returns the same registry."""
        assert initialize_builtins() is initialize_builtins()
        assert get_builtin_registry() is initialize_builtins()

    def test_shutdown_clears(self):
        """Shutdown clears the registry and the next use builds a new one."""
        old = get_builtin_registry()
        shutdown_builtins()
        assert builtins_module._registry is None
        assert old.construct_names() == []
        fresh = get_builtin_registry()
        assert fresh is not old
        assert "cube" in fresh

    def test_shutdown_twice(self):
        """Shutting down an absent registry is a no-op."""
        shutdown_builtins()
        shutdown_builtins()
        assert builtins_module._registry is None


class TestBooleanConstructs:
    """Test union, difference and intersection."""

    def test_children_kept_in_order(self, scope):
        """The child order is preserved."""
        a = PrimitiveNode(name="cube")
        b = PrimitiveNode(name="sphere")
        node = run(scope, "difference", children=[a, b])
        assert isinstance(node, CsgNode)
        assert node.kind == "difference"
        assert node.children == [a, b]

    def test_group_ignores_arguments(self, scope):
        """group() ignores its arguments."""
        node = run(scope, "group", [(None, 5), ("x", "y")])
        assert type(node) is GeometryNode
        assert node.children == []


class TestTransformConstructs:
    """Test translate, rotate, scale and multmatrix."""

    def test_translate(self, scope):
        """Translation by a vector; 2-vectors are padded with zero."""
        node = run(scope, "translate", [(None, [1, 2])])
        assert isinstance(node, TransformNode)
        assert node.matrix.mul([0, 0, 0, 1]) == [1.0, 2.0, 0.0, 1]

    def test_translate_bad_argument(self, scope):
        """A non-vector argument warns and falls back to identity."""
        node = run(scope, "translate", [("v", "far")])
        assert node.matrix.isidentity()
        assert len(scope.context.diagnostics.with_code("W404")) == 1

    def test_rotate_about_axis(self, scope):
        """A number with an axis rotates about that axis."""
        node = run(scope, "rotate", [("a", 90), ("v", [0, 0, 1])])
        assert close(node.matrix.mul([1, 0, 0, 1]), [0, 1, 0, 1])

    def test_rotate_default_axis(self, scope):
        """A bare angle rotates about z."""
        node = run(scope, "rotate", [(None, 90)])
        assert close(node.matrix.mul([1, 0, 0, 1]), [0, 1, 0, 1])

    def test_rotate_euler(self, scope):
        """A vector of angles rotates about x, then y, then z."""
        node = run(scope, "rotate", [(None, [90, 0, 0])])
        assert close(node.matrix.mul([0, 1, 0, 1]), [0, 0, 1, 1])

    def test_rotate_zero_axis(self, scope):
        """A zero axis warns and uses z."""
        node = run(scope, "rotate", [(None, 90), (None, [0, 0, 0])])
        assert close(node.matrix.mul([1, 0, 0, 1]), [0, 1, 0, 1])
        assert len(scope.context.diagnostics.with_code("W404")) == 1

    def test_scale(self, scope):
        """Uniform and per-axis scaling."""
        assert run(scope, "scale", [(None, 2)]).matrix.mul([1, 1, 1, 1]) == [2.0, 2.0, 2.0, 1.0]
        assert run(scope, "scale", [(None, [2, 3])]).matrix.mul([1, 1, 1, 1]) == [2.0, 3.0, 1.0, 1.0]

    def test_multmatrix(self, scope):
        """A 3x4 matrix gets the homogeneous row appended."""
        rows = [[1, 0, 0, 5], [0, 1, 0, 6], [0, 0, 1, 7]]
        node = run(scope, "multmatrix", [(None, rows)])
        assert node.matrix.rows()[3] == [0.0, 0.0, 0.0, 1.0]
        assert node.matrix.mul([0, 0, 0, 1]) == [5.0, 6.0, 7.0, 1.0]

    def test_multmatrix_malformed(self, scope):
        """Malformed matrices warn and use identity."""
        node = run(scope, "multmatrix", [(None, [[1, 2]])])
        assert node.matrix.isidentity()
        assert scope.context.diagnostics.warning_count == 1


class TestPrimitiveConstructs:
    """Test cube, sphere and cylinder."""

    def test_cube_defaults(self, scope):
        """cube() is a unit cube at the origin corner."""
        node = run(scope, "cube")
        assert isinstance(node, PrimitiveNode)
        assert node.values == {"size": [1.0, 1.0, 1.0], "center": False}

    def test_cube_positional(self, scope):
        """Positional size and center."""
        node = run(scope, "cube", [(None, [1, 2, 3]), (None, True)])
        assert node.values == {"size": [1.0, 2.0, 3.0], "center": True}

    def test_cube_scalar_size(self, scope):
        """A number is used for all three sides."""
        assert run(scope, "cube", [("size", 10)]).values["size"] == [10.0, 10.0, 10.0]

    def test_cube_bad_size(self, scope):
        """A string size warns and falls back."""
        node = run(scope, "cube", [("size", "x")])
        assert node.values["size"] == [1.0, 1.0, 1.0]
        assert len(scope.context.diagnostics.with_code("W404")) == 1

    def test_cube_size_needs_three_components(self, scope):
        """A 2-vector size warns and falls back to the unit cube."""
        node = run(scope, "cube", [(None, [2, 3])])
        assert node.values["size"] == [1.0, 1.0, 1.0]
        assert len(scope.context.diagnostics.with_code("W404")) == 1

    def test_cube_drops_children(self, scope):
        """Primitives take no children."""
        node = run(scope, "cube", children=[PrimitiveNode(name="sphere")])
        assert node.children == []
        warnings = scope.context.diagnostics.with_code("W405")
        assert len(warnings) == 1
        assert warnings[0].message == "cube() does not take children; 1 ignored"

    def test_sphere(self, scope):
        """Radius or diameter."""
        assert run(scope, "sphere").values == {"r": 1.0}
        assert run(scope, "sphere", [(None, 3)]).values == {"r": 3.0}
        assert run(scope, "sphere", [("d", 4)]).values == {"r": 2.0}

    def test_cylinder(self, scope):
        """Radius overrides both ends; diameter overrides radius."""
        node = run(scope, "cylinder", [("h", 5), ("r", 2)])
        assert node.values == {"h": 5.0, "r1": 2.0, "r2": 2.0, "center": False}
        node = run(scope, "cylinder", [(None, 3), (None, 1), (None, 0.5), (None, True)])
        assert node.values == {"h": 3.0, "r1": 1.0, "r2": 0.5, "center": True}
        node = run(scope, "cylinder", [("r", 5), ("d", 2)])
        assert node.values["r1"] == 1.0


class TestBuiltinFunctions:
    """Test the math and utility functions."""

    def test_trig_in_degrees(self, scope):
        """Trigonometry uses degrees."""
        assert fn(scope, "sin", 90).data == pytest.approx(1.0)
        assert fn(scope, "cos", 180).data == pytest.approx(-1.0)
        assert fn(scope, "atan2", 1, 1).data == pytest.approx(45.0)
        assert fn(scope, "asin", 1).data == pytest.approx(90.0)

    def test_domain_errors_are_undef(self, scope):
        """Out-of-domain arguments give undef."""
        assert fn(scope, "sqrt", -1) is UNDEF
        assert fn(scope, "ln", 0) is UNDEF
        assert fn(scope, "acos", 2) is UNDEF

    def test_wrong_kinds_are_undef(self, scope):
        """Non-numbers give undef."""
        assert fn(scope, "abs", "x") is UNDEF
        assert fn(scope, "pow", 2) is UNDEF

    def test_rounding(self, scope):
        """round() rounds halves away from zero."""
        assert fn(scope, "round", 2.5) == number_val(3)
        assert fn(scope, "round", -2.5) == number_val(-3)
        assert fn(scope, "floor", -0.5) == number_val(-1)
        assert fn(scope, "ceil", 0.2) == number_val(1)

    def test_misc_math(self, scope):
        """Other numeric functions."""
        assert fn(scope, "sign", -3) == number_val(-1)
        assert fn(scope, "pow", 2, 10) == number_val(1024)
        assert fn(scope, "log", 1000).data == pytest.approx(3.0)
        assert fn(scope, "exp", 0) == number_val(1)

    def test_min_max(self, scope):
        """min/max accept several numbers or one vector."""
        assert fn(scope, "max", 1, 5, 3) == number_val(5)
        assert fn(scope, "min", [4, -2, 7]) == number_val(-2)
        assert fn(scope, "max") is UNDEF

    def test_len_and_str(self, scope):
        """len of vectors and strings; str concatenates."""
        assert fn(scope, "len", [1, 2, 3]) == number_val(3)
        assert fn(scope, "len", "abcd") == number_val(4)
        assert fn(scope, "len", 5) is UNDEF
        assert fn(scope, "str", "a", 1, [2, 3], True) == string_val("a1[2, 3]true")
