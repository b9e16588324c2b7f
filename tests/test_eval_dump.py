"""
Tests for the textual dumps of programs and node trees.
"""

import copy

from csgeval import (
    UserConstruct, UserFunction, Instantiation, BuiltinRegistry,
    Literal, Identifier, VectorExpr, BinaryOp, call,
    GeometryNode, PrimitiveNode, evaluate_program,
)


def vec(*xs):
    return VectorExpr([Literal(x) for x in xs])


class TestInstantiationDump:
    """Test dumps of call sites."""

    def test_no_children(self):
        """A call without a block ends with a semicolon."""
        inst = Instantiation.build("cube", [("size", Literal(10)), ("center", Literal(True))])
        assert inst.dump() == "cube(size = 10, center = true);\n"

    def test_single_child(self):
        """A single child goes on the next line, indented."""
        inst = Instantiation.build("translate", [(None, vec(1, 0, 0))], children=[
            Instantiation.build("cube", [(None, Literal(1))]),
        ])
        assert inst.dump() == "translate([1, 0, 0])\n\tcube(1);\n"

    def test_block(self):
        """Several children are dumped as a braced block."""
        inst = Instantiation.build("union", children=[
            Instantiation.build("cube"),
            Instantiation.build("sphere", [("r", Literal(2))]),
        ])
        assert inst.dump() == "union() {\n\tcube();\n\tsphere(r = 2);\n}\n"

    def test_label_and_indent(self):
        """Labels prefix the call; indentation is applied to every line."""
        inst = Instantiation.build("cube", label="a")
        assert inst.dump("\t") == "\ta: cube();\n"


class TestConstructDump:
    """Test dumps of definitions."""

    def test_user_construct(self):
        """Functions, nested modules, locals and body, in that order."""
        m = UserConstruct(
            "m",
            formal_names=["a", "b"],
            formal_defaults=[None, BinaryOp(Identifier("a"), "+", Literal(1))],
            body=[Instantiation.build("cube", [(None, Identifier("c"))])],
        )
        m.add_function(UserFunction("f", ["x"], expr=BinaryOp(Identifier("x"), "*", Literal(2))))
        m.add_construct(UserConstruct("inner"))
        m.assign("c", Literal(3))
        assert m.dump() == (
            "module m(a, b = (a + 1)) {\n"
            "\tfunction f(x) = (x * 2);\n"
            "\tmodule inner() {\n"
            "\t}\n"
            "\tc = 3;\n"
            "\tcube(c);\n"
            "}\n"
        )

    def test_function_without_body(self):
        """A function without an expression dumps as undef."""
        assert UserFunction("g").dump() == "function g() = undef;\n"

    def test_builtin(self):
        """Builtins dump as a declaration."""
        registry = BuiltinRegistry()
        assert registry.lookup("cube").dump() == "builtin module cube();\n"
        assert registry.lookup("cube").dump("\t", "box") == "\tbuiltin module box();\n"


class TestNodeDump:
    """Test dumps of evaluated node trees."""

    def program(self):
        return UserConstruct("main", body=[
            Instantiation.build("union", children=[
                Instantiation.build("cube"),
                Instantiation.build("translate", [(None, vec(1, 0, 0))], children=[
                    Instantiation.build("sphere"),
                ]),
            ]),
        ])

    def test_tree_dump(self):
        """Nodes dump with their interpreted parameters, one tab per level."""
        result = evaluate_program(self.program())
        assert result.success
        assert result.dump() == (
            "group() {\n"
            "\tunion() {\n"
            "\t\tcube(size = [1, 1, 1], center = false);\n"
            "\t\tmultmatrix([[1, 0, 0, 1], [0, 1, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]]) {\n"
            "\t\t\tsphere(r = 1);\n"
            "\t\t}\n"
            "\t}\n"
            "}\n"
        )

    def test_dump_is_deterministic(self):
        """Evaluating the same program twice gives identical dumps."""
        first = evaluate_program(self.program()).dump()
        second = evaluate_program(self.program()).dump()
        assert first == second

    def test_copy_dumps_identically(self):
        """An equivalent copy of a tree dumps the same text."""
        root = evaluate_program(self.program()).root
        duplicate = copy.deepcopy(root)
        assert duplicate == root
        assert duplicate.dump() == root.dump()

    def test_empty_group(self):
        """Non-leaf nodes always render a block."""
        assert GeometryNode().dump() == "group() {\n}\n"

    def test_failed_result_dumps_nothing(self):
        """A failed evaluation has no tree to dump."""
        r = UserConstruct("r", body=[Instantiation.build("r")])
        main = UserConstruct("main", nested_constructs={"r": r}, body=[Instantiation.build("r")])
        assert evaluate_program(main).dump() == ""

    def test_primitive_values_in_order(self):
        """Primitive parameters keep their declaration order."""
        node = PrimitiveNode(name="cylinder", values={"h": 2.0, "r1": 1.0, "r2": 0.5, "center": True})
        assert node.dump() == "cylinder(h = 2, r1 = 1, r2 = 0.5, center = true);\n"

    def test_argument_expressions(self):
        """Calls inside argument lists dump like function calls."""
        inst = Instantiation.build("cube", [(None, call("max", Literal(1), Identifier("w")))])
        assert inst.dump() == "cube(max(1, w));\n"
