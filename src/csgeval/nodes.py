"""
Geometry node tree produced by evaluation.

Nodes describe CSG composition steps; they carry the interpreted parameters
of the construct that produced them but no geometry. Every node owns its
children exclusively, so a produced tree is a strict tree with one root per
evaluation pass. The geometry kernel folds it bottom-up.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from .values import wrap_value, number_val
from .xform import Matrix


@dataclass
class GeometryNode:
    """A plain grouping node: the kernel combines its children by union."""
    children: List["GeometryNode"] = field(default_factory=list)

    @property
    def kind(self) -> str:
        return "group"

    @property
    def is_leaf(self) -> bool:
        """Leaf kinds render without a block."""
        return False

    def add_child(self, node: "GeometryNode") -> None:
        """Append a child, taking ownership of it."""
        if node is self:
            raise ValueError("a geometry node cannot contain itself")
        self.children.append(node)

    def params_text(self) -> str:
        return ""

    def params(self) -> Dict[str, Any]:
        return {}

    def dump(self, indent: str = "") -> str:
        """Render this subtree, one tab of indentation per level."""
        text = f"{indent}{self.kind}({self.params_text()})"
        if self.is_leaf and not self.children:
            return text + ";\n"
        text += " {\n"
        for child in self.children:
            text += child.dump(indent + "\t")
        return text + f"{indent}}}\n"

    def walk(self) -> Iterator["GeometryNode"]:
        """Depth-first, pre-order traversal of the subtree."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def count(self) -> int:
        """Number of nodes in the subtree, this one included."""
        return sum(1 for _ in self.walk())

    def depth(self) -> int:
        """Number of levels in the subtree (a lone node has depth 1)."""
        deepest = 0
        stack = [(self, 1)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            stack.extend((child, level + 1) for child in node.children)
        return deepest

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "params": self.params(),
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class CsgNode(GeometryNode):
    """Boolean combination of the children (first child is the operand for difference)."""
    operation: str = "union"

    @property
    def kind(self) -> str:
        return self.operation


@dataclass
class TransformNode(GeometryNode):
    """Affine transform applied to the union of the children."""
    matrix: Matrix = field(default_factory=Matrix)

    @property
    def kind(self) -> str:
        return "multmatrix"

    def params_text(self) -> str:
        rows = []
        for row in self.matrix.rows():
            rows.append("[" + ", ".join(number_val(x).dump() for x in row) + "]")
        return "[" + ", ".join(rows) + "]"

    def params(self) -> Dict[str, Any]:
        return {"matrix": self.matrix.rows()}


@dataclass
class PrimitiveNode(GeometryNode):
    """A primitive solid; `values` holds its interpreted parameters in declaration order."""
    name: str = "cube"
    values: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        return self.name

    @property
    def is_leaf(self) -> bool:
        return True

    def params_text(self) -> str:
        return ", ".join(f"{key} = {wrap_value(val).dump()}" for key, val in self.values.items())

    def params(self) -> Dict[str, Any]:
        return dict(self.values)
