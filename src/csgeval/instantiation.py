"""
Instantiation nodes: the call sites of the program tree.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

from .source import SourceSpan

if TYPE_CHECKING:
    from .context import Scope
    from .expressions import Expression
    from .nodes import GeometryNode


@dataclass
class Instantiation:
    """
    One call of a construct: `label: name(args) { children }`.

    `arg_names` runs parallel to `arg_exprs`; a None or empty name marks a
    positional argument. The label only shows up in dumps.
    """
    construct_name: str
    arg_names: List[Optional[str]] = field(default_factory=list)
    arg_exprs: List["Expression"] = field(default_factory=list)
    children: List["Instantiation"] = field(default_factory=list)
    label: Optional[str] = None
    span: Optional[SourceSpan] = None

    def __post_init__(self) -> None:
        if len(self.arg_names) != len(self.arg_exprs):
            raise ValueError(
                f"{self.construct_name}: {len(self.arg_names)} argument names "
                f"but {len(self.arg_exprs)} argument expressions"
            )

    @classmethod
    def build(
        cls,
        construct_name: str,
        args: Sequence[Tuple[Optional[str], "Expression"]] = (),
        children: Sequence["Instantiation"] = (),
        label: str = None,
        span: SourceSpan = None,
    ) -> "Instantiation":
        """Build from (name, expression) pairs, the way a parser reads them."""
        return cls(
            construct_name=construct_name,
            arg_names=[name for name, _ in args],
            arg_exprs=[expr for _, expr in args],
            children=list(children),
            label=label,
            span=span,
        )

    def evaluate(self, scope: "Scope") -> "GeometryNode":
        """Evaluate this call (and its child block) against `scope`."""
        from .interpreter import instantiate
        return instantiate(self, scope)

    def dump(self, indent: str = "") -> str:
        text = indent
        if self.label:
            text += f"{self.label}: "
        args = []
        for name, expr in zip(self.arg_names, self.arg_exprs):
            if name:
                args.append(f"{name} = {expr.dump()}")
            else:
                args.append(expr.dump())
        text += f"{self.construct_name}({', '.join(args)})"
        if not self.children:
            return text + ";\n"
        if len(self.children) == 1:
            return text + "\n" + self.children[0].dump(indent + "\t")
        text += " {\n"
        for child in self.children:
            text += child.dump(indent + "\t")
        return text + f"{indent}}}\n"
