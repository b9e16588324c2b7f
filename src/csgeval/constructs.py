"""
Callable constructs: builtin generators and user definitions.

A construct is either a BuiltinConstruct (a Python callable registered in the
builtin registry) or a UserConstruct (formals, locals, nested definitions and
a body of instantiations). UserFunction is the expression-level counterpart
of UserConstruct and returns a Value instead of a node.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, TYPE_CHECKING

from .values import Value, UNDEF
from .nodes import GeometryNode

if TYPE_CHECKING:
    from .context import Scope
    from .expressions import Expression
    from .instantiation import Instantiation

logger = logging.getLogger(__name__)

BuiltinImpl = Callable[
    ["Scope", Sequence[Optional[str]], Sequence[Value], List[GeometryNode]],
    GeometryNode,
]


def match_arguments(
    formal_names: Sequence[str],
    arg_names: Sequence[Optional[str]],
    arg_values: Sequence[Value],
) -> List[Optional[Value]]:
    """
    Match call-site arguments to formal parameters.

    A formal takes the named argument with its name, otherwise the next
    unconsumed positional argument. Unmatched formals come back as None;
    arguments matching no formal are dropped.
    """
    index = {name: i for i, name in enumerate(formal_names)}
    matched: List[Optional[Value]] = [None] * len(formal_names)
    positional = []
    for name, value in zip(arg_names, arg_values):
        if name:
            if name in index:
                matched[index[name]] = value
        else:
            positional.append(value)

    remaining = iter(positional)
    for i in range(len(formal_names)):
        if matched[i] is None:
            matched[i] = next(remaining, None)
    return matched


def bind_parameters(
    scope: "Scope",
    formal_names: Sequence[str],
    formal_defaults: Sequence[Optional["Expression"]],
    arg_names: Sequence[Optional[str]],
    arg_values: Sequence[Value],
) -> None:
    """
    Bind formals into `scope` in declaration order.

    Defaults are evaluated in `scope` itself, so a default can refer to the
    formals bound before it. Formals with neither an argument nor a default
    are bound to undef.
    """
    matched = match_arguments(formal_names, arg_names, arg_values)
    for name, default, value in zip(formal_names, formal_defaults, matched):
        if value is None:
            value = default.evaluate(scope) if default is not None else UNDEF
        scope.set(name, value)


def _dump_formals(formal_names: Sequence[str], formal_defaults: Sequence[Optional["Expression"]]) -> str:
    parts = []
    for name, default in zip(formal_names, formal_defaults):
        if default is not None:
            parts.append(f"{name} = {default.dump()}")
        else:
            parts.append(name)
    return ", ".join(parts)


def _check_parallel(owner: str, names: Sequence, exprs: Sequence, what: str) -> None:
    if len(names) != len(exprs):
        raise ValueError(f"{owner}: {len(names)} {what} names but {len(exprs)} expressions")


@dataclass
class BuiltinConstruct:
    """
    A natively implemented construct.

    The implementation receives the already evaluated arguments and child
    nodes and returns a new node. It must not keep a reference to the scope.
    """
    name: str
    implementation: BuiltinImpl
    doc: str = ""

    def evaluate(
        self,
        scope: "Scope",
        arg_names: Sequence[Optional[str]],
        arg_values: Sequence[Value],
        supplied_children: List[GeometryNode],
    ) -> GeometryNode:
        return self.implementation(scope, arg_names, arg_values, supplied_children)

    def dump(self, indent: str = "", name: str = None) -> str:
        return f"{indent}builtin module {name or self.name}();\n"


@dataclass
class UserFunction:
    """A user-defined function: formals plus one result expression."""
    name: str
    formal_names: List[str] = field(default_factory=list)
    formal_defaults: List[Optional["Expression"]] = field(default_factory=list)
    expr: Optional["Expression"] = None

    def __post_init__(self) -> None:
        if not self.formal_defaults:
            self.formal_defaults = [None] * len(self.formal_names)
        _check_parallel(f"function {self.name}", self.formal_names, self.formal_defaults, "formal")

    def call(
        self,
        definition_scope: "Scope",
        arg_names: Sequence[Optional[str]],
        arg_values: Sequence[Value],
    ) -> Value:
        """Evaluate the function body in a new scope under its definition scope."""
        scope = definition_scope.child(f"function {self.name}")
        bind_parameters(scope, self.formal_names, self.formal_defaults, arg_names, arg_values)
        if self.expr is None:
            return UNDEF
        return self.expr.evaluate(scope)

    def dump(self, indent: str = "", name: str = None) -> str:
        body = self.expr.dump() if self.expr is not None else "undef"
        formals = _dump_formals(self.formal_names, self.formal_defaults)
        return f"{indent}function {name or self.name}({formals}) = {body};\n"


@dataclass
class UserConstruct:
    """
    A user-defined construct (module).

    Owns its formals, local assignments, nested definitions and body. The
    program itself is a UserConstruct whose body holds the top-level
    instantiations.
    """
    name: str
    formal_names: List[str] = field(default_factory=list)
    formal_defaults: List[Optional["Expression"]] = field(default_factory=list)
    local_var_names: List[str] = field(default_factory=list)
    local_var_exprs: List["Expression"] = field(default_factory=list)
    nested_functions: Dict[str, UserFunction] = field(default_factory=dict)
    nested_constructs: Dict[str, "UserConstruct"] = field(default_factory=dict)
    body: List["Instantiation"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.formal_defaults:
            self.formal_defaults = [None] * len(self.formal_names)
        _check_parallel(f"module {self.name}", self.formal_names, self.formal_defaults, "formal")
        _check_parallel(f"module {self.name}", self.local_var_names, self.local_var_exprs, "local")

    def add_function(self, function: UserFunction) -> None:
        self.nested_functions[function.name] = function

    def add_construct(self, construct: "UserConstruct") -> None:
        self.nested_constructs[construct.name] = construct

    def assign(self, name: str, expr: "Expression") -> None:
        """Append a local assignment."""
        self.local_var_names.append(name)
        self.local_var_exprs.append(expr)

    def evaluate(
        self,
        definition_scope: "Scope",
        arg_names: Sequence[Optional[str]],
        arg_values: Sequence[Value],
        supplied_children: List[GeometryNode],
    ) -> GeometryNode:
        """
        Instantiate this construct.

        Args:
            definition_scope: Scope that holds this definition (lexical parent)
            arg_names: Argument names, None/empty for positional arguments
            arg_values: Argument values, evaluated in the caller's scope
            supplied_children: Nodes from the call's child block

        Returns:
            A group node holding the body's nodes followed by the supplied ones
        """
        logger.debug("module %s: %d argument(s), %d supplied child(ren)",
                     self.name, len(arg_values), len(supplied_children))
        scope = definition_scope.child(f"module {self.name}")
        bind_parameters(scope, self.formal_names, self.formal_defaults, arg_names, arg_values)
        scope.install(self.nested_functions, self.nested_constructs)

        for var_name, expr in zip(self.local_var_names, self.local_var_exprs):
            scope.set(var_name, expr.evaluate(scope))

        node = GeometryNode()
        for inst in self.body:
            node.add_child(inst.evaluate(scope))
        for child in supplied_children:
            node.add_child(child)
        return node

    def dump(self, indent: str = "", name: str = None) -> str:
        formals = _dump_formals(self.formal_names, self.formal_defaults)
        text = f"{indent}module {name or self.name}({formals}) {{\n"
        inner = indent + "\t"
        for fn_name, function in self.nested_functions.items():
            text += function.dump(inner, fn_name)
        for mod_name, construct in self.nested_constructs.items():
            text += construct.dump(inner, mod_name)
        for var_name, expr in zip(self.local_var_names, self.local_var_exprs):
            text += f"{inner}{var_name} = {expr.dump()};\n"
        for inst in self.body:
            text += inst.dump(inner)
        return text + f"{indent}}}\n"
