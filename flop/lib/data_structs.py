from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
from typing import TYPE_CHECKING, Union

from flop.lang.lexer import BOOL, INT, STR, Token
from flop.lib.err import OperandError

if TYPE_CHECKING:
    from typing import Any


###############################################################################
#                                                                             #
#  AST                                                                        #
#                                                                             #
###############################################################################

# Nodes are immutable, so sharing a subtree is as good as deep-cloning it.


@dataclass(slots=True, frozen=True)
class Literal:
    token: Token

    @property
    def value(self) -> int | str | bool:
        return self.token.value


@dataclass(slots=True, frozen=True)
class VariableCall:
    name: Token


@dataclass(slots=True, frozen=True)
class VariableDefinition:
    name: Token
    assignment: Node


@dataclass(slots=True, frozen=True)
class FunctionCall:
    name: Token
    arguments: tuple[Node, ...]


@dataclass(slots=True, frozen=True)
class FunctionDefinition:
    name: Token
    parameters: tuple[Token, ...]
    docstring: Token | None
    body: Node

    @property
    def doc(self) -> str | None:
        return None if self.docstring is None else self.docstring.value


@dataclass(slots=True, frozen=True)
class List:
    token: Token
    items: tuple[Node, ...]


@dataclass(slots=True, frozen=True)
class Conditional:
    token: Token
    condition: Node
    true_branch: Node
    false_branch: Node


Node = Union[
    Literal,
    VariableCall,
    VariableDefinition,
    FunctionCall,
    FunctionDefinition,
    List,
    Conditional,
]


def node_token(node: Node) -> Token:
    """The token a diagnostic for `node` should point at."""
    if type(node) is Literal or type(node) is List or type(node) is Conditional:
        return node.token
    return node.name


def quote(value: object, at: Token) -> Node:
    """Build a node that evaluates back to `value`, positioned at `at`."""
    if type(value) is bool:
        kind = BOOL
    elif type(value) is int:
        kind = INT
    elif type(value) is str:
        kind = STR
    elif type(value) is list:
        return List(at, tuple(quote(v, at) for v in value))
    else:
        raise OperandError(f"Can't bind {print_str(value)} to a parameter", at)

    return Literal(Token(kind, value, at.lineno, at.column, at.end, at.filename))


###############################################################################
#                                                                             #
#  ENVIRONMENT                                                                #
#                                                                             #
###############################################################################


class Env:
    """
    Two name tables: user functions and variables. Tables are shared between
    an environment and its clones until one of them writes, then the writer
    takes a private copy. That makes `child` and `clone` O(1).
    """

    __slots__ = ("functions", "variables", "_shared")

    def __init__(
        self,
        functions: dict[str, FunctionDefinition] | None = None,
        variables: dict[str, VariableDefinition] | None = None,
    ) -> None:
        self.functions = {} if functions is None else functions
        self.variables = {} if variables is None else variables
        self._shared = False

    def _own(self) -> None:
        if self._shared:
            self.functions = self.functions.copy()
            self.variables = self.variables.copy()
            self._shared = False

    def child(self) -> Env:
        """Call-local environment: the same functions, no variables."""
        self._shared = True
        env = Env(self.functions, {})
        env._shared = True
        return env

    def clone(self) -> Env:
        self._shared = True
        env = Env(self.functions, self.variables)
        env._shared = True
        return env

    def commit(self, other: Env) -> None:
        self.functions = other.functions
        self.variables = other.variables
        self._shared = other._shared = True

    def define_function(self, fd: FunctionDefinition) -> None:
        self._own()
        self.functions[fd.name.value] = fd

    def define_variable(self, vd: VariableDefinition) -> None:
        self._own()
        self.variables[vd.name.value] = vd

    def get_function(self, name: str) -> FunctionDefinition | None:
        return self.functions.get(name)

    def get_variable(self, name: str) -> VariableDefinition | None:
        return self.variables.get(name)

    def __repr__(self) -> str:
        return (
            f"#<env functions={sorted(self.functions)} "
            f"variables={sorted(self.variables)}>"
        )


###############################################################################
#                                                                             #
#  PRINTING                                                                   #
#                                                                             #
###############################################################################


str_escape = {
    "\\": "\\\\",
    '"': '\\"',
    "\r": "\\r",
    "\f": "\\f",
    "\v": "\\v",
    "\n": "\\n",
    "\t": "\\t",
    "\b": "\\b",
    "\a": "\\a",
}


def print_str(val: Any) -> str:
    if val is None:
        return "#<void>"
    if val is True:
        return "true"
    if val is False:
        return "false"
    if type(val) is str:
        for k, v in str_escape.items():
            val = val.replace(k, v)
        return f'"{val}"'
    if type(val) is list:
        result = StringIO()
        result.write("[")
        result.write(" ".join(print_str(item) for item in val))
        result.write("]")
        return result.getvalue()

    return f"{val!r}"


def display_node(node: Node) -> str:
    """Render a node back into flop syntax."""
    if type(node) is Literal:
        return print_str(node.value)
    if type(node) is VariableCall:
        return node.name.value
    if type(node) is VariableDefinition:
        return f"(setq {node.name.value} {display_node(node.assignment)})"
    if type(node) is FunctionCall:
        args = "".join(f" {display_node(arg)}" for arg in node.arguments)
        return f"({node.name.value}{args})"
    if type(node) is FunctionDefinition:
        params = " ".join(p.value for p in node.parameters)
        doc = "" if node.doc is None else f" {print_str(node.doc)}"
        return f"(defn {node.name.value} [{params}]{doc} {display_node(node.body)})"
    if type(node) is List:
        return f"[{' '.join(display_node(item) for item in node.items)}]"
    if type(node) is Conditional:
        parts = (node.condition, node.true_branch, node.false_branch)
        return f"(if {' '.join(display_node(p) for p in parts)})"

    return f"{node!r}"
