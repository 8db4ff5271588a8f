"""
Recursive-descent parser. Dispatches on the first pending token of a form and
produces exactly one node per call to `expr`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flop.lang.lexer import (
    DEFN,
    DOC,
    EOF,
    IF,
    LBRAC,
    LPAREN,
    RBRAC,
    RPAREN,
    SCALARS,
    SETQ,
    SYM,
    Token,
)
from flop.lib.data_structs import (
    Conditional,
    FunctionCall,
    FunctionDefinition,
    List,
    Literal,
    VariableCall,
    VariableDefinition,
)
from flop.lib.err import ClosingError, FunctionNameError, ParseError

if TYPE_CHECKING:
    from typing import NoReturn

    from flop.lib.data_structs import Node


brac_pairs = {LPAREN: RPAREN, LBRAC: RBRAC}


class Parser:
    __slots__ = ("tokens", "pos", "depth")

    def __init__(self, tokens: list[Token]):
        if not tokens or tokens[-1].type != EOF:
            last = tokens[-1] if tokens else None
            filename = "<string>" if last is None else last.filename
            lineno = 1 if last is None else last.lineno
            column = 1 if last is None else last.end
            tokens = tokens + [Token(EOF, "EOF", lineno, column, column + 1, filename)]

        self.tokens = tokens
        self.pos = 0

        # Signed bracket nesting counter shared by every production.
        self.depth = 0

    @property
    def current_token(self) -> Token:
        return self.tokens[self.pos]

    def at_end(self) -> bool:
        return self.current_token.type == EOF

    def eat(self) -> Token:
        token = self.tokens[self.pos]
        if token.type == EOF:
            self.unclosed(token)
        self.pos += 1
        return token

    def unclosed(self, token: Token) -> NoReturn:
        if self.depth > 0:
            raise ClosingError("Expected closing bracket before end", token)
        raise ClosingError("Unexpected end of input", token)

    def unexpected(self, where: str, token: Token) -> NoReturn:
        if token.type == EOF:
            self.unclosed(token)
        raise ParseError(f"{where}: Unexpected token `{token}`", token)

    def close(self, where: str, baseline: int) -> None:
        """Require the `)` that ends a keyword form."""
        token = self.current_token
        if token.type != RPAREN:
            if token.type == EOF:
                self.unclosed(token)
            raise ParseError(f"{where}: Expected `)` but got `{token}`", token)
        self.eat()
        self.depth = baseline

    def parse(self) -> Node:
        """Parse one form; any tokens left over after it are an error."""
        node = self.expr()
        if not self.at_end():
            raise ParseError("Extra tokens remaining", self.current_token)
        return node

    def parse_all(self) -> list[Node]:
        nodes = []
        while not self.at_end():
            nodes.append(self.expr())
        return nodes

    def expr(self) -> Node:
        token = self.current_token

        if token.type == SETQ:
            return self.variable_definition()
        if token.type == LBRAC:
            return self.list()
        if token.type == DEFN:
            return self.function_definition()
        if token.type == LPAREN:
            return self.call()
        if token.type == IF:
            return self.conditional()
        if token.type == SYM:
            self.eat()
            return VariableCall(token)
        if token.type in SCALARS:
            self.eat()
            return Literal(token)
        if token.type == EOF:
            raise ParseError("No form to parse", token)

        self.unexpected("Expression", token)

    def operand(self, where: str) -> Node:
        token = self.current_token

        if token.type in SCALARS:
            self.eat()
            return Literal(token)
        if token.type == SYM:
            self.eat()
            return VariableCall(token)
        if token.type == LPAREN:
            return self.call()
        if token.type == LBRAC:
            return self.list()
        if token.type == IF:
            return self.conditional()

        self.unexpected(where, token)

    def variable_definition(self) -> VariableDefinition:
        self.eat()
        baseline = self.depth
        self.depth += 1

        name = self.eat()
        if name.type != SYM:
            raise FunctionNameError(
                f"Variable Definition: Expected a variable name, got `{name}`", name
            )

        value = self.eat()
        if value.type not in SCALARS:
            raise ParseError(
                f"Variable assignment: Expected an integer, bool or string, got `{value}`",
                value,
            )

        self.close("Variable Definition", baseline)
        return VariableDefinition(name, Literal(value))

    def list(self) -> List:
        opening = self.eat()
        baseline = self.depth
        self.depth += 1
        items: list[Node] = []

        while True:
            token = self.current_token
            if token.type == RBRAC:
                self.eat()
                self.depth -= 1
                if self.depth == baseline:
                    break
            elif token.type == LBRAC:
                items.append(self.list())
            elif token.type in SCALARS:
                self.eat()
                items.append(Literal(token))
            elif token.type == SYM:
                self.eat()
                items.append(VariableCall(token))
            elif token.type == RPAREN:
                raise ParseError("List: Expected `]` but got `)`", token)
            else:
                self.unexpected("List", token)

        return List(opening, tuple(items))

    def call(self) -> FunctionCall:
        self.eat()
        baseline = self.depth
        self.depth += 1

        name = self.current_token
        if name.type != SYM:
            if name.type == RPAREN:
                raise ParseError("Empty expression `()`", name)
            self.unexpected("Expression: Expected a function name", name)
        self.eat()

        arguments: list[Node] = []
        while True:
            token = self.current_token
            if token.type == RPAREN:
                self.eat()
                self.depth -= 1
                if self.depth == baseline:
                    break
            elif token.type == RBRAC:
                raise ParseError("Expression: Expected `)` but got `]`", token)
            else:
                arguments.append(self.operand("Expression"))

        return FunctionCall(name, tuple(arguments))

    def function_definition(self) -> FunctionDefinition:
        self.eat()
        baseline = self.depth
        self.depth += 1

        name = self.eat()
        if name.type != SYM:
            raise FunctionNameError(
                f"Function Definition: Expected a function name, got `{name}`", name
            )

        opening = self.eat()
        if opening.type != LBRAC:
            raise ParseError(
                f"Function Definition: Expected `[` to open the parameter list, got `{opening}`",
                opening,
            )

        parameters: list[Token] = []
        while self.current_token.type != RBRAC:
            param = self.eat()
            if param.type != SYM:
                raise ParseError(
                    f"Parameter: Expected a parameter name, got `{param}`", param
                )
            if param.value in (p.value for p in parameters):
                raise ParseError(f"Parameter: Duplicate parameter `{param}`", param)
            parameters.append(param)
        self.eat()

        docstring = self.eat()
        if docstring.type != DOC:
            raise ParseError(
                f"Function Definition: Expected a docstring after the parameter list, got `{docstring}`",
                docstring,
            )

        token = self.current_token
        if token.type == LPAREN:
            body: Node = self.call()
        elif token.type == IF:
            body = self.conditional()
        else:
            self.unexpected("Function Definition: Expected `(` to open the body", token)

        self.close("Function Definition", baseline)
        return FunctionDefinition(name, tuple(parameters), docstring, body)

    def conditional(self) -> Conditional:
        token = self.eat()
        baseline = self.depth
        self.depth += 1

        condition = self.operand("Conditional")
        true_branch = self.operand("Conditional")
        false_branch = self.operand("Conditional")
        self.close("Conditional", baseline)
        return Conditional(token, condition, true_branch, false_branch)


def parse(tokens: list[Token]) -> Node:
    return Parser(tokens).parse()
