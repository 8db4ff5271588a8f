from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flop.lang.lexer import Token


class MyError(Exception):
    def __init__(self, msg: object, token: Token | None = None):
        super().__init__(msg)
        self.msg = f"{msg}"
        self.token = token

    def __str__(self) -> str:
        if self.token is None:
            return self.msg
        tok = self.token
        return f"{self.msg}\n  at {tok.filename}:{tok.lineno}:{tok.column}"


class LexError(MyError):
    pass


class ParseError(MyError):
    pass


class ClosingError(ParseError):
    """A form is still open when the tokens run out."""


class FunctionNameError(ParseError):
    pass


class EvalError(MyError):
    pass


class VariableError(EvalError):
    pass


class ParameterError(EvalError):
    pass


class OperandError(EvalError):
    pass


class MathError(EvalError):
    pass


def diagnose(error: MyError, text: str, color: bool = False) -> str:
    """
    Return the source line holding the offending token with the token's
    span underlined. Empty if the error has no token or the line is gone.
    """
    tok = error.token
    if tok is None:
        return ""

    lines = text.splitlines()
    if not 0 < tok.lineno <= len(lines):
        return ""

    line = lines[tok.lineno - 1]
    start = max(tok.column - 1, 0)
    width = max(tok.end - tok.column, 1)
    mark = "^" + "~" * (width - 1)
    if color:
        mark = f"\033[1;31m{mark}\033[0m"

    return f"  {line}\n  {' ' * start}{mark}"
