"""
Turn flop source text into a flat list of tokens for the parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from io import StringIO
from typing import TYPE_CHECKING

from flop.lib.err import LexError

if TYPE_CHECKING:
    from typing import Any, NoReturn


INT, SYM, STR, BOOL, DOC = "INT", "SYM", "STR", "BOOL", "DOC"
LPAREN, RPAREN, LBRAC, RBRAC = "(", ")", "[", "]"
DEFN, SETQ, IF, ERROR, EOF = "defn", "setq", "if", "ERROR", "EOF"

KEYWORDS = (DEFN, SETQ, IF)
SCALARS = (INT, STR, BOOL)

int_pattern = re.compile(r"[+-]?[0-9]+")

str_escape = {
    "a": "\a",
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "v": "\v",
    "f": "\f",
    "r": "\r",
    '"': '"',
    "\\": "\\",
}


@dataclass(slots=True, frozen=True)
class Token:
    type: str
    value: Any
    lineno: int
    column: int
    end: int
    filename: str = "<string>"

    def __str__(self) -> str:
        if self.type == STR or self.type == DOC:
            return f'"{self.value}"'
        if self.type == BOOL:
            return "true" if self.value else "false"
        return f"{self.value}"


class Lexer:
    __slots__ = ("filename", "text", "pos", "char", "lineno", "column", "opened")

    def __init__(self, filename: str, text: str):
        self.filename = filename
        self.text = text
        self.pos: int = 0
        self.lineno: int = 1
        self.column: int = 1
        self.char: str | None = text[0] if text else None

        # Kind of every open `(`: LPAREN or the keyword that replaced it.
        self.opened: list[str] = []

    def error(self, msg: str, lineno: int, column: int) -> NoReturn:
        tok = Token(ERROR, msg, lineno, column, self.column, self.filename)
        raise LexError(msg, tok)

    def advance(self) -> None:
        if self.char == "\n":
            self.lineno += 1
            self.column = 0

        self.pos += 1

        if self.pos > len(self.text) - 1:
            self.char = None
        else:
            self.char = self.text[self.pos]
        self.column += 1

    def peek(self, n: int = 1) -> str:
        return self.text[self.pos + 1 : self.pos + 1 + n]

    def char_is_norm(self) -> bool:
        return self.char is not None and self.char not in '()[]"; \t\n\r\x0b\x0c'

    def is_whitespace(self) -> bool:
        return self.char is not None and self.char in " \t\n\r\x0b\x0c"

    def make(self, type: str, value: Any, lineno: int, column: int) -> Token:
        end = self.column if self.lineno == lineno else column + 1
        return Token(type, value, lineno, column, end, self.filename)

    def keyword(self) -> str | None:
        for word in KEYWORDS:
            if self.peek(len(word)) != word:
                continue
            after = self.pos + len(word) + 1
            if after >= len(self.text) or self.text[after] in '()[]"; \t\n\r\x0b\x0c':
                return word
        return None

    def string(self) -> str:
        lineno, column = self.lineno, self.column
        self.advance()
        result = StringIO()
        while self.char is not None and self.char != '"':
            if self.char == "\\":
                self.advance()
                if self.char is None:
                    break

                if self.char not in str_escape:
                    self.error(
                        f"Unknown escape sequence `\\{self.char}` in string",
                        self.lineno,
                        self.column - 1,
                    )
                result.write(str_escape[self.char])
            else:
                result.write(self.char)
            self.advance()

        if self.char is None:
            self.error('Expected a closing `"`', lineno, column)

        self.advance()
        return result.getvalue()

    def word(self) -> str:
        buf = StringIO()
        while self.char_is_norm():
            assert self.char is not None
            buf.write(self.char)
            self.advance()
        return buf.getvalue()

    def tokens(self) -> list[Token]:
        result: list[Token] = []

        while self.char is not None:
            if self.is_whitespace():
                self.advance()
                continue

            lineno, column = self.lineno, self.column

            if self.char == ";" and self.peek() == ";":
                while self.char is not None and self.char != "\n":
                    self.advance()
                continue

            if self.char == "(":
                word = self.keyword()
                self.advance()
                if word is None:
                    self.opened.append(LPAREN)
                    result.append(self.make(LPAREN, "(", lineno, column))
                else:
                    for _ in word:
                        self.advance()
                    self.opened.append(word)
                    result.append(self.make(word, word, lineno, column))
                continue

            if self.char == ")":
                if not self.opened:
                    self.error("Unexpected closing `)`", lineno, column)
                self.advance()
                self.opened.pop()
                result.append(self.make(RPAREN, ")", lineno, column))
                continue

            if self.char in "[]":
                _brac = self.char
                self.advance()
                result.append(self.make(_brac, _brac, lineno, column))
                continue

            if self.char == '"':
                my_str = self.string()
                is_doc = (
                    bool(result)
                    and result[-1].type == RBRAC
                    and bool(self.opened)
                    and self.opened[-1] == DEFN
                )
                result.append(self.make(DOC if is_doc else STR, my_str, lineno, column))
                continue

            word = self.word()
            if not word:
                # A lone `;` is an ordinary symbol.
                self.advance()
                word = ";"

            if int_pattern.fullmatch(word):
                result.append(self.make(INT, int(word), lineno, column))
            elif word in {"true", "#t"}:
                result.append(self.make(BOOL, True, lineno, column))
            elif word in {"false", "#f"}:
                result.append(self.make(BOOL, False, lineno, column))
            elif word.startswith("#"):
                self.error(f"Unknown hash literal `{word}`", lineno, column)
            else:
                result.append(self.make(SYM, word, lineno, column))

        result.append(
            Token(EOF, "EOF", self.lineno, self.column, self.column + 1, self.filename)
        )
        return result


def tokenize(text: str, filename: str = "<string>") -> list[Token]:
    return Lexer(filename, text).tokens()
