from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .data_structs import print_str
from .err import EvalError, OperandError, ParameterError

if TYPE_CHECKING:
    from flop.lang.lexer import Token


@dataclass(slots=True)
class Contract:
    # Convenient flat contract class
    name: str
    c: Callable[[object], bool]

    def __call__(self, v: object) -> bool:
        return self.c(v)

    def __str__(self) -> str:
        return self.name


is_int = Contract("int?", lambda v: type(v) is int)
is_bool = Contract("bool?", lambda v: type(v) is bool)


def check_contract(name: str, c: Contract, val: object, token: Token) -> None:
    if not c(val):
        raise OperandError(f"`{name}` expected {c}, but got {print_str(val)}", token)


def check_arity(
    name: str,
    amount: int,
    arity: tuple[int, int | None],
    token: Token,
    err: type[EvalError] = ParameterError,
) -> None:
    lower, upper = arity

    assert not (upper is not None and lower > upper)
    base = f"`{name}` has an arity mismatch. Expected "

    if lower == upper and amount != lower:
        raise err(f"{base}{lower}, got {amount}", token)
    if upper is None and amount < lower:
        raise err(f"{base}at least {lower}, got {amount}", token)
    if upper is not None and (amount > upper or amount < lower):
        raise err(f"{base}between {lower} and {upper}, got {amount}", token)
