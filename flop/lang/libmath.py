from __future__ import annotations

import operator
from collections.abc import Callable
from dataclasses import dataclass


def quotient(a: int, b: int) -> int:
    """Integer division that truncates toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


@dataclass(slots=True, frozen=True)
class Operation:
    name: str
    apply: Callable[[int, int], int]


@dataclass(slots=True, frozen=True)
class Comparison:
    name: str
    apply: Callable[[int, int], bool]

    # Ordering comparisons stop at the first false step; equality always
    # evaluates every operand.
    short_circuit: bool = True


def operations() -> dict[str, Operation]:
    return {
        "+": Operation("+", operator.add),
        "-": Operation("-", operator.sub),
        "*": Operation("*", operator.mul),
        "/": Operation("/", quotient),
    }


def comparisons() -> dict[str, Comparison]:
    return {
        "=": Comparison("=", operator.eq, False),
        "==": Comparison("==", operator.eq, False),
        ">": Comparison(">", operator.gt),
        ">=": Comparison(">=", operator.ge),
        "<": Comparison("<", operator.lt),
        "<=": Comparison("<=", operator.le),
    }
