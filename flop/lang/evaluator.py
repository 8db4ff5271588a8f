"""
Tree-walking evaluator for flop. Walks one node against a mutable `Env`.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import TYPE_CHECKING

from flop.lang.lexer import Lexer
from flop.lang.libmath import Comparison, Operation, comparisons, operations
from flop.lang.parser import Parser
from flop.lib.contracts import check_arity, check_contract, is_bool, is_int
from flop.lib.data_structs import (
    Conditional,
    Env,
    FunctionCall,
    FunctionDefinition,
    List,
    Literal,
    VariableCall,
    VariableDefinition,
    node_token,
    quote,
)
from flop.lib.err import (
    EvalError,
    MathError,
    MyError,
    OperandError,
    VariableError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import Any

    from flop.lang.lexer import Token
    from flop.lib.data_structs import Node


builtin_operations = operations()
builtin_comparisons = comparisons()


def make_trace(token: Token) -> str:
    return f"  at {token.value} ({token.lineno}:{token.column})"


def eval_operation(env: Env, oper: Operation, fc: FunctionCall) -> int:
    check_arity(oper.name, len(fc.arguments), (1, None), fc.name, OperandError)

    first, *rest = fc.arguments
    result = my_eval(env, first)
    check_contract(oper.name, is_int, result, node_token(first))

    for operand in rest:
        val = my_eval(env, operand)
        check_contract(oper.name, is_int, val, node_token(operand))
        if oper.name == "/" and val == 0:
            raise MathError("division by zero", node_token(operand))
        result = oper.apply(result, val)

    return result


def eval_comparison(env: Env, comp: Comparison, fc: FunctionCall) -> bool:
    check_arity(comp.name, len(fc.arguments), (2, None), fc.name, OperandError)

    first, *rest = fc.arguments
    result = my_eval(env, first)
    check_contract(comp.name, is_int, result, node_token(first))

    # The running value becomes 1 or 0 after every step, so `(> 3 2 1)`
    # compares 1 against 1 on its second step.
    for operand in rest:
        val = my_eval(env, operand)
        check_contract(comp.name, is_int, val, node_token(operand))
        result = int(comp.apply(result, val))
        if result == 0 and comp.short_circuit:
            return False

    return result != 0


def eval_user_function(env: Env, fd: FunctionDefinition, fc: FunctionCall) -> Any:
    check_arity(fc.name.value, len(fc.arguments), (len(fd.parameters),) * 2, fc.name)

    values = [my_eval(env, arg) for arg in fc.arguments]

    local_env = env.child()
    for param, arg, val in zip(fd.parameters, fc.arguments, values):
        local_env.define_variable(VariableDefinition(param, quote(val, node_token(arg))))

    try:
        return my_eval(local_env, fd.body)
    except MyError as e:
        trace = make_trace(fc.name)
        if not e.msg.endswith(trace):
            e.msg += f"\n{trace}"
        raise


def eval_call(env: Env, fc: FunctionCall) -> Any:
    name = fc.name.value

    if name in builtin_operations:
        return eval_operation(env, builtin_operations[name], fc)

    if name in builtin_comparisons:
        return eval_comparison(env, builtin_comparisons[name], fc)

    if (fd := env.get_function(name)) is not None:
        return eval_user_function(env, fd, fc)

    known = list(env.functions) + list(builtin_operations) + list(builtin_comparisons)
    if mat := get_close_matches(name, known):
        raise VariableError(
            f"function `{name}` not found. Did you mean: {mat[0]}", fc.name
        )
    raise VariableError(f"function `{name}` not found", fc.name)


def my_eval(env: Env, node: Node) -> Any:
    if type(node) is Literal:
        return node.value

    if type(node) is VariableCall:
        name = node.name.value
        var = env.get_variable(name)
        if var is None:
            if mat := get_close_matches(name, env.variables):
                raise VariableError(
                    f"variable `{name}` not defined. Did you mean: {mat[0]}", node.name
                )
            raise VariableError(f"variable `{name}` not defined", node.name)
        return my_eval(env.clone(), var.assignment)

    if type(node) is VariableDefinition:
        env.define_variable(node)
        return None

    if type(node) is List:
        return [my_eval(env, item) for item in node.items]

    if type(node) is FunctionDefinition:
        env.define_function(node)
        return None

    if type(node) is FunctionCall:
        return eval_call(env, node)

    assert type(node) is Conditional
    cond = my_eval(env, node.condition)
    check_contract("if", is_bool, cond, node_token(node.condition))
    return my_eval(env, node.true_branch if cond else node.false_branch)


def forms(env: Env, parser: Parser) -> Iterator[Any]:
    """
    Evaluate every form `parser` yields, one at a time. A form is evaluated
    against a clone of `env` that replaces `env` only when the form succeeds.
    """
    while not parser.at_end():
        yield evaluate_form(env, parser.expr())


def evaluate_form(env: Env, node: Node) -> Any:
    trial = env.clone()
    try:
        result = my_eval(trial, node)
    except RecursionError:
        raise EvalError("maximum recursion depth exceeded", node_token(node))
    env.commit(trial)
    return result


def interpret(env: Env, parser: Parser) -> list[Any]:
    return list(forms(env, parser))


def run(text: str, env: Env | None = None, filename: str = "<string>") -> list[Any]:
    if env is None:
        env = Env()
    return interpret(env, Parser(Lexer(filename, text).tokens()))
