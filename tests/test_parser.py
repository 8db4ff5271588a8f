from __future__ import annotations

import pytest

from flop.lang.lexer import tokenize
from flop.lang.parser import Parser, parse
from flop.lib.data_structs import (
    Conditional,
    FunctionCall,
    FunctionDefinition,
    List,
    Literal,
    VariableCall,
    VariableDefinition,
    display_node,
)
from flop.lib.err import ClosingError, FunctionNameError, MyError, ParseError


def p(text: str):
    return parse(tokenize(text))


def test_call() -> None:
    node = p("(+ 1 2)")
    assert type(node) is FunctionCall
    assert node.name.value == "+"
    assert [type(arg) for arg in node.arguments] == [Literal, Literal]
    assert [arg.value for arg in node.arguments] == [1, 2]


def test_nested_list_argument() -> None:
    node = p("(+ [1 2 3])")
    assert type(node) is FunctionCall
    (arg,) = node.arguments
    assert type(arg) is List
    assert [item.value for item in arg.items] == [1, 2, 3]


def test_list_items() -> None:
    node = p("[1 x [2 3] \"s\"]")
    assert type(node) is List
    assert [type(item) for item in node.items] == [Literal, VariableCall, List, Literal]
    assert display_node(node) == '[1 x [2 3] "s"]'


def test_function_definition() -> None:
    node = p('(defn add [x y] "docs" (+ x y))')
    assert type(node) is FunctionDefinition
    assert node.name.value == "add"
    assert [param.value for param in node.parameters] == ["x", "y"]
    assert node.doc == "docs"
    assert type(node.body) is FunctionCall
    assert display_node(node) == '(defn add [x y] "docs" (+ x y))'


def test_function_with_conditional_body() -> None:
    node = p('(defn pick [a b] "" (if (< a b) a b))')
    assert type(node) is FunctionDefinition
    assert type(node.body) is Conditional
    assert type(node.body.condition) is FunctionCall


def test_variable_definition() -> None:
    node = p('(setq v "hi")')
    assert type(node) is VariableDefinition
    assert node.name.value == "v"
    assert type(node.assignment) is Literal
    assert node.assignment.value == "hi"


def test_bare_symbol() -> None:
    node = p("v")
    assert type(node) is VariableCall
    assert node.name.value == "v"


def test_conditional_as_operand() -> None:
    node = p("(+ (if true 1 2) 3)")
    assert type(node) is FunctionCall
    assert type(node.arguments[0]) is Conditional
    assert node.arguments[1].value == 3


def test_one_form_per_parse() -> None:
    with pytest.raises(ParseError, match="Extra tokens remaining"):
        p("1 2")


def test_parse_all() -> None:
    nodes = Parser(tokenize('(setq a 1) (+ a 2) "x"')).parse_all()
    assert [type(node) for node in nodes] == [VariableDefinition, FunctionCall, Literal]
    assert Parser(tokenize("")).parse_all() == []


def test_empty_input() -> None:
    with pytest.raises(ParseError, match="No form to parse"):
        p("")


def test_parser_adds_missing_eof() -> None:
    tokens = tokenize("(+ 1 2)")[:-1]
    assert type(Parser(tokens).parse()) is FunctionCall
    with pytest.raises(ParseError):
        Parser([]).parse()


@pytest.mark.parametrize(
    "text",
    ["(", "(+ 1", "[1 2", "(f (g 1)", "[[]", "(if true 1"],
)
def test_unclosed_brackets(text: str) -> None:
    with pytest.raises(ClosingError):
        p(text)


@pytest.mark.parametrize("text", ["(+ [1 2)", "(+ 1 2]", "(+ [1 2) 3"])
def test_wrong_closing_bracket(text: str) -> None:
    with pytest.raises(ParseError) as info:
        p(text)
    assert type(info.value) is ParseError


@pytest.mark.parametrize("text", ["]", "(()", "()", "[(]", "(+ 1 2))", "((", "]]["])
def test_malformed_brackets_fail_cleanly(text: str) -> None:
    with pytest.raises(MyError):
        p(text)


def test_empty_expression() -> None:
    with pytest.raises(ParseError, match="Empty expression"):
        p("()")


def test_definition_errors() -> None:
    with pytest.raises(FunctionNameError):
        p("(setq 1 2)")
    with pytest.raises(FunctionNameError):
        p('(defn 1 [x] "d" (+ x 1))')
    with pytest.raises(ParseError, match="integer, bool or string"):
        p("(setq x (+ 1 2))")
    with pytest.raises(ParseError, match="docstring"):
        p("(defn f [x] (+ x 1))")
    with pytest.raises(ParseError, match="Duplicate parameter"):
        p('(defn f [x x] "" (+ x 1))')
    with pytest.raises(ParseError, match="parameter name"):
        p('(defn f [1] "" (+ 1 1))')
    with pytest.raises(ParseError, match="open the body"):
        p('(defn f [x] "" x)')


def test_error_carries_token() -> None:
    with pytest.raises(ParseError) as info:
        p("(+ 1 2]")
    assert info.value.token is not None
    assert info.value.token.value == "]"
    assert info.value.token.column == 7


@pytest.mark.parametrize(
    "text, message",
    [
        ("(setq x 1 2)", "Variable Definition: Expected `)` but got `2`"),
        ("(if true 1 2 3)", "Conditional: Expected `)` but got `3`"),
        ("(+ 1 (if true 2 3 4))", "Conditional: Expected `)` but got `4`"),
        ("(+ (if true 1) 5)", "Conditional: Unexpected token `)`"),
        ('(defn f [x] "d" (+ x 1) (+ 2 3))', "Function Definition: Expected `)`"),
        ('(defn f [x] "d")', "Function Definition: Expected `(` to open the body"),
    ],
)
def test_keyword_forms_have_a_fixed_shape(text: str, message: str) -> None:
    with pytest.raises(ParseError) as info:
        p(text)
    assert type(info.value) is ParseError
    assert message in info.value.msg


@pytest.mark.parametrize(
    "text", ["(setq x", "(setq x 1", "(if true 1 2", '(defn f [x] "d" (+ x 1)']
)
def test_unclosed_keyword_forms(text: str) -> None:
    with pytest.raises(ClosingError, match="Expected closing bracket before end"):
        p(text)


def test_keyword_forms_nest_inside_calls() -> None:
    node = p("(+ (if true 1 2) (if false 3 4) 5)")
    assert type(node) is FunctionCall
    assert [type(arg) for arg in node.arguments] == [Conditional, Conditional, Literal]

    nodes = Parser(tokenize("(setq a 1) (setq b 2)")).parse_all()
    assert [node.name.value for node in nodes] == ["a", "b"]
