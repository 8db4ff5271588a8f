from __future__ import annotations

import sys
from dataclasses import dataclass

from flop.lang.evaluator import forms
from flop.lang.lexer import Lexer, Token
from flop.lang.parser import Parser
from flop.lib.data_structs import Env, display_node, print_str
from flop.lib.err import MyError, diagnose
from flop.utils.log import Log
from flop.utils.types import natural
from flop.vanparse import ArgumentParser


@dataclass(slots=True)
class RunArgs:
    input: str = ""
    debug: bool = False
    debug_parser: bool = False
    recursion_limit: int | None = None
    help: bool = False


def run_options(parser: ArgumentParser) -> ArgumentParser:
    parser.add_required("input", metavar="file")
    parser.add_argument(
        "--debug",
        flag=True,
        help="Show the Python traceback of errors",
    )
    parser.add_argument(
        "--debug-parser",
        flag=True,
        help="Print the tokens and parsed forms before evaluating",
    )
    parser.add_argument(
        "--recursion-limit",
        metavar="NUM",
        type=natural,
        help="Set the host recursion limit",
    )
    return parser


def print_parser(tokens: list[Token]) -> None:
    sys.stdout.write(f"tokens: {' '.join(str(tok) for tok in tokens[:-1])}\n")
    for node in Parser(tokens).parse_all():
        sys.stdout.write(f"parser: {display_node(node)}\n")


def main(sys_args: list[str] | None = None) -> None:
    if sys_args is None:
        sys_args = sys.argv[1:]

    args = run_options(ArgumentParser("run")).parse_args(RunArgs, sys_args)
    log = Log(is_debug=args.debug)

    if args.recursion_limit is not None:
        sys.setrecursionlimit(args.recursion_limit)

    try:
        with open(args.input, encoding="utf-8") as file:
            program_text = file.read()
    except OSError as e:
        log.error(e)

    log.debug(f"Running {args.input}")
    env = Env()
    try:
        tokens = Lexer(args.input, program_text).tokens()
        if args.debug_parser:
            print_parser(tokens)

        if len(tokens) == 1:
            log.warning(f"{args.input} has no forms to run")

        for result in forms(env, Parser(tokens)):
            if result is not None:
                sys.stdout.write(f"{print_str(result)}\n")
    except MyError as e:
        log.error(e, diagnose(e, program_text, not log.no_color))

    log.debug(env)


if __name__ == "__main__":
    main()
