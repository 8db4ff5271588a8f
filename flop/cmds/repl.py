from __future__ import annotations

import sys
from dataclasses import dataclass

import flop
from flop.cmds.run import print_parser
from flop.lang.evaluator import evaluate_form
from flop.lang.lexer import Lexer
from flop.lang.parser import Parser
from flop.lib.data_structs import Env, print_str
from flop.lib.err import ClosingError, MyError, diagnose
from flop.utils.log import no_color_env
from flop.utils.types import natural
from flop.vanparse import ArgumentParser

try:
    import readline  # noqa
except ImportError:
    pass


@dataclass(slots=True)
class REPL_Args:
    debug_parser: bool = False
    recursion_limit: int | None = None
    help: bool = False


def repl_options(parser: ArgumentParser) -> ArgumentParser:
    parser.add_argument(
        "--debug-parser",
        flag=True,
        help="Print parser value",
    )
    parser.add_argument(
        "--recursion-limit",
        metavar="NUM",
        type=natural,
        help="Set the host recursion limit",
    )
    return parser


def main(sys_args: list[str] | None = None) -> None:
    if sys_args is None:
        sys_args = sys.argv[1:]

    args = repl_options(ArgumentParser(None)).parse_args(REPL_Args, sys_args)

    if args.recursion_limit is not None:
        sys.setrecursionlimit(args.recursion_limit)

    env = Env()
    print(f"flop {flop.__version__}")
    text = None

    no_color = no_color_env()
    if no_color:
        bold_pink = bold_red = reset = ""
    else:
        bold_pink = "\033[1;95m"
        bold_red = "\033[1;31m"
        reset = "\033[0m"

    try:
        while True:
            try:
                if text is None:
                    text = input(f"{bold_pink}>{reset} ")
                    if text.strip() in {"exit", "quit"}:
                        break
                    if not text.strip():
                        text = None
                        continue
                else:
                    text += "\n" + input("   ")
            except KeyboardInterrupt as e:
                if text is None:
                    raise e
                text = None
                print("")
                continue

            try:
                tokens = Lexer("repl", text).tokens()
                if args.debug_parser:
                    print_parser(tokens)

                for node in Parser(tokens).parse_all():
                    result = evaluate_form(env, node)
                    if result is not None:
                        sys.stdout.write(f"{print_str(result)}\n")

            except ClosingError:
                continue  # Allow user to continue adding text
            except MyError as e:
                print(f"{bold_red}error{reset}: {e}")
                if detail := diagnose(e, text, not no_color):
                    print(detail)

            text = None

    except (KeyboardInterrupt, EOFError):
        print("")


if __name__ == "__main__":
    main()
