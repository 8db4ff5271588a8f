data = {
    "flop": {
        "_": """
flop is a small interpreter for a parenthesized, Lisp-like language with
integers, strings, booleans, lists, variables and user-defined functions.

Run a file:
    flop program.flop

Start the interactive prompt:
    flop
    flop repl

Run the self tests:
    flop test all
""".strip(),
    },
    "run": {
        "_": """
Run a flop source file. Forms are parsed and evaluated one at a time and every
non-void result is printed. The first error stops the run with exit status 1.

Usage:
    flop run program.flop [--debug] [--debug-parser] [--recursion-limit NUM]
""".strip(),
        "--recursion-limit": """
Set the host interpreter's recursion limit before running. Deeply recursive
flop functions need a higher limit; each flop call uses several host frames.
""".strip(),
        "--debug-parser": """
Print the tokens and the parsed tree of every form before it is evaluated.
""".strip(),
    },
    "test": {
        "_": """
Run flop's self tests.

Usage:
    flop test {eval,scripts,all} [--only NAME ...] [--no-fail-fast]
""".strip(),
    },
}
