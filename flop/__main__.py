from __future__ import annotations

import sys
from importlib import import_module

import flop

subcommands = ("run", "repl", "test")


def main() -> None:
    args = sys.argv[1:]

    if not args:
        from flop.cmds.repl import main as repl_main

        repl_main([])
        return

    if args[0] in subcommands:
        obj = import_module(f"flop.cmds.{args[0]}")
        obj.main(args[1:])
        return

    if args[0] in {"-V", "--version"}:
        print(flop.__version__)
        return

    if args[0] in {"-h", "--help"}:
        from flop.help import data
        from flop.vanparse import out

        out(data["flop"]["_"])
        return

    from flop.cmds.run import main as run_main

    run_main(args)


if __name__ == "__main__":
    main()
