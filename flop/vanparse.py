from __future__ import annotations

import difflib
import sys
import textwrap
from dataclasses import dataclass
from shutil import get_terminal_size
from typing import TYPE_CHECKING

from flop.help import data
from flop.utils.log import Log
from flop.utils.types import CoerceError

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any, NoReturn, TypeVar

    T = TypeVar("T")


@dataclass(slots=True)
class Required:
    name: str
    choices: tuple[str, ...] | None = None
    metavar: str = "file"


@dataclass(slots=True)
class Options:
    names: tuple[str, ...]
    type: Callable[[str], Any] = str
    flag: bool = False
    many: bool = False
    metavar: str | None = None
    help: str = ""

    @property
    def key(self) -> str:
        """--debug-parser -> debug_parser"""
        return self.names[0].lstrip("-").replace("-", "_")


def out(text: str) -> None:
    width = get_terminal_size().columns - 3

    for line in text.split("\n"):
        pre_indent = line[: len(line) - len(line.lstrip())]
        sys.stdout.write(textwrap.fill(line, width=width, subsequent_indent=pre_indent))
        sys.stdout.write("\n")


def print_program_help(
    program_name: str | None, reqs: list[Required], options: list[Options]
) -> None:
    usage = ["flop"] if program_name is None else ["flop", program_name]
    usage += [f"<{req.metavar}>" for req in reqs]

    lines = [f"Usage: {' '.join(usage)} [options]", "", "Options:"]
    for option in options:
        left = ", ".join(option.names)
        if option.metavar is not None:
            left += f" {option.metavar}"
        lines.append(f"  {left:<26}{option.help}")

    out("\n".join(lines))


def print_option_help(program_name: str | None, option: Options) -> None:
    head = ", ".join(option.names)
    if option.metavar is not None:
        head += f" {option.metavar}"

    if option.flag:
        kind = "flag"
    elif option.many:
        kind = "list of values"
    else:
        kind = option.type.__name__

    detail = data.get(program_name or "flop", {}).get(option.names[0], option.help)
    out(f"  {head}\n\n    type: {kind}\n    {detail}\n")


class ArgumentParser:
    def __init__(self, program_name: str | None):
        self.program_name = program_name
        self.requireds: list[Required] = []
        self.options: list[Options] = [
            Options(
                ("--help", "-h"),
                flag=True,
                help="Show info about this program or option then exit",
            )
        ]

    def add_argument(self, *names: str, **kwargs: Any) -> None:
        self.options.append(Options(names, **kwargs))

    def add_required(self, name: str, **kwargs: Any) -> None:
        self.requireds.append(Required(name, **kwargs))

    def get_option(self, name: str) -> Options | None:
        for option in self.options:
            if name in option.names:
                return option
        return None

    def unknown(self, arg: str, log: Log) -> NoReturn:
        label = "option" if arg.startswith("--") else "short"
        names = [name for op in self.options for name in op.names]

        if close_matches := difflib.get_close_matches(arg, names):
            log.error(
                f"Unknown {label}: {arg}\n\n    Did you mean:\n        "
                + ", ".join(close_matches)
            )
        log.error(f"Unknown {label}: {arg}")

    def parse_args(
        self, ns_obj: type[T], sys_args: list[str], log_: Log | None = None
    ) -> T:
        if not sys_args and self.program_name is not None:
            out(data[self.program_name]["_"])
            sys.exit()

        log = Log() if log_ is None else log_
        ns = ns_obj()

        def coerce(option: Options, val: str) -> Any:
            try:
                return option.type(val)
            except CoerceError as e:
                log.error(f"{option.names[0]}: {e}")

        pending = list(self.requireds)
        used: list[Options] = []
        collecting: Options | None = None

        i = 0
        while i < len(sys_args):
            arg = sys_args[i]
            option = self.get_option(arg)

            if option is None:
                if collecting is not None:
                    getattr(ns, collecting.key).append(coerce(collecting, arg))
                elif pending and not arg.startswith("-"):
                    req = pending.pop(0)
                    if req.choices is not None and arg not in req.choices:
                        log.error(
                            f"{arg} is not a choice for {req.name}\n"
                            f"choices are:\n  {', '.join(req.choices)}"
                        )
                    setattr(ns, req.name, arg)
                else:
                    self.unknown(arg, log)
                i += 1
                continue

            next_arg = None if i == len(sys_args) - 1 else sys_args[i + 1]
            if next_arg in ("-h", "--help"):
                print_option_help(self.program_name, option)
                sys.exit()

            if option in used and not option.many:
                log.error(f"Option {option.names[0]} may not be used more than once.")
            used.append(option)
            collecting = None

            if option.flag:
                setattr(ns, option.key, True)
            elif option.many:
                setattr(ns, option.key, [])
                collecting = option
            else:
                if next_arg is None:
                    log.error(f"{option.names[0]} needs argument.")
                setattr(ns, option.key, coerce(option, next_arg))
                i += 1
            i += 1

        if getattr(ns, "help"):
            print_program_help(self.program_name, self.requireds, self.options)
            sys.exit()

        if pending:
            log.error(f"Missing required argument: {pending[0].name}")

        return ns
