from __future__ import annotations

import sys
from os import environ
from typing import NoReturn


def no_color_env() -> bool:
    return bool(environ.get("NO_COLOR"))


class Log:
    __slots__ = ("is_debug", "no_color")

    def __init__(self, is_debug: bool = False, no_color: bool | None = None):
        self.is_debug = is_debug
        self.no_color = no_color_env() if no_color is None else no_color

    def debug(self, message: object) -> None:
        if self.is_debug:
            sys.stderr.write(f"Debug: {message}\n")

    def warning(self, message: str) -> None:
        sys.stderr.write(f"Warning! {message}\n")

    def error(self, message: str | Exception, detail: str = "") -> NoReturn:
        if self.is_debug and isinstance(message, Exception):
            raise message

        if self.no_color:
            sys.stderr.write(f"Error! {message}\n")
        else:
            sys.stderr.write(f"\033[31;40mError! {message}\033[0m\n")

        if detail:
            sys.stderr.write(f"{detail}\n")

        sys.exit(1)
