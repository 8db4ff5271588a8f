from __future__ import annotations


class CoerceError(Exception):
    pass


def natural(val: str) -> int:
    """A whole number of at least 1, e.g. for `--recursion-limit`."""
    try:
        num = int(val.replace("_", ""))
    except ValueError:
        raise CoerceError(f"'{val}': Expected a whole number.")
    if num < 1:
        raise CoerceError(f"'{val}': Must be at least 1.")
    return num
