"""Setup script for the flop interpreter."""

import re
from pathlib import Path

from setuptools import find_packages, setup


def get_version() -> str:
    text = (Path(__file__).parent / "flop" / "__init__.py").read_text()
    match = re.search(r'__version__ = "(.+)"', text)
    if match is None:
        raise ValueError("Could not find the version of flop")
    return match.group(1)


if __name__ == "__main__":
    setup(
        name="flop",
        version=get_version(),
        description="A small interpreter for a parenthesized, Lisp-like language",
        packages=find_packages(include=["flop", "flop.*"]),
        python_requires=">=3.10",
        install_requires=[],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["flop=flop.__main__:main"]},
    )
