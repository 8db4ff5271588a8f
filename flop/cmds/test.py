from __future__ import annotations

import concurrent.futures
import os
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from time import perf_counter

from flop.lang.evaluator import run
from flop.lib.data_structs import Env
from flop.lib.err import (
    ClosingError,
    FunctionNameError,
    LexError,
    MathError,
    MyError,
    OperandError,
    ParameterError,
    ParseError,
    VariableError,
)
from flop.vanparse import ArgumentParser


@dataclass(slots=True)
class TestArgs:
    only: list[str] = field(default_factory=list)
    help: bool = False
    no_fail_fast: bool = False
    category: str = "all"


def test_options(parser: ArgumentParser) -> ArgumentParser:
    parser.add_argument("--only", "-n", many=True, metavar="NAME ...")
    parser.add_argument("--no-fail-fast", flag=True)
    parser.add_required(
        "category",
        choices=("eval", "scripts", "all"),
        metavar="category",
    )
    return parser


def pipe_to_console(cmd: list[str]) -> tuple[int, str, str]:
    process = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    stdout, stderr = process.communicate()
    return process.returncode, stdout.decode("utf-8"), stderr.decode("utf-8")


class SkipTest(Exception):
    pass


class Runner:
    def __init__(self) -> None:
        self.program = [sys.executable, "-m", "flop"]

    def raw(self, cmd: list[str]) -> str:
        returncode, stdout, stderr = pipe_to_console(self.program + cmd)
        if returncode > 0:
            raise Exception(f"{stdout}\n{stderr}\n")
        return stdout

    def eval_bridge(self) -> None:
        def cases(*cases: tuple[str, object]) -> None:
            for text, expected in cases:
                try:
                    results = run(text, Env(), "test")
                except MyError as e:
                    raise ValueError(f"{text}\nMyError: {e}")

                result_val = results[-1]
                if type(expected) is not type(result_val) or expected != result_val:
                    raise ValueError(f"{text}: Expected: {expected}, got {result_val}")

        cases(
            ("345", 345),
            ("-34", -34),
            ('"hello"', "hello"),
            ("true", True),
            ("#f", False),
            ("(+ 1 2)", 3),
            ("(+ 4 3 2)", 9),
            ("(- 3)", 3),
            ("(- 1 (- 1 2))", 2),
            ("(+ 1 (- 1 2))", 0),
            ("(- 1 (+ 1 2))", -2),
            ("(* 11 3)", 33),
            ("(/ 7 2)", 3),
            ("(/ -7 2)", -3),
            ("(= 1 1)", True),
            ("(== 1 2)", False),
            ("(< 1 2 3)", True),
            ("(< 1 0 3)", False),
            ("(> 3 2 1)", False),
            ("(= 2 2 2)", False),
            ("(= 1 2 0)", True),
            ("(>= 3 3 1)", True),
            ("[1 2 [3 4]]", [1, 2, [3, 4]]),
            ('(setq v "hi") v', "hi"),
            ("(setq x 4) (* x x)", 16),
            ('(defn add [x y] "docs" (+ x y)) (add 2 3)', 5),
            ('(defn sq [x] "" (* x x)) (defn f [a] "" (sq (+ a 1))) (f 2)', 9),
            ("(if (< 1 2) 10 20)", 10),
            ("(if false 10 20)", 20),
            (
                '(defn fact [n] "factorial" (if (<= n 1) 1 (* n (fact (- n 1))))) (fact 10)',
                3628800,
            ),
            ('(defn fst [a b] "" (if true a b)) (fst [1 2] 3)', [1, 2]),
        )

    def eval_errors(self) -> None:
        def cases(*cases: tuple[str, type[MyError]]) -> None:
            for text, expected in cases:
                try:
                    run(text, Env(), "test")
                except MyError as e:
                    if not isinstance(e, expected):
                        raise ValueError(
                            f"{text}: Expected {expected.__name__}, got {type(e).__name__}"
                        )
                else:
                    raise ValueError(f"{text}: Expected {expected.__name__}")

        cases(
            ('(defn add [x y] "docs" (+ x y)) (add 2)', ParameterError),
            ("(+ 1 undefined)", VariableError),
            ("(nope 1 2)", VariableError),
            ('(+ 1 "a")', OperandError),
            ("(+ 1 true)", OperandError),
            ("(< 1)", OperandError),
            ("(/ 1 0)", MathError),
            ("(if 1 2 3)", OperandError),
            ("(+ 1 2", ClosingError),
            ("(+ [1 2)", ParseError),
            ("(+ 1 2]", ParseError),
            ("(setq 1 2)", FunctionNameError),
            ("(setq x (+ 1 2))", ParseError),
            ("(setq x 1 2)", ParseError),
            ("(+ 1 (if true 2 3 4))", ParseError),
            ("(+ (if true 1) 5)", ParseError),
            ('(defn f [x] "d" (+ x 1) (+ 2 3))', ParseError),
            ("(defn 1 [x] \"d\" (+ x 1))", FunctionNameError),
            ("(defn f [x] (+ x 1))", ParseError),
            ("(+ 1 2))", LexError),
            ('"open', LexError),
            ("#x", LexError),
        )

    def scripts(self) -> None:
        root = os.path.join("resources", "scripts")
        if not os.path.isdir(root):
            raise SkipTest()

        for name in sorted(os.listdir(root)):
            if not name.endswith(".flop"):
                continue
            path = os.path.join(root, name)
            expected_path = path[:-5] + ".out"
            stdout = self.raw([path])
            if os.path.isfile(expected_path):
                with open(expected_path, encoding="utf-8") as file:
                    expected = file.read()
                if stdout.replace("\r\n", "\n") != expected:
                    raise ValueError(f"{path}: Expected:\n{expected}\ngot:\n{stdout}")


def run_tests(tests: list[Callable], args: TestArgs) -> None:
    if args.only != []:
        tests = list(filter(lambda t: t.__name__ in args.only, tests))

    total_time = 0.0
    real_time = perf_counter()
    passed = 0
    total = len(tests)

    def timed_test(test_func):
        start_time = perf_counter()
        skipped = False
        exception = None
        try:
            test_func()
            success = True
        except SkipTest:
            skipped = True
        except Exception as e:
            success = False
            exception = e
        duration = perf_counter() - start_time

        if skipped:
            return (SkipTest, duration, None)
        elif success:
            return (True, duration, None)
        else:
            return (False, duration, exception)

    with concurrent.futures.ThreadPoolExecutor() as executor:
        future_to_data = {}
        for test in tests:
            future = executor.submit(timed_test, test)
            future_to_data[future] = test

        index = 0
        for future in concurrent.futures.as_completed(future_to_data):
            test = future_to_data[future]
            name = test.__name__
            success, dur, exception = future.result()
            total_time += dur
            index += 1

            msg = f"{name:<26} ({index}/{total})  {round(dur, 2):<5} secs  "
            if success == SkipTest:
                passed += 1
                print(f"{msg}[\033[38;2;125;125;125;mSKIPPED\033[0m]", flush=True)
            elif success:
                passed += 1
                print(f"{msg}[\033[1;32mPASSED\033[0m]", flush=True)
            else:
                print(f"{msg}\033[1;31m[FAILED]\033[0m", flush=True)
                if args.no_fail_fast:
                    print(f"\n{exception}")
                else:
                    print("")
                    raise exception

    real_time = round(perf_counter() - real_time, 2)
    total_time = round(total_time, 2)
    print(
        f"\nCompleted  {passed}/{total}\nreal time: {real_time} secs   total: {total_time} secs"
    )
    if passed != total:
        sys.exit(1)


def main(sys_args: list[str] | None = None) -> None:
    if sys_args is None:
        sys_args = sys.argv[1:]

    args = test_options(ArgumentParser("test")).parse_args(TestArgs, sys_args)
    runner = Runner()
    tests: list[Callable] = []

    if args.category in {"eval", "all"}:
        tests.extend([runner.eval_bridge, runner.eval_errors])

    if args.category in {"scripts", "all"}:
        tests.append(runner.scripts)

    try:
        run_tests(tests, args)
    except KeyboardInterrupt:
        print("Testing Interrupted by User.")


if __name__ == "__main__":
    main()
