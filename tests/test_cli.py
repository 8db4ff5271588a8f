from __future__ import annotations

import sys
from pathlib import Path

import pytest

import flop
from flop.__main__ import main as flop_main
from flop.cmds import repl, run
from flop.cmds import test as selftest
from flop.lib.err import MathError

scripts = Path(__file__).resolve().parent.parent / "resources" / "scripts"


@pytest.fixture(autouse=True)
def no_color(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NO_COLOR", "1")


def write(tmp_path: Path, text: str) -> str:
    path = tmp_path / "prog.flop"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_run_prints_results(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    path = write(tmp_path, '(setq v "hi")\nv\n(+ 1 2)\n[1 true]\n')
    run.main([path])
    assert capsys.readouterr().out == '"hi"\n3\n[1 true]\n'


def test_run_debug_parser(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    path = write(tmp_path, "(+ 1 2)")
    run.main([path, "--debug-parser"])
    out = capsys.readouterr().out.splitlines()
    assert out == ["tokens: ( + 1 2 )", "parser: (+ 1 2)", "3"]


def test_run_stops_at_first_error(
    tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    path = write(tmp_path, "(setq a 1)\n(+ a b)\n(+ 1 2)\n")
    with pytest.raises(SystemExit) as info:
        run.main([path])
    assert info.value.code == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error! variable `b` not defined" in captured.err
    assert "prog.flop:2:6" in captured.err
    assert "  (+ a b)\n       ^" in captured.err


def test_run_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as info:
        run.main([str(tmp_path / "missing.flop")])
    assert info.value.code == 1
    assert "Error!" in capsys.readouterr().err


def test_run_empty_file(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    path = write(tmp_path, ";; nothing here\n")
    run.main([path])
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "has no forms to run" in captured.err


def test_run_debug_raises(tmp_path: Path) -> None:
    path = write(tmp_path, "(/ 1 0)")
    with pytest.raises(MathError):
        run.main([path, "--debug"])


def test_run_without_arguments_shows_help(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit):
        run.main([])
    assert "Run a flop source file" in capsys.readouterr().out


def test_option_help(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit):
        run.main(["--recursion-limit", "-h"])
    assert "recursion limit" in capsys.readouterr().out


def test_bad_recursion_limit(tmp_path: Path) -> None:
    path = write(tmp_path, "1")
    with pytest.raises(SystemExit) as info:
        run.main([path, "--recursion-limit", "-3"])
    assert info.value.code == 1


@pytest.mark.parametrize("script", sorted(scripts.glob("*.flop")), ids=str)
def test_scripts(script: Path, capsys: pytest.CaptureFixture) -> None:
    run.main([str(script)])
    expected = script.with_suffix(".out").read_text(encoding="utf-8")
    assert capsys.readouterr().out == expected


def test_repl(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    lines = iter(
        ["(setq x 2)", "", "(+ x", "3)", "(nope)", "(+ 1 2]", "x", "exit", "x"]
    )
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))

    repl.main([])

    out = capsys.readouterr().out
    assert out.startswith(f"flop {flop.__version__}\n")
    assert "\n5\n" in out
    assert "error: function `nope` not found" in out
    assert "error: Expression: Expected `)` but got `]`" in out
    assert out.endswith("\n2\n")
    assert next(lines) == "x"


def test_repl_keeps_env_after_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    lines = iter(["(setq a 1)", "(setq b 2) (+ a c)", "b"])

    def fake_input(prompt: str = "") -> str:
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)
    repl.main([])

    out = capsys.readouterr().out
    assert "error: variable `c` not defined" in out
    assert out.rstrip().endswith("2")


def test_main_dispatch(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    monkeypatch.setattr(sys, "argv", ["flop", "--version"])
    flop_main()
    assert capsys.readouterr().out == f"{flop.__version__}\n"

    path = write(tmp_path, "(* 6 7)")
    monkeypatch.setattr(sys, "argv", ["flop", path])
    flop_main()
    assert capsys.readouterr().out == "42\n"

    monkeypatch.setattr(sys, "argv", ["flop", "run", path])
    flop_main()
    assert capsys.readouterr().out == "42\n"


def test_self_test_runner(capsys: pytest.CaptureFixture) -> None:
    selftest.main(["eval"])
    out = capsys.readouterr().out
    assert "eval_bridge" in out
    assert "Completed  2/2" in out


def test_unknown_option_suggests(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    path = write(tmp_path, "1")
    with pytest.raises(SystemExit) as info:
        run.main([path, "--debug-parsr"])
    assert info.value.code == 1
    err = capsys.readouterr().err
    assert "Unknown option: --debug-parsr" in err
    assert "--debug-parser" in err


def test_option_used_twice(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    path = write(tmp_path, "1")
    with pytest.raises(SystemExit):
        run.main([path, "--debug", "--debug"])
    assert "may not be used more than once" in capsys.readouterr().err


def test_program_help(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit):
        run.main(["--help"])
    out = capsys.readouterr().out
    assert out.startswith("Usage: flop run <file> [options]")
    assert "--recursion-limit NUM" in out


def test_self_test_choices(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as info:
        selftest.main(["everything"])
    assert info.value.code == 1
    assert "everything is not a choice for category" in capsys.readouterr().err


def test_self_test_only(capsys: pytest.CaptureFixture) -> None:
    selftest.main(["all", "--only", "eval_errors"])
    out = capsys.readouterr().out
    assert "eval_errors" in out
    assert "eval_bridge" not in out
    assert "Completed  1/1" in out


def test_repl_continues_keyword_forms(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    lines = iter(['(defn inc [n] "add one"', "  (+ n 1))", "(inc 41)", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))

    repl.main([])
    assert capsys.readouterr().out.endswith("\n42\n")
