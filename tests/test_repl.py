import importlib.util
import sys
from pathlib import Path
import uuid
import pytest

def _load_repl_module():
    """Dynamically load the top-level joe.py (REPL) as a module with a unique name."""
    repl_path = Path(__file__).resolve().parents[1] / "joe.py"
    mod_name = f"joe_repl_for_test_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(mod_name, str(repl_path))
    mod = importlib.util.module_from_spec(spec)
    sys.modules[mod_name] = mod
    assert spec.loader is not None
    spec.loader.exec_module(mod)
    return mod


def _feed(monkeypatch, repl, lines):
    it = iter(lines)

    def fake_input(prompt: str) -> str:
        assert prompt == ">> "
        return next(it, "")
    monkeypatch.setattr(repl, "prompt_input", fake_input)


def test_repl_exit_immediately(monkeypatch, capsys):
    repl = _load_repl_module()
    monkeypatch.setenv("USER", "ada")
    _feed(monkeypatch, repl, ["exit\n"])

    repl.main([])
    out = capsys.readouterr().out
    assert "Hello ada! This is the Joe programming language." in out
    assert "Please type in commands." in out


def test_repl_prints_side_effects_and_values(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, [
        'puts("hello from joe")\n',
        "1 + 2\n",
        "exit\n",
    ])

    repl.main([])
    out, err = capsys.readouterr()
    assert "hello from joe\nnull\n" in out
    assert "\n3\n" in out
    assert err == ""


def test_repl_keeps_bindings_between_lines(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, [
        "let add = fn(a, b) { a + b };\n",
        "add(20, 22)\n",
        "exit\n",
    ])

    repl.main([])
    out = capsys.readouterr().out
    assert out.rstrip().endswith("42")


def test_repl_errors_print_to_stderr(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, [
        "5 + true\n",
        "let = 1\n",
        "exit\n",
    ])

    repl.main([])
    out, err = capsys.readouterr()
    assert "ERROR: type mismatch: INTEGER + BOOLEAN" in err
    assert "Encountered parser errors:\n\texpected next token to be IDENT, got = instead" in err
    assert "ERROR" not in out


def test_repl_skips_blank_lines(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, ["\n", "   \n", "7\n", "exit\n"])

    repl.main([])
    out = capsys.readouterr().out
    assert out.rstrip().endswith("7")


def test_repl_eof_quits(monkeypatch, capsys):
    repl = _load_repl_module()
    _feed(monkeypatch, repl, [])

    repl.main([])
    out = capsys.readouterr().out
    assert out.endswith("Please type in commands.\n\n")


def test_script_file_runs_once(tmp_path, capsys):
    repl = _load_repl_module()
    script = tmp_path / "hello.joe"
    script.write_text('let greet = fn(name) { "Hello, " + name };\nputs(greet("file"));\n1 + 1\n', encoding="utf-8")

    repl.main([str(script)])
    out, err = capsys.readouterr()
    # Only `puts` output; the final value is discarded.
    assert out == "Hello, file\n"
    assert err == ""


def test_script_file_error_exits_nonzero(tmp_path, capsys):
    repl = _load_repl_module()
    script = tmp_path / "bad.joe"
    script.write_text("let x = 1;\nx + true;\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        repl.main([str(script)])
    assert exc.value.code == 1
    assert "ERROR: type mismatch: INTEGER + BOOLEAN" in capsys.readouterr().err


def test_script_file_parse_error_exits_nonzero(tmp_path, capsys):
    repl = _load_repl_module()
    script = tmp_path / "broken.joe"
    script.write_text("let x 1;\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        repl.main([str(script)])
    assert exc.value.code == 1
    assert "Encountered parser errors:" in capsys.readouterr().err


def test_missing_script_file(tmp_path, capsys):
    repl = _load_repl_module()
    missing = tmp_path / "nope.joe"

    with pytest.raises(SystemExit) as exc:
        repl.main([str(missing)])
    assert exc.value.code == 1
    assert f"Error: file not found: {missing}" in capsys.readouterr().err
