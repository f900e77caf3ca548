# tests/test_main.py
"""
Tests for the command-line interface.
"""

import logging

import pytest

from gomacro import __version__
from gomacro.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main
from tests.conftest import ADD_MACRO_GO, RECURSIVE_GO, UNSUPPORTED_EXPR_GO


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("gomacro")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def template(tmp_path):
    def write(text, name="in.go.tmpl"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return write


class TestMainSuccess:

    def test_expands_to_file(self, template, tmp_path):
        src = template(ADD_MACRO_GO)
        dst = tmp_path / "out.go"
        assert main([str(src), str(dst)]) == EXIT_OK
        assert dst.read_text(encoding="utf-8") == "package main\n\nfunc main() {\n\tr = 1 + 2\n}\n"

    def test_stdout(self, template, capsys):
        src = template(ADD_MACRO_GO)
        assert main([str(src), "-"]) == EXIT_OK
        assert "\tr = 1 + 2\n" in capsys.readouterr().out

    def test_recursive_flag(self, template, capsys):
        src = template(RECURSIVE_GO)
        assert main(["-r", str(src), "-"]) == EXIT_OK
        assert "\tn = n + 1\n\tn = n * 2\n" in capsys.readouterr().out

    def test_verbose_logs_stats(self, template, capsys):
        src = template(ADD_MACRO_GO)
        assert main(["-v", str(src), "-"]) == EXIT_OK
        err = capsys.readouterr().err
        assert "1 macro(s) defined, 1 call(s) expanded" in err

    def test_prefix_option(self, template, capsys):
        src = template(ADD_MACRO_GO.replace("MACRO_add", "GEN_add"))
        assert main(["--prefix", "GEN_", str(src), "-"]) == EXIT_OK
        assert "\tr = 1 + 2\n" in capsys.readouterr().out

    def test_no_strict_arity(self, template, capsys):
        src = template(ADD_MACRO_GO.replace("add(r, 1, 2)", "add(r, 1)"))
        assert main(["--no-strict-arity", str(src), "-"]) == EXIT_OK
        assert "\tr = 1 + b\n" in capsys.readouterr().out

    def test_version(self, capsys):
        assert main(["--version"]) == EXIT_OK
        assert __version__ in capsys.readouterr().out


class TestMainFailures:

    def test_missing_arguments(self, capsys):
        assert main([]) == EXIT_INFRA

    def test_missing_input(self, tmp_path):
        assert main([str(tmp_path / "nope.go"), str(tmp_path / "out.go")]) == EXIT_INFRA
        assert not (tmp_path / "out.go").exists()

    def test_syntax_error(self, template, tmp_path, capsys):
        src = template("package main\n\nfunc main() {\n\tx :=\n}\n", name="bad.go")
        dst = tmp_path / "out.go"
        assert main([str(src), str(dst)]) == EXIT_ERROR
        err = capsys.readouterr().err.strip()
        assert "error[GOMACRO-1001]" in err
        assert len(err.splitlines()) == 1
        assert not dst.exists()

    def test_unsupported_kind(self, template, tmp_path, capsys):
        src = template(UNSUPPORTED_EXPR_GO)
        dst = tmp_path / "out.go"
        assert main([str(src), str(dst)]) == EXIT_ERROR
        err = capsys.readouterr().err
        assert "error[GOMACRO-2001]: unsupported expression kind: SelectorExpr" in err
        assert not dst.exists()

    def test_arity_error(self, template, capsys):
        src = template(ADD_MACRO_GO.replace("add(r, 1, 2)", "add(r)"))
        assert main([str(src), "-"]) == EXIT_ERROR
        err = capsys.readouterr().err
        assert ":8:" in err
        assert "error[GOMACRO-2002]" in err

    def test_unwritable_output(self, template, tmp_path, capsys):
        src = template(ADD_MACRO_GO)
        assert main([str(src), str(tmp_path / "no" / "such" / "out.go")]) == EXIT_INFRA
        assert "error[GOMACRO-5001]" in capsys.readouterr().err

    def test_invalid_prefix(self, template):
        src = template(ADD_MACRO_GO)
        assert main(["--prefix", "9x", str(src), "-"]) == EXIT_INFRA
