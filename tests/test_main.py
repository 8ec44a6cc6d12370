# tests/test_main.py
"""
Tests for the ``valija`` command-line interface.
"""

import io

import pytest

from valija import __version__
from valija.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main


@pytest.fixture
def point_js(tmp_path):
    path = tmp_path / "point.js"
    path.write_text("function Point($dis, x, y) {\n  this.x = x;\n}\n", encoding="utf-8")
    return path


class TestHeaderCommand:

    def test_file(self, point_js, capsys):
        assert main(["header", str(point_js)]) == EXIT_OK
        assert capsys.readouterr().out == "function Point(x, y) {\n  [cajoled code]\n}\n"

    def test_name_override(self, point_js, capsys):
        assert main(["header", str(point_js), "--name", "Vec"]) == EXIT_OK
        assert capsys.readouterr().out.startswith("function Vec(x, y) {")

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("def area(self_, w, h):\n    pass\n"))
        assert main(["header", "-", "--receiver", "self_"]) == EXIT_OK
        assert capsys.readouterr().out.startswith("function area(w, h) {")

    def test_missing_file(self, tmp_path):
        assert main(["header", str(tmp_path / "absent.js")]) == EXIT_INFRA


class TestOptionsCommand:

    def test_enabled(self, capsys):
        assert main(["options", '{"rewritePropertyUpdateExpr": true}']) == EXIT_OK
        assert capsys.readouterr().out.strip() == "rewrite_property_update_expr"

    def test_none_enabled(self, capsys):
        assert main(["options", "{}"]) == EXIT_OK
        assert capsys.readouterr().out.strip() == "(no rewrites enabled)"

    @pytest.mark.parametrize("record", [
        "not json",
        "[1, 2]",
        '{"bogus": true}',
        '{"rewritePropertyUpdateExpr": "false"}',
    ])
    def test_invalid(self, record):
        assert main(["options", record]) == EXIT_ERROR


class TestParser:

    def test_no_command(self, capsys):
        assert main([]) == EXIT_INFRA
        assert "usage:" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert __version__ in capsys.readouterr().out
