# tests/test_main.py
"""
End-to-end tests for the command-line interface.
"""

import json
import logging

import pytest

from scriptcost.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main
from tests.conftest import EMPTY_LOOP_JS, HACK_JS, IMPORTING_JS, LIB_JS


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("scriptcost")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def scripts_dir(tmp_path):
    root = tmp_path / "home"
    root.mkdir()
    (root / "hack.js").write_text(HACK_JS, encoding="utf-8")
    (root / "main.js").write_text(IMPORTING_JS, encoding="utf-8")
    (root / "lib.js").write_text(LIB_JS, encoding="utf-8")
    (root / "spin.js").write_text(EMPTY_LOOP_JS, encoding="utf-8")
    (root / "broken.js").write_text("while (true) {", encoding="utf-8")
    return root


class TestCost:

    def test_summary(self, scripts_dir, catalog_file, capsys):
        code = main(["cost", str(scripts_dir / "hack.js"), "--catalog", str(catalog_file)])
        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert out.startswith("hack.js: 1.95 GB")
        assert "baseCost" in out
        assert "weaken" in out

    def test_json_with_imports(self, scripts_dir, catalog_file, capsys):
        code = main(["cost", str(scripts_dir / "main.js"),
                     "--catalog", str(catalog_file), "--format", "json"])
        data = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert data["script"] == "main.js"
        names = [e["name"] for e in data["entries"]]
        assert names == ["baseCost", "stock.buy", "hacknet"]
        assert data["cost"] == pytest.approx(1.6 + 2.5 + 4)

    def test_player_flags(self, scripts_dir, catalog_file, capsys):
        (scripts_dir / "augs.js").write_text("ns.getOwnedAugs();", encoding="utf-8")
        args = ["cost", str(scripts_dir / "augs.js"), "--catalog", str(catalog_file),
                "--format", "json"]
        main(args)
        low = json.loads(capsys.readouterr().out)["cost"]
        main(args + ["--source-file", "4=3"])
        high = json.loads(capsys.readouterr().out)["cost"]
        main(args + ["--bitnode", "4"])
        home = json.loads(capsys.readouterr().out)["cost"]
        assert low == pytest.approx(1.6 + 80)
        assert high == pytest.approx(1.6 + 5)
        assert home == pytest.approx(1.6 + 5)

    def test_bad_source_file_flag(self, scripts_dir, catalog_file):
        code = main(["cost", str(scripts_dir / "hack.js"), "--catalog", str(catalog_file),
                     "--source-file", "four"])
        assert code == EXIT_INFRA

    def test_missing_catalog(self, scripts_dir, tmp_path):
        code = main(["cost", str(scripts_dir / "hack.js"),
                     "--catalog", str(tmp_path / "none.json")])
        assert code == EXIT_INFRA

    def test_bad_catalog(self, scripts_dir, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text("[]", encoding="utf-8")
        code = main(["cost", str(scripts_dir / "hack.js"), "--catalog", str(bad)])
        assert code == EXIT_INFRA
        assert "[catalogError]" in capsys.readouterr().err

    def test_missing_import(self, scripts_dir, catalog_file, capsys):
        (scripts_dir / "lib.js").unlink()
        code = main(["cost", str(scripts_dir / "main.js"), "--catalog", str(catalog_file)])
        assert code == EXIT_INFRA
        assert "[importError]" in capsys.readouterr().err

    def test_parse_error(self, scripts_dir, catalog_file, capsys):
        code = main(["cost", str(scripts_dir / "broken.js"), "--catalog", str(catalog_file)])
        assert code == EXIT_INFRA
        assert "[syntaxError]" in capsys.readouterr().err


class TestLoops:

    def test_unsafe(self, scripts_dir, capsys):
        code = main(["loops", str(scripts_dir / "spin.js")])
        out = capsys.readouterr().out
        assert code == EXIT_ERROR
        assert ":1:1: error:" in out
        assert "[infiniteLoop]" in out
        assert "1 error(s)" in out

    def test_safe(self, scripts_dir, capsys):
        code = main(["loops", str(scripts_dir / "hack.js")])
        assert code == EXIT_OK
        assert "0 diagnostic(s)" in capsys.readouterr().out

    def test_json(self, scripts_dir, capsys):
        main(["loops", str(scripts_dir / "spin.js"), "--format", "json"])
        record = json.loads(capsys.readouterr().out.strip())
        assert record["errorId"] == "infiniteLoop"
        assert record["linenr"] == 1
        assert record["severity"] == "error"

    def test_parse_error(self, scripts_dir):
        assert main(["loops", str(scripts_dir / "broken.js")]) == EXIT_INFRA

    def test_missing_script(self, tmp_path):
        assert main(["loops", str(tmp_path / "ghost.js")]) == EXIT_INFRA


class TestCheck:

    def test_clean_script(self, scripts_dir, catalog_file, capsys):
        code = main(["check", str(scripts_dir / "hack.js"), "--catalog", str(catalog_file)])
        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "hack.js: 1.95 GB" in out

    def test_unsafe_script(self, scripts_dir, catalog_file, capsys):
        code = main(["check", str(scripts_dir / "spin.js"), "--catalog", str(catalog_file),
                     "--format", "json"])
        data = json.loads(capsys.readouterr().out)
        assert code == EXIT_ERROR
        assert data["cost"] == pytest.approx(1.6)
        assert data["diagnostics"][0]["errorId"] == "infiniteLoop"


class TestParse:

    def test_sexp(self, scripts_dir, capsys):
        code = main(["parse", str(scripts_dir / "spin.js")])
        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert out.startswith("(Program")
        assert "WhileStatement" in out

    def test_repr(self, scripts_dir, capsys):
        main(["parse", str(scripts_dir / "spin.js"), "--format", "repr"])
        assert "WhileStatement(" in capsys.readouterr().out

    def test_parse_error(self, scripts_dir, capsys):
        assert main(["parse", str(scripts_dir / "broken.js")]) == EXIT_INFRA


class TestTopLevel:

    def test_no_command(self, capsys):
        assert main([]) == EXIT_INFRA

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--version"])
        assert info.value.code == 0
        assert "scriptcost" in capsys.readouterr().out

    def test_verbose_logging(self, scripts_dir, catalog_file, capsys):
        main(["-vv", "cost", str(scripts_dir / "hack.js"), "--catalog", str(catalog_file)])
        assert logging.getLogger("scriptcost").level == logging.DEBUG
