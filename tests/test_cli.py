"""Tests for the frankie CLI."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from frankie import _server
from frankie.cli import app, find_app_var

runner = CliRunner()


def _write_app(tmp_path: Path, name: str, body: str) -> Path:
    file = tmp_path / f"{name}.py"
    file.write_text(textwrap.dedent(body))
    return file


APP_SOURCE = """
    from frankie import Frankie

    site = Frankie()

    @site.get("/albums/:album")
    def album(context):
        return context.params["album"]

    @site.post("/albums")
    def create_album(context):
        return 201
"""


def test_routes_lists_in_match_order(tmp_path: Path) -> None:
    file = _write_app(tmp_path, "cli_routes_app", APP_SOURCE)

    result = runner.invoke(app, ["routes", str(file)])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].split() == ["METHOD", "PATTERN", "HANDLER"]
    assert lines[2].split() == ["GET", "/albums/:album", "album"]
    assert lines[3].split() == ["POST", "/albums", "create_album"]


def test_routes_with_module_target(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_app(tmp_path, "cli_target_app", APP_SOURCE)
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["routes", "cli_target_app:site"])

    assert result.exit_code == 0, result.output
    assert "/albums/:album" in result.output


def test_routes_empty_app(tmp_path: Path) -> None:
    file = _write_app(tmp_path, "cli_empty_app", "from frankie import Frankie\napp = Frankie()\n")

    result = runner.invoke(app, ["routes", str(file)])

    assert result.exit_code == 0
    assert "No routes registered." in result.output


def test_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["routes", str(tmp_path / "nope.py")])
    assert result.exit_code == 1


def test_file_without_app(tmp_path: Path) -> None:
    file = _write_app(tmp_path, "cli_no_app", "value = 42\n")
    result = runner.invoke(app, ["routes", str(file)])
    assert result.exit_code == 1


def test_target_that_is_not_an_app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_app(tmp_path, "cli_wrong_var", "value = 42\n")
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["routes", "cli_wrong_var:value"])
    assert result.exit_code == 1


def test_find_app_var_prefers_app_name() -> None:
    from types import SimpleNamespace

    from frankie import Frankie

    module = SimpleNamespace(other=Frankie(), app=Frankie())
    assert find_app_var(module) == "app"
    assert find_app_var(SimpleNamespace(x=1)) is None


def test_dev_and_run_call_serve(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, dict[str, Any]]] = []
    monkeypatch.setattr(_server, "serve", lambda target, **kw: calls.append((target, kw)))
    file = _write_app(tmp_path, "cli_serve_app", APP_SOURCE)

    result = runner.invoke(app, ["dev", str(file), "--port", "9000"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["run", str(file), "--workers", "3"])
    assert result.exit_code == 0, result.output

    (dev_target, dev_kw), (run_target, run_kw) = calls
    assert dev_target == run_target == "cli_serve_app:site"
    assert dev_kw["dev"] is True
    assert dev_kw["port"] == 9000
    assert run_kw["workers"] == 3


def test_banner_mentions_target() -> None:
    banner = _server._banner("main:app", host="127.0.0.1", port=8000, workers=2, reload=False, dev=True)
    assert "Frankie" in banner
    assert "main:app" in banner
    assert "http://127.0.0.1:8000" in banner


def test_configure_logging_is_idempotent() -> None:
    import logging

    logger = logging.getLogger("frankie")
    before = list(logger.handlers)
    try:
        _server.configure_logging("warning")
        _server.configure_logging("warning")
        added = [h for h in logger.handlers if h not in before]
        assert len(added) == 1
        assert logger.level == logging.WARNING
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


# =====================================================================
# Frankie.run target resolution
# =====================================================================


def _fake_main(monkeypatch: pytest.MonkeyPatch, file: str, **attrs: Any) -> None:
    import sys
    import types

    main = types.ModuleType("__main__")
    main.__file__ = file
    for name, value in attrs.items():
        setattr(main, name, value)
    monkeypatch.setitem(sys.modules, "__main__", main)


def test_run_resolves_script_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    from frankie import Frankie

    calls: list[tuple[str, dict[str, Any]]] = []
    monkeypatch.setattr(_server, "serve", lambda target, **kw: calls.append((target, kw)))
    site = Frankie()
    _fake_main(monkeypatch, "/srv/songs.py", site=site)

    site.run(port=9001, dev=True, threads=2)

    [(target, kw)] = calls
    assert target == "songs:site"
    assert kw["port"] == 9001
    assert kw["dev"] is True
    assert kw["granian_kwargs"] == {"threads": 2}


def test_run_without_global_reference_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    from frankie import Frankie

    monkeypatch.setattr(_server, "serve", lambda target, **kw: None)
    _fake_main(monkeypatch, "/srv/songs.py", other=Frankie())

    with pytest.raises(RuntimeError, match="frankie run module:var"):
        Frankie().run()
