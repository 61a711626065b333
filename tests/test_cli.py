"""Tests for perch.cli — argument parsing, app resolution, and the run command."""

import sys
import types
from typing import Any

import pytest

from perch.app import App
from perch.cli import build_parser, main
from perch.cli._resolve import resolve_app


@pytest.fixture
def _fake_app_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with a perch App on sys.modules."""
    mod = types.ModuleType("_fake_perch_site")
    mod.app = App()  # type: ignore[attr-defined]
    mod.custom = App()  # type: ignore[attr-defined]
    mod.create_app = lambda: App()  # type: ignore[attr-defined]
    mod.broken_factory = lambda: 1 / 0  # type: ignore[attr-defined]
    mod.not_an_app = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_perch_site", mod)


@pytest.mark.usefixtures("_fake_app_module")
class TestResolveApp:
    def test_explicit_attribute(self) -> None:
        assert isinstance(resolve_app("_fake_perch_site:custom"), App)

    def test_default_attribute(self) -> None:
        assert resolve_app("_fake_perch_site") is sys.modules["_fake_perch_site"].app

    def test_factory(self) -> None:
        assert isinstance(resolve_app("_fake_perch_site:create_app"), App)

    def test_failing_factory(self) -> None:
        with pytest.raises(TypeError, match="app factory"):
            resolve_app("_fake_perch_site:broken_factory")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_app("nonexistent_module_xyz:app")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_app("_fake_perch_site:does_not_exist")

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match=r"expected a perch\.App"):
            resolve_app("_fake_perch_site:not_an_app")


class TestParser:
    def test_run_arguments(self) -> None:
        args = build_parser().parse_args(["run", "site:app", "--port", "3000", "--reload"])
        assert args.command == "run"
        assert args.app == "site:app"
        assert args.port == 3000
        assert args.host is None
        assert args.reload is True

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "usage: perch" in capsys.readouterr().out


@pytest.mark.usefixtures("_fake_app_module")
class TestRunCommand:
    def test_passes_config_to_server(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, Any]] = []

        def fake_run_server(app: App, host: str, port: int, **kwargs: Any) -> None:
            calls.append({"app": app, "host": host, "port": port, **kwargs})

        monkeypatch.setattr("perch.server.serve.run_server", fake_run_server)
        main(["run", "_fake_perch_site:app", "--port", "9000"])

        assert calls == [
            {
                "app": sys.modules["_fake_perch_site"].app,
                "host": "127.0.0.1",
                "port": 9000,
                "reload": False,
                "app_path": None,
            }
        ]

    def test_reload_passes_import_string(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, Any]] = []

        def fake_run_server(app: App, host: str, port: int, **kwargs: Any) -> None:
            calls.append(kwargs)

        monkeypatch.setattr("perch.server.serve.run_server", fake_run_server)
        main(["run", "_fake_perch_site:app", "--reload"])

        assert calls == [{"reload": True, "app_path": "_fake_perch_site:app"}]

    def test_unresolvable_app_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "_fake_perch_site:not_an_app"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err
