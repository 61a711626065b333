"""Tests for perch.config — AppConfig frozen dataclass."""

from pathlib import Path

import pytest

from perch.config import AppConfig


class TestAppConfig:
    def test_defaults(self) -> None:
        cfg = AppConfig()

        assert cfg.host == "127.0.0.1"
        assert cfg.port == 8000
        assert cfg.debug is False
        assert cfg.base_dir == "."
        assert cfg.template_dir == "templates"
        assert cfg.static_dir == "public"
        assert cfg.template_exts == ("html",)
        assert cfg.default_route == "/default"
        assert cfg.not_found_route == "/404"
        assert cfg.autoescape is True
        assert cfg.max_content_length == 16 * 1024 * 1024
        assert cfg.request_id_header == "x-request-id"

    def test_override(self) -> None:
        cfg = AppConfig(base_dir="./site", port=3000, debug=True)

        assert cfg.base_dir == "./site"
        assert cfg.port == 3000
        assert cfg.debug is True

    def test_frozen(self) -> None:
        cfg = AppConfig()

        with pytest.raises(AttributeError):
            cfg.debug = True  # type: ignore[misc]

    def test_base_dir_as_path(self) -> None:
        cfg = AppConfig(base_dir=Path("/srv/site"))
        assert cfg.base_dir == Path("/srv/site")

    def test_search_dirs(self) -> None:
        cfg = AppConfig(search_dirs=("shared", Path("/opt/theme")))
        assert cfg.search_dirs == ("shared", Path("/opt/theme"))
