"""Shared fixtures: an on-disk site layout and an app builder."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from perch.app import App
from perch.config import AppConfig


class Site:
    """A throwaway site directory with ``templates/`` and ``public/``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.templates = root / "templates"
        self.public = root / "public"
        self.templates.mkdir()
        self.public.mkdir()

    def template(self, relative: str, source: str) -> Path:
        return self._write(self.templates / relative, source)

    def static(self, relative: str, content: str | bytes) -> Path:
        return self._write(self.public / relative, content)

    @staticmethod
    def _write(path: Path, content: str | bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path


@pytest.fixture
def site(tmp_path: Path) -> Site:
    return Site(tmp_path)


@pytest.fixture
def make_app(site: Site) -> Callable[..., App]:
    """Build an App rooted at the ``site`` fixture."""

    def factory(**config_overrides: Any) -> App:
        return App(AppConfig(base_dir=site.root, **config_overrides))

    return factory
