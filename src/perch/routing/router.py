"""Filesystem path router.

Maps a logical route (``/about``) to the things that can answer it: a
registered controller, a template file, and a static file. Templates
and static files are searched for under every search root, in order;
the first match wins. Nothing outside a root's template or static
directory is ever returned.
"""

import logging
from collections.abc import Iterable
from pathlib import Path, PurePosixPath
from typing import Protocol

import anyio

from perch.routing.controllers import ControllerRegistry
from perch.routing.resolution import Resolution

logger = logging.getLogger("perch.routing")


class PathRouter(Protocol):
    """Protocol for routers consumed by the pipeline.

    Implementations are shared by all concurrent requests and must be
    safe for concurrent read-only calls.
    """

    async def resolve(self, route: str) -> Resolution:
        """Resolve *route*. Raise on failure."""
        ...

    def find_template(self, name: str, *, relative_to: str | None = None) -> str | None:
        """Locate an included template by name. ``None`` when missing."""
        ...


def _relative_parts(route: str) -> tuple[str, ...] | None:
    """Split a route into path parts, or ``None`` if it tries to escape."""
    parts = tuple(p for p in PurePosixPath("/" + route.strip("/")).parts[1:] if p)
    if any(p in (".", "..") or "\\" in p for p in parts):
        return None
    return parts


class FileRouter:
    """Resolve routes against a directory layout.

    Layout under each search root::

        <root>/<template_dir>/about.html     -> template for /about
        <root>/<static_dir>/robots.txt       -> static file for /robots.txt

    Controllers come from the ``ControllerRegistry``.
    """

    __slots__ = ("_controllers", "_roots", "_static_dir", "_template_dir", "_template_exts")

    def __init__(
        self,
        base_dir: str | Path = ".",
        *,
        template_dir: str = "templates",
        static_dir: str = "public",
        template_exts: Iterable[str] = ("html",),
        search_dirs: Iterable[str | Path] = (),
        controllers: ControllerRegistry | None = None,
    ) -> None:
        self._roots: tuple[Path, ...] = tuple(
            Path(d).resolve() for d in (base_dir, *search_dirs)
        )
        self._template_dir = template_dir
        self._static_dir = static_dir
        self._template_exts = tuple(e.lstrip(".") for e in template_exts)
        self._controllers = controllers

    @property
    def roots(self) -> tuple[Path, ...]:
        return self._roots

    @property
    def template_roots(self) -> tuple[Path, ...]:
        return tuple(root / self._template_dir for root in self._roots)

    @property
    def static_roots(self) -> tuple[Path, ...]:
        return tuple(root / self._static_dir for root in self._roots)

    # ------------------------------------------------------------------
    # Route resolution
    # ------------------------------------------------------------------

    async def resolve(self, route: str) -> Resolution:
        """Resolve *route* to controller, template and static descriptors."""
        parts = _relative_parts(route)
        if parts is None or not parts:
            return Resolution()
        relative = "/".join(parts)

        controller = None
        if self._controllers is not None:
            controller = self._controllers.lookup("/" + relative)

        template = await self._find_file(self.template_roots, self._template_candidates(relative))
        static = await self._find_file(self.static_roots, (relative,))

        logger.debug(
            "resolved %s: controller=%s template=%s static=%s",
            route,
            controller[0] if controller else None,
            template[0] if template else None,
            static[0] if static else None,
        )
        return Resolution(
            controller_path=controller[0] if controller else None,
            controller_full_path=controller[1] if controller else None,
            template_path=template[0] if template else None,
            template_full_path=template[1] if template else None,
            static_path=static[0] if static else None,
            static_full_path=static[1] if static else None,
        )

    def _template_candidates(self, relative: str) -> tuple[str, ...]:
        candidates = [f"{relative}.{ext}" for ext in self._template_exts]
        if PurePosixPath(relative).suffix.lstrip(".") in self._template_exts:
            candidates.insert(0, relative)
        return tuple(candidates)

    async def _find_file(
        self, roots: Iterable[Path], candidates: Iterable[str]
    ) -> tuple[str, str] | None:
        candidates = tuple(candidates)
        for root in roots:
            for candidate in candidates:
                path = anyio.Path(root / candidate)
                if not await path.is_file():
                    continue
                resolved = Path(await path.resolve())
                if resolved.is_relative_to(root.resolve()):
                    return candidate, str(resolved)
        return None

    # ------------------------------------------------------------------
    # Include resolution (synchronous, called from inside the compiler)
    # ------------------------------------------------------------------

    def find_template(self, name: str, *, relative_to: str | None = None) -> str | None:
        """Locate a template referenced from inside another template.

        ``/partials/nav`` is looked up from the template roots.
        ``nav`` is looked up next to *relative_to* first, then from the
        template roots. Each name is tried as given, then with every
        template extension appended.
        """
        bases: list[tuple[str, ...]] = [()]
        if not name.startswith("/") and relative_to is not None:
            parent = self._template_dir_of(relative_to)
            if parent:
                bases.insert(0, parent)

        name_parts = _relative_parts(name)
        if not name_parts:
            return None

        for base in bases:
            relative = "/".join((*base, *name_parts))
            candidates = [relative, *(f"{relative}.{ext}" for ext in self._template_exts)]
            for root in self.template_roots:
                resolved_root = root.resolve()
                for candidate in candidates:
                    path = root / candidate
                    if not path.is_file():
                        continue
                    resolved = path.resolve()
                    if resolved.is_relative_to(resolved_root):
                        return str(resolved)
        return None

    def _template_dir_of(self, full_path: str) -> tuple[str, ...] | None:
        """Directory of *full_path* relative to the template root holding it."""
        path = Path(full_path)
        for root in self.template_roots:
            resolved_root = root.resolve()
            if path.is_relative_to(resolved_root):
                return path.parent.relative_to(resolved_root).parts
        return None
