"""Template rendering with a compiled-template cache.

``render(full_path, payload)``:

- cache hit: call the cached render function
- cache miss: read the source (async), compile it, store the result,
  then call it

Any read, compile, or render failure raises a ``TemplateError``
subclass. Nothing is retried; a failed compile is never cached.

Compiling and rendering run in anyio worker threads: both may look up
and read included templates from disk, which must not block the
event loop.
"""

import logging
from functools import partial
from typing import Any

import anyio

from perch.errors import (
    TemplateCompileError,
    TemplateReadError,
    TemplateRenderError,
)
from perch.routing.router import PathRouter
from perch.templating.cache import MemoryTemplateCache, TemplateCache
from perch.templating.compiler import CompileOptions, RenderFn, compile_template
from perch.templating.utils import TemplateUtils

logger = logging.getLogger("perch.templating")

# Fixed field names of the render input
UTILS_FIELD = "utils"
DATA_FIELD = "data"


class TemplateRenderer:
    """Compile-once, render-many access to templates on disk.

    Shared by all concurrent requests. The only shared mutable state is
    the cache, which tolerates duplicate concurrent compiles.
    """

    __slots__ = ("_cache", "_options", "_router", "_utils")

    def __init__(
        self,
        router: PathRouter,
        *,
        cache: TemplateCache | None = None,
        options: CompileOptions | None = None,
        utils: Any = None,
    ) -> None:
        self._router = router
        self._cache: TemplateCache = cache if cache is not None else MemoryTemplateCache()
        self._options = options or CompileOptions()
        self._utils = utils if utils is not None else TemplateUtils()

    @property
    def cache(self) -> TemplateCache:
        return self._cache

    @property
    def options(self) -> CompileOptions:
        return self._options

    @options.setter
    def options(self, options: CompileOptions) -> None:
        self._options = options

    def render_input(self, payload: Any) -> dict[str, Any]:
        """Build the mapping a template sees."""
        return {UTILS_FIELD: self._utils, DATA_FIELD: payload}

    async def render(self, full_path: str, payload: Any) -> str:
        """Render the template at *full_path* with *payload* as ``data``."""
        render = self._cache.get(full_path)
        if render is None:
            render = await self.compile(full_path)
            self._cache.put(full_path, render)

        try:
            return await anyio.to_thread.run_sync(render, self.render_input(payload))
        except Exception as exc:
            logger.error("Could not render %s: %s", full_path, exc)
            raise TemplateRenderError(full_path, str(exc)) from exc

    async def compile(self, full_path: str) -> RenderFn:
        """Read and compile the template at *full_path* (bypasses the cache)."""
        logger.debug("Compiling template: %s", full_path)
        try:
            source = await anyio.Path(full_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Could not read template file %s: %s", full_path, exc)
            raise TemplateReadError(full_path, str(exc)) from exc

        try:
            return await anyio.to_thread.run_sync(
                partial(
                    compile_template,
                    source,
                    resolve_include=self._router.find_template,
                    options=self._options,
                    origin=full_path,
                )
            )
        except Exception as exc:
            logger.error("Could not compile %s: %s", full_path, exc)
            raise TemplateCompileError(full_path, str(exc)) from exc
