"""Perch application class.

Mutable during setup (controllers, stages, template filters).
Frozen at runtime when ``start()`` or ``__call__()`` is first invoked.
"""

import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.config import AppConfig
from perch.errors import ConfigurationError
from perch.http.static import FileStreamer
from perch.middleware import (
    ParseRequest,
    Render,
    Route,
    RunController,
    SendStatic,
    SendToClient,
    ValidatePath,
    cleanup,
    parse_url,
    stage_name,
)
from perch.middleware.protocol import Middleware
from perch.routing.controllers import Controller, ControllerRegistry
from perch.routing.router import FileRouter, PathRouter
from perch.server.handler import handle_request
from perch.templating.cache import TemplateCache
from perch.templating.compiler import CompileOptions
from perch.templating.renderer import TemplateRenderer


class App:
    """The perch application.

    Owns the collaborators every request shares (router, controller
    registry, template renderer with its cache, file streamer) and the
    ordered stage list each request runs through.

    ``app.middleware`` is the mutable stage list. Prepend, insert or
    replace stages before the app starts serving; the list is captured
    as a tuple when the app freezes.

    Thread safety:
        Registration happens on one thread, usually at import time.
        Freezing takes a lock and re-checks the flag inside it, so exactly
        one thread captures the stage list, even when several ASGI
        workers call ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "_template_globals",
        "config",
        "controllers",
        "renderer",
        "router",
        "streamer",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        router: PathRouter | None = None,
        template_cache: TemplateCache | None = None,
        middleware: Iterable[Middleware] | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        cfg = self.config

        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        self.controllers = ControllerRegistry(cfg.default_route)
        self.router: PathRouter = router or FileRouter(
            cfg.base_dir,
            template_dir=cfg.template_dir,
            static_dir=cfg.static_dir,
            template_exts=cfg.template_exts,
            search_dirs=cfg.search_dirs,
            controllers=self.controllers,
        )
        self.renderer = TemplateRenderer(
            self.router,
            cache=template_cache,
            options=self._compile_options(),
        )
        self.streamer = FileStreamer(
            chunk_size=cfg.static_chunk_size,
            cache_control=cfg.static_cache_control,
        )

        # Only build the default chain if the caller did not supply one
        self._middleware_list: list[Middleware] = (
            list(middleware) if middleware is not None else self.default_middleware()
        )
        self._middleware: tuple[Middleware, ...] = ()

    # -- Stage list --

    def default_middleware(self) -> list[Middleware]:
        """Build the default stage list, in order."""
        cfg = self.config
        return [
            parse_url,
            ValidatePath(self.router, self.renderer, not_found_route=cfg.not_found_route),
            Route(self.router, default_route=cfg.default_route),
            ParseRequest(),
            SendStatic(self.streamer),
            RunController(self.controllers, self.router, not_found_route=cfg.not_found_route),
            Render(self.renderer),
            SendToClient(),
            cleanup,
        ]

    @property
    def middleware(self) -> list[Middleware]:
        """The mutable, ordered stage list."""
        return self._middleware_list

    def add_middleware(
        self,
        middleware: Middleware,
        *,
        before: str | None = None,
        after: str | None = None,
    ) -> None:
        """Add a stage at the end, or next to the stage named *before*/*after*."""
        self._check_not_frozen()
        if before is not None and after is not None:
            msg = "Pass either 'before' or 'after', not both."
            raise ValueError(msg)
        if before is not None:
            self._middleware_list.insert(self._index_of(before), middleware)
        elif after is not None:
            self._middleware_list.insert(self._index_of(after) + 1, middleware)
        else:
            self._middleware_list.append(middleware)

    def insert_middleware(self, index: int, middleware: Middleware) -> None:
        """Insert a stage at *index* (``0`` prepends)."""
        self._check_not_frozen()
        self._middleware_list.insert(index, middleware)

    def replace_middleware(self, name: str, middleware: Middleware) -> None:
        """Replace the stage named *name*."""
        self._check_not_frozen()
        self._middleware_list[self._index_of(name)] = middleware

    def _index_of(self, name: str) -> int:
        for index, stage in enumerate(self._middleware_list):
            if stage_name(stage) == name:
                return index
        msg = f"No stage named {name!r}. Stages: {[stage_name(s) for s in self._middleware_list]}"
        raise ConfigurationError(msg)

    # -- Controller registration --

    def controller(self, route: str) -> Callable[[Controller], Controller]:
        """Register a controller for *route* via decorator.

        ``"/"`` registers the default route. Data requests for
        ``/route.json`` reach the same controller.

        Usage::

            @app.controller("/report")
            async def report(request, response):
                response.payload = await build_report()
        """

        def decorator(func: Controller) -> Controller:
            self._check_not_frozen()
            self.controllers.register(route, func)
            return func

        return decorator

    def add_controller(self, route: str, controller: Controller) -> None:
        """Register a controller for *route*."""
        self._check_not_frozen()
        self.controllers.register(route, controller)

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator: expose *func* to templates as a filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator: expose *func* to templates as a global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_globals[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator: run *func* (sync or async) when the app starts.

        Hooks run in registration order during ``start()``, before the
        server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator: run *func* (sync or async) when the app stops.

        Hooks run in registration order during ``stop()``.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    async def start(self) -> None:
        """Freeze the app and run startup hooks.

        Raises ``ConfigurationError`` (a startup error) when the base
        directory does not exist.
        """
        self._ensure_frozen()
        base_dir = Path(self.config.base_dir)
        if isinstance(self.router, FileRouter) and not base_dir.is_dir():
            msg = f"base_dir {str(base_dir)!r} is not a directory"
            raise ConfigurationError(msg)
        for hook in self._startup_hooks:
            await invoke(hook)

    async def stop(self) -> None:
        """Run shutdown hooks."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce until interrupted."""
        from perch.server.serve import run_server

        self._ensure_frozen()
        run_server(
            self,
            host=host or self.config.host,
            port=port or self.config.port,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the request handler.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            middleware=self._middleware,
            config=self.config,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol, mapped onto start/stop."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.start()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.stop()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _compile_options(self) -> CompileOptions:
        cfg = self.config
        return CompileOptions(
            autoescape=cfg.autoescape,
            trim_blocks=cfg.trim_blocks,
            lstrip_blocks=cfg.lstrip_blocks,
            filters=dict(self._template_filters),
            globals=dict(self._template_globals),
        )

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Capture the runtime state.

        Caller holds ``_freeze_lock``.
        """
        self._middleware = tuple(self._middleware_list)
        self.renderer.options = self._compile_options()
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register controllers, stages, and filters before calling app.run()."
            )
            raise RuntimeError(msg)
