"""Serve a perch App with pounce.

Pounce's ``run()`` takes an import string, but perch has a live ``App``
object, so ``pounce.Server`` is used directly with the ASGI callable.
Debug mode runs a single worker with auto-reload; otherwise the worker
count comes from the app config.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    reload: bool | None = None,
    app_path: str | None = None,
) -> None:
    """Start a pounce server for *app* and block until it stops.

    Args:
        app: The perch App instance.
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload. Defaults to ``app.config.debug``.
        app_path: Optional ``"module:attribute"`` import string. When
            provided, pounce reimports the app on each reload cycle.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    cfg = app.config
    if reload is None:
        reload = cfg.debug

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else cfg.workers,
        reload=reload,
        reload_include=cfg.reload_include,
        reload_dirs=cfg.reload_dirs,
        log_level=cfg.log_level,
        log_format=cfg.log_format,
        keep_alive_timeout=cfg.keep_alive_timeout,
        request_timeout=cfg.request_timeout,
    )
    if app_path is not None:
        server = Server(config, app, app_path=app_path)
    else:
        server = Server(config, app)
    server.run()
