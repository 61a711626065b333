"""Perch: a file-routed HTTP request pipeline.

A request runs through an ordered chain of stages (URL parsing, path
validation, routing, static delivery, controller, template render,
serialization, cleanup). Controllers, kida templates, and static files
are found by URL path under a base directory.

Basic usage::

    from perch import App, AppConfig

    app = App(AppConfig(base_dir="./site"))

    @app.controller("/")
    async def home(request, response):
        response.payload = {"title": "Welcome"}

    app.run()

``GET /`` renders ``templates/default.html`` with the payload as
``data``; ``GET /.json`` sends the payload as JSON.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "ControllerError",
    "DeliveryError",
    "Middleware",
    "PerchError",
    "RequestContext",
    "ResponseContext",
    "RoutingError",
    "SerializationError",
    "TemplateError",
    "get_request",
    "skip_if_finished",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name in ("RequestContext", "ResponseContext", "get_request"):
        from perch import context as _ctx

        return getattr(_ctx, name)

    if name in ("Middleware", "skip_if_finished"):
        from perch.middleware import protocol as _proto

        return getattr(_proto, name)

    if name in (
        "ConfigurationError",
        "ControllerError",
        "DeliveryError",
        "PerchError",
        "RoutingError",
        "SerializationError",
        "TemplateError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module 'perch' has no attribute {name!r}"
    raise AttributeError(msg)
