"""Routing decision stage.

Normalizes the path, decides render mode versus data mode, and asks
the path router what answers the request.

Data requests (paths ending in ``json``) are resolved twice, at once:
the trimmed route (``/report``) for a controller or template, and the
untrimmed path (``/report.json``) for a literal static file. A
controller or template on the trimmed route takes precedence; the
static file is only the fallback.
"""

import anyio

from perch.context import RequestContext, ResponseContext, Routing
from perch.errors import ConfigurationError, RoutingError
from perch.routing.resolution import Resolution
from perch.routing.router import PathRouter


def normalize_route(path: str, default_route: str = "/default") -> str:
    """Map the root path (and ``/.json``) onto the default route."""
    if path in ("", "/"):
        return default_route
    if path == "/.json":
        return default_route + ".json"
    return path


def trim_data_suffix(route: str, default_route: str = "/default") -> str:
    """Strip the data suffix: ``.json`` when present, else the bare ``json``."""
    trimmed = route.removesuffix(".json") if route.endswith(".json") else route[:-4]
    return normalize_route(trimmed, default_route)


class Route:
    """Populate ``request.routing`` and ``request.render_mode``."""

    name = "route"

    __slots__ = ("_default_route", "_router")

    def __init__(self, router: PathRouter, *, default_route: str = "/default") -> None:
        self._router = router
        self._default_route = default_route

    async def __call__(self, request: RequestContext, response: ResponseContext) -> None:
        if request.finished:
            return

        if request.parsed_url is None:
            msg = "request.parsed_url is not set"
            request.log.error(msg)
            raise ConfigurationError(msg)

        path = request.parsed_url.path
        route = normalize_route(path, self._default_route)
        request.routing = Routing()

        static_route: str | None = None
        if route.endswith("json"):
            request.log.debug("url ends in json, resolving as a data request")
            request.render_mode = False
            static_route = path
            route = trim_data_suffix(route, self._default_route)
        else:
            request.render_mode = True

        results: dict[str, Resolution] = {}
        errors: list[Exception] = []

        async def resolve(key: str, target: str) -> None:
            try:
                results[key] = await self._router.resolve(target)
            except Exception as exc:
                errors.append(exc)

        async with anyio.create_task_group() as tg:
            tg.start_soon(resolve, "route", route)
            if static_route is not None:
                tg.start_soon(resolve, "static", static_route)

        if errors:
            request.log.error("Router failed: %s", errors[0])
            msg = f"router failed on {route!r}: {errors[0]}"
            raise RoutingError(msg) from errors[0]

        resolved = results["route"]
        routing = Routing(
            controller_path=resolved.controller_path,
            controller_full_path=resolved.controller_full_path,
            template_path=resolved.template_path,
            template_full_path=resolved.template_full_path,
            static_path=resolved.static_path,
            static_full_path=resolved.static_full_path,
        )

        literal = results.get("static")
        if literal is not None and literal.static_full_path:
            if routing.controller_full_path or routing.template_full_path:
                request.log.debug(
                    "Static file %s shadowed by route %s", literal.static_path, route
                )
            else:
                routing.static_path = literal.static_path
                routing.static_full_path = literal.static_full_path

        request.routing = routing
        request.log.debug(
            "Routed to controller=%s template=%s static=%s",
            routing.controller_path,
            routing.template_path,
            routing.static_path,
        )
