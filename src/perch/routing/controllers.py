"""Controller protocol and registry.

A controller is any callable matching::

    def controller(request: RequestContext, response: ResponseContext) -> Any: ...

Sync or async. Returning normally signals completion; raising signals
failure. No base class required.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from perch.context import RequestContext, ResponseContext


class Controller(Protocol):
    """Protocol for perch controllers.

    Accepts both functions and callable objects::

        def hello(request, response):
            response.payload = {"hello": "world"}

        class Report:
            async def __call__(self, request, response):
                response.payload = await self.build()
    """

    def __call__(self, request: "RequestContext", response: "ResponseContext") -> Any: ...


def normalize_route(route: str, default_route: str = "/default") -> str:
    """Normalize a route string: single leading slash, no trailing slash.

    The root route maps to *default_route*.
    """
    stripped = "/" + route.strip("/")
    if stripped == "/":
        return default_route
    return stripped


def qualified_name(controller: Any) -> str:
    """Return ``module:qualname`` for a controller (its absolute form)."""
    target = controller if hasattr(controller, "__qualname__") else type(controller)
    module = getattr(target, "__module__", None) or "<unknown>"
    return f"{module}:{target.__qualname__}"


class ControllerRegistry:
    """Maps normalized routes to controllers.

    Populated during setup, read concurrently afterwards. Lookups never
    mutate the registry.
    """

    __slots__ = ("_controllers", "_default_route")

    def __init__(self, default_route: str = "/default") -> None:
        self._controllers: dict[str, Controller] = {}
        self._default_route = default_route

    def register(self, route: str, controller: Controller) -> None:
        """Register *controller* for *route*, replacing any previous one."""
        self._controllers[normalize_route(route, self._default_route)] = controller

    def get(self, route: str) -> Controller | None:
        return self._controllers.get(normalize_route(route, self._default_route))

    def lookup(self, route: str) -> tuple[str, str] | None:
        """Return ``(route, "module:qualname")`` for *route*, or ``None``."""
        key = normalize_route(route, self._default_route)
        controller = self._controllers.get(key)
        if controller is None:
            return None
        return key, qualified_name(controller)

    def __contains__(self, route: object) -> bool:
        return isinstance(route, str) and self.get(route) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._controllers)

    def __len__(self) -> int:
        return len(self._controllers)
