"""Controller dispatch stage.

First match wins:

1. a template but no controller: nothing to run (template-only page)
2. neither: not-found fallback
3. otherwise: run the controller
"""

from perch._internal.invoke import invoke
from perch.context import RequestContext, ResponseContext
from perch.errors import ControllerError
from perch.middleware.fallback import not_found
from perch.routing.controllers import ControllerRegistry
from perch.routing.router import PathRouter


class RunController:
    """Invoke the controller resolved for the request.

    A controller that raises aborts the chain with ``ControllerError``.
    A non-``None`` return value becomes the payload unless the
    controller already set one.
    """

    name = "run_controller"

    __slots__ = ("_controllers", "_not_found_route", "_router")

    def __init__(
        self,
        controllers: ControllerRegistry,
        router: PathRouter,
        *,
        not_found_route: str = "/404",
    ) -> None:
        self._controllers = controllers
        self._router = router
        self._not_found_route = not_found_route

    async def __call__(self, request: RequestContext, response: ResponseContext) -> None:
        if request.finished:
            return

        routing = request.routing
        if routing.template_full_path and not routing.controller_full_path:
            request.log.debug("Only template found")
            return

        if not routing.controller_full_path and not routing.template_full_path:
            request.log.debug("Neither controller nor template found, running not-found fallback")
            await not_found(request, response, self._router, self._not_found_route)
            return

        controller = self._controllers.get(routing.controller_path or "")
        if controller is None:
            msg = f"no controller registered for {routing.controller_path!r}"
            raise ControllerError(msg)

        request.log.debug("Controller found, running %s", routing.controller_full_path)
        try:
            result = await invoke(controller, request, response)
        except Exception as exc:
            request.log.error(
                "Got exception when running controller %s: %s",
                routing.controller_full_path,
                exc,
            )
            msg = f"controller {routing.controller_full_path} failed: {exc}"
            raise ControllerError(msg) from exc

        if result is not None and response.payload is None:
            response.payload = result
