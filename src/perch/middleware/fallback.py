"""Not-found fallback shared by the traversal guard and controller dispatch.

A miss is not an error: the reserved not-found route is resolved like
any other route. With a template there, the normal render stage
produces the body; without one, a minimal body is sent at once.
"""

from perch.context import RequestContext, ResponseContext, Routing
from perch.errors import RoutingError
from perch.routing.router import PathRouter
from perch.server.sender import send_body

NOT_FOUND_BODY = "404 Not Found"


async def not_found(
    request: RequestContext,
    response: ResponseContext,
    router: PathRouter,
    route: str = "/404",
) -> None:
    """Turn the request into a 404.

    Either sets ``request.finished`` after sending the minimal body, or
    points ``request.routing`` at the custom not-found template.
    """
    response.status = 404

    try:
        result = await router.resolve(route)
    except Exception as exc:
        msg = f"router failed on {route!r}: {exc}"
        raise RoutingError(msg) from exc

    if not result.template_full_path:
        await send_body(response, NOT_FOUND_BODY, "text/plain; charset=utf-8", method=request.method)
        request.finished = True
        return

    request.routing = Routing(
        controller_path=result.controller_path,
        controller_full_path=result.controller_full_path,
        template_path=result.template_path,
        template_full_path=result.template_full_path,
    )
