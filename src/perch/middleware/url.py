"""URL stages: parse the request target, reject directory traversal."""

from urllib.parse import unquote

from perch.context import RequestContext, ResponseContext
from perch.http.url import parse_url as _parse_target
from perch.middleware.fallback import not_found
from perch.middleware.protocol import skip_if_finished
from perch.middleware.send import HTML_CONTENT_TYPE
from perch.routing.router import PathRouter
from perch.server.sender import send_body
from perch.templating.renderer import TemplateRenderer


@skip_if_finished
async def parse_url(request: RequestContext, response: ResponseContext) -> None:
    """Set ``request.parsed_url``; leave it ``None`` when the target is malformed."""
    request.parsed_url = _parse_target(request.raw_url)
    if request.parsed_url is None:
        request.log.debug("Could not parse request target")


class ValidatePath:
    """Answer 404 for any path containing ``..``, before anything touches the disk.

    A traversal attempt is hostile input, not a server error: it gets
    the ordinary not-found response, custom template included, and the
    request is finished here.
    """

    name = "validate_path"

    __slots__ = ("_not_found_route", "_renderer", "_router")

    def __init__(
        self,
        router: PathRouter,
        renderer: TemplateRenderer,
        *,
        not_found_route: str = "/404",
    ) -> None:
        self._router = router
        self._renderer = renderer
        self._not_found_route = not_found_route

    async def __call__(self, request: RequestContext, response: ResponseContext) -> None:
        if request.finished:
            return

        if request.parsed_url is not None:
            path = request.parsed_url.path
        else:
            path = unquote(request.raw_url.partition("?")[0], errors="replace")
        if ".." not in path:
            return

        request.log.info("Requested file outside the process directory (directory traversal attempt)")
        await not_found(request, response, self._router, self._not_found_route)
        if request.finished:
            return

        body = await self._renderer.render(request.routing.template_full_path, response.payload)
        await send_body(response, body, HTML_CONTENT_TYPE, method=request.method)
        request.finished = True
