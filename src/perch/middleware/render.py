"""Template rendering stage."""

from perch.context import RequestContext, ResponseContext
from perch.templating.renderer import TemplateRenderer


class Render:
    """Render the routed template into ``response.rendered``.

    No-op for finished requests, data requests, and requests without a
    template. Failures abort the chain; there is no empty-body fallback.
    """

    name = "render"

    __slots__ = ("_renderer",)

    def __init__(self, renderer: TemplateRenderer) -> None:
        self._renderer = renderer

    async def __call__(self, request: RequestContext, response: ResponseContext) -> None:
        if request.finished or not request.render_mode:
            return

        full_path = request.routing.template_full_path
        if not full_path:
            request.log.debug("No template found, routing.template_full_path is not set")
            return

        response.rendered = await self._renderer.render(full_path, response.payload)
