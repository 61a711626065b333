"""Static file dispatch stage."""

from perch.context import RequestContext, ResponseContext
from perch.http.static import FileStreamer


class SendStatic:
    """Stream the resolved static file, then finish the request.

    A stream failure aborts the chain. On success the chain continues
    (as a no-op for the remaining stages) so cleanup still runs.
    """

    name = "send_static"

    __slots__ = ("_streamer",)

    def __init__(self, streamer: FileStreamer | None = None) -> None:
        self._streamer = streamer or FileStreamer()

    async def __call__(self, request: RequestContext, response: ResponseContext) -> None:
        if request.finished or not request.routing.static_full_path:
            return

        request.log.debug("Static file found, streaming")
        try:
            await self._streamer.stream(request, response, request.routing.static_full_path)
        except Exception as exc:
            request.log.warning("Error sending static file to client: %s", exc)
            raise
        request.finished = True
