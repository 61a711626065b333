"""Top-level error responder.

Every error a stage raises ends up here. The responder answers
``500 Internal Server Error`` when nothing has been written yet; once
response bytes are out it only closes the stream and never writes
again. Not-found and traversal never come through here.
"""

from perch.context import RequestContext, ResponseContext
from perch.errors import PerchError
from perch.server.sender import send_body

INTERNAL_ERROR_BODY = "500 Internal Server Error"


async def respond_internal_error(
    exc: Exception,
    request: RequestContext,
    response: ResponseContext,
) -> None:
    """Answer a failed request with a fixed 500."""
    if isinstance(exc, PerchError):
        request.log.error("500 %s %s: %s", request.method, request.raw_url, exc, exc_info=exc)
    else:
        request.log.exception("500 %s %s", request.method, request.raw_url, exc_info=exc)

    # The cleanup stage is skipped after an abort; release here instead.
    request.release()
    request.finished = True

    if response.headers_sent:
        await response.end()
        return

    response.status = 500
    response.headers.clear()
    await send_body(response, INTERNAL_ERROR_BODY, "text/plain; charset=utf-8", method=request.method)
