"""Whole-body response emission.

Sends a complete body through a ``ResponseContext``: sets the content
type and length, enforces no-body statuses and ``HEAD``.
"""

from perch.context import ResponseContext


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_body(
    response: ResponseContext,
    body: str | bytes | bytearray | memoryview,
    content_type: str,
    *,
    method: str = "GET",
) -> None:
    """Send *body* as the complete response."""
    data = body.encode("utf-8") if isinstance(body, str) else bytes(body)
    if not body_allowed(response.status):
        data = b""

    response.set_header("content-type", content_type)
    response.set_header("content-length", str(len(data)))

    await response.start()
    await response.end(b"" if method == "HEAD" else data)
