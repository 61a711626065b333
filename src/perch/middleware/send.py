"""Response serialization stage.

1. finished already: nothing to do
2. rendered markup: send as HTML
3. otherwise: send the payload as JSON. Strings and bytes go out
   verbatim, ``None`` as an empty body, anything else through
   ``json.dumps``. A payload JSON cannot represent aborts the chain.
"""

import json as json_module
from typing import Any

from perch.context import RequestContext, ResponseContext
from perch.errors import SerializationError
from perch.server.sender import send_body

HTML_CONTENT_TYPE = "text/html; charset=UTF-8"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


def serialize_payload(payload: Any) -> str | bytes:
    """Convert a payload to a JSON body. Raise ``SerializationError`` on failure."""
    if isinstance(payload, (str, bytes)):
        return payload
    if isinstance(payload, (bytearray, memoryview)):
        return bytes(payload)
    if payload is None:
        return b""
    try:
        return json_module.dumps(payload, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        msg = f"could not serialize payload of type {type(payload).__name__}: {exc}"
        raise SerializationError(msg) from exc


class SendToClient:
    """Write the in-memory result to the client and finish the request."""

    name = "send_to_client"

    __slots__ = ()

    async def __call__(self, request: RequestContext, response: ResponseContext) -> None:
        if request.finished:
            return

        if response.rendered is not None:
            await send_body(response, response.rendered, HTML_CONTENT_TYPE, method=request.method)
            request.finished = True
            return

        try:
            body = serialize_payload(response.payload)
        except SerializationError as exc:
            request.log.warning("Could not stringify payload: %s", exc)
            raise

        await send_body(response, body, JSON_CONTENT_TYPE, method=request.method)
        request.finished = True
