"""Request body reading and decoding.

The body is read once from the ASGI ``receive`` callable. Small bodies
stay in memory; anything above the spool threshold rolls over into a
temporary file that the cleanup stage releases.
"""

import json as json_module
import tempfile
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import parse_qs

from perch._internal.asgi import Receive
from perch.errors import RequestBodyError


class RequestBody:
    """A request body spooled from ASGI messages.

    ``read()`` consumes ``receive`` on first call; later calls return
    the same bytes. ``close()`` releases the spool file, if any.
    """

    __slots__ = ("_closed", "_consumed", "_max_size", "_receive", "_size", "_spool")

    def __init__(self, receive: Receive, *, spool_size: int, max_size: int) -> None:
        self._receive = receive
        self._max_size = max_size
        self._spool = tempfile.SpooledTemporaryFile(max_size=spool_size)  # noqa: SIM115
        self._size = 0
        self._consumed = False
        self._closed = False

    @property
    def size(self) -> int:
        """Bytes received so far."""
        return self._size

    @property
    def rolled_over(self) -> bool:
        """True once the body has been moved to a temporary file."""
        return bool(getattr(self._spool, "_rolled", False))

    @property
    def closed(self) -> bool:
        return self._closed

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield raw body chunks straight from ASGI ``receive``."""
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def read(self) -> bytes:
        """Read the full body, spooling it as it arrives."""
        if self._closed:
            msg = "request body already released"
            raise RequestBodyError(msg)
        if not self._consumed:
            async for chunk in self.stream():
                self._size += len(chunk)
                if self._size > self._max_size:
                    msg = f"request body exceeds {self._max_size} bytes"
                    raise RequestBodyError(msg)
                self._spool.write(chunk)
            self._consumed = True
        self._spool.seek(0)
        return self._spool.read()

    def close(self) -> None:
        """Release the spool (and its temp file when rolled over)."""
        if not self._closed:
            self._spool.close()
            self._closed = True


def decode_body(raw: bytes, content_type: str | None) -> tuple[dict[str, list[str]] | None, Any]:
    """Decode a body according to its content type.

    Returns ``(form, json)``; each is ``None`` when the content type
    does not apply. Malformed JSON or form encoding raises
    ``RequestBodyError``.
    """
    ct = (content_type or "").split(";", 1)[0].strip().lower()
    if not raw:
        return None, None
    if ct == "application/json" or ct.endswith("+json"):
        try:
            return None, json_module.loads(raw)
        except ValueError as exc:
            msg = f"invalid JSON body: {exc}"
            raise RequestBodyError(msg) from exc
    if ct == "application/x-www-form-urlencoded":
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = "form body is not valid UTF-8"
            raise RequestBodyError(msg) from exc
        return parse_qs(text, keep_blank_values=True), None
    return None, None
