"""Per-request context pair and the request-scoped ContextVar.

One ``RequestContext`` and one ``ResponseContext`` exist per inbound
request. They are mutable, owned by the pipeline for the lifetime of
the request, and discarded after the response completes. Nothing in
them is shared across requests.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed.
"""

import logging
import uuid
from collections.abc import MutableMapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from perch._internal.asgi import HTTPScope, Receive, Send
from perch.http.body import RequestBody
from perch.http.params import Headers, QueryParams
from perch.http.url import ParsedUrl

logger = logging.getLogger("perch.request")


@dataclass(slots=True)
class Routing:
    """What the path router resolved for this request.

    Each ``*_path`` is the router-relative form; each ``*_full_path``
    is the absolute form (a filesystem path, or ``module:qualname``
    for controllers).
    """

    controller_path: str | None = None
    controller_full_path: str | None = None
    template_path: str | None = None
    template_full_path: str | None = None
    static_path: str | None = None
    static_full_path: str | None = None


class RequestLogAdapter(logging.LoggerAdapter):
    """Prefix every message with the request's correlation id and URL."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = self.extra or {}
        return f"[{extra['correlation_id']}] {extra['url']} - {msg}", kwargs


@dataclass(slots=True, eq=False)
class RequestContext:
    """Mutable per-request state threaded through every stage.

    ``finished`` is the cooperative short-circuit flag: once set, every
    later stage must treat the request as answered and do nothing.
    """

    raw_url: str
    method: str
    headers: Headers
    correlation_id: str
    body: RequestBody | None = None
    client: tuple[str, int] | None = None
    parsed_url: ParsedUrl | None = None
    routing: Routing = field(default_factory=Routing)
    render_mode: bool = True
    finished: bool = False

    # Populated by the parse stage
    query: QueryParams = field(default_factory=QueryParams)
    form: dict[str, list[str]] | None = None
    json: Any = None

    # Free-form per-request storage for custom stages and controllers
    state: dict[str, Any] = field(default_factory=dict)

    _log: RequestLogAdapter | None = field(default=None, repr=False)

    @property
    def log(self) -> RequestLogAdapter:
        """Logger bound to this request's correlation id."""
        if self._log is None:
            self._log = RequestLogAdapter(
                logger, {"correlation_id": self.correlation_id, "url": self.raw_url}
            )
        return self._log

    def release(self) -> None:
        """Release temporary resources held by the request (spooled body)."""
        if self.body is not None:
            self.body.close()


@dataclass(slots=True, eq=False)
class ResponseContext:
    """Mutable response state plus the ASGI ``send`` channel.

    Handlers set ``payload`` (any value) and optionally ``status`` and
    ``headers``. The render stage sets ``rendered``, which takes
    precedence over ``payload`` when the response is serialized.

    Writing happens through ``start()``, ``write()`` and ``end()``.
    ``headers_sent`` and ``closed`` record how far the response got, so
    the error responder never writes twice.
    """

    _send: Send = field(repr=False)
    status: int = 200
    payload: Any = None
    rendered: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    headers_sent: bool = False
    closed: bool = False

    def set_header(self, name: str, value: str) -> None:
        """Set a response header (names are case-insensitive)."""
        self.headers[name.lower()] = value

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    async def start(self, status: int | None = None) -> None:
        """Send the status line and headers."""
        if self.headers_sent:
            msg = "response headers already sent"
            raise RuntimeError(msg)
        if status is not None:
            self.status = status
        raw_headers = [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in self.headers.items()
        ]
        self.headers_sent = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status,
                "headers": raw_headers,
            }
        )

    async def write(self, chunk: bytes) -> None:
        """Send a body chunk; more chunks may follow."""
        if not self.headers_sent:
            await self.start()
        if chunk:
            await self._send({"type": "http.response.body", "body": chunk, "more_body": True})

    async def end(self, body: bytes = b"") -> None:
        """Send the final body chunk and close the response."""
        if self.closed:
            return
        if not self.headers_sent:
            await self.start()
        self.closed = True
        await self._send({"type": "http.response.body", "body": body, "more_body": False})


request_var: ContextVar[RequestContext] = ContextVar("perch_request")
"""The current request context. Set by the handler before the chain runs."""


def get_request() -> RequestContext:
    """Return the current request context.

    Raises ``LookupError`` if called outside a request.
    """
    return request_var.get()


def build_request_context(
    scope: MutableMapping[str, Any],
    receive: Receive,
    *,
    request_id_header: str = "x-request-id",
    spool_size: int = 1024 * 1024,
    max_body_size: int = 16 * 1024 * 1024,
) -> RequestContext:
    """Produce the per-request context from a raw ASGI scope.

    URL parsing is left to the ``parse_url`` stage, so ``parsed_url``
    starts out as ``None``.
    """
    http = HTTPScope.from_scope(scope)
    headers = Headers(http.headers)
    correlation_id = headers.get(request_id_header) or uuid.uuid4().hex
    return RequestContext(
        raw_url=http.target,
        method=http.method.upper(),
        headers=headers,
        correlation_id=correlation_id,
        body=RequestBody(receive, spool_size=spool_size, max_size=max_body_size),
        client=http.client,
    )
