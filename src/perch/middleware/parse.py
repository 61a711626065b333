"""Request parsing stage: query string and body.

Runs after routing so static-file requests skip it entirely.
"""

from perch.context import RequestContext, ResponseContext
from perch.http.body import decode_body
from perch.http.params import QueryParams

# Methods whose bodies are never read
_BODILESS = frozenset({"GET", "HEAD", "OPTIONS"})


class ParseRequest:
    """Populate ``request.query``, ``request.form`` and ``request.json``."""

    name = "parse"

    __slots__ = ()

    async def __call__(self, request: RequestContext, response: ResponseContext) -> None:
        if request.finished or request.routing.static_full_path:
            return

        if request.parsed_url is not None:
            request.query = QueryParams(request.parsed_url.query)

        if request.body is None or request.method in _BODILESS:
            return

        raw = await request.body.read()
        request.form, request.json = decode_body(raw, request.headers.get("content-type"))
        if request.body.rolled_over:
            request.log.debug("Request body spooled to disk (%d bytes)", request.body.size)
