"""Context builders for stage-level tests."""

from typing import Any

from perch.context import RequestContext, ResponseContext
from perch.http.params import Headers


class SentMessages:
    """Records ASGI ``send`` messages."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def status(self) -> int | None:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return message["status"]
        return None

    @property
    def headers(self) -> dict[str, str]:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return {k.decode(): v.decode() for k, v in message["headers"]}
        return {}

    @property
    def body(self) -> bytes:
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        )


def make_contexts(
    url: str = "/",
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
) -> tuple[RequestContext, ResponseContext, SentMessages]:
    sent = SentMessages()
    raw = tuple((k.lower().encode(), v.encode()) for k, v in (headers or {}).items())
    request = RequestContext(
        raw_url=url,
        method=method,
        headers=Headers(raw),
        correlation_id="test",
    )
    return request, ResponseContext(sent), sent
