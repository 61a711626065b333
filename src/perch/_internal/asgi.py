"""ASGI type aliases and the typed view of an HTTP scope.

Only the handler reads raw scopes; stages see ``RequestContext``.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias
from urllib.parse import quote

# Raw ASGI callables and scope
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class HTTPScope:
    """The parts of an ASGI HTTP scope the pipeline uses."""

    method: str
    path: str
    raw_path: bytes
    query_string: bytes
    headers: tuple[tuple[bytes, bytes], ...]
    client: tuple[str, int] | None

    @classmethod
    def from_scope(cls, scope: Scope) -> "HTTPScope":
        """Parse raw ASGI scope into typed object."""
        client = scope.get("client")
        return cls(
            method=scope.get("method", "GET"),
            path=scope.get("path", "/"),
            raw_path=scope.get("raw_path") or b"",
            query_string=scope.get("query_string", b""),
            headers=tuple(scope.get("headers", ())),
            client=tuple(client) if client else None,
        )

    @property
    def target(self) -> str:
        """The request target as sent on the wire: raw path plus query."""
        path = (
            self.raw_path.decode("latin-1")
            if self.raw_path
            else quote(self.path, safe="/%;:@&=+$,!~*'()")
        )
        if self.query_string:
            return f"{path}?{self.query_string.decode('latin-1')}"
        return path
