"""Request-target parsing.

Parsing never raises: a target that cannot be parsed yields ``None``
so the routing stage can react deterministically.
"""

from dataclasses import dataclass
from urllib.parse import unquote


@dataclass(frozen=True, slots=True)
class ParsedUrl:
    """A decoded request path and its raw query string."""

    path: str
    query: str = ""


def parse_url(target: str) -> ParsedUrl | None:
    """Parse a raw request target (``/path?query``) into a ``ParsedUrl``.

    Returns ``None`` for anything that is not an origin-form target
    or whose path is not valid percent-encoded UTF-8.
    """
    if not target.startswith("/"):
        return None
    raw_path, _, query = target.partition("#")[0].partition("?")
    try:
        path = unquote(raw_path, errors="strict")
    except UnicodeDecodeError:
        return None
    if "\x00" in path:
        return None
    return ParsedUrl(path=path, query=query)
