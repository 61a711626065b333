"""String helpers handed to every template.

Exposed two ways: as the ``utils`` object in the render input
(``{{ utils.truncate(data.title, 20) }}``) and as kida filters
(``{{ data.title | truncate_text(20) }}``). The ``escape`` and
``truncate`` filters are registered as ``escape_text`` and
``truncate_text`` so kida's built-ins keep their names.
"""

import html
import json
import time
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote, urlencode

# (seconds per unit, unit name), largest first
_AGE_UNITS = ((86400, "day"), (3600, "hour"), (60, "minute"))


def escape(value: Any) -> str:
    """HTML-escape ``str(value)``, quotes included."""
    return html.escape(str(value), quote=True)


def truncate(value: str, length: int = 80, end: str = "...") -> str:
    """Shorten *value* to *length* characters, *end* included.

    ``truncate("A long headline", 6)`` gives ``"A l..."``.
    """
    if len(value) <= length:
        return value
    return value[: max(length - len(end), 0)] + end


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """``"1 comment"``, ``"3 comments"``; pass *plural* for irregular words."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def qs(base: str, **params: Any) -> str:
    """Append the truthy *params* to *base* as a query string.

    ``qs("/search", page=2, q="")`` gives ``"/search?page=2"``.
    """
    pairs = [(key, str(value)) for key, value in params.items() if value]
    if not pairs:
        return base
    joiner = "&" if "?" in base else "?"
    return base + joiner + urlencode(pairs, quote_via=quote)


def timeago(unix_ts: int | float) -> str:
    """Coarse age of a unix timestamp: ``"just now"``, ``"5 minutes ago"``..."""
    if not unix_ts:
        return ""
    age = int(time.time() - unix_ts)
    for seconds, unit in _AGE_UNITS:
        if age >= seconds:
            amount = age // seconds
            return f"{amount} {unit}{'' if amount == 1 else 's'} ago"
    return "just now"


def format_time(unix_ts: float) -> str:
    """``HH:MM:SS`` in UTC."""
    return datetime.fromtimestamp(unix_ts, UTC).strftime("%H:%M:%S")


def to_json(value: Any) -> str:
    """Compact JSON; values JSON cannot represent are stringified."""
    return json.dumps(value, separators=(",", ":"), default=str)


class TemplateUtils:
    """Namespace object passed to templates as ``utils``."""

    __slots__ = ()

    escape = staticmethod(escape)
    truncate = staticmethod(truncate)
    pluralize = staticmethod(pluralize)
    qs = staticmethod(qs)
    timeago = staticmethod(timeago)
    format_time = staticmethod(format_time)
    to_json = staticmethod(to_json)


TEMPLATE_FILTERS: dict[str, Any] = {
    "escape_text": escape,
    "format_time": format_time,
    "pluralize": pluralize,
    "qs": qs,
    "timeago": timeago,
    "to_json": to_json,
    "truncate_text": truncate,
}
