"""Read-only multi-value views over request headers and query strings.

Both decode their input once, at construction, into name -> values.
Lookups return the first value; ``get_list`` returns all of them in
arrival order.
"""

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import parse_qs


class _MultiValueView(Mapping[str, str]):
    __slots__ = ("_values",)

    def __init__(self, values: dict[str, list[str]]) -> None:
        self._values = values

    def _key(self, key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        return self._values[self._key(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._values.get(self._key(key))
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Return every value for *key*, in arrival order."""
        return list(self._values.get(self._key(key), ()))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return the first value as an int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default


class Headers(_MultiValueView):
    """Case-insensitive request headers, built from ASGI byte pairs.

    Names are stored lowercased; values are decoded as latin-1.
    """

    __slots__ = ()

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        values: dict[str, list[str]] = {}
        for name, value in raw:
            values.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        super().__init__(values)

    def _key(self, key: str) -> str:
        return key.lower()


class QueryParams(_MultiValueView):
    """Parsed query string. Blank values are kept (``?flag=`` -> ``""``)."""

    __slots__ = ("raw",)

    def __init__(self, query_string: str = "") -> None:
        super().__init__(parse_qs(query_string, keep_blank_values=True))
        self.raw = query_string
