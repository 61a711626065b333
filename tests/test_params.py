"""Tests for perch.http.params — Headers and QueryParams."""

import pytest

from perch.http.params import Headers, QueryParams


def _h(*pairs: tuple[str, str]) -> Headers:
    return Headers(tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs))


class TestHeaders:
    def test_case_insensitive(self) -> None:
        h = _h(("Content-Type", "text/html"))
        assert h["content-type"] == "text/html"
        assert h["CONTENT-TYPE"] == "text/html"
        assert "Content-Type" in h

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            _h(("Accept", "*/*"))["X-Missing"]

    def test_contains_rejects_non_str(self) -> None:
        assert 42 not in _h(("Accept", "*/*"))  # type: ignore[operator]

    def test_iter_yields_unique_lowercase_keys(self) -> None:
        h = _h(("Accept", "*/*"), ("Content-Type", "text/html"), ("Accept", "text/xml"))
        assert list(h) == ["accept", "content-type"]
        assert len(h) == 2

    def test_first_value_wins(self) -> None:
        h = _h(("Accept", "*/*"), ("accept", "text/xml"))
        assert h["accept"] == "*/*"
        assert h.get_list("ACCEPT") == ["*/*", "text/xml"]

    def test_get_with_default(self) -> None:
        h = _h(("Accept", "*/*"))
        assert h.get("x-missing") is None
        assert h.get("x-missing", "fallback") == "fallback"


class TestQueryParams:
    def test_getitem(self) -> None:
        q = QueryParams("q=hello&page=2")
        assert q["q"] == "hello"
        assert q["page"] == "2"

    def test_blank_values_kept(self) -> None:
        q = QueryParams("flag=&q=x")
        assert q["flag"] == ""

    def test_get_list(self) -> None:
        q = QueryParams("tag=python&tag=rust")
        assert q.get_list("tag") == ["python", "rust"]
        assert q.get_list("missing") == []

    def test_get_int(self) -> None:
        q = QueryParams("page=3&size=abc")
        assert q.get_int("page") == 3
        assert q.get_int("size") is None
        assert q.get_int("missing", 10) == 10

    def test_keys_are_case_sensitive(self) -> None:
        q = QueryParams("Page=1")
        assert "page" not in q

    def test_empty(self) -> None:
        q = QueryParams()
        assert len(q) == 0
        assert q.raw == ""
