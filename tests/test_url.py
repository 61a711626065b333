"""Tests for perch.http.url — request-target parsing."""

import pytest

from perch.http.url import ParsedUrl, parse_url


class TestParseUrl:
    def test_path_only(self) -> None:
        assert parse_url("/about") == ParsedUrl(path="/about", query="")

    def test_query(self) -> None:
        assert parse_url("/search?q=perch&page=2") == ParsedUrl("/search", "q=perch&page=2")

    def test_fragment_dropped(self) -> None:
        assert parse_url("/docs?x=1#intro") == ParsedUrl("/docs", "x=1")

    def test_percent_decoding(self) -> None:
        assert parse_url("/caf%C3%A9").path == "/café"

    def test_double_slash_is_a_path(self) -> None:
        assert parse_url("//cdn.example.com/x") == ParsedUrl("//cdn.example.com/x", "")

    def test_encoded_traversal_is_decoded(self) -> None:
        assert parse_url("/%2e%2e/secret").path == "/../secret"

    @pytest.mark.parametrize(
        "target",
        [
            "",
            "about",
            "*",
            "http://example.com/",
            "/bad%ff",
            "/nul%00byte",
        ],
    )
    def test_malformed_returns_none(self, target: str) -> None:
        assert parse_url(target) is None
