"""Tests for perch.http.body — spooled request bodies and decoding."""

from typing import Any

import pytest

from perch.errors import RequestBodyError
from perch.http.body import RequestBody, decode_body


def _receiver(*chunks: bytes):
    messages: list[dict[str, Any]] = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive() -> dict[str, Any]:
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


class TestRequestBody:
    async def test_read_joins_chunks(self) -> None:
        body = RequestBody(_receiver(b"hello ", b"world"), spool_size=1024, max_size=1024)
        assert await body.read() == b"hello world"
        assert body.size == 11

    async def test_read_twice_returns_same_bytes(self) -> None:
        body = RequestBody(_receiver(b"once"), spool_size=1024, max_size=1024)
        assert await body.read() == b"once"
        assert await body.read() == b"once"

    async def test_large_body_rolls_over(self) -> None:
        body = RequestBody(_receiver(b"x" * 64, b"y" * 64), spool_size=16, max_size=1024)
        data = await body.read()
        assert len(data) == 128
        assert body.rolled_over is True
        body.close()

    async def test_max_size_enforced(self) -> None:
        body = RequestBody(_receiver(b"x" * 10, b"x" * 10), spool_size=1024, max_size=15)
        with pytest.raises(RequestBodyError, match="exceeds 15 bytes"):
            await body.read()

    async def test_read_after_close_raises(self) -> None:
        body = RequestBody(_receiver(b"late"), spool_size=1024, max_size=1024)
        body.close()
        assert body.closed is True
        with pytest.raises(RequestBodyError):
            await body.read()

    async def test_close_is_idempotent(self) -> None:
        body = RequestBody(_receiver(), spool_size=1024, max_size=1024)
        body.close()
        body.close()
        assert body.closed is True

    async def test_disconnect_ends_body(self) -> None:
        async def receive() -> dict[str, Any]:
            return {"type": "http.disconnect"}

        body = RequestBody(receive, spool_size=1024, max_size=1024)
        assert await body.read() == b""


class TestDecodeBody:
    def test_json(self) -> None:
        assert decode_body(b'{"a": 1}', "application/json") == (None, {"a": 1})

    def test_json_with_charset_and_suffix(self) -> None:
        assert decode_body(b"[1]", "application/vnd.api+json; charset=utf-8") == (None, [1])

    def test_form(self) -> None:
        form, data = decode_body(b"name=perch&tag=a&tag=b", "application/x-www-form-urlencoded")
        assert form == {"name": ["perch"], "tag": ["a", "b"]}
        assert data is None

    def test_other_content_type(self) -> None:
        assert decode_body(b"raw", "text/plain") == (None, None)

    def test_empty_body(self) -> None:
        assert decode_body(b"", "application/json") == (None, None)

    def test_invalid_json(self) -> None:
        with pytest.raises(RequestBodyError, match="invalid JSON"):
            decode_body(b"{nope", "application/json")

    def test_invalid_form_encoding(self) -> None:
        with pytest.raises(RequestBodyError):
            decode_body(b"name=\xff", "application/x-www-form-urlencoded")
