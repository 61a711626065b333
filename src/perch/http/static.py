"""Byte-range-aware static file streaming.

Streams a file to the response in chunks. Supports a single
``Range: bytes=...`` request (206 / 416), ``HEAD`` requests,
``Last-Modified`` and ``Cache-Control``. Multi-range requests and
malformed ranges are answered with the full file.
"""

import mimetypes
import stat as stat_module
from email.utils import formatdate
from typing import TYPE_CHECKING

import anyio

from perch.errors import DeliveryError

if TYPE_CHECKING:
    from perch.context import RequestContext, ResponseContext

_TEXT_TYPES = frozenset({"application/javascript", "application/json", "image/svg+xml"})


def parse_range(header: str, size: int) -> tuple[int, int] | None:
    """Parse a single byte range against a file of *size* bytes.

    Returns inclusive ``(start, end)``, or ``None`` when the range is
    unsatisfiable. Raises ``ValueError`` for malformed or multi-range
    headers, which callers ignore.
    """
    unit, _, spec = header.partition("=")
    if unit.strip().lower() != "bytes" or "," in spec:
        msg = f"unsupported range: {header!r}"
        raise ValueError(msg)
    first, sep, last = spec.strip().partition("-")
    if not sep:
        msg = f"malformed range: {header!r}"
        raise ValueError(msg)

    if not first:
        suffix = int(last)
        if suffix <= 0 or size == 0:
            return None
        return max(size - suffix, 0), size - 1

    start = int(first)
    end = int(last) if last else size - 1
    if start < 0 or start > end:
        msg = f"malformed range: {header!r}"
        raise ValueError(msg)
    if start >= size:
        return None
    return start, min(end, size - 1)


def content_type_for(path: str) -> str:
    """Guess a Content-Type for *path*, adding a charset to text types."""
    content_type, _ = mimetypes.guess_type(path)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type in _TEXT_TYPES:
        return f"{content_type}; charset=utf-8"
    return content_type


class FileStreamer:
    """Stream files from disk to a ``ResponseContext``.

    Failures before any byte was sent raise ``DeliveryError`` so the
    error responder can still answer 500.
    """

    __slots__ = ("_cache_control", "_chunk_size")

    def __init__(
        self,
        *,
        chunk_size: int = 64 * 1024,
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._chunk_size = chunk_size
        self._cache_control = cache_control

    async def stream(
        self,
        request: "RequestContext",
        response: "ResponseContext",
        path: str,
    ) -> None:
        """Write the file at *path* as the complete response."""
        try:
            handle = await anyio.open_file(path, "rb")
        except OSError as exc:
            msg = f"cannot open {path}: {exc}"
            raise DeliveryError(msg) from exc

        async with handle:
            try:
                info = await anyio.Path(path).stat()
            except OSError as exc:
                msg = f"cannot stat {path}: {exc}"
                raise DeliveryError(msg) from exc
            if not stat_module.S_ISREG(info.st_mode):
                msg = f"not a regular file: {path}"
                raise DeliveryError(msg)

            size = info.st_size
            start, end, status = 0, size - 1, 200

            range_header = request.headers.get("range")
            if range_header:
                try:
                    byte_range = parse_range(range_header, size)
                except ValueError:
                    byte_range = (0, size - 1) if size else (0, -1)
                else:
                    if byte_range is None:
                        response.set_header("content-range", f"bytes */{size}")
                        response.set_header("content-length", "0")
                        await response.start(416)
                        await response.end()
                        return
                    status = 206
                start, end = byte_range

            length = max(end - start + 1, 0)
            response.set_header("content-type", content_type_for(path))
            response.set_header("content-length", str(length))
            response.set_header("accept-ranges", "bytes")
            response.set_header("last-modified", formatdate(info.st_mtime, usegmt=True))
            if self._cache_control:
                response.set_header("cache-control", self._cache_control)
            if status == 206:
                response.set_header("content-range", f"bytes {start}-{end}/{size}")

            await response.start(status)

            if request.method == "HEAD":
                await response.end()
                return

            try:
                await handle.seek(start)
                remaining = length
                while remaining > 0:
                    chunk = await handle.read(min(self._chunk_size, remaining))
                    if not chunk:
                        break
                    remaining -= len(chunk)
                    await response.write(chunk)
            except OSError as exc:
                msg = f"error reading {path}: {exc}"
                raise DeliveryError(msg) from exc

        await response.end()
