"""Compiled template cache.

Process-wide, memory-only, append-only: at most one entry per absolute
template path, never invalidated. Concurrent first-access races are
allowed; two requests compiling the same path both write an equivalent
render function and the last write wins. No lock is taken.

The cache is an injectable abstraction (``get``/``put``) so a TTL or
file-watching implementation can replace ``MemoryTemplateCache``
without touching the renderer.
"""

from collections.abc import Iterator
from typing import Protocol

from perch.templating.compiler import RenderFn


class TemplateCache(Protocol):
    """Protocol for compiled-template caches."""

    def get(self, path: str) -> RenderFn | None: ...

    def put(self, path: str, render: RenderFn) -> None: ...


class MemoryTemplateCache:
    """Dict-backed cache living for the lifetime of the process."""

    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: dict[str, RenderFn] = {}

    def get(self, path: str) -> RenderFn | None:
        return self._entries.get(path)

    def put(self, path: str, render: RenderFn) -> None:
        self._entries[path] = render

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
