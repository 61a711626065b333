"""Kida-backed template compiler.

``compile_template(source, resolve_include=..., origin=...)`` turns
template source into a render function ``(input) -> str``. Each compile
gets its own kida Environment whose loader is a closure over
*resolve_include*, so include lookup is explicit per template and safe
under concurrent compiles with different base directories. No global
engine state is touched.

Template references are resolved against the file that contains them:
before kida sees any source, literal names in ``include``, ``extends``,
``import`` and ``from`` tags are replaced by the absolute path they
resolve to. A partial can therefore include its own neighbours by
relative name, and two partials called ``item`` in different
directories never share a kida cache entry. Names built at render time
are looked up from the template roots.

Compiling and rendering may touch the disk (include lookup and reads),
so callers on an event loop run them in a worker thread.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from kida import Environment

from perch.templating.utils import TEMPLATE_FILTERS

# Render function produced by the compiler
type RenderFn = Callable[[Mapping[str, Any]], str]

# Include resolver: (name, relative_to=including file) -> absolute path, or None
type IncludeResolver = Callable[..., str | None]

# A template reference with a literal name: prefix, quote, name
_REFERENCE = re.compile(r"""(\{%-?\s*(?:include|extends|import|from)\s+)(["'])([^"'\n]+)\2""")


class IncludeNotFound(LookupError):  # noqa: N818
    """An included template could not be resolved."""


@dataclass(frozen=True, slots=True)
class CompileOptions:
    """Engine settings applied to every compile."""

    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    filters: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
    globals: Mapping[str, Any] = field(default_factory=dict)


class IncludeLoader:
    """Kida loader that resolves every reference against its including file."""

    __slots__ = ("_linked", "_resolve")

    def __init__(self, resolve: IncludeResolver) -> None:
        self._resolve = resolve
        # Absolute paths this loader wrote into a source
        self._linked: set[str] = set()

    def link(self, source: str, origin: str | None = None) -> str:
        """Replace literal template names in *source* with absolute paths.

        Names are resolved relative to *origin*, the file *source* was
        read from. Names that do not resolve are left alone and fail
        when kida asks for them.
        """

        def replace(match: re.Match[str]) -> str:
            prefix, quote, name = match.groups()
            path = self._resolve(name, relative_to=origin)
            if path is None:
                return match.group(0)
            path = Path(path).as_posix()
            if quote in path:
                return match.group(0)
            self._linked.add(path)
            return f"{prefix}{quote}{path}{quote}"

        return _REFERENCE.sub(replace, source)

    def get_source(self, name: str) -> tuple[str, str | None]:
        path = name if name in self._linked else self._resolve(name, relative_to=None)
        if path is None:
            msg = f"Can not find template matching {name!r}"
            raise IncludeNotFound(msg)
        source = Path(path).read_text(encoding="utf-8")
        return self.link(source, path), path

    def list_templates(self) -> list[str]:
        return sorted(self._linked)


def _no_includes(name: str, *, relative_to: str | None = None) -> str | None:
    return None


def compile_template(
    source: str,
    *,
    resolve_include: IncludeResolver = _no_includes,
    options: CompileOptions | None = None,
    origin: str | None = None,
) -> RenderFn:
    """Compile *source* into a reusable render function.

    *origin* is the absolute path *source* was read from; relative
    template references in it are resolved against that file.

    Raises whatever kida raises for invalid syntax. The returned
    function may raise at render time (undefined names, unresolvable
    includes, runaway recursion).
    """
    opts = options or CompileOptions()
    loader = IncludeLoader(resolve_include)
    env = Environment(
        loader=loader,
        autoescape=opts.autoescape,
        trim_blocks=opts.trim_blocks,
        lstrip_blocks=opts.lstrip_blocks,
    )
    env.update_filters(TEMPLATE_FILTERS)
    if opts.filters:
        env.update_filters(dict(opts.filters))
    for name, value in opts.globals.items():
        env.add_global(name, value)

    template = env.from_string(loader.link(source, origin))

    def render(render_input: Mapping[str, Any]) -> str:
        return template.render(dict(render_input))

    return render
