"""Application configuration.

One frozen dataclass holds every setting: server, layout, templates,
static delivery and request limits. Build it once and hand it to ``App``.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(base_dir="./site", port=3000, debug=True)

    Layout: every search root (``base_dir`` followed by ``search_dirs``)
    may hold a ``template_dir`` and a ``static_dir``. Roots are searched
    in order; the first match wins.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 0  # 0 = auto-detect from CPU count

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = ()  # Extra extensions to watch (e.g. ".html", ".css")
    reload_dirs: tuple[str, ...] = ()  # Extra directories to watch alongside cwd

    # Logging (forwarded to the server)
    log_level: str = "info"
    log_format: str = "text"

    # Connection handling (forwarded to the server)
    keep_alive_timeout: float = 5.0
    request_timeout: float = 30.0

    # Layout
    base_dir: str | Path = "."
    template_dir: str = "templates"
    static_dir: str = "public"
    template_exts: tuple[str, ...] = ("html",)
    search_dirs: tuple[str | Path, ...] = ()  # Extra roots, e.g. shared template packages

    # Reserved routes
    default_route: str = "/default"
    not_found_route: str = "/404"

    # Templates
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Static files
    static_chunk_size: int = 64 * 1024
    static_cache_control: str = "public, max-age=3600"

    # Requests
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
    body_spool_size: int = 1024 * 1024  # Larger bodies go to a temp file
    request_id_header: str = "x-request-id"
