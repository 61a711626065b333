"""Template compilation, caching, and rendering."""

from perch.templating.cache import MemoryTemplateCache, TemplateCache
from perch.templating.compiler import CompileOptions, RenderFn, compile_template
from perch.templating.renderer import TemplateRenderer
from perch.templating.utils import TEMPLATE_FILTERS, TemplateUtils

__all__ = [
    "TEMPLATE_FILTERS",
    "CompileOptions",
    "MemoryTemplateCache",
    "RenderFn",
    "TemplateCache",
    "TemplateRenderer",
    "TemplateUtils",
    "compile_template",
]
