"""Perch exception hierarchy.

Shared across the router, the template renderer, every pipeline stage,
and the top-level error responder so every module raises and catches
the same types. Not-found and path traversal are not errors; they end
in an ordinary 404 response.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when the app or a request context is misconfigured.

    At request time this means a required context field is missing,
    usually because an upstream stage was skipped or misordered.
    """


class RoutingError(PerchError):
    """The path router failed while resolving a route."""


class TemplateError(PerchError):
    """Base for template read, compile, and render failures."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class TemplateReadError(TemplateError):
    """The template source could not be read from disk."""


class TemplateCompileError(TemplateError):
    """The template source is not valid template syntax."""


class TemplateRenderError(TemplateError):
    """The compiled template raised while rendering."""


class ControllerError(PerchError):
    """A controller raised instead of completing."""


class DeliveryError(PerchError):
    """Streaming a static file to the client failed."""


class SerializationError(PerchError):
    """The response payload cannot be represented as JSON."""


class RequestBodyError(PerchError):
    """The request body could not be read or decoded."""
