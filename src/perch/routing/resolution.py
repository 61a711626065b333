"""Router result shape."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Resolution:
    """What a route resolved to. Any field may be ``None``.

    ``*_path`` values are relative to their search root, ``*_full_path``
    values are absolute.
    """

    controller_path: str | None = None
    controller_full_path: str | None = None
    template_path: str | None = None
    template_full_path: str | None = None
    static_path: str | None = None
    static_full_path: str | None = None

    @property
    def empty(self) -> bool:
        """True when nothing at all was resolved."""
        return not (self.controller_full_path or self.template_full_path or self.static_full_path)
