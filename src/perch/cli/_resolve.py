"""Locate the App named by a ``module[:attribute]`` import string."""

import importlib
import os
import sys

from perch.app import App


def resolve_app(import_string: str) -> App:
    """Import *import_string* and return the perch App it names.

    ``"site"`` means ``site:app``. The current directory is put on
    ``sys.path`` first so a project module next to the caller imports
    without installation. An attribute that is callable but not an App
    is treated as a factory and called with no arguments.

    Raises:
        ModuleNotFoundError: the module cannot be imported.
        AttributeError: the module has no such attribute.
        TypeError: the target is not an App and no factory produced one.
    """
    module_name, _, attr = import_string.partition(":")
    attr = attr or "app"

    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    target = getattr(importlib.import_module(module_name), attr)
    if isinstance(target, App):
        return target

    if callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"app factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc
        if isinstance(target, App):
            return target

    msg = f"{import_string!r} is a {type(target).__name__}, expected a perch.App"
    raise TypeError(msg)
