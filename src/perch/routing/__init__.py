"""Routing — filesystem path router and controller registry."""

from perch.routing.controllers import Controller, ControllerRegistry
from perch.routing.resolution import Resolution
from perch.routing.router import FileRouter, PathRouter

__all__ = [
    "Controller",
    "ControllerRegistry",
    "FileRouter",
    "PathRouter",
    "Resolution",
]
