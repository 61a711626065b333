"""Stage protocol.

A stage (middleware) is any callable matching::

    async def my_stage(request: RequestContext, response: ResponseContext) -> None: ...

Sync callables work too. No base class required. The framework checks
the shape, not the lineage.

Contract, for every stage, built-in or custom:

- If ``request.finished`` is set, return immediately without side
  effects. The executor does not skip stages for you; the
  ``skip_if_finished`` decorator adds the check to a function stage.
- To continue, return. Mutating the contexts is allowed.
- To abort the request, raise. No later stage runs, cleanup included.
- To answer the request, write the response and set
  ``request.finished = True``.
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from perch._internal.invoke import invoke
from perch.context import RequestContext, ResponseContext


class Middleware(Protocol):
    """Protocol for perch stages.

    Accepts both functions and callable objects::

        # Function stage
        @skip_if_finished
        async def powered_by(request, response):
            response.set_header("X-Powered-By", "perch")

        # Class stage
        class Maintenance:
            name = "maintenance"

            async def __call__(self, request, response):
                if request.finished:
                    return
                ...
    """

    def __call__(
        self, request: RequestContext, response: ResponseContext
    ) -> Awaitable[None] | None: ...


def stage_name(stage: Any) -> str:
    """Name used to address a stage in the chain.

    An explicit ``name`` attribute wins, then the function name, then
    the class name.
    """
    name = getattr(stage, "name", None)
    if isinstance(name, str) and name:
        return name
    name = getattr(stage, "__name__", None)
    if isinstance(name, str) and name:
        return name
    return type(stage).__name__


def skip_if_finished(func: Callable[..., Any]) -> Callable[..., Awaitable[None]]:
    """Wrap a function stage so it is a no-op once the request is finished."""

    @functools.wraps(func)
    async def wrapper(request: RequestContext, response: ResponseContext) -> None:
        if request.finished:
            return
        await invoke(func, request, response)

    return wrapper
