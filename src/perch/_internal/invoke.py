"""Uniform calls into user code that may be sync or async."""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any) -> Any:
    """Call *func* with *args*, awaiting the result when it is awaitable.

    Stages and controllers may be plain functions, coroutine functions,
    or objects whose ``__call__`` is either.
    """
    result = func(*args)
    if inspect.isawaitable(result):
        return await result
    return result
