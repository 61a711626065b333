"""Cleanup stage: release temporary request resources.

Runs whether or not the request is finished. It does not run when an
earlier stage aborted the chain; the error responder releases the
resources in that case.
"""

from perch.context import RequestContext, ResponseContext


async def cleanup(request: RequestContext, response: ResponseContext) -> None:
    """Close the spooled request body."""
    request.release()
