"""ASGI handler — runs the stage chain for one request.

The only component that touches raw ASGI directly. Builds the context
pair from the scope, runs every stage in order, and routes any error
to the single error responder.
"""

import logging
from collections.abc import Sequence
from contextvars import Token
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.config import AppConfig
from perch.context import RequestContext, ResponseContext, build_request_context, request_var
from perch.server.errors import respond_internal_error

logger = logging.getLogger("perch.server")


async def run_chain(
    stages: Sequence[Any],
    request: RequestContext,
    response: ResponseContext,
) -> None:
    """Run *stages* strictly in order.

    Each stage completes before the next starts. An exception stops the
    chain and propagates. Skipping finished requests is each stage's
    job, not the executor's.
    """
    for stage in stages:
        await invoke(stage, request, response)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    middleware: Sequence[Any],
    config: AppConfig,
) -> None:
    """Process a single HTTP request through the full chain."""
    if scope["type"] != "http":
        logger.debug("Ignoring %s scope", scope["type"])
        return

    request = build_request_context(
        scope,
        receive,
        request_id_header=config.request_id_header,
        spool_size=config.body_spool_size,
        max_body_size=config.max_content_length,
    )
    response = ResponseContext(send)

    token: Token[RequestContext] = request_var.set(request)
    try:
        await run_chain(middleware, request, response)
    except Exception as exc:
        await respond_internal_error(exc, request, response)
    finally:
        request_var.reset(token)

    if not response.closed:
        # A chain that never wrote (e.g. a custom stage list without a
        # serializer) still has to complete the ASGI response.
        request.log.warning("Chain completed without finishing the response")
        await response.end()
