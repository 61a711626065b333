"""Pipeline stages — Protocol-based, no inheritance required.

A stage is any callable matching:
    async def stage(request: RequestContext, response: ResponseContext) -> None

Built-in stages, in default order:
    parse_url -- Parse the request target into ``request.parsed_url``
    validate_path -- Answer 404 for paths containing ``..``
    route -- Resolve controller, template and static file
    parse -- Parse query string and body (skipped for static files)
    send_static -- Stream a resolved static file
    run_controller -- Run the controller, or fall back to 404
    render -- Render the routed template
    send_to_client -- Serialize the result and write the response
    cleanup -- Release temporary request resources
"""

from perch.middleware.cleanup import cleanup
from perch.middleware.controller import RunController
from perch.middleware.fallback import NOT_FOUND_BODY, not_found
from perch.middleware.parse import ParseRequest
from perch.middleware.protocol import Middleware, skip_if_finished, stage_name
from perch.middleware.render import Render
from perch.middleware.route import Route
from perch.middleware.send import SendToClient, serialize_payload
from perch.middleware.static import SendStatic
from perch.middleware.url import ValidatePath, parse_url

__all__ = [
    "NOT_FOUND_BODY",
    "Middleware",
    "ParseRequest",
    "Render",
    "Route",
    "RunController",
    "SendStatic",
    "SendToClient",
    "ValidatePath",
    "cleanup",
    "not_found",
    "parse_url",
    "serialize_payload",
    "skip_if_finished",
    "stage_name",
]
