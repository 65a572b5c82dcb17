from typing import Tuple

from fastapi import APIRouter, Depends, Request, Response
from fastapi.routing import APIRoute
from starlette.routing import Match
from starlette.types import Receive, Scope, Send

from ..services.echo_recorder import EchoRecorder, create_echo_recorder


class AnyMethodRoute(APIRoute):
    """Route that matches on path alone, whatever the request method.

    Extension verbs (``PROPFIND``) and non-canonical casing (``get``) reach
    the endpoint unchanged instead of being answered with 405.
    """

    def matches(self, scope: Scope) -> Tuple[Match, Scope]:
        match, child_scope = super().matches(scope)
        if match == Match.PARTIAL:
            match = Match.FULL
        return match, child_scope

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)


router = APIRouter(tags=["echo"], route_class=AnyMethodRoute)

# Declared for reference only; AnyMethodRoute does not filter on them.
ECHO_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]


def get_echo_recorder() -> EchoRecorder:
    """Dependency to get echo recorder instance."""

    return create_echo_recorder()


@router.api_route("/{full_path:path}", methods=ECHO_METHODS, include_in_schema=False)
async def echo(
    request: Request,
    recorder: EchoRecorder = Depends(get_echo_recorder),
) -> Response:
    record = await recorder.record(request)
    return Response(
        content=recorder.render(record),
        status_code=200,
        media_type="application/json",
    )
