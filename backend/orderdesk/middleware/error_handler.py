"""
Error handling.

``order_desk_error_handler`` turns domain errors into JSON bodies with
the status their ErrorKind maps to. ``ErrorHandlerMiddleware`` is the
last line: anything else that escapes a route becomes a logged JSON 500.
"""
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from orderdesk.core.errors import OrderDeskError
from orderdesk.core.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR = {
    "success": False,
    "error": "internal",
    "message": "Internal server error",
}


async def order_desk_error_handler(request: Request, exc: OrderDeskError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        kind=exc.kind.value,
        error=exc.message,
        path=request.url.path,
        service=getattr(exc, "service", None),
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


class ErrorHandlerMiddleware:
    """
    Pure ASGI middleware converting unhandled exceptions into JSON 500s.

    HTTPException passes through to FastAPI's own handler. Once the
    response has started nothing can be rewritten, so the error is only
    logged and re-raised.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def track_start(message: Message) -> None:
            nonlocal started
            started = started or message["type"] == "http.response.start"
            await send(message)

        try:
            await self.app(scope, receive, track_start)
        except HTTPException:
            raise
        except Exception as exc:
            path = scope.get("path", "unknown")
            if started:
                logger.exception("Unhandled exception mid-response", error=str(exc), path=path)
                raise
            logger.exception("Unhandled exception", error=str(exc), path=path)

            request_id = scope.get("state", {}).get("request_id")
            content = {**INTERNAL_ERROR, "requestId": request_id} if request_id else INTERNAL_ERROR
            response = JSONResponse(status_code=500, content=content)
            await response(scope, receive, send)
