from typing import List, Optional, Type

from fastapi import FastAPI, Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from error_mapper.api.context import RequestContext, record_error
from error_mapper.core.config import settings
from error_mapper.core.exceptions import ConfigurationError
from error_mapper.core.logging import logger
from error_mapper.services.dispatcher import ErrorHandler


class ErrorHandlerMiddleware:
    """
    ASGI adapter around ErrorHandler.

    Usage::

        app.add_middleware(ErrorHandlerMiddleware, handler=handler)

    Once an error has been recorded, a response started by the downstream app
    is held back: it reaches the client only if no producer writes one.
    Responses started before any error was recorded count as written.
    """

    def __init__(
        self,
        app: ASGIApp,
        handler: ErrorHandler,
        record_raised: Optional[bool] = None,
    ) -> None:
        self.app = app
        self.handler = handler
        self.record_raised = (
            settings.RECORD_RAISED_EXCEPTIONS if record_raised is None else record_raised
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        context = RequestContext(scope)
        held: List[Message] = []

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                if context.errors:
                    held.append(message)
                    return
                context.mark_started()
            elif held:
                held.append(message)
                return
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if not self.record_raised or context.started:
                raise
            logger.info(
                "Recording raised %s: %s %s",
                type(exc).__name__,
                scope.get("method"),
                scope.get("path"),
            )
            # a partially held response cannot be completed
            held.clear()
            context.error(exc)

        self.handler.handle(context)

        if context.response is not None:
            await context.response(scope, receive, send)
            return
        # No producer wrote anything: the downstream response still goes out.
        for message in held:
            await send(message)


def register_error_recording(app: FastAPI, *exception_classes: Type[BaseException]) -> None:
    """
    Record exceptions of the given classes instead of rendering them.

    FastAPI renders RequestValidationError and HTTPException itself before they
    reach any middleware; these handlers hand them to the error context so the
    configured mappings decide the response.

    Handlers for ``Exception`` are installed outside every user middleware and
    would run after dispatch, so they are rejected; use ``record_raised`` on
    ErrorHandlerMiddleware for arbitrary raised exceptions instead.
    """
    for exc_class in exception_classes:
        if exc_class in (Exception, 500):
            raise ConfigurationError(
                "cannot record Exception through an exception handler; "
                "use ErrorHandlerMiddleware(record_raised=True)"
            )

    async def _record(request: Request, exc: Exception) -> Response:
        record_error(request, exc)
        # Held by ErrorHandlerMiddleware and only sent if no producer writes.
        return Response(status_code=500)

    for exc_class in exception_classes:
        app.add_exception_handler(exc_class, _record)
