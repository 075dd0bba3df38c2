from typing import Any, List, Optional

from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Scope

from error_mapper.core.exceptions import MiddlewareNotInstalledError
from error_mapper.core.logging import logger

STATE_KEY = "error_context"


class RequestContext:
    """
    Per-request error state shared between endpoints and the middleware.

    Endpoints record errors with ``error``; producers write at most one
    response with ``json`` or ``send_response``. The response is kept here and
    sent by the middleware once the handler has run.
    """

    def __init__(self, scope: Scope):
        self.scope = scope
        self.errors: List[BaseException] = []
        self.response: Optional[Response] = None
        self._started = False
        scope.setdefault("state", {})[STATE_KEY] = self

    @property
    def request(self) -> Request:
        return Request(self.scope)

    @property
    def last_error(self) -> Optional[BaseException]:
        return self.errors[-1] if self.errors else None

    @property
    def written(self) -> bool:
        return self._started or self.response is not None

    @property
    def started(self) -> bool:
        """True once a response start message reached the client."""
        return self._started

    def mark_started(self) -> None:
        self._started = True

    def error(self, exc: BaseException) -> BaseException:
        self.errors.append(exc)
        return exc

    def send_response(self, response: Response) -> None:
        if self.written:
            logger.warning(
                "Response already written: %s %s; dropping status=%s",
                self.scope.get("method"),
                self.scope.get("path"),
                response.status_code,
            )
            return
        self.response = response

    def json(self, status_code: int, content: Any) -> None:
        self.send_response(JSONResponse(status_code=status_code, content=content))


def get_error_context(request: Request) -> RequestContext:
    context = request.scope.get("state", {}).get(STATE_KEY)
    if context is None:
        raise MiddlewareNotInstalledError(
            "ErrorHandlerMiddleware is not installed for this application"
        )
    return context


def record_error(request: Request, exc: BaseException) -> BaseException:
    """Record ``exc`` as the latest error of this request and return it."""
    return get_error_context(request).error(exc)
