from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from error_mapper.core.config import settings
from error_mapper.core.logging import logger
from error_mapper.schemas.errors import ErrorResponse
from error_mapper.services.mappings import DefaultProducer, ResponseProducer


_STATUS_MESSAGES: Dict[int, str] = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    409: "Conflict",
    422: "Validation failed",
    429: "Too many requests",
}
_DEFAULT_4XX_MESSAGE = "HTTP error"
_DEFAULT_5XX_MESSAGE = "Internal server error"
_CORRELATION_HEADER = "x-request-id"


def _status_message(code: int) -> str:
    if code >= 500:
        return _DEFAULT_5XX_MESSAGE
    return _STATUS_MESSAGES.get(code, _DEFAULT_4XX_MESSAGE)


def _sanitize_validation_detail(detail: Any) -> Any:
    """
    Ensure validation detail is JSON-serializable.
    Pydantic may include an Exception instance in ctx.error; convert to str.
    """
    if isinstance(detail, (list, tuple)):
        sanitized = []
        for item in detail:
            if isinstance(item, dict):
                ctx = item.get("ctx")
                if isinstance(ctx, dict) and isinstance(ctx.get("error"), BaseException):
                    new_item = dict(item)
                    new_item["ctx"] = {**ctx, "error": str(ctx["error"])}
                    sanitized.append(new_item)
                    continue
            sanitized.append(item)
        return sanitized
    return detail


def error_detail(exc: BaseException) -> Any:
    """Structured detail for an error: validation issues, HTTP detail or str(exc)."""
    if isinstance(exc, ValidationError):
        return jsonable_encoder(_sanitize_validation_detail(exc.errors(include_input=False)))
    if isinstance(exc, RequestValidationError):
        return jsonable_encoder(_sanitize_validation_detail(exc.errors()))
    if isinstance(exc, StarletteHTTPException):
        return jsonable_encoder(exc.detail)
    return str(exc) or None


def _log(context, status_code: int, label: str, exc: Optional[BaseException] = None) -> None:
    scope = context.request.scope
    if 400 <= status_code < 500:
        logger.warning(
            "%s: %s %s status=%s error=%s",
            label,
            scope.get("method"),
            scope.get("path"),
            status_code,
            type(exc).__name__ if exc is not None else None,
        )
    else:
        logger.error(
            "%s: %s %s status=%s error=%s",
            label,
            scope.get("method"),
            scope.get("path"),
            status_code,
            type(exc).__name__ if exc is not None else None,
            exc_info=exc,
        )


def _write_error_response(
    context,
    *,
    status_code: int,
    message: Optional[str] = None,
    detail: Optional[Any] = None,
) -> None:
    payload = ErrorResponse.for_status(
        status_code,
        message or _status_message(status_code),
        detail=detail,
        correlation_id=context.request.headers.get(_CORRELATION_HEADER),
    ).model_dump(exclude_none=True)
    context.json(status_code, payload)


def error_response(
    status_code: int,
    message: Optional[str] = None,
    expose_detail: Optional[bool] = None,
) -> ResponseProducer:
    """Producer for a mapping: writes the canonical payload with ``status_code``."""
    expose = settings.EXPOSE_ERROR_DETAIL if expose_detail is None else expose_detail
    # do not leak server internals
    expose = expose and status_code < 500

    def produce(context, exc: BaseException) -> None:
        _log(context, status_code, "Mapped error", exc)
        _write_error_response(
            context,
            status_code=status_code,
            message=message,
            detail=error_detail(exc) if expose else None,
        )

    produce.__name__ = f"error_response_{status_code}"
    return produce


def default_error_response(
    status_code: Optional[int] = None,
    message: Optional[str] = None,
) -> DefaultProducer:
    """Fallback producer; never exposes details."""
    code = status_code or settings.DEFAULT_ERROR_STATUS

    def produce(context) -> None:
        exc = getattr(context, "last_error", None)
        _log(context, code, "Unmapped error", exc)
        _write_error_response(context, status_code=code, message=message)

    produce.__name__ = f"default_error_response_{code}"
    return produce

