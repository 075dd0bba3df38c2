from typing import Any, Optional
from pydantic import BaseModel
from pydantic import ConfigDict


_SLUGS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
    429: "rate_limited",
}


def error_slug_for_status(status_code: int) -> str:
    """Map HTTP status codes to canonical error slugs."""
    if status_code >= 500:
        return "internal_error"
    return _SLUGS.get(status_code, "http_error")


class ErrorResponse(BaseModel):
    """
    Canonical error payload written by the stock producers.
    - error: machine-readable category derived from the status code
    - message: short human-readable summary
    - code: HTTP status code
    - detail: optional structured details, only when exposure is enabled
    - correlation_id: copied from the X-Request-ID header when present
    """

    error: str
    message: str
    code: int
    detail: Optional[Any] = None
    correlation_id: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def for_status(cls, status_code: int, message: str, **extra: Any) -> "ErrorResponse":
        return cls(
            error=error_slug_for_status(status_code),
            message=message,
            code=status_code,
            **extra,
        )
