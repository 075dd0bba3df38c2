from .errors import ErrorResponse, error_slug_for_status
