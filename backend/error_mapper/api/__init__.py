from .context import RequestContext, get_error_context, record_error
from .middleware import ErrorHandlerMiddleware, register_error_recording
