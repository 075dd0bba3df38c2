from .api.context import RequestContext, get_error_context, record_error
from .api.middleware import ErrorHandlerMiddleware, register_error_recording
from .core.errors import default_error_response, error_response
from .core.exceptions import ConfigurationError, ErrorMapperError, MiddlewareNotInstalledError
from .services.dispatcher import ErrorContext, ErrorHandler, PipelineContext
from .services.mappings import ErrorMapping, ErrorMappingBuilder, Options, map_errors
from .services.matching import ErrorKind, error_matches

__version__ = "0.1.0"
