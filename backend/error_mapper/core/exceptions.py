class ErrorMapperError(Exception):
    """Base class for errors raised by the mapping layer itself."""


class ConfigurationError(ErrorMapperError):
    """Options cannot be turned into an ErrorHandler."""


class MiddlewareNotInstalledError(ErrorMapperError, RuntimeError):
    """An error was recorded on a request that has no error context."""
