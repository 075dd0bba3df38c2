from typing import Callable, Optional, Protocol, Tuple

from error_mapper.core.logging import logger
from error_mapper.services.mappings import DefaultProducer, ErrorMapping, Options


class ErrorContext(Protocol):
    """What the handler reads from a request once downstream has finished."""

    @property
    def last_error(self) -> Optional[BaseException]: ...

    @property
    def written(self) -> bool: ...


class PipelineContext(ErrorContext, Protocol):
    def next(self) -> None: ...


class ErrorHandler:
    """
    Picks the response producer for the error a request left behind.

    Built once from validated Options and shared by every request; all
    per-request state lives in the context passed to ``handle``.
    """

    def __init__(self, options: Options):
        options.validate()
        self._mappings: Tuple[ErrorMapping, ...] = tuple(options.error_mappings)
        self._default_response: DefaultProducer = options.default_response

    @property
    def mappings(self) -> Tuple[ErrorMapping, ...]:
        return self._mappings

    @property
    def default_response(self) -> DefaultProducer:
        return self._default_response

    def find_mapping(self, error: BaseException) -> Optional[ErrorMapping]:
        for mapping in self._mappings:
            if mapping.matches(error):
                return mapping
        return None

    def handle(self, context: ErrorContext) -> None:
        error = context.last_error
        if error is None:
            return

        mapping = self.find_mapping(error)
        if mapping is not None:
            logger.debug(
                "Mapped %s to producer %s",
                type(error).__name__,
                getattr(mapping.response, "__name__", repr(mapping.response)),
            )
            mapping.response(context, error)
            return

        if context.written:
            logger.debug("No mapping for %s; response already written", type(error).__name__)
            return
        logger.debug("No mapping for %s; using default response", type(error).__name__)
        self._default_response(context)

    def get_middleware(self) -> Callable[[PipelineContext], None]:
        def middleware(context: PipelineContext) -> None:
            context.next()
            self.handle(context)

        return middleware
