from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Sequence, Tuple

from error_mapper.core.exceptions import ConfigurationError
from error_mapper.services.matching import Marker, error_matches

ResponseProducer = Callable[[Any, BaseException], None]
DefaultProducer = Callable[[Any], None]


@dataclass(frozen=True)
class ErrorMapping:
    from_errors: Tuple[Marker, ...]
    response: ResponseProducer

    def with_response(self, response: ResponseProducer) -> "ErrorMapping":
        return replace(self, response=response)

    def matches(self, error: BaseException) -> bool:
        return any(error_matches(error, marker) for marker in self.from_errors)


@dataclass(frozen=True)
class ErrorMappingBuilder:
    """Markers waiting for a producer; ``to_response`` finalizes them."""

    from_errors: Tuple[Marker, ...] = ()

    def to_response(self, response: ResponseProducer) -> ErrorMapping:
        return ErrorMapping(from_errors=self.from_errors, response=response)


def map_errors(*markers: Marker) -> ErrorMappingBuilder:
    """
    Start a mapping for the given marker errors.

    Markers may be exception instances (matched through the error chain) or
    exception classes (matched with isinstance). A builder without markers is
    accepted; the resulting mapping simply never matches.
    """
    return ErrorMappingBuilder(from_errors=tuple(markers))


@dataclass
class Options:
    error_mappings: List[ErrorMapping] = field(default_factory=list)
    default_response: Optional[DefaultProducer] = None

    def set_error_mappings(self, mappings: Sequence[ErrorMapping]) -> "Options":
        self.error_mappings = list(mappings)
        return self

    def set_default_response(self, response: DefaultProducer) -> "Options":
        self.default_response = response
        return self

    def validate(self) -> None:
        if self.default_response is None:
            raise ConfigurationError("default_response is required")
