"""
Equivalence rules used to decide whether a recorded error matches a marker.

Generic rule: walk the error chain (exception-group members, then
``__cause__``, else ``__context__`` unless suppressed) and compare each member
with the marker. Exception classes used as markers match by ``isinstance``;
otherwise a member matches when it is the marker or its own ``__eq__``
returns True for it.

Structural rule: a few error kinds carry their payload in a shape that makes
two instances never compare equal, so an instance used as a marker could never
match. For those kinds only, the recorded error matches when it is of the same
kind. The set of kinds is closed: see ``ErrorKind``.
"""
from enum import Enum
from typing import Iterator, Type, Union

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

Marker = Union[BaseException, Type[BaseException]]


class ErrorKind(str, Enum):
    generic = "generic"
    pydantic_validation = "pydantic_validation"
    request_validation = "request_validation"


# Order matters: first isinstance hit decides the kind.
_STRUCTURAL_KINDS = (
    (RequestValidationError, ErrorKind.request_validation),
    (ValidationError, ErrorKind.pydantic_validation),
)


def error_kind(error: Marker) -> ErrorKind:
    """Classify an error (or error class) into one of the known kinds."""
    for cls, kind in _STRUCTURAL_KINDS:
        if isinstance(error, type):
            if issubclass(error, cls):
                return kind
        elif isinstance(error, cls):
            return kind
    return ErrorKind.generic


def iter_error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield ``error`` and every error it wraps, depth first, each once."""
    seen = set()
    stack = [error]
    while stack:
        current = stack.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        wrapped = []
        if isinstance(current, BaseExceptionGroup):
            wrapped.extend(current.exceptions)
        if current.__cause__ is not None:
            wrapped.append(current.__cause__)
        elif not current.__suppress_context__:
            wrapped.append(current.__context__)
        stack.extend(reversed(wrapped))


def _equivalent(member: BaseException, marker: Marker) -> bool:
    if isinstance(marker, type):
        return isinstance(member, marker)
    if member is marker:
        return True
    # only the chain member decides, never the marker's reflected __eq__
    return type(member).__eq__(member, marker) is True


def structurally_equivalent(error: BaseException, marker: Marker) -> bool:
    # Class markers are handled by the generic rule.
    if isinstance(marker, type):
        return False
    kind = error_kind(marker)
    if kind is ErrorKind.generic:
        return False
    return type(error) is type(marker) and error_kind(error) is kind


def error_matches(error: BaseException, marker: Marker) -> bool:
    if any(_equivalent(member, marker) for member in iter_error_chain(error)):
        return True
    return structurally_equivalent(error, marker)
