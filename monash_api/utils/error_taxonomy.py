"""Classification of request failures into wire-level errors.

Every failure that reaches the terminal exception handler is reduced to a
``Classification``: the HTTP status, a message that is safe to show to API
consumers, and an error code that stays stable across releases.

Persistence failures are looked up by signal key in an immutable table.
Anything the table does not know about becomes a generic 500 whose message
never carries the backend's own text.
"""

import re
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from fastapi.exceptions import RequestValidationError
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException

from monash_api.core.exceptions import (
    MonashAPIError,
    PersistenceError,
    ValidationFailure,
)


class Signal(str, Enum):
    """Failure signal keys raised by the persistence layer."""

    UNIQUE_VIOLATION = "unique_violation"
    FOREIGN_KEY_ON_INSERT = "foreign_key_violation_on_insert"
    FOREIGN_KEY_ON_DELETE = "foreign_key_violation_on_delete"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Classification:
    status: int
    message: str
    error_code: str
    errors: Tuple[Dict[str, Any], ...] = ()


Classifier = Callable[[PersistenceError], Classification]

INTERNAL_SERVER_ERROR = Classification(
    500, "Internal Server Error", "INTERNAL_SERVER_ERROR_500"
)
RESOURCE_NOT_FOUND = Classification(404, "Resource not found", "RESOURCE_NOT_FOUND_404")

_DUPLICATE_VALUE_PATTERNS = (
    re.compile(r"Duplicate entry '(.+?)'"),  # MySQL
    re.compile(r"Key \([^)]*\)=\((.+?)\) already exists"),  # PostgreSQL
)


def extract_duplicate_value(detail: str) -> Optional[str]:
    """Pull the offending value out of a backend uniqueness message."""
    for pattern in _DUPLICATE_VALUE_PATTERNS:
        match = pattern.search(detail)
        if match:
            return match.group(1)
    return None


def _duplicate_record(failure: PersistenceError) -> Classification:
    value = extract_duplicate_value(failure.detail) or "Record"
    return Classification(409, f"'{value}' already exists", "DUPLICATE_RECORD_409")


def _invalid_reference(failure: PersistenceError) -> Classification:
    return Classification(
        400, "Referenced record does not exist", "INVALID_REFERENCE_400"
    )


def _record_in_use(failure: PersistenceError) -> Classification:
    return Classification(
        409,
        "Cannot delete this record because it is being used by other data",
        "RECORD_IN_USE_409",
    )


def _record_not_found(failure: PersistenceError) -> Classification:
    return Classification(404, "Record not found", "RECORD_NOT_FOUND_404")


DEFAULT_ENTRIES: Mapping[Signal, Classifier] = {
    Signal.UNIQUE_VIOLATION: _duplicate_record,
    Signal.FOREIGN_KEY_ON_INSERT: _invalid_reference,
    Signal.FOREIGN_KEY_ON_DELETE: _record_in_use,
    Signal.NOT_FOUND: _record_not_found,
}


def _signal_key(signal: Union[str, Signal]) -> str:
    return signal.value if isinstance(signal, Signal) else str(signal)


def _http_error(exc: StarletteHTTPException) -> Classification:
    if exc.status_code == 404:
        return RESOURCE_NOT_FOUND
    try:
        phrase = HTTPStatus(exc.status_code).phrase
    except ValueError:
        return INTERNAL_SERVER_ERROR
    code = re.sub(r"[^A-Z0-9]+", "_", phrase.upper()).strip("_")
    return Classification(exc.status_code, phrase, f"{code}_{exc.status_code}")


class ErrorTaxonomy:
    """Immutable signal table plus the fixed rules for known exception types.

    Build one at startup and share it; ``extend`` returns a new taxonomy.
    """

    def __init__(self, entries: Optional[Mapping[Union[str, Signal], Classifier]] = None):
        table = DEFAULT_ENTRIES if entries is None else entries
        self._entries: Mapping[str, Classifier] = MappingProxyType(
            {_signal_key(signal): classifier for signal, classifier in table.items()}
        )

    @property
    def signals(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def extend(self, entries: Mapping[Union[str, Signal], Classifier]) -> "ErrorTaxonomy":
        """Return a new taxonomy with ``entries`` added or overriding existing ones."""
        merged: Dict[Union[str, Signal], Classifier] = dict(self._entries)
        merged.update({_signal_key(signal): fn for signal, fn in entries.items()})
        return ErrorTaxonomy(merged)

    def classify(self, failure: BaseException) -> Classification:
        """Map any failure onto (status, message, error code)."""
        # Unmatched routes are pre-classified and never hit the table
        if isinstance(failure, StarletteHTTPException):
            return _http_error(failure)

        if isinstance(failure, ValidationFailure):
            return Classification(
                failure.status_code,
                failure.message,
                failure.error_code,
                ({"field": to_camel(str(failure.field)), "message": failure.message},),
            )

        if isinstance(failure, RequestValidationError):
            return self.classify(_first_request_error(failure))

        if isinstance(failure, MonashAPIError):
            return Classification(failure.status_code, failure.message, failure.error_code)

        if isinstance(failure, PersistenceError):
            classifier = self._entries.get(_signal_key(failure.signal))
            if classifier is not None:
                return classifier(failure)

        return INTERNAL_SERVER_ERROR


def _first_request_error(exc: RequestValidationError) -> ValidationFailure:
    errors = exc.errors()
    if not errors:
        return ValidationFailure("request", "Invalid request")
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    field = location[-1] if location else "request"
    return ValidationFailure(field, first.get("msg", "Invalid value"))


# Process-wide default, read-only after import
default_taxonomy = ErrorTaxonomy()
