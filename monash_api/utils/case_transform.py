"""
Shared case conversion for API request/response normalization.

Database rows and validation schemas use snake_case keys; the public API uses
camelCase. Conversion is recursive over mappings and sequences, renames keys
only, and never touches values.

Key rules are pydantic's alias generators:

- snake -> camel (``to_camel``): ``course_code`` -> ``courseCode``,
  ``address_line_1`` -> ``addressLine1``. A key that already looks like
  camelCase (lowercase start, letters/digits only, no digit followed by a
  lowercase letter) is returned unchanged.
- camel -> snake (``to_snake``): ``courseCode`` -> ``course_code``,
  ``HTTPStatus`` -> ``http_status``, ``addressLine1`` -> ``address_line_1``;
  a digit run becomes its own word and hyphens become underscores.

Canonical snake_case keys are lowercase words joined by single underscores,
with digits as separate words. For those keys snake -> camel -> snake gives
back the original key. ``address_line1`` is not canonical and comes back as
``address_line_1``.

Keys matching an exclusion pattern (default: leading underscore) and
non-string keys are passed through untouched.
"""

import re
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Pattern, Sequence, Union

from pydantic.alias_generators import to_camel, to_snake

KeyConverter = Callable[[str], str]


class JsonKind(str, Enum):
    """Tagged variant of a JSON-like value."""

    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"
    NULL = "null"


def kind_of(value: Any) -> JsonKind:
    if value is None:
        return JsonKind.NULL
    if isinstance(value, Mapping):
        return JsonKind.OBJECT
    # str/bytes are sequences too, but they are leaves here
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return JsonKind.ARRAY
    return JsonKind.SCALAR


class CaseTransformer:
    """Bidirectional, recursive key-case transformer."""

    def __init__(self, exclude: Iterable[Union[str, Pattern[str]]] = (r"^_",)):
        self.exclude = tuple(re.compile(pattern) for pattern in exclude)

    def to_camel(self, data: Any) -> Any:
        """Deep copy of ``data`` with snake_case keys rewritten to camelCase."""
        return self._transform(data, to_camel)

    def to_snake(self, data: Any) -> Any:
        """Deep copy of ``data`` with camelCase keys rewritten to snake_case."""
        return self._transform(data, to_snake)

    def convert_key(self, key: Any, converter: KeyConverter) -> Any:
        if not isinstance(key, str) or self._is_excluded(key):
            return key
        return converter(key)

    def _is_excluded(self, key: str) -> bool:
        return any(pattern.search(key) for pattern in self.exclude)

    def _transform(self, data: Any, converter: KeyConverter) -> Any:
        kind = kind_of(data)
        if kind is JsonKind.OBJECT:
            return {
                self.convert_key(key, converter): self._transform(value, converter)
                for key, value in data.items()
            }
        if kind is JsonKind.ARRAY:
            return [self._transform(item, converter) for item in data]
        # SCALAR and NULL are returned as-is
        return data


default_transformer = CaseTransformer()


def to_camel_case(data: Any) -> Any:
    """Recursively convert mapping keys to camelCase for API responses."""
    return default_transformer.to_camel(data)


def to_snake_case(data: Any) -> Any:
    """Recursively convert mapping keys to snake_case for API input normalization."""
    return default_transformer.to_snake(data)
