"""
Declarative, fail-fast validation of inbound payloads.

A ``Schema`` is an ordered tuple of ``FieldRule``s. ``validate`` walks the
rules in declaration order and stops at the first failing field, raising
``ValidationFailure`` for that field only. Later fields are not inspected, so
a request with several problems always reports the first one. API consumers
rely on getting exactly one error per request.

For each field:

1. absent (or None on a non-nullable rule) -> fails when required, skipped
   otherwise
2. ``coerce`` converts the raw value, raising ``ValueError(message)`` on
   failure
3. each ``Refinement`` runs in order against the coerced value

The coerced values replace the originals in the returned payload. Keys the
schema does not declare are copied through unless the schema is ``closed``.
"""

import json
import re
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Pattern,
    Tuple,
    Union,
)

from fastapi import Request
from pydantic import StrictInt, StrictStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from monash_api.core.exceptions import ValidationFailure
from monash_api.utils.case_transform import to_snake_case

Coercer = Callable[[Any], Any]
Predicate = Callable[[Any], bool]

_MISSING = object()

_strict_str = TypeAdapter(StrictStr)
_strict_int = TypeAdapter(StrictInt)
_lax_int = TypeAdapter(int)
_DIGITS = re.compile(r"[0-9]+")

# Signed 64-bit bound of any integer handed to the driver
MAX_INTEGER = 2**63 - 1

# INTEGER primary keys of the courses and students tables
MAX_ID = 2**31 - 1


@dataclass(frozen=True)
class Refinement:
    predicate: Predicate
    message: str


@dataclass(frozen=True)
class FieldRule:
    """One field of a schema."""

    name: str
    required: bool = True
    coerce: Optional[Coercer] = None
    refine: Tuple[Refinement, ...] = ()
    nullable: bool = False
    required_message: Optional[str] = None

    @property
    def missing_message(self) -> str:
        return self.required_message or "Required"


@dataclass(frozen=True)
class Schema:
    fields: Tuple[FieldRule, ...]
    closed: bool = False

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(rule.name for rule in self.fields)


def _check_field(rule: FieldRule, raw: Any) -> Any:
    try:
        value = rule.coerce(raw) if rule.coerce is not None else raw
    except ValueError as e:
        raise ValidationFailure(rule.name, str(e)) from e

    for refinement in rule.refine:
        if not refinement.predicate(value):
            raise ValidationFailure(rule.name, refinement.message)
    return value


def validate(schema: Schema, payload: Any) -> Dict[str, Any]:
    """
    Apply ``schema`` to ``payload``.

    Args:
        schema: Ordered field rules
        payload: Mapping produced by the request (body, path or query)

    Returns:
        New dictionary with coerced values for declared fields

    Raises:
        ValidationFailure: For the first field that fails
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValidationFailure("body", "Expected an object")

    result: Dict[str, Any] = {}
    for rule in schema.fields:
        raw = payload.get(rule.name, _MISSING)

        if raw is None and rule.nullable:
            result[rule.name] = None
            continue

        if raw is _MISSING or raw is None:
            if rule.required:
                raise ValidationFailure(rule.name, rule.missing_message)
            continue

        result[rule.name] = _check_field(rule, raw)

    declared = set(schema.field_names)
    for key, value in payload.items():
        if key in declared:
            continue
        if schema.closed:
            raise ValidationFailure(key, "Unrecognized field")
        result[key] = value

    return result


# Coercers


def string(
    message: str = "Expected a string",
    transform: Iterable[Callable[[str], str]] = (),
) -> Coercer:
    """Require a string, then apply ``transform`` functions in order."""
    steps = tuple(transform)

    def coerce(value: Any) -> str:
        try:
            text = _strict_str.validate_python(value)
        except PydanticValidationError as e:
            raise ValueError(message) from e
        for step in steps:
            text = step(text)
        return text

    return coerce


def integer(
    message: str = "Expected an integer",
    strict: bool = True,
    maximum: int = MAX_INTEGER,
) -> Coercer:
    """Require an integer in ``[-maximum - 1, maximum]``.

    ``strict=False`` also accepts numeric strings.
    """
    adapter = _strict_int if strict else _lax_int

    def coerce(value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(message)
        try:
            number = adapter.validate_python(value)
        except PydanticValidationError as e:
            raise ValueError(message) from e
        if not -maximum - 1 <= number <= maximum:
            raise ValueError(message)
        return number

    return coerce


def digits(message: str = "ID must be a number", maximum: int = MAX_INTEGER) -> Coercer:
    """Path-parameter id: a string of ASCII digits converted to int, at most ``maximum``."""

    def coerce(value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(message)
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and _DIGITS.fullmatch(value):
            number = int(value)
        else:
            raise ValueError(message)
        if not 0 <= number <= maximum:
            raise ValueError(message)
        return number

    return coerce


# Refinements


def min_length(size: int, message: str) -> Refinement:
    return Refinement(lambda value: len(value) >= size, message)


def max_length(size: int, message: str) -> Refinement:
    return Refinement(lambda value: len(value) <= size, message)


def exact_length(size: int, message: str) -> Refinement:
    return Refinement(lambda value: len(value) == size, message)


def matches(pattern: Union[str, Pattern[str]], message: str) -> Refinement:
    compiled = re.compile(pattern)
    return Refinement(lambda value: compiled.fullmatch(value) is not None, message)


def one_of(choices: Iterable[Any], message: str) -> Refinement:
    allowed = frozenset(choices)
    return Refinement(lambda value: value in allowed, message)


def positive(message: str) -> Refinement:
    return Refinement(lambda value: value > 0, message)


def _valid_mykad_date(value: str) -> bool:
    # YYMMDD followed by six digits; the year is not checked
    try:
        month = int(value[2:4])
        day = int(value[4:6])
    except ValueError:
        return False
    return 1 <= month <= 12 and 1 <= day <= 31


def valid_mykad_date(message: str) -> Refinement:
    return Refinement(_valid_mykad_date, message)


# FastAPI integration

SOURCES = ("body", "path", "query")


async def _read_source(request: Request, source: str) -> Any:
    if source == "path":
        return dict(request.path_params)
    if source == "query":
        return dict(request.query_params)

    raw = await request.body()
    if not raw or not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationFailure("body", "Malformed JSON body") from e


def validated(schema: Schema, source: str = "body") -> Callable:
    """
    Build a FastAPI dependency that validates one part of the request.

    The raw data has its keys converted to snake_case before the schema is
    applied; the handler receives the coerced payload.

    Usage:
        @router.post("/courses")
        async def create(payload: dict = Depends(validated(CREATE_COURSE))):
            ...
    """
    if source not in SOURCES:
        raise ValueError(f"Unknown validation source: {source}")

    async def dependency(request: Request) -> Dict[str, Any]:
        data = await _read_source(request, source)
        return validate(schema, to_snake_case(data))

    return dependency
