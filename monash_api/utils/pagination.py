"""
Offset pagination over an arbitrary read query.

``paginate`` wraps a caller-supplied SELECT in two round-trips to the query
source: a count of every matching row, then the same query windowed with
``LIMIT ? OFFSET ?``. Values are always bound as parameters.

The two executions are not isolated from each other. Under concurrent writers
``total`` and ``data`` can disagree: a row that was counted may be missing
from the page, or a row inserted after the count may show up in it. Callers
that need an exact snapshot must run both reads inside one repeatable-read
transaction themselves.

Malformed ``page``/``limit`` input is never a client error here; it falls back
to the defaults.
"""

import math
import re
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from monash_api.models.schemas.base import Page, PageRequest, PaginationMeta

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# LIMIT/OFFSET bind as signed 64-bit integers
MAX_OFFSET = 2**63 - 1

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


class QuerySource(Protocol):
    """Anything that can run parameterized SQL text and return rows."""

    async def execute(
        self, query: str, params: Sequence[Any] = ()
    ) -> List[Dict[str, Any]]: ...


def parse_int(value: Any) -> Optional[int]:
    """Lenient integer parse: ``"3"``, ``"3abc"`` and ``3.7`` all give 3.

    Returns None when no leading integer can be read.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def build_page_request(
    params: Optional[Mapping[str, Any]] = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> PageRequest:
    """Clamp raw ``page``/``limit`` values into a valid PageRequest.

    Missing, unparsable and zero values take the default; ``page`` is then
    raised to at least 1 and ``limit`` clamped to ``[1, max_limit]``. Pages
    whose offset would not fit in ``MAX_OFFSET`` are lowered to the last one
    that does.
    """
    params = params or {}
    page = parse_int(params.get("page")) or 1
    limit = parse_int(params.get("limit")) or default_limit
    limit = min(max_limit, max(1, limit))
    page = min(max(1, page), MAX_OFFSET // limit + 1)
    return PageRequest(page=page, limit=limit)


def _strip_terminator(query: str) -> str:
    return query.strip().rstrip(";").rstrip()


def count_query(base_query: str) -> str:
    """Counting form of ``base_query`` with the same row predicate."""
    return f"SELECT COUNT(*) AS total FROM ({_strip_terminator(base_query)}) AS count_table"


def window_query(base_query: str) -> str:
    """``base_query`` with two trailing placeholders for limit and offset."""
    return f"{_strip_terminator(base_query)} LIMIT ? OFFSET ?"


class PaginationEngine:
    """Count-then-fetch paginator with configurable limit bounds."""

    def __init__(self, default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT):
        if max_limit < 1:
            raise ValueError("max_limit must be at least 1")
        self.default_limit = min(max(1, default_limit), max_limit)
        self.max_limit = max_limit

    def page_request(self, params: Optional[Mapping[str, Any]] = None) -> PageRequest:
        return build_page_request(params, self.default_limit, self.max_limit)

    async def paginate(
        self,
        source: QuerySource,
        base_query: str,
        request_params: Optional[Mapping[str, Any]] = None,
        bound_params: Sequence[Any] = (),
    ) -> Page:
        """
        Run ``base_query`` as one bounded page.

        Args:
            source: Query source executing SQL text with ``?`` placeholders
            base_query: Read-only query without LIMIT/OFFSET
            request_params: Raw ``page``/``limit`` values (query string)
            bound_params: Values for the placeholders inside ``base_query``

        Returns:
            Page with the rows and pagination metadata

        Errors raised by the query source propagate unchanged.
        """
        request = self.page_request(request_params)
        bound = list(bound_params)

        count_rows = await source.execute(count_query(base_query), bound)
        total = int(count_rows[0]["total"]) if count_rows else 0

        rows = await source.execute(
            window_query(base_query), [*bound, request.limit, request.offset]
        )

        total_pages = math.ceil(total / request.limit)
        return Page(
            data=list(rows)[: request.limit],
            pagination=PaginationMeta(
                page=request.page,
                limit=request.limit,
                total=total,
                total_pages=total_pages,
                has_next=request.page < total_pages,
                has_prev=request.page > 1,
            ),
        )


default_engine = PaginationEngine()


async def paginate(
    source: QuerySource,
    base_query: str,
    request_params: Optional[Mapping[str, Any]] = None,
    bound_params: Sequence[Any] = (),
) -> Page:
    """Paginate with the default bounds (limit 10, at most 100)."""
    return await default_engine.paginate(source, base_query, request_params, bound_params)
