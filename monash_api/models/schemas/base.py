"""Base schemas and pagination models.

This module contains base classes and common models used across
all schema modules.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class PageRequest(BaseModel):
    """Pagination parameters, already clamped to their valid ranges."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(
        default=1,
        ge=1,
        description="Page number (starts from 1)",
        examples=[1],
    )
    limit: int = Field(
        default=10,
        ge=1,
        description="Items per page",
        examples=[10],
    )

    @property
    def offset(self) -> int:
        """Calculate database offset."""
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    """Page metadata returned next to a page of rows."""

    page: int = Field(..., ge=1, description="Current page number")
    limit: int = Field(..., ge=1, description="Items per page")
    total: int = Field(..., ge=0, description="Total number of matching rows")
    total_pages: int = Field(..., ge=0, description="ceil(total / limit)")
    has_next: bool = Field(..., description="True when page < total_pages")
    has_prev: bool = Field(..., description="True when page > 1")


class Page(BaseModel):
    """A bounded page of rows plus its metadata."""

    data: List[Dict[str, Any]] = Field(default_factory=list)
    pagination: PaginationMeta
