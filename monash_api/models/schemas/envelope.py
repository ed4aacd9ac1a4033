"""Envelope schemas for OpenAPI documentation.

Handlers build bodies with ``monash_api.utils.response.respond``; these models
only describe that shape in the generated docs.
"""

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schema whose public field names are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorDetail(CamelModel):
    """Field-level detail of a validation failure."""

    field: str = Field(
        ...,
        description="Field name that caused the error",
        examples=["course_code"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Invalid course code format (2-4 uppercase letters, e.g., SE, LAW)"],
    )


class PaginationInfo(CamelModel):
    page: int = Field(..., examples=[1])
    limit: int = Field(..., examples=[10])
    total: int = Field(..., examples=[25])
    total_pages: int = Field(..., examples=[3])
    has_next: bool = Field(..., examples=[True])
    has_prev: bool = Field(..., examples=[False])


class SuccessEnvelope(CamelModel):
    """Body of every 2xx response."""

    status_code: int = Field(..., examples=[200])
    success: bool = Field(True, description="Always true for status codes below 400")
    message: str = Field(..., examples=["Course retrieved successfully"])
    data: Optional[Any] = Field(
        None,
        description="Result payload; omitted when there is nothing to return",
    )


class PaginatedEnvelope(SuccessEnvelope):
    """Body of a paginated listing."""

    data: List[Dict[str, Any]] = Field(default_factory=list)
    pagination: PaginationInfo


class ErrorEnvelope(CamelModel):
    """Body of every 4xx/5xx response. Never carries ``data``."""

    status_code: int = Field(..., examples=[404])
    success: bool = Field(False)
    message: str = Field(..., examples=["Course does not exist"])
    error_code: str = Field(
        ...,
        description="Stable error code for client-side handling",
        examples=["COURSE_NOT_FOUND_404"],
    )
    errors: List[ErrorDetail] = Field(
        default_factory=list,
        description="Details of the failing field, empty for non-validation errors",
    )
    timestamp: str = Field(
        ...,
        description="ISO-8601 time the error was generated",
        examples=["2024-01-01T00:00:00+00:00"],
    )


def error_response(description: str) -> Dict[str, Any]:
    """Entry for a route's ``responses`` mapping."""
    return {"model": ErrorEnvelope, "description": description}


def json_request_body(model: Type[BaseModel]) -> Dict[str, Any]:
    """``openapi_extra`` documenting a JSON body read by a validation dependency."""
    return {
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": model.model_json_schema(by_alias=True),
                }
            },
        }
    }
