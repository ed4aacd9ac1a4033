"""Pydantic schemas for API requests and responses.

This package contains all Pydantic models organized by domain:
- base.py: Pagination request, metadata and page models
- envelope.py: Success/error envelope schemas
- course.py: Course schemas
- student.py: Student schemas

Import from this module: `from monash_api.models.schemas import ErrorEnvelope`
"""

# Base schemas
from monash_api.models.schemas.base import Page, PageRequest, PaginationMeta

# Envelope schemas
from monash_api.models.schemas.envelope import (
    CamelModel,
    ErrorDetail,
    ErrorEnvelope,
    PaginatedEnvelope,
    PaginationInfo,
    SuccessEnvelope,
    error_response,
    json_request_body,
)

# Course schemas
from monash_api.models.schemas.course import (
    CourseCreateRequest,
    CourseUpdateRequest,
)

# Student schemas
from monash_api.models.schemas.student import (
    StudentCreateRequest,
    StudentUpdateRequest,
)

__all__ = [
    # Base
    "Page",
    "PageRequest",
    "PaginationMeta",
    # Envelopes
    "CamelModel",
    "ErrorDetail",
    "ErrorEnvelope",
    "PaginatedEnvelope",
    "PaginationInfo",
    "SuccessEnvelope",
    "error_response",
    "json_request_body",
    # Courses
    "CourseCreateRequest",
    "CourseUpdateRequest",
    # Students
    "StudentCreateRequest",
    "StudentUpdateRequest",
]
