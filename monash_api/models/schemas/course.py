"""Course request schemas for OpenAPI documentation."""

from pydantic import Field

from monash_api.models.schemas.envelope import CamelModel


class CourseCreateRequest(CamelModel):
    course_code: str = Field(
        ...,
        description="2-4 letters, upper-cased before it is checked",
        examples=["SE"],
    )
    course_name: str = Field(
        ..., max_length=100, examples=["Software Engineering"]
    )


class CourseUpdateRequest(CourseCreateRequest):
    course_id: int = Field(..., gt=0, examples=[1])

