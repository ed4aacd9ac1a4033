"""Student request schemas for OpenAPI documentation."""

from typing import Literal, Optional

from pydantic import Field

from monash_api.models.schemas.envelope import CamelModel


class StudentCreateRequest(CamelModel):
    student_number: str = Field(
        ...,
        description="Course code prefix followed by 4-5 digits; selects the course",
        examples=["SE03001"],
    )
    mykad_number: str = Field(
        ...,
        description="12 digits, YYMMDD followed by six digits",
        examples=["030101145678"],
    )
    email: str = Field(..., examples=["student@example.com"])
    student_name: str = Field(..., max_length=100, examples=["Aisyah Rahman"])
    address: Optional[str] = Field(None, max_length=255)
    gender: Optional[Literal["Male", "Female"]] = None


class StudentUpdateRequest(CamelModel):
    student_id: int = Field(..., gt=0, examples=[1])
    student_number: str = Field(..., examples=["SE03001"])
    mykad_number: str = Field(..., examples=["030101145678"])
    student_name: str = Field(..., max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    gender: Optional[Literal["Male", "Female"]] = None

