from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from monash_api.core.logging import get_service_logger
from monash_api.models.schemas import (
    PaginatedEnvelope,
    StudentCreateRequest,
    StudentUpdateRequest,
    SuccessEnvelope,
    error_response,
    json_request_body,
)
from monash_api.services.student_service import StudentService
from monash_api.utils.response import respond
from monash_api.utils.validation import validated
from monash_api.validations.students import (
    CREATE_STUDENT,
    STUDENT_ID_PARAM,
    UPDATE_STUDENT,
)

logger = get_service_logger("student_api")

router = APIRouter(tags=["Students"])


def get_student_service(request: Request) -> StudentService:
    return StudentService(request.app.state.db, request.app.state.pagination)


@router.get(
    "/students",
    summary="List Students",
    operation_id="listStudents",
    description="""Retrieve a paginated list of students with their course code and name.

**Query Parameters:**
- `page`: Page number (starts from 1, invalid values fall back to 1)
- `limit`: Items per page (default 10, max 100)""",
    responses={
        200: {"model": PaginatedEnvelope, "description": "Students retrieved successfully"},
        500: error_response("Internal server error"),
    },
)
async def list_students(
    request: Request,
    service: StudentService = Depends(get_student_service),
) -> JSONResponse:
    page = await service.list_students(request.query_params)
    return respond(
        status.HTTP_200_OK,
        "Students retrieved successfully",
        data=page.data,
        pagination=page.pagination,
    )


@router.get(
    "/students/{studentId}",
    summary="Get Student",
    operation_id="getStudent",
    responses={
        200: {"model": SuccessEnvelope, "description": "Student retrieved successfully"},
        400: error_response("Invalid student id"),
        404: error_response("Student does not exist"),
    },
)
async def get_student(
    params: Dict[str, Any] = Depends(validated(STUDENT_ID_PARAM, "path")),
    service: StudentService = Depends(get_student_service),
) -> JSONResponse:
    student = await service.get_student(params["student_id"])
    return respond(status.HTTP_200_OK, "Student retrieved successfully", data=student)


@router.post(
    "/students",
    summary="Create Student",
    operation_id="createStudent",
    description="""Register a student. The course is taken from the letters the
student number starts with (`SE03001` enrols into course `SE`).

**Example Request:**
```json
{
  "studentNumber": "SE03001",
  "mykadNumber": "030101145678",
  "email": "student@example.com",
  "studentName": "Aisyah Rahman",
  "gender": "Female"
}
```""",
    openapi_extra=json_request_body(StudentCreateRequest),
    responses={
        201: {"model": SuccessEnvelope, "description": "Student created successfully"},
        400: error_response("Validation error"),
        404: error_response("Course does not exist"),
        409: error_response("Student number, MyKad number or email already exists"),
    },
)
async def create_student(
    payload: Dict[str, Any] = Depends(validated(CREATE_STUDENT)),
    service: StudentService = Depends(get_student_service),
) -> JSONResponse:
    logger.info("Creating student", student_number=payload["student_number"])
    student = await service.create_student(payload)
    return respond(status.HTTP_201_CREATED, "Student created successfully", data=student)


@router.put(
    "/students",
    summary="Update Student",
    operation_id="updateStudent",
    description="Update the student identified by `studentId` in the body.",
    openapi_extra=json_request_body(StudentUpdateRequest),
    responses={
        200: {"model": SuccessEnvelope, "description": "Student updated successfully"},
        400: error_response("Validation error"),
        404: error_response("Student or course does not exist"),
        409: error_response("Student number or MyKad number already exists"),
    },
)
async def update_student(
    payload: Dict[str, Any] = Depends(validated(UPDATE_STUDENT)),
    service: StudentService = Depends(get_student_service),
) -> JSONResponse:
    student = await service.update_student(payload)
    return respond(status.HTTP_200_OK, "Student updated successfully", data=student)


@router.delete(
    "/students/{studentId}",
    summary="Delete Student",
    operation_id="deleteStudent",
    responses={
        200: {"model": SuccessEnvelope, "description": "Student deleted successfully"},
        400: error_response("Invalid student id"),
        404: error_response("Student does not exist"),
    },
)
async def delete_student(
    params: Dict[str, Any] = Depends(validated(STUDENT_ID_PARAM, "path")),
    service: StudentService = Depends(get_student_service),
) -> JSONResponse:
    await service.delete_student(params["student_id"])
    return respond(status.HTTP_200_OK, "Student deleted successfully")
