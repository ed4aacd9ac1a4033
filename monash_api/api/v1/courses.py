from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from monash_api.core.logging import get_service_logger
from monash_api.models.schemas import (
    CourseCreateRequest,
    CourseUpdateRequest,
    PaginatedEnvelope,
    SuccessEnvelope,
    error_response,
    json_request_body,
)
from monash_api.services.course_service import CourseService
from monash_api.utils.response import respond
from monash_api.utils.validation import validated
from monash_api.validations.courses import (
    COURSE_ID_PARAM,
    CREATE_COURSE,
    GET_COURSE_BY_CODE,
    UPDATE_COURSE,
)

logger = get_service_logger("course_api")

router = APIRouter(tags=["Courses"])


def get_course_service(request: Request) -> CourseService:
    return CourseService(request.app.state.db, request.app.state.pagination)


@router.get(
    "/courses",
    summary="List Courses",
    operation_id="listCourses",
    description="""Retrieve a paginated list of courses ordered by id.

**Query Parameters:**
- `page`: Page number (starts from 1, invalid values fall back to 1)
- `limit`: Items per page (default 10, max 100)""",
    responses={
        200: {"model": PaginatedEnvelope, "description": "Courses retrieved successfully"},
        500: error_response("Internal server error"),
    },
)
async def list_courses(
    request: Request,
    service: CourseService = Depends(get_course_service),
) -> JSONResponse:
    page = await service.list_courses(request.query_params)
    return respond(
        status.HTTP_200_OK,
        "Courses retrieved successfully",
        data=page.data,
        pagination=page.pagination,
    )


@router.get(
    "/courses/{courseCode}",
    summary="Get Course",
    operation_id="getCourseByCode",
    description="Retrieve a course by its code. The code is upper-cased before lookup.",
    responses={
        200: {"model": SuccessEnvelope, "description": "Course retrieved successfully"},
        400: error_response("Invalid course code"),
        404: error_response("Course does not exist"),
    },
)
async def get_course(
    params: Dict[str, Any] = Depends(validated(GET_COURSE_BY_CODE, "path")),
    service: CourseService = Depends(get_course_service),
) -> JSONResponse:
    course = await service.get_course_by_code(params["course_code"])
    return respond(status.HTTP_200_OK, "Course retrieved successfully", data=course)


@router.post(
    "/courses",
    summary="Create Course",
    operation_id="createCourse",
    description="""Create a new course.

**Example Request:**
```json
{
  "courseCode": "se",
  "courseName": "Software Engineering"
}
```""",
    openapi_extra=json_request_body(CourseCreateRequest),
    responses={
        201: {"model": SuccessEnvelope, "description": "Course created successfully"},
        400: error_response("Validation error"),
        409: error_response("Course code already exists"),
    },
)
async def create_course(
    payload: Dict[str, Any] = Depends(validated(CREATE_COURSE)),
    service: CourseService = Depends(get_course_service),
) -> JSONResponse:
    logger.info("Creating course", course_code=payload["course_code"])
    course = await service.create_course(payload)
    return respond(status.HTTP_201_CREATED, "Course created successfully", data=course)


@router.put(
    "/courses",
    summary="Update Course",
    operation_id="updateCourse",
    description="Update the code and name of the course identified by `courseId` in the body.",
    openapi_extra=json_request_body(CourseUpdateRequest),
    responses={
        200: {"model": SuccessEnvelope, "description": "Course updated successfully"},
        400: error_response("Validation error"),
        404: error_response("Course not found"),
        409: error_response("Course code already exists"),
    },
)
async def update_course(
    payload: Dict[str, Any] = Depends(validated(UPDATE_COURSE)),
    service: CourseService = Depends(get_course_service),
) -> JSONResponse:
    course = await service.update_course(payload)
    return respond(status.HTTP_200_OK, "Course updated successfully", data=course)


@router.delete(
    "/courses/{courseId}",
    summary="Delete Course",
    operation_id="deleteCourse",
    description="Delete a course. Fails with `RECORD_IN_USE_409` while students are enrolled in it.",
    responses={
        200: {"model": SuccessEnvelope, "description": "Course deleted successfully"},
        400: error_response("Invalid course id"),
        404: error_response("Course does not exist"),
        409: error_response("Course is still referenced by students"),
    },
)
async def delete_course(
    params: Dict[str, Any] = Depends(validated(COURSE_ID_PARAM, "path")),
    service: CourseService = Depends(get_course_service),
) -> JSONResponse:
    await service.delete_course(params["course_id"])
    return respond(status.HTTP_200_OK, "Course deleted successfully")
