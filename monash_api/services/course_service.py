from typing import Any, Dict, Mapping, Optional

from monash_api.core.db_client import DatabaseManager, SessionQuerySource
from monash_api.core.exceptions import NotFoundError
from monash_api.core.logging import get_service_logger
from monash_api.models.schemas.base import Page
from monash_api.utils.pagination import PaginationEngine

logger = get_service_logger("course")

LIST_COURSES = "SELECT * FROM courses ORDER BY course_id"
FIND_COURSE_BY_CODE = "SELECT * FROM courses WHERE course_code = ?"
FIND_COURSE_BY_ID = "SELECT * FROM courses WHERE course_id = ?"


class CourseNotFoundError(NotFoundError):
    def __init__(self, message: str = "Course does not exist"):
        super().__init__(message, "COURSE_NOT_FOUND_404")


class CourseService:
    """Course reads and writes over parameterized SQL."""

    def __init__(self, db: DatabaseManager, pagination: Optional[PaginationEngine] = None):
        self.db = db
        self.pagination = pagination or PaginationEngine()
        self.logger = logger

    async def _find_one(
        self, source: SessionQuerySource, query: str, value: Any
    ) -> Dict[str, Any]:
        rows = await source.execute(query, [value])
        if not rows:
            raise CourseNotFoundError()
        return rows[0]

    async def list_courses(self, params: Optional[Mapping[str, Any]] = None) -> Page:
        """One page of courses ordered by id."""
        async with self.db.query_source() as source:
            return await self.pagination.paginate(source, LIST_COURSES, params)

    async def get_course_by_code(self, course_code: str) -> Dict[str, Any]:
        async with self.db.query_source() as source:
            return await self._find_one(source, FIND_COURSE_BY_CODE, course_code)

    async def create_course(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Insert a course and return the stored row.

        Raises:
            PersistenceError: ``unique_violation`` when the code already exists
        """
        async with self.db.query_source() as source:
            await source.execute_write(
                "INSERT INTO courses (course_code, course_name) VALUES (?, ?)",
                [data["course_code"], data["course_name"]],
            )
            course = await self._find_one(
                source, FIND_COURSE_BY_CODE, data["course_code"]
            )

        self.logger.info(
            "Course created",
            course_id=course["course_id"],
            course_code=course["course_code"],
        )
        return course

    async def update_course(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        async with self.db.query_source() as source:
            affected = await source.execute_write(
                "UPDATE courses SET course_code = ?, course_name = ?, "
                "updated_at = CURRENT_TIMESTAMP WHERE course_id = ?",
                [data["course_code"], data["course_name"], data["course_id"]],
            )
            if affected == 0:
                raise CourseNotFoundError("Course not found")
            course = await self._find_one(source, FIND_COURSE_BY_ID, data["course_id"])

        self.logger.info("Course updated", course_id=data["course_id"])
        return course

    async def delete_course(self, course_id: int) -> None:
        """
        Delete a course.

        Raises:
            CourseNotFoundError: If no course has this id
            PersistenceError: ``foreign_key_violation_on_delete`` while students
                still reference the course
        """
        async with self.db.query_source() as source:
            affected = await source.execute_write(
                "DELETE FROM courses WHERE course_id = ?", [course_id]
            )
            if affected == 0:
                raise CourseNotFoundError()

        self.logger.info("Course deleted", course_id=course_id)
