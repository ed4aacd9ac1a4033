from typing import Any, Dict, Mapping, Optional

from monash_api.core.db_client import DatabaseManager, SessionQuerySource
from monash_api.core.exceptions import NotFoundError
from monash_api.core.logging import get_service_logger
from monash_api.models.schemas.base import Page
from monash_api.services.course_service import CourseNotFoundError
from monash_api.utils.pagination import PaginationEngine
from monash_api.validations.students import extract_student_number_prefix

logger = get_service_logger("student")

STUDENT_WITH_COURSE = """
    SELECT s.*, c.course_code, c.course_name
    FROM students s
    LEFT JOIN courses c ON s.course_id = c.course_id
"""

LIST_STUDENTS = STUDENT_WITH_COURSE + " ORDER BY s.student_id"
FIND_STUDENT_BY_ID = STUDENT_WITH_COURSE + " WHERE s.student_id = ?"
FIND_STUDENT_BY_NUMBER = STUDENT_WITH_COURSE + " WHERE s.student_number = ?"


class StudentNotFoundError(NotFoundError):
    def __init__(self, message: str = "Student does not exist"):
        super().__init__(message, "STUDENT_NOT_FOUND_404")


class StudentService:
    """Student reads and writes; the course comes from the student number prefix."""

    def __init__(self, db: DatabaseManager, pagination: Optional[PaginationEngine] = None):
        self.db = db
        self.pagination = pagination or PaginationEngine()
        self.logger = logger

    async def _find_one(
        self, source: SessionQuerySource, query: str, value: Any
    ) -> Dict[str, Any]:
        rows = await source.execute(query, [value])
        if not rows:
            raise StudentNotFoundError()
        return rows[0]

    async def _course_id_for(
        self, source: SessionQuerySource, student_number: str
    ) -> int:
        prefix = extract_student_number_prefix(student_number)
        rows = await source.execute(
            "SELECT course_id FROM courses WHERE course_code = ?", [prefix]
        )
        if not rows:
            self.logger.warning(
                "No course for student number prefix",
                student_number=student_number,
                prefix=prefix,
            )
            raise CourseNotFoundError()
        return rows[0]["course_id"]

    async def list_students(self, params: Optional[Mapping[str, Any]] = None) -> Page:
        """One page of students with their course code and name."""
        async with self.db.query_source() as source:
            return await self.pagination.paginate(source, LIST_STUDENTS, params)

    async def get_student(self, student_id: int) -> Dict[str, Any]:
        async with self.db.query_source() as source:
            return await self._find_one(source, FIND_STUDENT_BY_ID, student_id)

    async def create_student(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Insert a student enrolled in the course their number starts with.

        Raises:
            CourseNotFoundError: If no course matches the number prefix
            PersistenceError: ``unique_violation`` for a taken student number,
                MyKad number or email
        """
        async with self.db.query_source() as source:
            course_id = await self._course_id_for(source, data["student_number"])
            await source.execute_write(
                "INSERT INTO students "
                "(student_number, mykad_number, email, student_name, address, gender, course_id) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                [
                    data["student_number"],
                    data["mykad_number"],
                    data["email"],
                    data["student_name"],
                    data.get("address") or None,
                    data.get("gender") or None,
                    course_id,
                ],
            )
            student = await self._find_one(
                source, FIND_STUDENT_BY_NUMBER, data["student_number"]
            )

        self.logger.info(
            "Student created",
            student_id=student["student_id"],
            student_number=student["student_number"],
            course_id=course_id,
        )
        return student

    async def update_student(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Replace a student's details; a new number prefix moves them to that course."""
        async with self.db.query_source() as source:
            course_id = await self._course_id_for(source, data["student_number"])
            affected = await source.execute_write(
                "UPDATE students SET mykad_number = ?, student_name = ?, address = ?, "
                "gender = ?, student_number = ?, course_id = ?, "
                "updated_at = CURRENT_TIMESTAMP WHERE student_id = ?",
                [
                    data["mykad_number"],
                    data["student_name"],
                    data.get("address") or None,
                    data.get("gender") or None,
                    data["student_number"],
                    course_id,
                    data["student_id"],
                ],
            )
            if affected == 0:
                raise StudentNotFoundError()
            student = await self._find_one(
                source, FIND_STUDENT_BY_ID, data["student_id"]
            )

        self.logger.info("Student updated", student_id=data["student_id"])
        return student

    async def delete_student(self, student_id: int) -> None:
        async with self.db.query_source() as source:
            affected = await source.execute_write(
                "DELETE FROM students WHERE student_id = ?", [student_id]
            )
            if affected == 0:
                raise StudentNotFoundError()

        self.logger.info("Student deleted", student_id=student_id)
