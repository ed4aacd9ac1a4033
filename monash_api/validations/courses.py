"""Validation schemas for course routes."""

from monash_api.utils.validation import (
    MAX_ID,
    FieldRule,
    Schema,
    digits,
    integer,
    matches,
    max_length,
    min_length,
    positive,
    string,
)

COURSE_CODE_PATTERN = r"[A-Z]{2,4}"


def _course_code(format_message: str) -> FieldRule:
    return FieldRule(
        "course_code",
        coerce=string(
            "Course code must be a string", transform=(str.upper, str.strip)
        ),
        refine=(
            min_length(1, "Course code is required"),
            matches(COURSE_CODE_PATTERN, format_message),
        ),
        required_message="Course code is required",
    )


COURSE_CODE = _course_code(
    "Invalid course code format (2-4 uppercase letters, e.g., SE, LAW)"
)

COURSE_NAME = FieldRule(
    "course_name",
    coerce=string("Course name must be a string", transform=(str.strip,)),
    refine=(
        min_length(1, "Course name is required"),
        max_length(100, "Course name must not exceed 100 characters"),
    ),
    required_message="Course name is required",
)

GET_COURSE_BY_CODE = Schema(fields=(_course_code("Invalid course code format"),))

COURSE_ID_PARAM = Schema(
    fields=(
        FieldRule(
            "course_id",
            coerce=digits("ID must be a number", maximum=MAX_ID),
            required_message="Course ID is required",
        ),
    )
)

CREATE_COURSE = Schema(fields=(COURSE_CODE, COURSE_NAME))

UPDATE_COURSE = Schema(
    fields=(
        COURSE_CODE,
        COURSE_NAME,
        FieldRule(
            "course_id",
            coerce=integer("Course ID must be a number", maximum=MAX_ID),
            refine=(positive("Course ID must be positive"),),
            required_message="Course ID is required",
        ),
    )
)
