"""Validation schemas for student routes."""

import re
from typing import Optional

from monash_api.utils.validation import (
    MAX_ID,
    FieldRule,
    Schema,
    digits,
    exact_length,
    integer,
    matches,
    max_length,
    min_length,
    one_of,
    positive,
    string,
    valid_mykad_date,
)

_PREFIX = re.compile(r"^([A-Z]{2,4})")


def extract_student_number_prefix(student_number: str) -> Optional[str]:
    """Course code a student number starts with, e.g. ``SE03001`` -> ``SE``."""
    match = _PREFIX.match(student_number or "")
    return match.group(1) if match else None


STUDENT_NUMBER = FieldRule(
    "student_number",
    coerce=string(
        "Student number must be a string", transform=(str.upper, str.strip)
    ),
    refine=(
        min_length(1, "Student number is required"),
        matches(
            r"[A-Z]{2,4}[0-9]{4,5}",
            "Invalid student number format (e.g., LAW0504, SE03001)",
        ),
    ),
    required_message="Student number is required",
)

MYKAD_NUMBER = FieldRule(
    "mykad_number",
    coerce=string("MyKad number must be a string"),
    refine=(
        exact_length(12, "MyKad number must be exactly 12 digits"),
        matches(r"[0-9]{12}", "MyKad number must contain only digits"),
        valid_mykad_date("Invalid MyKad number format (YYMMDDxxxxxx)"),
    ),
    required_message="MyKad number is required",
)

EMAIL = FieldRule(
    "email",
    coerce=string("Email must be a string", transform=(str.strip, str.lower)),
    refine=(matches(r"[^\s@]+@[^\s@]+\.[^\s@]+", "Invalid email format"),),
    required_message="Email is required",
)

STUDENT_NAME = FieldRule(
    "student_name",
    coerce=string("Student name must be a string", transform=(str.strip,)),
    refine=(
        min_length(1, "Student name is required"),
        max_length(100, "Student name must not exceed 100 characters"),
    ),
    required_message="Student name is required",
)

ADDRESS = FieldRule(
    "address",
    required=False,
    nullable=True,
    coerce=string("Address must be a string", transform=(str.strip,)),
    refine=(max_length(255, "Address must not exceed 255 characters"),),
)

GENDER = FieldRule(
    "gender",
    required=False,
    nullable=True,
    coerce=string("Gender must be a string"),
    refine=(one_of(("Male", "Female"), "Gender must be either 'Male' or 'Female'"),),
)

STUDENT_ID_PARAM = Schema(
    fields=(
        FieldRule(
            "student_id",
            coerce=digits("ID must be a number", maximum=MAX_ID),
            required_message="Student ID is required",
        ),
    )
)

CREATE_STUDENT = Schema(
    fields=(STUDENT_NUMBER, MYKAD_NUMBER, EMAIL, STUDENT_NAME, ADDRESS, GENDER)
)

UPDATE_STUDENT = Schema(
    fields=(
        FieldRule(
            "student_id",
            coerce=integer("Student ID must be an integer", maximum=MAX_ID),
            refine=(positive("Student ID must be positive"),),
            required_message="Student ID is required",
        ),
        STUDENT_NUMBER,
        MYKAD_NUMBER,
        STUDENT_NAME,
        ADDRESS,
        GENDER,
    )
)
