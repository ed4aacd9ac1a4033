"""
Unit tests for the validation gate and the route schemas.

Tests fail-fast ordering, coercion, nullable/optional fields and the course
and student schemas.
"""

import pytest

from monash_api.core.exceptions import ValidationFailure
from monash_api.utils.validation import (
    MAX_ID,
    MAX_INTEGER,
    FieldRule,
    Refinement,
    Schema,
    digits,
    integer,
    matches,
    string,
    validate,
)
from monash_api.validations.courses import (
    COURSE_ID_PARAM,
    CREATE_COURSE,
    GET_COURSE_BY_CODE,
    UPDATE_COURSE,
)
from monash_api.validations.students import (
    CREATE_STUDENT,
    STUDENT_ID_PARAM,
    UPDATE_STUDENT,
    extract_student_number_prefix,
)


def valid_student(**overrides):
    payload = {
        "student_number": "se03001",
        "mykad_number": "030115141234",
        "email": "  Aisyah@Example.COM ",
        "student_name": "  Aisyah Rahman ",
    }
    payload.update(overrides)
    return payload


class TestGate:
    """Tests for the generic validate() algorithm."""

    @pytest.mark.unit
    def test_reports_first_missing_field_only(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_COURSE, {})

        assert exc_info.value.field == "course_code"
        assert exc_info.value.error_code == "INVALID_COURSE_CODE_400"
        assert exc_info.value.status_code == 400

    @pytest.mark.unit
    def test_later_field_reported_when_earlier_ones_pass(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_COURSE, {"course_code": "SE"})

        assert exc_info.value.field == "course_name"
        assert exc_info.value.message == "Course name is required"

    @pytest.mark.unit
    def test_refinements_stop_at_first_failure(self):
        calls = []

        def track(name, result):
            def predicate(value):
                calls.append(name)
                return result

            return predicate

        schema = Schema(
            fields=(
                FieldRule(
                    "code",
                    refine=(
                        Refinement(track("first", False), "first failed"),
                        Refinement(track("second", False), "second failed"),
                    ),
                ),
            )
        )

        with pytest.raises(ValidationFailure) as exc_info:
            validate(schema, {"code": "x"})

        assert exc_info.value.message == "first failed"
        assert calls == ["first"]

    @pytest.mark.unit
    def test_coercion_runs_before_refinements(self):
        """'se' is upper-cased before the format check."""
        result = validate(CREATE_COURSE, {"course_code": "se", "course_name": "Software Eng"})
        assert result == {"course_code": "SE", "course_name": "Software Eng"}

    @pytest.mark.unit
    def test_unknown_fields_pass_through(self):
        result = validate(GET_COURSE_BY_CODE, {"course_code": "law", "extra": 1})
        assert result == {"course_code": "LAW", "extra": 1}

    @pytest.mark.unit
    def test_closed_schema_rejects_unknown_fields(self):
        schema = Schema(fields=(FieldRule("name"),), closed=True)

        with pytest.raises(ValidationFailure) as exc_info:
            validate(schema, {"name": "x", "surprise": True})

        assert exc_info.value.field == "surprise"
        assert exc_info.value.message == "Unrecognized field"

    @pytest.mark.unit
    def test_closed_schema_checks_declared_fields_first(self):
        schema = Schema(fields=(FieldRule("name"),), closed=True)

        with pytest.raises(ValidationFailure) as exc_info:
            validate(schema, {"surprise": True})

        assert exc_info.value.field == "name"

    @pytest.mark.unit
    def test_input_is_not_mutated(self):
        payload = {"course_code": "se", "course_name": "Law"}
        validate(CREATE_COURSE, payload)
        assert payload["course_code"] == "se"

    @pytest.mark.unit
    def test_non_mapping_payload(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_COURSE, ["not", "an", "object"])

        assert exc_info.value.field == "body"

    @pytest.mark.unit
    def test_none_payload_treated_as_empty(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_COURSE, None)

        assert exc_info.value.field == "course_code"

    @pytest.mark.unit
    def test_optional_field_may_be_absent(self):
        schema = Schema(fields=(FieldRule("note", required=False, coerce=string()),))
        assert validate(schema, {}) == {}

    @pytest.mark.unit
    def test_none_on_required_non_nullable_field_is_missing(self):
        schema = Schema(fields=(FieldRule("name", required_message="Name is required"),))

        with pytest.raises(ValidationFailure) as exc_info:
            validate(schema, {"name": None})

        assert exc_info.value.message == "Name is required"


class TestCoercers:
    """Tests for the reusable coercion helpers."""

    @pytest.mark.unit
    def test_string_rejects_numbers(self):
        with pytest.raises(ValueError, match="must be text"):
            string("must be text")(42)

    @pytest.mark.unit
    def test_string_applies_transforms_in_order(self):
        assert string(transform=(str.strip, str.upper))("  se ") == "SE"

    @pytest.mark.unit
    def test_integer_strict(self):
        assert integer()(5) == 5
        with pytest.raises(ValueError):
            integer()("5")
        with pytest.raises(ValueError):
            integer()(True)

    @pytest.mark.unit
    def test_integer_lax_accepts_numeric_strings(self):
        assert integer(strict=False)("5") == 5

    @pytest.mark.unit
    def test_integer_is_bounded(self):
        assert integer()(MAX_INTEGER) == MAX_INTEGER
        assert integer()(-MAX_INTEGER - 1) == -MAX_INTEGER - 1
        for bad in (MAX_INTEGER + 1, -MAX_INTEGER - 2, 10**30):
            with pytest.raises(ValueError, match="too big"):
                integer("too big")(bad)

        assert integer(maximum=MAX_ID)(MAX_ID) == MAX_ID
        with pytest.raises(ValueError):
            integer(maximum=MAX_ID)(MAX_ID + 1)

    @pytest.mark.unit
    def test_digits(self):
        assert digits()("42") == 42
        for bad in ("4a", "-1", "", "1.0"):
            with pytest.raises(ValueError, match="ID must be a number"):
                digits()(bad)

    @pytest.mark.unit
    @pytest.mark.parametrize("bad", ["١٢", "٤٢", "12\n", "99999999999999999999"])
    def test_digits_ascii_only_and_bounded(self, bad):
        with pytest.raises(ValueError, match="ID must be a number"):
            digits()(bad)

    @pytest.mark.unit
    def test_digits_respects_maximum(self):
        assert digits(maximum=MAX_ID)(str(MAX_ID)) == MAX_ID
        with pytest.raises(ValueError):
            digits(maximum=MAX_ID)(str(MAX_ID + 1))
        with pytest.raises(ValueError):
            digits(maximum=MAX_ID)(MAX_ID + 1)

    @pytest.mark.unit
    def test_matches_is_anchored(self):
        refinement = matches(r"[A-Z]{2}", "bad")
        assert refinement.predicate("SE") is True
        assert refinement.predicate("SEX") is False


class TestCourseSchemas:
    """Tests for course route schemas."""

    @pytest.mark.unit
    @pytest.mark.parametrize("code", ["S", "SOFTW", "S3", "S E"])
    def test_invalid_course_code(self, code):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_COURSE, {"course_code": code, "course_name": "X"})

        assert exc_info.value.field == "course_code"
        assert exc_info.value.message.startswith("Invalid course code format")

    @pytest.mark.unit
    def test_course_name_is_trimmed_and_bounded(self):
        result = validate(CREATE_COURSE, {"course_code": "SE", "course_name": "  Law  "})
        assert result["course_name"] == "Law"

        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_COURSE, {"course_code": "SE", "course_name": "x" * 101})
        assert exc_info.value.message == "Course name must not exceed 100 characters"

    @pytest.mark.unit
    def test_course_id_path_param_becomes_int(self):
        assert validate(COURSE_ID_PARAM, {"course_id": "5"}) == {"course_id": 5}

        with pytest.raises(ValidationFailure) as exc_info:
            validate(COURSE_ID_PARAM, {"course_id": "five"})
        assert exc_info.value.error_code == "INVALID_COURSE_ID_400"

    @pytest.mark.unit
    def test_update_requires_positive_course_id(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(UPDATE_COURSE, {"course_code": "SE", "course_name": "X", "course_id": 0})

        assert exc_info.value.message == "Course ID must be positive"


class TestStudentSchemas:
    """Tests for student route schemas."""

    @pytest.mark.unit
    def test_valid_student_is_normalized(self):
        result = validate(CREATE_STUDENT, valid_student(address=None, gender="Female"))

        assert result == {
            "student_number": "SE03001",
            "mykad_number": "030115141234",
            "email": "aisyah@example.com",
            "student_name": "Aisyah Rahman",
            "address": None,
            "gender": "Female",
        }

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "mykad,message",
        [
            ("0301151412", "MyKad number must be exactly 12 digits"),
            ("03011514123X", "MyKad number must contain only digits"),
            ("031315141234", "Invalid MyKad number format (YYMMDDxxxxxx)"),
            ("030132141234", "Invalid MyKad number format (YYMMDDxxxxxx)"),
            ("030100141234", "Invalid MyKad number format (YYMMDDxxxxxx)"),
            ("٠٣٠١١٥١٤١٢٣٤", "MyKad number must contain only digits"),
        ],
    )
    def test_invalid_mykad(self, mykad, message):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_STUDENT, valid_student(mykad_number=mykad))

        assert exc_info.value.field == "mykad_number"
        assert exc_info.value.message == message

    @pytest.mark.unit
    @pytest.mark.parametrize("number", ["S03001", "SE031", "SOFTW03001", "SE030011"])
    def test_invalid_student_number(self, number):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_STUDENT, valid_student(student_number=number))

        assert exc_info.value.error_code == "INVALID_STUDENT_NUMBER_400"

    @pytest.mark.unit
    def test_invalid_email(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_STUDENT, valid_student(email="not-an-email"))

        assert exc_info.value.message == "Invalid email format"

    @pytest.mark.unit
    def test_gender_must_be_known(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_STUDENT, valid_student(gender="Other"))

        assert exc_info.value.field == "gender"

    @pytest.mark.unit
    def test_address_too_long(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(CREATE_STUDENT, valid_student(address="x" * 256))

        assert exc_info.value.message == "Address must not exceed 255 characters"

    @pytest.mark.unit
    def test_update_checks_student_id_first(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(UPDATE_STUDENT, {"mykad_number": "bad"})

        assert exc_info.value.field == "student_id"

    @pytest.mark.unit
    def test_student_id_param(self):
        assert validate(STUDENT_ID_PARAM, {"student_id": "12"}) == {"student_id": 12}

    @pytest.mark.unit
    @pytest.mark.parametrize("student_id", ["١٢", str(2**31), "99999999999999999999"])
    def test_student_id_param_rejects_unbindable_ids(self, student_id):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(STUDENT_ID_PARAM, {"student_id": student_id})

        assert exc_info.value.error_code == "INVALID_STUDENT_ID_400"

    @pytest.mark.unit
    def test_update_rejects_oversized_student_id(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate(UPDATE_STUDENT, {"student_id": 10**20})

        assert exc_info.value.field == "student_id"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "number,prefix",
        [("SE03001", "SE"), ("LAW0504", "LAW"), ("MEDS12345", "MEDS"), ("03001", None), ("", None)],
    )
    def test_extract_prefix(self, number, prefix):
        assert extract_student_number_prefix(number) == prefix
