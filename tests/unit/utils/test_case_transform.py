"""
Unit tests for the case transformer.

Tests key conversion rules, recursion and exclusions.
"""

import pytest

from monash_api.utils.case_transform import (
    CaseTransformer,
    JsonKind,
    kind_of,
    to_camel_case,
    to_snake_case,
)


class TestKeyRules:
    """Tests for single-key conversion."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "snake,camel",
        [
            ("course_code", "courseCode"),
            ("student_number", "studentNumber"),
            ("total_pages", "totalPages"),
            ("address_line_1", "addressLine1"),
            ("id", "id"),
        ],
    )
    def test_snake_to_camel_and_back(self, snake, camel):
        """Canonical snake_case keys survive a round trip."""
        assert to_camel_case({snake: 1}) == {camel: 1}
        assert to_snake_case({camel: 1}) == {snake: 1}

    @pytest.mark.unit
    def test_capital_run_splits_before_last_capital(self):
        assert to_snake_case({"HTTPStatus": 1}) == {"http_status": 1}

    @pytest.mark.unit
    def test_non_canonical_digit_key_is_normalized(self):
        """address_line1 comes back with the digit as its own word."""
        camel = to_camel_case({"address_line1": 1})
        assert camel == {"addressLine1": 1}
        assert to_snake_case(camel) == {"address_line_1": 1}

    @pytest.mark.unit
    def test_already_camel_is_unchanged(self):
        data = {"courseCode": "SE", "hasNext": True}
        assert to_camel_case(data) == data

    @pytest.mark.unit
    def test_already_snake_is_unchanged(self):
        data = {"course_code": "SE", "has_next": True}
        assert to_snake_case(data) == data


class TestRecursion:
    """Tests for nested structures and values."""

    @pytest.mark.unit
    def test_nested_mappings_and_arrays(self):
        data = {
            "page_data": [
                {"course_id": 1, "course_info": {"course_name": "Law"}},
                {"course_id": 2, "course_info": None},
            ],
            "pagination": {"total_pages": 1, "has_prev": False},
        }

        assert to_camel_case(data) == {
            "pageData": [
                {"courseId": 1, "courseInfo": {"courseName": "Law"}},
                {"courseId": 2, "courseInfo": None},
            ],
            "pagination": {"totalPages": 1, "hasPrev": False},
        }

    @pytest.mark.unit
    def test_values_are_never_touched(self):
        data = {"course_name": "software_engineering", "tags": ["snake_case", "x_y"]}
        result = to_camel_case(data)
        assert result == {"courseName": "software_engineering", "tags": ["snake_case", "x_y"]}

    @pytest.mark.unit
    def test_returns_a_copy(self):
        data = {"course_info": {"course_name": "Law"}}
        result = to_camel_case(data)
        result["courseInfo"]["courseName"] = "Medicine"
        assert data["course_info"]["course_name"] == "Law"

    @pytest.mark.unit
    def test_tuples_become_lists(self):
        assert to_camel_case(({"course_id": 1},)) == [{"courseId": 1}]

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, {}, [], "course_code", 42, 1.5, True])
    def test_empty_and_scalar_input_returned_as_is(self, value):
        assert to_camel_case(value) == value
        assert to_snake_case(value) == value

    @pytest.mark.unit
    def test_round_trip_is_stable(self):
        """toCamel(toSnake(toCamel(M))) == toCamel(M)."""
        data = {"student_id": 1, "course": {"course_code": "SE"}, "rows": [{"has_next": True}]}
        once = to_camel_case(data)
        assert to_camel_case(to_snake_case(once)) == once


class TestExclusions:
    """Tests for keys that are passed through."""

    @pytest.mark.unit
    def test_leading_underscore_keys_untouched(self):
        data = {"_internal_key": 1, "course_code": "SE"}
        assert to_camel_case(data) == {"_internal_key": 1, "courseCode": "SE"}

    @pytest.mark.unit
    def test_non_string_keys_untouched(self):
        assert to_camel_case({1: "a", "course_id": 2}) == {1: "a", "courseId": 2}

    @pytest.mark.unit
    def test_custom_exclusion_pattern(self):
        transformer = CaseTransformer(exclude=(r"^x_",))
        result = transformer.to_camel({"x_keep_me": 1, "_drop_prefix": 2})
        assert result == {"x_keep_me": 1, "_dropPrefix": 2}


class TestKindOf:
    """Tests for JSON value classification."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,kind",
        [
            (None, JsonKind.NULL),
            ({}, JsonKind.OBJECT),
            ([], JsonKind.ARRAY),
            ((1, 2), JsonKind.ARRAY),
            ("text", JsonKind.SCALAR),
            (b"bytes", JsonKind.SCALAR),
            (0, JsonKind.SCALAR),
        ],
    )
    def test_kind_of(self, value, kind):
        assert kind_of(value) is kind
