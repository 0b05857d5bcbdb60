"""Tests for validation.py - table key, field key, row shape and name checks."""

import pytest

from tablestage.models.validation import (
    validate_field_keys,
    validate_names,
    validate_row_shape,
    validate_table_key,
)


class TestValidateTableKey:
    """Tests for validate_table_key()."""

    def test_valid(self):
        is_valid, error = validate_table_key("Joint Coordinates")
        assert is_valid is True
        assert error == ""

    @pytest.mark.parametrize("key", ["", "   "])
    def test_blank(self, key):
        is_valid, error = validate_table_key(key)
        assert is_valid is False
        assert "empty" in error

    def test_not_a_string(self):
        is_valid, error = validate_table_key(None)
        assert is_valid is False
        assert "NoneType" in error


class TestValidateFieldKeys:
    """Tests for validate_field_keys()."""

    def test_valid(self):
        assert validate_field_keys(["Name", "Value"]) == (True, "")

    def test_empty(self):
        is_valid, error = validate_field_keys([])
        assert is_valid is False
        assert "At least one" in error

    def test_duplicate(self):
        is_valid, error = validate_field_keys(["Name", "Value", "Name"])
        assert is_valid is False
        assert "Duplicate field key: Name" in error

    def test_blank_key(self):
        is_valid, _ = validate_field_keys(["Name", ""])
        assert is_valid is False

    def test_bare_string_rejected(self):
        """A string is a sequence of characters, not of field keys."""
        is_valid, _ = validate_field_keys("Name")
        assert is_valid is False


class TestValidateRowShape:
    """Tests for validate_row_shape()."""

    def test_whole_rows_without_count(self):
        assert validate_row_shape(2, 4) == (True, "")

    def test_partial_row_without_count(self):
        is_valid, error = validate_row_shape(2, 3)
        assert is_valid is False
        assert "not a multiple" in error

    def test_exact_count(self):
        assert validate_row_shape(3, 6, row_count=2) == (True, "")

    def test_count_mismatch(self):
        is_valid, error = validate_row_shape(2, 4, row_count=3)
        assert is_valid is False
        assert "Expected 6 cells" in error

    def test_negative_count(self):
        is_valid, _ = validate_row_shape(2, 0, row_count=-1)
        assert is_valid is False

    def test_no_fields(self):
        assert validate_row_shape(0, 0) == (True, "")
        is_valid, _ = validate_row_shape(0, 2)
        assert is_valid is False

    def test_zero_rows(self):
        assert validate_row_shape(2, 0, row_count=0) == (True, "")


class TestValidateNames:
    """Tests for validate_names()."""

    def test_valid(self):
        assert validate_names(["Dead", "Live"]) == (True, "")

    def test_empty(self):
        is_valid, _ = validate_names([])
        assert is_valid is False

    def test_blank_name(self):
        is_valid, error = validate_names(["Dead", " "])
        assert is_valid is False
        assert "Invalid name" in error
