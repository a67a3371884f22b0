"""Unit tests for vote count validation and input helpers."""

import pytest

from votetally.core.validation import VoteCountValidator, require_fields, sanitize_string


class TestParseCount:
    @pytest.mark.parametrize("raw,expected", [("", 0), ("0", 0), ("150", 150), ("007", 7)])
    def test_accepts_digits(self, raw, expected):
        assert VoteCountValidator.parse_count(raw) == expected

    @pytest.mark.parametrize("raw", ["-1", "1.5", "12a", " 12", "1e3", "١٢", "12\n"])
    def test_rejects_non_digits(self, raw):
        assert VoteCountValidator.parse_count(raw) is None

    def test_rejects_digit_strings_too_long_to_convert(self):
        assert VoteCountValidator.parse_count("9" * 5000) is None


class TestValidate:
    def test_within_ceiling(self):
        is_valid, errors = VoteCountValidator.validate({"a": 100, "b": 50}, 420)

        assert is_valid
        assert errors == {}

    def test_total_equal_to_ceiling_is_allowed(self):
        is_valid, _ = VoteCountValidator.validate({"a": 400, "b": 20}, 420)

        assert is_valid

    def test_total_exceeds_ceiling(self):
        is_valid, errors = VoteCountValidator.validate({"a": 300, "b": 200}, 420)

        assert not is_valid
        assert errors == {"total": "Total votes (500) cannot exceed registered voters (420)"}

    def test_single_count_exceeds_ceiling(self):
        is_valid, errors = VoteCountValidator.validate({"a": 421}, 420)

        assert not is_valid
        assert errors["a"] == "Votes cannot exceed registered voters (420)"
        assert "total" in errors

    def test_negative_count(self):
        is_valid, errors = VoteCountValidator.validate({"a": -5}, 420)

        assert not is_valid
        assert errors["a"] == "Votes cannot be negative"


def test_require_fields_reports_blank_values():
    errors = require_fields(
        {"name": "  ", "party": "MCP", "ward_id": None}, "Please fill in all fields."
    )

    assert errors == {
        "name": "Please fill in all fields.",
        "ward_id": "Please fill in all fields.",
    }


def test_sanitize_string():
    assert sanitize_string("  Ward 1\x00 ") == "Ward 1"
    assert sanitize_string("x" * 300, max_length=10) == "x" * 10
    assert sanitize_string("") == ""
