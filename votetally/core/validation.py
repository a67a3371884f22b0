"""Input validation utilities for data entry."""

import re

NUMERIC_PATTERN = re.compile(r"[0-9]+")


class VoteCountValidator:
    """Validate per-candidate vote counts against a center's registered voters."""

    @staticmethod
    def parse_count(raw: str) -> int | None:
        """
        Parse a count typed into a form field.

        Returns:
            The integer value, 0 for an empty field, or None when the input
            contains anything other than digits or is too long to convert.
        """
        if raw == "":
            return 0
        if not NUMERIC_PATTERN.fullmatch(raw):
            return None
        try:
            return int(raw)
        except ValueError:
            # Longer than the interpreter's int string conversion limit
            return None

    @staticmethod
    def count_error(count: int, registered_voters: int) -> str | None:
        """Error for a single candidate's count, if any."""
        if count < 0:
            return "Votes cannot be negative"
        if count > registered_voters:
            return f"Votes cannot exceed registered voters ({registered_voters})"
        return None

    @staticmethod
    def total_error(total: int, registered_voters: int) -> str | None:
        """Error for the sum of all counts, if any."""
        if total > registered_voters:
            return (
                f"Total votes ({total}) cannot exceed registered voters "
                f"({registered_voters})"
            )
        return None

    @classmethod
    def validate(
        cls, counts: dict[str, int], registered_voters: int
    ) -> tuple[bool, dict[str, str]]:
        """
        Validate a full counts mapping.

        Returns:
            Tuple of (is_valid, errors) where errors maps candidate id (or
            "total") to a message.
        """
        errors: dict[str, str] = {}

        for candidate_id, count in counts.items():
            error = cls.count_error(count, registered_voters)
            if error:
                errors[candidate_id] = error

        total_error = cls.total_error(sum(counts.values()), registered_voters)
        if total_error:
            errors["total"] = total_error

        return not errors, errors


def sanitize_string(value: str, max_length: int = 255) -> str:
    """
    Sanitize string input.

    Truncates to max_length, removes null bytes and strips surrounding
    whitespace.
    """
    if not value:
        return ""

    value = value[:max_length]
    value = value.replace("\x00", "")
    return value.strip()


def require_fields(values: dict[str, str | None], message: str) -> dict[str, str]:
    """
    Check that every named field carries a non-blank value.

    Returns:
        A field -> message mapping for the missing fields (empty when all are
        present).
    """
    return {
        field: message
        for field, value in values.items()
        if not value or not str(value).strip()
    }
