"""Reusable input validators for the pydantic schemas.

- String sanitisation (trim + length)
- Required-text checks
- Grade / lot / box code normalisation
"""

import re

CODE_REGEX = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._/-]*$")


def sanitize_string(value: str, max_length: int = 1000) -> str:
    """Trim whitespace and enforce a maximum length.

    Raises:
        ValueError: If validation fails
    """
    if not isinstance(value, str):
        raise ValueError("Must be a string")

    value = value.strip()
    if len(value) > max_length:
        raise ValueError(f"String too long (max {max_length} characters)")
    return value


def require_text(value: str, max_length: int = 255) -> str:
    """Sanitise and reject blank strings."""
    value = sanitize_string(value, max_length)
    if not value:
        raise ValueError("Must not be empty")
    return value


def optional_text(value: str | None, max_length: int = 1000) -> str | None:
    """Sanitise; blank becomes None."""
    if value is None:
        return None
    value = sanitize_string(value, max_length)
    return value or None


def normalize_code(value: str, max_length: int = 50) -> str:
    """Validate a business code (lot number, box number, grade code).

    Codes are trimmed and must start with a letter or digit; grade codes
    are additionally upper-cased by the grade schemas.
    """
    value = require_text(value, max_length)
    if not CODE_REGEX.match(value):
        raise ValueError("Invalid code format")
    return value
