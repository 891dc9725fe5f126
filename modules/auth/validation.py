"""Input validation rules for signup and signin."""

import re

from shared.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def is_valid_email(email: str) -> bool:
    """Simple local@domain.tld shape check."""
    return bool(EMAIL_PATTERN.match(email))


def validate_email(email: str) -> None:
    if not is_valid_email(email):
        raise ValidationError("Invalid email format", code="INVALID_EMAIL")


def validate_password(password: str) -> None:
    """Length 6-128 with at least one letter and one digit."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
            code="INVALID_PASSWORD",
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"Password must be at most {PASSWORD_MAX_LENGTH} characters long",
            code="INVALID_PASSWORD",
        )
    if not re.search(r"[A-Za-z]", password) or not re.search(r"\d", password):
        raise ValidationError(
            "Password must contain at least one letter and one number",
            code="INVALID_PASSWORD",
        )


def validate_name(name: str) -> None:
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
            code="INVALID_NAME",
        )
