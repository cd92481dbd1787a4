"""Validation predicates for candidate user records."""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, List, Mapping

from .errors import InvalidDate
from .models import ValidationResult

ADULT_AGE = 18
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2

PASSWORD_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
PASSWORD_NO_UPPERCASE = "Password must contain at least one uppercase letter"
PASSWORD_NO_DIGIT = "Password must contain at least one digit"
NAME_TOO_SHORT = f"Name must be at least {MIN_NAME_LENGTH} characters long"
EMAIL_INVALID = "Invalid email"
USER_NOT_ADULT = "User must be an adult"
BIRTH_DATE_INVALID = "Invalid birth date"
USER_INVALID = "invalid user"

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_PHONE_SEPARATORS = re.compile(r"[\s.\-()]")
# French numbering: +33 / 0033 / 0 prefix, then nine significant digits not starting with 0.
_PHONE_PATTERN = re.compile(r"(?:\+33|0033|0)[1-9][0-9]{8}")
_UPPERCASE = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")


def _today() -> date:
    return date.today()


def is_valid_email(email: Any) -> bool:
    """Return ``True`` when ``email`` looks like ``local@domain.tld`` once trimmed."""

    if not isinstance(email, str):
        return False
    return _EMAIL_PATTERN.fullmatch(email.strip()) is not None


def validate_password(password: Any) -> ValidationResult:
    """Check a password against the strength rules, collecting every violation."""

    errors: List[str] = []
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        errors.append(PASSWORD_TOO_SHORT)
    if isinstance(password, str) and not _UPPERCASE.search(password):
        errors.append(PASSWORD_NO_UPPERCASE)
    if isinstance(password, str) and not _DIGIT.search(password):
        errors.append(PASSWORD_NO_DIGIT)
    return ValidationResult.from_errors(errors)


def is_valid_phone(phone: Any) -> bool:
    if not isinstance(phone, str):
        return False
    cleaned = _PHONE_SEPARATORS.sub("", phone)
    return _PHONE_PATTERN.fullmatch(cleaned) is not None


def _parse_birth_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDate("Invalid birth date")

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise InvalidDate("Invalid birth date") from exc


def is_adult(birth_date: Any) -> bool:
    """Return ``True`` if the person born on ``birth_date`` is at least 18 today.

    The eighteenth birthday itself counts as adult. Raises :class:`InvalidDate`
    when the value cannot be parsed as a calendar date.
    """

    birth = _parse_birth_date(birth_date)
    today = _today()
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age >= ADULT_AGE


def validate_user(user: Any) -> ValidationResult:
    """Validate a candidate record before it is added to a directory."""

    if not isinstance(user, Mapping):
        return ValidationResult(valid=False, errors=(USER_INVALID,))

    errors: List[str] = []
    name = user.get("name")
    if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
        errors.append(NAME_TOO_SHORT)
    if not is_valid_email(user.get("email")):
        errors.append(EMAIL_INVALID)
    errors.extend(validate_password(user.get("password")).errors)

    birth_date = user.get("birth_date") or user.get("birthDate")
    if birth_date:
        try:
            if not is_adult(birth_date):
                errors.append(USER_NOT_ADULT)
        except InvalidDate:
            errors.append(BIRTH_DATE_INVALID)

    return ValidationResult.from_errors(errors)


__all__ = [
    "ADULT_AGE",
    "is_adult",
    "is_valid_email",
    "is_valid_phone",
    "validate_password",
    "validate_user",
]
