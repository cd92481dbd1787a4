"""Helpers for the registration form that feeds candidates into the directory."""
from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidArgument
from .models import DEFAULT_ROLE

_STRENGTH_LABELS = {0: "weak", 1: "medium", 3: "strong"}


def passwords_match(password: Any, confirm: Any) -> bool:
    return isinstance(password, str) and isinstance(confirm, str) and password == confirm


def password_strength(password: Any) -> str:
    """Grade a password as ``weak``, ``medium``, ``strong`` or ``very strong``.

    One point each for 8+ characters, 12+ characters, an uppercase letter, a
    digit and a symbol. Scores without a dedicated label are ``very strong``.
    """

    if not isinstance(password, str):
        return "weak"

    score = sum(
        (
            len(password) >= 8,
            len(password) >= 12,
            re.search(r"[A-Z]", password) is not None,
            re.search(r"[0-9]", password) is not None,
            re.search(r"[^a-zA-Z0-9]", password) is not None,
        )
    )
    return _STRENGTH_LABELS.get(score, "very strong")


def sanitize_user_form(form: Any) -> Dict[str, str]:
    if not isinstance(form, Mapping):
        raise InvalidArgument("form data must be a mapping")
    name = form.get("name")
    email = form.get("email")
    role = form.get("role")
    return {
        "name": name.strip() if name else "",
        "email": email.strip().lower() if email else "",
        "role": role.strip() if role else DEFAULT_ROLE,
    }


def field_error(field_name: str, errors: Any) -> Optional[str]:
    """Return the first message in ``errors`` that mentions ``field_name``."""

    if not isinstance(errors, (list, tuple)):
        return None
    needle = field_name.lower()
    return next((error for error in errors if needle in error.lower()), None)


def is_form_ready(fields: Any) -> bool:
    if not isinstance(fields, Mapping):
        return False
    name = fields.get("name")
    email = fields.get("email")
    password = fields.get("password")
    return (
        isinstance(name, str)
        and len(name.strip()) >= 2
        and isinstance(email, str)
        and "@" in email
        and isinstance(password, str)
        and len(password) >= 8
        and password == fields.get("confirm")
    )


__all__ = [
    "field_error",
    "is_form_ready",
    "password_strength",
    "passwords_match",
    "sanitize_user_form",
]
