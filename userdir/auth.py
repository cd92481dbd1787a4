"""Login and session helpers.

``hash_password`` and the session tokens are transparent encodings kept for
compatibility with existing stored values: the hash is reversible and the token
is not signed, so anyone who knows the format can forge one.
"""
from __future__ import annotations

import base64
import binascii
import hmac
import json
import numbers
import time
from typing import Any, Dict, Mapping

from .errors import (
    InvalidArgument,
    InvalidPassword,
    InvalidRole,
    InvalidToken,
    InvalidUser,
    MalformedToken,
    MissingArgument,
)
from .models import ROLE_RANKS, SessionPayload, UserRecord

DEFAULT_SALT = "tp_salt"
DEFAULT_SESSION_TTL_MS = 3_600_000


def _now_ms() -> float:
    return time.time() * 1000


def _capitalize(value: str) -> str:
    cleaned = value.strip()
    return cleaned[:1].upper() + cleaned[1:].lower()


def format_full_name(first_name: Any, last_name: Any) -> str:
    """Return ``"First Last"`` with each part trimmed and capitalised."""

    if not first_name or not last_name or not isinstance(first_name, str) or not isinstance(last_name, str):
        raise MissingArgument("First and last name are required")
    return f"{_capitalize(first_name)} {_capitalize(last_name)}"


def hash_password(password: Any, salt: str = DEFAULT_SALT) -> str:
    if not isinstance(password, str) or not password:
        raise InvalidPassword("Invalid password")
    if not isinstance(salt, str):
        raise InvalidArgument("salt must be a string")
    encoded = base64.b64encode((password + salt).encode("utf-8")).decode("ascii")
    return f"{salt}:{encoded}"


def verify_password(password: Any, stored_hash: Any, salt: str = DEFAULT_SALT) -> bool:
    """Return ``True`` if ``password`` hashes to ``stored_hash`` with ``salt``."""

    if not isinstance(stored_hash, str):
        return False
    expected = hash_password(password, salt)
    return hmac.compare_digest(expected.encode("utf-8"), stored_hash.encode("utf-8"))


def has_permission(user_role: Any, required_role: Any) -> bool:
    """Return ``True`` when ``user_role`` ranks at least as high as ``required_role``."""

    for role in (user_role, required_role):
        if not isinstance(role, str) or role not in ROLE_RANKS:
            raise InvalidRole("Invalid role")
    return ROLE_RANKS[user_role] >= ROLE_RANKS[required_role]


def _payload_from(user: Any) -> SessionPayload:
    if isinstance(user, UserRecord):
        return SessionPayload(id=user.id, email=user.email, role=user.role)
    if isinstance(user, SessionPayload):
        return user
    if isinstance(user, Mapping):
        return SessionPayload(id=user.get("id"), email=user.get("email"), role=user.get("role"))
    raise InvalidUser("Invalid user")


def generate_session_token(user: Any) -> str:
    """Encode ``{id, email, role}`` of ``user`` as a base64 JSON token."""

    payload = _payload_from(user)
    if not payload.id or not payload.email:
        raise InvalidUser("Invalid user")
    raw = json.dumps(payload.to_dict(), separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_session_token(token: Any) -> Dict[str, Any]:
    if not isinstance(token, str) or not token:
        raise InvalidToken("Invalid token")
    try:
        raw = base64.b64decode(token, validate=True).decode("utf-8")
        data = json.loads(raw)
    except (binascii.Error, ValueError) as exc:
        raise MalformedToken("Malformed token") from exc
    if not isinstance(data, dict):
        raise MalformedToken("Malformed token")
    return data


def is_session_expired(created_at_ms: Any, ttl_ms: float = DEFAULT_SESSION_TTL_MS) -> bool:
    """Return ``True`` once strictly more than ``ttl_ms`` has elapsed since creation."""

    if isinstance(created_at_ms, bool) or not isinstance(created_at_ms, numbers.Real):
        raise InvalidArgument("created_at_ms must be a number")
    return _now_ms() - created_at_ms > ttl_ms


__all__ = [
    "DEFAULT_SALT",
    "DEFAULT_SESSION_TTL_MS",
    "decode_session_token",
    "format_full_name",
    "generate_session_token",
    "has_permission",
    "hash_password",
    "is_session_expired",
    "verify_password",
]
