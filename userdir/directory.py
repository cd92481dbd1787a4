"""Create, query, update and delete operations over a user collection.

Every function takes the collection explicitly and never mutates it; the
operations that change the directory return a new list. Records that are not
touched are shared between the input and the result.
"""
from __future__ import annotations

import dataclasses
import logging
import unicodedata
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import DuplicateEmail, InvalidArgument, MissingField, NotFound
from .models import CORE_FIELDS, DEFAULT_ROLE, IMMUTABLE_FIELDS, UserRecord

logger = logging.getLogger("userdir.directory")

SORT_ORDERS = ("asc", "desc")


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _ensure_sequence(users: Any) -> List[UserRecord]:
    if isinstance(users, (str, bytes)) or not isinstance(users, Sequence):
        raise InvalidArgument("users must be a sequence")
    records: List[UserRecord] = []
    for user in users:
        if isinstance(user, UserRecord):
            records.append(user)
        elif isinstance(user, Mapping):
            records.append(UserRecord.from_dict(user))
        else:
            raise InvalidArgument("users must contain user records")
    return records


def _same_id(left: Any, right: Any) -> bool:
    # 1, 1.0 and True are distinct ids.
    return type(left) is type(right) and left == right


def _collation_key(name: Any) -> tuple:
    text = name or ""
    folded = "".join(
        char for char in unicodedata.normalize("NFKD", text) if not unicodedata.combining(char)
    )
    return (folded.casefold(), text)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _next_id(users: Sequence[UserRecord], now: datetime) -> int:
    """Return a millisecond timestamp, bumped past the largest integer id in use."""

    candidate = int(now.timestamp() * 1000)
    existing = [
        user.id for user in users if isinstance(user.id, int) and not isinstance(user.id, bool)
    ]
    if existing:
        candidate = max(candidate, max(existing) + 1)
    return candidate


def _require_user(users: Sequence[UserRecord], user_id: Any) -> UserRecord:
    user = find_user_by_id(users, user_id)
    if user is None:
        logger.warning("User %r not found", user_id)
        raise NotFound(user_id)
    return user


def create_user(users: Sequence[UserRecord], new_user: Mapping[str, Any]) -> List[UserRecord]:
    """Return a new collection with ``new_user`` appended.

    ``name`` and ``email`` are required. The email is trimmed and lower-cased and
    must not already exist in ``users`` in any casing. The ``role`` defaults to
    ``"user"``; ``id`` and ``created_at`` are assigned here and nowhere else.
    """

    users = _ensure_sequence(users)
    if not isinstance(new_user, Mapping):
        raise InvalidArgument("new_user must be a mapping")

    name = new_user.get("name")
    email = new_user.get("email")
    if not isinstance(name, str) or not isinstance(email, str) or not name.strip() or not email.strip():
        raise MissingField("name and email are required")

    normalized_email = _normalize_email(email)
    if any(_normalize_email(user.email) == normalized_email for user in users):
        logger.warning("Rejected duplicate email %s", normalized_email)
        raise DuplicateEmail(normalized_email)

    role = new_user.get("role")
    created_at = _current_timestamp()
    record = UserRecord(
        id=_next_id(users, created_at),
        name=name.strip(),
        email=normalized_email,
        role=DEFAULT_ROLE if role is None else role,
        created_at=_serialize_datetime(created_at),
    )
    logger.info("Created user #%s: %s <%s>", record.id, record.name, record.email)
    return [*users, record]


def find_user_by_id(users: Sequence[UserRecord], user_id: Any) -> Optional[UserRecord]:
    users = _ensure_sequence(users)
    return next((user for user in users if _same_id(user.id, user_id)), None)


def find_user_by_email(users: Sequence[UserRecord], email: Any) -> Optional[UserRecord]:
    users = _ensure_sequence(users)
    if not isinstance(email, str):
        raise InvalidArgument("email must be a string")
    normalized = _normalize_email(email)
    return next((user for user in users if user.email == normalized), None)


def _apply_updates(user: UserRecord, updates: Mapping[str, Any]) -> UserRecord:
    core: Dict[str, Any] = {}
    extra = dict(user.extra)
    for key, value in updates.items():
        if key in CORE_FIELDS:
            core[key] = value
        else:
            extra[key] = value
    return dataclasses.replace(user, extra=extra, **core)


def update_user(
    users: Sequence[UserRecord],
    user_id: Any,
    updates: Mapping[str, Any],
) -> List[UserRecord]:
    """Return a new collection where the record ``user_id`` carries ``updates``.

    ``id`` and ``created_at`` (or ``createdAt``) in ``updates`` are ignored.
    Email uniqueness is not re-checked here.
    """

    users = _ensure_sequence(users)
    if not isinstance(updates, Mapping):
        raise InvalidArgument("updates must be a mapping")
    _require_user(users, user_id)

    safe_updates = {key: value for key, value in updates.items() if key not in IMMUTABLE_FIELDS}
    logger.info("Updated user #%s fields: %s", user_id, ", ".join(sorted(safe_updates)) or "-")
    return [_apply_updates(user, safe_updates) if _same_id(user.id, user_id) else user for user in users]


def delete_user(users: Sequence[UserRecord], user_id: Any) -> List[UserRecord]:
    users = _ensure_sequence(users)
    _require_user(users, user_id)
    logger.info("Deleted user #%s", user_id)
    return [user for user in users if not _same_id(user.id, user_id)]


def filter_by_role(users: Sequence[UserRecord], role: Any) -> List[UserRecord]:
    users = _ensure_sequence(users)
    if not role or not isinstance(role, str):
        raise InvalidArgument("role must be a non-empty string")
    return [user for user in users if user.role == role]


def search_users(users: Sequence[UserRecord], query: Any) -> List[UserRecord]:
    """Return records whose name or email contains ``query``, ignoring case.

    A blank query returns a copy of the whole collection.
    """

    users = _ensure_sequence(users)
    if not isinstance(query, str):
        raise InvalidArgument("query must be a string")
    if not query.strip():
        return list(users)

    needle = query.lower()
    return [
        user
        for user in users
        if needle in (user.name or "").lower() or needle in (user.email or "").lower()
    ]


def sort_users_by_name(users: Sequence[UserRecord], order: str = "asc") -> List[UserRecord]:
    users = _ensure_sequence(users)
    if order not in SORT_ORDERS:
        raise InvalidArgument("order must be 'asc' or 'desc'")
    return sorted(users, key=lambda user: _collation_key(user.name), reverse=order == "desc")


__all__ = [
    "create_user",
    "delete_user",
    "filter_by_role",
    "find_user_by_email",
    "find_user_by_id",
    "search_users",
    "sort_users_by_name",
    "update_user",
]
