"""In-memory user directory with validation and session helpers."""

from __future__ import annotations

from .auth import (
    decode_session_token,
    format_full_name,
    generate_session_token,
    has_permission,
    hash_password,
    is_session_expired,
    verify_password,
)
from .directory import (
    create_user,
    delete_user,
    filter_by_role,
    find_user_by_email,
    find_user_by_id,
    search_users,
    sort_users_by_name,
    update_user,
)
from .errors import UserDirectoryError
from .models import UserRecord, ValidationResult
from .validation import is_adult, is_valid_email, is_valid_phone, validate_password, validate_user

__all__ = [
    "UserDirectoryError",
    "UserRecord",
    "ValidationResult",
    "create_user",
    "decode_session_token",
    "delete_user",
    "filter_by_role",
    "find_user_by_email",
    "find_user_by_id",
    "format_full_name",
    "generate_session_token",
    "has_permission",
    "hash_password",
    "is_adult",
    "is_session_expired",
    "is_valid_email",
    "is_valid_phone",
    "search_users",
    "sort_users_by_name",
    "update_user",
    "validate_password",
    "validate_user",
    "verify_password",
]
