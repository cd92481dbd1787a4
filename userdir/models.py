"""Domain models for the in-memory user directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

ROLE_RANKS: Mapping[str, int] = MappingProxyType({"admin": 3, "moderator": 2, "user": 1})
DEFAULT_ROLE = "user"

# Keys a caller may never overwrite once a record exists.
IMMUTABLE_FIELDS = frozenset({"id", "created_at", "createdAt"})
CORE_FIELDS = ("id", "name", "email", "role", "created_at")


@dataclass(frozen=True)
class UserRecord:
    """Represents a user entry held in a directory collection."""

    id: Any
    name: str
    email: str
    role: str = DEFAULT_ROLE
    created_at: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def get(self, key: str, default: Any = None) -> Any:
        if key in CORE_FIELDS:
            return getattr(self, key)
        if key == "createdAt":
            return self.created_at
        return self.extra.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at,
        }
        data.update(self.extra)
        return data

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "UserRecord":
        """Build a :class:`UserRecord` from a plain mapping such as a decoded payload."""

        created_at = data.get("created_at", data.get("createdAt"))
        extra = {
            key: value
            for key, value in data.items()
            if key not in CORE_FIELDS and key != "createdAt"
        }
        return UserRecord(
            id=data.get("id"),
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            role=str(data.get("role") or DEFAULT_ROLE),
            created_at=str(created_at) if created_at is not None else None,
            extra=extra,
        )


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a soft validation: ``valid`` is ``True`` iff ``errors`` is empty."""

    valid: bool
    errors: tuple[str, ...] = ()

    @staticmethod
    def from_errors(errors: list[str]) -> "ValidationResult":
        return ValidationResult(valid=not errors, errors=tuple(errors))


@dataclass(frozen=True)
class SessionPayload:
    """Identity bundle carried inside a session token."""

    id: Any
    email: str
    role: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "role": self.role}


__all__ = [
    "CORE_FIELDS",
    "DEFAULT_ROLE",
    "IMMUTABLE_FIELDS",
    "ROLE_RANKS",
    "SessionPayload",
    "UserRecord",
    "ValidationResult",
]
