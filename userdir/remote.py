"""HTTP client for the public user APIs used to seed the directory."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .auth import format_full_name
from .config import Settings
from .errors import InvalidArgument, MissingArgument, MissingField, NetworkError
from .models import DEFAULT_ROLE

logger = logging.getLogger("userdir.remote")

MAX_BATCH_SIZE = 100


class RemoteUserCreate(BaseModel):
    """Body submitted when creating a user on the remote API."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    role: str = DEFAULT_ROLE

    @field_validator("name", "email")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class RemoteUserCreated(BaseModel):
    """Response returned by the remote API once a user has been created."""

    model_config = ConfigDict(extra="allow")

    id: int


def _build_endpoint(base_url: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url.rstrip('/')}{path}"


class RemoteUserClient:
    """Fetch and create user-shaped records through public REST APIs."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug("%s %s", method, url)
        sender = httpx.get if method == "GET" else httpx.post
        try:
            response = sender(url, timeout=self._settings.http_timeout, **kwargs)
        except httpx.RequestError as exc:
            raise NetworkError(f"Network error: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("%s %s failed with HTTP %s", method, url, response.status_code)
            raise NetworkError(
                f"Network error: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                "Remote API returned an invalid response",
                status_code=response.status_code,
            ) from exc

    def _fetch_results(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        payload = self._request("GET", self._settings.random_user_url, **kwargs)
        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list) or not results:
            raise NetworkError("Remote API response did not contain any results")
        return results

    def fetch_random_user(self) -> Dict[str, Any]:
        return self._fetch_results()[0]

    def fetch_multiple_users(self, count: int = 5) -> List[Dict[str, Any]]:
        """Return ``count`` random users (between 1 and 100)."""

        if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= MAX_BATCH_SIZE:
            raise InvalidArgument(f"count must be an integer between 1 and {MAX_BATCH_SIZE}")
        return self._fetch_results({"results": count})

    def create_user_remote(self, user_data: Mapping[str, Any]) -> Dict[str, Any]:
        """Submit ``user_data`` for creation and return the record with its assigned id."""

        if not isinstance(user_data, Mapping) or not user_data.get("name") or not user_data.get("email"):
            raise MissingField("name and email are required")
        try:
            body = RemoteUserCreate.model_validate(dict(user_data))
        except ValidationError as exc:
            raise InvalidArgument(f"Invalid user payload: {exc}") from exc

        url = _build_endpoint(self._settings.profile_api_url, "/users")
        payload = self._request("POST", url, json=body.model_dump())
        try:
            created = RemoteUserCreated.model_validate(payload)
        except ValidationError as exc:
            raise NetworkError("Remote API returned an unexpected user payload") from exc
        logger.info("Remote API created user #%s", created.id)
        return created.model_dump()

    def fetch_user_profile(self, user_id: int) -> Dict[str, Any]:
        if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
            raise InvalidArgument("Invalid user id")
        url = _build_endpoint(self._settings.profile_api_url, f"/users/{user_id}")
        payload = self._request("GET", url)
        if not isinstance(payload, dict):
            raise NetworkError("Remote API returned an unexpected user payload")
        return payload


def to_candidate(remote_user: Mapping[str, Any]) -> Dict[str, str]:
    """Flatten a randomuser.me result into a ``{name, email}`` candidate record."""

    if not isinstance(remote_user, Mapping):
        raise InvalidArgument("remote user must be a mapping")
    name = remote_user.get("name")
    if isinstance(name, Mapping):
        try:
            full_name = format_full_name(name.get("first"), name.get("last"))
        except MissingArgument as exc:
            raise MissingField("remote user is missing a first or last name") from exc
    elif isinstance(name, str) and name.strip():
        full_name = name.strip()
    else:
        raise MissingField("remote user is missing a name")

    email = remote_user.get("email")
    if not isinstance(email, str) or not email.strip():
        raise MissingField("remote user is missing an email")
    return {"name": full_name, "email": email.strip()}


__all__ = ["RemoteUserClient", "RemoteUserCreate", "RemoteUserCreated", "to_candidate"]
