"""Collaborators behind the user-management adapter.

The identity service owns ids, emails and passwords; the profile store owns
everything else. Both are external in production, so the adapter only sees
these protocols. The in-memory implementations back tests and local runs,
with per-operation failure injection::

    >>> profiles = InMemoryProfileStore()
    >>> profiles.fail("insert", "connection reset")
    >>> await profiles.insert(UserProfile(id="u1"))  # raises ProfileStoreError
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from flightforum.models import UserProfile

# Profile-store code for "no row matched"
PROFILE_NOT_FOUND_CODE = "PGRST116"


def utcnow() -> datetime:
    return datetime.now(UTC)


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────

class IdentityServiceError(Exception):
    """Identity-service call failed."""


class ProfileStoreError(Exception):
    """Profile-store call failed; ``code`` is the store's error code."""

    def __init__(self, message: str, code: str = "") -> None:
        self.code = code
        super().__init__(message)


class ProfileNotFound(ProfileStoreError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"No profile for user {user_id}", code=PROFILE_NOT_FOUND_CODE)


# ─────────────────────────────────────────────────────────────────────────────
# Protocols
# ─────────────────────────────────────────────────────────────────────────────

class IdentityRecord(BaseModel):
    """Identity-service view of a user."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    created_at: datetime = Field(default_factory=utcnow)


@runtime_checkable
class IdentityService(Protocol):
    async def create_user(self, email: str, password: str) -> IdentityRecord: ...
    async def get_user(self, user_id: str) -> IdentityRecord: ...
    async def list_users(self) -> list[IdentityRecord]: ...
    async def delete_user(self, user_id: str) -> None: ...


@runtime_checkable
class ProfileStore(Protocol):
    async def insert(self, profile: UserProfile) -> UserProfile: ...
    async def get(self, user_id: str) -> UserProfile: ...
    async def find_by_username(self, username: str) -> UserProfile | None: ...
    async def update(self, user_id: str, changes: dict[str, Any]) -> UserProfile: ...
    async def delete(self, user_id: str) -> None: ...


# ─────────────────────────────────────────────────────────────────────────────
# In-memory implementations
# ─────────────────────────────────────────────────────────────────────────────

class _FailureInjection:
    """Make named operations raise until cleared."""

    _error_type: type[Exception] = Exception

    def __init__(self) -> None:
        self._failures: dict[str, str] = {}

    def fail(self, operation: str, message: str = "injected failure") -> None:
        self._failures[operation] = message

    def clear_failures(self) -> None:
        self._failures.clear()

    def _check(self, operation: str) -> None:
        if (message := self._failures.get(operation)) is not None:
            raise self._error_type(message)


class InMemoryIdentityService(_FailureInjection):
    _error_type = IdentityServiceError

    def __init__(self) -> None:
        super().__init__()
        self._users: dict[str, IdentityRecord] = {}
        self._passwords: dict[str, str] = {}

    async def create_user(self, email: str, password: str) -> IdentityRecord:
        self._check("create_user")
        if len(password) < 6:
            raise IdentityServiceError("Password should be at least 6 characters")
        if any(u.email == email for u in self._users.values()):
            raise IdentityServiceError("A user with this email address has already been registered")
        record = IdentityRecord(id=str(uuid.uuid4()), email=email)
        self._users[record.id] = record
        self._passwords[record.id] = password
        return record

    async def get_user(self, user_id: str) -> IdentityRecord:
        self._check("get_user")
        try:
            return self._users[user_id]
        except KeyError:
            raise IdentityServiceError("User not found") from None

    async def list_users(self) -> list[IdentityRecord]:
        self._check("list_users")
        return list(self._users.values())

    async def delete_user(self, user_id: str) -> None:
        self._check("delete_user")
        if self._users.pop(user_id, None) is None:
            raise IdentityServiceError("User not found")
        self._passwords.pop(user_id, None)


class InMemoryProfileStore(_FailureInjection):
    """Profiles keyed by user id.

    Username uniqueness is *not* enforced here; the adapter's check-then-write
    is the only guard.
    """

    _error_type = ProfileStoreError

    def __init__(self) -> None:
        super().__init__()
        self._rows: dict[str, UserProfile] = {}

    def __len__(self) -> int:
        return len(self._rows)

    async def insert(self, profile: UserProfile) -> UserProfile:
        self._check("insert")
        if profile.id in self._rows:
            raise ProfileStoreError("duplicate key value violates unique constraint \"profiles_pkey\"", code="23505")
        self._rows[profile.id] = profile
        return profile

    async def get(self, user_id: str) -> UserProfile:
        self._check("get")
        try:
            return self._rows[user_id]
        except KeyError:
            raise ProfileNotFound(user_id) from None

    async def find_by_username(self, username: str) -> UserProfile | None:
        self._check("find_by_username")
        return next((p for p in self._rows.values() if p.username == username), None)

    async def update(self, user_id: str, changes: dict[str, Any]) -> UserProfile:
        self._check("update")
        if user_id not in self._rows:
            raise ProfileNotFound(user_id)
        updated = self._rows[user_id].model_copy(update=changes)
        self._rows[user_id] = updated
        return updated

    async def delete(self, user_id: str) -> None:
        self._check("delete")
        self._rows.pop(user_id, None)
