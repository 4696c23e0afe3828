"""user-management backend: identity-service plus profile-store orchestration.

Failure policy per tool:

- identity-service failure: the call fails with ``InternalError`` and the
  profile store is not touched
- profile-store failure after a successful identity call: reported as a
  ``warning`` for create/delete, fatal (``InternalError``) for update
- profile "not found" is a soft miss, never a protocol error
- renaming to a username another profile holds is a soft miss too

Username assignment is check-then-write: two concurrent signups deriving the
same name can both pass the check. The in-memory store does not enforce a
unique constraint, so nothing catches that race.
"""

from __future__ import annotations

from typing import Any

from flightforum.foundation.errors import InternalError, MethodNotFoundError
from flightforum.models import (
    CreateUserResult,
    DeleteUserResult,
    UpdateUserResult,
    UserProfile,
    username_from_email,
)
from flightforum.protocol import (
    CreateUserCall,
    CreateUserParams,
    DeleteUserCall,
    GetUserCall,
    GetUserParams,
    ServerName,
    ToolCall,
    ToolCallResult,
    UpdateUserCall,
    UpdateUserParams,
)

from .base import ToolServer, not_found
from .stores import (
    IdentityService,
    IdentityServiceError,
    InMemoryIdentityService,
    InMemoryProfileStore,
    ProfileNotFound,
    ProfileStore,
    ProfileStoreError,
    utcnow,
)

USER_NOT_FOUND = "User not found"
USERNAME_TAKEN = "Username already taken"


def _row(profile: UserProfile) -> dict[str, Any]:
    return profile.model_dump(mode="json", exclude_none=True)


class UserManagementServer(ToolServer):
    """Answers ``create_user``, ``get_user``, ``update_user`` and ``delete_user``."""

    server_name = ServerName.USER_MANAGEMENT

    def __init__(
        self,
        identity: IdentityService | None = None,
        profiles: ProfileStore | None = None,
    ) -> None:
        super().__init__()
        self.identity = identity if identity is not None else InMemoryIdentityService()
        self.profiles = profiles if profiles is not None else InMemoryProfileStore()

    async def _dispatch(self, call: ToolCall) -> ToolCallResult:
        match call:
            case CreateUserCall(arguments=args):
                return await self.create_user(args)
            case GetUserCall(arguments=args):
                return await self.get_user(args)
            case UpdateUserCall(arguments=args):
                return await self.update_user(args)
            case DeleteUserCall(arguments=args):
                return await self.delete_user(args.user_id)
            case _:
                raise MethodNotFoundError(f"{self.name} does not handle {call.tool_name}", tool_name=call.tool_name)

    # ─────────────────────────────────────────────────────────────────────────
    # Tools
    # ─────────────────────────────────────────────────────────────────────────

    async def create_user(self, args: CreateUserParams) -> ToolCallResult:
        try:
            identity = await self.identity.create_user(args.email, args.password)
        except IdentityServiceError as e:
            raise InternalError(str(e), tool_name="create_user") from e

        username = args.username or username_from_email(identity.email)
        warning: str | None = None
        try:
            username = await self.unique_username(username)
            await self.profiles.insert(UserProfile(
                id=identity.id, username=username, full_name=args.full_name, created_at=utcnow(),
            ))
        except ProfileStoreError as e:
            self._log.warning("profile insert failed", user_id=identity.id, error=str(e), code=e.code)
            warning = f"Profile was not created: {e}"

        self._log.info("user created", user_id=identity.id, username=username)
        return ToolCallResult.of(CreateUserResult(
            success=True, user_id=identity.id, email=identity.email, username=username, warning=warning,
        ))

    async def get_user(self, args: GetUserParams) -> ToolCallResult:
        if args.user_id:
            try:
                profile = await self.profiles.get(args.user_id)
            except ProfileNotFound:
                return not_found(USER_NOT_FOUND)
            except ProfileStoreError as e:
                raise InternalError(str(e), tool_name="get_user") from e
            return ToolCallResult.of(_row(profile))

        try:
            users = await self.identity.list_users()
        except IdentityServiceError as e:
            raise InternalError(str(e), tool_name="get_user") from e
        identity = next((u for u in users if u.email == args.email), None)
        if identity is None:
            return not_found(USER_NOT_FOUND)

        try:
            row = _row(await self.profiles.get(identity.id))
        except ProfileNotFound:
            row = {}
        except ProfileStoreError as e:
            raise InternalError(str(e), tool_name="get_user") from e
        return ToolCallResult.of({"id": identity.id, "email": identity.email, **row})

    async def update_user(self, args: UpdateUserParams) -> ToolCallResult:
        try:
            await self.identity.get_user(args.user_id)
        except IdentityServiceError as e:
            raise InternalError(str(e), tool_name="update_user") from e

        try:
            await self.profiles.get(args.user_id)
        except ProfileNotFound:
            return not_found(USER_NOT_FOUND)
        except ProfileStoreError as e:
            raise InternalError(str(e), tool_name="update_user") from e

        changes = {**args.changes(), "updated_at": utcnow()}
        try:
            if changes.get("username"):
                owner = await self.profiles.find_by_username(changes["username"])
                if owner is not None and owner.id != args.user_id:
                    return not_found(USERNAME_TAKEN)
            profile = await self.profiles.update(args.user_id, changes)
        except ProfileStoreError as e:
            raise InternalError(str(e), tool_name="update_user") from e
        return ToolCallResult.of(UpdateUserResult(success=True, user=profile))

    async def delete_user(self, user_id: str) -> ToolCallResult:
        try:
            await self.identity.delete_user(user_id)
        except IdentityServiceError as e:
            raise InternalError(str(e), tool_name="delete_user") from e

        warning: str | None = None
        try:
            await self.profiles.delete(user_id)
        except ProfileStoreError as e:
            self._log.warning("profile delete failed", user_id=user_id, error=str(e), code=e.code)
            warning = f"Profile was not deleted: {e}"
        return ToolCallResult.of(DeleteUserResult(success=True, warning=warning))

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    async def unique_username(self, base: str) -> str:
        """First of ``base``, ``base_1``, ``base_2``... not taken in the profile store."""
        candidate, n = base, 0
        while await self.profiles.find_by_username(candidate) is not None:
            n += 1
            candidate = f"{base}_{n}"
        return candidate
