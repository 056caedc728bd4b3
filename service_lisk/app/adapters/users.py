"""
Users resource.
"""

from typing import Any, Dict, List, Optional

from shared.errors import ErrorKind
from ..accessor import message_from_response
from .base import LiskResource
from .keys import USERS_KEY, user_key
from .lisk_api import path_segment


class UsersResource(LiskResource):
    """List, look up, create, update and delete users."""

    name = "users"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        self.users = self.reader(
            "users",
            default=[],
            success_message="Fetched users successfully.",
            hit_message="Fetched users from cache.",
            failure_message="Failed to fetch users",
            prefer_remote_message=True,
        )
        self.user = self.reader(
            "get_user",
            success_message="Fetched user successfully.",
            hit_message="User found in cache.",
            failure_message="Failed to fetch user",
            prefer_remote_message=True,
        )
        self.create = self.writer(
            "create_user",
            success_message="User created successfully.",
            failure_message="Failed to create user",
            prefer_remote_message=True,
        )
        self.update = self.writer(
            "update_user",
            success_message="User updated successfully.",
            error_messages={
                ErrorKind.VALIDATION: "Validation error.",
                ErrorKind.NOT_FOUND: "User not found.",
            },
            failure_message="Failed to update user.",
        )
        self.delete = self.writer(
            "delete_user",
            success_message=message_from_response("User deleted."),
            error_messages={
                ErrorKind.VALIDATION: "Invalid ID parameter.",
                ErrorKind.NOT_FOUND: "User not found.",
            },
            failure_message="Failed to delete user.",
        )

    async def fetch_users(self) -> List[Dict[str, Any]]:
        async def load():
            data = await self.api.get("/users")
            return (data or {}).get("users") or []

        return await self.users.fetch(USERS_KEY, load)

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Serve from the loaded list when possible, else read through."""
        existing = next(
            (u for u in self.users.data if isinstance(u, dict) and u.get("id") == user_id), None
        )
        if existing is not None:
            self.user.data = existing
            self.user.status.succeed("User found in list.")
            return existing

        async def load():
            data = await self.api.get(f"/users/{path_segment(user_id)}")
            return (data or {}).get("user")

        return await self.user.fetch(user_key(user_id), load)

    async def create_user(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.create.mutate(
            lambda: self.api.post("/users", data),
            invalidates=[USERS_KEY],
            on_success=self._remember,
            refetch=self.fetch_users,
        )

    async def update_user(self, user_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.update.mutate(
            lambda: self.api.put(f"/users/{path_segment(user_id)}", data),
            invalidates=[USERS_KEY, user_key(user_id)],
            on_success=self._remember,
            refetch=self.fetch_users,
        )

    async def delete_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        def forget(_result):
            if isinstance(self.user.data, dict) and self.user.data.get("id") == user_id:
                self.user.data = None

        return await self.delete.mutate(
            lambda: self.api.delete(f"/users/{path_segment(user_id)}"),
            invalidates=[USERS_KEY, user_key(user_id)],
            on_success=forget,
            refetch=self.fetch_users,
        )

    def _remember(self, user: Any) -> None:
        self.user.data = user
