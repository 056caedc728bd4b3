"""
Merchant staff resource.
"""

from typing import Any, Dict, List, Optional

from .base import LiskResource
from .keys import staff_key
from .lisk_api import path_segment


def _assignment_message(result: Any) -> str:
    if isinstance(result, dict) and result.get("success") is False:
        return str(result.get("message") or "Failed to assign staff.")
    return "Staff assigned successfully."


class StaffResource(LiskResource):
    name = "staff"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        self.staff = self.reader(
            "staff",
            default=[],
            success_message="Fetched staff successfully.",
            hit_message="Fetched staff from cache.",
            failure_message="Failed to fetch staff.",
            prefer_remote_message=True,
        )
        self.assign = self.writer(
            "assign_staff",
            success_message=_assignment_message,
            failure_message="Failed to assign staff.",
            prefer_remote_message=True,
        )
        self.remove = self.writer(
            "remove_staff",
            success_message="Staff removed successfully.",
            failure_message="Failed to remove staff.",
            prefer_remote_message=True,
        )

    async def fetch_staff(self, merchant_id: str) -> List[Dict[str, Any]]:
        async def load():
            return await self.api.get(f"/staff/{path_segment(merchant_id)}") or []

        return await self.staff.fetch(staff_key(merchant_id), load)

    async def assign_staff(self, merchant_id: str, staff_input: str) -> Optional[Dict[str, Any]]:
        """Assign a user (by email or id) as staff of merchant_id."""
        return await self.assign.mutate(
            lambda: self.api.post(f"/staff/{path_segment(merchant_id)}", {"input": staff_input}),
            invalidates=[staff_key(merchant_id)],
            refetch=lambda: self.fetch_staff(merchant_id),
        )

    async def remove_staff(self, merchant_id: str, staff_id: str) -> Optional[Dict[str, Any]]:
        return await self.remove.mutate(
            lambda: self.api.delete(
                f"/staff/{path_segment(merchant_id)}/{path_segment(staff_id)}"
            ),
            invalidates=[staff_key(merchant_id)],
            refetch=lambda: self.fetch_staff(merchant_id),
        )
