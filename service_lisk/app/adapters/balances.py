"""
Token balances resource.
"""

from typing import Any, Dict, List

from shared.errors import ErrorKind
from .base import LiskResource
from .keys import user_balances_key
from .lisk_api import path_segment


class BalancesResource(LiskResource):
    name = "balances"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)
        self.balances = self.reader(
            "balances",
            default=[],
            success_message="Fetched balances successfully.",
            error_messages={
                ErrorKind.VALIDATION: "Invalid user ID.",
                ErrorKind.NOT_FOUND: "User not found.",
            },
            failure_message="Failed to fetch balances.",
        )

    async def fetch_balances(self, user_id: str) -> List[Dict[str, Any]]:
        """Token balances for a user, e.g. ``[{"name": "LZAR", "balance": 12.5}]``."""
        async def load():
            data = await self.api.get(f"/{path_segment(user_id)}/balance")
            return (data or {}).get("tokens") or []

        return await self.balances.fetch(user_balances_key(user_id), load)
