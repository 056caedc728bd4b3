"""
Business (merchant) resource: float balances, gas sponsorship, minting and
pending transaction review.
"""

from typing import Any, Dict, List, Optional

from ..accessor import message_from_response
from .base import LiskResource
from .keys import FLOAT_KEY, pending_transactions_key
from .lisk_api import path_segment


class BusinessResource(LiskResource):
    name = "business"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        self.float_balances = self.reader(
            "float",
            default=[],
            success_message="Fetched token balances successfully.",
            failure_message="Failed to fetch token balances.",
        )
        self.gas = self.writer(
            "enable_gas",
            success_message="Gas allocation successful.",
            failure_message="Failed to enable gas.",
        )
        self.user_gas = self.writer(
            "enable_user_gas",
            success_message="Gas payment activated successfully for user.",
            failure_message="Failed to activate gas payment for user.",
        )
        self.mint = self.writer(
            "mint",
            success_message=message_from_response("Mint operation successful."),
            failure_message="Failed to mint tokens.",
        )
        self.pending = self.reader(
            "pending_transactions",
            success_message="Fetched pending transactions successfully.",
            failure_message="Failed to fetch pending transactions.",
        )

    async def fetch_float(self) -> List[Dict[str, Any]]:
        async def load():
            data = await self.api.get("/float")
            return (data or {}).get("tokens") or []

        return await self.float_balances.fetch(FLOAT_KEY, load)

    async def enable_business_gas(self) -> Optional[Dict[str, Any]]:
        return await self.gas.mutate(lambda: self.api.post("/enable-gas"))

    async def enable_user_gas(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.user_gas.mutate(
            lambda: self.api.post(f"/activate-pay/{path_segment(user_id)}")
        )

    async def mint_stable_coins(
        self,
        transaction_amount: float,
        transaction_recipient: str,
        transaction_notes: str = "",
    ) -> Optional[Dict[str, Any]]:
        payload = {
            "transactionAmount": float(transaction_amount),
            "transactionRecipient": transaction_recipient,
            "transactionNotes": transaction_notes,
        }
        return await self.mint.mutate(
            lambda: self.api.post("/mint", payload),
            invalidates=[FLOAT_KEY],
            refetch=self.fetch_float,
        )

    async def fetch_pending_transactions(self, page: int = 1, page_size: int = 10) -> Optional[Dict[str, Any]]:
        """One page of pending transactions as returned by the API
        (``transactions``, ``total``, ``page``, ``pageSize``, ``totalPages``)."""
        return await self.pending.fetch(
            pending_transactions_key(page, page_size),
            lambda: self.api.get("/transactions/pending", params={"page": page, "pageSize": page_size}),
        )
