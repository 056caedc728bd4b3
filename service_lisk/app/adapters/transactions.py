"""
Transaction history resource.
"""

from typing import Any, Dict, List, Optional

from shared.errors import ErrorKind
from .base import LiskResource
from .keys import transaction_key, user_transactions_key
from .lisk_api import path_segment


class TransactionsResource(LiskResource):
    name = "transactions"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        self.transactions = self.reader(
            "transactions",
            default=[],
            success_message="Fetched transactions successfully.",
            error_messages={ErrorKind.VALIDATION: "Invalid user ID."},
            failure_message="Failed to fetch transactions.",
        )
        self.transaction = self.reader(
            "transaction",
            success_message="Fetched transaction successfully.",
            error_messages={
                ErrorKind.VALIDATION: "Invalid parameters.",
                ErrorKind.NOT_FOUND: "Transaction not found.",
            },
            failure_message="Failed to fetch transaction.",
        )

    async def fetch_transactions(self, user_id: str) -> List[Dict[str, Any]]:
        async def load():
            data = await self.api.get(f"/{path_segment(user_id)}/transactions")
            return (data or {}).get("transactions") or []

        return await self.transactions.fetch(user_transactions_key(user_id), load)

    async def fetch_transaction(self, user_id: str, transaction_id: str) -> Optional[Dict[str, Any]]:
        return await self.transaction.fetch(
            transaction_key(user_id, transaction_id),
            lambda: self.api.get(
                f"/{path_segment(user_id)}/transactions/{path_segment(transaction_id)}"
            ),
        )
