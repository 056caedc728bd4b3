"""
Token transfers and recipient lookup.
"""

from typing import Any, Dict, List, Optional

from shared.errors import ErrorKind
from ..accessor import message_from_response
from .base import LiskResource
from .keys import funds_keys, recipient_key
from .lisk_api import path_segment


class TransfersResource(LiskResource):
    name = "transfers"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        self.recipient = self.reader(
            "recipient",
            success_message="Recipient fetched successfully.",
            error_messages={
                ErrorKind.VALIDATION: "Invalid identifier provided.",
                ErrorKind.NOT_FOUND: "Recipient not found.",
            },
            failure_message="Failed to fetch recipient.",
        )
        self.transfer = self.writer(
            "transfer",
            success_message=message_from_response("Transfer executed successfully."),
            error_messages={ErrorKind.VALIDATION: "Invalid input or validation error."},
            failure_message="Failed to execute transfer.",
        )
        self.batch = self.writer(
            "batch_transfer",
            success_message=message_from_response("Batch transfer executed successfully."),
            error_messages={ErrorKind.VALIDATION: "Invalid input or validation error."},
            failure_message="Failed to execute batch transfer.",
        )

    async def fetch_recipient(self, identifier: str) -> Optional[Dict[str, Any]]:
        """Resolve an email, phone number or payment id to a recipient."""
        return await self.recipient.fetch(
            recipient_key(identifier),
            lambda: self.api.get(f"/recipient/{path_segment(identifier)}"),
        )

    async def make_transfer(
        self,
        user_id: str,
        amount: float,
        recipient: str,
        notes: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        payload = {
            "transactionAmount": amount,
            "transactionRecipient": recipient,
            "transactionNotes": notes or "",
        }
        return await self.transfer.mutate(
            lambda: self.api.post(f"/transfer/{path_segment(user_id)}", payload),
            invalidates=funds_keys(user_id),
        )

    async def make_batch_transfer(
        self,
        user_id: str,
        payments: List[Dict[str, Any]],
        notes: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """payments is a list of ``{"recipient", "amount"}`` dicts."""
        payload = {"payments": payments, "transactionNotes": notes or ""}
        return await self.batch.mutate(
            lambda: self.api.post(f"/transfer/batch/{path_segment(user_id)}", payload),
            invalidates=funds_keys(user_id),
        )
