"""
Payment charges resource.

A charge is a payment request created by a merchant; completing it
transfers the amount from the payer and marks the charge COMPLETE.
"""

from typing import Any, Callable, Dict, List, Optional

from shared.errors import ErrorKind, NotFoundError, RemoteServiceError
from .base import LiskResource
from .keys import charge_key, funds_keys, user_charges_key
from .lisk_api import path_segment

CHARGE_COMPLETE = "COMPLETE"


class ChargesResource(LiskResource):
    name = "charges"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        self.charges = self.reader(
            "charges",
            default=[],
            success_message="Fetched charges successfully.",
            error_messages={ErrorKind.VALIDATION: "Invalid parameter."},
            failure_message="Failed to fetch charges.",
        )
        self.charge = self.reader(
            "get_charge",
            success_message="Fetched charge successfully.",
            error_messages={
                ErrorKind.VALIDATION: "Invalid parameters.",
                ErrorKind.NOT_FOUND: "Charge not found.",
            },
            failure_message="Failed to fetch charge.",
        )
        self.create = self.writer(
            "create_charge",
            success_message="Created charge successfully.",
            error_messages={ErrorKind.VALIDATION: "Validation error."},
            failure_message="Failed to create charge.",
        )
        self.update = self.writer(
            "update_charge",
            success_message="Updated charge successfully.",
            error_messages={
                ErrorKind.VALIDATION: "Validation error.",
                ErrorKind.NOT_FOUND: "Charge not found.",
            },
            failure_message="Failed to update charge.",
        )
        self.delete = self.writer(
            "delete_charge",
            success_message="Deleted charge successfully.",
            error_messages={ErrorKind.VALIDATION: "Invalid parameters."},
            failure_message="Failed to delete charge.",
        )
        self.complete = self.writer(
            "complete_charge",
            success_message="Payment successful!",
            error_messages={
                ErrorKind.VALIDATION: "Invalid parameters.",
                ErrorKind.NOT_FOUND: "Charge not found.",
            },
            failure_message="Failed to complete charge.",
        )

    async def fetch_charges(self, user_id: str) -> List[Dict[str, Any]]:
        async def load():
            data = await self.api.get(f"/charge/{path_segment(user_id)}")
            return (data or {}).get("charges") or []

        return await self.charges.fetch(user_charges_key(user_id), load)

    async def get_charge(self, charge_id: str) -> Optional[Dict[str, Any]]:
        async def load():
            data = await self.api.get(f"/retrieve-charge/{path_segment(charge_id)}")
            return (data or {}).get("charge")

        return await self.charge.fetch(charge_key(charge_id), load)

    async def create_charge(
        self,
        user_id: str,
        payment_id: str,
        amount: float,
        note: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        payload = {"paymentId": payment_id, "amount": amount, "note": note}
        return await self.create.mutate(
            lambda: self.api.post(f"/charge/{path_segment(user_id)}/create", payload),
            invalidates=[user_charges_key(user_id)],
            refetch=lambda: self.fetch_charges(user_id),
        )

    async def update_charge(
        self,
        user_id: str,
        charge_id: str,
        note: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        payload = {k: v for k, v in (("note", note), ("status", status)) if v is not None}
        return await self.update.mutate(
            lambda: self.api.put(
                f"/charge/{path_segment(user_id)}/{path_segment(charge_id)}/update", payload
            ),
            invalidates=[user_charges_key(user_id), charge_key(charge_id)],
            refetch=lambda: self.fetch_charges(user_id),
        )

    async def delete_charge(self, user_id: str, charge_id: str) -> Optional[Dict[str, Any]]:
        return await self.delete.mutate(
            lambda: self.api.delete(
                f"/charge/{path_segment(user_id)}/{path_segment(charge_id)}/delete"
            ),
            invalidates=[user_charges_key(user_id), charge_key(charge_id)],
            refetch=lambda: self.fetch_charges(user_id),
        )

    async def complete_charge(
        self,
        payer_id: str,
        charge_id: str,
        after_complete: Optional[Callable[[], None]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Pay a charge from payer_id's wallet and mark it complete.

        Any step failing fails the whole operation; the charge is only
        marked COMPLETE after the transfer succeeded.
        """
        async def pay():
            data = await self.api.get(f"/retrieve-charge/{path_segment(charge_id)}")
            charge = data.get("charge") if isinstance(data, dict) else None
            if not isinstance(charge, dict):
                raise NotFoundError("Charge not found", status_code=404)
            owner_id = charge.get("userId")
            if not owner_id:
                raise RemoteServiceError("Charge has no owner", details={"charge_id": charge_id})

            await self.api.post(
                f"/transfer/{path_segment(payer_id)}",
                {
                    "transactionAmount": charge.get("amount") or 0,
                    "transactionRecipient": charge.get("paymentId") or "",
                    "transactionNotes": charge.get("note") or "",
                },
            )
            updated = await self.api.put(
                f"/charge/{path_segment(owner_id)}/{path_segment(charge_id)}/update",
                {"status": CHARGE_COMPLETE},
            )
            return updated or {**charge, "status": CHARGE_COMPLETE}

        def invalidated(updated: Dict[str, Any]) -> List[str]:
            keys = [charge_key(charge_id)] + funds_keys(payer_id)
            if isinstance(updated, dict) and updated.get("userId"):
                keys.append(user_charges_key(updated["userId"]))
            return keys

        def completed(_updated):
            if after_complete is not None:
                after_complete()

        return await self.complete.mutate(pay, invalidates=invalidated, on_success=completed)
