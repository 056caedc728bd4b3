"""
Bank account resource, plus bank-backed deposits and withdrawals.
"""

from typing import Any, Dict, Optional

from shared.errors import ErrorKind
from .base import LiskResource
from .keys import bank_account_key, funds_keys
from .lisk_api import path_segment

DEFAULT_CURRENCY = "ZAR"
DEFAULT_NETWORK = "lisk"


class BankResource(LiskResource):
    name = "bank"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        not_found = {ErrorKind.NOT_FOUND: "Bank account not found"}
        self.account = self.reader(
            "bank_account",
            success_message="Fetched bank account successfully",
            error_messages=not_found,
            failure_message="Failed to fetch bank account",
            prefer_remote_message=True,
        )
        self.upsert = self.writer(
            "upsert_bank_account",
            success_message="Bank account created successfully",
            failure_message="Failed to upsert bank account",
            prefer_remote_message=True,
        )
        self.delete = self.writer(
            "delete_bank_account",
            success_message="Bank account deleted successfully",
            error_messages=not_found,
            failure_message="Failed to delete bank account",
            prefer_remote_message=True,
        )
        self.transaction = self.writer(
            "create_transaction",
            success_message="Transaction created successfully",
            failure_message="Failed to create transaction",
            prefer_remote_message=True,
        )
        self.withdrawal = self.writer(
            "withdraw",
            success_message="Withdrawal request submitted successfully!",
            failure_message="Failed to submit withdrawal.",
            prefer_remote_message=True,
        )
        self.deposit_request = self.writer(
            "deposit",
            success_message="Deposit request submitted successfully!",
            failure_message="Failed to submit deposit.",
            prefer_remote_message=True,
        )

    async def fetch_bank_account(self, user_id: str) -> Optional[Dict[str, Any]]:
        return await self.account.fetch(
            bank_account_key(user_id),
            lambda: self.api.get(f"/bank/{path_segment(user_id)}"),
        )

    async def upsert_bank_account(
        self,
        user_id: str,
        account_holder: str,
        account_number: str,
        branch_code: str,
        bank_name: str,
    ) -> Optional[Dict[str, Any]]:
        payload = {
            "accountHolder": account_holder,
            "accountNumber": account_number,
            "branchCode": branch_code,
            "bankName": bank_name,
        }

        def remember(data):
            self.account.data = data.get("bankAccount") if isinstance(data, dict) else None

        return await self.upsert.mutate(
            lambda: self.api.post(f"/bank/{path_segment(user_id)}", payload),
            invalidates=[bank_account_key(user_id)],
            on_success=remember,
        )

    async def delete_bank_account(self, user_id: str) -> Optional[Dict[str, Any]]:
        def forget(_data):
            self.account.data = None

        return await self.delete.mutate(
            lambda: self.api.delete(f"/bank/{path_segment(user_id)}"),
            invalidates=[bank_account_key(user_id)],
            on_success=forget,
        )

    async def create_transaction(
        self,
        user_id: str,
        transaction_type: str,
        transaction_method: str,
        transaction_currency: str,
        transaction_amount: float,
        transaction_network: Optional[str] = None,
        transaction_address: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        payload = _transaction_payload(
            transaction_type,
            transaction_method,
            transaction_currency,
            transaction_amount,
            transaction_network,
            transaction_address,
        )
        return await self.transaction.mutate(
            lambda: self.api.post(f"/create-transaction/{path_segment(user_id)}", payload),
            invalidates=funds_keys(user_id),
        )

    async def withdraw(self, user_id: str, amount: Any) -> Optional[Dict[str, Any]]:
        """Request a withdrawal to the loaded bank account."""
        return await self._bank_transfer(self.withdrawal, "withdraw", user_id, amount)

    async def deposit(self, user_id: str, amount: Any) -> Optional[Dict[str, Any]]:
        """Request a deposit from the loaded bank account."""
        return await self._bank_transfer(self.deposit_request, "deposit", user_id, amount)

    async def _bank_transfer(self, operation, transaction_type, user_id, amount):
        bank_account = self.account.data
        if not bank_account or not user_id:
            operation.reject(ErrorKind.NOT_FOUND, "Bank account or user not found")
            return None
        try:
            value = float(amount)
        except (TypeError, ValueError):
            operation.reject(ErrorKind.VALIDATION, "Invalid amount.")
            return None

        payload = _transaction_payload(
            transaction_type,
            "bank",
            DEFAULT_CURRENCY,
            value,
            DEFAULT_NETWORK,
            bank_account.get("id"),
        )
        return await operation.mutate(
            lambda: self.api.post(f"/create-transaction/{path_segment(user_id)}", payload),
            invalidates=funds_keys(user_id),
        )


def _transaction_payload(
    transaction_type, method, currency, amount, network=None, address=None
) -> Dict[str, Any]:
    payload = {
        "transactionType": transaction_type,
        "transactionMethod": method,
        "transactionCurrency": currency,
        "transactionAmount": amount,
    }
    if network is not None:
        payload["transactionNetwork"] = network
    if address is not None:
        payload["transactionAddress"] = address
    return payload
