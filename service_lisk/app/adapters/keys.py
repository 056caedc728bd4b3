"""
Cache keys used by the Lisk resources.

Mutations in one resource often invalidate reads of another (a transfer
changes balances and transaction history), so every key is built here.
"""

USERS_KEY = "users_list"
FLOAT_KEY = "float_balances"
COUPONS_KEY = "coupons"
API_TOKENS_KEY = "api_tokens"


def user_key(user_id: str) -> str:
    return f"user_{user_id}"


def user_transactions_key(user_id: str) -> str:
    return f"user_transactions_{user_id}"


def transaction_key(user_id: str, transaction_id: str) -> str:
    return f"transaction_{user_id}_{transaction_id}"


def user_balances_key(user_id: str) -> str:
    return f"user_balances_{user_id}"


def bank_account_key(user_id: str) -> str:
    return f"bank_account_{user_id}"


def pending_transactions_key(page: int, page_size: int) -> str:
    return f"pending_tx_{page}_{page_size}"


def user_charges_key(user_id: str) -> str:
    return f"user_charges_{user_id}"


def charge_key(charge_id: str) -> str:
    return f"charge_{charge_id}"


def staff_key(merchant_id: str) -> str:
    return f"staff_list_{merchant_id}"


def recipient_key(identifier: str) -> str:
    return f"recipient_{identifier}"


def funds_keys(user_id: str):
    """Keys whose contents change whenever a user's funds move."""
    return [user_balances_key(user_id), user_transactions_key(user_id)]
