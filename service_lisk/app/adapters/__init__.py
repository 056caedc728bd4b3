"""
Adapters package for the Lisk access layer.

Contains the HTTP client for the Lisk API and one cached resource per API
area. Resources encapsulate:

- Paths and request shapes
- Cache keys and which mutations invalidate them
- Status messages per outcome

Resources never raise remote failures; inspect their operation statuses.
"""

from .lisk_api import LiskApiClient, path_segment
from .base import LiskResource
from .users import UsersResource
from .transactions import TransactionsResource
from .balances import BalancesResource
from .bank import BankResource
from .business import BusinessResource
from .charges import ChargesResource
from .coupons import CouponsResource
from .api_tokens import ApiTokensResource
from .staff import StaffResource
from .transfers import TransfersResource

__all__ = [
    "LiskApiClient",
    "path_segment",
    "LiskResource",
    "UsersResource",
    "TransactionsResource",
    "BalancesResource",
    "BankResource",
    "BusinessResource",
    "ChargesResource",
    "CouponsResource",
    "ApiTokensResource",
    "StaffResource",
    "TransfersResource",
]
