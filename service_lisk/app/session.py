"""
Composition root: one shared cache, one API client and every resource.
"""

from typing import List, Optional

from shared.config import LiskSettings, get_settings
from shared.errors import ErrorKind
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector, get_metrics_collector
from .accessor import ResourceAccessor
from .adapters import (
    ApiTokensResource,
    BalancesResource,
    BankResource,
    BusinessResource,
    ChargesResource,
    CouponsResource,
    LiskApiClient,
    StaffResource,
    TransactionsResource,
    TransfersResource,
    UsersResource,
)
from .caching import EphemeralCache, MemoryStorage, RedisStorage, StoragePort
from .status import TransientStatus

SERVICE_NAME = "lisk-access"


def build_storage(settings: LiskSettings) -> StoragePort:
    """Create the storage medium selected by ``cache_backend``."""
    backend = settings.cache_backend.lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "redis":
        return RedisStorage(settings.redis_url)
    raise ValueError(f"Unknown cache backend: {settings.cache_backend}")


class LiskSession:
    """Everything a caller needs to talk to the Lisk API through the cache."""

    def __init__(
        self,
        settings: Optional[LiskSettings] = None,
        storage: Optional[StoragePort] = None,
        api: Optional[LiskApiClient] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger("lisk.session")
        self.metrics = metrics

        self.storage = storage or build_storage(self.settings)
        self.cache = EphemeralCache(
            self.storage,
            self.settings.cache_max_age,
            retention=self.settings.cache_retention,
            metrics=metrics,
        )
        self.api = api or LiskApiClient(
            self.settings.api_base,
            self.settings.credential,
            timeout=self.settings.request_timeout,
        )

        common = {
            "require_credential": self.settings.require_credential,
            "clear_after": self.settings.status_clear_after,
            "metrics": metrics,
        }
        self.users = UsersResource(self.api, self.cache, **common)
        self.transactions = TransactionsResource(self.api, self.cache, **common)
        self.balances = BalancesResource(self.api, self.cache, **common)
        self.bank = BankResource(self.api, self.cache, **common)
        self.business = BusinessResource(self.api, self.cache, **common)
        self.charges = ChargesResource(self.api, self.cache, **common)
        self.coupons = CouponsResource(self.api, self.cache, **common)
        self.api_tokens = ApiTokensResource(self.api, self.cache, **common)
        self.staff = StaffResource(self.api, self.cache, **common)
        self.transfers = TransfersResource(self.api, self.cache, **common)

        self.cache_status = TransientStatus("cache", clear_after=self.settings.cache_cleared_window)
        self._closed = False

    @property
    def resources(self) -> List[ResourceAccessor]:
        return [
            self.users,
            self.transactions,
            self.balances,
            self.bank,
            self.business,
            self.charges,
            self.coupons,
            self.api_tokens,
            self.staff,
            self.transfers,
        ]

    @property
    def cache_cleared(self) -> bool:
        """True for a short window after a successful clear_cache()."""
        return self.cache_status.message is not None

    def clear_cache(self) -> bool:
        """Wipe the whole cache, including unrelated data in the same media."""
        self.cache_status.begin_and_clear()
        if self.cache.clear():
            self.cache_status.succeed("Cache cleared.")
            return True
        self.cache_status.fail(ErrorKind.CACHE_CLEAR)
        return False

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        for resource in self.resources:
            resource.close()
        self.cache_status.dispose()
        await self.api.aclose()
        if isinstance(self.storage, RedisStorage):
            self.storage.close()
        self.logger.info("Lisk session closed")

    async def __aenter__(self) -> "LiskSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def create_session(**overrides) -> LiskSession:
    """Build a session from the environment, with keyword setting overrides.

    Also configures structured logging at the configured level and
    instruments the session with the process-wide metrics collector.
    """
    settings = get_settings(**overrides)
    configure_logging(SERVICE_NAME, settings.log_level)
    return LiskSession(settings, metrics=get_metrics_collector(SERVICE_NAME))
