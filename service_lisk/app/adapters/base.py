"""
Common base for resources backed by the Lisk API.
"""

from typing import Any

from ..accessor import ResourceAccessor
from ..caching import EphemeralCache
from .lisk_api import LiskApiClient


class LiskResource(ResourceAccessor):
    """ResourceAccessor whose credential is the API client's key."""

    def __init__(self, api: LiskApiClient, cache: EphemeralCache, **kwargs: Any):
        kwargs.setdefault("credential", api.api_key)
        super().__init__(cache, **kwargs)
        self.api = api
