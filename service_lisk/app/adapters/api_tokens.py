"""
API token management resource.
"""

from typing import Any, Dict, List, Optional

from ..accessor import message_from_response
from .base import LiskResource
from .keys import API_TOKENS_KEY
from .lisk_api import path_segment


class ApiTokensResource(LiskResource):
    name = "api_tokens"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        self.tokens = self.reader(
            "tokens",
            default=[],
            success_message="Tokens fetched successfully.",
            failure_message="Failed to fetch tokens.",
        )
        self.create = self.writer(
            "create_token",
            success_message="Token created successfully.",
            failure_message="Failed to create token.",
        )
        self.update = self.writer(
            "update_token",
            success_message="Token updated successfully.",
            failure_message="Failed to update token.",
        )
        self.revoke = self.writer(
            "revoke_token",
            success_message=message_from_response("Token revoked successfully."),
            failure_message="Failed to revoke token.",
        )

    async def fetch_tokens(self) -> List[Dict[str, Any]]:
        async def load():
            return await self.api.get("/tokens") or []

        return await self.tokens.fetch(API_TOKENS_KEY, load)

    async def create_token(self, description: str) -> Optional[Dict[str, Any]]:
        """Create a token; the secret is only present in this response."""
        return await self.create.mutate(
            lambda: self.api.post("/tokens", {"description": description}),
            invalidates=[API_TOKENS_KEY],
            refetch=self.fetch_tokens,
        )

    async def update_token(self, token_id: str, description: str) -> Optional[Dict[str, Any]]:
        return await self.update.mutate(
            lambda: self.api.patch(f"/tokens/{path_segment(token_id)}", {"description": description}),
            invalidates=[API_TOKENS_KEY],
            refetch=self.fetch_tokens,
        )

    async def revoke_token(self, token_id: str) -> Optional[Dict[str, Any]]:
        return await self.revoke.mutate(
            lambda: self.api.post("/tokens/revoke", {"id": token_id}),
            invalidates=[API_TOKENS_KEY],
            refetch=self.fetch_tokens,
        )
