"""
Coupons resource.
"""

from typing import Any, Dict, List, Optional

from .base import LiskResource
from .keys import COUPONS_KEY
from .lisk_api import path_segment


class CouponsResource(LiskResource):
    name = "coupons"

    def __init__(self, api, cache, **kwargs: Any):
        super().__init__(api, cache, **kwargs)

        self.coupons = self.reader(
            "coupons",
            default=[],
            success_message="Fetched coupons successfully.",
            failure_message="Failed to fetch coupons.",
        )
        self.create = self.writer(
            "create_coupon",
            success_message="Coupon created successfully.",
            failure_message="Failed to create coupon.",
        )
        self.claim = self.writer(
            "claim_coupon",
            success_message="Coupon claimed successfully.",
            failure_message="Failed to claim coupon.",
        )
        self.update = self.writer(
            "update_coupon",
            success_message="Coupon updated successfully.",
            failure_message="Failed to update coupon.",
        )
        self.delete = self.writer(
            "delete_coupon",
            success_message="Coupon deleted successfully.",
            failure_message="Failed to delete coupon.",
        )

    async def fetch_coupons(self) -> List[Dict[str, Any]]:
        async def load():
            return await self.api.get("/coupons") or []

        return await self.coupons.fetch(COUPONS_KEY, load)

    async def create_coupon(self, user_id: str, coupon: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._write(
            self.create, lambda: self.api.post(f"/coupons/{path_segment(user_id)}", coupon)
        )

    async def claim_coupon(self, user_id: str, coupon_id: str) -> Optional[Dict[str, Any]]:
        return await self._write(
            self.claim,
            lambda: self.api.patch(
                f"/coupons/claim/{path_segment(user_id)}", {"couponId": coupon_id}
            ),
        )

    async def update_coupon(
        self, user_id: str, coupon_id: str, coupon: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        return await self._write(
            self.update,
            lambda: self.api.put(
                f"/coupons/{path_segment(user_id)}/{path_segment(coupon_id)}", coupon
            ),
        )

    async def delete_coupon(self, user_id: str, coupon_id: str) -> Optional[Dict[str, Any]]:
        return await self._write(
            self.delete,
            lambda: self.api.delete(f"/coupons/{path_segment(user_id)}/{path_segment(coupon_id)}"),
        )

    async def _write(self, operation, call):
        return await operation.mutate(
            call, invalidates=[COUPONS_KEY], refetch=self.fetch_coupons
        )
