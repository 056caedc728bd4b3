"""
Test helper functions and factory methods for the Lisk access layer.
"""

import time
import uuid
from typing import Any, Dict, List, Optional

import httpx


class LiskDataFactory:
    """Factory for creating sample API payloads."""

    @staticmethod
    def create_users() -> List[Dict[str, Any]]:
        return [
            {
                "id": "user-1",
                "email": "thandi@example.com",
                "firstName": "Thandi",
                "lastName": "Nkosi",
                "paymentIdentifier": "thandi01",
                "role": "CUSTOMER",
            },
            {
                "id": "user-2",
                "email": "pieter@example.com",
                "firstName": "Pieter",
                "lastName": "van Wyk",
                "paymentIdentifier": "pieter02",
                "role": "MERCHANT",
            },
        ]

    @staticmethod
    def create_transactions(user_id: str = "user-1", count: int = 3) -> List[Dict[str, Any]]:
        now_ms = int(time.time() * 1000)
        return [
            {
                "id": f"tx-{index}",
                "userId": user_id,
                "transactionType": "transfer",
                "transactionCurrency": "LZAR",
                "transactionAmount": 10.0 * index,
                "timestamp": now_ms - index * 60000,
            }
            for index in range(1, count + 1)
        ]

    @staticmethod
    def create_balances() -> List[Dict[str, Any]]:
        return [
            {"name": "LZAR", "balance": 125.5},
            {"name": "LUSD", "balance": 4.0},
        ]

    @staticmethod
    def create_charge(
        user_id: str = "user-2",
        amount: float = 50.0,
        status: str = "PENDING",
        charge_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        return {
            "id": charge_id or str(uuid.uuid4()),
            "userId": user_id,
            "paymentId": "pieter02",
            "amount": amount,
            "note": "Invoice 17",
            "status": status,
        }


class RecordingTransport:
    """Route table for httpx.MockTransport that records every request.

    Routes map ``(method, path)`` to a response body, a status code and body
    pair, or a callable taking the request.
    """

    def __init__(self, routes: Dict[Any, Any]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "No route"})
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, tuple):
            status_code, body = route
            return httpx.Response(status_code, json=body)
        return httpx.Response(200, json=route)

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FakeClock:
    """Settable wall clock in seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
