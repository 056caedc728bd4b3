"""
HTTP client for the Lisk payments API.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from shared.logging import get_logger
from shared.errors import RemoteServiceError, remote_error_for_status


def path_segment(value: Any) -> str:
    """Percent-encode a value for use as a single URL path segment."""
    return quote(str(value), safe="")


class LiskApiClient:
    """Thin async wrapper that returns decoded JSON or raises RemoteServiceError.

    The credential is sent verbatim in the ``Authorization`` header.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.logger = get_logger("lisk.api")
        self._client = client

    def _client_instance(self) -> httpx.AsyncClient:
        """Get or create HTTP client instance."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _headers(self, with_body: bool) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = self.api_key
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await self._client_instance().request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers(json is not None),
            )
        except httpx.HTTPError as e:
            self.logger.error("Lisk API transport error", method=method, path=path, error=str(e))
            raise RemoteServiceError(
                "Lisk API unavailable",
                details={"http_error": str(e)}
            ) from e

        if response.is_success:
            if not response.content:
                return None
            return response.json()

        remote_message = _remote_message(response)
        self.logger.warning(
            "Lisk API error response",
            method=method,
            path=path,
            status_code=response.status_code,
            remote_message=remote_message,
        )
        raise remote_error_for_status(response.status_code, remote_message)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json={} if json is None else json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json={} if json is None else json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json={} if json is None else json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        """Close the HTTP client connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _remote_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return None
