"""
Authenticated gateway to the Dept time-booking REST API.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


class AccessTokenSource(Protocol):
    async def get_valid_access_token(self) -> str: ...


class DeptApiError(Exception):
    """Raised for any non-2xx response from the booking API."""

    def __init__(self, status_code: int, payload: Any) -> None:
        super().__init__(f"API Error: {status_code} - {json.dumps(payload)}")
        self.status_code = status_code
        self.payload = payload


class DeptApiClient:
    """Issue bearer-authenticated JSON requests against the configured base URL."""

    def __init__(
        self,
        base_url: str,
        token_source: AccessTokenSource,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = str(base_url).rstrip("/")
        self._tokens = token_source
        self._transport = transport

    def build_url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def call(
        self,
        path: str,
        *,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body, or ``None`` when there is none."""
        access_token = await self._tokens.get_valid_access_token()
        url = self.build_url(path)
        request_headers = {
            **(headers or {}),
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        query = {key: value for key, value in (params or {}).items() if value is not None}

        logger.debug("%s %s %s", method, url, query or "")
        try:
            async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
                response = await client.request(
                    method, url, headers=request_headers, params=query, json=json
                )
        except httpx.HTTPError:
            logger.exception("API call failed: %s %s", method, url)
            raise

        data = None
        content_type = response.headers.get("content-type", "")
        if response.status_code != 204 and "application/json" in content_type:
            data = response.json()
        if not response.is_success:
            raise DeptApiError(response.status_code, data)
        return data

    async def create_booking(self, booking: Dict[str, Any]) -> Any:
        return await self.call("/bookedhours", method="POST", json=booking)

    async def create_bulk_booking(self, booking: Dict[str, Any]) -> Any:
        return await self.call("/bookedhours/bulk", method="POST", json=booking)

    async def update_booking(self, booking_id: int, booking: Dict[str, Any]) -> Any:
        return await self.call(f"/bookedhours/{booking_id}", method="PUT", json=booking)

    async def delete_booking(self, booking_id: int) -> Any:
        return await self.call(f"/bookedhours/{booking_id}", method="DELETE")

    async def list_booked_hours(
        self,
        employee_id: int,
        *,
        from_date: str,
        to_date: str,
        booking_id: int | None = None,
    ) -> Any:
        return await self.call(
            f"/bookedhours/custom/{employee_id}",
            params={"from": from_date, "to": to_date, "id": booking_id},
        )

    async def search_budgets(self, term: str, corporation_id: int | None = None) -> Any:
        return await self.call(
            "/budgets/search",
            params={"searchTerm": term, "corporationId": corporation_id},
        )

    async def search_internal_budgets(self, term: str) -> Any:
        return await self.call("/budgets/search/internal", params={"searchTerm": term})


__all__ = ["AccessTokenSource", "DeptApiClient", "DeptApiError"]
