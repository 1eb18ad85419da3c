from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from hour_booking.clients.dept_api import DeptApiClient, DeptApiError


class StaticTokenSource:
    def __init__(self, token: str = "access-123") -> None:
        self.token = token
        self.calls = 0

    async def get_valid_access_token(self) -> str:
        self.calls += 1
        return self.token


def _client(handler, base_url: str = "https://api.example.com/v1/") -> tuple[DeptApiClient, StaticTokenSource]:
    tokens = StaticTokenSource()
    return DeptApiClient(base_url, tokens, transport=httpx.MockTransport(handler)), tokens


@pytest.mark.parametrize(
    ("base_url", "path"),
    [
        ("https://api.example.com/v1", "bookedhours"),
        ("https://api.example.com/v1/", "/bookedhours"),
        ("https://api.example.com/v1/", "bookedhours"),
        ("https://api.example.com/v1", "/bookedhours"),
    ],
)
def test_build_url_joins_with_single_slash(base_url: str, path: str) -> None:
    client = DeptApiClient(base_url, StaticTokenSource())

    assert client.build_url(path) == "https://api.example.com/v1/bookedhours"


@pytest.mark.asyncio
async def test_call_sends_bearer_token_and_fixed_headers_win() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    client, tokens = _client(handler)
    result = await client.call(
        "/budgets/search",
        headers={"Authorization": "Bearer forged", "X-Trace": "abc"},
        params={"searchTerm": "design", "corporationId": None},
    )

    assert result == {"ok": True}
    assert tokens.calls == 1
    request = seen[0]
    assert request.headers["authorization"] == "Bearer access-123"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["x-trace"] == "abc"
    assert dict(request.url.params) == {"searchTerm": "design"}


@pytest.mark.asyncio
async def test_no_content_response_returns_none() -> None:
    client, _ = _client(lambda request: httpx.Response(204))

    assert await client.delete_booking(12) is None


@pytest.mark.asyncio
async def test_non_json_success_returns_none() -> None:
    client, _ = _client(lambda request: httpx.Response(200, text="deleted"))

    assert await client.call("/bookedhours/1", method="DELETE") is None


@pytest.mark.asyncio
async def test_error_status_raises_with_status_and_payload() -> None:
    client, _ = _client(lambda request: httpx.Response(403, json={"message": "forbidden"}))

    with pytest.raises(DeptApiError) as excinfo:
        await client.create_booking({"hours": 1})

    assert excinfo.value.status_code == 403
    assert excinfo.value.payload == {"message": "forbidden"}
    assert str(excinfo.value) == 'API Error: 403 - {"message": "forbidden"}'


@pytest.mark.asyncio
async def test_transport_errors_propagate_unchanged() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = _client(handler)

    with pytest.raises(httpx.ConnectError):
        await client.search_internal_budgets("holiday")


@pytest.mark.asyncio
async def test_endpoint_wrappers_use_expected_routes() -> None:
    seen: list[tuple[str, str, dict]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, dict(request.url.params)))
        return httpx.Response(200, json={})

    client, _ = _client(handler)
    await client.create_booking({})
    await client.create_bulk_booking({})
    await client.update_booking(5, {})
    await client.list_booked_hours(42, from_date="2024-01-01", to_date="2024-01-31", booking_id=5)
    await client.search_budgets("design", 7)
    await client.search_internal_budgets("leave")

    assert seen == [
        ("POST", "/v1/bookedhours", {}),
        ("POST", "/v1/bookedhours/bulk", {}),
        ("PUT", "/v1/bookedhours/5", {}),
        ("GET", "/v1/bookedhours/custom/42", {"from": "2024-01-01", "to": "2024-01-31", "id": "5"}),
        ("GET", "/v1/budgets/search", {"searchTerm": "design", "corporationId": "7"}),
        ("GET", "/v1/budgets/search/internal", {"searchTerm": "leave"}),
    ]
