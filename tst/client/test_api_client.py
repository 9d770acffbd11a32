import asyncio
import json

import httpx
import pytest

from src.client.api_client import WaitlistApiClient
from src.shared.waitlist.errors import (
    DuplicateError,
    NetworkError,
    RateLimitError,
    UnknownError,
    ValidationError,
)

ENTRY = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "industry": "Technology",
    "company_size": "11-50",
    "early_career_hires_per_year": 12,
}


def client_for(handler):
    transport = httpx.MockTransport(handler)
    return WaitlistApiClient(client=httpx.AsyncClient(transport=transport, base_url="https://api.fynda.com"))


def insert_with(handler, category="employer"):
    async def run():
        api = client_for(handler)
        try:
            return await api.insert(category, ENTRY)
        finally:
            await api.client.aclose()

    return asyncio.run(run())


def test_posts_entry_and_returns_data():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "message": "ok", "data": dict(ENTRY, id="abc")})

    result = insert_with(handler)

    assert result["id"] == "abc"
    assert seen == {"path": "/api/waitlist/employers", "body": ENTRY}


def test_candidate_endpoint():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        return httpx.Response(200, json={"success": True, "data": {"id": "c1"}})

    insert_with(handler, category="candidate")

    assert seen["path"] == "/api/waitlist/candidates"


@pytest.mark.parametrize("status, body, error_cls", [
    (400, {"error": "Please enter a valid email address"}, ValidationError),
    (409, {"error": "This email is already registered in our waitlist!"}, DuplicateError),
    (500, {"error": "Internal server error"}, NetworkError),
    (503, None, NetworkError),
    (401, {"error": "Unauthorized"}, UnknownError),
])
def test_status_codes_map_to_tagged_errors(status, body, error_cls):
    def handler(request):
        if body is None:
            return httpx.Response(status, text="upstream unavailable")
        return httpx.Response(status, json=body)

    with pytest.raises(error_cls) as excinfo:
        insert_with(handler)

    assert excinfo.value.status_code == status


def test_error_message_comes_from_body():
    def handler(request):
        return httpx.Response(400, json={"error": "Name is required"})

    with pytest.raises(ValidationError) as excinfo:
        insert_with(handler)

    assert excinfo.value.message == "Name is required"
    assert excinfo.value.user_message == "Name is required"


def test_rate_limit_carries_retry_after():
    def handler(request):
        return httpx.Response(429, json={"error": "Too many requests", "retryAfter": 37})

    with pytest.raises(RateLimitError) as excinfo:
        insert_with(handler)

    assert excinfo.value.retry_after == 37


def test_rate_limit_falls_back_to_header():
    def handler(request):
        return httpx.Response(429, text="slow down", headers={"Retry-After": "12"})

    with pytest.raises(RateLimitError) as excinfo:
        insert_with(handler)

    assert excinfo.value.retry_after == 12


def test_transport_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        insert_with(handler)


def test_site_settings():
    def handler(request):
        assert request.url.path == "/api/site-settings"
        return httpx.Response(200, json={"coming_soon_mode": True})

    async def run():
        api = client_for(handler)
        async with api:
            return await api.site_settings()

    assert asyncio.run(run()) == {"coming_soon_mode": True}
