"""
Async HTTP transport for the waitlist API.

Maps responses onto the same tagged errors the server-side repository raises, so
``WaitlistSubmissionService`` retries and reports failures identically whichever
insert it is given.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from src.shared.waitlist.constants import WaitlistCategory
from src.shared.waitlist.errors import (
    DuplicateError,
    NetworkError,
    RateLimitError,
    UnknownError,
    ValidationError,
)

DEFAULT_TIMEOUT_SECONDS = 10.0

ENDPOINTS = {
    WaitlistCategory.EMPLOYER: "/api/waitlist/employers",
    WaitlistCategory.CANDIDATE: "/api/waitlist/candidates",
}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase


def _retry_after(response: httpx.Response) -> int:
    try:
        body = response.json()
        if isinstance(body, dict) and body.get("retryAfter") is not None:
            return int(body["retryAfter"])
    except (ValueError, TypeError):
        pass
    try:
        return int(response.headers.get("Retry-After", 0))
    except ValueError:
        return 0


def raise_for_response(response: httpx.Response) -> None:
    """Raise the tagged error matching a non-2xx response."""
    if response.is_success:
        return

    status_code = response.status_code
    message = _error_message(response)

    if status_code == 400:
        raise ValidationError(message, status_code=status_code, user_message=message)
    if status_code == 409:
        raise DuplicateError(message, status_code=status_code)
    if status_code == 429:
        raise RateLimitError(message, retry_after=_retry_after(response), status_code=status_code)
    if status_code >= 500:
        raise NetworkError(f"Server error {status_code}", status_code=status_code)
    raise UnknownError(message, status_code=status_code)


class WaitlistApiClient:
    """
    Thin client for the waitlist endpoints.

    Use as an async context manager, or pass an existing ``httpx.AsyncClient``
    (for example one built on ``httpx.MockTransport`` in tests).
    """

    def __init__(self, base_url: str = "", client: Optional[httpx.AsyncClient] = None,
                 timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "WaitlistApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def insert(self, category: WaitlistCategory, data: Mapping[str, Any]) -> Dict[str, Any]:
        """POST a normalized entry and return the stored row."""
        category = WaitlistCategory(category)
        try:
            response = await self.client.post(ENDPOINTS[category], json=dict(data))
        except httpx.TransportError as e:
            logging.warning(f"Waitlist request failed: {type(e).__name__}")
            raise NetworkError(f"Network error: {type(e).__name__}") from e

        raise_for_response(response)

        try:
            body = response.json()
        except ValueError as e:
            raise UnknownError("Response was not JSON", status_code=response.status_code) from e
        return body.get("data") or {}

    async def insert_employer(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.insert(WaitlistCategory.EMPLOYER, data)

    async def insert_candidate(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.insert(WaitlistCategory.CANDIDATE, data)

    async def site_settings(self) -> Dict[str, Any]:
        """Public coming-soon flag the landing page reads on load."""
        try:
            response = await self.client.get("/api/site-settings")
        except httpx.TransportError as e:
            raise NetworkError(f"Network error: {type(e).__name__}") from e
        raise_for_response(response)
        return response.json()
