"""CORS for a single configured origin with per-endpoint method lists."""

from typing import Dict, Optional

from fastapi import APIRouter, Request, Response

from src.shared import config

ALLOWED_HEADERS = "Content-Type, Authorization"
MAX_AGE_SECONDS = "86400"


def cors_headers(origin: Optional[str], methods: Optional[str] = None) -> Dict[str, str]:
    """Headers for a response to ``origin``; empty unless it is the configured origin."""
    if not origin or origin != config.ALLOWED_ORIGIN:
        return {}
    headers = {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    if methods:
        headers["Access-Control-Allow-Methods"] = methods
        headers["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
        headers["Access-Control-Max-Age"] = MAX_AGE_SECONDS
    return headers


def add_preflight_route(router: APIRouter, path: str, *methods: str) -> None:
    """Answer ``OPTIONS path`` with 200, no body, and the endpoint's allowed methods."""
    allowed = ", ".join(list(methods) + ["OPTIONS"])

    async def preflight(request: Request) -> Response:
        return Response(status_code=200, headers=cors_headers(request.headers.get("origin"), allowed))

    router.add_api_route(path, preflight, methods=["OPTIONS"], include_in_schema=False)


async def cors_middleware(request: Request, call_next):
    """Attach the allow-origin header to every response routed through the app."""
    response = await call_next(request)
    for name, value in cors_headers(request.headers.get("origin")).items():
        if name not in response.headers:
            response.headers[name] = value
    return response
