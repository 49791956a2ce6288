"""HTTP client helpers for calling the platform REST API."""

from dataclasses import dataclass
from typing import Any

import httpx

from fanswipe.core.config import Settings, get_settings

REQUEST_SOURCE = "fanswipe"


@dataclass
class ApiSession:
    """An authenticated HTTP client plus the identity it acts as."""

    client: httpx.AsyncClient
    token: str
    role: str = "member"


def create_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """Create an AsyncClient pointed at the configured API."""
    settings = settings or get_settings()
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout,
        headers={"Content-Type": "application/json"},
    )


def _get_headers(token: str, role: str | None = None) -> dict[str, str]:
    """Get common headers for API requests."""
    headers = {
        "Authorization": f"Bearer {token}",
        "X-Request-Source": REQUEST_SOURCE,
    }
    if role:
        headers["X-User-Role"] = role
    return headers


def _decode(response: httpx.Response) -> dict[str, Any]:
    """
    Raise on error status and decode the JSON body.

    Empty bodies decode to ``{}``. A bare JSON array is wrapped as
    ``{"data": [...]}`` so callers always receive the API's envelope shape.
    """
    response.raise_for_status()
    if not response.content:
        return {}
    body = response.json()
    if isinstance(body, dict):
        return body
    return {"data": body}


async def api_get(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    params: dict[str, Any] | None = None,
    role: str | None = None,
) -> dict[str, Any]:
    """Make an authenticated GET request to the API."""
    response = await client.get(
        path,
        params=params,
        headers=_get_headers(token, role),
    )
    return _decode(response)


async def api_post(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    json: dict[str, Any] | None = None,
    role: str | None = None,
) -> dict[str, Any]:
    """Make an authenticated POST request to the API."""
    response = await client.post(
        path,
        json=json,
        headers=_get_headers(token, role),
    )
    return _decode(response)


async def api_put(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    json: dict[str, Any] | None = None,
    role: str | None = None,
) -> dict[str, Any]:
    """Make an authenticated PUT request to the API."""
    response = await client.put(
        path,
        json=json,
        headers=_get_headers(token, role),
    )
    return _decode(response)


async def api_delete(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    role: str | None = None,
) -> dict[str, Any]:
    """Make an authenticated DELETE request to the API."""
    response = await client.delete(
        path,
        headers=_get_headers(token, role),
    )
    return _decode(response)
