"""Service layer for member discovery, matching and blocking endpoints."""
import logging
from typing import Any

import httpx

from fanswipe.api_client import ApiSession, api_delete, api_get, api_post
from fanswipe.schemas.discovery import SWIPE_ACTIONS, SwipeResponse
from fanswipe.services.exceptions import (
    ApiError,
    RemoteFailureError,
    UnauthorizedError,
    raise_api_error,
)

logger = logging.getLogger(__name__)

SWIPE_STACK_PATH = "/connections/stack"
DISCOVER_PATH = "/member/discover"
SWIPE_PATH = "/connections/swipe"
CONNECTIONS_PATH = "/connections"
BLOCKED_PATH = "/member/blocked"


def block_path(creator_id: str) -> str:
    return f"/member/creators/{creator_id}/block"


def check_envelope(body: dict[str, Any], default_message: str) -> dict[str, Any]:
    """
    Raise if the API answered 2xx with its ``{"error": true}`` failure envelope.

    Returns the body unchanged otherwise.
    """
    if body.get("error"):
        raise RemoteFailureError(body.get("message") or default_message)
    return body


async def _get(session: ApiSession, path: str, params: dict[str, Any] | None = None) -> dict:
    try:
        return await api_get(session.client, path, session.token, params, role=session.role)
    except httpx.HTTPError as e:
        raise_api_error(e)


def _extract_candidates(body: dict[str, Any]) -> list[dict[str, Any]]:
    """Pull the creator list out of either endpoint's response shape."""
    data = body.get("data")
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("creators"), list):
        return data["creators"]
    if isinstance(body.get("creators"), list):
        return body["creators"]
    if body.get("success") or data is not None:
        return []
    raise RemoteFailureError(body.get("message") or "No creators found")


async def get_swipe_stack(
    session: ApiSession,
    params: dict[str, Any] | None = None,
) -> list[dict[str, Any]]:
    """
    Fetch the batch of creators to swipe on.

    Tries the connections stack endpoint first and falls back to the discover
    endpoint. A 401 is never retried against the fallback. If both fail, the
    first error is raised.
    """
    try:
        body = await _get(session, SWIPE_STACK_PATH, params)
        return _extract_candidates(check_envelope(body, "Failed to load swipe stack"))
    except UnauthorizedError:
        raise
    except ApiError as first_error:
        logger.warning(
            "Swipe stack endpoint failed (%s), falling back to %s",
            first_error.message,
            DISCOVER_PATH,
        )
        try:
            body = await _get(session, DISCOVER_PATH, params)
            return _extract_candidates(check_envelope(body, "Failed to load creators"))
        except UnauthorizedError:
            raise
        except ApiError:
            raise first_error from None


async def swipe_action(session: ApiSession, creator_id: str, action: str) -> SwipeResponse:
    """Record a like, pass or superlike on a creator."""
    if action not in SWIPE_ACTIONS:
        raise ValueError(f"Invalid swipe action: {action}")
    try:
        body = await api_post(
            session.client,
            SWIPE_PATH,
            session.token,
            {"creatorId": creator_id, "action": action},
            role=session.role,
        )
    except httpx.HTTPError as e:
        raise_api_error(e)
    return SwipeResponse.from_api(check_envelope(body, "Failed to record swipe"))


async def block_creator(session: ApiSession, creator_id: str, reason: str = "") -> dict[str, Any]:
    """Block a creator on the server."""
    try:
        body = await api_post(
            session.client,
            block_path(creator_id),
            session.token,
            {"reason": reason},
            role=session.role,
        )
    except httpx.HTTPError as e:
        raise_api_error(e)
    return check_envelope(body, "Failed to block user")


async def unblock_creator(session: ApiSession, creator_id: str) -> dict[str, Any]:
    """Remove a block on the server."""
    try:
        body = await api_delete(
            session.client, block_path(creator_id), session.token, role=session.role,
        )
    except httpx.HTTPError as e:
        raise_api_error(e)
    return check_envelope(body, "Failed to unblock user")


async def get_blocked_creators(session: ApiSession) -> list[str]:
    """Return the ids of creators the current member has blocked."""
    body = check_envelope(await _get(session, BLOCKED_PATH), "Failed to load blocked users")
    records = body.get("data")
    if isinstance(records, dict):
        records = records.get("blocked") or records.get("creators")
    ids: list[str] = []
    for record in records or []:
        if isinstance(record, dict):
            record_id = record.get("_id") or record.get("id") or record.get("creatorId")
            if record_id:
                ids.append(str(record_id))
        elif record:
            ids.append(str(record))
    return ids


async def get_connections(session: ApiSession) -> list[dict[str, Any]]:
    """Return the member's existing connection records."""
    body = check_envelope(await _get(session, CONNECTIONS_PATH), "Failed to load connections")
    data = body.get("data")
    if isinstance(data, dict):
        data = data.get("connections")
    return [record for record in data or [] if isinstance(record, dict)]
