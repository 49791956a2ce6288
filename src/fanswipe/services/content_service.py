"""Service layer for content moderation endpoints."""
from datetime import UTC, datetime
from typing import Any

import httpx

from fanswipe.api_client import ApiSession, api_post
from fanswipe.services.exceptions import raise_api_error
from fanswipe.services.member_service import check_envelope


def report_path(content_id: str) -> str:
    return f"/content/{content_id}/report"


async def report_content(
    session: ApiSession,
    content_id: str,
    reason: str,
    details: str = "",
) -> dict[str, Any]:
    """Submit a content report to moderation."""
    payload = {
        "reason": reason,
        "details": details,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    try:
        body = await api_post(
            session.client, report_path(content_id), session.token, payload, role=session.role,
        )
    except httpx.HTTPError as e:
        raise_api_error(e)
    return check_envelope(body, "Failed to submit report")
