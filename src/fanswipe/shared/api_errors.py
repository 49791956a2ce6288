"""
Shared API error parsing.

Extracts semantic meaning from HTTP errors returned by the platform API so that
services can translate them into the client's exception taxonomy and into
user-facing notification text.
"""

from dataclasses import dataclass
from typing import Any, Literal

import httpx

ErrorCategory = Literal[
    "auth",          # 401 - Missing, invalid or expired token
    "forbidden",     # 403 - Access denied
    "not_found",     # 404 - Resource not found
    "validation",    # 400/422 - Validation error
    "rate_limited",  # 429 - Too many requests
    "internal",      # 5xx or unexpected errors
]

DEFAULT_RETRY_AFTER_SECONDS = 60


@dataclass
class ParsedApiError:
    """Parsed API error with semantic category and message."""

    category: ErrorCategory
    message: str
    status_code: int
    retry_after: int | None = None


def parse_http_error(e: httpx.HTTPStatusError) -> ParsedApiError:  # noqa: PLR0911
    """
    Parse HTTP error into semantic categories.

    Args:
        e: The HTTP status error from httpx

    Returns:
        ParsedApiError with category, message and optional retry_after
    """
    status = e.response.status_code

    if status == 401:
        return ParsedApiError("auth", "Your session has expired. Please log in again.", status)

    if status == 403:
        return ParsedApiError(
            "forbidden", "You do not have permission to perform this action.", status,
        )

    if status == 404:
        return ParsedApiError("not_found", "The requested resource was not found.", status)

    if status == 429:
        retry_after = _parse_retry_after(e.response.headers.get("retry-after"))
        return ParsedApiError(
            "rate_limited",
            f"Too many requests. Please try again in {retry_after} seconds.",
            status,
            retry_after=retry_after,
        )

    if status in (400, 422):
        return ParsedApiError("validation", _extract_message(e, "Validation failed"), status)

    if status >= 500:
        return ParsedApiError("internal", "Server error. Please try again later.", status)

    return ParsedApiError("internal", _extract_message(e, f"API error {status}"), status)


def _parse_retry_after(value: str | None) -> int:
    """Parse a Retry-After header given in seconds, falling back to the default."""
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        return max(0, int(value))
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS


def _safe_get_body(e: httpx.HTTPStatusError) -> dict[str, Any]:
    """Safely extract a JSON object body from an error response."""
    try:
        body = e.response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _extract_message(e: httpx.HTTPStatusError, default: str) -> str:
    """
    Extract a human-readable message from an error response.

    The platform API returns ``{"success": false, "message": "..."}`` on most
    failures, with ``errors`` holding per-field messages on validation errors.
    """
    body = _safe_get_body(e)
    message = body.get("message")
    if isinstance(message, str) and message:
        return message

    errors = body.get("errors")
    if isinstance(errors, dict) and errors:
        return "; ".join(f"{field}: {msg}" for field, msg in errors.items())
    if isinstance(errors, list) and errors:
        parts = []
        for err in errors:
            if isinstance(err, dict):
                field = err.get("field") or err.get("param") or "unknown"
                parts.append(f"{field}: {err.get('msg') or err.get('message') or 'invalid'}")
            else:
                parts.append(str(err))
        return "; ".join(parts)

    detail = body.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    return default
