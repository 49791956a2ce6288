"""Shared exceptions for service layer operations."""
from typing import NoReturn

import httpx

from fanswipe.shared.api_errors import parse_http_error


class FanswipeError(Exception):
    """Base class for all client-side errors raised by fanswipe."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SafetyValidationError(FanswipeError):
    """
    Raised when a safety action is submitted with invalid input.

    Covers missing ids, unknown report reasons, and reasons that require
    details submitted without them. Always raised before any remote call.
    """


class ApiError(FanswipeError):
    """Raised when a remote API call fails."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "internal",
        status_code: int | None = None,
        retry_after: int | None = None,
    ) -> None:
        self.category = category
        self.status_code = status_code
        self.retry_after = retry_after
        super().__init__(message)


class UnauthorizedError(ApiError):
    """Raised on HTTP 401. Callers are expected to send the user to login."""

    def __init__(self, message: str = "Your session has expired. Please log in again.") -> None:
        super().__init__(message, category="auth", status_code=401)


class RemoteFailureError(ApiError):
    """Raised on any other non-2xx response, a soft-failure body, or a network error."""


class StorageError(FanswipeError):
    """Raised by a key-value store backend when a read or write fails."""


def raise_api_error(e: httpx.HTTPError) -> NoReturn:
    """Translate an httpx error into the client's exception taxonomy. Always raises."""
    if isinstance(e, httpx.HTTPStatusError):
        parsed = parse_http_error(e)
        if parsed.category == "auth":
            raise UnauthorizedError(parsed.message) from e
        raise RemoteFailureError(
            parsed.message,
            category=parsed.category,
            status_code=parsed.status_code,
            retry_after=parsed.retry_after,
        ) from e
    raise RemoteFailureError(
        "Network error. Please check your connection.",
        category="network",
    ) from e
