"""Pytest fixtures for testing."""
from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
import respx

from fanswipe.api_client import ApiSession
from fanswipe.services.notifications import RecordingNotifier
from fanswipe.services.safety_manager import PendingUserReportSink, SafetyManager
from fanswipe.services.storage import MemoryStore

BASE_URL = "http://test-api.local/api"


@pytest.fixture
def mock_api() -> Generator[respx.MockRouter]:
    """Context manager for mocking API responses."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
async def http_client() -> AsyncGenerator[httpx.AsyncClient]:
    """HTTP client pointed at the mocked API."""
    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def session(http_client: httpx.AsyncClient) -> ApiSession:
    """Authenticated member session."""
    return ApiSession(client=http_client, token="test_token", role="member")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def user_report_sink() -> PendingUserReportSink:
    return PendingUserReportSink()


@pytest.fixture
def safety(
    session: ApiSession,
    store: MemoryStore,
    notifier: RecordingNotifier,
    user_report_sink: PendingUserReportSink,
) -> SafetyManager:
    """A fresh SafetyManager per test."""
    return SafetyManager(
        session,
        store,
        notifier=notifier,
        user_report_sink=user_report_sink,
    )


def make_creator(creator_id: str, **overrides: Any) -> dict[str, Any]:
    """Creator record as returned by the swipe stack endpoint."""
    record: dict[str, Any] = {
        "_id": creator_id,
        "displayName": f"Creator {creator_id}",
        "profileImage": f"https://cdn.example.com/{creator_id}.jpg",
        "age": 24,
        "isVerified": True,
        "isOnline": False,
        "bodyType": "Athletic",
        "ethnicity": "Latina",
        "hairColor": "Brown",
        "height": 65,
        "location": {"city": "Austin", "state": "TX", "distance": 5},
        "createdAt": "2024-01-01T00:00:00Z",
    }
    record.update(overrides)
    return record


@pytest.fixture
def sample_stack() -> dict[str, Any]:
    """Swipe stack response with three creators."""
    return {
        "success": True,
        "data": [make_creator("c1"), make_creator("c2"), make_creator("c3")],
    }
