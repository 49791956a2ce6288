"""Tests for discovery schemas: candidate normalization and filter matching."""
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from fanswipe.schemas.discovery import (
    BrowseFilters,
    NumberRange,
    SwipeCandidate,
    SwipeResponse,
    direction_to_action,
)

from tests.conftest import make_creator


def candidate(**overrides) -> SwipeCandidate:
    return SwipeCandidate.from_api(make_creator("c1", **overrides))


# =============================================================================
# SwipeCandidate
# =============================================================================


def test__from_api__stack_shape() -> None:
    result = candidate(photos=["a.jpg", {"url": "b.jpg"}, {"caption": "no url"}])

    assert result.id == "c1"
    assert result.display_name == "Creator c1"
    assert result.verified is True
    assert result.location.label() == "Austin, TX"
    assert result.location.distance == 5
    assert result.photos == ["a.jpg", "b.jpg"]
    assert result.created_at == datetime(2024, 1, 1, tzinfo=UTC)


def test__from_api__discover_shape() -> None:
    result = SwipeCandidate.from_api({
        "id": 7,
        "name": "Ana",
        "profilePhoto": "ana.jpg",
        "verified": True,
        "location": "Miami",
    })

    assert result.id == "7"
    assert result.display_name == "Ana"
    assert result.profile_image == "ana.jpg"
    assert result.verified is True
    assert result.location.city == "Miami"
    assert result.location.distance is None


def test__from_api__missing_values_get_defaults() -> None:
    result = SwipeCandidate.from_api({"_id": "x"})

    assert result.display_name == "Unknown"
    assert result.location.city == "Unknown"
    assert result.age is None


def test__from_api__requires_id() -> None:
    with pytest.raises(ValidationError):
        SwipeCandidate.from_api({"displayName": "Nobody"})


@pytest.mark.parametrize(
    ("direction", "action"),
    [("right", "like"), ("up", "superlike"), ("left", "pass")],
)
def test__direction_to_action(direction: str, action: str) -> None:
    assert direction_to_action(direction) == action


# =============================================================================
# NumberRange / BrowseFilters
# =============================================================================


def test__number_range__contains() -> None:
    age = NumberRange(min=18, max=25)

    assert age.contains(18)
    assert age.contains(25)
    assert not age.contains(26)
    assert not age.contains(None)
    assert NumberRange().contains(None)
    assert NumberRange(min=21).contains(99)


def test__browse_filters__default_is_inactive() -> None:
    filters = BrowseFilters()

    assert filters.has_active_filters() is False
    assert filters.matches(candidate())


def test__browse_filters__distance_disabled_is_inactive() -> None:
    filters = BrowseFilters(distance=10)

    assert filters.has_active_filters() is False
    assert filters.matches(candidate(location={"city": "Austin", "distance": 50}))


def test__browse_filters__distance() -> None:
    filters = BrowseFilters(distance_enabled=True, distance=10)

    assert filters.has_active_filters()
    assert filters.matches(candidate())
    assert not filters.matches(candidate(location={"city": "Dallas", "distance": 200}))
    assert filters.matches(candidate(location={"city": "Dallas"}))


def test__browse_filters__location_substring() -> None:
    filters = BrowseFilters(location="  tx ")

    assert filters.matches(candidate())
    assert not filters.matches(candidate(location="Miami, FL"))


@pytest.mark.parametrize(
    ("filters", "overrides", "expected"),
    [
        (BrowseFilters(body_types=["Athletic", "Slim"]), {}, True),
        (BrowseFilters(body_types=["Curvy"]), {}, False),
        (BrowseFilters(ethnicities=["Latina"]), {}, True),
        (BrowseFilters(hair_colors=["Blonde"]), {}, False),
        (BrowseFilters(height=NumberRange(min=60, max=70)), {}, True),
        (BrowseFilters(height=NumberRange(min=66)), {}, False),
        (BrowseFilters(height=NumberRange(min=60)), {"height": None}, False),
        (BrowseFilters(online_only=True), {}, False),
        (BrowseFilters(online_only=True), {"isOnline": True}, True),
        (BrowseFilters(verified_only=True), {"isVerified": False}, False),
        (BrowseFilters(age_range=NumberRange(min=18, max=25)), {"age": 30}, False),
    ],
)
def test__browse_filters__criteria(filters: BrowseFilters, overrides: dict, expected: bool) -> None:
    assert filters.has_active_filters()
    assert filters.matches(candidate(**overrides)) is expected


def test__browse_filters__new_members_only() -> None:
    filters = BrowseFilters(new_members_only=True)
    now = datetime(2024, 1, 20, tzinfo=UTC)

    assert filters.matches(candidate(), now=now)
    assert not filters.matches(candidate(), now=now, new_member_days=7)
    assert not filters.matches(candidate(createdAt=None), now=now)


def test__browse_filters__camel_case_round_trip() -> None:
    filters = BrowseFilters.model_validate(
        {"ageRange": {"min": 21}, "bodyTypes": ["Athletic"], "newMembersOnly": True},
    )

    assert filters.age_range.min == 21
    assert filters.body_types == ["Athletic"]
    assert filters.new_members_only is True


# =============================================================================
# SwipeResponse
# =============================================================================


def test__swipe_response__top_level_flag() -> None:
    response = SwipeResponse.from_api({"success": True, "isConnected": True, "connectionId": "k1"})

    assert response.is_connected is True
    assert response.connection_id == "k1"


def test__swipe_response__nested_data() -> None:
    response = SwipeResponse.from_api(
        {"success": True, "data": {"isConnected": True, "connection": {"id": 99}}},
    )

    assert response.is_connected is True
    assert response.connection_id == "99"


def test__swipe_response__data_is_connection_document() -> None:
    response = SwipeResponse.from_api(
        {
            "success": True,
            "isConnected": True,
            "isNewConnection": True,
            "data": {"_id": "conn7", "creator": "c1", "member": "m1"},
        },
    )

    assert response.is_connected is True
    assert response.connection_id == "conn7"
    assert response.model_extra["isNewConnection"] is True
    assert "creator" not in response.model_extra


def test__swipe_response__defaults_to_not_connected() -> None:
    response = SwipeResponse.from_api({"success": True})

    assert response.is_connected is False
    assert response.connection_id is None
