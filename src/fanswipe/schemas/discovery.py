"""Schemas for the discovery swipe stack."""
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

from pydantic import Field, field_validator

from fanswipe.schemas.safety import CamelModel

SwipeDirection = Literal["left", "right", "up"]
SwipeActionKind = Literal["like", "pass", "superlike"]

SWIPE_ACTIONS: frozenset[str] = frozenset({"like", "pass", "superlike"})


def direction_to_action(direction: str) -> SwipeActionKind:
    """Map a swipe direction to the action sent to the matching endpoint."""
    if direction == "right":
        return "like"
    if direction == "up":
        return "superlike"
    return "pass"


class CandidateLocation(CamelModel):
    """Coarse location of a candidate as reported by the API."""

    city: str = "Unknown"
    state: str = ""
    distance: float | None = None

    def label(self) -> str:
        """City and state joined for display and text matching."""
        return ", ".join(part for part in (self.city, self.state) if part)


class SwipeCandidate(CamelModel):
    """A creator profile projection shown in the discovery stack."""

    id: str
    username: str | None = None
    display_name: str = "Unknown"
    profile_image: str | None = None
    photos: list[str] = Field(default_factory=list)
    age: int | None = None
    verified: bool = False
    is_online: bool = False
    gender: str | None = None
    body_type: str | None = None
    ethnicity: str | None = None
    hair_color: str | None = None
    height: int | None = None
    bio: str = ""
    location: CandidateLocation = Field(default_factory=CandidateLocation)
    last_active: datetime | None = None
    created_at: datetime | None = None
    has_messaged: bool = False
    has_poked: bool = False
    is_top_creator: bool = False
    monthly_earnings: float = 0
    message_preview: str | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "SwipeCandidate":
        """
        Normalize a creator record from the stack or discover endpoints.

        The two endpoints disagree on several names (``_id``/``id``,
        ``displayName``/``name``, ``profileImage``/``profilePhoto``,
        ``isVerified``/``verified``). Location may be a string or an object.
        """
        location = raw.get("location")
        if isinstance(location, str):
            location = {"city": location}
        photos = [
            photo if isinstance(photo, str) else photo.get("url", "")
            for photo in raw.get("photos") or []
            if isinstance(photo, str) or isinstance(photo, dict)
        ]
        return cls(
            id=str(raw.get("_id") or raw.get("id") or ""),
            username=raw.get("username"),
            display_name=raw.get("displayName") or raw.get("name") or "Unknown",
            profile_image=raw.get("profileImage") or raw.get("profilePhoto"),
            photos=[photo for photo in photos if photo],
            age=raw.get("age"),
            verified=bool(raw.get("isVerified") or raw.get("verified")),
            is_online=bool(raw.get("isOnline")),
            gender=raw.get("gender"),
            body_type=raw.get("bodyType"),
            ethnicity=raw.get("ethnicity"),
            hair_color=raw.get("hairColor"),
            height=raw.get("height"),
            bio=raw.get("bio") or "",
            location=location or {},
            last_active=raw.get("lastActive"),
            created_at=raw.get("createdAt"),
            has_messaged=bool(raw.get("hasMessaged")),
            has_poked=bool(raw.get("hasPoked")),
            is_top_creator=bool(raw.get("isTopCreator")),
            monthly_earnings=raw.get("monthlyEarnings") or 0,
            message_preview=raw.get("messagePreview"),
        )

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Every candidate needs an id to be swiped on."""
        if not v:
            raise ValueError("Candidate is missing an id")
        return v


class NumberRange(CamelModel):
    """Inclusive numeric range; a missing bound is open."""

    min: float | None = None
    max: float | None = None

    def is_set(self) -> bool:
        return self.min is not None or self.max is not None

    def contains(self, value: float | None) -> bool:
        """Whether value lies in the range. Unknown values only match an unset range."""
        if not self.is_set():
            return True
        if value is None:
            return False
        if self.min is not None and value < self.min:
            return False
        return not (self.max is not None and value > self.max)


class BrowseFilters(CamelModel):
    """
    Saved discovery filters, stored in the same camelCase shape the web app uses.

    Example:
        {"ageRange": {"min": 18, "max": 25}, "bodyTypes": ["Athletic"], "onlineOnly": true}
    """

    age_range: NumberRange | None = None
    distance_enabled: bool = False
    distance: float | None = None
    location: str | None = None
    body_types: list[str] = Field(default_factory=list)
    height: NumberRange | None = None
    ethnicities: list[str] = Field(default_factory=list)
    hair_colors: list[str] = Field(default_factory=list)
    online_only: bool = False
    verified_only: bool = False
    new_members_only: bool = False

    def has_active_filters(self) -> bool:
        """Whether any criterion would narrow the candidate list."""
        return any((
            self.age_range is not None and self.age_range.is_set(),
            self.distance_enabled and bool(self.distance),
            bool(self.location and self.location.strip()),
            bool(self.body_types),
            self.height is not None and self.height.is_set(),
            bool(self.ethnicities),
            bool(self.hair_colors),
            self.online_only,
            self.verified_only,
            self.new_members_only,
        ))

    def matches(  # noqa: PLR0911
        self,
        candidate: SwipeCandidate,
        *,
        now: datetime | None = None,
        new_member_days: int = 30,
    ) -> bool:
        """Whether the candidate passes every active criterion."""
        if self.age_range is not None and not self.age_range.contains(candidate.age):
            return False

        if self.distance_enabled and self.distance:
            distance = candidate.location.distance
            if distance is not None and distance > self.distance:
                return False

        if self.location and self.location.strip():
            needle = self.location.strip().lower()
            if needle not in candidate.location.label().lower():
                return False

        if self.body_types and candidate.body_type not in self.body_types:
            return False

        if self.height is not None and not self.height.contains(candidate.height):
            return False

        if self.ethnicities and candidate.ethnicity not in self.ethnicities:
            return False

        if self.hair_colors and candidate.hair_color not in self.hair_colors:
            return False

        if self.online_only and not candidate.is_online:
            return False

        if self.verified_only and not candidate.verified:
            return False

        if self.new_members_only:
            if candidate.created_at is None:
                return False
            now = now or datetime.now(UTC)
            created_at = candidate.created_at
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=UTC)
            if created_at < now - timedelta(days=new_member_days):
                return False

        return True


class SwipeHistoryEntry(CamelModel):
    """One swipe decision, kept for single-level rewind."""

    candidate: SwipeCandidate
    action: SwipeDirection


class SwipeResponse(CamelModel):
    """Response of the matching endpoint to a swipe."""

    model_config = CamelModel.model_config | {"extra": "allow"}

    success: bool = True
    is_connected: bool = False
    connection_id: str | None = None
    message: str | None = None

    @classmethod
    def from_api(cls, body: dict[str, Any]) -> "SwipeResponse":
        """
        Parse a swipe response.

        ``isConnected`` may be at the top level or nested under ``data``. The
        connection id comes from ``data.connection`` or, when ``data`` is the
        connection document itself, from ``data._id``.
        """
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        merged = {k: v for k, v in body.items() if k != "data"}
        for key in ("success", "isConnected", "connectionId", "message"):
            if key not in merged and key in data:
                merged[key] = data[key]
        if "connectionId" not in merged:
            connection = data.get("connection") if isinstance(data.get("connection"), dict) else data
            connection_id = connection.get("_id") or connection.get("id")
            if connection_id:
                merged["connectionId"] = str(connection_id)
        return cls.model_validate(merged)
