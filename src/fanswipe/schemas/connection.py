"""Schemas for connection events and their modal presentation."""
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import Field

from fanswipe.schemas.safety import CamelModel

ConnectionType = Literal[
    "mutual_interest",
    "creator_reached_out",
    "high_value_connection",
    "first_connection",
    "instant_connection",
    "creator_poke",
]
UserRole = Literal["member", "creator"]
ModalAction = Literal["chat", "profile", "close"]
IndicatorType = Literal["message", "poke", "top"]


class ConnectionData(CamelModel):
    """Context shown in a connection modal."""

    model_config = CamelModel.model_config | {"extra": "allow"}

    connection_id: str | None = None
    creator_id: str | None = None
    member_id: str | None = None
    creator_name: str | None = None
    member_name: str | None = None
    profile_photo: str | None = None
    profile_image: str | None = None
    message: str | None = None
    spending: float | None = None


class ConnectionEvent(CamelModel):
    """Why a connection modal is being shown, and for whom."""

    type: str
    data: ConnectionData = Field(default_factory=ConnectionData)
    participants: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class ConnectionPresentation:
    """Canned copy and call-to-action wiring for one kind of connection."""

    title: str
    subtitle: str
    description: str
    icon: str | None
    action_text: str
    secondary_text: str
    primary_action: ModalAction
    secondary_action: ModalAction
    highlight: bool
    premium: bool = False


class ConnectionStatus(CamelModel):
    """Existing relationship with a creator, from the connections endpoint."""

    has_poked: bool = False
    has_liked: bool = False
    is_connected: bool = False


class MessageSummary(CamelModel):
    """Existing message thread with a creator, from the connections endpoint."""

    has_message: bool = True
    message_count: int = 0
    last_message: str | None = None


@dataclass(frozen=True)
class CardIndicator:
    """Badge rendered on a swipe card."""

    type: IndicatorType
    text: str
    color: str
