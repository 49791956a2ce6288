"""Presentation of new connections: canned modal copy and CTA routing."""
import asyncio
from collections.abc import Callable
from typing import Any

from fanswipe.schemas.connection import (
    ConnectionData,
    ConnectionEvent,
    ConnectionPresentation,
    ModalAction,
    UserRole,
)


def _mutual_interest(data: ConnectionData, role: str) -> ConnectionPresentation:
    member = role == "member"
    return ConnectionPresentation(
        title="It's a Connection!",
        subtitle=(
            f"{data.creator_name} was already interested in you!"
            if member
            else f"{data.member_name} already liked your profile!"
        ),
        description=(
            "They sent you a message earlier. Check it out!"
            if member
            else "This is a hot lead - they're ready to spend!"
        ),
        icon="heart",
        action_text="Start Chat",
        secondary_text="View Profile",
        primary_action="chat",
        secondary_action="profile",
        highlight=True,
    )


def _creator_reached_out(data: ConnectionData, role: str) -> ConnectionPresentation:  # noqa: ARG001
    return ConnectionPresentation(
        title="VIP Interest!",
        subtitle=f"{data.creator_name} sent you an exclusive message!",
        description="This creator specifically chose you. Don't miss out!",
        icon="message-circle",
        action_text="Read Message",
        secondary_text="View Profile",
        primary_action="chat",
        secondary_action="profile",
        highlight=True,
    )


def _high_value_connection(data: ConnectionData, role: str) -> ConnectionPresentation:
    member = role == "member"
    spending = f"{data.spending:g}" if data.spending is not None else "0"
    return ConnectionPresentation(
        title="Premium Connection!",
        subtitle=(
            "You connected with a top creator!" if member else "You connected with a VIP member!"
        ),
        description=(
            "This creator has exclusive content just for you"
            if member
            else f"{data.member_name} has spent ${spending}+ on the platform"
        ),
        icon="crown",
        action_text="Unlock Content" if member else "Send Offer",
        secondary_text="View Profile",
        primary_action="chat",
        secondary_action="profile",
        highlight=True,
        premium=True,
    )


def _first_connection(data: ConnectionData, role: str) -> ConnectionPresentation:  # noqa: ARG001
    return ConnectionPresentation(
        title="Your First Connection!",
        subtitle="Congratulations on making your first connection!",
        description="This is the beginning of something special",
        icon="star",
        action_text="Start Chat",
        secondary_text="View Profile",
        primary_action="chat",
        secondary_action="profile",
        highlight=True,
    )


def _instant_connection(data: ConnectionData, role: str) -> ConnectionPresentation:
    other = data.creator_name if role == "member" else data.member_name
    return ConnectionPresentation(
        title="Instant Connection!",
        subtitle=f"You and {other} liked each other!",
        description="When you know, you know! Start chatting now.",
        icon="zap",
        action_text="Start Chat",
        secondary_text="View Profile",
        primary_action="chat",
        secondary_action="profile",
        highlight=True,
    )


def _creator_poke(data: ConnectionData, role: str) -> ConnectionPresentation:  # noqa: ARG001
    return ConnectionPresentation(
        title="You Got Poked!",
        subtitle=f"{data.creator_name} wants your attention!",
        description="They're interested in connecting with you",
        icon="sparkles",
        action_text="Poke Back",
        secondary_text="View Profile",
        primary_action="chat",
        secondary_action="profile",
        highlight=False,
    )


DEFAULT_PRESENTATION = ConnectionPresentation(
    title="New Connection!",
    subtitle="You've made a new connection!",
    description="Keep swiping to find more connections",
    icon="heart",
    action_text="View Connection",
    secondary_text="Keep Browsing",
    primary_action="profile",
    secondary_action="close",
    highlight=False,
)

PRESENTATIONS: dict[str, Callable[[ConnectionData, str], ConnectionPresentation]] = {
    "mutual_interest": _mutual_interest,
    "creator_reached_out": _creator_reached_out,
    "high_value_connection": _high_value_connection,
    "first_connection": _first_connection,
    "instant_connection": _instant_connection,
    "creator_poke": _creator_poke,
}


def build_presentation(
    connection_type: str | None,
    connection_data: ConnectionData | dict[str, Any] | None = None,
    user_role: UserRole = "member",
) -> ConnectionPresentation:
    """Pick the modal copy for a connection. Unknown types get the generic descriptor."""
    if connection_data is None:
        data = ConnectionData()
    elif isinstance(connection_data, ConnectionData):
        data = connection_data
    else:
        data = ConnectionData.model_validate(connection_data)
    builder = PRESENTATIONS.get(connection_type or "")
    if builder is None:
        return DEFAULT_PRESENTATION
    return builder(data, user_role)


class ConnectionModal:
    """
    Open/closed state of the connection modal and where its buttons lead.

    The modal stays open until dismissed or a CTA is used. Auto-close is off
    unless explicitly enabled.
    """

    def __init__(
        self,
        user_role: UserRole = "member",
        *,
        auto_close: bool = False,
        auto_close_seconds: float = 5.0,
    ) -> None:
        self.user_role = user_role
        self.auto_close = auto_close
        self.auto_close_seconds = auto_close_seconds
        self._event: ConnectionEvent | None = None
        self._presentation: ConnectionPresentation | None = None

    @property
    def is_open(self) -> bool:
        return self._event is not None

    @property
    def event(self) -> ConnectionEvent | None:
        return self._event

    @property
    def presentation(self) -> ConnectionPresentation | None:
        return self._presentation

    def open(self, event: ConnectionEvent) -> ConnectionPresentation:
        self._event = event
        self._presentation = build_presentation(event.type, event.data, self.user_role)
        return self._presentation

    def close(self) -> None:
        self._event = None
        self._presentation = None

    def profile_target(self) -> str | None:
        """Path of the other party's profile."""
        if self._event is None:
            return None
        data = self._event.data
        if self.user_role == "member":
            return f"/creator/{data.creator_id}"
        return f"/member/profile/{data.member_id}"

    def chat_target(self) -> str | None:
        """Path of the chat with the other party."""
        if self._event is None:
            return None
        data = self._event.data
        if self.user_role == "member":
            return f"/member/chat/{data.connection_id or data.creator_id}"
        return f"/creator/chat/{data.connection_id or data.member_id}"

    def _follow(self, action: ModalAction) -> str | None:
        if action == "chat":
            target = self.chat_target()
        elif action == "profile":
            target = self.profile_target()
        else:
            target = None
        self.close()
        return target

    def primary(self) -> str | None:
        """Activate the primary CTA. Returns the navigation target (None for close)."""
        if self._presentation is None:
            return None
        return self._follow(self._presentation.primary_action)

    def secondary(self) -> str | None:
        """Activate the secondary CTA. Returns the navigation target (None for close)."""
        if self._presentation is None:
            return None
        return self._follow(self._presentation.secondary_action)

    def click_content(self) -> str | None:
        """Clicking the modal body opens the other party's profile."""
        if self._presentation is None:
            return None
        return self._follow("profile")

    async def run_auto_close(self) -> bool:
        """
        Close the modal after the auto-close delay, if enabled.

        Returns True if this call closed the modal. A modal that was closed or
        replaced with another event during the wait is left alone.
        """
        if not self.auto_close or self._event is None:
            return False
        event = self._event
        await asyncio.sleep(self.auto_close_seconds)
        if self._event is not event:
            return False
        self.close()
        return True
