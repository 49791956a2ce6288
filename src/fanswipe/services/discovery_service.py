"""
Discovery swipe stack: candidate loading, filtering, swiping and rewind.

The stack advances on a fixed timer after each swipe. The matching call runs
in the background and never blocks or rolls back that advance; failed calls
are logged and kept in ``failed_swipes`` without retry.
"""
import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import ValidationError

from fanswipe.api_client import ApiSession
from fanswipe.core.config import Settings
from fanswipe.schemas.connection import (
    CardIndicator,
    ConnectionData,
    ConnectionEvent,
    ConnectionStatus,
    MessageSummary,
)
from fanswipe.schemas.discovery import (
    BrowseFilters,
    SwipeCandidate,
    SwipeDirection,
    SwipeHistoryEntry,
    SwipeResponse,
    direction_to_action,
)
from fanswipe.services import member_service
from fanswipe.services.connection_presenter import ConnectionModal
from fanswipe.services.exceptions import FanswipeError, StorageError, UnauthorizedError
from fanswipe.services.gestures import interpret_drag
from fanswipe.services.safety_manager import SafetyManager
from fanswipe.services.storage import KeyValueStore, MemoryStore, StorageKeys

module_logger = logging.getLogger(__name__)

StackState = Literal["loading", "ready", "empty", "error", "unauthorized"]
EmptyReason = Literal["filters", "no_candidates"]

SWIPE_DIRECTIONS: frozenset[str] = frozenset({"left", "right", "up"})


@dataclass(frozen=True)
class FailedSwipe:
    """A swipe whose matching call failed. The stack already moved past it."""

    candidate_id: str
    action: str
    error: str


class SwipeStackController:
    """State of one discovery session over a batch of candidates."""

    def __init__(  # noqa: PLR0913
        self,
        session: ApiSession,
        *,
        store: KeyValueStore | None = None,
        safety: SafetyManager | None = None,
        modal: ConnectionModal | None = None,
        advance_delay: float = 0.3,
        window: int = 3,
        new_member_days: int = 30,
        storage_prefix: str = "fanswipe_",
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._session = session
        self._store = store if store is not None else MemoryStore()
        self._safety = safety
        self._keys = StorageKeys(storage_prefix)
        self._logger = logger or module_logger
        self._clock = clock or (lambda: datetime.now(UTC))
        self._pending: set[asyncio.Task] = set()
        self._loaded = False
        self._closed = False
        self._animating = False
        self._exhausted = False

        self.modal = modal or ConnectionModal(user_role="creator" if session.role == "creator" else "member")
        self.advance_delay = advance_delay
        self.window = window
        self.new_member_days = new_member_days

        self.state: StackState = "loading"
        self.error_message: str | None = None
        self.filters = BrowseFilters()
        self.candidates: list[SwipeCandidate] = []
        self.filtered: list[SwipeCandidate] = []
        self.current_index = 0
        self.history: list[SwipeHistoryEntry] = []
        self.connections: dict[str, ConnectionStatus] = {}
        self.messages: dict[str, MessageSummary] = {}
        self.connection_events: list[ConnectionEvent] = []
        self.failed_swipes: list[FailedSwipe] = []

    @classmethod
    def from_settings(
        cls,
        session: ApiSession,
        settings: Settings,
        **kwargs: Any,
    ) -> "SwipeStackController":
        """Build a controller with timing and window values from Settings."""
        kwargs.setdefault("advance_delay", settings.swipe_advance_delay)
        kwargs.setdefault("window", settings.stack_window)
        kwargs.setdefault("new_member_days", settings.new_member_days)
        kwargs.setdefault("storage_prefix", settings.storage_prefix)
        kwargs.setdefault(
            "modal",
            ConnectionModal(
                user_role=settings.user_role,
                auto_close_seconds=settings.modal_auto_close_seconds,
            ),
        )
        return cls(session, **kwargs)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> StackState:
        """
        Load saved filters, the candidate batch and existing connections.

        The two remote loads run concurrently. Only the candidate load decides
        the resulting state; connection indicators are best-effort.
        """
        self.state = "loading"
        self.error_message = None
        self._closed = False
        self._load_filters()

        candidates_result, _ = await asyncio.gather(
            member_service.get_swipe_stack(self._session),
            self._load_existing_connections(),
            return_exceptions=True,
        )

        if isinstance(candidates_result, UnauthorizedError):
            self._logger.warning("Candidate load unauthorized, login required")
            self.candidates = []
            self.filtered = []
            self.state = "unauthorized"
            return self.state
        if isinstance(candidates_result, FanswipeError):
            self._logger.warning("Candidate load failed: %s", candidates_result.message)
            self.candidates = []
            self.filtered = []
            self.error_message = candidates_result.message or "Failed to load creators"
            self.state = "error"
            return self.state
        if isinstance(candidates_result, BaseException):
            raise candidates_result

        self.candidates = self._normalize(candidates_result)
        self._logger.info("Loaded %d candidates", len(self.candidates))
        self._loaded = True
        self.current_index = 0
        self._exhausted = False
        self.history.clear()
        self.apply_filters()
        return self.state

    def _normalize(self, records: list[dict[str, Any]]) -> list[SwipeCandidate]:
        candidates = []
        for record in records:
            try:
                candidates.append(SwipeCandidate.from_api(record))
            except ValidationError as e:
                self._logger.warning("Skipping malformed candidate record: %s", e)
        return candidates

    async def _load_existing_connections(self) -> None:
        """Build poke/like/message lookups keyed by creator id. Failures are logged only."""
        try:
            records = await member_service.get_connections(self._session)
        except FanswipeError as e:
            self._logger.warning("Failed to load existing connections: %s", e.message)
            return

        connections: dict[str, ConnectionStatus] = {}
        messages: dict[str, MessageSummary] = {}
        for record in records:
            creator = record.get("creator")
            creator_id = (creator.get("_id") or creator.get("id")) if isinstance(creator, dict) else creator
            if not creator_id:
                continue
            creator_id = str(creator_id)
            connections[creator_id] = ConnectionStatus(
                has_poked=bool(record.get("creatorLiked")),
                has_liked=bool(record.get("memberLiked")),
                is_connected=bool(record.get("isConnected")),
            )
            preview = record.get("lastMessagePreview")
            if preview:
                messages[creator_id] = MessageSummary(
                    message_count=record.get("messageCount") or 0,
                    last_message=preview.get("content") if isinstance(preview, dict) else str(preview),
                )
        self.connections = connections
        self.messages = messages

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def _load_filters(self) -> None:
        try:
            raw = self._store.get(self._keys.browse_filters)
        except StorageError as e:
            self._logger.warning("Failed to load saved filters: %s", e)
            return
        if not raw:
            return
        try:
            self.filters = BrowseFilters.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            self._logger.warning("Ignoring invalid saved filters: %s", e)

    def apply_filters(self, filters: BrowseFilters | None = None) -> list[SwipeCandidate]:
        """
        Re-derive the filtered stack from the candidates.

        Blocked and reported creators are always dropped. The position resets
        to the top when it no longer points inside the filtered stack.
        """
        if filters is not None:
            self.filters = filters
        now = self._clock()
        self.filtered = [
            candidate
            for candidate in self.candidates
            if not self._is_suppressed(candidate)
            and self.filters.matches(candidate, now=now, new_member_days=self.new_member_days)
        ]
        if self.current_index >= len(self.filtered):
            self.current_index = 0
            self._exhausted = False
        if self._loaded and self.state != "unauthorized":
            self.state = "ready" if self.filtered else "empty"
        return self.filtered

    def set_filters(self, filters: BrowseFilters, *, persist: bool = True) -> list[SwipeCandidate]:
        """Replace the active filters, optionally saving them, and re-filter."""
        if persist:
            try:
                self._store.set(
                    self._keys.browse_filters,
                    json.dumps(filters.model_dump(mode="json", by_alias=True, exclude_defaults=True)),
                )
            except StorageError as e:
                self._logger.warning("Failed to save filters: %s", e)
        return self.apply_filters(filters)

    def reset_filters(self) -> list[SwipeCandidate]:
        return self.set_filters(BrowseFilters())

    @property
    def has_active_filters(self) -> bool:
        return self.filters.has_active_filters()

    @property
    def empty_reason(self) -> EmptyReason | None:
        """Why the stack is empty: filters too strict, or nothing to show at all."""
        if self.state != "empty":
            return None
        if self.candidates and self.has_active_filters:
            return "filters"
        return "no_candidates"

    def _is_suppressed(self, candidate: SwipeCandidate) -> bool:
        if self._safety is None:
            return False
        return self._safety.is_user_blocked(candidate.id) or self._safety.is_creator_reported(
            candidate.id,
        )

    # -------------------------------------------------------------------------
    # Stack
    # -------------------------------------------------------------------------

    @property
    def top_card(self) -> SwipeCandidate | None:
        """
        The only interactive card.

        None when the stack is empty or the last card has already been decided.
        """
        if self._exhausted:
            return None
        if 0 <= self.current_index < len(self.filtered):
            return self.filtered[self.current_index]
        return None

    @property
    def is_animating(self) -> bool:
        """Whether a swipe is waiting out its advance delay."""
        return self._animating

    def visible_cards(self) -> list[SwipeCandidate]:
        """The top card plus lookahead, at most ``window`` cards."""
        if self._exhausted:
            return []
        return self.filtered[self.current_index:self.current_index + self.window]

    async def swipe(self, direction: SwipeDirection) -> SwipeHistoryEntry | None:
        """
        Swipe the top card.

        Records the decision, starts the matching call in the background,
        waits for the advance delay, then moves to the next card. After the
        last card is decided the index stays on it and ``top_card`` is None.
        Returns None when there is no card to swipe or another swipe is still
        animating.
        """
        if direction not in SWIPE_DIRECTIONS:
            raise ValueError(f"Invalid swipe direction: {direction}")
        if self._animating:
            return None
        candidate = self.top_card
        if candidate is None:
            return None

        self._animating = True
        try:
            index = self.current_index
            entry = SwipeHistoryEntry(candidate=candidate, action=direction)
            self.history.append(entry)

            task = asyncio.create_task(self._send_swipe(candidate, direction_to_action(direction)))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

            await asyncio.sleep(self.advance_delay)
            if index < len(self.filtered) - 1:
                self.current_index = index + 1
            else:
                self._exhausted = True
        finally:
            self._animating = False
        return entry

    async def swipe_gesture(
        self,
        offset_x: float,
        offset_y: float,
        velocity_x: float = 0,
        velocity_y: float = 0,
    ) -> SwipeHistoryEntry | None:
        """Swipe according to a finished drag; None when the card snaps back."""
        direction = interpret_drag(offset_x, offset_y, velocity_x, velocity_y)
        if direction is None:
            return None
        return await self.swipe(direction)

    def rewind(self) -> bool:
        """
        Undo the most recent swipe locally.

        Returns False when there is nothing to undo or a swipe is animating.
        Undoing the decision on the last card brings that card back without
        moving the index.
        """
        if self._animating or not self.history:
            return False
        if self._exhausted:
            self.history.pop()
            self._exhausted = False
            return True
        if self.current_index == 0:
            return False
        self.history.pop()
        self.current_index -= 1
        return True

    async def _send_swipe(self, candidate: SwipeCandidate, action: str) -> SwipeResponse | None:
        try:
            response = await member_service.swipe_action(self._session, candidate.id, action)
        except UnauthorizedError as e:
            self._logger.warning("Swipe on %s unauthorized: %s", candidate.id, e.message)
            self.failed_swipes.append(FailedSwipe(candidate.id, action, e.message))
            self.state = "unauthorized"
            return None
        except FanswipeError as e:
            self._logger.warning("Swipe %s on %s failed: %s", action, candidate.id, e.message)
            self.failed_swipes.append(FailedSwipe(candidate.id, action, e.message))
            return None
        except ValidationError as e:
            self._logger.warning("Unexpected swipe response for %s: %s", candidate.id, e)
            self.failed_swipes.append(FailedSwipe(candidate.id, action, "Invalid swipe response"))
            return None

        if response.is_connected and not self._closed:
            self._open_connection(candidate, action, response)
        return response

    def _open_connection(
        self,
        candidate: SwipeCandidate,
        action: str,
        response: SwipeResponse,
    ) -> ConnectionEvent:
        event = ConnectionEvent(
            type="instant_connection",
            data=ConnectionData(
                connection_id=response.connection_id,
                creator_id=candidate.id,
                creator_name=candidate.display_name,
                profile_image=candidate.profile_image,
            ),
            participants=[candidate.id],
            context={"action": action},
        )
        self.connection_events.append(event)
        self.modal.open(event)
        self._logger.info("Connection established with %s", candidate.id)
        return event

    async def wait_for_pending(self) -> None:
        """Wait for in-flight matching calls to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        """
        Leave the discovery session.

        History is cleared and the modal dismissed. In-flight matching calls
        are not cancelled, but their results no longer open the modal.
        """
        self._closed = True
        self.history.clear()
        self.modal.close()

    # -------------------------------------------------------------------------
    # Presentation helpers
    # -------------------------------------------------------------------------

    @property
    def login_path(self) -> str:
        return "/creator/login" if self._session.role == "creator" else "/member/login"

    def card_indicators(self, candidate: SwipeCandidate) -> list[CardIndicator]:
        """Badges for creators who already showed interest or rank highly."""
        indicators = []
        if candidate.has_messaged or candidate.id in self.messages:
            indicators.append(CardIndicator("message", "Messaged You!", "#17D2C2"))
        status = self.connections.get(candidate.id)
        if candidate.has_poked or (status is not None and status.has_poked):
            indicators.append(CardIndicator("poke", "Poked You!", "#FFD700"))
        if candidate.is_top_creator:
            indicators.append(CardIndicator("top", "Top Creator", "#FF006E"))
        return indicators

    @staticmethod
    def profile_path(candidate: SwipeCandidate) -> str:
        return f"/creator/{candidate.username or candidate.id}"
