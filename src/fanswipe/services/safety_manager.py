"""
Client-side safety and moderation state.

SafetyManager owns four membership sets (blocked users, hidden content,
reported content, reported creators) and the user's SafetySettings. It is the
only writer of their storage keys. Remote-backed actions (block, unblock,
report) mutate local state strictly after the server confirms; local actions
(hide, settings) apply immediately. Storage failures are logged, never raised.
"""
import json
import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any, Protocol, TypeVar

from pydantic import ValidationError

from fanswipe.api_client import ApiSession
from fanswipe.schemas.safety import (
    BlockResult,
    HideResult,
    NotificationKind,
    ReportResult,
    SafetyExport,
    SafetySettings,
    UserReport,
    should_auto_hide,
    should_auto_report,
    validate_report,
)
from fanswipe.services import content_service, member_service
from fanswipe.services.exceptions import (
    FanswipeError,
    RemoteFailureError,
    SafetyValidationError,
    StorageError,
)
from fanswipe.services.notifications import LoggingNotifier, Notifier
from fanswipe.services.storage import KeyValueStore, MemoryStore, StorageKeys

module_logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_HIDE_REASON = "user_hide"
AUTO_HIDE_REASON = "auto_hide_reported"


class UserReportSink(Protocol):
    """Destination for reports filed against user accounts."""

    async def submit_user_report(self, report: UserReport) -> None:
        ...


class PendingUserReportSink:
    """
    Placeholder sink used until the API exposes a user-report endpoint.

    Reports are logged and kept in memory; nothing is sent to the server.
    """

    def __init__(self) -> None:
        self.reports: list[UserReport] = []

    async def submit_user_report(self, report: UserReport) -> None:
        module_logger.warning(
            "No user-report endpoint available; keeping report against %s (%s) locally",
            report.user_id,
            report.reason,
        )
        self.reports.append(report)


def _field(item: Any, name: str) -> Any:
    """Read a field from a mapping or an object."""
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _content_id(item: Any) -> str | None:
    value = _field(item, "id") or _field(item, "_id")
    return str(value) if value else None


def _creator_id(item: Any) -> str | None:
    value = _field(item, "creator_id") or _field(item, "creatorId")
    if not value:
        creator = _field(item, "creator")
        if creator is not None and not isinstance(creator, str):
            value = _field(creator, "_id") or _field(creator, "id")
        elif creator:
            value = creator
    return str(value) if value else None


class SafetyManager:
    """Reporting, blocking and local content filtering for one user session."""

    def __init__(
        self,
        session: ApiSession | None = None,
        store: KeyValueStore | None = None,
        *,
        notifier: Notifier | None = None,
        user_report_sink: UserReportSink | None = None,
        logger: logging.Logger | None = None,
        storage_prefix: str = "fanswipe_",
    ) -> None:
        self._session = session
        self._store = store if store is not None else MemoryStore()
        self._notifier = notifier or LoggingNotifier()
        self._user_report_sink = user_report_sink or PendingUserReportSink()
        self._logger = logger or module_logger
        self._keys = StorageKeys(storage_prefix)

        self._safety_settings = self._load_settings()
        self._blocked_users = self._load_set(self._keys.blocked_users)
        self._hidden_content = self._load_set(self._keys.hidden_content)
        self._reported_content = self._load_set(self._keys.reported_content)
        self._reported_creators = self._load_set(self._keys.reported_creators)

    @property
    def storage_keys(self) -> StorageKeys:
        return self._keys

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    async def report_content(
        self,
        content_id: str,
        reason: str,
        details: str = "",
        **additional_data: Any,
    ) -> ReportResult:
        """
        Report a piece of content.

        Validation happens before any remote call. Local state changes only
        after the server accepts the report; critical and high severity
        reports also hide the content.

        Raises:
            SafetyValidationError: Missing id/reason, unknown reason, or missing
                details for a reason that requires them.
            ApiError: The server rejected the report or was unreachable.
        """
        details = (details or "").strip()
        try:
            if not content_id or not reason:
                raise SafetyValidationError("Content ID and reason are required")
            try:
                category = validate_report(reason, details)
            except ValueError as e:
                raise SafetyValidationError(str(e)) from e

            response = await content_service.report_content(
                self._require_session(), content_id, reason, details,
            )
        except FanswipeError as e:
            self._logger.warning("Report content %s failed: %s", content_id, e.message)
            self._notify("Failed to submit report", "error", e.message or "Please try again later")
            raise

        self._reported_content.add(content_id)
        self._save_set(self._keys.reported_content, self._reported_content)
        self._logger.info("Reported content %s for %s", content_id, reason)
        self._notify(
            "Report submitted successfully",
            "success",
            "Thank you for helping keep our community safe",
        )

        if should_auto_hide(category):
            self.hide_content(content_id, AUTO_HIDE_REASON)

        data = response.get("data") if isinstance(response.get("data"), dict) else {}
        report_id = data.get("reportId") or response.get("reportId")
        return ReportResult(
            success=True,
            report_id=str(report_id) if report_id else None,
            data={
                "contentId": content_id,
                "reason": reason,
                "details": details,
                "timestamp": datetime.now(UTC).isoformat(),
                "severity": category.severity,
                "autoEscalate": category.auto_escalate,
                **additional_data,
            },
        )

    async def report_user(self, user_id: str, reason: str, details: str = "") -> ReportResult:
        """
        Report a user account.

        The API has no user-report endpoint yet, so the report goes to the
        configured UserReportSink. No local set is changed.
        """
        try:
            if not user_id:
                raise SafetyValidationError("User ID is required")
            report = UserReport(user_id=user_id, reason=reason or "", details=details or "")
            await self._user_report_sink.submit_user_report(report)
        except FanswipeError as e:
            self._notify(
                "Failed to submit user report", "error", e.message or "Please try again later",
            )
            raise

        self._notify(
            "User report submitted",
            "success",
            "Thank you for helping keep our community safe",
        )
        return ReportResult(success=True, data=report.model_dump(mode="json", by_alias=True))

    # -------------------------------------------------------------------------
    # Blocking
    # -------------------------------------------------------------------------

    async def block_user(self, user_id: str, reason: str = "", details: str = "") -> BlockResult:
        """
        Block a user on the server, then locally.

        Reportable, non-low-severity reasons also file a user report. A failed
        auto-report is logged and does not undo the block.
        """
        try:
            if not user_id:
                raise SafetyValidationError("User ID is required")
            await member_service.block_creator(self._require_session(), user_id, reason)
        except FanswipeError as e:
            self._logger.warning("Block user %s failed: %s", user_id, e.message)
            self._notify("Failed to block user", "error", e.message or "Please try again later")
            raise

        self._blocked_users.add(user_id)
        self._save_set(self._keys.blocked_users, self._blocked_users)
        self._logger.info("Blocked user %s", user_id)

        if should_auto_report(reason):
            try:
                await self.report_user(user_id, reason, details)
            except FanswipeError as e:
                self._logger.warning("Auto-report failed after blocking %s: %s", user_id, e.message)

        self._notify(
            "User blocked successfully",
            "success",
            "This user can no longer contact you or see your content",
        )
        return BlockResult(success=True, user_id=user_id, reason=reason or None)

    async def unblock_user(self, user_id: str) -> BlockResult:
        """Remove a block on the server, then locally."""
        try:
            if not user_id:
                raise SafetyValidationError("User ID is required")
            await member_service.unblock_creator(self._require_session(), user_id)
        except FanswipeError as e:
            self._logger.warning("Unblock user %s failed: %s", user_id, e.message)
            self._notify("Failed to unblock user", "error", e.message or "Please try again later")
            raise

        self._blocked_users.discard(user_id)
        self._save_set(self._keys.blocked_users, self._blocked_users)
        self._logger.info("Unblocked user %s", user_id)
        self._notify(
            "User unblocked successfully",
            "success",
            "This user can now contact you and see your content again",
        )
        return BlockResult(success=True, user_id=user_id)

    async def sync_blocked_users(self) -> list[str]:
        """Replace the local blocked set with the server's list."""
        blocked = await member_service.get_blocked_creators(self._require_session())
        self._blocked_users = set(blocked)
        self._save_set(self._keys.blocked_users, self._blocked_users)
        return self.get_blocked_users()

    # -------------------------------------------------------------------------
    # Local content filtering
    # -------------------------------------------------------------------------

    def hide_content(self, content_id: str, reason: str = USER_HIDE_REASON) -> HideResult:
        """Hide content from this user's feeds. Local only."""
        self._hidden_content.add(content_id)
        self._save_set(self._keys.hidden_content, self._hidden_content)
        if reason == USER_HIDE_REASON:
            self._notify("Content hidden", "info", "This content has been hidden from your feed")
        return HideResult(success=True, target_id=content_id, reason=reason)

    def unhide_content(self, content_id: str) -> HideResult:
        """Show previously hidden content again. Local only."""
        self._hidden_content.discard(content_id)
        self._save_set(self._keys.hidden_content, self._hidden_content)
        self._notify(
            "Content unhidden", "info", "This content is now visible in your feed again",
        )
        return HideResult(success=True, target_id=content_id)

    def clear_hidden_content(self) -> None:
        self._hidden_content.clear()
        self._save_set(self._keys.hidden_content, self._hidden_content)
        self._notify(
            "Hidden content cleared", "info", "All previously hidden content is now visible",
        )

    def add_reported_creator(self, creator_id: str) -> HideResult:
        """Suppress all future content from a creator."""
        self._reported_creators.add(creator_id)
        self._save_set(self._keys.reported_creators, self._reported_creators)
        self._notify(
            "Creator content hidden",
            "info",
            "Future content from this creator will no longer appear in your feed",
        )
        return HideResult(success=True, target_id=creator_id)

    def remove_reported_creator(self, creator_id: str) -> HideResult:
        self._reported_creators.discard(creator_id)
        self._save_set(self._keys.reported_creators, self._reported_creators)
        self._notify(
            "Creator content restored",
            "info",
            "Content from this creator will now appear in your feed again",
        )
        return HideResult(success=True, target_id=creator_id)

    def should_filter_content(self, content: Any) -> bool:
        """
        Whether a content item must be kept out of view.

        Accepts a mapping or an object exposing ``id``/``_id``, ``creator_id``
        or ``creator``, ``explicit``, and ``creator.verified``/``creator.age``.
        """
        if content is None:
            return False

        content_id = _content_id(content)
        if content_id is not None:
            if content_id in self._hidden_content:
                return True
            if content_id in self._reported_content and self._safety_settings.hide_reported_content:
                return True

        creator_id = _creator_id(content)
        if creator_id is not None and (
            creator_id in self._blocked_users or creator_id in self._reported_creators
        ):
            return True

        return self._fails_settings_filters(content)

    def _fails_settings_filters(self, content: Any) -> bool:
        settings = self._safety_settings
        creator = _field(content, "creator")
        if isinstance(creator, str):
            creator = None

        if settings.filter_explicit and _field(content, "explicit"):
            return True

        if settings.verified_only and not (creator is not None and _field(creator, "verified")):
            return True

        age = _field(creator, "age") if creator is not None else None
        return bool(settings.min_creator_age and age and age < settings.min_creator_age)

    def filter_visible(self, items: Iterable[T]) -> list[T]:
        """Items that pass should_filter_content, in their original order."""
        return [item for item in items if not self.should_filter_content(item)]

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def get_safety_settings(self) -> SafetySettings:
        return self._safety_settings.model_copy()

    def update_safety_settings(
        self, new_settings: SafetySettings | Mapping[str, Any],
    ) -> SafetySettings:
        """Merge a partial update into the current settings and persist them."""
        if isinstance(new_settings, SafetySettings):
            updates = new_settings.model_dump(exclude_unset=True)
        else:
            updates = SafetySettings.model_validate(new_settings).model_dump(exclude_unset=True)
        self._safety_settings = self._safety_settings.model_copy(update=updates)
        self._save_settings()
        self._notify("Safety settings updated", "success", "Your safety preferences have been saved")
        return self.get_safety_settings()

    def reset_safety_settings(self) -> SafetySettings:
        self._safety_settings = SafetySettings()
        self._save_settings()
        self._notify("Safety settings reset", "info", "Your safety settings have been reset to defaults")
        return self.get_safety_settings()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_user_blocked(self, user_id: str) -> bool:
        return user_id in self._blocked_users

    def is_content_hidden(self, content_id: str) -> bool:
        return content_id in self._hidden_content

    def is_content_reported(self, content_id: str) -> bool:
        return content_id in self._reported_content

    def is_creator_reported(self, creator_id: str) -> bool:
        return creator_id in self._reported_creators

    def get_blocked_users(self) -> list[str]:
        return sorted(self._blocked_users)

    def get_hidden_content(self) -> list[str]:
        return sorted(self._hidden_content)

    def get_reported_content(self) -> list[str]:
        return sorted(self._reported_content)

    def get_reported_creators(self) -> list[str]:
        return sorted(self._reported_creators)

    def export_safety_data(self) -> SafetyExport:
        """Snapshot of every set plus the current settings."""
        return SafetyExport(
            blocked_users=self.get_blocked_users(),
            hidden_content=self.get_hidden_content(),
            reported_content=self.get_reported_content(),
            reported_creators=self.get_reported_creators(),
            safety_settings=self.get_safety_settings(),
            exported_at=datetime.now(UTC).isoformat(),
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _require_session(self) -> ApiSession:
        if self._session is None:
            raise RemoteFailureError("No API session configured", category="network")
        return self._session

    def _notify(self, title: str, kind: NotificationKind, message: str) -> None:
        if not self._safety_settings.show_safety_notifications:
            return
        self._notifier.notify(title, kind, message)

    def _read(self, key: str) -> Any:
        try:
            raw = self._store.get(key)
        except StorageError as e:
            self._logger.warning("Failed to load %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            self._logger.warning("Ignoring corrupt value for %s: %s", key, e)
            return None

    def _write(self, key: str, value: Any) -> None:
        try:
            self._store.set(key, json.dumps(value))
        except StorageError as e:
            self._logger.warning("Failed to save %s: %s", key, e)

    def _load_set(self, key: str) -> set[str]:
        value = self._read(key)
        if not isinstance(value, list):
            if value is not None:
                self._logger.warning("Ignoring non-list value for %s", key)
            return set()
        return {str(item) for item in value if item is not None}

    def _save_set(self, key: str, values: set[str]) -> None:
        self._write(key, sorted(values))

    def _load_settings(self) -> SafetySettings:
        value = self._read(self._keys.safety_settings)
        if not isinstance(value, dict):
            return SafetySettings()
        try:
            return SafetySettings.model_validate(value)
        except ValidationError as e:
            self._logger.warning("Ignoring invalid stored safety settings: %s", e)
            return SafetySettings()

    def _save_settings(self) -> None:
        self._write(self._keys.safety_settings, self._safety_settings.model_dump(by_alias=True))
