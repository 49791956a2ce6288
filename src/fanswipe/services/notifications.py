"""Transient user-facing notifications for safety actions."""
import logging
from dataclasses import dataclass
from typing import Protocol

from fanswipe.schemas.safety import NotificationKind

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can show a short titled notification to the user."""

    def notify(self, title: str, kind: NotificationKind = "info", message: str = "") -> None:
        ...


class LoggingNotifier:
    """Default notifier: writes notifications to the log."""

    def notify(self, title: str, kind: NotificationKind = "info", message: str = "") -> None:
        logger.info("[%s] %s: %s", kind.upper(), title, message)


@dataclass(frozen=True)
class Notification:
    """A notification captured by RecordingNotifier."""

    title: str
    kind: NotificationKind
    message: str


class RecordingNotifier:
    """Keeps every notification in order. Used by the CLI and in tests."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, title: str, kind: NotificationKind = "info", message: str = "") -> None:
        self.notifications.append(Notification(title, kind, message))

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]
