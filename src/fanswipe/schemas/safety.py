"""Schemas and static reason tables for safety and moderation."""
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Severity = Literal["critical", "high", "medium", "low"]
NotificationKind = Literal["success", "error", "info"]

# Severities that hide reported content immediately
AUTO_HIDE_SEVERITIES: frozenset[str] = frozenset({"critical", "high"})


@dataclass(frozen=True)
class ReportCategory:
    """A reason a piece of content can be reported for."""

    id: str
    label: str
    description: str
    severity: Severity
    requires_details: bool = False
    auto_escalate: bool = False


@dataclass(frozen=True)
class BlockReason:
    """A reason a user can give when blocking someone."""

    id: str
    label: str
    description: str
    severity: Severity
    reportable: bool = False


REPORT_CATEGORIES: dict[str, ReportCategory] = {
    category.id: category
    for category in (
        ReportCategory(
            "underage", "Underage Content",
            "Content involving minors or appearing to involve minors",
            "critical", requires_details=True, auto_escalate=True,
        ),
        ReportCategory(
            "illegal", "Illegal Content",
            "Content that violates laws or promotes illegal activities",
            "critical", requires_details=True, auto_escalate=True,
        ),
        ReportCategory(
            "non_consensual", "Non-consensual Content",
            "Content shared without consent or revenge pornography",
            "high", requires_details=True, auto_escalate=True,
        ),
        ReportCategory(
            "harassment", "Harassment or Abuse",
            "Bullying, threats, or targeted harassment",
            "high",
        ),
        ReportCategory(
            "spam", "Spam or Misleading",
            "Repetitive content, scams, or false information",
            "medium",
        ),
        ReportCategory(
            "impersonation", "Impersonation",
            "Pretending to be someone else or fake account",
            "medium",
        ),
        ReportCategory(
            "copyright", "Copyright Violation",
            "Content that violates intellectual property rights",
            "medium", requires_details=True,
        ),
        ReportCategory(
            "other", "Other Violation",
            "Other community guideline violations",
            "low", requires_details=True,
        ),
    )
}

BLOCK_REASONS: dict[str, BlockReason] = {
    reason.id: reason
    for reason in (
        BlockReason(
            "harassment", "Harassment or Abuse",
            "This user is harassing, threatening, or abusing me",
            "high", reportable=True,
        ),
        BlockReason(
            "spam", "Spam or Unwanted Messages",
            "This user is sending unwanted or repetitive messages",
            "medium", reportable=True,
        ),
        BlockReason(
            "inappropriate", "Inappropriate Behavior",
            "This user is behaving inappropriately or violating guidelines",
            "medium", reportable=True,
        ),
        BlockReason(
            "fake_profile", "Fake or Impersonation",
            "This appears to be a fake account or someone impersonating another person",
            "medium", reportable=True,
        ),
        BlockReason(
            "privacy", "Privacy Concerns",
            "I want to limit who can see or contact me",
            "low",
        ),
        BlockReason(
            "not_interested", "Not Interested",
            "I am not interested in this user's content or interactions",
            "low",
        ),
    )
}


def get_report_category(code: str) -> ReportCategory | None:
    """Look up a report category by code."""
    return REPORT_CATEGORIES.get(code)


def validate_report(code: str, details: str = "") -> ReportCategory:
    """
    Validate a report reason and its details.

    Returns:
        The matching ReportCategory.

    Raises:
        ValueError: If the code is empty or unknown, or if the category
            requires details and none were given.
    """
    if not code:
        raise ValueError("A report reason is required")
    category = REPORT_CATEGORIES.get(code)
    if category is None:
        raise ValueError(f"Invalid report reason: {code}")
    if category.requires_details and not (details or "").strip():
        raise ValueError(f"Additional details are required for {category.label} reports")
    return category


def should_auto_hide(category: ReportCategory) -> bool:
    """Whether reported content should also be hidden right away."""
    return category.severity in AUTO_HIDE_SEVERITIES


def should_auto_report(reason_code: str | None) -> bool:
    """Whether blocking for this reason should also file a user report."""
    reason = BLOCK_REASONS.get(reason_code or "")
    return reason is not None and reason.reportable and reason.severity != "low"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys as well as snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class SafetySettings(CamelModel):
    """User-editable filtering and messaging preferences."""

    hide_reported_content: bool = True
    verified_only: bool = False
    filter_explicit: bool = False
    min_creator_age: int = Field(default=18, ge=0)
    auto_hide_on_report: bool = True
    allow_direct_messages: bool = True
    require_connection_for_messages: bool = False
    show_safety_notifications: bool = True


class ReportResult(CamelModel):
    """Outcome of a content or user report."""

    success: bool
    report_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class BlockResult(CamelModel):
    """Outcome of a block or unblock."""

    success: bool
    user_id: str
    reason: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class HideResult(CamelModel):
    """Outcome of a local hide/unhide or reported-creator toggle."""

    success: bool
    target_id: str
    reason: str | None = None


class UserReport(CamelModel):
    """A report against a user account, pending a dedicated endpoint."""

    user_id: str
    reason: str
    details: str = ""
    type: Literal["user_report"] = "user_report"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SafetyExport(CamelModel):
    """Snapshot of all local safety data, e.g. for a data export request."""

    blocked_users: list[str]
    hidden_content: list[str]
    reported_content: list[str]
    reported_creators: list[str]
    safety_settings: SafetySettings
    exported_at: str
