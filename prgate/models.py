"""Data models for the PR security governance gates."""

from dataclasses import dataclass, field
from enum import Enum


def is_blocking(
    unresolved: int, dismissed_no_comment: int, invalid_reason: int,
) -> bool:
    """The merge gate rule: any of the three counts blocks."""
    return unresolved > 0 or dismissed_no_comment > 0 or invalid_reason > 0


class AlertState(str, Enum):
    OPEN = "open"
    DISMISSED = "dismissed"
    FIXED = "fixed"


@dataclass
class Alert:
    """One code-scanning finding attached to a pull request.

    Read-only snapshot: alert state is owned by GitHub code scanning.
    """
    number: int
    html_url: str
    tool: str
    path: str
    message: str
    state: str
    dismissed_reason: str | None = None
    dismissed_comment: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Alert":
        instance = data.get("most_recent_instance") or {}
        location = instance.get("location") or {}
        message = instance.get("message") or {}
        return cls(
            number=data.get("number", 0),
            html_url=data.get("html_url", ""),
            tool=(data.get("tool") or {}).get("name", ""),
            path=location.get("path", ""),
            message=message.get("text", ""),
            state=data.get("state", ""),
            dismissed_reason=data.get("dismissed_reason"),
            dismissed_comment=data.get("dismissed_comment"),
        )

    @property
    def has_dismissal_comment(self) -> bool:
        return bool(self.dismissed_comment)


@dataclass
class AlertClassification:
    """Alerts partitioned into the review buckets, in API order.

    ``invalid_reason`` is a subset of ``dismissed_with_comment``.
    """
    unresolved: list[Alert] = field(default_factory=list)
    dismissed_no_comment: list[Alert] = field(default_factory=list)
    dismissed_with_comment: list[Alert] = field(default_factory=list)
    invalid_reason: list[Alert] = field(default_factory=list)

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved)

    @property
    def dismissed_no_comment_count(self) -> int:
        return len(self.dismissed_no_comment)

    @property
    def dismissed_with_comment_count(self) -> int:
        return len(self.dismissed_with_comment)

    @property
    def invalid_reason_count(self) -> int:
        return len(self.invalid_reason)

    @property
    def total(self) -> int:
        return (self.unresolved_count + self.dismissed_no_comment_count
                + self.dismissed_with_comment_count)

    @property
    def is_blocking(self) -> bool:
        return is_blocking(self.unresolved_count,
                           self.dismissed_no_comment_count,
                           self.invalid_reason_count)

    def to_outputs(self) -> dict[str, str]:
        """Format for GITHUB_OUTPUT (all values must be strings)."""
        return {
            "unresolved_count": str(self.unresolved_count),
            "dismissed_count": str(self.dismissed_no_comment_count),
            "commented_count": str(self.dismissed_with_comment_count),
            "invalid_reason_count": str(self.invalid_reason_count),
            "blocking": str(self.is_blocking).lower(),
        }


@dataclass
class PreconditionResult:
    branch: str
    run_id: int | None = None
    conclusion: str = ""
    html_url: str = ""


@dataclass
class ApprovalResult:
    """Outcome of the privileged review lookup.

    Lookup errors and missing data both produce ``approved=False``.
    """
    approved: bool
    approvers: list[str] = field(default_factory=list)
    reviewers: list[str] = field(default_factory=list)
    error: str = ""


@dataclass
class GuardResult:
    passed: bool
    changed_files: list[str] = field(default_factory=list)
    protected_files: list[str] = field(default_factory=list)
    approval: ApprovalResult | None = None
    reason: str = ""

    def to_outputs(self) -> dict[str, str]:
        return {
            "protected_files_count": str(len(self.protected_files)),
            "passed": str(self.passed).lower(),
            "reason": self.reason,
        }


@dataclass
class GateResult:
    passed: bool
    reasons: list[str] = field(default_factory=list)
    draft_converted: bool = False
    draft_error: str = ""
