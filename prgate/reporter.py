"""PR comment reporter for the security alerts review.

Renders the classified alerts as one Markdown comment. The comment is
found again on every run by its leading marker, then updated in place,
so re-runs refresh a single comment instead of growing the thread.
"""

from prgate.github_api import GitHubClient
from prgate.models import Alert, AlertClassification

# Leading text of the status comment; used both to render and to find it
COMMENT_MARKER = "### 🤖 GitHub Action: Security Alerts Review"
COMMENT_HEADER = f"{COMMENT_MARKER} 🔍"


def capitalize_first(text: str) -> str:
    """Upper-case the first character only ("used in tests" -> "Used in tests")."""
    return text[:1].upper() + text[1:]


def single_line(text: str) -> str:
    """Flatten line breaks; they do not render inside the alert list."""
    return text.replace("\r", " ").replace("\n", " ")


def _alert_lines(icon: str, alert: Alert) -> list[str]:
    return [
        f"{icon} [View Alert]({alert.html_url}) - **File:** `{alert.path}`",
        f"   🔹 {alert.message}",
    ]


def format_comment(
    classification: AlertClassification,
    invalid_reason: str = "used in tests",
) -> str:
    """Build the status comment body.

    Sections, each only when non-empty: unresolved, dismissed without
    comment, invalid dismissal reason, resolve warning, dismissed with
    comment (minus invalid-reason entries). A success line replaces the
    blocking sections when nothing blocks.
    """
    c = classification
    lines: list[str] = [COMMENT_HEADER, ""]

    if c.unresolved_count:
        lines.append("🚨 **Unresolved Security Alerts Found!** 🚨")
        lines.append(
            "The following security alerts must be **resolved** before merging:"
        )
        lines.append("")
        for alert in c.unresolved:
            lines.extend(_alert_lines("🔴", alert))
            lines.append("")

    if c.dismissed_no_comment_count:
        lines.append(
            "The following alerts were dismissed but require a dismissal comment:"
        )
        lines.append("")
        for alert in c.dismissed_no_comment:
            lines.extend(_alert_lines("🟡", alert))
            lines.append("")

    if c.invalid_reason_count:
        shown = capitalize_first(invalid_reason)
        lines.append("❌ **Invalid Dismissal Reasons Found!** ❌")
        lines.append(
            f"The following alerts were dismissed with the reason **{shown}**, "
            f"which is not allowed for production code. "
            f"Please provide a valid dismissal reason."
        )
        lines.append("")
        for alert in c.invalid_reason:
            reason = capitalize_first(alert.dismissed_reason or "")
            lines.extend(_alert_lines("❌", alert))
            lines.append(
                f"   🔹 Dismiss Reason: **{reason}** (invalid for production code)"
            )
            lines.append("")

    if c.is_blocking:
        lines.append("⚠️ **Please resolve the above issues before merging.**")
        lines.append("")

    if c.dismissed_with_comment_count:
        invalid_ids = {id(a) for a in c.invalid_reason}
        lines.append("🟢 **Dismissed Security Alerts with Comments**")
        lines.append("The following alerts were dismissed with proper comments:")
        lines.append("")
        for alert in c.dismissed_with_comment:
            if id(alert) in invalid_ids:
                continue
            reason = capitalize_first(alert.dismissed_reason or "")
            comment = single_line(alert.dismissed_comment or "")
            lines.extend(_alert_lines("🟢", alert))
            lines.append(f"   🔹 Dismiss Reason: **{reason}**")
            lines.append(f"   🔹 Dismiss Comment: {comment}")
            lines.append("")

    if not c.is_blocking:
        lines.append("✅ **No unresolved security alerts!** 🎉")
        lines.append("")

    return "\n".join(lines)


def find_existing_comment(client: GitHubClient, pr_number: int) -> int | None:
    """Return the id of the first comment starting with the marker, if any."""
    for comment in client.list_issue_comments(pr_number):
        if (comment.get("body") or "").startswith(COMMENT_MARKER):
            return comment["id"]
    return None


def upsert_comment(client: GitHubClient, pr_number: int, body: str) -> int:
    """Update the marked comment if present, else create it. Returns its id."""
    existing_id = find_existing_comment(client, pr_number)
    if existing_id is not None:
        print(f"Updating existing comment ID: {existing_id}")
        client.update_issue_comment(existing_id, body)
        return existing_id

    print("Posting new comment to PR...")
    created = client.create_issue_comment(pr_number, body)
    return created.get("id", 0)
