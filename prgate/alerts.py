"""Fetch code-scanning alerts for a PR and sort them into review buckets."""

from prgate.github_api import GitHubClient
from prgate.models import Alert, AlertClassification, AlertState

DEFAULT_INVALID_REASON = "used in tests"


def fetch_alerts(
    client: GitHubClient, pr_number: int, tool_name: str,
) -> list[Alert]:
    """Alerts on the PR raised by ``tool_name`` (exact match), in API order."""
    raw = client.list_code_scanning_alerts(pr_number)
    alerts = [Alert.from_api(a) for a in raw]
    filtered = [a for a in alerts if a.tool == tool_name]
    print(f"Fetched {len(alerts)} alert(s), {len(filtered)} from {tool_name}")
    return filtered


def is_invalid_reason(alert: Alert, invalid_reason: str) -> bool:
    reason = alert.dismissed_reason or ""
    return reason.lower() == invalid_reason.lower()


def classify_alerts(
    alerts: list[Alert],
    invalid_reason: str = DEFAULT_INVALID_REASON,
) -> AlertClassification:
    """Partition alerts without reordering.

    Alerts in states other than open/dismissed (e.g. fixed) fall in no
    bucket.
    """
    result = AlertClassification()
    for alert in alerts:
        if alert.state == AlertState.OPEN.value:
            result.unresolved.append(alert)
        elif alert.state == AlertState.DISMISSED.value:
            if not alert.has_dismissal_comment:
                result.dismissed_no_comment.append(alert)
                continue
            result.dismissed_with_comment.append(alert)
            if is_invalid_reason(alert, invalid_reason):
                result.invalid_reason.append(alert)
    return result
