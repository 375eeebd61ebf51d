"""Gate enforcer: fail the check and demote the PR to draft on blocking alerts.

The draft conversion and the failing exit are independent signals. The
conversion is best effort; the run fails regardless of its outcome.
"""

import requests

from prgate.github_api import GitHubClient
from prgate.models import AlertClassification, GateResult, is_blocking
from prgate.reporter import capitalize_first


def blocking_reasons(
    classification: AlertClassification,
    invalid_reason: str = "used in tests",
) -> list[str]:
    c = classification
    reasons = []
    if c.unresolved_count:
        reasons.append(
            f"{c.unresolved_count} unresolved security alert(s) found!"
        )
    if c.dismissed_no_comment_count:
        reasons.append(
            f"{c.dismissed_no_comment_count} security alert(s) were "
            f"dismissed without comments!"
        )
    if c.invalid_reason_count:
        reasons.append(
            f"{c.invalid_reason_count} alert(s) have an invalid dismissal "
            f"reason (\"{capitalize_first(invalid_reason)}\")."
        )
    return reasons


def convert_to_draft(
    client: GitHubClient, pr_node_id: str, pr_number: int | None = None,
) -> tuple[bool, str]:
    """Best-effort draft conversion. Returns (converted, error_or_empty)."""
    try:
        if not pr_node_id and pr_number is not None:
            pr_node_id = client.get_pull_request(pr_number).get("node_id", "")
        if not pr_node_id:
            return False, "PR node id unavailable"
        print(f"Reverting PR #{pr_number} to draft state "
              f"due to blocking security issues...")
        if client.convert_pull_request_to_draft(pr_node_id):
            return True, ""
        return False, "GitHub did not report the PR as draft"
    except requests.RequestException as e:
        return False, str(e)


def enforce_gate(
    client: GitHubClient,
    classification: AlertClassification,
    pr_node_id: str = "",
    pr_number: int | None = None,
    invalid_reason: str = "used in tests",
) -> GateResult:
    c = classification
    if not is_blocking(c.unresolved_count, c.dismissed_no_comment_count,
                       c.invalid_reason_count):
        print("✅ No blocking security issues found.")
        return GateResult(passed=True)

    reasons = blocking_reasons(c, invalid_reason)
    print("::error::Found issues in the PR:")
    for reason in reasons:
        print(f"  - {reason}")
    print("⚠️ These alerts must be resolved before merging.")

    converted, error = convert_to_draft(client, pr_node_id, pr_number)
    if error:
        print(f"::warning::Could not revert PR to draft: {error}")

    return GateResult(
        passed=False,
        reasons=reasons,
        draft_converted=converted,
        draft_error=error,
    )
