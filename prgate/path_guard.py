"""Protected-path guard.

Changes to the gate's own workflow definitions need a review from a
member of a privileged team. The check is fail-closed: any lookup error
or missing data counts as "not approved".

    Scan -> Filter -> ApprovalCheck -> Pass | Fail
"""

import requests

from prgate.diff import changed_files
from prgate.errors import DataIntegrityError
from prgate.github_api import GitHubClient
from prgate.models import ApprovalResult, GuardResult


def protected_files(files: list[str], protected_prefix: str) -> list[str]:
    prefix = protected_prefix
    if prefix.startswith("./"):
        prefix = prefix[2:]
    return [f for f in files if f.startswith(prefix)]


def check_privileged_approval(
    client: GitHubClient,
    team_client: GitHubClient,
    org: str,
    team: str,
    pr_number: int | None,
) -> ApprovalResult:
    """Has any reviewer of the PR a membership in ``org/team``?

    ``team_client`` may carry a different token: the default workflow
    token cannot read team membership.
    """
    if pr_number is None:
        return ApprovalResult(approved=False, error="PR number unavailable")

    try:
        members = team_client.get_team_members(org, team)
    except requests.RequestException as e:
        return ApprovalResult(
            approved=False, error=f"Could not get members of {org}/{team}: {e}",
        )
    print(f"Team members of '{team}' group: {', '.join(members) or '(none)'}")
    if not members:
        return ApprovalResult(approved=False, error=f"Team {org}/{team} is empty")

    try:
        reviews = client.list_pull_reviews(pr_number)
    except requests.RequestException as e:
        return ApprovalResult(
            approved=False,
            error=f"Could not get reviewers of this PR from GitHub: {e}",
        )

    reviewers = [
        (r.get("user") or {}).get("login", "") for r in reviews
    ]
    reviewers = [login for login in reviewers if login]
    print("This PR has been reviewed by the following members: "
          f"{', '.join(reviewers) or '(none)'}")

    member_set = set(members)
    approvers = sorted({login for login in reviewers if login in member_set})
    return ApprovalResult(
        approved=bool(approvers), approvers=approvers, reviewers=reviewers,
    )


def run_path_guard(
    client: GitHubClient,
    team_client: GitHubClient,
    pr_number: int | None,
    base: str,
    protected_prefix: str,
    org: str,
    team: str,
    cwd: str = ".",
) -> GuardResult:
    # Scan
    files = changed_files(base, "HEAD", cwd=cwd)
    if not files:
        raise DataIntegrityError(
            "No changed files found. This should not happen, "
            "check the git checkout of this workflow."
        )

    # Filter
    protected = protected_files(files, protected_prefix)
    if not protected:
        print("No protected files found in git diff. No further checks required.")
        return GuardResult(
            passed=True, changed_files=files,
            reason="no protected files changed",
        )

    print("The following protected files were found in git diff:")
    for path in protected:
        print(f"  {path}")

    # ApprovalCheck
    approval = check_privileged_approval(
        client, team_client, org, team, pr_number,
    )
    team_url = f"https://github.com/orgs/{org}/teams/{team}"
    if approval.approved:
        print(f"✅ Approved by a member of the {team} group: "
              f"{', '.join(approval.approvers)}")
        return GuardResult(
            passed=True, changed_files=files, protected_files=protected,
            approval=approval, reason="approved",
        )

    if approval.error:
        print(f"::warning::{approval.error}")
    print(f"::error::The PR requires a missing approval by a member of the "
          f"{team} group. Find group members here: {team_url}")
    return GuardResult(
        passed=False, changed_files=files, protected_files=protected,
        approval=approval,
        reason=f"missing approval by a member of {org}/{team}",
    )
