"""Upstream analysis precondition.

The alerts review must not run on stale or missing data: the most recent
completed run of the analysis workflow for the PR branch has to have
concluded with ``success``.
"""

from prgate.errors import PreconditionError
from prgate.github_api import GitHubClient
from prgate.github_context import GitHubContext
from prgate.models import PreconditionResult


def resolve_branch(ctx: GitHubContext) -> str:
    """Branch of the PR, falling back to the ref tail for synthetic triggers."""
    if ctx.head_ref:
        return ctx.head_ref
    fallback = ctx.ref.rsplit("/", 1)[-1] if ctx.ref else ""
    print(f"Head ref was empty, falling back to: {fallback}")
    return fallback


def check_analysis_run(
    client: GitHubClient,
    workflow: str,
    branch: str,
    per_page: int = 10,
) -> PreconditionResult:
    """Require a successful latest analysis run for ``branch``.

    Raises PreconditionError when no completed run matches the branch or
    the most recent matching run did not succeed.
    """
    if not branch:
        raise PreconditionError("Could not determine the branch name.")

    print(f"Checking latest {workflow} run for branch: {branch}")
    runs = client.list_workflow_runs(
        workflow, per_page=per_page, branch=branch,
    )
    latest = next(
        (r for r in runs if r.get("head_branch") == branch), None,
    )
    if latest is None:
        raise PreconditionError(
            f"No completed {workflow} run found for branch '{branch}'. "
            f"A valid analysis report is required."
        )

    conclusion = latest.get("conclusion") or ""
    if conclusion != "success":
        raise PreconditionError(
            f"Latest {workflow} run for branch '{branch}' concluded "
            f"'{conclusion or 'unknown'}'. A successful analysis is required."
        )

    return PreconditionResult(
        branch=branch,
        run_id=latest.get("id"),
        conclusion=conclusion,
        html_url=latest.get("html_url", ""),
    )
