"""Thin synchronous GitHub REST/GraphQL client.

Every call raises ``requests.RequestException`` on failure. There are no
retries: a failed call aborts the remainder of the run.
"""

import requests

from prgate.github_context import vprint

PER_PAGE = 100

CONVERT_TO_DRAFT_MUTATION = (
    "mutation($id: ID!) { convertPullRequestToDraft("
    "input: {pullRequestId: $id}) { pullRequest { id isDraft } } }"
)


class GitHubClient:
    """Repository-scoped GitHub API access for the gate commands."""

    def __init__(
        self,
        token: str,
        repository: str,
        api_url: str = "https://api.github.com",
        timeout: int = 10,
    ):
        self.token = token
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @property
    def repo_url(self) -> str:
        return f"{self.api_url}/repos/{self.repository}"

    def _headers(self) -> dict:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _get(self, url: str, params: dict | None = None):
        resp = requests.get(
            url, headers=self._headers(), params=params,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def _get_paginated(self, url: str, params: dict | None = None) -> list:
        """Collect list responses page by page until a short page."""
        items: list = []
        page = 1
        while True:
            query = dict(params or {})
            query.update({"per_page": PER_PAGE, "page": page})
            batch = self._get(url, query)
            if not batch:
                break
            items.extend(batch)
            if len(batch) < PER_PAGE:
                break
            page += 1
        return items

    # --- Actions ---

    def list_workflow_runs(
        self,
        workflow: str,
        status: str = "completed",
        per_page: int = 10,
        branch: str = "",
    ) -> list[dict]:
        """Most recent runs of a workflow file, newest first."""
        url = f"{self.repo_url}/actions/workflows/{workflow}/runs"
        params = {"status": status, "per_page": per_page}
        if branch:
            params["branch"] = branch
        data = self._get(url, params)
        return data.get("workflow_runs", [])

    # --- Code scanning ---

    def list_code_scanning_alerts(self, pr_number: int) -> list[dict]:
        url = f"{self.repo_url}/code-scanning/alerts"
        alerts = self._get_paginated(url, {"pr": pr_number})
        vprint(f"Raw code scanning alerts: {alerts}")
        return alerts

    # --- Issue comments ---

    def list_issue_comments(self, pr_number: int) -> list[dict]:
        url = f"{self.repo_url}/issues/{pr_number}/comments"
        return self._get_paginated(url)

    def create_issue_comment(self, pr_number: int, body: str) -> dict:
        url = f"{self.repo_url}/issues/{pr_number}/comments"
        resp = requests.post(
            url, headers=self._headers(), json={"body": body},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def update_issue_comment(self, comment_id: int, body: str) -> dict:
        url = f"{self.repo_url}/issues/comments/{comment_id}"
        resp = requests.patch(
            url, headers=self._headers(), json={"body": body},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    # --- Pull requests ---

    def get_pull_request(self, pr_number: int) -> dict:
        return self._get(f"{self.repo_url}/pulls/{pr_number}")

    def list_pull_reviews(self, pr_number: int) -> list[dict]:
        return self._get_paginated(f"{self.repo_url}/pulls/{pr_number}/reviews")

    # --- Organizations ---

    def get_team_members(self, org: str, team: str) -> list[str]:
        url = f"{self.api_url}/orgs/{org}/teams/{team}/members"
        return [m.get("login", "") for m in self._get_paginated(url)
                if m.get("login")]

    # --- GraphQL ---

    def graphql(self, query: str, variables: dict | None = None) -> dict:
        """Run a GraphQL query. GraphQL-level errors raise RequestException."""
        resp = requests.post(
            f"{self.api_url}/graphql",
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            },
            json={"query": query, "variables": variables or {}},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        payload = resp.json()
        if payload.get("errors"):
            messages = "; ".join(
                e.get("message", "unknown error") for e in payload["errors"]
            )
            raise requests.RequestException(f"GraphQL error: {messages}")
        return payload.get("data") or {}

    def convert_pull_request_to_draft(self, node_id: str) -> bool:
        data = self.graphql(CONVERT_TO_DRAFT_MUTATION, {"id": node_id})
        pr = (data.get("convertPullRequestToDraft") or {}).get("pullRequest") or {}
        return bool(pr.get("isDraft"))
