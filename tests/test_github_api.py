"""Tests for the GitHub API client (requests mocked)."""

from unittest.mock import patch, MagicMock

import pytest
import requests

from prgate.github_api import GitHubClient, PER_PAGE


def _resp(json_data, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = json_data
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status}")
    return resp


def _client():
    return GitHubClient("tok", "owner/repo")


class TestRequests:

    @patch("prgate.github_api.requests.get")
    def test_workflow_runs(self, mock_get):
        mock_get.return_value = _resp({"workflow_runs": [{"id": 1}]})
        runs = _client().list_workflow_runs("analysis.yml", per_page=10)

        assert runs == [{"id": 1}]
        args, kwargs = mock_get.call_args
        assert args[0] == ("https://api.github.com/repos/owner/repo"
                           "/actions/workflows/analysis.yml/runs")
        assert kwargs["params"] == {"status": "completed", "per_page": 10}
        assert kwargs["headers"]["Authorization"] == "token tok"
        assert kwargs["timeout"] == 10

    @patch("prgate.github_api.requests.get")
    def test_alerts_paginate(self, mock_get):
        full_page = [{"number": i} for i in range(PER_PAGE)]
        mock_get.side_effect = [_resp(full_page), _resp([{"number": 999}])]

        alerts = _client().list_code_scanning_alerts(42)

        assert len(alerts) == PER_PAGE + 1
        assert mock_get.call_count == 2
        first_params = mock_get.call_args_list[0].kwargs["params"]
        assert first_params["pr"] == 42
        assert first_params["page"] == 1

    @patch("prgate.github_api.requests.get")
    def test_workflow_runs_branch_filter(self, mock_get):
        mock_get.return_value = _resp({"workflow_runs": []})
        _client().list_workflow_runs("analysis.yml", branch="feature/x")
        assert mock_get.call_args.kwargs["params"] == {
            "status": "completed", "per_page": 10, "branch": "feature/x",
        }

    @patch("prgate.github_api.requests.get")
    def test_alerts_fetched_past_ten_pages(self, mock_get):
        """An open alert on page 11 still reaches the gate."""
        from prgate.alerts import classify_alerts, fetch_alerts

        def _alert(number, state):
            return {
                "number": number,
                "state": state,
                "tool": {"name": "Olympix Integrated Security"},
                "dismissed_reason": "false positive",
                "dismissed_comment": "guarded" if state == "dismissed" else None,
                "most_recent_instance": {},
            }

        pages = [
            _resp([_alert(p * PER_PAGE + i, "dismissed")
                   for i in range(PER_PAGE)])
            for p in range(10)
        ]
        pages.append(_resp([_alert(5000, "open")]))
        mock_get.side_effect = pages

        alerts = fetch_alerts(_client(), 42, "Olympix Integrated Security")
        result = classify_alerts(alerts)

        assert mock_get.call_count == 11
        assert mock_get.call_args.kwargs["params"]["page"] == 11
        assert len(alerts) == 10 * PER_PAGE + 1
        assert result.unresolved_count == 1
        assert result.is_blocking is True

    @patch("prgate.github_api.requests.get")
    def test_http_error_propagates(self, mock_get):
        mock_get.return_value = _resp({}, status=500)
        with pytest.raises(requests.HTTPError):
            _client().list_issue_comments(42)

    @patch("prgate.github_api.requests.post")
    def test_create_comment(self, mock_post):
        mock_post.return_value = _resp({"id": 5})
        assert _client().create_issue_comment(42, "hi") == {"id": 5}
        args, kwargs = mock_post.call_args
        assert args[0].endswith("/repos/owner/repo/issues/42/comments")
        assert kwargs["json"] == {"body": "hi"}

    @patch("prgate.github_api.requests.patch")
    def test_update_comment(self, mock_patch):
        mock_patch.return_value = _resp({"id": 5})
        _client().update_issue_comment(5, "new")
        args, kwargs = mock_patch.call_args
        assert args[0].endswith("/repos/owner/repo/issues/comments/5")
        assert kwargs["json"] == {"body": "new"}

    @patch("prgate.github_api.requests.get")
    def test_team_members(self, mock_get):
        mock_get.return_value = _resp([{"login": "alice"}, {"login": "bob"}])
        members = _client().get_team_members("lifinance", "core")
        assert members == ["alice", "bob"]
        assert mock_get.call_args.args[0] == (
            "https://api.github.com/orgs/lifinance/teams/core/members")


class TestGraphQL:

    @patch("prgate.github_api.requests.post")
    def test_convert_to_draft(self, mock_post):
        mock_post.return_value = _resp({"data": {"convertPullRequestToDraft": {
            "pullRequest": {"id": "PR_1", "isDraft": True}}}})

        assert _client().convert_pull_request_to_draft("PR_1") is True
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.github.com/graphql"
        assert kwargs["json"]["variables"] == {"id": "PR_1"}
        assert "convertPullRequestToDraft" in kwargs["json"]["query"]
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    @patch("prgate.github_api.requests.post")
    def test_graphql_errors_raise(self, mock_post):
        mock_post.return_value = _resp(
            {"errors": [{"message": "Resource not accessible"}]})
        with pytest.raises(requests.RequestException, match="not accessible"):
            _client().convert_pull_request_to_draft("PR_1")
