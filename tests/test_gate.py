"""Tests for the gate enforcer (pass/fail decision and draft demotion)."""

from unittest.mock import MagicMock

import pytest
import requests

from prgate.alerts import classify_alerts
from prgate.gate import (
    blocking_reasons,
    convert_to_draft,
    enforce_gate,
    is_blocking,
)
from prgate.models import Alert, AlertClassification


def _make_alert(number=1, state="open", reason=None, comment=None):
    return Alert(
        number=number, html_url="u", tool="t", path="src/A.sol",
        message="m", state=state, dismissed_reason=reason,
        dismissed_comment=comment,
    )


class TestIsBlocking:

    @pytest.mark.parametrize("counts,expected", [
        ((0, 0, 0), False),
        ((1, 0, 0), True),
        ((0, 1, 0), True),
        ((0, 0, 1), True),
        ((0, 2, 1), True),
    ])
    def test_pure_function_of_counts(self, counts, expected):
        assert is_blocking(*counts) is expected

    @pytest.mark.parametrize("alerts", [
        [],
        [_make_alert(state="open")],
        [_make_alert(state="dismissed")],
        [_make_alert(state="dismissed", reason="used in tests", comment="x")],
        [_make_alert(state="dismissed", reason="false positive", comment="x")],
    ])
    def test_classification_uses_same_rule(self, alerts):
        c = classify_alerts(alerts)
        assert c.is_blocking is is_blocking(
            c.unresolved_count, c.dismissed_no_comment_count,
            c.invalid_reason_count)


class TestBlockingReasons:

    def test_lists_each_condition(self):
        c = classify_alerts([
            _make_alert(1, state="open"),
            _make_alert(2, state="dismissed"),
            _make_alert(3, state="dismissed", reason="used in tests",
                        comment="x"),
        ])
        reasons = blocking_reasons(c)
        assert len(reasons) == 3
        assert "1 unresolved" in reasons[0]
        assert "dismissed without comments" in reasons[1]
        assert '"Used in tests"' in reasons[2]

    def test_empty_when_clean(self):
        assert blocking_reasons(AlertClassification()) == []


class TestConvertToDraft:

    def test_uses_event_node_id(self):
        client = MagicMock()
        client.convert_pull_request_to_draft.return_value = True
        assert convert_to_draft(client, "PR_node", 42) == (True, "")
        client.get_pull_request.assert_not_called()
        client.convert_pull_request_to_draft.assert_called_once_with("PR_node")

    def test_looks_up_missing_node_id(self):
        client = MagicMock()
        client.get_pull_request.return_value = {"node_id": "PR_lookup"}
        client.convert_pull_request_to_draft.return_value = True
        converted, _ = convert_to_draft(client, "", 42)
        assert converted is True
        client.convert_pull_request_to_draft.assert_called_once_with("PR_lookup")

    def test_api_error_reported_not_raised(self):
        client = MagicMock()
        client.convert_pull_request_to_draft.side_effect = (
            requests.RequestException("boom"))
        converted, error = convert_to_draft(client, "PR_node", 42)
        assert converted is False
        assert "boom" in error

    def test_no_node_id_available(self):
        client = MagicMock()
        converted, error = convert_to_draft(client, "", None)
        assert converted is False
        assert error


class TestEnforceGate:

    def test_pass_does_not_touch_pr(self):
        client = MagicMock()
        result = enforce_gate(client, AlertClassification(), "PR_node", 42)
        assert result.passed is True
        client.convert_pull_request_to_draft.assert_not_called()

    def test_block_converts_to_draft(self, capsys):
        client = MagicMock()
        client.convert_pull_request_to_draft.return_value = True
        c = classify_alerts([_make_alert(state="open")])

        result = enforce_gate(client, c, "PR_node", 42)

        assert result.passed is False
        assert result.draft_converted is True
        client.convert_pull_request_to_draft.assert_called_once_with("PR_node")
        out = capsys.readouterr().out
        assert "1 unresolved security alert(s) found!" in out

    def test_block_still_fails_when_draft_fails(self, capsys):
        client = MagicMock()
        client.convert_pull_request_to_draft.side_effect = (
            requests.RequestException("forbidden"))
        c = classify_alerts([_make_alert(state="dismissed")])

        result = enforce_gate(client, c, "PR_node", 42)

        assert result.passed is False
        assert result.draft_converted is False
        assert "forbidden" in result.draft_error
        assert "::warning::" in capsys.readouterr().out

    def test_invalid_reason_alone_blocks(self):
        client = MagicMock()
        c = classify_alerts([
            _make_alert(state="dismissed", reason="used in tests",
                        comment="x"),
        ])
        assert enforce_gate(client, c, "PR_node", 42).passed is False
