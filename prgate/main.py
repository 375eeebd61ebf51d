"""PR security governance gates: entry point.

Commands (first CLI argument or INPUT_COMMAND):
  alerts-review    gate the PR on triaged code-scanning alerts
  path-guard       require privileged approval for workflow changes
  config-reminder  notify the team when the example config changes
  analysis-args    analyzer path arguments for changed source files
"""

import os
import sys
import uuid

import requests

from prgate.alerts import classify_alerts, fetch_alerts
from prgate.diff import analyzer_args, changed_files, filter_glob
from prgate.errors import DataIntegrityError, GateError, PreconditionError
from prgate.gate import enforce_gate
from prgate.github_api import GitHubClient
from prgate.github_context import (
    GateConfig, GitHubContext, parse_runner_debug, set_verbose_enabled,
)
from prgate.notifier import post_reminder, watched_file_changed
from prgate.path_guard import run_path_guard
from prgate.precondition import check_analysis_run, resolve_branch
from prgate.reporter import format_comment, upsert_comment

DEFAULT_COMMAND = "alerts-review"


def write_outputs(outputs: dict[str, str]) -> None:
    """Write outputs to GITHUB_OUTPUT using multiline-safe delimiters."""
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        print("--- Outputs (no GITHUB_OUTPUT file) ---")
        for key, value in outputs.items():
            print(f"  {key}={value}")
        return

    with open(output_path, "a") as f:
        for key, value in outputs.items():
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            f.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")
            print(f"  Output: {key}={value}")


def _make_client(ctx: GitHubContext, token: str = "") -> GitHubClient:
    return GitHubClient(token or ctx.token, ctx.repository, api_url=ctx.api_url)


def _diff_base(ctx: GitHubContext, config: GateConfig) -> str:
    return f"origin/{ctx.base_ref or config.base_branch}"


def run_alerts_review(
    ctx: GitHubContext,
    config: GateConfig,
    client: GitHubClient | None = None,
) -> int:
    client = client or _make_client(ctx)

    print("::group::Analysis precondition")
    try:
        branch = resolve_branch(ctx)
        run = check_analysis_run(
            client, config.analysis_workflow, branch,
            per_page=config.runs_per_page,
        )
        print(f"Analysis run {run.run_id} for {run.branch}: {run.conclusion}")
    finally:
        print("::endgroup::")

    if ctx.pr_number is None:
        raise DataIntegrityError("No pull request found for this run.")
    print(f"Pull Request Number is: {ctx.pr_number}")

    print("::group::Security alerts")
    try:
        alerts = fetch_alerts(client, ctx.pr_number, config.analyzer_tool)
        classification = classify_alerts(alerts, config.invalid_reason)
        print(f"UNRESOLVED_COUNT: {classification.unresolved_count}")
        print(f"DISMISSED_COUNT: {classification.dismissed_no_comment_count}")
        print(f"COMMENTED_COUNT: {classification.dismissed_with_comment_count}")
        print(f"INVALID_REASON_COUNT: {classification.invalid_reason_count}")
    finally:
        print("::endgroup::")

    print("::group::PR Report")
    try:
        body = format_comment(classification, config.invalid_reason)
        upsert_comment(client, ctx.pr_number, body)
    finally:
        print("::endgroup::")

    write_outputs(classification.to_outputs())

    print("::group::Gate")
    try:
        result = enforce_gate(
            client, classification,
            pr_node_id=ctx.pr_node_id,
            pr_number=ctx.pr_number,
            invalid_reason=config.invalid_reason,
        )
    finally:
        print("::endgroup::")

    return 0 if result.passed else 1


def run_path_guard_command(
    ctx: GitHubContext,
    config: GateConfig,
    client: GitHubClient | None = None,
    team_client: GitHubClient | None = None,
) -> int:
    client = client or _make_client(ctx)
    team_client = team_client or _make_client(ctx, config.team_token)

    print("::group::Protected path guard")
    try:
        result = run_path_guard(
            client, team_client,
            pr_number=ctx.pr_number,
            base=_diff_base(ctx, config),
            protected_prefix=config.protected_path,
            org=config.privileged_org,
            team=config.privileged_team,
            cwd=ctx.workspace,
        )
    finally:
        print("::endgroup::")

    write_outputs(result.to_outputs())
    return 0 if result.passed else 1


def run_config_reminder(ctx: GitHubContext, config: GateConfig) -> int:
    files = changed_files(_diff_base(ctx, config), "HEAD", cwd=ctx.workspace)
    if not watched_file_changed(files, config.watched_path):
        print(f"{config.watched_path} unchanged, no reminder needed")
        return 0
    if not config.webhook_url:
        print("::warning::No webhook URL configured, skipping reminder")
        return 0
    post_reminder(config.webhook_url, config.reminder_text)
    return 0


def run_analysis_args(ctx: GitHubContext, config: GateConfig) -> int:
    files = changed_files(_diff_base(ctx, config), "HEAD", cwd=ctx.workspace)
    matching = filter_glob(files, config.source_glob)
    print(f"{len(matching)} changed file(s) match {config.source_glob}")
    write_outputs({
        "any_changed": str(bool(matching)).lower(),
        "args": analyzer_args(files, config.source_glob).strip(),
    })
    return 0


COMMANDS = {
    "alerts-review": run_alerts_review,
    "path-guard": run_path_guard_command,
    "config-reminder": run_config_reminder,
    "analysis-args": run_analysis_args,
}


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    command = argv[0] if argv else os.environ.get("INPUT_COMMAND", DEFAULT_COMMAND)
    set_verbose_enabled(parse_runner_debug())

    print()
    print("━" * 60)
    print("  🔒 PR SECURITY GATES")
    print("━" * 60)
    print()

    handler = COMMANDS.get(command)
    if handler is None:
        print(f"::error::Unknown command '{command}'. "
              f"Expected one of: {', '.join(COMMANDS)}")
        return 2

    ctx = GitHubContext.from_environment()
    config = GateConfig.from_environment()
    print(f"Command: {command}")
    print(f"Event: {ctx.event_name}")

    try:
        code = handler(ctx, config)
    except PreconditionError as e:
        print(f"::error::Precondition failed: {e}")
        return 1
    except GateError as e:
        print(f"::error::{e}")
        return 1
    except requests.RequestException as e:
        print(f"::error::GitHub API request failed: {e}")
        return 1

    print()
    print(f"  Result: {'pass' if code == 0 else 'fail'}")
    print("━" * 60)
    return code


if __name__ == "__main__":
    sys.exit(main())
