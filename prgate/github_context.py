"""Parse GitHub Actions environment into clean dataclasses."""

import json
import os
from dataclasses import dataclass
from typing import Optional

_verbose_enabled = False


def set_verbose_enabled(value: bool) -> None:
    global _verbose_enabled
    _verbose_enabled = bool(value)


def vprint(msg: str) -> None:
    """Print only when the runner has debug logging turned on."""
    if _verbose_enabled:
        print(msg)


def parse_runner_debug() -> bool:
    return os.environ.get("RUNNER_DEBUG", "") == "1"


@dataclass
class GitHubContext:
    token: str
    repository: str
    event_name: str
    ref: str
    workspace: str
    api_url: str = "https://api.github.com"
    head_ref: str = ""
    base_ref: str = ""
    pr_number: Optional[int] = None
    pr_node_id: str = ""
    is_draft: bool = False

    @property
    def is_pull_request(self) -> bool:
        return self.pr_number is not None

    @classmethod
    def from_environment(cls) -> "GitHubContext":
        token = (os.environ.get("INPUT_GITHUB_TOKEN", "")
                 or os.environ.get("GITHUB_TOKEN", ""))
        event_name = os.environ.get("GITHUB_EVENT_NAME", "")
        head_ref = os.environ.get("GITHUB_HEAD_REF", "")
        base_ref = os.environ.get("GITHUB_BASE_REF", "")

        pr_number = None
        pr_node_id = ""
        is_draft = False

        event_path = os.environ.get("GITHUB_EVENT_PATH", "")
        if event_path and os.path.exists(event_path):
            with open(event_path) as f:
                event = json.load(f)

            pr_data = event.get("pull_request") or {}
            if pr_data:
                pr_number = pr_data.get("number")
                pr_node_id = pr_data.get("node_id", "")
                is_draft = bool(pr_data.get("draft", False))
                head_ref = (pr_data.get("head") or {}).get("ref", "") or head_ref
                base_ref = (pr_data.get("base") or {}).get("ref", "") or base_ref

        # workflow_dispatch carries no PR payload
        if pr_number is None:
            raw = os.environ.get("INPUT_PR_NUMBER", "").strip()
            if raw:
                try:
                    pr_number = int(raw)
                except ValueError:
                    print(f"::warning::Ignoring invalid PR number '{raw}'")

        return cls(
            token=token,
            repository=os.environ.get("GITHUB_REPOSITORY", ""),
            event_name=event_name,
            ref=os.environ.get("GITHUB_REF", ""),
            workspace=os.environ.get("GITHUB_WORKSPACE", "."),
            api_url=os.environ.get("GITHUB_API_URL", "https://api.github.com"),
            head_ref=head_ref,
            base_ref=base_ref,
            pr_number=pr_number,
            pr_node_id=pr_node_id,
            is_draft=is_draft,
        )


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        print(f"::warning::Invalid {name} '{raw}', defaulting to {default}")
        return default


@dataclass
class GateConfig:
    """Policy knobs, read from action inputs."""
    analysis_workflow: str = "olympixStaticAnalysis.yml"
    analyzer_tool: str = "Olympix Integrated Security"
    invalid_reason: str = "used in tests"
    runs_per_page: int = 10
    protected_path: str = ".github/workflows/"
    base_branch: str = "main"
    privileged_org: str = "lifinance"
    privileged_team: str = "smart-contract-core"
    team_token: str = ""
    source_glob: str = "src/**/*.sol"
    webhook_url: str = ""
    watched_path: str = "script/config.example.sh"
    reminder_text: str = (
        "Hey team, please update your scripts/config.sh file "
        "(see config.example.sh for latest changes)"
    )

    @classmethod
    def from_environment(cls) -> "GateConfig":
        defaults = cls()

        def _get(name: str, default: str) -> str:
            return os.environ.get(name, "") or default

        return cls(
            analysis_workflow=_get("INPUT_ANALYSIS_WORKFLOW",
                                   defaults.analysis_workflow),
            analyzer_tool=_get("INPUT_ANALYZER_TOOL", defaults.analyzer_tool),
            invalid_reason=_get("INPUT_INVALID_REASON",
                                defaults.invalid_reason),
            runs_per_page=_env_int("INPUT_RUNS_PER_PAGE",
                                   defaults.runs_per_page),
            protected_path=_get("INPUT_PROTECTED_PATH",
                                defaults.protected_path),
            base_branch=_get("INPUT_BASE_BRANCH", defaults.base_branch),
            privileged_org=_get("INPUT_PRIVILEGED_ORG",
                                defaults.privileged_org),
            privileged_team=_get("INPUT_PRIVILEGED_TEAM",
                                 defaults.privileged_team),
            team_token=os.environ.get("INPUT_TEAM_TOKEN", ""),
            source_glob=_get("INPUT_SOURCE_GLOB", defaults.source_glob),
            webhook_url=os.environ.get("INPUT_WEBHOOK_URL", ""),
            watched_path=_get("INPUT_WATCHED_PATH", defaults.watched_path),
            reminder_text=_get("INPUT_REMINDER_TEXT", defaults.reminder_text),
        )
