"""Config-change reminder sent to a Slack incoming webhook.

Fire-and-forget: the response is not inspected beyond the HTTP status.
"""

import requests


def watched_file_changed(files: list[str], watched_path: str) -> bool:
    return watched_path in files


def post_reminder(webhook_url: str, text: str, timeout: int = 10) -> bool:
    """POST ``{"text": ...}`` to the webhook. Failures are logged, not raised."""
    try:
        resp = requests.post(webhook_url, json={"text": text}, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        print(f"::warning::Failed to send reminder: {e}")
        return False
    print("Reminder sent")
    return True
