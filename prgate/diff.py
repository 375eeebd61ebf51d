"""Changed-file helpers built on ``git diff``.

Security (command injection): subprocess array form, never shell=True.
"""

import fnmatch
import subprocess

from prgate.errors import DataIntegrityError


def changed_files(base: str, head: str = "HEAD", cwd: str = ".") -> list[str]:
    """Paths changed between ``base`` and ``head`` (``git diff --name-only``).

    Needs the base ref fetched (checkout with fetch-depth 0).
    """
    try:
        result = subprocess.run(
            ["git", "diff", "--name-only", base, head],
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
    except FileNotFoundError:
        raise DataIntegrityError("git is not installed or not accessible.")
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()[:500]
        raise DataIntegrityError(
            f"git diff {base} {head} failed (exit {e.returncode}): {stderr}"
        )
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def matches_glob(path: str, pattern: str) -> bool:
    """fnmatch with ``**/`` also matching zero directories."""
    if fnmatch.fnmatch(path, pattern):
        return True
    return "**/" in pattern and fnmatch.fnmatch(path, pattern.replace("**/", ""))


def filter_glob(files: list[str], pattern: str) -> list[str]:
    return [f for f in files if matches_glob(f, pattern)]


def analyzer_args(files: list[str], pattern: str) -> str:
    """Analyzer path arguments (``-p <file> ``) for changed files matching pattern."""
    return "".join(f"-p {f} " for f in filter_glob(files, pattern))
