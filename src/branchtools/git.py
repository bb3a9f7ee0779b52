"""Git queries used by the branch tools."""

from __future__ import annotations

import datetime as dt
import os
import re
from enum import Enum

from . import exec as exec_util
from .errors import ExternalCommandFailedError, TimestampParseError, ValidationFailedError

COMMIT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"
COMMIT_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} [+-]\d{4}")
# Literal quotes are part of the template and come back in the output.
COMMIT_TIMESTAMP_TEMPLATE = '--format="%ci"'
AUTHOR_NAME_TEMPLATE = "--format=%an"


class MergeMode(str, Enum):
    MERGED = "merged"
    NOT_MERGED = "not-merged"

    @property
    def flag(self) -> str:
        if self is MergeMode.MERGED:
            return "--merged"
        return "--no-merged"


def ensure_supported_platform() -> None:
    """Refuse to run on Windows hosts."""
    if os.name == "nt":
        raise ValidationFailedError("Windows is not currently supported!")


def git_command(args: list[str], *, git_path: str | None = None) -> list[str]:
    """Build a git command using an optional executable path.

    Example:
        >>> git_command(["status"], git_path=" /usr/bin/git ")
        ['/usr/bin/git', 'status']
    """
    resolved = git_path.strip() if isinstance(git_path, str) else ""
    if not resolved:
        resolved = "git"
    return [resolved, *args]


def run_git(
    args: list[str],
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> exec_util.CommandOutcome:
    """Run one git command and return its classified outcome."""
    return exec_util.run_outcome(git_command(args, git_path=git_path), runner=runner)


def _require_success(
    outcome: exec_util.CommandOutcome, argv: list[str]
) -> exec_util.CommandOutcome:
    if outcome.ok:
        return outcome
    raise ExternalCommandFailedError(
        f"command failed: {' '.join(argv)}", output=outcome.text
    )


def parse_branch_listing(text: str) -> list[str]:
    """Split ``git branch -r`` output into branch names.

    Blank lines and the symbolic ``<remote>/HEAD -> ...`` pointer are dropped.

    Example:
        >>> parse_branch_listing("  origin/HEAD -> origin/main\\n  origin/main\\n  origin/x\\n")
        ['origin/main', 'origin/x']
    """
    branches: list[str] = []
    for line in text.splitlines():
        name = line.strip()
        if not name or "->" in name:
            continue
        branches.append(name)
    return branches


def list_remote_branches(
    target: str,
    mode: MergeMode,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> list[str]:
    """Return remote branches merged (or not) into ``target``.

    Args:
        target: Branch the merge filter is evaluated against.
        mode: ``MergeMode.MERGED`` or ``MergeMode.NOT_MERGED``.

    Returns:
        Branch reference names in the order git lists them.

    Raises:
        ExternalCommandFailedError: git rejected the query.
    """
    args = ["branch", "-r", MergeMode(mode).flag, target]
    outcome = _require_success(run_git(args, git_path=git_path, runner=runner), args)
    return parse_branch_listing(outcome.text or "")


def parse_commit_timestamp(raw: str) -> dt.datetime:
    """Parse a ``%ci`` timestamp, optionally wrapped in quotes, into UTC.

    Raises:
        TimestampParseError: The text does not match ``YYYY-MM-DD HH:MM:SS ±HHMM``.

    Example:
        >>> parse_commit_timestamp('"2023-01-01 05:30:00 +0530"\\n').isoformat()
        '2023-01-01T00:00:00+00:00'
    """
    value = raw.strip().strip('"').strip()
    if not COMMIT_TIMESTAMP_RE.fullmatch(value):
        raise TimestampParseError(f"Failed to parse datetime {value!r}")
    try:
        parsed = dt.datetime.strptime(value, COMMIT_TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise TimestampParseError(f"Failed to parse datetime {value!r}") from exc
    return parsed.astimezone(dt.timezone.utc)


def branch_commit_time(
    branch: str,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> dt.datetime:
    """Return the UTC timestamp of the last commit on ``branch``.

    The output of ``git show`` is piped through ``head -n 1`` so only the
    first line is ever parsed.
    """
    args = ["show", "-s", COMMIT_TIMESTAMP_TEMPLATE, branch]
    shown = _require_success(run_git(args, git_path=git_path, runner=runner), args)
    head_argv = ["head", "-n", "1"]
    first = exec_util.run_outcome(head_argv, input_text=shown.text or "", runner=runner)
    first = _require_success(first, head_argv)
    return parse_commit_timestamp(first.text or "")


def branch_author(
    branch: str,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> str:
    """Return the last commit author's name exactly as git prints it."""
    args = ["log", "-1", AUTHOR_NAME_TEMPLATE, branch]
    outcome = _require_success(run_git(args, git_path=git_path, runner=runner), args)
    return outcome.text or ""


def ref_exists(
    ref: str,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> bool:
    """Return whether a fully-qualified ref such as ``refs/heads/x`` exists."""
    outcome = run_git(
        ["show-ref", "--verify", "--quiet", ref], git_path=git_path, runner=runner
    )
    return outcome.ok
