"""Stale remote-branch report grouped by last-commit author."""

from __future__ import annotations

import concurrent.futures
import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from . import exec as exec_util
from . import git, log


@dataclass(frozen=True)
class BranchMetadata:
    """Last-commit metadata for one branch reference."""

    branch: str
    committed_at: dt.datetime
    author: str

    @property
    def author_name(self) -> str:
        """Author name with git's line terminator removed."""
        return self.author.rstrip("\r\n")


@dataclass
class AuthorReportLine:
    """Stale branches owned by one author, in processing order."""

    author: str
    branches: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.branches)


@dataclass(frozen=True)
class StaleReport:
    days: int
    cutoff: dt.datetime
    lines: tuple[AuthorReportLine, ...]

    @property
    def total(self) -> int:
        return sum(line.count for line in self.lines)


def age_cutoff(days: int, *, now: dt.datetime | None = None) -> dt.datetime:
    """Return ``now - days`` as an aware UTC instant.

    Example:
        >>> age_cutoff(30, now=dt.datetime(2023, 2, 1, tzinfo=dt.timezone.utc)).date()
        datetime.date(2023, 1, 2)
    """
    current = now or dt.datetime.now(tz=dt.timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=dt.timezone.utc)
    return current.astimezone(dt.timezone.utc) - dt.timedelta(days=days)


def is_excluded(branch: str, exclusions: Iterable[str]) -> bool:
    name = branch.strip()
    return any(name.startswith(prefix) for prefix in exclusions)


def filter_excluded(branches: Sequence[str], exclusions: Iterable[str] | None) -> list[str]:
    """Drop branches whose trimmed name starts with any exclusion prefix.

    Example:
        >>> filter_excluded(["origin/release/1", "origin/x"], ["origin/release/"])
        ['origin/x']
    """
    prefixes = tuple(exclusions or ())
    if not prefixes:
        return list(branches)
    return [branch for branch in branches if not is_excluded(branch, prefixes)]


def is_stale(metadata: BranchMetadata, cutoff: dt.datetime) -> bool:
    return metadata.committed_at < cutoff


def fetch_metadata(
    branch: str,
    *,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> BranchMetadata:
    """Query the last-commit timestamp and author for ``branch``."""
    committed_at = git.branch_commit_time(branch, git_path=git_path, runner=runner)
    author = git.branch_author(branch, git_path=git_path, runner=runner)
    return BranchMetadata(branch=branch, committed_at=committed_at, author=author)


def fetch_all_metadata(
    branches: Sequence[str],
    *,
    max_workers: int,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> list[BranchMetadata]:
    """Fetch metadata for every branch, preserving input order.

    Any failure propagates and abandons the whole batch.
    """

    def fetch(branch: str) -> BranchMetadata:
        return fetch_metadata(branch, git_path=git_path, runner=runner)

    workers = min(max_workers, len(branches))
    if workers <= 1:
        return [fetch(branch) for branch in branches]

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(fetch, branches))


def group_by_author(entries: Iterable[BranchMetadata]) -> list[AuthorReportLine]:
    """Group branches by author, most branches first, ties by author name."""
    lines: dict[str, AuthorReportLine] = {}
    for entry in entries:
        name = entry.author_name
        line = lines.get(name)
        if line is None:
            line = lines[name] = AuthorReportLine(author=name)
        line.branches.append(entry.branch)
    return sorted(lines.values(), key=lambda line: (-line.count, line.author))


def build_report(
    branches: Sequence[str],
    *,
    days: int,
    exclusions: Iterable[str] | None = None,
    now: dt.datetime | None = None,
    max_workers: int = 1,
    git_path: str | None = None,
    runner: exec_util.CommandRunner | None = None,
) -> StaleReport:
    """Filter candidate branches down to stale ones and group them by author.

    Args:
        branches: Candidate branch references.
        days: Age threshold; branches whose last commit is strictly older
            than ``now - days`` are stale.
        exclusions: Branch-name prefixes to skip before any metadata query.
        now: Reference instant, defaulting to the current time.
        max_workers: Upper bound on concurrent metadata queries.

    Returns:
        ``StaleReport`` with one line per author.
    """
    cutoff = age_cutoff(days, now=now)
    candidates = filter_excluded(branches, exclusions)
    log.debug(
        f"cutoff {cutoff.isoformat()}: {len(candidates)} of {len(branches)} "
        "branches left after exclusions"
    )
    metadata = fetch_all_metadata(
        candidates, max_workers=max_workers, git_path=git_path, runner=runner
    )
    stale = [entry for entry in metadata if is_stale(entry, cutoff)]
    log.debug(f"{len(stale)} branches older than {days} days")
    return StaleReport(days=days, cutoff=cutoff, lines=tuple(group_by_author(stale)))


def render_report(report: StaleReport) -> list[str]:
    """Render the report as console lines.

    Example:
        >>> empty = StaleReport(days=7, cutoff=age_cutoff(7), lines=())
        >>> render_report(empty)
        ['No Branches were found older than 7 days with the given criteria.']
    """
    if not report.lines:
        return [
            f"No Branches were found older than {report.days} days with the given criteria."
        ]
    rendered = [
        f"Found a total of {report.total} branches older than {report.days} days "
        "with the given criteria",
        "",
    ]
    width = max(len(line.author) for line in report.lines)
    for line in report.lines:
        rendered.append(
            f"{line.author.ljust(width)}\t{line.count} old branches\t{', '.join(line.branches)}"
        )
    return rendered
