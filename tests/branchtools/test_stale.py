from __future__ import annotations

import datetime as dt
import string

import pytest
from hypothesis import given
from hypothesis import strategies as st

import branchtools.stale as stale
from branchtools.errors import ExternalCommandFailedError, TimestampParseError
from tests.branchtools.helpers import FakeRunner, branch_script, fail

NOW = dt.datetime(2023, 2, 1, tzinfo=dt.timezone.utc)

NAME_CHARS = string.ascii_letters + string.digits + "-_/"
branch_names = st.text(alphabet=NAME_CHARS, min_size=1, max_size=16).map(lambda v: f"origin/{v}")
prefixes = st.text(alphabet=NAME_CHARS, min_size=1, max_size=10).map(lambda v: f"origin/{v}")


def _meta(branch: str, when: dt.datetime, author: str = "Alice\n") -> stale.BranchMetadata:
    return stale.BranchMetadata(branch=branch, committed_at=when, author=author)


@given(st.lists(branch_names, max_size=20), st.lists(prefixes, max_size=4))
def test_exclusion_filter_is_idempotent(branches: list[str], exclusions: list[str]) -> None:
    once = stale.filter_excluded(branches, exclusions)

    assert stale.filter_excluded(once, exclusions) == once


@given(st.lists(branch_names, max_size=20))
def test_empty_exclusion_set_keeps_everything(branches: list[str]) -> None:
    assert stale.filter_excluded(branches, []) == branches
    assert stale.filter_excluded(branches, None) == branches


def test_exclusion_is_case_sensitive_left_anchored_prefix_match() -> None:
    branches = ["origin/release/1", "  origin/release/2", "origin/Release/3", "origin/x-release/4"]

    assert stale.filter_excluded(branches, ["origin/release/"]) == [
        "origin/Release/3",
        "origin/x-release/4",
    ]


@given(
    st.lists(st.integers(min_value=0, max_value=400), max_size=20),
    st.integers(min_value=0, max_value=365),
    st.integers(min_value=0, max_value=365),
)
def test_older_cutoff_keeps_a_subset(ages: list[int], first: int, second: int) -> None:
    shorter, longer = sorted((first, second))
    entries = [_meta(f"origin/b{index}", NOW - dt.timedelta(days=age)) for index, age in enumerate(ages)]

    def survivors(days: int) -> set[str]:
        cutoff = stale.age_cutoff(days, now=NOW)
        return {entry.branch for entry in entries if stale.is_stale(entry, cutoff)}

    assert survivors(longer) <= survivors(shorter)


def test_thirty_one_day_old_commit_is_stale_for_thirty_days() -> None:
    cutoff = stale.age_cutoff(30, now=NOW)
    entry = _meta("origin/feature-x", dt.datetime(2023, 1, 1, tzinfo=dt.timezone.utc))

    assert stale.is_stale(entry, cutoff)


def test_commit_exactly_at_cutoff_is_not_stale() -> None:
    cutoff = stale.age_cutoff(30, now=NOW)

    assert not stale.is_stale(_meta("origin/x", cutoff), cutoff)


def test_age_cutoff_treats_naive_now_as_utc() -> None:
    naive = dt.datetime(2023, 2, 1)

    assert stale.age_cutoff(1, now=naive) == dt.datetime(2023, 1, 31, tzinfo=dt.timezone.utc)


@given(
    st.lists(
        st.tuples(branch_names, st.sampled_from(["Alice", "Bob", "Carol", "Dan"])),
        max_size=30,
    )
)
def test_group_counts_sum_to_number_of_entries(pairs: list[tuple[str, str]]) -> None:
    entries = [_meta(branch, NOW, f"{author}\n") for branch, author in pairs]

    lines = stale.group_by_author(entries)

    assert sum(line.count for line in lines) == len(entries)
    counts = [line.count for line in lines]
    assert counts == sorted(counts, reverse=True)


def test_group_by_author_keeps_processing_order_and_breaks_ties_by_name() -> None:
    entries = [
        _meta("origin/z", NOW, "Zed\n"),
        _meta("origin/b2", NOW, "Bob\n"),
        _meta("origin/a1", NOW, "Alice\n"),
        _meta("origin/b1", NOW, "Bob\n"),
    ]

    lines = stale.group_by_author(entries)

    assert [(line.author, line.branches) for line in lines] == [
        ("Bob", ["origin/b2", "origin/b1"]),
        ("Alice", ["origin/a1"]),
        ("Zed", ["origin/z"]),
    ]


def test_build_report_filters_groups_and_renders_descending_counts() -> None:
    runner = FakeRunner(
        branch_script(
            {
                "origin/a1": ("2022-10-01 09:00:00 +0200", "Alice"),
                "origin/b1": ("2022-11-01 09:00:00 +0000", "Bob"),
                "origin/a2": ("2022-12-01 09:00:00 -0500", "Alice"),
                "origin/fresh": ("2023-01-31 00:00:00 +0000", "Bob"),
                "origin/a3": ("2023-01-01 00:00:00 +0000", "Alice"),
            }
        )
    )
    branches = ["origin/a1", "origin/b1", "origin/a2", "origin/fresh", "origin/a3", "origin/skip/me"]

    report = stale.build_report(
        branches, days=30, exclusions=["origin/skip/"], now=NOW, max_workers=4, runner=runner
    )

    assert report.total == 4
    assert stale.render_report(report) == [
        "Found a total of 4 branches older than 30 days with the given criteria",
        "",
        "Alice\t3 old branches\torigin/a1, origin/a2, origin/a3",
        "Bob  \t1 old branches\torigin/b1",
    ]
    assert not any("origin/skip/me" in call for call in runner.calls)


def test_build_report_with_no_stale_branches_renders_single_sentence() -> None:
    runner = FakeRunner(branch_script({"origin/new": ("2023-01-31 00:00:00 +0000", "Alice")}))

    report = stale.build_report(["origin/new"], days=30, now=NOW, runner=runner)

    assert stale.render_report(report) == [
        "No Branches were found older than 30 days with the given criteria."
    ]


def test_build_report_with_no_candidates_issues_no_queries() -> None:
    runner = FakeRunner()

    report = stale.build_report([], days=7, now=NOW, max_workers=8, runner=runner)

    assert report.lines == ()
    assert runner.calls == []


def test_fetch_all_metadata_preserves_input_order_when_parallel() -> None:
    names = [f"origin/b{index}" for index in range(12)]
    runner = FakeRunner(
        branch_script({name: ("2022-01-01 00:00:00 +0000", f"Dev {name[-1]}") for name in names})
    )

    entries = stale.fetch_all_metadata(names, max_workers=6, runner=runner)

    assert [entry.branch for entry in entries] == names
    assert len(runner.calls) == 3 * len(names)


def test_one_failing_branch_aborts_the_whole_report() -> None:
    script = branch_script({"origin/ok": ("2022-01-01 00:00:00 +0000", "Alice")})
    script[("git", "show", "-s", '--format="%ci"', "origin/broken")] = fail("fatal: bad object\n", 128)
    runner = FakeRunner(script)

    with pytest.raises(ExternalCommandFailedError) as excinfo:
        stale.build_report(["origin/ok", "origin/broken"], days=1, now=NOW, max_workers=2, runner=runner)

    assert excinfo.value.output == "fatal: bad object\n"


def test_malformed_timestamp_is_fatal() -> None:
    runner = FakeRunner(branch_script({"origin/x": ("01/01/2023", "Alice")}))

    with pytest.raises(TimestampParseError):
        stale.build_report(["origin/x"], days=1, now=NOW, runner=runner)
