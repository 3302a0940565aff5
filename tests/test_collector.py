"""Tests for the paginated sample collection loop."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prmetrics.collector import (
    STOP_COUNT_CUTOFF,
    STOP_DATE_CUTOFF,
    STOP_EXHAUSTED,
    collect_samples,
    compute_duration,
    compute_review_latency,
)
from prmetrics.errors import ApiError, DataValidationError
from prmetrics.models import PullRequestSummary, ReviewSummary

BASE = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
LONG_AGO = datetime(2020, 1, 1, tzinfo=timezone.utc)


class FakeForge:
    """In-memory forge serving fixed pages and review summaries."""

    def __init__(
        self,
        pages: Dict[int, List[PullRequestSummary]],
        reviews: Optional[Dict[int, ReviewSummary]] = None,
    ) -> None:
        self.pages = pages
        self.reviews = reviews or {}
        self.page_calls: List[int] = []
        self.review_calls: List[int] = []

    def list_pull_requests_page(self, owner, repo, page, per_page):
        self.page_calls.append(page)
        return list(self.pages.get(page, []))

    def fetch_review_summary(self, owner, repo, number):
        self.review_calls.append(number)
        return self.reviews.get(number, ReviewSummary(last_submitted_at=None, count=0))


def _pr(number: int, created_offset_hours: int = 0, merged_after_seconds: Optional[int] = 3600) -> PullRequestSummary:
    created = BASE - timedelta(hours=created_offset_hours)
    merged = None if merged_after_seconds is None else created + timedelta(seconds=merged_after_seconds)
    return PullRequestSummary(number=number, created_at=created, merged_at=merged)


def _reviewed(pr: PullRequestSummary, latency_seconds: int, count: int) -> ReviewSummary:
    return ReviewSummary(
        last_submitted_at=pr.created_at + timedelta(seconds=latency_seconds),
        count=count,
    )


def _collect(forge: FakeForge, since=LONG_AGO, limit: int = 100, page_size: int = 100):
    return collect_samples(forge, "octo", "widgets", since=since, limit=limit, page_size=page_size)


def test_compute_duration_returns_seconds_to_merge():
    """Verify duration is merge time minus creation time in seconds."""
    assert compute_duration(_pr(1, merged_after_seconds=5400)) == 5400


def test_compute_duration_negative_raises_data_validation_error():
    """Verify a merge before creation is rejected rather than reported."""
    with pytest.raises(DataValidationError):
        compute_duration(_pr(1, merged_after_seconds=-60))


def test_compute_duration_unmerged_raises_data_validation_error():
    """Verify duration is only defined for merged pull requests."""
    with pytest.raises(DataValidationError):
        compute_duration(_pr(1, merged_after_seconds=None))


def test_compute_review_latency_uses_listed_review_timestamp():
    """Verify latency is measured to the summary's review timestamp."""
    pr = _pr(1)

    assert compute_review_latency(pr, _reviewed(pr, 600, 2)) == 600


def test_compute_review_latency_negative_raises_data_validation_error():
    """Verify reviews submitted before PR creation are rejected."""
    pr = _pr(1)

    with pytest.raises(DataValidationError):
        compute_review_latency(pr, _reviewed(pr, -1, 1))


def test_collect_samples_classifies_unmerged_and_unreviewed_prs():
    """Verify unmerged PRs are skipped and unreviewed merges keep only their duration."""
    pr_a = _pr(1, created_offset_hours=1, merged_after_seconds=None)
    pr_b = _pr(2, created_offset_hours=2, merged_after_seconds=3600)
    pr_c = _pr(3, created_offset_hours=3, merged_after_seconds=7200)
    forge = FakeForge(
        pages={1: [pr_a, pr_b, pr_c]},
        reviews={2: _reviewed(pr_b, 600, 2)},
    )

    result = _collect(forge)

    assert result.cursor.accepted == 2
    assert result.cursor.skipped == 2
    assert result.durations == [3600, 7200]
    assert result.review_latencies == [600]
    assert result.review_counts == [2]
    assert result.stop_reason == STOP_EXHAUSTED
    assert forge.review_calls == [2, 3]
    assert forge.page_calls == [1]


def test_collect_samples_stops_mid_page_at_count_cutoff_without_third_page():
    """Verify the count cutoff stops inside a page and no further page is fetched."""
    forge = FakeForge(
        pages={
            1: [_pr(1, 1), _pr(2, 2)],
            2: [_pr(3, 3), _pr(4, 4)],
            3: [_pr(5, 5), _pr(6, 6)],
        }
    )

    result = _collect(forge, limit=3, page_size=2)

    assert result.cursor.accepted == 3
    assert len(result.durations) == 3
    assert forge.page_calls == [1, 2]
    assert forge.review_calls == [1, 2, 3]
    assert result.stop_reason == STOP_COUNT_CUTOFF


def test_collect_samples_count_cutoff_reached_on_last_record_skips_next_page():
    """Verify reaching the count cutoff at a page boundary does not fetch another page."""
    merged = [_pr(1, 1), _pr(2, 2), _pr(4, 4)]
    forge = FakeForge(
        pages={
            1: merged[:2],
            2: [_pr(3, 3, merged_after_seconds=None), merged[2]],
            3: [_pr(5, 5)],
        },
        reviews={pr.number: _reviewed(pr, 600, 1) for pr in merged},
    )

    result = _collect(forge, limit=3, page_size=2)

    assert result.cursor.accepted == 3
    assert result.cursor.skipped == 1
    assert result.review_latencies == [600, 600, 600]
    assert forge.page_calls == [1, 2]
    assert result.stop_reason == STOP_COUNT_CUTOFF


def test_collect_samples_unreviewed_merges_count_as_skipped():
    """Verify merged PRs without reviews add to the skipped count but keep their duration."""
    forge = FakeForge(
        pages={
            1: [_pr(1, 1), _pr(2, 2)],
            2: [_pr(3, 3, merged_after_seconds=None), _pr(4, 4)],
        }
    )

    result = _collect(forge, limit=3, page_size=2)

    assert result.cursor.accepted == 3
    assert result.cursor.skipped == 4
    assert result.durations == [3600, 3600, 3600]
    assert result.review_latencies == []
    assert result.review_counts == []


def test_collect_samples_stops_at_date_cutoff_mid_page():
    """Verify a PR created exactly at the cutoff ends the run before it is processed."""
    since = BASE - timedelta(hours=2)
    forge = FakeForge(
        pages={1: [_pr(1, 1), _pr(2, 2), _pr(3, 0)]},
    )

    result = _collect(forge, since=since)

    assert result.cursor.accepted == 1
    assert result.durations == [3600]
    assert forge.review_calls == [1]
    assert result.cursor.earliest_seen == since
    assert result.stop_reason == STOP_DATE_CUTOFF


def test_collect_samples_never_processes_prs_before_cutoff():
    """Verify no accepted PR was created at or before the date cutoff."""
    since = BASE - timedelta(hours=3)
    forge = FakeForge(
        pages={
            1: [_pr(1, 1), _pr(2, 2)],
            2: [_pr(3, 5), _pr(4, 6)],
        }
    )

    result = _collect(forge, since=since, page_size=2)

    assert result.cursor.accepted == 2
    assert forge.review_calls == [1, 2]
    assert forge.page_calls == [1, 2]
    assert result.stop_reason == STOP_DATE_CUTOFF


def test_collect_samples_follows_full_pages_until_empty_page():
    """Verify a full final page leads to one more fetch that ends the run."""
    forge = FakeForge(pages={1: [_pr(1, 1), _pr(2, 2)]})

    result = _collect(forge, page_size=2)

    assert forge.page_calls == [1, 2]
    assert result.cursor.page == 2
    assert result.cursor.accepted == 2
    assert result.stop_reason == STOP_EXHAUSTED


def test_collect_samples_with_no_pull_requests_returns_empty_sample_sets():
    """Verify an empty repository yields empty sample sets rather than failing."""
    forge = FakeForge(pages={})

    result = _collect(forge)

    assert result.durations == []
    assert result.review_latencies == []
    assert result.review_counts == []
    assert result.cursor.accepted == 0
    assert result.stop_reason == STOP_EXHAUSTED


def test_collect_samples_sample_sets_keep_fetch_order():
    """Verify observations are appended in the order PRs were returned."""
    prs = [_pr(1, 1, 300), _pr(2, 2, 100), _pr(3, 3, 200)]
    forge = FakeForge(
        pages={1: prs},
        reviews={pr.number: _reviewed(pr, 10 * pr.number, pr.number) for pr in prs},
    )

    result = _collect(forge)

    assert result.durations == [300, 100, 200]
    assert result.review_latencies == [10, 20, 30]
    assert result.review_counts == [1, 2, 3]


def test_collect_samples_negative_duration_aborts_run():
    """Verify clock or data errors in a merged PR fail the whole run."""
    forge = FakeForge(pages={1: [_pr(1, 1, merged_after_seconds=-5)]})

    with pytest.raises(DataValidationError):
        _collect(forge)


def test_collect_samples_propagates_api_errors():
    """Verify fetch failures are not swallowed by the collection loop."""

    class FailingForge(FakeForge):
        def fetch_review_summary(self, owner, repo, number):
            raise ApiError("boom")

    forge = FailingForge(pages={1: [_pr(1, 1)]})

    with pytest.raises(ApiError):
        _collect(forge)
