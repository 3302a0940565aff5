"""Sample collection for GitHub pull request velocity metrics.

This module walks closed pull requests page by page and collects three sample
sets for merged pull requests:
- total duration (creation to merge, seconds)
- review latency (creation to the last listed review, seconds)
- review count

Collection stops as soon as a pull request created at or before the date
cutoff is seen, as soon as the count cutoff of accepted merges is reached, or
when a page comes back shorter than requested.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Protocol

from .errors import DataValidationError
from .models import CollectionResult, PullRequestSummary, ReviewSummary, RunCursor
from .timeutil import format_timestamp, seconds_between

logger = logging.getLogger(__name__)

STOP_DATE_CUTOFF = "date_cutoff"
STOP_COUNT_CUTOFF = "count_cutoff"
STOP_EXHAUSTED = "exhausted"


class ForgeClient(Protocol):
    """Retrieval operations the collection loop needs from a source forge."""

    def list_pull_requests_page(
        self, owner: str, repo: str, page: int, per_page: int
    ) -> List[PullRequestSummary]:
        ...

    def fetch_review_summary(self, owner: str, repo: str, number: int) -> ReviewSummary:
        ...


def compute_duration(pr: PullRequestSummary) -> int:
    """Compute seconds from creation to merge for a merged pull request.

    Raises:
        DataValidationError: If the pull request is not merged or the merge
            precedes creation.
    """
    if pr.merged_at is None:
        raise DataValidationError(f"PR {pr.number} has no merge timestamp.")

    duration = seconds_between(pr.created_at, pr.merged_at)
    if duration < 0:
        raise DataValidationError(
            f"PR {pr.number} has a negative duration ({duration}s): merged_at "
            f"{format_timestamp(pr.merged_at)} precedes created_at "
            f"{format_timestamp(pr.created_at)}."
        )
    return duration


def compute_review_latency(pr: PullRequestSummary, reviews: ReviewSummary) -> int:
    """Compute seconds from creation to the review GitHub listed last.

    Raises:
        DataValidationError: If the summary carries no timestamp or the review
            precedes the pull request's creation.
    """
    if reviews.last_submitted_at is None:
        raise DataValidationError(f"PR {pr.number} has no review timestamp.")

    latency = seconds_between(pr.created_at, reviews.last_submitted_at)
    if latency < 0:
        raise DataValidationError(
            f"PR {pr.number} has a negative review latency ({latency}s)."
        )
    return latency


def _stop_reason(cursor: RunCursor, since: datetime, limit: int) -> str:
    if cursor.earliest_seen is not None and cursor.earliest_seen <= since:
        return STOP_DATE_CUTOFF
    if cursor.accepted >= limit:
        return STOP_COUNT_CUTOFF
    return ""


def _process_page(
    client: ForgeClient,
    owner: str,
    repo: str,
    pull_requests: List[PullRequestSummary],
    since: datetime,
    limit: int,
    result: CollectionResult,
) -> bool:
    """Fold one page into ``result``; return True once a cutoff stops the run."""
    cursor = result.cursor

    for pr in pull_requests:
        cursor.earliest_seen = pr.created_at
        result.stop_reason = _stop_reason(cursor, since, limit)
        if result.stop_reason:
            logger.info(
                "Stopping collection at PR %d (%s).",
                pr.number,
                result.stop_reason,
                extra={"accepted": cursor.accepted, "skipped": cursor.skipped},
            )
            return True

        if not pr.is_merged:
            cursor.skipped += 1
            logger.info("PR %d was not merged; skipping.", pr.number)
            continue

        cursor.accepted += 1
        result.durations.append(compute_duration(pr))

        reviews = client.fetch_review_summary(owner=owner, repo=repo, number=pr.number)
        if not reviews.has_reviews:
            cursor.skipped += 1
            logger.info("PR %d has no reviews; skipping review latency.", pr.number)
            continue

        result.review_latencies.append(compute_review_latency(pr, reviews))
        result.review_counts.append(reviews.count)

    return False


def collect_samples(
    client: ForgeClient,
    owner: str,
    repo: str,
    since: datetime,
    limit: int,
    page_size: int,
) -> CollectionResult:
    """Collect duration, review-latency and review-count samples.

    Business logic, per pull request in returned order:
    - Record its creation time as the earliest seen, then stop the whole run if
      that is at or before ``since`` or ``limit`` merges were already accepted.
    - Unmerged pull requests are skipped.
    - Merged pull requests are accepted and contribute a duration sample.
    - Accepted pull requests with at least one review also contribute a
      latency and a count sample; those without reviews count as skipped.

    A full page is followed by the next one unless the count cutoff has already
    been reached. Transport failures and malformed payloads propagate to the
    caller.
    """
    result = CollectionResult()
    cursor = result.cursor
    repo_label = f"{owner}/{repo}"

    while True:
        logger.info("Fetching page %d of closed PRs for %s", cursor.page, repo_label)
        pull_requests = client.list_pull_requests_page(
            owner=owner, repo=repo, page=cursor.page, per_page=page_size
        )
        logger.info("Fetched %d PRs", len(pull_requests))

        if _process_page(client, owner, repo, pull_requests, since, limit, result):
            break

        if cursor.accepted >= limit:
            result.stop_reason = STOP_COUNT_CUTOFF
            break

        if len(pull_requests) < page_size:
            result.stop_reason = STOP_EXHAUSTED
            break

        cursor.page += 1

    logger.info(
        "Collected velocity samples",
        extra={
            "repo": repo_label,
            "pages": cursor.page,
            "accepted": cursor.accepted,
            "skipped": cursor.skipped,
            "duration_samples": len(result.durations),
            "latency_samples": len(result.review_latencies),
            "stop_reason": result.stop_reason,
        },
    )
    return result
