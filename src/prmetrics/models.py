"""Domain models for GitHub pull request velocity metrics.

These dataclasses intentionally model only the subset of API payload fields that
are required for metric computation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class PullRequestSummary:
    """Represents the minimal closed pull request data required for metrics."""

    number: int
    created_at: datetime
    merged_at: Optional[datetime]

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None


@dataclass(frozen=True, slots=True)
class ReviewSummary:
    """Represents the review list of one pull request, reduced to what is reported.

    ``last_submitted_at`` is the submission time of the last review in the order
    GitHub returned them.
    """

    last_submitted_at: Optional[datetime]
    count: int

    @property
    def has_reviews(self) -> bool:
        return self.count > 0


@dataclass(slots=True)
class RunCursor:
    """Mutable progress of a collection run."""

    page: int = 1
    accepted: int = 0
    skipped: int = 0
    earliest_seen: Optional[datetime] = None


@dataclass(slots=True)
class CollectionResult:
    """Everything a collection run produced, in seconds or raw counts."""

    cursor: RunCursor = field(default_factory=RunCursor)
    durations: List[int] = field(default_factory=list)
    review_latencies: List[int] = field(default_factory=list)
    review_counts: List[int] = field(default_factory=list)
    stop_reason: str = ""


@dataclass(frozen=True, slots=True)
class Statistics:
    """Summary statistics over one sample set."""

    maximum: float
    minimum: float
    mean: float
    median: float
