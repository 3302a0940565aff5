"""Statistics and formatting helpers for PR velocity reporting.

This module provides utilities for:
- Computing maximum, minimum, mean and median over one sample set.
- Rounding half away from zero at a fixed number of decimal places.
- Converting second-based statistics to minutes and hours.
- Building the plain-text report for the three collected sample sets.
"""

from __future__ import annotations

import statistics
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Sequence

from .models import CollectionResult, Statistics

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * 60
DEFAULT_DECIMALS = 2
NO_DATA = "No data"

_STAT_LABELS = (
    ("Maximum", "maximum"),
    ("Minimum", "minimum"),
    ("Mean", "mean"),
    ("Median", "median"),
)


def compute_statistics(samples: Sequence[float]) -> Statistics:
    """Compute maximum, minimum, arithmetic mean and median of a sample set.

    The median of an even-sized sample is the mean of the two central values.
    Sample order does not affect the result.

    Args:
        samples: Numeric observations (seconds or raw counts).

    Returns:
        A ``Statistics`` instance.

    Raises:
        ValueError: If ``samples`` is empty. Callers report empty sets as
            "no data" instead of computing statistics.
    """
    if not samples:
        raise ValueError("Cannot compute statistics over an empty sample set.")

    return Statistics(
        maximum=max(samples),
        minimum=min(samples),
        mean=statistics.mean(samples),
        median=statistics.median(samples),
    )


def round_half_away_from_zero(value: float, decimals: int = DEFAULT_DECIMALS) -> float:
    """Round ``value`` to ``decimals`` places, sending ties away from zero.

    Rounding is applied to the shortest decimal representation of ``value``, so
    ``2.345`` becomes ``2.35`` and ``-2.345`` becomes ``-2.35`` even though
    neither is exactly representable as a binary float.
    """
    if decimals < 0:
        raise ValueError("'decimals' must not be negative.")

    quantum = Decimal(1).scaleb(-decimals)
    # Decimal's ROUND_HALF_UP rounds ties away from zero for both signs.
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_rounded(value: float, decimals: int = DEFAULT_DECIMALS) -> str:
    """Format a rounded value with exactly ``decimals`` digits after the point."""
    return f"{round_half_away_from_zero(value, decimals):.{decimals}f}"


def format_duration_line(label: str, seconds: float) -> str:
    """Format one statistic, given in seconds, as minutes and hours."""
    minutes = format_rounded(seconds / SECONDS_PER_MINUTE)
    hours = format_rounded(seconds / SECONDS_PER_HOUR)
    return f"{label}: {minutes} min or {hours} hours"


def format_count(value: float) -> str:
    """Format a raw count statistic, dropping the fraction when it is whole."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _section_header(title: str) -> List[str]:
    return ["", title, "-" * len(title)]


def _duration_section(title: str, samples: Sequence[float]) -> List[str]:
    lines = _section_header(title)
    if not samples:
        lines.append(NO_DATA)
        return lines

    summary = compute_statistics(samples)
    for label, attribute in _STAT_LABELS:
        lines.append(format_duration_line(label, getattr(summary, attribute)))
    return lines


def _count_section(title: str, samples: Sequence[float]) -> List[str]:
    lines = _section_header(title)
    if not samples:
        lines.append(NO_DATA)
        return lines

    summary = compute_statistics(samples)
    for label, attribute in _STAT_LABELS:
        lines.append(f"{label}: {format_count(getattr(summary, attribute))}")
    return lines


def format_collection_summary(result: CollectionResult) -> str:
    """Summarize how many pull requests were accepted and skipped."""
    cursor = result.cursor
    return (
        f"Accepted {cursor.accepted} merged PRs, skipped {cursor.skipped} "
        f"(pages fetched: {cursor.page}, stopped: {result.stop_reason or 'n/a'})."
    )


def generate_report(
    repo_name: str,
    durations: Sequence[float],
    review_latencies: Sequence[float],
    review_counts: Sequence[float],
) -> str:
    """Generate the plain-text velocity report for a repository.

    The report has three sections:
    - Total Duration (creation to merge), in minutes and hours
    - First Review Latency (creation to review), in minutes and hours
    - Reviews per PR, as raw counts

    Each section reports Maximum, Minimum, Mean and Median, or "No data" when
    its sample set is empty.

    Args:
        repo_name: Repository display name, ``owner/repo``.
        durations: Creation-to-merge samples in seconds.
        review_latencies: Creation-to-review samples in seconds.
        review_counts: Number of reviews per reviewed merged PR.

    Returns:
        Formatted multi-line text report.
    """
    lines = [
        "-------",
        "RESULTS",
        "-------",
        f"Repository: {repo_name}",
    ]
    lines.extend(_duration_section("Total Duration", durations))
    lines.extend(_duration_section("First Review Latency", review_latencies))
    lines.extend(_count_section("Reviews per PR", review_counts))

    return "\n".join(lines)
