"""Command-line argument parsing for the PR velocity metrics tool."""

from __future__ import annotations

import argparse
from datetime import datetime
from typing import Optional, Sequence

from .config import DEFAULT_API_URL, DEFAULT_LIMIT, DEFAULT_PAGE_SIZE, DEFAULT_SINCE, MAX_PAGE_SIZE
from .errors import DataValidationError
from .timeutil import format_timestamp, parse_timestamp


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def _page_size(value: str) -> int:
    parsed = _positive_int(value)
    if parsed > MAX_PAGE_SIZE:
        raise argparse.ArgumentTypeError(f"must be at most {MAX_PAGE_SIZE}")
    return parsed


def _timestamp(value: str) -> datetime:
    """Parse a ``YYYY-MM-DDTHH:MM:SSZ`` CLI value."""
    try:
        return parse_timestamp(value)
    except DataValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a metrics run.

    Returns:
        Parsed CLI arguments containing repository owner and name, the date
        and count cutoffs, page size, API root and verbosity.
    """
    parser = argparse.ArgumentParser(
        prog="pr-velocity-metrics",
        description=(
            "Report merge duration, review latency and review counts for "
            "recently merged GitHub pull requests."
        ),
        epilog=(
            "Authentication: the token is read from GITHUB_TOKEN or GH_TOKEN,\n"
            "or from `gh auth token` when the GitHub CLI is installed.\n"
            "The tool never logs in interactively; run `gh auth login` first\n"
            "if neither is set up."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("owner", help="Repository owner (user or organization).")
    parser.add_argument("repo", help="Repository name.")
    parser.add_argument(
        "--since",
        type=_timestamp,
        default=DEFAULT_SINCE,
        help=(
            "Stop at the first PR created at or before this UTC timestamp, "
            f"formatted YYYY-MM-DDTHH:MM:SSZ (default: {format_timestamp(DEFAULT_SINCE)})."
        ),
    )
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=DEFAULT_LIMIT,
        help=f"Maximum number of merged PRs to analyze (default: {DEFAULT_LIMIT}).",
    )
    parser.add_argument(
        "--page-size",
        type=_page_size,
        default=DEFAULT_PAGE_SIZE,
        help=f"Closed PRs requested per page, 1-{MAX_PAGE_SIZE} (default: {DEFAULT_PAGE_SIZE}).",
    )
    parser.add_argument(
        "--api-url",
        default=DEFAULT_API_URL,
        help=f"GitHub REST API root (default: {DEFAULT_API_URL}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
