"""Tests for command-line argument parsing."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prmetrics.cli import parse_args
from prmetrics.config import DEFAULT_LIMIT, DEFAULT_PAGE_SIZE, DEFAULT_SINCE


def test_parse_args_with_valid_arguments(monkeypatch):
    """Verify CLI parsing succeeds when all arguments are provided."""
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "pr-velocity-metrics",
            "octo",
            "widgets",
            "--since",
            "2025-06-01T00:00:00Z",
            "--limit",
            "25",
            "--page-size",
            "50",
            "--verbose",
        ],
    )

    args = parse_args()

    assert args.owner == "octo"
    assert args.repo == "widgets"
    assert args.since == datetime(2025, 6, 1, tzinfo=timezone.utc)
    assert args.limit == 25
    assert args.page_size == 50
    assert args.verbose is True


def test_parse_args_defaults():
    """Verify cutoffs default to the configured values when omitted."""
    args = parse_args(["octo", "widgets"])

    assert args.since == DEFAULT_SINCE
    assert args.limit == DEFAULT_LIMIT
    assert args.page_size == DEFAULT_PAGE_SIZE
    assert args.api_url == "https://api.github.com"
    assert args.verbose is False


def test_parse_args_without_repository_fails():
    """Verify the repository identifier is required."""
    with pytest.raises(SystemExit):
        parse_args(["octo"])


@pytest.mark.parametrize(
    "extra",
    [
        ["--limit", "0"],
        ["--limit", "-1"],
        ["--limit", "ten"],
        ["--page-size", "101"],
        ["--since", "2025-06-01"],
    ],
)
def test_parse_args_invalid_options_fail_validation(extra):
    """Verify invalid cutoffs and page sizes exit with a usage error."""
    with pytest.raises(SystemExit):
        parse_args(["octo", "widgets", *extra])


def test_parse_args_help_explains_authentication(capsys):
    """Verify --help tells users how credentials are found and to run gh auth login."""
    with pytest.raises(SystemExit) as excinfo:
        parse_args(["--help"])

    assert excinfo.value.code == 0
    output = capsys.readouterr().out
    assert "GITHUB_TOKEN" in output
    assert "gh auth login" in output
