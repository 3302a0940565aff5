"""Configuration parsing and validation for the PR velocity metrics tool."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .errors import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SINCE = datetime(2024, 1, 1, tzinfo=timezone.utc)
DEFAULT_LIMIT = 100
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 100
DEFAULT_API_URL = "https://api.github.com"

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")
_GH_TIMEOUT_SECONDS = 15


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by a metrics run."""

    owner: str
    repo: str
    since: datetime
    limit: int
    page_size: int
    token: str
    api_url: str = DEFAULT_API_URL

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def _token_from_gh_cli() -> Optional[str]:
    """Ask an installed and logged-in ``gh`` CLI for its token."""
    gh_path = shutil.which("gh")
    if gh_path is None:
        logger.debug("gh CLI not found on PATH")
        return None

    try:
        completed = subprocess.run(
            [gh_path, "auth", "token"],
            capture_output=True,
            text=True,
            timeout=_GH_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("gh auth token failed", extra={"error": str(exc)})
        return None

    if completed.returncode != 0:
        logger.debug("gh CLI is not authenticated", extra={"stderr": completed.stderr.strip()})
        return None

    return completed.stdout.strip() or None


def resolve_token() -> str:
    """Find a GitHub token in the environment or from the ``gh`` CLI.

    Lookup order: ``GITHUB_TOKEN``, ``GH_TOKEN``, then ``gh auth token``.

    Raises:
        AuthenticationError: If no token is available from any source.
    """
    for name in TOKEN_ENV_VARS:
        token = os.getenv(name, "").strip()
        if token:
            logger.debug("Using GitHub token from environment", extra={"source": name})
            return token

    token = _token_from_gh_cli()
    if token:
        logger.debug("Using GitHub token from gh CLI")
        return token

    raise AuthenticationError(
        "Missing GitHub credentials. Set the 'GITHUB_TOKEN' environment variable "
        "or install the GitHub CLI and run `gh auth login`."
    )


def load_config(
    owner: str,
    repo: str,
    since: Optional[datetime] = None,
    limit: Optional[int] = None,
    page_size: Optional[int] = None,
    api_url: Optional[str] = None,
) -> Config:
    """Build and validate application configuration.

    Args:
        owner: Repository owner (user or organization).
        repo: Repository name.
        since: Date cutoff; pull requests created at or before it are not
            processed. Defaults to ``DEFAULT_SINCE``.
        limit: Maximum number of merged pull requests to accept. Defaults to
            ``DEFAULT_LIMIT``.
        page_size: Pull requests requested per page, at most 100.
        api_url: GitHub REST API root, for GitHub Enterprise installations.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If the repository identifier is missing or a
            numeric option is out of range.
        AuthenticationError: If no GitHub token can be resolved.
    """
    owner = (owner or "").strip()
    repo = (repo or "").strip()
    if not owner or not repo:
        raise ConfigurationError("Repository owner and name are both required.")

    limit = DEFAULT_LIMIT if limit is None else limit
    if limit <= 0:
        raise ConfigurationError("Invalid value for 'limit': expected an integer greater than 0.")

    page_size = DEFAULT_PAGE_SIZE if page_size is None else page_size
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ConfigurationError(
            f"Invalid value for 'page_size': expected an integer between 1 and {MAX_PAGE_SIZE}."
        )

    since = DEFAULT_SINCE if since is None else since
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)

    return Config(
        owner=owner,
        repo=repo,
        since=since,
        limit=limit,
        page_size=page_size,
        token=resolve_token(),
        api_url=(api_url or DEFAULT_API_URL).rstrip("/"),
    )
