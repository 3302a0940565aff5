"""GitHub REST API client for pull request and review retrieval."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import Config
from .errors import ApiError, AuthenticationError, DataValidationError
from .models import PullRequestSummary, ReviewSummary
from .timeutil import parse_optional_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


class GitHubClient:
    """Small, typed client for the GitHub pull request REST APIs."""

    _API_VERSION = "2022-11-28"
    _REVIEW_PAGE_SIZE = 100

    def __init__(self, config: Config, timeout_seconds: int = 30) -> None:
        """Initialize an authenticated GitHub API client.

        Args:
            config: Validated runtime configuration including repository and token.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._timeout_seconds = timeout_seconds
        self._base_url = config.api_url.rstrip("/")

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {config.token}",
                "X-GitHub-Api-Version": self._API_VERSION,
            }
        )

    @staticmethod
    def _is_rate_limited(response: requests.Response) -> bool:
        """True for an exhausted quota or a secondary limit carrying Retry-After."""
        return (
            response.headers.get("X-RateLimit-Remaining") == "0"
            or "Retry-After" in response.headers
        )

    def _build_url(self, path: str) -> str:
        """Build a fully qualified API URL from a path below the API root."""
        return f"{self._base_url}/{path.lstrip('/')}"

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a GET request expecting a JSON array.

        Failures are not retried.

        Raises:
            AuthenticationError: If GitHub answers 401, or 403 that is not a primary
                or secondary rate limit.
            ApiError: If the request fails, returns HTTP >= 400, or does not
                return a JSON array.
        """
        url = self._build_url(path)

        try:
            response = self._session.get(url, params=params, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise ApiError(f"GitHub request failed: GET {url}") from exc

        status_code = response.status_code
        if status_code == 401 or (status_code == 403 and not self._is_rate_limited(response)):
            raise AuthenticationError(
                f"GitHub rejected the credentials: GET {url} returned {status_code}. "
                "Check the token or run `gh auth login`."
            )

        if status_code >= 400:
            raise ApiError(
                "GitHub API request failed: "
                f"GET {url} returned {status_code} - {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiError(f"GitHub API returned invalid JSON: GET {url}") from exc

        if not isinstance(payload, list):
            raise ApiError(f"GitHub API returned unexpected payload shape: GET {url}")

        return payload

    def list_pull_requests_page(
        self,
        owner: str,
        repo: str,
        page: int,
        per_page: int,
    ) -> List[PullRequestSummary]:
        """Fetch one page of closed pull requests in GitHub's default order.

        Raises:
            DataValidationError: If an item lacks ``number`` or ``created_at``,
                or carries a malformed timestamp.
        """
        items = self._get_json(
            f"repos/{owner}/{repo}/pulls",
            params={"state": "closed", "per_page": per_page, "page": page},
        )

        pull_requests: List[PullRequestSummary] = []
        for item in items:
            number = item.get("number")
            if number is None:
                raise DataValidationError(
                    f"GitHub pull request payload is missing 'number': repo={owner}/{repo}"
                )

            pull_requests.append(
                PullRequestSummary(
                    number=int(number),
                    created_at=parse_timestamp(item.get("created_at")),
                    merged_at=parse_optional_timestamp(item.get("merged_at")),
                )
            )

        logger.debug(
            "Fetched pull request page",
            extra={"repo": f"{owner}/{repo}", "page": page, "items": len(pull_requests)},
        )
        return pull_requests

    def fetch_review_summary(self, owner: str, repo: str, number: int) -> ReviewSummary:
        """Fetch the reviews of one pull request and reduce them to a summary.

        Only the first page of up to 100 reviews is read; longer review lists
        are truncated. ``last_submitted_at`` comes from the last review in the
        returned order.
        """
        reviews = self._get_json(
            f"repos/{owner}/{repo}/pulls/{number}/reviews",
            params={"per_page": self._REVIEW_PAGE_SIZE},
        )

        if not reviews:
            return ReviewSummary(last_submitted_at=None, count=0)

        if len(reviews) >= self._REVIEW_PAGE_SIZE:
            logger.warning(
                "Review list may be truncated to the first page",
                extra={"pr_number": number, "reviews": len(reviews)},
            )

        return ReviewSummary(
            last_submitted_at=parse_timestamp(reviews[-1].get("submitted_at")),
            count=len(reviews),
        )
