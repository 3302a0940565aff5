"""Entry point wiring configuration, collection and reporting together."""

from __future__ import annotations

import logging
import sys

from .cli import parse_args
from .collector import collect_samples
from .config import load_config
from .errors import ApiError, AuthenticationError, ConfigurationError, DataValidationError
from .github_client import GitHubClient
from .stats import format_collection_summary, generate_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_API = 4
EXIT_DATA = 5


def configure_logging(verbose: bool = False) -> None:
    """Send progress logging to stderr so the report on stdout stays clean."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )


def orchestrate_velocity_report() -> int:
    """Run one metrics collection and print the report.

    Returns:
        Process exit code: 0 on success, otherwise the code for the failure
        category (configuration, authentication, API, data validation or
        unexpected).
    """
    try:
        args = parse_args()
        configure_logging(verbose=args.verbose)

        config = load_config(
            owner=args.owner,
            repo=args.repo,
            since=args.since,
            limit=args.limit,
            page_size=args.page_size,
            api_url=args.api_url,
        )

        print(f"Fetching merged PRs for {config.full_name}...")
        client = GitHubClient(config=config)
        result = collect_samples(
            client=client,
            owner=config.owner,
            repo=config.repo,
            since=config.since,
            limit=config.limit,
            page_size=config.page_size,
        )

        print(format_collection_summary(result))
        print()
        print(
            generate_report(
                repo_name=config.full_name,
                durations=result.durations,
                review_latencies=result.review_latencies,
                review_counts=result.review_counts,
            )
        )
        return EXIT_OK
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION
    except AuthenticationError as exc:
        logger.error("Authentication error: %s", exc)
        return EXIT_AUTHENTICATION
    except ApiError as exc:
        logger.error("GitHub API error, no report produced: %s", exc)
        return EXIT_API
    except DataValidationError as exc:
        logger.error("Invalid GitHub data, no report produced: %s", exc)
        return EXIT_DATA
    except Exception:
        logger.exception("Unexpected error while generating velocity report")
        return EXIT_UNEXPECTED


def main() -> None:
    """Console script entry point."""
    sys.exit(orchestrate_velocity_report())


if __name__ == "__main__":
    main()
