"""Custom exception types for the PR velocity metrics tool."""


class VelocityMetricsError(Exception):
    """Base exception for all expected failures of a metrics run."""


class ConfigurationError(VelocityMetricsError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(VelocityMetricsError):
    """Raised when no GitHub credentials can be found or GitHub rejects them."""


class ApiError(VelocityMetricsError):
    """Raised when a GitHub API request fails or returns an unexpected response."""


class DataValidationError(VelocityMetricsError):
    """Raised when API payloads or derived metrics do not meet expected constraints."""
