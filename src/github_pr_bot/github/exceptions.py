"""GitHub client exceptions."""

from datetime import datetime
from typing import Any


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubAuthenticationError(GitHubClientError):
    """Raised when no token is configured or authentication fails (401)."""

    pass


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass


class GitHubConnectionError(GitHubClientError):
    """Raised when a request fails without any response from GitHub."""

    pass


class GitHubRetryableError(GitHubClientError):
    """Base class for failures that a later attempt may not hit."""

    pass


class GitHubRateLimitError(GitHubRetryableError):
    """Raised when rate limit is exceeded (403/429 with no remaining quota)."""

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class GitHubServerError(GitHubRetryableError):
    """Raised for 5xx responses, including a 502 that outlived its retries."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


class GitHubProtocolError(GitHubClientError):
    """Raised when a response does not have the shape the API promises.

    Covers missing or unparsable pagination headers and malformed
    compare or GraphQL payloads.
    """

    pass


class GitHubGraphQLError(GitHubProtocolError):
    """Raised when a GraphQL response carries a non-empty errors payload."""

    def __init__(self, errors: list[Any]) -> None:
        super().__init__(f"GraphQL errors: {errors}")
        self.errors = errors
