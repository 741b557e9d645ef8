"""GitHub API client module.

This module provides:
- GitHubClient: Async GitHub API client with 502 retry and rate limit logging
- Link header pagination: paginate_link_header
- Batched GraphQL file pagination: build_files_page_query, fetch_remaining_files
- Rate limit tracking: RateLimitLogThrottle, RateLimitSnapshot
"""

from .client import GitHubClient
from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubConnectionError,
    GitHubGraphQLError,
    GitHubNotFoundError,
    GitHubProtocolError,
    GitHubRateLimitError,
    GitHubRetryableError,
    GitHubServerError,
)
from .graphql import build_files_page_query, fetch_remaining_files
from .pagination import next_page_url, paginate_link_header
from .rate_limit import RateLimitLogThrottle, RateLimitSnapshot

__all__ = [
    # Client
    "GitHubClient",
    # Exceptions
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubConnectionError",
    "GitHubGraphQLError",
    "GitHubNotFoundError",
    "GitHubProtocolError",
    "GitHubRateLimitError",
    "GitHubRetryableError",
    "GitHubServerError",
    # Pagination
    "build_files_page_query",
    "fetch_remaining_files",
    "next_page_url",
    "paginate_link_header",
    # Rate limit tracking
    "RateLimitLogThrottle",
    "RateLimitSnapshot",
]
