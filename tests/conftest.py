"""Pytest configuration and shared fixtures.

Usage Guide:
- For GitHub payloads and githubkit-like responses: import from tests.factories
- For client tests: use the `mock_github` / `client` fixtures, which replace
  the githubkit GitHub class so every call lands on `mock_github.arequest`
- For log assertions: use `log_records`, which collects loguru records
"""

from collections.abc import Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from loguru import logger

from github_pr_bot.config import GitHubApiConfig
from github_pr_bot.github.client import GitHubClient
from github_pr_bot.github.rate_limit import RateLimitLogThrottle

# -----------------------------------------------------------------------------
# Test Timeline Constants
# -----------------------------------------------------------------------------
JAN_15_ISO = "2024-01-15T10:00:00Z"
JAN_16_ISO = "2024-01-16T14:00:00Z"


# -----------------------------------------------------------------------------
# Logging Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def log_records() -> Generator[list[dict[str, Any]], None, None]:
    """Collect every loguru record emitted during the test."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def rate_limit_records(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Only the throttled rate limit emissions."""
    return [r for r in records if r["extra"].get("type") == "githubRateLimit"]


# -----------------------------------------------------------------------------
# GitHub Client Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_github() -> Generator[MagicMock, None, None]:
    """Replace the githubkit GitHub class with a mock."""
    with patch("github_pr_bot.github.client.GitHub") as mock_class:
        mock_instance = MagicMock()
        mock_instance.arequest = AsyncMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def mock_sleep() -> Generator[AsyncMock, None, None]:
    """Replace asyncio.sleep in the client so retries do not wait."""
    with patch("github_pr_bot.github.client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.fixture
def api_config() -> GitHubApiConfig:
    """Default API configuration (3 retries, 2s backoff unit, 100 per page)."""
    return GitHubApiConfig()


@pytest.fixture
def client(mock_github: MagicMock, api_config: GitHubApiConfig) -> GitHubClient:
    """A client for elastic/kibana backed by the mocked githubkit instance."""
    return GitHubClient(
        token="test-token",
        owner="elastic",
        repo="kibana",
        config=api_config,
        rate_limit=RateLimitLogThrottle(interval_seconds=10.0),
    )
