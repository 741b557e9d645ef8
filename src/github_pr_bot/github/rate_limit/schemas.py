"""Pydantic schemas for GitHub API rate limit data.

These schemas represent rate limit information from:
- x-ratelimit-* response headers (REST and GraphQL)
- the optional `rateLimit { limit remaining }` field of GraphQL data
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field

REMAINING_HEADER = "x-ratelimit-remaining"
LIMIT_HEADER = "x-ratelimit-limit"


def _parse_count(value: Any) -> int | None:
    """Parse a numeric header value, None when it is not a number."""
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


class RateLimitSnapshot(BaseModel):
    """Remaining/limit counters as reported by the most recent response."""

    model_config = ConfigDict(frozen=True)

    remaining: int = Field(ge=0, description="Requests remaining in current window")
    limit: int = Field(ge=0, description="Maximum requests allowed per window")
    recorded_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the counters were observed",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_percent(self) -> float:
        """Percentage of rate limit remaining (0.0 to 100.0)."""
        if self.limit == 0:
            return 0.0
        return (self.remaining / self.limit) * 100

    @classmethod
    def from_response_headers(cls, headers: Mapping[str, str] | None) -> Self | None:
        """Parse from HTTP response headers.

        Both `x-ratelimit-remaining` and `x-ratelimit-limit` must be present
        and numeric, otherwise None is returned.

        Args:
            headers: HTTP response headers (httpx.Headers or a lowercase dict)

        Returns:
            RateLimitSnapshot or None
        """
        if not headers:
            return None

        remaining = _parse_count(headers.get(REMAINING_HEADER))
        limit = _parse_count(headers.get(LIMIT_HEADER))
        if remaining is None or limit is None:
            return None

        return cls(remaining=max(0, remaining), limit=max(0, limit))

    @classmethod
    def from_graphql_data(cls, data: Mapping[str, Any] | None) -> Self | None:
        """Parse from the `rateLimit` field of a GraphQL data payload."""
        if not data:
            return None

        rate_limit = data.get("rateLimit")
        if not isinstance(rate_limit, Mapping):
            return None

        remaining = _parse_count(rate_limit.get("remaining"))
        limit = _parse_count(rate_limit.get("limit"))
        if remaining is None or limit is None:
            return None

        return cls(remaining=max(0, remaining), limit=max(0, limit))
