"""Async GitHub API client wrapper using githubkit.

This module provides the bot's typed interface to the GitHub REST and
GraphQL APIs for a single repository. Every call goes through one request
executor that retries 502 responses with a linear backoff and feeds the
rate limit counters of every response into a throttled logger.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal, TypeVar
from urllib.parse import quote

from githubkit import GitHub
from githubkit.exception import RequestError, RequestFailed, RequestTimeout
from pydantic import BaseModel, ValidationError

from github_pr_bot.config import GitHubApiConfig, get_settings
from github_pr_bot.logging import bind_repo
from github_pr_bot.schemas import (
    CombinedCommitStatus,
    CommitStatusOptions,
    FileReq,
    GitHubCommitStatus,
    GitHubCompare,
    GitHubCompareCommit,
    GitHubPullRequest,
    GitHubPullRequestFile,
    MissingCommits,
    OutdatedPr,
    PrFilesResult,
    PrWithFiles,
)

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubConnectionError,
    GitHubGraphQLError,
    GitHubNotFoundError,
    GitHubProtocolError,
    GitHubRateLimitError,
    GitHubServerError,
)
from .graphql import PRS_AND_FILES_QUERY, fetch_remaining_files
from .pagination import paginate_link_header
from .rate_limit import RateLimitLogThrottle, RateLimitSnapshot

if TYPE_CHECKING:
    from githubkit.response import Response

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
PRState = Literal["open", "closed"]

ModelT = TypeVar("ModelT", bound=BaseModel)

# Failures raised by the transport, translated by _handle_error
TRANSPORT_ERRORS = (RequestFailed, RequestError, RequestTimeout)


def _quote(component: str | int) -> str:
    """URL-encode a single path component."""
    return quote(str(component), safe="")


class GitHubClient:
    """Async GitHub API client for one repository.

    Usage:
        async with GitHubClient() as client:
            pr = await client.get_pr(1234)
            async for open_pr in client.iter_open_prs():
                print(open_pr.title)

    Or without context manager:
        client = GitHubClient(token="...", owner="elastic", repo="kibana")
        prs = await client.get_prs_and_files(sha)
        await client.close()
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        owner: str | None = None,
        repo: str | None = None,
        config: GitHubApiConfig | None = None,
        rate_limit: RateLimitLogThrottle | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT. If not provided, uses GITHUB_TOKEN from settings.
            owner: Repository owner. If not provided, uses GITHUB_OWNER.
            repo: Repository name. If not provided, uses GITHUB_REPO.
            config: Transport and retry configuration (uses settings if not provided)
            rate_limit: Throttle receiving the rate limit counters of every
                        response. A new one is created if not provided.

        Raises:
            GitHubAuthenticationError: If no token is available.
        """
        settings = get_settings()
        self._token = token or settings.github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        self._owner = owner or settings.github_owner
        self._repo = repo or settings.github_repo
        self._config = config or settings.github
        self._rate_limit = rate_limit or RateLimitLogThrottle()
        self._client: GitHub[Any] | None = None
        self._log = bind_repo(__name__, self._owner, self._repo)

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance.

        githubkit's own retries are disabled; _request owns the retry policy.
        """
        if self._client is None:
            self._client = GitHub(
                self._token,
                base_url=self._config.base_url,
                user_agent=self._config.user_agent,
                timeout=self._config.timeout_seconds,
                auto_retry=False,
            )
        return self._client

    @property
    def repository(self) -> str:
        """Full name of the repository this client works on."""
        return f"{self._owner}/{self._repo}"

    @property
    def rate_limit(self) -> RateLimitLogThrottle:
        """The rate limit throttle fed by every response."""
        return self._rate_limit

    async def close(self) -> None:
        """Flush pending rate limit logging and drop the HTTP client."""
        self._rate_limit.close()
        if self._client is not None:
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Request Executor
    # -------------------------------------------------------------------------
    async def _request(
        self,
        method: HttpMethod,
        url: str,
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        retries_remaining: int | None = None,
    ) -> Response[Any]:
        """Issue one authenticated call, retrying 502 responses.

        A 502 is retried while retries remain, sleeping
        `retry_backoff_seconds * attempt` first, where attempt counts the
        retries already made (0s, 2s, 4s with the defaults). Every other
        failure, and a 502 once the budget is spent, is re-raised unchanged.
        Failures without a response are never retried.

        Args:
            method: HTTP method
            url: Path relative to the API base, or an absolute URL
            params: Query parameters
            body: JSON body
            retries_remaining: 502 retries left (defaults to the configured budget)

        Returns:
            githubkit Response

        Raises:
            RequestFailed: GitHub answered with an error status
            RequestError: The request failed without a response
            RequestTimeout: The request timed out
        """
        max_attempts = self._config.retry_on_502_attempts
        if retries_remaining is None:
            retries_remaining = max_attempts

        try:
            response = await self._github.arequest(
                method,
                url,
                params=dict(params) if params is not None else None,
                json=dict(body) if body is not None else None,
            )
        except RequestFailed as e:
            self._record_rate_limit(e.response)
            status = e.response.status_code
            self._log.debug(
                "github api response error",
                type="githubApiResponseError",
                status=status,
                method=method,
                url=url,
                params=params,
                body=body,
                response={
                    "headers": dict(e.response.headers),
                    "body": e.response.text,
                    "status": status,
                },
            )

            if status == 502 and retries_remaining > 0:
                attempt = max_attempts - retries_remaining
                delay = self._config.retry_backoff_seconds * attempt
                self._log.debug(
                    "automatically retrying request",
                    type="githubApi502Retry",
                    status=status,
                    delay=delay,
                    retries_remaining=retries_remaining,
                    method=method,
                    url=url,
                )
                await asyncio.sleep(delay)
                return await self._request(method, url, params, body, retries_remaining - 1)
            raise
        except (RequestError, RequestTimeout) as e:
            self._log.debug(
                "github api request error",
                type="githubApiRequestError",
                error_message=str(e),
                method=method,
                url=url,
                params=params,
                body=body,
            )
            raise

        self._record_rate_limit(response)
        return response

    async def _get(self, url: str, params: Mapping[str, Any] | None = None) -> Response[Any]:
        return await self._request("GET", url, params)

    async def _post(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> Response[Any]:
        return await self._request("POST", url, params, body)

    def _record_rate_limit(self, response: Any) -> None:
        """Feed the rate limit headers of a response to the throttle."""
        snapshot = RateLimitSnapshot.from_response_headers(getattr(response, "headers", None))
        if snapshot is not None:
            self._rate_limit.record_snapshot(snapshot)

    def _repo_path(self, *parts: str) -> str:
        return f"/repos/{_quote(self._owner)}/{_quote(self._repo)}/" + "/".join(parts)

    @staticmethod
    def _parse(model: type[ModelT], payload: Any) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise GitHubProtocolError(f"unexpected {model.__name__} response: {e}") from e

    # -------------------------------------------------------------------------
    # GraphQL
    # -------------------------------------------------------------------------
    async def graphql(self, query: str, variables: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL document.

        Args:
            query: GraphQL document
            variables: Variables referenced by the document

        Returns:
            The `data` object of the response

        Raises:
            GitHubGraphQLError: If the response carries a non-empty errors payload
        """
        try:
            resp = await self._post(
                "/graphql",
                body={"query": query, "variables": dict(variables or {})},
            )
        except TRANSPORT_ERRORS as e:
            raise self._handle_error(e) from e

        payload = resp.json()
        if not isinstance(payload, dict):
            raise GitHubProtocolError("GraphQL response is not an object")

        errors = payload.get("errors")
        if errors:
            raise GitHubGraphQLError(errors)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise GitHubProtocolError("GraphQL response has no data")

        snapshot = RateLimitSnapshot.from_graphql_data(data)
        if snapshot is not None:
            self._rate_limit.record_snapshot(snapshot)

        return data

    # -------------------------------------------------------------------------
    # Commit Methods
    # -------------------------------------------------------------------------
    async def get_missing_commits(
        self,
        ref_to_start_from: str,
        ref_with_new_commits: str,
    ) -> MissingCommits:
        """Get the commits of one ref that another ref is missing.

        Args:
            ref_to_start_from: Base ref (e.g. a PR head)
            ref_with_new_commits: Ref that may be ahead (e.g. the target branch)

        Returns:
            MissingCommits with the count and the commits listed by GitHub

        Raises:
            GitHubProtocolError: If commits are missing but none are listed
        """
        url = self._repo_path(f"compare/{_quote(ref_to_start_from)}...{_quote(ref_with_new_commits)}")
        try:
            resp = await self._get(url)
        except TRANSPORT_ERRORS as e:
            raise self._handle_error(e) from e

        body = resp.json()
        compare = self._parse(GitHubCompare, body)

        if compare.ahead_by > 0 and not compare.commits:
            self._log.error(
                "unexpected github response, expected oldest missing commit",
                total_missing_commits=compare.ahead_by,
                resp_body=body,
            )
            raise GitHubProtocolError("Unexpected github response")

        return MissingCommits(
            total_missing_commits=compare.ahead_by,
            missing_commits=compare.commits,
        )

    async def get_commit_date(self, ref: str) -> datetime:
        """Get the date of a commit: the later of its committer and author dates."""
        try:
            resp = await self._get(self._repo_path("commits", _quote(ref)))
        except TRANSPORT_ERRORS as e:
            raise self._handle_error(e) from e

        return self._parse(GitHubCompareCommit, resp.json()).commit.date

    async def set_commit_status(
        self,
        ref: str,
        options: CommitStatusOptions,
    ) -> GitHubCommitStatus:
        """Create a commit status for a commit SHA.

        Args:
            ref: Commit SHA
            options: State, context and optional description/target URL

        Returns:
            The created status
        """
        try:
            resp = await self._post(self._repo_path("statuses", _quote(ref)), body=options.to_body())
        except TRANSPORT_ERRORS as e:
            raise self._handle_error(e) from e

        self._log.info(
            "set commit status",
            sha=ref,
            state=options.state.value,
            context=options.context,
        )
        return self._parse(GitHubCommitStatus, resp.json())

    async def get_commit_status(self, ref: str) -> CombinedCommitStatus:
        """Get the combined status of a commit."""
        try:
            resp = await self._get(self._repo_path("commits", _quote(ref), "status"))
        except TRANSPORT_ERRORS as e:
            raise self._handle_error(e) from e

        return self._parse(CombinedCommitStatus, resp.json())

    # -------------------------------------------------------------------------
    # Pull Request Methods
    # -------------------------------------------------------------------------
    async def get_pr(self, number: int) -> GitHubPullRequest:
        """Get full details for a single pull request.

        Raises:
            GitHubNotFoundError: If PR doesn't exist
        """
        try:
            resp = await self._get(self._repo_path("pulls", _quote(number)))
        except TRANSPORT_ERRORS as e:
            if isinstance(e, RequestFailed) and e.response.status_code == 404:
                raise GitHubNotFoundError(f"PR #{number} not found in {self.repository}") from e
            raise self._handle_error(e) from e

        return self._parse(GitHubPullRequest, resp.json())

    async def get_pr_files(self, number: int) -> list[GitHubPullRequestFile]:
        """Get the first page of files changed in a pull request.

        Use get_prs_and_files() when the complete list is needed.
        """
        try:
            resp = await self._get(
                self._repo_path("pulls", _quote(number), "files"),
                {"per_page": self._config.page_size},
            )
        except TRANSPORT_ERRORS as e:
            if isinstance(e, RequestFailed) and e.response.status_code == 404:
                raise GitHubNotFoundError(f"PR #{number} not found in {self.repository}") from e
            raise self._handle_error(e) from e

        body = resp.json()
        if not isinstance(body, list):
            raise GitHubProtocolError(f"expected a list of files for PR #{number}")
        return [self._parse(GitHubPullRequestFile, item) for item in body]

    async def iter_open_prs(self) -> AsyncIterator[GitHubPullRequest]:
        """Iterate over all open pull requests lazily.

        Pages are fetched only as the caller consumes PRs; breaking out of
        the loop stops further requests.

        Yields:
            GitHubPullRequest objects (list endpoint data, stats may be 0)

        Raises:
            GitHubProtocolError: If a page has a missing or unparsable Link header
        """
        self._log.info("fetching initial page of PRs")
        try:
            async for item in paginate_link_header(
                self._get,
                self._repo_path("pulls"),
                {"state": "open", "per_page": self._config.page_size},
            ):
                yield self._parse(GitHubPullRequest, item)
        except TRANSPORT_ERRORS as e:
            raise self._handle_error(e) from e

    async def get_prs_and_files(
        self,
        commit_sha: str,
        state: PRState = "open",
    ) -> list[PrFilesResult]:
        """Find the PRs containing a commit, with the files of the current ones.

        A PR whose last commit is not `commit_sha` has been updated since and
        is returned as OutdatedPr without files. Every other PR is returned as
        PrWithFiles with its complete file list, paged in batches through
        get_rest_of_files(). Results keep the search order.

        Args:
            commit_sha: Commit to search for
            state: PR state to search ("open" or "closed")

        Returns:
            List of OutdatedPr / PrWithFiles
        """
        data = await self.graphql(
            PRS_AND_FILES_QUERY,
            {
                "query": f"{commit_sha} repo:{self.repository} type:pr state:{state}",
                "first": self._config.page_size,
            },
        )

        order: list[tuple[int, bool]] = []
        rest_of_files_reqs: list[FileReq] = []
        try:
            for node in data["search"]["nodes"]:
                if node.get("__typename") != "PullRequest":
                    continue

                number = node["number"]
                last_commits = node["commits"]["nodes"]
                last_sha = last_commits[0]["commit"]["oid"] if last_commits else None
                if last_sha != commit_sha:
                    order.append((number, False))
                    continue

                files = node["files"]
                order.append((number, True))
                rest_of_files_reqs.append(
                    FileReq(
                        id=number,
                        files=[n["path"] for n in files["nodes"]],
                        files_end_cursor=files["pageInfo"]["endCursor"],
                        has_next_page=files["pageInfo"]["hasNextPage"],
                    )
                )
        except (KeyError, TypeError, IndexError) as e:
            raise GitHubProtocolError(f"unexpected search response: {e!r}") from e

        self._log.debug(
            "found {count} PR(s) for commit, {fresh} current",
            count=len(order),
            fresh=len(rest_of_files_reqs),
            sha=commit_sha,
        )

        all_files = await self.get_rest_of_files(rest_of_files_reqs)

        return [
            PrWithFiles(id=number, files=all_files[number]) if fresh else OutdatedPr(id=number)
            for number, fresh in order
        ]

    async def get_rest_of_files(self, reqs: list[FileReq]) -> dict[int, list[str]]:
        """Complete the file lists of many PRs in batched GraphQL rounds.

        Args:
            reqs: PRs with the files and cursor they already have

        Returns:
            Mapping of PR number to complete file list
        """
        return await fetch_remaining_files(
            self.graphql,
            self._owner,
            self._repo,
            reqs,
            self._config.page_size,
        )

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, error: Exception) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions."""
        if not isinstance(error, RequestFailed):
            return GitHubConnectionError(f"GitHub API request failed: {error}")

        status = error.response.status_code

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token")
        elif status in (403, 429):
            headers = error.response.headers
            if headers.get("x-ratelimit-remaining") == "0":
                reset_ts = int(headers.get("x-ratelimit-reset", "0"))
                reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
                return GitHubRateLimitError("GitHub rate limit exceeded", reset_at=reset_at)
            return GitHubClientError(f"Access forbidden: {error}")
        elif status == 404:
            return GitHubNotFoundError(str(error))
        elif status >= 500:
            return GitHubServerError(f"GitHub API server error ({status}): {error}", status)
        else:
            return GitHubClientError(f"GitHub API error ({status}): {error}")
