"""GraphQL documents and batched file pagination for pull requests.

GitHub's GraphQL API returns at most 100 files per pull request per query.
Fetching the remaining pages of many PRs one PR at a time costs one round
trip per page per PR. Instead, every PR that still has pages is queried in
the same document under its own alias (`req0`, `req1`, ...), so each round
advances every PR by one page and the number of round trips equals the
deepest file list rather than the total number of pages.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from github_pr_bot.logging import get_logger
from github_pr_bot.schemas import FileReq

from .exceptions import GitHubProtocolError

logger = get_logger(__name__)

GraphQLExecutor = Callable[[str, dict[str, Any]], Awaitable[dict[str, Any]]]
"""Executes a GraphQL document: (query, variables) -> data."""

PRS_AND_FILES_QUERY = """
query($query: String!, $first: Int!) {
  search(first: $first, query: $query, type: ISSUE) {
    nodes {
      __typename
      ... on PullRequest {
        number
        commits(last: 1) {
          nodes {
            commit {
              oid
            }
          }
        }
        files(first: $first) {
          nodes {
            path
          }
          pageInfo {
            hasNextPage
            endCursor
          }
        }
      }
    }
  }
}
"""

_FILES_PAGE_FIELD = """
    req{i}: pullRequest(number: $num{i}) {{
      number
      files(first: {first}, after: $after{i}) {{
        nodes {{
          path
        }}
        pageInfo {{
          endCursor
          hasNextPage
        }}
      }}
    }}"""


def build_files_page_query(
    owner: str,
    name: str,
    batch: Sequence[FileReq],
    page_size: int = 100,
) -> tuple[str, dict[str, Any]]:
    """Build one document fetching the next files page of every PR in a batch.

    Args:
        owner: Repository owner
        name: Repository name
        batch: PRs to advance, each with the cursor of its last fetched page
        page_size: Files per page

    Returns:
        Tuple of (document, variables)
    """
    fields: list[str] = []
    declarations = ["$owner: String!", "$name: String!"]
    variables: dict[str, Any] = {"owner": owner, "name": name}

    for i, req in enumerate(batch):
        fields.append(_FILES_PAGE_FIELD.format(i=i, first=page_size))
        # A PR that has not started paging has no cursor; null means "from the start"
        cursor_type = "String!" if req.files_end_cursor is not None else "String"
        declarations.append(f"$num{i}: Int!")
        declarations.append(f"$after{i}: {cursor_type}")
        variables[f"num{i}"] = req.id
        variables[f"after{i}"] = req.files_end_cursor

    document = (
        f"query({', '.join(declarations)}) {{\n"
        f"  repository(owner: $owner, name: $name) {{{''.join(fields)}\n"
        "  }\n"
        "}\n"
    )
    return document, variables


async def fetch_remaining_files(
    execute: GraphQLExecutor,
    owner: str,
    name: str,
    reqs: Sequence[FileReq],
    page_size: int = 100,
) -> dict[int, list[str]]:
    """Page through the files of many PRs, one page per PR per round.

    Every PR starts with the files it already carries. PRs whose
    `has_next_page` is False are complete and never queried. Each round
    sends the whole pending set in one request, appends the returned paths
    and keeps only the PRs that report another page, with their new cursor.

    Args:
        execute: Coroutine function running a GraphQL document
        owner: Repository owner
        name: Repository name
        reqs: PRs to complete
        page_size: Files per page

    Returns:
        Mapping of PR number to its complete file list, in discovery order

    Raises:
        GitHubGraphQLError: If any round returns errors (no partial results)
        GitHubProtocolError: If a round's data is missing the requested PRs
    """
    all_files: dict[int, list[str]] = {req.id: list(req.files or []) for req in reqs}
    pending = [req for req in reqs if req.has_next_page]
    rounds = 0

    while pending:
        batch = pending
        pending = []
        rounds += 1

        logger.debug(
            "Fetching files page round {round} for {count} PR(s)",
            round=rounds,
            count=len(batch),
        )
        document, variables = build_files_page_query(owner, name, batch, page_size)
        data = await execute(document, variables)

        repository = data.get("repository")
        if not isinstance(repository, dict) or len(repository) != len(batch):
            raise GitHubProtocolError(
                f"expected {len(batch)} pull request(s) in files page response, got {repository!r}"
            )

        for alias, pr in repository.items():
            if pr is None:
                raise GitHubProtocolError(f"pull request for {alias} missing from files page response")
            try:
                number = pr["number"]
                files = pr["files"]
                paths = [node["path"] for node in files["nodes"]]
                page_info = files["pageInfo"]
                has_next_page = page_info["hasNextPage"]
                end_cursor = page_info["endCursor"] if has_next_page else None
            except (KeyError, TypeError) as e:
                raise GitHubProtocolError(
                    f"unexpected files page response for {alias}: {e!r}"
                ) from e

            all_files.setdefault(number, []).extend(paths)
            if has_next_page:
                pending.append(FileReq(id=number, files_end_cursor=end_cursor))

    return all_files
