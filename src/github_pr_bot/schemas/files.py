"""Schemas for PR file list pagination.

A FileReq tracks one pull request whose file list is being paged through
GraphQL. The search that starts the process classifies every PR as either
outdated (its last commit is no longer the commit being checked) or fresh,
and only fresh PRs get their files fetched.
"""

from typing import Literal

from pydantic import BaseModel, Field


class FileReq(BaseModel):
    """A pull request whose files still need paging.

    `files_end_cursor` is None until the first page has been fetched.
    """

    id: int = Field(description="PR number")
    files_end_cursor: str | None = Field(default=None, description="Cursor after the last page")
    files: list[str] | None = Field(default=None, description="Paths fetched so far")
    has_next_page: bool = Field(default=True, description="Whether more pages exist")


class OutdatedPr(BaseModel):
    """PR updated since the commit being checked; files are not fetched."""

    id: int
    updated_since_commit: Literal[True] = True
    files: None = None


class PrWithFiles(BaseModel):
    """PR whose last commit is the one being checked, with its complete file list."""

    id: int
    updated_since_commit: Literal[False] = False
    files: list[str]


PrFilesResult = OutdatedPr | PrWithFiles
