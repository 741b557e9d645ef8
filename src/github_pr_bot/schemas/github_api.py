"""Pydantic schemas for parsing GitHub API responses.

These schemas map directly to the GitHub REST API response structure,
keeping only the fields the bot reads. Unknown fields are ignored.
See: https://docs.github.com/en/rest/pulls/pulls
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class GitHubUser(BaseModel):
    """GitHub user object from API responses."""

    login: str = Field(description="GitHub username")
    id: int = Field(description="GitHub user ID")
    type: str = Field(default="User", description="User type")


class GitHubLabel(BaseModel):
    """GitHub label object from API responses."""

    id: int = Field(description="Label ID")
    name: str = Field(description="Label name")
    color: str = Field(description="Label color (hex without #)")
    description: str | None = Field(default=None, description="Label description")


class GitHubPrTip(BaseModel):
    """Head or base of a pull request."""

    label: str = Field(description="owner:branch combo")
    ref: str = Field(description="Branch name")
    sha: str = Field(description="Commit SHA")


class GitHubPullRequest(BaseModel):
    """GitHub Pull Request object from API.

    Maps to: GET /repos/{owner}/{repo}/pulls/{number}
    """

    # Basic info
    number: int = Field(description="PR number")
    html_url: str = Field(description="GitHub PR URL")
    state: str = Field(description="PR state (open, closed)")
    title: str = Field(description="PR title")
    body: str | None = Field(default=None, description="PR description")
    draft: bool = Field(default=False, description="Whether PR is a draft")

    # User info
    user: GitHubUser = Field(description="PR author")

    # Branches
    head: GitHubPrTip = Field(description="Source branch tip")
    base: GitHubPrTip = Field(description="Target branch tip")

    # Dates
    created_at: datetime = Field(description="When PR was created")
    updated_at: datetime = Field(description="Last update timestamp")

    # Status
    merged: bool = Field(default=False, description="Whether PR was merged")

    # Stats (only present on the single PR endpoint)
    commits: int = Field(default=0, description="Number of commits")
    changed_files: int = Field(default=0, description="Number of files changed")

    labels: list[GitHubLabel] = Field(default_factory=list, description="PR labels")


class GitHubPullRequestFile(BaseModel):
    """File object from the PR files endpoint."""

    sha: str | None = Field(default=None, description="File blob SHA")
    filename: str = Field(description="File path")
    status: str = Field(description="File status (added, modified, removed)")
    additions: int = Field(default=0, description="Lines added")
    deletions: int = Field(default=0, description="Lines deleted")
    changes: int = Field(default=0, description="Total line changes")


class GitHubGitActor(BaseModel):
    """Author or committer info (from git, not GitHub user)."""

    name: str = Field(description="Name")
    email: str = Field(description="Email")
    date: datetime = Field(description="Timestamp (UTC)")


class GitHubCommitDetail(BaseModel):
    """Nested git commit object."""

    author: GitHubGitActor = Field(description="Commit author info")
    committer: GitHubGitActor = Field(description="Committer info")
    message: str = Field(description="Commit message")

    @property
    def date(self) -> datetime:
        """The later of the committer and author dates."""
        return max(self.committer.date, self.author.date)


class GitHubCompareCommit(BaseModel):
    """Commit entry of a compare or single commit response."""

    sha: str = Field(description="Commit SHA")
    html_url: str | None = Field(default=None, description="Commit URL")
    commit: GitHubCommitDetail = Field(description="Git commit details")


class GitHubCompare(BaseModel):
    """Response of GET /repos/{owner}/{repo}/compare/{base}...{head}."""

    status: str = Field(description="ahead, behind, diverged or identical")
    ahead_by: int = Field(description="Commits in head missing from base")
    behind_by: int = Field(default=0, description="Commits in base missing from head")
    total_commits: int = Field(default=0, description="Total commits in the comparison")
    commits: list[GitHubCompareCommit] = Field(default_factory=list)


class MissingCommits(BaseModel):
    """Commits a ref lacks compared with another ref."""

    total_missing_commits: int = Field(ge=0)
    missing_commits: list[GitHubCompareCommit] = Field(default_factory=list)


class CommitStatusState(StrEnum):
    """States accepted by the commit status API."""

    ERROR = "error"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class CommitStatusOptions(BaseModel):
    """Body of POST /repos/{owner}/{repo}/statuses/{sha}."""

    state: CommitStatusState
    context: str = Field(min_length=1)
    description: str | None = None
    target_url: str | None = None

    def to_body(self) -> dict[str, str]:
        """Request body without unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class GitHubCommitStatus(BaseModel):
    """A single status reported for a commit."""

    state: CommitStatusState
    context: str
    description: str | None = None
    target_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CombinedCommitStatus(BaseModel):
    """Response of GET /repos/{owner}/{repo}/commits/{ref}/status."""

    state: CommitStatusState = Field(description="Combined state of all contexts")
    sha: str = Field(description="Commit SHA")
    total_count: int = Field(default=0)
    statuses: list[GitHubCommitStatus] = Field(default_factory=list)

    def get_context(self, context: str) -> GitHubCommitStatus | None:
        """Status reported under a given context, if any."""
        for status in self.statuses:
            if status.context == context:
                return status
        return None
