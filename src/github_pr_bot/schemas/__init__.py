"""Pydantic schemas for the GitHub PR bot.

This module provides GitHub API response models and PR file pagination types.
"""

from .files import FileReq, OutdatedPr, PrFilesResult, PrWithFiles
from .github_api import (
    CombinedCommitStatus,
    CommitStatusOptions,
    CommitStatusState,
    GitHubCommitDetail,
    GitHubCommitStatus,
    GitHubCompare,
    GitHubCompareCommit,
    GitHubGitActor,
    GitHubLabel,
    GitHubPrTip,
    GitHubPullRequest,
    GitHubPullRequestFile,
    GitHubUser,
    MissingCommits,
)

__all__ = [
    # Commit status
    "CombinedCommitStatus",
    "CommitStatusOptions",
    "CommitStatusState",
    "GitHubCommitStatus",
    # Commits
    "GitHubCommitDetail",
    "GitHubCompare",
    "GitHubCompareCommit",
    "GitHubGitActor",
    "MissingCommits",
    # Pull requests
    "GitHubLabel",
    "GitHubPrTip",
    "GitHubPullRequest",
    "GitHubPullRequestFile",
    "GitHubUser",
    # File pagination
    "FileReq",
    "OutdatedPr",
    "PrFilesResult",
    "PrWithFiles",
]
