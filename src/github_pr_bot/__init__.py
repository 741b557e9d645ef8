"""GitHub PR bot: pull request, commit and status access for a single repository."""

__version__ = "0.1.0"
