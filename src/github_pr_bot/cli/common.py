"""Common CLI helpers.

Provides:
- `console`: shared rich console
- `run_async_command`: unified async execution with error handling for CLI commands
- `PRStateOption`: PR state option type
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from enum import StrEnum
from typing import Annotated, TypeVar

import typer
from rich.console import Console

from github_pr_bot.github import GitHubRateLimitError

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")


class PRStateChoice(StrEnum):
    """PR states accepted by the search commands."""

    OPEN = "open"
    CLOSED = "closed"


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Catches exceptions,
    prints user-friendly error messages, and exits with code 1.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        raise
    except GitHubRateLimitError as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        if e.reset_at:
            console.print(f"  Resets at: {e.reset_at.strftime('%H:%M:%S UTC')}")
        raise typer.Exit(1) from None
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


PRStateOption = Annotated[
    PRStateChoice,
    typer.Option(
        "--state",
        "-s",
        help="PR state to search",
    ),
]
