"""Commit and commit status commands."""

import typer
from rich.table import Table

from github_pr_bot.cli.common import console, run_async_command
from github_pr_bot.github import GitHubClient
from github_pr_bot.schemas import CommitStatusOptions, CommitStatusState

app = typer.Typer(help="Commit and commit status commands")


def _state_style(state: CommitStatusState) -> str:
    """Get rich style for a status state."""
    match state:
        case CommitStatusState.SUCCESS:
            return "[green]success[/green]"
        case CommitStatusState.PENDING:
            return "[yellow]pending[/yellow]"
        case CommitStatusState.FAILURE:
            return "[red]failure[/red]"
        case CommitStatusState.ERROR:
            return "[bold red]error[/bold red]"
        case _:
            return str(state)


@app.command("compare")
def compare(
    base: str = typer.Argument(..., help="Ref to start from"),
    head: str = typer.Argument(..., help="Ref that may have new commits"),
) -> None:
    """Show how many commits BASE is missing from HEAD.

    Examples:
        prbot commits compare my-feature-sha main
    """

    async def _compare() -> None:
        async with GitHubClient() as client:
            missing = await client.get_missing_commits(base, head)

        console.print(f"{base} is missing {missing.total_missing_commits} commit(s) from {head}")
        if missing.missing_commits:
            oldest = missing.missing_commits[0]
            console.print(
                f"  Oldest missing: {oldest.sha[:10]} "
                f"({oldest.commit.date:%Y-%m-%d %H:%M} UTC) "
                f"{oldest.commit.message.splitlines()[0] if oldest.commit.message else ''}"
            )

    run_async_command(_compare())


@app.command("date")
def commit_date(
    ref: str = typer.Argument(..., help="Commit ref"),
) -> None:
    """Show the date of a commit (later of committer and author date)."""

    async def _date() -> None:
        async with GitHubClient() as client:
            date = await client.get_commit_date(ref)
        console.print(f"{ref}: {date.isoformat()}")

    run_async_command(_date())


@app.command("status")
def status(
    ref: str = typer.Argument(..., help="Commit ref"),
) -> None:
    """Show the combined commit status of a ref."""

    async def _status() -> None:
        async with GitHubClient() as client:
            combined = await client.get_commit_status(ref)

        console.print(f"Combined state: {_state_style(combined.state)}")
        if not combined.statuses:
            return

        table = Table(title=f"Statuses for {combined.sha[:10]}")
        table.add_column("Context", style="bold")
        table.add_column("State")
        table.add_column("Description", max_width=60)

        for s in combined.statuses:
            table.add_row(s.context, _state_style(s.state), s.description or "")

        console.print(table)

    run_async_command(_status())


@app.command("set-status")
def set_status(
    ref: str = typer.Argument(..., help="Commit SHA"),
    state: CommitStatusState = typer.Option(..., "--state", help="Status state"),
    context: str = typer.Option(..., "--context", "-c", help="Status context"),
    description: str | None = typer.Option(None, "--description", "-d", help="Short description"),
    target_url: str | None = typer.Option(None, "--target-url", "-u", help="Details URL"),
) -> None:
    """Set a commit status.

    Examples:
        prbot commits set-status 3f2a9c1 --state success --context prbot/files
    """

    async def _set() -> None:
        options = CommitStatusOptions(
            state=state,
            context=context,
            description=description,
            target_url=target_url,
        )
        async with GitHubClient() as client:
            created = await client.set_commit_status(ref, options)
        console.print(f"Set {created.context} to {_state_style(created.state)} on {ref}")

    run_async_command(_set())
