"""Pull request commands."""

import typer
from loguru import logger
from rich.table import Table

from github_pr_bot.cli.common import PRStateChoice, PRStateOption, console, run_async_command
from github_pr_bot.github import GitHubClient
from github_pr_bot.schemas import PrWithFiles

app = typer.Typer(help="Pull request commands")


@app.command("list")
def list_open_prs(
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Stop after this many PRs (no further pages are fetched)",
    ),
) -> None:
    """Stream the open PRs of the configured repository.

    Examples:
        prbot prs list
        prbot prs list --limit 20
    """

    async def _list() -> int:
        count = 0
        async with GitHubClient() as client:
            table = Table(title=f"Open PRs in {client.repository}")
            table.add_column("Number", style="cyan")
            table.add_column("Title", max_width=60)
            table.add_column("Author")
            table.add_column("Head")

            async for pr in client.iter_open_prs():
                title = pr.title[:57] + "..." if len(pr.title) > 60 else pr.title
                table.add_row(str(pr.number), title, pr.user.login, pr.head.sha[:10])
                count += 1
                if limit is not None and count >= limit:
                    break

            console.print(table)
        return count

    count = run_async_command(_list())
    console.print(f"{count} PR(s)")


@app.command("show")
def show_pr(
    number: int = typer.Argument(..., help="PR number"),
) -> None:
    """Show a pull request and its first page of files."""

    async def _show() -> None:
        with logger.contextualize(pr=number):
            async with GitHubClient() as client:
                pr = await client.get_pr(number)
                files = await client.get_pr_files(number)

        console.print(f"[bold]#{pr.number}[/bold] {pr.title}")
        console.print(f"  State: {pr.state} (draft: {pr.draft}, merged: {pr.merged})")
        console.print(f"  Author: {pr.user.login}")
        console.print(f"  Head: {pr.head.label} @ {pr.head.sha}")
        console.print(f"  Base: {pr.base.label} @ {pr.base.sha}")
        if pr.labels:
            console.print(f"  Labels: {', '.join(label.name for label in pr.labels)}")
        console.print(f"  Files ({len(files)}):")
        for f in files:
            console.print(f"    - {f.filename} ({f.status}, +{f.additions}/-{f.deletions})")

    run_async_command(_show())


@app.command("files")
def prs_and_files(
    commit_sha: str = typer.Argument(..., help="Commit SHA to search PRs for"),
    state: PRStateOption = PRStateChoice.OPEN,
) -> None:
    """Find PRs containing a commit and list the files of the current ones.

    Examples:
        prbot prs files 3f2a9c1
        prbot prs files 3f2a9c1 --state closed
    """

    async def _files() -> None:
        async with GitHubClient() as client:
            results = await client.get_prs_and_files(commit_sha, state.value)

        if not results:
            console.print(f"No {state.value} PRs found for {commit_sha}")
            return

        table = Table(title=f"{state.value.capitalize()} PRs for {commit_sha}")
        table.add_column("PR", style="cyan")
        table.add_column("Status")
        table.add_column("Files", justify="right")

        for result in results:
            if isinstance(result, PrWithFiles):
                table.add_row(str(result.id), "[green]current[/green]", str(len(result.files)))
            else:
                table.add_row(str(result.id), "[yellow]updated since commit[/yellow]", "-")

        console.print(table)

    run_async_command(_files())
