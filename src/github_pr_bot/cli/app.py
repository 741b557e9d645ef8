"""Main CLI application for the GitHub PR bot."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from github_pr_bot import __version__
from github_pr_bot.cli import commits as commits_cmd
from github_pr_bot.cli import prs as prs_cmd
from github_pr_bot.config import get_settings
from github_pr_bot.logging import setup_logging

app = typer.Typer(
    name="prbot",
    help="Inspect pull requests, commits and commit statuses on GitHub.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"prbot version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """GitHub PR bot - inspect PRs, commits and statuses."""
    settings = get_settings()
    log_config = settings.logging

    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


# Register subcommands
app.add_typer(prs_cmd.app, name="prs")
app.add_typer(commits_cmd.app, name="commits")


if __name__ == "__main__":
    app()
