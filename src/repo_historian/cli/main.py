"""Top-level callback: global options shared by every subcommand."""

from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from . import app
from ._common import console


@app.callback(invoke_without_command=True, no_args_is_help=False)
def main(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "-C",
        "--path",
        help="Repository root to analyze (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    max_commits: Optional[int] = typer.Option(
        None,
        "--max-commits",
        help="Newest commits to analyze (default: 1000)",
        min=1,
    ),
    timeout: Optional[int] = typer.Option(
        None,
        "--timeout",
        help="Seconds allowed for reading history (default: 120)",
        min=1,
        hidden=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show progress and debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Analyze a repository's git history: churn, ownership, fragility and cadence.

    [bold cyan]Examples:[/bold cyan]

      repo-historian analyze

      repo-historian -C /path/to/repo history --section fragile

      repo-historian explain src/app.py

      repo-historian ask "who owns the parser?"
    """
    ctx.ensure_object(dict)
    ctx.obj["path"] = path if path else Path.cwd()
    ctx.obj["config"] = config
    ctx.obj["max_commits"] = max_commits
    ctx.obj["timeout"] = timeout

    if version:
        from .. import __version__

        console.print(f"[bold cyan]Repo Historian[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    setup_logging(verbose=verbose)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
