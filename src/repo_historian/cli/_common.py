"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..cache import RepoCache
from ..config import HistorianConfig, load_config
from ..exceptions import HistorianError

console = Console()
# Progress goes to stderr so JSON on stdout stays parseable
err_console = Console(stderr=True)


def resolve_config(
    config: Optional[Path] = None,
    max_commits: Optional[int] = None,
    timeout: Optional[int] = None,
) -> HistorianConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if max_commits is not None:
        overrides["max_commits"] = max_commits
    if timeout is not None:
        overrides["timeout_seconds"] = timeout
    return load_config(config_file=config, **overrides)


def analyze_target(ctx: typer.Context) -> RepoCache:
    """Analyze the repository selected on the command line.

    Exits with status 1 when configuration is invalid or the repository has
    no usable git history.
    """
    obj = ctx.obj or {}
    target = Path(obj.get("path") or Path.cwd()).resolve()

    try:
        config = resolve_config(
            config=obj.get("config"),
            max_commits=obj.get("max_commits"),
            timeout=obj.get("timeout"),
        )
    except HistorianError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    cache = RepoCache()
    try:
        with err_console.status(f"Analyzing git history of {target.name or target}..."):
            entry = cache.refresh(target, config=config)
    except HistorianError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if entry.history is None:
        console.print(
            f"[yellow]No git history available for {target}.[/yellow] "
            "Is this a git repository with at least one commit?"
        )
        raise typer.Exit(1)
    return cache


def print_text(text: str, plain: bool) -> None:
    """Print markdown text, rendered through rich unless ``plain``."""
    if plain:
        typer.echo(text)
        return
    from rich.markdown import Markdown

    console.print(Markdown(text))
