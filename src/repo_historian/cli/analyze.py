"""Analyze command -- run the history analysis and summarize it."""

import json

import typer
from rich.markup import escape
from rich.table import Table

from ..temporal.models import GitHistory, RiskLevel
from . import app
from ._common import analyze_target, console

_RISK_STYLE = {
    RiskLevel.HIGH: "red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}


@app.command()
def analyze(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output the full history in machine-readable JSON format",
    ),
    top: int = typer.Option(
        10,
        "--top",
        "-n",
        help="Rows to show per table",
        min=1,
        max=100,
    ),
):
    """
    Analyze the repository's git history and print a summary.

    [bold cyan]Examples:[/bold cyan]

      repo-historian analyze

      repo-historian analyze --json

      repo-historian -C /path/to/repo analyze --top 5
    """
    cache = analyze_target(ctx)
    history = cache.get()

    if json_output:
        print(json.dumps(history.to_dict(), indent=2, ensure_ascii=False))
        return

    _output_rich(history, top)


def _output_rich(history: GitHistory, top: int) -> None:
    """Human-readable Rich table output."""
    pattern = history.commit_pattern

    summary = Table(title="Git History", show_header=False, pad_edge=True)
    summary.add_column("Metric", style="bold")
    summary.add_column("Value")
    summary.add_row("Repository", escape(history.repo_path))
    summary.add_row("Commits", str(history.total_commits))
    summary.add_row("Authors", str(history.total_authors))
    if history.date_range:
        summary.add_row("Range", f"{history.date_range.start} .. {history.date_range.end}")
    summary.add_row("Pattern", f"{pattern.type.value}: {pattern.description}")

    console.print()
    console.print(summary)

    if history.hot_paths:
        hot = Table(title="Hot Paths", show_lines=False)
        hot.add_column("Path", style="cyan")
        hot.add_column("Churn", justify="right")
        hot.add_column("Risk")
        hot.add_column("Reason", style="dim")
        for h in history.hot_paths[:top]:
            style = _RISK_STYLE[h.risk_level]
            hot.add_row(
                escape(h.path),
                str(h.churn_score),
                f"[{style}]{h.risk_level.value}[/{style}]",
                escape(h.reason),
            )
        console.print()
        console.print(hot)

    if history.fragile_files:
        fragile = Table(title="Fragile Files", show_lines=False)
        fragile.add_column("Path", style="cyan")
        fragile.add_column("Score", justify="right", style="yellow")
        fragile.add_column("Reasons")
        fragile.add_column("Recommendation", style="dim")
        for f in history.fragile_files[:top]:
            fragile.add_row(escape(f.path), str(f.fragile_score), ", ".join(f.reasons), f.recommendation)
        console.print()
        console.print(fragile)

    if history.stable_core:
        console.print()
        stable = escape(", ".join(history.stable_core[:top]))
        console.print(f"[bold green]Stable core:[/bold green] {stable}")

    console.print()
