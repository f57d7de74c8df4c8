"""History command -- print one section of the analysis as JSON."""

import click
import typer

from ..retrieval import SECTIONS, get_history_json
from . import app
from ._common import analyze_target


@app.command()
def history(
    ctx: typer.Context,
    section: str = typer.Option(
        "all",
        "--section",
        "-s",
        help="Section to print: " + ", ".join(SECTIONS),
        click_type=click.Choice(list(SECTIONS)),
    ),
):
    """
    Print a named section of the git history analysis as JSON.

    Every document carries a _citation naming the repository and the
    analysis time it was produced from.

    [bold cyan]Examples:[/bold cyan]

      repo-historian history

      repo-historian history --section churn

      repo-historian history -s ownership
    """
    cache = analyze_target(ctx)
    print(get_history_json(cache, section=section))
