"""Explain command -- why is this file the way it is?"""

import typer

from ..explain import why_is_this_weird
from . import app
from ._common import analyze_target, print_text


@app.command()
def explain(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="Repository-relative path of the file to explain"),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Print raw markdown instead of rendering it",
    ),
):
    """
    Explain a file's history: churn, authors, fragility and ownership.

    [bold cyan]Examples:[/bold cyan]

      repo-historian explain src/app.py

      repo-historian explain src/app.py --plain
    """
    cache = analyze_target(ctx)
    print_text(why_is_this_weird(cache, file), plain)
