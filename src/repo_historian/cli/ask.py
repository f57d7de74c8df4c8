"""Ask command -- answer a plain-language question about the history."""

import typer

from ..ask import ask_history
from . import app
from ._common import analyze_target, print_text


@app.command()
def ask(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Question about the repository's history"),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Print raw markdown instead of rendering it",
    ),
):
    """
    Ask about contributors, ownership, fragile or hot files, cadence, or a file.

    [bold cyan]Examples:[/bold cyan]

      repo-historian ask "who are the main contributors?"

      repo-historian ask "what is risky here?"

      repo-historian ask "why is src/app.py like this?"
    """
    cache = analyze_target(ctx)
    print_text(ask_history(cache, question), plain)
