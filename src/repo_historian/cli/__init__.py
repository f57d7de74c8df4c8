"""CLI entry point: the typer app and its registered subcommands."""

import typer

app = typer.Typer(
    name="repo-historian",
    help="Repo Historian - explains why code is the way it is from its git history",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .main import main as _main_callback  # noqa: F401, E402
from .analyze import analyze as _analyze  # noqa: F401, E402
from .history import history as _history  # noqa: F401, E402
from .explain import explain as _explain  # noqa: F401, E402
from .ask import ask as _ask  # noqa: F401, E402
