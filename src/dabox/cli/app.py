from typing import Optional

import typer

from dabox.config import init_cli_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import dabox

        typer.echo(f"dabox version: {dabox.__version__}")
        raise typer.Exit()


app = typer.Typer(name="dabox", help="Browse and edit your remote directory tree")


@app.callback()
def app_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """dabox - remote directory tree browser."""
    init_cli_logging()
