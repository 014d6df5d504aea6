from typing import Optional

import typer


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import fsdb

        typer.echo(f"fsdb version: {fsdb.__version__}")
        raise typer.Exit()


app = typer.Typer(name="fsdb", no_args_is_help=True)


@app.callback()
def app_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """fsdb - keep a SQLite table in sync with a folder on the file system."""
