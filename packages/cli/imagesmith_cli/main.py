"""imagesmith CLI - Main entry point."""

import typer
from imagesmith_common import configure_logging

from . import __version__, kinds_cmd, launch_cmd

app = typer.Typer(
    name="imagesmith",
    help="imagesmith CLI - Resolve image launch targets and manifest file names",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def setup(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        envvar="IMAGESMITH_LOG_LEVEL",
        help="Log level for structured logs",
    ),
):
    """Configure logging before any command runs; logs go to stderr."""
    configure_logging("imagesmith_cli", log_level=log_level, stream="stderr")


def version():
    """Show the imagesmith version."""
    typer.echo(f"imagesmith {__version__}")


# Register all commands
app.command()(kinds_cmd.kinds)
app.command(name="kind-of")(kinds_cmd.kind_of)
app.command()(launch_cmd.launch)
app.command()(version)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
