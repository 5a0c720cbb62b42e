"""Main CLI application entry point."""

from __future__ import annotations

import typer

from fibenload.cli.commands import check, integrity, load

app = typer.Typer(
    name="fibenload",
    help="FIBEN benchmark loader - create the schema and bulk-load the CSV data.",
    no_args_is_help=True,
)

# Register commands
app.command()(load.load)
app.command()(check.check)
app.command()(integrity.integrity)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
