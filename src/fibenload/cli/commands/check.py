"""Check command - verify input files without touching the database."""

from __future__ import annotations

import typer

from fibenload.cli.common import BaseDirOption, VerboseOption, console, setup_logging


def check(
    base_dir: BaseDirOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Check that the data directory, every table's CSV file, and the DDL script exist.

    Prints the tables a load would process, in load order.
    """
    setup_logging(verbosity=verbose)

    from fibenload.core.models import InputLayout
    from fibenload.loader.inputs import check_inputs

    layout = InputLayout.from_settings(base_dir=base_dir)

    result = check_inputs(layout)
    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)

    tables = result.unwrap()
    console.print(f"[bold]{len(tables)} tables ready to load[/bold]")
    for table in tables:
        console.print(f"  {table} <- {layout.csv_path(table)}")
