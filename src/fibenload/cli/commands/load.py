"""Load command - create the schema and bulk-load every table."""

from __future__ import annotations

from typing import Annotated

import typer

from fibenload.cli.common import (
    BackendOption,
    BaseDirOption,
    DatabaseOption,
    HostOption,
    LogFormatOption,
    PasswordOption,
    PortOption,
    SchemaOption,
    UserOption,
    VerboseOption,
    build_connection,
    check_backend,
    console,
    print_connection,
    setup_logging,
)


def load(
    database: DatabaseOption,
    host: HostOption = None,
    port: PortOption = None,
    schema: SchemaOption = None,
    user: UserOption = None,
    password: PasswordOption = None,
    use_load: Annotated[
        bool,
        typer.Option(
            "--load",
            "-l",
            help="Use LOAD instead of IMPORT (faster, requires LOAD authority)",
        ),
    ] = False,
    backend: BackendOption = None,
    base_dir: BaseDirOption = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
    verbose: VerboseOption = 0,
    log_format: LogFormatOption = "console",
) -> None:
    """Create the schema and tables, then load every table's CSV file.

    Examples:

        fibenload load -d FIBEN -s BENCH

        fibenload load -d FIBEN -h db.example.com -o 50000 -s BENCH -u alice

        fibenload load -d FIBEN -s BENCH -u alice -l   # LOAD instead of IMPORT

        fibenload load -d ./fiben.duckdb --backend duckdb
    """
    setup_logging(verbosity=verbose, log_format=log_format)
    backend_name = check_backend(backend)

    from fibenload.core.models import LoadAction, LoadConfig
    from fibenload.loader.runner import run

    connection = build_connection(database, host, port, schema, user, password)
    config = LoadConfig.from_settings(
        connection,
        action=LoadAction.LOAD if use_load else LoadAction.IMPORT,
        base_dir=base_dir,
        backend=backend_name,
    )

    if not quiet:
        print_connection(connection)

    result = run(config)

    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)

    summary = result.unwrap()
    if not quiet:
        console.print()
        console.print("[bold]Load Summary[/bold]")
        console.print("=" * 60)
        console.print(f"Database: {summary.database}")
        console.print(f"Schema: {summary.schema}")
        console.print(f"Action: {summary.action.value}")
        if summary.schema_existed:
            console.print("[yellow]Schema already existed[/yellow]")

        console.print()
        console.print("[bold]Tables[/bold]")
        console.print("-" * 60)
        for table in summary.tables:
            rows = f"{table.rows:,} rows" if table.rows >= 0 else "rows not reported"
            console.print(
                f"  [green]✓[/green] {table.table}: {rows} ({table.duration_seconds:.1f}s)"
            )

        if summary.integrity_checked:
            console.print()
            console.print("[bold]Integrity Checked[/bold]")
            console.print("-" * 60)
            for table_name in summary.integrity_checked:
                console.print(f"  {table_name}")

        console.print()
        console.print(f"  Tables: {summary.tables_loaded}")
        console.print(f"  Rows: {summary.total_rows:,}")
        console.print(f"  Duration: {summary.duration_seconds:.2f}s")
        console.print()

    raise typer.Exit(0)
