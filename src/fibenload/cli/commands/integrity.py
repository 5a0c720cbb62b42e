"""Integrity command - take loaded tables out of set integrity pending state."""

from __future__ import annotations

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


def integrity(
    database: DatabaseOption,
    host: HostOption = None,
    port: PortOption = None,
    schema: SchemaOption = None,
    user: UserOption = None,
    password: PasswordOption = None,
    backend: BackendOption = None,
    base_dir: BaseDirOption = None,
    verbose: VerboseOption = 0,
    log_format: LogFormatOption = "console",
) -> None:
    """Run SET INTEGRITY for every table in the schema left pending by a LOAD.

    Use this after a load run was interrupted before its integrity step.
    """
    setup_logging(verbosity=verbose, log_format=log_format)
    backend_name = check_backend(backend)

    from fibenload.core.models import LoadAction, LoadConfig
    from fibenload.loader.runner import run_integrity

    connection = build_connection(database, host, port, schema, user, password)
    config = LoadConfig.from_settings(
        connection,
        action=LoadAction.LOAD,
        base_dir=base_dir,
        backend=backend_name,
    )
    print_connection(connection)

    result = run_integrity(config)
    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)

    checked = result.value or []
    if not checked:
        console.print(f"[green]No tables pending integrity in {connection.schema}[/green]")
        return

    console.print(f"[green]Integrity checked for {len(checked)} tables:[/green]")
    for table in checked:
        console.print(f"  {table}")
