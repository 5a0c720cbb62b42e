"""Shared CLI utilities and option types."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from fibenload.backends import BACKENDS
from fibenload.core.config import get_settings
from fibenload.core.logging import configure_logging
from fibenload.core.models import ConnectionConfig

# Load .env file from current directory (FIBENLOAD_* settings)
load_dotenv()

# Shared console instance
console = Console()

DatabaseOption = Annotated[
    str,
    typer.Option(
        "--database",
        "-d",
        help="Database name (DuckDB: database file path)",
    ),
]

HostOption = Annotated[
    str | None,
    typer.Option(
        "--host",
        "-h",
        help="Remote host name; omit for a local or already cataloged database",
    ),
]

PortOption = Annotated[
    int | None,
    typer.Option(
        "--port",
        "-o",
        help="Remote port",
    ),
]

SchemaOption = Annotated[
    str | None,
    typer.Option(
        "--schema",
        "-s",
        help="Target schema (default: current user, upper-cased)",
    ),
]

UserOption = Annotated[
    str | None,
    typer.Option(
        "--user",
        "-u",
        help="User id; prompts for a password when --password is omitted",
    ),
]

PasswordOption = Annotated[
    str | None,
    typer.Option(
        "--password",
        "-p",
        help="Password for --user",
    ),
]

BackendOption = Annotated[
    str | None,
    typer.Option(
        "--backend",
        help=f"Database client to drive ({', '.join(BACKENDS)})",
    ),
]

BaseDirOption = Annotated[
    Path | None,
    typer.Option(
        "--base-dir",
        "-b",
        help="Directory holding tablelist.txt, data/ and FIBEN.sql",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v=INFO, -vv=DEBUG)",
    ),
]

LogFormatOption = Annotated[
    str,
    typer.Option(
        "--log-format",
        help="Log output format (console or json)",
    ),
]


def setup_logging(verbosity: int = 0, log_format: str | None = None) -> None:
    """Configure structured logging based on verbosity level.

    Args:
        verbosity: 0=settings level (WARNING by default), 1=INFO, 2+=DEBUG
        log_format: "console" or "json" (settings value if None)
    """
    settings = get_settings()
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity >= 1:
        level = "INFO"
    else:
        level = settings.log_level

    log_format = log_format or settings.log_format
    configure_logging(
        log_level=level,
        log_format=log_format,
        show_timestamps=verbosity >= 1,
        color=log_format == "console",
    )


def check_backend(backend: str | None) -> str:
    """Resolve the backend name, rejecting unknown ones as a usage error."""
    name = backend or get_settings().backend
    if name not in BACKENDS:
        raise typer.BadParameter(
            f"unknown backend {name!r}, choose from {', '.join(BACKENDS)}",
            param_hint="'--backend'",
        )
    return name


def build_connection(
    database: str,
    host: str | None,
    port: int | None,
    schema: str | None,
    user: str | None,
    password: str | None,
) -> ConnectionConfig:
    """Build the connection descriptor, prompting for a missing password."""
    if user and not password:
        password = typer.prompt("Password", hide_input=True)

    kwargs = {"schema": schema} if schema else {}
    return ConnectionConfig(
        database=database,
        host=host,
        port=port,
        user=user,
        password=password,
        **kwargs,
    )


def print_connection(connection: ConnectionConfig) -> None:
    """Print the values used to connect (never the password)."""
    console.print("[bold]Connecting using the following values:[/bold]")
    for key, value in connection.describe().items():
        console.print(f"  {key.upper():<9}= {value}")
