"""Base models and types shared by the loader, backends and CLI."""

from __future__ import annotations

import getpass
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from fibenload.core.config import Settings, get_settings


class ErrorKind(str, Enum):
    """Category of a failed backend operation."""

    DUPLICATE_OBJECT = "duplicate_object"  # e.g. schema already exists
    CONNECTION = "connection"
    PRIVILEGE = "privilege"
    NOT_FOUND = "not_found"
    STATEMENT = "statement"
    USAGE = "usage"


T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """Result type for operations that can fail.

    Use this instead of exceptions for expected failures.
    Exceptions are reserved for unexpected/programming errors.
    """

    success: bool
    value: T | None = None
    error: str | None = None
    kind: ErrorKind | None = None
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, value: T, warnings: list[str] | None = None) -> Result[T]:
        """Create a successful result."""
        return cls(success=True, value=value, warnings=warnings or [])

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.STATEMENT) -> Result[T]:
        """Create a failed result."""
        return cls(success=False, error=error, kind=kind)

    def unwrap(self) -> T:
        """Get the value or raise if failed."""
        if not self.success:
            raise ValueError(f"Result failed: {self.error}")
        assert self.value is not None
        return self.value

    def map(self, fn: Callable[[T], Any]) -> Result[Any]:
        """Transform the value if successful."""
        if self.success and self.value is not None:
            return Result.ok(fn(self.value), self.warnings)
        return self


class LoadAction(str, Enum):
    """How CSV data is moved into the tables."""

    IMPORT = "import"  # Row inserts with batched commits, no special authority
    LOAD = "load"  # Bulk placement, needs LOAD authority, leaves tables pending integrity


def default_schema() -> str:
    """Schema used when none is given: the current user, upper-cased."""
    return getpass.getuser().upper()


def csv_path_for(data_path: Path, table: str) -> Path:
    """CSV file holding the rows of ``table``."""
    return data_path / f"{table}.csv"


@dataclass(frozen=True)
class InputLayout:
    """Where the table list, CSV files and DDL script live."""

    base_dir: Path = field(default_factory=lambda: Path("."))
    table_list_file: str = "tablelist.txt"
    data_dir: str = "data"
    ddl_file: str = "FIBEN.sql"

    @classmethod
    def from_settings(cls, settings: Settings | None = None, base_dir: Path | None = None) -> InputLayout:
        settings = settings or get_settings()
        return cls(
            base_dir=base_dir or settings.base_dir,
            table_list_file=settings.table_list_file,
            data_dir=settings.data_dir,
            ddl_file=settings.ddl_file,
        )

    @property
    def table_list_path(self) -> Path:
        return self.base_dir / self.table_list_file

    @property
    def data_path(self) -> Path:
        return self.base_dir / self.data_dir

    @property
    def ddl_path(self) -> Path:
        return self.base_dir / self.ddl_file

    def csv_path(self, table: str) -> Path:
        return csv_path_for(self.data_path, table)


@dataclass
class ConnectionConfig:
    """Connection descriptor built from command line input.

    Attributes:
        database: Target database name (or file path for DuckDB)
        host: Remote host; None means a local/cataloged database
        port: Remote port
        user: User id for an authenticated connection
        password: Password for ``user``
        schema: Target schema, always upper-cased
    """

    database: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = field(default=None, repr=False)
    schema: str = field(default_factory=default_schema)

    def __post_init__(self) -> None:
        self.schema = self.schema.upper()

    @property
    def is_remote(self) -> bool:
        return bool(self.host)

    @property
    def needs_password(self) -> bool:
        """A user was given without a password."""
        return bool(self.user) and not self.password

    def describe(self) -> dict[str, Any]:
        """Connection values safe to print (no password)."""
        return {
            "hostname": self.host or "",
            "port": self.port or "",
            "dbname": self.database,
            "schema": self.schema,
            "user": self.user or "",
        }


@dataclass
class LoadConfig:
    """Everything one loader run needs, passed explicitly through each step."""

    connection: ConnectionConfig
    action: LoadAction = LoadAction.IMPORT
    base_dir: Path = field(default_factory=lambda: Path("."))
    table_list_file: str = "tablelist.txt"
    data_dir: str = "data"
    ddl_file: str = "FIBEN.sql"
    alias_config_file: str = "db2dsdriver.cfg"
    scratch_file: str = "inttabs.txt"
    commit_count: int = 100_000
    dsn_alias: str = "FIBENSCR"
    backend: str = "db2"

    @classmethod
    def from_settings(
        cls,
        connection: ConnectionConfig,
        settings: Settings | None = None,
        **overrides: Any,
    ) -> LoadConfig:
        """Build a config from settings, with explicit overrides.

        Args:
            connection: Connection descriptor
            settings: Settings to read defaults from (cached settings if None)
            **overrides: Override any config attributes; None values are ignored

        Returns:
            LoadConfig
        """
        settings = settings or get_settings()
        values: dict[str, Any] = {
            "base_dir": settings.base_dir,
            "table_list_file": settings.table_list_file,
            "data_dir": settings.data_dir,
            "ddl_file": settings.ddl_file,
            "alias_config_file": settings.alias_config_file,
            "scratch_file": settings.scratch_file,
            "commit_count": settings.commit_count,
            "dsn_alias": settings.dsn_alias,
            "backend": settings.backend,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(connection=connection, **values)

    @property
    def inputs(self) -> InputLayout:
        return InputLayout(
            base_dir=self.base_dir,
            table_list_file=self.table_list_file,
            data_dir=self.data_dir,
            ddl_file=self.ddl_file,
        )

    @property
    def table_list_path(self) -> Path:
        return self.inputs.table_list_path

    @property
    def data_path(self) -> Path:
        return self.inputs.data_path

    @property
    def ddl_path(self) -> Path:
        return self.inputs.ddl_path

    @property
    def alias_config_path(self) -> Path:
        return self.base_dir / self.alias_config_file

    @property
    def scratch_path(self) -> Path:
        return self.base_dir / self.scratch_file

    @property
    def connection_name(self) -> str:
        """Name to connect to: the alias for remote hosts, else the database."""
        if self.connection.is_remote:
            return self.dsn_alias
        return self.connection.database

    def csv_path(self, table: str) -> Path:
        return self.inputs.csv_path(table)
