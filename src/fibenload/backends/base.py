"""Base class for database backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from fibenload.core.models import ConnectionConfig, Result


class DatabaseBackend(ABC):
    """Database client used by the loader.

    Every operation returns a Result; callers check it explicitly and
    decide whether a failure is fatal.
    """

    name: str = "base"

    @abstractmethod
    def write_alias(self, alias: str, connection: ConnectionConfig, config_path: Path) -> Result[Path]:
        """Write a driver configuration aliasing ``alias`` to host/port/database.

        Args:
            alias: Connection name to register
            connection: Connection descriptor with host and port
            config_path: File to write the configuration into

        Returns:
            Result containing the written configuration path
        """
        ...

    @abstractmethod
    def connect(self, name: str, user: str | None = None, password: str | None = None) -> Result[None]:
        """Open a connection to database ``name``."""
        ...

    @abstractmethod
    def create_schema(self, schema: str) -> Result[None]:
        """Create ``schema``. An existing schema fails with ErrorKind.DUPLICATE_OBJECT."""
        ...

    @abstractmethod
    def set_schema(self, schema: str) -> Result[None]:
        """Make ``schema`` the session's current schema."""
        ...

    @abstractmethod
    def run_script(self, script_path: Path) -> Result[None]:
        """Execute a ``;``-terminated SQL script."""
        ...

    @abstractmethod
    def import_csv(self, csv_path: Path, table: str, commit_count: int) -> Result[int]:
        """Insert rows from ``csv_path`` into ``table``, committing every ``commit_count`` rows.

        Returns:
            Result containing the number of rows inserted (-1 when unknown)
        """
        ...

    @abstractmethod
    def load_csv(self, csv_path: Path, table: str) -> Result[int]:
        """Replace the contents of ``table`` with ``csv_path`` (non-recoverable load).

        Returns:
            Result containing the number of rows loaded (-1 when unknown)
        """
        ...

    @abstractmethod
    def pending_integrity_tables(self, schema: str, scratch_path: Path) -> Result[list[str]]:
        """List qualified tables in ``schema`` left in set integrity pending state.

        The list is also written to ``scratch_path``, one table per line.
        """
        ...

    @abstractmethod
    def set_integrity(self, tables: list[str]) -> Result[None]:
        """Run one immediate integrity check covering all ``tables``."""
        ...

    @abstractmethod
    def terminate(self) -> None:
        """Close the connection. Safe to call when not connected."""
        ...
