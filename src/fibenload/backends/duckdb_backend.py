"""DuckDB backend for loading the benchmark into a local database file."""

from __future__ import annotations

from pathlib import Path

import duckdb

from fibenload.backends.base import DatabaseBackend
from fibenload.core.logging import get_logger
from fibenload.core.models import ConnectionConfig, ErrorKind, Result

logger = get_logger(__name__)


def _kind_of(error: duckdb.Error) -> ErrorKind:
    if isinstance(error, duckdb.PermissionException):
        return ErrorKind.PRIVILEGE
    if isinstance(error, (duckdb.IOException, duckdb.ConnectionException)):
        return ErrorKind.CONNECTION
    return ErrorKind.STATEMENT


def _quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _csv_source(csv_path: Path, columns: list[tuple[str, str]]) -> str:
    """``read_csv`` call typed with the target table's columns.

    Import and load both read through this. Empty fields are NULLs.
    """
    struct = ", ".join(f"{_quote_literal(name)}: {_quote_literal(dtype)}" for name, dtype in columns)
    return (
        f"read_csv({_quote_literal(str(csv_path))}, header = false, "
        f"delim = ',', quote = '\"', columns = {{{struct}}})"
    )


class DuckDBBackend(DatabaseBackend):
    """Backend writing into a DuckDB database.

    The database name is a DuckDB file path or ``:memory:``. DuckDB enforces
    constraints on insert, so no table is ever left pending integrity.
    """

    name = "duckdb"

    def __init__(self) -> None:
        self._conn: duckdb.DuckDBPyConnection | None = None

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise RuntimeError("DuckDB backend is not connected")
        return self._conn

    def write_alias(self, alias: str, connection: ConnectionConfig, config_path: Path) -> Result[Path]:
        return Result.fail(
            "DuckDB databases are local files; remote hosts are not supported",
            kind=ErrorKind.USAGE,
        )

    def connect(self, name: str, user: str | None = None, password: str | None = None) -> Result[None]:
        if user:
            return Result.fail("DuckDB connections take no credentials", kind=ErrorKind.USAGE)
        try:
            self._conn = duckdb.connect(name)
        except duckdb.Error as e:
            return Result.fail(f"Could not open {name}: {e}", kind=ErrorKind.CONNECTION)
        logger.debug("duckdb_connected", database=name)
        return Result.ok(None)

    def _execute(self, sql: str) -> Result[None]:
        logger.info("duckdb_statement", statement=sql)
        try:
            self.conn.execute(sql)
        except duckdb.Error as e:
            return Result.fail(str(e), kind=_kind_of(e))
        return Result.ok(None)

    def create_schema(self, schema: str) -> Result[None]:
        sql = f"CREATE SCHEMA {schema}"
        logger.info("duckdb_statement", statement=sql)
        try:
            self.conn.execute(sql)
        except duckdb.CatalogException as e:
            # Schema names match case-insensitively
            return Result.fail(str(e), kind=ErrorKind.DUPLICATE_OBJECT)
        except duckdb.Error as e:
            return Result.fail(str(e), kind=_kind_of(e))
        return Result.ok(None)

    def set_schema(self, schema: str) -> Result[None]:
        return self._execute(f"SET schema = {_quote_literal(schema)}")

    def run_script(self, script_path: Path) -> Result[None]:
        try:
            script = script_path.read_text()
        except OSError as e:
            return Result.fail(f"Could not read {script_path}: {e}", kind=ErrorKind.NOT_FOUND)
        return self._execute(script)

    def _columns(self, table: str) -> list[tuple[str, str]]:
        """Column names and types of ``table``, in table order."""
        return [(row[0], row[1]) for row in self.conn.execute(f"DESCRIBE {table}").fetchall()]

    def import_csv(self, csv_path: Path, table: str, commit_count: int) -> Result[int]:
        logger.info("duckdb_import", file=str(csv_path), table=table, commit_count=commit_count)
        rows_committed = 0
        try:
            columns = self._columns(table)
            if csv_path.stat().st_size == 0:
                return Result.ok(0)
            placeholders = ", ".join("?" for _ in columns)
            insert = f"INSERT INTO {table} VALUES ({placeholders})"
            reader = self.conn.cursor()
            try:
                reader.execute(f"SELECT * FROM {_csv_source(csv_path, columns)}")
                while batch := reader.fetchmany(commit_count):
                    self.conn.begin()
                    try:
                        self.conn.executemany(insert, batch)
                    except duckdb.Error:
                        self.conn.rollback()
                        raise
                    self.conn.commit()
                    rows_committed += len(batch)
            finally:
                reader.close()
        except duckdb.Error as e:
            return Result.fail(
                f"Import into {table} failed after {rows_committed} rows: {e}",
                kind=_kind_of(e),
            )
        except OSError as e:
            return Result.fail(f"Could not read {csv_path}: {e}", kind=ErrorKind.NOT_FOUND)
        return Result.ok(rows_committed)

    def load_csv(self, csv_path: Path, table: str) -> Result[int]:
        logger.info("duckdb_load", file=str(csv_path), table=table)
        rows = 0
        try:
            columns = self._columns(table)
            empty = csv_path.stat().st_size == 0
            self.conn.begin()
            try:
                self.conn.execute(f"DELETE FROM {table}")
                if not empty:
                    source = _csv_source(csv_path, columns)
                    row = self.conn.execute(f"INSERT INTO {table} SELECT * FROM {source}").fetchone()
                    rows = int(row[0]) if row else -1
            except duckdb.Error:
                self.conn.rollback()
                raise
            self.conn.commit()
        except duckdb.Error as e:
            return Result.fail(f"Load into {table} failed: {e}", kind=_kind_of(e))
        except OSError as e:
            return Result.fail(f"Could not read {csv_path}: {e}", kind=ErrorKind.NOT_FOUND)
        return Result.ok(rows)

    def pending_integrity_tables(self, schema: str, scratch_path: Path) -> Result[list[str]]:
        scratch_path.write_text("")
        return Result.ok([])

    def set_integrity(self, tables: list[str]) -> Result[None]:
        if tables:
            return Result.fail("DuckDB has no set integrity statement", kind=ErrorKind.USAGE)
        return Result.ok(None)

    def terminate(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
