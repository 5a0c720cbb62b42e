"""Shared pytest fixtures for all tests."""

from pathlib import Path

import pytest

from fibenload.backends.base import DatabaseBackend
from fibenload.core.logging import configure_logging
from fibenload.core.models import ConnectionConfig, ErrorKind, LoadAction, LoadConfig, Result

TABLES = ["ACCOUNT", "CUSTOMER", "SECURITY"]

DDL = """
CREATE TABLE ACCOUNT (ACCOUNT_ID INTEGER, ACCOUNT_NAME VARCHAR(100));
CREATE TABLE CUSTOMER (CUSTOMER_ID INTEGER, CUSTOMER_NAME VARCHAR(100), REGION VARCHAR(20));
CREATE TABLE SECURITY (SECURITY_ID INTEGER, TICKER VARCHAR(10));
"""

CSV_ROWS = {
    "ACCOUNT": '1,"Checking"\n2,"Savings"\n3,"Brokerage"\n',
    "CUSTOMER": '10,"Alice Smith","WEST"\n11,"Bob Jones",\n',
    "SECURITY": '100,"IBM"\n',
}


class MockBackend(DatabaseBackend):
    """Backend recording every call, with configurable failures."""

    name = "mock"

    def __init__(
        self,
        pending: list[str] | None = None,
        fail_on: dict[str, Result] | None = None,
        fail_table: str | None = None,
    ):
        self.calls: list[tuple] = []
        self.pending = pending or []
        self.fail_on = fail_on or {}
        self.fail_table = fail_table
        self.terminated = False

    def _outcome(self, op: str, value=None) -> Result:
        if op in self.fail_on:
            return self.fail_on[op]
        return Result.ok(value)

    def write_alias(self, alias, connection, config_path):
        self.calls.append(("write_alias", alias, connection.host, connection.port))
        config_path.write_text(f"[{alias}]\nhost={connection.host}\n")
        return self._outcome("write_alias", config_path)

    def connect(self, name, user=None, password=None):
        self.calls.append(("connect", name, user, password))
        return self._outcome("connect")

    def create_schema(self, schema):
        self.calls.append(("create_schema", schema))
        return self._outcome("create_schema")

    def set_schema(self, schema):
        self.calls.append(("set_schema", schema))
        return self._outcome("set_schema")

    def run_script(self, script_path):
        self.calls.append(("run_script", script_path))
        return self._outcome("run_script")

    def import_csv(self, csv_path, table, commit_count):
        self.calls.append(("import_csv", csv_path, table, commit_count))
        if self.fail_table and table.endswith(f".{self.fail_table}"):
            return Result.fail(f"SQL3304N table {table} does not exist")
        return Result.ok(2)

    def load_csv(self, csv_path, table):
        self.calls.append(("load_csv", csv_path, table))
        if self.fail_table and table.endswith(f".{self.fail_table}"):
            return Result.fail(f"SQL3107W load of {table} failed")
        return Result.ok(2)

    def pending_integrity_tables(self, schema, scratch_path):
        self.calls.append(("pending_integrity_tables", schema))
        scratch_path.write_text("\n".join(self.pending))
        return self._outcome("pending_integrity_tables", list(self.pending))

    def set_integrity(self, tables):
        self.calls.append(("set_integrity", list(tables)))
        return self._outcome("set_integrity")

    def terminate(self):
        self.calls.append(("terminate",))
        self.terminated = True

    def ops(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture(autouse=True)
def quiet_logging():
    """Reset logging for each test so no logger keeps a stale stream."""
    configure_logging(log_level="WARNING", show_timestamps=False, color=False)
    yield


@pytest.fixture
def fiben_dir(tmp_path: Path) -> Path:
    """A base directory with table list, DDL script and one CSV per table."""
    (tmp_path / "tablelist.txt").write_text("\n".join(TABLES) + "\n")
    (tmp_path / "FIBEN.sql").write_text(DDL)
    data = tmp_path / "data"
    data.mkdir()
    for table, rows in CSV_ROWS.items():
        (data / f"{table}.csv").write_text(rows)
    return tmp_path


@pytest.fixture
def mock_backend() -> MockBackend:
    return MockBackend()


@pytest.fixture
def mock_backend_cls() -> type[MockBackend]:
    """Factory for creating configured mock backends."""
    return MockBackend


@pytest.fixture
def make_config(fiben_dir: Path):
    """Build a LoadConfig rooted at the fixture base directory."""

    def _make(action: LoadAction = LoadAction.IMPORT, **connection) -> LoadConfig:
        connection.setdefault("database", "FIBEN")
        connection.setdefault("schema", "bench")
        return LoadConfig(
            connection=ConnectionConfig(**connection),
            action=action,
            base_dir=fiben_dir,
        )

    return _make


@pytest.fixture
def duplicate_schema() -> Result:
    return Result.fail(
        "SQL0601N The name of the object to be created is identical",
        kind=ErrorKind.DUPLICATE_OBJECT,
    )
