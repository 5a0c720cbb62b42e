"""Load orchestration.

Runs the whole procedure against one backend:

    check inputs -> alias (remote only) -> connect -> create/set schema
    -> DDL -> per-table import or load -> set integrity (load only)

Every step returns a Result that is checked before the next step runs. The
first failure ends the run; generated files are removed and the connection
terminated on every exit path.

Usage:
    from fibenload.loader.runner import run

    result = run(config)
    if not result.success:
        print(result.error)
"""

from __future__ import annotations

import time
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path

from fibenload.backends import DatabaseBackend, get_backend
from fibenload.core.logging import get_logger, log_context
from fibenload.core.models import ErrorKind, LoadAction, LoadConfig, Result
from fibenload.loader.inputs import check_inputs
from fibenload.loader.scratch import exit_on_signals, removed_on_exit

logger = get_logger(__name__)


@dataclass
class TableLoadResult:
    """Outcome of loading one table."""

    table: str
    csv_path: Path
    action: LoadAction
    rows: int = -1  # -1 when the backend does not report a count
    duration_seconds: float = 0.0


@dataclass
class LoadSummary:
    """Result of a loader run."""

    database: str
    schema: str
    action: LoadAction
    tables: list[TableLoadResult] = field(default_factory=list)
    integrity_checked: list[str] = field(default_factory=list)
    schema_existed: bool = False
    duration_seconds: float = 0.0

    @property
    def tables_loaded(self) -> int:
        return len(self.tables)

    @property
    def total_rows(self) -> int:
        """Rows reported by the backend, ignoring tables without a count."""
        return sum(t.rows for t in self.tables if t.rows >= 0)


def qualified(schema: str, table: str) -> str:
    return f"{schema}.{table}"


def _connect(config: LoadConfig, backend: DatabaseBackend, stack: ExitStack) -> Result[None]:
    """Write the remote alias if needed, then connect.

    The alias file and the connection are registered on ``stack`` for release.
    """
    conn = config.connection

    if conn.is_remote:
        logger.info("creating_alias", alias=config.dsn_alias, host=conn.host, port=conn.port)
        alias_result = backend.write_alias(config.dsn_alias, conn, config.alias_config_path)
        if not alias_result.success:
            return Result.fail(alias_result.error or "alias failed", kind=alias_result.kind)

    logger.info("connecting", database=conn.database, name=config.connection_name)
    connect_result = backend.connect(config.connection_name, conn.user, conn.password)
    if not connect_result.success:
        return Result.fail(
            f"Could not connect to database: {connect_result.error}", kind=ErrorKind.CONNECTION
        )
    stack.callback(backend.terminate)
    return Result.ok(None)


def prepare_schema(config: LoadConfig, backend: DatabaseBackend) -> Result[bool]:
    """Create the schema, make it current, and run the DDL script.

    An existing schema is not an error.

    Returns:
        Result containing True when the schema already existed
    """
    schema = config.connection.schema
    existed = False

    create_result = backend.create_schema(schema)
    if not create_result.success:
        if create_result.kind != ErrorKind.DUPLICATE_OBJECT:
            return Result.fail(f"Could not create schema {schema}: {create_result.error}")
        logger.warning("schema_exists", schema=schema)
        existed = True

    set_result = backend.set_schema(schema)
    if not set_result.success:
        return Result.fail(f"Could not set current schema {schema}: {set_result.error}")

    logger.info("creating_tables", script=str(config.ddl_path))
    ddl_result = backend.run_script(config.ddl_path)
    if not ddl_result.success:
        return Result.fail(f"Could not create tables: {ddl_result.error}", kind=ddl_result.kind)

    return Result.ok(existed)


def load_tables(
    config: LoadConfig, backend: DatabaseBackend, tables: list[str]
) -> Result[list[TableLoadResult]]:
    """Load every table in list order, stopping at the first failure."""
    schema = config.connection.schema
    loaded: list[TableLoadResult] = []

    for table in tables:
        target = qualified(schema, table)
        csv_path = config.csv_path(table)
        logger.info("loading_table", file=str(csv_path), table=target, action=config.action.value)

        start = time.time()
        if config.action == LoadAction.LOAD:
            result = backend.load_csv(csv_path, target)
        else:
            result = backend.import_csv(csv_path, target, config.commit_count)

        if not result.success:
            return Result.fail(
                f"Failed to load from {csv_path} into {target}: {result.error}",
                kind=result.kind or ErrorKind.STATEMENT,
            )

        rows = result.value if result.value is not None else -1
        loaded.append(
            TableLoadResult(
                table=target,
                csv_path=csv_path,
                action=config.action,
                rows=rows,
                duration_seconds=time.time() - start,
            )
        )
        logger.info("table_loaded", table=target, rows=rows)

    return Result.ok(loaded)


def resolve_pending_integrity(config: LoadConfig, backend: DatabaseBackend) -> Result[list[str]]:
    """Find tables left pending integrity by a load and check them in one statement.

    Returns:
        Result containing the tables that were checked (possibly empty)
    """
    schema = config.connection.schema
    logger.info("checking_pending_integrity", schema=schema)

    pending_result = backend.pending_integrity_tables(schema, config.scratch_path)
    if not pending_result.success:
        return Result.fail(
            "Could not obtain list of tables in set integrity pending mode. "
            f"Loaded tables may not be available: {pending_result.error}",
            kind=pending_result.kind or ErrorKind.STATEMENT,
        )

    pending = pending_result.value or []
    if not pending:
        logger.info("no_pending_tables", schema=schema)
        return Result.ok([])

    logger.info("setting_integrity", tables=pending)
    integrity_result = backend.set_integrity(pending)
    if not integrity_result.success:
        return Result.fail(
            "Error setting integrity for loaded tables, tables may not be available: "
            f"{integrity_result.error}",
            kind=integrity_result.kind or ErrorKind.STATEMENT,
        )
    return Result.ok(pending)


def _generated_files(config: LoadConfig) -> list[Path]:
    return [config.alias_config_path, config.scratch_path]


def run(config: LoadConfig, backend: DatabaseBackend | None = None) -> Result[LoadSummary]:
    """Run a full load.

    Args:
        config: Load configuration
        backend: Backend to use (created from ``config.backend`` if None)

    Returns:
        Result containing the LoadSummary
    """
    start = time.time()
    conn = config.connection

    with ExitStack() as stack:
        stack.enter_context(exit_on_signals())
        stack.enter_context(removed_on_exit(_generated_files(config)))
        stack.enter_context(log_context(database=conn.database, schema=conn.schema))

        inputs_result = check_inputs(config.inputs)
        if not inputs_result.success:
            return Result.fail(inputs_result.error or "input check failed", kind=inputs_result.kind)
        tables = inputs_result.unwrap()

        backend = backend or get_backend(config.backend)

        connect_result = _connect(config, backend, stack)
        if not connect_result.success:
            return Result.fail(connect_result.error or "connect failed", kind=connect_result.kind)

        schema_result = prepare_schema(config, backend)
        if not schema_result.success:
            return Result.fail(schema_result.error or "schema failed", kind=schema_result.kind)

        tables_result = load_tables(config, backend, tables)
        if not tables_result.success:
            return Result.fail(tables_result.error or "load failed", kind=tables_result.kind)

        summary = LoadSummary(
            database=conn.database,
            schema=conn.schema,
            action=config.action,
            tables=tables_result.unwrap(),
            schema_existed=bool(schema_result.value),
        )

        if config.action == LoadAction.LOAD:
            integrity_result = resolve_pending_integrity(config, backend)
            if not integrity_result.success:
                return Result.fail(
                    integrity_result.error or "integrity failed", kind=integrity_result.kind
                )
            summary.integrity_checked = integrity_result.value or []

        summary.duration_seconds = time.time() - start
        logger.info(
            "load_completed",
            tables=summary.tables_loaded,
            rows=summary.total_rows,
            duration_seconds=round(summary.duration_seconds, 2),
        )
        return Result.ok(summary)


def run_integrity(config: LoadConfig, backend: DatabaseBackend | None = None) -> Result[list[str]]:
    """Connect and repair tables left pending integrity by an earlier load."""
    conn = config.connection

    with ExitStack() as stack:
        stack.enter_context(exit_on_signals())
        stack.enter_context(removed_on_exit(_generated_files(config)))
        stack.enter_context(log_context(database=conn.database, schema=conn.schema))

        backend = backend or get_backend(config.backend)

        connect_result = _connect(config, backend, stack)
        if not connect_result.success:
            return Result.fail(connect_result.error or "connect failed", kind=connect_result.kind)

        return resolve_pending_integrity(config, backend)
