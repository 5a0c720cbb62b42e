"""Db2 backend driving the command line processor (``db2``) and ``db2cli``.

Each operation runs one CLP command with ``subprocess.run``. All commands
are issued from this process, so they share one CLP back-end process and
therefore one connection.

CLP return codes:
    0  success
    1  SELECT/FETCH returned no rows
    2  warning
    4  DB2 or SQL error
    8  command line processor system error
"""

from __future__ import annotations

import os
import re
import subprocess
from pathlib import Path

from fibenload.backends.base import DatabaseBackend
from fibenload.core.logging import get_logger
from fibenload.core.models import ConnectionConfig, ErrorKind, Result

logger = get_logger(__name__)

CLP_NO_ROWS = 1

_SQLSTATE_RE = re.compile(r"SQLSTATE=(\w{5})")
_ROWS_COMMITTED_RE = re.compile(r"Number of rows committed\s*=\s*(\d+)")
_ROWS_LOADED_RE = re.compile(r"Number of rows loaded\s*=\s*(\d+)")

# SQLSTATE -> error kind. Class 08 (connection exception) handled by prefix.
_SQLSTATE_KINDS = {
    "42710": ErrorKind.DUPLICATE_OBJECT,  # SQL0601N object already exists
    "42501": ErrorKind.PRIVILEGE,
    "42502": ErrorKind.PRIVILEGE,
    "28000": ErrorKind.CONNECTION,  # invalid authorization
    "42704": ErrorKind.NOT_FOUND,  # undefined object
}

PENDING_INTEGRITY_QUERY = (
    "select rtrim( rtrim(tabschema) || '.' || rtrim(tabname) ) as qual_tab "
    "from syscat.tables where TABSCHEMA = '{schema}' "
    "and ( CONST_CHECKED like '%N%' or status != 'N' or access_mode != 'F' ) with ur"
)


def sqlstate_of(output: str) -> str | None:
    """Extract the last SQLSTATE reported in CLP output."""
    matches = _SQLSTATE_RE.findall(output)
    return matches[-1] if matches else None


def classify(output: str, default: ErrorKind = ErrorKind.STATEMENT) -> ErrorKind:
    """Map CLP output to an error kind using its SQLSTATE."""
    sqlstate = sqlstate_of(output)
    if sqlstate is None:
        return default
    if sqlstate.startswith("08"):
        return ErrorKind.CONNECTION
    return _SQLSTATE_KINDS.get(sqlstate, default)


class Db2CliBackend(DatabaseBackend):
    """Backend issuing Db2 CLP commands."""

    name = "db2"

    def __init__(self, db2: str = "db2", db2cli: str = "db2cli"):
        self.db2 = db2
        self.db2cli = db2cli
        self._env: dict[str, str] = dict(os.environ)
        self._connected = False

    def _run(
        self,
        args: list[str],
        display: list[str] | None = None,
        default_kind: ErrorKind = ErrorKind.STATEMENT,
        ok_codes: tuple[int, ...] = (0,),
        **kwargs,
    ) -> Result[str]:
        """Run one command and turn its exit status into a Result.

        Args:
            args: Command and arguments
            display: Version of ``args`` safe to log (credentials masked)
            default_kind: Error kind when the output carries no known SQLSTATE
            ok_codes: Return codes treated as success
            **kwargs: Extra ``subprocess.run`` arguments

        Returns:
            Result containing the command's stdout
        """
        logger.info("db2_command", command=" ".join(display or args))
        if "stdout" not in kwargs:
            kwargs["capture_output"] = True
        try:
            completed = subprocess.run(args, text=True, check=False, env=self._env, **kwargs)
        except FileNotFoundError:
            return Result.fail(f"Command not found: {args[0]}", kind=ErrorKind.NOT_FOUND)

        output = completed.stdout or ""
        if completed.returncode in ok_codes:
            return Result.ok(output)

        message = (output + (completed.stderr or "")).strip()
        logger.debug("db2_command_failed", returncode=completed.returncode, output=message)
        return Result.fail(
            message or f"{args[0]} exited with status {completed.returncode}",
            kind=classify(message, default_kind),
        )

    def write_alias(self, alias: str, connection: ConnectionConfig, config_path: Path) -> Result[Path]:
        self._env["DB2DSDRIVER_CFG_PATH"] = str(config_path)
        args = [
            self.db2cli,
            "writecfg",
            "add",
            "-dsn",
            alias,
            "-host",
            str(connection.host),
            "-port",
            str(connection.port or ""),
            "-database",
            connection.database,
        ]
        result = self._run(args, default_kind=ErrorKind.CONNECTION)
        if not result.success:
            return Result.fail(f"Could not write alias {alias}: {result.error}", kind=result.kind)
        return Result.ok(config_path)

    def connect(self, name: str, user: str | None = None, password: str | None = None) -> Result[None]:
        args = [self.db2, "connect", "to", name]
        display = list(args)
        if user:
            args += ["user", user, "using", password or ""]
            display += ["user", user, "using", "****"]
        result = self._run(args, display=display, default_kind=ErrorKind.CONNECTION)
        if not result.success:
            # Connection failures are reported as such whatever the SQLSTATE
            return Result.fail(result.error or "connect failed", kind=ErrorKind.CONNECTION)
        self._connected = True
        return Result.ok(None)

    def _statement(self, sql: str, default_kind: ErrorKind = ErrorKind.STATEMENT) -> Result[str]:
        return self._run([self.db2, "-v", sql], default_kind=default_kind)

    def create_schema(self, schema: str) -> Result[None]:
        return self._statement(f"create schema {schema}").map(lambda _: None)

    def set_schema(self, schema: str) -> Result[None]:
        return self._statement(f"set current schema {schema}").map(lambda _: None)

    def run_script(self, script_path: Path) -> Result[None]:
        return self._run([self.db2, "-tvf", str(script_path)]).map(lambda _: None)

    def import_csv(self, csv_path: Path, table: str, commit_count: int) -> Result[int]:
        sql = f"import from {csv_path} of del commitcount {commit_count} insert into {table}"
        return self._statement(sql).map(lambda out: _count_rows(_ROWS_COMMITTED_RE, out))

    def load_csv(self, csv_path: Path, table: str) -> Result[int]:
        sql = f"load client from {csv_path} of del replace into {table} nonrecoverable"
        return self._statement(sql).map(lambda out: _count_rows(_ROWS_LOADED_RE, out))

    def pending_integrity_tables(self, schema: str, scratch_path: Path) -> Result[list[str]]:
        query = PENDING_INTEGRITY_QUERY.format(schema=schema)
        with open(scratch_path, "w") as f:
            result = self._run(
                [self.db2, "-x", query],
                ok_codes=(0, CLP_NO_ROWS),
                stdout=f,
                stderr=subprocess.PIPE,
            )
        if not result.success:
            return Result.fail(result.error or "catalog query failed", kind=result.kind)

        tables = [line.rstrip() for line in scratch_path.read_text().splitlines()]
        return Result.ok([t for t in tables if t])

    def set_integrity(self, tables: list[str]) -> Result[None]:
        if not tables:
            return Result.ok(None)
        sql = f"set integrity for {', '.join(tables)} immediate checked"
        return self._statement(sql).map(lambda _: None)

    def terminate(self) -> None:
        if not self._connected:
            return
        result = self._run([self.db2, "terminate"])
        if not result.success:
            logger.warning("db2_terminate_failed", error=result.error)
        self._connected = False


def _count_rows(pattern: re.Pattern[str], output: str) -> int:
    match = pattern.search(output)
    return int(match.group(1)) if match else -1
