"""Input file checks run before any database work."""

from __future__ import annotations

from pathlib import Path

from fibenload.core.logging import get_logger
from fibenload.core.models import ErrorKind, InputLayout, Result

logger = get_logger(__name__)


def read_table_list(path: Path) -> Result[list[str]]:
    """Read table names, one per line, keeping file order.

    Blank lines are skipped and surrounding whitespace is stripped.

    Args:
        path: Table list file

    Returns:
        Result containing the ordered table names
    """
    if not path.is_file():
        return Result.fail(f"Table list does not exist: {path}", kind=ErrorKind.NOT_FOUND)

    tables = [line.strip() for line in path.read_text().splitlines()]
    tables = [t for t in tables if t]
    if not tables:
        return Result.fail(f"Table list is empty: {path}", kind=ErrorKind.NOT_FOUND)
    return Result.ok(tables)


def check_inputs(layout: InputLayout) -> Result[list[str]]:
    """Verify the data directory, one CSV per listed table, and the DDL script.

    Stops at the first missing file.

    Args:
        layout: Locations of the table list, data directory and DDL script

    Returns:
        Result containing the ordered table names
    """
    data_path = layout.data_path
    logger.info("checking_data_directory", path=str(data_path))
    if not data_path.is_dir():
        return Result.fail(f"Data directory does not exist: {data_path}", kind=ErrorKind.NOT_FOUND)

    tables_result = read_table_list(layout.table_list_path)
    if not tables_result.success:
        return tables_result
    tables = tables_result.unwrap()

    logger.info("checking_csv_files", count=len(tables))
    for table in tables:
        csv_path = layout.csv_path(table)
        if not csv_path.is_file():
            return Result.fail(f"CSV file does not exist: {csv_path}", kind=ErrorKind.NOT_FOUND)

    if not layout.ddl_path.is_file():
        return Result.fail(f"DDL script does not exist: {layout.ddl_path}", kind=ErrorKind.NOT_FOUND)

    return Result.ok(tables)
