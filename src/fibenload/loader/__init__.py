"""Loader procedure: input checks, schema preparation, table loads, integrity repair."""

from fibenload.loader.inputs import check_inputs, read_table_list
from fibenload.loader.runner import (
    LoadSummary,
    TableLoadResult,
    resolve_pending_integrity,
    run,
    run_integrity,
)

__all__ = [
    "LoadSummary",
    "TableLoadResult",
    "check_inputs",
    "read_table_list",
    "resolve_pending_integrity",
    "run",
    "run_integrity",
]
