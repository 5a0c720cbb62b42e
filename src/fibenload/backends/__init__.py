"""Database backends the loader can drive."""

from fibenload.backends.base import DatabaseBackend
from fibenload.backends.db2 import Db2CliBackend
from fibenload.backends.duckdb_backend import DuckDBBackend
from fibenload.core.config import get_settings

BACKENDS = ("db2", "duckdb")


def get_backend(name: str) -> DatabaseBackend:
    """Create the backend registered under ``name``.

    Raises:
        ValueError: If ``name`` is not a known backend
    """
    if name == "db2":
        settings = get_settings()
        return Db2CliBackend(db2=settings.db2_executable, db2cli=settings.db2cli_executable)
    if name == "duckdb":
        return DuckDBBackend()
    raise ValueError(f"Unknown backend: {name}. Choose from {', '.join(BACKENDS)}")


__all__ = [
    "BACKENDS",
    "DatabaseBackend",
    "Db2CliBackend",
    "DuckDBBackend",
    "get_backend",
]
