"""FIBEN benchmark loader.

Provisions the FIBEN schema in a target database and bulk-loads the
benchmark CSV files, one per table.

Example:
    from fibenload import LoadConfig, ConnectionConfig, run

    config = LoadConfig(connection=ConnectionConfig(database="FIBEN"))
    result = run(config)
    result.unwrap().tables_loaded
"""

__version__ = "0.1.0"

from fibenload.core.models import ConnectionConfig, LoadAction, LoadConfig, Result
from fibenload.loader.runner import run

__all__ = [
    "ConnectionConfig",
    "LoadAction",
    "LoadConfig",
    "Result",
    "run",
    "__version__",
]
