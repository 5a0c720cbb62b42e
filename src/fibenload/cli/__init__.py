"""CLI for the FIBEN loader.

Usage:
    fibenload load -d <dbname> [-h <hostname> -o <port>] [-s <schema>] [-u <userid> [-p <password>]] [-l]
    fibenload check --base-dir ./fiben
    fibenload integrity -d <dbname> -s <schema>

Environment:
    Loads .env file from current directory if present.
    FIBENLOAD_* variables override settings (e.g. FIBENLOAD_BASE_DIR).
"""

from fibenload.cli.main import app, main

__all__ = ["app", "main"]
