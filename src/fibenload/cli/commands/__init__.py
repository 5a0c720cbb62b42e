"""CLI command implementations."""

from fibenload.cli.commands import check, integrity, load

__all__ = [
    "check",
    "integrity",
    "load",
]
