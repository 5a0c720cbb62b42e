"""Core module - configuration, logging, and shared models."""

from fibenload.core.config import Settings, get_settings
from fibenload.core.models import (
    ConnectionConfig,
    ErrorKind,
    InputLayout,
    LoadAction,
    LoadConfig,
    Result,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Models
    "ConnectionConfig",
    "ErrorKind",
    "InputLayout",
    "LoadAction",
    "LoadConfig",
    "Result",
]
