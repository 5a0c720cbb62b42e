"""Configuration management.

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loader settings.

    All settings can be overridden via environment variables.
    Prefix: FIBENLOAD_
    """

    model_config = SettingsConfigDict(
        env_prefix="FIBENLOAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Input layout, relative to base_dir
    base_dir: Path = Field(
        default_factory=lambda: Path("."),
        description="Directory holding the table list, data directory and DDL script",
    )
    table_list_file: str = Field(
        default="tablelist.txt",
        description="Text file with one table name per line",
    )
    data_dir: str = Field(
        default="data",
        description="Directory containing one <table>.csv per listed table",
    )
    ddl_file: str = Field(
        default="FIBEN.sql",
        description="DDL script creating the benchmark tables",
    )

    # Generated files, removed on exit
    alias_config_file: str = Field(
        default="db2dsdriver.cfg",
        description="Temporary driver configuration holding the remote alias",
    )
    scratch_file: str = Field(
        default="inttabs.txt",
        description="Temporary list of tables found in set integrity pending state",
    )

    # Loading
    commit_count: int = Field(
        default=100_000,
        gt=0,
        description="Rows per committed batch in import mode",
    )
    dsn_alias: str = Field(
        default="FIBENSCR",
        description="Connection alias written for remote hosts",
    )

    # Backend
    backend: str = Field(default="db2")
    db2_executable: str = Field(default="db2")
    db2cli_executable: str = Field(default="db2cli")

    # Logging
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console")  # 'json' or 'console'


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
