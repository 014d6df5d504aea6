"""Configuration management for fsdb."""

from pathlib import Path
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYNC_DELAY = 0.1

# Files SQLite writes next to the database
SQLITE_SIDECAR_SUFFIXES = ("-journal", "-wal", "-shm")


class SyncConfig(BaseSettings):
    """Configuration for one watched folder and its database.

    Every field can be set from the environment with the ``FSDB_`` prefix,
    e.g. ``FSDB_WATCH_FOLDER`` and ``FSDB_DB_PATH``.
    """

    env: Literal["test", "dev", "prod"] = Field(default="dev", description="Environment name")

    watch_folder: Path = Field(description="Directory tree to keep in sync")
    db_path: Path = Field(description="SQLite database file")

    sync_delay: float = Field(
        default=DEFAULT_SYNC_DELAY,
        ge=0,
        description=(
            "Seconds to wait after an add/change event before reading the file. "
            "Longer values reduce checksum mismatches on partially written files "
            "at the cost of detection latency."
        ),
    )
    watch_debounce: int = Field(
        default=100,
        ge=1,
        description="Milliseconds the watcher waits to group filesystem changes",
    )
    sync_concurrency: int = Field(
        default=8,
        ge=1,
        description="Files inspected concurrently during a full sync",
    )

    ignore_hidden: bool = Field(default=True, description="Skip dotfiles and dot-directories")
    ignore_patterns: List[str] = Field(
        default_factory=list,
        description="Extra gitignore-style patterns to skip (JSON list in the environment)",
    )

    log_level: str = Field(default="INFO", description="Log level for stderr output")

    model_config = SettingsConfigDict(
        env_prefix="FSDB_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("watch_folder")
    @classmethod
    def resolve_watch_folder(cls, v: Path) -> Path:
        """Store the watch folder as an absolute path. Existence is checked on start."""
        return v.expanduser().resolve()

    @field_validator("db_path")
    @classmethod
    def ensure_db_parent_exists(cls, v: Path) -> Path:
        """Resolve the database path and make sure its directory exists."""
        v = v.expanduser().resolve()
        if not v.parent.exists():
            v.parent.mkdir(parents=True)
        return v

    @property
    def status_path(self) -> Path:
        """JSON file the watch service writes its state to."""
        return self.db_path.parent / f"{self.db_path.stem}-watch-status.json"

    @property
    def log_path(self) -> Path:
        """Log file written next to the database."""
        return self.db_path.parent / f"{self.db_path.stem}.log"

    @property
    def internal_paths(self) -> List[Path]:
        """Files fsdb writes itself. Never synced, even inside the watch folder."""
        sidecars = [Path(f"{self.db_path}{suffix}") for suffix in SQLITE_SIDECAR_SUFFIXES]
        return [self.db_path, *sidecars, self.status_path, self.log_path]
