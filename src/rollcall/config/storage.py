"""Local storage locations and database settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_bool, optional_env_var

DATABASE_FILENAME: Final[str] = "rollcall.sqlite3"
ROSTER_CACHE_FILENAME: Final[str] = "roster_cache.sqlite3"


def default_data_dir() -> Path:
    """``$XDG_DATA_HOME/rollcall``, falling back to ``~/.local/share/rollcall``."""

    xdg_data_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return base.expanduser() / "rollcall"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def path_for(self, filename: str, *, create: bool = True) -> Path:
        directory = self.data_dir.expanduser().resolve()
        if create:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / filename

    def database_path(self, *, create: bool = True) -> Path:
        return self.path_for(DATABASE_FILENAME, create=create)

    def roster_cache_path(self, *, create: bool = True) -> Path:
        return self.path_for(ROSTER_CACHE_FILENAME, create=create)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def get_storage_config() -> StorageConfig:
    configured = optional_env_var("ROLLCALL_DATA_DIR")
    return StorageConfig(data_dir=Path(configured) if configured else default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` when set, otherwise a SQLite file in the data directory."""

    echo = env_bool("ROLLCALL_SQL_ECHO", False)
    uri = optional_env_var("DATABASE_URI")
    if uri is None:
        database_path = (storage or get_storage_config()).database_path()
        uri = f"sqlite+pysqlite:///{database_path}"
    return DatabaseConfig(uri=uri, echo=echo)
