"""Location of the destination database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from sqlalchemy.engine import make_url

APP_DIR_NAME: Final[str] = "blogimport"
DEFAULT_DB_FILENAME: Final[str] = "blog.db"
SQLITE_MEMORY: Final[str] = ":memory:"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Local data directory used when no database URI is configured."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self) -> Path:
        return self.resolve_data_dir() / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str

    @property
    def sqlite_path(self) -> Path | None:
        """File behind a SQLite URI; ``None`` for other backends and in-memory databases."""

        url = make_url(self.uri)
        if url.get_backend_name() != "sqlite" or url.database in (None, "", SQLITE_MEMORY):
            return None
        return Path(url.database).expanduser()

    def ensure_parent_dir(self) -> None:
        """Create the directory of a SQLite file so the first connect can create it."""

        path = self.sqlite_path
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("BLOGIMPORT_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_config(
    *,
    uri: str | None = None,
    storage: StorageConfig | None = None,
) -> DatabaseConfig:
    """An explicit ``uri`` wins over ``DATABASE_URI``, which wins over the data dir."""

    resolved = uri or os.getenv("DATABASE_URI")
    if resolved:
        return DatabaseConfig(uri=resolved)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
