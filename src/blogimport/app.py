"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from blogimport.adapters.snapshot_file import load_snapshot
from blogimport.adapters.sqlalchemy.migrations import upgrade_head
from blogimport.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    is_started,
    startup,
)
from blogimport.config import get_import_config
from blogimport.domain.errors import ImportAbortedError
from blogimport.domain.importer import run_import
from blogimport.domain.ports import ImportUnitOfWork

if TYPE_CHECKING:
    from pathlib import Path

    from blogimport.config import ImportConfig
    from blogimport.domain.importer import ImportResult

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]


log = getLogger(__name__)


def import_snapshot_file(
    path: Path | str,
    *,
    acting_user_email: str | None = None,
    database_uri: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ImportConfig | None = None,
) -> ImportResult:
    """Import the export file at ``path`` into the configured database."""

    snapshot = load_snapshot(path)
    if unit_of_work_factory is None and not is_started():
        startup(database_uri=database_uri)
    effective_uow = unit_of_work_factory or SqlAlchemyImportUnitOfWork
    acting_user_id = (
        resolve_user_id(acting_user_email, effective_uow) if acting_user_email else None
    )
    log.info(
        "Starting import: file=%s, version=%s, tables=%s",
        path,
        snapshot.meta.version,
        ", ".join(sorted(snapshot.data)),
    )

    result = run_import(
        snapshot,
        unit_of_work_factory=effective_uow,
        acting_user_id=acting_user_id,
        config=config or get_import_config(),
    )

    log.info(
        f"Finished import: rows={sum(len(rows) for rows in result.data.values())}, "
        f"problems={len(result.problems)}"
    )
    return result


def resolve_user_id(email: str, unit_of_work_factory: UnitOfWorkFactory) -> str:
    with unit_of_work_factory() as uow:
        user = uow.repositories.users.get_by_email(email)
        if user is None:
            raise ImportAbortedError(f"No destination user with email {email}")
        return user.id


def migrate(*, database_uri: str | None = None) -> None:
    """Bring the destination schema up to date."""

    log.info("Upgrading database schema")
    upgrade_head(database_uri=database_uri)
