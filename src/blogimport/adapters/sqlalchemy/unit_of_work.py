"""SQLAlchemy-backed unit of work for import runs."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from blogimport.adapters.sqlalchemy.mappings import start_mappers
from blogimport.adapters.sqlalchemy.migrations import upgrade_head
from blogimport.adapters.sqlalchemy.repositories import (
    SqlAlchemyPostRepository,
    SqlAlchemyPostTagRepository,
    SqlAlchemyRoleRepository,
    SqlAlchemyRoleUserRepository,
    SqlAlchemySettingRepository,
    SqlAlchemySubscriberRepository,
    SqlAlchemyTagRepository,
    SqlAlchemyUserRepository,
)
from blogimport.config import get_database_config
from blogimport.domain.ports.unit_of_work import ImportRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call blogimport.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, bring the schema to head and reset the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine
    if resolved_engine is None:
        database = get_database_config(uri=database_uri)
        database.ensure_parent_dir()
        resolved_engine = create_engine(database.uri, future=True)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block; leaving the block without ``commit`` discards it.

    Staged rows are rolled back on an exception and also on a clean exit that
    never committed, so a half-finished import cannot leak into the database.
    """

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None
        self.committed = False

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self.committed = False
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            log.warning("Rolling back import session after %s", exc_type.__name__)
            self.rollback()
        elif not self.committed:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()
        self.committed = True
        log.debug("Import session committed")

    def rollback(self) -> None:
        self.session.rollback()
        self.committed = False

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyImportUnitOfWork(BaseSqlAlchemyUnitOfWork[ImportRepositories]):
    """Unit of work spanning every table an import writes."""

    def _build_repositories(self, session: Session) -> ImportRepositories:
        return ImportRepositories(
            settings=SqlAlchemySettingRepository(session),
            roles=SqlAlchemyRoleRepository(session),
            users=SqlAlchemyUserRepository(session),
            roles_users=SqlAlchemyRoleUserRepository(session),
            tags=SqlAlchemyTagRepository(session),
            posts=SqlAlchemyPostRepository(session),
            posts_tags=SqlAlchemyPostTagRepository(session),
            subscribers=SqlAlchemySubscriberRepository(session),
        )


if TYPE_CHECKING:
    from blogimport.domain.ports import ImportUnitOfWork

    _uow_check: ImportUnitOfWork = SqlAlchemyImportUnitOfWork()
