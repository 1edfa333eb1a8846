"""SQLAlchemy adapter package for the blog importer."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyPostRepository,
    SqlAlchemyPostTagRepository,
    SqlAlchemyRoleRepository,
    SqlAlchemyRoleUserRepository,
    SqlAlchemySettingRepository,
    SqlAlchemySubscriberRepository,
    SqlAlchemyTagRepository,
    SqlAlchemyUserRepository,
)
from .unit_of_work import SqlAlchemyImportUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyPostRepository",
    "SqlAlchemyPostTagRepository",
    "SqlAlchemyRoleRepository",
    "SqlAlchemyRoleUserRepository",
    "SqlAlchemySettingRepository",
    "SqlAlchemySubscriberRepository",
    "SqlAlchemyTagRepository",
    "SqlAlchemyUserRepository",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
