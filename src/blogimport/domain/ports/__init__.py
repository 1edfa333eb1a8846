"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    PostRepository,
    PostTagRepository,
    Repository,
    RoleRepository,
    RoleUserRepository,
    SettingRepository,
    SubscriberRepository,
    TagRepository,
    UserRepository,
)
from .unit_of_work import (
    ImportRepositories,
    ImportUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ImportRepositories",
    "ImportUnitOfWork",
    "PostRepository",
    "PostTagRepository",
    "Repository",
    "RepositoryCollection",
    "RoleRepository",
    "RoleUserRepository",
    "SettingRepository",
    "SubscriberRepository",
    "TagRepository",
    "UnitOfWork",
    "UserRepository",
]
