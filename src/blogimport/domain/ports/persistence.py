"""Ports for persisting destination entities.

``add`` implementations must raise :class:`~blogimport.domain.errors.DuplicateEntryError`
when the entity collides with a unique destination key; updates happen by mutating
an entity previously returned by a ``get_*`` lookup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from blogimport.domain.model import (
    Post,
    PostTag,
    Role,
    RoleUser,
    Setting,
    Subscriber,
    Tag,
    User,
)

if TYPE_CHECKING:
    from collections.abc import Sequence


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: str) -> TEntity | None: ...

    def list_all(self) -> Sequence[TEntity]: ...


@runtime_checkable
class SettingRepository(Repository[Setting], Protocol):
    def get_by_key(self, key: str) -> Setting | None: ...


@runtime_checkable
class RoleRepository(Repository[Role], Protocol):
    def get_by_name(self, name: str) -> Role | None: ...


@runtime_checkable
class UserRepository(Repository[User], Protocol):
    def get_by_email(self, email: str) -> User | None: ...

    def get_by_slug(self, slug: str) -> User | None: ...

    def find_owner(self) -> User | None: ...


@runtime_checkable
class RoleUserRepository(Repository[RoleUser], Protocol):
    def roles_for(self, user_id: str) -> Sequence[RoleUser]: ...

    def users_with_role(self, role_id: str) -> Sequence[RoleUser]: ...


@runtime_checkable
class TagRepository(Repository[Tag], Protocol):
    def get_by_slug(self, slug: str) -> Tag | None: ...


@runtime_checkable
class PostRepository(Repository[Post], Protocol):
    def get_by_slug(self, slug: str) -> Post | None: ...


@runtime_checkable
class PostTagRepository(Repository[PostTag], Protocol):
    def for_post(self, post_id: str) -> Sequence[PostTag]: ...


@runtime_checkable
class SubscriberRepository(Repository[Subscriber], Protocol):
    def get_by_email(self, email: str) -> Subscriber | None: ...
