"""Repository implementations backed by SQLAlchemy sessions.

``add`` checks unique destination keys before staging the entity so a
collision surfaces as :class:`DuplicateEntryError` instead of an integrity
error at flush time. Lookups autoflush, which makes entities staged earlier in
the same unit of work visible to these checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from blogimport.adapters.sqlalchemy.mappings import (
    TABLE_BY_CLASS,
    post_table,
    posts_tags_table,
    role_table,
    roles_users_table,
    setting_table,
    subscriber_table,
    tag_table,
    user_table,
)
from blogimport.domain.errors import DuplicateEntryError
from blogimport.domain.model import (
    Entity,
    Post,
    PostTag,
    Role,
    RoleName,
    RoleUser,
    Setting,
    Subscriber,
    Tag,
    User,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.orm import Session


class SqlAlchemyRepository[TEntity: Entity]:
    """Shared helpers for repositories over one mapped entity class."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._table = TABLE_BY_CLASS[entity_cls]

    def add(self, entity: TEntity) -> None:
        self._check_unique(entity)
        self.session.add(entity)

    def get(self, entity_id: str) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)

    def list_all(self) -> Sequence[TEntity]:
        return self.session.scalars(select(self._entity_cls)).all()

    def _check_unique(self, entity: TEntity) -> None:
        _ = entity

    def _first_where(self, *criteria: ColumnElement[bool]) -> TEntity | None:
        stmt = select(self._entity_cls).where(*criteria).limit(1)
        return self.session.execute(stmt).scalars().first()

    def _ensure_free(self, column: str, value: str, existing: TEntity | None) -> None:
        if existing is not None:
            raise DuplicateEntryError(self._table.name, column, value)


class SqlAlchemySettingRepository(SqlAlchemyRepository[Setting]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Setting)

    def get_by_key(self, key: str) -> Setting | None:
        return self._first_where(setting_table.c.key == key)

    def _check_unique(self, entity: Setting) -> None:
        self._ensure_free("key", entity.key, self.get_by_key(entity.key))


class SqlAlchemyRoleRepository(SqlAlchemyRepository[Role]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Role)

    def get_by_name(self, name: str) -> Role | None:
        return self._first_where(func.lower(role_table.c.name) == name.lower())

    def _check_unique(self, entity: Role) -> None:
        self._ensure_free("name", entity.name, self.get_by_name(entity.name))


class SqlAlchemyUserRepository(SqlAlchemyRepository[User]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, User)

    def get_by_email(self, email: str) -> User | None:
        return self._first_where(func.lower(user_table.c.email) == email.lower())

    def get_by_slug(self, slug: str) -> User | None:
        return self._first_where(user_table.c.slug == slug)

    def find_owner(self) -> User | None:
        stmt = (
            select(User)
            .join(roles_users_table, roles_users_table.c.user_id == user_table.c.id)
            .join(role_table, role_table.c.id == roles_users_table.c.role_id)
            .where(role_table.c.name == RoleName.OWNER.value)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def _check_unique(self, entity: User) -> None:
        self._ensure_free("email", entity.email, self.get_by_email(entity.email))
        self._ensure_free("slug", entity.slug, self.get_by_slug(entity.slug))


class SqlAlchemyRoleUserRepository(SqlAlchemyRepository[RoleUser]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, RoleUser)

    def roles_for(self, user_id: str) -> Sequence[RoleUser]:
        stmt = select(RoleUser).where(roles_users_table.c.user_id == user_id)
        return self.session.scalars(stmt).all()

    def users_with_role(self, role_id: str) -> Sequence[RoleUser]:
        stmt = select(RoleUser).where(roles_users_table.c.role_id == role_id)
        return self.session.scalars(stmt).all()


class SqlAlchemyTagRepository(SqlAlchemyRepository[Tag]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Tag)

    def get_by_slug(self, slug: str) -> Tag | None:
        return self._first_where(tag_table.c.slug == slug)

    def _check_unique(self, entity: Tag) -> None:
        self._ensure_free("slug", entity.slug, self.get_by_slug(entity.slug))


class SqlAlchemyPostRepository(SqlAlchemyRepository[Post]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Post)

    def get_by_slug(self, slug: str) -> Post | None:
        return self._first_where(post_table.c.slug == slug)

    def _check_unique(self, entity: Post) -> None:
        self._ensure_free("slug", entity.slug, self.get_by_slug(entity.slug))


class SqlAlchemyPostTagRepository(SqlAlchemyRepository[PostTag]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, PostTag)

    def for_post(self, post_id: str) -> Sequence[PostTag]:
        stmt = (
            select(PostTag)
            .where(posts_tags_table.c.post_id == post_id)
            .order_by(posts_tags_table.c.sort_order)
        )
        return self.session.scalars(stmt).all()

    def _check_unique(self, entity: PostTag) -> None:
        existing = self._first_where(
            posts_tags_table.c.post_id == entity.post_id,
            posts_tags_table.c.tag_id == entity.tag_id,
        )
        self._ensure_free("post_id, tag_id", f"{entity.post_id}, {entity.tag_id}", existing)


class SqlAlchemySubscriberRepository(SqlAlchemyRepository[Subscriber]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Subscriber)

    def get_by_email(self, email: str) -> Subscriber | None:
        return self._first_where(func.lower(subscriber_table.c.email) == email.lower())

    def _check_unique(self, entity: Subscriber) -> None:
        self._ensure_free("email", entity.email, self.get_by_email(entity.email))
