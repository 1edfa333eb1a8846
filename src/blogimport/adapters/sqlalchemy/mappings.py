"""SQLAlchemy mapping metadata for the destination blog schema."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)

from blogimport.domain.model import (
    Post,
    PostStatus,
    PostTag,
    Role,
    RoleUser,
    Setting,
    Subscriber,
    SubscriberStatus,
    Tag,
    User,
    UserStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

ID_LENGTH: Final = 36


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def value_enum(enum_cls: type[StrEnum]) -> Enum:
    """Store the enum's lower-case values rather than member names."""

    return Enum(enum_cls, native_enum=False, values_callable=_enum_values, length=50)


def _id_column() -> Column[str]:
    return Column("id", String(ID_LENGTH), primary_key=True)


def _audit_columns() -> tuple[Column[object], ...]:
    return (
        Column("created_at", UTCDateTime(), nullable=True),
        Column("created_by", String(ID_LENGTH), nullable=True),
        Column("updated_at", UTCDateTime(), nullable=True),
        Column("updated_by", String(ID_LENGTH), nullable=True),
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

role_table = Table(
    "roles",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String(50), nullable=False, unique=True),
    Column("description", String(2000), nullable=True),
    *_audit_columns(),
)

user_table = Table(
    "users",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String(191), nullable=False),
    Column("slug", String(191), nullable=False, unique=True),
    Column("email", String(191), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("status", value_enum(UserStatus), nullable=False),
    Column("bio", Text, nullable=True),
    Column("website", String(2000), nullable=True),
    Column("location", Text, nullable=True),
    Column("profile_image", String(2000), nullable=True),
    Column("cover_image", String(2000), nullable=True),
    Column("last_seen", UTCDateTime(), nullable=True),
    *_audit_columns(),
)

roles_users_table = Table(
    "roles_users",
    mapper_registry.metadata,
    _id_column(),
    Column("role_id", String(ID_LENGTH), ForeignKey("roles.id"), nullable=False),
    Column("user_id", String(ID_LENGTH), ForeignKey("users.id"), nullable=False),
)

setting_table = Table(
    "settings",
    mapper_registry.metadata,
    _id_column(),
    Column("key", String(50), nullable=False, unique=True),
    Column("value", Text, nullable=True),
    Column("group", String(50), nullable=False),
    *_audit_columns(),
)

tag_table = Table(
    "tags",
    mapper_registry.metadata,
    _id_column(),
    Column("name", String(191), nullable=False),
    Column("slug", String(191), nullable=False, unique=True),
    Column("description", Text, nullable=True),
    Column("feature_image", String(2000), nullable=True),
    Column("parent_id", String(ID_LENGTH), nullable=True),
    Column("visibility", String(50), nullable=False),
    Column("meta_title", String(2000), nullable=True),
    Column("meta_description", String(2000), nullable=True),
    *_audit_columns(),
)

post_table = Table(
    "posts",
    mapper_registry.metadata,
    _id_column(),
    Column("uuid", String(ID_LENGTH), nullable=False),
    Column("title", String(2000), nullable=False),
    Column("slug", String(191), nullable=False, unique=True),
    Column("mobiledoc", Text, nullable=True),
    Column("html", Text, nullable=True),
    Column("plaintext", Text, nullable=True),
    Column("feature_image", String(2000), nullable=True),
    Column("featured", Boolean, nullable=False),
    Column("page", Boolean, nullable=False),
    Column("status", value_enum(PostStatus), nullable=False),
    Column("language", String(6), nullable=False),
    Column("visibility", String(50), nullable=False),
    Column("meta_title", String(2000), nullable=True),
    Column("meta_description", String(2000), nullable=True),
    Column("custom_excerpt", String(2000), nullable=True),
    # no foreign key: an unresolved author keeps the exported id
    Column("author_id", String(ID_LENGTH), nullable=True),
    Column("published_at", UTCDateTime(), nullable=True),
    Column("published_by", String(ID_LENGTH), nullable=True),
    *_audit_columns(),
)

posts_tags_table = Table(
    "posts_tags",
    mapper_registry.metadata,
    _id_column(),
    Column("post_id", String(ID_LENGTH), ForeignKey("posts.id"), nullable=False),
    Column("tag_id", String(ID_LENGTH), ForeignKey("tags.id"), nullable=False),
    Column("sort_order", Integer, nullable=False),
    UniqueConstraint("post_id", "tag_id", name="uq_posts_tags_post_tag"),
)

subscriber_table = Table(
    "subscribers",
    mapper_registry.metadata,
    _id_column(),
    Column("email", String(191), nullable=False, unique=True),
    Column("name", String(191), nullable=True),
    Column("status", value_enum(SubscriberStatus), nullable=False),
    Column("post_id", String(ID_LENGTH), nullable=True),
    Column("subscribed_url", String(2000), nullable=True),
    Column("subscribed_referrer", String(2000), nullable=True),
    Column("unsubscribed_url", String(2000), nullable=True),
    Column("unsubscribed_at", UTCDateTime(), nullable=True),
    *_audit_columns(),
)

TABLE_BY_CLASS: Final = {
    Role: role_table,
    User: user_table,
    RoleUser: roles_users_table,
    Setting: setting_table,
    Tag: tag_table,
    Post: post_table,
    PostTag: posts_tags_table,
    Subscriber: subscriber_table,
}


@cache
def start_mappers() -> orm.registry:
    """Map the domain dataclasses onto their tables. Safe to call repeatedly."""

    log.info("Starting SQLAlchemy mappers")
    for entity_cls, table in TABLE_BY_CLASS.items():
        mapper_registry.map_imperatively(entity_cls, table)
    orm.configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
