"""Destination entities written by the importer.

These are plain dataclasses; the SQLAlchemy adapter maps them imperatively so the
domain never imports the ORM. User-reference columns (``created_by``,
``author_id`` ...) are plain strings without database foreign keys: the importer
is responsible for pointing them at existing rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar
from uuid import uuid4

from blogimport.domain.model.enums import (
    PostStatus,
    SubscriberStatus,
    TableName,
    UserStatus,
)

if TYPE_CHECKING:
    from datetime import datetime


def new_id() -> str:
    return uuid4().hex


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: str = field(default_factory=new_id)

    # class-level discriminator; subclasses must override
    TABLE: ClassVar[TableName]

    @property
    def table(self) -> TableName:
        return self.TABLE


@dataclass(eq=False, kw_only=True)
class Audited:
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


@dataclass(eq=False, kw_only=True)
class Role(Entity, Audited):
    TABLE: ClassVar[TableName] = TableName.ROLES

    name: str
    description: str | None = None


@dataclass(eq=False, kw_only=True)
class User(Entity, Audited):
    TABLE: ClassVar[TableName] = TableName.USERS

    name: str
    slug: str
    email: str
    password: str
    status: UserStatus = UserStatus.ACTIVE
    bio: str | None = None
    website: str | None = None
    location: str | None = None
    profile_image: str | None = None
    cover_image: str | None = None
    last_seen: datetime | None = None


@dataclass(eq=False, kw_only=True)
class RoleUser(Entity):
    TABLE: ClassVar[TableName] = TableName.ROLES_USERS

    role_id: str
    user_id: str


@dataclass(eq=False, kw_only=True)
class Setting(Entity, Audited):
    TABLE: ClassVar[TableName] = TableName.SETTINGS

    key: str
    value: str | None = None
    group: str = "core"


@dataclass(eq=False, kw_only=True)
class Tag(Entity, Audited):
    TABLE: ClassVar[TableName] = TableName.TAGS

    name: str
    slug: str
    description: str | None = None
    feature_image: str | None = None
    parent_id: str | None = None
    visibility: str = "public"
    meta_title: str | None = None
    meta_description: str | None = None


@dataclass(eq=False, kw_only=True)
class Post(Entity, Audited):
    TABLE: ClassVar[TableName] = TableName.POSTS

    uuid: str
    title: str
    slug: str
    mobiledoc: str | None = None
    html: str | None = None
    plaintext: str | None = None
    feature_image: str | None = None
    featured: bool = False
    page: bool = False
    status: PostStatus = PostStatus.DRAFT
    language: str = "en_US"
    visibility: str = "public"
    meta_title: str | None = None
    meta_description: str | None = None
    custom_excerpt: str | None = None
    # may hold a raw snapshot value when the author could not be resolved
    author_id: str | None = None
    published_at: datetime | None = None
    published_by: str | None = None


@dataclass(eq=False, kw_only=True)
class PostTag(Entity):
    TABLE: ClassVar[TableName] = TableName.POSTS_TAGS

    post_id: str
    tag_id: str
    sort_order: int = 0


@dataclass(eq=False, kw_only=True)
class Subscriber(Entity, Audited):
    TABLE: ClassVar[TableName] = TableName.SUBSCRIBERS

    email: str
    name: str | None = None
    status: SubscriberStatus = SubscriberStatus.SUBSCRIBED
    post_id: str | None = None
    subscribed_url: str | None = None
    subscribed_referrer: str | None = None
    unsubscribed_url: str | None = None
    unsubscribed_at: datetime | None = None


type DestinationEntity = Role | User | RoleUser | Setting | Tag | Post | PostTag | Subscriber
