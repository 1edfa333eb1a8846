"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class TableName(StrEnum):
    """Snapshot table names, also used as the resolver's entity-type discriminator."""

    SETTINGS = "settings"
    ROLES = "roles"
    USERS = "users"
    TAGS = "tags"
    POSTS = "posts"
    SUBSCRIBERS = "subscribers"
    POSTS_TAGS = "posts_tags"
    ROLES_USERS = "roles_users"


class RoleName(StrEnum):
    OWNER = "Owner"
    ADMINISTRATOR = "Administrator"
    EDITOR = "Editor"
    AUTHOR = "Author"
    CONTRIBUTOR = "Contributor"


class UserStatus(StrEnum):
    ACTIVE = "active"
    LOCKED = "locked"
    INACTIVE = "inactive"


class PostStatus(StrEnum):
    PUBLISHED = "published"
    DRAFT = "draft"
    SCHEDULED = "scheduled"


class SubscriberStatus(StrEnum):
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"
