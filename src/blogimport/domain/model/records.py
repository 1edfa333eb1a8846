"""Typed views over snapshot records, one variant per known table.

Validation runs against the raw mappings; importers consume these variants once a
snapshot passed validation. Columns a variant does not declare are kept in
``extras`` untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import TYPE_CHECKING, ClassVar, Self

from blogimport.domain.model.enums import TableName

if TYPE_CHECKING:
    from collections.abc import Mapping


def as_local_id(value: object) -> str | None:
    """Normalize a snapshot-local identifier so ``1`` and ``"1"`` compare equal."""

    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def as_text(value: object) -> str | None:
    """Render a scalar as text; exports may carry numbers in text columns."""

    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


_TEXT_ANNOTATION = "str | None"


@dataclass(frozen=True, slots=True, kw_only=True)
class SnapshotRecord:
    TABLE: ClassVar[TableName]
    REFERENCE_FIELDS: ClassVar[frozenset[str]] = frozenset()

    local_id: str | None = None
    extras: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_raw(cls, raw: Mapping[str, object]) -> Self:
        declared = {item.name for item in fields(cls)} - {"local_id", "extras"}
        text_columns = {item.name for item in fields(cls) if item.type == _TEXT_ANNOTATION}
        values: dict[str, object] = {}
        extras: dict[str, object] = {}
        for column, value in raw.items():
            if column == "id":
                continue
            if column in declared:
                if column in cls.REFERENCE_FIELDS:
                    values[column] = as_local_id(value)
                elif column in text_columns:
                    values[column] = as_text(value)
                else:
                    values[column] = value
            else:
                extras[column] = value
        return cls(local_id=as_local_id(raw.get("id")), extras=MappingProxyType(extras), **values)


@dataclass(frozen=True, slots=True, kw_only=True)
class SettingRecord(SnapshotRecord):
    TABLE: ClassVar[TableName] = TableName.SETTINGS

    key: str | None = None
    value: object = None
    type: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RoleRecord(SnapshotRecord):
    TABLE: ClassVar[TableName] = TableName.ROLES

    name: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class UserRecord(SnapshotRecord):
    TABLE: ClassVar[TableName] = TableName.USERS
    REFERENCE_FIELDS: ClassVar[frozenset[str]] = frozenset({"created_by", "updated_by"})

    name: str | None = None
    slug: str | None = None
    email: str | None = None
    password: str | None = None
    bio: str | None = None
    website: str | None = None
    location: str | None = None
    profile_image: str | None = None
    cover_image: str | None = None
    status: str | None = None
    created_by: str | None = None
    updated_by: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TagRecord(SnapshotRecord):
    TABLE: ClassVar[TableName] = TableName.TAGS
    REFERENCE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"parent_id", "created_by", "updated_by"}
    )

    name: str | None = None
    slug: str | None = None
    description: str | None = None
    feature_image: str | None = None
    parent_id: str | None = None
    visibility: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    created_at: object = None
    created_by: str | None = None
    updated_at: object = None
    updated_by: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PostRecord(SnapshotRecord):
    TABLE: ClassVar[TableName] = TableName.POSTS
    REFERENCE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"author_id", "created_by", "updated_by", "published_by"}
    )

    uuid: object = None
    title: str | None = None
    slug: str | None = None
    mobiledoc: str | None = None
    html: str | None = None
    plaintext: str | None = None
    feature_image: str | None = None
    featured: object = False
    page: object = False
    status: str | None = "draft"
    language: str | None = "en_US"
    visibility: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    custom_excerpt: str | None = None
    author_id: str | None = None
    created_at: object = None
    created_by: str | None = None
    updated_at: object = None
    updated_by: str | None = None
    published_at: object = None
    published_by: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SubscriberRecord(SnapshotRecord):
    TABLE: ClassVar[TableName] = TableName.SUBSCRIBERS
    REFERENCE_FIELDS: ClassVar[frozenset[str]] = frozenset({"post_id"})

    email: str | None = None
    name: str | None = None
    status: str | None = None
    post_id: str | None = None
    subscribed_url: str | None = None
    subscribed_referrer: str | None = None
    unsubscribed_url: str | None = None
    unsubscribed_at: object = None
    created_at: object = None
    updated_at: object = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PostTagRecord(SnapshotRecord):
    TABLE: ClassVar[TableName] = TableName.POSTS_TAGS
    REFERENCE_FIELDS: ClassVar[frozenset[str]] = frozenset({"post_id", "tag_id"})

    post_id: str | None = None
    tag_id: str | None = None
    sort_order: object = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RoleUserRecord(SnapshotRecord):
    TABLE: ClassVar[TableName] = TableName.ROLES_USERS
    REFERENCE_FIELDS: ClassVar[frozenset[str]] = frozenset({"role_id", "user_id"})

    role_id: str | None = None
    user_id: str | None = None


type Record = (
    SettingRecord
    | RoleRecord
    | UserRecord
    | TagRecord
    | PostRecord
    | SubscriberRecord
    | PostTagRecord
    | RoleUserRecord
)

RECORD_TYPES: Mapping[TableName, type[Record]] = MappingProxyType(
    {
        record_type.TABLE: record_type
        for record_type in (
            SettingRecord,
            RoleRecord,
            UserRecord,
            TagRecord,
            PostRecord,
            SubscriberRecord,
            PostTagRecord,
            RoleUserRecord,
        )
    }
)


def parse_records[TRecord: SnapshotRecord](
    record_type: type[TRecord], raw_records: tuple[Mapping[str, object], ...]
) -> tuple[TRecord, ...]:
    return tuple(record_type.from_raw(raw) for raw in raw_records)
