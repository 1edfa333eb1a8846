"""Public domain model surface."""

from __future__ import annotations

from blogimport.domain.model.entities import (
    DestinationEntity,
    Entity,
    Post,
    PostTag,
    Role,
    RoleUser,
    Setting,
    Subscriber,
    Tag,
    User,
    new_id,
)
from blogimport.domain.model.enums import (
    PostStatus,
    RoleName,
    SubscriberStatus,
    TableName,
    UserStatus,
)
from blogimport.domain.model.records import (
    RECORD_TYPES,
    PostRecord,
    PostTagRecord,
    Record,
    RoleRecord,
    RoleUserRecord,
    SettingRecord,
    SnapshotRecord,
    SubscriberRecord,
    TagRecord,
    UserRecord,
    as_local_id,
    as_text,
    parse_records,
)
from blogimport.domain.model.snapshot import RawRecord, RawTable, Snapshot, SnapshotMeta

__all__ = [  # noqa: RUF022
    # entities
    "DestinationEntity",
    "Entity",
    "Post",
    "PostTag",
    "Role",
    "RoleUser",
    "Setting",
    "Subscriber",
    "Tag",
    "User",
    "new_id",
    # enums
    "PostStatus",
    "RoleName",
    "SubscriberStatus",
    "TableName",
    "UserStatus",
    # records
    "RECORD_TYPES",
    "PostRecord",
    "PostTagRecord",
    "Record",
    "RoleRecord",
    "RoleUserRecord",
    "SettingRecord",
    "SnapshotRecord",
    "SubscriberRecord",
    "TagRecord",
    "UserRecord",
    "as_local_id",
    "as_text",
    "parse_records",
    # snapshot
    "RawRecord",
    "RawTable",
    "Snapshot",
    "SnapshotMeta",
]
