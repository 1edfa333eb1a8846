"""Intra-snapshot deduplication, run before validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from blogimport.domain.diagnostics import Diagnostics, Problem
from blogimport.domain.importer.normalize import is_valid_uuid, normalize_slug
from blogimport.domain.model import TableName, as_local_id

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from blogimport.domain.model import RawRecord, RawTable, Snapshot

log = logging.getLogger(__name__)

type IdentityKey = tuple[str, str]


@dataclass(frozen=True, slots=True)
class SanitizedSnapshot:
    """Result of a sanitizer pass.

    ``replacements`` maps a table to ``{removed local id: survivor raw id}``.
    """

    snapshot: Snapshot
    problems: tuple[Problem, ...] = ()
    replacements: Mapping[TableName, Mapping[str, object]] = field(
        default_factory=lambda: MappingProxyType({})
    )


def tag_identity(record: RawRecord) -> IdentityKey | None:
    slug = normalize_slug(record.get("slug")) or normalize_slug(record.get("name"))
    return ("slug", slug) if slug else None


def post_identity(record: RawRecord) -> IdentityKey | None:
    uuid = record.get("uuid")
    if is_valid_uuid(uuid):
        return ("uuid", str(uuid).strip().lower())
    slug = normalize_slug(record.get("slug")) or normalize_slug(record.get("title"))
    return ("slug", slug) if slug else None


@dataclass(slots=True)
class Sanitizer:
    """Drops repeated tags and posts, keeping the first occurrence of each.

    Join rows pointing at a dropped record are rewired to the survivor. The
    input snapshot is never modified.
    """

    def sanitize(self, snapshot: Snapshot) -> SanitizedSnapshot:
        diagnostics = Diagnostics()
        replaced_tables: dict[str, RawTable] = {}
        replacements: dict[TableName, Mapping[str, object]] = {}

        for table, identity, help_name in (
            (TableName.TAGS, tag_identity, "Tag"),
            (TableName.POSTS, post_identity, "Post"),
        ):
            if str(table) not in snapshot.data:
                continue
            survivors, replaced = _deduplicate(
                snapshot.table(table), identity, help_name, diagnostics
            )
            if len(survivors) != len(snapshot.table(table)):
                replaced_tables[table] = survivors
            if replaced:
                replacements[table] = MappingProxyType(replaced)

        if replacements and str(TableName.POSTS_TAGS) in snapshot.data:
            replaced_tables[TableName.POSTS_TAGS] = _rewire_links(
                snapshot.table(TableName.POSTS_TAGS), replacements
            )

        if diagnostics.problems:
            log.info("Sanitizer removed %d duplicated entries", len(diagnostics.problems))
        sanitized = snapshot.with_tables(replaced_tables) if replaced_tables else snapshot
        return SanitizedSnapshot(
            snapshot=sanitized,
            problems=tuple(diagnostics.problems),
            replacements=MappingProxyType(replacements),
        )


def _deduplicate(
    records: RawTable,
    identity: Callable[[RawRecord], IdentityKey | None],
    help_name: str,
    diagnostics: Diagnostics,
) -> tuple[RawTable, dict[str, object]]:
    key_index: dict[IdentityKey, RawRecord] = {}
    survivors: list[RawRecord] = []
    replaced: dict[str, object] = {}

    for record in records:
        key = identity(record)
        if key is None:
            survivors.append(record)
            continue
        primary = key_index.get(key)
        if primary is None:
            key_index[key] = record
            survivors.append(record)
            continue

        removed_id = as_local_id(record.get("id"))
        survivor_id = as_local_id(primary.get("id"))
        if removed_id is not None and survivor_id is not None and removed_id != survivor_id:
            replaced.setdefault(removed_id, primary.get("id"))
        diagnostics.duplicate(
            help=help_name,
            context={"id": record.get("id"), "duplicate_of": primary.get("id"), key[0]: key[1]},
        )
    return tuple(survivors), replaced


def _rewire_links(
    links: RawTable, replacements: Mapping[TableName, Mapping[str, object]]
) -> RawTable:
    tag_replacements = replacements.get(TableName.TAGS, {})
    post_replacements = replacements.get(TableName.POSTS, {})
    rewired: list[RawRecord] = []
    for link in links:
        changes: dict[str, object] = {}
        post_id = as_local_id(link.get("post_id"))
        tag_id = as_local_id(link.get("tag_id"))
        if post_id is not None and post_id in post_replacements:
            changes["post_id"] = post_replacements[post_id]
        if tag_id is not None and tag_id in tag_replacements:
            changes["tag_id"] = tag_replacements[tag_id]
        rewired.append({**link, **changes} if changes else link)
    return tuple(rewired)
