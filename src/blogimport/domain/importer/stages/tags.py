"""Import tags, reusing destination tags that already own a slug."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from blogimport.domain.errors import DuplicateEntryError
from blogimport.domain.importer.normalize import normalize_slug
from blogimport.domain.model import TableName, Tag, TagRecord, parse_records

from .base import StageResult, problems_since, timestamp_or

if TYPE_CHECKING:
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import Snapshot

log = logging.getLogger(__name__)

UNRESOLVED_PARENT_MESSAGE = "Entry was imported, but we were not able to update parent tag reference."


class TagsStage:
    table: TableName = TableName.TAGS
    requires: tuple[TableName, ...] = (TableName.USERS,)

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        start = len(context.diagnostics.problems)
        tags = context.repositories.tags
        persisted: list[Tag] = []

        for record in parse_records(TagRecord, snapshot.table(self.table)):
            name = (record.name or "").strip()
            slug = normalize_slug(record.slug) or normalize_slug(name) or "tag"
            problem_context = {"id": record.local_id, "slug": slug}

            existing = tags.get_by_slug(slug)
            if existing is not None:
                self._skip_duplicate(record, existing.id, problem_context, context)
                continue

            tag = Tag(
                name=name,
                slug=slug,
                description=record.description,
                feature_image=record.feature_image,
                parent_id=self._parent_id(record, problem_context, context),
                visibility=record.visibility or "public",
                meta_title=record.meta_title,
                meta_description=record.meta_description,
                created_at=timestamp_or(record.created_at, context.started_at),
                created_by=self._created_by(record, problem_context, context),
                updated_at=timestamp_or(record.updated_at, context.started_at),
                updated_by=context.acting_user_id,
            )
            try:
                tags.add(tag)
            except DuplicateEntryError:
                found = tags.get_by_slug(slug)
                if found is None:
                    raise
                self._skip_duplicate(record, found.id, problem_context, context)
                continue
            context.resolver.record(self.table, record.local_id, tag.id)
            persisted.append(tag)

        log.info("Imported %d tags", len(persisted))
        return StageResult(persisted=tuple(persisted), problems=problems_since(context, start))

    def _skip_duplicate(
        self,
        record: TagRecord,
        existing_id: str,
        problem_context: dict[str, object],
        context: StageContext,
    ) -> None:
        log.debug("Tag %s already exists, linking to %s", problem_context["slug"], existing_id)
        context.diagnostics.duplicate(help="Tag", context=problem_context)
        context.resolver.record(self.table, record.local_id, existing_id)

    def _created_by(
        self, record: TagRecord, problem_context: dict[str, object], context: StageContext
    ) -> str | None:
        if record.created_by is None:
            return context.acting_user_id
        resolved = context.resolver.resolve(TableName.USERS, record.created_by)
        if resolved is None:
            context.diagnostics.unresolved_user_reference(
                "created_by", help="Tag", context=problem_context
            )
        return resolved

    def _parent_id(
        self, record: TagRecord, problem_context: dict[str, object], context: StageContext
    ) -> str | None:
        if record.parent_id is None:
            return None
        resolved = context.resolver.resolve(self.table, record.parent_id)
        if resolved is None:
            context.diagnostics.problem(
                UNRESOLVED_PARENT_MESSAGE, help="Tag", context=problem_context
            )
        return resolved
