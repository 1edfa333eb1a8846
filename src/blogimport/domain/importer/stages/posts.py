"""Import posts, repairing uuids and rewriting user references."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import uuid4

from blogimport.domain.diagnostics import UNRESOLVED_USER_REFERENCE_MESSAGE, Problem
from blogimport.domain.errors import DuplicateEntryError
from blogimport.domain.importer.normalize import (
    is_valid_uuid,
    normalize_slug,
    parse_bool,
    parse_timestamp,
)
from blogimport.domain.model import Post, PostRecord, PostStatus, TableName, parse_records

from .base import StageResult, problems_since, timestamp_or

if TYPE_CHECKING:
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import Snapshot

log = logging.getLogger(__name__)

REPAIRED_UUID_MESSAGE = "Entry had an invalid uuid and was given a new one."


class PostsStage:
    """Insert posts; a slug already taken in the destination skips the post.

    ``author_id`` keeps its raw snapshot value when it cannot be resolved, the
    other user references fall back to ``None``. Both cases are reported.
    """

    table: TableName = TableName.POSTS
    requires: tuple[TableName, ...] = (TableName.USERS,)

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        start = len(context.diagnostics.problems)
        posts = context.repositories.posts
        persisted: list[Post] = []

        for record in parse_records(PostRecord, snapshot.table(self.table)):
            title = (record.title or "").strip()
            slug = normalize_slug(record.slug) or normalize_slug(title) or "post"
            problem_context: dict[str, object] = {"id": record.local_id, "slug": slug}
            # reported only once the post is actually stored
            pending: list[Problem] = []

            uuid = str(record.uuid).strip() if is_valid_uuid(record.uuid) else None
            if uuid is None:
                uuid = str(uuid4())
                log.debug("Repaired uuid %r of post %s", record.uuid, slug)
                pending.append(
                    _problem(REPAIRED_UUID_MESSAGE, {**problem_context, "uuid": record.uuid})
                )

            author_id = self._author_id(record, problem_context, pending, context)
            created_by = self._user_reference(
                "created_by",
                record.created_by,
                problem_context,
                pending,
                context,
                default=context.acting_user_id,
            )
            published_by = self._user_reference(
                "published_by", record.published_by, problem_context, pending, context
            )

            post = Post(
                uuid=uuid,
                title=title,
                slug=slug,
                mobiledoc=record.mobiledoc,
                html=record.html,
                plaintext=record.plaintext,
                feature_image=record.feature_image,
                featured=parse_bool(record.featured),
                page=parse_bool(record.page),
                status=PostStatus(record.status or PostStatus.DRAFT),
                language=record.language or "en_US",
                visibility=record.visibility or "public",
                meta_title=record.meta_title,
                meta_description=record.meta_description,
                custom_excerpt=record.custom_excerpt,
                author_id=author_id,
                created_at=timestamp_or(record.created_at, context.started_at),
                created_by=created_by,
                updated_at=timestamp_or(record.updated_at, context.started_at),
                updated_by=context.acting_user_id,
                published_at=parse_timestamp(record.published_at),
                published_by=published_by,
            )
            try:
                posts.add(post)
            except DuplicateEntryError:
                log.debug("Post %s already exists, skipping", slug)
                context.diagnostics.duplicate(help="Post", context=problem_context)
                context.resolver.skip(self.table, record.local_id)
                continue

            context.diagnostics.extend_problems(pending)
            context.resolver.record(self.table, record.local_id, post.id)
            persisted.append(post)

        log.info("Imported %d posts", len(persisted))
        return StageResult(persisted=tuple(persisted), problems=problems_since(context, start))

    def _author_id(
        self,
        record: PostRecord,
        problem_context: dict[str, object],
        pending: list[Problem],
        context: StageContext,
    ) -> str | None:
        if record.author_id is None:
            return context.acting_user_id
        resolved = context.resolver.resolve(TableName.USERS, record.author_id)
        if resolved is not None:
            return resolved
        pending.append(_unresolved("author_id", problem_context))
        return record.author_id

    def _user_reference(  # noqa: PLR0913
        self,
        field_name: str,
        local_id: str | None,
        problem_context: dict[str, object],
        pending: list[Problem],
        context: StageContext,
        *,
        default: str | None = None,
    ) -> str | None:
        if local_id is None:
            return default
        resolved = context.resolver.resolve(TableName.USERS, local_id)
        if resolved is None:
            pending.append(_unresolved(field_name, problem_context))
        return resolved


def _problem(message: str, problem_context: dict[str, object]) -> Problem:
    return Problem(message=message, help="Post", context=problem_context)


def _unresolved(field_name: str, problem_context: dict[str, object]) -> Problem:
    return _problem(UNRESOLVED_USER_REFERENCE_MESSAGE.format(field=field_name), problem_context)
