"""Link imported posts to their tags."""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from blogimport.domain.importer.normalize import parse_int
from blogimport.domain.model import PostTag, PostTagRecord, TableName, parse_records

from .base import StageResult, problems_since

if TYPE_CHECKING:
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import Snapshot

log = logging.getLogger(__name__)

UNRESOLVED_LINK_MESSAGE = "Entry was not imported: could not resolve {field}."


class PostsTagsStage:
    """Without an explicit ``sort_order`` a link keeps its position in the export."""

    table: TableName = TableName.POSTS_TAGS
    requires: tuple[TableName, ...] = (TableName.POSTS, TableName.TAGS)

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        start = len(context.diagnostics.problems)
        positions: Counter[str | None] = Counter()
        linked: set[tuple[str, str]] = set()
        persisted: list[PostTag] = []

        for record in parse_records(PostTagRecord, snapshot.table(self.table)):
            position = positions[record.post_id]
            positions[record.post_id] += 1

            if context.resolver.was_skipped(TableName.POSTS, record.post_id):
                continue
            post_id = context.resolver.resolve(TableName.POSTS, record.post_id)
            tag_id = context.resolver.resolve(TableName.TAGS, record.tag_id)
            missing = "post_id" if post_id is None else "tag_id" if tag_id is None else None
            if post_id is None or tag_id is None:
                context.diagnostics.problem(
                    UNRESOLVED_LINK_MESSAGE.format(field=missing),
                    help="PostTag",
                    context={"post_id": record.post_id, "tag_id": record.tag_id},
                )
                continue
            if (post_id, tag_id) in linked:
                continue
            linked.add((post_id, tag_id))

            sort_order = parse_int(record.sort_order)
            link = PostTag(
                post_id=post_id,
                tag_id=tag_id,
                sort_order=position if sort_order is None else sort_order,
            )
            context.repositories.posts_tags.add(link)
            persisted.append(link)

        log.info("Linked %d post tags", len(persisted))
        return StageResult(persisted=tuple(persisted), problems=problems_since(context, start))
