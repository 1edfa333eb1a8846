"""Import newsletter subscribers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from blogimport.domain.errors import DuplicateEntryError
from blogimport.domain.importer.normalize import parse_timestamp
from blogimport.domain.model import (
    Subscriber,
    SubscriberRecord,
    SubscriberStatus,
    TableName,
    parse_records,
)

from .base import StageResult, problems_since, timestamp_or

if TYPE_CHECKING:
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import Snapshot

log = logging.getLogger(__name__)

UNRESOLVED_POST_MESSAGE = "Entry was imported, but we were not able to update post reference field: post_id"


class SubscribersStage:
    table: TableName = TableName.SUBSCRIBERS
    requires: tuple[TableName, ...] = (TableName.POSTS,)

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        start = len(context.diagnostics.problems)
        persisted: list[Subscriber] = []

        for record in parse_records(SubscriberRecord, snapshot.table(self.table)):
            email = (record.email or "").strip()
            problem_context = {"id": record.local_id, "email": email}
            post_id = None
            if record.post_id is not None:
                post_id = context.resolver.resolve(TableName.POSTS, record.post_id)
                if post_id is None:
                    context.diagnostics.problem(
                        UNRESOLVED_POST_MESSAGE, help="Subscriber", context=problem_context
                    )

            subscriber = Subscriber(
                email=email,
                name=record.name,
                status=SubscriberStatus(record.status or SubscriberStatus.SUBSCRIBED),
                post_id=post_id,
                subscribed_url=record.subscribed_url,
                subscribed_referrer=record.subscribed_referrer,
                unsubscribed_url=record.unsubscribed_url,
                unsubscribed_at=parse_timestamp(record.unsubscribed_at),
                created_at=timestamp_or(record.created_at, context.started_at),
                created_by=context.acting_user_id,
                updated_at=timestamp_or(record.updated_at, context.started_at),
                updated_by=context.acting_user_id,
            )
            try:
                context.repositories.subscribers.add(subscriber)
            except DuplicateEntryError as exc:
                log.debug("Subscriber skipped: %s", exc)
                context.diagnostics.duplicate(help="Subscriber", context=problem_context)
                continue
            context.resolver.record(self.table, record.local_id, subscriber.id)
            persisted.append(subscriber)

        log.info("Imported %d subscribers", len(persisted))
        return StageResult(persisted=tuple(persisted), problems=problems_since(context, start))
