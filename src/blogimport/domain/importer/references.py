"""Snapshot-local id to destination id mapping for one import run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from blogimport.domain.errors import ReferenceConflictError
from blogimport.domain.model import TableName, as_local_id

log = logging.getLogger(__name__)

type ReferenceKey = tuple[TableName, str]


@dataclass(slots=True)
class ReferenceResolver:
    """Registry filled by stages as they persist entities and read by later stages.

    Local ids are normalized with :func:`as_local_id`, so ``1`` and ``"1"`` refer to
    the same snapshot record. An entry is written at most once per run.
    """

    entries: dict[ReferenceKey, str] = field(default_factory=dict[ReferenceKey, str])
    skipped: set[ReferenceKey] = field(default_factory=set[ReferenceKey])

    def record(self, table: TableName, local_id: object, destination_id: str) -> None:
        key = _key(table, local_id)
        if key is None:
            return
        existing = self.entries.get(key)
        if existing is not None and existing != destination_id:
            raise ReferenceConflictError(table, key[1], existing, destination_id)
        self.entries[key] = destination_id

    def resolve(self, table: TableName, local_id: object) -> str | None:
        key = _key(table, local_id)
        if key is None:
            return None
        return self.entries.get(key)

    def skip(self, table: TableName, local_id: object) -> None:
        """Mark a record as deliberately not imported so dependants drop it quietly."""

        key = _key(table, local_id)
        if key is not None:
            log.debug("Marking %s:%s as skipped", table, key[1])
            self.skipped.add(key)

    def was_skipped(self, table: TableName, local_id: object) -> bool:
        key = _key(table, local_id)
        return key is not None and key in self.skipped

    def count(self, table: TableName) -> int:
        return sum(1 for entry_table, _ in self.entries if entry_table is table)


def _key(table: TableName, local_id: object) -> ReferenceKey | None:
    normalized = as_local_id(local_id)
    if normalized is None:
        return None
    return (table, normalized)
