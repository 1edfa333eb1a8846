"""Merge snapshot settings into existing destination settings."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from blogimport.domain.model import SettingRecord, TableName, parse_records

from .base import StageResult, problems_since

if TYPE_CHECKING:
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import Setting, Snapshot

log = logging.getLogger(__name__)


def setting_value(value: object) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


class SettingsStage:
    """Only keys the destination already knows are updated; protected keys never are."""

    table: TableName = TableName.SETTINGS
    requires: tuple[TableName, ...] = ()

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        start = len(context.diagnostics.problems)
        updated: list[Setting] = []

        for record in parse_records(SettingRecord, snapshot.table(self.table)):
            key = (record.key or "").strip()
            if context.config.is_protected(key):
                log.debug("Skipping protected setting %s", key)
                continue
            setting = context.repositories.settings.get_by_key(key)
            if setting is None:
                log.debug("Skipping unknown setting %s", key)
                continue
            setting.value = setting_value(record.value)
            setting.updated_at = context.started_at
            setting.updated_by = context.acting_user_id
            updated.append(setting)

        log.info("Updated %d settings", len(updated))
        return StageResult(persisted=tuple(updated), problems=problems_since(context, start))
