"""Map snapshot roles onto the destination's fixed role set."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from blogimport.domain.model import RoleRecord, TableName, parse_records

from .base import StageResult, problems_since, require_role

if TYPE_CHECKING:
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import Snapshot

log = logging.getLogger(__name__)


class RolesStage:
    """Resolves snapshot role ids by role name. Roles are never inserted."""

    table: TableName = TableName.ROLES
    requires: tuple[TableName, ...] = ()

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        start = len(context.diagnostics.problems)
        fallback = require_role(context, context.config.default_role)
        roles = context.repositories.roles

        for record in parse_records(RoleRecord, snapshot.table(self.table)):
            role = roles.get_by_name(record.name.strip()) if record.name else None
            if role is None:
                log.debug("Unknown role %r, using %s", record.name, fallback.name)
                context.diagnostics.problem(
                    f"Role could not be matched, falling back to {fallback.name}.",
                    help="Role",
                    context={"id": record.local_id, "name": record.name},
                )
                role = fallback
            context.resolver.record(self.table, record.local_id, role.id)

        return StageResult(problems=problems_since(context, start))
