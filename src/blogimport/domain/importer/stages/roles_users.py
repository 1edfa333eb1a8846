"""Assign roles to users created during this run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from blogimport.domain.model import RoleUser, TableName

from .base import StageResult, demote_owner, first_role_by_user, problems_since, require_role

if TYPE_CHECKING:
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import Role, Snapshot

log = logging.getLogger(__name__)


class RolesUsersStage:
    """The first exported role of a new user wins; merged users keep their roles."""

    table: TableName = TableName.ROLES_USERS
    requires: tuple[TableName, ...] = (TableName.USERS, TableName.ROLES)

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        start = len(context.diagnostics.problems)
        fallback = require_role(context, context.config.default_role)
        role_choices = first_role_by_user(snapshot)
        persisted: list[RoleUser] = []

        for user_id, local_id in context.created_users.items():
            role = fallback
            local_role_id = role_choices.get(local_id) if local_id is not None else None
            if local_role_id is not None:
                role = self._resolve_role(local_role_id, fallback, context)
            link = RoleUser(role_id=demote_owner(context, role).id, user_id=user_id)
            context.repositories.roles_users.add(link)
            persisted.append(link)

        log.info("Assigned roles to %d new users", len(persisted))
        return StageResult(persisted=tuple(persisted), problems=problems_since(context, start))

    def _resolve_role(self, local_role_id: str, fallback: Role, context: StageContext) -> Role:
        role_id = context.resolver.resolve(TableName.ROLES, local_role_id)
        role = context.repositories.roles.get(role_id) if role_id is not None else None
        if role is None:
            context.diagnostics.problem(
                f"Role could not be matched, falling back to {fallback.name}.",
                help="Role",
                context={"id": local_role_id},
            )
            return fallback
        return role
