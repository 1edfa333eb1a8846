"""Import users: merge onto existing accounts or insert locked new ones."""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

from blogimport.domain.importer.normalize import normalize_slug
from blogimport.domain.model import (
    RoleName,
    TableName,
    User,
    UserRecord,
    UserStatus,
    parse_records,
)

from .base import StageResult, first_role_by_user, problems_since, require_role

if TYPE_CHECKING:
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import Snapshot
    from blogimport.domain.ports import UserRepository

log = logging.getLogger(__name__)


def unusable_password() -> str:
    # never a valid hash, so the account cannot log in until a reset
    return f"!{secrets.token_hex(32)}"


def unique_user_slug(users: UserRepository, base: str, *, exclude_id: str | None = None) -> str:
    candidate = base
    suffix = 2
    while (found := users.get_by_slug(candidate)) is not None and found.id != exclude_id:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


class UsersStage:
    """Match snapshot users by email, fold the first exported owner into ours.

    Matched users only receive ``name`` and ``slug``. Everything else, including
    their roles, stays as the destination has it.
    """

    table: TableName = TableName.USERS
    requires: tuple[TableName, ...] = (TableName.ROLES,)

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult:
        start = len(context.diagnostics.problems)
        users = context.repositories.users
        owner_role = require_role(context, RoleName.OWNER)
        owner = users.find_owner()
        role_choices = first_role_by_user(snapshot)
        owner_claimed = False
        persisted: list[User] = []

        for record in parse_records(UserRecord, snapshot.table(self.table)):
            email = (record.email or "").strip()
            role_id = context.resolver.resolve(
                TableName.ROLES, role_choices.get(record.local_id or "")
            )
            claims_owner = role_id == owner_role.id

            existing = users.get_by_email(email)
            if existing is None and claims_owner and not owner_claimed:
                existing = owner
            if existing is not None:
                if claims_owner and existing is owner:
                    owner_claimed = True
                self._merge(existing, record, context)
                context.resolver.record(self.table, record.local_id, existing.id)
                persisted.append(existing)
                continue

            user = self._create(record, email, context)
            users.add(user)
            context.resolver.record(self.table, record.local_id, user.id)
            context.created_users[user.id] = record.local_id
            persisted.append(user)

        log.info(
            "Imported %d users (%d new)",
            len(persisted),
            len(context.created_users),
        )
        return StageResult(persisted=tuple(persisted), problems=problems_since(context, start))

    def _merge(self, user: User, record: UserRecord, context: StageContext) -> None:
        log.debug("Merging snapshot user %s onto %s", record.local_id, user.email)
        if record.name and record.name.strip():
            user.name = record.name.strip()
        slug = normalize_slug(record.slug)
        if slug is not None and slug != user.slug:
            user.slug = unique_user_slug(context.repositories.users, slug, exclude_id=user.id)
        user.updated_at = context.started_at
        user.updated_by = context.acting_user_id

    def _create(self, record: UserRecord, email: str, context: StageContext) -> User:
        name = (record.name or "").strip()
        base_slug = normalize_slug(record.slug) or normalize_slug(name) or "user"
        return User(
            name=name,
            slug=unique_user_slug(context.repositories.users, base_slug),
            email=email,
            password=unusable_password(),
            status=UserStatus.LOCKED,
            bio=record.bio,
            website=record.website,
            location=record.location,
            profile_image=record.profile_image,
            cover_image=record.cover_image,
            created_at=context.started_at,
            created_by=context.acting_user_id,
            updated_at=context.started_at,
            updated_by=context.acting_user_id,
        )
