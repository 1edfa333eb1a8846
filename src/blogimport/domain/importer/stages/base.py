"""Stage contract and helpers shared by the entity importers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from blogimport.domain.errors import ImportAbortedError
from blogimport.domain.importer.normalize import parse_timestamp
from blogimport.domain.model import RoleName, RoleUserRecord, TableName, parse_records

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from blogimport.domain.diagnostics import Problem
    from blogimport.domain.importer.context import StageContext
    from blogimport.domain.model import DestinationEntity, Role, Snapshot


@dataclass(frozen=True, slots=True)
class StageResult:
    persisted: tuple[DestinationEntity, ...] = ()
    problems: tuple[Problem, ...] = ()


class ImportStage(Protocol):
    """Contract implemented by each entity importer.

    ``requires`` lists the tables whose resolver entries the stage reads; the
    orchestrator refuses a stage order that does not provide them first.
    """

    table: TableName
    requires: tuple[TableName, ...]

    def run(self, snapshot: Snapshot, *, context: StageContext) -> StageResult: ...


def problems_since(context: StageContext, start: int) -> tuple[Problem, ...]:
    return tuple(context.diagnostics.problems[start:])


def timestamp_or(value: object, fallback: datetime) -> datetime:
    return parse_timestamp(value) or fallback


def require_role(context: StageContext, name: str) -> Role:
    role = context.repositories.roles.get_by_name(name)
    if role is None:
        raise ImportAbortedError(f"Destination has no {name} role")
    return role


def first_role_by_user(snapshot: Snapshot) -> Mapping[str, str]:
    """Map snapshot user ids to the first snapshot role id listed for them."""

    decisions: dict[str, str] = {}
    for link in parse_records(RoleUserRecord, snapshot.table(TableName.ROLES_USERS)):
        if link.user_id is None or link.role_id is None:
            continue
        decisions.setdefault(link.user_id, link.role_id)
    return decisions


def demote_owner(context: StageContext, role: Role) -> Role:
    """Imported owners become administrators; a destination has exactly one owner."""

    if role.name == RoleName.OWNER:
        return require_role(context, RoleName.ADMINISTRATOR)
    return role
