"""Shared state handed to every stage of an import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from blogimport.config.importer import ImportConfig
from blogimport.domain.diagnostics import Diagnostics
from blogimport.domain.importer.references import ReferenceResolver

if TYPE_CHECKING:
    from datetime import datetime

    from blogimport.domain.ports import ImportRepositories


@dataclass(frozen=True, slots=True)
class ImportContext:
    """Who runs the import and when it started. Fixed for the whole run."""

    acting_user_id: str
    started_at: datetime


@dataclass(slots=True)
class StageContext:
    """Mutable context shared across stages within one unit of work."""

    run: ImportContext
    repositories: ImportRepositories
    resolver: ReferenceResolver = field(default_factory=ReferenceResolver)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    config: ImportConfig = field(default_factory=ImportConfig)
    # destination id -> snapshot id of users inserted (not merged) during this run
    created_users: dict[str, str | None] = field(default_factory=dict[str, str | None])

    @property
    def acting_user_id(self) -> str:
        return self.run.acting_user_id

    @property
    def started_at(self) -> datetime:
        return self.run.started_at
