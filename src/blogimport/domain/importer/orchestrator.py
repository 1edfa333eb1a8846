"""Phase-based orchestrator for an import run."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from blogimport.config.importer import ImportConfig
from blogimport.domain.diagnostics import Diagnostics
from blogimport.domain.errors import ImportAbortedError, ImportRejected, PipelineOrderError
from blogimport.domain.importer.context import ImportContext, StageContext
from blogimport.domain.importer.sanitizer import Sanitizer
from blogimport.domain.importer.stages import default_stages
from blogimport.domain.importer.validation import validate_snapshot

if TYPE_CHECKING:
    from blogimport.domain.diagnostics import Problem
    from blogimport.domain.importer.stages import ImportStage
    from blogimport.domain.model import DestinationEntity, Snapshot, TableName
    from blogimport.domain.ports import ImportRepositories, ImportUnitOfWork

log = logging.getLogger(__name__)


class ImportPhase(StrEnum):
    IDLE = "idle"
    SANITIZING = "sanitizing"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of a committed run.

    ``original_data`` is the sanitized snapshot that was imported; ``problems``
    lists every non-fatal finding, sanitizer problems first.
    """

    data: Mapping[TableName, tuple[DestinationEntity, ...]]
    original_data: Snapshot
    problems: tuple[Problem, ...] = ()

    def count(self, table: TableName) -> int:
        return len(self.data.get(table, ()))


def check_stage_order(stages: Sequence[ImportStage]) -> None:
    """Raise ``PipelineOrderError`` when a stage runs before what it requires."""

    provided: set[TableName] = set()
    for stage in stages:
        missing = [table for table in stage.requires if table not in provided]
        if missing:
            raise PipelineOrderError(
                f"Stage {stage.table} requires {', '.join(missing)} to run first"
            )
        provided.add(stage.table)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class ImportOrchestrator:
    """Sanitize, validate, then persist every stage inside one unit of work.

    Validation errors reject the snapshot before a unit of work is opened. Any
    failure while persisting rolls the unit of work back and is re-raised.
    """

    unit_of_work_factory: Callable[[], ImportUnitOfWork]
    stages: Sequence[ImportStage] = field(default_factory=default_stages)
    config: ImportConfig = field(default_factory=ImportConfig)
    sanitizer: Sanitizer = field(default_factory=Sanitizer)
    clock: Callable[[], datetime] = _utcnow
    phase: ImportPhase = ImportPhase.IDLE

    def __post_init__(self) -> None:
        check_stage_order(self.stages)

    def run(self, snapshot: Snapshot, *, acting_user_id: str | None = None) -> ImportResult:
        self._enter(ImportPhase.IDLE)
        self._enter(ImportPhase.SANITIZING)
        sanitized = self.sanitizer.sanitize(snapshot)
        diagnostics = Diagnostics()
        diagnostics.extend_problems(sanitized.problems)

        self._enter(ImportPhase.VALIDATING)
        errors = validate_snapshot(sanitized.snapshot)
        if errors:
            self._enter(ImportPhase.ROLLED_BACK)
            raise ImportRejected(errors)

        self._enter(ImportPhase.PERSISTING)
        persisted: dict[TableName, tuple[DestinationEntity, ...]] = {}
        try:
            with self.unit_of_work_factory() as uow:
                context = StageContext(
                    run=self._import_context(uow.repositories, acting_user_id),
                    repositories=uow.repositories,
                    diagnostics=diagnostics,
                    config=self.config,
                )
                for stage in self.stages:
                    result = stage.run(sanitized.snapshot, context=context)
                    persisted[stage.table] = result.persisted
                    log.debug(
                        "Stage %s persisted %d rows with %d problems",
                        stage.table,
                        len(result.persisted),
                        len(result.problems),
                    )
                    if diagnostics.has_errors:
                        raise ImportRejected(diagnostics.errors)
                uow.commit()
        except BaseException:
            self._enter(ImportPhase.ROLLED_BACK)
            raise

        self._enter(ImportPhase.COMMITTED)
        log.info("Import committed with %d problems", len(diagnostics.problems))
        return ImportResult(
            data=MappingProxyType(persisted),
            original_data=sanitized.snapshot,
            problems=tuple(diagnostics.problems),
        )

    def _import_context(
        self, repositories: ImportRepositories, acting_user_id: str | None
    ) -> ImportContext:
        # imported owners are always demoted, so the destination must bring its own
        owner = repositories.users.find_owner()
        if owner is None:
            raise ImportAbortedError("Destination has no owner to keep the Owner role")
        if acting_user_id is None:
            acting_user_id = owner.id
        elif repositories.users.get(acting_user_id) is None:
            raise ImportAbortedError(f"Acting user {acting_user_id} does not exist")
        return ImportContext(acting_user_id=acting_user_id, started_at=self.clock())

    def _enter(self, phase: ImportPhase) -> None:
        if phase is not self.phase:
            log.debug("Import phase %s -> %s", self.phase, phase)
        self.phase = phase


def run_import(
    snapshot: Snapshot,
    *,
    unit_of_work_factory: Callable[[], ImportUnitOfWork],
    acting_user_id: str | None = None,
    config: ImportConfig | None = None,
) -> ImportResult:
    """Run the default stage pipeline for ``snapshot`` and return the result."""

    orchestrator = ImportOrchestrator(
        unit_of_work_factory=unit_of_work_factory,
        config=config or ImportConfig(),
    )
    return orchestrator.run(snapshot, acting_user_id=acting_user_id)
