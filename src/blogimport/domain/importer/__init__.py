"""Snapshot import engine.

A run sanitizes the snapshot, validates every record, and then persists the
entity stages in dependency order inside a single unit of work. Stages share a
``StageContext`` carrying the reference resolver and the run diagnostics.
"""

from __future__ import annotations

from .context import ImportContext, StageContext
from .orchestrator import (
    ImportOrchestrator,
    ImportPhase,
    ImportResult,
    check_stage_order,
    run_import,
)
from .references import ReferenceResolver
from .sanitizer import SanitizedSnapshot, Sanitizer
from .stages import ImportStage, StageResult, default_stages
from .validation import validate_record, validate_snapshot

__all__ = [
    "ImportContext",
    "ImportOrchestrator",
    "ImportPhase",
    "ImportResult",
    "ImportStage",
    "ReferenceResolver",
    "SanitizedSnapshot",
    "Sanitizer",
    "StageContext",
    "StageResult",
    "check_stage_order",
    "default_stages",
    "run_import",
    "validate_record",
    "validate_snapshot",
]
