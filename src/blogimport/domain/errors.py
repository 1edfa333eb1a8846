"""Exceptions raised by the import engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from blogimport.domain.diagnostics import ValidationError


class BlogImportError(RuntimeError):
    """Base class for import engine failures."""


class ImportRejected(BlogImportError):
    """Raised when validation fails; carries every collected ``ValidationError``."""

    def __init__(self, errors: Iterable[ValidationError]) -> None:
        self.errors = tuple(errors)
        summary = "; ".join(error.message for error in self.errors[:3])
        if len(self.errors) > 3:
            summary += f" (+{len(self.errors) - 3} more)"
        super().__init__(f"Import rejected with {len(self.errors)} validation error(s): {summary}")


class SnapshotFormatError(ImportRejected):
    """Raised when a snapshot payload does not have the expected structure."""


class ImportAbortedError(BlogImportError):
    """Raised when the destination cannot receive an import at all."""


class DuplicateEntryError(BlogImportError):
    """Raised by repositories when an insert collides with a unique destination key."""

    def __init__(self, table: str, column: str, value: object) -> None:
        self.table = table
        self.column = column
        self.value = value
        super().__init__(f"Duplicate entry for {table}.{column}: {value!r}")


class ReferenceConflictError(ValueError):
    """Raised when a resolver entry would be overwritten with a different id."""

    def __init__(self, table: str, local_id: str, existing: str, attempted: str) -> None:
        self.table = table
        self.local_id = local_id
        super().__init__(
            f"Reference {table}:{local_id} already points at {existing}, refusing {attempted}"
        )


class PipelineOrderError(ValueError):
    """Raised when a stage requires references that no earlier stage provides."""
