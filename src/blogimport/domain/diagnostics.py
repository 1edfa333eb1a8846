"""Fatal and non-fatal findings collected during one import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

DUPLICATE_ENTRY_MESSAGE = "Entry was not imported and ignored. Detected duplicated entry."
UNRESOLVED_USER_REFERENCE_MESSAGE = (
    "Entry was imported, but we were not able to update user reference field: {field}"
)


@dataclass(frozen=True, slots=True)
class Problem:
    """Non-fatal anomaly: the entry was skipped or repaired and the import went on.

    ``help`` names the entity type the problem belongs to (``"Tag"``, ``"Post"``...).
    """

    message: str
    help: str
    context: Mapping[str, object] | None = None


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Fatal field-level violation. Any of these rolls the whole import back."""

    message: str
    table: str
    column: str | None = None
    error_type: Literal["ValidationError"] = "ValidationError"


@dataclass(slots=True)
class Diagnostics:
    """Accumulator passed through every stage of a run."""

    problems: list[Problem] = field(default_factory=list[Problem])
    errors: list[ValidationError] = field(default_factory=list[ValidationError])

    def problem(
        self,
        message: str,
        *,
        help: str,  # noqa: A002
        context: Mapping[str, object] | None = None,
    ) -> Problem:
        recorded = Problem(message=message, help=help, context=context)
        self.problems.append(recorded)
        return recorded

    def duplicate(self, *, help: str, context: Mapping[str, object] | None = None) -> Problem:  # noqa: A002
        return self.problem(DUPLICATE_ENTRY_MESSAGE, help=help, context=context)

    def unresolved_user_reference(
        self,
        field_name: str,
        *,
        help: str,  # noqa: A002
        context: Mapping[str, object] | None = None,
    ) -> Problem:
        return self.problem(
            UNRESOLVED_USER_REFERENCE_MESSAGE.format(field=field_name),
            help=help,
            context=context,
        )

    def extend_problems(self, problems: Iterable[Problem]) -> None:
        self.problems.extend(problems)

    def extend_errors(self, errors: Iterable[ValidationError]) -> None:
        self.errors.extend(errors)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
