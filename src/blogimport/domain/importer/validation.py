"""Field-level validation of snapshot records against destination constraints.

Rules run against the raw record mappings. A column default is applied only
when the column is absent from the record; an explicit ``null`` is validated as
given.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, Protocol

from blogimport.domain.diagnostics import ValidationError
from blogimport.domain.importer.normalize import is_blank, is_boolean_like
from blogimport.domain.model import PostStatus, SubscriberStatus, TableName, as_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from blogimport.domain.model import Snapshot


class Rule(Protocol):
    def check(self, value: object, *, table: str, column: str) -> ValidationError | None: ...


@dataclass(frozen=True, slots=True)
class Required:
    def check(self, value: object, *, table: str, column: str) -> ValidationError | None:
        if is_blank(value):
            return _error(f"Value in [{table}.{column}] cannot be blank.", table, column)
        return None


@dataclass(frozen=True, slots=True)
class MaxLength:
    limit: int

    def check(self, value: object, *, table: str, column: str) -> ValidationError | None:
        text = as_text(value) if _is_string(value) or _is_number(value) else None
        if text is not None and len(text) > self.limit:
            return _error(
                f"Value in [{table}.{column}] exceeds maximum length of {self.limit} characters.",
                table,
                column,
            )
        return None


def _is_string(value: object) -> bool:
    return isinstance(value, str)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


_TYPE_CHECKS: Final[Mapping[str, Callable[[object], bool]]] = MappingProxyType(
    {"string": _is_string, "number": _is_number, "boolean": is_boolean_like}
)


@dataclass(frozen=True, slots=True)
class OfType:
    kind: str

    def __post_init__(self) -> None:
        if self.kind not in _TYPE_CHECKS:
            raise ValueError(f"Unsupported type rule: {self.kind}")

    def check(self, value: object, *, table: str, column: str) -> ValidationError | None:
        if value is None or _TYPE_CHECKS[self.kind](value):
            return None
        return _error(f"Value in [{table}.{column}] must be a {self.kind}.", table, column)


@dataclass(frozen=True, slots=True)
class IsIn:
    allowed: tuple[str, ...]

    def check(self, value: object, *, table: str, column: str) -> ValidationError | None:
        if value is None or value in self.allowed:
            return None
        return _error(
            f"Value in [{table}.{column}] must be one of: {', '.join(self.allowed)}.",
            table,
            column,
        )


_MISSING: Final = object()


@dataclass(frozen=True, slots=True)
class ColumnRules:
    column: str
    rules: tuple[Rule, ...]
    default: object = field(default=_MISSING)

    def value_in(self, record: Mapping[str, object]) -> object:
        if self.column in record:
            return record[self.column]
        return None if self.default is _MISSING else self.default


_POST_STATUSES = tuple(status.value for status in PostStatus)
_SUBSCRIBER_STATUSES = tuple(status.value for status in SubscriberStatus)

TABLE_RULES: Final[Mapping[TableName, tuple[ColumnRules, ...]]] = MappingProxyType(
    {
        TableName.SETTINGS: (ColumnRules("key", (Required(), MaxLength(50))),),
        TableName.TAGS: (
            ColumnRules("name", (Required(), MaxLength(191))),
            ColumnRules("slug", (MaxLength(191),)),
        ),
        TableName.USERS: (
            ColumnRules("name", (Required(), MaxLength(191))),
            ColumnRules("email", (Required(), MaxLength(191))),
            ColumnRules("slug", (MaxLength(191),)),
        ),
        TableName.POSTS: (
            ColumnRules("title", (Required(), MaxLength(2000))),
            ColumnRules("slug", (MaxLength(191),)),
            ColumnRules("status", (Required(), IsIn(_POST_STATUSES)), default="draft"),
            ColumnRules("language", (Required(), MaxLength(6)), default="en_US"),
            ColumnRules("featured", (OfType("boolean"),)),
        ),
        TableName.SUBSCRIBERS: (
            ColumnRules("email", (Required(), MaxLength(191))),
            ColumnRules("status", (IsIn(_SUBSCRIBER_STATUSES),)),
        ),
        TableName.POSTS_TAGS: (
            ColumnRules("post_id", (Required(),)),
            ColumnRules("tag_id", (Required(),)),
        ),
        TableName.ROLES_USERS: (
            ColumnRules("role_id", (Required(),)),
            ColumnRules("user_id", (Required(),)),
        ),
    }
)

# settings are reported after the content tables
VALIDATION_ORDER: Final[tuple[TableName, ...]] = (
    TableName.TAGS,
    TableName.USERS,
    TableName.POSTS,
    TableName.SUBSCRIBERS,
    TableName.POSTS_TAGS,
    TableName.ROLES_USERS,
    TableName.SETTINGS,
)


def validate_record(table: TableName, record: Mapping[str, object]) -> tuple[ValidationError, ...]:
    """Return every rule violation of ``record``; tables without rules always pass."""

    errors: list[ValidationError] = []
    for column_rules in TABLE_RULES.get(table, ()):
        value = column_rules.value_in(record)
        for rule in column_rules.rules:
            error = rule.check(value, table=table.value, column=column_rules.column)
            if error is not None:
                errors.append(error)
    return tuple(errors)


def validate_snapshot(
    snapshot: Snapshot, *, tables: Iterable[TableName] = VALIDATION_ORDER
) -> tuple[ValidationError, ...]:
    errors: list[ValidationError] = []
    for table in tables:
        for record in snapshot.table(table):
            errors.extend(validate_record(table, record))
    return tuple(errors)


def _error(message: str, table: str, column: str) -> ValidationError:
    return ValidationError(message=message, table=table, column=column)
